# Licensed under the PolyForm Noncommercial License 1.0.0
"""Fixed-step Runge-Kutta integration for vector-valued ODEs."""

from typing import Any, Callable, Iterator, Optional, Tuple
import numpy as np

Derivative = Callable[[float, np.ndarray, Any], np.ndarray]


def _evaluate(f: Derivative, t: float, y: np.ndarray, params: Any) -> np.ndarray:
    dy = np.asarray(f(t, y, params), dtype=float)
    if dy.shape != y.shape:
        raise ValueError(f"derivative has shape {dy.shape}, state has shape {y.shape}")
    return dy


def rk4_step(f: Derivative, t: float, y: np.ndarray, dt: float, params: Any = None) -> np.ndarray:
    """
    Advance the state by one classical fourth-order Runge-Kutta step.

    Args:
        f: Derivative function f(t, y, params) returning dy/dt with the shape of y
        t: Current time
        y: Current state vector
        dt: Step size
        params: Passed through to f unchanged

    Returns:
        State vector at t + dt
    """
    y = np.asarray(y, dtype=float)

    k1 = _evaluate(f, t, y, params)
    k2 = _evaluate(f, t + dt / 2, y + dt / 2 * k1, params)
    k3 = _evaluate(f, t + dt / 2, y + dt / 2 * k2, params)
    k4 = _evaluate(f, t + dt, y + dt * k3, params)

    return y + dt / 6 * (k1 + 2 * k2 + 2 * k3 + k4)


def integrate(f: Derivative, t0: float, y0: np.ndarray, dt: float, params: Any = None,
              stop: Optional[Callable[[float, np.ndarray], bool]] = None,
              project: Optional[Callable[[np.ndarray, Any], np.ndarray]] = None
              ) -> Iterator[Tuple[float, np.ndarray]]:
    """
    Integrate with a fixed step, yielding (t, y) after every step.

    Time advances by accumulating dt. The stop predicate is checked on the
    current (t, y) before each step; without one the generator is unbounded.
    If given, project(y, params) maps each new state back onto its admissible
    set before it is yielded.
    """
    if dt <= 0:
        raise ValueError(f"dt must be positive, got {dt}")

    t = t0
    y = np.array(y0, dtype=float)

    while stop is None or not stop(t, y):
        y = rk4_step(f, t, y, dt, params)
        if project is not None:
            y = project(y, params)
        t += dt
        yield t, y.copy()
