"""Unit tests for the fixed-step RK4 integrator."""

import numpy as np
import pytest
from scipy.integrate import solve_ivp

from bottleRocketSimulator import integrate, rk4_step


def test_rk4_single_step_matches_taylor_series():
    """One RK4 step of y' = -y reproduces the 4th order Taylor polynomial."""
    h = 0.1
    y1 = rk4_step(lambda t, y, p: -y, 0.0, np.array([1.0]), h)

    expected = 1 - h + h ** 2 / 2 - h ** 3 / 6 + h ** 4 / 24
    assert np.isclose(y1[0], expected, rtol=0, atol=1e-14)


def test_rk4_exact_for_cubic_in_time():
    """For a purely time-dependent cubic, RK4 reduces to Simpson's rule and is exact."""
    y1 = rk4_step(lambda t, y, p: np.array([t ** 3]), 0.0, np.array([0.0]), 1.0)
    assert np.isclose(y1[0], 0.25)


def test_rk4_harmonic_oscillator_against_solve_ivp():
    """A 2-vector oscillator stays close to a tight DOP853 reference."""

    def oscillator(t, y, omega):
        return np.array([y[1], -omega ** 2 * y[0]])

    omega = 2.0
    y0 = np.array([1.0, 0.0])
    dt = 0.001
    n_steps = 2000

    t, y = 0.0, y0
    for _ in range(n_steps):
        y = rk4_step(oscillator, t, y, dt, omega)
        t += dt

    ref = solve_ivp(lambda t, y: oscillator(t, y, omega), (0.0, t), y0,
                    method='DOP853', rtol=1e-12, atol=1e-12)

    assert np.allclose(y, ref.y[:, -1], atol=1e-9)
    assert np.allclose(y, [np.cos(omega * t), -omega * np.sin(omega * t)], atol=1e-9)


def test_rk4_passes_params_through_unchanged():
    """The parameter bundle reaches every stage as the same object."""
    seen = []
    params = {"k": 3.0}

    def f(t, y, p):
        seen.append(p)
        return p["k"] * np.ones_like(y)

    y1 = rk4_step(f, 0.0, np.zeros(3), 0.5, params)

    assert len(seen) == 4
    assert all(p is params for p in seen)
    assert np.allclose(y1, 1.5)


def test_rk4_does_not_modify_input_state():
    y0 = np.array([1.0, 2.0])
    rk4_step(lambda t, y, p: y, 0.0, y0, 0.1)
    assert np.array_equal(y0, [1.0, 2.0])


def test_rk4_rejects_mismatched_derivative_length():
    with pytest.raises(ValueError):
        rk4_step(lambda t, y, p: np.zeros(3), 0.0, np.zeros(4), 0.1)


def test_integrate_yields_each_step_until_stop():
    """Time accumulates by dt and the stop predicate is checked before every step."""
    steps = list(integrate(lambda t, y, p: np.array([1.0]), 0.0, [0.0], 0.25,
                           stop=lambda t, y: t >= 1.0))

    times = [t for t, _ in steps]
    values = [y[0] for _, y in steps]

    assert times == [0.25, 0.5, 0.75, 1.0]
    assert np.allclose(values, times)


def test_integrate_applies_projection():
    """The projection is applied to every new state before it is yielded."""
    steps = integrate(lambda t, y, p: np.array([-1.0]), 0.0, [0.3], 0.1, 0.0,
                      stop=lambda t, y: t >= 0.5,
                      project=lambda y, params: np.maximum(y, params))

    values = [y[0] for _, y in steps]
    assert values[-1] == 0.0
    assert min(values) >= 0.0


def test_integrate_yields_independent_copies():
    states = [y for _, y in integrate(lambda t, y, p: np.ones(2), 0.0, np.zeros(2), 0.1,
                                      stop=lambda t, y: t >= 0.3)]
    states[0][0] = 100.0
    assert states[1][0] < 1.0


def test_integrate_rejects_non_positive_step():
    with pytest.raises(ValueError):
        list(integrate(lambda t, y, p: y, 0.0, [1.0], 0.0, stop=lambda t, y: True))
