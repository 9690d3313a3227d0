# Licensed under the PolyForm Noncommercial License 1.0.0
"""Fill-ratio sweep for the altitude-maximizing launch configuration."""

from concurrent.futures import ProcessPoolExecutor
from typing import List, Optional, Sequence, Tuple
import numpy as np
from scipy import optimize

from .core import BottleRocketSimulator, run_simulation
from .models import (
    DEFAULT_CONSTANTS,
    FillRatioSample,
    OptimizationResult,
    PhysicalConstants,
    SimulationParameters,
    SimulationResult,
)

GRID_START = 0.05
GRID_STOP = 0.95
GRID_STEP = 0.02

COMPARE_RATIOS = (0.25, 0.33, 0.5, 0.67)


def fill_ratio_grid(start: float = GRID_START, stop: float = GRID_STOP,
                    step: float = GRID_STEP) -> np.ndarray:
    """
    Return the evenly spaced fill ratios from start to stop, both included.

    The bound carries half a step of slack so accumulated rounding cannot drop
    the endpoint, and the values are rounded so they compare equal to their
    decimal spelling (0.95, not 0.9500000000000001).
    """
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}")
    if not 0 < start <= stop < 1:
        raise ValueError(f"grid must lie inside (0, 1), got [{start}, {stop}]")

    return np.round(np.arange(start, stop + step / 2, step), 12)


def _max_altitude(args: Tuple[float, float, float, PhysicalConstants]) -> float:
    fill_ratio, drag_coefficient, pressure_psi, constants = args
    return run_simulation(fill_ratio, drag_coefficient, pressure_psi, constants).max_altitude


def find_optimal(drag_coefficient: float, pressure_psi: float,
                 constants: PhysicalConstants = DEFAULT_CONSTANTS,
                 grid: Optional[Sequence[float]] = None,
                 max_workers: Optional[int] = None,
                 verbose: bool = False) -> OptimizationResult:
    """
    Sweep the fill ratio and find the one giving the highest apogee.

    Args:
        drag_coefficient: Drag coefficient of the rocket
        pressure_psi: Gauge launch pressure (PSI)
        constants: Physical constants and bottle geometry
        grid: Fill ratios to evaluate, defaults to 0.05 to 0.95 by 0.02
        max_workers: If given, run the simulations in that many processes
        verbose: Print each grid point as it is reduced

    Returns:
        OptimizationResult with the best point and the full response curve
    """
    ratios = fill_ratio_grid() if grid is None else [float(r) for r in grid]
    if len(ratios) == 0:
        raise ValueError("grid must contain at least one fill ratio")

    # reject bad inputs before any simulation runs
    for r in ratios:
        SimulationParameters(r, drag_coefficient, pressure_psi, constants)

    args_list = [(float(r), drag_coefficient, pressure_psi, constants) for r in ratios]

    if max_workers is None or max_workers <= 1:
        altitudes = [_max_altitude(args) for args in args_list]
    else:
        # map keeps grid order, so ties resolve the same way as the serial sweep
        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            altitudes = list(executor.map(_max_altitude, args_list))

    samples = []
    best_ratio, best_altitude = None, -np.inf
    for (ratio, *_), altitude in zip(args_list, altitudes):
        samples.append(FillRatioSample(ratio, altitude))
        if verbose:
            print(f"fill ratio {ratio:.2f}: {altitude:.2f} m")
        if altitude > best_altitude:
            best_ratio, best_altitude = ratio, altitude

    return OptimizationResult(best_ratio, best_altitude, tuple(samples))


def refine_optimal(drag_coefficient: float, pressure_psi: float, result: OptimizationResult,
                   constants: PhysicalConstants = DEFAULT_CONSTANTS,
                   xatol: float = 1e-4) -> Tuple[float, float]:
    """
    Refine the grid optimum with a bounded scalar search between its grid neighbours.

    Returns:
        (fill_ratio, max_altitude), never lower than the grid optimum
    """
    ratios = result.fill_ratios
    i = int(np.argmax(ratios == result.best_fill_ratio))
    lower = ratios[max(i - 1, 0)]
    upper = ratios[min(i + 1, len(ratios) - 1)]
    if lower == upper:
        return result.best_fill_ratio, result.best_max_altitude

    simulator = BottleRocketSimulator(constants)

    def negative_apogee(fill_ratio):
        return -simulator.simulate(fill_ratio, drag_coefficient, pressure_psi).max_altitude

    sol = optimize.minimize_scalar(negative_apogee, bounds=(lower, upper), method='bounded',
                                   options={'xatol': xatol})

    if sol.success and -sol.fun > result.best_max_altitude:
        return float(sol.x), float(-sol.fun)
    return result.best_fill_ratio, result.best_max_altitude


def compare_fill_ratios(drag_coefficient: float, pressure_psi: float,
                        ratios: Sequence[float] = COMPARE_RATIOS,
                        constants: PhysicalConstants = DEFAULT_CONSTANTS
                        ) -> List[Tuple[float, SimulationResult]]:
    """Simulate several fill ratios side by side, in the order given."""
    if len(ratios) == 0:
        raise ValueError("ratios must contain at least one fill ratio")

    simulator = BottleRocketSimulator(constants)
    return [(ratio, simulator.simulate(ratio, drag_coefficient, pressure_psi)) for ratio in ratios]
