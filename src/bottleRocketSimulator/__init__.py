# Licensed under the PolyForm Noncommercial License 1.0.0
"""Bottle Rocket Simulator - A Python package for simulating the flight of a water rocket."""

from .models import (
    DEFAULT_CONSTANTS,
    FillRatioSample,
    FlightRegime,
    OptimizationResult,
    PhysicalConstants,
    SimulationParameters,
    SimulationResult,
    TrajectorySample,
)

from .integrators import integrate, rk4_step
from .core import BottleRocketSimulator, run_simulation
from .optimizer import compare_fill_ratios, fill_ratio_grid, find_optimal, refine_optimal
from .plotting import plot_comparison, plot_optimization, plot_results

__version__ = "0.1.0"
__all__ = [
    "BottleRocketSimulator",
    "run_simulation",
    "find_optimal",
    "refine_optimal",
    "compare_fill_ratios",
    "fill_ratio_grid",
    "rk4_step",
    "integrate",
    "plot_results",
    "plot_comparison",
    "plot_optimization",
    "PhysicalConstants",
    "DEFAULT_CONSTANTS",
    "SimulationParameters",
    "SimulationResult",
    "OptimizationResult",
    "TrajectorySample",
    "FillRatioSample",
    "FlightRegime",
]
