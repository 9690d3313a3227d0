# Licensed under the PolyForm Noncommercial License 1.0.0
"""Plotting functions for bottle rocket simulation results."""

from typing import Optional, Sequence, Tuple
import numpy as np
import matplotlib.pyplot as plt

from .models import OptimizationResult, SimulationResult


def _finish(fig, show: bool, save_path: Optional[str]) -> None:
    fig.tight_layout()

    if save_path:
        fig.savefig(save_path, dpi=300, bbox_inches='tight')
    if show:
        plt.show()

    plt.close(fig)


def plot_results(result: SimulationResult, optimization: Optional[OptimizationResult] = None,
                 show: bool = True, save_path: Optional[str] = None) -> None:
    """
    Plot a single flight.

    Args:
        result: Simulation result to plot
        optimization: If provided, mark the optimal apogee and plot the fill-ratio response
        show: Whether to display the plot
        save_path: If provided, save the plot to this path
    """
    n_cols = 3 if optimization is not None else 2
    fig, axes = plt.subplots(1, n_cols, figsize=(6 * n_cols, 5))

    # 1. Altitude vs Time
    axes[0].plot(result.times, result.altitudes, color='tab:green', label="Trajectory")
    axes[0].plot(result.max_altitude_time, result.max_altitude, 'o', color='tab:blue',
                 label=f"Apogee {result.max_altitude:.1f} m")
    if result.burned_out:
        axes[0].plot(result.burnout_time, max(0.0, result.burnout_altitude), 'o', color='tab:red',
                     label=f"Burnout {result.burnout_time * 1000:.0f} ms")
    if optimization is not None:
        axes[0].axhline(optimization.best_max_altitude, color='tab:orange', ls='--',
                        label=f"Optimal {optimization.best_max_altitude:.1f} m")
    axes[0].set_title("Altitude vs Time")
    axes[0].set_xlabel("Time [s]")
    axes[0].set_ylabel("Altitude [m]")
    axes[0].legend()

    # 2. Velocity vs Time
    axes[1].plot(result.times, result.velocities, color='tab:cyan')
    axes[1].axhline(0.0, color='grey', lw=0.5)
    axes[1].set_title("Velocity vs Time")
    axes[1].set_xlabel("Time [s]")
    axes[1].set_ylabel("Velocity [m/s]")

    # 3. Apogee vs fill ratio
    if optimization is not None:
        _plot_response(axes[2], optimization, current=result)

    _finish(fig, show, save_path)


def _plot_response(ax, optimization: OptimizationResult,
                   current: Optional[SimulationResult] = None) -> None:
    ax.plot(optimization.fill_ratios * 100, optimization.max_altitudes, color='tab:purple')
    ax.plot(optimization.best_fill_ratio * 100, optimization.best_max_altitude, 'o',
            color='tab:orange', label=f"Optimal {optimization.best_fill_ratio * 100:.1f}%")
    if current is not None:
        ax.plot(current.parameters.fill_ratio * 100, current.max_altitude, 'o', color='tab:green',
                label=f"Current {current.parameters.fill_ratio * 100:.0f}%")
    ax.set_title("Apogee vs Fill Ratio")
    ax.set_xlabel("Fill ratio [%]")
    ax.set_ylabel("Apogee [m]")
    ax.legend()


def plot_optimization(optimization: OptimizationResult, show: bool = True,
                      save_path: Optional[str] = None) -> None:
    """Plot the apogee response over the fill-ratio sweep."""
    fig, ax = plt.subplots(figsize=(7, 5))
    _plot_response(ax, optimization)
    _finish(fig, show, save_path)


def plot_comparison(results: Sequence[Tuple[float, SimulationResult]], show: bool = True,
                    save_path: Optional[str] = None) -> None:
    """Overlay the trajectories of several fill ratios."""
    fig, ax = plt.subplots(figsize=(9, 5))

    colors = plt.cm.viridis(np.linspace(0, 1, len(results)))
    for (ratio, result), color in zip(results, colors):
        ax.plot(result.times, result.altitudes, color=color,
                label=f"{ratio * 100:.0f}% ({result.max_altitude:.1f} m)")

    ax.set_title("Altitude vs Time")
    ax.set_xlabel("Time [s]")
    ax.set_ylabel("Altitude [m]")
    ax.legend()

    _finish(fig, show, save_path)
