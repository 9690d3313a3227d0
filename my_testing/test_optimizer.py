"""Unit tests for the fill-ratio optimizer."""

import numpy as np
import pytest
from bottleRocketSimulator import (
    compare_fill_ratios,
    fill_ratio_grid,
    find_optimal,
    plot_comparison,
    plot_optimization,
    refine_optimal,
    run_simulation,
)
from bottleRocketSimulator.__main__ import main


@pytest.fixture(scope="module")
def optimal():
    return find_optimal(0.4, 60)


def test_default_grid_covers_endpoints():
    grid = fill_ratio_grid()

    assert len(grid) == 46
    assert grid[0] == 0.05
    assert grid[-1] == 0.95
    assert np.allclose(np.diff(grid), 0.02)


def test_grid_tolerates_step_accumulation():
    """A step that does not divide the range exactly in binary still reaches the endpoint."""
    grid = fill_ratio_grid(0.1, 0.7, 0.1)
    assert list(grid) == [0.1, 0.2, 0.3, 0.4, 0.5, 0.6, 0.7]


def test_invalid_grid_is_rejected():
    with pytest.raises(ValueError):
        fill_ratio_grid(0.0, 0.95, 0.02)
    with pytest.raises(ValueError):
        fill_ratio_grid(0.05, 0.95, 0.0)
    with pytest.raises(ValueError):
        find_optimal(0.4, 60, grid=[])


def test_optimal_covers_grid(optimal):
    ratios = optimal.fill_ratios

    assert len(optimal.samples) == 46
    assert 0.05 in ratios
    assert 0.95 in ratios
    assert np.all(np.diff(ratios) > 0)


def test_optimal_is_grid_maximum(optimal):
    altitudes = optimal.max_altitudes

    assert optimal.best_max_altitude == max(s.max_altitude for s in optimal.samples)
    # first maximum wins
    assert optimal.best_fill_ratio == optimal.fill_ratios[np.argmax(altitudes)]


def test_optimum_is_interior(optimal):
    """Too little water and too little air both lose altitude."""
    altitudes = optimal.max_altitudes

    assert 0.05 < optimal.best_fill_ratio < 0.95
    assert altitudes[0] < optimal.best_max_altitude
    assert altitudes[-1] < optimal.best_max_altitude


def test_samples_match_single_runs(optimal):
    """Each grid point is a full simulation at that fill ratio."""
    for ratio, altitude in optimal.samples[::15]:
        assert altitude == run_simulation(ratio, 0.4, 60).max_altitude


def test_lower_pressure_lowers_optimum(optimal):
    low = find_optimal(0.4, 20, grid=fill_ratio_grid(0.15, 0.55, 0.1))
    assert low.best_max_altitude < optimal.best_max_altitude


def test_parallel_sweep_matches_serial():
    grid = [0.2, 0.3, 0.4, 0.5]
    serial = find_optimal(0.4, 60, grid=grid)
    parallel = find_optimal(0.4, 60, grid=grid, max_workers=2)

    assert parallel == serial


def test_invalid_grid_points_are_rejected_before_sweeping():
    with pytest.raises(ValueError):
        find_optimal(0.4, 60, grid=[0.5, 1.2])
    with pytest.raises(ValueError):
        find_optimal(0.4, float("nan"), grid=[0.5])


def test_drag_free_sweep(optimal):
    """A zero drag coefficient sweeps like any other and raises the optimum."""
    vacuum = find_optimal(0.0, 60, grid=[optimal.best_fill_ratio])
    assert vacuum.best_max_altitude > optimal.best_max_altitude


def test_refine_optimal(optimal):
    ratio, altitude = refine_optimal(0.4, 60, optimal, xatol=1e-3)

    assert altitude >= optimal.best_max_altitude
    assert abs(ratio - optimal.best_fill_ratio) <= 0.02 + 1e-9
    assert np.isclose(run_simulation(ratio, 0.4, 60).max_altitude, altitude)


def test_compare_fill_ratios():
    results = compare_fill_ratios(0.4, 60)

    assert [ratio for ratio, _ in results] == [0.25, 0.33, 0.5, 0.67]
    for ratio, result in results:
        assert result.parameters.fill_ratio == ratio
        assert result.max_altitude > 0

    with pytest.raises(ValueError):
        compare_fill_ratios(0.4, 60, ratios=[])


def test_plots(optimal, tmp_path):
    plot_optimization(optimal, show=False, save_path=str(tmp_path / "response.png"))
    plot_comparison(compare_fill_ratios(0.4, 60, ratios=[0.3, 0.5]), show=False,
                    save_path=str(tmp_path / "compare.png"))

    assert (tmp_path / "response.png").exists()
    assert (tmp_path / "compare.png").exists()


def test_command_line(capsys, tmp_path):
    save_path = tmp_path / "cli.png"
    assert main(["--fill-ratio", "0.33", "--pressure", "60", "--save", str(save_path)]) == 0

    out = capsys.readouterr().out
    assert "Max altitude" in out
    assert "Optimal fill ratio" in out
    assert save_path.exists()
