# tests/test_visualizer.py
import matplotlib
matplotlib.use("Agg")  # headless

import numpy as np
import pytest
from lib import visualizer
from lib.visualizer import plot_run


@pytest.fixture
def results_dir(tmp_path, monkeypatch):
    monkeypatch.setattr(visualizer, "_RESULTS_DIR", tmp_path / "results")
    return tmp_path / "results"


def test_plot_run_two_axes(results_dir):
    """One row per axis, five panels per row"""
    ts = np.linspace(0, 1, 50)
    states = np.random.default_rng(0).normal(size=(50, 8))
    controls = np.zeros((50, 2))

    fig = plot_run(ts, states, controls, axes=("x", "y"), save_path="run.png")
    assert len(fig.axes) == 10
    assert (results_dir / "run.png").exists()
    assert (results_dir / "run.png").stat().st_size > 0


def test_plot_run_single_axis(results_dir):
    ts = np.linspace(0, 1, 20)
    fig = plot_run(ts, np.zeros((20, 4)), np.zeros(20), axes=("x",))
    assert len(fig.axes) == 5
    assert fig.axes[1].get_title() == "Pole Angle [x]"
    assert not results_dir.exists()
