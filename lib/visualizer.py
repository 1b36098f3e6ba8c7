"""Visualization utilities for platform-pendulum runs."""

from __future__ import annotations
import matplotlib.pyplot as plt
import numpy as np
from pathlib import Path
from typing import Optional, Sequence


_RESULTS_DIR = Path("results")


def _ensure_dir() -> Path:
    """Ensure results directory exists."""
    _RESULTS_DIR.mkdir(exist_ok=True)
    return _RESULTS_DIR


def _save_and_show_plot(fig: plt.Figure, save_path: Optional[str] = None,
                        show_plot: bool = False) -> plt.Figure:
    """Helper function to save and/or show plots consistently."""
    if save_path:
        try:
            fig.savefig(_ensure_dir() / save_path, dpi=150, bbox_inches="tight")
        except OSError as e:
            print(f"Failed to save plot to {save_path}: {e}")

    if show_plot:
        plt.show()

    return fig


def plot_run(
    ts: np.ndarray,
    states: np.ndarray,
    controls: np.ndarray,
    axes: Sequence[str] = ("x", "y"),
    title: str = "Platform Pendulum LQR Run",
    save_path: Optional[str] = None,
    show_plot: bool = False
) -> plt.Figure:
    """
    Plot a recorded run as a grid: one row per axis, one column per quantity.

    Args:
        ts: Time array (N,)
        states: State array (N, 4 * len(axes)) in grouped state order
        controls: Control array (N, len(axes))
        axes: Logical axis names
        title: Plot title
        save_path: File name inside results/ to save the figure
        show_plot: Whether to display the plot interactively

    Returns:
        matplotlib Figure object
    """
    ts = np.asarray(ts)
    states = np.asarray(states)
    controls = np.asarray(controls).reshape(len(ts), -1)
    n_axes = len(axes)

    fig, grid = plt.subplots(n_axes, 5, figsize=(18, 3.2 * n_axes), squeeze=False)
    fig.suptitle(title, fontsize=16)

    columns = [
        ("Platform Position", "pos [m]", lambda k: states[:, k]),
        ("Pole Angle", "angle [deg]", lambda k: np.degrees(states[:, n_axes + k])),
        ("Platform Velocity", "vel [m/s]", lambda k: states[:, 2 * n_axes + k]),
        ("Pole Angular Velocity", "angvel [rad/s]", lambda k: states[:, 3 * n_axes + k]),
        ("Control Force (u)", "N", lambda k: controls[:, k]),
    ]

    for k, axis in enumerate(axes):
        for col, (plot_title, ylabel, series) in enumerate(columns):
            ax = grid[k, col]
            ax.plot(ts, series(k))
            ax.set_title(f"{plot_title} [{axis}]")
            ax.set_xlabel("t [s]")
            ax.set_ylabel(ylabel)
            ax.grid(True)

    fig.tight_layout()
    return _save_and_show_plot(fig, save_path, show_plot)
