"""
lib/cost_functions.py
Cost computation utilities for platform-pendulum controllers.
"""

from __future__ import annotations
import numpy as np

from lib.config import WeightConfig


def create_cost_matrices(
    n_axes: int = 1,
    pos_weight: float = 10.0,
    angle_weight: float = 1000.0,
    vel_weight: float = 1.0,
    angvel_weight: float = 100.0,
    control_weight: float = 1.0,
) -> tuple[np.ndarray, np.ndarray]:
    """Create (Q, R) for `n_axes` controlled axes."""
    weights = WeightConfig(
        position=pos_weight,
        angle=angle_weight,
        velocity=vel_weight,
        angular_velocity=angvel_weight,
        control=control_weight,
    )
    return weights.matrices(n_axes)


def quadratic_cost(x: np.ndarray, u: np.ndarray, Q: np.ndarray, R: np.ndarray) -> float:
    """Instantaneous cost xᵗQx + uᵗRu."""
    x = np.asarray(x, dtype=np.float64)
    u = np.asarray(u, dtype=np.float64)
    return float(x @ Q @ x + u @ R @ u)


def compute_trajectory_cost(
    states: np.ndarray,
    controls: np.ndarray,
    Q: np.ndarray,
    R: np.ndarray,
    dt: float
) -> float:
    """Integrated LQR cost of a recorded run (rectangle rule)."""
    states = np.asarray(states, dtype=np.float64)
    controls = np.asarray(controls, dtype=np.float64)
    if states.shape[0] == 0:
        return np.inf

    if states.ndim != 2 or states.shape[1] != Q.shape[0]:
        raise ValueError(f"States must have shape (N, {Q.shape[0]}), got {states.shape}")

    if controls.shape[0] != states.shape[0]:
        raise ValueError("Controls and states length mismatch")

    controls = controls.reshape(states.shape[0], -1)
    state_costs = np.einsum("ni,ij,nj->n", states, Q, states)
    control_costs = np.einsum("ni,ij,nj->n", controls, R, controls)
    return float(dt * np.sum(state_costs + control_costs))
