"""
env/closedloop.py
Closed-loop simulation of the analytic cart-pole under u = -K·x using
JAX + Diffrax.

State format: [x, θ, ẋ, θ̇].
"""

from __future__ import annotations
from typing import Optional, Sequence

import jax.numpy as jnp
import numpy as np
from jaxtyping import Array, Float
from diffrax import Tsit5, ODETerm, SaveAt, diffeqsolve

from .cartpole import CartPoleParams, dynamics

__all__ = ["simulate", "create_time_grid", "extract_trajectory"]


def simulate(
    K,
    params: CartPoleParams,
    t_span: tuple[float, float],
    ts: Sequence[float],
    y0: Float[Array, "4"],
    *,
    reference: Optional[Float[Array, "4"]] = None,
    dt0: float = 1e-2,
    max_steps: int = 10_000,
):
    """
    Simulate the nonlinear cart-pole with linear state feedback.

    Args:
        K: Feedback gain, shape (1, 4) or (4,)
        params: Physical parameters
        t_span: Integration time (t_start, t_end)
        ts: Time points to save solution
        y0: Initial state [x, θ, ẋ, θ̇]
        reference: Optional set point; control is u = -K (x - reference)
        dt0: Initial step size
        max_steps: Maximum integration steps

    Returns:
        Diffrax solution object with `ts` and `ys` of shape (len(ts), 4)
    """
    y0 = jnp.asarray(y0, dtype=jnp.float64)
    if y0.shape != (4,):
        raise ValueError(f"Expected state format [x, θ, ẋ, θ̇], got shape {y0.shape}")

    gain = jnp.asarray(np.asarray(K, dtype=np.float64).reshape(1, 4))
    ref = jnp.zeros(4) if reference is None else jnp.asarray(reference, dtype=jnp.float64)

    def rhs(t, y, args):
        u = -gain @ (y - ref)
        return dynamics(y, u, params=params)

    return diffeqsolve(
        ODETerm(rhs),
        Tsit5(),
        t0=t_span[0],
        t1=t_span[1],
        dt0=dt0,
        y0=y0,
        args=None,
        max_steps=max_steps,
        saveat=SaveAt(ts=jnp.asarray(ts)),
    )


def create_time_grid(t_span: tuple[float, float], dt: float) -> jnp.ndarray:
    """Create uniform time grid for simulation."""
    return jnp.arange(t_span[0], t_span[1] + dt/2, dt)


def extract_trajectory(solution, component: str = "all") -> jnp.ndarray:
    """
    Extract specific components from a simulated trajectory.

    component: "all", "position", "angle", "velocity" or "angular_velocity"
    """
    states = solution.ys
    columns = {"position": 0, "angle": 1, "velocity": 2, "angular_velocity": 3}
    if component == "all":
        return states
    if component not in columns:
        raise ValueError(f"Unknown component '{component}'. Use 'all', 'position', 'angle', 'velocity', or 'angular_velocity'")
    return states[:, columns[component]]
