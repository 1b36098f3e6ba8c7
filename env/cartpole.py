"""
env/cartpole.py - JAX cart-pole dynamics
State format: [x, θ, ẋ, θ̇] with θ = 0 upright, pole tip at x - l·sin(θ).

Serves as a deterministic single-axis plant backend and as the reference
for closed-form and autodiff Jacobians.
"""

from __future__ import annotations
from functools import partial
from dataclasses import dataclass

import jax
import jax.numpy as jnp
import numpy as np
from jaxtyping import Array, Float

from env.plant import Plant, Snapshot

# finite differences at eps≈1e-6 are meaningless in float32
jax.config.update("jax_enable_x64", True)

__all__ = [
    "CartPoleParams",
    "dynamics",
    "upright_jacobians",
    "autodiff_jacobians",
    "AnalyticCartPole",
]


@dataclass(frozen=True)
class CartPoleParams:
    """Cart-pole physical parameters"""
    mc: float = 1.0  # Cart mass
    mp: float = 0.1  # Pole mass
    l : float = 0.5  # Pole length
    g : float = 9.81 # Gravity


# ---------------------------------------------------------------------------
# Pure physics kernel
# ---------------------------------------------------------------------------
@partial(jax.jit, static_argnames=("params",))
def dynamics(
    state: Float[Array, "4"],
    force: Float[Array, "1"],
    *,
    params: CartPoleParams,
) -> Float[Array, "4"]:
    """Cart-pole equations of motion for a single state and force."""
    _, th, xdot, thdot = state
    mc, mp, l, g = params.mc, params.mp, params.l, params.g
    s, c = jnp.sin(th), jnp.cos(th)

    # Mass matrix M = [[a, b], [b, d]]
    a = mc + mp
    b = -mp * l * c
    d = mp * l**2
    det = a * d - b * b

    rhs1 = force[0] - mp * l * s * thdot**2
    rhs2 = mp * g * l * s
    xddot = (d * rhs1 - b * rhs2) / det
    thddot = (a * rhs2 - b * rhs1) / det

    return jnp.array([xdot, thdot, xddot, thddot])


def upright_jacobians(params: CartPoleParams) -> tuple[np.ndarray, np.ndarray]:
    """Closed-form linearization about the upright equilibrium (θ=0)."""
    mc, mp, l, g = params.mc, params.mp, params.l, params.g

    A = np.array([
        [0.0, 0.0, 1.0, 0.0],                      # ẋ = ẋ
        [0.0, 0.0, 0.0, 1.0],                      # θ̇ = θ̇
        [0.0, mp * g / mc, 0.0, 0.0],              # ẍ = (mp*g/mc) * θ
        [0.0, g * (mc + mp) / (l * mc), 0.0, 0.0], # θ̈ = (g*(mc+mp)/(l*mc)) * θ
    ])
    B = np.array([
        [0.0],
        [0.0],
        [1.0 / mc],
        [1.0 / (l * mc)],
    ])
    return A, B


def autodiff_jacobians(
    params: CartPoleParams,
    x0: Float[Array, "4"],
    u0: Float[Array, "1"],
) -> tuple[np.ndarray, np.ndarray]:
    """Exact Jacobians of `dynamics` at (x0, u0) via forward-mode autodiff."""
    f = partial(dynamics, params=params)
    x0 = jnp.asarray(x0, dtype=jnp.float64)
    u0 = jnp.asarray(u0, dtype=jnp.float64)
    A = jax.jacfwd(f, argnums=0)(x0, u0)
    B = jax.jacfwd(f, argnums=1)(x0, u0)
    return np.asarray(A), np.asarray(B)


class AnalyticCartPole(Plant):
    """
    Single-axis plant evaluating `dynamics` directly.

    Carries simulated time and the last evaluated derivative as auxiliary
    state outside the modeled coordinates; both are part of a snapshot.
    """

    axes = ("x",)

    def __init__(self, params: CartPoleParams = CartPoleParams(), dt: float = 0.01):
        self.params = params
        self.dt = float(dt)
        self.time = 0.0
        self._x = np.zeros(4)
        self._u = np.zeros(1)
        self.last_derivative = np.zeros(4)

    def get_state(self) -> np.ndarray:
        return self._x.copy()

    def set_state(self, x) -> None:
        self._x = self._check_state(x).copy()

    def get_control(self) -> np.ndarray:
        return self._u.copy()

    def set_control(self, u) -> None:
        self._u = self._check_control(u).copy()

    def advance_and_observe_derivative(self) -> np.ndarray:
        xdot = dynamics(jnp.asarray(self._x), jnp.asarray(self._u), params=self.params)
        self.last_derivative = np.asarray(xdot, dtype=np.float64)
        return self.last_derivative.copy()

    def save_snapshot(self) -> Snapshot:
        arrays = {"x": self._x.copy(), "u": self._u.copy(), "last_derivative": self.last_derivative.copy()}
        return Snapshot(arrays=arrays, time=self.time)

    def restore_snapshot(self, snapshot: Snapshot) -> None:
        self._x = snapshot.arrays["x"].copy()
        self._u = snapshot.arrays["u"].copy()
        self.last_derivative = snapshot.arrays["last_derivative"].copy()
        self.time = snapshot.time

    def step(self) -> None:
        """Semi-implicit Euler step."""
        xdot = self.advance_and_observe_derivative()
        vel = self._x[2:] + self.dt * xdot[2:]
        pos = self._x[:2] + self.dt * vel
        self._x = np.concatenate([pos, vel])
        self.time += self.dt
