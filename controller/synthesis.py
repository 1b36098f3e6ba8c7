"""
controller/synthesis.py

LQR synthesis pipeline: linearize → solve CARE → gain.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging
from typing import Optional, Tuple

import numpy as np

from controller.care import invert_r, solve_care
from controller.linearizer import linearize
from env.plant import Plant

__all__ = [
    "SynthesisContext",
    "compute_gain",
    "lqr_gain",
    "operating_point",
    "synthesize",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SynthesisContext:
    """Everything one synthesis produced. Only K outlives it."""
    A: np.ndarray
    B: np.ndarray
    Q: np.ndarray
    R: np.ndarray
    P: np.ndarray
    K: np.ndarray
    x0: Optional[np.ndarray] = None
    u0: Optional[np.ndarray] = None

    @property
    def closed_loop(self) -> np.ndarray:
        return self.A - self.B @ self.K


def compute_gain(B, R, P) -> np.ndarray:
    """Feedback gain K = R⁻¹ Bᵗ P, shape (m, n)."""
    B = np.asarray(B, dtype=np.float64)
    if B.ndim == 1:
        B = B.reshape(-1, 1)
    return invert_r(R) @ B.T @ np.asarray(P, dtype=np.float64)


def lqr_gain(A, B, Q, R, *, method: str = "hamiltonian") -> Tuple[np.ndarray, np.ndarray]:
    """Solve the CARE and return (P, K)."""
    P = solve_care(A, B, Q, R, method=method)
    return P, compute_gain(B, R, P)


def operating_point(plant: Plant) -> Tuple[np.ndarray, np.ndarray]:
    """Upright equilibrium: zero state, zero control."""
    return np.zeros(plant.n_state), np.zeros(plant.n_control)


def synthesize(
    plant: Plant,
    Q,
    R,
    *,
    eps: float = 1e-6,
    method: str = "hamiltonian",
    scheme: str = "forward",
) -> SynthesisContext:
    """
    Linearize `plant` about the upright equilibrium and compute the LQR gain.

    Raises:
        SynthesisError: any CARE failure, unchanged
    """
    x0, u0 = operating_point(plant)
    A, B = linearize(plant, x0, u0, eps, scheme=scheme)
    Q = np.asarray(Q, dtype=np.float64)
    R = np.atleast_2d(np.asarray(R, dtype=np.float64))
    P, K = lqr_gain(A, B, Q, R, method=method)

    ctx = SynthesisContext(A=A, B=B, Q=Q, R=R, P=P, K=K, x0=x0, u0=u0)
    logger.debug("Closed-loop poles: %s", np.linalg.eigvals(ctx.closed_loop))
    return ctx
