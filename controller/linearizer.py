"""
controller/linearizer.py

Finite-difference linearization of a plant about an operating point.

    A[:, i] = (f(x0 + eps·e_i, u0) - f(x0, u0)) / eps
    B[:, j] = (f(x0, u0 + eps·e_j) - f(x0, u0)) / eps

where f is the plant's state derivative. The plant is perturbed in place: its
full state is snapshotted first and restored afterward.
"""

from __future__ import annotations
import logging
import math
from typing import Tuple

import numpy as np

from env.plant import Plant

__all__ = ["linearize", "SCHEMES"]

logger = logging.getLogger(__name__)

SCHEMES = ("forward", "central")


def _derivative(plant: Plant, x: np.ndarray, u: np.ndarray) -> np.ndarray:
    plant.set_state(x)
    plant.set_control(u)
    return np.asarray(plant.advance_and_observe_derivative(), dtype=np.float64)


def linearize(
    plant: Plant,
    x0,
    u0,
    eps: float = 1e-6,
    *,
    scheme: str = "forward",
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Jacobians of the plant's state derivative at (x0, u0).

    Args:
        plant: Plant to perturb; restored exactly on return.
        x0: Operating-point state, shape (n,)
        u0: Operating-point control, shape (m,)
        eps: Perturbation size. O(eps) bias for "forward", O(eps²) for "central".
        scheme: "forward" (one-sided) or "central" difference

    Returns:
        (A, B) with shapes (n, n) and (n, m)
    """
    if not (isinstance(eps, (int, float, np.floating)) and math.isfinite(eps) and eps > 0):
        raise ValueError(f"eps must be a finite positive number, got {eps!r}")
    if scheme not in SCHEMES:
        raise ValueError(f"Unknown difference scheme '{scheme}', expected one of {SCHEMES}")

    n, m = plant.n_state, plant.n_control
    x0 = np.asarray(x0, dtype=np.float64).reshape(-1)
    u0 = np.asarray(u0, dtype=np.float64).reshape(-1)
    if x0.shape != (n,) or u0.shape != (m,):
        raise ValueError(f"Operating point shapes {x0.shape}, {u0.shape} do not match plant ({n},), ({m},)")

    A = np.zeros((n, n))
    B = np.zeros((n, m))

    snapshot = plant.save_snapshot()
    try:
        f0 = _derivative(plant, x0, u0)

        for i in range(n):
            dx = np.zeros(n)
            dx[i] = eps
            f_plus = _derivative(plant, x0 + dx, u0)
            if scheme == "forward":
                A[:, i] = (f_plus - f0) / eps
            else:
                A[:, i] = (f_plus - _derivative(plant, x0 - dx, u0)) / (2 * eps)

        for j in range(m):
            du = np.zeros(m)
            du[j] = eps
            f_plus = _derivative(plant, x0, u0 + du)
            if scheme == "forward":
                B[:, j] = (f_plus - f0) / eps
            else:
                B[:, j] = (f_plus - _derivative(plant, x0, u0 - du)) / (2 * eps)
    finally:
        plant.restore_snapshot(snapshot)

    # refresh derived quantities cached by the backend
    plant.advance_and_observe_derivative()

    evaluations = 1 + (n + m) * (1 if scheme == "forward" else 2)
    logger.debug("Linearized n=%d m=%d with %d %s-difference evaluations (eps=%g)", n, m, evaluations, scheme, eps)
    return A, B
