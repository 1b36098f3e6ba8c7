"""
controller/care.py

Continuous-time algebraic Riccati equation

    Aᵗ P + P A - P B R⁻¹ Bᵗ P + Q = 0

solved through the stable invariant subspace of the Hamiltonian

    H = [[ A, -B R⁻¹ Bᵗ],
         [-Q, -Aᵗ      ]]

Two ways of extracting that subspace share one contract:
- "hamiltonian": complex eigendecomposition, eigenvectors picked by the sign
  of the eigenvalue's real part. Simple, adequate for n ≤ 8.
- "schur": real Schur form ordered with the left-half-plane block first.
  More robust near marginal stability, numerically not bit-identical.
"""

from __future__ import annotations
import logging

import numpy as np
from scipy.linalg import schur

from controller.errors import SingularEigenbasis, SingularR, WrongEigenspaceDimension

__all__ = ["solve_care", "hamiltonian", "invert_r", "METHODS", "ZERO_REAL_TOL"]

logger = logging.getLogger(__name__)

METHODS = ("hamiltonian", "schur")

# Relaxed threshold absorbing eigenvalues that are zero up to round-off
ZERO_REAL_TOL = 1e-12

_COND_LIMIT = 1.0 / np.finfo(np.float64).eps


def invert_r(R: np.ndarray) -> np.ndarray:
    """R⁻¹, raising SingularR if R is singular to working precision."""
    R = np.atleast_2d(np.asarray(R, dtype=np.float64))
    if R.shape[0] != R.shape[1]:
        raise ValueError(f"R must be square, got shape {R.shape}")
    if not np.all(np.isfinite(R)):
        raise SingularR("R contains non-finite entries")
    cond = np.linalg.cond(R)
    if cond >= _COND_LIMIT:
        raise SingularR(f"R is not invertible (cond={cond:.3g})")
    try:
        return np.linalg.inv(R)
    except np.linalg.LinAlgError as e:
        raise SingularR(str(e)) from e


def _check_shapes(A, B, Q, R) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    A = np.atleast_2d(np.asarray(A, dtype=np.float64))
    B = np.asarray(B, dtype=np.float64)
    if B.ndim == 1:
        B = B.reshape(-1, 1)
    Q = np.atleast_2d(np.asarray(Q, dtype=np.float64))
    R = np.atleast_2d(np.asarray(R, dtype=np.float64))

    n = A.shape[0]
    m = B.shape[1]
    if A.shape != (n, n):
        raise ValueError(f"A must be square, got shape {A.shape}")
    if B.shape[0] != n:
        raise ValueError(f"B must have {n} rows, got shape {B.shape}")
    if Q.shape != (n, n):
        raise ValueError(f"Q must have shape ({n}, {n}), got {Q.shape}")
    if R.shape != (m, m):
        raise ValueError(f"R must have shape ({m}, {m}), got {R.shape}")
    return A, B, Q, R


def hamiltonian(A: np.ndarray, B: np.ndarray, Q: np.ndarray, R_inv: np.ndarray) -> np.ndarray:
    """Build the 2n×2n Hamiltonian matrix."""
    return np.block([
        [A, -B @ R_inv @ B.T],
        [-Q, -A.T],
    ])


def _stable_eigenvectors(H: np.ndarray, n: int) -> np.ndarray:
    """Columns spanning the stable eigenspace, shape (2n, n), complex."""
    eigvals, eigvecs = np.linalg.eig(H)

    stable = eigvals.real < 0
    if np.count_nonzero(stable) != n:
        stable = eigvals.real <= ZERO_REAL_TOL
    found = int(np.count_nonzero(stable))
    if found != n:
        raise WrongEigenspaceDimension(found, n)

    return eigvecs[:, stable]


def _stable_schur_vectors(H: np.ndarray, n: int) -> np.ndarray:
    """First n vectors of the LHP-ordered real Schur form, shape (2n, n)."""
    _, Z, sdim = schur(H, output="real", sort="lhp")
    if sdim != n:
        raise WrongEigenspaceDimension(int(sdim), n)
    return Z[:, :n]


def solve_care(A, B, Q, R, *, method: str = "hamiltonian") -> np.ndarray:
    """
    Stabilizing solution P of the CARE.

    Args:
        A: State matrix (n, n)
        B: Input matrix (n, m)
        Q: State cost (n, n), symmetric PSD
        R: Control cost (m, m), positive definite
        method: "hamiltonian" or "schur"

    Returns:
        Symmetric P of shape (n, n)

    Raises:
        SingularR: R is not invertible
        WrongEigenspaceDimension: stable subspace is not n-dimensional
        SingularEigenbasis: top block of the stable basis is not invertible
    """
    if method not in METHODS:
        raise ValueError(f"Unknown CARE method '{method}', expected one of {METHODS}")

    A, B, Q, R = _check_shapes(A, B, Q, R)
    n = A.shape[0]

    R_inv = invert_r(R)
    H = hamiltonian(A, B, Q, R_inv)

    if method == "hamiltonian":
        U = _stable_eigenvectors(H, n)
    else:
        U = _stable_schur_vectors(H, n)
    U1, U2 = U[:n, :], U[n:, :]

    if not np.all(np.isfinite(U1)) or np.linalg.cond(U1) >= _COND_LIMIT:
        raise SingularEigenbasis("Stable eigenbasis top block U1 is singular")
    try:
        U1_inv = np.linalg.inv(U1)
    except np.linalg.LinAlgError as e:
        raise SingularEigenbasis(str(e)) from e

    P = np.real(U2 @ U1_inv)
    P = (P + P.T) / 2

    logger.debug("Solved CARE (n=%d, method=%s)", n, method)
    return P
