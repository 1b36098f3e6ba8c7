"""
lib/stability.py

Stability checks for synthesized gains.
"""

from __future__ import annotations
import numpy as np

from env.cartpole import CartPoleParams


def closed_loop_poles(A: np.ndarray, B: np.ndarray, K: np.ndarray) -> np.ndarray:
    """Eigenvalues of A - B K."""
    return np.linalg.eigvals(np.asarray(A) - np.asarray(B) @ np.atleast_2d(K))


def is_hurwitz(M: np.ndarray, margin: float = 0.0) -> bool:
    """True if every eigenvalue of M has real part < -margin."""
    return bool(np.all(np.linalg.eigvals(M).real < -margin))


def care_residual(A, B, Q, R, P, *, relative: bool = True) -> float:
    """Frobenius norm of AᵗP + PA - PBR⁻¹BᵗP + Q, optionally scaled by ‖Q‖ + ‖AᵗP‖."""
    A, B, Q, R, P = (np.atleast_2d(np.asarray(M, dtype=np.float64)) for M in (A, B, Q, R, P))
    res = A.T @ P + P @ A - P @ B @ np.linalg.solve(R, B.T @ P) + Q
    norm = float(np.linalg.norm(res))
    if not relative:
        return norm
    scale = float(np.linalg.norm(Q) + np.linalg.norm(A.T @ P) + np.linalg.norm(P @ B @ np.linalg.solve(R, B.T @ P)))
    return norm / max(scale, np.finfo(np.float64).tiny)


def controllability_rank(A: np.ndarray, B: np.ndarray) -> int:
    """Rank of [B, AB, ..., A^(n-1)B]."""
    A = np.asarray(A, dtype=np.float64)
    B = np.asarray(B, dtype=np.float64).reshape(A.shape[0], -1)
    blocks = [B]
    for _ in range(A.shape[0] - 1):
        blocks.append(A @ blocks[-1])
    return int(np.linalg.matrix_rank(np.hstack(blocks)))


def is_stabilizable(A: np.ndarray, B: np.ndarray, tol: float = 1e-9) -> bool:
    """PBH test: rank [λI - A, B] = n for every eigenvalue with Re(λ) ≥ 0."""
    A = np.asarray(A, dtype=np.float64)
    B = np.asarray(B, dtype=np.float64).reshape(A.shape[0], -1)
    n = A.shape[0]
    for lam in np.linalg.eigvals(A):
        if lam.real < -tol:
            continue
        if np.linalg.matrix_rank(np.hstack([lam * np.eye(n) - A, B]), tol=tol) < n:
            return False
    return True


def is_detectable(A: np.ndarray, Q: np.ndarray, tol: float = 1e-9) -> bool:
    """Detectability of (A, Q^{1/2}) as stabilizability of the dual pair."""
    return is_stabilizable(np.asarray(A).T, np.asarray(Q).T, tol=tol)


def check_trajectory_bounds(
    trajectory: np.ndarray,
    position_limit: float = 2.0,
    angle_limit: float = 0.5,
    velocity_limit: float = 5.0,
    angular_velocity_limit: float = 10.0
) -> bool:
    """Check if a [x, θ, ẋ, θ̇] trajectory stays within bounds."""
    trajectory = np.asarray(trajectory)
    if trajectory.shape[0] == 0:
        return False

    limits = np.array([position_limit, angle_limit, velocity_limit, angular_velocity_limit])
    return bool(np.all(np.isfinite(trajectory)) and np.all(np.abs(trajectory) < limits))


def quick_stability_check(
    K: np.ndarray,
    initial_state: np.ndarray,
    t_span: tuple[float, float] = (0.0, 2.0),
    params: CartPoleParams = CartPoleParams()
) -> bool:
    """Simulate the nonlinear cart-pole under K and check it stays bounded."""
    from env.closedloop import simulate, create_time_grid

    ts = create_time_grid(t_span, 0.05)
    sol = simulate(K, params, t_span, ts, initial_state)
    if sol.ys is None or sol.ys.shape[0] == 0:
        return False
    return check_trajectory_bounds(np.asarray(sol.ys))


def create_standard_test_states() -> np.ndarray:
    """Standard [x, θ, ẋ, θ̇] test states for stability testing."""
    return np.array([
        [0.0, 0.0, 0.0, 0.0],      # Upright
        [0.1, 0.05, 0.0, 0.0],     # Small perturbation
        [0.0, 0.2, 0.0, 0.0],      # Tilted
        [-0.2, 0.1, 0.1, -0.1]     # Perturbation with motion
    ])
