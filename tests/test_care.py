import numpy as np
import pytest
from scipy.linalg import solve_continuous_are

from controller.care import hamiltonian, invert_r, solve_care
from controller.errors import (
    SingularEigenbasis,
    SingularR,
    SynthesisError,
    WrongEigenspaceDimension,
)
from env.cartpole import CartPoleParams, upright_jacobians
from lib.stability import care_residual


def _random_stabilizable(n, m, seed):
    rng = np.random.default_rng(seed)
    A = rng.normal(size=(n, n))
    B = rng.normal(size=(n, m))
    Q = np.diag(rng.uniform(0.5, 5.0, size=n))
    R = np.diag(rng.uniform(0.5, 2.0, size=m))
    return A, B, Q, R


# --------------------------------------------------------------------------- #
# Known solutions                                                             #
# --------------------------------------------------------------------------- #

@pytest.mark.parametrize("method", ["hamiltonian", "schur"])
def test_double_integrator_closed_form(double_integrator, method):
    """P = [[√3, 1], [1, √3]] for the double integrator with Q=I, R=1"""
    A, B, Q, R = double_integrator
    P = solve_care(A, B, Q, R, method=method)

    s3 = np.sqrt(3.0)
    assert np.allclose(P, [[s3, 1.0], [1.0, s3]], atol=1e-9)
    assert care_residual(A, B, Q, R, P, relative=False) < 1e-9


@pytest.mark.parametrize("seed", range(5))
def test_matches_scipy(seed):
    """Hamiltonian path agrees with SciPy's solver on random systems"""
    A, B, Q, R = _random_stabilizable(6, 2, seed)
    P = solve_care(A, B, Q, R)
    assert np.allclose(P, solve_continuous_are(A, B, Q, R), rtol=1e-6, atol=1e-8)


@pytest.mark.parametrize("method", ["hamiltonian", "schur"])
def test_cartpole_residual_and_symmetry(method):
    """Residual is tiny and P is exactly symmetric for the cart-pole"""
    A, B = upright_jacobians(CartPoleParams())
    Q = np.diag([10.0, 1000.0, 1.0, 100.0])
    R = np.array([[1.0]])
    P = solve_care(A, B, Q, R, method=method)

    assert care_residual(A, B, Q, R, P) < 1e-6
    assert np.linalg.norm(P - P.T) < 1e-9
    assert np.all(np.linalg.eigvalsh(P) > 0)


def test_eight_state_two_input():
    """Block-diagonal two-axis system, n=8 and m=2"""
    A1, B1 = upright_jacobians(CartPoleParams())
    A = np.zeros((8, 8))
    B = np.zeros((8, 2))
    # grouped ordering: pos_x, pos_y, angle_x, angle_y, vel_x, vel_y, angvel_x, angvel_y
    for k in range(2):
        idx = [k, 2 + k, 4 + k, 6 + k]
        A[np.ix_(idx, idx)] = A1
        B[idx, k] = B1[:, 0]
    Q = np.diag([10.0, 10.0, 1000.0, 1000.0, 1.0, 1.0, 10.0, 10.0])
    R = np.eye(2)

    P = solve_care(A, B, Q, R)
    K = np.linalg.solve(R, B.T @ P)
    assert P.shape == (8, 8)
    assert np.all(np.linalg.eigvals(A - B @ K).real < 0)


def test_hamiltonian_structure(double_integrator):
    """H = [[A, -BR⁻¹Bᵗ], [-Q, -Aᵗ]]"""
    A, B, Q, R = double_integrator
    H = hamiltonian(A, B, Q, np.linalg.inv(R))
    assert H.shape == (4, 4)
    assert np.allclose(H[:2, :2], A)
    assert np.allclose(H[:2, 2:], -B @ B.T)
    assert np.allclose(H[2:, :2], -Q)
    assert np.allclose(H[2:, 2:], -A.T)


# --------------------------------------------------------------------------- #
# Failure modes                                                               #
# --------------------------------------------------------------------------- #

@pytest.mark.parametrize("r", [0.0, np.nan, np.inf])
def test_singular_r(double_integrator, r):
    A, B, Q, _ = double_integrator
    with pytest.raises(SingularR):
        solve_care(A, B, Q, np.array([[r]]))


def test_non_finite_r_message():
    with pytest.raises(SingularR, match="non-finite"):
        invert_r(np.array([[np.nan]]))


def test_singular_r_two_inputs():
    A = np.diag([1.0, 2.0])
    B = np.eye(2)
    with pytest.raises(SingularR):
        solve_care(A, B, np.eye(2), np.array([[1.0, 1.0], [1.0, 1.0]]))


def test_unstabilizable_pair():
    """Unstable mode not reachable from B has no stabilizing solution"""
    A = np.diag([1.0, -1.0])
    B = np.array([[0.0], [1.0]])
    with pytest.raises(SynthesisError):
        solve_care(A, B, np.eye(2), np.array([[1.0]]))


@pytest.mark.parametrize("method", ["hamiltonian", "schur"])
def test_singular_eigenbasis(method):
    """Uncontrolled unstable scalar: stable subspace has a zero top block"""
    with pytest.raises(SingularEigenbasis):
        solve_care(np.array([[1.0]]), np.array([[0.0]]), np.array([[0.0]]), np.array([[1.0]]),
                   method=method)


def test_eigenvalues_on_imaginary_axis():
    """Uncontrolled, unweighted integrator: both Hamiltonian eigenvalues are zero"""
    with pytest.raises(WrongEigenspaceDimension) as exc:
        solve_care(np.zeros((1, 1)), np.zeros((1, 1)), np.zeros((1, 1)), np.array([[1.0]]))
    assert exc.value.expected == 1
    assert exc.value.found == 2


def test_errors_share_base():
    assert issubclass(SingularR, SynthesisError)
    assert issubclass(WrongEigenspaceDimension, SynthesisError)
    assert issubclass(SingularEigenbasis, SynthesisError)


def test_shape_validation(double_integrator):
    A, B, Q, R = double_integrator
    with pytest.raises(ValueError):
        solve_care(A, B, np.eye(3), R)
    with pytest.raises(ValueError):
        solve_care(A, B, Q, np.eye(2))
    with pytest.raises(ValueError):
        solve_care(A, B, Q, R, method="newton")
