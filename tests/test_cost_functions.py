import numpy as np
import pytest

from lib.cost_functions import compute_trajectory_cost, create_cost_matrices, quadratic_cost


def test_create_cost_matrices():
    Q, R = create_cost_matrices(n_axes=2, pos_weight=1.0, angle_weight=2.0,
                                vel_weight=3.0, angvel_weight=4.0, control_weight=0.1)
    assert Q.shape == (8, 8)
    assert np.array_equal(np.diag(Q), [1.0, 1.0, 2.0, 2.0, 3.0, 3.0, 4.0, 4.0])
    assert np.allclose(R, 0.1 * np.eye(2))


def test_quadratic_cost():
    Q = np.diag([1.0, 2.0])
    R = np.array([[3.0]])
    assert quadratic_cost([1.0, 1.0], [2.0], Q, R) == pytest.approx(15.0)


def test_trajectory_cost():
    Q, R = create_cost_matrices()
    states = np.tile([0.0, 0.1, 0.0, 0.0], (10, 1))
    controls = np.ones((10, 1))
    cost = compute_trajectory_cost(states, controls, Q, R, dt=0.01)
    assert cost == pytest.approx(10 * 0.01 * (1000.0 * 0.01 + 1.0))


def test_trajectory_cost_accepts_flat_controls():
    Q, R = create_cost_matrices()
    states = np.zeros((5, 4))
    assert compute_trajectory_cost(states, np.ones(5), Q, R, 0.1) == pytest.approx(0.5)


def test_trajectory_cost_edge_cases():
    Q, R = create_cost_matrices()
    assert compute_trajectory_cost(np.zeros((0, 4)), np.zeros((0, 1)), Q, R, 0.01) == np.inf
    with pytest.raises(ValueError):
        compute_trajectory_cost(np.zeros((3, 8)), np.zeros((3, 1)), Q, R, 0.01)
    with pytest.raises(ValueError):
        compute_trajectory_cost(np.zeros((3, 4)), np.zeros((2, 1)), Q, R, 0.01)
