import jax.numpy as jnp
import numpy as np
import pytest

from controller.lqr_controller import LQRController
from env.closedloop import create_time_grid, extract_trajectory, simulate


@pytest.fixture
def lqr_gain(params):
    return LQRController.from_linearisation(params).K


def test_time_grid():
    ts = create_time_grid((0.0, 1.0), 0.1)
    assert len(ts) == 11
    assert jnp.isclose(ts[0], 0.0)
    assert jnp.isclose(ts[-1], 1.0)


def test_simulation_output_shape(params, lqr_gain):
    ts = create_time_grid((0.0, 1.0), 0.05)
    sol = simulate(lqr_gain, params, (0.0, 1.0), ts, jnp.array([0.0, 0.1, 0.0, 0.0]))
    assert sol.ys.shape == (len(ts), 4)
    assert jnp.all(jnp.isfinite(sol.ys))


def test_lqr_stabilizes_nonlinear_model(params, lqr_gain):
    """Small tilt decays under the upright LQR gain"""
    ts = create_time_grid((0.0, 8.0), 0.1)
    sol = simulate(lqr_gain, params, (0.0, 8.0), ts, jnp.array([0.0, 0.15, 0.0, 0.0]))
    final = np.asarray(sol.ys[-1])
    assert np.all(np.abs(final) < 0.05)


def test_zero_gain_falls(params):
    ts = create_time_grid((0.0, 1.0), 0.1)
    sol = simulate(np.zeros(4), params, (0.0, 1.0), ts, jnp.array([0.0, 0.05, 0.0, 0.0]))
    assert abs(float(sol.ys[-1, 1])) > 0.05


def test_reference_tracking(params, lqr_gain):
    """Position converges to a shifted set point"""
    ref = jnp.array([0.5, 0.0, 0.0, 0.0])
    ts = create_time_grid((0.0, 15.0), 0.5)
    sol = simulate(lqr_gain, params, (0.0, 15.0), ts, jnp.zeros(4), reference=ref)
    assert abs(float(sol.ys[-1, 0]) - 0.5) < 0.05


def test_rejects_wrong_state_size(params, lqr_gain):
    with pytest.raises(ValueError):
        simulate(lqr_gain, params, (0.0, 1.0), jnp.array([0.0, 1.0]), jnp.zeros(5))


def test_extract_trajectory(params, lqr_gain):
    ts = create_time_grid((0.0, 0.5), 0.1)
    sol = simulate(lqr_gain, params, (0.0, 0.5), ts, jnp.array([0.0, 0.1, 0.0, 0.0]))
    assert extract_trajectory(sol).shape == (len(ts), 4)
    assert jnp.allclose(extract_trajectory(sol, "angle"), sol.ys[:, 1])
    assert jnp.isclose(extract_trajectory(sol, "angle")[0], 0.1)
    with pytest.raises(ValueError):
        extract_trajectory(sol, "energy")
