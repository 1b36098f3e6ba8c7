import numpy as np
import pytest

from controller.base import Controller


class DummyCtrl(Controller):
    def __init__(self, gain: float = 1.0):
        self.gain = gain

    def _force(self, state, _t):
        return np.array([-self.gain * np.sum(state)])


class MultiDimCtrl(Controller):
    """Controller that returns a two-axis control vector"""

    def _force(self, state, _t):
        return np.array([state[0], -state[1]])


# --------------------------------------------------------------------------- #
# Core functionality tests                                                    #
# --------------------------------------------------------------------------- #

def test_batched_and_scalar():
    """Controller works for both single and batched states"""
    ctrl = DummyCtrl(gain=2.0)

    s = np.array([1., 0.5, 0.2, 0.1])
    expected = -2.0 * np.sum(s)
    assert np.allclose(ctrl(s, 0.0), [expected])

    states = np.stack([s, 0.5 * s, 2.0 * s])
    forces = ctrl(states, 0.0)
    assert forces.shape == (3, 1)
    assert np.allclose(forces[:, 0], [expected, 0.5 * expected, 2.0 * expected])


def test_multi_dim_output():
    ctrl = MultiDimCtrl()
    u = ctrl(np.array([1.0, 2.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0]))
    assert np.array_equal(u, [1.0, -2.0])


def test_profile_returns_latency():
    ctrl = DummyCtrl()
    u, latency = ctrl(np.ones(4), 0.0, profile=True)
    assert np.allclose(u, [-4.0])
    assert isinstance(latency, float)
    assert latency >= 0.0


def test_abstract_base_cannot_be_instantiated():
    with pytest.raises(TypeError):
        Controller()


def test_apply_writes_control(cartpole):
    cartpole.set_state([0.1, 0.2, 0.0, 0.0])
    u = DummyCtrl(gain=1.0).apply(cartpole)
    assert np.allclose(u, [-0.3])
    assert np.allclose(cartpole.get_control(), [-0.3])
