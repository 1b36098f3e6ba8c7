# tests/conftest.py
"""
Shared fixtures & path hack so `import controller` works even when the repo
isn't installed as a package.
"""
import sys
import pathlib
import os
import numpy as np
import pytest
import jax

# project root on sys.path ---------------------------------------------------
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# default JAX platform, float64 for finite differences -----------------------
jax.config.update("jax_platforms", os.getenv("JAX_PLATFORM", "cpu"))
jax.config.update("jax_enable_x64", True)


# common fixtures -----------------------------------------------------------
@pytest.fixture(scope="session")
def params():
    from env.cartpole import CartPoleParams
    return CartPoleParams()


@pytest.fixture
def cartpole(params):
    from env.cartpole import AnalyticCartPole
    return AnalyticCartPole(params)


@pytest.fixture
def double_integrator():
    A = np.array([[0.0, 1.0], [0.0, 0.0]])
    B = np.array([[0.0], [1.0]])
    Q = np.eye(2)
    R = np.array([[1.0]])
    return A, B, Q, R


@pytest.fixture
def mujoco_plant():
    pytest.importorskip("mujoco")
    from env.mujoco_plant import MujocoPlant
    return MujocoPlant.from_xml_path(str(ROOT / "platform_pendulum.xml"))


def test_default_assets_present():
    """Scene and default config ship at the project root"""
    for name in ("platform_pendulum.xml", "config.yaml"):
        assert (ROOT / name).is_file(), name
