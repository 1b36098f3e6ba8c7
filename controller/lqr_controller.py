"""
LQR Controller for Platform-Pendulum Systems

Holds the feedback gain K and applies u = -K (x - x_ref) every tick. When the
weight configuration reports a change, the gain is resynthesized synchronously
from a fresh linearization of the plant before the control is applied.

A failed synthesis keeps the previous gain in force; the failure is logged and
flagged, never raised.
"""

from __future__ import annotations
from enum import Enum
import logging
from typing import Optional

import numpy as np

from controller.base import Controller
from controller.errors import SynthesisError
from controller.synthesis import SynthesisContext, lqr_gain, synthesize
from env.cartpole import CartPoleParams, upright_jacobians
from env.plant import Plant
from lib.config import WeightConfig

__all__ = ["LQRController", "SynthesisState"]

logger = logging.getLogger(__name__)


class SynthesisState(Enum):
    IDLE = "idle"
    RESYNTHESIZING = "resynthesizing"


class LQRController(Controller):
    """Time-invariant LQR state feedback with online resynthesis."""

    def __init__(
        self,
        n_state: int,
        n_control: int,
        *,
        K: Optional[np.ndarray] = None,
        reference: Optional[np.ndarray] = None,
        eps: float = 1e-6,
        method: str = "hamiltonian",
        scheme: str = "forward",
    ):
        self.n_state = n_state
        self.n_control = n_control
        self.K = np.zeros((n_control, n_state)) if K is None else np.asarray(K, dtype=np.float64).reshape(n_control, n_state)
        self.reference = np.zeros(n_state) if reference is None else np.asarray(reference, dtype=np.float64)
        if self.reference.shape != (n_state,):
            raise ValueError(f"reference must have shape ({n_state},), got {self.reference.shape}")

        self.eps = eps
        self.method = method
        self.scheme = scheme

        self.synthesis_state = SynthesisState.IDLE
        self.context: Optional[SynthesisContext] = None
        self.synthesis_failed = False
        self.last_error: Optional[SynthesisError] = None

    # ------------------------------------------------------------------ #
    # Construction                                                        #
    # ------------------------------------------------------------------ #

    @classmethod
    def from_plant(cls, plant: Plant, weights: WeightConfig, **kwargs) -> "LQRController":
        """Create a controller and run the initial synthesis against `plant`."""
        ctrl = cls(plant.n_state, plant.n_control, **kwargs)
        ctrl.resynthesize(plant, weights)
        weights.consume_change()
        return ctrl

    @classmethod
    def from_linearisation(
        cls,
        params: CartPoleParams,
        Q: np.ndarray = None,
        R: np.ndarray = None,
        **kwargs,
    ) -> "LQRController":
        """Create from the closed-form upright model of the analytic cart-pole."""
        if Q is None:
            Q = np.diag([20.0, 50.0, 5.0, 5.0])
        if R is None:
            R = np.array([[5.0]])

        A, B = upright_jacobians(params)
        ctrl = cls(4, 1, **kwargs)
        P, K = lqr_gain(A, B, Q, R, method=ctrl.method)
        ctrl.K = K
        ctrl.context = SynthesisContext(A=A, B=B, Q=np.asarray(Q), R=np.atleast_2d(R), P=P, K=K)
        return ctrl

    # ------------------------------------------------------------------ #
    # Synthesis                                                           #
    # ------------------------------------------------------------------ #

    def resynthesize(self, plant: Plant, weights: WeightConfig) -> bool:
        """
        Recompute K from the current plant and weights.

        Returns True on success. On failure K is left unchanged.
        """
        self.synthesis_state = SynthesisState.RESYNTHESIZING
        try:
            Q, R = weights.matrices(plant.n_axes)
            ctx = synthesize(plant, Q, R, eps=self.eps, method=self.method, scheme=self.scheme)
        except SynthesisError as e:
            self.synthesis_failed = True
            self.last_error = e
            logger.warning("LQR synthesis failed, keeping previous gain: %s: %s", type(e).__name__, e)
            return False
        finally:
            self.synthesis_state = SynthesisState.IDLE

        self.K = ctx.K
        self.context = ctx
        self.synthesis_failed = False
        self.last_error = None
        logger.info("LQR gain updated: K=%s", np.array2string(self.K, precision=3))
        return True

    # ------------------------------------------------------------------ #
    # Control                                                             #
    # ------------------------------------------------------------------ #

    def _force(self, state: np.ndarray, _t: float) -> np.ndarray:
        """Control law: u = -K (x - x_ref)."""
        return -self.K @ (np.asarray(state, dtype=np.float64) - self.reference)

    def tick(self, plant: Plant, weights: WeightConfig, t: float = 0.0) -> np.ndarray:
        """One control tick: resynthesize if weights changed, then apply u."""
        if weights.consume_change():
            self.resynthesize(plant, weights)
        return self.apply(plant, t)
