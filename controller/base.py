"""
controller/base.py

Base class for platform-pendulum controllers.
Provides batch handling, plant I/O for one tick and optional profiling.
"""

from __future__ import annotations
from abc import ABC, abstractmethod

import time
import numpy as np

from env.plant import Plant

__all__ = ["Controller"]


class Controller(ABC):
    """Abstract base: subclasses implement `_force(state, t) -> u`."""

    @abstractmethod
    def _force(self, state: np.ndarray, t: float) -> np.ndarray: ...

    def __call__(self,
                 state: np.ndarray,
                 t: float = 0.0,
                 *,
                 profile: bool = False) -> np.ndarray | tuple[np.ndarray, float]:
        """
        Compute the control vector with optional performance profiling.

        Args:
            state: State vector (1D) or batch of states (2D)
            t: Current time
            profile: If True, return (u, latency_seconds) tuple

        Returns:
            u: Control vector (m,) for 1D state, (batch, m) for batched
            OR (u, latency) tuple if profile=True
        """
        if not profile:
            return self._eager(state, t)

        start_time_ns = time.perf_counter_ns()
        u = self._eager(state, t)
        end_time_ns = time.perf_counter_ns()
        return u, (end_time_ns - start_time_ns) / 1e9

    def apply(self, plant: Plant, t: float = 0.0) -> np.ndarray:
        """Read the plant state, compute u and write it to the plant."""
        u = self._force(plant.get_state(), t)
        plant.set_control(u)
        return u

    def _eager(self, state, t: float) -> np.ndarray:
        """Execution with automatic batch handling."""
        state = np.asarray(state, dtype=np.float64)
        if state.ndim == 1:
            return self._force(state, t)
        return np.stack([self._force(s, t) for s in state])
