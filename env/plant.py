"""
env/plant.py

Plant interface shared by the MuJoCo backend and the analytic cart-pole.

State format (per controlled axis, grouped by quantity):
    n=4: [pos, angle, vel, angvel]
    n=8: [pos_x, pos_y, angle_x, angle_y, vel_x, vel_y, angvel_x, angvel_y]
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

import numpy as np

__all__ = ["AxisIndex", "Plant", "Snapshot", "AXIS_QUANTITIES"]

AXIS_QUANTITIES = ("pos", "angle", "vel", "angvel")


@dataclass(frozen=True)
class AxisIndex:
    """Addresses of one controlled axis, resolved once at load time."""
    name: str
    platform_qpos: int
    platform_qvel: int
    hinge_qpos: int
    hinge_qvel: int
    actuator: int


@dataclass(frozen=True)
class Snapshot:
    """Opaque copy of the full plant state (all DOFs, controls, time)."""
    arrays: Mapping[str, np.ndarray] = field(default_factory=dict)
    time: float = 0.0
    extra: Any = None


class Plant(ABC):
    """Narrow capability interface used by the linearizer and controllers."""

    axes: Sequence[str] = ()

    @property
    def n_axes(self) -> int:
        return len(self.axes)

    @property
    def n_state(self) -> int:
        return 4 * self.n_axes

    @property
    def n_control(self) -> int:
        return self.n_axes

    @abstractmethod
    def get_state(self) -> np.ndarray: ...

    @abstractmethod
    def set_state(self, x: np.ndarray) -> None: ...

    @abstractmethod
    def get_control(self) -> np.ndarray: ...

    @abstractmethod
    def set_control(self, u: np.ndarray) -> None: ...

    @abstractmethod
    def advance_and_observe_derivative(self) -> np.ndarray:
        """Run one forward-dynamics evaluation and return d/dt of the state."""

    @abstractmethod
    def save_snapshot(self) -> Snapshot: ...

    @abstractmethod
    def restore_snapshot(self, snapshot: Snapshot) -> None: ...

    @abstractmethod
    def step(self) -> None:
        """Advance simulated time by one timestep."""

    def axis_state(self, name: str) -> dict[str, float]:
        """Return (pos, angle, vel, angvel) of one axis as a dict."""
        try:
            k = list(self.axes).index(name)
        except ValueError:
            raise KeyError(f"Unknown axis '{name}', expected one of {list(self.axes)}") from None
        x = self.get_state()
        n = self.n_axes
        return {q: float(x[i * n + k]) for i, q in enumerate(AXIS_QUANTITIES)}

    def _check_state(self, x) -> np.ndarray:
        x = np.asarray(x, dtype=np.float64).reshape(-1)
        if x.shape != (self.n_state,):
            raise ValueError(f"Expected state of shape ({self.n_state},), got {x.shape}")
        return x

    def _check_control(self, u) -> np.ndarray:
        u = np.asarray(u, dtype=np.float64).reshape(-1)
        if u.shape != (self.n_control,):
            raise ValueError(f"Expected control of shape ({self.n_control},), got {u.shape}")
        return u
