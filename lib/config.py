"""
lib/config.py

Tunable LQR weights and YAML configuration loading.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import math
import os
from typing import Any, Mapping

import numpy as np
import yaml

__all__ = ["WeightConfig", "load_config", "STATE_WEIGHTS", "DEFAULT_CONFIG_PATH"]

DEFAULT_CONFIG_PATH = "config.yaml"

# Per-axis Q weights in state order
STATE_WEIGHTS = ("position", "angle", "velocity", "angular_velocity")


def load_config(path: str = DEFAULT_CONFIG_PATH) -> dict:
    """Load configuration from a YAML file."""
    if not os.path.isfile(path):
        raise FileNotFoundError(f"Config file '{path}' not found")

    with open(path, "r") as f:
        return yaml.safe_load(f) or {}


@dataclass
class WeightConfig:
    """
    User-tunable Q/R weights with an edge-triggered change flag.

    Q = diag(position, angle, velocity, angular_velocity), each entry repeated
    once per axis to match the state ordering; R = control * I.
    """

    position: float = 10.0
    angle: float = 1000.0
    velocity: float = 1.0
    angular_velocity: float = 100.0
    control: float = 1.0

    _changed: bool = field(default=False, init=False, repr=False)
    _pending: bool = field(default=False, init=False, repr=False)
    _editing: bool = field(default=False, init=False, repr=False)

    @classmethod
    def from_dict(cls, weights: Mapping[str, Any] | None) -> "WeightConfig":
        cfg = cls()
        for name, value in (weights or {}).items():
            cfg.set_weight(name, value)
        cfg._changed = cfg._pending = False
        return cfg

    @property
    def names(self) -> tuple[str, ...]:
        return STATE_WEIGHTS + ("control",)

    def set_weight(self, name: str, value: float) -> None:
        """Set one weight; a new value marks the config as changed."""
        if name not in self.names:
            raise KeyError(f"Unknown weight '{name}', expected one of {self.names}")
        value = float(value)
        if not math.isfinite(value) or value < 0:
            raise ValueError(f"Weight '{name}' must be finite and non-negative, got {value}")
        if getattr(self, name) == value:
            return
        setattr(self, name, value)
        if self._editing:
            self._pending = True
        else:
            self._changed = True

    def begin_edit(self) -> None:
        """A slider drag started: hold changes back until `end_edit`."""
        self._editing = True

    def end_edit(self) -> None:
        """Slider released: publish held-back changes."""
        self._editing = False
        if self._pending:
            self._changed = True
            self._pending = False

    def request_resynthesis(self) -> None:
        """Manual trigger, independent of any weight change."""
        self._changed = True

    @property
    def changed(self) -> bool:
        return self._changed

    def consume_change(self) -> bool:
        """True once per published change, then False until the next."""
        changed, self._changed = self._changed, False
        return changed

    def matrices(self, n_axes: int) -> tuple[np.ndarray, np.ndarray]:
        """(Q, R) for a state with `n_axes` controlled axes."""
        if n_axes < 1:
            raise ValueError(f"n_axes must be positive, got {n_axes}")
        q = np.repeat([getattr(self, w) for w in STATE_WEIGHTS], n_axes).astype(np.float64)
        return np.diag(q), self.control * np.eye(n_axes)
