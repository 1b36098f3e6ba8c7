"""
env/mujoco_plant.py

MuJoCo backend for the platform pendulum: a platform on two slide joints
carrying a pole on two hinges. Each logical axis pairs the platform slide
with the hinge that tilts the pole along that slide.
"""

from __future__ import annotations
from pathlib import Path
from typing import Mapping, Optional, Sequence

import numpy as np
import mujoco

from env.plant import AxisIndex, Plant, Snapshot

__all__ = ["MujocoPlant", "AXIS_JOINTS", "resolve_axis", "DEFAULT_MODEL_XML"]

DEFAULT_MODEL_XML = str(Path(__file__).resolve().parents[1] / "platform_pendulum.xml")

# logical axis -> (platform slide joint, pole hinge joint)
AXIS_JOINTS: dict[str, tuple[str, str]] = {
    "x": ("platform_x", "hinge_y"),
    "y": ("platform_y", "hinge_x"),
}

_POLE_BODY = "pole"
_PUSH_COMPONENT = {"x": 0, "y": 1}

# Everything mj_step reads that a perturbation may overwrite
_SNAPSHOT_FIELDS = ("qpos", "qvel", "act", "ctrl", "qacc_warmstart", "qfrc_applied", "xfrc_applied")


def _joint_id(model, name: str) -> int:
    jid = mujoco.mj_name2id(model, mujoco.mjtObj.mjOBJ_JOINT, name)
    if jid < 0:
        raise KeyError(f"Joint '{name}' not found in model")
    return jid


def _actuator_for_joint(model, jid: int) -> int:
    """Index of the actuator driving joint `jid`."""
    for a in range(model.nu):
        if (int(model.actuator_trntype[a]) == int(mujoco.mjtTrn.mjTRN_JOINT)
                and model.actuator_trnid[a, 0] == jid):
            return a
    raise KeyError(f"No actuator drives joint id {jid}")


def resolve_axis(model, name: str) -> AxisIndex:
    """Build the address table entry for one logical axis."""
    if name not in AXIS_JOINTS:
        raise KeyError(f"Unknown axis '{name}', expected one of {sorted(AXIS_JOINTS)}")
    platform, hinge = AXIS_JOINTS[name]
    jp, jh = _joint_id(model, platform), _joint_id(model, hinge)
    return AxisIndex(
        name=name,
        platform_qpos=int(model.jnt_qposadr[jp]),
        platform_qvel=int(model.jnt_dofadr[jp]),
        hinge_qpos=int(model.jnt_qposadr[jh]),
        hinge_qvel=int(model.jnt_dofadr[jh]),
        actuator=_actuator_for_joint(model, jp),
    )


class MujocoPlant(Plant):
    """Plant backed by an `mjModel`/`mjData` pair."""

    def __init__(self, model, data=None, axes: Sequence[str] = ("x", "y")):
        if not axes:
            raise ValueError("At least one axis is required")
        self.model = model
        self.data = data if data is not None else mujoco.MjData(model)
        self.axes = tuple(axes)
        self.index: Mapping[str, AxisIndex] = {a: resolve_axis(model, a) for a in self.axes}

        ids = [self.index[a] for a in self.axes]
        self._qpos_idx = np.array([i.platform_qpos for i in ids] + [i.hinge_qpos for i in ids])
        self._qvel_idx = np.array([i.platform_qvel for i in ids] + [i.hinge_qvel for i in ids])
        self._act_idx = np.array([i.actuator for i in ids])
        self._pole_body = mujoco.mj_name2id(model, mujoco.mjtObj.mjOBJ_BODY, _POLE_BODY)

        mujoco.mj_forward(self.model, self.data)

    @classmethod
    def from_xml_path(cls,
                      path: str = DEFAULT_MODEL_XML,
                      axes: Sequence[str] = ("x", "y"),
                      timestep: Optional[float] = None) -> "MujocoPlant":
        """Load a scene from disk."""
        model = mujoco.MjModel.from_xml_path(str(path))
        if timestep is not None:
            model.opt.timestep = float(timestep)
        return cls(model, axes=axes)

    # ------------------------------------------------------------------ #
    # Plant interface                                                     #
    # ------------------------------------------------------------------ #

    @property
    def timestep(self) -> float:
        return float(self.model.opt.timestep)

    @property
    def time(self) -> float:
        return float(self.data.time)

    def get_state(self) -> np.ndarray:
        return np.concatenate([self.data.qpos[self._qpos_idx], self.data.qvel[self._qvel_idx]])

    def set_state(self, x) -> None:
        x = self._check_state(x)
        k = 2 * self.n_axes
        self.data.qpos[self._qpos_idx] = x[:k]
        self.data.qvel[self._qvel_idx] = x[k:]

    def get_control(self) -> np.ndarray:
        return np.array(self.data.ctrl[self._act_idx], dtype=np.float64)

    def set_control(self, u) -> None:
        self.data.ctrl[self._act_idx] = self._check_control(u)

    def advance_and_observe_derivative(self) -> np.ndarray:
        mujoco.mj_forward(self.model, self.data)
        return np.concatenate([self.data.qvel[self._qvel_idx], self.data.qacc[self._qvel_idx]])

    def save_snapshot(self) -> Snapshot:
        arrays = {name: np.array(getattr(self.data, name), copy=True) for name in _SNAPSHOT_FIELDS}
        return Snapshot(arrays=arrays, time=float(self.data.time))

    def restore_snapshot(self, snapshot: Snapshot) -> None:
        for name, values in snapshot.arrays.items():
            getattr(self.data, name)[...] = values
        self.data.time = snapshot.time

    def step(self) -> None:
        mujoco.mj_step(self.model, self.data)
        # pushes last a single step
        self.data.xfrc_applied[...] = 0.0

    # ------------------------------------------------------------------ #
    # Scene interaction                                                   #
    # ------------------------------------------------------------------ #

    def reset(self,
              start_angles: Optional[Mapping[str, float]] = None,
              *,
              rng: Optional[np.random.Generator] = None,
              max_angle: float = np.pi / 10) -> None:
        """
        Reset to the model defaults and tilt the pole.

        Args:
            start_angles: Hinge angle per axis name (radians). Takes precedence.
            rng: If given and no start_angles, draw each controlled hinge
                 uniformly from [-max_angle, max_angle].
            max_angle: Bound for random start angles.
        """
        mujoco.mj_resetData(self.model, self.data)
        if start_angles is not None:
            for name, angle in start_angles.items():
                if name not in self.index:
                    raise KeyError(f"Unknown axis '{name}'")
                self.data.qpos[self.index[name].hinge_qpos] = float(angle)
        elif rng is not None:
            for name in self.axes:
                self.data.qpos[self.index[name].hinge_qpos] = rng.uniform(-max_angle, max_angle)
        mujoco.mj_forward(self.model, self.data)

    def push(self, axis: str, force: float = 5.0) -> None:
        """Apply a horizontal force to the pole along `axis` for the next step."""
        if axis not in _PUSH_COMPONENT:
            raise KeyError(f"Unknown axis '{axis}'")
        self.data.xfrc_applied[self._pole_body, _PUSH_COMPONENT[axis]] = float(force)
