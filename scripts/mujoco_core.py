"""
scripts/mujoco_core.py

Tick loop around the MuJoCo plant: headless runs, interactive viewer runs,
run recording.

Each tick: resynthesize if the weights changed, apply u = -K·x, step physics.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import queue
import time
from typing import Callable, Mapping, Optional

import numpy as np

from controller.lqr_controller import LQRController
from env.mujoco_plant import MujocoPlant
from lib.config import WeightConfig

__all__ = ["SimConfig", "RunLog", "reset_plant", "run_headless", "run_interactive"]

logger = logging.getLogger(__name__)

# GLFW key codes as delivered by mujoco.viewer
KEY_W, KEY_A, KEY_S, KEY_D = ord("W"), ord("A"), ord("S"), ord("D")
KEY_R = ord("R")
KEY_EQUAL, KEY_MINUS = ord("="), ord("-")
KEY_BACKSPACE = 259


@dataclass
class SimConfig:
    """Configuration for a MuJoCo run."""
    duration: float = 30.0
    start_angles: Optional[Mapping[str, float]] = None
    random_start: bool = True
    max_start_angle: float = np.pi / 10
    push_force: float = 5.0
    seed: Optional[int] = None

    @classmethod
    def from_dict(cls, cfg: Mapping | None) -> "SimConfig":
        cfg = dict(cfg or {})
        known = {k: cfg[k] for k in cls.__dataclass_fields__ if k in cfg}
        return cls(**known)


@dataclass
class RunLog:
    """Per-tick record of a run."""
    ts: list = field(default_factory=list)
    states: list = field(default_factory=list)
    controls: list = field(default_factory=list)
    resyntheses: int = 0
    failures: int = 0

    def record(self, t: float, x: np.ndarray, u: np.ndarray) -> None:
        self.ts.append(t)
        self.states.append(np.array(x))
        self.controls.append(np.array(u))

    def arrays(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        return np.array(self.ts), np.array(self.states), np.array(self.controls)


def reset_plant(plant: MujocoPlant, cfg: SimConfig, rng: np.random.Generator) -> None:
    """Reset and tilt the pole per the run configuration."""
    if cfg.start_angles:
        plant.reset(cfg.start_angles)
    elif cfg.random_start:
        plant.reset(rng=rng, max_angle=cfg.max_start_angle)
    else:
        plant.reset()


def _log_axis_states(plant: MujocoPlant) -> None:
    """Per-axis readout of (pos, angle, vel, angvel)."""
    for name in plant.axes:
        s = plant.axis_state(name)
        logger.debug("t=%.2f %s: pos=%.4f angle=%.4f vel=%.4f angvel=%.4f",
                     plant.time, name, s["pos"], s["angle"], s["vel"], s["angvel"])


def _tick(plant: MujocoPlant,
          controller: LQRController,
          weights: WeightConfig,
          log: RunLog) -> None:
    """Resynthesize if needed, control, step, record."""
    will_resynthesize = weights.changed
    t = plant.time
    x = plant.get_state()
    u = controller.tick(plant, weights, t)
    if will_resynthesize:
        log.resyntheses += 1
        log.failures += int(controller.synthesis_failed)

    # once per simulated second
    if len(log.ts) % max(1, int(round(1.0 / plant.timestep))) == 0:
        _log_axis_states(plant)

    plant.step()
    log.record(t, x, u)


def run_headless(plant: MujocoPlant,
                 controller: LQRController,
                 weights: WeightConfig,
                 cfg: SimConfig,
                 *,
                 on_tick: Optional[Callable[[MujocoPlant, int], None]] = None) -> RunLog:
    """
    Run the tick loop without a viewer for `cfg.duration` seconds.

    Args:
        plant: MuJoCo plant
        controller: LQR controller driving the plant
        weights: Weight configuration, polled every tick
        cfg: Run configuration
        on_tick: Optional hook called before each tick with (plant, tick index),
                 e.g. to schedule pushes or weight changes
    """
    rng = np.random.default_rng(cfg.seed)
    reset_plant(plant, cfg, rng)

    log = RunLog()
    n_ticks = int(round(cfg.duration / plant.timestep))
    for i in range(n_ticks):
        if on_tick is not None:
            on_tick(plant, i)
        _tick(plant, controller, weights, log)

    logger.info("Headless run finished: %d ticks, %d resyntheses (%d failed)",
                n_ticks, log.resyntheses, log.failures)
    return log


def run_interactive(plant: MujocoPlant,
                    controller: LQRController,
                    weights: WeightConfig,
                    cfg: SimConfig) -> RunLog:  # pragma: no cover - interactive only
    """
    Run the tick loop in MuJoCo's passive viewer.

    Keys: W/A/S/D push the pole, Backspace resets with a new start angle,
    +/- scale the angle weight (triggers resynthesis), R forces resynthesis.
    """
    import mujoco.viewer as mjviewer

    rng = np.random.default_rng(cfg.seed)
    reset_plant(plant, cfg, rng)

    # Viewer callbacks run on the viewer thread; the tick loop drains the queue.
    events: queue.SimpleQueue = queue.SimpleQueue()

    def key_callback(keycode: int) -> None:
        events.put(keycode)

    def handle(keycode: int) -> None:
        if keycode == KEY_W:
            plant.push("y", cfg.push_force)
        elif keycode == KEY_S:
            plant.push("y", -cfg.push_force)
        elif keycode == KEY_A:
            plant.push("x", -cfg.push_force)
        elif keycode == KEY_D:
            plant.push("x", cfg.push_force)
        elif keycode == KEY_BACKSPACE:
            reset_plant(plant, cfg, rng)
        elif keycode in (KEY_EQUAL, KEY_MINUS):
            scale = 2.0 if keycode == KEY_EQUAL else 0.5
            weights.begin_edit()
            weights.set_weight("angle", weights.angle * scale)
            weights.end_edit()
            print(f"[INFO] angle weight -> {weights.angle:g}")
        elif keycode == KEY_R:
            weights.request_resynthesis()

    log = RunLog()
    dt = plant.timestep
    with mjviewer.launch_passive(plant.model, plant.data, key_callback=key_callback) as viewer:
        viewer.cam.distance = 6.0
        viewer.cam.elevation = -20.0
        viewer.cam.azimuth = 90.0

        while viewer.is_running() and plant.time < cfg.duration:
            step_start = time.time()
            with viewer.lock():
                while not events.empty():
                    handle(events.get())
                _tick(plant, controller, weights, log)
            viewer.sync()
            time.sleep(max(0.0, dt - (time.time() - step_start)))

    return log
