"""
MuJoCo simulation of the platform pendulum under online LQR synthesis.
Synthesizes the initial gain from the loaded scene, then runs the tick loop
either in the passive viewer or headless.
"""

from __future__ import annotations

import os
import sys
import time
from pathlib import Path

# Add parent directory to path for imports
sys.path.append(str(Path(__file__).resolve().parents[1]))

import numpy as np

from controller.lqr_controller import LQRController
from env.mujoco_plant import DEFAULT_MODEL_XML, MujocoPlant
from lib.config import WeightConfig, load_config
from lib.cost_functions import compute_trajectory_cost
from lib.log import set_file_handler, set_log_level, set_stream_handler
from lib.visualizer import plot_run
from scripts.mujoco_core import SimConfig, run_headless, run_interactive


def build(config: dict, base_dir: str | None = None) -> tuple[MujocoPlant, LQRController, WeightConfig, SimConfig]:
    """Create plant, weights, controller and run settings from a config dict."""
    plant_cfg = config.get("plant", {})
    synth_cfg = config.get("synthesis", {})

    model_xml = plant_cfg.get("model_xml", DEFAULT_MODEL_XML)
    if base_dir is not None and not os.path.isabs(model_xml):
        model_xml = os.path.join(base_dir, model_xml)

    plant = MujocoPlant.from_xml_path(
        model_xml,
        axes=tuple(plant_cfg.get("axes", ("x", "y"))),
        timestep=plant_cfg.get("timestep"),
    )
    weights = WeightConfig.from_dict(config.get("weights"))
    sim = SimConfig.from_dict(config.get("simulation"))

    t0 = time.perf_counter()
    controller = LQRController.from_plant(
        plant,
        weights,
        eps=float(synth_cfg.get("eps", 1e-6)),
        method=synth_cfg.get("method", "hamiltonian"),
        scheme=synth_cfg.get("scheme", "forward"),
    )
    t1 = time.perf_counter()
    status = "failed" if controller.synthesis_failed else "finished"
    print(f"[INFO] Initial synthesis {status} in {(t1 - t0) * 1e3:.2f} ms (n={plant.n_state}, m={plant.n_control})")
    return plant, controller, weights, sim


def main(config_path: str | None = None,
         mode: str = "interactive",
         duration: float | None = None,
         out_plot: str | None = "lqr_mujoco.png") -> None:
    """Load config, synthesize, run, plot."""
    config_path = config_path or os.environ.get("CONFIG_PATH", "config.yaml")
    config = load_config(config_path)

    log_cfg = config.get("logging", {})
    set_stream_handler()
    set_log_level(log_cfg.get("level", "INFO"))
    if log_cfg.get("file"):
        set_file_handler(log_cfg["file"])

    plant, controller, weights, sim = build(config, os.path.dirname(os.path.abspath(config_path)))
    if duration is not None:
        sim.duration = float(duration)

    print(f"[INFO] Starting MuJoCo {mode} run for {sim.duration:.1f} s...")
    if mode == "headless":
        log = run_headless(plant, controller, weights, sim)
    else:
        log = run_interactive(plant, controller, weights, sim)

    ts, states, controls = log.arrays()
    if len(ts) == 0:
        return

    Q, R = weights.matrices(plant.n_axes)
    cost = compute_trajectory_cost(states, controls, Q, R, plant.timestep)
    print(f"[INFO] Run cost: {cost:.3f}, final state: {np.array2string(states[-1], precision=4)}")
    if out_plot:
        plot_run(ts, states, controls, axes=plant.axes, save_path=out_plot, show_plot=(mode != "headless"))


if __name__ == "__main__":
    main()
