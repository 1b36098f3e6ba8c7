"""
Command-Line Runner for Platform Pendulum Simulations

Single entry point for running the online LQR controller on the MuJoCo
platform pendulum with a YAML configuration.
"""

import argparse
import os

from scripts.lqr_mujoco import main as run_lqr


def main() -> None:
    """Main entry point for the platform pendulum runner."""
    parser = argparse.ArgumentParser(
        description="Platform pendulum LQR simulation runner",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run_simulation.py
  python run_simulation.py --mode headless --duration 10
  python run_simulation.py --config custom_config.yaml --no-plot
        """
    )

    parser.add_argument(
        "--mode",
        choices=["interactive", "headless"],
        default="interactive",
        help="Run in the MuJoCo viewer or without one (default: interactive)"
    )

    parser.add_argument(
        "--config",
        default="config.yaml",
        help="Path to YAML configuration file (default: config.yaml)"
    )

    parser.add_argument(
        "--duration",
        type=float,
        default=None,
        help="Override simulation duration in seconds"
    )

    parser.add_argument(
        "--plot",
        default="lqr_mujoco.png",
        help="Plot file name inside results/ (default: lqr_mujoco.png)"
    )

    parser.add_argument(
        "--no-plot",
        action="store_true",
        help="Skip plotting the run"
    )

    args = parser.parse_args()

    config_path = os.path.abspath(args.config)
    run_lqr(
        config_path,
        mode=args.mode,
        duration=args.duration,
        out_plot=None if args.no_plot else args.plot,
    )


if __name__ == "__main__":
    main()
