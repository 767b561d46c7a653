"""Entry point for the headless cloth simulation."""
from __future__ import annotations

import argparse
import logging
import time
from typing import Optional, Sequence

import numpy as np

from cloth_config import SimulationConfig, parse_vector
from cloth_logging import setup_logging
from mesh3d import Pinning

logger = logging.getLogger(__name__)


def _vector_arg(text: str) -> np.ndarray:
    try:
        return parse_vector(text)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    defaults = SimulationConfig()
    parser = argparse.ArgumentParser(description="Mass-spring cloth simulation")
    parser.add_argument("--size", type=float, default=defaults.side_length, help="Side length of the square cloth")
    parser.add_argument("--density", type=int, default=defaults.density, help="Number of subdivisions per side")
    parser.add_argument("--mass", type=float, default=defaults.mass, help="Total mass of the cloth")
    parser.add_argument("--stiffness", type=float, default=defaults.stiffness, help="Spring constant")
    parser.add_argument("--damping", type=float, default=defaults.damping, help="Spring damping")
    parser.add_argument(
        "--max-deformation",
        type=float,
        default=defaults.max_deformation,
        help="Maximum spring length as a multiple of its resting length (>=1.0)",
    )
    parser.add_argument(
        "--pinning",
        choices=[policy.value for policy in Pinning],
        default=defaults.pinning.value,
        help="Which nodes hold the cloth up",
    )
    parser.add_argument("--no-flexion", action="store_true", help="Leave out the bending springs")
    parser.add_argument(
        "--gravity",
        type=_vector_arg,
        default=defaults.gravity,
        help="Constant force on every node, as x,y,z",
    )
    parser.add_argument("--wind", type=_vector_arg, default=defaults.wind, help="Wind velocity, as x,y,z")
    parser.add_argument("--wind-coefficient", type=float, default=defaults.wind_coefficient)
    parser.add_argument("--dt", type=float, default=defaults.dt, help="Physics time step in seconds")
    parser.add_argument(
        "--max-frame-time",
        type=float,
        default=defaults.max_frame_time,
        help="Longest frame the driver accepts before clamping, in seconds",
    )
    parser.add_argument("--frames", type=int, default=defaults.frames, help="Number of frames to run")
    parser.add_argument("--frame-time", type=float, default=defaults.frame_time, help="Nominal frame time in seconds")
    parser.add_argument(
        "--jitter",
        type=float,
        default=defaults.jitter,
        help="Relative random variation of the frame time",
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for the frame time jitter")
    parser.add_argument(
        "--realtime",
        action="store_true",
        help="Drive the simulation with the wall clock instead of synthetic frame times",
    )
    parser.add_argument(
        "--log-level",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        default="INFO",
    )
    parser.add_argument("--log-file", default=None, help="Also write the log to this file")
    parser.add_argument("--report-every", type=int, default=60, help="Frames between progress lines")
    return parser


def config_from_args(args: argparse.Namespace) -> SimulationConfig:
    return SimulationConfig(
        side_length=args.size,
        density=args.density,
        mass=args.mass,
        stiffness=args.stiffness,
        damping=args.damping,
        max_deformation=args.max_deformation,
        pinning=Pinning(args.pinning),
        flexion=not args.no_flexion,
        gravity=args.gravity,
        wind=args.wind,
        wind_coefficient=args.wind_coefficient,
        dt=args.dt,
        max_frame_time=args.max_frame_time,
        frames=args.frames,
        frame_time=args.frame_time,
        jitter=args.jitter,
    )


def run(config: SimulationConfig, *, realtime: bool = False, seed: Optional[int] = None, report_every: int = 60) -> dict:
    """Runs the configured number of frames and returns a summary."""

    cloth = config.build_cloth()
    driver = config.build_driver(cloth)
    rng = np.random.default_rng(seed)

    if realtime:
        driver.tick()

    for frame in range(1, config.frames + 1):
        if realtime:
            time.sleep(config.frame_time)
            driver.tick()
        else:
            scale = 1.0 + config.jitter * rng.uniform(-1.0, 1.0)
            driver.advance(config.frame_time * scale)

        if report_every > 0 and frame % report_every == 0:
            logger.info(
                "frame %d: t=%.3fs steps=%d kinetic=%.4g max strain=%.4f",
                frame,
                driver.simulated_time,
                driver.total_steps,
                cloth.kinetic_energy(),
                cloth.max_strain(),
            )

    summary = {
        "frames": config.frames,
        "steps": driver.total_steps,
        "simulated_time": driver.simulated_time,
        "kinetic_energy": cloth.kinetic_energy(),
        "elastic_energy": cloth.elastic_energy(),
        "max_strain": cloth.max_strain(),
        "lowest_point": float(cloth.positions()[:, 1].min()),
    }
    logger.info(
        "Finished %d frames (%d steps, %.3fs simulated): kinetic=%.4g elastic=%.4g max strain=%.4f",
        summary["frames"],
        summary["steps"],
        summary["simulated_time"],
        summary["kinetic_energy"],
        summary["elastic_energy"],
        summary["max_strain"],
    )
    return summary


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(getattr(logging, args.log_level), args.log_file)

    try:
        config = config_from_args(args)
        run(config, realtime=args.realtime, seed=args.seed, report_every=args.report_every)
    except ValueError as exc:
        parser.error(str(exc))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
