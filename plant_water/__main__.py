#!/usr/bin/env python3
"""
Command line simulation of water transport in a plant.

Usage:
    python -m plant_water plant.graph --loss-rate 0.3 --duration 5 --output result.json
"""

import argparse
import logging
import sys

from .config import SimulationConfig, load_config
from .core.errors import PlantWaterError
from .api.simulate import run_simulation, save_result
from .logging_config import setup_logging


def _dead_edge(text: str):
    try:
        i, j = (int(v) for v in text.split(","))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected 'I,J', got {text!r}")
    return (i, j)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="plant_water",
        description="Simulate water transport through a plant vascular graph",
    )
    parser.add_argument("graph", help="Graph text file (verts/edges format) or JSON snapshot")
    parser.add_argument("--config", help="JSON configuration file")
    parser.add_argument("--loss-rate", type=float, help="Loss rate of leaf segments")
    parser.add_argument("--initial-water", type=float, help="Total initial water")
    parser.add_argument("--time-step", type=float, help="Evaluation time step")
    parser.add_argument("--duration", type=float, help="Simulated time span")
    parser.add_argument(
        "--spectral",
        action="store_true",
        help="Use the eigendecomposition instead of BDF6 stepping",
    )
    parser.add_argument(
        "--dead-edge",
        type=_dead_edge,
        action="append",
        default=None,
        metavar="I,J",
        help="Connection that blocks water flow (repeatable)",
    )
    parser.add_argument("--output", help="Write the result to this JSON file")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    parser.add_argument("--log-file", help="Also write logs to this file")
    return parser


def config_from_args(args: argparse.Namespace) -> SimulationConfig:
    """Merge the optional config file with command line overrides."""
    base = load_config(args.config) if args.config else SimulationConfig()
    values = base.to_dict()
    overrides = {
        "loss_rate": args.loss_rate,
        "initial_water": args.initial_water,
        "time_step": args.time_step,
        "duration": args.duration,
        "dead_edges": args.dead_edge,
    }
    values.update({k: v for k, v in overrides.items() if v is not None})
    if args.spectral:
        values["spectral"] = True
    return SimulationConfig.from_dict(values)


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(getattr(logging, args.log_level), args.log_file)

    try:
        config = config_from_args(args)
    except (PlantWaterError, OSError) as e:
        parser.error(str(e))

    result = run_simulation(args.graph, config)

    if args.output:
        save_result(result, args.output)

    if result.is_failure():
        print(f"Simulation failed: {result.message}", file=sys.stderr)
        return 1

    meta = result.metadata
    print(result.message)
    print(f"  initial water: {meta['total_water'][0]:.6g}")
    print(f"  final water:   {meta['total_water'][-1]:.6g}")
    for warning in result.warnings:
        print(f"  warning: {warning}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
