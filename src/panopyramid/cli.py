"""panopyramid command-line interface."""

from __future__ import annotations

import argparse
import json
import logging
from typing import List, Optional

from .config import DEFAULT_PYRAMID, PyramidConfig, load_config
from .diagnostics import format_level_table, level_table, level_table_dicts
from .logging_config import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Cube panorama tile pyramid tools")
    parser.add_argument("--config", dest="config_path", help="PyramidConfig JSON file")
    parser.add_argument("-v", "--verbose", action="count", default=0)
    sub = parser.add_subparsers(dest="command", required=True)

    levels = sub.add_parser("levels", help="Print the pyramid level table")
    levels.add_argument("--json", action="store_true")

    simulate = sub.add_parser("simulate", help="Run a headless zoom simulation")
    simulate.add_argument("--frames", type=int, default=60)
    simulate.add_argument("--fov-start", type=float, default=90.0)
    simulate.add_argument("--fov-end", type=float, default=10.0)
    simulate.add_argument("--yaw-per-frame", type=float, default=1.0)
    simulate.add_argument("--pitch", type=float, default=0.0)
    simulate.add_argument("--max-latency", type=int, default=3)
    simulate.add_argument("--fail-rate", type=float, default=0.0)
    simulate.add_argument("--seed", type=int, default=0)
    simulate.add_argument("--json", action="store_true")
    simulate.add_argument("--render-out", dest="render_path",
                          help="Save the final draw set as a cube-net PNG")

    return parser


def _load(args: argparse.Namespace) -> PyramidConfig:
    if args.config_path:
        return load_config(args.config_path)
    return DEFAULT_PYRAMID


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    setup_logging(level)

    try:
        config = _load(args)
    except (OSError, ValueError) as exc:
        print(f"Invalid config: {exc}")
        raise SystemExit(1)

    if args.command == "levels":
        rows = level_table(config)
        if args.json:
            print(json.dumps(level_table_dicts(rows), indent=2))
        else:
            print(format_level_table(rows))

    elif args.command == "simulate":
        _cmd_simulate(args, config)


def _cmd_simulate(args: argparse.Namespace, config: PyramidConfig) -> None:
    from .simulation import SimulationConfig, simulate

    try:
        sim = SimulationConfig(
            frames=args.frames,
            fov_start=args.fov_start,
            fov_end=args.fov_end,
            yaw_per_frame=args.yaw_per_frame,
            pitch=args.pitch,
            max_latency=args.max_latency,
            fail_rate=args.fail_rate,
            seed=args.seed,
        )
    except ValueError as exc:
        print(f"Invalid simulation: {exc}")
        raise SystemExit(1)

    holder = []
    rows = simulate(sim, config, renderer_out=holder)
    renderer = holder[0]

    if args.json:
        print(json.dumps(rows, indent=2))
    else:
        print(f"{'frame':>5} {'fov':>8} {'lvl':>3} {'vis':>5} {'ready':>5} "
              f"{'sub':>5} {'part':>5} {'miss':>5} {'req':>5} {'drawn':>5} {'cached':>6}")
        for row in rows:
            print(f"{row['frame']:>5} {row['fov']:>8.3f} {row['level']:>3} "
                  f"{row['visible']:>5} {row['ready']:>5} {row['substituted']:>5} "
                  f"{row['partial']:>5} {row['missing']:>5} {row['requested']:>5} "
                  f"{row['drawn']:>5} {row['cached']:>6}")

    if args.render_path:
        from .visualize import render_draw_set_png

        last = renderer.last_resolution
        render_draw_set_png(
            renderer.drawn.values(),
            args.render_path,
            candidates=last.candidates if last is not None else None,
            level_max=config.level_max,
            title=f"level {renderer.level}, fov {renderer.camera.fov:.2f}",
        )
        print(f"Saved {args.render_path}")

    renderer.destroy()
