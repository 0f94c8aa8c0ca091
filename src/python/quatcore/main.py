#!/usr/bin/env python3
"""
===============================================================================
QUATCORE - COMMAND-LINE ENTRY POINT
===============================================================================
Small calculator over the quaternion algebra.

USAGE:
    quatcore compose 0,0,0.7071068,0.7071068 1,0,0,0
    quatcore axis-angle --axis 0,1,0 --angle 60 --degrees
    quatcore between 1,0,0 0,1,0
    quatcore extract 0,0,0.7071068,0.7071068
    quatcore slerp 0,0,0,1 0,0,1,0 --steps 5 --csv path.csv --plot path.png
    quatcore benchmark --runs 20

Quaternions are written x,y,z,w and vectors x,y,z. Angles are radians
unless --degrees is given.

OPTIONS:
    --config FILE   YAML settings (see config/quatcore.yaml)
    --verbose       DEBUG logging
===============================================================================
"""

import argparse
import logging
import sys
from typing import List, Optional

import numpy as np

from quatcore.benchmarks import Benchmark
from quatcore.config import QuatConfig, load_config
from quatcore.constants import DEG2RAD, RAD2DEG
from quatcore.interpolation import SlerpPath
from quatcore.quaternion import Quaternion
from quatcore.visualization import plot_slerp_path
from quatcore import vector

logger = logging.getLogger('QUATCORE_MAIN')


# ---------------------------------------------------------------------------
# Argument parsing helpers
# ---------------------------------------------------------------------------

def _floats(text: str, count: int, kind: str) -> List[float]:
    parts = [p for p in text.replace(' ', '').split(',') if p]
    if len(parts) != count:
        raise argparse.ArgumentTypeError(
            f"{kind} needs {count} comma-separated numbers, got {text!r}"
        )
    try:
        return [float(p) for p in parts]
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid {kind} {text!r}") from None


def parse_quaternion(text: str) -> Quaternion:
    """Parse 'x,y,z,w' into a Quaternion."""
    return Quaternion(*_floats(text, 4, 'quaternion'))


def parse_vector(text: str) -> np.ndarray:
    """Parse 'x,y,z' into a 3-element array."""
    return np.array(_floats(text, 3, 'vector'))


def positive_int(text: str) -> int:
    """Parse a count that must be at least 1."""
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid count {text!r}") from None
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return value


def format_quaternion(q: Quaternion, precision: int) -> str:
    return ', '.join(f"{c:.{precision}f}" for c in q)


def format_vector(v, precision: int) -> str:
    return ', '.join(f"{c:.{precision}f}" for c in v)


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------

def cmd_compose(args, config: QuatConfig) -> int:
    result = args.q1 * args.q2
    print(format_quaternion(result, config.precision))
    return 0


def cmd_axis_angle(args, config: QuatConfig) -> int:
    angle = args.angle * DEG2RAD if args.degrees else args.angle
    axis = vector.normalize(args.axis)
    if not np.all(np.isfinite(axis)):
        logger.error("Rotation axis must be non-zero")
        return 1
    q = Quaternion.from_axis_angle(axis, angle)
    print(format_quaternion(q, config.precision))
    return 0


def cmd_between(args, config: QuatConfig) -> int:
    src = vector.normalize(args.src)
    des = vector.normalize(args.des)
    if not (np.all(np.isfinite(src)) and np.all(np.isfinite(des))):
        logger.error("Source and destination vectors must be non-zero")
        return 1
    q = Quaternion.from_vectors(src, des)
    print(format_quaternion(q, config.precision))
    return 0


def cmd_extract(args, config: QuatConfig) -> int:
    q = args.q
    if not q.is_unit(config.epsilon):
        logger.warning("Input is not a unit quaternion (|q| = %.6f); normalizing",
                       q.magnitude())
        q.normalize()
    axis, angle = q.to_axis_angle()
    if args.degrees:
        angle *= RAD2DEG
    print(f"axis: {format_vector(axis, config.precision)}")
    print(f"angle: {angle:.{config.precision}f}")
    return 0


def cmd_slerp(args, config: QuatConfig) -> int:
    steps = args.steps if args.steps is not None else config.samples
    if steps < 2:
        logger.error("--steps must be at least 2")
        return 1

    path = SlerpPath(args.q1.normalized(), args.q2.normalized(),
                     threshold=config.slerp_threshold)
    logger.info("Interpolating over %.2f deg in %d steps",
                np.degrees(path.angular_distance), steps)

    df = path.to_dataframe(steps)
    print(df.to_string(index=False, float_format=lambda v: f"{v:.{config.precision}f}"))

    if args.csv:
        df.to_csv(args.csv, index=False)
        logger.info("Saved samples to %s", args.csv)
    if args.plot:
        plot_slerp_path(path, args.plot, samples=max(steps, 50))
        logger.info("Saved plot to %s", args.plot)
    return 0


def cmd_benchmark(args, config: QuatConfig) -> int:
    logger.info("Running benchmarks (%d runs each)...", args.runs)
    results = Benchmark.run_all_benchmarks(num_runs=args.runs)
    print(results.to_string())
    return 0


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='quatcore',
        description='Quaternion rotation calculator',
    )
    parser.add_argument('--config', help='YAML settings file')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='enable DEBUG logging')
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('compose', help='Hamilton product Q1 * Q2')
    p.add_argument('q1', type=parse_quaternion)
    p.add_argument('q2', type=parse_quaternion)
    p.set_defaults(func=cmd_compose)

    p = sub.add_parser('axis-angle', help='rotation about an axis')
    p.add_argument('--axis', type=parse_vector, required=True)
    p.add_argument('--angle', type=float, required=True)
    p.add_argument('--degrees', action='store_true')
    p.set_defaults(func=cmd_axis_angle)

    p = sub.add_parser('between', help='shortest-arc rotation SRC -> DES')
    p.add_argument('src', type=parse_vector)
    p.add_argument('des', type=parse_vector)
    p.set_defaults(func=cmd_between)

    p = sub.add_parser('extract', help='axis and angle of a rotation')
    p.add_argument('q', type=parse_quaternion)
    p.add_argument('--degrees', action='store_true')
    p.set_defaults(func=cmd_extract)

    p = sub.add_parser('slerp', help='sample the SLERP path Q1 -> Q2')
    p.add_argument('q1', type=parse_quaternion)
    p.add_argument('q2', type=parse_quaternion)
    p.add_argument('--steps', type=int, default=None)
    p.add_argument('--csv', help='write samples to a CSV file')
    p.add_argument('--plot', help='write a plot of the path')
    p.set_defaults(func=cmd_slerp)

    p = sub.add_parser('benchmark', help='time the interpolation hot paths')
    p.add_argument('--runs', type=positive_int, default=20)
    p.set_defaults(func=cmd_benchmark)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as exc:
        parser.error(str(exc))

    level = logging.DEBUG if args.verbose else getattr(logging, config.log_level)
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        stream=sys.stderr,
    )
    logging.getLogger().setLevel(level)

    return args.func(args, config)


if __name__ == '__main__':
    sys.exit(main())
