#!/usr/bin/env python3
"""Headless plan-and-follow loop.

Plans a path, then ticks the follower at a fixed ``dt`` and integrates the
robot position until it reaches the end of the curve, the way a render loop
would drive it. Also available as the ``potential-planner-sim`` command::

    potential-planner-sim --start 2 2 --target 14 6 --obstacle 8 4 1.0
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

import numpy as np

from .accuracy_utils import AccuracyCalculator
from .config import PlannerConfig, load_config
from .geometry import Position
from .models import Obstacle, Path, RobotState, snapshot_obstacles
from .path_follower import PathFollower
from .path_generator import PotentialPathPlanner
from .path_optimizer import OptimizerState
from .path_recorder import PathRecorder
from .spline_utils import CatmullRomSpline, compute_path_curvature

_LOGGER = logging.getLogger(__name__)

ROBOT_INITIAL_POSITION = Position(2.0, 2.0)
TARGET_INITIAL_POSITION = Position(5.0, 5.0)


@dataclass
class SimulationResult:
    path: Path
    curve: CatmullRomSpline
    trace: np.ndarray
    final_position: Position
    ticks: int
    elapsed: float
    arrived: bool
    accuracy: float
    max_curvature: float
    optimizer_state: OptimizerState


def run_simulation(
    start: Position,
    target: Position,
    obstacles: Iterable[Obstacle] = (),
    config: Optional[PlannerConfig] = None,
    dt: float = 0.01,
    max_time: float = 120.0,
    logger=None,
) -> SimulationResult:
    config = config or PlannerConfig()
    logger = logger or _LOGGER
    if dt <= 0.0:
        raise ValueError(f"dt must be > 0, got {dt!r}")
    snapshot = snapshot_obstacles(obstacles)

    planner = PotentialPathPlanner(config, logger)
    path, curve = planner.plan(start, target, snapshot)

    state = RobotState(position=start, target_speed=config.target_speed)
    state.start_following(curve)
    follower = PathFollower(config.follower, logger)
    recorder = PathRecorder()
    recorder.record(state.position)

    max_ticks = int(max_time / dt)
    ticks = 0
    while state.following_path and ticks < max_ticks:
        follower.tick(state, dt)
        recorder.record(state.position)
        ticks += 1

    arrived = not state.following_path and state.path_progress >= 1.0
    if not arrived:
        logger.warning(f"⚠️ Stopped after {ticks} ticks at progress {state.path_progress:.3f}")

    recorder.record(state.position)
    trace = recorder.get_path()
    return SimulationResult(
        path=path,
        curve=curve,
        trace=trace,
        final_position=state.position,
        ticks=ticks,
        elapsed=ticks * dt,
        arrived=arrived,
        accuracy=AccuracyCalculator.calculate_accuracy(trace, curve),
        max_curvature=float(np.max(compute_path_curvature(curve.sample(200)))),
        optimizer_state=planner.optimizer.state,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="potential-planner-sim",
        description="Plan around circular obstacles and follow the smoothed path.",
    )
    parser.add_argument("--start", nargs=2, type=float, metavar=("X", "Y"),
                        default=[ROBOT_INITIAL_POSITION.x, ROBOT_INITIAL_POSITION.y])
    parser.add_argument("--target", nargs=2, type=float, metavar=("X", "Y"),
                        default=[TARGET_INITIAL_POSITION.x, TARGET_INITIAL_POSITION.y])
    parser.add_argument("--obstacle", nargs=3, type=float, action="append", default=[],
                        metavar=("X", "Y", "R"), help="circular obstacle, may be repeated")
    parser.add_argument("--segments", type=int, help="override segment_count")
    parser.add_argument("--speed", type=float, help="override target_speed")
    parser.add_argument("--config", help="JSON planner config")
    parser.add_argument("--dt", type=float, default=0.01)
    parser.add_argument("--max-time", type=float, default=120.0)
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def _obstacles_from_args(specs: Sequence[Sequence[float]]) -> List[Obstacle]:
    return [Obstacle.at(x, y, r) for x, y, r in specs]


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    config = load_config(args.config) if args.config else PlannerConfig()
    if args.segments is not None:
        config.segment_count = args.segments
    if args.speed is not None:
        config.target_speed = args.speed
    # re-validate overrides
    config = PlannerConfig.from_dict(config.to_dict())

    result = run_simulation(
        Position.from_xy(args.start),
        Position.from_xy(args.target),
        _obstacles_from_args(args.obstacle),
        config=config,
        dt=args.dt,
        max_time=args.max_time,
    )

    print(f"\n📍 Planned path: {len(result.path)} waypoints, {result.path.length():.2f} long "
          f"(optimizer {result.optimizer_state.value})")
    print(f"  - Curve length: {result.curve.length():.2f}, max curvature {result.max_curvature:.3f}")
    print(f"  - {'Arrived' if result.arrived else 'Did not arrive'} after {result.elapsed:.2f}s "
          f"({result.ticks} ticks)")
    print(f"  - Final position: ({result.final_position.x:.3f}, {result.final_position.y:.3f})")
    print(f"  - Tracking accuracy: {result.accuracy:.2f}%\n")
    return 0 if result.arrived else 1


if __name__ == "__main__":
    raise SystemExit(main())
