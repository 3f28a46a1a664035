#!/usr/bin/env python3
"""Path generation: straight-line seeding followed by relaxation and pruning.

The generator ties the stages together::

    seed_path -> clean_path -> PathOptimizer.optimize -> prune_path

The returned path always starts at ``start`` and ends exactly at ``target``.
"""

from __future__ import annotations

import logging
import math
import numbers
from typing import Iterable, Optional

from .config import PlannerConfig
from .geometry import Position
from .models import Obstacle, Path, PathPoint, snapshot_obstacles
from .path_optimizer import PathOptimizer, clean_path
from .path_pruner import prune_path
from .potential_field import PotentialField, make_field
from .spline_utils import CatmullRomSpline

_LOGGER = logging.getLogger(__name__)


def _check_segment_count(segment_count) -> int:
    if isinstance(segment_count, bool) or not isinstance(segment_count, numbers.Integral):
        raise ValueError(f"segment_count must be a positive integer, got {segment_count!r}")
    if segment_count < 1:
        raise ValueError(f"segment_count must be a positive integer, got {segment_count!r}")
    return int(segment_count)


def _check_position(name: str, position: Position) -> None:
    if not (math.isfinite(position.x) and math.isfinite(position.y)):
        raise ValueError(f"{name} must have finite coordinates, got {position!r}")


def seed_path(
    start: Position,
    target: Position,
    segment_count: int,
    obstacles: Iterable[Obstacle] = (),
    field: Optional[PotentialField] = None,
) -> Path:
    """Evenly spaced straight line from ``start`` to ``target``, heights filled in."""
    segment_count = _check_segment_count(segment_count)
    field = field or make_field()
    snapshot = snapshot_obstacles(obstacles)

    dx = (target.x - start.x) / segment_count
    dy = (target.y - start.y) / segment_count

    points = [PathPoint(start.x, start.y)]
    for i in range(1, segment_count):
        p = PathPoint(start.x + i * dx, start.y + i * dy)
        p.height = field.total_potential(snapshot, p)
        points.append(p)
    points.append(PathPoint(target.x, target.y))

    return Path(points, step_distance=math.hypot(dx, dy))


class PotentialPathPlanner:
    """Plans a path around circular obstacles and wraps it in a spline.

    One planner can be reused across calls; each call takes its own obstacle
    snapshot and returns a fresh path.
    """

    def __init__(self, config: Optional[PlannerConfig] = None, logger=None):
        self.config = config or PlannerConfig()
        self.logger = logger or _LOGGER
        self.field = make_field(self.config.field)
        self.optimizer = PathOptimizer(self.config.optimizer, self.field, self.logger)

    def generate_path(
        self,
        start: Position,
        target: Position,
        obstacles: Iterable[Obstacle] = (),
        segment_count: Optional[int] = None,
    ) -> Path:
        if segment_count is None:
            segment_count = self.config.segment_count
        segment_count = _check_segment_count(segment_count)
        _check_position("start", start)
        _check_position("target", target)
        snapshot = snapshot_obstacles(obstacles)
        params = self.config.optimizer

        path = seed_path(start, target, segment_count, snapshot, self.field)
        step_distance = path.reference_step()
        clean_path(path, step_distance, params.clean_ratio, params.min_path_points)

        self.optimizer.optimize(path, snapshot)
        prune_path(path, step_distance, self.config.pruner, params.min_path_points, self.logger)

        self.logger.info(
            f"✅ Path: {len(path)} pts, {path.length():.2f} long, "
            f"{len(snapshot)} obstacle(s), optimizer {self.optimizer.state.value}"
        )
        return path

    def plan(
        self,
        start: Position,
        target: Position,
        obstacles: Iterable[Obstacle] = (),
        segment_count: Optional[int] = None,
    ):
        """Generate a path and the spline that follows it."""
        path = self.generate_path(start, target, obstacles, segment_count)
        return path, CatmullRomSpline(path)


def generate_path(
    start: Position,
    target: Position,
    segment_count: int,
    obstacles: Iterable[Obstacle] = (),
    config: Optional[PlannerConfig] = None,
    logger=None,
) -> Path:
    return PotentialPathPlanner(config, logger).generate_path(start, target, obstacles, segment_count)
