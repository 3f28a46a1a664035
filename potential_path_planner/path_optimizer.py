#!/usr/bin/env python3
"""Gradient-descent relaxation of a seeded path away from obstacles.

Interior waypoints that sit in a high-potential region, or inside an
obstacle's unsafe radius (``radius + safety_margin``), are moved each
iteration until every interior point is safe or the iteration budget runs
out. The loop is bounded by ``max_iterations``; running out of budget is not
fatal, it triggers one radial correction pass and a warning.

The height channel of the waypoints is scratch space for the optimizer and is
reset to zero when it finishes.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

import numpy as np

from .config import OptimizerParams
from .models import Obstacle, ObstacleSnapshot, Path, PathPoint, snapshot_obstacles
from .potential_field import PotentialField, make_field

_LOGGER = logging.getLogger(__name__)


class OptimizerState(Enum):
    NOT_OPTIMIZED = "not_optimized"
    RELAXING = "relaxing"
    CONVERGED = "converged"
    EXHAUSTED = "exhausted"


@dataclass
class OptimizationResult:
    state: OptimizerState
    iterations: int
    unsafe_points: int = 0

    @property
    def converged(self) -> bool:
        return self.state is OptimizerState.CONVERGED


def clean_path(
    path: Path,
    step_distance: float,
    clean_ratio: float = 1.3,
    min_points: int = 3,
) -> Path:
    """Merge waypoints that have clumped together.

    An interior point closer than ``step_distance / clean_ratio`` to the
    previous point (or to the target) is dropped. The first and last points
    are never removed and the path never shrinks below ``min_points``.
    """
    threshold = step_distance / clean_ratio
    if threshold <= 0.0:
        return path

    pts = path.points
    floor = max(min_points, Path.MIN_POINTS)
    i = 1
    while i < len(pts) - 1 and len(pts) > floor:
        too_close = pts[i].distance_to(pts[i - 1]) < threshold
        if not too_close and i == len(pts) - 2:
            too_close = pts[i].distance_to(pts[-1]) < threshold
        if too_close:
            del pts[i]
        else:
            i += 1
    return path


class PathOptimizer:
    def __init__(
        self,
        params: Optional[OptimizerParams] = None,
        field: Optional[PotentialField] = None,
        logger=None,
    ):
        self.params = params or OptimizerParams()
        self.field = field or make_field()
        self.logger = logger or _LOGGER
        self.state = OptimizerState.NOT_OPTIMIZED
        self.last_result: Optional[OptimizationResult] = None

    def unsafe_radius(self, obstacle: Obstacle) -> float:
        return obstacle.radius + self.params.safety_margin

    def refresh_height(self, point: PathPoint, obstacles: ObstacleSnapshot) -> None:
        point.height = self.field.total_potential(obstacles, point)

    def refresh_heights(self, path: Path, obstacles: ObstacleSnapshot) -> None:
        for idx in path.interior_indices():
            self.refresh_height(path[idx], obstacles)

    def is_point_safe(self, point: PathPoint, obstacles: ObstacleSnapshot) -> bool:
        if point.height > self.params.optimization_threshold:
            return False
        return all(
            obstacle.distance_to(point.x, point.y) >= self.unsafe_radius(obstacle)
            for obstacle in obstacles
        )

    def is_path_optimized(self, path: Path, obstacles: ObstacleSnapshot) -> bool:
        return all(self.is_point_safe(path[idx], obstacles) for idx in path.interior_indices())

    def count_unsafe(self, path: Path, obstacles: ObstacleSnapshot) -> int:
        return sum(1 for idx in path.interior_indices() if not self.is_point_safe(path[idx], obstacles))

    def _away_from(self, path: Path, idx: int, obstacle: Obstacle) -> np.ndarray:
        point = path[idx]
        offset = point.xy() - obstacle.center.xy()
        norm = float(np.linalg.norm(offset))
        if norm > self.field.center_eps:
            return offset / norm

        # Sitting on the center: step sideways relative to the local path direction.
        tangent = path[idx + 1].xy() - path[idx - 1].xy()
        t_norm = float(np.linalg.norm(tangent))
        if t_norm <= 1e-12:
            return np.array([0.0, 1.0])
        return np.array([-tangent[1], tangent[0]]) / t_norm

    def _displacement(self, path: Path, idx: int, obstacles: ObstacleSnapshot) -> np.ndarray:
        point = path[idx]
        push = np.zeros(2, dtype=float)
        inside = False
        for obstacle in obstacles:
            if obstacle.distance_to(point.x, point.y) < self.unsafe_radius(obstacle):
                inside = True
                push += self._away_from(path, idx, obstacle) * self.params.unsafe_push_step
        if inside:
            return push
        return self.field.descent(obstacles, point)

    def _clamp_small(self, step: np.ndarray) -> np.ndarray:
        floor = self.params.min_adjust_rate
        if abs(step[0]) < floor and abs(step[1]) < floor:
            if step[0] != 0.0:
                step[0] = math.copysign(floor, step[0])
            if step[1] != 0.0:
                step[1] = math.copysign(floor, step[1])
        return step

    def relax_once(self, path: Path, obstacles: ObstacleSnapshot) -> bool:
        """Move every failing interior point once. Returns True if none needed to move."""
        all_safe = True
        for idx in path.interior_indices():
            point = path[idx]
            if self.is_point_safe(point, obstacles):
                continue
            all_safe = False
            step = self._clamp_small(self._displacement(path, idx, obstacles))
            point.move_by(float(step[0]), float(step[1]))
            self.refresh_height(point, obstacles)
        return all_safe

    def _fallback_correction(self, path: Path, obstacles: ObstacleSnapshot) -> int:
        pushed = 0
        for idx in path.interior_indices():
            point = path[idx]
            if self.is_point_safe(point, obstacles):
                continue
            nearest = min(obstacles, key=lambda o: o.distance_to(point.x, point.y))
            step = self._away_from(path, idx, nearest) * self.params.fallback_push_fraction
            point.move_by(float(step[0]), float(step[1]))
            self.refresh_height(point, obstacles)
            pushed += 1
        return pushed

    def optimize(self, path: Path, obstacles: Optional[Iterable[Obstacle]] = None) -> Path:
        snapshot = snapshot_obstacles(obstacles)
        if len(path) <= 2:
            self.state = OptimizerState.CONVERGED
            self.last_result = OptimizationResult(self.state, 0)
            return path

        reference_step = path.reference_step()
        self.refresh_heights(path, snapshot)
        self.state = OptimizerState.RELAXING

        iterations = 0
        while not self.is_path_optimized(path, snapshot) and iterations < self.params.max_iterations:
            iterations += 1
            self.relax_once(path, snapshot)
            clean_path(path, reference_step, self.params.clean_ratio, self.params.min_path_points)

        if self.is_path_optimized(path, snapshot):
            self.state = OptimizerState.CONVERGED
            self.last_result = OptimizationResult(self.state, iterations)
            self.logger.info(f"✅ Path optimized in {iterations} iterations ({len(path)} points)")
        else:
            self.state = OptimizerState.EXHAUSTED
            pushed = self._fallback_correction(path, snapshot)
            remaining = self.count_unsafe(path, snapshot)
            self.last_result = OptimizationResult(self.state, iterations, remaining)
            self.logger.warning(
                f"⚠️ Path did not converge after {iterations} iterations; "
                f"pushed {pushed} point(s) off their nearest obstacle, {remaining} still unsafe"
            )

        path.reset_heights()
        return path


def optimize_path(
    path: Path,
    obstacles: Optional[Iterable[Obstacle]] = None,
    params: Optional[OptimizerParams] = None,
    field: Optional[PotentialField] = None,
    logger=None,
) -> Path:
    return PathOptimizer(params, field, logger).optimize(path, obstacles)
