#!/usr/bin/env python3
"""Plain data records used by the planner: obstacles, waypoints, paths, robot state."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .geometry import Position

if TYPE_CHECKING:
    from .spline_utils import CatmullRomSpline

DEFAULT_ROBOT_RADIUS = 0.5
DEFAULT_BUFFER_RADIUS = 0.2


@dataclass(frozen=True)
class Obstacle:
    """Circular obstacle. Frozen so a tuple of obstacles is a safe snapshot."""

    center: Position
    radius: float
    robot_radius: float = DEFAULT_ROBOT_RADIUS
    buffer_radius: float = DEFAULT_BUFFER_RADIUS

    def __post_init__(self) -> None:
        for name in ("radius", "robot_radius", "buffer_radius"):
            value = getattr(self, name)
            if not math.isfinite(value) or value < 0.0:
                raise ValueError(f"Obstacle {name} must be a finite value >= 0, got {value!r}")

    @classmethod
    def at(cls, x: float, y: float, radius: float, **kwargs) -> "Obstacle":
        return cls(Position(float(x), float(y)), float(radius), **kwargs)

    @property
    def calculation_radius(self) -> float:
        return self.radius + self.robot_radius + self.buffer_radius

    @property
    def field_scale(self) -> float:
        return self.calculation_radius * math.pi

    def distance_to(self, x: float, y: float) -> float:
        return math.hypot(x - self.center.x, y - self.center.y)


ObstacleSnapshot = Tuple[Obstacle, ...]


def snapshot_obstacles(obstacles: Optional[Iterable[Obstacle]]) -> ObstacleSnapshot:
    """Freeze the caller's obstacle collection for the duration of one call."""
    if obstacles is None:
        return ()
    if isinstance(obstacles, tuple):
        return obstacles
    return tuple(obstacles)


@dataclass
class PathPoint:
    x: float
    y: float
    height: float = 0.0

    @classmethod
    def from_position(cls, position: Position) -> "PathPoint":
        return cls(float(position.x), float(position.y), float(position.z))

    @property
    def position(self) -> Position:
        return Position(self.x, self.y, self.height)

    def xy(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=float)

    def move_by(self, dx: float, dy: float) -> None:
        self.x += dx
        self.y += dy

    def distance_to(self, other: "PathPoint") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)


class Path:
    """Ordered waypoints from the robot position to the target.

    ``step_distance`` is the spacing the path was seeded with; cleaning and
    pruning use it as their length scale.
    """

    MIN_POINTS = 2

    def __init__(self, points: Iterable[PathPoint], step_distance: Optional[float] = None):
        self.points: List[PathPoint] = list(points)
        if len(self.points) < self.MIN_POINTS:
            raise ValueError(f"A path needs at least {self.MIN_POINTS} points, got {len(self.points)}")
        self.step_distance = step_distance

    @classmethod
    def from_xy(cls, xy: Sequence[Sequence[float]], step_distance: Optional[float] = None) -> "Path":
        return cls((PathPoint(float(p[0]), float(p[1])) for p in xy), step_distance)

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[PathPoint]:
        return iter(self.points)

    def __getitem__(self, idx):
        return self.points[idx]

    @property
    def start(self) -> PathPoint:
        return self.points[0]

    @property
    def end(self) -> PathPoint:
        return self.points[-1]

    def interior_indices(self) -> range:
        return range(1, len(self.points) - 1)

    def positions(self) -> List[Position]:
        return [p.position for p in self.points]

    def as_array(self, with_height: bool = False) -> np.ndarray:
        if with_height:
            return np.array([[p.x, p.y, p.height] for p in self.points], dtype=float)
        return np.array([[p.x, p.y] for p in self.points], dtype=float)

    def segments(self) -> List[Tuple[Position, Position]]:
        """Consecutive waypoint pairs, for drawing the path as line segments."""
        pos = self.positions()
        return list(zip(pos[:-1], pos[1:]))

    def length(self) -> float:
        pts = self.as_array()
        return float(np.sum(np.linalg.norm(np.diff(pts, axis=0), axis=1)))

    def reference_step(self) -> float:
        if self.step_distance is not None and self.step_distance > 0.0:
            return self.step_distance
        return self.points[0].distance_to(self.points[1])

    def reset_heights(self) -> None:
        for idx in self.interior_indices():
            self.points[idx].height = 0.0

    def copy(self) -> "Path":
        return Path((PathPoint(p.x, p.y, p.height) for p in self.points), self.step_distance)

    def __repr__(self) -> str:
        return f"Path({len(self.points)} points, length={self.length():.3f})"


@dataclass
class RobotState:
    position: Position = field(default_factory=Position)
    velocity: np.ndarray = field(default_factory=lambda: np.zeros(2, dtype=float))
    target_speed: float = 2.0
    path_progress: float = 0.0
    following_path: bool = False
    control_timer: float = 0.0
    curve: Optional["CatmullRomSpline"] = None

    def __post_init__(self) -> None:
        if not math.isfinite(self.target_speed) or self.target_speed < 0.0:
            raise ValueError(f"target_speed must be >= 0, got {self.target_speed!r}")
        self.velocity = np.asarray(self.velocity, dtype=float).reshape(2)

    def start_following(self, curve: "CatmullRomSpline") -> None:
        self.curve = curve
        self.path_progress = 0.0
        self.control_timer = 0.0
        self.following_path = True

    def stop(self) -> None:
        self.following_path = False
        self.velocity = np.zeros(2, dtype=float)

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))
