#!/usr/bin/env python3
"""Planar geometry helpers shared by the planner and the follower."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

POSITION_EPS = 1e-4


@dataclass(frozen=True)
class Position:
    """(x, y, z) point. z only carries scalar height; distances are planar."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def from_xy(cls, xy: Sequence[float], z: float = 0.0) -> "Position":
        return cls(float(xy[0]), float(xy[1]), float(z))

    def xy(self) -> np.ndarray:
        return np.array([self.x, self.y], dtype=float)

    def distance_to(self, other: "Position") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def approx_equals(self, other: "Position", eps: float = POSITION_EPS) -> bool:
        return (
            abs(self.x - other.x) < eps
            and abs(self.y - other.y) < eps
            and abs(self.z - other.z) < eps
        )


ORIGIN = Position(0.0, 0.0, 0.0)


def unit_vector(vec: np.ndarray, eps: float = 1e-12) -> np.ndarray:
    norm = float(np.linalg.norm(vec))
    if norm <= eps:
        return np.zeros_like(vec, dtype=float)
    return np.asarray(vec, dtype=float) / norm


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))
