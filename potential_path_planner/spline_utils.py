#!/usr/bin/env python3
"""
Spline module (Catmull-Rom over path waypoints)
"""
from __future__ import annotations

from typing import Sequence, Union

import numpy as np

from .geometry import ORIGIN, Position
from .models import Path


def _as_points(points) -> np.ndarray:
    if isinstance(points, Path):
        return points.as_array(with_height=True)
    if len(points) == 0:
        return np.zeros((0, 3), dtype=float)
    first = points[0]
    if hasattr(first, "x") and hasattr(first, "y"):
        return np.array(
            [[p.x, p.y, getattr(p, "z", getattr(p, "height", 0.0))] for p in points],
            dtype=float,
        )
    arr = np.asarray(points, dtype=float)
    if arr.ndim != 2 or arr.shape[1] not in (2, 3):
        raise ValueError(f"Expected an (n, 2) or (n, 3) point array, got shape {arr.shape}")
    if arr.shape[1] == 2:
        arr = np.hstack([arr, np.zeros((len(arr), 1))])
    return arr


class CatmullRomSpline:
    """Uniform Catmull-Rom curve through every waypoint.

    Segment ``i`` runs from point ``i`` to point ``i + 1``; neighbors that fall
    off either end are clamped to the nearest real endpoint, so the curve
    starts exactly at the first waypoint and ends exactly at the last one.
    With fewer than 4 waypoints the curve degrades to the polyline.
    """

    def __init__(self, points: Union[Path, Sequence]):
        self.points = _as_points(points)

    def __len__(self) -> int:
        return len(self.points)

    @property
    def segment_count(self) -> int:
        return max(len(self.points) - 1, 0)

    def _locate(self, ts: np.ndarray):
        seg = self.segment_count
        s = ts * seg
        idx = np.minimum(np.floor(s).astype(int), seg - 1)
        u = (s - idx)[:, None]
        return idx, u

    def evaluate_many(self, ts) -> np.ndarray:
        ts = np.clip(np.atleast_1d(np.asarray(ts, dtype=float)), 0.0, 1.0)
        pts = self.points
        n = len(pts)
        if n == 0:
            return np.zeros((len(ts), 3), dtype=float)
        if n == 1:
            return np.repeat(pts[:1], len(ts), axis=0)

        idx, u = self._locate(ts)
        p1 = pts[idx]
        p2 = pts[idx + 1]
        if n < 4:
            return p1 + (p2 - p1) * u

        p0 = pts[np.maximum(idx - 1, 0)]
        p3 = pts[np.minimum(idx + 2, n - 1)]
        return 0.5 * (
            2.0 * p1
            + (-p0 + p2) * u
            + (2.0 * p0 - 5.0 * p1 + 4.0 * p2 - p3) * u ** 2
            + (-p0 + 3.0 * p1 - 3.0 * p2 + p3) * u ** 3
        )

    def evaluate(self, t: float) -> Position:
        if len(self.points) == 0:
            return ORIGIN
        x, y, z = self.evaluate_many([t])[0]
        return Position(float(x), float(y), float(z))

    def derivative(self, t: float) -> np.ndarray:
        """dP/dt at ``t`` (global parameter, so scaled by the segment count)."""
        pts = self.points
        n = len(pts)
        if n < 2:
            return np.zeros(3, dtype=float)

        ts = np.clip(np.atleast_1d(float(t)), 0.0, 1.0)
        idx, u = self._locate(ts)
        p1 = pts[idx]
        p2 = pts[idx + 1]
        if n < 4:
            d_du = p2 - p1
        else:
            p0 = pts[np.maximum(idx - 1, 0)]
            p3 = pts[np.minimum(idx + 2, n - 1)]
            d_du = 0.5 * (
                (-p0 + p2)
                + 2.0 * (2.0 * p0 - 5.0 * p1 + 4.0 * p2 - p3) * u
                + 3.0 * (-p0 + 3.0 * p1 - 3.0 * p2 + p3) * u ** 2
            )
        return (d_du * self.segment_count)[0]

    def sample(self, count: int = 100) -> np.ndarray:
        """``count`` evenly spaced (in t) curve points, for drawing the curve."""
        if count < 2:
            raise ValueError(f"count must be >= 2, got {count}")
        return self.evaluate_many(np.linspace(0.0, 1.0, count))

    def length(self, samples: int = 400) -> float:
        pts = self.sample(max(samples, 2))[:, :2]
        return float(np.sum(np.linalg.norm(np.diff(pts, axis=0), axis=1)))


def sample_spline(path: Union[Path, Sequence], t: float) -> Position:
    """Evaluate the Catmull-Rom curve through ``path`` at normalized ``t``."""
    return CatmullRomSpline(path).evaluate(t)


def compute_path_curvature(path_points):
    """Turning rate (rad per unit length) at each point of a sampled curve."""
    path_points = np.asarray(path_points, dtype=float)
    if len(path_points) < 3:
        return np.zeros(len(path_points))

    curvatures = [0.0]
    for i in range(1, len(path_points) - 1):
        v1 = path_points[i, :2] - path_points[i - 1, :2]
        v2 = path_points[i + 1, :2] - path_points[i, :2]

        angle = np.arctan2(v2[1], v2[0]) - np.arctan2(v1[1], v1[0])
        angle = (angle + np.pi) % (2.0 * np.pi) - np.pi
        dist = np.linalg.norm(v1) + np.linalg.norm(v2)

        if dist > 0.001:
            curvatures.append(abs(angle) / (dist + 0.001))
        else:
            curvatures.append(0.0)
    curvatures.append(0.0)

    return np.array(curvatures)
