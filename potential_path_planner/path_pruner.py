#!/usr/bin/env python3
"""Curvature-based pruning of relaxed paths.

After relaxation a path is mostly straight runs along the start→target chord
with detours where obstacles pushed points aside. The last straight point
before a detour (and the first one after it) adds a nearly redundant segment
that makes the spline overshoot into the turn. Those transition points, plus
any colinear neighbors close to them, are removed. Points are only ever
deleted, never moved.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Set

import numpy as np

from .config import PrunerParams
from .geometry import unit_vector
from .models import Path

_LOGGER = logging.getLogger(__name__)


def _colinear_flags(pts: np.ndarray, tolerance: float) -> List[bool]:
    first, last = pts[0], pts[-1]
    chord = unit_vector(last - first)
    if not np.any(chord):
        return [True] * len(pts)

    flags = []
    for p in pts:
        direction = unit_vector(p - first)
        # the first point itself has no direction and lies on the chord
        if not np.any(direction):
            flags.append(True)
            continue
        flags.append(float(np.dot(direction, chord)) > 1.0 - tolerance)
    return flags


def find_prunable(path: Path, scale: float, params: Optional[PrunerParams] = None) -> List[int]:
    """Indices a prune pass would remove, in descending order."""
    params = params or PrunerParams()
    n = len(path)
    if n < 4:
        return []

    pts = path.as_array()
    colinear = _colinear_flags(pts, params.colinear_tolerance)
    window = params.window_fraction * scale
    marked: Set[int] = set()

    for i in range(1, n - 1):
        if not colinear[i]:
            continue
        # XOR: exactly one neighbor leaves the chord, so i is where straight travel starts or ends
        if colinear[i - 1] == colinear[i + 1]:
            continue

        lo = i
        while lo - 1 >= 1 and colinear[lo - 1] and np.linalg.norm(pts[lo - 1] - pts[i]) <= window:
            lo -= 1
        hi = i
        while hi + 1 <= n - 2 and colinear[hi + 1] and np.linalg.norm(pts[hi + 1] - pts[i]) <= window:
            hi += 1
        marked.update(range(lo, hi + 1))

    return sorted(marked, reverse=True)


def prune_path(
    path: Path,
    scale: Optional[float] = None,
    params: Optional[PrunerParams] = None,
    min_points: int = 3,
    logger=None,
) -> Path:
    """Remove colinear transition points in place and return the path."""
    params = params or PrunerParams()
    logger = logger or _LOGGER
    if not params.enabled:
        return path

    if scale is None:
        scale = path.reference_step()

    floor = max(min_points, Path.MIN_POINTS)
    removed = 0
    for idx in find_prunable(path, scale, params):
        if len(path) <= floor:
            break
        del path.points[idx]
        removed += 1

    if removed:
        logger.debug(f"Pruned {removed} transition point(s), {len(path)} left")
    return path
