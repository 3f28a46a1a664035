#!/usr/bin/env python3
"""Samples the summed obstacle field on a regular grid.

The grid is plain data (x coordinates, y coordinates and a value matrix) for
a renderer or a plotting script to draw; nothing here draws anything.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

import numpy as np

from .models import Obstacle, snapshot_obstacles
from .potential_field import PotentialField, make_field

FIELD_LENGTH = 16.46
FIELD_WIDTH = 8.23


@dataclass
class FieldGrid:
    xs: np.ndarray
    ys: np.ndarray
    values: np.ndarray  # shape (len(ys), len(xs))

    @property
    def peak(self) -> float:
        return float(self.values.max()) if self.values.size else 0.0

    def value_at_index(self, ix: int, iy: int) -> float:
        return float(self.values[iy, ix])


def sample_field(
    obstacles: Iterable[Obstacle],
    field: Optional[PotentialField] = None,
    resolution: float = 4.0,
    bounds: Tuple[float, float, float, float] = (0.0, 0.0, FIELD_LENGTH, FIELD_WIDTH),
) -> FieldGrid:
    """Evaluate the total potential on a grid with ``resolution`` lines per unit."""
    resolution = max(float(resolution), 0.01)
    x_min, y_min, x_max, y_max = bounds
    if x_max <= x_min or y_max <= y_min:
        raise ValueError(f"Empty sampling bounds {bounds!r}")

    field = field or make_field()
    snapshot = snapshot_obstacles(obstacles)

    nx = max(int((x_max - x_min) * resolution), 1) + 1
    ny = max(int((y_max - y_min) * resolution), 1) + 1
    xs = np.linspace(x_min, x_max, nx)
    ys = np.linspace(y_min, y_max, ny)

    values = np.zeros((ny, nx), dtype=float)
    for iy, y in enumerate(ys):
        for ix, x in enumerate(xs):
            values[iy, ix] = field.total_potential(snapshot, (x, y))
    return FieldGrid(xs, ys, values)
