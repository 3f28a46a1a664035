#!/usr/bin/env python3
"""Obstacle potential fields.

Every obstacle contributes a smooth scalar bump with compact support: zero
beyond ``obstacle.calculation_radius`` and rising toward the center. Field
values from several obstacles are summed. The gradient points toward
increasing potential (toward the obstacle), so the optimizer descends along
its negative.

Two strategies are available, selected by :class:`~.config.FieldKind`:

* ``COSINE``: ``(F/2) * cos(pi * d / F)`` with ``F = obstacle.field_scale``.
  With this parameterization the bump is still ``(F/2) * cos(1)`` at
  ``d == calculation_radius`` and drops to zero just outside it. Pass
  ``shift_to_zero=True`` to subtract that boundary value instead.
* ``GAUSSIAN``: ``(F/2) * exp(-(d / R)**2)`` with ``R = calculation_radius``,
  truncated at ``R`` in the same way.

Obstacles are always passed in explicitly; nothing here keeps a reference to
the caller's obstacle collection.
"""

from __future__ import annotations

import math
from typing import Iterable, Optional, Tuple

import numpy as np

from .config import FieldKind, FieldParams
from .models import Obstacle


# distances this close to calculation_radius count as on the boundary
_SUPPORT_EPS = 1e-9


def _xy(point) -> Tuple[float, float]:
    if hasattr(point, "x") and hasattr(point, "y"):
        return float(point.x), float(point.y)
    return float(point[0]), float(point[1])


class PotentialField:
    """Common evaluation for radially symmetric, compactly supported fields."""

    kind: FieldKind

    def __init__(self, adjust_rate: float = 0.001, shift_to_zero: bool = False, center_eps: float = 1e-5):
        self.adjust_rate = adjust_rate
        self.shift_to_zero = shift_to_zero
        self.center_eps = center_eps

    def _profile(self, distance: float, obstacle: Obstacle) -> float:
        raise NotImplementedError

    def _slope(self, distance: float, obstacle: Obstacle) -> float:
        """|dV/dd|, the rate at which the profile falls off with distance."""
        raise NotImplementedError

    def boundary_value(self, obstacle: Obstacle) -> float:
        """Profile value at exactly ``calculation_radius`` (before any shift)."""
        return self._profile(obstacle.calculation_radius, obstacle)

    def potential(self, obstacle: Obstacle, point) -> float:
        x, y = _xy(point)
        distance = obstacle.distance_to(x, y)
        if distance > obstacle.calculation_radius + _SUPPORT_EPS:
            return 0.0

        value = self._profile(distance, obstacle)
        if self.shift_to_zero:
            value -= self.boundary_value(obstacle)
        return value

    def gradient(self, obstacle: Obstacle, point) -> np.ndarray:
        x, y = _xy(point)
        dx = x - obstacle.center.x
        dy = y - obstacle.center.y
        distance = math.hypot(dx, dy)

        # direction is undefined at the center
        if distance > obstacle.calculation_radius + _SUPPORT_EPS or distance < self.center_eps:
            return np.zeros(2, dtype=float)

        magnitude = self._slope(distance, obstacle) * self.adjust_rate
        return np.array([-magnitude * dx / distance, -magnitude * dy / distance], dtype=float)

    def total_potential(self, obstacles: Iterable[Obstacle], point) -> float:
        return float(sum(self.potential(obstacle, point) for obstacle in obstacles))

    def descent(self, obstacles: Iterable[Obstacle], point) -> np.ndarray:
        """Summed negative gradient: the direction that lowers the total field."""
        step = np.zeros(2, dtype=float)
        for obstacle in obstacles:
            step -= self.gradient(obstacle, point)
        return step

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(adjust_rate={self.adjust_rate}, "
            f"shift_to_zero={self.shift_to_zero})"
        )


class CosineBumpField(PotentialField):
    kind = FieldKind.COSINE

    def _profile(self, distance: float, obstacle: Obstacle) -> float:
        scale = obstacle.field_scale
        if scale <= 0.0:
            return 0.0
        return scale / 2.0 * math.cos(math.pi * distance / scale)

    def _slope(self, distance: float, obstacle: Obstacle) -> float:
        scale = obstacle.field_scale
        if scale <= 0.0:
            return 0.0
        return math.pi / 2.0 * math.sin(math.pi * distance / scale)


class GaussianField(PotentialField):
    kind = FieldKind.GAUSSIAN

    def _profile(self, distance: float, obstacle: Obstacle) -> float:
        radius = obstacle.calculation_radius
        if radius <= 0.0:
            return 0.0
        return obstacle.field_scale / 2.0 * math.exp(-((distance / radius) ** 2))

    def _slope(self, distance: float, obstacle: Obstacle) -> float:
        radius = obstacle.calculation_radius
        if radius <= 0.0:
            return 0.0
        return obstacle.field_scale * distance / (radius * radius) * math.exp(-((distance / radius) ** 2))


_FIELD_TYPES = {
    FieldKind.COSINE: CosineBumpField,
    FieldKind.GAUSSIAN: GaussianField,
}


def make_field(params: Optional[FieldParams] = None) -> PotentialField:
    params = params or FieldParams()
    return _FIELD_TYPES[params.kind](
        adjust_rate=params.adjust_rate,
        shift_to_zero=params.shift_to_zero,
        center_eps=params.center_eps,
    )


DEFAULT_FIELD = CosineBumpField()


def potential(obstacle: Obstacle, point, field: Optional[PotentialField] = None) -> float:
    return (field or DEFAULT_FIELD).potential(obstacle, point)


def gradient(obstacle: Obstacle, point, field: Optional[PotentialField] = None) -> np.ndarray:
    return (field or DEFAULT_FIELD).gradient(obstacle, point)


def potential_at(obstacles: Iterable[Obstacle], point, field: Optional[PotentialField] = None) -> float:
    """Summed potential of every obstacle at ``point``."""
    return (field or DEFAULT_FIELD).total_potential(obstacles, point)


def gradient_at(obstacle: Obstacle, point, field: Optional[PotentialField] = None) -> np.ndarray:
    return (field or DEFAULT_FIELD).gradient(obstacle, point)
