#!/usr/bin/env python3
"""Constant-speed spline follower.

``follow_step`` is called once per external tick with the elapsed time. The
control decision itself only runs every ``control_interval`` seconds of
accumulated time, so the control rate does not depend on the tick rate.

Each control step looks ahead along the curve for the point that is
``target_speed * step`` away from the current curve sample, points the
velocity at it and advances ``path_progress`` to it.
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Tuple

import numpy as np
from scipy.optimize import brentq

from .config import FollowerParams
from .geometry import Position, clamp, unit_vector
from .models import RobotState
from .spline_utils import CatmullRomSpline

_LOGGER = logging.getLogger(__name__)

_TIMER_EPS = 1e-9


def _check_dt(dt: float) -> float:
    dt = float(dt)
    if not math.isfinite(dt) or dt < 0.0:
        raise ValueError(f"dt must be a finite value >= 0, got {dt!r}")
    return dt


class PathFollower:
    def __init__(self, params: Optional[FollowerParams] = None, logger=None):
        self.params = params or FollowerParams()
        self.logger = logger or _LOGGER
        self.exhausted_searches = 0

    def search_forward(
        self,
        curve: CatmullRomSpline,
        t_start: float,
        origin: np.ndarray,
        target_distance: float,
    ) -> Tuple[float, bool]:
        """Smallest t past ``t_start`` whose curve point is ``target_distance`` from ``origin``.

        Marches in ``search_increment`` steps and refines the bracketing step
        with Brent's method. Returns ``(t, exhausted)``; when the step budget
        runs out first, ``t`` is the furthest candidate that was tried.
        """
        p = self.params
        steps = np.arange(1, p.max_search_iterations + 1) * p.search_increment
        ts = np.minimum(t_start + steps, 1.0)
        dists = np.linalg.norm(curve.evaluate_many(ts)[:, :2] - origin, axis=1)

        hits = np.nonzero(dists >= target_distance)[0]
        if hits.size == 0:
            if ts[-1] >= 1.0:
                return 1.0, False
            return float(ts[-1]), True

        k = int(hits[0])
        t_hi = float(ts[k])
        t_lo = t_start if k == 0 else float(ts[k - 1])
        if dists[k] == target_distance or t_hi <= t_lo:
            return t_hi, False

        def gap(t: float) -> float:
            return float(np.linalg.norm(curve.evaluate_many([t])[0, :2] - origin)) - target_distance

        return float(brentq(gap, t_lo, t_hi, xtol=p.refine_tolerance)), False

    def follow_step(self, state: RobotState, dt: float) -> np.ndarray:
        dt = _check_dt(dt)
        if not state.following_path or state.curve is None:
            state.velocity = np.zeros(2, dtype=float)
            return state.velocity.copy()

        state.control_timer += dt
        if state.control_timer + _TIMER_EPS < self.params.control_interval:
            return state.velocity.copy()
        step = state.control_timer
        state.control_timer = 0.0

        if state.path_progress >= 1.0:
            state.path_progress = 1.0
            state.stop()
            self.logger.info("🎉 Path complete")
            return state.velocity.copy()

        curve = state.curve
        progress = float(state.path_progress)
        current = curve.evaluate_many([progress])[0, :2]
        target_distance = state.target_speed * step

        if target_distance < self.params.min_step_distance:
            t_next = min(progress + self.params.min_t_increment, 1.0)
        else:
            t_next, exhausted = self.search_forward(curve, progress, current, target_distance)
            if exhausted:
                self.exhausted_searches += 1
                self.logger.warning(
                    f"⚠️ Look-ahead search hit its {self.params.max_search_iterations} step limit "
                    f"at t={t_next:.4f}; using the furthest point found"
                )

        forward = curve.evaluate_many([t_next])[0, :2]
        direction = unit_vector(forward - current)
        if self.params.tracking_gain > 0.0 and np.any(direction):
            drift = current - state.position.xy()
            direction = unit_vector(direction * state.target_speed + self.params.tracking_gain * drift)

        state.velocity = direction * state.target_speed
        state.path_progress = clamp(t_next, progress, 1.0)
        return state.velocity.copy()

    def integrate(self, state: RobotState, dt: float) -> Position:
        """Advance the robot position by ``velocity * dt``."""
        dt = _check_dt(dt)
        pos = state.position
        state.position = Position(
            pos.x + float(state.velocity[0]) * dt,
            pos.y + float(state.velocity[1]) * dt,
            pos.z,
        )
        self.logger.debug(
            f"Robot position: ({state.position.x:.3f}, {state.position.y:.3f}), "
            f"velocity: ({state.velocity[0]:.3f}, {state.velocity[1]:.3f})"
        )
        return state.position

    def tick(self, state: RobotState, dt: float) -> np.ndarray:
        velocity = self.follow_step(state, dt)
        self.integrate(state, dt)
        return velocity


def follow_step(
    state: RobotState,
    dt: float,
    params: Optional[FollowerParams] = None,
    logger=None,
) -> np.ndarray:
    return PathFollower(params, logger).follow_step(state, dt)


def integrate(state: RobotState, dt: float) -> Position:
    return PathFollower().integrate(state, dt)
