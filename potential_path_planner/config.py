#!/usr/bin/env python3
"""Planner configuration.

Each stage has its own ``@dataclass`` of tunables with working defaults.
:class:`PlannerConfig` groups them and can be loaded from JSON, e.g. the
``config/planner.json`` file shipped with the package::

    {
      "segment_count": 20,
      "target_speed": 2.0,
      "field": {"kind": "cosine", "adjust_rate": 0.001},
      "follower": {"control_interval": 0.02}
    }
"""

from __future__ import annotations

import json
import os
import dataclasses
from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Dict, Mapping


class FieldKind(Enum):
    COSINE = "cosine"
    GAUSSIAN = "gaussian"


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise ValueError(message)


@dataclass
class FieldParams:
    kind: FieldKind = FieldKind.COSINE
    adjust_rate: float = 0.001
    # subtract the boundary value so the bump is continuous at calculation_radius
    shift_to_zero: bool = False
    center_eps: float = 1e-5

    def __post_init__(self) -> None:
        if isinstance(self.kind, str):
            try:
                self.kind = FieldKind(self.kind.lower())
            except ValueError:
                raise ValueError(
                    f"Unknown field kind {self.kind!r}, expected one of "
                    f"{[k.value for k in FieldKind]}"
                ) from None
        _require(self.adjust_rate > 0.0, "field.adjust_rate must be > 0")
        _require(self.center_eps > 0.0, "field.center_eps must be > 0")


@dataclass
class OptimizerParams:
    optimization_threshold: float = 0.01
    max_iterations: int = 1000
    min_adjust_rate: float = 0.0001
    safety_margin: float = 0.3
    unsafe_push_step: float = 0.05
    fallback_push_fraction: float = 0.25
    clean_ratio: float = 1.3
    min_path_points: int = 3

    def __post_init__(self) -> None:
        _require(self.optimization_threshold >= 0.0, "optimizer.optimization_threshold must be >= 0")
        _require(int(self.max_iterations) >= 1, "optimizer.max_iterations must be >= 1")
        self.max_iterations = int(self.max_iterations)
        _require(self.min_adjust_rate > 0.0, "optimizer.min_adjust_rate must be > 0")
        _require(self.safety_margin >= 0.0, "optimizer.safety_margin must be >= 0")
        _require(self.unsafe_push_step > 0.0, "optimizer.unsafe_push_step must be > 0")
        _require(self.fallback_push_fraction >= 0.0, "optimizer.fallback_push_fraction must be >= 0")
        _require(self.clean_ratio >= 1.0, "optimizer.clean_ratio must be >= 1")
        _require(int(self.min_path_points) >= 2, "optimizer.min_path_points must be >= 2")
        self.min_path_points = int(self.min_path_points)


@dataclass
class PrunerParams:
    enabled: bool = True
    colinear_tolerance: float = 1e-4
    window_fraction: float = 0.25

    def __post_init__(self) -> None:
        _require(0.0 < self.colinear_tolerance < 1.0, "pruner.colinear_tolerance must be in (0, 1)")
        _require(self.window_fraction >= 0.0, "pruner.window_fraction must be >= 0")


@dataclass
class FollowerParams:
    control_interval: float = 0.02
    search_increment: float = 0.0005
    max_search_iterations: int = 500
    min_step_distance: float = 1e-6
    min_t_increment: float = 0.001
    refine_tolerance: float = 1e-9
    # pulls the heading back toward the curve when the robot drifts off it
    tracking_gain: float = 0.0

    def __post_init__(self) -> None:
        _require(self.control_interval > 0.0, "follower.control_interval must be > 0")
        _require(0.0 < self.search_increment <= 1.0, "follower.search_increment must be in (0, 1]")
        _require(int(self.max_search_iterations) >= 1, "follower.max_search_iterations must be >= 1")
        self.max_search_iterations = int(self.max_search_iterations)
        _require(self.min_step_distance >= 0.0, "follower.min_step_distance must be >= 0")
        _require(0.0 < self.min_t_increment <= 1.0, "follower.min_t_increment must be in (0, 1]")
        _require(self.refine_tolerance > 0.0, "follower.refine_tolerance must be > 0")
        _require(self.tracking_gain >= 0.0, "follower.tracking_gain must be >= 0")


_SECTIONS = {
    "field": FieldParams,
    "optimizer": OptimizerParams,
    "pruner": PrunerParams,
    "follower": FollowerParams,
}


@dataclass
class PlannerConfig:
    segment_count: int = 20
    target_speed: float = 2.0
    field: FieldParams = dataclasses.field(default_factory=FieldParams)
    optimizer: OptimizerParams = dataclasses.field(default_factory=OptimizerParams)
    pruner: PrunerParams = dataclasses.field(default_factory=PrunerParams)
    follower: FollowerParams = dataclasses.field(default_factory=FollowerParams)

    def __post_init__(self) -> None:
        _require(
            isinstance(self.segment_count, int) and not isinstance(self.segment_count, bool)
            and self.segment_count >= 1,
            f"segment_count must be a positive integer, got {self.segment_count!r}",
        )
        _require(self.target_speed >= 0.0, f"target_speed must be >= 0, got {self.target_speed!r}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PlannerConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown config keys: {sorted(unknown)}")

        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            section = _SECTIONS.get(key)
            if section is None:
                kwargs[key] = value
                continue
            if not isinstance(value, Mapping):
                raise ValueError(f"Config section {key!r} must be an object")
            section_keys = {f.name for f in fields(section)}
            bad = set(value) - section_keys
            if bad:
                raise ValueError(f"Unknown keys in {key!r}: {sorted(bad)}")
            kwargs[key] = section(**value)
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["field"]["kind"] = self.field.kind.value
        return data


def load_config(path: str) -> PlannerConfig:
    with open(os.path.expanduser(path), "r") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: top level of a planner config must be an object")
    return PlannerConfig.from_dict(data)


def save_config(config: PlannerConfig, path: str) -> None:
    path = os.path.expanduser(path)
    directory = os.path.dirname(path)
    if directory:
        os.makedirs(directory, exist_ok=True)
    with open(path, "w") as f:
        json.dump(config.to_dict(), f, indent=2)
