#!/usr/bin/env python3
import math
from typing import List, Optional

import numpy as np

from .geometry import Position


class PathRecorder:
    """Records the positions the robot actually drove through."""

    def __init__(self, record_interval: float = 0.1):
        """
        Args:
            record_interval: minimum travel between two recorded points
        """
        self.record_interval = record_interval
        self.points: List[List[float]] = []
        self.last_recorded_pose: Optional[List[float]] = None

    def reset(self):
        self.points.clear()
        self.last_recorded_pose = None

    def record(self, position: Position) -> int:
        """
        Record ``position`` if the robot moved far enough since the last record.

        Returns:
            number of recorded points
        """
        current_pose = [position.x, position.y]

        if self.last_recorded_pose is None:
            self.points.append(current_pose)
            self.last_recorded_pose = current_pose
        else:
            dist = math.hypot(
                current_pose[0] - self.last_recorded_pose[0],
                current_pose[1] - self.last_recorded_pose[1]
            )
            if dist >= self.record_interval:
                self.points.append(current_pose)
                self.last_recorded_pose = current_pose

        return len(self.points)

    def get_path(self) -> np.ndarray:
        """Recorded trace as an (n, 2) array"""
        return np.array(self.points, dtype=float).reshape(-1, 2)
