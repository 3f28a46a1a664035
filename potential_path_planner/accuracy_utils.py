#!/usr/bin/env python3
import numpy as np
from scipy.spatial import cKDTree

from .spline_utils import CatmullRomSpline


class AccuracyCalculator:
    """Scores how closely a driven trace stayed on the planned curve"""

    @staticmethod
    def mean_deviation(actual_path, reference: CatmullRomSpline, samples: int = 1000) -> float:
        """
        Mean distance from each recorded point to the nearest curve sample.

        Args:
            actual_path: (n, 2) array of recorded positions
            reference: planned curve
            samples: number of curve samples used as the reference point set
        """
        actual = np.asarray(actual_path, dtype=float).reshape(-1, 2)
        if len(actual) == 0 or reference is None or len(reference) == 0:
            return 0.0

        tree = cKDTree(reference.sample(max(samples, 2))[:, :2])
        dists, _ = tree.query(actual)
        return float(np.mean(dists))

    @staticmethod
    def calculate_accuracy(actual_path, reference: CatmullRomSpline, samples: int = 1000) -> float:
        """
        Accuracy in percent: 100 minus the mean deviation in hundredths of a unit.

        Returns:
            accuracy: 0~100%
        """
        actual = np.asarray(actual_path, dtype=float).reshape(-1, 2)
        if len(actual) < 2:
            return 100.0

        if reference is None or len(reference) < 2:
            return 100.0

        avg_error = AccuracyCalculator.mean_deviation(actual, reference, samples)
        accuracy = max(0.0, 100.0 - (avg_error * 100))

        return accuracy
