"""
Shared fixtures for paradilate tests.
"""

import math
from fractions import Fraction

import numpy as np
import pytest


@pytest.fixture
def within_radius():
    """
    Exact dilation of a mask computed from the radii directly.

    Radii are turned into integers over a common denominator so the
    ``d_k <= r_k`` (rectangular) and ``sum (d_k / r_k)^2 <= 1`` (circular)
    tests run in integer arithmetic. Radii must be positive.
    """

    def _within_radius(mask: np.ndarray, radius, mode: str) -> np.ndarray:
        radius = [Fraction(str(float(r))) for r in np.atleast_1d(radius)]
        if len(radius) == 1:
            radius = radius * mask.ndim
        denom = math.lcm(*(r.denominator for r in radius))
        r_int = np.array([int(r * denom) for r in radius], dtype=np.int64)
        r2 = r_int**2
        total = int(np.prod(r2))

        points = np.indices(mask.shape).reshape(mask.ndim, -1).T
        out = np.zeros(len(points), dtype=bool)
        for q in np.argwhere(mask != 0):
            d = np.abs(points - q) * denom
            if mode == "rectangular":
                out |= np.all(d <= r_int, axis=1)
            else:
                out |= (d**2 * (total // r2)).sum(axis=1) <= total
        return out.reshape(mask.shape)

    return _within_radius
