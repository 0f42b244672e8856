"""
Numba-optimized kernels for thresholding operations.
"""

import numpy as np
from numba import njit, prange


@njit(parallel=True, cache=True, nogil=True)
def binary_threshold_numba(
    field: np.ndarray,
    lower: float,
    upper: float,
    values: np.ndarray,
    out: np.ndarray,
) -> None:
    """
    Binarize a real-valued field against a closed window.

    Args:
        field: Flattened field [N]
        lower: Window lower bound (inclusive)
        upper: Window upper bound (inclusive)
        values: [outside, inside] already cast to the output dtype
        out: Output [N] (modified in-place)
    """
    n = field.shape[0]
    outside = values[0]
    inside = values[1]

    for i in prange(n):
        v = field[i]
        if v >= lower and v <= upper:
            out[i] = inside
        else:
            out[i] = outside
