"""
Binary thresholding of real-valued fields.

Example:
    >>> from paradilate.threshold import ThresholdStage
    >>> mask = ThresholdStage(lower=0.0, upper=9.0)(field, dtype=np.uint8)
"""

from paradilate.threshold.kernels import binary_threshold_numba
from paradilate.threshold.stage import ThresholdStage

__all__ = [
    "ThresholdStage",
    "binary_threshold_numba",
]
