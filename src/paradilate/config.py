"""
Filter configuration for binary dilation.

Provides a plain configuration structure for BinaryDilate and binary_dilate().
"""

from dataclasses import dataclass

import numpy as np

from paradilate.constants import (
    DEFAULT_INSIDE_VALUE,
    DEFAULT_SHAPE_MODE,
    DEFAULT_USE_SPACING,
    VALID_SHAPE_MODES,
)


@dataclass
class DilateConfig:
    """
    Configuration for binary dilation.

    Attributes:
        radius: Radius as a single value (all axes) or one value per axis.
            Physical units when use_spacing is True, voxel units otherwise.
        shape_mode: Structuring element ("circular" or "rectangular")
        use_spacing: Measure distance using the image's physical spacing
        inside_value: Value written for foreground output voxels
    """

    radius: float | tuple[float, ...] = 0.0
    shape_mode: str = DEFAULT_SHAPE_MODE  # Options: "circular", "rectangular"
    use_spacing: bool = DEFAULT_USE_SPACING
    inside_value: int | float | bool = DEFAULT_INSIDE_VALUE

    def __post_init__(self):
        """Validate configuration parameters."""
        if self.shape_mode not in VALID_SHAPE_MODES:
            raise ValueError(
                f"Invalid shape_mode: {self.shape_mode}. "
                f"Must be one of {VALID_SHAPE_MODES}"
            )

        if isinstance(self.radius, bool):
            raise TypeError("radius must be a number or sequence of numbers, got bool")
        try:
            radius = np.atleast_1d(np.asarray(self.radius, dtype=np.float64))
        except (TypeError, ValueError) as exc:
            raise TypeError(
                f"radius must be a number or sequence of numbers, got {type(self.radius).__name__}"
            ) from exc
        if radius.ndim != 1 or radius.size == 0:
            raise ValueError("radius must be a number or a non-empty sequence of numbers")
        if not np.all(np.isfinite(radius)):
            raise ValueError("radius must be finite")

        if not isinstance(self.use_spacing, bool):
            raise TypeError(f"use_spacing must be bool, got {type(self.use_spacing).__name__}")

        if not isinstance(self.inside_value, (bool, int, float, np.bool_, np.number)):
            raise TypeError(
                f"inside_value must be a number or bool, got {type(self.inside_value).__name__}"
            )

    @property
    def radius_tuple(self) -> tuple[float, ...]:
        """Radius as a tuple of floats (length 1 for a broadcast radius)."""
        return tuple(float(r) for r in np.atleast_1d(np.asarray(self.radius, dtype=np.float64)))
