"""
N-dimensional grid container with physical voxel spacing.

GridImage pairs a NumPy array with its per-axis inter-voxel spacing. Filters
accept either a GridImage or a bare ndarray; a bare array is treated as unit
spacing.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np


@dataclass(frozen=True)
class GridImage:
    """
    Binary (or real-valued) N-D grid with per-axis physical spacing.

    Attributes:
        data: Grid values, any shape with at least one axis
        spacing: Physical distance between voxel centres along each axis
            (default: 1.0 on every axis)

    Example:
        >>> img = GridImage(np.zeros((64, 64, 32), dtype=np.uint8), spacing=(0.5, 0.5, 2.0))
        >>> img.ndim
        3
    """

    data: np.ndarray
    spacing: tuple[float, ...] = field(default=())

    def __post_init__(self):
        """Validate data and normalise spacing to a float tuple."""
        data = np.asarray(self.data)
        if data.ndim == 0:
            raise ValueError("GridImage data must have at least one axis, got a scalar")
        object.__setattr__(self, "data", data)

        if len(self.spacing) == 0:
            spacing = (1.0,) * data.ndim
        else:
            spacing = tuple(float(s) for s in self.spacing)

        if len(spacing) != data.ndim:
            raise ValueError(
                f"spacing must have one value per axis ({data.ndim}), got {len(spacing)}"
            )
        if not all(np.isfinite(s) and s > 0 for s in spacing):
            raise ValueError(f"spacing values must be positive and finite, got {spacing}")

        object.__setattr__(self, "spacing", spacing)

    @property
    def shape(self) -> tuple[int, ...]:
        return self.data.shape

    @property
    def ndim(self) -> int:
        return self.data.ndim

    def with_data(self, data: np.ndarray) -> GridImage:
        """Return a new GridImage with the same spacing and different values."""
        return GridImage(data, spacing=self.spacing)


def as_grid_image(image: GridImage | np.ndarray) -> GridImage:
    """Wrap a bare array as a unit-spacing GridImage; pass GridImages through."""
    if image is None:
        raise ValueError("Input image is None")
    if isinstance(image, GridImage):
        return image
    return GridImage(np.asarray(image))
