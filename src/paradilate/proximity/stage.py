"""
ProximityStage: binary grid -> real-valued squared-distance-like field.

The stage is configured with a per-axis ``scale`` (reference radius over
axis radius) and a short-circuit ``cap`` (reference radius squared, widened
by ``CAP_RTOL``). At execution the per-axis weight on squared index distance
is

    w_k = (spacing_k * scale_k) ** 2

with ``spacing_k = 1`` unless the spacing policy is enabled. Foreground
voxels start at 0, background at +inf, and one separable pass per axis
produces the field. Values above ``cap`` are reported as +inf.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from paradilate.constants import (
    CAP_RTOL,
    DEFAULT_RADIUS,
    DEFAULT_USE_SPACING,
    DISABLED_WEIGHT,
    FAR,
    FIELD_DTYPE,
    VALID_SHAPE_MODES,
)
from paradilate.errors import StageError
from paradilate.proximity.kernels import separable_pass

logger = logging.getLogger(__name__)


def scale_from_radius(radius: Sequence[float]) -> tuple[tuple[float, ...], float]:
    """
    Derive per-axis scale factors and the short-circuit cap from a radius vector.

    The reference radius ``R`` is the largest component. Axis ``k`` gets
    ``scale_k = R / r_k`` so that ``scale_k**2 * d**2 <= R**2`` exactly when
    ``d <= r_k``. Non-positive components disable propagation along their axis.

    ``scale_k**2`` is rounded, so ``scale_k**2 * r_k**2`` can land a few ulps
    above ``R**2``. The cap is ``R**2`` widened by ``CAP_RTOL`` so the voxel
    at ``d == r_k`` stays inside.

    Args:
        radius: Radius per axis (or a single broadcast value)

    Returns:
        (scale per axis, cap)

    Example:
        >>> scale, cap = scale_from_radius((2.0, 4.0))
        >>> scale
        (2.0, 1.0)
        >>> round(cap, 9)
        16.0
    """
    reference = max(float(r) for r in radius)
    if reference <= 0.0:
        return tuple(DISABLED_WEIGHT for _ in radius), 0.0

    scale = tuple(reference / float(r) if r > 0 else DISABLED_WEIGHT for r in radius)
    return scale, reference * reference * (1.0 + CAP_RTOL)


class ProximityStage:
    """
    Separable parabolic proximity transform, one instance per shape mode.

    - "circular": chained lower-envelope passes, field is the weighted squared
      Euclidean distance to the nearest foreground voxel.
    - "rectangular": chained min-max passes, field is the weighted squared
      Chebyshev distance, so each axis is limited by its own radius.

    Example:
        >>> stage = ProximityStage("circular")
        >>> stage.set_scale((1.0,), cap=4.0)
        >>> stage(np.array([0, 0, 1, 0, 0, 0]))
        array([ 4.,  1.,  0.,  1.,  4., inf])
    """

    __slots__ = ("name", "_mode", "_scale", "_cap", "_use_spacing", "_mtime")

    def __init__(self, mode: str):
        """
        Initialize the stage.

        Args:
            mode: "circular" or "rectangular"
        """
        if mode not in VALID_SHAPE_MODES:
            raise ValueError(
                f"Invalid mode: {mode}. Must be one of {sorted(VALID_SHAPE_MODES)}"
            )
        self.name = f"proximity[{mode}]"
        self._mode = mode
        self._scale, self._cap = scale_from_radius(DEFAULT_RADIUS)
        self._use_spacing = DEFAULT_USE_SPACING
        self._mtime = 0

    @property
    def mode(self) -> str:
        return self._mode

    @property
    def scale(self) -> tuple[float, ...]:
        return self._scale

    @property
    def cap(self) -> float:
        return self._cap

    @property
    def use_spacing(self) -> bool:
        return self._use_spacing

    @property
    def mtime(self) -> int:
        return self._mtime

    def modified(self) -> None:
        self._mtime += 1

    def set_scale(self, scale: Sequence[float], cap: float) -> bool:
        """
        Set per-axis scale factors and the short-circuit cap.

        Args:
            scale: Scale per axis (length 1 broadcasts to every axis)
            cap: Largest field value of interest (>= 0)

        Returns:
            True if the configuration changed
        """
        scale = tuple(float(s) for s in scale)
        cap = float(cap)
        if cap < 0.0 or np.isnan(cap):
            raise ValueError(f"cap must be non-negative, got {cap}")
        if scale == self._scale and cap == self._cap:
            return False

        self._scale = scale
        self._cap = cap
        self.modified()
        logger.debug("[Proximity] %s scale=%s cap=%s", self.name, scale, cap)
        return True

    def set_use_spacing(self, enabled: bool) -> bool:
        """
        Enable or disable scaling by the grid's physical spacing.

        Returns:
            True if the configuration changed
        """
        enabled = bool(enabled)
        if enabled == self._use_spacing:
            return False
        self._use_spacing = enabled
        self.modified()
        logger.debug("[Proximity] %s use_spacing=%s", self.name, enabled)
        return True

    def weights_for(self, ndim: int, spacing: Sequence[float] | None = None) -> np.ndarray:
        """
        Per-axis weights on squared index distance for a grid of ``ndim`` axes.

        Args:
            ndim: Number of grid axes
            spacing: Physical spacing per axis (ignored unless use_spacing)

        Returns:
            Weights [ndim] (+inf marks a disabled axis)

        Raises:
            ValueError: If scale or spacing length does not match ``ndim``
        """
        scale = np.asarray(self._scale, dtype=np.float64)
        if scale.size == 1:
            scale = np.full(ndim, scale[0])
        elif scale.size != ndim:
            raise ValueError(
                f"radius has {scale.size} components but the image has {ndim} axes"
            )

        if self._use_spacing and spacing is not None:
            spacing_arr = np.asarray(spacing, dtype=np.float64)
            if spacing_arr.shape != (ndim,):
                raise ValueError(
                    f"spacing must have one value per axis ({ndim}), got {spacing_arr.size}"
                )
        else:
            spacing_arr = np.ones(ndim)

        with np.errstate(invalid="ignore", over="ignore"):
            weights = (spacing_arr * scale) ** 2
        weights[~np.isfinite(weights)] = DISABLED_WEIGHT
        return weights

    def apply(self, array: np.ndarray, spacing: Sequence[float] | None = None) -> np.ndarray:
        """
        Compute the proximity field of a binary grid.

        Args:
            array: Binary grid (non-zero = foreground), at least one axis
            spacing: Physical spacing per axis (used only if use_spacing)

        Returns:
            float64 field of the same shape; 0 on foreground, +inf beyond cap

        Raises:
            ValueError: On radius/spacing dimension mismatch
            StageError: If the transform itself fails
        """
        data = np.asarray(array)
        if data.ndim == 0:
            raise ValueError("Input must have at least one axis, got a scalar")
        weights = self.weights_for(data.ndim, spacing)

        try:
            field = np.where(data != 0, 0.0, FAR).astype(FIELD_DTYPE, copy=False)
            if field.size == 0:
                return field

            for axis, weight in enumerate(weights):
                if not np.isfinite(weight) or data.shape[axis] <= 1:
                    continue
                field = separable_pass(field, axis, float(weight), self._cap, self._mode)

            field = np.ascontiguousarray(field)
        except Exception as exc:
            raise StageError(self.name, f"proximity transform failed: {exc}") from exc

        logger.debug(
            "[Proximity] %s computed field %s (weights=%s, cap=%s)",
            self.name,
            field.shape,
            weights.tolist(),
            self._cap,
        )
        return field

    def __call__(self, array: np.ndarray, spacing: Sequence[float] | None = None) -> np.ndarray:
        """Apply the stage when called as a function."""
        return self.apply(array, spacing=spacing)

    def __repr__(self) -> str:
        return (
            f"ProximityStage(mode={self._mode!r}, scale={self._scale}, cap={self._cap}, "
            f"use_spacing={self._use_spacing})"
        )
