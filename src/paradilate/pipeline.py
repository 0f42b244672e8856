"""
BinaryDilate: binary dilation by parabolic proximity and thresholding.

Binary dilation by a disc/sphere is a threshold of a distance transform.
Instead of computing the full transform, the filter runs separable 1-D
parabolic passes (one per axis) that are short-circuited at the radius of
interest, then thresholds the resulting field at radius squared.

Key Features:
- Circular (disc/sphere/ellipsoid) or rectangular (axis-aligned box) elements
- Per-axis radius or a single broadcast radius
- Optional physical-spacing awareness
- Both sub-pipelines held ready; the shape mode picks one at execution time
- Dirty-bit staleness tracking with unchanged-value setters as no-ops

Note that a voxel is included when its centre is within the radius, not when
any part of it overlaps the disc. Inputs must be 0/1 (non-zero = foreground).
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from copy import deepcopy
from typing import Any, Self

import numpy as np

from paradilate.config import DilateConfig
from paradilate.constants import (
    DEFAULT_INSIDE_VALUE,
    DEFAULT_RADIUS,
    DEFAULT_SHAPE_MODE,
    DEFAULT_USE_SPACING,
    SHAPE_CIRCULAR,
    SHAPE_RECTANGULAR,
    VALID_SHAPE_MODES,
)
from paradilate.image import GridImage, as_grid_image
from paradilate.proximity.stage import ProximityStage, scale_from_radius
from paradilate.threshold.stage import ThresholdStage
from paradilate.validators import validate_choices, validate_finite, validate_type

logger = logging.getLogger(__name__)


def _broadcast(radius: tuple[float, ...], ndim: int) -> tuple[float, ...]:
    """Expand a length-1 radius to ``ndim`` axes."""
    return radius * ndim if len(radius) == 1 else radius


class BinaryDilate:
    """
    Binary morphological dilation filter for N-dimensional grids.

    Holds the radius, shape mode and spacing policy, keeps one
    (ProximityStage, ThresholdStage) pair per shape mode configured at all
    times, and routes each execution through the pair selected by the
    current shape mode.

    Example:
        >>> dilate = BinaryDilate().radius(3).circular()
        >>> out = dilate(mask)
        >>>
        >>> # Box element, 2 voxels along rows and 5 along columns
        >>> out = BinaryDilate().radius((2, 5)).rectangular()(mask)
        >>>
        >>> # Radius in millimetres on an anisotropic grid
        >>> img = GridImage(mask, spacing=(0.5, 0.5, 2.0))
        >>> out = BinaryDilate().radius(4.0).use_spacing()(img)
    """

    __slots__ = (
        "_radius",
        "_shape_mode",
        "_use_spacing",
        "_inside_value",
        "_output_dtype",
        "_stages",  # dict[str, tuple[ProximityStage, ThresholdStage]]
        "_mtime",  # Modification counter
        "_is_stale",  # Cached output out of date
        "_input",  # Bound GridImage for update()
        "_output",  # Last published GridImage
    )

    def __init__(self):
        """Initialize the filter with identity radius and circular mode."""
        self._radius: tuple[float, ...] = DEFAULT_RADIUS
        self._shape_mode = DEFAULT_SHAPE_MODE
        self._use_spacing = DEFAULT_USE_SPACING
        self._inside_value: int | float | bool = DEFAULT_INSIDE_VALUE
        self._output_dtype: np.dtype | None = None

        # Both sub-pipelines are built once and reconfigured, never rebuilt
        self._stages: dict[str, tuple[ProximityStage, ThresholdStage]] = {
            mode: (ProximityStage(mode), ThresholdStage(name=f"threshold[{mode}]"))
            for mode in (SHAPE_CIRCULAR, SHAPE_RECTANGULAR)
        }

        self._mtime = 0
        self._is_stale = True
        self._input: GridImage | None = None
        self._output: GridImage | None = None

        self._reparameterize()

        logger.info("[BinaryDilate] Filter initialized")

    @classmethod
    def from_config(cls, config: DilateConfig) -> Self:
        """
        Create a filter from a DilateConfig.

        Example:
            >>> dilate = BinaryDilate.from_config(DilateConfig(radius=2.0, shape_mode="rectangular"))
        """
        return (
            cls()
            .radius(config.radius_tuple)
            .shape_mode(config.shape_mode)
            .use_spacing(config.use_spacing)
            .inside_value(config.inside_value)
        )

    def to_config(self) -> DilateConfig:
        """Snapshot the current parameters as a DilateConfig."""
        radius = self._radius[0] if len(self._radius) == 1 else self._radius
        return DilateConfig(
            radius=radius,
            shape_mode=self._shape_mode,
            use_spacing=self._use_spacing,
            inside_value=self._inside_value,
        )

    # ========================================================================
    # Parameters
    # ========================================================================

    @validate_finite("radius")
    def radius(self, radius: float | Sequence[float]) -> Self:
        """
        Set the dilation radius, uniformly or per axis.

        A scalar is broadcast to every axis of the image at execution time.
        Setting the current value again is a no-op and does not mark the
        filter stale. Neither does a value that broadcasts to the same
        per-axis radius on the bound input (``2`` vs ``(2, 2)`` on a 2-D
        image); the new form is still stored. Non-positive components are
        accepted but give no growth along their axis.

        Args:
            radius: Single radius or one radius per axis
                (voxel units, or physical units with use_spacing)

        Returns:
            Self for method chaining

        Example:
            >>> BinaryDilate().radius(2.5)
            >>> BinaryDilate().radius((1.0, 3.0, 3.0))
        """
        values = tuple(float(r) for r in np.atleast_1d(np.asarray(radius, dtype=np.float64)))
        if values == self._radius:
            logger.debug("[BinaryDilate] Radius unchanged: %s", values)
            return self

        if any(r <= 0.0 for r in values):
            logger.warning(
                "[BinaryDilate] Radius %s has non-positive components; "
                "no dilation along those axes",
                values,
            )

        equivalent = self._input is not None and _broadcast(
            values, self._input.ndim
        ) == _broadcast(self._radius, self._input.ndim)

        self._radius = values
        self._reparameterize()
        if equivalent:
            logger.debug(
                "[BinaryDilate] Radius %s equivalent on %d-D input, output still current",
                values,
                self._input.ndim,
            )
            return self

        self.modified()
        logger.debug("[BinaryDilate] Radius set: %s", values)
        return self

    def get_radius(self) -> tuple[float, ...]:
        """Current radius (length 1 when set from a scalar)."""
        return self._radius

    @validate_choices(VALID_SHAPE_MODES, "mode")
    def shape_mode(self, mode: str) -> Self:
        """
        Select the structuring element.

        Both sub-pipelines stay configured, so switching only changes which
        one runs next; it does not re-derive any scale factors.

        Args:
            mode: "circular" or "rectangular"

        Returns:
            Self for method chaining
        """
        if mode == self._shape_mode:
            return self
        self._shape_mode = mode
        self.modified()
        logger.debug("[BinaryDilate] Shape mode set: %s", mode)
        return self

    def get_shape_mode(self) -> str:
        return self._shape_mode

    def circular(self) -> Self:
        """Use a disc/sphere structuring element (default)."""
        return self.shape_mode(SHAPE_CIRCULAR)

    def rectangular(self) -> Self:
        """Use an axis-aligned box structuring element."""
        return self.shape_mode(SHAPE_RECTANGULAR)

    @property
    def is_circular(self) -> bool:
        return self._shape_mode == SHAPE_CIRCULAR

    @validate_type(bool, "enabled")
    def use_spacing(self, enabled: bool = True) -> Self:
        """
        Measure distance in physical units using the image spacing.

        Forwarded to both proximity stages.

        Args:
            enabled: True to scale by spacing, False for index distance

        Returns:
            Self for method chaining
        """
        changed = False
        for proximity, _ in self._stages.values():
            changed |= proximity.set_use_spacing(enabled)
        self._use_spacing = enabled
        if changed:
            self.modified()
            logger.debug("[BinaryDilate] Use spacing set: %s", enabled)
        return self

    def get_use_spacing(self) -> bool:
        return self._use_spacing

    @validate_type((bool, int, float, np.bool_, np.number), "value")
    def inside_value(self, value: int | float | bool) -> Self:
        """
        Set the value written for foreground output voxels (default 1).

        Returns:
            Self for method chaining
        """
        changed = False
        for _, threshold in self._stages.values():
            changed |= threshold.set_inside_value(value)
        self._inside_value = value
        if changed:
            self.modified()
            logger.debug("[BinaryDilate] Inside value set: %s", value)
        return self

    def output_dtype(self, dtype: np.dtype | type | None) -> Self:
        """
        Fix the output dtype (None: same dtype as the input).

        Forwarded to both threshold stages.

        Returns:
            Self for method chaining
        """
        dtype = None if dtype is None else np.dtype(dtype)
        changed = False
        for _, threshold in self._stages.values():
            changed |= threshold.set_output_dtype(dtype)
        self._output_dtype = dtype
        if changed:
            self.modified()
            logger.debug("[BinaryDilate] Output dtype set: %s", dtype)
        return self

    def _reparameterize(self) -> None:
        """Push scale factors and threshold windows derived from the radius to all stages."""
        scale, cap = scale_from_radius(self._radius)

        for proximity, threshold in self._stages.values():
            proximity.set_scale(scale, cap)
            # Both windows are [0, R^2]. For circular the field is the squared
            # (ellipsoid-normalised) distance; for rectangular each axis radius^2
            # is already folded into its weight, so the window is per-axis.
            threshold.set_window(0.0, cap)

        if len(set(self._radius)) > 1:
            logger.debug(
                "[BinaryDilate] Unequal radii %s: circular mode uses an ellipsoid "
                "with reference radius %s",
                self._radius,
                max(self._radius),
            )

    # ========================================================================
    # Staleness
    # ========================================================================

    def modified(self) -> None:
        """
        Mark the filter and all internal stages as modified.

        Call this after changing an input array in place so update() re-runs.
        """
        self._mtime += 1
        self._is_stale = True
        for proximity, threshold in self._stages.values():
            proximity.modified()
            threshold.modified()

    @property
    def is_stale(self) -> bool:
        """True if the cached output no longer reflects the parameters or input."""
        return self._is_stale

    @property
    def mtime(self) -> int:
        """Modification counter, bumped on every effective parameter change."""
        return self._mtime

    # ========================================================================
    # Execution
    # ========================================================================

    def set_input(self, image: GridImage | np.ndarray) -> Self:
        """
        Bind the input used by update().

        Returns:
            Self for method chaining
        """
        self._input = as_grid_image(image)
        self.modified()
        return self

    def get_input(self) -> GridImage | None:
        return self._input

    @property
    def output(self) -> GridImage | None:
        """Result of the last successful execution (None before the first run)."""
        return self._output

    def _route(self) -> tuple[ProximityStage, ThresholdStage]:
        """Pick the stage pair for the shape mode at the time of the call."""
        return self._stages[self._shape_mode]

    def _generate_data(self, image: GridImage) -> np.ndarray:
        """
        Run the selected sub-pipeline on ``image``.

        Errors from either stage propagate unchanged; nothing is published
        on failure.
        """
        if image.ndim == 0:
            raise ValueError("Input must have at least one axis")
        if len(self._radius) not in (1, image.ndim):
            raise ValueError(
                f"radius has {len(self._radius)} components but the image has "
                f"{image.ndim} axes"
            )

        proximity, threshold = self._route()
        logger.debug(
            "[BinaryDilate] Routing %s image through %s -> %s",
            image.shape,
            proximity.name,
            threshold.name,
        )

        field = proximity.apply(image.data, spacing=image.spacing)
        return threshold.apply(field, dtype=image.data.dtype)

    def apply(self, image: GridImage | np.ndarray) -> GridImage | np.ndarray:
        """
        Dilate an image.

        Args:
            image: Binary grid (0/1) as GridImage or ndarray

        Returns:
            Dilated grid of the same shape; a GridImage (same spacing) if a
            GridImage was given, otherwise an ndarray

        Example:
            >>> out = BinaryDilate().radius(2).apply(mask)
        """
        grid = as_grid_image(image)
        self._input = grid

        result = self._generate_data(grid)

        self._output = grid.with_data(result)
        self._is_stale = False

        logger.info(
            "[BinaryDilate] Dilated %s (%s, radius=%s): %d -> %d foreground voxels",
            grid.shape,
            self._shape_mode,
            self._radius,
            int(np.count_nonzero(grid.data)),
            int(np.count_nonzero(result)),
        )

        if isinstance(image, GridImage):
            return self._output
        return result

    def update(self) -> GridImage:
        """
        Re-execute on the bound input only if the filter is stale.

        Returns:
            Current output GridImage

        Raises:
            ValueError: If no input was bound with set_input()
        """
        if self._input is None:
            raise ValueError("No input set. Call set_input() before update().")

        if not self._is_stale and self._output is not None:
            logger.debug("[BinaryDilate] Up to date, reusing cached output")
            return self._output

        self.apply(self._input)
        return self._output

    def __call__(self, image: GridImage | np.ndarray) -> GridImage | np.ndarray:
        """
        Apply the filter when called as a function.

        Example:
            >>> out = BinaryDilate().radius(2).rectangular()(mask)
        """
        return self.apply(image)

    # ========================================================================
    # Lifecycle / introspection
    # ========================================================================

    def reset(self) -> Self:
        """
        Reset parameters to their defaults.

        Returns:
            Self for method chaining
        """
        self.radius(DEFAULT_RADIUS)
        self.shape_mode(DEFAULT_SHAPE_MODE)
        self.use_spacing(DEFAULT_USE_SPACING)
        self.inside_value(DEFAULT_INSIDE_VALUE)
        self.output_dtype(None)
        logger.debug("[BinaryDilate] Reset")
        return self

    def copy(self) -> Self:
        """
        Create a deep copy of the filter (parameters only, no input/output).

        Returns:
            New BinaryDilate instance with copied parameters
        """
        return deepcopy(self)

    def __copy__(self) -> Self:
        """Shallow copy (creates deep copy for safety)."""
        return self.copy()

    def __deepcopy__(self, memo: dict[int, Any]) -> Self:
        """Deep copy implementation."""
        new_obj = self.__class__()
        new_obj.radius(self._radius)
        new_obj.shape_mode(self._shape_mode)
        new_obj.use_spacing(self._use_spacing)
        new_obj.inside_value(self._inside_value)
        new_obj.output_dtype(self._output_dtype)
        return new_obj

    def get_params(self) -> dict[str, Any]:
        """
        Get current filter parameters.

        Returns:
            Dictionary of parameter names to values
        """
        scale, cap = scale_from_radius(self._radius)
        return {
            "radius": self._radius,
            "shape_mode": self._shape_mode,
            "use_spacing": self._use_spacing,
            "inside_value": self._inside_value,
            "output_dtype": self._output_dtype,
            "scale": scale,
            "threshold_window": (0.0, cap),
            "is_stale": self._is_stale,
        }

    def __repr__(self) -> str:
        """String representation of the filter."""
        radius = self._radius[0] if len(self._radius) == 1 else self._radius
        state = "stale" if self._is_stale else "up to date"
        spacing = ", spacing" if self._use_spacing else ""
        return f"BinaryDilate(radius={radius}, {self._shape_mode}{spacing}, {state})"
