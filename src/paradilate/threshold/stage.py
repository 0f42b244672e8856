"""
ThresholdStage: real-valued proximity field -> binary grid.
"""

from __future__ import annotations

import logging

import numpy as np

from paradilate.constants import DEFAULT_INSIDE_VALUE, OUTSIDE_VALUE
from paradilate.errors import StageError
from paradilate.threshold.kernels import binary_threshold_numba

logger = logging.getLogger(__name__)


class ThresholdStage:
    """
    Binary threshold over a closed window ``[lower, upper]``.

    Voxels whose field value lies inside the window are set to the inside
    value, all others to 0.

    Example:
        >>> stage = ThresholdStage(lower=0.0, upper=4.0)
        >>> stage(np.array([0.0, 1.0, 4.0, 9.0, np.inf]), dtype=np.uint8)
        array([1, 1, 1, 0, 0], dtype=uint8)
    """

    __slots__ = ("name", "_lower", "_upper", "_inside_value", "_output_dtype", "_mtime")

    def __init__(
        self,
        name: str = "threshold",
        lower: float = 0.0,
        upper: float = 0.0,
        inside_value: int | float | bool = DEFAULT_INSIDE_VALUE,
        output_dtype: np.dtype | type | None = None,
    ):
        """
        Initialize the stage.

        Args:
            name: Stage name used in logs and errors
            lower: Window lower bound (inclusive)
            upper: Window upper bound (inclusive)
            inside_value: Value written inside the window
            output_dtype: Fixed output dtype (default: chosen per call, uint8 fallback)
        """
        self.name = name
        self._lower = 0.0
        self._upper = 0.0
        self._inside_value = inside_value
        self._output_dtype = None if output_dtype is None else np.dtype(output_dtype)
        self._mtime = 0
        self.set_window(lower, upper)

    @property
    def window(self) -> tuple[float, float]:
        return self._lower, self._upper

    @property
    def inside_value(self) -> int | float | bool:
        return self._inside_value

    @property
    def output_dtype(self) -> np.dtype | None:
        return self._output_dtype

    @property
    def mtime(self) -> int:
        return self._mtime

    def modified(self) -> None:
        self._mtime += 1

    def set_window(self, lower: float, upper: float) -> bool:
        """
        Set the threshold window.

        Returns:
            True if the window changed

        Raises:
            ValueError: If lower > upper or either bound is NaN
        """
        lower = float(lower)
        upper = float(upper)
        if np.isnan(lower) or np.isnan(upper) or lower > upper:
            raise ValueError(f"Invalid threshold window [{lower}, {upper}]")
        if (lower, upper) == (self._lower, self._upper):
            return False

        self._lower = lower
        self._upper = upper
        self.modified()
        logger.debug("[Threshold] %s window=[%s, %s]", self.name, lower, upper)
        return True

    def set_inside_value(self, value: int | float | bool) -> bool:
        """
        Set the value written for voxels inside the window.

        Returns:
            True if the value changed
        """
        if value == self._inside_value and type(value) is type(self._inside_value):
            return False
        self._inside_value = value
        self.modified()
        logger.debug("[Threshold] %s inside_value=%s", self.name, value)
        return True

    def set_output_dtype(self, dtype: np.dtype | type | None) -> bool:
        """
        Fix the output dtype (None lets each call choose).

        Returns:
            True if the dtype changed
        """
        dtype = None if dtype is None else np.dtype(dtype)
        if dtype == self._output_dtype:
            return False
        self._output_dtype = dtype
        self.modified()
        return True

    def apply(self, array: np.ndarray, dtype: np.dtype | type | None = None) -> np.ndarray:
        """
        Threshold a real-valued field.

        Args:
            array: Proximity field, any shape
            dtype: Output dtype for this call if the stage has none fixed
                (default: uint8)

        Returns:
            Binary grid of the same shape with values in {0, inside_value}

        Raises:
            StageError: If the output cannot be produced (e.g. inside value
                does not fit the output dtype, allocation failure)
        """
        field = np.asarray(array, dtype=np.float64)
        if self._output_dtype is not None:
            out_dtype = self._output_dtype
        elif dtype is not None:
            out_dtype = np.dtype(dtype)
        else:
            out_dtype = np.dtype(np.uint8)

        try:
            values = np.array([OUTSIDE_VALUE, self._inside_value], dtype=out_dtype)
            flat = np.ascontiguousarray(field).reshape(-1)
            out = np.empty(flat.shape[0], dtype=out_dtype)
            if flat.shape[0] > 0:
                binary_threshold_numba(flat, self._lower, self._upper, values, out)
            out = out.reshape(field.shape)
        except Exception as exc:
            raise StageError(self.name, f"threshold failed: {exc}") from exc

        logger.debug(
            "[Threshold] %s kept %d/%d voxels",
            self.name,
            int(np.count_nonzero(out)),
            out.size,
        )
        return out

    def __call__(self, array: np.ndarray, dtype: np.dtype | type | None = None) -> np.ndarray:
        """Apply the stage when called as a function."""
        return self.apply(array, dtype=dtype)

    def __repr__(self) -> str:
        return (
            f"ThresholdStage(name={self.name!r}, window=[{self._lower}, {self._upper}], "
            f"inside_value={self._inside_value!r})"
        )
