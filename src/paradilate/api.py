"""
Binary dilation API.

Function-based interface with kwargs on top of BinaryDilate and the
ProximityStage, for one-off calls that do not need a reusable filter.
"""

import logging
from collections.abc import Sequence

import numpy as np

from paradilate.config import DilateConfig
from paradilate.constants import DEFAULT_INSIDE_VALUE, DEFAULT_SHAPE_MODE
from paradilate.image import GridImage
from paradilate.pipeline import BinaryDilate
from paradilate.proximity.stage import ProximityStage, scale_from_radius

logger = logging.getLogger(__name__)


def _prepare_image(
    image: GridImage | np.ndarray,
    spacing: Sequence[float] | None,
    use_spacing: bool | None,
) -> tuple[GridImage | np.ndarray, bool]:
    """Attach explicit spacing and resolve the spacing policy."""
    if spacing is not None:
        data = image.data if isinstance(image, GridImage) else image
        image = GridImage(np.asarray(data), spacing=tuple(spacing))
    if use_spacing is None:
        use_spacing = spacing is not None
    return image, use_spacing


def binary_dilate(
    image: GridImage | np.ndarray,
    radius: float | Sequence[float] | None = None,
    shape_mode: str = DEFAULT_SHAPE_MODE,
    spacing: Sequence[float] | None = None,
    use_spacing: bool | None = None,
    inside_value: int | float | bool = DEFAULT_INSIDE_VALUE,
    output_dtype: np.dtype | type | None = None,
    config: DilateConfig | None = None,
) -> GridImage | np.ndarray:
    """
    Dilate a binary grid by a disc/sphere or an axis-aligned box.

    Args:
        image: Binary grid (0/1) as ndarray or GridImage
        radius: Single radius or one per axis (required unless config is given)
        shape_mode: "circular" or "rectangular"
        spacing: Physical spacing per axis (overrides a GridImage's spacing)
        use_spacing: Measure distance in physical units. Defaults to True
            when ``spacing`` is passed, False otherwise.
        inside_value: Value written for foreground output voxels
        output_dtype: Output dtype (default: input dtype)
        config: Optional DilateConfig (overrides the kwargs above if provided)

    Returns:
        Dilated grid, same kind (ndarray or GridImage) and shape as ``image``

    Example:
        >>> mask = np.zeros(9, dtype=np.uint8)
        >>> mask[4] = 1
        >>> binary_dilate(mask, radius=2)
        array([0, 0, 1, 1, 1, 1, 1, 0, 0], dtype=uint8)

        >>> # Box element on a 2-D grid
        >>> out = binary_dilate(mask2d, radius=(1, 3), shape_mode="rectangular")

        >>> # Radius in millimetres
        >>> out = binary_dilate(volume, radius=5.0, spacing=(0.8, 0.8, 2.5))
    """
    if config is not None:
        radius = config.radius_tuple
        shape_mode = config.shape_mode
        use_spacing = config.use_spacing
        inside_value = config.inside_value

    if radius is None:
        raise ValueError("radius is required (or pass config=DilateConfig(...))")

    return_array = not isinstance(image, GridImage)
    image, use_spacing = _prepare_image(image, spacing, use_spacing)
    logger.debug(
        "[binary_dilate] radius=%s shape_mode=%s use_spacing=%s", radius, shape_mode, use_spacing
    )

    dilate = (
        BinaryDilate()
        .radius(radius)
        .shape_mode(shape_mode)
        .use_spacing(use_spacing)
        .inside_value(inside_value)
        .output_dtype(output_dtype)
    )
    result = dilate(image)
    if return_array and isinstance(result, GridImage):
        return result.data
    return result


def proximity_field(
    image: GridImage | np.ndarray,
    radius: float | Sequence[float],
    shape_mode: str = DEFAULT_SHAPE_MODE,
    spacing: Sequence[float] | None = None,
    use_spacing: bool | None = None,
) -> np.ndarray:
    """
    Compute the short-circuited proximity field used by binary_dilate().

    For circular mode with equal radii the field is the squared Euclidean
    distance to the nearest foreground voxel; values beyond ``radius**2`` are
    +inf. Thresholding at ``[0, max(radius)**2]`` gives the dilation.

    Args:
        image: Binary grid (0/1) as ndarray or GridImage
        radius: Single radius or one per axis
        shape_mode: "circular" or "rectangular"
        spacing: Physical spacing per axis
        use_spacing: Measure distance in physical units (default: True if
            ``spacing`` is passed)

    Returns:
        float64 field with the shape of ``image``

    Example:
        >>> proximity_field(np.array([0, 0, 1, 0, 0, 0]), radius=2)
        array([ 4.,  1.,  0.,  1.,  4., inf])
    """
    image, use_spacing = _prepare_image(image, spacing, use_spacing)
    grid_spacing = image.spacing if isinstance(image, GridImage) else None
    data = image.data if isinstance(image, GridImage) else np.asarray(image)

    stage = ProximityStage(shape_mode)
    stage.set_scale(*scale_from_radius(np.atleast_1d(np.asarray(radius, dtype=np.float64))))
    stage.set_use_spacing(use_spacing)
    return stage.apply(data, spacing=grid_spacing)
