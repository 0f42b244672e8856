"""
paradilate - Binary dilation by parabolic morphology

Fast binary dilation of N-dimensional grids by discs/spheres or axis-aligned
boxes, without computing a full distance transform.

Binary dilation by a radius-r disc is a threshold of the squared distance
transform at r^2. The squared distance transform is separable into one 1-D
lower-envelope-of-parabolas pass per axis, and each pass is short-circuited
at r^2, so cost stays close to linear in the number of voxels.

Features:
- Circular (disc/sphere, ellipsoid for unequal radii) and rectangular elements
- Per-axis or broadcast radius
- Physical-spacing aware distances
- Numba-compiled, parallel 1-D passes
- Staleness tracking for pipeline-style re-execution

Note:
    Voxels are included when their centre lies within the radius. Inputs
    must be 0/1 (non-zero = foreground), not 0/max.

Example - Filter object:
    >>> from paradilate import BinaryDilate
    >>>
    >>> dilate = BinaryDilate().radius(3).circular()
    >>> out = dilate(mask)
    >>>
    >>> dilate.rectangular()  # marks the filter stale
    >>> out = dilate(mask)

Example - Function:
    >>> from paradilate import binary_dilate, GridImage
    >>>
    >>> out = binary_dilate(mask, radius=(2, 4), shape_mode="rectangular")
    >>> out = binary_dilate(GridImage(vol, spacing=(0.5, 0.5, 2.0)), radius=3.0, use_spacing=True)
"""

__version__ = "0.1.0"

# Function interface
from paradilate.api import binary_dilate, proximity_field

# Configuration
from paradilate.config import DilateConfig
from paradilate.constants import SHAPE_CIRCULAR, SHAPE_RECTANGULAR

# Errors
from paradilate.errors import StageError

# Data structures
from paradilate.image import GridImage

# Filter
from paradilate.pipeline import BinaryDilate

# Stages
from paradilate.protocols import ImageStage
from paradilate.proximity import ProximityStage, scale_from_radius
from paradilate.threshold import ThresholdStage

__all__ = [
    # Version
    "__version__",
    # Data structures
    "GridImage",
    # Filter
    "BinaryDilate",
    "DilateConfig",
    "SHAPE_CIRCULAR",
    "SHAPE_RECTANGULAR",
    # Functions
    "binary_dilate",
    "proximity_field",
    # Stages
    "ImageStage",
    "ProximityStage",
    "ThresholdStage",
    "scale_from_radius",
    # Errors
    "StageError",
]
