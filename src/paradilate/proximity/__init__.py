"""
Separable parabolic proximity transform.

Turns a binary grid into a real-valued field holding, per voxel, the
(weighted) squared distance to the nearest foreground voxel, short-circuited
beyond the radius of interest.

Example:
    >>> from paradilate.proximity import ProximityStage, scale_from_radius
    >>> stage = ProximityStage("circular")
    >>> stage.set_scale(*scale_from_radius((3.0, 3.0)))
    >>> field = stage(mask)
"""

from paradilate.proximity.kernels import reach_for, separable_pass
from paradilate.proximity.stage import ProximityStage, scale_from_radius

__all__ = [
    "ProximityStage",
    "scale_from_radius",
    "separable_pass",
    "reach_for",
]
