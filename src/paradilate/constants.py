"""
Constants and default values for paradilate filters.

Centralizes magic numbers and configuration defaults for better maintainability.
"""

from __future__ import annotations

import numpy as np

# =============================================================================
# Shape Modes
# =============================================================================

SHAPE_CIRCULAR = "circular"  # Disc / sphere / ellipsoid structuring element
SHAPE_RECTANGULAR = "rectangular"  # Axis-aligned box structuring element
VALID_SHAPE_MODES = {SHAPE_CIRCULAR, SHAPE_RECTANGULAR}

# =============================================================================
# Filter Defaults
# =============================================================================

DEFAULT_RADIUS = (0.0,)  # Identity dilation until a radius is set
DEFAULT_SHAPE_MODE = SHAPE_CIRCULAR
DEFAULT_USE_SPACING = False  # Index distance, not physical distance
DEFAULT_INSIDE_VALUE = 1  # Inputs must be 0/1, not 0/max
OUTSIDE_VALUE = 0

# =============================================================================
# Proximity Field
# =============================================================================

# Dtype of the intermediate squared-distance field
FIELD_DTYPE = np.float64

# Value stored beyond the short-circuit cap (never passes a threshold window)
FAR = np.inf

# Weight that disables propagation along an axis (non-positive radius)
DISABLED_WEIGHT = np.inf

# Relative slack on the cap (R^2). Keeps a voxel exactly r_k away inside the
# element after rounding in (spacing_k * R / r_k)^2 * d_k^2.
CAP_RTOL = 64 * np.finfo(np.float64).eps
