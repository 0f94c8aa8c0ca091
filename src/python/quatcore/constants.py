"""
===============================================================================
QUATCORE - Numerical Constants
===============================================================================
Central repository for the scalar constants shared by the quaternion algebra:
comparison margins, interpolation thresholds and angle conversions.

All angles are in radians unless noted otherwise.
===============================================================================
"""

import numpy as np


# =============================================================================
# MATHEMATICAL CONSTANTS
# =============================================================================
PI = np.pi
TWO_PI = 2.0 * np.pi
HALF_PI = 0.5 * np.pi
DEG2RAD = PI / 180.0
RAD2DEG = 180.0 / PI

# =============================================================================
# TOLERANCES
# =============================================================================
EPSILON = 1e-6                  # Default margin for approximate equality
DEGENERATE_TOLERANCE = 1e-12    # |a x b| below this: vectors are parallel

# =============================================================================
# INTERPOLATION
# =============================================================================
# Above this |cos(theta)| SLERP falls back to normalized linear interpolation,
# since sin(theta) in the denominator approaches zero.
SLERP_DOT_THRESHOLD = 0.9995
