"""
===============================================================================
QUATCORE - Quaternion Rotation Algebra
===============================================================================
Quaternion value type for representing, composing and interpolating 3D
rotations.

Submodules:
    quaternion     -- Quaternion class, SlerpParameters, IDENTITY constant
    interpolation  -- SlerpPath and KeyframeTrack (repeated SLERP)
    vector         -- 3-vector helpers consumed by rotation construction
    constants      -- comparison margins and interpolation thresholds
    config         -- YAML settings for the command-line tools
    benchmarks     -- timing harness for the hot paths
    visualization  -- matplotlib plots of interpolation paths
    main           -- command-line entry point
===============================================================================
"""

from quatcore.constants import EPSILON, SLERP_DOT_THRESHOLD
from quatcore.quaternion import IDENTITY, Quaternion, SlerpParameters
from quatcore.interpolation import KeyframeTrack, SlerpPath

__version__ = "1.0.0"

__all__ = [
    "EPSILON",
    "SLERP_DOT_THRESHOLD",
    "IDENTITY",
    "Quaternion",
    "SlerpParameters",
    "KeyframeTrack",
    "SlerpPath",
]
