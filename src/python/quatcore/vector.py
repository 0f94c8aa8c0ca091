"""
===============================================================================
QUATCORE - 3D Vector Helpers
===============================================================================
The narrow slice of 3-vector algebra that rotation construction and
extraction need. Vectors are plain 3-element float64 NumPy arrays; every
function accepts any array-like and returns NumPy arrays or floats.
===============================================================================
"""

import numpy as np

from quatcore.constants import EPSILON


def _axis(values) -> np.ndarray:
    v = np.array(values, dtype=np.float64)
    v.flags.writeable = False
    return v


X_AXIS = _axis([1.0, 0.0, 0.0])
Y_AXIS = _axis([0.0, 1.0, 0.0])
Z_AXIS = _axis([0.0, 0.0, 1.0])


def as_vector(v) -> np.ndarray:
    """
    Convert *v* to a fresh 3-element float64 array.

    Raises
    ------
    ValueError
        If *v* does not hold exactly three components.
    """
    arr = np.array(v, dtype=np.float64).reshape(-1)
    if arr.shape != (3,):
        raise ValueError(f"Expected a 3-element vector, got shape {np.shape(v)}")
    return arr


def dot(a, b) -> float:
    """Scalar product a . b."""
    return float(np.dot(as_vector(a), as_vector(b)))


def cross(a, b) -> np.ndarray:
    """Vector product a x b."""
    return np.cross(as_vector(a), as_vector(b))


def length(v) -> float:
    """Euclidean length |v|."""
    return float(np.linalg.norm(as_vector(v)))


def normalize(v) -> np.ndarray:
    """
    Return *v* scaled to unit length.

    A zero vector yields NaN components, mirroring Quaternion.normalize().
    """
    v = as_vector(v)
    with np.errstate(divide='ignore', invalid='ignore'):
        return v / np.linalg.norm(v)


def approx_equal(a, b, margin: float = EPSILON) -> bool:
    """True if every component of a and b differs by at most *margin*."""
    return bool(np.all(np.abs(as_vector(a) - as_vector(b)) <= margin))


def any_orthogonal(v) -> np.ndarray:
    """
    Return a unit vector orthogonal to *v*.

    Crosses *v* with the coordinate axis it is least aligned with, so the
    cross product never degenerates for a non-zero input.
    """
    v = as_vector(v)
    helper = (X_AXIS, Y_AXIS, Z_AXIS)[int(np.argmin(np.abs(v)))]
    return normalize(np.cross(v, helper))
