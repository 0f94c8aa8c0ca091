"""
===============================================================================
QUATCORE - Quaternion Algebra
===============================================================================

Quaternion value type for representing and composing 3D rotations.
Quaternions avoid the gimbal lock singularity of Euler angles and compose
with a single Hamilton product, at the cost of a unit-norm constraint that
the caller maintains.

Convention
----------
We use the scalar-last storage convention:

    q = [x, y, z, w] = w + x*i + y*j + z*k

where w is the scalar (real) part and [x, y, z] is the vector (imaginary)
part. A rotation by angle theta about the unit axis n is encoded with the
half-angle rule:

    q = [sin(theta/2) * n, cos(theta/2)]

and acts on vectors through the sandwich product v' = q * v * q^-1.

Nothing is normalized behind the caller's back: a Quaternion may be zero,
non-unit or unit. Operations that only make sense for rotations
(axis-angle extraction, SLERP, rotate_vector) assume unit input.
Precondition violations (normalizing or dividing by a zero quaternion)
propagate NaN/Inf instead of raising.

Value-returning operators (+, -, *, /) allocate a fresh Quaternion and leave
their operands untouched. In-place operators (+=, -=, *=, /=) and the
set_* builders mutate the receiver and return it for chaining.

References
----------
    [1] Shoemake, "Animating Rotation with Quaternion Curves",
        SIGGRAPH 1985.
    [2] Kuipers, "Quaternions and Rotation Sequences", Princeton, 1999.

===============================================================================
"""

import logging
import numbers
from dataclasses import dataclass
from typing import Iterator, Tuple

import numpy as np

from quatcore import vector
from quatcore.constants import (
    DEGENERATE_TOLERANCE,
    EPSILON,
    PI,
    SLERP_DOT_THRESHOLD,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlerpParameters:
    """
    Trigonometric terms shared by every SLERP between one fixed pair.

    Attributes
    ----------
    dot : float
        Raw 4D inner product q1 . q2. A negative sign means q2 is negated
        when interpolating (shortest arc).
    theta : float
        Half the rotation angle between the pair, arccos(|dot|).
    recip_sin_theta : float
        1 / sin(theta). Zero when the linear fallback applies (|dot| above
        the threshold, or sin(theta) exactly zero), where it is never used.
    """
    dot: float
    theta: float
    recip_sin_theta: float


class Quaternion:
    """
    Four-scalar quaternion (x, y, z, w) used as a 3D rotation.

    Parameters
    ----------
    x, y, z : float
        Vector (imaginary) part.
    w : float
        Scalar (real) part.

    Examples
    --------
    >>> q = Quaternion.rotation_z(np.pi / 2)
    >>> q.rotate_vector([1.0, 0.0, 0.0])   # -> [0, 1, 0]
    >>> q *= Quaternion.rotation_x(np.pi)  # compose in place
    """

    # NumPy scalars must defer to our reflected operators (np.float64 * q).
    __array_ufunc__ = None

    def __init__(self, x: float, y: float, z: float, w: float) -> None:
        self._q = np.array([x, y, z, w], dtype=np.float64)

    @classmethod
    def uninitialized(cls) -> 'Quaternion':
        """
        Allocate a quaternion without initializing its components.

        This is the fast path for code that is about to overwrite every
        component anyway (set(), assign() or a set_rotation_* builder).
        The contents are arbitrary until then and must not be read.
        """
        q = cls.__new__(cls)
        q._q = np.empty(4, dtype=np.float64)
        return q

    @classmethod
    def _wrap(cls, components: np.ndarray) -> 'Quaternion':
        # Takes ownership of a freshly computed array; no copy.
        q = cls.__new__(cls)
        q._q = components
        return q

    @classmethod
    def identity(cls) -> 'Quaternion':
        """Return a new identity quaternion (0, 0, 0, 1): no rotation."""
        return cls(0.0, 0.0, 0.0, 1.0)

    # =========================================================================
    # COMPONENT ACCESS
    # =========================================================================

    @property
    def x(self) -> float:
        """First imaginary component (i-axis)."""
        return float(self._q[0])

    @x.setter
    def x(self, value: float) -> None:
        self._q[0] = value

    @property
    def y(self) -> float:
        """Second imaginary component (j-axis)."""
        return float(self._q[1])

    @y.setter
    def y(self, value: float) -> None:
        self._q[1] = value

    @property
    def z(self) -> float:
        """Third imaginary component (k-axis)."""
        return float(self._q[2])

    @z.setter
    def z(self, value: float) -> None:
        self._q[2] = value

    @property
    def w(self) -> float:
        """Scalar (real) part."""
        return float(self._q[3])

    @w.setter
    def w(self, value: float) -> None:
        self._q[3] = value

    @property
    def scalar(self) -> float:
        """Scalar part of the quaternion (alias for w)."""
        return self.w

    @property
    def vector(self) -> np.ndarray:
        """Copy of the vector part [x, y, z]."""
        return self._q[:3].copy()

    @property
    def components(self) -> np.ndarray:
        """Copy of all four components as [x, y, z, w]."""
        return self._q.copy()

    def __iter__(self) -> Iterator[float]:
        return iter(self._q.tolist())

    def __len__(self) -> int:
        return 4

    def set(self, x: float, y: float, z: float, w: float) -> 'Quaternion':
        """Overwrite all four components and return self."""
        self._q[:] = (x, y, z, w)
        return self

    def assign(self, other: 'Quaternion') -> 'Quaternion':
        """Copy the components of *other* into self and return self."""
        self._q[:] = other._q
        return self

    def copy(self) -> 'Quaternion':
        """Return an independent copy of this quaternion."""
        return Quaternion._wrap(self._q.copy())

    def __copy__(self) -> 'Quaternion':
        return self.copy()

    def __deepcopy__(self, memo) -> 'Quaternion':
        return self.copy()

    # =========================================================================
    # CORE ALGEBRA
    # =========================================================================

    def __pos__(self) -> 'Quaternion':
        return self.copy()

    def __neg__(self) -> 'Quaternion':
        """
        Negate the vector part only; w is copied unchanged.

        This is deliberately NOT full quaternion negation (which would also
        flip w): -q here is the conjugate of q. Code that needs the
        antipodal quaternion must scale by -1.0 instead.
        """
        return Quaternion(-self._q[0], -self._q[1], -self._q[2], self._q[3])

    def add(self, other: 'Quaternion') -> 'Quaternion':
        """Componentwise sum self + other as a new quaternion."""
        return Quaternion._wrap(self._q + other._q)

    def subtract(self, other: 'Quaternion') -> 'Quaternion':
        """Componentwise difference self - other as a new quaternion."""
        return Quaternion._wrap(self._q - other._q)

    def add_assign(self, other: 'Quaternion') -> 'Quaternion':
        """In-place componentwise sum; returns self."""
        self._q += other._q
        return self

    def subtract_assign(self, other: 'Quaternion') -> 'Quaternion':
        """In-place componentwise difference; returns self."""
        self._q -= other._q
        return self

    def __add__(self, other):
        if isinstance(other, Quaternion):
            return self.add(other)
        return NotImplemented

    def __sub__(self, other):
        if isinstance(other, Quaternion):
            return self.subtract(other)
        return NotImplemented

    def __iadd__(self, other):
        if isinstance(other, Quaternion):
            return self.add_assign(other)
        return NotImplemented

    def __isub__(self, other):
        if isinstance(other, Quaternion):
            return self.subtract_assign(other)
        return NotImplemented

    # =========================================================================
    # MULTIPLICATIVE COMPOSITION
    # =========================================================================

    @staticmethod
    def _hamilton(a: np.ndarray, b: np.ndarray) -> np.ndarray:
        """
        Hamilton product of two [x, y, z, w] arrays.

        With the scalar/vector split q = (s, v):

            a * b = (s_a*s_b - v_a . v_b,  s_a*v_b + s_b*v_a + v_a x v_b)
        """
        x1, y1, z1, w1 = a
        x2, y2, z2, w2 = b
        return np.array([
            w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
            w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
            w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
        ], dtype=np.float64)

    def multiply(self, other: 'Quaternion') -> 'Quaternion':
        """
        Hamilton product self * other.

        Not commutative. For unit quaternions the product rotates a vector
        first by *other*, then by *self*.

        Parameters
        ----------
        other : Quaternion
            Right-hand operand.

        Returns
        -------
        Quaternion
            New quaternion holding the product.
        """
        return Quaternion._wrap(self._hamilton(self._q, other._q))

    def multiply_assign(self, other: 'Quaternion') -> 'Quaternion':
        """Replace self with self * other and return self."""
        self._q[:] = self._hamilton(self._q, other._q)
        return self

    def conjugate(self) -> 'Quaternion':
        """Return (-x, -y, -z, w)."""
        return Quaternion(-self._q[0], -self._q[1], -self._q[2], self._q[3])

    def inverse(self) -> 'Quaternion':
        """
        Multiplicative inverse conjugate / |q|^2.

        For a unit quaternion this equals the conjugate. The inverse of a
        zero quaternion is NaN/Inf.
        """
        conj = self._q * np.array([-1.0, -1.0, -1.0, 1.0])
        with np.errstate(divide='ignore', invalid='ignore'):
            return Quaternion._wrap(conj / self.magnitude_squared())

    def divide(self, other: 'Quaternion') -> 'Quaternion':
        """Quaternion quotient self * other^-1 as a new quaternion."""
        return self.multiply(other.inverse())

    def divide_assign(self, other: 'Quaternion') -> 'Quaternion':
        """Replace self with self * other^-1 and return self."""
        return self.multiply_assign(other.inverse())

    def dot(self, other: 'Quaternion') -> float:
        """4D inner product x1*x2 + y1*y2 + z1*z2 + w1*w2."""
        return float(np.dot(self._q, other._q))

    def __mul__(self, other):
        """
        Multiplication operator.

        - Quaternion * Quaternion -> Hamilton product (rotation composition)
        - Quaternion * scalar -> componentwise scaling
        """
        if isinstance(other, Quaternion):
            return self.multiply(other)
        if isinstance(other, numbers.Real):
            return Quaternion._wrap(self._q * float(other))
        return NotImplemented

    def __rmul__(self, other):
        """Right-multiplication by a scalar: scalar * Quaternion."""
        if isinstance(other, numbers.Real):
            return Quaternion._wrap(self._q * float(other))
        return NotImplemented

    def __imul__(self, other):
        if isinstance(other, Quaternion):
            return self.multiply_assign(other)
        if isinstance(other, numbers.Real):
            self._q *= float(other)
            return self
        return NotImplemented

    def __truediv__(self, other):
        if isinstance(other, Quaternion):
            return self.divide(other)
        if isinstance(other, numbers.Real):
            with np.errstate(divide='ignore', invalid='ignore'):
                return Quaternion._wrap(self._q / float(other))
        return NotImplemented

    def __itruediv__(self, other):
        if isinstance(other, Quaternion):
            return self.divide_assign(other)
        if isinstance(other, numbers.Real):
            with np.errstate(divide='ignore', invalid='ignore'):
                self._q /= float(other)
            return self
        return NotImplemented

    def rotate_vector(self, v) -> np.ndarray:
        """
        Rotate a 3D vector by this (unit) quaternion.

        Equivalent to the sandwich product q * [v, 0] * q^-1, evaluated in
        the optimized Rodrigues form:

            t  = 2 * (u x v)
            v' = v + w * t + u x t

        where u = [x, y, z] is the vector part.

        Parameters
        ----------
        v : array-like
            3-element vector to rotate.

        Returns
        -------
        np.ndarray
            Rotated 3-element vector.
        """
        v = vector.as_vector(v)
        u = self._q[:3]
        t = 2.0 * np.cross(u, v)
        return v + self._q[3] * t + np.cross(u, t)

    # =========================================================================
    # NORMALIZATION & MAGNITUDE
    # =========================================================================

    def magnitude_squared(self) -> float:
        """x^2 + y^2 + z^2 + w^2, cheaper than magnitude() for comparisons."""
        return float(np.dot(self._q, self._q))

    def magnitude(self) -> float:
        """Euclidean norm sqrt(x^2 + y^2 + z^2 + w^2)."""
        return float(np.sqrt(self.magnitude_squared()))

    def normalize(self) -> 'Quaternion':
        """
        Scale self to unit magnitude in place and return self.

        A zero quaternion has no direction; its components become NaN.
        """
        with np.errstate(divide='ignore', invalid='ignore'):
            self._q /= self.magnitude()
        return self

    def normalized(self) -> 'Quaternion':
        """Return a unit-magnitude copy, leaving self untouched."""
        return self.copy().normalize()

    def is_unit(self, tolerance: float = EPSILON) -> bool:
        """True if |q| is within *tolerance* of 1."""
        return abs(self.magnitude() - 1.0) <= tolerance

    def set_identity(self) -> 'Quaternion':
        """Reset self to (0, 0, 0, 1) and return self."""
        self._q[:] = (0.0, 0.0, 0.0, 1.0)
        return self

    # =========================================================================
    # ROTATION CONSTRUCTION
    # =========================================================================

    def set_rotation_x(self, angle: float) -> 'Quaternion':
        """Rotation by *angle* radians about the X axis; returns self."""
        half = 0.5 * angle
        self._q[:] = (np.sin(half), 0.0, 0.0, np.cos(half))
        return self

    def set_rotation_y(self, angle: float) -> 'Quaternion':
        """Rotation by *angle* radians about the Y axis; returns self."""
        half = 0.5 * angle
        self._q[:] = (0.0, np.sin(half), 0.0, np.cos(half))
        return self

    def set_rotation_z(self, angle: float) -> 'Quaternion':
        """Rotation by *angle* radians about the Z axis; returns self."""
        half = 0.5 * angle
        self._q[:] = (0.0, 0.0, np.sin(half), np.cos(half))
        return self

    def set_rotation(self, axis, angle: float) -> 'Quaternion':
        """
        Rotation by *angle* radians about *axis*; returns self.

        The axis must already be unit length. It is not renormalized, so a
        non-unit axis produces a non-unit quaternion.

            q = [sin(angle/2) * axis, cos(angle/2)]
        """
        a = vector.as_vector(axis)
        half = 0.5 * angle
        s = np.sin(half)
        self._q[:] = (a[0] * s, a[1] * s, a[2] * s, np.cos(half))
        return self

    def set_rotation_between(self, src, des) -> 'Quaternion':
        """
        Shortest-arc rotation taking unit vector *src* onto unit vector *des*.

        The axis is the normalized cross product src x des and the angle is
        arccos(src . des). When the vectors are (anti-)parallel the cross
        product vanishes:

        - parallel: the result is the identity;
        - anti-parallel: the result is a half-turn about an arbitrary axis
          orthogonal to *src*.

        Parameters
        ----------
        src, des : array-like
            Unit 3-vectors.

        Returns
        -------
        Quaternion
            self, now a unit quaternion with rotate_vector(src) ~ des.
        """
        src = vector.as_vector(src)
        des = vector.as_vector(des)

        # Clamp against floating-point overshoot before arccos
        cos_angle = float(np.clip(np.dot(src, des), -1.0, 1.0))
        axis = np.cross(src, des)
        axis_len = np.linalg.norm(axis)

        if axis_len < DEGENERATE_TOLERANCE:
            if cos_angle > 0.0:
                return self.set_identity()
            axis = vector.any_orthogonal(src)
            logger.debug("Anti-parallel vectors, half-turn about %s", axis)
            return self.set_rotation(axis, PI)

        return self.set_rotation(axis / axis_len, np.arccos(cos_angle))

    @classmethod
    def rotation_x(cls, angle: float) -> 'Quaternion':
        """New quaternion rotating by *angle* radians about X."""
        return cls.uninitialized().set_rotation_x(angle)

    @classmethod
    def rotation_y(cls, angle: float) -> 'Quaternion':
        """New quaternion rotating by *angle* radians about Y."""
        return cls.uninitialized().set_rotation_y(angle)

    @classmethod
    def rotation_z(cls, angle: float) -> 'Quaternion':
        """New quaternion rotating by *angle* radians about Z."""
        return cls.uninitialized().set_rotation_z(angle)

    @classmethod
    def from_axis_angle(cls, axis, angle: float) -> 'Quaternion':
        """New quaternion rotating by *angle* radians about unit *axis*."""
        return cls.uninitialized().set_rotation(axis, angle)

    @classmethod
    def from_vectors(cls, src, des) -> 'Quaternion':
        """New shortest-arc rotation taking unit *src* onto unit *des*."""
        return cls.uninitialized().set_rotation_between(src, des)

    # =========================================================================
    # ROTATION EXTRACTION
    # =========================================================================

    @property
    def rotation_angle(self) -> float:
        """Rotation angle 2 * arccos(w) in [0, 2*pi] of a unit quaternion."""
        return float(2.0 * np.arccos(np.clip(self._q[3], -1.0, 1.0)))

    def to_axis_angle(self) -> Tuple[np.ndarray, float]:
        """
        Recover the rotation axis and angle of a unit quaternion.

            angle = 2 * arccos(w)
            axis  = [x, y, z] / sin(angle/2)

        Returns
        -------
        tuple of (np.ndarray, float)
            (axis, angle). Near a zero rotation sin(angle/2) vanishes and
            every axis is equally valid; [1, 0, 0] is returned there.
        """
        angle = self.rotation_angle
        sin_half = np.sin(0.5 * angle)

        if abs(sin_half) <= EPSILON:
            logger.debug("Near-zero rotation (angle=%.3e), default axis", angle)
            return vector.X_AXIS.copy(), angle

        return self._q[:3] / sin_half, angle

    get_axis_and_angle = to_axis_angle

    def angle_to(self, other: 'Quaternion') -> float:
        """
        Smallest rotation angle between two unit quaternions, in [0, pi].

            angle = 2 * arccos(|q1 . q2|)
        """
        dot = np.clip(abs(self.dot(other)), 0.0, 1.0)
        return float(2.0 * np.arccos(dot))

    # =========================================================================
    # INTERPOLATION
    # =========================================================================

    @staticmethod
    def precompute_slerp(q1: 'Quaternion', q2: 'Quaternion',
                         threshold: float = SLERP_DOT_THRESHOLD) -> SlerpParameters:
        """
        Compute the t-independent SLERP terms for the pair (q1, q2).

        Repeated interpolation along one pair (animation, resampling) can
        reuse the result with slerp_precomputed() and skip the dot product
        and inverse trigonometry on every call.

        Parameters
        ----------
        q1, q2 : Quaternion
            Unit quaternions at t=0 and t=1.
        threshold : float, optional
            |dot| above which linear interpolation is used instead.

        Returns
        -------
        SlerpParameters
            (dot, theta, recip_sin_theta) for the pair.
        """
        dot = q1.dot(q2)
        cos_theta = min(abs(dot), 1.0)
        theta = float(np.arccos(cos_theta))

        sin_theta = np.sin(theta)
        if cos_theta > threshold or sin_theta == 0.0:
            recip_sin_theta = 0.0
        else:
            recip_sin_theta = float(1.0 / sin_theta)

        return SlerpParameters(dot, theta, recip_sin_theta)

    @staticmethod
    def slerp_precomputed(q1: 'Quaternion', q2: 'Quaternion', dot: float,
                          theta: float, recip_sin_theta: float, t: float,
                          threshold: float = SLERP_DOT_THRESHOLD) -> 'Quaternion':
        """
        SLERP between q1 and q2 from precomputed parameters.

        *dot*, *theta* and *recip_sin_theta* must come from
        precompute_slerp() on the same pair with the same *threshold*.
        The result is identical to slerp(q1, q2, t).
        """
        t = float(np.clip(t, 0.0, 1.0))

        # q and -q are the same rotation; flip q2 to stay on the short arc.
        end = -q2._q if dot < 0.0 else q2._q

        if abs(dot) > threshold or recip_sin_theta == 0.0:
            # Nearly identical: sin(theta) ~ 0, use normalized lerp.
            result = q1._q + t * (end - q1._q)
            return Quaternion._wrap(result / np.linalg.norm(result))

        scale1 = np.sin((1.0 - t) * theta) * recip_sin_theta
        scale2 = np.sin(t * theta) * recip_sin_theta
        return Quaternion._wrap(scale1 * q1._q + scale2 * end)

    @staticmethod
    def slerp(q1: 'Quaternion', q2: 'Quaternion', t: float,
              threshold: float = SLERP_DOT_THRESHOLD) -> 'Quaternion':
        """
        Spherical linear interpolation between unit quaternions.

            slerp(q1, q2, t) = (sin((1-t)*theta) * q1 + sin(t*theta) * q2)
                               / sin(theta)

        with theta = arccos(q1 . q2).

        Parameters
        ----------
        q1 : Quaternion
            Rotation at t=0.
        q2 : Quaternion
            Rotation at t=1.
        t : float
            Interpolation parameter, clamped to [0, 1].
        threshold : float, optional
            |q1 . q2| above which normalized linear interpolation is used.

        Returns
        -------
        Quaternion
            New interpolated quaternion.

        Notes
        -----
        - Always interpolates along the short arc: if q1 . q2 < 0, all four
          components of q2 are negated first, so slerp(q1, q2, 1) is then
          -q2 (the same rotation as q2).
        - Nearly identical inputs fall back to NLERP to avoid dividing by
          sin(theta) ~ 0.
        """
        p = Quaternion.precompute_slerp(q1, q2, threshold)
        return Quaternion.slerp_precomputed(q1, q2, p.dot, p.theta,
                                            p.recip_sin_theta, t, threshold)

    # =========================================================================
    # COMPARISON & DISPLAY
    # =========================================================================

    def equals(self, other: 'Quaternion', margin: float = EPSILON) -> bool:
        """True if every component differs from *other* by at most *margin*."""
        return bool(np.all(np.abs(self._q - other._q) <= margin))

    def __eq__(self, other: object) -> bool:
        """Approximate equality with the default EPSILON margin."""
        if not isinstance(other, Quaternion):
            return NotImplemented
        return self.equals(other)

    # Mutable value type
    __hash__ = None

    def __repr__(self) -> str:
        return (f"Quaternion(x={self.x:+.8f}, y={self.y:+.8f}, "
                f"z={self.z:+.8f}, w={self.w:+.8f})")

    def __str__(self) -> str:
        angle_deg = np.degrees(self.rotation_angle)
        return (f"[{self.x:+.6f}, {self.y:+.6f}, {self.z:+.6f}, "
                f"{self.w:+.6f}] (rot={angle_deg:.2f} deg)")


def _frozen_identity() -> Quaternion:
    q = Quaternion.identity()
    q._q.flags.writeable = False
    return q


# Process-wide read-only identity; in-place operations on it raise ValueError.
IDENTITY = _frozen_identity()
