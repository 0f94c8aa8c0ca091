"""
===============================================================================
QUATCORE - Interpolation Test Suite
===============================================================================
Tests for spherical linear interpolation: endpoint behaviour, clamping,
short-arc selection, the linear fallback for nearly identical inputs, the
precomputed-parameter path, and the SlerpPath / KeyframeTrack helpers built
on it. Results are cross-checked against scipy.spatial.transform.Slerp.
===============================================================================
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import dataclasses

import numpy as np
import pandas as pd
import pytest
from numpy.testing import assert_allclose
from scipy.spatial.transform import Rotation, Slerp

from quatcore import vector
from quatcore.interpolation import KeyframeTrack, SlerpPath
from quatcore.quaternion import Quaternion, SlerpParameters


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def quat_90z():
    return Quaternion.rotation_z(np.pi / 2)


@pytest.fixture
def quat_45x():
    return Quaternion.rotation_x(np.pi / 4)


@pytest.fixture
def general_pair():
    """Two unrelated unit rotations with a negative 4D dot product."""
    q1 = Quaternion.rotation_x(0.4) * Quaternion.rotation_z(1.1)
    q2 = Quaternion.from_axis_angle(vector.normalize([1.0, 2.0, -1.0]), 2.0) * -1.0
    return q1, q2


# =============================================================================
# Test: Direct SLERP
# =============================================================================

class TestSlerp:
    """Tests for Quaternion.slerp."""

    def test_slerp_endpoints(self, quat_90z, quat_45x):
        """slerp(q1, q2, 0) = q1 and slerp(q1, q2, 1) = q2."""
        assert Quaternion.slerp(quat_90z, quat_45x, 0.0).equals(quat_90z, margin=1e-14)
        assert Quaternion.slerp(quat_90z, quat_45x, 1.0).equals(quat_45x, margin=1e-14)

    @pytest.mark.parametrize("t_in,t_clamped", [(-0.5, 0.0), (1.7, 1.0)])
    def test_parameter_is_clamped(self, quat_90z, quat_45x, t_in, t_clamped):
        assert np.array_equal(Quaternion.slerp(quat_90z, quat_45x, t_in).components,
                              Quaternion.slerp(quat_90z, quat_45x, t_clamped).components)

    @pytest.mark.parametrize("t", [0.0, 0.3, 0.5, 1.0])
    def test_slerp_identical_quaternions(self, quat_90z, t):
        """Interpolating a quaternion with itself returns it."""
        assert Quaternion.slerp(quat_90z, quat_90z, t) == quat_90z

    @pytest.mark.parametrize("sign", [1.0, -1.0])
    @pytest.mark.parametrize("t", [0.0, 0.5, 1.0])
    def test_zero_angle_with_unit_threshold(self, sign, t):
        """sin(theta) == 0 takes the linear path even when threshold is 1."""
        q = Quaternion.rotation_z(0.0)
        result = Quaternion.slerp(q, q * sign, t, threshold=1.0)
        assert np.all(np.isfinite(result.components))
        assert result == q

    @pytest.mark.parametrize("t", [0.0, 0.25, 0.5, 0.75, 1.0])
    def test_slerp_unit_norm(self, quat_90z, quat_45x, t):
        result = Quaternion.slerp(quat_90z, quat_45x, t)
        assert_allclose(result.magnitude(), 1.0, atol=1e-14)

    def test_single_axis_midpoint(self):
        """Along one axis SLERP interpolates the angle linearly."""
        q1 = Quaternion.rotation_z(0.2)
        q2 = Quaternion.rotation_z(1.4)
        assert Quaternion.slerp(q1, q2, 0.5).equals(Quaternion.rotation_z(0.8), margin=1e-14)

    @pytest.mark.parametrize("t", [0.1, 0.4, 0.9])
    def test_constant_angular_velocity(self, quat_90z, quat_45x, t):
        total = quat_90z.angle_to(quat_45x)
        partial = quat_90z.angle_to(Quaternion.slerp(quat_90z, quat_45x, t))
        assert_allclose(partial, t * total, atol=1e-12)

    def test_short_arc_when_dot_negative(self):
        """A negated end quaternion is the same rotation; the path stays short."""
        start = Quaternion.identity()
        end = Quaternion.rotation_z(0.5) * -1.0
        assert start.dot(end) < 0.0
        assert Quaternion.slerp(start, end, 0.5) == Quaternion.rotation_z(0.25)
        # At t=1 the result is -end: same rotation, opposite sign
        assert Quaternion.slerp(start, end, 1.0) == Quaternion.rotation_z(0.5)

    def test_nearly_identical_falls_back_to_nlerp(self):
        q1 = Quaternion.rotation_y(0.0)
        q2 = Quaternion.rotation_y(1e-4)
        result = Quaternion.slerp(q1, q2, 0.5)
        assert result.is_unit(1e-15)
        assert result.equals(Quaternion.rotation_y(0.5e-4), margin=1e-10)

    @pytest.mark.parametrize("t", [0.0, 0.2, 0.5, 0.8, 1.0])
    def test_matches_scipy(self, general_pair, t):
        q1, q2 = general_pair
        keys = Rotation.from_quat([q1.components, q2.components])
        ref = Slerp([0.0, 1.0], keys)([t]).as_quat()[0]
        result = Quaternion.slerp(q1, q2, t).components
        assert_allclose(abs(np.dot(result, ref)), 1.0, atol=1e-12)


# =============================================================================
# Test: Precomputed SLERP
# =============================================================================

class TestPrecomputedSlerp:
    """Tests for precompute_slerp and slerp_precomputed."""

    def test_parameters(self, quat_90z, quat_45x):
        params = Quaternion.precompute_slerp(quat_90z, quat_45x)
        dot = quat_90z.dot(quat_45x)
        assert params.dot == dot
        assert_allclose(params.theta, np.arccos(abs(dot)), atol=0)
        assert_allclose(params.recip_sin_theta, 1.0 / np.sin(params.theta), atol=0)

    def test_parameters_are_frozen(self, quat_90z, quat_45x):
        params = Quaternion.precompute_slerp(quat_90z, quat_45x)
        with pytest.raises(dataclasses.FrozenInstanceError):
            params.dot = 0.0

    def test_sign_is_kept_in_dot(self, general_pair):
        q1, q2 = general_pair
        params = Quaternion.precompute_slerp(q1, q2)
        assert params.dot < 0.0
        assert 0.0 < params.theta < np.pi / 2

    @pytest.mark.parametrize("t", np.linspace(0.0, 1.0, 9))
    def test_identical_to_direct(self, general_pair, t):
        """Precomputed and direct SLERP must agree bit for bit."""
        q1, q2 = general_pair
        p = Quaternion.precompute_slerp(q1, q2)
        cached = Quaternion.slerp_precomputed(q1, q2, p.dot, p.theta, p.recip_sin_theta, t)
        direct = Quaternion.slerp(q1, q2, t)
        assert np.array_equal(cached.components, direct.components)

    def test_identical_to_direct_in_fallback(self):
        q1 = Quaternion.rotation_x(0.3)
        q2 = Quaternion.rotation_x(0.3001)
        p = Quaternion.precompute_slerp(q1, q2)
        assert p.recip_sin_theta == 0.0
        cached = Quaternion.slerp_precomputed(q1, q2, p.dot, p.theta, p.recip_sin_theta, 0.6)
        assert np.array_equal(cached.components, Quaternion.slerp(q1, q2, 0.6).components)

    def test_custom_threshold(self):
        """A lower threshold switches moderately close pairs to NLERP."""
        q1 = Quaternion.rotation_z(0.0)
        q2 = Quaternion.rotation_z(0.8)
        assert Quaternion.precompute_slerp(q1, q2).recip_sin_theta > 0.0
        p = Quaternion.precompute_slerp(q1, q2, threshold=0.5)
        assert p.recip_sin_theta == 0.0
        result = Quaternion.slerp(q1, q2, 0.5, threshold=0.5)
        assert result.is_unit(1e-15)
        # NLERP midpoint of a symmetric pair coincides with the SLERP midpoint
        assert result.equals(Quaternion.rotation_z(0.4), margin=1e-14)

    def test_zero_angle_parameters_with_unit_threshold(self):
        q = Quaternion.identity()
        p = Quaternion.precompute_slerp(q, q, threshold=1.0)
        assert p.theta == 0.0
        assert p.recip_sin_theta == 0.0
        cached = Quaternion.slerp_precomputed(q, q, p.dot, p.theta, p.recip_sin_theta,
                                              0.4, threshold=1.0)
        assert np.array_equal(cached.components, q.components)

    def test_returns_slerp_parameters(self, quat_90z):
        assert isinstance(Quaternion.precompute_slerp(quat_90z, quat_90z), SlerpParameters)


# =============================================================================
# Test: SlerpPath
# =============================================================================

class TestSlerpPath:
    """Tests for the cached interpolation path."""

    def test_endpoints_and_call(self, quat_90z, quat_45x):
        path = SlerpPath(quat_90z, quat_45x)
        assert path.at(0.0).equals(quat_90z, margin=1e-14)
        assert path(1.0).equals(quat_45x, margin=1e-14)

    @pytest.mark.parametrize("t", [0.0, 0.33, 0.7, 1.0])
    def test_matches_direct_slerp(self, general_pair, t):
        q1, q2 = general_pair
        path = SlerpPath(q1, q2)
        assert np.array_equal(path.at(t).components,
                              Quaternion.slerp(q1, q2, t).components)

    def test_endpoints_are_copied(self, quat_90z, quat_45x):
        path = SlerpPath(quat_90z, quat_45x)
        before = path.at(0.5).components
        quat_90z.set_identity()
        quat_45x.set_identity()
        assert np.array_equal(path.at(0.5).components, before)

    def test_angular_distance(self):
        path = SlerpPath(Quaternion.rotation_z(0.0), Quaternion.rotation_z(1.2))
        assert_allclose(path.angular_distance, 1.2, atol=1e-14)

    def test_sample(self, quat_90z, quat_45x):
        samples = SlerpPath(quat_90z, quat_45x).sample(5)
        assert len(samples) == 5
        assert samples[0].equals(quat_90z, margin=1e-14)
        assert samples[-1].equals(quat_45x, margin=1e-14)

    def test_sample_needs_two_points(self, quat_90z, quat_45x):
        with pytest.raises(ValueError):
            SlerpPath(quat_90z, quat_45x).sample(1)

    def test_to_dataframe(self):
        path = SlerpPath(Quaternion.rotation_z(0.0), Quaternion.rotation_z(1.2))
        df = path.to_dataframe(7)
        assert isinstance(df, pd.DataFrame)
        assert list(df.columns) == ['t', 'x', 'y', 'z', 'w', 'angle_deg']
        assert len(df) == 7
        assert_allclose(df['angle_deg'], np.degrees(1.2) * df['t'], atol=1e-9)


# =============================================================================
# Test: KeyframeTrack
# =============================================================================

class TestKeyframeTrack:
    """Tests for piecewise SLERP through keyframes."""

    @pytest.fixture
    def track(self):
        rotations = [Quaternion.rotation_z(a) for a in (0.0, 1.0, 2.0)]
        return KeyframeTrack([0.0, 1.0, 3.0], rotations)

    @pytest.mark.parametrize("t,angle", [
        (0.0, 0.0),
        (0.5, 0.5),
        (1.0, 1.0),
        (2.0, 1.5),
        (3.0, 2.0),
    ])
    def test_evaluate(self, track, t, angle):
        assert track.evaluate(t).equals(Quaternion.rotation_z(angle), margin=1e-12)

    @pytest.mark.parametrize("t,angle", [(-5.0, 0.0), (10.0, 2.0)])
    def test_evaluate_holds_outside_range(self, track, t, angle):
        assert track.evaluate(t).equals(Quaternion.rotation_z(angle), margin=1e-12)

    def test_duration(self, track):
        assert track.duration == 3.0

    def test_resample(self, track):
        df = track.resample([0.0, 0.5, 2.0, 3.0])
        assert len(df) == 4
        assert_allclose(df['t'], [0.0, 0.5, 2.0, 3.0], atol=0)
        assert_allclose(df['angle_deg'], np.degrees([0.0, 0.5, 1.5, 2.0]), atol=1e-9)

    def test_threshold_is_forwarded(self):
        rotations = [Quaternion.rotation_z(0.0), Quaternion.rotation_z(0.8)]
        track = KeyframeTrack([0.0, 1.0], rotations, threshold=0.5)
        assert track.segments[0].threshold == 0.5
        assert track.segments[0].params.recip_sin_theta == 0.0
        expected = Quaternion.slerp(rotations[0], rotations[1], 0.5, threshold=0.5)
        assert np.array_equal(track.evaluate(0.5).components, expected.components)

    def test_needs_two_keyframes(self):
        with pytest.raises(ValueError, match="at least two"):
            KeyframeTrack([0.0], [Quaternion.identity()])

    def test_length_mismatch(self):
        with pytest.raises(ValueError, match="keyframe times"):
            KeyframeTrack([0.0, 1.0, 2.0], [Quaternion.identity()] * 2)

    @pytest.mark.parametrize("times", [[0.0, 0.0], [1.0, 0.5]])
    def test_times_must_increase(self, times):
        with pytest.raises(ValueError, match="strictly increasing"):
            KeyframeTrack(times, [Quaternion.identity()] * 2)
