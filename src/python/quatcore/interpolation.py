"""
===============================================================================
QUATCORE - Rotation Interpolation
===============================================================================
Repeated SLERP along fixed rotation pairs.

SlerpPath caches the trigonometric terms of one (start, end) pair so that
sampling it at many parameters only costs two sines per sample.
KeyframeTrack strings several paths together to interpolate a time-stamped
sequence of attitudes (animation keyframes, telemetry resampling).

Both export samples as pandas DataFrames with columns
t, x, y, z, w, angle_deg.
===============================================================================
"""

import logging
from typing import List, Sequence

import numpy as np
import pandas as pd

from quatcore.constants import RAD2DEG, SLERP_DOT_THRESHOLD
from quatcore.quaternion import Quaternion, SlerpParameters

logger = logging.getLogger(__name__)

_COLUMNS = ['t', 'x', 'y', 'z', 'w', 'angle_deg']


def _rows(params, rotations, reference: Quaternion) -> pd.DataFrame:
    """Tabulate (parameter, quaternion) pairs; angle is measured from *reference*."""
    rows = []
    for p, q in zip(params, rotations):
        rows.append([float(p), q.x, q.y, q.z, q.w,
                     reference.angle_to(q) * RAD2DEG])
    return pd.DataFrame(rows, columns=_COLUMNS)


class SlerpPath:
    """
    Great-arc path between two unit quaternions.

    Parameters
    ----------
    start : Quaternion
        Rotation at t=0.
    end : Quaternion
        Rotation at t=1.
    threshold : float, optional
        Linear-fallback threshold passed to the SLERP kernel.

    Notes
    -----
    The endpoints are copied, so later mutation of the arguments does not
    change the path.
    """

    def __init__(self, start: Quaternion, end: Quaternion,
                 threshold: float = SLERP_DOT_THRESHOLD) -> None:
        self.start = start.copy()
        self.end = end.copy()
        self.threshold = threshold
        self.params: SlerpParameters = Quaternion.precompute_slerp(
            self.start, self.end, threshold)

    @property
    def angular_distance(self) -> float:
        """Rotation angle swept from start to end, in radians [0, pi]."""
        return 2.0 * self.params.theta

    def at(self, t: float) -> Quaternion:
        """Interpolated rotation at parameter *t* (clamped to [0, 1])."""
        p = self.params
        return Quaternion.slerp_precomputed(self.start, self.end, p.dot, p.theta,
                                            p.recip_sin_theta, t, self.threshold)

    __call__ = at

    def sample(self, n: int) -> List[Quaternion]:
        """Return *n* rotations evenly spaced in t from 0 to 1 inclusive."""
        if n < 2:
            raise ValueError(f"Need at least 2 samples, got {n}")
        return [self.at(t) for t in np.linspace(0.0, 1.0, n)]

    def to_dataframe(self, n: int) -> pd.DataFrame:
        """Sample the path *n* times and tabulate components and angle."""
        ts = np.linspace(0.0, 1.0, n)
        return _rows(ts, self.sample(n), self.start)

    def __repr__(self) -> str:
        return (f"SlerpPath(start={self.start!r}, end={self.end!r}, "
                f"angle={np.degrees(self.angular_distance):.2f} deg)")


class KeyframeTrack:
    """
    Piecewise SLERP through time-stamped rotations.

    Parameters
    ----------
    times : sequence of float
        Strictly increasing keyframe times.
    rotations : sequence of Quaternion
        Unit quaternion at each keyframe.
    threshold : float, optional
        Linear-fallback threshold used by every segment.

    Raises
    ------
    ValueError
        If fewer than two keyframes are given, the lengths differ, or the
        times are not strictly increasing.
    """

    def __init__(self, times: Sequence[float],
                 rotations: Sequence[Quaternion],
                 threshold: float = SLERP_DOT_THRESHOLD) -> None:
        times = np.asarray(times, dtype=np.float64)

        if len(times) != len(rotations):
            raise ValueError(
                f"Got {len(times)} keyframe times but {len(rotations)} rotations"
            )
        if len(times) < 2:
            raise ValueError("A keyframe track needs at least two keyframes")
        if np.any(np.diff(times) <= 0.0):
            raise ValueError("Keyframe times must be strictly increasing")

        self.times = times
        self.threshold = threshold
        self.segments = [SlerpPath(a, b, threshold)
                         for a, b in zip(rotations[:-1], rotations[1:])]
        logger.debug("Keyframe track: %d keyframes over [%.3f, %.3f]",
                     len(times), times[0], times[-1])

    @property
    def duration(self) -> float:
        return float(self.times[-1] - self.times[0])

    def evaluate(self, t: float) -> Quaternion:
        """
        Rotation at time *t*.

        Times before the first or after the last keyframe hold the
        corresponding end rotation.
        """
        t = float(np.clip(t, self.times[0], self.times[-1]))
        idx = int(np.searchsorted(self.times, t, side='right')) - 1
        idx = min(max(idx, 0), len(self.segments) - 1)

        t0, t1 = self.times[idx], self.times[idx + 1]
        return self.segments[idx].at((t - t0) / (t1 - t0))

    def resample(self, times: Sequence[float]) -> pd.DataFrame:
        """Evaluate the track at each of *times* and tabulate the result."""
        rotations = [self.evaluate(t) for t in times]
        return _rows(times, rotations, self.segments[0].start)
