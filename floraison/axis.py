"""Arc-length parameterized polyline used as an inflorescence axis."""

from dataclasses import dataclass

import numpy as np

from floraison.errors import GeometryError
from floraison.vector import arbitrary_perpendicular, normalize


@dataclass
class AxisSample:
    """Point on an axis with an orthonormal frame.

    ``binormal`` is ``tangent x normal``.
    """
    position: np.ndarray
    tangent: np.ndarray
    normal: np.ndarray
    binormal: np.ndarray


class AxisCurve:
    """Polyline with a cumulative arc-length table.

    Args:
        points: (N, 3) polyline, N >= 2. Consecutive duplicates are dropped.
    """

    def __init__(self, points: np.ndarray):
        points = np.asarray(points, dtype=np.float64)
        if points.ndim != 2 or points.shape[1] != 3:
            raise GeometryError(f"Axis points must have shape (N, 3), got {points.shape}")
        if len(points) < 2:
            raise GeometryError(f"Axis needs at least 2 points, got {len(points)}")

        keep = np.concatenate([[True], np.linalg.norm(np.diff(points, axis=0), axis=-1) > 1e-12])
        points = points[keep]
        if len(points) < 2:
            raise GeometryError("Axis has zero length")

        self.points = points
        self.arc_lengths = np.concatenate(
            [[0.0], np.cumsum(np.linalg.norm(np.diff(points, axis=0), axis=-1))]
        )

    @property
    def length(self) -> float:
        return float(self.arc_lengths[-1])

    def _segment(self, t: float) -> tuple[int, float]:
        """Segment index and local fraction at normalized arc length ``t``."""
        target = np.clip(t, 0.0, 1.0) * self.length
        idx = int(np.searchsorted(self.arc_lengths, target, side="right")) - 1
        idx = min(max(idx, 0), len(self.points) - 2)
        seg_len = self.arc_lengths[idx + 1] - self.arc_lengths[idx]
        return idx, (target - self.arc_lengths[idx]) / seg_len

    def _curvature_at(self, idx: int) -> np.ndarray:
        """Second difference around the point nearest the segment."""
        n = len(self.points)
        if n < 3:
            return np.zeros(3)
        i = min(max(idx, 1), n - 2)
        return self.points[i + 1] - 2.0 * self.points[i] + self.points[i - 1]

    def sample_at_t(self, t: float) -> AxisSample:
        """Position and frame at normalized arc length ``t`` (clamped to [0, 1])."""
        idx, local = self._segment(t)
        p0, p1 = self.points[idx], self.points[idx + 1]
        position = p0 + (p1 - p0) * local
        tangent = normalize(p1 - p0)

        bend = self._curvature_at(idx)
        normal = bend - tangent * np.dot(bend, tangent)
        if np.linalg.norm(normal) < 1e-9:
            normal = arbitrary_perpendicular(tangent)
        else:
            normal = normalize(normal)
        binormal = normalize(np.cross(tangent, normal))
        normal = np.cross(binormal, tangent)
        return AxisSample(position=position, tangent=tangent, normal=normal, binormal=binormal)

    def sample_uniform(self, count: int) -> list[AxisSample]:
        """``count`` samples evenly spaced by arc length, ends included."""
        if count < 0:
            raise GeometryError(f"Sample count must be non-negative, got {count}")
        if count == 1:
            return [self.sample_at_t(0.5)]
        return [self.sample_at_t(t) for t in np.linspace(0.0, 1.0, count)]
