"""Catmull-Rom splines and the bend curves used by stalks and stems."""

import numpy as np

from floraison.bezier import sample_quadratic_bezier
from floraison.errors import GeometryError
from floraison.vector import normalize


def catmull_rom_point(p0, p1, p2, p3, t) -> np.ndarray:
    """Point on the Catmull-Rom segment between ``p1`` and ``p2``."""
    p0, p1, p2, p3 = (np.asarray(p, dtype=np.float64) for p in (p0, p1, p2, p3))
    t = np.asarray(t, dtype=np.float64)[..., None]
    t2 = t * t
    t3 = t2 * t
    return 0.5 * (
        2.0 * p1
        + (p2 - p0) * t
        + (2.0 * p0 - 5.0 * p1 + 4.0 * p2 - p3) * t2
        + (3.0 * p1 - p0 - 3.0 * p2 + p3) * t3
    )


def catmull_rom_tangent(p0, p1, p2, p3, t) -> np.ndarray:
    """Derivative of the Catmull-Rom segment between ``p1`` and ``p2``."""
    p0, p1, p2, p3 = (np.asarray(p, dtype=np.float64) for p in (p0, p1, p2, p3))
    t = np.asarray(t, dtype=np.float64)[..., None]
    return 0.5 * (
        (p2 - p0)
        + 2.0 * (2.0 * p0 - 5.0 * p1 + 4.0 * p2 - p3) * t
        + 3.0 * (3.0 * p1 - p0 - 3.0 * p2 + p3) * t * t
    )


def sample_catmull_rom(points: np.ndarray, samples_per_segment: int) -> np.ndarray:
    """Sample a Catmull-Rom spline through ``points[1:-1]``.

    The first and last points only shape the end tangents. Each interior
    segment contributes ``samples_per_segment`` points starting at its first
    control point, and the final interior point closes the curve.

    Args:
        points: (N, D) control points, N >= 4
        samples_per_segment: Samples per segment, >= 2

    Returns:
        ((N - 3) * samples_per_segment + 1, D) points
    """
    points = np.asarray(points, dtype=np.float64)
    if len(points) < 4:
        raise GeometryError(f"Catmull-Rom needs at least 4 control points, got {len(points)}")
    if samples_per_segment < 2:
        raise GeometryError(f"samples_per_segment must be at least 2, got {samples_per_segment}")

    t = np.arange(samples_per_segment) / samples_per_segment
    segments = [
        catmull_rom_point(points[i - 1], points[i], points[i + 1], points[i + 2], t)
        for i in range(1, len(points) - 2)
    ]
    segments.append(points[-2][None, :])
    return np.concatenate(segments, axis=0)


def bend_curve(length: float, bend: float, droop: float, direction: float = 1.0) -> np.ndarray:
    """Control points for a stalk bent sideways and drooping under its tip.

    The stalk grows along +Y from the origin and bends in the XY plane.

    Args:
        length: Stalk length
        bend: Sideways bend amount, 0 (straight) to 1
        droop: Downward sag of the middle section, -1 to 1
        direction: +1 bends toward +X, -1 toward -X

    Returns:
        (5, 3) Catmull-Rom control points, or None when the stalk is straight
    """
    if bend < 0.01 and abs(droop) < 0.01:
        return None

    max_displacement = length * 0.5 * bend
    start = np.zeros(3)
    middle = np.array([
        max_displacement * 0.7 * direction,
        length * 0.5 - droop * length * 0.4 * 0.5,
        0.0,
    ])
    end = np.array([max_displacement * 0.4 * direction, length, 0.0])

    # Extrapolated end controls keep the tangents smooth at both tips
    before = start - (middle - start) * 0.5
    after = end + (end - middle) * 0.5
    return np.stack([before, start, middle, end, after])


def curved_points(
    start: np.ndarray,
    end: np.ndarray,
    amount: float,
    direction: np.ndarray,
    count: int = 8,
) -> np.ndarray:
    """Quadratic arc from ``start`` to ``end`` pulled toward ``direction``.

    The midpoint control is offset by ``amount * length * 0.5``. For
    amounts below 0.01 the straight two-point segment is returned.

    Returns:
        (count, 3) points, or (2, 3) for a straight segment
    """
    start = np.asarray(start, dtype=np.float64)
    end = np.asarray(end, dtype=np.float64)
    if amount < 0.01:
        return np.stack([start, end])

    length = np.linalg.norm(end - start)
    control = (start + end) * 0.5 + normalize(direction) * (amount * length * 0.5)
    return sample_quadratic_bezier(start, control, end, count)
