"""Lift a 2D stem profile into a 3D curve of matching curvature.

The input is a drawn (lateral, vertical) curve. The depth coordinate is
rebuilt so that the combined second derivative of the two horizontal
coordinates keeps a constant magnitude along the curve: where the drawn
curve bends little, the missing bend goes into depth. Depth starts at zero
with zero slope and changes sign of curvature wherever the lateral
curvature does.
"""

import logging

import numpy as np

from floraison.errors import GeometryError

logger = logging.getLogger(__name__)

# Below this curvature budget the curve is treated as straight
STRAIGHT_TOLERANCE = 1e-9


def resample_uniform_vertical(points: np.ndarray, count: int) -> np.ndarray:
    """Resample a (lateral, vertical) curve at uniform vertical steps.

    Args:
        points: (N, 2) points with strictly increasing vertical coordinate
        count: Number of output samples, >= 3

    Returns:
        (count, 2) resampled points, linearly interpolated
    """
    points = np.asarray(points, dtype=np.float64)
    if points.ndim != 2 or points.shape[1] != 2:
        raise GeometryError(f"Profile must have shape (N, 2), got {points.shape}")
    if len(points) < 3:
        raise GeometryError(f"Curve reconstruction needs at least 3 points, got {len(points)}")
    if count < 3:
        raise GeometryError(f"Curve reconstruction needs at least 3 samples, got {count}")
    if np.any(np.diff(points[:, 1]) <= 0.0):
        raise GeometryError("Profile vertical coordinate must be strictly increasing")

    y = np.linspace(points[0, 1], points[-1, 1], count)
    x = np.interp(y, points[:, 1], points[:, 0])
    return np.stack([x, y], axis=-1)


def lateral_second_derivatives(x: np.ndarray, step: float) -> np.ndarray:
    """d2x/dy2 by finite differences on uniformly spaced samples.

    Central differences inside, one-sided second differences at both ends.
    """
    x = np.asarray(x, dtype=np.float64)
    d2 = np.empty_like(x)
    h2 = step * step
    d2[1:-1] = (x[2:] - 2.0 * x[1:-1] + x[:-2]) / h2
    d2[0] = (x[2] - 2.0 * x[1] + x[0]) / h2
    d2[-1] = (x[-1] - 2.0 * x[-2] + x[-3]) / h2
    return d2


def depth_second_derivatives(lateral_d2: np.ndarray, tolerance: float = STRAIGHT_TOLERANCE) -> np.ndarray:
    """Non-negative depth curvature that tops each sample up to the budget.

    The budget is the largest absolute lateral curvature on the curve. A
    budget below ``tolerance`` means the curve is straight, and the depth
    curvature is zero everywhere.
    """
    lateral_d2 = np.asarray(lateral_d2, dtype=np.float64)
    budget = np.max(np.abs(lateral_d2)) if len(lateral_d2) else 0.0
    if budget < tolerance:
        return np.zeros_like(lateral_d2)
    return np.sqrt(np.maximum(budget * budget - lateral_d2 * lateral_d2, 0.0))


def apply_curvature_signs(depth_d2: np.ndarray, lateral_d2: np.ndarray) -> np.ndarray:
    """Sign the depth curvature, flipping wherever lateral curvature crosses zero."""
    signed = np.asarray(depth_d2, dtype=np.float64).copy()
    sign = 1.0
    previous = 0.0
    for i in range(len(signed)):
        if lateral_d2[i] == 0.0:
            signed[i] *= sign
            continue
        if previous * lateral_d2[i] < 0.0:
            sign = -sign
        previous = lateral_d2[i]
        signed[i] *= sign
    return signed


def integrate_twice(d2: np.ndarray, step: float) -> np.ndarray:
    """Trapezoidal double integration with zero initial slope and value."""
    d2 = np.asarray(d2, dtype=np.float64)
    slope = np.concatenate([[0.0], np.cumsum((d2[1:] + d2[:-1]) * 0.5 * step)])
    return np.concatenate([[0.0], np.cumsum((slope[1:] + slope[:-1]) * 0.5 * step)])


def reconstruct_3d_curve(points: np.ndarray, count: int = None) -> np.ndarray:
    """Lift a drawn (lateral, vertical) curve into 3D.

    Args:
        points: (N, 2) drawn curve, vertical coordinate strictly increasing
        count: Samples in the output, defaults to N

    Returns:
        (count, 3) points as (lateral, vertical, depth)
    """
    points = np.asarray(points, dtype=np.float64)
    count = len(points) if count is None else count
    resampled = resample_uniform_vertical(points, count)
    x, y = resampled[:, 0], resampled[:, 1]
    step = y[1] - y[0]

    lateral_d2 = lateral_second_derivatives(x, step)
    # Rounding in a slanted straight line shows up scaled by 1/step^2
    tolerance = STRAIGHT_TOLERANCE * (1.0 + np.max(np.abs(x))) / (step * step)
    depth_d2 = apply_curvature_signs(depth_second_derivatives(lateral_d2, tolerance), lateral_d2)
    z = integrate_twice(depth_d2, step)

    logger.debug("Reconstructed 3D curve with %d samples, max depth %.4f", count, np.max(np.abs(z)))
    return np.stack([x, y, z], axis=-1)
