"""Quadratic and cubic Bezier curves in 2D or 3D.

Control points may be any dimension; ``t`` may be a scalar or an array, in
which case the result gains a leading sample axis.
"""

import numpy as np

from floraison.errors import GeometryError


def _params(t):
    t = np.asarray(t, dtype=np.float64)
    return t[..., None]


def quadratic_bezier(p0, p1, p2, t) -> np.ndarray:
    """Point on a quadratic Bezier curve at parameter ``t``."""
    p0, p1, p2 = (np.asarray(p, dtype=np.float64) for p in (p0, p1, p2))
    t = _params(t)
    mt = 1.0 - t
    return mt * mt * p0 + 2.0 * mt * t * p1 + t * t * p2


def quadratic_bezier_derivative(p0, p1, p2, t) -> np.ndarray:
    """First derivative of a quadratic Bezier curve."""
    p0, p1, p2 = (np.asarray(p, dtype=np.float64) for p in (p0, p1, p2))
    t = _params(t)
    return 2.0 * (1.0 - t) * (p1 - p0) + 2.0 * t * (p2 - p1)


def cubic_bezier(p0, p1, p2, p3, t) -> np.ndarray:
    """Point on a cubic Bezier curve at parameter ``t``."""
    p0, p1, p2, p3 = (np.asarray(p, dtype=np.float64) for p in (p0, p1, p2, p3))
    t = _params(t)
    mt = 1.0 - t
    return mt ** 3 * p0 + 3.0 * mt * mt * t * p1 + 3.0 * mt * t * t * p2 + t ** 3 * p3


def cubic_bezier_derivative(p0, p1, p2, p3, t) -> np.ndarray:
    """First derivative of a cubic Bezier curve."""
    p0, p1, p2, p3 = (np.asarray(p, dtype=np.float64) for p in (p0, p1, p2, p3))
    t = _params(t)
    mt = 1.0 - t
    return 3.0 * mt * mt * (p1 - p0) + 6.0 * mt * t * (p2 - p1) + 3.0 * t * t * (p3 - p2)


def sample_quadratic_bezier(p0, p1, p2, count: int) -> np.ndarray:
    """``count`` points at uniform parameter steps, endpoints included.

    Returns:
        (count, D) array of points
    """
    if count < 2:
        raise GeometryError(f"Bezier sample count must be at least 2, got {count}")
    return quadratic_bezier(p0, p1, p2, np.linspace(0.0, 1.0, count))


def sample_cubic_bezier(p0, p1, p2, p3, count: int) -> np.ndarray:
    """``count`` points at uniform parameter steps, endpoints included.

    Returns:
        (count, D) array of points
    """
    if count < 2:
        raise GeometryError(f"Bezier sample count must be at least 2, got {count}")
    return cubic_bezier(p0, p1, p2, p3, np.linspace(0.0, 1.0, count))
