"""Tensor-product B-spline surfaces.

Basis functions follow the Cox-de Boor recursion. Knot vectors are clamped
on [0, 1], so a surface passes through its four corner control points.
"""

import numpy as np

from floraison.errors import GeometryError
from floraison.vector import Y_AXIS, normalize

# Step used for the finite-difference partial derivatives
DERIVATIVE_STEP = 1e-3


def generate_knot_vector(n: int, degree: int) -> np.ndarray:
    """Open uniform knot vector for ``n`` control points.

    The first and last ``degree + 1`` knots are 0 and 1; interior knots are
    evenly spaced.

    Returns:
        (n + degree + 1,) knots
    """
    if degree < 1:
        raise GeometryError(f"B-spline degree must be at least 1, got {degree}")
    if n < degree + 1:
        raise GeometryError(f"Degree {degree} needs at least {degree + 1} control points, got {n}")
    interior = np.arange(1, n - degree) / (n - degree)
    return np.concatenate([np.zeros(degree + 1), interior, np.ones(degree + 1)])


def _is_last_span(i: int, knots: np.ndarray) -> bool:
    """True for the last non-empty span, which is closed at its right end."""
    return knots[i] < knots[i + 1] and not np.any(knots[i + 1:] > knots[i + 1])


def basis_function(i: int, degree: int, u: float, knots: np.ndarray) -> float:
    """Value of basis function ``N_{i,degree}`` at ``u``.

    Spans are half-open except the last non-empty one, so ``u == 1`` is
    covered. Terms over empty spans are 0/0 and count as zero.
    """
    if degree == 0:
        if knots[i] <= u < knots[i + 1]:
            return 1.0
        if u == knots[i + 1] and _is_last_span(i, knots):
            return 1.0
        return 0.0

    value = 0.0
    left_span = knots[i + degree] - knots[i]
    if left_span > 0.0:
        value += (u - knots[i]) / left_span * basis_function(i, degree - 1, u, knots)
    right_span = knots[i + degree + 1] - knots[i + 1]
    if right_span > 0.0:
        value += (knots[i + degree + 1] - u) / right_span * basis_function(i + 1, degree - 1, u, knots)
    return value


def basis_functions(u, degree: int, knots: np.ndarray, count: int) -> np.ndarray:
    """All ``count`` basis functions evaluated at each parameter in ``u``.

    Args:
        u: Scalar or (K,) parameters in [0, 1]
        degree: Spline degree
        knots: (count + degree + 1,) knot vector
        count: Number of control points

    Returns:
        (K, count) basis values, or (count,) for scalar ``u``
    """
    scalar = np.ndim(u) == 0
    us = np.atleast_1d(np.asarray(u, dtype=np.float64))
    values = np.array([[basis_function(i, degree, x, knots) for i in range(count)] for x in us])
    return values[0] if scalar else values


def _validate_knots(knots: np.ndarray, count: int, degree: int, name: str):
    if degree < 1:
        raise GeometryError(f"{name} degree must be at least 1, got {degree}")
    if count < degree + 1:
        raise GeometryError(f"{name} direction needs at least {degree + 1} control points, got {count}")
    if knots.ndim != 1 or len(knots) != count + degree + 1:
        raise GeometryError(
            f"{name} knot vector must have {count + degree + 1} entries, got {knots.size}"
        )
    if not np.all(np.isfinite(knots)):
        raise GeometryError(f"{name} knot vector contains non-finite values")
    if np.any(np.diff(knots) < 0.0):
        raise GeometryError(f"{name} knot vector must be non-decreasing")
    if not (np.all(knots[: degree + 1] == 0.0) and np.all(knots[-(degree + 1):] == 1.0)):
        raise GeometryError(f"{name} knot vector must be clamped to [0, 1]")


class BSplineSurface:
    """B-spline surface over a grid of control points.

    Args:
        control_points: (n_u, n_v, 3) control grid
        degree_u: Degree along u
        degree_v: Degree along v
        knots_u: Knot vector along u, open uniform if None
        knots_v: Knot vector along v, open uniform if None
    """

    def __init__(
        self,
        control_points: np.ndarray,
        degree_u: int = 3,
        degree_v: int = 3,
        knots_u: np.ndarray = None,
        knots_v: np.ndarray = None,
    ):
        control_points = np.asarray(control_points, dtype=np.float64)
        if control_points.ndim != 3 or control_points.shape[2] != 3:
            raise GeometryError(f"Control grid must have shape (n_u, n_v, 3), got {control_points.shape}")
        if not np.all(np.isfinite(control_points)):
            raise GeometryError("Control grid contains non-finite values")
        n_u, n_v = control_points.shape[:2]

        if knots_u is None:
            knots_u = generate_knot_vector(n_u, degree_u) if n_u > degree_u else np.zeros(0)
        if knots_v is None:
            knots_v = generate_knot_vector(n_v, degree_v) if n_v > degree_v else np.zeros(0)
        knots_u = np.asarray(knots_u, dtype=np.float64)
        knots_v = np.asarray(knots_v, dtype=np.float64)
        _validate_knots(knots_u, n_u, degree_u, "u")
        _validate_knots(knots_v, n_v, degree_v, "v")

        self.control_points = control_points
        self.degree_u = degree_u
        self.degree_v = degree_v
        self.knots_u = knots_u
        self.knots_v = knots_v

    @property
    def shape(self) -> tuple[int, int]:
        return self.control_points.shape[:2]

    def evaluate(self, u: float, v: float) -> np.ndarray:
        """Surface point at (u, v). Returns (3,)."""
        return self.evaluate_grid(np.array([u]), np.array([v]))[0, 0]

    def evaluate_grid(self, us: np.ndarray, vs: np.ndarray) -> np.ndarray:
        """Surface points on the tensor grid ``us x vs``. Returns (len(us), len(vs), 3)."""
        n_u, n_v = self.shape
        nu = basis_functions(np.asarray(us, dtype=np.float64), self.degree_u, self.knots_u, n_u)
        nv = basis_functions(np.asarray(vs, dtype=np.float64), self.degree_v, self.knots_v, n_v)
        return np.einsum("ai,bj,ijk->abk", nu, nv, self.control_points)

    def derivative_u(self, u: float, v: float) -> np.ndarray:
        """Finite-difference partial derivative along u."""
        u0 = max(u - DERIVATIVE_STEP, 0.0)
        u1 = min(u + DERIVATIVE_STEP, 1.0)
        return (self.evaluate(u1, v) - self.evaluate(u0, v)) / (u1 - u0)

    def derivative_v(self, u: float, v: float) -> np.ndarray:
        """Finite-difference partial derivative along v."""
        v0 = max(v - DERIVATIVE_STEP, 0.0)
        v1 = min(v + DERIVATIVE_STEP, 1.0)
        return (self.evaluate(u, v1) - self.evaluate(u, v0)) / (v1 - v0)

    def normal(self, u: float, v: float) -> np.ndarray:
        """Unit normal ``du x dv``, +Y where the surface is degenerate."""
        return normalize(np.cross(self.derivative_u(u, v), self.derivative_v(u, v)), fallback=Y_AXIS)

    def normal_grid(self, us: np.ndarray, vs: np.ndarray) -> np.ndarray:
        """Unit normals on the tensor grid ``us x vs``. Returns (len(us), len(vs), 3)."""
        us = np.asarray(us, dtype=np.float64)
        vs = np.asarray(vs, dtype=np.float64)
        u0 = np.maximum(us - DERIVATIVE_STEP, 0.0)
        u1 = np.minimum(us + DERIVATIVE_STEP, 1.0)
        v0 = np.maximum(vs - DERIVATIVE_STEP, 0.0)
        v1 = np.minimum(vs + DERIVATIVE_STEP, 1.0)

        du = (self.evaluate_grid(u1, vs) - self.evaluate_grid(u0, vs)) / (u1 - u0)[:, None, None]
        dv = (self.evaluate_grid(us, v1) - self.evaluate_grid(us, v0)) / (v1 - v0)[None, :, None]
        return normalize(np.cross(du, dv), fallback=Y_AXIS)
