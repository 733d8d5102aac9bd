"""Angular and spiral placement laws for floral organs (phyllotaxis)."""

import numpy as np

from floraison.errors import GeometryError

# 360 / phi^2 degrees, about 137.508
GOLDEN_ANGLE = np.pi * (3.0 - np.sqrt(5.0))

DISTICHOUS = np.pi
DECUSSATE = np.pi / 2.0
TRISTICHOUS = 2.0 * np.pi / 3.0
PENTASTICHOUS = 4.0 * np.pi / 5.0

RADIUS_LAWS = ("constant", "linear", "quadratic", "bulge")


def _check_count(n: int):
    if n < 0:
        raise GeometryError(f"Placement count must be non-negative, got {n}")


def evenly_spaced(n: int, offset: float = 0.0) -> np.ndarray:
    """``n`` angles with equal spacing around a full turn, starting at ``offset``."""
    _check_count(n)
    return offset + 2.0 * np.pi * np.arange(n) / max(n, 1)


def golden_spiral(n: int, offset: float = 0.0) -> np.ndarray:
    """``n`` angles advancing by the golden angle."""
    _check_count(n)
    return offset + GOLDEN_ANGLE * np.arange(n)


def custom_offset(n: int, step: float, offset: float = 0.0) -> np.ndarray:
    """``n`` angles advancing by a fixed ``step`` in radians."""
    _check_count(n)
    return offset + step * np.arange(n)


def fibonacci_angle(index: int) -> float:
    """Angle of the ``index``-th organ, wrapped to [0, 2pi)."""
    return float(np.mod(index * GOLDEN_ANGLE, 2.0 * np.pi))


def vogel_spiral(n: int, radius: float) -> np.ndarray:
    """Sunflower-head disc packing (Vogel's model).

    Point ``i`` sits at angle ``i * GOLDEN_ANGLE`` and distance
    ``radius * sqrt(i / (n - 1))``, giving roughly uniform density.

    Returns:
        (n, 2) points in the plane
    """
    _check_count(n)
    i = np.arange(n)
    r = radius * np.sqrt(i / (n - 1)) if n > 1 else np.zeros(n)
    theta = i * GOLDEN_ANGLE
    return np.stack([r * np.cos(theta), r * np.sin(theta)], axis=-1)


def radial_positions(n: int, radius: float, offset: float = 0.0) -> np.ndarray:
    """``n`` evenly spaced points on a circle. Returns (n, 2)."""
    theta = evenly_spaced(n, offset)
    return np.stack([radius * np.cos(theta), radius * np.sin(theta)], axis=-1)


def whorled_positions(
    whorls: int,
    per_whorl: int,
    radius: float,
    alternate: bool = True,
) -> np.ndarray:
    """Concentric whorls on the same circle.

    With ``alternate`` each whorl is rotated half a spacing from the
    previous one, the usual arrangement of successive floral whorls.

    Returns:
        (whorls * per_whorl, 2) points
    """
    _check_count(whorls)
    _check_count(per_whorl)
    half_step = np.pi / per_whorl if per_whorl else 0.0
    rings = [
        radial_positions(per_whorl, radius, offset=(w % 2) * half_step if alternate else 0.0)
        for w in range(whorls)
    ]
    if not rings:
        return np.zeros((0, 2))
    return np.concatenate(rings, axis=0)


def radius_law(t: np.ndarray, law: str) -> np.ndarray:
    """Radius factor at normalized height ``t`` for a named law."""
    t = np.asarray(t, dtype=np.float64)
    if law == "constant":
        return np.ones_like(t)
    if law == "linear":
        return 1.0 - t
    if law == "quadratic":
        return (1.0 - t) ** 2
    if law == "bulge":
        return np.sin(np.pi * t)
    raise GeometryError(f"Unknown radius law: {law!r} (expected one of {RADIUS_LAWS})")


def fibonacci_spiral_3d(
    n: int,
    height: float,
    radius: float,
    law: str = "constant",
) -> np.ndarray:
    """Golden-angle spiral climbing a column, as on a cone or spike.

    Args:
        n: Number of points
        height: Total climb along +Y
        radius: Base radius, modulated by ``law``
        law: One of ``constant``, ``linear``, ``quadratic``, ``bulge``

    Returns:
        (n, 3) points
    """
    _check_count(n)
    i = np.arange(n)
    t = i / (n - 1) if n > 1 else np.zeros(n)
    r = radius * radius_law(t, law)
    theta = i * GOLDEN_ANGLE
    return np.stack([r * np.cos(theta), t * height, r * np.sin(theta)], axis=-1)
