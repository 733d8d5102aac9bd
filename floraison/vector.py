"""Vector math helpers: coordinate conversions, interpolation and rotations.

All functions work on numpy arrays. Coordinates are right-handed with +Y up,
so cylindrical coordinates revolve around the Y axis.
"""

import numpy as np

X_AXIS = np.array([1.0, 0.0, 0.0])
Y_AXIS = np.array([0.0, 1.0, 0.0])
Z_AXIS = np.array([0.0, 0.0, 1.0])


def normalize(v: np.ndarray, fallback: np.ndarray = None, eps: float = 1e-12) -> np.ndarray:
    """Return ``v`` scaled to unit length.

    Works on a single vector or on the last axis of an array of vectors.
    Vectors shorter than ``eps`` are replaced by ``fallback`` (zeros when no
    fallback is given) instead of producing NaN.
    """
    v = np.asarray(v, dtype=np.float64)
    norms = np.linalg.norm(v, axis=-1, keepdims=True)
    degenerate = norms < eps
    out = v / np.where(degenerate, 1.0, norms)
    if np.any(degenerate):
        replacement = np.zeros(v.shape[-1]) if fallback is None else np.asarray(fallback, dtype=np.float64)
        out = np.where(degenerate, replacement, out)
    return out


def lerp(a, b, t):
    """Linear interpolation between ``a`` and ``b``."""
    return a + (b - a) * t


def smoothstep(edge0: float, edge1: float, x):
    """Hermite smoothstep of ``x`` between two edges, clamped to [0, 1]."""
    t = np.clip((x - edge0) / (edge1 - edge0), 0.0, 1.0)
    return t * t * (3.0 - 2.0 * t)


def remap(value, in_min: float, in_max: float, out_min: float, out_max: float):
    """Map ``value`` from one range to another (no clamping)."""
    t = (value - in_min) / (in_max - in_min)
    return out_min + (out_max - out_min) * t


def from_cylindrical(radius, angle, height) -> np.ndarray:
    """Cylindrical (radius, angle, height) to Cartesian, revolving around Y.

    Returns:
        (..., 3) array of ``(r cos a, height, r sin a)``
    """
    radius, angle, height = np.broadcast_arrays(
        np.asarray(radius, dtype=np.float64),
        np.asarray(angle, dtype=np.float64),
        np.asarray(height, dtype=np.float64),
    )
    return np.stack([radius * np.cos(angle), height, radius * np.sin(angle)], axis=-1)


def to_cylindrical(p: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Inverse of :func:`from_cylindrical`. Returns (radius, angle, height)."""
    p = np.asarray(p, dtype=np.float64)
    radius = np.hypot(p[..., 0], p[..., 2])
    angle = np.arctan2(p[..., 2], p[..., 0])
    return radius, angle, p[..., 1]


def from_spherical(radius, theta, phi) -> np.ndarray:
    """Spherical to Cartesian with ``theta`` the polar angle from +Y.

    Args:
        radius: Distance from the origin
        theta: Polar angle measured from the +Y axis, in radians
        phi: Azimuth around the Y axis, in radians
    """
    radius, theta, phi = np.broadcast_arrays(
        np.asarray(radius, dtype=np.float64),
        np.asarray(theta, dtype=np.float64),
        np.asarray(phi, dtype=np.float64),
    )
    sin_t = np.sin(theta)
    return np.stack(
        [radius * sin_t * np.cos(phi), radius * np.cos(theta), radius * sin_t * np.sin(phi)],
        axis=-1,
    )


def to_spherical(p: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Inverse of :func:`from_spherical`. Returns (radius, theta, phi)."""
    p = np.asarray(p, dtype=np.float64)
    radius = np.linalg.norm(p, axis=-1)
    safe = np.where(radius > 0.0, radius, 1.0)
    theta = np.where(radius > 0.0, np.arccos(np.clip(p[..., 1] / safe, -1.0, 1.0)), 0.0)
    phi = np.arctan2(p[..., 2], p[..., 0])
    return radius, theta, phi


def from_polar(radius, angle) -> np.ndarray:
    """2D polar to Cartesian. Returns (..., 2)."""
    radius, angle = np.broadcast_arrays(
        np.asarray(radius, dtype=np.float64), np.asarray(angle, dtype=np.float64)
    )
    return np.stack([radius * np.cos(angle), radius * np.sin(angle)], axis=-1)


def to_polar(p: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """2D Cartesian to polar. Returns (radius, angle)."""
    p = np.asarray(p, dtype=np.float64)
    return np.hypot(p[..., 0], p[..., 1]), np.arctan2(p[..., 1], p[..., 0])


def rotate_2d(p: np.ndarray, angle: float) -> np.ndarray:
    """Rotate 2D point(s) counter-clockwise by ``angle`` radians."""
    c, s = np.cos(angle), np.sin(angle)
    p = np.asarray(p, dtype=np.float64)
    return np.stack([p[..., 0] * c - p[..., 1] * s, p[..., 0] * s + p[..., 1] * c], axis=-1)


def arbitrary_perpendicular(v: np.ndarray) -> np.ndarray:
    """Unit vector perpendicular to ``v``.

    Uses +Y as the reference direction unless ``v`` is close to vertical,
    in which case +X is used.
    """
    v = normalize(v, fallback=Y_AXIS)
    reference = Y_AXIS if abs(v[1]) < 0.9 else X_AXIS
    perp = reference - v * np.dot(reference, v)
    return normalize(perp, fallback=Z_AXIS)


def axis_angle_matrix(axis: np.ndarray, angle: float) -> np.ndarray:
    """(3, 3) rotation of ``angle`` radians around ``axis`` (Rodrigues)."""
    x, y, z = normalize(axis, fallback=Y_AXIS)
    c = np.cos(angle)
    s = np.sin(angle)
    C = 1.0 - c
    return np.array([
        [c + x * x * C, x * y * C - z * s, x * z * C + y * s],
        [y * x * C + z * s, c + y * y * C, y * z * C - x * s],
        [z * x * C - y * s, z * y * C + x * s, c + z * z * C],
    ])


def rotation_between(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """(3, 3) shortest-arc rotation taking direction ``a`` onto direction ``b``."""
    a = normalize(a, fallback=Y_AXIS)
    b = normalize(b, fallback=Y_AXIS)
    axis = np.cross(a, b)
    s = np.linalg.norm(axis)
    c = float(np.clip(np.dot(a, b), -1.0, 1.0))
    if s < 1e-9:
        if c > 0.0:
            return np.eye(3)
        # Opposite directions: half turn around any perpendicular
        return axis_angle_matrix(arbitrary_perpendicular(a), np.pi)
    return axis_angle_matrix(axis / s, np.arctan2(s, c))


def basis_matrix(x_axis: np.ndarray, y_axis: np.ndarray, z_axis: np.ndarray) -> np.ndarray:
    """(3, 3) rotation whose columns are the given local axes."""
    return np.column_stack([x_axis, y_axis, z_axis])


def compose_transform(
    scale=1.0,
    rotation: np.ndarray = None,
    translation: np.ndarray = None,
) -> np.ndarray:
    """Build a (4, 4) affine matrix applying scale, then rotation, then translation.

    Args:
        scale: Uniform float or per-axis (3,) scale
        rotation: (3, 3) rotation matrix, identity if None
        translation: (3,) offset, zero if None
    """
    m = np.eye(4)
    r = np.eye(3) if rotation is None else np.asarray(rotation, dtype=np.float64)
    m[:3, :3] = r * np.broadcast_to(np.asarray(scale, dtype=np.float64), (3,))[None, :]
    if translation is not None:
        m[:3, 3] = translation
    return m
