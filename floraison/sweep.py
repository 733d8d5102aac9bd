"""Tubes swept along 3D curves.

Cross-section frames are carried along the curve by parallel transport, so
the tube does not twist around sharp turns the way a fixed up-vector frame
does.
"""

import numpy as np

from floraison.errors import GeometryError
from floraison.mesh import Mesh
from floraison.vector import arbitrary_perpendicular, normalize, rotation_between


def transport_frames(curve: np.ndarray) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Rotation-minimizing frames along a polyline.

    Args:
        curve: (N, 3) points, N >= 2

    Returns:
        tangents, normals, binormals: each (N, 3), with binormal = tangent x normal
    """
    tangents = np.gradient(curve, axis=0)
    tangents = normalize(tangents)
    # Repeated points give zero tangents; reuse the nearest valid one
    for i in range(1, len(tangents)):
        if not np.any(tangents[i]):
            tangents[i] = tangents[i - 1]
    for i in range(len(tangents) - 2, -1, -1):
        if not np.any(tangents[i]):
            tangents[i] = tangents[i + 1]
    if not np.any(tangents[0]):
        tangents[:] = [0.0, 1.0, 0.0]

    normals = np.zeros_like(tangents)
    normals[0] = arbitrary_perpendicular(tangents[0])
    for i in range(1, len(tangents)):
        n = rotation_between(tangents[i - 1], tangents[i]) @ normals[i - 1]
        # Re-orthogonalize against drift
        n = n - tangents[i] * np.dot(n, tangents[i])
        normals[i] = normalize(n, fallback=arbitrary_perpendicular(tangents[i]))
    binormals = np.cross(tangents, normals)
    return tangents, normals, binormals


def sweep_along_curve(
    curve: np.ndarray,
    radius,
    segments: int,
    color: tuple = (1.0, 1.0, 1.0),
) -> Mesh:
    """Sweep a circular cross-section along ``curve``.

    Args:
        curve: (N, 3) centerline, N >= 2
        radius: Scalar radius or (N,) radius per curve point
        segments: Vertices around each cross-section, >= 3
        color: RGB applied to every vertex

    Returns:
        Open tube mesh with radial normals
    """
    curve = np.asarray(curve, dtype=np.float64)
    if curve.ndim != 2 or curve.shape[1] != 3:
        raise GeometryError(f"Sweep curve must have shape (N, 3), got {curve.shape}")
    if len(curve) < 2:
        raise GeometryError(f"Sweep curve needs at least 2 points, got {len(curve)}")
    if segments < 3:
        raise GeometryError(f"Sweep needs at least 3 segments, got {segments}")
    radii = np.broadcast_to(np.asarray(radius, dtype=np.float64), (len(curve),))

    _, normals, binormals = transport_frames(curve)
    angles = 2.0 * np.pi * np.arange(segments) / segments
    # (N, S, 3) unit directions around each ring
    radial = (
        np.cos(angles)[None, :, None] * normals[:, None, :]
        + np.sin(angles)[None, :, None] * binormals[:, None, :]
    )
    positions = curve[:, None, :] + radii[:, None, None] * radial

    seg_lengths = np.linalg.norm(np.diff(curve, axis=0), axis=-1)
    arc = np.concatenate([[0.0], np.cumsum(seg_lengths)])
    v = arc / arc[-1] if arc[-1] > 0.0 else np.linspace(0.0, 1.0, len(curve))
    U, V = np.meshgrid(np.arange(segments) / segments, v)
    uvs = np.stack([U, V], axis=-1)

    n = len(curve)
    ring = np.arange(segments)
    i0 = (np.arange(n - 1)[:, None] * segments + ring[None, :]).reshape(-1)
    i1 = (np.arange(n - 1)[:, None] * segments + np.roll(ring, -1)[None, :]).reshape(-1)
    i2 = i0 + segments
    i3 = i1 + segments
    faces = np.concatenate([np.stack([i0, i1, i2], axis=-1), np.stack([i1, i3, i2], axis=-1)])

    return Mesh(
        positions=positions.reshape(-1, 3),
        normals=radial.reshape(-1, 3),
        uvs=uvs.reshape(-1, 2),
        colors=np.tile(np.asarray(color, dtype=np.float64), (n * segments, 1)),
        faces=faces,
    )
