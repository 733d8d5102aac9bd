"""Surfaces of revolution around the Y axis.

A profile is a list of (radius, height) pairs. Each profile row becomes a
ring of ``segments`` vertices; a row with zero radius collapses to a single
pole vertex joined to its neighbour ring by a triangle fan.
"""

import logging

import numpy as np

from floraison.errors import GeometryError
from floraison.mesh import Mesh

logger = logging.getLogger(__name__)

POLE_RADIUS = 1e-6


def surface_of_revolution(
    profile: np.ndarray,
    segments: int,
    color: tuple = (1.0, 1.0, 1.0),
) -> Mesh:
    """Revolve a (radius, height) profile a full turn around +Y.

    Args:
        profile: (K, 2) profile points, bottom to top
        segments: Vertices per ring, >= 3
        color: RGB applied to every vertex

    Returns:
        Mesh with outward-facing triangles and recomputed normals
    """
    profile = np.asarray(profile, dtype=np.float64)
    if profile.ndim != 2 or profile.shape[1] != 2:
        raise GeometryError(f"Profile must have shape (K, 2), got {profile.shape}")
    if len(profile) < 2:
        raise GeometryError(f"Profile needs at least 2 points, got {len(profile)}")
    if segments < 3:
        raise GeometryError(f"Surface of revolution needs at least 3 segments, got {segments}")

    angles = 2.0 * np.pi * np.arange(segments) / segments
    cos_a, sin_a = np.cos(angles), np.sin(angles)
    n_rings = len(profile)

    positions, uvs, rings = [], [], []
    offset = 0
    for k, (radius, height) in enumerate(profile):
        v = k / (n_rings - 1)
        if abs(radius) < POLE_RADIUS:
            positions.append([[0.0, height, 0.0]])
            uvs.append([[0.5, v]])
            rings.append(np.array([offset]))
            offset += 1
        else:
            positions.append(np.stack([radius * cos_a, np.full(segments, height), radius * sin_a], axis=-1))
            uvs.append(np.stack([np.arange(segments) / segments, np.full(segments, v)], axis=-1))
            rings.append(offset + np.arange(segments))
            offset += segments

    faces = []
    for lower, upper in zip(rings[:-1], rings[1:]):
        if len(lower) == 1 and len(upper) == 1:
            continue
        if len(lower) == 1:
            faces.append(np.stack([np.full(segments, lower[0]), upper, np.roll(upper, -1)], axis=-1))
        elif len(upper) == 1:
            faces.append(np.stack([lower, np.full(segments, upper[0]), np.roll(lower, -1)], axis=-1))
        else:
            lower_next = np.roll(lower, -1)
            upper_next = np.roll(upper, -1)
            faces.append(np.stack([lower, upper, upper_next], axis=-1))
            faces.append(np.stack([lower, upper_next, lower_next], axis=-1))

    positions = np.concatenate(positions, axis=0)
    mesh = Mesh(
        positions=positions,
        uvs=np.concatenate(uvs, axis=0),
        colors=np.tile(np.asarray(color, dtype=np.float64), (len(positions), 1)),
        faces=np.concatenate(faces, axis=0) if faces else None,
    )
    return mesh.compute_normals()


def cylinder(radius: float, height: float, segments: int, color: tuple = (1.0, 1.0, 1.0)) -> Mesh:
    """Open cylinder from y=0 to y=height."""
    return surface_of_revolution([[radius, 0.0], [radius, height]], segments, color)


def cone(radius: float, height: float, segments: int, color: tuple = (1.0, 1.0, 1.0)) -> Mesh:
    """Open-based cone with its apex at y=height."""
    return surface_of_revolution([[radius, 0.0], [0.0, height]], segments, color)


def uv_sphere(radius: float, rings: int, segments: int, color: tuple = (1.0, 1.0, 1.0)) -> Mesh:
    """Sphere centered at the origin with poles on the Y axis.

    Args:
        radius: Sphere radius
        rings: Latitude bands between the poles, >= 2
        segments: Longitude divisions, >= 3
    """
    if rings < 2:
        raise GeometryError(f"Sphere needs at least 2 rings, got {rings}")
    theta = np.pi - np.pi * np.arange(rings + 1) / rings
    profile = np.stack([radius * np.sin(theta), radius * np.cos(theta)], axis=-1)
    # sin(pi) is not exactly zero; snap the poles so they collapse to fans
    profile[0, 0] = 0.0
    profile[-1, 0] = 0.0
    return surface_of_revolution(profile, segments, color)
