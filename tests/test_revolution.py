"""Tests for surfaces of revolution and swept tubes."""

import numpy as np
import pytest

from floraison.errors import GeometryError
from floraison.revolution import cone, cylinder, surface_of_revolution, uv_sphere
from floraison.sweep import sweep_along_curve, transport_frames


def face_normals(mesh):
    a, b, c = (mesh.positions[mesh.faces[:, k]] for k in range(3))
    return np.cross(b - a, c - a)


class TestSurfaceOfRevolution:
    def test_cylinder_counts(self):
        mesh = cylinder(1.0, 2.0, 8)
        assert mesh.vertex_count() == 16
        assert mesh.triangle_count() == 16

    def test_cylinder_faces_outward(self):
        mesh = cylinder(1.0, 2.0, 12)
        centroids = mesh.positions[mesh.faces].mean(axis=1)
        radial = centroids * np.array([1.0, 0.0, 1.0])
        assert np.all(np.sum(face_normals(mesh) * radial, axis=-1) > 0.0)

    def test_profile_radius_and_height(self):
        mesh = surface_of_revolution([[0.5, 0.0], [0.8, 1.0], [0.2, 2.0]], 6)
        radii = np.hypot(mesh.positions[:, 0], mesh.positions[:, 2])
        np.testing.assert_allclose(np.unique(np.round(radii, 9)), [0.2, 0.5, 0.8])
        assert mesh.positions[:, 1].max() == pytest.approx(2.0)

    def test_uvs(self):
        mesh = cylinder(1.0, 1.0, 4)
        np.testing.assert_allclose(mesh.uvs[:4, 1], 0.0)
        np.testing.assert_allclose(mesh.uvs[4:, 1], 1.0)
        np.testing.assert_allclose(mesh.uvs[:4, 0], [0.0, 0.25, 0.5, 0.75])

    def test_cone_apex_is_single_vertex(self):
        mesh = cone(1.0, 2.0, 10)
        assert mesh.vertex_count() == 11
        assert mesh.triangle_count() == 10
        np.testing.assert_allclose(mesh.positions[-1], [0.0, 2.0, 0.0])
        np.testing.assert_allclose(mesh.uvs[-1], [0.5, 1.0])

    def test_too_few_segments(self):
        with pytest.raises(GeometryError):
            cylinder(1.0, 1.0, 2)

    def test_profile_needs_two_points(self):
        with pytest.raises(GeometryError):
            surface_of_revolution([[1.0, 0.0]], 8)


class TestSphere:
    def test_counts(self):
        mesh = uv_sphere(1.0, 4, 8)
        # Two poles plus three rings
        assert mesh.vertex_count() == 2 + 3 * 8
        assert mesh.triangle_count() == 2 * 8 + 2 * 2 * 8

    def test_on_sphere(self):
        mesh = uv_sphere(0.7, 6, 10)
        np.testing.assert_allclose(np.linalg.norm(mesh.positions, axis=-1), 0.7)

    def test_normals_outward(self):
        mesh = uv_sphere(1.0, 6, 10)
        assert np.all(np.sum(mesh.normals * mesh.positions, axis=-1) > 0.5)
        centroids = mesh.positions[mesh.faces].mean(axis=1)
        assert np.all(np.sum(face_normals(mesh) * centroids, axis=-1) > 0.0)

    def test_needs_two_rings(self):
        with pytest.raises(GeometryError):
            uv_sphere(1.0, 1, 8)


class TestSweep:
    def test_straight_tube(self):
        curve = np.array([[0.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 2.0, 0.0]])
        mesh = sweep_along_curve(curve, 0.5, 8)
        assert mesh.vertex_count() == 24
        assert mesh.triangle_count() == 2 * 2 * 8
        np.testing.assert_allclose(np.hypot(mesh.positions[:, 0], mesh.positions[:, 2]), 0.5)

    def test_faces_outward(self):
        curve = np.array([[0.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 2.0, 0.0]])
        mesh = sweep_along_curve(curve, 0.3, 10)
        centroids = mesh.positions[mesh.faces].mean(axis=1)
        radial = centroids * np.array([1.0, 0.0, 1.0])
        assert np.all(np.sum(face_normals(mesh) * radial, axis=-1) > 0.0)
        assert np.all(np.sum(mesh.normals * mesh.positions * np.array([1.0, 0.0, 1.0]), axis=-1) > 0.0)

    def test_tapered_radius(self):
        curve = np.array([[0.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
        mesh = sweep_along_curve(curve, np.array([0.2, 0.1]), 6)
        r = np.hypot(mesh.positions[:, 0], mesh.positions[:, 2])
        np.testing.assert_allclose(r[:6], 0.2)
        np.testing.assert_allclose(r[6:], 0.1)

    def test_uv_arc_length(self):
        curve = np.array([[0.0, 0.0, 0.0], [0.0, 1.0, 0.0], [0.0, 4.0, 0.0]])
        mesh = sweep_along_curve(curve, 0.1, 4)
        np.testing.assert_allclose(mesh.uvs[4:8, 1], 0.25)

    def test_needs_two_points(self):
        with pytest.raises(GeometryError):
            sweep_along_curve(np.zeros((1, 3)), 0.1, 8)

    def test_too_few_segments(self):
        with pytest.raises(GeometryError):
            sweep_along_curve(np.array([[0.0, 0.0, 0.0], [0.0, 1.0, 0.0]]), 0.1, 2)


class TestTransportFrames:
    def test_orthonormal_on_helix(self):
        s = np.linspace(0.0, 4.0 * np.pi, 60)
        curve = np.stack([np.cos(s), 0.3 * s, np.sin(s)], axis=-1)
        tangents, normals, binormals = transport_frames(curve)
        np.testing.assert_allclose(np.linalg.norm(tangents, axis=-1), 1.0)
        np.testing.assert_allclose(np.linalg.norm(normals, axis=-1), 1.0)
        np.testing.assert_allclose(np.sum(tangents * normals, axis=-1), 0.0, atol=1e-9)
        np.testing.assert_allclose(binormals, np.cross(tangents, normals))

    def test_repeated_points(self):
        curve = np.array([[0.0, 0.0, 0.0], [0.0, 0.0, 0.0], [0.0, 1.0, 0.0]])
        tangents, normals, _ = transport_frames(curve)
        assert np.all(np.isfinite(tangents))
        np.testing.assert_allclose(np.linalg.norm(normals, axis=-1), 1.0)
