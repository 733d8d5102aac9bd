"""Tests for the triangle mesh container."""

import numpy as np
import pytest

from floraison.errors import GeometryError
from floraison.mesh import GenerationResult, Mesh
from floraison.vector import axis_angle_matrix, compose_transform


def make_triangle(offset=0.0):
    return Mesh(
        positions=[[offset, 0, 0], [offset + 1, 0, 0], [offset, 1, 0]],
        uvs=[[0, 0], [1, 0], [0, 1]],
        colors=[[1, 0, 0]] * 3,
        faces=[[0, 1, 2]],
    )


def make_quad():
    return Mesh(
        positions=[[0, 0, 0], [1, 0, 0], [1, 1, 0], [0, 1, 0]],
        faces=[[0, 1, 2], [0, 2, 3]],
    )


class TestMeshBasics:
    def test_empty(self):
        mesh = Mesh.empty()
        assert mesh.is_empty()
        assert mesh.vertex_count() == 0
        assert mesh.triangle_count() == 0
        assert mesh.indices.shape == (0,)

    def test_counts(self):
        mesh = make_quad()
        assert mesh.vertex_count() == 4
        assert mesh.triangle_count() == 2
        np.testing.assert_array_equal(mesh.indices, [0, 1, 2, 0, 2, 3])

    def test_default_attributes(self):
        mesh = make_quad()
        assert mesh.normals.shape == (4, 3)
        assert mesh.uvs.shape == (4, 2)
        assert mesh.colors.shape == (4, 3)

    def test_mismatched_attribute_rejected(self):
        with pytest.raises(GeometryError):
            Mesh(positions=[[0, 0, 0], [1, 0, 0]], colors=[[1, 1, 1]])

    def test_copy_is_independent(self):
        mesh = make_triangle()
        clone = mesh.copy()
        clone.positions[0, 0] = 99.0
        assert mesh.positions[0, 0] == 0.0


class TestMerge:
    def test_merge_offsets_indices(self):
        a = make_triangle()
        b = make_quad()
        a.merge(b)
        assert a.vertex_count() == 7
        assert a.triangle_count() == 3
        np.testing.assert_array_equal(a.faces[1:], [[3, 4, 5], [3, 5, 6]])

    def test_merge_indices_in_range(self):
        a = make_quad()
        b = make_quad()
        total = a.vertex_count() + b.vertex_count()
        a.merge(b)
        assert a.vertex_count() == total
        assert a.indices.max() < a.vertex_count()
        assert a.indices.min() >= 0

    def test_merge_into_empty(self):
        mesh = Mesh.empty().merge(make_triangle())
        np.testing.assert_array_equal(mesh.faces, [[0, 1, 2]])

    def test_concatenate_matches_repeated_merge(self):
        parts = [make_triangle(0.0), make_quad(), make_triangle(5.0)]
        merged = Mesh.empty()
        for part in parts:
            merged.merge(part)
        combined = Mesh.concatenate(parts)
        np.testing.assert_array_equal(combined.faces, merged.faces)
        np.testing.assert_allclose(combined.positions, merged.positions)

    def test_concatenate_skips_empty(self):
        combined = Mesh.concatenate([Mesh.empty(), make_triangle(), Mesh.empty()])
        assert combined.vertex_count() == 3

    def test_concatenate_nothing(self):
        assert Mesh.concatenate([]).is_empty()


class TestTransform:
    def test_translation(self):
        mesh = make_triangle().transform(compose_transform(translation=[1.0, 2.0, 3.0]))
        np.testing.assert_allclose(mesh.positions[0], [1.0, 2.0, 3.0])

    def test_rotation_rotates_normals(self):
        mesh = make_triangle().compute_normals()
        rot = axis_angle_matrix(np.array([1.0, 0.0, 0.0]), np.pi / 2)
        mesh.transform(compose_transform(rotation=rot))
        # +Z rotated a quarter turn around +X becomes -Y
        np.testing.assert_allclose(mesh.normals, np.tile([0.0, -1.0, 0.0], (3, 1)), atol=1e-12)

    def test_nonuniform_scale_keeps_normals_perpendicular(self):
        mesh = Mesh(
            positions=[[0, 0, 0], [1, 0, 0], [0, 1, 1]],
            faces=[[0, 1, 2]],
        ).compute_normals()
        mesh.transform(compose_transform(scale=[1.0, 3.0, 0.5]))
        edge1 = mesh.positions[1] - mesh.positions[0]
        edge2 = mesh.positions[2] - mesh.positions[0]
        for n in mesh.normals:
            assert abs(np.dot(n, edge1)) < 1e-9
            assert abs(np.dot(n, edge2)) < 1e-9
            np.testing.assert_allclose(np.linalg.norm(n), 1.0)

    def test_transformed_leaves_original(self):
        mesh = make_triangle()
        moved = mesh.transformed(compose_transform(translation=[0.0, 5.0, 0.0]))
        assert mesh.positions[0, 1] == 0.0
        assert moved.positions[0, 1] == 5.0


class TestComputeNormals:
    def test_flat_quad_faces_z(self):
        mesh = make_quad().compute_normals()
        np.testing.assert_allclose(mesh.normals, np.tile([0.0, 0.0, 1.0], (4, 1)))

    def test_unit_length(self):
        mesh = Mesh(
            positions=[[0, 0, 0], [1, 0, 0], [0, 1, 0], [0, 0, 1]],
            faces=[[0, 2, 1], [0, 1, 3], [0, 3, 2], [1, 2, 3]],
        ).compute_normals()
        np.testing.assert_allclose(np.linalg.norm(mesh.normals, axis=-1), 1.0)

    def test_degenerate_triangle_contributes_nothing(self):
        mesh = Mesh(
            positions=[[0, 0, 0], [1, 0, 0], [0, 1, 0], [2, 0, 0], [3, 0, 0], [4, 0, 0]],
            faces=[[0, 1, 2], [3, 4, 5]],
        ).compute_normals()
        assert np.all(np.isfinite(mesh.normals))
        np.testing.assert_allclose(mesh.normals[:3], np.tile([0.0, 0.0, 1.0], (3, 1)))
        # Vertices touched only by the zero-area triangle fall back to +Y
        np.testing.assert_allclose(mesh.normals[3:], np.tile([0.0, 1.0, 0.0], (3, 1)))


class TestValidateAndBuffers:
    def test_validate_accepts_good_mesh(self):
        make_quad().validate()

    def test_validate_rejects_bad_index(self):
        mesh = make_quad()
        mesh.faces[0, 0] = 10
        with pytest.raises(GeometryError):
            mesh.validate()

    def test_validate_rejects_nan(self):
        mesh = make_quad()
        mesh.positions[0, 0] = np.nan
        with pytest.raises(GeometryError):
            mesh.validate()

    def test_buffer_layout(self):
        result = make_quad().compute_normals().to_buffers()
        assert result.positions.dtype == np.float32
        assert result.normals.dtype == np.float32
        assert result.uvs.dtype == np.float32
        assert result.colors.dtype == np.float32
        assert result.indices.dtype == np.uint32
        assert result.positions.shape == (12,)
        assert result.uvs.shape == (8,)
        assert result.indices.shape == (6,)
        assert result.vertex_count == 4
        assert result.triangle_count == 2

    def test_save_and_load(self, tmp_path):
        result = make_triangle().to_buffers()
        path = str(tmp_path / "mesh.npz")
        result.save(path)
        loaded = GenerationResult.load(path)
        np.testing.assert_array_equal(loaded.positions, result.positions)
        np.testing.assert_array_equal(loaded.indices, result.indices)
