"""Tests for lifting drawn 2D stem profiles into 3D."""

import numpy as np
import pytest

from floraison.errors import GeometryError
from floraison.reconstruct import (
    apply_curvature_signs,
    depth_second_derivatives,
    integrate_twice,
    lateral_second_derivatives,
    reconstruct_3d_curve,
    resample_uniform_vertical,
)


class TestResample:
    def test_uniform_steps(self):
        pts = resample_uniform_vertical(np.array([[0.0, 0.0], [1.0, 0.5], [1.0, 3.0]]), 7)
        assert pts.shape == (7, 2)
        np.testing.assert_allclose(np.diff(pts[:, 1]), 0.5)
        assert pts[1, 0] == pytest.approx(1.0)

    def test_non_monotonic_rejected(self):
        with pytest.raises(GeometryError):
            resample_uniform_vertical(np.array([[0.0, 0.0], [1.0, 2.0], [0.0, 1.0]]), 5)

    def test_too_few_points(self):
        with pytest.raises(GeometryError):
            resample_uniform_vertical(np.array([[0.0, 0.0], [1.0, 1.0]]), 5)

    def test_too_few_samples(self):
        with pytest.raises(GeometryError):
            resample_uniform_vertical(np.array([[0.0, 0.0], [0.0, 1.0], [0.0, 2.0]]), 2)


class TestDerivatives:
    def test_lateral_parabola(self):
        y = np.linspace(0.0, 2.0, 9)
        d2 = lateral_second_derivatives(y * y, y[1] - y[0])
        np.testing.assert_allclose(d2, 2.0)

    def test_depth_tops_up_to_budget(self):
        lateral = np.array([1.0, -2.0, 0.5])
        depth = depth_second_derivatives(lateral)
        np.testing.assert_allclose(depth, [np.sqrt(3.0), 0.0, np.sqrt(3.75)])
        np.testing.assert_allclose(depth ** 2 + lateral ** 2, 4.0)

    def test_depth_zero_for_straight(self):
        np.testing.assert_allclose(depth_second_derivatives(np.zeros(6)), 0.0)

    def test_signs_flip_at_inflections(self):
        signed = apply_curvature_signs(np.array([1.0, 1.0, 1.0, 1.0]), np.array([1.0, -1.0, -2.0, 3.0]))
        np.testing.assert_allclose(signed, [1.0, -1.0, -1.0, 1.0])

    def test_sign_flips_through_zero_sample(self):
        signed = apply_curvature_signs(np.ones(5), np.array([1.0, 0.0, -1.0, 0.0, 1.0]))
        np.testing.assert_allclose(signed, [1.0, 1.0, -1.0, -1.0, 1.0])

    def test_integrate_constant(self):
        np.testing.assert_allclose(integrate_twice(np.full(5, 2.0), 1.0), [0.0, 1.0, 4.0, 9.0, 16.0])


class TestReconstruct:
    def test_vertical_line_stays_flat(self):
        pts = reconstruct_3d_curve(np.array([[0.0, 0.0], [0.0, 1.0], [0.0, 2.0], [0.0, 3.0]]))
        assert pts.shape == (4, 3)
        np.testing.assert_allclose(pts[:, 2], 0.0)

    def test_slanted_line_stays_flat(self):
        pts = reconstruct_3d_curve(np.array([[0.0, 0.0], [0.5, 1.0], [1.0, 2.0]]), 20)
        assert pts.shape == (20, 3)
        np.testing.assert_allclose(pts[:, 2], 0.0)
        np.testing.assert_allclose(pts[:, 0], pts[:, 1] * 0.5, atol=1e-12)

    def test_wavy_profile_gains_depth(self):
        y = np.linspace(0.0, np.pi, 30)
        profile = np.stack([0.5 * np.sin(y), y], axis=-1)
        pts = reconstruct_3d_curve(profile)
        assert pts.shape == (30, 3)
        np.testing.assert_allclose(pts[:, :2], profile, atol=1e-12)
        assert pts[0, 2] == 0.0
        assert np.max(np.abs(pts[:, 2])) > 1e-3
        assert np.all(np.isfinite(pts))
