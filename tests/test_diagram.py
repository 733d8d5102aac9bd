"""Tests for floral diagrams and organ placements."""

import numpy as np
import pytest

from floraison.diagram import (
    ArrangementPattern,
    ComponentType,
    ComponentWhorl,
    FloralDiagram,
    jitter_offsets,
)
from floraison.errors import ParameterError


def jittered(**overrides):
    values = dict(
        petal_whorls=[ComponentWhorl(count=5, radius=1.0, height=0.8)],
        stamen_whorls=[ComponentWhorl(count=8, radius=0.5, height=0.6)],
        position_jitter=0.1,
        angle_jitter=10.0,
        size_jitter=0.2,
        jitter_seed=7,
    )
    values.update(overrides)
    return FloralDiagram(**values)


def by_type(placements, component_type):
    return [p for p in placements if p.component_type is component_type]


class TestComponentWhorl:
    def test_evenly_spaced(self):
        whorl = ComponentWhorl(count=4, radius=1.0, height=0.5, rotation_offset=0.1)
        np.testing.assert_allclose(whorl.calculate_angles(), 0.1 + np.arange(4) * np.pi / 2)

    def test_golden_spiral(self):
        whorl = ComponentWhorl(count=3, radius=1.0, height=0.5, pattern=ArrangementPattern.GOLDEN_SPIRAL)
        np.testing.assert_allclose(np.diff(whorl.calculate_angles()), np.radians(137.50776), rtol=1e-6)

    def test_custom_offset(self):
        whorl = ComponentWhorl(count=3, radius=1.0, height=0.5,
                               pattern=ArrangementPattern.CUSTOM_OFFSET, custom_step=0.25)
        np.testing.assert_allclose(whorl.calculate_angles(), [0.0, 0.25, 0.5])

    def test_empty_whorl(self):
        assert len(ComponentWhorl(count=0, radius=1.0, height=0.5).calculate_angles()) == 0

    def test_negative_count(self):
        with pytest.raises(ParameterError):
            ComponentWhorl(count=-1, radius=1.0, height=0.5)

    def test_fractional_count(self):
        with pytest.raises(ParameterError):
            ComponentWhorl(count=2.5, radius=1.0, height=0.5)

    def test_negative_radius(self):
        with pytest.raises(ParameterError):
            ComponentWhorl(count=3, radius=-0.1, height=0.5)


class TestPlacements:
    def test_lily(self):
        placements = FloralDiagram.lily().generate_placements()
        assert len(placements) == 13
        kinds = [p.component_type for p in placements]
        assert kinds == [ComponentType.PISTIL] + [ComponentType.STAMEN] * 6 + [ComponentType.PETAL] * 6

    def test_order_includes_sepals_last(self):
        diagram = FloralDiagram.lily()
        diagram.sepal_whorls = [ComponentWhorl(count=3, radius=1.0, height=0.9)]
        assert diagram.generate_placements()[-1].component_type is ComponentType.SEPAL

    def test_whorl_values_copied(self):
        diagram = FloralDiagram(petal_whorls=[ComponentWhorl(count=2, radius=0.7, height=0.4, tilt_angle=0.3)])
        for p in diagram.generate_placements():
            assert p.radius == 0.7
            assert p.height == 0.4
            assert p.tilt_angle == 0.3
            assert p.scale == 1.0

    def test_total_count(self):
        diagram = FloralDiagram.five_petal()
        assert diagram.total_count(ComponentType.STAMEN) == 10
        assert diagram.total_count(ComponentType.SEPAL) == 0

    @pytest.mark.parametrize("preset", [FloralDiagram.lily, FloralDiagram.five_petal,
                                        FloralDiagram.daisy, FloralDiagram.four_petal])
    def test_presets_have_no_jitter(self, preset):
        diagram = preset()
        assert not diagram.has_jitter
        assert len(diagram.generate_placements()) > 0

    def test_invalid_receptacle(self):
        with pytest.raises(ParameterError):
            FloralDiagram(receptacle_radius=0.0)

    def test_invalid_seed(self):
        with pytest.raises(ParameterError):
            FloralDiagram(jitter_seed=-3)


class TestJitter:
    def test_offsets_in_range(self):
        for i in range(20):
            offsets = jitter_offsets(1, ComponentType.PETAL, i)
            assert offsets.shape == (3,)
            assert np.all(offsets >= -1.0) and np.all(offsets < 1.0)

    def test_deterministic(self):
        a = jittered().generate_placements()
        b = jittered().generate_placements()
        assert [(p.radius, p.angle, p.scale) for p in a] == [(p.radius, p.angle, p.scale) for p in b]

    def test_seed_changes_result(self):
        a = jittered(jitter_seed=1).generate_placements()
        b = jittered(jitter_seed=2).generate_placements()
        assert [p.angle for p in a] != [p.angle for p in b]

    def test_types_are_independent(self):
        base = by_type(jittered().generate_placements(), ComponentType.STAMEN)
        more_petals = jittered(petal_whorls=[ComponentWhorl(count=9, radius=1.0, height=0.8)])
        other = by_type(more_petals.generate_placements(), ComponentType.STAMEN)
        assert [p.angle for p in base] == [p.angle for p in other]

    def test_bounds(self):
        diagram = jittered(position_jitter=5.0, size_jitter=5.0)
        for p in diagram.generate_placements():
            assert p.radius >= 0.0
            assert p.scale >= 0.1

    def test_angle_jitter_magnitude(self):
        diagram = jittered(position_jitter=0.0, size_jitter=0.0, angle_jitter=10.0)
        nominal = np.arange(5) * 2 * np.pi / 5
        angles = np.array([p.angle for p in by_type(diagram.generate_placements(), ComponentType.PETAL)])
        assert np.all(np.abs(angles - nominal) <= np.radians(10.0))
