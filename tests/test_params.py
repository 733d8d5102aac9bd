"""Tests for request document parsing and validation."""

import json

import numpy as np
import pytest

from floraison import sepal
from floraison.diagram import ArrangementPattern
from floraison.errors import FloraisonError, ParameterError, RecursionDepthError
from floraison.params import load_request, parse_diagram, parse_flower, parse_inflorescence, parse_request
from floraison.patterns import CurveMode, PatternType


class TestParseRequest:
    def test_empty_document(self):
        request = parse_request({})
        assert request.inflorescence is None
        assert request.include_wilt is True
        assert len(request.flower.diagram.petal_whorls) == 1

    def test_not_an_object(self):
        with pytest.raises(ParameterError):
            parse_request([1, 2, 3])

    def test_unknown_top_level(self):
        with pytest.raises(ParameterError, match="request: unknown field"):
            parse_request({"flowers": {}})

    def test_include_wilt(self):
        assert parse_request({"include_wilt": False}).include_wilt is False
        with pytest.raises(ParameterError, match="request.include_wilt"):
            parse_request({"include_wilt": "no"})

    def test_full_document(self):
        request = parse_request({
            "flower": {
                "receptacle": {"height": 0.8, "segments": 12},
                "petal": {"length": 2.0, "curl": 0.2, "color": [1.0, 0.4, 0.6]},
                "diagram": {
                    "petal_whorls": [{"count": 5, "radius": 1.0, "height": 0.7, "pattern": "GoldenSpiral"}],
                    "size_jitter": 0.1,
                },
            },
            "inflorescence": {"pattern": "Umbel", "branch_count": 4, "branch_curve_mode": "GradientDown"},
        })
        assert request.flower.receptacle.height == 0.8
        assert request.flower.receptacle.segments == 12
        assert request.flower.petal.color == (1.0, 0.4, 0.6)
        assert request.flower.diagram.petal_whorls[0].pattern is ArrangementPattern.GOLDEN_SPIRAL
        assert request.flower.diagram.size_jitter == 0.1
        assert request.inflorescence.pattern is PatternType.UMBEL
        assert request.inflorescence.branch_curve_mode is CurveMode.GRADIENT_DOWN


class TestErrorPaths:
    def test_unknown_nested_field(self):
        with pytest.raises(ParameterError, match="flower.petal: unknown field"):
            parse_request({"flower": {"petal": {"colour": [1, 1, 1]}}})

    def test_wrong_type(self):
        with pytest.raises(ParameterError, match="flower.petal.resolution"):
            parse_request({"flower": {"petal": {"resolution": "high"}}})

    def test_bool_is_not_a_number(self):
        with pytest.raises(ParameterError, match="flower.pistil.length"):
            parse_request({"flower": {"pistil": {"length": True}}})

    def test_out_of_range(self):
        with pytest.raises(ParameterError, match="^flower.petal: petal length"):
            parse_request({"flower": {"petal": {"length": -1.0}}})

    def test_color_range(self):
        with pytest.raises(ParameterError, match=r"flower.stamen.color"):
            parse_request({"flower": {"stamen": {"color": [1.2, 0.0, 0.0]}}})

    def test_color_width(self):
        with pytest.raises(ParameterError, match=r"flower.stamen.color"):
            parse_request({"flower": {"stamen": {"color": [1.0, 0.0]}}})

    def test_whorl_path(self):
        with pytest.raises(ParameterError, match=r"diagram.stamen_whorls\[1\]"):
            parse_diagram({"stamen_whorls": [
                {"count": 3, "radius": 0.5, "height": 0.5},
                {"count": -2, "radius": 0.5, "height": 0.5},
            ]})

    def test_whorl_missing_field(self):
        with pytest.raises(ParameterError, match="missing field radius"):
            parse_diagram({"petal_whorls": [{"count": 3, "height": 0.5}]})

    def test_unknown_enum(self):
        with pytest.raises(ParameterError, match="inflorescence.pattern"):
            parse_inflorescence({"pattern": "Panicle"})

    def test_section_not_an_object(self):
        with pytest.raises(ParameterError, match="flower.pistil"):
            parse_flower({"pistil": 3})

    def test_recursion_depth_keeps_type(self):
        with pytest.raises(RecursionDepthError, match="inflorescence"):
            parse_inflorescence({"pattern": "CompoundRaceme", "recursion_depth": 9})

    def test_errors_share_base(self):
        assert issubclass(ParameterError, FloraisonError)
        assert issubclass(ParameterError, ValueError)


class TestSections:
    def test_custom_offset(self):
        diagram = parse_diagram({"petal_whorls": [
            {"count": 4, "radius": 1.0, "height": 0.6, "pattern": {"CustomOffset": 0.5}},
        ]})
        whorl = diagram.petal_whorls[0]
        assert whorl.pattern is ArrangementPattern.CUSTOM_OFFSET
        np.testing.assert_allclose(whorl.calculate_angles(), [0.0, 0.5, 1.0, 1.5])

    def test_custom_offset_needs_step(self):
        with pytest.raises(ParameterError, match="CustomOffset"):
            parse_diagram({"petal_whorls": [
                {"count": 4, "radius": 1.0, "height": 0.6, "pattern": "CustomOffset"},
            ]})

    def test_sepal_defaults(self):
        flower = parse_flower({"sepal": {"length": 2.0}})
        assert flower.sepal.length == 2.0
        assert flower.sepal.color == sepal.SEPAL_GREEN
        assert flower.sepal.curl == sepal.default().curl

    def test_filament_curve(self):
        flower = parse_flower({"stamen": {"filament_curve": [[0, -1, 0], [0, 0, 0], [0.5, 1, 0], [1, 1.5, 0]]}})
        assert len(flower.stamen.filament_curve) == 4

    def test_filament_curve_too_short(self):
        with pytest.raises(ParameterError, match="flower.stamen.filament_curve"):
            parse_flower({"stamen": {"filament_curve": [[0, 0, 0], [0, 1, 0]]}})

    def test_axis_profile(self):
        params = parse_inflorescence({"axis_profile": [[0, 0], [0.3, 1], [0.1, 2]], "sub_branch_count": None})
        assert params.axis_profile == ((0.0, 0.0), (0.3, 1.0), (0.1, 2.0))
        assert params.sub_branch_count is None


class TestLoadRequest:
    def test_load(self, tmp_path):
        path = tmp_path / "request.json"
        path.write_text(json.dumps({"flower": {"petal": {"resolution": 8}}, "include_wilt": False}))
        request = load_request(str(path))
        assert request.flower.petal.resolution == 8
        assert request.include_wilt is False

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")
        with pytest.raises(ParameterError, match="invalid JSON"):
            load_request(str(path))
