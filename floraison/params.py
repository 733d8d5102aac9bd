"""Generation request documents: JSON-style dicts to parameter dataclasses.

Every section is optional and falls back to the dataclass defaults. Unknown
keys, wrong types and out-of-range values raise ParameterError with the
dotted path of the offending entry, for example
``flower.petal.resolution``.
"""

import json
import numbers
from dataclasses import dataclass, field

import numpy as np

from floraison import sepal
from floraison.diagram import ArrangementPattern, ComponentWhorl, FloralDiagram
from floraison.errors import ParameterError
from floraison.flower import FlowerParams
from floraison.patterns import CurveMode, InflorescenceParams, PatternType
from floraison.petal import PetalParams
from floraison.pistil import PistilParams
from floraison.receptacle import ReceptacleParams
from floraison.stamen import StamenParams


@dataclass
class GenerationRequest:
    flower: FlowerParams = field(default_factory=FlowerParams)
    inflorescence: InflorescenceParams = None
    include_wilt: bool = True


def _float(value, path: str) -> float:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise ParameterError(f"{path}: expected a number, got {value!r}")
    if not np.isfinite(value):
        raise ParameterError(f"{path}: expected a finite number, got {value!r}")
    return float(value)


def _int(value, path: str) -> int:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise ParameterError(f"{path}: expected an integer, got {value!r}")
    return int(value)


def _bool(value, path: str) -> bool:
    if not isinstance(value, bool):
        raise ParameterError(f"{path}: expected true or false, got {value!r}")
    return value


def _optional(convert):
    def parse(value, path):
        return None if value is None else convert(value, path)
    return parse


def _vector(width: int):
    def parse(value, path):
        if not isinstance(value, (list, tuple)) or len(value) != width:
            raise ParameterError(f"{path}: expected a list of {width} numbers, got {value!r}")
        return tuple(_float(v, f"{path}[{i}]") for i, v in enumerate(value))
    return parse


def _color(value, path: str) -> tuple:
    rgb = _vector(3)(value, path)
    if any(c < 0.0 or c > 1.0 for c in rgb):
        raise ParameterError(f"{path}: color components must be in [0, 1], got {value!r}")
    return rgb


def _points(width: int, minimum: int):
    def parse(value, path):
        if not isinstance(value, (list, tuple)) or len(value) < minimum:
            raise ParameterError(f"{path}: expected at least {minimum} points")
        return tuple(_vector(width)(p, f"{path}[{i}]") for i, p in enumerate(value))
    return parse


def _enum(enum_cls):
    def parse(value, path):
        for member in enum_cls:
            if value == member.value:
                return member
        choices = ", ".join(m.value for m in enum_cls)
        raise ParameterError(f"{path}: unknown {enum_cls.__name__} {value!r} (expected one of {choices})")
    return parse


def _arrangement(value, path: str) -> dict:
    """``"EvenlySpaced"``, ``"GoldenSpiral"`` or ``{"CustomOffset": step}``."""
    if isinstance(value, dict):
        if set(value) != {"CustomOffset"}:
            raise ParameterError(f"{path}: expected {{\"CustomOffset\": step}}, got {value!r}")
        step = _float(value["CustomOffset"], f"{path}.CustomOffset")
        return {"pattern": ArrangementPattern.CUSTOM_OFFSET, "custom_step": step}
    pattern = _enum(ArrangementPattern)(value, path)
    if pattern is ArrangementPattern.CUSTOM_OFFSET:
        raise ParameterError(f"{path}: CustomOffset needs a step, use {{\"CustomOffset\": step}}")
    return {"pattern": pattern}


def _build(cls, schema: dict, data, path: str, base=None, extra: dict = None):
    """Instantiate ``cls`` from ``data`` using per-key converters.

    Keys missing from ``data`` keep the value from ``base`` when given,
    otherwise the dataclass default. ``extra`` holds already converted
    keyword arguments.
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ParameterError(f"{path}: expected an object, got {type(data).__name__}")
    unknown = sorted(set(data) - set(schema))
    if unknown:
        raise ParameterError(f"{path}: unknown field(s) {', '.join(unknown)}")

    kwargs = {}
    if base is not None:
        kwargs.update({key: getattr(base, key) for key in schema if hasattr(base, key)})
    for key, value in data.items():
        kwargs[key] = schema[key](value, f"{path}.{key}")
    kwargs.update(extra or {})
    try:
        return cls(**kwargs)
    except ParameterError as e:
        raise type(e)(f"{path}: {e}") from e
    except TypeError as e:
        raise ParameterError(f"{path}: {e}") from e


RECEPTACLE_SCHEMA = {
    "height": _float,
    "base_radius": _float,
    "bulge_radius": _float,
    "top_radius": _float,
    "bulge_position": _float,
    "segments": _int,
    "profile_samples": _int,
    "color": _color,
}

PISTIL_SCHEMA = {
    "length": _float,
    "base_radius": _float,
    "tip_radius": _float,
    "stigma_radius": _float,
    "segments": _int,
    "bend": _float,
    "droop": _float,
    "bend_direction": _float,
    "color": _color,
}

STAMEN_SCHEMA = {
    "filament_length": _float,
    "filament_radius": _float,
    "anther_length": _float,
    "anther_width": _float,
    "anther_height": _float,
    "segments": _int,
    "filament_curve": _optional(_points(3, 4)),
    "bend": _float,
    "droop": _float,
    "bend_direction": _float,
    "color": _color,
}

PETAL_SCHEMA = {
    "length": _float,
    "width": _float,
    "tip_sharpness": _float,
    "base_width": _float,
    "curl": _float,
    "twist": _float,
    "ruffle_freq": _float,
    "ruffle_amp": _float,
    "lateral_curve": _float,
    "resolution": _int,
    "color": _color,
}

WHORL_SCHEMA = {
    "count": _int,
    "radius": _float,
    "height": _float,
    "rotation_offset": _float,
    "tilt_angle": _float,
}


def _whorls(value, path: str) -> list:
    if not isinstance(value, list):
        raise ParameterError(f"{path}: expected a list of whorls, got {value!r}")
    whorls = []
    for i, item in enumerate(value):
        item_path = f"{path}[{i}]"
        if not isinstance(item, dict):
            raise ParameterError(f"{item_path}: expected an object, got {type(item).__name__}")
        for required in ("count", "radius", "height"):
            if required not in item:
                raise ParameterError(f"{item_path}: missing field {required}")
        item = dict(item)
        pattern = item.pop("pattern", None)
        extra = _arrangement(pattern, f"{item_path}.pattern") if pattern is not None else None
        whorls.append(_build(ComponentWhorl, WHORL_SCHEMA, item, item_path, extra=extra))
    return whorls


DIAGRAM_SCHEMA = {
    "receptacle_height": _float,
    "receptacle_radius": _float,
    "petal_whorls": _whorls,
    "stamen_whorls": _whorls,
    "pistil_whorls": _whorls,
    "sepal_whorls": _whorls,
    "position_jitter": _float,
    "angle_jitter": _float,
    "size_jitter": _float,
    "jitter_seed": _int,
}

INFLORESCENCE_SCHEMA = {
    "pattern": _enum(PatternType),
    "axis_length": _float,
    "branch_count": _int,
    "angle_top": _float,
    "angle_bottom": _float,
    "branch_length_top": _float,
    "branch_length_bottom": _float,
    "rotation_angle": _float,
    "flower_size_top": _float,
    "flower_size_bottom": _float,
    "recursion_depth": _int,
    "max_recursion_depth": _int,
    "branch_ratio": _float,
    "angle_divergence": _float,
    "sub_branch_count": _optional(_int),
    "age_distribution": _float,
    "axis_curve_amount": _float,
    "axis_curve_direction": _vector(3),
    "axis_profile": _optional(_points(2, 3)),
    "branch_curve_amount": _float,
    "branch_curve_mode": _enum(CurveMode),
    "stem_radius": _float,
    "stem_segments": _int,
    "stem_color": _color,
}


def parse_diagram(data, path: str = "diagram") -> FloralDiagram:
    return _build(FloralDiagram, DIAGRAM_SCHEMA, data, path)


def parse_flower(data, path: str = "flower") -> FlowerParams:
    """FlowerParams from a ``flower`` section; missing sections use defaults."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ParameterError(f"{path}: expected an object, got {type(data).__name__}")
    sections = {
        "diagram": lambda v, p: parse_diagram(v, p),
        "receptacle": lambda v, p: _build(ReceptacleParams, RECEPTACLE_SCHEMA, v, p),
        "pistil": lambda v, p: _build(PistilParams, PISTIL_SCHEMA, v, p),
        "stamen": lambda v, p: _build(StamenParams, STAMEN_SCHEMA, v, p),
        "petal": lambda v, p: _build(PetalParams, PETAL_SCHEMA, v, p),
        # Sepal fields override the green sepal defaults rather than petal defaults
        "sepal": lambda v, p: _build(PetalParams, PETAL_SCHEMA, v, p, base=sepal.default()),
    }
    return _build(FlowerParams, sections, data, path)


def parse_inflorescence(data, path: str = "inflorescence") -> InflorescenceParams:
    return _build(InflorescenceParams, INFLORESCENCE_SCHEMA, data, path)


def parse_request(document) -> GenerationRequest:
    """Validate a whole request document.

    Args:
        document: dict with an optional ``flower`` section, an optional
            ``inflorescence`` section and an optional ``include_wilt`` flag

    Raises:
        ParameterError: if any part of the document is malformed
    """
    if not isinstance(document, dict):
        raise ParameterError(f"request: expected an object, got {type(document).__name__}")
    unknown = sorted(set(document) - {"flower", "inflorescence", "include_wilt"})
    if unknown:
        raise ParameterError(f"request: unknown field(s) {', '.join(unknown)}")

    inflorescence = document.get("inflorescence")
    return GenerationRequest(
        flower=parse_flower(document.get("flower")),
        inflorescence=parse_inflorescence(inflorescence) if inflorescence is not None else None,
        include_wilt=_bool(document.get("include_wilt", True), "request.include_wilt"),
    )


def load_request(path: str) -> GenerationRequest:
    """Read and validate a JSON request file."""
    with open(path) as f:
        try:
            document = json.load(f)
        except json.JSONDecodeError as e:
            raise ParameterError(f"{path}: invalid JSON ({e})") from e
    return parse_request(document)
