"""Branch-point generators for the simple inflorescence patterns.

Each generator is a pure function ``(params, axis) -> list[BranchPoint]``.
Branch angles are in degrees and lift a branch from the axis normal toward
the axis tangent; successive branches turn by ``rotation_angle`` around the
tangent, measured from the normal toward the binormal.

Ages are raw developmental ages in [0, 1] (1 is oldest). The age
distribution of the whole structure is applied later, at assembly.
"""

import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np

from floraison.axis import AxisCurve, AxisSample
from floraison.errors import ParameterError, RecursionDepthError
from floraison.vector import arbitrary_perpendicular, axis_angle_matrix, lerp, normalize

logger = logging.getLogger(__name__)


class PatternType(Enum):
    RACEME = "Raceme"
    SPIKE = "Spike"
    UMBEL = "Umbel"
    CORYMB = "Corymb"
    DICHASIUM = "Dichasium"
    DREPANIUM = "Drepanium"
    COMPOUND_RACEME = "CompoundRaceme"
    COMPOUND_UMBEL = "CompoundUmbel"


class CurveMode(Enum):
    """How pedicel curvature varies with branch age."""
    UNIFORM = "Uniform"
    GRADIENT_UP = "GradientUp"  # young (upper) branches bend most
    GRADIENT_DOWN = "GradientDown"  # old (lower) branches bend most


@dataclass
class InflorescenceParams:
    pattern: PatternType = PatternType.RACEME
    axis_length: float = 10.0
    branch_count: int = 12
    angle_top: float = 45.0  # degrees
    angle_bottom: float = 60.0  # degrees
    branch_length_top: float = 0.5
    branch_length_bottom: float = 1.5
    rotation_angle: float = 137.5  # degrees between successive branches
    flower_size_top: float = 0.8
    flower_size_bottom: float = 1.0

    # Recursive patterns
    recursion_depth: int = 2
    max_recursion_depth: int = 5
    branch_ratio: float = 0.7
    angle_divergence: float = 30.0  # degrees
    sub_branch_count: int = None  # branches per sub-pattern, defaults to branch_count

    # 0 = all buds, 0.5 = natural order, 1 = all open
    age_distribution: float = 0.5

    # Axis and pedicel shape
    axis_curve_amount: float = 0.0
    axis_curve_direction: tuple = (0.0, 0.0, 1.0)
    axis_profile: tuple = None  # drawn (lateral, vertical) stem, lifted to 3D
    branch_curve_amount: float = 0.0
    branch_curve_mode: CurveMode = CurveMode.UNIFORM
    stem_radius: float = 0.05
    stem_segments: int = 8
    stem_color: tuple = (0.3, 0.5, 0.2)

    def __post_init__(self):
        if not isinstance(self.pattern, PatternType):
            raise ParameterError(f"pattern must be a PatternType, got {self.pattern!r}")
        if not isinstance(self.branch_curve_mode, CurveMode):
            raise ParameterError(f"branch_curve_mode must be a CurveMode, got {self.branch_curve_mode!r}")
        for name in ("branch_count", "recursion_depth", "max_recursion_depth", "stem_segments"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, np.integer)):
                raise ParameterError(f"{name} must be an integer, got {value!r}")
        if self.sub_branch_count is not None and (
            isinstance(self.sub_branch_count, bool) or not isinstance(self.sub_branch_count, (int, np.integer))
            or self.sub_branch_count < 0
        ):
            raise ParameterError(f"sub_branch_count must be a non-negative integer, got {self.sub_branch_count!r}")
        if self.branch_count < 0:
            raise ParameterError(f"branch_count must be non-negative, got {self.branch_count}")
        if self.axis_length <= 0.0:
            raise ParameterError(f"axis_length must be positive, got {self.axis_length}")
        for name in ("branch_length_top", "branch_length_bottom"):
            if getattr(self, name) < 0.0:
                raise ParameterError(f"{name} must be non-negative, got {getattr(self, name)}")
        for name in ("flower_size_top", "flower_size_bottom"):
            if getattr(self, name) <= 0.0:
                raise ParameterError(f"{name} must be positive, got {getattr(self, name)}")
        if not 0.0 < self.branch_ratio <= 1.0:
            raise ParameterError(f"branch_ratio must be in (0, 1], got {self.branch_ratio}")
        if not 0.0 <= self.age_distribution <= 1.0:
            raise ParameterError(f"age_distribution must be in [0, 1], got {self.age_distribution}")
        if self.axis_curve_amount < 0.0 or self.branch_curve_amount < 0.0:
            raise ParameterError("curve amounts must be non-negative")
        if self.stem_radius <= 0.0:
            raise ParameterError(f"stem_radius must be positive, got {self.stem_radius}")
        if self.stem_segments < 3:
            raise ParameterError(f"stem_segments must be at least 3, got {self.stem_segments}")
        if self.max_recursion_depth < 0:
            raise ParameterError(f"max_recursion_depth must be non-negative, got {self.max_recursion_depth}")
        if self.recursion_depth < 0:
            raise ParameterError(f"recursion_depth must be non-negative, got {self.recursion_depth}")
        if self.recursion_depth > self.max_recursion_depth:
            raise RecursionDepthError(
                f"recursion_depth {self.recursion_depth} exceeds max_recursion_depth {self.max_recursion_depth}"
            )
        if self.axis_profile is not None:
            profile = np.asarray(self.axis_profile, dtype=np.float64)
            if profile.ndim != 2 or profile.shape[1] != 2 or len(profile) < 3:
                raise ParameterError("axis_profile needs at least 3 (lateral, vertical) points")
            self.axis_profile = tuple(map(tuple, profile.tolist()))

    @classmethod
    def for_pattern(cls, pattern: PatternType, **overrides) -> "InflorescenceParams":
        """Defaults suited to a pattern, with keyword overrides."""
        presets = {
            PatternType.SPIKE: dict(branch_length_top=0.0, branch_length_bottom=0.0),
            PatternType.UMBEL: dict(axis_length=6.0, branch_count=10, angle_top=40.0,
                                    branch_length_top=2.5, branch_length_bottom=2.5),
            PatternType.CORYMB: dict(axis_length=6.0, branch_count=10, angle_top=50.0, angle_bottom=70.0),
            PatternType.DICHASIUM: dict(axis_length=6.0, recursion_depth=3, branch_length_top=1.5),
            PatternType.DREPANIUM: dict(axis_length=6.0, recursion_depth=5, branch_length_top=1.0),
            PatternType.COMPOUND_RACEME: dict(branch_count=6, recursion_depth=2),
            PatternType.COMPOUND_UMBEL: dict(axis_length=6.0, branch_count=6, recursion_depth=2,
                                             branch_length_top=3.0, branch_length_bottom=3.0),
        }
        values = dict(presets.get(pattern, {}))
        values.update(overrides)
        return cls(pattern=pattern, **values)


@dataclass
class BranchPoint:
    """Attachment of one flower.

    ``position`` is the flower position at the end of a pedicel of
    ``length`` along ``direction``; ``axis_t`` is where the pedicel leaves
    the axis, as a fraction of the axis length.
    """
    position: np.ndarray
    direction: np.ndarray
    length: float
    flower_scale: float
    age: float
    axis_t: float = 0.0

    @property
    def base(self) -> np.ndarray:
        """Point where the pedicel leaves its parent axis."""
        return self.position - self.direction * self.length


def branch_direction(sample: AxisSample, angle: float, rotation: float) -> np.ndarray:
    """Normal lifted by ``angle`` toward the tangent, then turned ``rotation`` around it.

    Both angles are in degrees.
    """
    lift = axis_angle_matrix(sample.binormal, -np.radians(angle))
    spiral = axis_angle_matrix(sample.tangent, np.radians(rotation))
    return normalize(spiral @ lift @ sample.normal)


def _positions_along_axis(count: int) -> np.ndarray:
    """Normalized axis positions of evenly spread branches, bottom to top."""
    if count == 1:
        return np.array([0.5])
    return np.linspace(0.0, 1.0, count)


def raceme(params: InflorescenceParams, axis: AxisCurve) -> list[BranchPoint]:
    """Stalked flowers spiralling up the axis; the lowest opened first."""
    branches = []
    for i, t in enumerate(_positions_along_axis(params.branch_count)):
        sample = axis.sample_at_t(t)
        angle = lerp(params.angle_bottom, params.angle_top, t)
        length = lerp(params.branch_length_bottom, params.branch_length_top, t)
        direction = branch_direction(sample, angle, params.rotation_angle * i)
        branches.append(BranchPoint(
            position=sample.position + direction * length,
            direction=direction,
            length=float(length),
            flower_scale=float(lerp(params.flower_size_bottom, params.flower_size_top, t)),
            age=float(1.0 - t),
            axis_t=float(t),
        ))
    return branches


def spike(params: InflorescenceParams, axis: AxisCurve) -> list[BranchPoint]:
    """Raceme with sessile flowers sitting directly on the axis."""
    branches = []
    for i, t in enumerate(_positions_along_axis(params.branch_count)):
        sample = axis.sample_at_t(t)
        angle = lerp(params.angle_bottom, params.angle_top, t)
        branches.append(BranchPoint(
            position=sample.position.copy(),
            direction=branch_direction(sample, angle, params.rotation_angle * i),
            length=0.0,
            flower_scale=float(lerp(params.flower_size_bottom, params.flower_size_top, t)),
            age=float(1.0 - t),
            axis_t=float(t),
        ))
    return branches


def umbel(params: InflorescenceParams, axis: AxisCurve) -> list[BranchPoint]:
    """Equal rays fanning out from the axis tip, all opening together."""
    sample = axis.sample_at_t(1.0)
    branches = []
    for i in range(params.branch_count):
        direction = branch_direction(sample, params.angle_top, params.rotation_angle * i)
        branches.append(BranchPoint(
            position=sample.position + direction * params.branch_length_top,
            direction=direction,
            length=float(params.branch_length_top),
            flower_scale=float(params.flower_size_top),
            age=1.0,
            axis_t=1.0,
        ))
    return branches


def corymb(params: InflorescenceParams, axis: AxisCurve) -> list[BranchPoint]:
    """Raceme whose pedicels are sized so every flower reaches the axis tip height."""
    target_height = axis.sample_at_t(1.0).position[1]
    branches = []
    for i, t in enumerate(_positions_along_axis(params.branch_count)):
        sample = axis.sample_at_t(t)
        angle = lerp(params.angle_bottom, params.angle_top, t)
        direction = branch_direction(sample, angle, params.rotation_angle * i)
        if abs(direction[1]) > 0.01:
            length = max((target_height - sample.position[1]) / direction[1], 0.0)
        else:
            # Near-horizontal branches cannot climb; keep the nominal length
            length = lerp(params.branch_length_bottom, params.branch_length_top, t)
        branches.append(BranchPoint(
            position=sample.position + direction * length,
            direction=direction,
            length=float(length),
            flower_scale=float(lerp(params.flower_size_bottom, params.flower_size_top, t)),
            age=float(1.0 - t),
            axis_t=float(t),
        ))
    return branches


def _cyme_point(position, direction, length, depth, max_depth, params, shrink) -> BranchPoint:
    t = depth / max(max_depth, 1)
    return BranchPoint(
        position=position + direction * length,
        direction=direction,
        length=float(length),
        flower_scale=float(params.flower_size_top * (1.0 - shrink * t)),
        age=float(1.0 - depth / max_depth) if max_depth > 0 else 1.0,
        axis_t=1.0,
    )


def dichasium(params: InflorescenceParams, axis: AxisCurve) -> list[BranchPoint]:
    """Forked cyme: every branch ends in a flower and forks into two below it.

    The terminal flower continues the axis and is the oldest; each fork
    turns ``angle_divergence`` either way and shortens by ``branch_ratio``.
    Depth d yields 2^(d+1) - 1 flowers.
    """
    max_depth = params.recursion_depth
    sample = axis.sample_at_t(1.0)
    fork_axis = sample.binormal
    left = axis_angle_matrix(fork_axis, np.radians(params.angle_divergence))
    right = axis_angle_matrix(fork_axis, -np.radians(params.angle_divergence))

    branches = []
    # Explicit stack of (start, direction, length, depth), bounded by max_depth
    stack = [(sample.position, sample.tangent, params.branch_length_top, 0)]
    while stack:
        start, direction, length, depth = stack.pop()
        point = _cyme_point(start, direction, length, depth, max_depth, params, shrink=0.4)
        branches.append(point)
        if depth < max_depth:
            child_length = length * params.branch_ratio
            stack.append((point.position, normalize(right @ direction), child_length, depth + 1))
            stack.append((point.position, normalize(left @ direction), child_length, depth + 1))
    return branches


def drepanium(params: InflorescenceParams, axis: AxisCurve) -> list[BranchPoint]:
    """Sickle-shaped cyme: a chain of single branches curling to one side.

    Each level leans ``angle_divergence`` away from its parent toward a side
    direction that turns ``rotation_angle`` per level around the axis, so
    the chain spirals. The first flower is the oldest.
    """
    max_depth = params.recursion_depth
    sample = axis.sample_at_t(1.0)
    lean = np.radians(params.angle_divergence)

    branches = []
    position, direction, length = sample.position, sample.tangent, params.branch_length_top
    for depth in range(max_depth + 1):
        point = _cyme_point(position, direction, length, depth, max_depth, params, shrink=0.3)
        branches.append(point)

        side = axis_angle_matrix(sample.tangent, np.radians(params.rotation_angle * depth)) @ sample.normal
        hinge = np.cross(direction, side)
        if np.linalg.norm(hinge) < 1e-9:
            hinge = arbitrary_perpendicular(direction)
        position = point.position
        direction = normalize(axis_angle_matrix(normalize(hinge), lean) @ direction)
        length = length * params.branch_ratio
    return branches


SIMPLE_PATTERNS = {
    PatternType.RACEME: raceme,
    PatternType.SPIKE: spike,
    PatternType.UMBEL: umbel,
    PatternType.CORYMB: corymb,
    PatternType.DICHASIUM: dichasium,
    PatternType.DREPANIUM: drepanium,
}

# Simple pattern each compound pattern repeats at every level
COMPOUND_BASE = {
    PatternType.COMPOUND_RACEME: PatternType.RACEME,
    PatternType.COMPOUND_UMBEL: PatternType.UMBEL,
}


def generate_branch_points(params: InflorescenceParams, axis: AxisCurve) -> list[BranchPoint]:
    """Branch points of a simple pattern, or the primary branches of a compound one."""
    pattern = COMPOUND_BASE.get(params.pattern, params.pattern)
    branches = SIMPLE_PATTERNS[pattern](params, axis)
    logger.debug("%s: %d branch points", params.pattern.value, len(branches))
    return branches
