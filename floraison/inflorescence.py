"""Inflorescence assembly: stems, pedicels and aged flowers along an axis.

Assembly runs in two steps. ``build_structure`` turns parameters into stem
polylines and terminal flower branch points, recursing into sub-patterns
for compound inflorescences. ``assemble_inflorescence`` then sweeps every
stem and places an age-selected flower mesh at every branch point.
"""

import logging
from dataclasses import dataclass, field, replace

import numpy as np

from floraison.aging import FlowerAging, apply_age_distribution, flower_aging
from floraison.axis import AxisCurve
from floraison.curves import curved_points
from floraison.flower import FlowerParams
from floraison.mesh import Mesh
from floraison.patterns import (
    COMPOUND_BASE,
    BranchPoint,
    CurveMode,
    InflorescenceParams,
    generate_branch_points,
)
from floraison.reconstruct import reconstruct_3d_curve
from floraison.sweep import sweep_along_curve
from floraison.vector import X_AXIS, Y_AXIS, compose_transform, normalize, rotation_between

logger = logging.getLogger(__name__)

# Pedicels shorter than this are not drawn
MIN_PEDICEL_LENGTH = 0.01
PEDICEL_RADIUS_RATIO = 0.6
AXIS_CURVE_POINTS = 8
PEDICEL_CURVE_POINTS = 6
PROFILE_SAMPLES = 32


@dataclass
class Stem:
    points: np.ndarray
    radius: float
    segments: int


@dataclass
class InflorescenceStructure:
    stems: list = field(default_factory=list)
    flowers: list = field(default_factory=list)

    def extend(self, other: "InflorescenceStructure"):
        self.stems.extend(other.stems)
        self.flowers.extend(other.flowers)


def axis_points(params: InflorescenceParams) -> np.ndarray:
    """Main axis polyline from the origin to height ``axis_length``.

    A drawn ``axis_profile`` is lifted to 3D and rescaled to the axis
    length; otherwise the axis is a straight line, bowed toward
    ``axis_curve_direction`` when ``axis_curve_amount`` is set.
    """
    if params.axis_profile is not None:
        points = reconstruct_3d_curve(params.axis_profile, PROFILE_SAMPLES)
        points = points - points[0]
        return points * (params.axis_length / points[-1, 1])

    end = np.array([0.0, params.axis_length, 0.0])
    return curved_points(np.zeros(3), end, params.axis_curve_amount,
                         params.axis_curve_direction, AXIS_CURVE_POINTS)


def pedicel_curve_amount(branch: BranchPoint, params: InflorescenceParams) -> float:
    """Pedicel bend for a branch, graded by its position on the axis."""
    if params.branch_curve_mode is CurveMode.GRADIENT_UP:
        return params.branch_curve_amount * branch.axis_t ** 2
    if params.branch_curve_mode is CurveMode.GRADIENT_DOWN:
        return params.branch_curve_amount * (1.0 - branch.axis_t) ** 2
    return params.branch_curve_amount


def pedicel_points(branch: BranchPoint, params: InflorescenceParams) -> np.ndarray:
    """Pedicel polyline from the axis to the flower, drooping when curved."""
    side = np.cross(branch.direction, Y_AXIS)
    side = normalize(side) if np.linalg.norm(side) > 0.1 else X_AXIS
    droop = normalize(side + np.array([0.0, -0.5, 0.0]))
    return curved_points(branch.base, branch.position, pedicel_curve_amount(branch, params),
                         droop, PEDICEL_CURVE_POINTS)


def sub_params(params: InflorescenceParams) -> InflorescenceParams:
    """Parameters of the next, smaller level of a compound pattern."""
    ratio = params.branch_ratio
    count = params.sub_branch_count if params.sub_branch_count is not None else params.branch_count
    return replace(
        params,
        axis_length=params.axis_length * ratio,
        branch_count=count,
        branch_length_top=params.branch_length_top * ratio,
        branch_length_bottom=params.branch_length_bottom * ratio,
        flower_size_top=params.flower_size_top * ratio,
        flower_size_bottom=params.flower_size_bottom * ratio,
        stem_radius=params.stem_radius * ratio,
        recursion_depth=params.recursion_depth - 1,
        axis_curve_amount=0.0,
        axis_profile=None,
    )


def build_structure(params: InflorescenceParams, points: np.ndarray) -> InflorescenceStructure:
    """Stems and flower branch points of an inflorescence on the axis ``points``.

    Compound patterns with ``recursion_depth`` above 1 hang a sub-pattern
    on every primary branch, with one level less of depth; the depth is
    validated against ``max_recursion_depth`` when the parameters are built.
    """
    structure = InflorescenceStructure(stems=[Stem(points, params.stem_radius, params.stem_segments)])
    branches = generate_branch_points(params, AxisCurve(points))
    pedicel_radius = params.stem_radius * PEDICEL_RADIUS_RATIO
    pedicel_segments = max(params.stem_segments - 2, 3)

    compound = params.pattern in COMPOUND_BASE and params.recursion_depth > 1
    child = sub_params(params) if compound else None
    for branch in branches:
        if branch.length > MIN_PEDICEL_LENGTH:
            structure.stems.append(Stem(pedicel_points(branch, params), pedicel_radius, pedicel_segments))
        if not compound:
            structure.flowers.append(branch)
            continue
        # Sub-axis grows from the branch tip along the branch direction
        rotation = rotation_between(Y_AXIS, branch.direction)
        local = axis_points(child)
        structure.extend(build_structure(child, local @ rotation.T + branch.position))
    return structure


def place_flower(mesh: Mesh, branch: BranchPoint) -> Mesh:
    """Copy of ``mesh`` scaled, turned from +Y to the branch direction, and moved."""
    matrix = compose_transform(branch.flower_scale, rotation_between(Y_AXIS, branch.direction), branch.position)
    return mesh.transformed(matrix)


def assemble_inflorescence(params: InflorescenceParams, aging: FlowerAging) -> Mesh:
    """Merge swept stems with one aged flower per branch point."""
    structure = build_structure(params, axis_points(params))

    meshes = [
        sweep_along_curve(stem.points, stem.radius, stem.segments, params.stem_color)
        for stem in structure.stems
    ]
    for branch in structure.flowers:
        age = apply_age_distribution(branch.age, params.age_distribution)
        meshes.append(place_flower(aging.select(age), branch))

    mesh = Mesh.concatenate(meshes)
    logger.debug(
        "%s: %d stems, %d flowers, %d vertices",
        params.pattern.value, len(structure.stems), len(structure.flowers), mesh.vertex_count(),
    )
    return mesh


def generate_inflorescence(
    params: InflorescenceParams,
    flower_params: FlowerParams,
    include_wilt: bool = True,
) -> Mesh:
    """Generate the flower variants once, then assemble the inflorescence."""
    return assemble_inflorescence(params, flower_aging(flower_params, include_wilt))
