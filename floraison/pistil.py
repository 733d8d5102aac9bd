"""Pistil: a tapered style topped by a round stigma."""

import logging
from dataclasses import dataclass

import numpy as np

from floraison.curves import bend_curve, sample_catmull_rom
from floraison.errors import ParameterError
from floraison.mesh import Mesh
from floraison.revolution import surface_of_revolution, uv_sphere
from floraison.sweep import sweep_along_curve
from floraison.vector import compose_transform

logger = logging.getLogger(__name__)

BEND_SAMPLES_PER_SEGMENT = 10
STIGMA_RINGS = 6


@dataclass
class PistilParams:
    length: float = 2.0
    base_radius: float = 0.08
    tip_radius: float = 0.06
    stigma_radius: float = 0.12
    segments: int = 12
    bend: float = 0.0  # sideways bend, 0 to 1
    droop: float = 0.0  # sag of the middle, -1 to 1
    bend_direction: float = 1.0  # +1 bends toward +X, -1 toward -X
    color: tuple = (1.0, 1.0, 1.0)

    def __post_init__(self):
        if self.length <= 0.0:
            raise ParameterError(f"pistil length must be positive, got {self.length}")
        for name in ("base_radius", "tip_radius", "stigma_radius"):
            if getattr(self, name) < 0.0:
                raise ParameterError(f"pistil {name} must be non-negative, got {getattr(self, name)}")
        if self.segments < 3:
            raise ParameterError(f"pistil segments must be at least 3, got {self.segments}")

    @classmethod
    def short(cls) -> "PistilParams":
        return cls(length=1.0, base_radius=0.15, tip_radius=0.12, stigma_radius=0.2, segments=12)

    @classmethod
    def slender(cls) -> "PistilParams":
        return cls(length=3.0, base_radius=0.05, tip_radius=0.04, stigma_radius=0.08, segments=10)


def generate(params: PistilParams) -> Mesh:
    """Build the style along +Y from the origin with the stigma at its tip."""
    controls = bend_curve(params.length, params.bend, params.droop, params.bend_direction)
    if controls is None:
        style = surface_of_revolution(
            [[params.base_radius, 0.0], [params.tip_radius, params.length]],
            params.segments,
            params.color,
        )
        tip = np.array([0.0, params.length, 0.0])
    else:
        centerline = sample_catmull_rom(controls, BEND_SAMPLES_PER_SEGMENT)
        radii = np.linspace(params.base_radius, params.tip_radius, len(centerline))
        style = sweep_along_curve(centerline, radii, params.segments, params.color)
        tip = centerline[-1]

    meshes = [style]
    if params.stigma_radius > 0.0:
        stigma = uv_sphere(params.stigma_radius, STIGMA_RINGS, params.segments, params.color)
        meshes.append(stigma.transform(compose_transform(translation=tip)))

    mesh = Mesh.concatenate(meshes)
    logger.debug("Pistil: %d vertices, %d triangles", mesh.vertex_count(), mesh.triangle_count())
    return mesh
