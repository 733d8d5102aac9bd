"""Flower assembly: organ templates placed on the receptacle surface.

Every organ mesh is generated once, then copied, scaled, rotated and moved
to each of its placements from the floral diagram.
"""

import logging
from dataclasses import dataclass, field

import numpy as np

from floraison import petal, pistil, receptacle, sepal, stamen
from floraison.bezier import cubic_bezier_derivative
from floraison.diagram import ComponentPlacement, ComponentType, FloralDiagram
from floraison.mesh import Mesh
from floraison.petal import PetalParams
from floraison.pistil import PistilParams
from floraison.receptacle import ReceptacleParams, profile_point
from floraison.stamen import StamenParams
from floraison.vector import Y_AXIS, axis_angle_matrix, basis_matrix, compose_transform, normalize

logger = logging.getLogger(__name__)

# Placements closer to the axis than this sit on it, upright
CENTER_RADIUS = 1e-3


@dataclass
class FlowerParams:
    diagram: FloralDiagram = field(default_factory=FloralDiagram.lily)
    receptacle: ReceptacleParams = field(default_factory=ReceptacleParams)
    pistil: PistilParams = field(default_factory=PistilParams)
    stamen: StamenParams = field(default_factory=StamenParams)
    petal: PetalParams = field(default_factory=PetalParams)
    sepal: PetalParams = field(default_factory=sepal.default)

    @classmethod
    def lily(cls) -> "FlowerParams":
        return cls(
            diagram=FloralDiagram.lily(),
            receptacle=ReceptacleParams(height=1.0, base_radius=0.2, bulge_radius=0.3, top_radius=0.15),
            pistil=PistilParams.slender(),
            stamen=StamenParams.slender(),
            petal=PetalParams(length=4.0, width=1.2, tip_sharpness=0.5, base_width=0.3, curl=-0.3,
                              color=(1.0, 0.95, 0.9)),
        )

    @classmethod
    def five_petal(cls) -> "FlowerParams":
        return cls(
            diagram=FloralDiagram.five_petal(),
            receptacle=ReceptacleParams(height=0.8, base_radius=0.3, bulge_radius=0.4, top_radius=0.25),
            pistil=PistilParams.short(),
            stamen=StamenParams.short(),
            petal=PetalParams.wide(),
        )

    @classmethod
    def daisy(cls) -> "FlowerParams":
        return cls(
            diagram=FloralDiagram.daisy(),
            receptacle=ReceptacleParams.flat(),
            pistil=PistilParams(length=0.3, base_radius=0.05, tip_radius=0.04, stigma_radius=0.06, segments=8),
            stamen=StamenParams.short(),
            petal=PetalParams.narrow(),
        )

    @classmethod
    def four_petal(cls) -> "FlowerParams":
        return cls(
            diagram=FloralDiagram.four_petal(),
            receptacle=ReceptacleParams(height=0.6, base_radius=0.25, bulge_radius=0.3, top_radius=0.2),
            pistil=PistilParams.short(),
            stamen=StamenParams.short(),
            petal=PetalParams(length=2.0, width=1.4, tip_sharpness=0.2, base_width=0.4, resolution=14),
        )


class ReceptacleMapper:
    """Maps diagram placements to points and frames on the receptacle."""

    def __init__(self, params: ReceptacleParams):
        self.params = params
        self.controls = params.control_points()

    def profile_at(self, height_fraction: float) -> tuple[np.ndarray, np.ndarray]:
        """(radius, height) and its derivative at a fraction along the profile."""
        t = float(np.clip(height_fraction, 0.0, 1.0))
        return profile_point(self.params, t), cubic_bezier_derivative(*self.controls, t)

    def radius_at(self, height_fraction: float) -> float:
        return float(self.profile_at(height_fraction)[0][0])

    def position(self, placement: ComponentPlacement) -> np.ndarray:
        """Surface point of a placement, with its radius scaled by the placement radius."""
        (radius, height), _ = self.profile_at(placement.height)
        r = radius * placement.radius
        return np.array([r * np.cos(placement.angle), height, r * np.sin(placement.angle)])

    def orientation(self, placement: ComponentPlacement) -> np.ndarray:
        """(3, 3) rotation taking the organ template into place.

        Pistils and stamens grow upright and lean outward by the tilt
        angle. Petals and sepals lie along the outward surface normal and
        are lifted toward vertical by the tilt angle.
        """
        if placement.component_type is ComponentType.PISTIL and placement.radius < CENTER_RADIUS:
            return np.eye(3)

        a = placement.angle
        tangent = np.array([-np.sin(a), 0.0, np.cos(a)])
        if placement.component_type in (ComponentType.PISTIL, ComponentType.STAMEN):
            direction = axis_angle_matrix(tangent, -placement.tilt_angle) @ Y_AXIS
        else:
            _, (dr, dy) = self.profile_at(placement.height)
            n = normalize(np.array([dy, -dr]), fallback=np.array([1.0, 0.0]))
            outward = np.array([n[0] * np.cos(a), n[1], n[0] * np.sin(a)])
            direction = axis_angle_matrix(tangent, placement.tilt_angle) @ outward

        z_axis = normalize(np.cross(tangent, direction))
        y_axis = np.cross(z_axis, tangent)
        return basis_matrix(tangent, y_axis, z_axis)

    def transform(self, placement: ComponentPlacement) -> np.ndarray:
        """(4, 4) scale, then rotation, then translation."""
        return compose_transform(placement.scale, self.orientation(placement), self.position(placement))


def build_templates(params: FlowerParams) -> dict:
    """One mesh per organ type that the diagram actually uses."""
    builders = {
        ComponentType.PISTIL: lambda: pistil.generate(params.pistil),
        ComponentType.STAMEN: lambda: stamen.generate(params.stamen),
        ComponentType.PETAL: lambda: petal.generate(params.petal),
        ComponentType.SEPAL: lambda: sepal.generate(params.sepal),
    }
    return {
        component_type: builders[component_type]()
        for component_type, whorls in params.diagram.whorls_by_type()
        if any(w.count > 0 for w in whorls)
    }


def generate_flower(params: FlowerParams) -> Mesh:
    """Assemble a complete flower around +Y with its base at the origin.

    Merge order is receptacle, pistils, stamens, petals, sepals.
    """
    mapper = ReceptacleMapper(params.receptacle)
    templates = build_templates(params)

    meshes = [receptacle.generate(params.receptacle)]
    for placement in params.diagram.generate_placements():
        template = templates[placement.component_type]
        meshes.append(template.transformed(mapper.transform(placement)))

    flower = Mesh.concatenate(meshes)
    logger.debug(
        "Flower: %d organs, %d vertices, %d triangles",
        len(meshes) - 1, flower.vertex_count(), flower.triangle_count(),
    )
    return flower
