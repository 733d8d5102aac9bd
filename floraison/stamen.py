"""Stamen: a thin filament carrying an elongated anther."""

import logging
from dataclasses import dataclass

import numpy as np

from floraison.curves import bend_curve, sample_catmull_rom
from floraison.errors import ParameterError
from floraison.mesh import Mesh
from floraison.revolution import cylinder, uv_sphere
from floraison.sweep import sweep_along_curve
from floraison.vector import Y_AXIS, compose_transform, normalize, rotation_between

logger = logging.getLogger(__name__)

CURVE_SAMPLES_PER_SEGMENT = 20
ANTHER_RINGS = 8


@dataclass
class StamenParams:
    filament_length: float = 1.5
    filament_radius: float = 0.04
    anther_length: float = 0.25
    anther_width: float = 0.07
    anther_height: float = 0.07
    segments: int = 10
    # Explicit Catmull-Rom control points (at least 4) for the filament
    filament_curve: tuple = None
    bend: float = 0.0
    droop: float = 0.0
    bend_direction: float = 1.0
    color: tuple = (1.0, 1.0, 1.0)

    def __post_init__(self):
        for name in ("filament_length", "filament_radius"):
            if getattr(self, name) <= 0.0:
                raise ParameterError(f"stamen {name} must be positive, got {getattr(self, name)}")
        for name in ("anther_length", "anther_width", "anther_height"):
            if getattr(self, name) < 0.0:
                raise ParameterError(f"stamen {name} must be non-negative, got {getattr(self, name)}")
        if self.segments < 3:
            raise ParameterError(f"stamen segments must be at least 3, got {self.segments}")
        if self.filament_curve is not None:
            curve = np.asarray(self.filament_curve, dtype=np.float64)
            if curve.ndim != 2 or curve.shape[1] != 3 or len(curve) < 4:
                raise ParameterError("stamen filament_curve needs at least 4 points of 3 coordinates")
            self.filament_curve = tuple(map(tuple, curve.tolist()))

    @classmethod
    def short(cls) -> "StamenParams":
        return cls(filament_length=0.8, filament_radius=0.05, anther_length=0.2,
                   anther_width=0.1, anther_height=0.1, segments=10)

    @classmethod
    def slender(cls) -> "StamenParams":
        return cls(filament_length=2.5, filament_radius=0.03, anther_length=0.3,
                   anther_width=0.05, anther_height=0.05, segments=8)

    @classmethod
    def elongated_anther(cls) -> "StamenParams":
        return cls(filament_length=1.5, filament_radius=0.04, anther_length=0.4,
                   anther_width=0.06, anther_height=0.06, segments=10)

    def centerline_controls(self) -> np.ndarray:
        """Filament control points, or None for a straight filament."""
        if self.filament_curve is not None:
            return np.asarray(self.filament_curve, dtype=np.float64)
        return bend_curve(self.filament_length, self.bend, self.droop, self.bend_direction)


def generate(params: StamenParams) -> Mesh:
    """Build the filament from the origin with the anther at its tip."""
    controls = params.centerline_controls()
    if controls is None:
        filament = cylinder(params.filament_radius, params.filament_length, params.segments, params.color)
        tip = np.array([0.0, params.filament_length, 0.0])
        direction = Y_AXIS
    else:
        centerline = sample_catmull_rom(controls, CURVE_SAMPLES_PER_SEGMENT)
        filament = sweep_along_curve(centerline, params.filament_radius, params.segments, params.color)
        tip = centerline[-1]
        direction = normalize(centerline[-1] - centerline[-2], fallback=Y_AXIS)

    meshes = [filament]
    radius = max(params.anther_width, params.anther_height)
    if min(params.anther_width, params.anther_height, params.anther_length) > 0.0:
        anther = uv_sphere(radius, ANTHER_RINGS, params.segments, params.color)
        scale = np.array([params.anther_width, params.anther_length, params.anther_height]) / radius
        meshes.append(anther.transform(
            compose_transform(scale, rotation_between(Y_AXIS, direction), tip)
        ))

    mesh = Mesh.concatenate(meshes)
    logger.debug("Stamen: %d vertices, %d triangles", mesh.vertex_count(), mesh.triangle_count())
    return mesh
