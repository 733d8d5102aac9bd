"""Receptacle: the swollen stalk tip every other organ attaches to."""

import logging
from dataclasses import dataclass

import numpy as np

from floraison.bezier import cubic_bezier, sample_cubic_bezier
from floraison.errors import ParameterError
from floraison.mesh import Mesh
from floraison.revolution import surface_of_revolution

logger = logging.getLogger(__name__)


@dataclass
class ReceptacleParams:
    height: float = 1.0
    base_radius: float = 0.25
    bulge_radius: float = 0.35
    top_radius: float = 0.15
    bulge_position: float = 0.5  # fraction of height where the bulge peaks
    segments: int = 16
    profile_samples: int = 8
    color: tuple = (1.0, 1.0, 1.0)

    def __post_init__(self):
        if self.height <= 0.0:
            raise ParameterError(f"receptacle height must be positive, got {self.height}")
        for name in ("base_radius", "bulge_radius", "top_radius"):
            if getattr(self, name) < 0.0:
                raise ParameterError(f"receptacle {name} must be non-negative, got {getattr(self, name)}")
        if not 0.0 <= self.bulge_position <= 1.0:
            raise ParameterError(f"receptacle bulge_position must be in [0, 1], got {self.bulge_position}")
        if self.segments < 3:
            raise ParameterError(f"receptacle segments must be at least 3, got {self.segments}")
        if self.profile_samples < 2:
            raise ParameterError(f"receptacle profile_samples must be at least 2, got {self.profile_samples}")

    @classmethod
    def flat(cls) -> "ReceptacleParams":
        """Short, wide disc, as in daisies."""
        return cls(height=0.2, base_radius=0.5, bulge_radius=0.5, top_radius=0.5,
                   bulge_position=0.5, segments=16, profile_samples=4)

    @classmethod
    def convex(cls) -> "ReceptacleParams":
        """Tall dome, as in strawberries."""
        return cls(height=1.2, base_radius=0.2, bulge_radius=0.6, top_radius=0.25,
                   bulge_position=0.6, segments=20, profile_samples=10)

    @classmethod
    def concave(cls) -> "ReceptacleParams":
        """Cup narrowing in the middle."""
        return cls(height=0.8, base_radius=0.4, bulge_radius=0.3, top_radius=0.5,
                   bulge_position=0.3, segments=16, profile_samples=8)

    def control_points(self) -> np.ndarray:
        """(4, 2) cubic Bezier controls of the (radius, height) profile."""
        return np.array([
            [self.base_radius, 0.0],
            [self.base_radius + (self.bulge_radius - self.base_radius) * 0.3, self.height * 0.2],
            [self.bulge_radius, self.height * self.bulge_position],
            [self.top_radius, self.height],
        ])


def profile_point(params: ReceptacleParams, t) -> np.ndarray:
    """(radius, height) on the profile curve at Bezier parameter ``t``."""
    return cubic_bezier(*params.control_points(), t)


def generate(params: ReceptacleParams) -> Mesh:
    """Revolve the receptacle profile around +Y."""
    profile = sample_cubic_bezier(*params.control_points(), params.profile_samples)
    mesh = surface_of_revolution(profile, params.segments, params.color)
    logger.debug("Receptacle: %d vertices, %d triangles", mesh.vertex_count(), mesh.triangle_count())
    return mesh
