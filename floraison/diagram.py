"""Floral diagrams: which organs sit where on the receptacle.

A diagram lists whorls of each organ type. Each whorl expands to one
placement per organ: a radius fraction, an azimuth angle and a height
fraction on the receptacle, plus a scale and an outward tilt.
"""

from dataclasses import dataclass, field
from enum import Enum

import numpy as np

from floraison import phyllotaxis
from floraison.errors import ParameterError


class ArrangementPattern(Enum):
    EVENLY_SPACED = "EvenlySpaced"
    GOLDEN_SPIRAL = "GoldenSpiral"
    CUSTOM_OFFSET = "CustomOffset"


class ComponentType(Enum):
    RECEPTACLE = "receptacle"
    PISTIL = "pistil"
    STAMEN = "stamen"
    PETAL = "petal"
    SEPAL = "sepal"


# Keeps jitter sequences of different organ types independent
JITTER_SALTS = {
    ComponentType.RECEPTACLE: 0,
    ComponentType.PISTIL: 1,
    ComponentType.STAMEN: 2,
    ComponentType.PETAL: 3,
    ComponentType.SEPAL: 4,
}


@dataclass
class ComponentWhorl:
    count: int
    radius: float  # fraction of the receptacle radius at this height
    height: float  # fraction along the receptacle profile
    pattern: ArrangementPattern = ArrangementPattern.EVENLY_SPACED
    rotation_offset: float = 0.0  # radians
    tilt_angle: float = 0.0  # radians, away from the default orientation
    custom_step: float = 0.0  # radians between organs for CUSTOM_OFFSET

    def __post_init__(self):
        if isinstance(self.count, bool) or not isinstance(self.count, (int, np.integer)):
            raise ParameterError(f"whorl count must be an integer, got {self.count!r}")
        if self.count < 0:
            raise ParameterError(f"whorl count must be non-negative, got {self.count}")
        if self.radius < 0.0:
            raise ParameterError(f"whorl radius must be non-negative, got {self.radius}")
        if not isinstance(self.pattern, ArrangementPattern):
            raise ParameterError(f"whorl pattern must be an ArrangementPattern, got {self.pattern!r}")

    def calculate_angles(self) -> np.ndarray:
        """Azimuth of every organ in the whorl, in radians."""
        if self.pattern is ArrangementPattern.EVENLY_SPACED:
            return phyllotaxis.evenly_spaced(self.count, self.rotation_offset)
        if self.pattern is ArrangementPattern.GOLDEN_SPIRAL:
            return phyllotaxis.golden_spiral(self.count, self.rotation_offset)
        return phyllotaxis.custom_offset(self.count, self.custom_step, self.rotation_offset)


@dataclass
class ComponentPlacement:
    component_type: ComponentType
    radius: float
    angle: float
    height: float
    scale: float = 1.0
    tilt_angle: float = 0.0


def jitter_offsets(seed: int, component_type: ComponentType, index: int) -> np.ndarray:
    """Three values in [-1, 1) for one organ: radius, angle and scale.

    A fresh generator is keyed by (seed, organ-type salt, index), so the
    offsets of one organ never depend on how many others were drawn.
    """
    rng = np.random.default_rng([seed, JITTER_SALTS[component_type], index])
    return rng.uniform(-1.0, 1.0, size=3)


@dataclass
class FloralDiagram:
    receptacle_height: float = 1.0
    receptacle_radius: float = 0.5
    petal_whorls: list = field(default_factory=list)
    stamen_whorls: list = field(default_factory=list)
    pistil_whorls: list = field(default_factory=list)
    sepal_whorls: list = field(default_factory=list)
    position_jitter: float = 0.0  # radius fraction
    angle_jitter: float = 0.0  # degrees
    size_jitter: float = 0.0  # fraction of the nominal size
    jitter_seed: int = 42

    def __post_init__(self):
        if self.receptacle_height <= 0.0 or self.receptacle_radius <= 0.0:
            raise ParameterError("receptacle dimensions must be positive")
        for name in ("position_jitter", "angle_jitter", "size_jitter"):
            if getattr(self, name) < 0.0:
                raise ParameterError(f"{name} must be non-negative, got {getattr(self, name)}")
        if isinstance(self.jitter_seed, bool) or not isinstance(self.jitter_seed, (int, np.integer)) \
                or self.jitter_seed < 0:
            raise ParameterError(f"jitter_seed must be a non-negative integer, got {self.jitter_seed!r}")

    @classmethod
    def lily(cls) -> "FloralDiagram":
        """Six tepals, six stamens alternating with them, one pistil."""
        return cls(
            receptacle_height=1.0,
            receptacle_radius=0.3,
            petal_whorls=[ComponentWhorl(count=6, radius=1.0, height=0.8)],
            stamen_whorls=[ComponentWhorl(count=6, radius=0.6, height=0.6, rotation_offset=np.pi / 6.0)],
            pistil_whorls=[ComponentWhorl(count=1, radius=0.0, height=0.5)],
        )

    @classmethod
    def five_petal(cls) -> "FloralDiagram":
        """Rose-family pattern with two alternating stamen whorls."""
        return cls(
            receptacle_height=0.8,
            receptacle_radius=0.4,
            petal_whorls=[ComponentWhorl(count=5, radius=1.2, height=0.6)],
            stamen_whorls=[
                ComponentWhorl(count=5, radius=0.7, height=0.5),
                ComponentWhorl(count=5, radius=0.5, height=0.4, rotation_offset=np.pi / 5.0),
            ],
            pistil_whorls=[ComponentWhorl(count=1, radius=0.0, height=0.3)],
        )

    @classmethod
    def daisy(cls) -> "FloralDiagram":
        """Composite head laid out on golden-angle spirals."""
        spiral = ArrangementPattern.GOLDEN_SPIRAL
        return cls(
            receptacle_height=0.5,
            receptacle_radius=0.8,
            petal_whorls=[ComponentWhorl(count=21, radius=1.5, height=0.4, pattern=spiral)],
            stamen_whorls=[ComponentWhorl(count=34, radius=0.7, height=0.3, pattern=spiral, rotation_offset=0.5)],
            pistil_whorls=[ComponentWhorl(count=13, radius=0.4, height=0.2, pattern=spiral, rotation_offset=1.0)],
        )

    @classmethod
    def four_petal(cls) -> "FloralDiagram":
        """Cross-shaped corolla, as in mustards."""
        return cls(
            receptacle_height=0.6,
            receptacle_radius=0.3,
            petal_whorls=[ComponentWhorl(count=4, radius=1.0, height=0.5, rotation_offset=np.pi / 4.0)],
            stamen_whorls=[ComponentWhorl(count=4, radius=0.5, height=0.4)],
            pistil_whorls=[ComponentWhorl(count=1, radius=0.0, height=0.3)],
        )

    def whorls_by_type(self) -> list[tuple[ComponentType, list]]:
        """Whorl lists in assembly order."""
        return [
            (ComponentType.PISTIL, self.pistil_whorls),
            (ComponentType.STAMEN, self.stamen_whorls),
            (ComponentType.PETAL, self.petal_whorls),
            (ComponentType.SEPAL, self.sepal_whorls),
        ]

    def total_count(self, component_type: ComponentType) -> int:
        return sum(w.count for t, whorls in self.whorls_by_type() if t is component_type for w in whorls)

    @property
    def has_jitter(self) -> bool:
        return self.position_jitter > 0.0 or self.angle_jitter > 0.0 or self.size_jitter > 0.0

    def generate_placements(self) -> list[ComponentPlacement]:
        """Expand every whorl into placements: pistils, stamens, petals, sepals."""
        placements = []
        for component_type, whorls in self.whorls_by_type():
            index = 0
            for whorl in whorls:
                for angle in whorl.calculate_angles():
                    placement = ComponentPlacement(
                        component_type=component_type,
                        radius=whorl.radius,
                        angle=float(angle),
                        height=whorl.height,
                        tilt_angle=whorl.tilt_angle,
                    )
                    if self.has_jitter:
                        self._jitter(placement, index)
                    placements.append(placement)
                    index += 1
        return placements

    def _jitter(self, placement: ComponentPlacement, index: int):
        d_radius, d_angle, d_scale = jitter_offsets(self.jitter_seed, placement.component_type, index)
        placement.radius = max(placement.radius + d_radius * self.position_jitter, 0.0)
        placement.angle += d_angle * np.radians(self.angle_jitter)
        placement.scale = max(1.0 + d_scale * self.size_jitter, 0.1)
