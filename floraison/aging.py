"""Bud, bloom and wilt variants of a flower, selected by age."""

from dataclasses import dataclass, replace

import numpy as np

from floraison.errors import ParameterError
from floraison.flower import FlowerParams, generate_flower
from floraison.mesh import Mesh


@dataclass
class FlowerAging:
    """Alternative meshes for one flower at different ages.

    Ages below ``bud_threshold`` show the bud, ages from ``wilt_threshold``
    on show the wilted flower (or the bloom when there is none), and the
    bloom covers the range in between.
    """
    bud: Mesh
    bloom: Mesh
    wilt: Mesh = None
    bud_threshold: float = 0.3
    wilt_threshold: float = 0.8

    def __post_init__(self):
        if not 0.0 <= self.bud_threshold <= self.wilt_threshold <= 1.0:
            raise ParameterError(
                f"aging thresholds must satisfy 0 <= bud <= wilt <= 1, "
                f"got {self.bud_threshold} and {self.wilt_threshold}"
            )

    @property
    def thresholds(self) -> tuple[float, float]:
        return self.bud_threshold, self.wilt_threshold

    def select(self, age: float) -> Mesh:
        if age < self.bud_threshold:
            return self.bud
        if age < self.wilt_threshold:
            return self.bloom
        return self.wilt if self.wilt is not None else self.bloom


def select(age: float, aging: FlowerAging) -> Mesh:
    """Mesh shown by a flower of the given age."""
    return aging.select(age)


def apply_age_distribution(age, distribution: float):
    """Bias ages toward buds (distribution < 0.5) or open flowers (> 0.5).

    0 maps every age to 0, 0.5 leaves ages unchanged and 1 maps every age
    to 1. In between, ages are blended linearly toward the nearer extreme,
    so their order is preserved.
    """
    age = np.asarray(age, dtype=np.float64)
    if distribution <= 0.5:
        out = age * (distribution / 0.5)
    else:
        out = age + (1.0 - age) * ((distribution - 0.5) / 0.5)
    out = np.clip(out, 0.0, 1.0)
    return float(out) if out.ndim == 0 else out


def bud_params(params: FlowerParams) -> FlowerParams:
    """Closed bud: short, narrow petals curled up over the center."""
    petal = replace(params.petal, length=params.petal.length * 0.5,
                    width=params.petal.width * 0.6, curl=1.0)
    return replace(params, petal=petal)


def wilt_params(params: FlowerParams) -> FlowerParams:
    """Spent flower: petals bent back and faded."""
    faded = tuple(float(c) * 0.6 for c in params.petal.color)
    petal = replace(params.petal, curl=-0.7, color=faded)
    return replace(params, petal=petal)


def flower_aging(params: FlowerParams, include_wilt: bool = True) -> FlowerAging:
    """Generate the bud, bloom and (optionally) wilt meshes of one flower."""
    return FlowerAging(
        bud=generate_flower(bud_params(params)),
        bloom=generate_flower(params),
        wilt=generate_flower(wilt_params(params)) if include_wilt else None,
    )
