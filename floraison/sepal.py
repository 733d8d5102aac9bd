"""Sepals: green petal-shaped leaves below the corolla.

Sepals share the petal surface; only their presets differ, typically
narrower, green and curled back (negative curl).
"""

from floraison import petal
from floraison.petal import PetalParams

SEPAL_GREEN = (0.2, 0.6, 0.2)

generate = petal.generate


def default() -> PetalParams:
    return PetalParams(length=3.0, width=1.0, tip_sharpness=0.5, base_width=0.4,
                       curl=-0.2, resolution=16, color=SEPAL_GREEN)


def narrow() -> PetalParams:
    return PetalParams(length=3.5, width=0.7, tip_sharpness=0.7, base_width=0.3,
                       curl=-0.3, resolution=14, color=SEPAL_GREEN)


def wide() -> PetalParams:
    return PetalParams(length=2.5, width=1.5, tip_sharpness=0.3, base_width=0.6,
                       curl=-0.1, resolution=18, color=SEPAL_GREEN)


def recurved() -> PetalParams:
    """Sepals bent sharply backward with a slight twist."""
    return PetalParams(length=3.0, width=1.2, tip_sharpness=0.4, base_width=0.5,
                       curl=-0.6, twist=5.0, resolution=16, color=SEPAL_GREEN)
