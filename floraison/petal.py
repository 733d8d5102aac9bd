"""Petal surfaces built from a deformed B-spline control grid.

The petal grows along +Y from the origin, spans X across its width and
faces +Z. Deformations act on the control grid before the surface is
evaluated, so every shape change stays smooth.
"""

import logging
from dataclasses import dataclass

import numpy as np

from floraison.bspline import BSplineSurface
from floraison.errors import ParameterError
from floraison.mesh import Mesh

logger = logging.getLogger(__name__)

GRID_ROWS = 9  # along the length (v)
GRID_COLS = 5  # across the width (u)
MAX_WIDTH_AT = 0.6  # fraction of the length where the petal is widest
DEFORM_THRESHOLD = 0.001


@dataclass
class PetalParams:
    length: float = 3.0
    width: float = 1.2
    tip_sharpness: float = 0.4  # tip width as a fraction of the full width
    base_width: float = 0.4
    curl: float = 0.0  # -1 curls down, +1 curls up
    twist: float = 0.0  # degrees of twist at the tip
    ruffle_freq: float = 0.0
    ruffle_amp: float = 0.0
    lateral_curve: float = 0.0  # sideways bend, -1 to 1
    resolution: int = 16
    color: tuple = (1.0, 1.0, 1.0)

    def __post_init__(self):
        for name in ("length", "width"):
            if getattr(self, name) <= 0.0:
                raise ParameterError(f"petal {name} must be positive, got {getattr(self, name)}")
        if self.base_width < 0.0:
            raise ParameterError(f"petal base_width must be non-negative, got {self.base_width}")
        if self.tip_sharpness < 0.0:
            raise ParameterError(f"petal tip_sharpness must be non-negative, got {self.tip_sharpness}")
        if self.resolution < 1:
            raise ParameterError(f"petal resolution must be at least 1, got {self.resolution}")

    @classmethod
    def wide(cls) -> "PetalParams":
        return cls(length=2.5, width=2.0, tip_sharpness=0.2, base_width=0.8, resolution=20)

    @classmethod
    def narrow(cls) -> "PetalParams":
        return cls(length=4.0, width=1.0, tip_sharpness=0.7, base_width=0.3, resolution=16)

    @classmethod
    def short(cls) -> "PetalParams":
        return cls(length=1.5, width=1.2, tip_sharpness=0.1, base_width=0.6, resolution=12)


def _row_params(grid: np.ndarray) -> np.ndarray:
    """v of every grid row, broadcastable over the grid."""
    return np.linspace(0.0, 1.0, grid.shape[0])[:, None]


def control_grid(params: PetalParams) -> np.ndarray:
    """Flat (GRID_ROWS, GRID_COLS, 3) grid following the petal outline.

    Width grows from ``base_width`` to ``width`` over the lower 60% of the
    length, then narrows to ``width * tip_sharpness`` at the tip.
    """
    v = np.linspace(0.0, 1.0, GRID_ROWS)
    u = np.linspace(0.0, 1.0, GRID_COLS)
    tip_width = params.width * params.tip_sharpness
    width_at_v = np.where(
        v < MAX_WIDTH_AT,
        params.base_width + (params.width - params.base_width) * v / MAX_WIDTH_AT,
        params.width + (tip_width - params.width) * (v - MAX_WIDTH_AT) / (1.0 - MAX_WIDTH_AT),
    )
    x = (u[None, :] - 0.5) * width_at_v[:, None]
    y = np.broadcast_to((v * params.length)[:, None], x.shape)
    return np.stack([x, y, np.zeros_like(x)], axis=-1)


def _rotate_plane(grid: np.ndarray, angles: np.ndarray, a: int, b: int) -> np.ndarray:
    """Rotate each row in the plane of axes ``a`` and ``b`` by its angle."""
    out = grid.copy()
    c, s = np.cos(angles), np.sin(angles)
    out[..., a] = grid[..., a] * c - grid[..., b] * s
    out[..., b] = grid[..., a] * s + grid[..., b] * c
    return out


def apply_curl(grid: np.ndarray, amount: float) -> np.ndarray:
    """Roll the petal toward +Z (amount > 0) or -Z, growing with v squared."""
    v = _row_params(grid)
    return _rotate_plane(grid, amount * v * v * np.pi * 0.5, 1, 2)


def apply_twist(grid: np.ndarray, degrees: float) -> np.ndarray:
    """Twist rows around the length axis, linearly up to ``degrees`` at the tip."""
    v = _row_params(grid)
    return _rotate_plane(grid, np.radians(degrees) * v, 0, 2)


def apply_lateral_curve(grid: np.ndarray, amount: float) -> np.ndarray:
    """Bend the petal sideways in its own plane."""
    v = _row_params(grid)
    return _rotate_plane(grid, amount * v * v * np.pi * 0.3, 0, 1)


def apply_ruffle(grid: np.ndarray, frequency: float, amplitude: float) -> np.ndarray:
    """Wave the outer columns in Z; the midrib stays flat."""
    v = _row_params(grid)
    u = np.linspace(0.0, 1.0, grid.shape[1])[None, :]
    edge_weight = np.abs(u - 0.5) * 2.0
    wave = np.sin(v * frequency * np.pi * 2.0)
    out = grid.copy()
    out[..., 2] += np.where(edge_weight > 0.3, wave * amplitude * edge_weight, 0.0)
    return out


def deformed_grid(params: PetalParams) -> np.ndarray:
    """Control grid with every active deformation applied."""
    grid = control_grid(params)
    if abs(params.curl) > DEFORM_THRESHOLD:
        grid = apply_curl(grid, params.curl)
    if abs(params.twist) > DEFORM_THRESHOLD:
        grid = apply_twist(grid, params.twist)
    if abs(params.lateral_curve) > DEFORM_THRESHOLD:
        grid = apply_lateral_curve(grid, params.lateral_curve)
    if abs(params.ruffle_freq) > DEFORM_THRESHOLD and abs(params.ruffle_amp) > DEFORM_THRESHOLD:
        grid = apply_ruffle(grid, params.ruffle_freq, params.ruffle_amp)
    return grid


def generate(params: PetalParams) -> Mesh:
    """Tessellate the petal surface into a double-sided mesh.

    Returns:
        Mesh with 2 * (resolution + 1)^2 vertices; the second half repeats
        the first with flipped normals and reversed winding.
    """
    # Surface indexes control points as [u][v]; the grid is [v][u]
    surface = BSplineSurface(deformed_grid(params).transpose(1, 0, 2), degree_u=3, degree_v=3)

    res = params.resolution
    steps = np.linspace(0.0, 1.0, res + 1)
    positions = surface.evaluate_grid(steps, steps).reshape(-1, 3)
    normals = surface.normal_grid(steps, steps).reshape(-1, 3)
    U, V = np.meshgrid(steps, steps, indexing="ij")
    uvs = np.stack([U, V], axis=-1).reshape(-1, 2)

    i = np.arange(res)[:, None]
    j = np.arange(res)[None, :]
    i0 = (i * (res + 1) + j).reshape(-1)
    i1 = i0 + 1
    i2 = i0 + res + 1
    i3 = i2 + 1
    front = np.concatenate([np.stack([i0, i2, i1], axis=-1), np.stack([i1, i2, i3], axis=-1)])
    back = np.concatenate([np.stack([i0, i1, i2], axis=-1), np.stack([i1, i3, i2], axis=-1)])
    back = back + len(positions)

    n = len(positions)
    mesh = Mesh(
        positions=np.concatenate([positions, positions]),
        normals=np.concatenate([normals, -normals]),
        uvs=np.concatenate([uvs, uvs]),
        colors=np.tile(np.asarray(params.color, dtype=np.float64), (2 * n, 1)),
        faces=np.concatenate([front, back]),
    )
    logger.debug("Petal: %d vertices, %d triangles", mesh.vertex_count(), mesh.triangle_count())
    return mesh
