"""Triangle mesh container shared by every generator.

A mesh is five parallel numpy arrays. Generators build these arrays
directly; assembly code merges and transforms whole meshes.
"""

from dataclasses import dataclass

import numpy as np

from floraison.errors import GeometryError

# Squared cross-product length below which a triangle has no usable normal
DEGENERATE_AREA_SQ = 1e-20


@dataclass
class GenerationResult:
    """Flat buffers handed to rendering and export code.

    positions, normals and colors are (3 * N,) float32, uvs is (2 * N,)
    float32 and indices is (3 * M,) uint32.
    """
    positions: np.ndarray
    normals: np.ndarray
    uvs: np.ndarray
    colors: np.ndarray
    indices: np.ndarray

    @property
    def vertex_count(self) -> int:
        return len(self.positions) // 3

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    def save(self, path: str):
        """Write the buffers to an ``.npz`` archive."""
        np.savez(
            path,
            positions=self.positions,
            normals=self.normals,
            uvs=self.uvs,
            colors=self.colors,
            indices=self.indices,
        )

    @classmethod
    def load(cls, path: str) -> "GenerationResult":
        with np.load(path) as data:
            return cls(**{name: data[name] for name in ("positions", "normals", "uvs", "colors", "indices")})


class Mesh:
    """Indexed triangle mesh.

    Attributes:
        positions: (N, 3) vertex positions
        normals: (N, 3) unit vertex normals
        uvs: (N, 2) texture coordinates
        colors: (N, 3) RGB in [0, 1]
        faces: (M, 3) triangle vertex indices
    """

    def __init__(
        self,
        positions: np.ndarray = None,
        normals: np.ndarray = None,
        uvs: np.ndarray = None,
        colors: np.ndarray = None,
        faces: np.ndarray = None,
    ):
        self.positions = _as_array(positions, 3, np.float64)
        n = len(self.positions)
        self.normals = _as_array(normals, 3, np.float64) if normals is not None else np.tile([0.0, 1.0, 0.0], (n, 1))
        self.uvs = _as_array(uvs, 2, np.float64) if uvs is not None else np.zeros((n, 2))
        self.colors = _as_array(colors, 3, np.float64) if colors is not None else np.ones((n, 3))
        self.faces = _as_array(faces, 3, np.int64)

        for name in ("normals", "uvs", "colors"):
            if len(getattr(self, name)) != n:
                raise GeometryError(f"Mesh {name} has {len(getattr(self, name))} rows for {n} vertices")

    @classmethod
    def empty(cls) -> "Mesh":
        return cls()

    @property
    def indices(self) -> np.ndarray:
        """Flat (3 * M,) index array."""
        return self.faces.reshape(-1)

    def vertex_count(self) -> int:
        return len(self.positions)

    def triangle_count(self) -> int:
        return len(self.faces)

    def is_empty(self) -> bool:
        return len(self.positions) == 0

    def copy(self) -> "Mesh":
        return Mesh(
            self.positions.copy(),
            self.normals.copy(),
            self.uvs.copy(),
            self.colors.copy(),
            self.faces.copy(),
        )

    def merge(self, other: "Mesh") -> "Mesh":
        """Append ``other`` in place, offsetting its indices. Returns self."""
        offset = len(self.positions)
        self.positions = np.concatenate([self.positions, other.positions])
        self.normals = np.concatenate([self.normals, other.normals])
        self.uvs = np.concatenate([self.uvs, other.uvs])
        self.colors = np.concatenate([self.colors, other.colors])
        self.faces = np.concatenate([self.faces, other.faces + offset])
        return self

    @classmethod
    def concatenate(cls, meshes: list["Mesh"]) -> "Mesh":
        """Merge many meshes in one pass, in list order."""
        meshes = [m for m in meshes if not m.is_empty()]
        if not meshes:
            return cls.empty()
        offsets = np.cumsum([0] + [m.vertex_count() for m in meshes[:-1]])
        return cls(
            np.concatenate([m.positions for m in meshes]),
            np.concatenate([m.normals for m in meshes]),
            np.concatenate([m.uvs for m in meshes]),
            np.concatenate([m.colors for m in meshes]),
            np.concatenate([m.faces + off for m, off in zip(meshes, offsets)]),
        )

    def transform(self, matrix: np.ndarray) -> "Mesh":
        """Apply a (4, 4) affine transform in place. Returns self.

        Normals use the inverse-transpose of the linear part so that
        non-uniform scales keep them perpendicular to the surface.
        """
        matrix = np.asarray(matrix, dtype=np.float64)
        linear = matrix[:3, :3]
        self.positions = self.positions @ linear.T + matrix[:3, 3]

        normal_matrix = np.linalg.inv(linear).T
        normals = self.normals @ normal_matrix.T
        norms = np.linalg.norm(normals, axis=-1, keepdims=True)
        self.normals = np.where(norms > 1e-12, normals / np.maximum(norms, 1e-12), [0.0, 1.0, 0.0])
        return self

    def transformed(self, matrix: np.ndarray) -> "Mesh":
        """Transformed copy; the original is left untouched."""
        return self.copy().transform(matrix)

    def compute_normals(self) -> "Mesh":
        """Recompute smooth vertex normals from area-weighted face normals.

        Zero-area triangles contribute nothing. Vertices that receive no
        contribution get +Y.
        """
        normals = np.zeros_like(self.positions)
        if len(self.faces):
            p0 = self.positions[self.faces[:, 0]]
            p1 = self.positions[self.faces[:, 1]]
            p2 = self.positions[self.faces[:, 2]]
            # Unnormalized cross product is already weighted by twice the area
            face_normals = np.cross(p1 - p0, p2 - p0)
            valid = np.einsum("ij,ij->i", face_normals, face_normals) >= DEGENERATE_AREA_SQ
            faces = self.faces[valid]
            face_normals = face_normals[valid]
            for k in range(3):
                np.add.at(normals, faces[:, k], face_normals)

        norms = np.linalg.norm(normals, axis=-1, keepdims=True)
        self.normals = np.where(norms > 1e-12, normals / np.maximum(norms, 1e-12), [0.0, 1.0, 0.0])
        return self

    def validate(self):
        """Raise GeometryError unless the mesh is safe to hand to a renderer."""
        n = len(self.positions)
        if len(self.faces) and (self.faces.min() < 0 or self.faces.max() >= n):
            raise GeometryError(f"Mesh index out of range for {n} vertices")
        for name in ("positions", "normals", "uvs", "colors"):
            if not np.all(np.isfinite(getattr(self, name))):
                raise GeometryError(f"Mesh {name} contain non-finite values")

    def to_buffers(self) -> GenerationResult:
        """Flatten into float32/uint32 buffers."""
        return GenerationResult(
            positions=self.positions.astype(np.float32).reshape(-1),
            normals=self.normals.astype(np.float32).reshape(-1),
            uvs=self.uvs.astype(np.float32).reshape(-1),
            colors=np.clip(self.colors, 0.0, 1.0).astype(np.float32).reshape(-1),
            indices=self.faces.astype(np.uint32).reshape(-1),
        )

    def __repr__(self):
        return f"Mesh(vertices={self.vertex_count()}, triangles={self.triangle_count()})"


def _as_array(values, width: int, dtype) -> np.ndarray:
    if values is None:
        return np.zeros((0, width), dtype=dtype)
    arr = np.asarray(values, dtype=dtype)
    if arr.size == 0:
        return np.zeros((0, width), dtype=dtype)
    return arr.reshape(-1, width)
