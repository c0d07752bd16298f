"""Triangle mesh geometry: positions, normals, texture coordinates and indices."""

from __future__ import annotations

import numpy as np


def _rows(values, width: int) -> np.ndarray:
    if values is None:
        return np.zeros((0, width))
    return np.array(values, dtype=float).reshape(-1, width)


class Mesh:
    """Vertex data of a mesh, optionally indexed."""

    def __init__(self, vertices, normals=None, tex_coords=None, indices=None) -> None:
        self.vertices = _rows(vertices, 3)
        self.normals = _rows(normals, 3)
        self.tex_coords = _rows(tex_coords, 2)
        self.indices = np.array([] if indices is None else indices, dtype=np.uint32).ravel()
        # Number of stretch constraints in each cluster, filled in when constraints are built.
        self.cluster: list[int] = []

    @classmethod
    def from_packed(cls, attribute_sizes, packed_vertices, indices=None) -> "Mesh":
        """Build a mesh from interleaved vertex data (position, [normal], [uv])."""
        stride = sum(int(size) for size in attribute_sizes)
        if stride < 3:
            raise ValueError(f"vertex stride {stride} is too small to hold a position")
        packed = np.asarray(packed_vertices, dtype=float).ravel()
        count = len(packed) // stride
        table = packed[: count * stride].reshape(count, stride)

        normals = table[:, 3:6] if stride >= 6 else None
        tex_offset = 6 if stride >= 6 else 3
        tex_coords = table[:, tex_offset : tex_offset + 2] if stride >= tex_offset + 2 else None
        return cls(table[:, :3], normals, tex_coords, indices)

    def use_indices(self) -> bool:
        return len(self.indices) > 0

    def draw_count(self) -> int:
        """Number of elements to draw: indices if present, else vertices."""
        return len(self.indices) if self.use_indices() else len(self.vertices)

    def set_vertices_and_normals(self, vertices, normals) -> None:
        self.vertices = _rows(vertices, 3)
        self.normals = _rows(normals, 3)