"""Cloth built on a square grid mesh: stretch, attachment and bending constraints."""

from __future__ import annotations

from typing import Iterator, NamedTuple

import numpy as np

from velvetcloth.actor import Component
from velvetcloth.cloth_solver import ClothSolver
from velvetcloth.mesh import Mesh


class StretchConstraint(NamedTuple):
    idx1: int
    idx2: int
    rest_length: float


class BendConstraint(NamedTuple):
    idx1: int
    idx2: int
    idx3: int
    idx4: int
    angle: float


def apply_transform(positions, matrix) -> np.ndarray:
    """Return ``positions`` transformed as points by a 4x4 matrix (no w division)."""
    points = np.asarray(positions, dtype=float).reshape(-1, 3)
    matrix = np.asarray(matrix, dtype=float)
    if matrix.shape != (4, 4):
        raise ValueError(f"expected a 4x4 matrix, got shape {matrix.shape}")
    homogeneous = np.hstack([points, np.ones((len(points), 1))])
    return (homogeneous @ matrix.T)[:, :3]


def _grid_positions(resolution: int, positions) -> np.ndarray:
    if resolution < 1:
        raise ValueError("resolution must be at least 1")
    points = np.asarray(positions, dtype=float).reshape(-1, 3)
    needed = (resolution + 1) ** 2
    if len(points) < needed:
        raise ValueError(f"a grid of resolution {resolution} needs {needed} positions, got {len(points)}")
    return points


def _constraint(points: np.ndarray, idx1: int, idx2: int) -> StretchConstraint:
    return StretchConstraint(idx1, idx2, float(np.linalg.norm(points[idx1] - points[idx2])))


def generate_stretch(resolution: int, positions) -> list[StretchConstraint]:
    """Structural and shear constraints of a grid, visited cell by cell."""
    points = _grid_positions(resolution, positions)
    n = resolution + 1

    def at(x: int, y: int) -> int:
        return x * n + y

    constraints: list[StretchConstraint] = []
    for x in range(n):
        for y in range(n):
            if y != resolution:
                constraints.append(_constraint(points, at(x, y), at(x, y + 1)))
            if x != resolution:
                constraints.append(_constraint(points, at(x, y), at(x + 1, y)))
            if y != resolution and x != resolution:
                constraints.append(_constraint(points, at(x, y), at(x + 1, y + 1)))
                constraints.append(_constraint(points, at(x, y + 1), at(x + 1, y)))
    return constraints


def _cluster_pairs(resolution: int) -> Iterator[list[tuple[int, int]]]:
    n = resolution + 1
    even, odd, every = range(0, n, 2), range(1, n, 2), range(n)

    def at(x: int, y: int) -> int:
        return x * n + y

    for xs in (even, odd):
        yield [(at(x, y), at(x + 1, y)) for x in xs for y in every if x != resolution]
    for ys in (even, odd):
        yield [(at(x, y), at(x, y + 1)) for x in every for y in ys if y != resolution]
    for xs in (even, odd):
        yield [
            (at(x, y), at(x + 1, y + 1))
            for x in xs
            for y in every
            if x != resolution and y != resolution
        ]
    for xs in (even, odd):
        yield [
            (at(x + 1, y), at(x, y + 1))
            for x in xs
            for y in every
            if x != resolution and y != resolution
        ]


def generate_stretch_clustered(resolution: int, positions) -> tuple[list[StretchConstraint], list[int]]:
    """Stretch constraints grouped so no particle appears twice within a group.

    Returns the constraints in group order and the size of each of the eight groups.
    """
    points = _grid_positions(resolution, positions)
    constraints: list[StretchConstraint] = []
    counts: list[int] = []
    for pairs in _cluster_pairs(resolution):
        constraints.extend(_constraint(points, i, j) for i, j in pairs)
        counts.append(len(pairs))
    return constraints, counts


def generate_bending(indices) -> list[BendConstraint]:
    """One bending constraint per quad of six indices (two triangles)."""
    flat = np.asarray(indices, dtype=np.int64).ravel()
    if len(flat) % 6:
        raise ValueError("bending needs indices in groups of six")
    return [
        BendConstraint(int(flat[i]), int(flat[i + 1]), int(flat[i + 2]), int(flat[i + 5]), 0.0)
        for i in range(0, len(flat), 6)
    ]


class ClothObject(Component):
    """A grid cloth that registers its particles and constraints with a solver."""

    def __init__(self, resolution: int, solver: ClothSolver, mesh: Mesh | None = None) -> None:
        super().__init__()
        self.resolution = resolution
        self.solver = solver
        self.mesh = mesh
        self.attached_indices: list[int] = []
        self.particle_diameter = 0.0
        self.index_offset = 0

    @property
    def attach_slot_positions(self):
        return self.solver.attach_slot_positions

    def set_attached_indices(self, indices) -> None:
        self.attached_indices = [int(i) for i in indices]

    def start(self) -> None:
        """Build from the attached mesh using the actor's placement, then reset it."""
        if self.mesh is None:
            raise RuntimeError("ClothObject has no mesh to build from")
        self.build(self.mesh, self.transform.matrix())
        self.transform.reset()

    def build(self, mesh: Mesh, model_matrix) -> int:
        """Register ``mesh`` with the solver; return the index of its first particle."""
        vertices = mesh.vertices
        if len(vertices) < 2:
            raise ValueError("a cloth mesh needs at least two vertices")
        solver = self.solver
        self.particle_diameter = (
            float(np.linalg.norm(vertices[0] - vertices[1])) * solver.params.particle_diameter_scalar
        )
        matrix = np.asarray(model_matrix, dtype=float)
        offset = solver.add_cloth(vertices, mesh.indices, matrix, self.particle_diameter)
        self.index_offset = offset

        positions = apply_transform(vertices, matrix)
        constraints, counts = generate_stretch_clustered(self.resolution, positions)
        for c in constraints:
            solver.add_stretch(offset + c.idx1, offset + c.idx2, c.rest_length)
        mesh.cluster = [*mesh.cluster, *counts]

        self._generate_attach(positions)
        for b in generate_bending(mesh.indices):
            solver.add_bend(offset + b.idx1, offset + b.idx2, offset + b.idx3, offset + b.idx4, b.angle)

        solver.apply_cluster(mesh.cluster)
        solver.add_lambdas()
        return offset

    def _generate_attach(self, positions: np.ndarray) -> None:
        for slot_index, particle_id in enumerate(self.attached_indices):
            slot_position = positions[particle_id]
            self.solver.add_attach_slot(slot_position)
            distances = np.linalg.norm(positions - slot_position, axis=1)
            for i, distance in enumerate(distances):
                self.solver.add_attach(self.index_offset + i, slot_index, float(distance))