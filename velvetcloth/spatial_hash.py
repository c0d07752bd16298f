"""Uniform-grid spatial hashing for particle neighbour queries."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

import numpy as np

_HASH_X = 92837111
_HASH_Y = 689287499
_HASH_Z = 283923481

INVALID_NEIGHBOR = 0xFFFFFFFF
NEIGHBOR_ERROR_MARGIN = 0.999


def _wrap_int32(value: int) -> int:
    return ((value + 2**31) % 2**32) - 2**31


def hash_coords(x: int, y: int, z: int, table_size: int) -> int:
    """Hash integer cell coordinates into ``[0, table_size)`` with 32-bit wraparound."""
    if table_size <= 0:
        raise ValueError("table size must be positive")
    h = _wrap_int32(x * _HASH_X) ^ _wrap_int32(y * _HASH_Y) ^ _wrap_int32(z * _HASH_Z)
    # Truncated remainder followed by abs equals |h| mod table_size.
    return abs(h) % table_size


class SpatialHashCPU:
    """Counting-sort spatial hash that caches each object's candidate neighbours."""

    def __init__(self, spacing: float, max_num_objects: int) -> None:
        if spacing <= 0:
            raise ValueError("spacing must be positive")
        if max_num_objects <= 0:
            raise ValueError("max_num_objects must be positive")
        self.spacing = float(spacing)
        self.max_num_objects = max_num_objects
        self.table_size = 2 * max_num_objects
        self._cell_start = [0] * (self.table_size + 1)
        self._cell_entries = [0] * max_num_objects
        self._neighbors: list[list[int]] = [[] for _ in range(max_num_objects)]

    def compute_int_coord(self, value: float) -> int:
        return math.floor(value / self.spacing)

    def _cell(self, position) -> tuple[int, int, int]:
        x, y, z = (self.compute_int_coord(float(c)) for c in position[:3])
        return x, y, z

    def hash_position(self, position) -> int:
        return hash_coords(*self._cell(position), self.table_size)

    def hash_objects(self, positions) -> None:
        """Bucket ``positions`` into cells and cache every object's neighbours."""
        positions = np.asarray(positions, dtype=float).reshape(-1, 3)
        if len(positions) > self.max_num_objects:
            raise ValueError(
                f"{len(positions)} objects exceed the capacity of {self.max_num_objects}"
            )
        cell_start = [0] * (self.table_size + 1)
        cell_entries = [0] * self.max_num_objects
        hashes = [self.hash_position(p) for p in positions]

        for h in hashes:
            cell_start[h] += 1

        running = 0
        for cell in range(self.table_size):
            running += cell_start[cell]
            cell_start[cell] = running
        cell_start[self.table_size] = running

        for index, h in enumerate(hashes):
            cell_start[h] -= 1
            cell_entries[cell_start[h]] = index

        self._cell_start = cell_start
        self._cell_entries = cell_entries
        for index, position in enumerate(positions):
            self._neighbors[index] = self._query_neighbors(position)

    def get_neighbors(self, index: int) -> list[int]:
        """Candidate neighbours of object ``index`` from the last ``hash_objects``."""
        return self._neighbors[index]

    def _query_neighbors(self, position) -> list[int]:
        ix, iy, iz = self._cell(position)
        result: list[int] = []
        for x in range(ix - 1, ix + 2):
            for y in range(iy - 1, iy + 2):
                for z in range(iz - 1, iz + 2):
                    h = hash_coords(x, y, z, self.table_size)
                    result.extend(self._cell_entries[self._cell_start[h] : self._cell_start[h + 1]])
        return result


@dataclass
class NeighborMismatch:
    """Disagreement between a computed neighbour list and brute force for one particle."""

    index: int
    false_negatives: list[int] = field(default_factory=list)
    negative_distances: list[float] = field(default_factory=list)
    false_positives: list[int] = field(default_factory=list)
    positive_distances: list[float] = field(default_factory=list)


class GridHasher:
    """Grid hashing parameters for particle collision, with a brute-force checker."""

    def __init__(
        self,
        particle_diameter: float,
        max_num_objects: int,
        cell_size_scalar: float = 1.0,
        max_num_neighbors: int = 64,
    ) -> None:
        spacing = particle_diameter * cell_size_scalar
        if spacing <= 0:
            raise ValueError("cell spacing must be positive")
        if max_num_objects <= 0:
            raise ValueError("max_num_objects must be positive")
        self.spacing = float(spacing)
        self.table_size = 2 * max_num_objects
        self.max_num_objects = max_num_objects
        self.max_num_neighbors = max_num_neighbors
        self.initial_positions = np.zeros((0, 3))

    def compute_int_coord(self, value: float) -> int:
        return math.floor(value / self.spacing)

    def hash_position3i(self, position) -> np.ndarray:
        return np.array([self.compute_int_coord(float(c)) for c in position[:3]], dtype=int)

    def hash_position(self, position) -> int:
        x, y, z = (int(c) for c in self.hash_position3i(position))
        return hash_coords(x, y, z, self.table_size)

    def set_initial_positions(self, positions) -> None:
        """Remember rest positions; particles close at rest are not to collide later."""
        source = getattr(positions, "data", positions)
        self.initial_positions = np.array(source, dtype=float).reshape(-1, 3)

    def compare_neighbors(self, positions, neighbors, max_neighbors: int) -> list[NeighborMismatch]:
        """Check a flat neighbour table against brute force; return disagreements."""
        positions = np.asarray(getattr(positions, "data", positions), dtype=float).reshape(-1, 3)
        table = np.asarray(getattr(neighbors, "data", neighbors)).ravel()
        limit = NEIGHBOR_ERROR_MARGIN * self.spacing
        mismatches: list[NeighborMismatch] = []

        for i, position in enumerate(positions):
            distances = np.linalg.norm(positions - position, axis=1)
            truth = {int(j) for j in np.nonzero(distances < self.spacing)[0] if j != i}
            row = table[i * max_neighbors : (i + 1) * max_neighbors]
            computed = {int(n) for n in row if int(n) != INVALID_NEIGHBOR}

            mismatch = NeighborMismatch(index=i)
            for j in sorted(truth - computed):
                if distances[j] < limit:
                    mismatch.false_negatives.append(j)
                    mismatch.negative_distances.append(float(distances[j]))
            for j in sorted(computed - truth):
                if 0 <= j < len(positions) and distances[j] < limit:
                    mismatch.false_positives.append(j)
                    mismatch.positive_distances.append(float(distances[j]))
            if mismatch.false_negatives or mismatch.false_positives:
                mismatches.append(mismatch)
        return mismatches