"""Particle cloth solver state: particles, constraints and Chebyshev weights."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import numpy as np

from velvetcloth.buffer import GrowableBuffer, MergedBuffer
from velvetcloth.spatial_hash import GridHasher
from velvetcloth.timer import Timer

logger = logging.getLogger(__name__)


@dataclass
class SimParams:
    """Tunable simulation parameters shared by the solver and its cloths."""

    num_particles: int = 0
    particle_diameter: float = 0.0
    particle_diameter_scalar: float = 1.0
    delta_time: float = 0.0
    max_speed: float = 0.0
    num_substeps: int = 2
    num_iterations: int = 4
    enable_self_collision: bool = True
    interleaved_hash: int = 3
    hash_cell_size_scalar: float = 1.5
    max_num_neighbors: int = 64
    under_relax_coeff: float = 0.6
    init_v: np.ndarray = field(default_factory=lambda: np.zeros(3))
    offset_index: int = 0
    offset: np.ndarray = field(default_factory=lambda: np.zeros(3))

    def __post_init__(self) -> None:
        self.init_v = np.array(self.init_v, dtype=float)
        self.offset = np.array(self.offset, dtype=float)


def chebyshev_weights(iterations: int, under_relax_coeff: float) -> list[tuple[float, float]]:
    """Return the (w_k1, w_k2) acceleration weights used in each solver iteration."""
    if iterations < 0:
        raise ValueError("iterations cannot be negative")
    rho2 = under_relax_coeff * under_relax_coeff
    weights: list[tuple[float, float]] = []
    w_k1 = 1.0
    for iteration in range(iterations):
        if iteration == 0:
            w_k1 = 1.0
            w_k2 = 2.0 / (2.0 - rho2)
        elif iteration == 1:
            w_k1 = 2.0 / (2.0 - rho2)
            w_k2 = 4.0 / (4.0 - rho2 * w_k1)
        else:
            w_k1 = 4.0 / (4.0 - rho2 * w_k1)
            w_k2 = 4.0 / (4.0 - rho2 * w_k1)
        weights.append((w_k1, w_k2))
    return weights


class ClothSolver:
    """Holds the particle buffers and constraint lists of all simulated cloths."""

    def __init__(
        self,
        params: SimParams | None = None,
        fixed_delta_time: float = Timer.FIXED_DELTA_TIME,
    ) -> None:
        self.params = params if params is not None else SimParams()
        self.fixed_delta_time = fixed_delta_time

        self.positions = MergedBuffer(np.float64, (3,))
        self.normals = MergedBuffer(np.float64, (3,))
        self.indices = GrowableBuffer(np.uint32)

        self.velocities = GrowableBuffer(np.float64, (3,))
        self.predicted = GrowableBuffer(np.float64, (3,))
        self.current = GrowableBuffer(np.float64, (3,))
        self.last = GrowableBuffer(np.float64, (3,))
        self.deltas = GrowableBuffer(np.float64, (3,))
        self.delta_counts = GrowableBuffer(np.int32)
        self.inv_masses = GrowableBuffer(np.float64)

        self.lambdas = GrowableBuffer(np.float64)
        self.delta_lambdas = GrowableBuffer(np.float64)
        self.delta_lambdas_counts = GrowableBuffer(np.int32)

        self.stretch_indices = GrowableBuffer(np.int64)
        self.stretch_lengths = GrowableBuffer(np.float64)
        self.bend_indices = GrowableBuffer(np.int64)
        self.bend_angles = GrowableBuffer(np.float64)

        self.cluster: list[int] = []
        self.cluster_size = 0

        self.residual_strain: list[float] = []
        self.residual_list = GrowableBuffer(np.float64)
        self.constraint_strain: list[float] = []
        self.constraint_list = GrowableBuffer(np.float64)

        self.attach_particle_ids = GrowableBuffer(np.int64)
        self.attach_slot_ids = GrowableBuffer(np.int64)
        self.attach_distances = GrowableBuffer(np.float64)
        self.attach_slot_positions = GrowableBuffer(np.float64, (3,))

        self.spatial_hash: GridHasher | None = None

    def add_cloth(self, vertices, indices, model_matrix, particle_diameter: float) -> int:
        """Register a cloth's particles and return the index of its first particle."""
        segment = np.asarray(vertices, dtype=np.float64).reshape(-1, 3)
        params = self.params
        prev_num_particles = params.num_particles
        new_particles = len(segment)

        params.num_particles += new_particles
        params.particle_diameter = particle_diameter
        params.delta_time = self.fixed_delta_time
        params.max_speed = 2 * particle_diameter / self.fixed_delta_time * params.num_substeps

        self.positions.register_new_buffer(segment)
        self.normals.register_new_buffer(np.zeros((new_particles, 3)))

        self.indices.extend(np.asarray(indices, dtype=np.int64).ravel() + prev_num_particles)
        self.velocities.push_back(params.init_v, new_particles)

        if 0 <= params.offset_index < len(self.positions):
            self.positions[params.offset_index] = (
                self.positions[params.offset_index] + params.offset
            )

        zero = np.zeros(3)
        self.predicted.push_back(zero, new_particles)
        self.current.push_back(zero, new_particles)
        self.last.push_back(zero, new_particles)
        self.deltas.push_back(zero, new_particles)
        self.delta_counts.push_back(0, new_particles)
        self.delta_lambdas_counts.push_back(0, new_particles)
        self.inv_masses.push_back(1.0, new_particles)

        matrix = np.asarray(model_matrix, dtype=float)
        if matrix.shape != (4, 4):
            raise ValueError(f"expected a 4x4 model matrix, got shape {matrix.shape}")
        local = self.positions.data[prev_num_particles:]
        homogeneous = np.hstack([local, np.ones((len(local), 1))])
        local[...] = (homogeneous @ matrix.T)[:, :3]
        self.positions.sync()

        self.spatial_hash = GridHasher(
            particle_diameter,
            params.num_particles,
            params.hash_cell_size_scalar,
            params.max_num_neighbors,
        )
        self.spatial_hash.set_initial_positions(self.positions)

        logger.info("AddCloth done with %d particles.", new_particles)
        logger.info("Use recommended max vel = %s", params.max_speed)
        return prev_num_particles

    def apply_cluster(self, cluster) -> None:
        """Record how many stretch constraints fall in each cluster, in order."""
        self.cluster = [int(count) for count in cluster]
        self.cluster_size = len(self.cluster)

    def add_lambdas(self) -> None:
        """Append one zeroed multiplier per stretch constraint."""
        count = len(self.stretch_lengths)
        self.lambdas.push_back(0.0, count)
        self.delta_lambdas.push_back(0.0, count)

    def add_stretch(self, idx1: int, idx2: int, distance: float) -> None:
        self.stretch_indices.push_back(idx1)
        self.stretch_indices.push_back(idx2)
        self.stretch_lengths.push_back(distance)
        self.residual_list.push_back(0.0)
        self.constraint_list.push_back(0.0)

    def add_attach_slot(self, position) -> None:
        self.attach_slot_positions.push_back(np.asarray(position, dtype=float))

    def add_attach(self, particle_index: int, slot_index: int, distance: float) -> None:
        """Tie a particle to a slot; a zero rest distance pins the particle."""
        if distance == 0:
            self.inv_masses[particle_index] = 0.0
        self.attach_particle_ids.push_back(particle_index)
        self.attach_slot_ids.push_back(slot_index)
        self.attach_distances.push_back(distance)

    def add_bend(self, idx1: int, idx2: int, idx3: int, idx4: int, angle: float) -> None:
        for index in (idx1, idx2, idx3, idx4):
            self.bend_indices.push_back(index)
        self.bend_angles.push_back(angle)

    def stretch_residual(self) -> float:
        """Sum of |current length - rest length| over stretch constraints; recorded in history."""
        pairs = self.stretch_indices.data.reshape(-1, 2)
        rest = self.stretch_lengths.data
        points = self.positions.data
        if len(pairs):
            lengths = np.linalg.norm(points[pairs[:, 0]] - points[pairs[:, 1]], axis=1)
            residuals = np.abs(lengths - rest)
        else:
            residuals = np.zeros(0)
        self.residual_list.data[: len(residuals)] = residuals
        total = float(residuals.sum())
        self.residual_strain.append(total)
        return total