import numpy as np
import pytest

from velvetcloth.actor import Actor
from velvetcloth.cloth_object import (
    ClothObject,
    apply_transform,
    generate_bending,
    generate_stretch,
    generate_stretch_clustered,
)
from velvetcloth.cloth_solver import ClothSolver
from velvetcloth.mesh import Mesh

RES = 2


def _grid_vertices(res=RES):
    return np.array([(x, 0.0, y) for x in range(res + 1) for y in range(res + 1)], dtype=float)


def _grid_indices(res=RES):
    n = res + 1
    indices = []
    for x in range(res):
        for y in range(res):
            a, b, c, d = x * n + y, (x + 1) * n + y, x * n + y + 1, (x + 1) * n + y + 1
            indices += [a, b, c, c, b, d]
    return indices


def _mesh():
    return Mesh(_grid_vertices(), indices=_grid_indices())


def _pairs(constraints):
    return {frozenset((c.idx1, c.idx2)) for c in constraints}


def test_apply_transform_translates_points():
    matrix = np.eye(4)
    matrix[:3, 3] = [1.0, 2.0, 3.0]
    points = np.array([[0.0, 0.0, 0.0], [1.0, 1.0, 1.0]])
    moved = apply_transform(points, matrix)
    np.testing.assert_allclose(moved, points + [1.0, 2.0, 3.0])


def test_apply_transform_rejects_bad_matrix():
    with pytest.raises(ValueError):
        apply_transform(np.zeros((1, 3)), np.eye(3))


def test_clustered_covers_same_constraints_as_plain():
    positions = _grid_vertices()
    plain = generate_stretch(RES, positions)
    clustered, counts = generate_stretch_clustered(RES, positions)
    assert sum(counts) == len(clustered) == len(plain)
    assert _pairs(clustered) == _pairs(plain)


def test_cluster_counts_for_small_grid():
    _, counts = generate_stretch_clustered(RES, _grid_vertices())
    assert counts == [3, 3, 3, 3, 2, 2, 2, 2]


def test_each_cluster_touches_a_particle_once():
    constraints, counts = generate_stretch_clustered(4, _grid_vertices(4))
    start = 0
    for count in counts:
        group = constraints[start : start + count]
        particles = [i for c in group for i in (c.idx1, c.idx2)]
        assert len(particles) == len(set(particles))
        start += count


def test_rest_lengths_match_positions():
    positions = _grid_vertices()
    for c in generate_stretch(RES, positions):
        assert c.rest_length == pytest.approx(np.linalg.norm(positions[c.idx1] - positions[c.idx2]))


def test_stretch_needs_enough_positions():
    with pytest.raises(ValueError):
        generate_stretch(RES, np.zeros((4, 3)))
    with pytest.raises(ValueError):
        generate_stretch_clustered(RES, np.zeros((4, 3)))


def test_generate_bending_picks_quad_corners():
    bends = generate_bending([0, 3, 1, 1, 3, 4])
    assert len(bends) == 1
    assert (bends[0].idx1, bends[0].idx2, bends[0].idx3, bends[0].idx4) == (0, 3, 1, 4)
    assert bends[0].angle == 0.0


def test_generate_bending_rejects_partial_quad():
    with pytest.raises(ValueError):
        generate_bending([0, 1, 2, 3])


def test_build_registers_constraints():
    solver = ClothSolver()
    mesh = _mesh()
    cloth = ClothObject(RES, solver)
    cloth.set_attached_indices([0, 2])
    offset = cloth.build(mesh, np.eye(4))

    constraints, counts = generate_stretch_clustered(RES, mesh.vertices)
    assert offset == 0
    assert len(solver.stretch_lengths) == len(constraints)
    assert len(solver.lambdas) == len(constraints)
    assert mesh.cluster == counts
    assert solver.cluster == mesh.cluster
    assert len(solver.attach_slot_positions) == 2
    assert len(solver.attach_particle_ids) == 2 * len(mesh.vertices)
    assert len(solver.bend_angles) == len(mesh.indices) // 6
    assert solver.inv_masses[0] == 0.0
    assert solver.inv_masses[2] == 0.0
    assert solver.inv_masses[1] == 1.0
    assert cloth.particle_diameter == pytest.approx(
        np.linalg.norm(mesh.vertices[0] - mesh.vertices[1]) * solver.params.particle_diameter_scalar
    )


def test_second_cloth_indices_are_offset():
    solver = ClothSolver()
    ClothObject(RES, solver).build(_mesh(), np.eye(4))
    first_count = len(solver.stretch_lengths)
    offset = ClothObject(RES, solver).build(_mesh(), np.eye(4))
    assert offset == len(_grid_vertices())
    second = solver.stretch_indices.data[2 * first_count :]
    assert second.min() >= offset


def test_attach_slot_uses_transformed_position():
    solver = ClothSolver()
    matrix = np.eye(4)
    matrix[:3, 3] = [0.0, 5.0, 0.0]
    cloth = ClothObject(RES, solver)
    cloth.set_attached_indices([4])
    cloth.build(_mesh(), matrix)
    np.testing.assert_allclose(cloth.attach_slot_positions[0], _grid_vertices()[4] + [0.0, 5.0, 0.0])
    np.testing.assert_allclose(solver.positions[4], _grid_vertices()[4] + [0.0, 5.0, 0.0])


def test_start_uses_actor_transform_and_resets_it():
    solver = ClothSolver()
    actor = Actor("cloth")
    actor.initialize((1.0, 0.0, 0.0))
    cloth = actor.add_component(ClothObject(RES, solver, _mesh()))
    cloth.start()
    np.testing.assert_allclose(solver.positions[0], [1.0, 0.0, 0.0])
    np.testing.assert_allclose(actor.transform.position, np.zeros(3))


def test_start_without_mesh_fails():
    with pytest.raises(RuntimeError):
        ClothObject(RES, ClothSolver()).start()