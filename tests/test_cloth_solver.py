import math

import numpy as np
import pytest

from velvetcloth.cloth_solver import ClothSolver, SimParams, chebyshev_weights


def _square():
    vertices = np.array(
        [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0], [0.0, 1.0, 0.0], [1.0, 1.0, 0.0]]
    )
    indices = [0, 1, 2, 1, 3, 2]
    return vertices, indices


def _translation(t):
    m = np.eye(4)
    m[:3, 3] = t
    return m


def test_chebyshev_weights_length_and_first():
    weights = chebyshev_weights(5, 0.6)
    assert len(weights) == 5
    assert weights[0][0] == 1.0


def test_chebyshev_weights_zero_coeff_are_ones():
    for w1, w2 in chebyshev_weights(6, 0.0):
        assert w1 == pytest.approx(1.0)
        assert w2 == pytest.approx(1.0)


def test_chebyshev_weights_empty_and_negative():
    assert chebyshev_weights(0, 0.5) == []
    with pytest.raises(ValueError):
        chebyshev_weights(-1, 0.5)


def test_chebyshev_weights_converge_to_fixed_point():
    rho = 0.6
    w1, w2 = chebyshev_weights(200, rho)[-1]
    limit = 2.0 / (1.0 + math.sqrt(1.0 - rho * rho))
    assert w1 == pytest.approx(limit)
    assert w2 == pytest.approx(limit)


def test_chebyshev_weights_chain_second_from_first():
    weights = chebyshev_weights(4, 0.5)
    # the second iteration's w_k1 continues the first iteration's w_k2
    assert weights[1][0] == pytest.approx(weights[0][1])


def test_add_cloth_offsets_and_counts():
    solver = ClothSolver()
    vertices, indices = _square()
    first = solver.add_cloth(vertices.copy(), indices, np.eye(4), 0.1)
    second = solver.add_cloth(vertices.copy(), indices, np.eye(4), 0.1)
    assert first == 0
    assert second == 4
    assert solver.params.num_particles == 8
    assert len(solver.positions) == 8
    assert list(solver.indices)[6:] == [i + 4 for i in indices]
    assert list(solver.inv_masses) == [1.0] * 8
    assert len(solver.predicted) == 8


def test_add_cloth_applies_model_matrix_and_syncs():
    solver = ClothSolver()
    vertices, indices = _square()
    segment = vertices.copy()
    solver.add_cloth(segment, indices, _translation([1.0, 2.0, 3.0]), 0.1)
    expected = vertices + np.array([1.0, 2.0, 3.0])
    np.testing.assert_allclose(solver.positions.data, expected)
    np.testing.assert_allclose(segment, expected)
    np.testing.assert_allclose(solver.spatial_hash.initial_positions, expected)


def test_add_cloth_velocities_use_init_v():
    params = SimParams(init_v=[0.0, -1.0, 0.0])
    solver = ClothSolver(params)
    vertices, indices = _square()
    solver.add_cloth(vertices, indices, np.eye(4), 0.1)
    for v in solver.velocities:
        np.testing.assert_allclose(v, [0.0, -1.0, 0.0])


def test_add_cloth_max_speed_scales_with_diameter():
    vertices, indices = _square()
    a = ClothSolver()
    a.add_cloth(vertices.copy(), indices, np.eye(4), 0.1)
    b = ClothSolver()
    b.add_cloth(vertices.copy(), indices, np.eye(4), 0.2)
    assert b.params.max_speed == pytest.approx(2 * a.params.max_speed)
    assert a.params.particle_diameter == 0.1


def test_add_cloth_rejects_bad_matrix():
    solver = ClothSolver()
    vertices, indices = _square()
    with pytest.raises(ValueError):
        solver.add_cloth(vertices, indices, np.eye(3), 0.1)


def test_stretch_and_lambdas():
    solver = ClothSolver()
    solver.add_stretch(0, 1, 1.0)
    solver.add_stretch(1, 2, 2.0)
    solver.add_lambdas()
    assert list(solver.stretch_indices) == [0, 1, 1, 2]
    assert list(solver.stretch_lengths) == [1.0, 2.0]
    assert list(solver.lambdas) == [0.0, 0.0]
    assert len(solver.delta_lambdas) == 2
    assert len(solver.residual_list) == 2


def test_add_attach_pins_on_zero_distance():
    solver = ClothSolver()
    vertices, indices = _square()
    solver.add_cloth(vertices, indices, np.eye(4), 0.1)
    solver.add_attach_slot([0.0, 0.0, 0.0])
    solver.add_attach(0, 0, 0.0)
    solver.add_attach(1, 0, 1.0)
    assert solver.inv_masses[0] == 0.0
    assert solver.inv_masses[1] == 1.0
    assert list(solver.attach_particle_ids) == [0, 1]
    assert list(solver.attach_slot_ids) == [0, 0]
    assert list(solver.attach_distances) == [0.0, 1.0]
    assert len(solver.attach_slot_positions) == 1


def test_add_bend():
    solver = ClothSolver()
    solver.add_bend(0, 1, 2, 3, 0.0)
    assert list(solver.bend_indices) == [0, 1, 2, 3]
    assert list(solver.bend_angles) == [0.0]


def test_apply_cluster():
    solver = ClothSolver()
    solver.apply_cluster([3, 2, 4])
    assert solver.cluster == [3, 2, 4]
    assert solver.cluster_size == 3


def test_stretch_residual_zero_at_rest():
    solver = ClothSolver()
    vertices, indices = _square()
    solver.add_cloth(vertices, indices, np.eye(4), 0.1)
    solver.add_stretch(0, 1, 1.0)
    solver.add_stretch(0, 2, 1.0)
    assert solver.stretch_residual() == pytest.approx(0.0)
    assert solver.residual_strain == [pytest.approx(0.0)]


def test_stretch_residual_measures_deviation():
    solver = ClothSolver()
    vertices, indices = _square()
    solver.add_cloth(vertices, indices, np.eye(4), 0.1)
    solver.add_stretch(0, 1, 0.5)
    total = solver.stretch_residual()
    assert total == pytest.approx(0.5)
    assert solver.residual_list[0] == pytest.approx(0.5)
    assert len(solver.residual_strain) == 1