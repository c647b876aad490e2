import dataclasses

import numpy as np
import pytest

from tethra.mnq import m_matrix, n_matrix, q_vector
from tethra.params import PhysicalData


def make_params(**overrides):
    values = dict(
        area=1e-4, rho=1025.0, d0=0.011, young=2e9, inertia=7e-10, mass=0.12,
        added_mass=0.1, cdt=0.01, cdn=1.2, cdb=1.2, pi=np.pi, g=9.81,
        gx=0.0, gy=0.0, gz=0.0, vx=0.0, vy=0.0, vz=0.0,
        vtx=0.0, vty=0.0, vtz=0.0, vbx=0.0, vby=0.0, vbz=0.0,
        delta_t=0.001, delta_s=0.1, gbx=0.0, gby=0.0, gbz=0.0,
        ax=0.0, ay=0.0, az=0.0,
    )
    values.update(overrides)
    return PhysicalData(**values)


def random_state(nodes=5, seed=1):
    rng = np.random.default_rng(seed)
    return rng.uniform(-0.5, 0.5, nodes * 10)


def off_block_mask(size):
    node = np.arange(size) // 10
    return node[:, None] != node[None, :]


@pytest.mark.parametrize("builder", [m_matrix, n_matrix])
def test_matrices_are_block_diagonal(builder):
    params = make_params(vx=0.3, vy=-0.2, vz=0.1)
    mat = builder(random_state(), params)
    assert mat.shape == (50, 50)
    assert np.all(mat[off_block_mask(50)] == 0.0)


def test_m_matrix_constant_entries():
    params = make_params()
    mat = m_matrix(random_state(), params)
    for base in range(0, 50, 10):
        assert mat[base, base] == params.mass
        assert mat[base + 1, base + 1] == params.mass + params.added_mass
        assert mat[base + 2, base + 2] == params.mass + params.added_mass
        assert mat[base + 3, base + 3] == pytest.approx(1 / (params.area * params.young))


def test_m_matrix_zero_state_stretch_terms():
    mat = m_matrix(np.zeros(20), make_params())
    assert mat[5, 6] == 1.0
    assert mat[4, 7] == 1.0
    assert mat[0, 6] == 0.0


def test_n_matrix_entries():
    params = make_params()
    state = random_state()
    mat = n_matrix(state, params)
    ei = params.young * params.inertia
    for base in range(0, 50, 10):
        assert mat[base, base + 3] == -1.0
        assert mat[base + 3, base] == -1.0
        assert mat[base + 5, base + 2] == 1.0
        assert mat[base + 6, base + 8] == pytest.approx(ei)
        assert mat[base + 7, base + 9] == pytest.approx(ei)
        assert mat[base + 8, base + 6] == 1.0
        assert mat[base + 9, base + 7] == pytest.approx(np.cos(state[base + 6]))


def test_n_matrix_has_ten_entries_per_node():
    mat = n_matrix(random_state(nodes=3), make_params())
    assert np.count_nonzero(mat) == 30


def test_q_vector_zero_state_without_loads_is_zero():
    q = q_vector(np.zeros(50), make_params())
    assert q.shape == (50,)
    assert np.all(q == 0.0)


def test_q_vector_curvature_rows_are_negated():
    state = random_state()
    q = q_vector(state, make_params())
    nodes = state.reshape(-1, 10)
    np.testing.assert_allclose(q.reshape(-1, 10)[:, 8], -nodes[:, 8])
    np.testing.assert_allclose(q.reshape(-1, 10)[:, 9], -nodes[:, 9])


def test_q_vector_coupling_row():
    state = np.zeros(20)
    state[1] = 3.0
    state[9] = 2.0
    q = q_vector(state, make_params())
    assert q[3] == pytest.approx(6.0)


def test_q_vector_nodes_are_independent():
    params = make_params(vx=0.2, gz=1.5)
    state = random_state()
    changed = state.copy()
    changed[20:30] += 0.05
    q_a = q_vector(state, params)
    q_b = q_vector(changed, params)
    np.testing.assert_array_equal(q_a[:20], q_b[:20])
    np.testing.assert_array_equal(q_a[30:], q_b[30:])
    assert not np.allclose(q_a[20:30], q_b[20:30])


def test_q_vector_tangential_drag_sign_follows_velocity():
    params = make_params()
    state = np.zeros(10)
    state[0] = 0.5
    forward = q_vector(state, params)[0]
    state[0] = -0.5
    backward = q_vector(state, params)[0]
    assert forward > 0
    assert backward == pytest.approx(-forward)


def test_q_vector_gravity_depends_on_params():
    base = make_params()
    heavier = dataclasses.replace(base, gz=2.0)
    state = np.zeros(10)
    assert q_vector(state, heavier)[2] == pytest.approx(-2.0)


@pytest.mark.parametrize("builder", [m_matrix, n_matrix, q_vector])
@pytest.mark.parametrize("bad", [np.zeros(15), np.zeros(0), np.zeros((2, 10))])
def test_bad_state_shape_raises(builder, bad):
    with pytest.raises(ValueError):
        builder(bad, make_params())