import dataclasses

import numpy as np
import pytest

from tethra.boundary import local_velocity
from tethra.fx import boundary_residual, residual
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


def random_state(nodes=50, seed=7):
    rng = np.random.default_rng(seed)
    return rng.uniform(-0.3, 0.3, nodes * 10)


def test_boundary_residual_zero_when_velocity_matches():
    segment = np.zeros(10)
    segment[6], segment[7] = 0.3, -0.4
    segment[:3] = local_velocity(1.0, 2.0, -0.5, 0.3, -0.4)
    np.testing.assert_allclose(boundary_residual(segment, 1.0, 2.0, -0.5), np.zeros(5), atol=1e-12)


def test_boundary_residual_passes_curvatures_through():
    segment = np.zeros(10)
    segment[8], segment[9] = 0.25, -0.75
    result = boundary_residual(segment, 0.0, 0.0, 0.0)
    assert result[3] == 0.25
    assert result[4] == -0.75


def test_boundary_residual_rejects_wrong_length():
    with pytest.raises(ValueError):
        boundary_residual(np.zeros(9), 0.0, 0.0, 0.0)


def test_residual_of_still_straight_tether_is_zero():
    state = np.zeros(500)
    result = residual(state, state, make_params())
    assert result.shape == (500,)
    assert np.all(result == 0.0)


def test_residual_ends_are_boundary_conditions():
    params = make_params(vtx=0.4, vty=-0.1, vtz=0.2, vbx=-0.3, vby=0.5, vbz=0.1)
    old = random_state(seed=1)
    new = random_state(seed=2)
    result = residual(old, new, params)
    np.testing.assert_allclose(result[:5], boundary_residual(new[:10], 0.4, -0.1, 0.2))
    np.testing.assert_allclose(result[-5:], boundary_residual(new[-10:], -0.3, 0.5, 0.1))


def test_top_velocity_only_changes_first_rows():
    old = random_state(seed=3)
    new = random_state(seed=4)
    base = residual(old, new, make_params())
    moved = residual(old, new, make_params(vtx=1.0))
    np.testing.assert_array_equal(base[5:], moved[5:])
    assert not np.allclose(base[:5], moved[:5])


def test_changing_one_node_is_local():
    params = make_params(vx=0.2, vy=0.1, gz=1.0)
    old = random_state(seed=5)
    new = random_state(seed=6)
    changed = new.copy()
    changed[300:310] += 0.01
    base = residual(old, new, params)
    after = residual(old, changed, params)
    np.testing.assert_array_equal(base[:295], after[:295])
    np.testing.assert_array_equal(base[315:], after[315:])
    assert not np.allclose(base[295:315], after[295:315])


def test_interior_scales_with_time_step_when_states_agree():
    params = make_params(vx=0.2, gz=1.0)
    state = random_state(seed=8)
    once = residual(state, state, params)
    twice = residual(state, state, dataclasses.replace(params, delta_t=2 * params.delta_t))
    np.testing.assert_allclose(twice[5:-5], 2 * once[5:-5], rtol=1e-10, atol=1e-15)
    np.testing.assert_array_equal(twice[:5], once[:5])


def test_residual_works_for_fewer_nodes():
    state = np.zeros(30)
    result = residual(state, state, make_params())
    assert result.shape == (30,)
    assert np.all(result == 0.0)


def test_residual_rejects_mismatched_states():
    with pytest.raises(ValueError):
        residual(np.zeros(500), np.zeros(490), make_params())


def test_residual_rejects_single_node():
    with pytest.raises(ValueError):
        residual(np.zeros(10), np.zeros(10), make_params())