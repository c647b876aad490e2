"""Residual of the discretised tether equations for one Newton step."""

from __future__ import annotations

import numpy as np

from tethra.boundary import NODE_SIZE, local_velocity
from tethra.mnq import m_matrix, n_matrix, q_vector
from tethra.params import PhysicalData


def boundary_residual(segment, vx: float, vy: float, vz: float) -> np.ndarray:
    """Residual of an end node's velocity and zero-curvature conditions."""
    node = np.asarray(segment, dtype=float)
    if node.shape != (NODE_SIZE,):
        raise ValueError(f"an end node holds {NODE_SIZE} values, got {node.shape}")
    result = np.empty(5)
    result[:3] = node[:3] - local_velocity(vx, vy, vz, node[6], node[7])
    result[3:] = node[8:10]
    return result


def _diagonal_blocks(matrix: np.ndarray, count: int) -> np.ndarray:
    """The (count, 10, 10) node blocks on the diagonal of ``matrix``."""
    blocks = matrix.reshape(count, NODE_SIZE, count, NODE_SIZE)
    index = np.arange(count)
    return blocks[index, :, index, :]


def residual(y_old, y_new, params: PhysicalData) -> np.ndarray:
    """Residual vector F(y_old, y_new) that the Newton iteration drives to zero.

    The first and last five rows hold the end conditions; in between, each
    pair of neighbouring nodes contributes ten rows of the box scheme.
    """
    old = np.asarray(y_old, dtype=float)
    new = np.asarray(y_new, dtype=float)
    if old.shape != new.shape:
        raise ValueError(f"old and new states differ in shape: {old.shape} vs {new.shape}")
    if old.ndim != 1 or old.size % NODE_SIZE or old.size < 2 * NODE_SIZE:
        raise ValueError(f"state must hold at least two nodes of {NODE_SIZE} values")
    count = old.size // NODE_SIZE
    old_nodes = old.reshape(count, NODE_SIZE)
    new_nodes = new.reshape(count, NODE_SIZE)

    m_old = _diagonal_blocks(m_matrix(old, params), count)
    m_new = _diagonal_blocks(m_matrix(new, params), count)
    n_old = _diagonal_blocks(n_matrix(old, params), count)
    n_new = _diagonal_blocks(n_matrix(new, params), count)
    q_old = q_vector(old, params).reshape(count, NODE_SIZE)
    q_new = q_vector(new, params).reshape(count, NODE_SIZE)

    dt, ds = params.delta_t, params.delta_s
    step = new_nodes - old_nodes

    def apply(blocks: np.ndarray, vectors: np.ndarray) -> np.ndarray:
        return np.einsum("kij,kj->ki", blocks, vectors)

    interior = (
        apply(n_new[:-1] + n_new[1:], new_nodes[1:] - new_nodes[:-1]) * dt
        + apply(n_old[:-1] + n_old[1:], old_nodes[1:] - old_nodes[:-1]) * dt
        + apply(m_new[1:] + m_old[1:], step[1:]) * ds
        + apply(m_new[:-1] + m_old[:-1], step[:-1]) * ds
        + (q_old[:-1] + q_old[1:] + q_new[:-1] + q_new[1:]) * (dt * ds)
    )

    result = np.empty(old.size)
    result[:5] = boundary_residual(new_nodes[0], params.vtx, params.vty, params.vtz)
    result[5:-5] = interior.ravel()
    result[-5:] = boundary_residual(new_nodes[-1], params.vbx, params.vby, params.vbz)
    return result