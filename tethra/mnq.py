"""Mass, stiffness and load terms of the discretised tether equations."""

from __future__ import annotations

import numpy as np

from tethra.boundary import NODE_SIZE
from tethra.params import PhysicalData


def _node_view(y) -> np.ndarray:
    """Return the state as an (nodes, 10) array, checking its shape."""
    state = np.asarray(y, dtype=float)
    if state.ndim != 1 or state.size == 0 or state.size % NODE_SIZE:
        raise ValueError(f"state must hold whole nodes of {NODE_SIZE} values, got {state.shape}")
    return state.reshape(-1, NODE_SIZE)


def _assemble(nodes: np.ndarray, entries) -> np.ndarray:
    """Place per-node (row, col, value) entries into a block-diagonal matrix."""
    count = nodes.shape[0]
    size = count * NODE_SIZE
    base = np.arange(count) * NODE_SIZE
    matrix = np.zeros((size, size))
    for row, col, value in entries:
        matrix[base + row, base + col] = value
    return matrix


def m_matrix(y, params: PhysicalData) -> np.ndarray:
    """The matrix multiplying the time derivative of the state."""
    nodes = _node_view(y)
    y0, y1, y2, y3 = nodes[:, 0], nodes[:, 1], nodes[:, 2], nodes[:, 3]
    cos_t, sin_t = np.cos(nodes[:, 6]), np.sin(nodes[:, 6])
    cos_p, sin_p = np.cos(nodes[:, 7]), np.sin(nodes[:, 7])
    m, ma = params.mass, params.added_mass
    vx, vy, vz = params.vx, params.vy, params.vz
    ae = params.area * params.young
    stretch = y3 / ae + 1
    entries = [
        (0, 0, m),
        (0, 6, m * y2),
        (0, 7, -m * y1 * cos_t),
        (1, 1, m + ma),
        (1, 7, m * y0 * cos_t + m * y2 * sin_t + ma * vy * sin_p + ma * vx * cos_p),
        (2, 2, m + ma),
        (2, 6, -m * y0 - ma * vx * cos_p * cos_t - ma * vy * sin_p * cos_t + ma * vz * sin_t),
        (2, 7, -m * y1 * sin_t + ma * vx * sin_p * sin_t - ma * vy * cos_p * sin_t),
        (3, 3, 1 / ae),
        (4, 7, cos_t * stretch),
        (5, 6, stretch),
    ]
    return _assemble(nodes, entries)


def n_matrix(y, params: PhysicalData) -> np.ndarray:
    """The matrix multiplying the arc-length derivative of the state."""
    nodes = _node_view(y)
    ei = params.young * params.inertia
    entries = [
        (0, 3, -1.0),
        (1, 4, -1.0),
        (2, 5, -1.0),
        (3, 0, -1.0),
        (4, 1, -1.0),
        (5, 2, 1.0),
        (6, 8, ei),
        (7, 9, ei),
        (8, 6, 1.0),
        (9, 7, np.cos(nodes[:, 6])),
    ]
    return _assemble(nodes, entries)


def q_vector(y, params: PhysicalData) -> np.ndarray:
    """The load vector: gravity, drag, coupling and bending terms."""
    nodes = _node_view(y)
    y0, y1, y2, y3, y4, y5, _, _, y8, y9 = nodes.T
    theta, phi = nodes[:, 6], nodes[:, 7]
    cos_t, sin_t, tan_t = np.cos(theta), np.sin(theta), np.tan(theta)
    cos_p, sin_p = np.cos(phi), np.sin(phi)
    p = params
    ae = p.area * p.young
    ei = p.young * p.inertia
    stretch = y3 / ae + 1
    with np.errstate(invalid="ignore"):
        strain = np.sqrt(stretch)
    u_t = y0 + p.vz * sin_t - p.vx * cos_p * cos_t - p.vy * cos_t * sin_p
    u_n = y1 - p.vy * cos_p + p.vx * sin_p
    u_b = p.vz * cos_t - y2 + p.vx * cos_p * sin_t + p.vy * sin_p * sin_t
    relative = np.sqrt(u_n**2 + u_b**2)

    q = np.empty_like(nodes)
    q[:, 0] = (
        y9 * y4
        - y8 * y5
        + p.gz * sin_t
        - p.gx * cos_p * cos_t
        - p.gy * cos_t * sin_p
        + 0.5 * p.cdt * p.d0 * p.pi * p.rho * np.abs(u_t) * strain * u_t
    )
    q[:, 1] = (
        p.gx * sin_p
        - p.gy * cos_p
        - y9 * y3
        - y9 * y5 * tan_t
        + 0.5 * p.cdn * p.d0 * p.rho * strain * relative * u_n
    )
    q[:, 2] = (
        y8 * y3
        - p.gz * cos_t
        - p.gx * cos_p * sin_t
        - p.gy * sin_p * sin_t
        + y9 * y4 * tan_t
        - 0.5 * p.cdb * p.d0 * p.rho * strain * relative * u_b
    )
    q[:, 3] = y9 * y1 - y8 * y2
    q[:, 4] = -y9 * y0 - y9 * y2 * tan_t
    q[:, 5] = -y8 * y0 - y9 * y1 * tan_t
    q[:, 6] = ei * y9**2 * tan_t - y5 * stretch**3
    q[:, 7] = y4 * stretch**3 - ei * y8 * y9 * tan_t
    q[:, 8] = -y8
    q[:, 9] = -y9
    return q.ravel()