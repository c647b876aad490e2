"""End conditions applied to the tether state vector."""

from __future__ import annotations

import numpy as np

from tethra.params import PhysicalData

NODE_SIZE = 10


def local_velocity(vx: float, vy: float, vz: float, theta: float, phi: float) -> np.ndarray:
    """Express a global velocity in the local (t, n, b) frame of a node."""
    return np.array(
        [
            vx * np.cos(phi) * np.cos(theta) + vy * np.cos(theta) * np.sin(phi) - vz * np.sin(theta),
            vy * np.cos(phi) - vx * np.sin(phi),
            vx * np.cos(phi) * np.sin(theta) + vy * np.sin(theta) * np.sin(phi) + vz * np.cos(theta),
        ]
    )


def _as_state(y) -> np.ndarray:
    state = np.array(y, dtype=float)
    if state.ndim != 1 or state.size < 2 * NODE_SIZE or state.size % NODE_SIZE:
        raise ValueError(f"state must hold whole nodes of {NODE_SIZE} values, got {state.shape}")
    return state


def apply_end_velocities(y, params: PhysicalData) -> np.ndarray:
    """Return a copy of ``y`` with the end velocities imposed.

    The first and last nodes take the top and bottom velocities in their local
    frames, and their last two values (the curvatures) are set to zero.
    """
    state = _as_state(y)
    last = state.size - NODE_SIZE
    state[0:3] = local_velocity(params.vtx, params.vty, params.vtz, state[6], state[7])
    state[8:10] = 0.0
    state[last : last + 3] = local_velocity(
        params.vbx, params.vby, params.vbz, state[last + 6], state[last + 7]
    )
    state[last + 8 :] = 0.0
    return state


def copy_state(y) -> np.ndarray:
    """Return an independent copy of the state vector."""
    return _as_state(y)