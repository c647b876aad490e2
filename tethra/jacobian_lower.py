"""Sub-diagonal node blocks of the Newton Jacobian of the tether residual."""

from __future__ import annotations

import numpy as np

from tethra.boundary import NODE_SIZE
from tethra.params import PhysicalData


def sign(a):
    """Return 1, -1 or 0 by the sign of ``a``; NaN counts as 0.

    Works element-wise on arrays and gives a plain int for a scalar.
    """
    values = np.asarray(a, dtype=float)
    result = np.where(values > 0, 1, np.where(values < 0, -1, 0))
    if result.ndim == 0:
        return int(result)
    return result


def _states(jac, y_old, y_new) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    old = np.asarray(y_old, dtype=float)
    new = np.asarray(y_new, dtype=float)
    if old.shape != new.shape:
        raise ValueError(f"old and new states differ in shape: {old.shape} vs {new.shape}")
    if new.ndim != 1 or new.size % NODE_SIZE or new.size < 2 * NODE_SIZE:
        raise ValueError(f"state must hold at least two nodes of {NODE_SIZE} values")
    if not isinstance(jac, np.ndarray) or jac.shape != (new.size, new.size):
        raise ValueError(f"jacobian must be a {new.size}x{new.size} array")
    count = new.size // NODE_SIZE
    return jac, old.reshape(count, NODE_SIZE), new.reshape(count, NODE_SIZE)


def fill_lower_blocks(jac, y_old, y_new, params: PhysicalData) -> None:
    """Write, in place, the derivatives of each interior residual block with
    respect to the first node of its node pair.

    For every pair of neighbouring nodes ``i`` and ``i + 1``, rows
    ``10*i + 5`` to ``10*i + 14`` and columns ``10*i`` to ``10*i + 9`` of
    ``jac`` are set; every other entry is left as it was.
    """
    jac, old_nodes, new_nodes = _states(jac, y_old, y_new)
    count = new_nodes.shape[0]
    cur = new_nodes[:-1]
    nxt = new_nodes[1:]
    prev = old_nodes[:-1]

    y0, y1, y2, y3, y4, y5, y6, y7, y8, y9 = cur.T
    o0, o1, o2, o3 = prev[:, 0], prev[:, 1], prev[:, 2], prev[:, 3]
    o6, o7 = prev[:, 6], prev[:, 7]

    p = params
    m, ma = p.mass, p.added_mass
    vx, vy, vz = p.vx, p.vy, p.vz
    gx, gy, gz = p.gx, p.gy, p.gz
    dt, ds = p.delta_t, p.delta_s
    dtds = dt * ds
    ae = p.area * p.young
    ei = p.young * p.inertia

    c6, s6, t6 = np.cos(y6), np.sin(y6), np.tan(y6)
    c7, s7 = np.cos(y7), np.sin(y7)
    oc6, os6 = np.cos(o6), np.sin(o6)
    oc7, os7 = np.cos(o7), np.sin(o7)
    sec2 = t6**2 + 1
    dtheta = o6 - y6
    dphi = o7 - y7

    with np.errstate(divide="ignore", invalid="ignore"):
        stretch = y3 / ae + 1
        old_stretch = o3 / ae + 1
        sq = np.sqrt(stretch)

        u_t = y0 + vz * s6 - vx * c7 * c6 - vy * c6 * s7
        u_n = y1 - vy * c7 + vx * s7
        u_b = vz * c6 - y2 + vx * c7 * s6 + vy * s7 * s6
        rel = np.sqrt(u_n**2 + u_b**2)
        abs_t = np.abs(u_t)
        sgn_t = sign(u_t)

        w6 = vz * c6 + vx * c7 * s6 + vy * s7 * s6
        w7 = vy * c7 * c6 - vx * c6 * s7
        v6 = vx * c7 * c6 - vz * s6 + vy * c6 * s7
        p7 = vx * c7 + vy * s7
        q7 = vy * c7 * s6 - vx * s7 * s6

        kt = 0.5 * p.cdt * p.d0 * p.pi * p.rho
        kn = p.cdn * p.d0 * p.rho
        kb = p.cdb * p.d0 * p.rho

        entries = {
            (5, 0): 2 * m * ds + dtds * (kt * abs_t * sq + kt * sgn_t * sq * u_t),
            (5, 1): m * ds * c6 * dphi,
            (5, 2): -m * ds * dtheta,
            (5, 3): 2 * dt + (0.5 * kt * dtds * abs_t * u_t) / (ae * sq),
            (5, 4): y9 * dtds,
            (5, 5): -y8 * dtds,
            (5, 6): ds * (m * y2 + m * o2 - m * y1 * s6 * dphi)
            + dtds * (gz * c6 + gx * c7 * s6 + gy * s7 * s6
                      + kt * abs_t * sq * w6 + kt * sgn_t * sq * w6 * u_t),
            (5, 7): -ds * (m * y1 * c6 + m * o1 * oc6)
            - dtds * (gy * c7 * c6 - gx * c6 * s7
                      + kt * abs_t * sq * w7 + kt * sgn_t * sq * w7 * u_t),
            (5, 8): -y5 * dtds,
            (5, 9): y4 * dtds,

            (6, 0): -m * ds * c6 * dphi,
            (6, 1): ds * (2 * m + 2 * ma)
            + dtds * (0.5 * kn * sq * rel + (0.25 * kn * sq * (2 * u_n) * u_n) / rel),
            (6, 2): -m * ds * s6 * dphi - (0.25 * kn * dtds * sq * u_n * (2 * u_b)) / rel,
            (6, 3): -dtds * (y9 - (0.25 * kn * rel * u_n) / (ae * sq)),
            (6, 4): 2 * dt,
            (6, 5): -y9 * dtds * t6,
            (6, 6): -ds * (m * y2 * c6 - m * y0 * s6) * dphi
            - dtds * (y9 * y5 * sec2 - (0.5 * kn * sq * v6 * u_n * u_b) / rel),
            (6, 7): ds * (vx * ma * oc7 - (vy * ma * c7 - vx * ma * s7) * dphi
                          + vx * ma * c7 + m * y0 * c6 + m * o0 * oc6
                          + vy * ma * os7 + vy * ma * s7 + m * y2 * s6 + m * o2 * os6)
            + dtds * (gx * c7 + gy * s7 + 0.5 * kn * p7 * sq * rel
                      + (0.25 * kn * (2 * q7 * u_b + 2 * p7 * u_n) * sq * u_n) / rel),
            (6, 8): 0.0,
            (6, 9): -dtds * (y3 + y5 * t6),

            (7, 0): m * ds * dtheta,
            (7, 1): m * ds * s6 * dphi - (0.25 * kb * dtds * sq * (2 * u_n) * u_b) / rel,
            (7, 2): ds * (2 * m + 2 * ma)
            + dtds * (0.5 * kb * sq * rel + (0.25 * kb * sq * u_b * (2 * u_b)) / rel),
            (7, 3): dtds * (y8 - (0.25 * kb * rel * u_b) / (ae * sq)),
            (7, 4): y9 * dtds * t6,
            (7, 5): 2 * dt,
            (7, 6): -ds * (m * y0 + m * o0
                           - dphi * (m * y1 * c6 + vy * ma * c7 * c6 - vx * ma * c6 * s7)
                           + dtheta * (vz * ma * c6 + vx * ma * c7 * s6 + vy * ma * s7 * s6)
                           - vz * ma * os6 - vz * ma * s6
                           + vx * ma * oc7 * oc6 + vx * ma * c7 * c6
                           + vy * ma * oc6 * os7 + vy * ma * c6 * s7)
            - dtds * (gx * c7 * c6 - gz * s6 + gy * c6 * s7 - y9 * y4 * sec2
                      + 0.5 * kb * sq * rel * v6 + (0.5 * kb * sq * v6 * u_b**2) / rel),
            (7, 7): -ds * (dphi * (vx * ma * c7 * s6 + vy * ma * s7 * s6)
                           - dtheta * (vy * ma * c7 * c6 - vx * ma * c6 * s7)
                           + m * y1 * s6 + m * o1 * os6
                           + vy * ma * oc7 * os6 + vy * ma * c7 * s6
                           - vx * ma * os7 * os6 - vx * ma * s7 * s6)
            - dtds * (gy * c7 * s6 - gx * s7 * s6 + 0.5 * kb * sq * q7 * rel
                      + (0.25 * kb * (2 * q7 * u_b + 2 * p7 * u_n) * sq * u_b) / rel),
            (7, 8): y3 * dtds,
            (7, 9): y4 * dtds * t6,

            (8, 0): 2 * dt,
            (8, 1): y9 * dtds,
            (8, 2): -y8 * dtds,
            (8, 3): (2 * ds) / ae,
            (8, 4): 0.0,
            (8, 5): 0.0,
            (8, 6): 0.0,
            (8, 7): 0.0,
            (8, 8): -dtds * y2,
            (8, 9): dtds * y1,

            (9, 0): -y9 * dtds,
            (9, 1): 2 * dt,
            (9, 2): -y9 * dtds * t6,
            (9, 3): -(ds * c6 * dphi) / ae,
            (9, 4): 0.0,
            (9, 5): 0.0,
            (9, 6): ds * s6 * stretch * dphi - y9 * dtds * y2 * sec2,
            (9, 7): ds * (c6 * stretch + oc6 * old_stretch),
            (9, 8): 0.0,
            (9, 9): -dtds * (y0 + y2 * t6),

            (10, 0): -y8 * dtds,
            (10, 1): -y9 * dtds * t6,
            (10, 2): -2 * dt,
            (10, 3): -(ds * dtheta) / ae,
            (10, 4): 0.0,
            (10, 5): 0.0,
            (10, 6): ds * (y3 / ae + o3 / ae + 2) - y9 * dtds * y1 * sec2,
            (10, 7): 0.0,
            (10, 8): -dtds * y0,
            (10, 9): -dtds * y1 * t6,

            (11, 0): 0.0,
            (11, 1): 0.0,
            (11, 2): 0.0,
            (11, 3): -(3 * y5 * dtds * stretch**2) / ae,
            (11, 4): 0.0,
            (11, 5): -dtds * stretch**3,
            (11, 6): ei * y9**2 * dtds * sec2,
            (11, 7): 0.0,
            (11, 8): -2 * ei * dt,
            (11, 9): 2 * ei * y9 * dtds * t6,

            (12, 0): 0.0,
            (12, 1): 0.0,
            (12, 2): 0.0,
            (12, 3): (3 * y4 * dtds * stretch**2) / ae,
            (12, 4): dtds * stretch**3,
            (12, 5): 0.0,
            (12, 6): -ei * y8 * y9 * dtds * sec2,
            (12, 7): 0.0,
            (12, 8): -ei * y9 * dtds * t6,
            (12, 9): -2 * ei * dt - ei * y8 * dtds * t6,

            (13, 0): 0.0,
            (13, 1): 0.0,
            (13, 2): 0.0,
            (13, 3): 0.0,
            (13, 4): 0.0,
            (13, 5): 0.0,
            (13, 6): -2 * dt,
            (13, 7): 0.0,
            (13, 8): -dtds,
            (13, 9): 0.0,

            (14, 0): 0.0,
            (14, 1): 0.0,
            (14, 2): 0.0,
            (14, 3): 0.0,
            (14, 4): 0.0,
            (14, 5): 0.0,
            (14, 6): dt * s6 * (y7 - nxt[:, 7]),
            (14, 7): -dt * (c6 + np.cos(nxt[:, 6])),
            (14, 8): 0.0,
            (14, 9): -dtds,
        }

    base = np.arange(count - 1) * NODE_SIZE
    for (row, col), value in entries.items():
        jac[base + row, base + col] = value