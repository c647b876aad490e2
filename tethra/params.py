"""Collection of all physical parameters the tether equations need."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from tethra.readout import FiberIO


@dataclass(frozen=True)
class PhysicalData:
    """Physical constants, flow and end velocities, steps and towed-body data."""

    area: float
    rho: float
    d0: float
    young: float
    inertia: float
    mass: float
    added_mass: float
    cdt: float
    cdn: float
    cdb: float
    pi: float
    g: float
    gx: float
    gy: float
    gz: float
    vx: float
    vy: float
    vz: float
    vtx: float
    vty: float
    vtz: float
    vbx: float
    vby: float
    vbz: float
    delta_t: float
    delta_s: float
    gbx: float
    gby: float
    gbz: float
    ax: float
    ay: float
    az: float


def _require(values: Sequence[float], count: int, what: str) -> Sequence[float]:
    if len(values) < count:
        raise ValueError(f"{what} needs at least {count} values, got {len(values)}")
    return values


def read_physical_data(io: FiberIO, index: int) -> PhysicalData:
    """Read every parameter for time step ``index`` through ``io``."""
    physical = _require(io.read_physical(), 14, "physical data")
    water = _require(io.read_water(index), 3, "water velocity")
    top = _require(io.read_top_vel(index), 3, "top velocity")
    bottom = _require(list(io.read_bottom_vel()), 3, "bottom velocity")
    delta = _require(io.read_delta(), 2, "delta data")
    bottom_g = _require(io.read_bottom_g(), 6, "towed object data")
    return PhysicalData(
        area=physical[0],
        rho=physical[1],
        d0=physical[2],
        young=physical[3],
        inertia=physical[4],
        mass=physical[5],
        added_mass=physical[6],
        cdt=physical[7],
        cdn=physical[8],
        cdb=physical[9],
        pi=physical[10],
        g=physical[11],
        gx=physical[12],
        gy=physical[13],
        gz=physical[-1],
        vx=water[0],
        vy=water[1],
        vz=water[2],
        vtx=top[0],
        vty=top[1],
        vtz=top[2],
        vbx=float(bottom[0]),
        vby=float(bottom[1]),
        vbz=float(bottom[2]),
        delta_t=delta[0],
        delta_s=delta[1],
        gbx=bottom_g[0],
        gby=bottom_g[1],
        gbz=bottom_g[2],
        ax=bottom_g[3],
        ay=bottom_g[4],
        az=bottom_g[5],
    )