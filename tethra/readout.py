"""Reading of the tether model's CSV inputs and writing of its results."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

import numpy as np

STATE_SIZE = 500
"""Number of unknowns in the tether state vector (50 nodes of 10 values)."""

TOWING_POINT = np.array([-0.0465, 0.0, 0.0])
"""Position of the towing point in the towed body's frame."""

_NUMBER = re.compile(
    r"\s*([+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf(?:inity)?|nan))",
    re.IGNORECASE,
)


def _parse_prefix(text: str) -> float:
    """Parse the leading number of ``text``; raise ValueError if there is none."""
    match = _NUMBER.match(text)
    if match is None:
        raise ValueError(f"no number in {text!r}")
    return float(match.group(1))


def _lenient_float(text: str) -> float:
    """Parse the leading number of ``text``, or 0.0 if there is none."""
    try:
        return _parse_prefix(text)
    except ValueError:
        return 0.0


def _split_fields(line: str) -> list[str]:
    """Split a CSV line on commas; a trailing empty field is not a field."""
    fields = line.split(",")
    if fields[-1] == "":
        fields.pop()
    return fields


def _read_lines(path: Path | str) -> list[str]:
    with open(path, encoding="utf-8", newline="") as handle:
        lines = handle.read().split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def _format_number(value: float) -> str:
    return "%g" % value


def _format_row(values: Sequence[float]) -> str:
    """Format a row vector with right-aligned columns of equal width."""
    texts = [_format_number(v) for v in values]
    width = max((len(t) for t in texts), default=0)
    return " ".join(t.rjust(width) for t in texts)


def read_last_line_data(path: Path | str) -> list[float]:
    """Return up to the last three numbers of the last non-empty line of a file.

    A missing file gives an empty list; fields that are not numbers are skipped.
    """
    try:
        lines = _read_lines(path)
    except FileNotFoundError:
        return []
    last = ""
    for line in lines:
        if line:
            last = line
    values = []
    for field in _split_fields(last):
        try:
            values.append(_parse_prefix(field))
        except ValueError:
            continue
    return values[-3:]


def rotation_matrix(euler: Sequence[float]) -> np.ndarray:
    """Return Rx @ Ry @ Rz for Euler angles (x, y, z) in radians."""
    ax, ay, az = (float(a) for a in euler[:3])
    rz = np.array(
        [[np.cos(az), -np.sin(az), 0.0], [np.sin(az), np.cos(az), 0.0], [0.0, 0.0, 1.0]]
    )
    ry = np.array(
        [[np.cos(ay), 0.0, np.sin(ay)], [0.0, 1.0, 0.0], [-np.sin(ay), 0.0, np.cos(ay)]]
    )
    rx = np.array(
        [[1.0, 0.0, 0.0], [0.0, np.cos(ax), -np.sin(ax)], [0.0, np.sin(ax), np.cos(ax)]]
    )
    return rx @ (ry @ rz)


def body_to_global_force(forces: Sequence[float], theta: float, phi: float) -> np.ndarray:
    """Turn (tangential, normal, binormal) forces into global components."""
    transform = np.array(
        [
            [np.cos(phi) * np.cos(theta), np.sin(phi) * np.cos(theta), -np.sin(theta)],
            [-np.sin(phi), np.cos(phi), 0.0],
            [np.sin(theta) * np.cos(phi), np.sin(theta) * np.sin(phi), np.cos(theta)],
        ]
    )
    return np.asarray(forces, dtype=float) @ np.linalg.inv(transform)


@dataclass(frozen=True)
class FiberPaths:
    """Locations of every file the model reads or writes."""

    csv_dir: Path = Path("../bin/csv")
    top_vel: Path = Path("../bin/csv/TopVel.csv")
    towed_object: Path = Path("../bin/csv/TowedObject.csv")
    water: Path = Path("../bin/csv/Water.csv")
    physical: Path = Path("../bin/csv/Parameters.csv")
    delta: Path = Path("../bin/csv/Delta.csv")
    output: Path = Path("../bin/csv/output.csv")
    velocity_relative: Path = Path("../../HydroSimulation/HydroData/VelocityRelative.csv")
    omega_relative: Path = Path("../../HydroSimulation/HydroData/omegaRelative.csv")
    euler_angle: Path = Path("../../HydroSimulation/HydroData/EulerAngle.csv")
    top_force: Path = Path("../../HydroSimulation/TethraForces/topforce.txt")
    bottom_force: Path = Path("../../HydroSimulation/TethraForces/bottomforce.txt")


class FiberIO:
    """Reads the model's inputs and writes its state history and end forces."""

    def __init__(self, paths: FiberPaths | None = None) -> None:
        self.paths = paths if paths is not None else FiberPaths()
        Path(self.paths.csv_dir).mkdir(parents=True, exist_ok=True)

    @staticmethod
    def _read_row(path: Path | str, k: int) -> list[float]:
        lines = _read_lines(path)
        if k < 0 or k >= len(lines):
            raise IndexError(f"{path} has no row {k}")
        return [_lenient_float(field) for field in _split_fields(lines[k])]

    def read_top_vel(self, k: int) -> list[float]:
        """Velocity of the top end for time step ``k``."""
        return self._read_row(self.paths.top_vel, k)

    def read_water(self, k: int) -> list[float]:
        """Current velocity for time step ``k``."""
        return self._read_row(self.paths.water, k)

    def read_physical(self) -> list[float]:
        """Physical parameters of the tether, from the row after the header."""
        return self._read_row(self.paths.physical, 1)

    def read_delta(self) -> list[float]:
        """Time and arc-length steps, from the row after the header."""
        return self._read_row(self.paths.delta, 1)

    def read_bottom_g(self) -> list[float]:
        """Towed-object data, from the row after the header."""
        return self._read_row(self.paths.towed_object, 1)

    def read_bottom_vel(self) -> np.ndarray:
        """Global velocity of the towing point on the towed body."""
        velocity = read_last_line_data(self.paths.velocity_relative)
        omega = read_last_line_data(self.paths.omega_relative)
        euler = read_last_line_data(self.paths.euler_angle)
        for name, values in (("velocity", velocity), ("omega", omega), ("euler", euler)):
            if len(values) < 3:
                raise ValueError(f"bottom {name} data needs three values, got {len(values)}")
        relative = np.asarray(velocity) + np.cross(omega, TOWING_POINT)
        return rotation_matrix(euler) @ relative

    def read_last_row(self, index: int) -> np.ndarray:
        """Row ``index`` of the output file as a state vector."""
        lines = _read_lines(self.paths.output)
        if index < 0 or index >= len(lines):
            raise IndexError(f"{self.paths.output} has no row {index}")
        fields = _split_fields(lines[index])[:STATE_SIZE]
        state = np.zeros(STATE_SIZE)
        state[: len(fields)] = [_parse_prefix(field) for field in fields]
        return state

    def read_csv(self, rows: int) -> np.ndarray:
        """The first ``rows`` rows of the output file as a matrix."""
        lines = _read_lines(self.paths.output)[: max(rows, 0)]
        data = [[_parse_prefix(f) for f in _split_fields(line)] for line in lines]
        if not data:
            raise ValueError(f"{self.paths.output} holds no rows")
        width = len(data[0])
        matrix = np.zeros((len(data), width))
        for i, row in enumerate(data):
            count = min(len(row), width)
            matrix[i, :count] = row[:count]
        return matrix

    def output(self, matrix, rows: int, cols: int) -> None:
        """Write ``matrix`` as a ``rows`` x ``cols`` CSV, padding with zeros."""
        source = np.atleast_2d(np.asarray(matrix, dtype=float))
        rows, cols = max(rows, 0), max(cols, 0)
        kept_rows = min(source.shape[0], rows)
        kept_cols = min(source.shape[1], cols)
        padded = np.zeros((rows, cols))
        padded[:kept_rows, :kept_cols] = source[:kept_rows, :kept_cols]
        with open(self.paths.output, "w", encoding="utf-8", newline="") as handle:
            for row in padded:
                handle.write(",".join(_format_number(v) for v in row) + "\n")

    def _write_force(self, path: Path, v: np.ndarray, start: int) -> None:
        force = body_to_global_force(v[start : start + 3], v[start + 3], v[start + 4])
        with open(path, "w", encoding="utf-8", newline="") as handle:
            handle.write(_format_row(force))

    def out_top_force(self, v) -> None:
        """Write the global force at the top end of state ``v``."""
        self._write_force(self.paths.top_force, np.asarray(v, dtype=float), 3)

    def out_bottom_force(self, v) -> None:
        """Write the global force at the bottom end of state ``v``."""
        self._write_force(self.paths.bottom_force, np.asarray(v, dtype=float), 493)

    def read_last_value(self, filename: Path | str) -> float:
        """The number after the first space of the last line of a file."""
        try:
            lines = _read_lines(filename)
        except OSError:
            lines = []
        last = lines[-1] if lines else ""
        return _parse_prefix(last[last.find(" ") + 1 :])