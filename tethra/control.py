"""Turn-taking with a flow solver through a small shared control file."""

from __future__ import annotations

import argparse
import logging
import os
import struct
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from tethra.fiber import FiberMain
from tethra.readout import FiberIO

logger = logging.getLogger(__name__)

DATA_SIZE = 1024
_LAYOUT = struct.Struct(f"=ii{DATA_SIZE}s")
_TURNS = struct.Struct("=ii")
CONTROL_SIZE = _LAYOUT.size
"""Size in bytes of the control file."""

CREATOR_PATH = "ControlDirect_SharedMemory"
SERVER_PATH = "../../../HydroSimulation/ControlDirect_SharedMemory"
FIRST_STEP = 2000


@dataclass(frozen=True)
class ControlState:
    """Whose turn it is, and a free text field, as stored in the control file."""

    starccm_turn: int = 0
    citrine_turn: int = 0
    data: bytes = bytes(DATA_SIZE)

    def __post_init__(self) -> None:
        if len(self.data) > DATA_SIZE:
            raise ValueError(f"data holds at most {DATA_SIZE} bytes, got {len(self.data)}")

    @property
    def text(self) -> str:
        """The data field up to its first NUL byte."""
        return self.data.split(b"\0", 1)[0].decode("utf-8", errors="replace")


class _Stepper(Protocol):
    def calculation(self, index: int) -> object: ...


def _ensure_file(path: Path | str) -> None:
    fd = os.open(path, os.O_RDWR | os.O_CREAT, 0o600)
    try:
        os.ftruncate(fd, CONTROL_SIZE)
    finally:
        os.close(fd)


def _write_turns(path: Path | str, starccm: int, citrine: int) -> None:
    with open(path, "r+b") as handle:
        handle.write(_TURNS.pack(starccm, citrine))


def read_control(path: Path | str) -> ControlState:
    """Read the control file; it must exist and be full size."""
    with open(path, "rb") as handle:
        raw = handle.read(CONTROL_SIZE)
    if len(raw) < CONTROL_SIZE:
        raise ValueError(f"{path} holds {len(raw)} bytes, expected {CONTROL_SIZE}")
    starccm, citrine, data = _LAYOUT.unpack(raw)
    return ControlState(starccm, citrine, data)


def write_control(path: Path | str, state: ControlState) -> None:
    """Write a whole state to an existing control file."""
    with open(path, "r+b") as handle:
        handle.write(_LAYOUT.pack(state.starccm_turn, state.citrine_turn, state.data))


def create_control(path: Path | str = CREATOR_PATH) -> ControlState:
    """Create or resize the control file and hand the first turn to the flow solver."""
    _ensure_file(path)
    _write_turns(path, 1, 0)
    return read_control(path)


def serve(
    fiber: _Stepper,
    path: Path | str = SERVER_PATH,
    start_index: int = FIRST_STEP,
    poll_interval: float = 0.01,
    max_steps: int | None = None,
) -> int:
    """Wait for each turn, run a time step, and hand the turn back.

    Runs forever unless ``max_steps`` is given; returns the next step index.
    """
    _ensure_file(path)
    index = start_index
    done = 0
    while max_steps is None or done < max_steps:
        while read_control(path).citrine_turn == 0:
            time.sleep(poll_interval)
            logger.info("Data in STAR-CCM+")
        logger.info("Data in Tethra")
        fiber.calculation(index)
        print()
        print("[LOG]: Processing complete")
        index += 1
        done += 1
        _write_turns(path, 1, 0)
    return index


def creator(argv=None) -> int:
    """Command: create the control file with the flow solver to move first."""
    parser = argparse.ArgumentParser(description="Create the shared control file.")
    parser.add_argument("path", nargs="?", default=CREATOR_PATH)
    args = parser.parse_args(argv)
    try:
        create_control(args.path)
    except OSError as exc:
        print(f"Can not open ControlDirect file: {exc}", file=sys.stderr)
        return 1
    return 0


def indicator(argv=None) -> int:
    """Command: print the contents of the control file."""
    parser = argparse.ArgumentParser(description="Show the shared control file.")
    parser.add_argument("path", nargs="?", default=CREATOR_PATH)
    args = parser.parse_args(argv)
    try:
        state = read_control(args.path)
    except (OSError, ValueError) as exc:
        print(f"can not open file: {exc}", file=sys.stderr)
        return 1
    print(f"STARCCM_turn: {state.starccm_turn}")
    print(f"CITRINE_turn: {state.citrine_turn}")
    print(f"data: {state.text}")
    return 0


def main(argv=None) -> int:
    """Command: run the tether model in turns with the flow solver."""
    parser = argparse.ArgumentParser(description="Run the tether model in turns.")
    parser.add_argument("--path", default=SERVER_PATH)
    parser.add_argument("--start", type=int, default=FIRST_STEP)
    parser.add_argument("--poll", type=float, default=0.01)
    parser.add_argument("--steps", type=int, default=None)
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO)
    fiber = FiberMain(FiberIO())
    try:
        serve(fiber, args.path, args.start, args.poll, args.steps)
    except OSError as exc:
        print(f"Can not open ControlDirect file: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0
    return 0