"""One time step of the tether model: set up, solve and record the state."""

from __future__ import annotations

import numpy as np

from tethra.boundary import NODE_SIZE
from tethra.iterator import NewtonIterator
from tethra.params import read_physical_data
from tethra.readout import FiberIO


def default_state(nodes: int) -> np.ndarray:
    """The starting state of a tether of ``nodes`` nodes at rest.

    Tension grows linearly towards the top; angles and curvatures are tiny.
    """
    if nodes < 0:
        raise ValueError(f"number of nodes must not be negative, got {nodes}")
    state = np.zeros((nodes, NODE_SIZE))
    state[:, 2] = 1e-30
    state[:, 3] = 3.490 + (nodes - np.arange(1, nodes + 1)) * 0.1573
    state[:, 6:10] = 1e-11
    return state.ravel()


class FiberMain:
    """Runs the time steps of the tether model and stores their results."""

    def __init__(self, io: FiberIO) -> None:
        self.io = io
        self.times = 1000
        self.error = 1e-10
        self.nodes = 50
        self.total = 500
        self.time_step = 10000
        self.del_time = 0.001

    def initial_state(self, index: int) -> np.ndarray:
        """The state a time step starts from: the previous result, or rest."""
        if index > 0:
            return self.io.read_last_row(index - 1)
        return default_state(self.nodes)

    def calculation(self, index: int) -> np.ndarray:
        """Solve time step ``index``, record it and write the end forces."""
        state = self.initial_state(index)
        print()
        print(f"Time Step : {index}     Now the real time is {index * self.del_time:g}s", end="")

        solver = NewtonIterator(
            state, state, self.times, self.error, lambda k: read_physical_data(self.io, k)
        )
        solver.begin(index)
        state = solver.out()

        if index > 0:
            history = self.io.read_csv(self.time_step)
        else:
            history = np.zeros((self.time_step, self.total))
        rows = max(history.shape[0], index + 1)
        cols = max(history.shape[1], self.total)
        if (rows, cols) != history.shape:
            grown = np.zeros((rows, cols))
            grown[: history.shape[0], : history.shape[1]] = history
            history = grown
        history[index, : self.total] = state[: self.total]

        self.io.output(history, self.time_step, self.total)
        self.io.out_top_force(state)
        self.io.out_bottom_force(state)
        return state