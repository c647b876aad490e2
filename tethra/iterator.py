"""Damped Newton iteration that solves one time step of the tether model."""

from __future__ import annotations

from typing import Callable

import numpy as np

from tethra.boundary import apply_end_velocities, copy_state
from tethra.load import Load
from tethra.params import PhysicalData

DAMPING = 0.5
"""Fraction of the full Newton step that is taken."""

TOLERANCE = 1e-16
"""Increment and residual size below which the iteration stops."""

_EDGE = 10


def _interior(values) -> np.ndarray:
    """The entries checked for convergence: all but the end nodes' values."""
    array = np.asarray(values, dtype=float)
    return array[_EDGE : array.size - (_EDGE + 1)]


def _largest(values: np.ndarray) -> float:
    finite_or_inf = values[~np.isnan(values)]
    return float(finite_or_inf.max(initial=0.0))


def max_incremental_percentage(delta, y_old) -> float:
    """Largest |delta| / |y_old| over the interior entries with y_old non-zero.

    NaN ratios are ignored; with nothing to compare the result is 0.0.
    """
    step = _interior(delta)
    base = _interior(y_old)
    if step.shape != base.shape:
        raise ValueError(f"increment and state differ in shape: {step.shape} vs {base.shape}")
    mask = base != 0
    return _largest(np.abs(step[mask]) / np.abs(base[mask]))


def max_abs_residual(fx) -> float:
    """Largest absolute interior residual; NaN entries are ignored."""
    return _largest(np.abs(_interior(fx)))


class NewtonIterator:
    """Iterates the states of one time step until the residual vanishes."""

    def __init__(
        self,
        y_old,
        y_new,
        times: int,
        error: float,
        params_for: Callable[[int], PhysicalData],
    ) -> None:
        self.y_old = np.array(y_old, dtype=float)
        self.y_new = np.array(y_new, dtype=float)
        if self.y_old.ndim != 1 or self.y_old.shape != self.y_new.shape:
            raise ValueError(
                f"states must be vectors of one shape: {self.y_old.shape} vs {self.y_new.shape}"
            )
        self.times = int(times)
        self.error = float(error)
        self._params_for = params_for
        self.fx = np.zeros(self.y_new.size)
        self.jac = np.zeros((self.y_new.size, self.y_new.size))
        print()
        print(f"Now the Maximum Iteration TIMES is {self.times}")
        print(f"Now the Maximum Allowable Iteration ERROR is {self.error:g}")
        print()

    def _assemble(self, k: int) -> None:
        params = self._params_for(k)
        self.y_old = apply_end_velocities(self.y_old, params)
        self.y_new = apply_end_velocities(self.y_new, params)
        load = Load(self.y_old, self.y_new, params)
        self.fx = load.residual()
        self.jac = load.jacobian()

    def begin(self, k: int) -> None:
        """Run the iteration for time step ``k``.

        Raises numpy.linalg.LinAlgError if the Jacobian is singular.
        """
        self._assemble(k)
        for i in range(self.times):
            print(f"Iteration {i + 1} times; ")
            delta = -DAMPING * np.linalg.solve(self.jac, self.fx)
            self.y_old = self.y_new.copy()
            self.y_new = self.y_new + delta

            increment = max_incremental_percentage(delta, self.y_old)
            largest_fx = max_abs_residual(self.fx)
            print(f"Max incremental percentage: {increment:g}")
            print(f"Max Fx (abs): {largest_fx:g}")
            print()

            if increment < TOLERANCE or largest_fx < TOLERANCE:
                print("Iteration converged!")
                break
            self._assemble(k)
            self.y_old = copy_state(self.y_old)
            self.y_new = copy_state(self.y_new)

    def out(self) -> np.ndarray:
        """The latest state."""
        return self.y_new.copy()