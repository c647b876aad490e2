"""The residual and Jacobian of one Newton step, built from a pair of states."""

from __future__ import annotations

import numpy as np

from tethra.fx import residual as _residual
from tethra.jacobian import jacobian as _jacobian
from tethra.params import PhysicalData


class Load:
    """Holds the previous and current states and the parameters of a step."""

    def __init__(self, y_old, y_new, params: PhysicalData) -> None:
        self.y_old = np.array(y_old, dtype=float)
        self.y_new = np.array(y_new, dtype=float)
        if self.y_old.shape != self.y_new.shape:
            raise ValueError(
                f"old and new states differ in shape: {self.y_old.shape} vs {self.y_new.shape}"
            )
        self.params = params

    def residual(self) -> np.ndarray:
        """Residual vector of the step."""
        return _residual(self.y_old, self.y_new, self.params)

    def jacobian(self) -> np.ndarray:
        """Jacobian of the step.

        The states are handed over in swapped roles: the stored old state is
        the one differentiated, the stored new state the fixed one.
        """
        return _jacobian(self.y_new, self.y_old, self.params)