"""Default NumPy backend: the reference implementation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..constants import SUM_CHECK_EPSILON
from ..gridpos import ArrayOfGridPos, gridpos_extpol
from ..polynomial import polint
from ..sampler import interp


@dataclass
class NumpyBackend:
    """Pure Python bracket scan and vectorised NumPy sampling."""

    name: str = "numpy"

    def locate(self, old_grid, new_grid, extpolfac: float, tie_break: str = "keep") -> ArrayOfGridPos:
        return gridpos_extpol(old_grid, new_grid, extpolfac, tie_break=tie_break)

    def polint(self, xa, ya, x: float):
        return polint(xa, ya, x)

    def sample(self, itw, field, *gps, out: Optional[np.ndarray] = None, check_weights: bool = True,
               sum_check_epsilon: float = SUM_CHECK_EPSILON):
        return interp(itw, field, *gps, out=out, check_weights=check_weights,
                      sum_check_epsilon=sum_check_epsilon)


def build_numpy_backend():
    return NumpyBackend()
