"""Backend protocol for locate/sample/polint kernels."""

from __future__ import annotations

from typing import Optional, Protocol, Tuple

import numpy as np

from ..gridpos import ArrayOfGridPos


class InterpolationBackend(Protocol):
    name: str

    def locate(self, old_grid, new_grid, extpolfac: float, tie_break: str = "keep") -> ArrayOfGridPos:
        ...

    def polint(self, xa: np.ndarray, ya: np.ndarray, x: float) -> Tuple[float, float]:
        ...

    def sample(self, itw, field, *gps, out: Optional[np.ndarray] = None, check_weights: bool = True,
               sum_check_epsilon: float = ...):
        ...
