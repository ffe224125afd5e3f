"""Cython-accelerated bracket scan and polynomial interpolation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..constants import SUM_CHECK_EPSILON
from ..errors import DimensionMismatchError, SingularStencilError
from ..gridpos import ArrayOfGridPos, apply_tie_break, prepare_locate
from ..sampler import interp

try:
    from .. import _cykernels  # type: ignore
except Exception as exc:  # pragma: no cover - optional compiled extension
    _cykernels = None
    _CYTHON_IMPORT_ERROR = exc
else:
    _CYTHON_IMPORT_ERROR = None


@dataclass
class CythonBackend:
    """Backend calling the compiled ``atmointerp._cykernels`` extension."""

    name: str = "cython"

    def locate(self, old_grid, new_grid, extpolfac: float, tie_break: str = "keep") -> ArrayOfGridPos:
        old, new, ascending, start = prepare_locate(old_grid, new_grid, extpolfac)
        if new.size == 0:
            return ArrayOfGridPos(np.empty(0, dtype=np.int64), np.empty((0, 2)))
        idx, fd0 = _cykernels.scan_positions(old, new, bool(ascending), int(start))
        idx, fd0 = apply_tie_break(np.asarray(idx), np.asarray(fd0), old.size, tie_break)
        return ArrayOfGridPos.from_fractions(idx, fd0)

    def polint(self, xa, ya, x: float):
        xa = np.ascontiguousarray(xa, dtype=np.float64)
        ya = np.ascontiguousarray(ya, dtype=np.float64)
        if xa.size == 0 or xa.shape != ya.shape:
            raise DimensionMismatchError("polint needs xa and ya of equal, non-zero length.")
        y, dy, ok = _cykernels.polint(xa, ya, float(x))
        if not ok:
            raise SingularStencilError(f"Two stencil abscissas coincide in {xa}.")
        return float(y), float(dy)

    def sample(self, itw, field, *gps, out: Optional[np.ndarray] = None, check_weights: bool = True,
               sum_check_epsilon: float = SUM_CHECK_EPSILON):
        return interp(itw, field, *gps, out=out, check_weights=check_weights,
                      sum_check_epsilon=sum_check_epsilon)


def build_cython_backend():
    if _cykernels is None:
        raise RuntimeError(
            "Cython backend unavailable: atmointerp._cykernels extension is not built"
        ) from _CYTHON_IMPORT_ERROR
    return CythonBackend()
