"""Numba-accelerated bracket scan and polynomial interpolation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..constants import SUM_CHECK_EPSILON
from ..errors import DimensionMismatchError, SingularStencilError
from ..gridpos import ArrayOfGridPos, apply_tie_break, prepare_locate
from ..sampler import interp

try:
    from numba import njit
except Exception as exc:  # pragma: no cover - optional dependency
    njit = None
    _NUMBA_IMPORT_ERROR = exc
else:
    _NUMBA_IMPORT_ERROR = None


if njit is not None:

    @njit(cache=True)
    def _scan_numba(old: np.ndarray, new: np.ndarray, ascending: bool, start: int):
        n_old = old.shape[0]
        n_new = new.shape[0]
        sign = 1.0 if ascending else -1.0
        idx_out = np.empty(n_new, dtype=np.int64)
        fd0_out = np.empty(n_new, dtype=np.float64)
        pos = start
        lower = old[pos]
        upper = old[pos + 1]
        for i in range(n_new):
            tng = new[i]
            if sign * tng < sign * lower and pos > 0:
                pos -= 1
                lower = old[pos]
                while sign * tng < sign * lower and pos > 0:
                    pos -= 1
                    lower = old[pos]
                upper = old[pos + 1]
            elif sign * tng > sign * upper and pos < n_old - 2:
                pos += 1
                upper = old[pos + 1]
                while sign * tng > sign * upper and pos < n_old - 2:
                    pos += 1
                    upper = old[pos + 1]
                lower = old[pos]
            idx_out[i] = pos
            fd0_out[i] = (tng - lower) / (upper - lower)
        return idx_out, fd0_out

    @njit(cache=True)
    def _polint_numba(xa: np.ndarray, ya: np.ndarray, x: float):
        n = xa.shape[0]
        c = ya.copy()
        d = ya.copy()
        ns = 0
        best = abs(x - xa[0])
        for i in range(1, n):
            diff = abs(x - xa[i])
            if diff < best:
                best = diff
                ns = i
        y = ya[ns]
        ns -= 1
        dy = 0.0
        for m in range(1, n):
            for i in range(n - m):
                ho = xa[i] - x
                hp = xa[i + m] - x
                w = c[i + 1] - d[i]
                den = ho - hp
                if den == 0.0:
                    return y, dy, False
                den = w / den
                d[i] = hp * den
                c[i] = ho * den
            if 2 * (ns + 1) < n - m:
                dy = c[ns + 1]
            else:
                dy = d[ns]
                ns -= 1
            y += dy
        return y, dy, True

    # Prime JIT cache once to avoid a latency spike in the first hot call.
    _scan_numba(np.array([0.0, 1.0]), np.array([0.5]), True, 0)
    _polint_numba(np.array([0.0, 1.0]), np.array([0.0, 1.0]), 0.5)


@dataclass
class NumbaBackend:
    """Backend with numba-jitted locate and polint kernels."""

    name: str = "numba"

    def locate(self, old_grid, new_grid, extpolfac: float, tie_break: str = "keep") -> ArrayOfGridPos:
        old, new, ascending, start = prepare_locate(old_grid, new_grid, extpolfac)
        if new.size == 0:
            return ArrayOfGridPos(np.empty(0, dtype=np.int64), np.empty((0, 2)))
        idx, fd0 = _scan_numba(old, new, bool(ascending), int(start))
        idx, fd0 = apply_tie_break(idx, fd0, old.size, tie_break)
        return ArrayOfGridPos.from_fractions(idx, fd0)

    def polint(self, xa, ya, x: float):
        xa = np.ascontiguousarray(xa, dtype=np.float64)
        ya = np.ascontiguousarray(ya, dtype=np.float64)
        if xa.size == 0 or xa.shape != ya.shape:
            raise DimensionMismatchError("polint needs xa and ya of equal, non-zero length.")
        y, dy, ok = _polint_numba(xa, ya, float(x))
        if not ok:
            raise SingularStencilError(f"Two stencil abscissas coincide in {xa}.")
        return float(y), float(dy)

    def sample(self, itw, field, *gps, out: Optional[np.ndarray] = None, check_weights: bool = True,
               sum_check_epsilon: float = SUM_CHECK_EPSILON):
        return interp(itw, field, *gps, out=out, check_weights=check_weights,
                      sum_check_epsilon=sum_check_epsilon)


def build_numba_backend():
    if njit is None:
        raise RuntimeError(
            f"Numba backend unavailable: {_NUMBA_IMPORT_ERROR}"
        ) from _NUMBA_IMPORT_ERROR
    return NumbaBackend()
