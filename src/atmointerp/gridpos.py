"""Grid positions and the grid locator.

Doing an interpolation requires a chain of calls:

1. :func:`gridpos` (one for each interpolation dimension),
2. :func:`atmointerp.weights.interpweights`,
3. :func:`atmointerp.sampler.interp`.

Note that the first step does not need the field at all. Grid positions for
one axis can be reused for every field defined on that axis.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Sequence, Tuple, Union

import numpy as np

from .checks import as_grid, check_reference_grid, extrapolation_limits
from .constants import DEFAULT_EXTPOLFAC, FD_TOL, MIN_LINEAR_GRID_POINTS, TIE_BREAK_POLICIES
from .errors import DimensionMismatchError, MalformedGridError, OutOfRangeError


@dataclass(frozen=True)
class GridPos:
    """Position of one value relative to one reference grid.

    ``fd[0]`` is the fractional distance from ``grid[idx]`` towards
    ``grid[idx + 1]`` and thus the weight of point ``idx + 1``. ``fd[1]`` is
    ``1 - fd[0]``, the weight of point ``idx``.
    """

    idx: int
    fd: Tuple[float, float]

    @classmethod
    def from_fraction(cls, idx: int, fd0: float) -> "GridPos":
        return cls(int(idx), (float(fd0), 1.0 - float(fd0)))

    def __str__(self) -> str:
        return f"{self.idx} {self.fd[0]} {self.fd[1]}"


@dataclass(frozen=True)
class ArrayOfGridPos:
    """Sequence of grid positions stored as two read-only arrays.

    ``idx`` has shape ``(n,)`` and ``fd`` has shape ``(n, 2)`` with the same
    column convention as :class:`GridPos`.
    """

    idx: np.ndarray
    fd: np.ndarray

    def __post_init__(self) -> None:
        idx = np.array(self.idx, dtype=np.int64, copy=True).reshape(-1)
        fd = np.array(self.fd, dtype=np.float64, copy=True)
        if fd.ndim != 2 or fd.shape[1] != 2 or fd.shape[0] != idx.shape[0]:
            raise DimensionMismatchError(
                f"fd must have shape ({idx.shape[0]}, 2), got {fd.shape}"
            )
        idx.setflags(write=False)
        fd.setflags(write=False)
        object.__setattr__(self, "idx", idx)
        object.__setattr__(self, "fd", fd)

    @classmethod
    def from_fractions(cls, idx, fd0) -> "ArrayOfGridPos":
        fd0 = np.asarray(fd0, dtype=np.float64).reshape(-1)
        return cls(idx, np.stack([fd0, 1.0 - fd0], axis=1))

    @classmethod
    def from_gridpos(cls, gps: Sequence[GridPos]) -> "ArrayOfGridPos":
        if len(gps) == 0:
            return cls(np.empty(0, dtype=np.int64), np.empty((0, 2)))
        return cls([gp.idx for gp in gps], [gp.fd for gp in gps])

    def __len__(self) -> int:
        return int(self.idx.shape[0])

    def __getitem__(self, key):
        # Slices, integer arrays and boolean masks select a sub-array.
        if isinstance(key, slice) or np.ndim(key) > 0:
            return ArrayOfGridPos(self.idx[key], self.fd[key])
        return GridPos(int(self.idx[key]), (float(self.fd[key, 0]), float(self.fd[key, 1])))

    def __iter__(self) -> Iterator[GridPos]:
        for i in range(len(self)):
            yield self[i]

    def fractional(self) -> np.ndarray:
        """Return ``idx + fd[0]`` for every position."""
        return self.idx.astype(np.float64) + self.fd[:, 0]


AnyGridPos = Union[GridPos, ArrayOfGridPos]


def _start_position(first: float, og_min: float, og_max: float, n_old: int, ascending: bool) -> int:
    # Linear estimate between the extrapolation limits, which is exact for an
    # equidistant grid and a good guess for most others.
    frac = (first - og_min) / (og_max - og_min)
    if not ascending:
        frac = 1.0 - frac
    pos = int(np.rint(frac * (n_old - 2)))
    return min(max(pos, 0), n_old - 2)


def scan_positions(old_grid: np.ndarray, new_grid: np.ndarray, ascending: bool, start: int):
    """Walk the bracket ``[idx, idx+1]`` along ``new_grid``.

    Returns ``(idx, fd0)`` arrays. ``new_grid`` is assumed to be inside the
    extrapolation envelope. The bracket is moved one grid point at a time
    from where the previous value was found, so sorted or mostly sorted
    query sequences cost O(1) per value.

    When a value coincides with a grid point the current bracket is kept
    if it contains the value.
    """
    old = old_grid.tolist()
    new = new_grid.tolist()
    n_old = len(old)
    n_new = len(new)
    # Comparing sign * value lets one loop serve both directions.
    sign = 1.0 if ascending else -1.0

    idx_out = np.empty(n_new, dtype=np.int64)
    fd0_out = np.empty(n_new, dtype=np.float64)

    pos = start
    lower = old[pos]
    upper = old[pos + 1]
    for i in range(n_new):
        tng = new[i]
        if sign * tng < sign * lower and pos > 0:
            # Bracket too high; pos stays 0 for extrapolation.
            while True:
                pos -= 1
                lower = old[pos]
                if not (sign * tng < sign * lower and pos > 0):
                    break
            upper = old[pos + 1]
        elif sign * tng > sign * upper and pos < n_old - 2:
            # Bracket too low; pos stays n_old - 2 for extrapolation.
            while True:
                pos += 1
                upper = old[pos + 1]
                if not (sign * tng > sign * upper and pos < n_old - 2):
                    break
            lower = old[pos]
        idx_out[i] = pos
        fd0_out[i] = (tng - lower) / (upper - lower)
    return idx_out, fd0_out


def apply_tie_break(idx: np.ndarray, fd0: np.ndarray, n_old: int, tie_break: str):
    """Move brackets of values sitting exactly on a grid point.

    ``"keep"`` leaves the result of the scan alone, ``"lower"`` makes the
    coincident point the lower end of its bracket and ``"upper"`` its upper
    end, as far as the grid ends permit.
    """
    if tie_break == "keep":
        return idx, fd0
    idx = idx.copy()
    fd0 = fd0.copy()
    if tie_break == "lower":
        mask = (fd0 == 1.0) & (idx < n_old - 2)
        idx[mask] += 1
        fd0[mask] = 0.0
    elif tie_break == "upper":
        mask = (fd0 == 0.0) & (idx > 0)
        idx[mask] -= 1
        fd0[mask] = 1.0
    else:
        raise ValueError("tie_break must be one of: " + ", ".join(TIE_BREAK_POLICIES))
    return idx, fd0


def check_within_envelope(new_grid: np.ndarray, og_min: float, og_max: float, extpolfac: float) -> None:
    """Raise :class:`OutOfRangeError` for the first value outside the envelope."""
    bad = np.isnan(new_grid) | (new_grid < og_min) | (new_grid > og_max)
    if np.any(bad):
        i = int(np.argmax(bad))
        raise OutOfRangeError(
            f"Value {float(new_grid[i])!r} at position {i} of the new grid is outside "
            f"the allowed range [{og_min!r}, {og_max!r}] of the original grid "
            f"(extpolfac={extpolfac})."
        )


def prepare_locate(old_grid, new_grid, extpolfac: float):
    """Validate the grids of a locate call.

    Returns ``(old, new, ascending, start)`` ready for a bracket scan.
    """
    if extpolfac < 0.0:
        raise ValueError("extpolfac must be >= 0")
    old = as_grid(old_grid, "old_grid")
    new = as_grid(new_grid, "new_grid")
    ascending = check_reference_grid(old, min_points=MIN_LINEAR_GRID_POINTS)
    og_min, og_max = extrapolation_limits(old, extpolfac)
    check_within_envelope(new, og_min, og_max, extpolfac)
    start = 0
    if new.size:
        start = _start_position(float(new[0]), og_min, og_max, old.size, ascending)
    return old, new, ascending, start


def gridpos_extpol(
    old_grid,
    new_grid,
    extpolfac: float = DEFAULT_EXTPOLFAC,
    *,
    tie_break: str = "keep",
) -> ArrayOfGridPos:
    """Set up grid positions of ``new_grid`` in ``old_grid``.

    The old grid has to be strictly sorted, in ascending or descending
    order, and must contain at least two points. The new grid does not have
    to be sorted, but the function is faster if it is sorted or mostly
    sorted (e.g. ``5 4 3 2 2.5 3 4``, typical for a limb propagation path).

    The new grid has to be inside the range covered by the old grid, except
    for an extrapolation of ``extpolfac`` times the distance between the
    two outermost points at each end. With ``extpolfac=0.5`` and an old grid
    starting ``0, 1, ...`` the new grid may extend down to -0.5.

    Parameters
    ----------
    old_grid : array_like
        The original grid.
    new_grid : array_like
        The values to locate.
    extpolfac : float
        Extrapolation factor.
    tie_break : str
        Bracket choice for values exactly on a grid point, see
        :func:`apply_tie_break`.

    Returns
    -------
    ArrayOfGridPos
        One position per element of ``new_grid``, in the same order.

    Raises
    ------
    MalformedGridError
        If ``old_grid`` is too short or not strictly monotonic.
    OutOfRangeError
        If a value of ``new_grid`` is outside the extrapolation envelope.
    """
    if tie_break not in TIE_BREAK_POLICIES:
        raise ValueError("tie_break must be one of: " + ", ".join(TIE_BREAK_POLICIES))
    old, new, ascending, start = prepare_locate(old_grid, new_grid, extpolfac)
    if new.size == 0:
        return ArrayOfGridPos(np.empty(0, dtype=np.int64), np.empty((0, 2)))
    idx, fd0 = scan_positions(old, new, ascending, start)
    idx, fd0 = apply_tie_break(idx, fd0, old.size, tie_break)
    return ArrayOfGridPos.from_fractions(idx, fd0)


def gridpos(
    old_grid,
    new_grid,
    *,
    extpolfac: float = DEFAULT_EXTPOLFAC,
    tie_break: str = "keep",
) -> AnyGridPos:
    """Standard grid position calculation, with ``extpolfac=0.5`` by default.

    A scalar ``new_grid`` gives a single :class:`GridPos` (for "red"
    interpolation), anything else an :class:`ArrayOfGridPos`.
    """
    if np.ndim(new_grid) == 0:
        return gridpos_extpol(old_grid, [new_grid], extpolfac, tie_break=tie_break)[0]
    return gridpos_extpol(old_grid, new_grid, extpolfac, tie_break=tie_break)


def p2gridpos(
    old_pgrid,
    new_pgrid,
    *,
    extpolfac: float = DEFAULT_EXTPOLFAC,
    tie_break: str = "keep",
) -> AnyGridPos:
    """Grid positions for pressure grids.

    Pressure is located in log space, so the fractional distances describe a
    linear interpolation in log(p).
    """
    old = as_grid(old_pgrid, "old_pgrid")
    new = np.asarray(new_pgrid, dtype=np.float64)
    if np.any(old <= 0.0):
        raise MalformedGridError("Pressure grids must be strictly positive.")
    if np.any(new <= 0.0):
        bad = np.flatnonzero(np.atleast_1d(new) <= 0.0)[0]
        raise OutOfRangeError(
            f"Pressure {float(np.atleast_1d(new)[bad])!r} at position {int(bad)} is not positive."
        )
    return gridpos(np.log(old), np.log(new), extpolfac=extpolfac, tie_break=tie_break)


# ---------------------------------------------------------------------------
# Utilities
# ---------------------------------------------------------------------------


def fractional_gp(gp: AnyGridPos):
    """Return the complete fractional grid position ``idx + fd[0]``."""
    if isinstance(gp, ArrayOfGridPos):
        return gp.fractional()
    return float(gp.idx) + gp.fd[0]


def gridpos_check_fd(gp: AnyGridPos, fd_tol: float = FD_TOL) -> AnyGridPos:
    """Clamp fractional distances to [0, 1].

    For positions that are known to be correct except for numerical noise.
    Deviations beyond ``fd_tol`` indicate a real error upstream and raise
    :class:`OutOfRangeError`.
    """
    if not np.isfinite(fd_tol) or fd_tol <= 0.0:
        raise ValueError(f"fd_tol must be finite and > 0, got {fd_tol!r}")
    fd = np.atleast_2d(np.asarray(gp.fd, dtype=np.float64))
    bad = (fd <= -fd_tol) | (fd >= 1.0 + fd_tol)
    if np.any(bad):
        row = int(np.argmax(np.any(bad, axis=1)))
        raise OutOfRangeError(
            f"Fractional distances {tuple(fd[row])} deviate from [0, 1] by more than {fd_tol}."
        )
    clamped = np.clip(fd, 0.0, 1.0)
    if isinstance(gp, ArrayOfGridPos):
        return ArrayOfGridPos(gp.idx, clamped)
    return GridPos(gp.idx, (float(clamped[0, 0]), float(clamped[0, 1])))


def gridpos_force_end_fd(gp: GridPos) -> GridPos:
    """Snap fractional distances to exactly ``(0, 1)`` or ``(1, 0)``.

    Use when the position is known to be on a grid point and only roundoff
    makes the fractional distance deviate from 0 or 1.
    """
    if gp.fd[0] < 0.5:
        return GridPos(gp.idx, (0.0, 1.0))
    return GridPos(gp.idx, (1.0, 0.0))


def is_gridpos_at_index_i(gp: GridPos, i: int) -> bool:
    """True if ``gp`` sits exactly on grid point ``i``."""
    fd0 = gp.fd[0]
    return (fd0 == 0.0 or fd0 == 1.0) and gp.idx + int(fd0) == i


def gridpos2gridrange(gp: GridPos, upwards: bool) -> int:
    """Return the lower index of the grid range of interest for ``gp``.

    For a point exactly on a grid value it is not clear if the range below
    or above is meant; ``upwards`` selects the range above.
    """
    fd0 = gp.fd[0]
    if not 0.0 <= fd0 <= 1.0:
        raise OutOfRangeError(f"Fractional distance {fd0!r} is outside [0, 1].")
    if 0.0 < fd0 < 1.0:
        return gp.idx
    if fd0 == 0.0:
        rng = gp.idx if upwards else gp.idx - 1
    else:
        rng = gp.idx + 1 if upwards else gp.idx
    if rng < 0:
        raise OutOfRangeError("There is no grid range below the first grid point.")
    return rng
