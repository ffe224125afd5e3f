"""Validation of reference and query grids.

The locator assumes a strictly monotonic reference grid. These helpers
reject malformed input up front with a message that says which
interpolation was being set up and what exactly is wrong.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from .constants import DEFAULT_EXTPOLFAC
from .errors import MalformedGridError, OutOfRangeError


def as_grid(values, name: str = "grid") -> np.ndarray:
    """Return ``values`` as a contiguous 1-D float64 array."""
    arr = np.ascontiguousarray(values, dtype=np.float64)
    if arr.ndim == 0:
        arr = arr.reshape(1)
    if arr.ndim != 1:
        raise MalformedGridError(f"{name} must be one-dimensional, got shape {arr.shape}")
    return arr


def is_increasing(grid: np.ndarray) -> bool:
    """True if ``grid`` is strictly increasing (no duplicates)."""
    return bool(np.all(np.diff(grid) > 0.0))


def is_decreasing(grid: np.ndarray) -> bool:
    """True if ``grid`` is strictly decreasing (no duplicates)."""
    return bool(np.all(np.diff(grid) < 0.0))


def check_reference_grid(old_grid: np.ndarray, min_points: int = 2, which: str = "") -> bool:
    """Check that ``old_grid`` can be used as a reference grid.

    Returns True for an ascending grid and False for a descending one. The
    direction is decided by the first two points only; the rest of the grid
    must follow it strictly.
    """
    prefix = f"Problem with the grids for the following interpolation: {which}.\n" if which else ""
    n_old = old_grid.size
    if n_old < min_points:
        raise MalformedGridError(
            f"{prefix}The original grid must have at least {min_points} elements, got {n_old}."
        )
    if not np.all(np.isfinite(old_grid)):
        raise MalformedGridError(f"{prefix}The original grid contains non-finite values: {old_grid}.")
    ascending = bool(old_grid[0] <= old_grid[1])
    ok = is_increasing(old_grid) if ascending else is_decreasing(old_grid)
    if not ok:
        steps = np.diff(old_grid)
        bad = int(np.argmax(steps <= 0.0)) if ascending else int(np.argmax(steps >= 0.0))
        raise MalformedGridError(
            f"{prefix}The original grid must be strictly sorted (no duplicate values). "
            f"Order breaks between index {bad} ({old_grid[bad]!r}) "
            f"and index {bad + 1} ({old_grid[bad + 1]!r})."
        )
    return ascending


def extrapolation_limits(old_grid: np.ndarray, extpolfac: float = DEFAULT_EXTPOLFAC) -> Tuple[float, float]:
    """Return ``(og_min, og_max)``, the allowed numeric range of query values.

    The envelope extends the grid by ``extpolfac`` times the spacing of the
    outermost two points at each end.
    """
    n_old = old_grid.size
    first = float(old_grid[0]) - extpolfac * (float(old_grid[1]) - float(old_grid[0]))
    last = float(old_grid[n_old - 1]) + extpolfac * (float(old_grid[n_old - 1]) - float(old_grid[n_old - 2]))
    if old_grid[0] <= old_grid[1]:
        return first, last
    # Descending: the max is now the first point, the min the last point.
    return last, first


def chk_interpolation_grids(
    which_interpolation: str,
    old_grid,
    new_grid,
    order: int = 1,
    extpolfac: float = DEFAULT_EXTPOLFAC,
) -> None:
    """Check that ``old_grid`` and ``new_grid`` are fine for an interpolation.

    Parameters
    ----------
    which_interpolation : str
        Human readable description, quoted in error messages.
    old_grid : array_like
        The original grid. Needs at least ``order + 1`` points and must be
        strictly monotonic.
    new_grid : array_like or float
        The new grid. Values exactly on the extrapolation limit are allowed.
    order : int
        Interpolation order (1 for linear).
    extpolfac : float
        Extrapolation factor, see :func:`atmointerp.gridpos.gridpos_extpol`.

    Raises
    ------
    MalformedGridError
        If the original grid is too short or not strictly sorted.
    OutOfRangeError
        If the new grid reaches beyond the extrapolation envelope.
    """
    old = as_grid(old_grid, "old_grid")
    new = as_grid(new_grid, "new_grid")
    check_reference_grid(old, min_points=order + 1, which=which_interpolation)
    if new.size == 0:
        return
    og_min, og_max = extrapolation_limits(old, extpolfac)
    if np.any(np.isnan(new)):
        bad = int(np.argmax(np.isnan(new)))
        raise OutOfRangeError(
            f"Problem with the grids for the following interpolation: {which_interpolation}.\n"
            f"The new grid contains NaN at index {bad}."
        )
    ng_min = float(np.min(new))
    ng_max = float(np.max(new))
    if ng_min < og_min:
        raise OutOfRangeError(
            f"Problem with the grids for the following interpolation: {which_interpolation}.\n"
            "The minimum of the new grid must be inside the original grid "
            "(a bit of extrapolation is allowed, but not so much).\n"
            f"Minimum of original grid:           {float(np.min(old))!r}\n"
            f"Minimum allowed value for new grid: {og_min!r}\n"
            f"Actual minimum of new grid:         {ng_min!r}"
        )
    if ng_max > og_max:
        raise OutOfRangeError(
            f"Problem with the grids for the following interpolation: {which_interpolation}.\n"
            "The maximum of the new grid must be inside the original grid "
            "(a bit of extrapolation is allowed, but not so much).\n"
            f"Maximum of original grid:           {float(np.max(old))!r}\n"
            f"Maximum allowed value for new grid: {og_max!r}\n"
            f"Actual maximum of new grid:         {ng_max!r}"
        )
