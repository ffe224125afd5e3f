"""Polynomial interpolation on a local stencil.

Used where linear interpolation between two grid points is not accurate
enough. The same grid positions as for linear interpolation select a stencil
of three (or four) neighbouring points, and Neville's algorithm evaluates the
interpolating polynomial through them.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np

from .checks import as_grid, check_reference_grid
from .constants import MIN_POLY_GRID_POINTS, POLY_STENCILS
from .errors import DimensionMismatchError, OutOfRangeError, SingularStencilError
from .gridpos import GridPos

STENCIL_SIZE = {"adaptive3": 3, "fixed3": 3, "cubic4": 4}


def polint(xa, ya, x: float) -> Tuple[float, float]:
    """Neville's algorithm.

    Given ``xa`` and ``ya`` of equal length n, returns the value at ``x`` of
    the polynomial of degree n-1 through the points, and an error estimate
    (the last correction added).

    Raises
    ------
    SingularStencilError
        If two abscissas coincide.
    """
    xa = np.asarray(xa, dtype=np.float64)
    ya = np.asarray(ya, dtype=np.float64)
    n = len(xa)
    if n == 0 or len(ya) != n:
        raise DimensionMismatchError(f"polint needs xa and ya of equal, non-zero length, got {len(xa)} and {len(ya)}.")
    c = ya.copy()
    d = ya.copy()
    # Start from the closest table entry.
    ns = int(np.argmin(np.abs(x - xa)))
    y = float(ya[ns])
    ns -= 1
    dy = 0.0
    for m in range(1, n):
        for i in range(n - m):
            ho = xa[i] - x
            hp = xa[i + m] - x
            w = c[i + 1] - d[i]
            den = ho - hp
            if den == 0.0:
                raise SingularStencilError(
                    f"Stencil abscissas {xa[i]!r} (index {i}) and {xa[i + m]!r} (index {i + m}) coincide."
                )
            den = w / den
            d[i] = hp * den
            c[i] = ho * den
        # Take the path through the tableau that stays closest to x.
        if 2 * (ns + 1) < n - m:
            dy = float(c[ns + 1])
        else:
            dy = float(d[ns])
            ns -= 1
        y += dy
    return float(y), float(dy)


def stencil_start(n_x: int, gp: GridPos, stencil: str = "adaptive3") -> int:
    """First index of the stencil used for a point at ``gp``.

    ``"adaptive3"`` adds the neighbour on the side the point is closest to,
    ``"fixed3"`` centres three points on ``gp.idx`` and ``"cubic4"`` takes
    ``idx-1 .. idx+2``. Near the grid ends the stencil is shifted inwards.
    """
    if stencil not in POLY_STENCILS:
        raise ValueError("stencil must be one of: " + ", ".join(POLY_STENCILS))
    size = STENCIL_SIZE[stencil]
    if n_x < size:
        raise DimensionMismatchError(f"Stencil {stencil!r} needs at least {size} grid points, got {n_x}.")
    idx = gp.idx
    if not 0 <= idx <= n_x - 2:
        raise OutOfRangeError(f"Grid position index {idx} is outside [0, {n_x - 2}].")
    if stencil == "adaptive3":
        if (gp.fd[0] <= 0.5 and idx > 0) or idx == n_x - 2:
            return idx - 1
        return idx
    return min(max(idx - 1, 0), n_x - size)


def interp_poly_with_error(x, y, x_i: float, gp: GridPos, stencil: str = "adaptive3") -> Tuple[float, float]:
    """Like :func:`interp_poly`, but also returns the error estimate of :func:`polint`."""
    xg = as_grid(x, "x")
    yv = np.asarray(y, dtype=np.float64)
    if yv.shape != xg.shape:
        raise DimensionMismatchError(f"x and y must have the same length, got {xg.size} and {yv.size}.")
    check_reference_grid(xg, min_points=max(MIN_POLY_GRID_POINTS, STENCIL_SIZE.get(stencil, 0)))
    start = stencil_start(xg.size, gp, stencil)
    stop = start + STENCIL_SIZE[stencil]
    return polint(xg[start:stop], yv[start:stop], float(x_i))


def interp_poly(x, y, x_i: float, gp: GridPos, stencil: str = "adaptive3") -> float:
    """Polynomial interpolation of ``y(x)`` at ``x_i``.

    Parameters
    ----------
    x : array_like
        Original grid, strictly monotonic, at least three points.
    y : array_like
        Values corresponding to ``x``.
    x_i : float
        The point where the value is requested.
    gp : GridPos
        Grid position of ``x_i`` in ``x``.
    stencil : str
        Stencil selection, see :func:`stencil_start`.

    Returns
    -------
    float
        The interpolated value.
    """
    return interp_poly_with_error(x, y, x_i, gp, stencil)[0]
