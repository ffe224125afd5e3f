"""Multilinear interpolation weights.

For N grid axes there are 2**N corners of the bounding box around a
position. Corners are enumerated as N-bit numbers with the first axis in the
most significant bit, so the last axis varies fastest. For axis ``k`` and
corner bit ``b``:

* the field is addressed at ``gp_k.idx + b``,
* the weight factor is ``gp_k.fd[FD_COLUMN_FOR_BIT[b]]``, i.e. ``fd[1]`` for
  the lower point and ``fd[0]`` for the upper one.

The weight of a corner is the product of its factors over all axes.
:func:`corner_offsets` is the single source of this enumeration and the
sampler uses it for addressing the field, so weights and field values cannot
get out of step.

There are three flavours of weights:

* "red": one position per axis, weights are a vector of length 2**N,
* "blue": a sequence of M positions, every axis has M grid positions,
  weights are a matrix of shape ``(M, 2**N)``,
* "green": the grid position arrays define the axes of a new grid, weights
  have shape ``(n_1, ..., n_N, 2**N)``.

For one axis blue and green weights are the same thing.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional, Sequence

import numpy as np

from .errors import DimensionMismatchError
from .gridpos import ArrayOfGridPos, GridPos

# Column of ``fd`` that gives the weight factor for corner bit 0 and bit 1.
FD_COLUMN_FOR_BIT = (1, 0)


@lru_cache(maxsize=None)
def _corner_offsets(n_dims: int) -> np.ndarray:
    corners = np.arange(2**n_dims, dtype=np.int64)
    shifts = np.arange(n_dims - 1, -1, -1, dtype=np.int64)
    offsets = (corners[:, None] >> shifts[None, :]) & 1
    offsets.setflags(write=False)
    return offsets


def corner_offsets(n_dims: int) -> np.ndarray:
    """Return the ``(2**n_dims, n_dims)`` table of 0/1 corner offsets."""
    if n_dims < 1:
        raise DimensionMismatchError("At least one grid axis is needed.")
    return _corner_offsets(int(n_dims))


def n_weights(n_dims: int) -> int:
    return 2 ** int(n_dims)


def _pair(gp: GridPos) -> np.ndarray:
    return np.array([gp.fd[FD_COLUMN_FOR_BIT[0]], gp.fd[FD_COLUMN_FOR_BIT[1]]], dtype=np.float64)


def _pairs(agp: ArrayOfGridPos) -> np.ndarray:
    return agp.fd[:, list(FD_COLUMN_FOR_BIT)]


def _store(w: np.ndarray, out: Optional[np.ndarray]) -> np.ndarray:
    if out is None:
        return w
    if out.shape != w.shape:
        raise DimensionMismatchError(
            f"Output container has shape {out.shape}, but the weights need {w.shape}."
        )
    if not np.can_cast(w.dtype, out.dtype, "same_kind"):
        raise DimensionMismatchError(f"Output container of type {out.dtype} cannot hold weights of type {w.dtype}.")
    out[...] = w
    return out


def interpweights_red(*gps: GridPos, out: Optional[np.ndarray] = None) -> np.ndarray:
    """Weights for one position: a vector of length 2**N."""
    if not gps:
        raise DimensionMismatchError("At least one grid position is needed.")
    w = _pair(gps[0])
    for gp in gps[1:]:
        w = np.multiply.outer(w, _pair(gp)).reshape(-1)
    return _store(w, out)


def interpweights_blue(*agps: ArrayOfGridPos, out: Optional[np.ndarray] = None) -> np.ndarray:
    """Weights for a sequence of positions: shape ``(M, 2**N)``.

    All grid position arrays must have the same length M.
    """
    if not agps:
        raise DimensionMismatchError("At least one grid position array is needed.")
    n = len(agps[0])
    for k, agp in enumerate(agps):
        if len(agp) != n:
            raise DimensionMismatchError(
                f"Blue interpolation needs grid position arrays of equal length: "
                f"axis 0 has {n} positions, axis {k} has {len(agp)}."
            )
    w = _pairs(agps[0])
    for agp in agps[1:]:
        w = (w[:, :, None] * _pairs(agp)[:, None, :]).reshape(n, 2 * w.shape[1])
    return _store(w, out)


def interpweights_green(*agps: ArrayOfGridPos, out: Optional[np.ndarray] = None) -> np.ndarray:
    """Weights for an entire new grid: shape ``(n_1, ..., n_N, 2**N)``."""
    if not agps:
        raise DimensionMismatchError("At least one grid position array is needed.")
    w = _pairs(agps[0])
    for agp in agps[1:]:
        f = _pairs(agp)
        lead = w.shape[:-1]
        w = w[..., None, :, None] * f.reshape((1,) * len(lead) + (f.shape[0], 1, 2))
        w = w.reshape(lead + (f.shape[0], w.shape[-2] * w.shape[-1]))
    return _store(w, out)


def interpweights(*gps, mode: str = "auto", out: Optional[np.ndarray] = None) -> np.ndarray:
    """Compute interpolation weights for one position or arrays of positions.

    Parameters
    ----------
    *gps : GridPos or ArrayOfGridPos
        One argument per grid axis, in the axis order of the field. Either
        all ``GridPos`` (red) or all ``ArrayOfGridPos`` (blue or green).
    mode : str
        ``"blue"``, ``"green"`` or ``"auto"``. With ``"auto"`` the flavour
        follows ``out`` when given (a matrix means blue), and is blue for a
        single axis.
    out : ndarray, optional
        Pre-sized container to write the weights into.

    Returns
    -------
    ndarray
        The weights; ``out`` if it was given.
    """
    if not gps:
        raise DimensionMismatchError("At least one grid position is needed.")
    if all(isinstance(gp, GridPos) for gp in gps):
        return interpweights_red(*gps, out=out)
    if not all(isinstance(gp, ArrayOfGridPos) for gp in gps):
        raise DimensionMismatchError("Cannot mix GridPos and ArrayOfGridPos arguments.")
    return _resolve(mode, out, len(gps), interpweights_blue, interpweights_green)(*gps, out=out)


def _resolve(mode: str, out, n_dims: int, blue, green):
    if mode == "blue":
        return blue
    if mode == "green":
        return green
    if mode != "auto":
        raise ValueError("mode must be one of: auto, blue, green")
    if n_dims == 1:
        return blue
    if out is not None:
        if out.ndim == 2:
            return blue
        if out.ndim == n_dims + 1:
            return green
        raise DimensionMismatchError(
            f"An output container with {out.ndim} dimensions fits neither blue "
            f"(2) nor green ({n_dims + 1}) weights for {n_dims} axes."
        )
    raise ValueError("mode must be 'blue' or 'green' for arrays of grid positions on more than one axis")


def weight_sums(itw: np.ndarray) -> np.ndarray:
    """Sum of the weights over the trailing (corner) axis."""
    return np.sum(itw, axis=-1)


def blue_index_matrix(agps: Sequence[ArrayOfGridPos]) -> np.ndarray:
    """Stack the bracket indices of blue grid positions as shape ``(M, N)``."""
    return np.stack([agp.idx for agp in agps], axis=1)
