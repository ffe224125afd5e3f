"""Apply interpolation weights to a field.

The field must have one dimension per grid position argument, in the same
order as the arguments given to :func:`atmointerp.weights.interpweights`.
See :mod:`atmointerp.weights` for the corner enumeration shared with the
weight computation.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np

from .constants import SUM_CHECK_EPSILON
from .errors import DimensionMismatchError, InvalidWeightsError
from .gridpos import ArrayOfGridPos, GridPos
from .weights import blue_index_matrix, corner_offsets, n_weights


def _check_sum(first_row: np.ndarray, eps: float) -> None:
    if not np.isfinite(eps) or eps <= 0.0:
        raise ValueError(f"sum_check_epsilon must be finite and > 0, got {eps!r}")
    total = float(np.sum(first_row))
    if not abs(total - 1.0) <= eps:
        raise InvalidWeightsError(
            f"Interpolation weights sum to {total!r} instead of 1 (tolerance {eps}). "
            "Were the weights computed for these grid positions, in this axis order?"
        )


def _check_field(field: np.ndarray, idx_per_axis: Sequence[np.ndarray]) -> None:
    n_dims = len(idx_per_axis)
    if field.ndim != n_dims:
        raise DimensionMismatchError(
            f"Field has {field.ndim} dimensions, but grid positions were given for {n_dims} axes."
        )
    for k, idx in enumerate(idx_per_axis):
        if idx.size == 0:
            continue
        lo = int(np.min(idx))
        hi = int(np.max(idx))
        if lo < 0 or hi + 1 >= field.shape[k]:
            raise DimensionMismatchError(
                f"Grid positions of axis {k} address indices {lo}..{hi + 1}, "
                f"but the field has only {field.shape[k]} points along that axis."
            )


def store_output(result: np.ndarray, out: Optional[np.ndarray]) -> np.ndarray:
    if out is None:
        return result
    if out.shape != result.shape:
        raise DimensionMismatchError(
            f"Output container has shape {out.shape}, but the interpolation gives {result.shape}."
        )
    if not np.can_cast(result.dtype, out.dtype, "same_kind"):
        raise DimensionMismatchError(
            f"Output container of type {out.dtype} cannot hold interpolated values of type {result.dtype}."
        )
    out[...] = result
    return out


def check_red_inputs(itw, field, gps: Sequence[GridPos], check_weights: bool = True,
                     sum_check_epsilon: float = SUM_CHECK_EPSILON) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Validate red inputs; returns ``(itw, field, idx)`` with ``idx`` of shape ``(N,)``."""
    itw = np.asarray(itw)
    field = np.asarray(field)
    n_dims = len(gps)
    if itw.shape != (n_weights(n_dims),):
        raise DimensionMismatchError(
            f"Red interpolation in {n_dims} dimensions needs {n_weights(n_dims)} weights, got shape {itw.shape}."
        )
    idx = np.array([gp.idx for gp in gps], dtype=np.int64)
    _check_field(field, [idx[k : k + 1] for k in range(n_dims)])
    if check_weights:
        _check_sum(itw, sum_check_epsilon)
    return itw, field, idx


def check_blue_inputs(itw, field, agps: Sequence[ArrayOfGridPos], check_weights: bool = True,
                      sum_check_epsilon: float = SUM_CHECK_EPSILON) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Validate blue inputs; returns ``(itw, field, idx)`` with ``idx`` of shape ``(M, N)``."""
    itw = np.asarray(itw)
    field = np.asarray(field)
    n_dims = len(agps)
    n = len(agps[0])
    for k, agp in enumerate(agps):
        if len(agp) != n:
            raise DimensionMismatchError(
                f"Blue interpolation needs grid position arrays of equal length: "
                f"axis 0 has {n} positions, axis {k} has {len(agp)}."
            )
    if itw.shape != (n, n_weights(n_dims)):
        raise DimensionMismatchError(
            f"Blue weights must have shape {(n, n_weights(n_dims))}, got {itw.shape}."
        )
    idx = blue_index_matrix(agps)
    _check_field(field, [agp.idx for agp in agps])
    if check_weights and n > 0:
        _check_sum(itw[0], sum_check_epsilon)
    return itw, field, idx


def check_green_inputs(itw, field, agps: Sequence[ArrayOfGridPos], check_weights: bool = True,
                       sum_check_epsilon: float = SUM_CHECK_EPSILON) -> Tuple[np.ndarray, np.ndarray, list]:
    """Validate green inputs; returns ``(itw, field, idx)`` with one index array per axis."""
    itw = np.asarray(itw)
    field = np.asarray(field)
    n_dims = len(agps)
    shape = tuple(len(agp) for agp in agps) + (n_weights(n_dims),)
    if itw.shape != shape:
        raise DimensionMismatchError(f"Green weights must have shape {shape}, got {itw.shape}.")
    idx = [agp.idx for agp in agps]
    _check_field(field, idx)
    if check_weights and itw.size > 0:
        _check_sum(itw[(0,) * n_dims], sum_check_epsilon)
    return itw, field, idx


def red_sum(itw: np.ndarray, field: np.ndarray, idx: np.ndarray):
    corners = idx[None, :] + corner_offsets(idx.shape[0])
    values = field[tuple(corners.T)]
    return np.dot(values, itw)


def blue_sum(itw: np.ndarray, field: np.ndarray, idx: np.ndarray) -> np.ndarray:
    n_dims = idx.shape[1]
    corners = idx[:, None, :] + corner_offsets(n_dims)[None, :, :]
    values = field[tuple(corners[:, :, k] for k in range(n_dims))]
    return np.sum(values * itw, axis=1)


def green_index_arrays(idx: Sequence[np.ndarray]) -> tuple:
    """Broadcastable field indices of shape ``(n_1, ..., n_N, 2**N)`` per axis."""
    n_dims = len(idx)
    offsets = corner_offsets(n_dims)
    arrays = []
    for k, ik in enumerate(idx):
        shape = [1] * (n_dims + 1)
        shape[k] = ik.shape[0]
        arrays.append(ik.reshape(shape) + offsets[:, k].reshape((1,) * n_dims + (-1,)))
    return tuple(arrays)


def green_sum(itw: np.ndarray, field: np.ndarray, idx: Sequence[np.ndarray]) -> np.ndarray:
    values = field[green_index_arrays(idx)]
    return np.sum(values * itw, axis=-1)


def interp_red(itw, field, *gps: GridPos, check_weights: bool = True,
               sum_check_epsilon: float = SUM_CHECK_EPSILON):
    """Red interpolation: returns the interpolated scalar."""
    if not gps:
        raise DimensionMismatchError("At least one grid position is needed.")
    itw, field, idx = check_red_inputs(itw, field, gps, check_weights, sum_check_epsilon)
    return red_sum(itw, field, idx)[()]


def interp_blue(itw, field, *agps: ArrayOfGridPos, out: Optional[np.ndarray] = None,
                check_weights: bool = True, sum_check_epsilon: float = SUM_CHECK_EPSILON) -> np.ndarray:
    """Blue interpolation: one value per position of the sequence."""
    if not agps:
        raise DimensionMismatchError("At least one grid position array is needed.")
    itw, field, idx = check_blue_inputs(itw, field, agps, check_weights, sum_check_epsilon)
    return store_output(blue_sum(itw, field, idx), out)


def interp_green(itw, field, *agps: ArrayOfGridPos, out: Optional[np.ndarray] = None,
                 check_weights: bool = True, sum_check_epsilon: float = SUM_CHECK_EPSILON) -> np.ndarray:
    """Green interpolation: the field on the new grid spanned by ``agps``."""
    if not agps:
        raise DimensionMismatchError("At least one grid position array is needed.")
    itw, field, idx = check_green_inputs(itw, field, agps, check_weights, sum_check_epsilon)
    return store_output(green_sum(itw, field, idx), out)


def protocol_of(itw: np.ndarray, gps: Sequence) -> str:
    """Tell ``"red"``, ``"blue"`` or ``"green"`` from weights and positions."""
    if not gps:
        raise DimensionMismatchError("At least one grid position is needed.")
    if all(isinstance(gp, GridPos) for gp in gps):
        return "red"
    if not all(isinstance(gp, ArrayOfGridPos) for gp in gps):
        raise DimensionMismatchError("Cannot mix GridPos and ArrayOfGridPos arguments.")
    ndim = np.ndim(itw)
    if ndim == 2:
        return "blue"
    if ndim == len(gps) + 1:
        return "green"
    raise DimensionMismatchError(
        f"Weights with {ndim} dimensions fit neither blue (2) nor green "
        f"({len(gps) + 1}) interpolation over {len(gps)} axes."
    )


def interp(itw, field, *gps, out: Optional[np.ndarray] = None, check_weights: bool = True,
           sum_check_epsilon: float = SUM_CHECK_EPSILON):
    """Interpolate ``field`` with precomputed weights.

    The kind of interpolation follows from the arguments: ``GridPos``
    arguments give a scalar (red), ``ArrayOfGridPos`` arguments with a weight
    matrix give a vector (blue) and with a weight tensor of one more
    dimension than there are axes give a new field (green).

    Parameters
    ----------
    itw : ndarray
        Weights from :func:`atmointerp.weights.interpweights`.
    field : ndarray
        The field to interpolate, one dimension per grid position argument.
    *gps : GridPos or ArrayOfGridPos
        The grid positions the weights were computed from.
    out : ndarray, optional
        Pre-sized output container (blue and green only).
    check_weights : bool
        Spot check that the first set of weights sums to one.
    sum_check_epsilon : float
        Tolerance of that check.
    """
    kind = protocol_of(itw, gps)
    if kind == "red":
        if out is not None:
            raise DimensionMismatchError("Red interpolation returns a scalar; no output container is used.")
        return interp_red(itw, field, *gps, check_weights=check_weights, sum_check_epsilon=sum_check_epsilon)
    if kind == "blue":
        return interp_blue(itw, field, *gps, out=out, check_weights=check_weights,
                           sum_check_epsilon=sum_check_epsilon)
    return interp_green(itw, field, *gps, out=out, check_weights=check_weights,
                        sum_check_epsilon=sum_check_epsilon)
