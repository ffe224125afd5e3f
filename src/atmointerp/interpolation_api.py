"""Interpolation runtime API used by calling models."""

from __future__ import annotations

from dataclasses import dataclass, field as dc_field
import logging
from typing import Sequence

import numpy as np

from .backends import build_backend
from .checks import as_grid, check_reference_grid
from .config import InterpConfig
from .constants import MIN_LINEAR_GRID_POINTS, MIN_POLY_GRID_POINTS
from .errors import DimensionMismatchError, MalformedGridError, OutOfRangeError
from .gridpos import ArrayOfGridPos, gridpos_check_fd
from .polynomial import STENCIL_SIZE, stencil_start
from .weights import interpweights_blue, interpweights_green, interpweights_red

logger = logging.getLogger(__name__)


@dataclass
class GridInterpolator:
    """Field on a rectilinear grid, ready to be sampled.

    The reference grids are checked once on construction. Axes listed in
    ``cfg.log_pressure_axes`` are located in log space.
    """

    grids: Sequence
    field: np.ndarray
    cfg: InterpConfig = dc_field(default_factory=InterpConfig)

    def __post_init__(self) -> None:
        self.field = np.asarray(self.field, dtype=np.float64)
        grids = [as_grid(g, f"grid {k}") for k, g in enumerate(self.grids)]
        if not grids:
            raise DimensionMismatchError("At least one grid is needed.")
        if self.field.ndim != len(grids):
            raise DimensionMismatchError(
                f"Field has {self.field.ndim} dimensions, but {len(grids)} grids were given."
            )
        for axis in self.cfg.log_pressure_axes:
            if axis >= len(grids):
                raise ValueError(f"log_pressure_axes names axis {axis}, but there are {len(grids)} axes.")
        located = []
        for k, grid in enumerate(grids):
            if grid.size != self.field.shape[k]:
                raise DimensionMismatchError(
                    f"Grid {k} has {grid.size} points, but the field has {self.field.shape[k]} along axis {k}."
                )
            if k in self.cfg.log_pressure_axes:
                if np.any(grid <= 0.0):
                    raise MalformedGridError(f"Pressure grid of axis {k} must be strictly positive.")
                grid = np.log(grid)
            check_reference_grid(grid, min_points=MIN_LINEAR_GRID_POINTS, which=f"axis {k}")
            located.append(grid)
        self.grids = grids
        self._located = located
        self._backend = build_backend(cfg=self.cfg)
        logger.debug("GridInterpolator on %d axes using backend %s", len(grids), self._backend.name)

    @property
    def backend_name(self) -> str:
        return self._backend.name

    def _positions(self, axis: int, values) -> ArrayOfGridPos:
        values = np.atleast_1d(np.asarray(values, dtype=np.float64))
        if values.ndim != 1:
            raise DimensionMismatchError(f"Query values of axis {axis} must be one-dimensional.")
        try:
            if axis in self.cfg.log_pressure_axes:
                if np.any(values <= 0.0):
                    bad = int(np.flatnonzero(values <= 0.0)[0])
                    raise OutOfRangeError(f"Pressure {float(values[bad])!r} at position {bad} is not positive.")
                values = np.log(values)
            return self._backend.locate(
                self._located[axis], values, self.cfg.extpolfac, tie_break=self.cfg.tie_break
            )
        except OutOfRangeError as exc:
            raise OutOfRangeError(f"Axis {axis}: {exc}") from exc

    def locate(self, axis: int, values, *, clamp: bool = False) -> ArrayOfGridPos:
        """Grid positions of ``values`` along ``axis``.

        With ``clamp`` the fractional distances are snapped into [0, 1],
        tolerating deviations up to ``cfg.fd_tol``.
        """
        if not 0 <= axis < self.field.ndim:
            raise DimensionMismatchError(f"Axis {axis} does not exist; the field has {self.field.ndim} axes.")
        agp = self._positions(axis, values)
        if clamp:
            agp = gridpos_check_fd(agp, self.cfg.fd_tol)
        return agp

    def _check_rank(self, args) -> None:
        if len(args) != self.field.ndim:
            raise DimensionMismatchError(
                f"Expected one argument per axis ({self.field.ndim}), got {len(args)}."
            )

    def _sample(self, itw, *gps, out=None):
        return self._backend.sample(
            itw,
            self.field,
            *gps,
            out=out,
            check_weights=self.cfg.check_weights,
            sum_check_epsilon=self.cfg.sum_check_epsilon,
        )

    def at(self, *point: float) -> float:
        """Value at a single point (one coordinate per axis)."""
        self._check_rank(point)
        gps = [self._positions(k, [v])[0] for k, v in enumerate(point)]
        return float(self._sample(interpweights_red(*gps), *gps))

    def along(self, *coords, out=None) -> np.ndarray:
        """Values along a sequence of points, e.g. a propagation path.

        ``coords`` holds one array per axis, all of the same length.
        """
        self._check_rank(coords)
        agps = [self._positions(k, c) for k, c in enumerate(coords)]
        return self._sample(interpweights_blue(*agps), *agps, out=out)

    def onto(self, *new_grids, out=None) -> np.ndarray:
        """The field regridded to the grid spanned by ``new_grids``."""
        self._check_rank(new_grids)
        agps = [self._positions(k, g) for k, g in enumerate(new_grids)]
        return self._sample(interpweights_green(*agps), *agps, out=out)

    def poly_along(self, coords) -> np.ndarray:
        """Polynomial interpolation of a one-dimensional field.

        Uses the stencil selected by ``cfg.poly_stencil``.
        """
        if self.field.ndim != 1:
            raise DimensionMismatchError("Polynomial interpolation is only available for one-dimensional fields.")
        stencil = self.cfg.poly_stencil
        size = STENCIL_SIZE[stencil]
        x = self._located[0]
        check_reference_grid(x, min_points=max(MIN_POLY_GRID_POINTS, size), which=f"{stencil} polynomial on axis 0")
        agp = self._positions(0, coords)
        xq = np.atleast_1d(np.asarray(coords, dtype=np.float64))
        if 0 in self.cfg.log_pressure_axes:
            xq = np.log(xq)
        result = np.empty(len(agp), dtype=np.float64)
        for i, gp in enumerate(agp):
            start = stencil_start(x.size, gp, stencil)
            result[i] = self._backend.polint(x[start : start + size], self.field[start : start + size], xq[i])[0]
        return result
