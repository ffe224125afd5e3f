"""Run configuration for interpolation calls."""

from __future__ import annotations

from dataclasses import dataclass
import math

from .constants import (
    BACKEND_NAMES,
    DEFAULT_EXTPOLFAC,
    FD_TOL,
    POLY_STENCILS,
    SUM_CHECK_EPSILON,
    TIE_BREAK_POLICIES,
)


@dataclass(frozen=True)
class InterpConfig:
    """Container for user-controlled interpolation parameters."""

    extpolfac: float = DEFAULT_EXTPOLFAC
    fd_tol: float = FD_TOL
    sum_check_epsilon: float = SUM_CHECK_EPSILON
    tie_break: str = "keep"
    check_weights: bool = True
    backend: str = "numpy"
    poly_stencil: str = "adaptive3"
    log_pressure_axes: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        if not math.isfinite(self.extpolfac):
            raise ValueError("extpolfac must be finite")
        if self.extpolfac < 0.0:
            raise ValueError("extpolfac must be >= 0")
        if not math.isfinite(self.fd_tol) or self.fd_tol <= 0.0:
            raise ValueError("fd_tol must be finite and > 0")
        if not math.isfinite(self.sum_check_epsilon) or self.sum_check_epsilon <= 0.0:
            raise ValueError("sum_check_epsilon must be finite and > 0")
        if self.tie_break not in TIE_BREAK_POLICIES:
            raise ValueError("tie_break must be one of: " + ", ".join(TIE_BREAK_POLICIES))
        if self.backend not in BACKEND_NAMES:
            raise ValueError("backend must be one of: " + ", ".join(BACKEND_NAMES))
        if self.poly_stencil not in POLY_STENCILS:
            raise ValueError("poly_stencil must be one of: " + ", ".join(POLY_STENCILS))
        for axis in self.log_pressure_axes:
            if int(axis) != axis or axis < 0:
                raise ValueError("log_pressure_axes must contain non-negative integers")
        if len(set(self.log_pressure_axes)) != len(self.log_pressure_axes):
            raise ValueError("log_pressure_axes must not contain duplicates")
