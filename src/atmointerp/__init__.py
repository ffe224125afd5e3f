"""Grid positions and multilinear/polynomial interpolation on rectilinear grids."""

from . import constants
from .checks import chk_interpolation_grids, is_decreasing, is_increasing
from .config import InterpConfig
from .errors import (
    DimensionMismatchError,
    InterpolationError,
    InvalidWeightsError,
    MalformedGridError,
    OutOfRangeError,
    SingularStencilError,
)
from .gridpos import (
    ArrayOfGridPos,
    GridPos,
    fractional_gp,
    gridpos,
    gridpos2gridrange,
    gridpos_check_fd,
    gridpos_extpol,
    gridpos_force_end_fd,
    is_gridpos_at_index_i,
    p2gridpos,
)
from .interpolation_api import GridInterpolator
from .polynomial import interp_poly, interp_poly_with_error, polint
from .sampler import interp, interp_blue, interp_green, interp_red
from .weights import corner_offsets, interpweights, interpweights_blue, interpweights_green, interpweights_red

__all__ = [
    "constants",
    "ArrayOfGridPos",
    "GridPos",
    "GridInterpolator",
    "InterpConfig",
    "InterpolationError",
    "MalformedGridError",
    "OutOfRangeError",
    "DimensionMismatchError",
    "InvalidWeightsError",
    "SingularStencilError",
    "chk_interpolation_grids",
    "is_increasing",
    "is_decreasing",
    "gridpos",
    "gridpos_extpol",
    "p2gridpos",
    "fractional_gp",
    "gridpos_check_fd",
    "gridpos_force_end_fd",
    "gridpos2gridrange",
    "is_gridpos_at_index_i",
    "corner_offsets",
    "interpweights",
    "interpweights_red",
    "interpweights_blue",
    "interpweights_green",
    "interp",
    "interp_red",
    "interp_blue",
    "interp_green",
    "polint",
    "interp_poly",
    "interp_poly_with_error",
]
