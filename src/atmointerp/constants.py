"""Named numerical constants shared by the interpolation routines.

These replace magic numbers scattered throughout the locator, weight and
sampler code.
"""

# ---------------------------------------------------------------------------
# Tolerances
# ---------------------------------------------------------------------------
# Maximum allowed deviation from 1 of a sum of interpolation weights.
SUM_CHECK_EPSILON = 1.0e-6

# Fractional distances may deviate this much from [0, 1] through roundoff
# before they are treated as a real error.
FD_TOL = 1.0e-3

# ---------------------------------------------------------------------------
# Defaults
# ---------------------------------------------------------------------------
# Allowed extrapolation, in units of the first/last grid spacing.
DEFAULT_EXTPOLFAC = 0.5

MIN_LINEAR_GRID_POINTS = 2
MIN_POLY_GRID_POINTS = 3

TIE_BREAK_POLICIES = ("keep", "lower", "upper")
POLY_STENCILS = ("adaptive3", "fixed3", "cubic4")
BACKEND_NAMES = ("numpy", "numba", "jax", "cython", "auto")

# Reference ranks of the original engine: one to seven grid axes.
MAX_REFERENCE_RANK = 7
