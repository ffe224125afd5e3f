"""Error taxonomy of the interpolation engine.

All errors derive from :class:`InterpolationError`, itself a ``ValueError``,
so callers that only care about "bad input" can catch a single type.
"""

from __future__ import annotations


class InterpolationError(ValueError):
    """Base class for precondition violations detected by the engine."""


class MalformedGridError(InterpolationError):
    """A reference grid is too short or not strictly monotonic."""


class OutOfRangeError(InterpolationError):
    """A query value lies outside the allowed extrapolation envelope."""


class DimensionMismatchError(InterpolationError):
    """Weights, field, grid positions or output have inconsistent shapes."""


class InvalidWeightsError(InterpolationError):
    """Interpolation weights do not sum to one."""


class SingularStencilError(InterpolationError, ZeroDivisionError):
    """Two abscissas of a polynomial stencil coincide."""
