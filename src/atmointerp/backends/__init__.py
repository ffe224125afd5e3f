"""Interchangeable kernels for the locator, sampler and Neville's algorithm."""

from .base import InterpolationBackend
from .factory import available_backends, build_backend

__all__ = ["InterpolationBackend", "available_backends", "build_backend"]
