"""JAX-backed sampling with jit-compiled corner gathers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

from ..constants import SUM_CHECK_EPSILON
from ..errors import DimensionMismatchError
from ..gridpos import ArrayOfGridPos, gridpos_extpol
from ..polynomial import polint
from ..sampler import (
    check_blue_inputs,
    check_green_inputs,
    check_red_inputs,
    green_index_arrays,
    protocol_of,
    store_output,
)
from ..weights import corner_offsets

try:
    import jax
    from jax import config as jax_config
    import jax.numpy as jnp
except Exception as exc:  # pragma: no cover - optional dependency
    jax = None
    jax_config = None
    jnp = None
    _JAX_IMPORT_ERROR = exc
else:
    _JAX_IMPORT_ERROR = None
    # Match NumPy float64 behaviour of the reference backend.
    jax_config.update("jax_enable_x64", True)


if jax is not None:

    @jax.jit
    def _corner_sum(field: jnp.ndarray, itw: jnp.ndarray, indices: tuple) -> jnp.ndarray:
        values = field[indices]
        return jnp.sum(values * itw, axis=-1)


@dataclass
class JaxBackend:
    """Backend evaluating the weighted corner sums with JAX.

    The bracket scan is inherently sequential and stays on the NumPy path.
    """

    name: str = "jax"

    def locate(self, old_grid, new_grid, extpolfac: float, tie_break: str = "keep") -> ArrayOfGridPos:
        return gridpos_extpol(old_grid, new_grid, extpolfac, tie_break=tie_break)

    def polint(self, xa, ya, x: float):
        return polint(xa, ya, x)

    def sample(self, itw, field, *gps, out: Optional[np.ndarray] = None, check_weights: bool = True,
               sum_check_epsilon: float = SUM_CHECK_EPSILON):
        kind = protocol_of(itw, gps)
        if kind == "red":
            if out is not None:
                raise DimensionMismatchError("Red interpolation returns a scalar; no output container is used.")
            itw, field, idx = check_red_inputs(itw, field, gps, check_weights, sum_check_epsilon)
            corners = idx[None, :] + corner_offsets(idx.shape[0])
            indices = tuple(corners[:, k] for k in range(idx.shape[0]))
            return float(_corner_sum(jnp.asarray(field), jnp.asarray(itw), indices))
        if kind == "blue":
            itw, field, idx = check_blue_inputs(itw, field, gps, check_weights, sum_check_epsilon)
            n_dims = idx.shape[1]
            corners = idx[:, None, :] + corner_offsets(n_dims)[None, :, :]
            indices = tuple(corners[:, :, k] for k in range(n_dims))
        else:
            itw, field, idx = check_green_inputs(itw, field, gps, check_weights, sum_check_epsilon)
            indices = green_index_arrays(idx)
        result = np.asarray(_corner_sum(jnp.asarray(field), jnp.asarray(itw), indices))
        return store_output(result, out)


def build_jax_backend():
    if jax is None:
        raise RuntimeError(f"JAX backend unavailable: {_JAX_IMPORT_ERROR}") from _JAX_IMPORT_ERROR
    return JaxBackend()
