"""Backend factory for locate/sample/polint kernels."""

from __future__ import annotations

import logging

from .cython_backend import build_cython_backend
from .jax_backend import build_jax_backend
from .numba_backend import build_numba_backend
from .numpy_backend import build_numpy_backend
from ..config import InterpConfig

logger = logging.getLogger(__name__)

_BUILDERS = {
    "numpy": build_numpy_backend,
    "cython": build_cython_backend,
    "numba": build_numba_backend,
    "jax": build_jax_backend,
}

# Preference order of "auto".
_AUTO_ORDER = ("cython", "numba", "jax")


def build_backend(name: str | None = None, cfg: InterpConfig | None = None):
    """Return a backend by name, or the one named in ``cfg``.

    ``"auto"`` picks the first accelerated backend that can be built and
    falls back to NumPy.
    """
    if name is None:
        name = cfg.backend if cfg is not None else "numpy"
    if name in _BUILDERS:
        return _BUILDERS[name]()
    if name == "auto":
        for candidate in _AUTO_ORDER:
            try:
                backend = _BUILDERS[candidate]()
            except RuntimeError as exc:
                logger.debug("backend %s not available: %s", candidate, exc)
                continue
            logger.debug("auto backend selected: %s", candidate)
            return backend
        logger.debug("auto backend selected: numpy")
        return build_numpy_backend()
    raise ValueError(f"Unknown backend: {name}")


def available_backends() -> list[str]:
    """Names of the backends that can be built in this environment."""
    names = []
    for name, builder in _BUILDERS.items():
        try:
            builder()
        except RuntimeError:
            continue
        names.append(name)
    return names
