"""Self-consistency checks of the interpolation kernels and backends."""

from __future__ import annotations

import argparse
from dataclasses import dataclass, field
import json
import logging
from typing import Dict, Sequence

import numpy as np

from .backends import available_backends, build_backend
from .gridpos import gridpos_extpol
from .sampler import interp
from .weights import interpweights_blue, interpweights_green, weight_sums

logger = logging.getLogger(__name__)


@dataclass
class BackendValidationResult:
    ranks: list
    n_points: int
    max_weight_sum_dev: float
    max_roundtrip_err: float
    backend_max_abs_diff: Dict[str, float] = field(default_factory=dict)


def _random_grid(rng: np.random.Generator, n: int) -> np.ndarray:
    steps = rng.uniform(0.5, 1.5, size=n - 1)
    grid = np.concatenate([[0.0], np.cumsum(steps)])
    if rng.random() < 0.5:
        grid = grid[::-1].copy()
    return grid


def _random_queries(rng: np.random.Generator, grid: np.ndarray, n: int) -> np.ndarray:
    return rng.uniform(min(grid[0], grid[-1]), max(grid[0], grid[-1]), size=n)


def validate_backends(
    *,
    ranks: Sequence[int] = (1, 2, 3, 4),
    points: int = 64,
    seed: int = 0,
    backends: Sequence[str] | None = None,
    grid_points: int = 5,
) -> BackendValidationResult:
    """Compare every backend against the NumPy reference on random fields.

    For each rank the weight sums and the reproduction of the field at its own
    grid points are checked on the NumPy path, then blue and green queries
    are sampled with every requested backend.
    """
    if points < 1:
        raise ValueError("points must be >= 1")
    if grid_points < 2:
        raise ValueError("grid_points must be >= 2")
    if backends is None:
        backends = available_backends()
    rng = np.random.default_rng(seed)
    reference = build_backend("numpy")
    others = {name: build_backend(name) for name in backends if name != "numpy"}

    max_sum_dev = 0.0
    max_roundtrip = 0.0
    diffs = {name: 0.0 for name in others}
    for rank in ranks:
        if rank < 1:
            raise ValueError("ranks must be >= 1")
        grids = [_random_grid(rng, grid_points) for _ in range(rank)]
        data = rng.normal(size=(grid_points,) * rank)

        agps = [gridpos_extpol(g, g) for g in grids]
        itw = interpweights_green(*agps)
        max_sum_dev = max(max_sum_dev, float(np.max(np.abs(weight_sums(itw) - 1.0))))
        max_roundtrip = max(max_roundtrip, float(np.max(np.abs(interp(itw, data, *agps) - data))))

        coords = [_random_queries(rng, g, points) for g in grids]
        blue_gps = [reference.locate(g, c, 0.5) for g, c in zip(grids, coords)]
        blue_itw = interpweights_blue(*blue_gps)
        max_sum_dev = max(max_sum_dev, float(np.max(np.abs(weight_sums(blue_itw) - 1.0))))
        blue_ref = reference.sample(blue_itw, data, *blue_gps)

        new_grids = [np.sort(_random_queries(rng, g, 4)) for g in grids]
        green_gps = [reference.locate(g, ng, 0.5) for g, ng in zip(grids, new_grids)]
        green_itw = interpweights_green(*green_gps)
        green_ref = reference.sample(green_itw, data, *green_gps)

        for name, backend in others.items():
            b_gps = [backend.locate(g, c, 0.5) for g, c in zip(grids, coords)]
            blue = backend.sample(interpweights_blue(*b_gps), data, *b_gps)
            g_gps = [backend.locate(g, ng, 0.5) for g, ng in zip(grids, new_grids)]
            green = backend.sample(interpweights_green(*g_gps), data, *g_gps)
            diff = max(float(np.max(np.abs(blue - blue_ref))), float(np.max(np.abs(green - green_ref))))
            diffs[name] = max(diffs[name], diff)
        logger.info("rank %d checked (max weight-sum deviation so far %.3g)", rank, max_sum_dev)

    return BackendValidationResult(
        ranks=list(ranks),
        n_points=int(points),
        max_weight_sum_dev=max_sum_dev,
        max_roundtrip_err=max_roundtrip,
        backend_max_abs_diff=diffs,
    )


def main(argv: Sequence[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Check interpolation weights and compare backends against NumPy.")
    ap.add_argument("--ranks", type=int, nargs="+", default=[1, 2, 3, 4], help="Field ranks to test")
    ap.add_argument("--points", type=int, default=64, help="Random query points per rank")
    ap.add_argument("--seed", type=int, default=0)
    ap.add_argument(
        "--backend",
        action="append",
        default=None,
        help="Backend to compare (repeatable); default: every available backend",
    )
    ap.add_argument("--verbose", action="store_true")
    args = ap.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    res = validate_backends(ranks=args.ranks, points=args.points, seed=args.seed, backends=args.backend)
    print(json.dumps(res.__dict__, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
