from __future__ import annotations

import math
from typing import Callable, Optional, Sequence

import numpy as np

from .seeds import Seed, seed_coordinates

NO_SEED = -1

ClosestSeedFn = Callable[[int, int], Optional[int]]


def closest_seed(x: float, y: float, seeds: Sequence[Seed]) -> int | None:
    """
    Index of the seed nearest to (x, y), or None for an empty seed set.

    Strict ``<`` keeps the first (lowest index) seed on exact distance ties.
    """
    best = None
    best_dist = math.inf
    for i, seed in enumerate(seeds):
        dx = x - seed.x
        dy = y - seed.y
        dist = math.sqrt(dx * dx + dy * dy)
        if dist < best_dist:
            best_dist = dist
            best = i
    return best


def nearest_seed_field(
    width: int,
    height: int,
    seeds: Sequence[Seed],
) -> tuple[np.ndarray, np.ndarray]:
    """
    Nearest-seed assignment for every pixel:
    label[p] = argmin_i dist(p, seed_i)

    Returns (labels, distances); with no seeds every pixel keeps NO_SEED and +inf.
    """
    width = max(int(width), 0)
    height = max(int(height), 0)
    best_dist = np.full((height, width), np.inf, dtype=np.float64)
    best_idx = np.full((height, width), NO_SEED, dtype=np.int32)
    if width == 0 or height == 0 or not seeds:
        return best_idx, best_dist

    py, px = np.indices((height, width), dtype=np.float64)
    for i, (sx, sy) in enumerate(seed_coordinates(seeds)):
        dx = px - sx
        dy = py - sy
        dist = np.sqrt(dx * dx + dy * dy)
        # strict < so later equal-distance seeds never win
        win = dist < best_dist
        if np.any(win):
            best_dist[win] = dist[win]
            best_idx[win] = i
    return best_idx, best_dist


def labels_lookup(labels: np.ndarray) -> ClosestSeedFn:
    """Wrap a precomputed label array as a closest-seed callback."""
    height, width = labels.shape

    def _lookup(x: int, y: int) -> int | None:
        if not (0 <= x < width and 0 <= y < height):
            return None
        label = int(labels[y, x])
        return None if label == NO_SEED else label

    return _lookup
