from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Iterable, Sequence

import numpy as np

from .colors import ColorToken, random_color


@dataclass(frozen=True)
class Seed:
    x: float
    y: float
    color: ColorToken = field(default_factory=random_color)


def random_seeds(
    count: int,
    width: int,
    height: int,
    *,
    rng: random.Random | None = None,
) -> list[Seed]:
    """Scatter ``count`` seeds uniformly over a width x height raster."""
    rng = rng or random.Random()
    seeds = []
    for _ in range(max(count, 0)):
        x = rng.random() * width
        y = rng.random() * height
        seeds.append(Seed(x, y, random_color(rng)))
    return seeds


def snapshot(seeds: Iterable[Seed]) -> tuple[Seed, ...]:
    return tuple(seeds)


def seed_coordinates(seeds: Sequence[Seed]) -> np.ndarray:
    """Return an (N, 2) float64 array of seed x, y."""
    if not seeds:
        return np.zeros((0, 2), dtype=np.float64)
    return np.array([(s.x, s.y) for s in seeds], dtype=np.float64)
