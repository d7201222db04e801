from __future__ import annotations

from typing import NamedTuple

import numpy as np

from .nearest import NO_SEED, ClosestSeedFn


class Segment(NamedTuple):
    x0: int
    y0: int
    x1: int
    y1: int


def _sample_axes(width: int, height: int, step: int) -> tuple[np.ndarray, np.ndarray]:
    if step <= 0:
        raise ValueError(f"boundary step must be positive, got {step}")
    return np.arange(0, max(width, 0), step), np.arange(0, max(height, 0), step)


def _sample_labels(
    xs: np.ndarray,
    ys: np.ndarray,
    closest_seed_fn: ClosestSeedFn,
    sampled: np.ndarray | None = None,
) -> np.ndarray:
    """Evaluate ``closest_seed_fn`` once per grid point (only where ``sampled``)."""
    grid = np.full((len(ys), len(xs)), NO_SEED, dtype=np.int64)
    for j, y in enumerate(ys):
        for i, x in enumerate(xs):
            if sampled is not None and not sampled[j, i]:
                continue
            label = closest_seed_fn(int(x), int(y))
            grid[j, i] = NO_SEED if label is None else label
    return grid


def _emit(
    xs: np.ndarray,
    ys: np.ndarray,
    step: int,
    vertical: np.ndarray,
    horizontal: np.ndarray,
) -> list[Segment]:
    segments = []
    rows, cols = np.nonzero(vertical | horizontal)
    for j, i in zip(rows, cols):
        x = int(xs[i])
        y = int(ys[j])
        if vertical[j, i]:
            segments.append(Segment(x + step, y, x + step, y + step))
        if horizontal[j, i]:
            segments.append(Segment(x, y + step, x + step, y + step))
    return segments


def _scan_extent(xs: np.ndarray, ys: np.ndarray, width: int, height: int, step: int) -> tuple[int, int]:
    # Samples with x < width - step and y < height - step; their right and
    # bottom neighbours are the next grid points.
    nx = int(np.count_nonzero(xs < width - step))
    ny = int(np.count_nonzero(ys < height - step))
    return nx, ny


def trace_full(
    width: int,
    height: int,
    closest_seed_fn: ClosestSeedFn,
    step: int = 2,
) -> list[Segment]:
    """
    Boundary segments between differently owned samples on a ``step`` grid.

    For each sample (x, y) the right neighbour (x + step, y) and the bottom
    neighbour (x, y + step) are compared; a mismatch emits the shared edge of
    the step x step cell, vertical for the right pair and horizontal for the
    bottom pair. Segments come out row-major, vertical before horizontal.
    """
    xs, ys = _sample_axes(width, height, step)
    nx, ny = _scan_extent(xs, ys, width, height, step)
    if nx == 0 or ny == 0:
        return []
    grid = _sample_labels(xs[: nx + 1], ys[: ny + 1], closest_seed_fn)
    current = grid[:ny, :nx]
    vertical = current != grid[:ny, 1 : nx + 1]
    horizontal = current != grid[1 : ny + 1, :nx]
    return _emit(xs, ys, step, vertical, horizontal)


def trace_partial(
    width: int,
    height: int,
    resolved: np.ndarray,
    closest_seed_fn: ClosestSeedFn,
    step: int = 4,
) -> list[Segment]:
    """
    Like ``trace_full`` but only for sample pairs whose pixels are both resolved.

    Only right and bottom neighbours are compared, so the left and top edges
    of a freshly resolved region can lag until a later pass.
    """
    xs, ys = _sample_axes(width, height, step)
    nx, ny = _scan_extent(xs, ys, width, height, step)
    if nx == 0 or ny == 0:
        return []
    xs_scan = xs[: nx + 1]
    ys_scan = ys[: ny + 1]
    done = resolved[np.ix_(ys_scan, xs_scan)]
    grid = _sample_labels(xs_scan, ys_scan, closest_seed_fn, sampled=done)
    current = grid[:ny, :nx]
    here = done[:ny, :nx]
    vertical = here & done[:ny, 1 : nx + 1] & (current != grid[:ny, 1 : nx + 1])
    horizontal = here & done[1 : ny + 1, :nx] & (current != grid[1 : ny + 1, :nx])
    return _emit(xs, ys, step, vertical, horizontal)
