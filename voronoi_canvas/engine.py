from __future__ import annotations

from collections import deque
from typing import Any, Callable, Optional, Sequence

import numpy as np
import structlog

from .colors import to_rgb
from .nearest import NO_SEED, labels_lookup, nearest_seed_field
from .raster import Raster, new_resolved_set
from .seeds import Seed, snapshot

logger = structlog.get_logger(__name__)


def _seed_palette(seeds: Sequence[Seed]) -> np.ndarray:
    return np.array([to_rgb(seed.color) for seed in seeds], dtype=np.uint8).reshape(-1, 3)


def fill_instant(raster: Raster, seeds: Sequence[Seed]) -> int:
    """Color every pixel by its nearest seed in one pass; returns pixels written."""
    if raster.is_empty:
        logger.debug("fill_skipped", reason="empty_raster", width=raster.width, height=raster.height)
        return 0
    if not seeds:
        logger.debug("fill_skipped", reason="no_seeds")
        return 0
    labels, _ = nearest_seed_field(raster.width, raster.height, seeds)
    return fill_from_labels(raster, seeds, labels)


def fill_from_labels(raster: Raster, seeds: Sequence[Seed], labels: np.ndarray) -> int:
    """Color pixels from an already computed label field; returns pixels written."""
    if raster.is_empty or not seeds:
        return 0
    palette = _seed_palette(seeds)
    mask = labels != NO_SEED
    raster.write(mask, palette[labels[mask]])
    return int(mask.sum())


class GenerationRun:
    """
    One animated generation: radius expands by ``speed`` per step and every
    unresolved pixel whose nearest seed lies within the radius gets colored.

    The run owns its raster, resolved mask and nearest-seed field; nothing is
    shared with other runs. ``step`` is safe to drive by hand in tests.
    """

    def __init__(self, raster: Raster, seeds: Sequence[Seed], speed: float) -> None:
        if not speed > 0:
            raise ValueError(f"animation speed must be positive, got {speed}")
        self.raster = raster
        self.seeds = snapshot(seeds)
        self.speed = float(speed)
        self.radius = 0.0
        self.frame_count = 0
        self.max_radius = raster.diagonal
        self.resolved = new_resolved_set(raster)
        self.done = False
        self.cancelled = False
        self._labels: np.ndarray | None = None
        self._distances: np.ndarray | None = None
        self._lookup = None
        self._palette = _seed_palette(self.seeds)

    def _ensure_field(self) -> None:
        if self._labels is None:
            self._labels, self._distances = nearest_seed_field(
                self.raster.width, self.raster.height, self.seeds
            )
            self._lookup = labels_lookup(self._labels)

    @property
    def labels(self) -> np.ndarray:
        self._ensure_field()
        return self._labels

    @property
    def distances(self) -> np.ndarray:
        self._ensure_field()
        return self._distances

    @property
    def resolved_count(self) -> int:
        return int(self.resolved.sum())

    def closest_seed_at(self, x: int, y: int) -> int | None:
        self._ensure_field()
        return self._lookup(x, y)

    def step(self) -> int:
        """Advance one frame; returns the number of pixels resolved by it."""
        if self.done:
            return 0
        self.frame_count += 1
        self.radius += self.speed
        if not self.seeds or self.raster.is_empty:
            self.done = True
            return 0

        reached = ~self.resolved & (self.distances <= self.radius)
        if self.radius >= self.max_radius:
            # Seeds outside the raster can sit farther than the diagonal.
            reached = ~self.resolved & (self.labels != NO_SEED)
            self.done = True
        if np.any(reached):
            self.raster.write(reached, self._palette[self.labels[reached]])
            self.resolved |= reached
        return int(reached.sum())

    def run_to_completion(self) -> None:
        while not self.done:
            self.step()


class ManualFrameScheduler:
    """Frame scheduler stepped explicitly by the caller (tests, batch export)."""

    def __init__(self) -> None:
        self._pending: deque[tuple[int, Callable[[], None]]] = deque()
        self._next_id = 1

    def request_frame(self, callback: Callable[[], None]) -> int:
        handle = self._next_id
        self._next_id += 1
        self._pending.append((handle, callback))
        return handle

    def cancel_frame(self, handle: int) -> None:
        self._pending = deque(item for item in self._pending if item[0] != handle)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def run_next(self) -> bool:
        if not self._pending:
            return False
        _handle, callback = self._pending.popleft()
        callback()
        return True

    def run_until_idle(self, max_frames: int | None = None) -> int:
        frames = 0
        while self._pending and (max_frames is None or frames < max_frames):
            self.run_next()
            frames += 1
        return frames


class TimerFrameScheduler:
    """Schedules frames on a matplotlib canvas timer (single-shot per frame)."""

    def __init__(self, canvas: Any, interval_ms: int = 16) -> None:
        self._canvas = canvas
        self._interval = interval_ms
        self._timers: dict[int, Any] = {}
        self._next_id = 1

    def request_frame(self, callback: Callable[[], None]) -> int:
        handle = self._next_id
        self._next_id += 1
        timer = self._canvas.new_timer(interval=self._interval)
        timer.single_shot = True

        def _fire() -> None:
            self._timers.pop(handle, None)
            callback()

        timer.add_callback(_fire)
        self._timers[handle] = timer
        timer.start()
        return handle

    def cancel_frame(self, handle: int) -> None:
        timer = self._timers.pop(handle, None)
        if timer is not None:
            timer.stop()


class CancelHandle:
    def __init__(self, run: GenerationRun, scheduler: Any) -> None:
        self._run = run
        self._scheduler = scheduler
        self.frame_handle: Optional[int] = None
        self.completed = False

    def __call__(self) -> None:
        # a finished run has nothing left to stop
        if self._run.cancelled or self.completed:
            return
        self._run.cancelled = True
        if self.frame_handle is not None:
            self._scheduler.cancel_frame(self.frame_handle)
            self.frame_handle = None
        logger.info("generation_cancelled", frame=self._run.frame_count, radius=self._run.radius)

    @property
    def cancelled(self) -> bool:
        return self._run.cancelled

    @property
    def run(self) -> GenerationRun:
        return self._run


FrameCallback = Callable[[GenerationRun], None]


def fill_animated(
    raster: Raster,
    seeds: Sequence[Seed],
    speed: float,
    on_frame: FrameCallback | None,
    on_complete: FrameCallback | None,
    scheduler: Any,
) -> CancelHandle:
    """
    Start an animated fill driven by ``scheduler``; returns the cancel handle.

    Every scheduled frame runs ``GenerationRun.step`` then ``on_frame``; the
    frame that reaches the raster diagonal calls ``on_complete`` once instead
    of scheduling another frame.
    """
    run = GenerationRun(raster, seeds, speed)
    cancel = CancelHandle(run, scheduler)
    logger.info(
        "generation_started",
        seeds=len(run.seeds),
        width=raster.width,
        height=raster.height,
        speed=run.speed,
    )

    def _frame() -> None:
        cancel.frame_handle = None
        run.step()
        if run.cancelled:
            return
        if on_frame is not None:
            on_frame(run)
        if run.cancelled:
            return
        if run.done:
            cancel.completed = True
            logger.info("generation_finished", frames=run.frame_count, resolved=run.resolved_count)
            if on_complete is not None:
                on_complete(run)
            return
        cancel.frame_handle = scheduler.request_frame(_frame)

    cancel.frame_handle = scheduler.request_frame(_frame)
    return cancel
