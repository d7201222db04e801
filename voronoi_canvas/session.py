from __future__ import annotations

import random
from dataclasses import replace
from typing import Any, Callable, Iterable, List, Optional

import structlog

from .boundaries import trace_full, trace_partial
from .colors import random_color
from .config import (
    PARTIAL_BOUNDARY_COLOR,
    PARTIAL_BOUNDARY_WIDTH,
    RANDOM_POINTS_MIN,
    RANDOM_POINTS_SPREAD,
    VoronoiConfig,
    clamp_speed,
)
from .engine import CancelHandle, GenerationRun, ManualFrameScheduler, fill_animated, fill_from_labels
from .nearest import labels_lookup, nearest_seed_field
from .raster import Raster
from .seeds import Seed, random_seeds
from .surface import Surface

logger = structlog.get_logger(__name__)


class VoronoiSession:
    """Seeds, surface and the in-flight run for one drawing surface."""

    def __init__(self, config: VoronoiConfig | None = None) -> None:
        self.config = (config or VoronoiConfig()).validated()
        self.surface = Surface(self.config.width, self.config.height, self.config.background_color)
        self._points: List[Seed] = []
        self.is_animating = False
        self.run: Optional[GenerationRun] = None
        self._cancel: Optional[CancelHandle] = None
        self.on_redraw: Optional[Callable[["VoronoiSession"], None]] = None

    @property
    def points(self) -> list[Seed]:
        return list(self._points)

    @property
    def point_count_label(self) -> str:
        return f"Points: {len(self._points)}"

    @property
    def dimensions(self) -> tuple[int, int]:
        return self.config.width, self.config.height

    @property
    def animated(self) -> bool:
        return self.config.animated

    def set_animated(self, animated: bool) -> None:
        self.config = replace(self.config, animated=bool(animated))

    @property
    def animation_speed(self) -> float:
        return self.config.animation_speed

    def set_animation_speed(self, speed: float) -> None:
        self.config = replace(self.config, animation_speed=clamp_speed(speed))

    def add_point(self, x: float, y: float, rng: random.Random | None = None) -> bool:
        if self.is_animating:
            return False
        self._points.append(Seed(x, y, random_color(rng)))
        self._redraw()
        return True

    def set_points(self, seeds: Iterable[Seed]) -> bool:
        """Replace every point at once, keeping the seeds' own colors."""
        if self.is_animating:
            return False
        self._points = list(seeds)
        self._redraw()
        return True

    def generate_random_points(self, count: int | None = None, rng: random.Random | None = None) -> None:
        if self.is_animating:
            return
        rng = rng or random.Random()
        if count is None:
            count = RANDOM_POINTS_MIN + rng.randrange(RANDOM_POINTS_SPREAD)
        self._points = random_seeds(count, self.config.width, self.config.height, rng=rng)
        self._redraw()

    def clear(self) -> None:
        self.cancel()
        self._points = []
        self.surface.clear()
        self._notify()

    def cancel(self) -> None:
        if self._cancel is not None:
            self._cancel()
        self._cancel = None
        self.run = None
        self.is_animating = False

    def generate(self, scheduler: Any = None) -> bool:
        """
        Render the diagram for the current points.

        Instant mode draws raster, boundaries and markers synchronously.
        Animated mode needs a frame scheduler; the final boundaries and
        markers are drawn when the run completes.
        """
        if not self._points:
            logger.warning("generate_without_points")
            return False
        if self.is_animating:
            return False

        self.is_animating = True
        seeds = tuple(self._points)
        raster = Raster(self.config.width, self.config.height)

        if not self.config.animated:
            try:
                labels, _ = nearest_seed_field(raster.width, raster.height, seeds)
                fill_from_labels(raster, seeds, labels)
                self._present(raster, seeds, labels_lookup(labels))
            finally:
                self.is_animating = False
            return True

        # Without a host scheduler the run is drained synchronously.
        drain = ManualFrameScheduler() if scheduler is None else None
        scheduler = scheduler if scheduler is not None else drain
        self.surface.clear()

        def on_frame(run: GenerationRun) -> None:
            try:
                self.surface.clear()
                self.surface.blit(run.raster)
                if run.frame_count % self.config.partial_boundary_every == 0:
                    segments = trace_partial(
                        raster.width,
                        raster.height,
                        run.resolved,
                        run.closest_seed_at,
                        step=self.config.partial_boundary_step,
                    )
                    self.surface.stroke_segments(segments, PARTIAL_BOUNDARY_COLOR, PARTIAL_BOUNDARY_WIDTH)
                self.surface.draw_markers(run.seeds)
                self._notify()
            except Exception:
                self.cancel()
                raise

        def on_complete(run: GenerationRun) -> None:
            try:
                self._present(run.raster, run.seeds, run.closest_seed_at)
            finally:
                self.is_animating = False
                self._cancel = None

        try:
            self._cancel = fill_animated(
                raster,
                seeds,
                self.config.animation_speed,
                on_frame,
                on_complete,
                scheduler,
            )
            self.run = self._cancel.run
            if drain is not None:
                drain.run_until_idle()
        except Exception:
            self.cancel()
            raise
        return True

    def _present(self, raster: Raster, seeds, closest_seed_fn) -> None:
        self.surface.clear()
        self.surface.blit(raster)
        segments = trace_full(
            raster.width,
            raster.height,
            closest_seed_fn,
            step=self.config.full_boundary_step,
        )
        self.surface.stroke_segments(segments)
        self.surface.draw_markers(seeds)
        self._notify()

    def _redraw(self) -> None:
        self.surface.clear()
        self.surface.draw_markers(self._points)
        self._notify()

    def _notify(self) -> None:
        if self.on_redraw is not None:
            self.on_redraw(self)
