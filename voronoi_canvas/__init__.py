"""Pixel Voronoi rendering: nearest-seed raster, boundary tracing, seed markers."""

from .boundaries import Segment, trace_full, trace_partial
from .colors import HslColor, random_color, to_rgb
from .config import VoronoiConfig, clamp_speed
from .engine import (
    CancelHandle,
    GenerationRun,
    ManualFrameScheduler,
    TimerFrameScheduler,
    fill_animated,
    fill_from_labels,
    fill_instant,
)
from .nearest import NO_SEED, closest_seed, nearest_seed_field
from .raster import Raster
from .seeds import Seed, random_seeds
from .session import VoronoiSession
from .surface import DiskCommand, Surface, marker_commands

__all__ = [
    "CancelHandle",
    "DiskCommand",
    "GenerationRun",
    "HslColor",
    "ManualFrameScheduler",
    "NO_SEED",
    "Raster",
    "Seed",
    "Segment",
    "Surface",
    "TimerFrameScheduler",
    "VoronoiConfig",
    "VoronoiSession",
    "clamp_speed",
    "closest_seed",
    "fill_animated",
    "fill_from_labels",
    "fill_instant",
    "marker_commands",
    "nearest_seed_field",
    "random_color",
    "random_seeds",
    "to_rgb",
    "trace_full",
    "trace_partial",
]
