from __future__ import annotations

from dataclasses import dataclass, replace

W, H = 800, 600
BACKGROUND_COLOR = "#f8f9fa"

# Animation speed is the search-radius advance per frame, in pixels.
DEFAULT_SPEED = 15.0
MIN_SPEED = 1.0
MAX_SPEED = 100.0

# Boundary sampling: the final pass is finer than the in-flight pass.
FULL_BOUNDARY_STEP = 2
PARTIAL_BOUNDARY_STEP = 4
PARTIAL_BOUNDARY_EVERY = 3

FULL_BOUNDARY_COLOR = (255, 255, 255, 128)
FULL_BOUNDARY_WIDTH = 2
PARTIAL_BOUNDARY_COLOR = (255, 255, 255, 77)
PARTIAL_BOUNDARY_WIDTH = 1

MARKER_RADIUS = 6
MARKER_OUTLINE = (255, 255, 255, 255)
MARKER_OUTLINE_WIDTH = 2

RANDOM_POINTS_MIN = 15
RANDOM_POINTS_SPREAD = 20

FRAME_INTERVAL_MS = 16


def clamp_speed(speed: float) -> float:
    return max(MIN_SPEED, min(MAX_SPEED, float(speed)))


@dataclass(frozen=True)
class VoronoiConfig:
    width: int = W
    height: int = H
    background_color: str = BACKGROUND_COLOR
    animated: bool = False
    animation_speed: float = DEFAULT_SPEED
    full_boundary_step: int = FULL_BOUNDARY_STEP
    partial_boundary_step: int = PARTIAL_BOUNDARY_STEP
    partial_boundary_every: int = PARTIAL_BOUNDARY_EVERY

    def validated(self) -> "VoronoiConfig":
        """Return a copy with speed clamped; reject steps that cannot advance."""
        for name in ("full_boundary_step", "partial_boundary_step", "partial_boundary_every"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")
        return replace(self, animation_speed=clamp_speed(self.animation_speed))
