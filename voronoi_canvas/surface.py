from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from PIL import Image, ImageColor, ImageDraw

from .boundaries import Segment
from .colors import to_rgb
from .config import (
    BACKGROUND_COLOR,
    FULL_BOUNDARY_COLOR,
    FULL_BOUNDARY_WIDTH,
    MARKER_OUTLINE,
    MARKER_OUTLINE_WIDTH,
    MARKER_RADIUS,
)
from .raster import Raster
from .seeds import Seed

RGBA = tuple[int, int, int, int]


@dataclass(frozen=True)
class DiskCommand:
    cx: float
    cy: float
    radius: float
    fill: RGBA
    outline: RGBA
    outline_width: int

    @property
    def bbox(self) -> tuple[float, float, float, float]:
        # Pillow draws the outline inside the box; centre it on the radius instead
        extent = self.radius + self.outline_width / 2
        return (self.cx - extent, self.cy - extent, self.cx + extent, self.cy + extent)


def marker_commands(seeds: Sequence[Seed]) -> list[DiskCommand]:
    """One outlined disk per seed, in seed order."""
    commands = []
    for seed in seeds:
        r, g, b = to_rgb(seed.color)
        commands.append(
            DiskCommand(
                cx=seed.x,
                cy=seed.y,
                radius=MARKER_RADIUS,
                fill=(r, g, b, 255),
                outline=MARKER_OUTLINE,
                outline_width=MARKER_OUTLINE_WIDTH,
            )
        )
    return commands


class Surface:
    """Presented RGBA surface: background, blitted raster, strokes, markers."""

    def __init__(self, width: int, height: int, background: str = BACKGROUND_COLOR) -> None:
        self.width = max(int(width), 0)
        self.height = max(int(height), 0)
        self.background = ImageColor.getrgb(background)[:3] + (255,)
        self.image = Image.new("RGBA", (self.width, self.height), self.background)

    def clear(self) -> None:
        self.image = Image.new("RGBA", (self.width, self.height), self.background)

    def blit(self, raster: Raster) -> None:
        """Composite the raster over the current contents; unset pixels show through."""
        if raster.is_empty or self.width == 0 or self.height == 0:
            return
        layer = raster.to_image()
        if layer.size != self.image.size:
            layer = layer.crop((0, 0, self.width, self.height))
        self.image = Image.alpha_composite(self.image, layer)

    def stroke_segments(
        self,
        segments: Iterable[Segment],
        color: RGBA = FULL_BOUNDARY_COLOR,
        width: int = FULL_BOUNDARY_WIDTH,
    ) -> int:
        overlay = Image.new("RGBA", self.image.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay)
        count = 0
        for seg in segments:
            draw.line((seg.x0, seg.y0, seg.x1, seg.y1), fill=color, width=width)
            count += 1
        if count:
            self.image = Image.alpha_composite(self.image, overlay)
        return count

    def draw_markers(self, seeds: Sequence[Seed]) -> None:
        draw = ImageDraw.Draw(self.image)
        for cmd in marker_commands(seeds):
            draw.ellipse(cmd.bbox, fill=cmd.fill, outline=cmd.outline, width=cmd.outline_width)

    def to_image(self) -> Image.Image:
        return self.image.copy()

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        self.image.convert("RGB").save(path, optimize=True)
