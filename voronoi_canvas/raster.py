from __future__ import annotations

import math

import numpy as np
from PIL import Image


class Raster:
    """width x height RGBA pixel buffer; alpha 0 marks an unset pixel."""

    def __init__(self, width: int, height: int) -> None:
        self.width = int(width)
        self.height = int(height)
        rows = max(self.height, 0)
        cols = max(self.width, 0)
        self.rgba = np.zeros((rows, cols, 4), dtype=np.uint8)

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    @property
    def diagonal(self) -> float:
        if self.is_empty:
            return 0.0
        return math.sqrt(self.width * self.width + self.height * self.height)

    def pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        return tuple(int(v) for v in self.rgba[y, x])

    def write(self, mask: np.ndarray, colors: np.ndarray) -> None:
        """Write opaque ``colors`` (N, 3) into the pixels selected by ``mask``."""
        self.rgba[mask, :3] = colors
        self.rgba[mask, 3] = 255

    def to_image(self) -> Image.Image:
        if self.is_empty:
            return Image.new("RGBA", (max(self.width, 0), max(self.height, 0)))
        return Image.fromarray(self.rgba)


def new_resolved_set(raster: Raster) -> np.ndarray:
    return np.zeros(raster.rgba.shape[:2], dtype=bool)
