from __future__ import annotations

import colorsys
import math
import random
import re
from dataclasses import dataclass
from typing import Union

import structlog

logger = structlog.get_logger(__name__)

SEED_SATURATION = 70.0
SEED_LIGHTNESS = 60.0

RGB = tuple[int, int, int]
BLACK: RGB = (0, 0, 0)

_HSL_RE = re.compile(
    r"^\s*hsl\(\s*([-+]?\d*\.?\d+)\s*,\s*([-+]?\d*\.?\d+)%\s*,\s*([-+]?\d*\.?\d+)%\s*\)\s*$",
    re.IGNORECASE,
)
_HEX_RE = re.compile(r"^\s*#([0-9a-f]{3}|[0-9a-f]{6})\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class HslColor:
    """Seed color: hue in degrees, saturation and lightness in percent."""

    hue: float
    saturation: float = SEED_SATURATION
    lightness: float = SEED_LIGHTNESS

    @property
    def css(self) -> str:
        return f"hsl({self.hue:g}, {self.saturation:g}%, {self.lightness:g}%)"

    def __str__(self) -> str:
        return self.css


ColorToken = Union[HslColor, str]


def random_color(rng: random.Random | None = None) -> HslColor:
    rng = rng or random
    return HslColor(hue=rng.random() * 360.0)


def _channel(value: float) -> int:
    # Half-up rounding, not banker's rounding, so x.5 always goes up.
    return max(0, min(255, int(math.floor(value * 255.0 + 0.5))))


def hsl_to_rgb(hue: float, saturation: float, lightness: float) -> RGB:
    """Convert hue (degrees) and saturation/lightness (percent) to 0-255 channels."""
    h = hue / 360.0
    s = saturation / 100.0
    l = lightness / 100.0
    # colorsys wraps the hue fraction into [0, 1) and handles s == 0 as gray.
    r, g, b = colorsys.hls_to_rgb(h, l, s)
    return _channel(r), _channel(g), _channel(b)


def hex_to_rgb(color: str) -> RGB:
    color = color.strip().lstrip("#")
    if len(color) == 3:
        color = "".join(ch * 2 for ch in color)
    return tuple(int(color[i : i + 2], 16) for i in (0, 2, 4))


def parse_color(text: str) -> HslColor | RGB | None:
    """Parse an ``hsl(h, s%, l%)`` or ``#rrggbb`` string; None when unparseable."""
    match = _HSL_RE.match(text)
    if match:
        hue, sat, light = (float(v) for v in match.groups())
        return HslColor(hue=hue, saturation=sat, lightness=light)
    if _HEX_RE.match(text):
        return hex_to_rgb(text)
    return None


def to_rgb(token: ColorToken) -> RGB:
    """Resolve a color token to an RGB triple; malformed tokens give black."""
    if isinstance(token, str):
        parsed = parse_color(token)
        if parsed is None:
            logger.debug("unparseable_color", token=token)
            return BLACK
        if not isinstance(parsed, HslColor):
            return parsed
        token = parsed
    if not isinstance(token, HslColor):
        logger.debug("unparseable_color", token=repr(token))
        return BLACK
    values = (token.hue, token.saturation, token.lightness)
    if not all(isinstance(v, (int, float)) and math.isfinite(v) for v in values):
        logger.debug("unparseable_color", token=repr(token))
        return BLACK
    return hsl_to_rgb(*values)
