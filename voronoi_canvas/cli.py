from __future__ import annotations

import argparse
import json
import logging
import random
import sys
from pathlib import Path
from typing import Any, List

import structlog
from PIL import Image

from .colors import random_color
from .config import BACKGROUND_COLOR, DEFAULT_SPEED, FULL_BOUNDARY_STEP, H, W, VoronoiConfig
from .logging_config import setup_logging
from .seeds import Seed
from .session import VoronoiSession

logger = structlog.get_logger(__name__)

GIF_FRAME_MS = 40


def _load_seeds(path: Path, rng: random.Random) -> List[Seed]:
    """Read seeds from JSON: a list of [x, y] pairs or {"x", "y", "color"} objects."""
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        payload = payload.get("seeds", [])
    seeds = []
    for raw in payload:
        if isinstance(raw, dict):
            color: Any = raw.get("color") or random_color(rng)
            seeds.append(Seed(float(raw["x"]), float(raw["y"]), color))
        else:
            seeds.append(Seed(float(raw[0]), float(raw[1]), random_color(rng)))
    return seeds


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Render a pixel Voronoi diagram")
    parser.add_argument("--width", type=int, default=W)
    parser.add_argument("--height", type=int, default=H)
    parser.add_argument("--points", type=int, default=None, help="Random seed count (default 15-34)")
    parser.add_argument("--seeds-json", type=str, default=None, help="JSON file with seed positions")
    parser.add_argument("--seed", type=int, default=None, help="RNG seed for points and colors")
    parser.add_argument("--background", type=str, default=BACKGROUND_COLOR)
    parser.add_argument("--boundary-step", type=int, default=FULL_BOUNDARY_STEP)
    parser.add_argument("--animated", action="store_true", help="Expand regions frame by frame")
    parser.add_argument("--speed", type=float, default=DEFAULT_SPEED, help="Radius advance per frame (1-100)")
    parser.add_argument("--gif", type=str, default=None, help="Write animation frames to this GIF")
    parser.add_argument("--out", type=str, default="voronoi.png")
    parser.add_argument("--log-level", type=str, default="INFO")
    parser.add_argument("--json-logs", action="store_true")
    args = parser.parse_args(argv)
    if args.gif and not args.animated:
        parser.error("--gif requires --animated")
    if args.width <= 0 or args.height <= 0:
        parser.error("--width and --height must be positive")
    if args.boundary_step <= 0:
        parser.error("--boundary-step must be positive")
    return args


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    setup_logging(getattr(logging, args.log_level.upper(), logging.INFO), json_output=args.json_logs)

    rng = random.Random(args.seed)
    config = VoronoiConfig(
        width=args.width,
        height=args.height,
        background_color=args.background,
        animated=args.animated,
        animation_speed=args.speed,
        full_boundary_step=args.boundary_step,
    )
    session = VoronoiSession(config)
    if args.seeds_json:
        seeds_path = Path(args.seeds_json)
        if not seeds_path.exists():
            raise SystemExit(f"File not found: {seeds_path}")
        session.set_points(_load_seeds(seeds_path, rng))
    else:
        session.generate_random_points(args.points, rng=rng)

    frames: list[Image.Image] = []
    if args.gif:
        session.on_redraw = lambda s: frames.append(s.surface.to_image().convert("RGB"))

    if not session.generate():
        print("No points to render.")
        return 1

    out_path = Path(args.out)
    session.surface.save(out_path)
    logger.info("wrote_image", path=str(out_path), points=len(session.points))
    print(f"Wrote: {out_path}")

    if args.gif and frames:
        gif_path = Path(args.gif)
        gif_path.parent.mkdir(parents=True, exist_ok=True)
        frames[0].save(
            gif_path,
            save_all=True,
            append_images=frames[1:],
            duration=GIF_FRAME_MS,
            loop=0,
            optimize=True,
        )
        logger.info("wrote_animation", path=str(gif_path), frames=len(frames))
        print(f"Wrote: {gif_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
