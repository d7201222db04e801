#!/usr/bin/env python3
import argparse
import logging

import matplotlib
import numpy as np


def _select_backend() -> str:
    candidates = [
        ("TkAgg", "tkinter"),
        ("QtAgg", "PyQt6"),
        ("Qt5Agg", "PyQt5"),
        ("MacOSX", None),
    ]
    for backend, module in candidates:
        try:
            if module:
                __import__(module)
            matplotlib.use(backend)
            return backend
        except Exception:
            continue
    raise RuntimeError(
        "No interactive matplotlib backend available. Install tkinter, PyQt6, "
        "or PyQt5 to use the Voronoi viewer."
    )


HELP = "click: add point | g: generate | r: random | c: clear | a: animated | +/-: speed"


def main() -> None:
    parser = argparse.ArgumentParser(description="Interactive Voronoi canvas")
    parser.add_argument("--width", type=int, default=None)
    parser.add_argument("--height", type=int, default=None)
    parser.add_argument("--animated", action="store_true")
    parser.add_argument("--speed", type=float, default=None)
    args = parser.parse_args()

    _select_backend()
    import matplotlib.pyplot as plt

    from .config import FRAME_INTERVAL_MS, VoronoiConfig
    from .engine import TimerFrameScheduler
    from .logging_config import setup_logging
    from .session import VoronoiSession

    setup_logging(logging.INFO)
    defaults = VoronoiConfig()
    config = VoronoiConfig(
        width=args.width or defaults.width,
        height=args.height or defaults.height,
        animated=args.animated,
        animation_speed=args.speed or defaults.animation_speed,
    )
    session = VoronoiSession(config)

    # free the keys the viewer binds from the default toolbar shortcuts
    plt.rcParams["keymap.grid"] = []
    plt.rcParams["keymap.home"] = ["home"]
    plt.rcParams["keymap.back"] = ["left", "backspace"]

    fig, ax = plt.subplots(figsize=(config.width / 100, config.height / 100 + 0.6))
    ax.axis("off")
    image_artist = ax.imshow(np.array(session.surface.image), interpolation="nearest")
    scheduler = TimerFrameScheduler(fig.canvas, interval_ms=FRAME_INTERVAL_MS)

    def _update_title() -> None:
        mode = "animated" if session.animated else "instant"
        ax.set_title(
            f"{session.point_count_label} | {mode} | speed {session.animation_speed:g}\n{HELP}",
            fontsize=8,
        )

    def _on_redraw(s: VoronoiSession) -> None:
        image_artist.set_data(np.array(s.surface.image))
        _update_title()
        fig.canvas.draw_idle()

    session.on_redraw = _on_redraw
    _update_title()

    def on_press(event):
        if event.inaxes != ax or event.xdata is None or event.ydata is None:
            return
        # imshow data coordinates are raster pixels already
        session.add_point(float(event.xdata), float(event.ydata))

    def on_key(event):
        if event.key == "g":
            if not session.generate(scheduler):
                _update_title()
                fig.canvas.draw_idle()
        elif event.key == "r":
            session.generate_random_points()
        elif event.key == "c":
            session.clear()
        elif event.key == "a":
            session.set_animated(not session.animated)
            _on_redraw(session)
        elif event.key in ("+", "="):
            session.set_animation_speed(session.animation_speed + 5)
            _on_redraw(session)
        elif event.key == "-":
            session.set_animation_speed(session.animation_speed - 5)
            _on_redraw(session)

    fig.canvas.mpl_connect("button_press_event", on_press)
    fig.canvas.mpl_connect("key_press_event", on_key)

    plt.show()


if __name__ == "__main__":
    main()
