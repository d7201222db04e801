"""
Logging Configuration
Sets up structlog on top of the stdlib logger for the 'voronoi_canvas' namespace.
"""
from __future__ import annotations

import logging
import sys

import structlog


def setup_logging(level: int = logging.INFO, json_output: bool = False) -> None:
    """
    Configure the package logger and structlog processors.

    Args:
        level: Logging level (e.g. logging.DEBUG, logging.INFO)
        json_output: Render events as JSON lines instead of key=value text.
    """
    logger = logging.getLogger("voronoi_canvas")
    logger.setLevel(level)

    # Avoid duplicate handlers when called more than once
    if logger.hasHandlers():
        logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)

    renderer = structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    structlog.get_logger("voronoi_canvas").info("logging_initialized", level=logging.getLevelName(level))
