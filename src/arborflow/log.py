"""Logging configuration for arborflow."""

import logging
import os
from typing import Optional

from rich.logging import RichHandler

LOG_LEVEL_ENV = "ARBORFLOW_LOG_LEVEL"
DEFAULT_LEVEL = "WARNING"


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """Configure the ``arborflow`` logger.

    Args:
        level: Logging level name. Falls back to $ARBORFLOW_LOG_LEVEL, then WARNING.

    Returns:
        The configured package logger
    """
    level_name = (level or os.environ.get(LOG_LEVEL_ENV) or DEFAULT_LEVEL).upper()
    numeric_level = getattr(logging, level_name, None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level_name}")

    logger = logging.getLogger("arborflow")
    logger.setLevel(numeric_level)

    # Calling twice must not duplicate output
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)

    handler = RichHandler(
        rich_tracebacks=True,
        show_time=False,
        show_path=False,
    )
    handler.setLevel(numeric_level)
    logger.addHandler(handler)
    logger.propagate = False
    return logger
