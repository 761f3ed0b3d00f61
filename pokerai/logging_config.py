"""Logging setup for scripts and embedding applications."""

import logging
import os
from typing import Iterable, Optional

from rich.logging import RichHandler

DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(
    level: Optional[str] = None,
    rich: bool = True,
    extra_loggers: Optional[Iterable[str]] = None,
) -> logging.Logger:
    """
    Configure logging for the ``pokerai`` package.

    Args:
        level: Explicit log level; falls back to ``POKERAI_LOG_LEVEL`` or INFO
        rich: Render records with rich instead of plain text
        extra_loggers: Additional logger names to align with the level

    Returns:
        The package logger (``pokerai``)
    """
    raw_level = level if level is not None else os.getenv("POKERAI_LOG_LEVEL")
    resolved_level = (raw_level or "INFO").upper()

    if rich:
        logging.basicConfig(
            level=resolved_level,
            format="%(message)s",
            datefmt=DEFAULT_DATEFMT,
            handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        )
    else:
        logging.basicConfig(level=resolved_level, format=DEFAULT_FORMAT, datefmt=DEFAULT_DATEFMT)

    app_logger = logging.getLogger("pokerai")
    app_logger.setLevel(resolved_level)

    for logger_name in extra_loggers or ():
        logging.getLogger(logger_name).setLevel(resolved_level)

    app_logger.debug("Logging configured at %s", resolved_level)
    return app_logger
