"""Logging setup shared by the headless runner and the web controller."""

from __future__ import annotations

import logging
import os

DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(
    *,
    level: str | None = None,
    format: str = DEFAULT_FORMAT,
    datefmt: str = DEFAULT_DATEFMT,
    include_uvicorn: bool = False,
) -> logging.Logger:
    """Configure root logging and return the ``heroes`` package logger.

    Args:
        level: Explicit log level. Falls back to ``HEROES_LOG_LEVEL`` or INFO.
        format: Log format string.
        datefmt: Date format string.
        include_uvicorn: Align the uvicorn loggers with the resolved level.
    """
    raw_level = level if level is not None else os.getenv("HEROES_LOG_LEVEL")
    resolved_level = (raw_level or "INFO").upper()
    logging.basicConfig(level=resolved_level, format=format, datefmt=datefmt)

    app_logger = logging.getLogger("heroes")
    app_logger.setLevel(resolved_level)

    if include_uvicorn:
        for uvicorn_logger in ("uvicorn", "uvicorn.error", "uvicorn.access"):
            logging.getLogger(uvicorn_logger).setLevel(resolved_level)

    app_logger.debug("Logging configured at %s", resolved_level)
    return app_logger
