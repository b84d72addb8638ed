"""Centralized logging configuration for applications using the retry engine."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.config import Settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Libraries that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore")


def setup_logging(
    name: str = "oauth_retry",
    level: str | None = None,
    log_file: Path | None = None,
    settings: Settings | None = None,
) -> logging.Logger:
    """Configure logging with consistent format.

    Level resolution order: explicit ``level``, ``settings.log_level``, the
    LOG_LEVEL env var, then INFO. HTTP client loggers are held at WARNING
    unless the resolved level is DEBUG.

    Args:
        name: Logger name (typically __name__ from the calling module)
        level: Log level name
        log_file: Optional file path for logging output
        settings: Settings to read the log level from

    Returns:
        Configured logger instance
    """
    if level is None and settings is not None:
        level = settings.log_level
    level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    handlers: list[logging.Handler] = [logging.StreamHandler()]

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=getattr(logging, level),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )

    if level != "DEBUG":
        for noisy in NOISY_LOGGERS:
            logging.getLogger(noisy).setLevel(logging.WARNING)

    return logging.getLogger(name)
