"""Logging setup for the resolver and its front ends."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Emits one "<url> => <code> <text>" line per resolution
RESOLUTION_LOGGER = "furl_resolver.resolver"

# Per-request transport logs would repeat every hop the resolver already logs
NOISY_LOGGERS = ("httpx", "httpcore")

Level = Union[int, str]


def configure_logging(
    log_file: Optional[Path] = None,
    level: Level = logging.INFO,
    resolution_level: Optional[Level] = None,
) -> None:
    """Install console and optional rotating file handlers on the root logger.

    ``resolution_level`` tunes the per-resolution summary lines separately,
    e.g. ``WARNING`` keeps a busy service's log to cleaner and error events.
    Transport loggers are held at WARNING unless the root level is DEBUG.
    """

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    handlers: list = [logging.StreamHandler()]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(log_file, maxBytes=5_000_000, backupCount=3))
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    quiet_transport = root_logger.getEffectiveLevel() > logging.DEBUG
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING if quiet_transport else logging.NOTSET)

    resolution_logger = logging.getLogger(RESOLUTION_LOGGER)
    resolution_logger.setLevel(resolution_level if resolution_level is not None else logging.NOTSET)


__all__ = ["LOG_FORMAT", "NOISY_LOGGERS", "RESOLUTION_LOGGER", "configure_logging"]
