"""Logging configuration helpers shared by the library and the CLI."""

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_LOGGING_CONFIGURED = False


def _resolve_level(level: str | int | None) -> int:
    """Resolves an explicit level, then ``LOG_LEVEL``, then INFO."""
    candidate: str | int | None = level
    if candidate is None:
        candidate = os.getenv("LOG_LEVEL")
    if candidate is None or candidate == "":
        return logging.INFO
    if isinstance(candidate, int):
        return candidate
    resolved = logging.getLevelName(str(candidate).strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(level: str | int | None = None) -> int:
    """Configures root logging once and returns the applied level.

    The first call installs the default handler; later calls only adjust the
    root logger and handler levels.
    """
    global _LOGGING_CONFIGURED
    applied_level = _resolve_level(level)
    root_logger = logging.getLogger()
    if not _LOGGING_CONFIGURED and not root_logger.handlers:
        logging.basicConfig(format=LOG_FORMAT, level=applied_level)
    root_logger.setLevel(applied_level)
    for handler in root_logger.handlers:
        handler.setLevel(applied_level)
    _LOGGING_CONFIGURED = True
    return applied_level


def get_logger(name: str) -> logging.Logger:
    """Returns a named logger, configuring logging from the environment if needed."""
    if not _LOGGING_CONFIGURED:
        configure_logging()
    return logging.getLogger(name)
