"""Logging setup shared by the library and the web server."""

from __future__ import annotations

import logging

from settlernote.config import SETTLERNOTE_LOG_LEVEL

_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_ROOT_LOGGER = "settlernote"


def configure_logging(level: str | int = SETTLERNOTE_LOG_LEVEL) -> logging.Logger:
    """Install a single console handler on the package loggers.

    Calling this more than once replaces the handler instead of stacking
    duplicates, so the server entry point and tests can both call it.
    """
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(_FORMAT))

    for name in (_ROOT_LOGGER, "server"):
        logger = logging.getLogger(name)
        logger.setLevel(level)
        logger.handlers.clear()
        logger.addHandler(handler)
        logger.propagate = False

    return logging.getLogger(_ROOT_LOGGER)


def get_logger(name: str) -> logging.Logger:
    """Return a module logger."""
    return logging.getLogger(name)
