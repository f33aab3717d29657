"""
Shopbot - Logging
==================
Named-logger factory giving every Shopbot module the same stdout format.

Level resolution (first match wins):
  • explicit ``level`` argument
  • ``settings.LOG_LEVEL``
  • ``settings.ENV``: ``"dev"`` → DEBUG, ``"prod"`` → WARNING

The HTTP and upstream libraries log one INFO line per request (httpx,
openai) or per file event (watchfiles); ``quiet_library_loggers``
raises them to WARNING so the ``[KB]`` / ``[RAG]`` lines stay readable.

Usage:
    from shopbot.src.utils.logger import get_logger
    logger = get_logger(__name__)
    logger.info("[KB] Reloaded %d chunk(s)", n)
"""

import logging
import sys

from shopbot.config.settings import settings

_ENV_LEVEL_MAP = {
    "dev": logging.DEBUG,
    "prod": logging.WARNING,
}

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_NOISY_LIBRARIES = ("httpx", "httpcore", "openai", "watchfiles")


def _default_level() -> int:
    if settings.LOG_LEVEL:
        return logging.getLevelName(settings.LOG_LEVEL)
    return _ENV_LEVEL_MAP.get(settings.ENV, logging.INFO)


def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """
    Return the logger *name*, attaching the Shopbot stdout handler once.

    Args:
        name:  Typically ``__name__`` of the calling module.
        level: Explicit override of the settings-derived level.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    resolved_level = level if level is not None else _default_level()
    logger.setLevel(resolved_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(resolved_level)
    handler.setFormatter(logging.Formatter(fmt=_LOG_FORMAT, datefmt=_DATE_FORMAT))
    logger.addHandler(handler)

    # Handlers live on the named logger; the root logger stays quiet
    logger.propagate = False
    return logger


def quiet_library_loggers(level: int = logging.WARNING) -> None:
    """Raise per-request library loggers to *level*."""
    for name in _NOISY_LIBRARIES:
        logging.getLogger(name).setLevel(level)
