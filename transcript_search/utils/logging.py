"""
Structured logging setup.

Usage:
    from transcript_search.utils.logging import get_logger
    logger = get_logger("transcript_search.pipeline.scope")
    logger.info("[SCOPE] Classified: %s", scope)
"""

from __future__ import annotations

import logging
import sys

from transcript_search.core.config import settings

ROOT_LOGGER_NAME = "transcript_search"

_configured = False


def setup_logging(level: int | str | None = None) -> None:
    """Configure structured logging for the whole package."""
    global _configured
    if _configured:
        return

    if level is None:
        level = settings.log_level
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(level)
    root.addHandler(handler)
    root.propagate = False

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """
    Return a logger under the ``transcript_search`` namespace.

    Automatically calls ``setup_logging()`` on first use to ensure
    the root handler is attached.
    """
    setup_logging()
    return logging.getLogger(name)
