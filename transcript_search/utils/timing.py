"""
Performance timing context manager.

Usage:
    async with Timer("primary_query") as t:
        results = await index.query(...)
    print(t.elapsed_ms)
"""

from __future__ import annotations

import time
from typing import Any

from transcript_search.utils.logging import get_logger

logger = get_logger("transcript_search.timing")


class Timer:
    """Async context-manager timer for pipeline stages."""

    def __init__(self, label: str = ""):
        self.label = label
        self._start: float = 0.0
        self.elapsed_s: float = 0.0

    @property
    def elapsed_ms(self) -> float:
        return self.elapsed_s * 1000

    async def __aenter__(self) -> "Timer":
        self._start = time.perf_counter()
        return self

    async def __aexit__(self, *_: Any) -> None:
        self._stop()

    def _stop(self) -> None:
        self.elapsed_s = time.perf_counter() - self._start
        if self.label:
            logger.debug("%s completed in %.1fms", self.label, self.elapsed_ms)

