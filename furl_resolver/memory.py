"""Host process memory metric."""

from __future__ import annotations

import os
from typing import Any, Optional

import psutil


class MemoryProbe:
    """Measure resident memory growth since the probe was created.

    The baseline is captured at construction so the ceiling applies to what the
    cache has added, not to the interpreter's own footprint.
    """

    def __init__(self, ceiling: int, process: Optional[Any] = None) -> None:
        self.ceiling = ceiling
        self._process = process or psutil.Process(os.getpid())
        self.baseline = self.rss()

    def rss(self) -> int:
        return self._process.memory_info().rss

    def usage(self) -> int:
        return max(0, self.rss() - self.baseline)

    def ratio(self) -> float:
        """Percentage of the ceiling in use, rounded to two decimals."""
        return round(100 * self.usage() / self.ceiling, 2)

    def over_ceiling(self) -> bool:
        return self.usage() > self.ceiling


__all__ = ["MemoryProbe"]
