"""Background triggers for the cache cleaner."""

from __future__ import annotations

import asyncio
import logging
from typing import List

from .cleaner import CacheCleaner
from .config import ResolverConfig
from .memory import MemoryProbe

logger = logging.getLogger(__name__)


class CleanerScheduler:
    """Run the cleaner hourly and whenever the memory ratio gets too high."""

    def __init__(self, cleaner: CacheCleaner, memory: MemoryProbe, config: ResolverConfig) -> None:
        self.cleaner = cleaner
        self.memory = memory
        self.config = config
        self._tasks: List[asyncio.Task] = []

    async def run_periodic(self) -> None:
        while True:
            await asyncio.sleep(self.config.cleaner_interval_ms / 1000)
            await self._clean("periodic")

    async def run_memory_watch(self) -> None:
        while True:
            await asyncio.sleep(self.config.memory_check_interval_ms / 1000)
            await self.check_memory()

    async def check_memory(self) -> bool:
        ratio = self.memory.ratio()
        logger.debug("Memory usage: %.2f%%", ratio)
        if ratio < self.config.memory_trigger_percent:
            return False
        await self._clean("memory")
        return True

    async def _clean(self, reason: str) -> None:
        try:
            cleaned = await asyncio.to_thread(self.cleaner.clean)
        except Exception:  # pragma: no cover - scheduler level guard
            logger.exception("Cache cleaner failed", extra={"trigger": reason})
        else:
            logger.debug("Cleaner triggered by %s evicted %s entries", reason, cleaned)

    def start(self) -> List[asyncio.Task]:
        self._tasks = [
            asyncio.create_task(self.run_periodic(), name="furl-cleaner"),
            asyncio.create_task(self.run_memory_watch(), name="furl-memory-watch"),
        ]
        return self._tasks

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []


__all__ = ["CleanerScheduler"]
