"""Cache eviction driven by age and memory pressure."""

from __future__ import annotations

import logging
import threading
from typing import Callable

from .config import ResolverConfig
from .memory import MemoryProbe
from .resolver import now_ms
from .stats import StatsCounters
from .store import CacheStore

logger = logging.getLogger(__name__)


class CacheCleaner:
    """Evict stale entries, ramping the cutoff forward while memory stays high.

    Only one pass runs at a time; a call made while another pass is running
    returns 0 straight away.
    """

    def __init__(
        self,
        store: CacheStore,
        stats: StatsCounters,
        memory: MemoryProbe,
        config: ResolverConfig,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.store = store
        self.stats = stats
        self.memory = memory
        self.config = config
        self.clock = clock
        self._running = threading.Lock()

    @property
    def running(self) -> bool:
        return self._running.locked()

    def clean(self) -> int:
        if not self._running.acquire(blocking=False):
            logger.info("Cache cleaner already running, skipping")
            return 0

        try:
            started = self.clock()
            self.stats.incr("cleaner_runs")
            self.stats.set("cleaner_last", started)

            cutoff = started - self.config.max_cache_age_ms
            cleaned = 0
            while True:
                cleaned += self._sweep(cutoff)
                if not self.memory.over_ceiling() or self.store.size() == 0:
                    break
                if cutoff > started:
                    logger.warning(
                        "Memory still at %.2f%% after flushing %s entries", self.memory.ratio(), cleaned
                    )
                    break
                cutoff += self.config.cache_age_rampup_ms
                logger.debug("Memory at %.2f%%, advancing cutoff to %s", self.memory.ratio(), cutoff)

            duration = self.clock() - started
            self.stats.incr("cleaner_cleaned", cleaned)
            self.stats.set("cleaner_last_duration", duration)
        finally:
            self._running.release()

        logger.info("Cleanup complete (%s evicted in %sms)", cleaned, duration)
        return cleaned

    def _sweep(self, cutoff: int) -> int:
        evicted = 0
        for key in self.store.keys():
            # The record may have been refreshed since the snapshot was taken
            if self.store.delete_if(key, lambda record: record.last_access < cutoff):
                evicted += 1
        return evicted


__all__ = ["CacheCleaner"]
