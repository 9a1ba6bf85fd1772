"""Owned resolver state and the operations exposed to front ends."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Dict, Optional

import httpx

from .cleaner import CacheCleaner
from .config import ResolverConfig
from .memory import MemoryProbe
from .resolver import Resolution, Resolver, now_ms
from .stats import StatsCounters
from .store import CacheStore

logger = logging.getLogger(__name__)


class ResolutionService:
    """Bundle one cache, its counters, the resolver and the cleaner."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        config: Optional[ResolverConfig] = None,
        store: Optional[CacheStore] = None,
        memory: Optional[MemoryProbe] = None,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self.config = config or ResolverConfig()
        self.store = store if store is not None else CacheStore()
        self.memory = memory or MemoryProbe(self.config.max_memory_usage)
        self.counters = StatsCounters()
        clock = clock or now_ms
        self.resolver = Resolver(client, self.store, self.counters, self.config, clock=clock)
        self.cleaner = CacheCleaner(self.store, self.counters, self.memory, self.config, clock=clock)

    async def resolve(self, url: str) -> Resolution:
        return await self.resolver.resolve(url)

    def submit(self, url: str, on_done: Callable[[int, str], None]) -> asyncio.Task:
        """Resolve in the background and call ``on_done(code, text)`` once."""

        async def _run() -> Resolution:
            outcome = await self.resolver.resolve(url)
            try:
                on_done(outcome.code, outcome.text)
            except Exception:
                logger.exception("Completion handler failed for %s", url)
            return outcome

        return asyncio.ensure_future(_run())

    def clean(self) -> int:
        return self.cleaner.clean()

    def stats(self) -> Dict:
        counters = self.counters.as_dict()
        return {
            "cache": {
                "hits": counters["hits"],
                "misses": counters["misses"],
                "size": self.store.size(),
                "memory": self.memory.ratio(),
            },
            "responses": {
                "successful": counters["successful"],
                "failures": counters["failures"],
                "last": counters["last_response"],
            },
            "total_hops": counters["total_hops"],
            "cleaner": {
                "runs": counters["cleaner_runs"],
                "cleaned": counters["cleaner_cleaned"],
                "last": counters["cleaner_last"],
                "lastduration": counters["cleaner_last_duration"],
            },
        }


__all__ = ["ResolutionService"]
