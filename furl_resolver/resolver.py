"""Redirect chain resolution."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

import httpx

from .config import ResolverConfig
from .stats import StatsCounters
from .store import CacheRecord, CacheStore
from .url_tools import InvalidTarget, ProbeTarget, follow_location, parse_target

logger = logging.getLogger(__name__)

REDIRECT_STATUSES = frozenset({301, 302})


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class Resolution:
    code: int
    text: str

    @property
    def ok(self) -> bool:
        return self.code == 200

    def as_tuple(self) -> Tuple[int, str]:
        return self.code, self.text


class Resolver:
    """Follow 301/302 chains with HEAD probes, caching every URL visited."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        store: CacheStore,
        stats: StatsCounters,
        config: ResolverConfig,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self.client = client
        self.store = store
        self.stats = stats
        self.config = config
        self.clock = clock

    async def resolve(self, url: str) -> Resolution:
        trail: List[str] = []
        previous: Optional[str] = None
        current = url

        while True:
            cached = self.store.touch(current, self.clock())
            if cached is not None:
                self.stats.incr("hits")
                outcome = Resolution(cached.code, cached.text)
                # A redirect into an already cached URL ends this chain too
                if trail:
                    self._remember(trail, outcome)
                break

            self.stats.incr("misses")
            outcome, location = await self._hop(current, previous, trail)
            if location is None:
                self._remember(trail, outcome)
                break
            previous, current = current, location

        self._record_response(outcome)
        logger.info("%s => %s %s", url, outcome.code, outcome.text)
        return outcome

    async def _hop(
        self, url: str, previous: Optional[str], trail: List[str]
    ) -> Tuple[Resolution, Optional[str]]:
        """Probe one URL. Returns the outcome and, for a redirect, the next URL."""

        if url in trail:
            hops = len(trail)
            return (
                Resolution(
                    400,
                    f"ERR Circular reference found after {hops} hop{'' if hops == 1 else 's'}, "
                    f"pointing back to {url}",
                ),
                None,
            )

        trail.append(url)

        if len(trail) >= self.config.max_hops:
            return Resolution(400, "ERR Too many hops"), None

        try:
            target = parse_target(url)
        except InvalidTarget as exc:
            return Resolution(400, str(exc)), None

        self.stats.incr("total_hops")
        logger.debug("Hop %s: HEAD %s", len(trail), target.url)

        try:
            response = await self._probe(target, previous)
        except (asyncio.TimeoutError, httpx.TimeoutException):
            return Resolution(500, f"ERR Request to {url} timed out"), None
        except Exception as exc:
            message = str(exc) or exc.__class__.__name__
            return Resolution(500, f"ERR {message} for {url}"), None

        status = response.status_code
        if status in REDIRECT_STATUSES:
            location = response.headers.get("location")
            if not location:
                return Resolution(500, f"ERR {status} response without a location header"), None
            try:
                return Resolution(status, url), follow_location(url, location)
            except ValueError as exc:
                return Resolution(500, f"ERR {exc} for {url}"), None

        return Resolution(status, url), None

    async def _probe(self, target: ProbeTarget, previous: Optional[str]) -> httpx.Response:
        headers = {
            "Host": target.netloc,
            "User-Agent": self.config.user_agent,
            "Referer": previous or self.config.default_referer,
            "Accept": "*/*",
        }
        timeout = self.config.request_timeout
        return await asyncio.wait_for(
            self.client.head(target.url, headers=headers, follow_redirects=False, timeout=timeout),
            timeout=timeout,
        )

    def _remember(self, trail: List[str], outcome: Resolution) -> None:
        """Write the terminal outcome under every URL of the chain."""

        last_access = self.clock()
        if not outcome.ok:
            # Errors expire well before successes
            last_access -= self.config.error_backdate_ms
        record = CacheRecord(last_access=last_access, code=outcome.code, text=outcome.text)
        for url in trail:
            self.store.put(url, record)

    def _record_response(self, outcome: Resolution) -> None:
        self.stats.set("last_response", self.clock())
        self.stats.incr("successful" if outcome.ok else "failures")


__all__ = ["REDIRECT_STATUSES", "Resolution", "Resolver", "now_ms"]
