from types import SimpleNamespace

import httpx
import pytest

from furl_resolver.config import ResolverConfig
from furl_resolver.memory import MemoryProbe
from furl_resolver.service import ResolutionService

START = 1_700_000_000_000


class FakeClock:
    def __init__(self, now: int = START) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class FakeProcess:
    """Stands in for psutil.Process; rss can grow with a store's size."""

    def __init__(self, store=None, base: int = 50_000_000, per_entry: int = 0) -> None:
        self.store = store
        self.base = base
        self.per_entry = per_entry
        self.extra = 0

    def memory_info(self):
        entries = self.store.size() if self.store is not None else 0
        return SimpleNamespace(rss=self.base + self.per_entry * entries + self.extra)


class FakeWeb:
    """MockTransport handler serving fixed statuses and redirects by URL.

    A route value is a status code, a ``(status, location)`` pair, or a
    callable taking the request.
    """

    def __init__(self, routes=None) -> None:
        self.routes = dict(routes or {})
        self.requests = []

    def __call__(self, request: httpx.Request):
        self.requests.append(request)
        entry = self.routes.get(str(request.url), 404)
        if callable(entry):
            return entry(request)
        if isinstance(entry, int):
            return httpx.Response(entry)
        status, location = entry
        headers = {"Location": location} if location else {}
        return httpx.Response(status, headers=headers)

    @property
    def probed(self):
        return [str(request.url) for request in self.requests]


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_service(clock):
    def _make(routes=None, handler=None, config=None, store=None, process=None):
        web = FakeWeb(routes)
        config = config or ResolverConfig()
        transport = httpx.MockTransport(handler or web)
        client = httpx.AsyncClient(transport=transport)
        memory = MemoryProbe(config.max_memory_usage, process=process or FakeProcess(store))
        service = ResolutionService(client, config=config, store=store, memory=memory, clock=clock)
        return service, web

    return _make
