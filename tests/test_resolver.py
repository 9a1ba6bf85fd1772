import asyncio

import httpx

from furl_resolver.config import DAY_MS, ResolverConfig
from furl_resolver.store import CacheStore

A = "http://a.test/"
B = "http://b.test/"
C = "http://c.test/"


def test_chain_outcome_is_cached_under_every_hop(make_service):
    service, web = make_service({A: (301, B), B: (302, C), C: 200})

    outcome = asyncio.run(service.resolve(A))

    assert outcome.as_tuple() == (200, C)
    assert web.probed == [A, B, C]
    for url in (A, B, C):
        record = service.store.get(url)
        assert (record.code, record.text) == (200, C)

    again = asyncio.run(service.resolve(B))

    assert again.as_tuple() == (200, C)
    assert web.probed == [A, B, C]
    counters = service.counters.as_dict()
    assert counters["hits"] == 1
    assert counters["misses"] == 3
    assert counters["total_hops"] == 3


def test_cache_hit_refreshes_access_time_without_probing(make_service, clock):
    service, web = make_service({C: 200})
    asyncio.run(service.resolve(C))
    clock.advance(60_000)

    outcome = asyncio.run(service.resolve(C))

    assert outcome.as_tuple() == (200, C)
    assert len(web.requests) == 1
    assert service.store.get(C).last_access == clock.now
    counters = service.counters.as_dict()
    assert (counters["hits"], counters["misses"], counters["total_hops"]) == (1, 1, 1)


def test_redirect_loop_reports_hops_before_cycle(make_service):
    service, web = make_service({A: (302, B), B: (302, A)})

    outcome = asyncio.run(service.resolve(A))

    assert outcome.code == 400
    assert outcome.text == f"ERR Circular reference found after 2 hops, pointing back to {A}"
    assert web.probed == [A, B]
    assert service.store.get(A).text == outcome.text
    assert service.store.get(B).text == outcome.text


def test_self_redirect_uses_singular_hop(make_service):
    service, _ = make_service({A: (301, A)})

    outcome = asyncio.run(service.resolve(A))

    assert outcome.text == f"ERR Circular reference found after 1 hop, pointing back to {A}"


def test_hop_limit_stops_before_probing_the_tenth_url(make_service):
    chain = [f"http://hop{i}.test/" for i in range(15)]
    routes = {url: (302, nxt) for url, nxt in zip(chain, chain[1:])}
    service, web = make_service(routes)

    outcome = asyncio.run(service.resolve(chain[0]))

    assert outcome.as_tuple() == (400, "ERR Too many hops")
    assert web.probed == chain[:9]
    assert service.store.size() == 10
    assert service.store.get(chain[9]).text == "ERR Too many hops"


def test_invalid_urls_fail_without_network(make_service):
    service, web = make_service()

    ftp = asyncio.run(service.resolve("ftp://x"))
    hostless = asyncio.run(service.resolve("http://"))

    assert ftp.as_tuple() == (400, "ERR Invalid protocol: ftp://x")
    assert hostless.as_tuple() == (400, "ERR Invalid URL: Missing hostname")
    assert web.requests == []
    assert service.counters.as_dict()["total_hops"] == 0
    assert "ftp://x" in service.store


def test_timeout_reports_once(make_service):
    async def slow(request):
        await asyncio.sleep(1)
        return httpx.Response(200)

    config = ResolverConfig(request_timeout_ms=50)
    service, _ = make_service(handler=slow, config=config)
    calls = []

    async def run():
        task = service.submit("http://slow.test/", lambda code, text: calls.append((code, text)))
        await task

    asyncio.run(run())

    assert calls == [(500, "ERR Request to http://slow.test/ timed out")]
    assert service.counters.as_dict()["failures"] == 1


def test_transport_timeout_uses_timeout_message(make_service):
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    service, _ = make_service(handler=handler)

    outcome = asyncio.run(service.resolve("http://slow.test/"))

    assert outcome.as_tuple() == (500, "ERR Request to http://slow.test/ timed out")


def test_connection_error_is_reported(make_service):
    def handler(request):
        raise httpx.ConnectError("Connection refused", request=request)

    service, _ = make_service(handler=handler)

    outcome = asyncio.run(service.resolve("http://down.test/"))

    assert outcome.as_tuple() == (500, "ERR Connection refused for http://down.test/")
    assert service.store.get("http://down.test/").code == 500


def test_redirect_without_location_is_an_error(make_service):
    service, _ = make_service({A: (302, None)})

    outcome = asyncio.run(service.resolve(A))

    assert outcome.as_tuple() == (500, "ERR 302 response without a location header")


def test_other_statuses_pass_through(make_service):
    service, _ = make_service({A: (301, B), B: 404, C: 303})

    assert asyncio.run(service.resolve(A)).as_tuple() == (404, B)
    assert asyncio.run(service.resolve(C)).as_tuple() == (303, C)
    counters = service.counters.as_dict()
    assert counters["failures"] == 2
    assert counters["successful"] == 0


def test_error_entries_are_backdated(make_service, clock):
    service, _ = make_service({A: 200, B: 500})

    asyncio.run(service.resolve(A))
    asyncio.run(service.resolve(B))

    ok, failed = service.store.get(A), service.store.get(B)
    assert ok.last_access == clock.now
    assert ok.last_access - failed.last_access == int(7 * DAY_MS * 0.9)


def test_probe_headers_carry_referer_chain(make_service):
    service, web = make_service({A: (302, B), B: 200})

    asyncio.run(service.resolve(A))

    first, second = web.requests
    assert first.headers["referer"] == "http://furl.3ft9.com/"
    assert second.headers["referer"] == A
    assert first.headers["accept"] == "*/*"
    assert first.headers["user-agent"].startswith("furl/")
    assert first.method == "HEAD"


def test_relative_location_is_joined(make_service):
    service, _ = make_service({A: (301, "/next?x=1"), "http://a.test/next?x=1": 200})

    outcome = asyncio.run(service.resolve(A))

    assert outcome.as_tuple() == (200, "http://a.test/next?x=1")


def test_redirect_into_cached_url_caches_the_prefix(make_service):
    service, web = make_service({A: (302, B), B: (302, C), C: 200})
    asyncio.run(service.resolve(B))

    outcome = asyncio.run(service.resolve(A))

    assert outcome.as_tuple() == (200, C)
    assert web.probed == [B, C, A]
    assert service.store.get(A).text == C


def test_independent_stores_do_not_share_entries(make_service):
    first, _ = make_service({C: 200}, store=CacheStore())
    second, web = make_service({C: 200}, store=CacheStore())

    asyncio.run(first.resolve(C))
    asyncio.run(second.resolve(C))

    assert len(web.requests) == 1
    assert second.counters.as_dict()["hits"] == 0


def test_malformed_start_url_is_a_client_error(make_service):
    service, web = make_service()

    outcome = asyncio.run(service.resolve("http://[::1/"))

    assert outcome.code == 400
    assert outcome.text.startswith("ERR Invalid URL: ")
    assert web.requests == []
    assert service.store.get("http://[::1/").code == 400


def test_malformed_location_is_reported_and_cached(make_service):
    service, web = make_service({A: (302, "http://[bad/")})

    outcome = asyncio.run(service.resolve(A))

    assert outcome.code == 500
    assert outcome.text.startswith("ERR ")
    assert outcome.text.endswith(f" for {A}")
    assert web.probed == [A]
    assert service.store.get(A).text == outcome.text


def test_submit_delivers_malformed_location_outcome(make_service):
    service, _ = make_service({A: (302, "http://[bad/")})
    calls = []

    async def run():
        await service.submit(A, lambda code, text: calls.append((code, text)))

    asyncio.run(run())

    assert len(calls) == 1
    assert calls[0][0] == 500
