import asyncio

A = "http://a.test/"
B = "http://b.test/"


def test_stats_snapshot_shape(make_service, clock):
    service, _ = make_service({A: (302, B), B: 200})
    asyncio.run(service.resolve(A))
    asyncio.run(service.resolve(A))

    stats = service.stats()

    assert stats["cache"] == {"hits": 1, "misses": 2, "size": 2, "memory": 0.0}
    assert stats["responses"] == {"successful": 2, "failures": 0, "last": clock.now}
    assert stats["total_hops"] == 2
    assert stats["cleaner"] == {"runs": 0, "cleaned": 0, "last": 0, "lastduration": 0}


def test_clean_updates_cleaner_stats(make_service, clock):
    service, _ = make_service({A: 404})
    asyncio.run(service.resolve(A))
    clock.advance(2 * 86_400 * 1000)

    assert service.clean() == 1

    stats = service.stats()
    assert stats["cache"]["size"] == 0
    assert stats["cleaner"]["runs"] == 1
    assert stats["cleaner"]["cleaned"] == 1
    assert stats["cleaner"]["last"] == clock.now


def test_submit_calls_handler_once(make_service):
    service, _ = make_service({A: (301, B), B: 200})
    calls = []

    async def run():
        outcome = await service.submit(A, lambda code, text: calls.append((code, text)))
        return outcome

    outcome = asyncio.run(run())

    assert calls == [(200, B)]
    assert outcome.ok


def test_submit_survives_failing_handler(make_service, caplog):
    service, _ = make_service({A: 200})

    def explode(code, text):
        raise RuntimeError("boom")

    async def run():
        return await service.submit(A, explode)

    outcome = asyncio.run(run())

    assert outcome.as_tuple() == (200, A)
    assert any("Completion handler failed" in record.message for record in caplog.records)
