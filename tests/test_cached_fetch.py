"""CachedFetcher: fetch-or-cache orchestration and single-flight."""

import asyncio

import pytest

from core.cache import CacheStore
from core.exceptions import UpstreamFetchFailed
from services.cached_fetch import CachedFetcher


class CountingFetch:
    def __init__(self, payload=None, error=None, gate=None):
        self.calls = 0
        self.payload = payload if payload is not None else {"results": []}
        self.error = error
        self.gate = gate

    async def __call__(self):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.payload


@pytest.fixture
def cache(clock):
    return CacheStore(clock=clock)


@pytest.fixture
def fetcher(cache):
    return CachedFetcher(cache)


class TestFetchOrCache:

    @pytest.mark.asyncio
    async def test_miss_fetches_and_stores_with_ttl(self, fetcher, cache):
        fetch = CountingFetch(payload={"id": 1})

        payload = await fetcher.fetch_or_cache("/games/1", 86400, fetch)

        assert payload == {"id": 1}
        assert fetch.calls == 1
        entry = await cache.get("/games/1")
        assert entry.expires_at == cache.now() + 86400

    @pytest.mark.asyncio
    async def test_hit_skips_fetch(self, fetcher):
        fetch = CountingFetch(payload={"id": 1})

        first = await fetcher.fetch_or_cache("/games/1", 60, fetch)
        second = await fetcher.fetch_or_cache("/games/1", 60, fetch)

        assert second == first
        assert fetch.calls == 1

    @pytest.mark.asyncio
    async def test_refetches_after_expiry(self, fetcher, clock):
        fetch = CountingFetch()

        await fetcher.fetch_or_cache("k", 60, fetch)
        clock.advance(60)
        await fetcher.fetch_or_cache("k", 60, fetch)

        assert fetch.calls == 2

    @pytest.mark.asyncio
    async def test_failure_propagates_and_is_not_cached(self, fetcher, cache):
        failing = CountingFetch(error=UpstreamFetchFailed("boom"))

        with pytest.raises(UpstreamFetchFailed):
            await fetcher.fetch_or_cache("k", 60, failing)
        assert "k" not in cache

        working = CountingFetch(payload={"ok": True})
        assert await fetcher.fetch_or_cache("k", 60, working) == {"ok": True}
        assert working.calls == 1

    @pytest.mark.asyncio
    async def test_zero_ttl_always_refetches(self, fetcher):
        fetch = CountingFetch()

        await fetcher.fetch_or_cache("k", 0, fetch)
        await fetcher.fetch_or_cache("k", 0, fetch)

        assert fetch.calls == 2


class TestSingleFlight:

    @pytest.mark.asyncio
    async def test_concurrent_misses_share_one_fetch(self, fetcher):
        gate = asyncio.Event()
        fetch = CountingFetch(payload={"shared": True}, gate=gate)

        tasks = [asyncio.create_task(fetcher.fetch_or_cache("k", 60, fetch)) for _ in range(3)]
        await asyncio.sleep(0)
        await asyncio.sleep(0)
        assert fetcher.inflight_count() == 1

        gate.set()
        results = await asyncio.gather(*tasks)

        assert fetch.calls == 1
        assert results == [{"shared": True}] * 3

        await asyncio.sleep(0)
        assert fetcher.inflight_count() == 0

    @pytest.mark.asyncio
    async def test_shared_failure_reaches_every_waiter(self, fetcher, cache):
        gate = asyncio.Event()
        fetch = CountingFetch(error=UpstreamFetchFailed("down"), gate=gate)

        tasks = [asyncio.create_task(fetcher.fetch_or_cache("k", 60, fetch)) for _ in range(2)]
        await asyncio.sleep(0)
        gate.set()
        results = await asyncio.gather(*tasks, return_exceptions=True)

        assert fetch.calls == 1
        assert all(isinstance(r, UpstreamFetchFailed) for r in results)
        assert "k" not in cache

    @pytest.mark.asyncio
    async def test_request_after_failed_fetch_settles_retries(self, fetcher):
        failing = CountingFetch(error=UpstreamFetchFailed("down"))
        first = asyncio.create_task(fetcher.fetch_or_cache("k", 60, failing))
        await asyncio.sleep(0)
        shared = fetcher._inflight["k"]

        while not shared.done():
            await asyncio.sleep(0)
        assert fetcher.inflight_count() == 0

        working = CountingFetch(payload={"ok": True})
        assert await fetcher.fetch_or_cache("k", 60, working) == {"ok": True}
        assert (failing.calls, working.calls) == (1, 1)
        with pytest.raises(UpstreamFetchFailed):
            await first

    @pytest.mark.asyncio
    async def test_different_keys_fetch_independently(self, fetcher):
        gate = asyncio.Event()
        fetch = CountingFetch(gate=gate)

        tasks = [
            asyncio.create_task(fetcher.fetch_or_cache("a", 60, fetch)),
            asyncio.create_task(fetcher.fetch_or_cache("b", 60, fetch)),
        ]
        await asyncio.sleep(0)
        gate.set()
        await asyncio.gather(*tasks)

        assert fetch.calls == 2

    @pytest.mark.asyncio
    async def test_cancelled_caller_does_not_abort_shared_fetch(self, fetcher):
        gate = asyncio.Event()
        fetch = CountingFetch(payload={"v": 1}, gate=gate)

        first = asyncio.create_task(fetcher.fetch_or_cache("k", 60, fetch))
        second = asyncio.create_task(fetcher.fetch_or_cache("k", 60, fetch))
        await asyncio.sleep(0)

        first.cancel()
        gate.set()

        assert await second == {"v": 1}
        assert fetch.calls == 1
        with pytest.raises(asyncio.CancelledError):
            await first

    @pytest.mark.asyncio
    async def test_disabled_lets_every_miss_fetch(self, cache):
        fetcher = CachedFetcher(cache, single_flight=False)
        gate = asyncio.Event()
        fetch = CountingFetch(gate=gate)

        tasks = [asyncio.create_task(fetcher.fetch_or_cache("k", 60, fetch)) for _ in range(2)]
        await asyncio.sleep(0)
        gate.set()
        await asyncio.gather(*tasks)

        assert fetch.calls == 2
        assert fetcher.inflight_count() == 0
