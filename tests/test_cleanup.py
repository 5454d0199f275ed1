"""CleanupService: periodic sweep of cache entries and sessions."""

import asyncio

import pytest

from core.cache import CacheStore
from core.cleanup import CleanupService
from services.sessions import SessionStore


@pytest.fixture
def cache(clock):
    return CacheStore(clock=clock)


@pytest.fixture
def sessions(settings, clock):
    return SessionStore(settings, clock=clock)


@pytest.fixture
def cleanup(cache, sessions, settings):
    return CleanupService(cache, sessions, settings)


class TestCleanupService:

    @pytest.mark.asyncio
    async def test_run_once_evicts_expired_state(self, cleanup, cache, sessions, clock):
        await cache.put("/games/1", {}, cache.now() + 60)
        await cache.put("/games/2", {}, cache.now() + 3600)
        sessions.open(1)

        clock.advance(sessions.ttl_seconds)
        results = await cleanup.run_once()

        assert results == {"expired_cache": 2, "expired_sessions": 1}
        assert len(cache) == 0
        assert len(sessions) == 0

    @pytest.mark.asyncio
    async def test_run_once_keeps_live_entries(self, cleanup, cache, clock):
        await cache.put("stale", 1, cache.now() + 10)
        await cache.put("live", 2, cache.now() + 100)

        clock.advance(50)
        results = await cleanup.run_once()

        assert results["expired_cache"] == 1
        assert "live" in cache

    @pytest.mark.asyncio
    async def test_start_and_stop(self, cleanup):
        await cleanup.start()
        assert cleanup.running

        await cleanup.start()  # no second task
        await cleanup.stop()
        assert not cleanup.running

    @pytest.mark.asyncio
    async def test_loop_survives_failed_iteration(self, cleanup, monkeypatch):
        calls = []

        async def flaky_sweep():
            calls.append(1)
            if len(calls) == 1:
                raise RuntimeError("sweep failed")
            return 0

        real_sleep = asyncio.sleep

        async def no_sleep(_seconds):
            await real_sleep(0)

        monkeypatch.setattr(cleanup.cache, "sweep", flaky_sweep)
        monkeypatch.setattr("core.cleanup.asyncio.sleep", no_sleep)

        await cleanup.start()
        for _ in range(20):
            if len(calls) >= 2:
                break
            await asyncio.sleep(0)
        await cleanup.stop()

        assert len(calls) >= 2
