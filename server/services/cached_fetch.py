"""Fetch-or-cache orchestration over the CacheStore."""

import asyncio
from typing import Any, Awaitable, Callable, Dict

from core.cache import CacheStore
from core.logging import get_logger

logger = get_logger(__name__)

FetchFn = Callable[[], Awaitable[Any]]


class CachedFetcher:
    """Serve a payload from cache, or fetch it, store it with a TTL and serve it.

    Failures from the fetch propagate unchanged and nothing is written, so the
    next request retries upstream.

    With ``single_flight`` enabled, concurrent misses on the same key share one
    in-flight fetch instead of each calling upstream. Without it, every miss
    fetches and the last put wins.
    """

    def __init__(self, cache: CacheStore, single_flight: bool = True):
        self.cache = cache
        self.single_flight = single_flight
        self._inflight: Dict[str, asyncio.Task] = {}

    async def fetch_or_cache(self, key: str, ttl_seconds: int, fetch: FetchFn) -> Any:
        entry = await self.cache.get(key)
        if entry is not None:
            return entry.payload

        if not self.single_flight:
            return await self._fetch_and_store(key, ttl_seconds, fetch)

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._shared_fetch(key, ttl_seconds, fetch))
            self._inflight[key] = task
            task.add_done_callback(self._consume_outcome)
        else:
            logger.debug("Joining in-flight fetch", cache_key=key)

        # Shielded so one cancelled caller does not abort the fetch for the others
        return await asyncio.shield(task)

    def inflight_count(self) -> int:
        return len(self._inflight)

    async def _fetch_and_store(self, key: str, ttl_seconds: int, fetch: FetchFn) -> Any:
        payload = await fetch()
        await self.cache.put(key, payload, self.cache.now() + ttl_seconds)
        return payload

    async def _shared_fetch(self, key: str, ttl_seconds: int, fetch: FetchFn) -> Any:
        try:
            return await self._fetch_and_store(key, ttl_seconds, fetch)
        finally:
            # Unregistered before the task completes, so no caller can join a settled fetch
            if self._inflight.get(key) is asyncio.current_task():
                del self._inflight[key]

    @staticmethod
    def _consume_outcome(task: asyncio.Task) -> None:
        # Mark the outcome as retrieved when every caller was cancelled
        if not task.cancelled():
            task.exception()
