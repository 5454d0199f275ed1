"""In-memory TTL cache store for upstream catalog responses.

Expiry runs on two independent paths: a lazy check on every read, which keeps
reads correct, and a periodic sweep (see core/cleanup.py), which bounds memory
for keys that are never read again.
"""

import asyncio
import time
from typing import Any, Callable, Dict, Optional

from core.logging import get_logger, log_cache_operation
from models.cache import CacheEntry

logger = get_logger(__name__)

Clock = Callable[[], float]


class CacheStore:
    """Key to CacheEntry map with unix-second expiry timestamps."""

    def __init__(self, clock: Clock = time.time):
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()

    def now(self) -> int:
        """Current time in whole unix seconds."""
        return int(self._clock())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    async def get(self, key: str) -> Optional[CacheEntry]:
        """Return the live entry for key, evicting it first if it has expired."""
        async with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                log_cache_operation(logger, "get", key, hit=False)
                return None

            if entry.is_expired(self.now()):
                del self._entries[key]
                log_cache_operation(logger, "get", key, hit=False, expired=True)
                return None

            log_cache_operation(logger, "get", key, hit=True)
            return entry

    async def put(self, key: str, payload: Any, expires_at: int) -> CacheEntry:
        """Create or replace the entry for key."""
        async with self._lock:
            entry = CacheEntry(
                id=self._next_id,
                key=key,
                payload=payload,
                expires_at=int(expires_at),
            )
            self._next_id += 1
            self._entries[key] = entry
            log_cache_operation(logger, "put", key, expires_at=entry.expires_at)
            return entry

    async def delete(self, key: str) -> bool:
        async with self._lock:
            deleted = self._entries.pop(key, None) is not None
            log_cache_operation(logger, "delete", key, deleted=deleted)
            return deleted

    async def sweep(self) -> int:
        """Delete every expired entry. Returns the number evicted."""
        async with self._lock:
            now = self.now()
            expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
            for key in expired:
                del self._entries[key]

        if expired:
            logger.info("Swept expired cache entries", count=len(expired), remaining=len(self._entries))
        return len(expired)

    async def clear(self) -> int:
        async with self._lock:
            count = len(self._entries)
            self._entries.clear()
            return count
