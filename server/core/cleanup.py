"""Periodic cleanup service for the long-running server.

Runs the cache sweep on a fixed interval, independent of read traffic, and
drops expired sessions on the same tick.
"""
import asyncio
from typing import Dict, Optional, TYPE_CHECKING

from core.logging import get_logger

if TYPE_CHECKING:
    from core.config import Settings
    from core.cache import CacheStore
    from services.sessions import SessionStore

logger = get_logger(__name__)


class CleanupService:
    """Background eviction to keep in-process state bounded."""

    def __init__(
        self,
        cache: "CacheStore",
        sessions: "SessionStore",
        settings: "Settings"
    ):
        self.cache = cache
        self.sessions = sessions
        self.settings = settings
        self._running = False
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """Start the cleanup background task."""
        if self._running:
            return
        self._running = True
        self._task = asyncio.create_task(self._cleanup_loop())
        logger.info("Cleanup service started", interval=self.settings.cache_sweep_interval)

    async def stop(self) -> None:
        """Stop the cleanup service gracefully."""
        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        logger.info("Cleanup service stopped")

    async def _cleanup_loop(self) -> None:
        """Sleep first: nothing can have expired at startup."""
        while self._running:
            await asyncio.sleep(self.settings.cache_sweep_interval)
            try:
                await self.run_once()
            except Exception as e:
                logger.error("Cleanup failed", error=str(e), exc_info=True)

    async def run_once(self) -> Dict[str, int]:
        """Run one cleanup pass and return what was evicted."""
        results = {
            "expired_cache": await self.cache.sweep(),
            "expired_sessions": self.sessions.purge_expired(),
        }
        if sum(results.values()) > 0:
            logger.info("Cleanup completed", **results)
        return results
