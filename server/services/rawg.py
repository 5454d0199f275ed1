"""HTTP client for the RAWG game catalog API."""

import asyncio
import time
from typing import Any, Dict, Optional

import httpx

from core.config import Settings
from core.exceptions import UpstreamFetchFailed
from core.logging import get_logger, log_execution_time

logger = get_logger(__name__)


class RawgClient:
    """Parameterized GET against the catalog with the API key as a query param.

    Every call is bounded by ``upstream_timeout``: httpx enforces it per
    connect/read phase and an overall deadline caps the whole request.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.base_url = settings.rawg_api_url
        self.timeout = settings.upstream_timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def fetch(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GET ``path`` and return the decoded JSON body.

        Raises:
            UpstreamFetchFailed: on transport errors, timeouts, non-2xx
                responses or a body that is not JSON.
        """
        query = {"key": self.settings.rawg_api_key}
        for name, value in (params or {}).items():
            if value is not None:
                query[name] = str(value)

        start_time = time.time()
        try:
            response = await asyncio.wait_for(
                self._get_client().get(path, params=query),
                timeout=self.timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except asyncio.TimeoutError as e:
            logger.warning("Upstream request timed out", path=path, timeout=self.timeout)
            raise UpstreamFetchFailed(f"Timed out after {self.timeout}s fetching {path}") from e
        except httpx.HTTPStatusError as e:
            logger.warning("Upstream returned error status", path=path, status=e.response.status_code)
            raise UpstreamFetchFailed(f"Upstream {path} answered {e.response.status_code}") from e
        except httpx.HTTPError as e:
            logger.warning("Upstream request failed", path=path, error=str(e))
            raise UpstreamFetchFailed(f"Upstream {path} failed: {type(e).__name__}: {e}") from e
        except ValueError as e:
            logger.warning("Upstream returned invalid JSON", path=path)
            raise UpstreamFetchFailed(f"Upstream {path} returned invalid JSON") from e

        log_execution_time(logger, "rawg_fetch", start_time, time.time(), path=path)
        return payload

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
