"""Cached access to the game catalog: cache keys, TTL policy, upstream params."""

import json
from typing import Any, Dict, Optional

from constants import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    GAMES_PATH,
    GAME_DETAIL_TTL,
    GAME_SEARCH_TTL,
    GAMES_LIST_TTL,
    LISTING_KEY_FIELDS,
    LISTING_OPTIONAL_FILTERS,
    SEARCH_KEY_PREFIX,
    SEARCH_PAGE_SIZE,
)
from core.exceptions import UpstreamFetchFailed, ValidationFailed
from core.logging import get_logger
from services.cached_fetch import CachedFetcher
from services.rawg import RawgClient

logger = get_logger(__name__)


def listing_cache_key(
    search: Optional[str] = None,
    page: int = DEFAULT_PAGE,
    page_size: int = DEFAULT_PAGE_SIZE,
    platforms: Optional[str] = None,
    genres: Optional[str] = None,
    ordering: Optional[str] = None,
    esrb_rating: Optional[str] = None,
) -> str:
    """Canonical key for a listing request.

    Compact JSON over a fixed field order, so keyword order at the call site
    never matters. Unset parameters are left out of the object.
    """
    values = {
        "search": search,
        "page": page,
        "page_size": page_size,
        "platforms": platforms,
        "genres": genres,
        "ordering": ordering,
        "esrb_rating": esrb_rating,
    }
    key_data: Dict[str, Any] = {"path": GAMES_PATH}
    for field in LISTING_KEY_FIELDS:
        if values[field] is not None:
            key_data[field] = values[field]
    return json.dumps(key_data, separators=(",", ":"), ensure_ascii=False)


def detail_cache_key(game_id: str) -> str:
    return f"{GAMES_PATH}/{game_id}"


def search_cache_key(query: str) -> str:
    return f"{SEARCH_KEY_PREFIX}{query}"


class GamesService:
    """Catalog lookups routed through the fetch-or-cache orchestrator."""

    def __init__(self, fetcher: CachedFetcher, client: RawgClient):
        self.fetcher = fetcher
        self.client = client

    async def list_games(
        self,
        search: Optional[str] = None,
        page: int = DEFAULT_PAGE,
        page_size: int = DEFAULT_PAGE_SIZE,
        platforms: Optional[str] = None,
        genres: Optional[str] = None,
        ordering: Optional[str] = None,
        esrb_rating: Optional[str] = None,
    ) -> Any:
        filters = {
            "search": search,
            "platforms": platforms,
            "genres": genres,
            "ordering": ordering,
            "esrb_rating": esrb_rating,
        }
        key = listing_cache_key(page=page, page_size=page_size, **filters)

        params: Dict[str, Any] = {"page_size": page_size, "page": page}
        for name in LISTING_OPTIONAL_FILTERS:
            if filters[name]:
                params[name] = filters[name]

        try:
            return await self.fetcher.fetch_or_cache(
                key, GAMES_LIST_TTL, lambda: self.client.fetch(GAMES_PATH, params)
            )
        except UpstreamFetchFailed as e:
            raise e.relabel("Failed to fetch games") from e

    async def get_game(self, game_id: str) -> Any:
        key = detail_cache_key(game_id)
        try:
            return await self.fetcher.fetch_or_cache(
                key, GAME_DETAIL_TTL, lambda: self.client.fetch(f"{GAMES_PATH}/{game_id}")
            )
        except UpstreamFetchFailed as e:
            raise e.relabel("Failed to fetch game details") from e

    async def search_games(self, query: Optional[str]) -> Any:
        if not query:
            raise ValidationFailed("Search query is required")

        params = {"search": query, "page_size": SEARCH_PAGE_SIZE}
        try:
            return await self.fetcher.fetch_or_cache(
                search_cache_key(query), GAME_SEARCH_TTL, lambda: self.client.fetch(GAMES_PATH, params)
            )
        except UpstreamFetchFailed as e:
            raise e.relabel("Failed to search games") from e
