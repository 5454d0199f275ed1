"""Dependency injection container for the application."""

from dependency_injector import containers, providers

from core.config import Settings
from core.cache import CacheStore
from core.cleanup import CleanupService
from services.cached_fetch import CachedFetcher
from services.games import GamesService
from services.rawg import RawgClient
from services.sessions import SessionStore
from services.user_auth import UserAuthService
from services.user_store import UserStore


class Container(containers.DeclarativeContainer):
    """Application dependency injection container.

    One container per application instance, so every app (and every test)
    owns fresh stores.
    """

    # Settings
    settings = providers.Singleton(
        Settings,
    )

    # In-process state
    cache = providers.Singleton(
        CacheStore,
    )

    user_store = providers.Singleton(
        UserStore,
    )

    session_store = providers.Singleton(
        SessionStore,
        settings=settings
    )

    # Upstream catalog
    rawg_client = providers.Singleton(
        RawgClient,
        settings=settings
    )

    cached_fetcher = providers.Singleton(
        CachedFetcher,
        cache=cache,
        single_flight=settings.provided.cache_single_flight
    )

    # Services
    games_service = providers.Factory(
        GamesService,
        fetcher=cached_fetcher,
        client=rawg_client
    )

    user_auth_service = providers.Factory(
        UserAuthService,
        users=user_store,
        sessions=session_store,
        settings=settings
    )

    cleanup = providers.Singleton(
        CleanupService,
        cache=cache,
        sessions=session_store,
        settings=settings
    )
