"""
Shared pytest fixtures.

Every test gets its own Container, so cache, accounts and sessions never leak
between tests. The RAWG client is swapped for an in-memory fake that records
each upstream call.
"""

import time
from typing import Any, Dict, List, Optional, Tuple

import pytest
from dependency_injector import providers
from fastapi.testclient import TestClient

from core.config import Settings
from core.container import Container
from main import create_app

TEST_SECRET = "test-session-secret-key-0123456789abcdef"


class FakeClock:
    """Manually advanced clock for expiry tests."""

    def __init__(self, start: Optional[float] = None):
        self.now = time.time() if start is None else start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeRawgClient:
    """Stands in for RawgClient; returns a payload naming the call."""

    def __init__(self):
        self.calls: List[Tuple[str, Dict[str, Any]]] = []
        self.error: Optional[BaseException] = None
        self.closed = False

    async def fetch(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        self.calls.append((path, dict(params or {})))
        if self.error is not None:
            raise self.error
        return {
            "count": 1,
            "path": path,
            "call": len(self.calls),
            "results": [{"id": 3498, "name": "Grand Theft Auto V"}],
        }

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        session_secret_key=TEST_SECRET,
        rawg_api_key="test-rawg-key",
        log_level="WARNING",
        log_format="console",
    )


@pytest.fixture
def upstream():
    return FakeRawgClient()


@pytest.fixture
def container(settings, upstream):
    container = Container()
    container.settings.override(providers.Object(settings))
    container.rawg_client.override(providers.Object(upstream))
    return container


@pytest.fixture
def app(settings, container):
    return create_app(settings=settings, container=container)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def register(client: TestClient, email: str = "mario@nintendo.it",
             username: str = "mario", password: str = "itsame123"):
    """Register through the API; the client keeps the session cookie."""
    return client.post("/api/auth/register", json={
        "email": email,
        "username": username,
        "password": password,
    })
