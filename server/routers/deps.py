"""FastAPI dependencies resolving services from the app's container."""

from fastapi import Request

from core.config import Settings
from services.games import GamesService
from services.user_auth import UserAuthService
from services.user_store import UserStore


def get_settings(request: Request) -> Settings:
    return request.app.state.container.settings()


def get_user_auth_service(request: Request) -> UserAuthService:
    return request.app.state.container.user_auth_service()


def get_user_store(request: Request) -> UserStore:
    return request.app.state.container.user_store()


def get_games_service(request: Request) -> GamesService:
    return request.app.state.container.games_service()


def get_current_user_id(request: Request) -> int:
    """User id attached by AuthMiddleware on gated routes."""
    return request.state.user_id
