"""Public game catalog routes, proxied and cached from RAWG."""

from typing import Optional

from fastapi import APIRouter, Depends

from constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE
from core.logging import get_logger
from routers.deps import get_games_service
from services.games import GamesService

logger = get_logger(__name__)
router = APIRouter(prefix="/api/games", tags=["games"])


@router.get("")
async def list_games(
    search: Optional[str] = None,
    page: int = DEFAULT_PAGE,
    page_size: int = DEFAULT_PAGE_SIZE,
    platforms: Optional[str] = None,
    genres: Optional[str] = None,
    ordering: Optional[str] = None,
    esrb_rating: Optional[str] = None,
    games: GamesService = Depends(get_games_service)
):
    """Filtered, paginated game listing."""
    return await games.list_games(
        search=search,
        page=page,
        page_size=page_size,
        platforms=platforms,
        genres=genres,
        ordering=ordering,
        esrb_rating=esrb_rating
    )


# Declared before /{game_id} so "search" is not taken for an id
@router.get("/search")
async def search_games(
    query: Optional[str] = None,
    games: GamesService = Depends(get_games_service)
):
    return await games.search_games(query)


@router.get("/{game_id}")
async def get_game(
    game_id: str,
    games: GamesService = Depends(get_games_service)
):
    """Game details by RAWG id or slug."""
    return await games.get_game(game_id)
