"""Favorite games of the logged-in user."""

from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from core.exceptions import NotFound
from core.logging import get_logger
from routers.deps import get_current_user_id, get_user_store
from services.user_store import UserStore

logger = get_logger(__name__)
router = APIRouter(prefix="/api/favorites", tags=["favorites"])


class FavoriteRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    game_id: int
    game_name: str
    game_image: Optional[str] = None


@router.post("", status_code=201)
async def add_favorite(
    request: FavoriteRequest,
    user_id: int = Depends(get_current_user_id),
    users: UserStore = Depends(get_user_store)
):
    favorite = await users.add_favorite(
        user_id=user_id,
        game_id=request.game_id,
        game_name=request.game_name,
        game_image=request.game_image
    )
    logger.info("Favorite added", user_id=user_id, game_id=request.game_id)
    return favorite.to_public()


@router.delete("/{game_id}")
async def remove_favorite(
    game_id: int,
    user_id: int = Depends(get_current_user_id),
    users: UserStore = Depends(get_user_store)
):
    if not await users.remove_favorite(user_id, game_id):
        raise NotFound("Preferito non trovato")

    logger.info("Favorite removed", user_id=user_id, game_id=game_id)
    return {"message": "Preferito rimosso con successo"}


@router.get("")
async def list_favorites(
    user_id: int = Depends(get_current_user_id),
    users: UserStore = Depends(get_user_store)
):
    favorites = await users.get_user_favorites(user_id)
    return [favorite.to_public() for favorite in favorites]
