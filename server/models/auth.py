"""User account, favorite and session models."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Serialized to clients with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_public(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class User(CamelModel):
    """User account. ``favorite_game_ids`` mirrors the user's Favorite rows."""

    id: int
    email: str
    username: str
    password_hash: str
    created_at: datetime = Field(default_factory=utcnow)
    profile_picture: Optional[str] = None
    favorite_game_ids: List[int] = Field(default_factory=list, alias="favoriteGames")

    def to_public(self) -> Dict[str, Any]:
        """Profile without the password hash."""
        return self.model_dump(mode="json", by_alias=True, exclude={"password_hash"})


class Favorite(CamelModel):
    id: int
    user_id: int
    game_id: int
    game_name: str
    game_image: Optional[str] = None
    added_at: datetime = Field(default_factory=utcnow)


@dataclass
class Session:
    """Server-side session; the cookie token only carries its id."""

    session_id: str
    user_id: int
    created_at: float
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return self.expires_at <= now
