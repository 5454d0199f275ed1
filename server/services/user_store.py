"""In-memory store for user accounts and their favorite games.

State lives only for the lifetime of the process. Password hashing runs in a
worker thread because bcrypt is intentionally slow.
"""

import asyncio
import logging
from typing import Dict, List, Optional

import bcrypt

from constants import BCRYPT_ROUNDS
from core.exceptions import DuplicateEmail, DuplicateUsername
from models.auth import Favorite, User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.lower().strip()


def _hash_password(raw_password: str) -> str:
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(raw_password.encode("utf-8"), salt).decode("utf-8")


def _check_password(raw_password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(raw_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed or foreign hash format
        return False


class UserStore:
    """Accounts keyed by id plus per-user favorite lists."""

    def __init__(self):
        self._users: Dict[int, User] = {}
        self._favorites: Dict[int, List[Favorite]] = {}
        self._next_user_id = 1
        self._next_favorite_id = 1
        self._lock = asyncio.Lock()

    def user_count(self) -> int:
        return len(self._users)

    # ------------------------------------------------------------------
    # Users
    # ------------------------------------------------------------------

    async def create_user(
        self,
        email: str,
        username: str,
        raw_password: str,
        profile_picture: Optional[str] = None,
    ) -> User:
        """Create an account, storing only a salted bcrypt hash of the password.

        Raises:
            DuplicateEmail: email already registered.
            DuplicateUsername: username already taken.
        """
        email = normalize_email(email)
        username = username.strip()
        self._ensure_unique(email, username)

        password_hash = await asyncio.to_thread(_hash_password, raw_password)

        async with self._lock:
            # Another registration may have landed while hashing
            self._ensure_unique(email, username)
            user = User(
                id=self._next_user_id,
                email=email,
                username=username,
                password_hash=password_hash,
                profile_picture=profile_picture,
            )
            self._next_user_id += 1
            self._users[user.id] = user

        logger.info(f"[Users] Created user {user.id} ({user.username})")
        return user

    async def get_user_by_email(self, email: str) -> Optional[User]:
        email = normalize_email(email)
        return next((u for u in self._users.values() if u.email == email), None)

    async def get_user_by_username(self, username: str) -> Optional[User]:
        username = username.strip()
        return next((u for u in self._users.values() if u.username == username), None)

    async def get_user_by_id(self, user_id: int) -> Optional[User]:
        return self._users.get(user_id)

    async def validate_password(self, raw_password: str, password_hash: str) -> bool:
        """Check a raw password against a stored hash. Never raises on mismatch."""
        return await asyncio.to_thread(_check_password, raw_password, password_hash)

    def _ensure_unique(self, email: str, username: str) -> None:
        if any(user.email == email for user in self._users.values()):
            raise DuplicateEmail(email)
        if any(user.username == username for user in self._users.values()):
            raise DuplicateUsername(username)

    # ------------------------------------------------------------------
    # Favorites
    # ------------------------------------------------------------------

    async def add_favorite(
        self,
        user_id: int,
        game_id: int,
        game_name: str,
        game_image: Optional[str] = None,
    ) -> Favorite:
        """Add a game to a user's favorites.

        A game already in the list is not added twice; the existing Favorite
        is returned. For an unknown user the record is still kept but there is
        no profile to mirror the game id onto.
        """
        async with self._lock:
            user_favorites = self._favorites.setdefault(user_id, [])
            existing = next((f for f in user_favorites if f.game_id == game_id), None)
            if existing is not None:
                return existing

            favorite = Favorite(
                id=self._next_favorite_id,
                user_id=user_id,
                game_id=game_id,
                game_name=game_name,
                game_image=game_image or None,
            )
            self._next_favorite_id += 1
            user_favorites.append(favorite)

            user = self._users.get(user_id)
            if user is not None:
                user.favorite_game_ids.append(game_id)
            else:
                logger.warning(f"[Favorites] Favorite {favorite.id} added for unknown user {user_id}")

        return favorite

    async def remove_favorite(self, user_id: int, game_id: int) -> bool:
        """Remove a game from a user's favorites. Returns False if it was not there."""
        async with self._lock:
            user_favorites = self._favorites.get(user_id)
            if not user_favorites:
                return False

            remaining = [f for f in user_favorites if f.game_id != game_id]
            if len(remaining) == len(user_favorites):
                return False

            self._favorites[user_id] = remaining

            user = self._users.get(user_id)
            if user is not None:
                user.favorite_game_ids = [g for g in user.favorite_game_ids if g != game_id]

        return True

    async def get_user_favorites(self, user_id: int) -> List[Favorite]:
        return list(self._favorites.get(user_id, []))
