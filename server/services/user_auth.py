"""User registration, login and session token handling."""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from pydantic import BaseModel, EmailStr, Field, ValidationError, field_validator

from constants import (
    JWT_ALGORITHM,
    PASSWORD_MIN_LENGTH,
    USERNAME_MAX_LENGTH,
    USERNAME_MIN_LENGTH,
)
from core.config import Settings
from core.exceptions import (
    DuplicateEmail,
    DuplicateUsername,
    InvalidCredentials,
    ValidationFailed,
)
from core.logging import get_logger
from models.auth import Session, User
from services.sessions import SessionStore
from services.user_store import UserStore

logger = get_logger(__name__)


class NewUser(BaseModel):
    email: EmailStr
    username: str = Field(min_length=USERNAME_MIN_LENGTH, max_length=USERNAME_MAX_LENGTH)
    password: str = Field(min_length=PASSWORD_MIN_LENGTH)
    profile_picture: Optional[str] = None

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, v):
        # Length limits apply to the name as stored
        return v.strip() if isinstance(v, str) else v


class UserAuthService:
    """Handles registration, login, and session token management."""

    def __init__(self, users: UserStore, sessions: SessionStore, settings: Settings):
        self.users = users
        self.sessions = sessions
        self.settings = settings

    async def register(self, email: str, username: str, password: str) -> User:
        """Validate input and create a new account.

        Raises:
            ValidationFailed: malformed email, username or password.
            DuplicateEmail / DuplicateUsername: identity already taken.
        """
        try:
            data = NewUser(email=email, username=username, password=password)
        except ValidationError as e:
            raise ValidationFailed(
                "Dati di registrazione non validi",
                errors=e.errors(include_url=False, include_context=False, include_input=False),
            ) from e

        if await self.users.get_user_by_email(data.email):
            raise DuplicateEmail(data.email)
        if await self.users.get_user_by_username(data.username):
            raise DuplicateUsername(data.username)

        user = await self.users.create_user(
            email=data.email,
            username=data.username,
            raw_password=data.password,
            profile_picture=data.profile_picture,
        )
        logger.info("User registered", user_id=user.id, username=user.username)
        return user

    async def login(self, email: str, password: str) -> User:
        """Authenticate by email and password.

        Unknown email and wrong password fail identically.
        """
        user = await self.users.get_user_by_email(email)
        if not user:
            raise InvalidCredentials()

        if not await self.users.validate_password(password, user.password_hash):
            raise InvalidCredentials()

        logger.info("User logged in", user_id=user.id)
        return user

    def create_session_token(self, user: User) -> str:
        """Open a server-side session and return the signed cookie token."""
        session = self.sessions.open(user.id)
        payload = {
            "sub": str(user.id),
            "sid": session.session_id,
            "exp": datetime.fromtimestamp(session.expires_at, tz=timezone.utc),
            "iat": datetime.fromtimestamp(session.created_at, tz=timezone.utc),
        }
        return jwt.encode(payload, self.settings.session_secret_key, algorithm=JWT_ALGORITHM)

    def verify_token(self, token: str) -> Optional[Dict[str, Any]]:
        """
        Verify token signature and expiry and return its payload.
        Returns None if the token is invalid or expired.
        """
        try:
            return jwt.decode(
                token,
                self.settings.session_secret_key,
                algorithms=[JWT_ALGORITHM]
            )
        except JWTError as e:
            logger.debug("Token verification failed", error=str(e))
            return None

    def resolve_session(self, token: str) -> Optional[Session]:
        """Return the open session behind a cookie token, if any."""
        payload = self.verify_token(token)
        if not payload or not payload.get("sid"):
            return None

        session = self.sessions.get(payload["sid"])
        if session is None or str(session.user_id) != payload.get("sub"):
            return None
        return session

    async def get_current_user(self, token: str) -> Optional[User]:
        session = self.resolve_session(token)
        if session is None:
            return None
        return await self.users.get_user_by_id(session.user_id)

    def logout(self, token: Optional[str]) -> bool:
        """Destroy the session behind the token. Returns True if one was open."""
        if not token:
            return False
        payload = self.verify_token(token)
        if not payload or not payload.get("sid"):
            return False
        return self.sessions.close(payload["sid"])
