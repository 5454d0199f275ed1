"""Server-side session registry."""

import secrets
import time
from typing import Callable, Dict, Optional

from core.config import Settings
from core.logging import get_logger
from models.auth import Session

logger = get_logger(__name__)


class SessionStore:
    """Open sessions keyed by an opaque random id."""

    def __init__(self, settings: Settings, clock: Callable[[], float] = time.time):
        self.settings = settings
        self._clock = clock
        self._sessions: Dict[str, Session] = {}

    @property
    def ttl_seconds(self) -> int:
        return self.settings.session_expire_minutes * 60

    def __len__(self) -> int:
        return len(self._sessions)

    def open(self, user_id: int) -> Session:
        now = self._clock()
        session = Session(
            session_id=secrets.token_urlsafe(24),
            user_id=user_id,
            created_at=now,
            expires_at=now + self.ttl_seconds,
        )
        self._sessions[session.session_id] = session
        logger.debug("Session opened", user_id=user_id)
        return session

    def get(self, session_id: str) -> Optional[Session]:
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if session.is_expired(self._clock()):
            del self._sessions[session_id]
            return None
        return session

    def close(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is not None:
            logger.debug("Session closed", user_id=session.user_id)
        return session is not None

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [sid for sid, s in self._sessions.items() if s.is_expired(now)]
        for sid in expired:
            del self._sessions[sid]
        return len(expired)
