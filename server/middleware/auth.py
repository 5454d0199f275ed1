"""Authentication middleware for route protection."""

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from constants import PROTECTED_PATHS, PROTECTED_PREFIXES
from core.exceptions import Unauthenticated
from core.logging import get_logger

logger = get_logger(__name__)


class AuthMiddleware(BaseHTTPMiddleware):
    """Rejects requests to session-gated routes without an open session.

    Catalog routes stay public; only account and favorites routes are gated.
    """

    async def dispatch(self, request: Request, call_next):
        path = request.url.path

        if not self._is_protected_path(path):
            return await call_next(request)

        container = request.app.state.container
        settings = container.settings()
        token = request.cookies.get(settings.session_cookie_name)

        session = None
        if token:
            session = container.user_auth_service().resolve_session(token)

        if session is None:
            logger.debug("Rejected unauthenticated request", path=path, had_cookie=bool(token))
            error = Unauthenticated()
            return JSONResponse(status_code=error.status_code, content=error.to_dict())

        # Attach session info to request state for downstream handlers
        request.state.user_id = session.user_id
        request.state.session_id = session.session_id

        return await call_next(request)

    def _is_protected_path(self, path: str) -> bool:
        if path in PROTECTED_PATHS:
            return True
        return path.startswith(PROTECTED_PREFIXES)
