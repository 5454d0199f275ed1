"""Application exception hierarchy and FastAPI error handlers."""

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from core.logging import get_logger

logger = get_logger(__name__)


class AppError(Exception):
    """Base exception carrying a client-safe message and HTTP status."""

    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message}


class ValidationFailed(AppError):
    """Malformed request input."""

    status_code = 400

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.errors:
            data["errors"] = self.errors
        return data


class DuplicateIdentity(AppError):
    """Email or username already taken."""

    status_code = 400


class DuplicateEmail(DuplicateIdentity):
    def __init__(self, email: str):
        super().__init__("Email già in uso")
        self.email = email


class DuplicateUsername(DuplicateIdentity):
    def __init__(self, username: str):
        super().__init__("Nome utente già in uso")
        self.username = username


class InvalidCredentials(AppError):
    status_code = 401

    def __init__(self, message: str = "Credenziali non valide"):
        super().__init__(message)


class Unauthenticated(AppError):
    status_code = 401

    def __init__(self, message: str = "Non sei autenticato. Effettua il login per continuare."):
        super().__init__(message)


class NotFound(AppError):
    status_code = 404


class UpstreamFetchFailed(AppError):
    """The catalog service could not be reached or answered with an error.

    ``detail`` is for logs only; ``message`` is what the client sees.
    """

    status_code = 500

    def __init__(self, detail: str, message: str = "Failed to fetch games"):
        super().__init__(message)
        self.detail = detail

    def relabel(self, message: str) -> "UpstreamFetchFailed":
        return UpstreamFetchFailed(self.detail, message=message)


def register_exception_handlers(app: FastAPI) -> None:
    """Register centralized exception handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("Request failed",
                         path=request.url.path,
                         error_type=type(exc).__name__,
                         detail=getattr(exc, "detail", exc.message))
        return JSONResponse(exc.to_dict(), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(_request: Request, exc: RequestValidationError):
        return JSONResponse(
            {"message": "Richiesta non valida", "errors": jsonable_encoder(exc.errors())},
            status_code=400,
        )
