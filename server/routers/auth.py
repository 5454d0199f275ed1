"""Authentication routes for registration, login and session management."""

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel

from core.config import Settings
from core.exceptions import NotFound
from core.logging import get_logger
from models.auth import User
from routers.deps import get_current_user_id, get_settings, get_user_auth_service, get_user_store
from services.user_auth import UserAuthService
from services.user_store import UserStore

logger = get_logger(__name__)
router = APIRouter(prefix="/api/auth", tags=["auth"])


class RegisterRequest(BaseModel):
    # Plain strings: shape checks happen in UserAuthService.register
    email: str = ""
    username: str = ""
    password: str = ""


class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


def _set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
        max_age=settings.session_expire_minutes * 60
    )


def _start_session(user: User, response: Response, user_auth: UserAuthService, settings: Settings) -> None:
    token = user_auth.create_session_token(user)
    _set_session_cookie(response, token, settings)


@router.post("/register", status_code=201)
async def register(
    request: RegisterRequest,
    response: Response,
    user_auth: UserAuthService = Depends(get_user_auth_service),
    settings: Settings = Depends(get_settings)
):
    """Create an account and log it in."""
    user = await user_auth.register(
        email=request.email,
        username=request.username,
        password=request.password
    )
    _start_session(user, response, user_auth, settings)

    return {
        "message": "Registrazione completata con successo",
        "user": user.to_public()
    }


@router.post("/login")
async def login(
    request: LoginRequest,
    response: Response,
    user_auth: UserAuthService = Depends(get_user_auth_service),
    settings: Settings = Depends(get_settings)
):
    """
    Login with email and password.
    Sets an HttpOnly session cookie.
    """
    user = await user_auth.login(email=request.email, password=request.password)
    _start_session(user, response, user_auth, settings)

    return {
        "message": "Login effettuato con successo",
        "user": user.to_public()
    }


@router.get("/logout")
async def logout(
    request: Request,
    response: Response,
    user_auth: UserAuthService = Depends(get_user_auth_service),
    settings: Settings = Depends(get_settings)
):
    """Destroy the server-side session and clear the cookie."""
    user_auth.logout(request.cookies.get(settings.session_cookie_name))

    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite
    )
    return {"message": "Logout effettuato con successo"}


@router.get("/user")
async def get_current_user(
    user_id: int = Depends(get_current_user_id),
    users: UserStore = Depends(get_user_store)
):
    """Profile of the logged-in user, without the password hash."""
    user = await users.get_user_by_id(user_id)
    if not user:
        raise NotFound("Utente non trovato")
    return user.to_public()
