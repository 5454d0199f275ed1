"""
FastAPI backend for the Gameshelf game catalog.

Proxies and caches the RAWG catalog, and keeps user accounts and favorite
games in process memory.
"""

from contextlib import asynccontextmanager
from typing import Optional

from dependency_injector import providers
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from core.config import Settings
from core.container import Container
from core.exceptions import register_exception_handlers
from core.health import get_health_status, set_startup_time
from core.logging import configure_logging, get_logger
from middleware.auth import AuthMiddleware
from routers import auth, favorites, games

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    container: Container = app.state.container
    settings = container.settings()

    logger.info("Starting Gameshelf API", debug=settings.debug)
    if not settings.rawg_api_key:
        logger.warning("RAWG_API_KEY is not set; catalog requests will likely be rejected upstream")

    set_startup_time()
    await container.cleanup().start()
    logger.info("Services started successfully")
    yield

    await container.cleanup().stop()
    await container.rawg_client().aclose()
    logger.info("Services shutdown complete")


class CatchAllExceptionsMiddleware(BaseHTTPMiddleware):
    """Last-resort 500 for anything the exception handlers did not map."""

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as e:
            logger.error(f"Unhandled exception: {type(e).__name__}: {str(e)}",
                         path=request.url.path, exc_info=True)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"message": "Internal server error"}
            )


def create_app(settings: Optional[Settings] = None, container: Optional[Container] = None) -> FastAPI:
    """Build the application around its own container.

    Passing ``settings`` overrides environment configuration; passing a
    ``container`` lets callers pre-override providers (e.g. the upstream client).
    """
    container = container or Container()
    if settings is not None:
        container.settings.override(providers.Object(settings))
    settings = container.settings()

    configure_logging(settings)

    app = FastAPI(
        title="Gameshelf API",
        version="1.0.0",
        description="Cached game catalog proxy with user accounts and favorites",
        lifespan=lifespan,
    )
    app.state.container = container

    register_exception_handlers(app)

    # Added last so it wraps AuthMiddleware; CORS stays outermost
    app.add_middleware(AuthMiddleware)
    app.add_middleware(CatchAllExceptionsMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth.router)
    app.include_router(favorites.router)
    app.include_router(games.router)

    @app.get("/health")
    async def health_check(request: Request):
        return get_health_status(request.app.state.container)

    return app


if __name__ == "__main__":
    import uvicorn

    settings = Settings()
    configure_logging(settings)
    logger.info("Starting Gameshelf API",
                host=settings.host, port=settings.port, debug=settings.debug)
    # Single process: cache, accounts and sessions live in memory
    uvicorn.run(
        "main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
