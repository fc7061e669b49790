from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.routes import catalog, favorites, health, playlists
from .cache.redis import LockTimeout, close_redis
from .core.config import get_settings
from .core.logging import setup_logging
from .services.favorites import get_sync_tracker


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    await get_sync_tracker().drain()
    await close_redis()


async def _lock_timeout_handler(request: Request, exc: LockTimeout) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Favorites are being updated, please retry"},
    )


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level, environment=settings.environment)
    app = FastAPI(
        title="Playlist Generator Backend",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=True,
    )
    app.add_exception_handler(LockTimeout, _lock_timeout_handler)
    app.include_router(health.router)
    app.include_router(playlists.router)
    app.include_router(catalog.router)
    app.include_router(favorites.router)
    return app


app = create_app()
