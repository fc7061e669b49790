from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, HTTPException, Request, status
from redis.asyncio import Redis

from ..cache.redis import get_redis
from ..catalog.client import ApiError, CatalogClient, CatalogError, NetworkError, PermissionDenied, TokenExpired
from ..core.config import Settings, get_settings
from ..core.security import extract_catalog_access_token
from ..services.favorites import (
    CatalogFavoritesSync,
    FavoritesRepository,
    RedisFavoritesStore,
    get_sync_tracker,
)
from ..services.generator import PlaylistGenerator
from ..services.randomizer import Randomizer, StdRandomizer


async def get_settings_dep() -> Settings:
    return get_settings()


async def get_redis_dep() -> AsyncIterator[Redis]:
    async for client in get_redis():
        yield client


def get_access_token(request: Request) -> str:
    return extract_catalog_access_token(request)


async def get_catalog_client(
    token: str = Depends(get_access_token),
    settings: Settings = Depends(get_settings_dep),
) -> AsyncIterator[CatalogClient]:
    client = CatalogClient(access_token=token, timeout=settings.http_timeout_seconds, retries=settings.http_retries)
    try:
        yield client
    finally:
        await client.close()


def get_randomizer() -> Randomizer:
    return StdRandomizer()


async def get_generator(
    client: CatalogClient = Depends(get_catalog_client),
    settings: Settings = Depends(get_settings_dep),
    randomizer: Randomizer = Depends(get_randomizer),
) -> PlaylistGenerator:
    return PlaylistGenerator(client, settings=settings, randomizer=randomizer)


def catalog_http_error(exc: CatalogError) -> HTTPException:
    if isinstance(exc, TokenExpired):
        return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))
    if isinstance(exc, PermissionDenied):
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
    if isinstance(exc, (ApiError, NetworkError)):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="catalog request failed")


async def get_favorites_repository(
    token: str = Depends(get_access_token),
    client: CatalogClient = Depends(get_catalog_client),
    redis: Redis = Depends(get_redis_dep),
    settings: Settings = Depends(get_settings_dep),
) -> FavoritesRepository:
    try:
        profile = await client.get_user_profile()
    except CatalogError as exc:
        raise catalog_http_error(exc) from exc
    user_id = profile.get("id")
    if not user_id:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="catalog profile missing id")
    store = RedisFavoritesStore(
        redis,
        key_prefix=settings.favorites_key_prefix,
        lock_wait=settings.favorites_lock_wait_seconds,
    )
    remote = CatalogFavoritesSync(token, timeout=settings.http_timeout_seconds)
    return FavoritesRepository(store, remote, user_id, tracker=get_sync_tracker())
