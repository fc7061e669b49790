from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import lru_cache

from redis.asyncio import Redis

from ..core.config import get_settings


class LockTimeout(RuntimeError):
    pass


@lru_cache(maxsize=1)
def get_redis_client() -> Redis:
    # from_url does not connect; the pool opens lazily on first command
    return Redis.from_url(get_settings().redis_url, encoding="utf-8", decode_responses=True)


async def get_redis() -> AsyncIterator[Redis]:
    # shared pool, left open for reuse across requests
    yield get_redis_client()


async def close_redis() -> None:
    if get_redis_client.cache_info().currsize:
        await get_redis_client().aclose()
        get_redis_client.cache_clear()


async def acquire_lock(redis: Redis, key: str, *, ttl: int = 10) -> bool:
    return bool(await redis.set(name=key, value="1", nx=True, ex=ttl))


async def release_lock(redis: Redis, key: str) -> None:
    await redis.delete(key)


@asynccontextmanager
async def redis_lock(
    redis: Redis,
    key: str,
    *,
    ttl: int = 10,
    wait: float = 5.0,
    poll: float = 0.02,
) -> AsyncIterator[None]:
    """Hold ``key`` exclusively, polling until it frees up or ``wait`` runs out.

    The TTL bounds how long a crashed holder can block others.
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + wait
    while not await acquire_lock(redis, key, ttl=ttl):
        if loop.time() >= deadline:
            raise LockTimeout(f"timed out waiting for {key}")
        await asyncio.sleep(poll)
    try:
        yield
    finally:
        await release_lock(redis, key)
