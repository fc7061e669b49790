from __future__ import annotations

import asyncio
import json
import logging
from functools import lru_cache
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol, Set

from redis.asyncio import Redis

from ..cache.redis import redis_lock
from ..catalog.client import CatalogClient

logger = logging.getLogger("favorites")

Track = Dict[str, Any]
# returns the new list, or None to leave the stored one untouched
Mutation = Callable[[List[Track]], Optional[List[Track]]]


class FavoritesStore(Protocol):
    async def load(self, user_id: str) -> List[Track]:
        ...

    async def update(self, user_id: str, mutate: Mutation) -> List[Track]:
        ...


class FavoritesSync(Protocol):
    async def save(self, track_id: str) -> None:
        ...

    async def remove(self, track_id: str) -> None:
        ...


class RedisFavoritesStore:
    def __init__(self, redis: Redis, *, key_prefix: str = "favorites", lock_wait: float = 5.0) -> None:
        self.redis = redis
        self.key_prefix = key_prefix
        self.lock_wait = lock_wait

    def _key(self, user_id: str) -> str:
        return f"{self.key_prefix}:{user_id}"

    async def load(self, user_id: str) -> List[Track]:
        raw = await self.redis.get(self._key(user_id))
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except (TypeError, ValueError):
            logger.warning("Discarding unreadable favorites for %s", user_id)
            return []
        return [item for item in data if isinstance(item, dict)] if isinstance(data, list) else []

    async def save(self, user_id: str, tracks: List[Track]) -> None:
        await self.redis.set(self._key(user_id), json.dumps(tracks))

    async def update(self, user_id: str, mutate: Mutation) -> List[Track]:
        """Read, mutate and write back under a per-user lock."""
        async with redis_lock(self.redis, f"{self._key(user_id)}:lock", wait=self.lock_wait):
            current = await self.load(user_id)
            updated = mutate(current)
            if updated is None:
                return current
            await self.save(user_id, updated)
            return updated


class CatalogFavoritesSync:
    """Mirrors favorites into the user's saved tracks with a client of its own,
    so a sync can outlive the request that triggered it."""

    def __init__(self, access_token: str, *, timeout: float = 15.0, retries: int = 1) -> None:
        self.access_token = access_token
        self.timeout = timeout
        self.retries = retries

    async def save(self, track_id: str) -> None:
        async with CatalogClient(self.access_token, timeout=self.timeout, retries=self.retries) as client:
            await client.save_tracks([track_id])

    async def remove(self, track_id: str) -> None:
        async with CatalogClient(self.access_token, timeout=self.timeout, retries=self.retries) as client:
            await client.remove_saved_tracks([track_id])


class SyncTracker:
    """Remote syncs still in flight. Failures are logged, never raised."""

    def __init__(self) -> None:
        self._pending: Set[asyncio.Task[None]] = set()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def spawn(self, sync: Awaitable[None], action: str, track_id: str) -> None:
        async def _run() -> None:
            try:
                await sync
            except Exception as exc:
                logger.warning("Favorite %s sync failed for %s: %s", action, track_id, exc)

        task = asyncio.create_task(_run())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def drain(self) -> None:
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


@lru_cache(maxsize=1)
def get_sync_tracker() -> SyncTracker:
    return SyncTracker()


class FavoritesRepository:
    def __init__(
        self,
        store: FavoritesStore,
        remote: FavoritesSync | None,
        user_id: str,
        *,
        tracker: SyncTracker | None = None,
    ) -> None:
        self.store = store
        self.remote = remote
        self.user_id = user_id
        self.tracker = tracker if tracker is not None else SyncTracker()

    async def get(self) -> List[Track]:
        return await self.store.load(self.user_id)

    async def is_favorite(self, track_id: str) -> bool:
        return any(track.get("id") == track_id for track in await self.get())

    async def add(self, track: Track) -> List[Track]:
        added = False

        def _add(favorites: List[Track]) -> Optional[List[Track]]:
            nonlocal added
            if any(item.get("id") == track.get("id") for item in favorites):
                return None
            added = True
            return [*favorites, track]

        updated = await self.store.update(self.user_id, _add)
        if added and self.remote is not None:
            self.tracker.spawn(self.remote.save(track["id"]), "save", track["id"])
        return updated

    async def remove(self, track_id: str) -> List[Track]:
        def _remove(favorites: List[Track]) -> Optional[List[Track]]:
            kept = [item for item in favorites if item.get("id") != track_id]
            return kept if len(kept) != len(favorites) else None

        updated = await self.store.update(self.user_id, _remove)
        if self.remote is not None:
            self.tracker.spawn(self.remote.remove(track_id), "remove", track_id)
        return updated

    async def toggle(self, track: Track) -> bool:
        track_id = track["id"]
        favorite = False

        def _toggle(favorites: List[Track]) -> List[Track]:
            nonlocal favorite
            kept = [item for item in favorites if item.get("id") != track_id]
            favorite = len(kept) == len(favorites)
            return [*favorites, track] if favorite else kept

        await self.store.update(self.user_id, _toggle)
        if self.remote is not None:
            if favorite:
                self.tracker.spawn(self.remote.save(track_id), "save", track_id)
            else:
                self.tracker.spawn(self.remote.remove(track_id), "remove", track_id)
        return favorite

    async def drain(self) -> None:
        await self.tracker.drain()
