from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Protocol, Sequence, Set

from ..catalog.client import CatalogError, TrackPayload
from ..catalog.genres import FALLBACK_GENRES
from ..core.config import Settings, get_settings
from ..schemas.preferences import PreferenceSet
from .finalizer import finalize
from .params import build_target_params
from .randomizer import Randomizer, StdRandomizer, sample
from .seeds import RecommendationQuery, select_seed_queries

logger = logging.getLogger("playlist.generator")


class RecommendationSource(Protocol):
    async def get_recommendations(
        self,
        seed_artists: Sequence[str],
        seed_genres: Sequence[str],
        seed_tracks: Sequence[str],
        target_params: Mapping[str, Any] | None = None,
        limit: int = 20,
    ) -> List[TrackPayload]:
        ...

    async def get_user_top_tracks(self, limit: int = 20, time_range: str = "medium_term") -> List[TrackPayload]:
        ...


@dataclass(slots=True)
class TrackAccumulator:
    """Unique tracks keyed by id, in first-seen order."""

    tracks: List[TrackPayload] = field(default_factory=list)
    seen: Set[str] = field(default_factory=set)

    def merge(self, batch: Iterable[TrackPayload]) -> int:
        added = 0
        for track in batch:
            track_id = track.get("id") if isinstance(track, dict) else None
            if not track_id or track_id in self.seen:
                continue
            self.seen.add(track_id)
            self.tracks.append(track)
            added += 1
        return added

    def __len__(self) -> int:
        return len(self.tracks)


class PlaylistGenerator:
    def __init__(
        self,
        client: RecommendationSource,
        *,
        settings: Settings | None = None,
        randomizer: Randomizer | None = None,
        current_year: int | None = None,
    ) -> None:
        self.client = client
        self.settings = settings or get_settings()
        self.randomizer = randomizer or StdRandomizer()
        self.current_year = current_year

    async def generate(self, preferences: PreferenceSet) -> List[TrackPayload]:
        """Best-effort playlist for ``preferences``; an upstream outage yields ``[]``, never an exception."""
        try:
            return await self._generate(preferences)
        except Exception:
            logger.exception("Playlist generation failed unexpectedly")
            return []

    async def _generate(self, preferences: PreferenceSet) -> List[TrackPayload]:
        settings = self.settings
        target_params = build_target_params(preferences, current_year=self.current_year)
        queries = select_seed_queries(
            preferences,
            target_params=target_params,
            primary_limit=settings.primary_query_limit,
            variation_limit=settings.variation_query_limit,
        )
        pool = TrackAccumulator()

        if queries:
            results = await asyncio.gather(*(self._fetch(query) for query in queries))
            for batch in results:
                pool.merge(batch)
            logger.info("Seeded stage: %s queries, %s unique tracks", len(queries), len(pool))

        if not queries or len(pool) < settings.genre_fallback_threshold:
            genres = sample(FALLBACK_GENRES, settings.genre_fallback_count, self.randomizer)
            fallback = RecommendationQuery(
                seed_genres=genres,
                target_params=target_params,
                limit=settings.genre_fallback_limit,
            )
            added = pool.merge(await self._fetch(fallback))
            logger.info("Genre fallback %s added %s tracks (%s total)", genres, added, len(pool))

        if len(pool) < settings.top_tracks_threshold:
            top_tracks = await self._fetch_top_tracks()
            picked = sample(top_tracks, settings.top_tracks_take, self.randomizer)
            added = pool.merge(picked)
            logger.info("Top-tracks fallback added %s tracks (%s total)", added, len(pool))

        if not pool.tracks:
            logger.warning("Playlist generation produced no tracks")
        return finalize(pool.tracks, self.randomizer, settings.playlist_size)

    async def _fetch(self, query: RecommendationQuery) -> List[TrackPayload]:
        try:
            return await self.client.get_recommendations(
                query.seed_artists,
                query.seed_genres,
                query.seed_tracks,
                query.target_params,
                query.limit,
            )
        except CatalogError as exc:
            logger.warning(
                "Recommendations failed (artists=%s, genres=%s, tracks=%s): %s",
                query.seed_artists,
                query.seed_genres,
                query.seed_tracks,
                exc,
            )
        except Exception:
            logger.exception("Unexpected recommendations failure for genres=%s", query.seed_genres)
        return []

    async def _fetch_top_tracks(self) -> List[TrackPayload]:
        try:
            return await self.client.get_user_top_tracks(self.settings.top_tracks_fetch_limit)
        except CatalogError as exc:
            logger.warning("Top tracks unavailable: %s", exc)
        except Exception:
            logger.exception("Unexpected top tracks failure")
        return []
