from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Mapping

from ..schemas.preferences import PreferenceSet

MAX_TOTAL_SEEDS = 5

PRIMARY_ARTISTS = 2
PRIMARY_GENRES = 2
PRIMARY_TRACKS = 1
VARIATION_ARTISTS = 3
VARIATION_GENRES = 2


@dataclass(slots=True, frozen=True)
class RecommendationQuery:
    seed_artists: List[str] = field(default_factory=list)
    seed_genres: List[str] = field(default_factory=list)
    seed_tracks: List[str] = field(default_factory=list)
    target_params: Dict[str, Any] = field(default_factory=dict)
    limit: int = 20

    @property
    def seed_count(self) -> int:
        return len(self.seed_artists) + len(self.seed_genres) + len(self.seed_tracks)

    def bounded(self, cap: int = MAX_TOTAL_SEEDS) -> "RecommendationQuery":
        """Truncate seeds to the combined cap, keeping artists, then genres, then tracks."""
        remaining = cap
        artists = self.seed_artists[:remaining]
        remaining -= len(artists)
        genres = self.seed_genres[:remaining]
        remaining -= len(genres)
        tracks = self.seed_tracks[:remaining]
        return replace(self, seed_artists=artists, seed_genres=genres, seed_tracks=tracks)


def _dedupe(values: List[str]) -> List[str]:
    return list(dict.fromkeys(value for value in values if value))


def select_seed_queries(
    preferences: PreferenceSet,
    *,
    target_params: Mapping[str, Any] | None = None,
    primary_limit: int = 20,
    variation_limit: int = 15,
) -> List[RecommendationQuery]:
    """Fan the preference seeds out into at most three bounded queries.

    Earlier-added preferences win; nothing is scored. The first query takes the
    leading artists, genres and track. A second, track-less query is added when
    the preferences hold more seed material than the first query could carry,
    and a third one uses genres three and four when more than two genres exist.
    """
    artists = _dedupe(preferences.artist_ids())
    genres = _dedupe(list(preferences.genres))
    tracks = _dedupe(preferences.track_ids())
    params = dict(target_params or {})

    total = len(artists) + len(genres) + len(tracks)
    if total == 0:
        return []

    primary = RecommendationQuery(
        seed_artists=artists[:PRIMARY_ARTISTS],
        seed_genres=genres[:PRIMARY_GENRES],
        seed_tracks=tracks[:PRIMARY_TRACKS],
        target_params=params,
        limit=primary_limit,
    ).bounded()
    queries = [primary]

    if total > primary.seed_count:
        variation = RecommendationQuery(
            seed_artists=artists[:VARIATION_ARTISTS],
            seed_genres=genres[:VARIATION_GENRES],
            target_params=params,
            limit=variation_limit,
        ).bounded()
        if variation.seed_count:
            queries.append(variation)

    if len(genres) > PRIMARY_GENRES:
        queries.append(
            RecommendationQuery(
                seed_artists=artists[:PRIMARY_ARTISTS],
                seed_genres=genres[PRIMARY_GENRES:PRIMARY_GENRES + 2],
                target_params=params,
                limit=variation_limit,
            ).bounded()
        )

    return queries
