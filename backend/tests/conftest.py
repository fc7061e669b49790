from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Sequence

import pytest

from playlistgen.core.config import Settings


def make_track(track_id: str, **overrides: Any) -> Dict[str, Any]:
    track = {
        "id": track_id,
        "name": f"Song {track_id}",
        "artists": [{"name": f"Artist {track_id}"}],
        "album": {"name": f"Album {track_id}", "images": [], "release_date": "1999-05-01"},
        "duration_ms": 200000,
        "popularity": 50,
        "preview_url": None,
        "uri": f"spotify:track:{track_id}",
    }
    track.update(overrides)
    return track


def make_tracks(prefix: str, count: int) -> List[Dict[str, Any]]:
    return [make_track(f"{prefix}{index}") for index in range(count)]


@dataclass(slots=True)
class StubCatalog:
    responder: Callable[[Dict[str, Any]], List[Dict[str, Any]]] = lambda call: []
    top_tracks: List[Dict[str, Any]] = field(default_factory=list)
    top_tracks_error: Exception | None = None
    calls: List[Dict[str, Any]] = field(default_factory=list)
    top_track_limits: List[int] = field(default_factory=list)

    async def get_recommendations(
        self,
        seed_artists: Sequence[str],
        seed_genres: Sequence[str],
        seed_tracks: Sequence[str],
        target_params: Mapping[str, Any] | None = None,
        limit: int = 20,
    ) -> List[Dict[str, Any]]:
        call = {
            "seed_artists": list(seed_artists),
            "seed_genres": list(seed_genres),
            "seed_tracks": list(seed_tracks),
            "target_params": dict(target_params or {}),
            "limit": limit,
        }
        self.calls.append(call)
        return list(self.responder(call))

    async def get_user_top_tracks(self, limit: int = 20, time_range: str = "medium_term") -> List[Dict[str, Any]]:
        self.top_track_limits.append(limit)
        if self.top_tracks_error is not None:
            raise self.top_tracks_error
        return list(self.top_tracks)


@pytest.fixture
def settings() -> Settings:
    return Settings(redis_url="redis://localhost:6379/15", service_token="")
