from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .preferences import MOOD_PRESETS, POPULARITY_PRESETS, PreferenceSet


class CatalogTrack(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: Optional[str] = None
    artists: List[Dict[str, Any]] = []
    album: Optional[Dict[str, Any]] = None
    duration_ms: Optional[int] = None
    popularity: Optional[int] = None
    preview_url: Optional[str] = None
    uri: Optional[str] = None


def dump_tracks(tracks: List[CatalogTrack]) -> List[Dict[str, Any]]:
    return [track.model_dump() for track in tracks]


class PlaylistResponse(BaseModel):
    tracks: List[Dict[str, Any]] = []


class AddMoreRequest(BaseModel):
    preferences: PreferenceSet = PreferenceSet()
    playlist: List[CatalogTrack] = []


class RemoveTrackRequest(BaseModel):
    playlist: List[CatalogTrack]
    track_id: str


class ReorderRequest(BaseModel):
    playlist: List[CatalogTrack] = []
    order: List[CatalogTrack]


class SavePlaylistRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = ""
    public: bool = True
    tracks: List[CatalogTrack]


class SavePlaylistResponse(BaseModel):
    id: str
    name: str
    external_url: Optional[str] = None
    track_count: int = 0


class ShareRequest(BaseModel):
    name: str = "Shared Playlist"
    tracks: List[CatalogTrack]


class ShareResponse(BaseModel):
    url: str


class SharedPlaylistResponse(BaseModel):
    name: str
    tracks: List[Dict[str, Any]] = []


class AddCatalogTracksRequest(BaseModel):
    uris: List[str] = Field(..., min_length=1)


class RemoveCatalogTrackRequest(BaseModel):
    uri: str


class PresetsResponse(BaseModel):
    mood: Dict[str, Dict[str, int]] = MOOD_PRESETS
    popularity: Dict[str, Dict[str, Any]] = POPULARITY_PRESETS
    genres: List[str] = []


class FavoritesResponse(BaseModel):
    tracks: List[Dict[str, Any]] = []


class FavoriteToggleResponse(BaseModel):
    track_id: str
    favorite: bool


class HealthResponse(BaseModel):
    ok: bool = True
