from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DECADE_RE = re.compile(r"^\d{4}$")
MOOD_FIELDS = ("energy", "valence", "danceability", "acousticness")


class ArtistRef(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: Optional[str] = None


class TrackRef(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: Optional[str] = None


class Mood(BaseModel):
    energy: Optional[int] = Field(default=None, ge=0, le=100)
    valence: Optional[int] = Field(default=None, ge=0, le=100)
    danceability: Optional[int] = Field(default=None, ge=0, le=100)
    acousticness: Optional[int] = Field(default=None, ge=0, le=100)

    def defined(self) -> Dict[str, int]:
        return {name: value for name in MOOD_FIELDS if (value := getattr(self, name)) is not None}


class PopularityRange(BaseModel):
    # min <= max is the caller's responsibility
    min: int = Field(default=0, ge=0, le=100)
    max: int = Field(default=100, ge=0, le=100)


class PreferenceSet(BaseModel):
    """Everything the UI widgets collected; every field defaults to "no preference"."""

    artists: List[ArtistRef] = []
    tracks: List[TrackRef] = []
    genres: List[str] = []
    decades: List[str] = []
    mood: Mood = Mood()
    popularity: PopularityRange = PopularityRange()

    @model_validator(mode="before")
    @classmethod
    def _fill_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = {key: value for key, value in data.items() if value is not None}
        popularity = data.get("popularity")
        if isinstance(popularity, (list, tuple)) and len(popularity) == 2:
            data["popularity"] = {"min": popularity[0], "max": popularity[1]}
        return data

    @field_validator("genres")
    @classmethod
    def _clean_genres(cls, value: List[str]) -> List[str]:
        return [genre.strip() for genre in value if genre and genre.strip()]

    @field_validator("decades")
    @classmethod
    def _validate_decades(cls, value: List[str]) -> List[str]:
        for decade in value:
            if not DECADE_RE.match(decade):
                raise ValueError(f"decade must be a 4-digit year, got {decade!r}")
        return value

    def artist_ids(self) -> List[str]:
        return [artist.id for artist in self.artists if artist.id]

    def track_ids(self) -> List[str]:
        return [track.id for track in self.tracks if track.id]


MOOD_PRESETS: Dict[str, Dict[str, int]] = {
    "happy": {"energy": 70, "valence": 80, "danceability": 70},
    "sad": {"energy": 30, "valence": 20, "danceability": 30},
    "energetic": {"energy": 90, "valence": 60, "danceability": 80},
    "chill": {"energy": 40, "valence": 60, "danceability": 40},
}

POPULARITY_PRESETS: Dict[str, Dict[str, Any]] = {
    "all": {"min": 0, "max": 100, "description": "Any popularity"},
    "mainstream": {"min": 80, "max": 100, "description": "Chart-toppers"},
    "popular": {"min": 50, "max": 80, "description": "Well-known"},
    "underground": {"min": 0, "max": 50, "description": "Hidden gems"},
}
