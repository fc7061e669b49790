from __future__ import annotations

from functools import lru_cache
from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="PLAYLISTGEN_", extra="allow")

    environment: str = "development"
    log_level: str = "INFO"
    redis_url: str = "redis://redis:6379/0"
    service_token: str = ""
    http_timeout_seconds: float = 15.0
    http_retries: int = 3
    allow_origins: List[str] = ["*"]
    share_base_url: str = "http://localhost:3000"
    favorites_key_prefix: str = "favorites"
    favorites_lock_wait_seconds: float = 5.0

    # generation tuning
    playlist_size: int = 30
    primary_query_limit: int = 20
    variation_query_limit: int = 15
    genre_fallback_limit: int = 20
    genre_fallback_count: int = 3
    genre_fallback_threshold: int = 15
    top_tracks_threshold: int = 10
    top_tracks_fetch_limit: int = 15
    top_tracks_take: int = 10

    @field_validator("share_base_url", mode="before")
    @classmethod
    def _strip_trailing_slash(cls, v: str) -> str:
        return str(v).rstrip("/")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
