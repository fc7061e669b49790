from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Sequence

import httpx

from .genres import GENRE_SEEDS

API_BASE = "https://api.spotify.com/v1"

TrackPayload = Dict[str, Any]

logger = logging.getLogger("catalog.client")


class CatalogError(Exception):
    pass


class TokenExpired(CatalogError):
    def __init__(self, message: str = "Token expired. Please login again.") -> None:
        super().__init__(message)


class PermissionDenied(CatalogError):
    def __init__(self, message: str = "Permission denied. Please re-authenticate with required permissions.") -> None:
        super().__init__(message)


class ApiError(CatalogError):
    def __init__(self, status: int, detail: str = "") -> None:
        super().__init__(f"API Error: {status}")
        self.status = status
        self.detail = detail


class NetworkError(CatalogError):
    pass


def _chunks(items: Sequence[str], size: int) -> List[List[str]]:
    return [list(items[start: start + size]) for start in range(0, len(items), size)]


def _retry_after(response: httpx.Response) -> float:
    # only delta-seconds is honoured; an HTTP-date or junk falls back to 1s
    try:
        return max(0.0, float(response.headers.get("Retry-After", "1")))
    except ValueError:
        return 1.0


@dataclass(slots=True)
class CatalogClient:
    access_token: str
    timeout: float = 15.0
    retries: int = 3
    base_url: str = API_BASE
    transport: httpx.AsyncBaseTransport | None = None
    _client: httpx.AsyncClient | None = field(init=False, repr=False, default=None)

    def __post_init__(self) -> None:
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"Authorization": f"Bearer {self.access_token}", "Content-Type": "application/json"},
            timeout=self.timeout,
            transport=self.transport,
        )

    async def __aenter__(self) -> "CatalogClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: Dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        client = self._client
        if client is None:
            raise CatalogError("catalog client not initialized")

        # Strip leading slash to avoid double slashes with base_url
        clean_url = url.lstrip("/")
        attempts = max(1, self.retries)

        for attempt in range(1, attempts + 1):
            try:
                response = await client.request(method, clean_url, params=params, json=json)
            except httpx.RequestError as exc:
                if attempt == attempts:
                    raise NetworkError(f"network error: {exc}") from exc
                await asyncio.sleep(2 ** attempt)
                continue

            if response.status_code == 401:
                raise TokenExpired()

            if response.status_code == 403:
                raise PermissionDenied()

            if response.status_code == 429:
                if attempt == attempts:
                    break
                retry_after = _retry_after(response)
                logger.warning("Rate limited on %s %s, retrying in %ss", method, url, retry_after)
                await asyncio.sleep(retry_after)
                continue

            if response.status_code >= 400:
                detail = response.text
                logger.error("Catalog API %s %s -> %s %s", method, url, response.status_code, detail[:500])
                raise ApiError(response.status_code, detail)

            if response.content:
                return response.json()
            return {}

        raise ApiError(429, "max retries exceeded for catalog request")

    async def get_recommendations(
        self,
        seed_artists: Sequence[str],
        seed_genres: Sequence[str],
        seed_tracks: Sequence[str],
        target_params: Mapping[str, Any] | None = None,
        limit: int = 20,
    ) -> List[TrackPayload]:
        params: Dict[str, Any] = {}
        if seed_artists:
            params["seed_artists"] = ",".join(seed_artists)
        if seed_genres:
            params["seed_genres"] = ",".join(seed_genres)
        if seed_tracks:
            params["seed_tracks"] = ",".join(seed_tracks)
        params["limit"] = limit
        if target_params:
            params.update({key: value for key, value in target_params.items() if value is not None})

        logger.debug("Recommendations params: %s", params)
        payload = await self._request("GET", "/recommendations", params=params)
        return list(payload.get("tracks") or [])

    async def get_user_top_tracks(self, limit: int = 20, time_range: str = "medium_term") -> List[TrackPayload]:
        payload = await self._request("GET", "/me/top/tracks", params={"limit": limit, "time_range": time_range})
        return list(payload.get("items") or [])

    async def get_user_top_artists(self, limit: int = 20, time_range: str = "medium_term") -> List[Dict[str, Any]]:
        payload = await self._request("GET", "/me/top/artists", params={"limit": limit, "time_range": time_range})
        return list(payload.get("items") or [])

    async def get_user_profile(self) -> Dict[str, Any]:
        return await self._request("GET", "/me")

    async def search_artists(self, query: str, *, limit: int = 10) -> List[Dict[str, Any]]:
        if not query or not query.strip():
            return []
        payload = await self._request("GET", "/search", params={"type": "artist", "q": query, "limit": limit})
        return list((payload.get("artists") or {}).get("items") or [])

    async def search_tracks(self, query: str, *, limit: int = 20) -> List[TrackPayload]:
        if not query or not query.strip():
            return []
        payload = await self._request("GET", "/search", params={"type": "track", "q": query, "limit": limit})
        return list((payload.get("tracks") or {}).get("items") or [])

    async def get_artist_top_tracks(self, artist_id: str, market: str = "US") -> List[TrackPayload]:
        if not artist_id:
            return []
        payload = await self._request("GET", f"/artists/{artist_id}/top-tracks", params={"market": market})
        return list(payload.get("tracks") or [])

    async def get_user_playlists(self, limit: int = 50) -> List[Dict[str, Any]]:
        payload = await self._request("GET", "/me/playlists", params={"limit": limit})
        return list(payload.get("items") or [])

    async def get_user_saved_tracks(self, limit: int = 50) -> List[Dict[str, Any]]:
        payload = await self._request("GET", "/me/tracks", params={"limit": limit})
        return list(payload.get("items") or [])

    async def get_playlist(self, playlist_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/playlists/{playlist_id}")

    async def get_playlist_tracks(self, playlist_id: str) -> List[Dict[str, Any]]:
        payload = await self._request("GET", f"/playlists/{playlist_id}/tracks")
        return list(payload.get("items") or [])

    async def create_playlist(self, name: str, description: str = "", public: bool = True) -> Dict[str, Any]:
        return await self._request(
            "POST",
            "/me/playlists",
            json={"name": name, "description": description, "public": public},
        )

    async def add_tracks_to_playlist(self, playlist_id: str, track_uris: Sequence[str]) -> List[Dict[str, Any]]:
        snapshots: List[Dict[str, Any]] = []
        for chunk in _chunks(list(track_uris), 100):
            snapshots.append(await self._request("POST", f"/playlists/{playlist_id}/tracks", json={"uris": chunk}))
        return snapshots

    async def remove_track_from_playlist(self, playlist_id: str, track_uri: str) -> Dict[str, Any]:
        return await self._request(
            "DELETE",
            f"/playlists/{playlist_id}/tracks",
            json={"tracks": [{"uri": track_uri}]},
        )

    async def delete_playlist(self, playlist_id: str) -> bool:
        await self._request("DELETE", f"/playlists/{playlist_id}/followers")
        return True

    async def save_tracks(self, track_ids: Iterable[str]) -> None:
        await self._request("PUT", "/me/tracks", json={"ids": list(track_ids)})

    async def remove_saved_tracks(self, track_ids: Iterable[str]) -> None:
        await self._request("DELETE", "/me/tracks", json={"ids": list(track_ids)})

    async def check_saved_tracks(self, track_ids: Sequence[str]) -> List[bool]:
        if not track_ids:
            return []
        payload = await self._request("GET", "/me/tracks/contains", params={"ids": ",".join(track_ids)})
        return list(payload or [])

    async def get_tracks_by_ids(self, track_ids: Sequence[str]) -> List[TrackPayload]:
        chunks = _chunks(list(track_ids), 50)
        if not chunks:
            return []
        payloads = await asyncio.gather(
            *(self._request("GET", "/tracks", params={"ids": ",".join(chunk)}) for chunk in chunks)
        )
        return [track for payload in payloads for track in (payload.get("tracks") or []) if track]

    @staticmethod
    def available_genres() -> List[str]:
        return list(GENRE_SEEDS)
