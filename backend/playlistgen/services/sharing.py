from __future__ import annotations

from typing import Any, Dict, List, Sequence
from urllib.parse import urlencode

from ..catalog.client import CatalogClient
from ..catalog.parsing import parse_track_ids, split_track_list

DEFAULT_SHARED_NAME = "Shared Playlist"


def build_share_url(base_url: str, tracks: Sequence[Dict[str, Any]], name: str | None = None) -> str:
    track_ids = ",".join(track["id"] for track in tracks if track.get("id"))
    query = urlencode({"tracks": track_ids, "name": name or DEFAULT_SHARED_NAME}, safe=",")
    return f"{base_url.rstrip('/')}/shared-playlist?{query}"


async def load_shared_playlist(client: CatalogClient, raw_tracks: str, name: str | None = None) -> Dict[str, Any]:
    track_ids = parse_track_ids(split_track_list(raw_tracks))
    tracks: List[Dict[str, Any]] = await client.get_tracks_by_ids(track_ids) if track_ids else []
    return {"name": name or DEFAULT_SHARED_NAME, "tracks": tracks}
