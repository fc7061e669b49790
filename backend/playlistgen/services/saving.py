from __future__ import annotations

import logging
from typing import Any, Dict, Sequence

from ..catalog.client import CatalogClient, CatalogError, PermissionDenied, TokenExpired

logger = logging.getLogger("playlist.save")


class PlaylistSaveError(Exception):
    """A user-requested catalog write failed; ``str(exc)`` is safe to show."""

    def __init__(self, message: str, *, cause: CatalogError | None = None) -> None:
        super().__init__(message)
        self.cause = cause


def _user_message(exc: CatalogError, action: str) -> str:
    if isinstance(exc, (TokenExpired, PermissionDenied)):
        return str(exc)
    return f"Failed to {action}"


async def save_playlist(
    client: CatalogClient,
    *,
    name: str,
    tracks: Sequence[Dict[str, Any]],
    description: str = "",
    public: bool = True,
) -> Dict[str, Any]:
    uris = [track["uri"] for track in tracks if track.get("uri")]
    try:
        playlist = await client.create_playlist(name, description, public)
    except CatalogError as exc:
        logger.error("Creating playlist %r failed: %s", name, exc)
        raise PlaylistSaveError(_user_message(exc, "create playlist"), cause=exc) from exc

    playlist_id = playlist.get("id")
    if not playlist_id:
        raise PlaylistSaveError("Failed to create playlist")

    if uris:
        try:
            await client.add_tracks_to_playlist(playlist_id, uris)
        except CatalogError as exc:
            logger.error("Adding %s tracks to %s failed: %s", len(uris), playlist_id, exc)
            raise PlaylistSaveError(_user_message(exc, "add tracks to playlist"), cause=exc) from exc

    logger.info("Saved playlist %s with %s tracks", playlist_id, len(uris))
    return {
        "id": playlist_id,
        "name": playlist.get("name") or name,
        "external_url": (playlist.get("external_urls") or {}).get("spotify"),
        "track_count": len(uris),
    }


async def delete_playlist(client: CatalogClient, playlist_id: str) -> None:
    try:
        await client.delete_playlist(playlist_id)
    except CatalogError as exc:
        logger.error("Deleting playlist %s failed: %s", playlist_id, exc)
        raise PlaylistSaveError(_user_message(exc, "delete playlist"), cause=exc) from exc
