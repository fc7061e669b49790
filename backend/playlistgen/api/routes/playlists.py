from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...catalog.client import CatalogClient, CatalogError
from ...core.config import Settings
from ...core.security import verify_service_token
from ...schemas.playlists import (
    AddMoreRequest,
    PlaylistResponse,
    PresetsResponse,
    RemoveTrackRequest,
    ReorderRequest,
    SavePlaylistRequest,
    SavePlaylistResponse,
    SharedPlaylistResponse,
    ShareRequest,
    ShareResponse,
    dump_tracks,
)
from ...schemas.preferences import PreferenceSet
from ...services import playlist_ops
from ...services.generator import PlaylistGenerator
from ...services.saving import PlaylistSaveError, delete_playlist, save_playlist
from ...services.sharing import build_share_url, load_shared_playlist
from ..deps import catalog_http_error, get_catalog_client, get_generator, get_settings_dep

router = APIRouter(prefix="/v1", tags=["playlists"], dependencies=[Depends(verify_service_token)])


@router.get("/presets", response_model=PresetsResponse)
async def get_presets() -> PresetsResponse:
    return PresetsResponse(genres=CatalogClient.available_genres())


@router.post("/playlists/generate", response_model=PlaylistResponse)
async def generate_playlist(
    preferences: PreferenceSet,
    generator: PlaylistGenerator = Depends(get_generator),
) -> PlaylistResponse:
    return PlaylistResponse(tracks=await generator.generate(preferences))


@router.post("/playlists/refresh", response_model=PlaylistResponse)
async def refresh_playlist(
    preferences: PreferenceSet,
    generator: PlaylistGenerator = Depends(get_generator),
) -> PlaylistResponse:
    return PlaylistResponse(tracks=await playlist_ops.refresh(generator, preferences))


@router.post("/playlists/add-more", response_model=PlaylistResponse)
async def add_more_tracks(
    payload: AddMoreRequest,
    generator: PlaylistGenerator = Depends(get_generator),
) -> PlaylistResponse:
    tracks = await playlist_ops.add_more(generator, payload.preferences, dump_tracks(payload.playlist))
    return PlaylistResponse(tracks=tracks)


@router.post("/playlists/remove", response_model=PlaylistResponse)
async def remove_track(payload: RemoveTrackRequest) -> PlaylistResponse:
    return PlaylistResponse(tracks=playlist_ops.remove_track(dump_tracks(payload.playlist), payload.track_id))


@router.post("/playlists/reorder", response_model=PlaylistResponse)
async def reorder_tracks(payload: ReorderRequest) -> PlaylistResponse:
    return PlaylistResponse(tracks=playlist_ops.reorder(dump_tracks(payload.playlist), dump_tracks(payload.order)))


@router.post("/playlists/save", response_model=SavePlaylistResponse, status_code=status.HTTP_201_CREATED)
async def save_to_catalog(
    payload: SavePlaylistRequest,
    client: CatalogClient = Depends(get_catalog_client),
) -> SavePlaylistResponse:
    try:
        saved = await save_playlist(
            client,
            name=payload.name,
            description=payload.description,
            public=payload.public,
            tracks=dump_tracks(payload.tracks),
        )
    except PlaylistSaveError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    return SavePlaylistResponse(**saved)


@router.delete("/playlists/{playlist_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_catalog_playlist(
    playlist_id: str,
    client: CatalogClient = Depends(get_catalog_client),
) -> None:
    try:
        await delete_playlist(client, playlist_id)
    except PlaylistSaveError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc


@router.post("/playlists/share", response_model=ShareResponse)
async def share_playlist(
    payload: ShareRequest,
    settings: Settings = Depends(get_settings_dep),
) -> ShareResponse:
    return ShareResponse(url=build_share_url(settings.share_base_url, dump_tracks(payload.tracks), payload.name))


@router.get("/shared-playlist", response_model=SharedPlaylistResponse)
async def get_shared_playlist(
    tracks: str = Query(..., min_length=1),
    name: str | None = None,
    client: CatalogClient = Depends(get_catalog_client),
) -> SharedPlaylistResponse:
    try:
        shared = await load_shared_playlist(client, tracks, name)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    except CatalogError as exc:
        raise catalog_http_error(exc) from exc
    return SharedPlaylistResponse(**shared)
