from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...catalog.client import CatalogClient, CatalogError
from ...catalog.parsing import parse_track_ids, split_track_list
from ...core.security import verify_service_token
from ...schemas.playlists import AddCatalogTracksRequest, RemoveCatalogTrackRequest
from ..deps import catalog_http_error, get_catalog_client

router = APIRouter(prefix="/v1", tags=["catalog"], dependencies=[Depends(verify_service_token)])


@router.get("/me")
async def get_profile(client: CatalogClient = Depends(get_catalog_client)) -> Dict[str, Any]:
    try:
        return await client.get_user_profile()
    except CatalogError as exc:
        raise catalog_http_error(exc) from exc


@router.get("/me/top/tracks")
async def get_top_tracks(
    limit: int = Query(20, ge=1, le=50),
    time_range: str = Query("medium_term", pattern="^(short_term|medium_term|long_term)$"),
    client: CatalogClient = Depends(get_catalog_client),
) -> List[Dict[str, Any]]:
    try:
        return await client.get_user_top_tracks(limit, time_range)
    except CatalogError as exc:
        raise catalog_http_error(exc) from exc


@router.get("/me/playlists")
async def get_playlists(
    limit: int = Query(50, ge=1, le=50),
    client: CatalogClient = Depends(get_catalog_client),
) -> List[Dict[str, Any]]:
    try:
        return await client.get_user_playlists(limit)
    except CatalogError as exc:
        raise catalog_http_error(exc) from exc


@router.get("/me/top/artists")
async def get_top_artists(
    limit: int = Query(20, ge=1, le=50),
    time_range: str = Query("medium_term", pattern="^(short_term|medium_term|long_term)$"),
    client: CatalogClient = Depends(get_catalog_client),
) -> List[Dict[str, Any]]:
    try:
        return await client.get_user_top_artists(limit, time_range)
    except CatalogError as exc:
        raise catalog_http_error(exc) from exc


@router.get("/me/tracks")
async def get_saved_tracks(
    limit: int = Query(50, ge=1, le=50),
    client: CatalogClient = Depends(get_catalog_client),
) -> List[Dict[str, Any]]:
    try:
        return await client.get_user_saved_tracks(limit)
    except CatalogError as exc:
        raise catalog_http_error(exc) from exc


@router.get("/me/tracks/contains")
async def check_saved_tracks(
    ids: str = "",
    client: CatalogClient = Depends(get_catalog_client),
) -> Dict[str, bool]:
    try:
        track_ids = parse_track_ids(split_track_list(ids))
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    try:
        flags = await client.check_saved_tracks(track_ids)
    except CatalogError as exc:
        raise catalog_http_error(exc) from exc
    return dict(zip(track_ids, flags))


@router.get("/artists/{artist_id}/top-tracks")
async def get_artist_top_tracks(
    artist_id: str,
    market: str = Query("US", min_length=2, max_length=2),
    client: CatalogClient = Depends(get_catalog_client),
) -> List[Dict[str, Any]]:
    try:
        return await client.get_artist_top_tracks(artist_id, market)
    except CatalogError as exc:
        raise catalog_http_error(exc) from exc


@router.get("/search/artists")
async def search_artists(
    q: str = "",
    client: CatalogClient = Depends(get_catalog_client),
) -> List[Dict[str, Any]]:
    try:
        return await client.search_artists(q)
    except CatalogError as exc:
        raise catalog_http_error(exc) from exc


@router.get("/search/tracks")
async def search_tracks(
    q: str = "",
    client: CatalogClient = Depends(get_catalog_client),
) -> List[Dict[str, Any]]:
    try:
        return await client.search_tracks(q)
    except CatalogError as exc:
        raise catalog_http_error(exc) from exc


@router.get("/genres")
async def list_genres() -> List[str]:
    return CatalogClient.available_genres()


@router.get("/catalog/playlists/{playlist_id}")
async def get_playlist(
    playlist_id: str,
    client: CatalogClient = Depends(get_catalog_client),
) -> Dict[str, Any]:
    try:
        return await client.get_playlist(playlist_id)
    except CatalogError as exc:
        raise catalog_http_error(exc) from exc


@router.get("/catalog/playlists/{playlist_id}/tracks")
async def get_playlist_tracks(
    playlist_id: str,
    client: CatalogClient = Depends(get_catalog_client),
) -> List[Dict[str, Any]]:
    try:
        return await client.get_playlist_tracks(playlist_id)
    except CatalogError as exc:
        raise catalog_http_error(exc) from exc


@router.post("/catalog/playlists/{playlist_id}/tracks")
async def add_tracks(
    playlist_id: str,
    payload: AddCatalogTracksRequest,
    client: CatalogClient = Depends(get_catalog_client),
) -> List[Dict[str, Any]]:
    try:
        return await client.add_tracks_to_playlist(playlist_id, payload.uris)
    except CatalogError as exc:
        raise catalog_http_error(exc) from exc


@router.delete("/catalog/playlists/{playlist_id}/tracks")
async def remove_track(
    playlist_id: str,
    payload: RemoveCatalogTrackRequest,
    client: CatalogClient = Depends(get_catalog_client),
) -> Dict[str, Any]:
    try:
        return await client.remove_track_from_playlist(playlist_id, payload.uri)
    except CatalogError as exc:
        raise catalog_http_error(exc) from exc
