from __future__ import annotations

from fastapi import APIRouter, Depends

from ...core.security import verify_service_token
from ...schemas.playlists import CatalogTrack, FavoritesResponse, FavoriteToggleResponse
from ...services.favorites import FavoritesRepository
from ..deps import get_favorites_repository

router = APIRouter(prefix="/v1/favorites", tags=["favorites"], dependencies=[Depends(verify_service_token)])


@router.get("", response_model=FavoritesResponse)
async def list_favorites(repo: FavoritesRepository = Depends(get_favorites_repository)) -> FavoritesResponse:
    return FavoritesResponse(tracks=await repo.get())


@router.put("", response_model=FavoritesResponse)
async def add_favorite(
    track: CatalogTrack,
    repo: FavoritesRepository = Depends(get_favorites_repository),
) -> FavoritesResponse:
    return FavoritesResponse(tracks=await repo.add(track.model_dump()))


@router.delete("/{track_id}", response_model=FavoritesResponse)
async def remove_favorite(
    track_id: str,
    repo: FavoritesRepository = Depends(get_favorites_repository),
) -> FavoritesResponse:
    return FavoritesResponse(tracks=await repo.remove(track_id))


@router.post("/toggle", response_model=FavoriteToggleResponse)
async def toggle_favorite(
    track: CatalogTrack,
    repo: FavoritesRepository = Depends(get_favorites_repository),
) -> FavoriteToggleResponse:
    favorite = await repo.toggle(track.model_dump())
    return FavoriteToggleResponse(track_id=track.id, favorite=favorite)
