from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from structlog import get_logger

from app.dependencies.auth import get_current_user_id
from app.routers.listings import load_all
from app.schemas.property import PropertyRecord
from app.services.favorites import FavoritesStore, get_favorites_store
from app.services.repository import PropertyRepository, get_repository

logger = get_logger()
router = APIRouter(prefix="/api/v1/favorites", tags=["favorites"])

class FavoritesResponse(BaseModel):
    favorites: List[str]

class ToggleResponse(FavoritesResponse):
    property_id: str
    is_favorite: bool

@router.get("", response_model=FavoritesResponse)
async def list_favorites(
    user_id: str = Depends(get_current_user_id),
    store: FavoritesStore = Depends(get_favorites_store),
):
    return {"favorites": await store.get(user_id)}

@router.get("/properties", response_model=List[PropertyRecord])
async def list_favorite_properties(
    user_id: str = Depends(get_current_user_id),
    store: FavoritesStore = Depends(get_favorites_store),
    repository: PropertyRepository = Depends(get_repository),
):
    """Wishlist: favorited listings that still exist, in collection order."""
    favorites = set(await store.get(user_id))
    if not favorites:
        return []
    return [r for r in await load_all(repository) if r.id in favorites]

@router.post("/{property_id}", response_model=ToggleResponse)
async def toggle_favorite(
    property_id: str,
    user_id: str = Depends(get_current_user_id),
    store: FavoritesStore = Depends(get_favorites_store),
):
    try:
        favorites = await store.toggle(user_id, property_id)
    except Exception as e:
        logger.error("Toggle favorite failed", user_id=user_id, property_id=property_id, error=str(e))
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to update favorites")
    return {"favorites": favorites, "property_id": property_id, "is_favorite": property_id in favorites}

@router.delete("/{property_id}", response_model=FavoritesResponse)
async def remove_favorite(
    property_id: str,
    user_id: str = Depends(get_current_user_id),
    store: FavoritesStore = Depends(get_favorites_store),
):
    return {"favorites": await store.remove(user_id, property_id)}

@router.delete("", response_model=FavoritesResponse)
async def clear_favorites(
    user_id: str = Depends(get_current_user_id),
    store: FavoritesStore = Depends(get_favorites_store),
):
    await store.clear(user_id)
    return {"favorites": []}
