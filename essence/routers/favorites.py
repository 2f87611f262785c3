# essence/routers/favorites.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from essence.core.auth import get_current_user
from essence.database import get_session
from essence.models.user import Profile
from essence.repositories.product_repo import ProductRepository
from essence.repositories.wishlist_repo import WishlistRepository
from essence.schemas.product import StoreProduct
from essence.schemas.wishlist import FavoriteCreate, FavoriteStatus, FavoriteToggleResult
from essence.services.wishlist_service import WishlistService

router = APIRouter(prefix="/favorites", tags=["Favorites"])

service = WishlistService(WishlistRepository(), ProductRepository())


@router.get("", response_model=list[StoreProduct])
def list_favorites(
    session: Session = Depends(get_session),
    current_user: Profile | None = Depends(get_current_user),
):
    """Saved products of the current user (empty for guests)."""
    return service.list_favorites(session, current_user)


@router.post("", response_model=list[StoreProduct])
def add_favorite(
    payload: FavoriteCreate,
    session: Session = Depends(get_session),
    current_user: Profile | None = Depends(get_current_user),
):
    return service.add_favorite(session, current_user, payload.product_id)


@router.post("/{product_id}/toggle", response_model=FavoriteToggleResult)
def toggle_favorite(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: Profile | None = Depends(get_current_user),
):
    """
    Heart button: saves the product, or removes it if already saved.
    """
    return service.toggle_favorite(session, current_user, product_id)


@router.get("/{product_id}", response_model=FavoriteStatus)
def get_favorite_status(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: Profile | None = Depends(get_current_user),
):
    return service.is_favorite(session, current_user, product_id)


@router.delete("/{product_id}", response_model=list[StoreProduct])
def remove_favorite(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: Profile | None = Depends(get_current_user),
):
    return service.remove_favorite(session, current_user, product_id)
