# essence/services/wishlist_service.py
import logging
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from essence.core.auth import login_required
from essence.models.user import Profile
from essence.models.wishlist import WishlistItem
from essence.repositories.product_repo import ProductRepository
from essence.repositories.wishlist_repo import WishlistRepository
from essence.schemas.product import StoreProduct
from essence.schemas.wishlist import FavoriteStatus, FavoriteToggleResult

logger = logging.getLogger(__name__)

LOGIN_TO_FAVORITE = "You need to be logged in to manage favorites"


class WishlistService:
    """
    Favorites: a per-user set of saved products.
    Guests see an empty list and cannot change it.
    """

    def __init__(self, wishlist_repo: WishlistRepository, product_repo: ProductRepository):
        self.wishlist_repo = wishlist_repo
        self.product_repo = product_repo

    @staticmethod
    def _require_user(user: Profile | None) -> Profile:
        if user is None:
            raise login_required(LOGIN_TO_FAVORITE)
        return user

    def _ensure_product(self, session: Session, product_id: uuid.UUID) -> None:
        if self.product_repo.get_by_id(session, product_id) is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )

    def list_favorites(self, session: Session, user: Profile | None) -> list[StoreProduct]:
        if user is None:
            return []
        products = self.wishlist_repo.list_products(session, user.id)
        return [StoreProduct.from_product(p, idx) for idx, p in enumerate(products)]

    def is_favorite(
        self, session: Session, user: Profile | None, product_id: uuid.UUID
    ) -> FavoriteStatus:
        found = (
            user is not None
            and self.wishlist_repo.get_item(session, user.id, product_id) is not None
        )
        return FavoriteStatus(product_id=product_id, is_favorite=found)

    def add_favorite(
        self, session: Session, user: Profile | None, product_id: uuid.UUID
    ) -> list[StoreProduct]:
        """Save a product; saving it twice is a no-op."""
        user = self._require_user(user)
        self._ensure_product(session, product_id)
        if self.wishlist_repo.get_item(session, user.id, product_id) is None:
            self.wishlist_repo.create(
                session, WishlistItem(user_id=user.id, product_id=product_id)
            )
            logger.info("Favorites: product %s added for user %s", product_id, user.id)
        return self.list_favorites(session, user)

    def remove_favorite(
        self, session: Session, user: Profile | None, product_id: uuid.UUID
    ) -> list[StoreProduct]:
        user = self._require_user(user)
        item = self.wishlist_repo.get_item(session, user.id, product_id)
        if item is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product is not in favorites",
            )
        self.wishlist_repo.delete(session, item)
        logger.info("Favorites: product %s removed for user %s", product_id, user.id)
        return self.list_favorites(session, user)

    def toggle_favorite(
        self, session: Session, user: Profile | None, product_id: uuid.UUID
    ) -> FavoriteToggleResult:
        """
        Remove the product when it is already saved, save it otherwise.
        """
        user = self._require_user(user)
        item = self.wishlist_repo.get_item(session, user.id, product_id)
        if item is not None:
            favorites = self.remove_favorite(session, user, product_id)
            now_favorite = False
        else:
            favorites = self.add_favorite(session, user, product_id)
            now_favorite = True

        return FavoriteToggleResult(
            product_id=product_id,
            is_favorite=now_favorite,
            favorites=favorites,
        )
