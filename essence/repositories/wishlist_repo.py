# essence/repositories/wishlist_repo.py
import uuid

from sqlalchemy import func
from sqlmodel import Session, select

from essence.models.product import Product
from essence.models.wishlist import WishlistItem


class WishlistRepository:
    """
    Data access layer for the wishlist table.
    """

    def list_products(self, session: Session, user_id: uuid.UUID) -> list[Product]:
        stmt = (
            select(Product)
            .join(WishlistItem, WishlistItem.product_id == Product.id)
            .where(WishlistItem.user_id == user_id)
            .order_by(WishlistItem.created_at)
        )
        return list(session.exec(stmt).all())

    def get_item(
        self, session: Session, user_id: uuid.UUID, product_id: uuid.UUID
    ) -> WishlistItem | None:
        stmt = select(WishlistItem).where(
            WishlistItem.user_id == user_id,
            WishlistItem.product_id == product_id,
        )
        return session.exec(stmt).first()

    def count_for_user(self, session: Session, user_id: uuid.UUID) -> int:
        stmt = select(func.count()).select_from(WishlistItem).where(
            WishlistItem.user_id == user_id
        )
        return int(session.exec(stmt).one() or 0)

    def create(self, session: Session, item: WishlistItem) -> WishlistItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def delete(self, session: Session, item: WishlistItem) -> None:
        session.delete(item)
        session.commit()
