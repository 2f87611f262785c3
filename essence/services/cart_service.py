# essence/services/cart_service.py
import logging
import uuid

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from essence.core.auth import login_required
from essence.models.cart import CartItem
from essence.models.user import Profile
from essence.repositories.cart_repo import CartRepository
from essence.repositories.product_repo import ProductRepository
from essence.schemas.cart import (
    CartItemCreate,
    CartItemUpdate,
    CartLine,
    CartSummary,
    GuestCartMerge,
)
from essence.schemas.product import StoreProduct

logger = logging.getLogger(__name__)

LOGIN_TO_ADD = "You need to be logged in to add items to cart"


class CartService:
    """
    Business logic for the persistent cart.

    Responsibilities:
      - guests see an empty cart and cannot mutate it
      - validate product existence
      - one row per (user, product); adding again increments quantity
      - quantity 0 removes the line
      - fold a guest's local cart into the persistent one after sign-in
      - compute line totals and cart totals
    """

    def __init__(self, cart_repo: CartRepository, product_repo: ProductRepository):
        self.cart_repo = cart_repo
        self.product_repo = product_repo

    # ---- internal helpers ----

    @staticmethod
    def _require_user(user: Profile | None) -> Profile:
        if user is None:
            raise login_required(LOGIN_TO_ADD)
        return user

    def _get_valid_product(self, session: Session, product_id: uuid.UUID):
        product = self.product_repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    def _get_line(
        self, session: Session, user_id: uuid.UUID, product_id: uuid.UUID
    ) -> CartItem:
        item = self.cart_repo.get_item(session, user_id, product_id)
        if not item:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not found in cart",
            )
        return item

    @staticmethod
    def _write_failed(session: Session, action: str, user_id: uuid.UUID) -> HTTPException:
        session.rollback()
        logger.exception("Cart %s failed for user %s", action, user_id)
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to {action}",
        )

    # ---- public operations ----

    def get_cart_summary(
        self,
        session: Session,
        user: Profile | None,
    ) -> CartSummary:
        """
        Return the cart with display ids, line totals and totals.
        A guest always gets an empty cart.
        """
        if user is None:
            return CartSummary(items=[], item_count=0, subtotal=0.0)

        lines: list[CartLine] = []
        item_count = 0
        subtotal = 0.0

        for idx, (item, product) in enumerate(
            self.cart_repo.list_with_products(session, user.id)
        ):
            store = StoreProduct.from_product(product, idx)
            line_total = round(item.quantity * store.price, 2)
            item_count += item.quantity
            subtotal += line_total
            lines.append(
                CartLine(
                    **store.model_dump(),
                    quantity=item.quantity,
                    line_total=line_total,
                )
            )

        return CartSummary(
            items=lines,
            item_count=item_count,
            subtotal=round(subtotal, 2),
        )

    def add_to_cart(
        self,
        session: Session,
        user: Profile | None,
        payload: CartItemCreate,
    ) -> CartSummary:
        """
        Add a product to the user's cart.

        Rules:
          - product must exist
          - existing line => quantity += payload.quantity (default 1)
          - new line => quantity = payload.quantity
        """
        user = self._require_user(user)
        product = self._get_valid_product(session, payload.product_id)
        existing = self.cart_repo.get_item(session, user.id, product.id)

        try:
            if existing:
                existing.quantity += payload.quantity
                self.cart_repo.update(session, existing)
                logger.info(
                    "Cart: %s quantity increased to %d for user %s",
                    product.name,
                    existing.quantity,
                    user.id,
                )
            else:
                self.cart_repo.create(
                    session,
                    CartItem(
                        user_id=user.id,
                        product_id=product.id,
                        quantity=payload.quantity,
                    ),
                )
                logger.info("Cart: %s added for user %s", product.name, user.id)
        except SQLAlchemyError:
            raise self._write_failed(session, "add item to cart", user.id)

        return self.get_cart_summary(session, user)

    def update_quantity(
        self,
        session: Session,
        user: Profile | None,
        product_id: uuid.UUID,
        payload: CartItemUpdate,
    ) -> CartSummary:
        """
        Set the quantity of a cart line; 0 removes it.
        """
        user = self._require_user(user)
        if payload.quantity == 0:
            return self.remove_item(session, user, product_id)

        item = self._get_line(session, user.id, product_id)
        item.quantity = payload.quantity
        try:
            self.cart_repo.update(session, item)
        except SQLAlchemyError:
            raise self._write_failed(session, "update quantity", user.id)

        return self.get_cart_summary(session, user)

    def remove_item(
        self,
        session: Session,
        user: Profile | None,
        product_id: uuid.UUID,
    ) -> CartSummary:
        """
        Remove a product from the cart and return updated summary.
        """
        user = self._require_user(user)
        item = self._get_line(session, user.id, product_id)
        try:
            self.cart_repo.delete(session, item)
        except SQLAlchemyError:
            raise self._write_failed(session, "remove item from cart", user.id)

        logger.info("Cart: product %s removed for user %s", product_id, user.id)
        return self.get_cart_summary(session, user)

    def clear_cart(
        self,
        session: Session,
        user: Profile | None,
    ) -> CartSummary:
        """
        Clear all items from the cart and return an empty summary.
        """
        user = self._require_user(user)
        try:
            self.cart_repo.clear_user_cart(session, user.id)
        except SQLAlchemyError:
            raise self._write_failed(session, "clear cart", user.id)
        return CartSummary(items=[], item_count=0, subtotal=0.0)

    def merge_guest_cart(
        self,
        session: Session,
        user: Profile | None,
        payload: GuestCartMerge,
    ) -> CartSummary:
        """
        Fold the lines a visitor collected before signing in into the
        persistent cart.

          - quantities for the same product are summed (also across
            duplicate guest lines)
          - products that no longer exist are skipped and reported
          - a single commit covers the whole merge
        """
        user = self._require_user(user)

        wanted: dict[uuid.UUID, int] = {}
        for line in payload.items:
            wanted[line.product_id] = wanted.get(line.product_id, 0) + line.quantity

        skipped: list[uuid.UUID] = []
        try:
            for product_id, quantity in wanted.items():
                if self.product_repo.get_by_id(session, product_id) is None:
                    skipped.append(product_id)
                    continue
                existing = self.cart_repo.get_item(session, user.id, product_id)
                if existing:
                    existing.quantity += quantity
                    session.add(existing)
                else:
                    session.add(
                        CartItem(user_id=user.id, product_id=product_id, quantity=quantity)
                    )
            session.commit()
        except SQLAlchemyError:
            raise self._write_failed(session, "merge cart", user.id)

        if skipped:
            logger.warning(
                "Cart merge for user %s skipped unknown products: %s", user.id, skipped
            )

        summary = self.get_cart_summary(session, user)
        summary.skipped_product_ids = skipped
        return summary
