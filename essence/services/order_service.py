# essence/services/order_service.py
import logging
import smtplib
import uuid

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from essence.core import email_client
from essence.core.auth import login_required
from essence.models.order import Order, OrderItem
from essence.models.user import Profile
from essence.repositories.address_repo import AddressRepository
from essence.repositories.cart_repo import CartRepository
from essence.repositories.order_repo import OrderRepository
from essence.schemas.order import (
    CheckoutRequest,
    OrderItemRead,
    OrderStatusUpdate,
    OrderWithItemsRead,
    PriceQuote,
)

logger = logging.getLogger(__name__)

# Fixed tax rate (8%)
TAX_RATE = 0.08

# Orders above this subtotal ship free
FREE_SHIPPING_THRESHOLD = 100.0
FLAT_SHIPPING_COST = 9.99

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    "pending": {"processing", "cancelled"},
    "processing": {"shipped", "cancelled"},
    "shipped": {"delivered"},
    "delivered": set(),
    "cancelled": set(),
}

# Address fields copied into the order snapshot
ADDRESS_SNAPSHOT_FIELDS = (
    "full_name",
    "phone",
    "address_line_1",
    "address_line_2",
    "city",
    "state",
    "postal_code",
    "country",
)


def price_breakdown(subtotal: float, item_count: int = 0) -> PriceQuote:
    """
    subtotal + shipping (free above the threshold) + 8% tax.
    """
    subtotal = round(subtotal, 2)
    shipping = 0.0 if subtotal > FREE_SHIPPING_THRESHOLD else FLAT_SHIPPING_COST
    tax = round(subtotal * TAX_RATE, 2)
    return PriceQuote(
        item_count=item_count,
        subtotal=subtotal,
        shipping_cost=shipping,
        tax_amount=tax,
        total_amount=round(subtotal + shipping + tax, 2),
    )


def order_reference(order_id: uuid.UUID) -> str:
    """Short order number shown to customers."""
    return str(order_id)[:8]


class OrderService:
    """
    Business logic for checkout and orders.

    Responsibilities:
      - price the persistent cart
      - create order + items from the cart in one transaction
      - clear the cart after success
      - send a best-effort confirmation email
      - enforce simple status transitions (admin)
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        cart_repo: CartRepository,
        address_repo: AddressRepository,
    ):
        self.order_repo = order_repo
        self.cart_repo = cart_repo
        self.address_repo = address_repo

    # -------- User-facing operations --------

    def quote(self, session: Session, user_id: uuid.UUID) -> PriceQuote:
        rows = self.cart_repo.list_with_products(session, user_id)
        subtotal = sum(item.quantity * product.price for item, product in rows)
        item_count = sum(item.quantity for item, _ in rows)
        return price_breakdown(subtotal, item_count)

    def checkout(
        self,
        session: Session,
        user: Profile | None,
        payload: CheckoutRequest,
    ) -> OrderWithItemsRead:
        """
        Convert the current user's cart into an Order.

        Steps:
          1. Require a signed-in user and a non-empty cart.
          2. Resolve the selected address (must belong to the user).
          3. Price the cart (subtotal, shipping, tax, total).
          4. Create the Order row (status='pending', address snapshot).
          5. Create OrderItem rows with the current product price.
          6. Clear the cart.
          7. Commit once; any failure rolls everything back.
          8. Send the confirmation email (failures are only logged).
        """
        if user is None:
            raise login_required("You need to be logged in to place an order")

        rows = self.cart_repo.list_with_products(session, user.id)
        if not rows:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cart is empty",
            )

        address = None
        if payload.address_id is not None:
            address = self.address_repo.get_for_user(session, user.id, payload.address_id)
        if address is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Please select or add a shipping address",
            )

        subtotal = sum(item.quantity * product.price for item, product in rows)
        pricing = price_breakdown(subtotal, sum(item.quantity for item, _ in rows))

        try:
            order = self.order_repo.place(
                session,
                Order(
                    user_id=user.id,
                    shipping_address={
                        field: getattr(address, field) for field in ADDRESS_SNAPSHOT_FIELDS
                    },
                    payment_method=payload.payment_method,
                    order_notes=payload.order_notes,
                    shipping_cost=pricing.shipping_cost,
                    tax_amount=pricing.tax_amount,
                    total_amount=pricing.total_amount,
                    status="pending",
                ),
                [
                    OrderItem(
                        product_id=product.id,
                        quantity=item.quantity,
                        unit_price=product.price,
                    )
                    for item, product in rows
                ],
            )

            for item, _ in rows:
                session.delete(item)

            session.commit()
        except SQLAlchemyError:
            session.rollback()
            logger.exception("Checkout failed for user %s", user.id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to place order. Please try again.",
            )

        session.refresh(order)
        logger.info(
            "Order %s placed by user %s, total %.2f",
            order_reference(order.id),
            user.id,
            order.total_amount,
        )

        result = self._build_order_with_items_dto(session, order)
        self._send_confirmation(user, result)
        return result

    def list_user_orders(
        self,
        session: Session,
        user_id: uuid.UUID,
        skip: int = 0,
        limit: int = 50,
        status: str | None = None,
    ) -> list[Order]:
        return self.order_repo.list_for_user(session, user_id, skip, limit, status)

    def get_user_order(
        self,
        session: Session,
        user_id: uuid.UUID,
        order_id: uuid.UUID,
    ) -> OrderWithItemsRead:
        """
        Single order of the user, including items.
        404 if it does not exist or belongs to someone else.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order or order.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return self._build_order_with_items_dto(session, order)

    # -------- Admin operations --------

    def list_all_orders(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 50,
        status: str | None = None,
    ) -> list[Order]:
        return self.order_repo.list_all(session, skip, limit, status)

    def get_order_admin(
        self,
        session: Session,
        order_id: uuid.UUID,
    ) -> OrderWithItemsRead:
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        return self._build_order_with_items_dto(session, order)

    def update_status(
        self,
        session: Session,
        order_id: uuid.UUID,
        payload: OrderStatusUpdate,
    ) -> Order:
        """
        Admin-only status update:

          pending    -> processing, cancelled
          processing -> shipped, cancelled
          shipped    -> delivered
          delivered  -> (terminal)
          cancelled  -> (terminal)

        Same status is a no-op; anything else raises 400.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )

        current = order.status
        new = payload.status

        if current == new:
            return order

        if new not in ALLOWED_TRANSITIONS.get(current, set()):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid status transition: {current} -> {new}",
            )

        self.order_repo.set_status(session, order, new)
        session.commit()
        session.refresh(order)
        logger.info("Order %s moved %s -> %s", order_reference(order.id), current, new)
        return order

    # -------- Helpers --------

    def _build_order_with_items_dto(
        self,
        session: Session,
        order: Order,
    ) -> OrderWithItemsRead:
        item_dtos: list[OrderItemRead] = []
        subtotal = 0.0

        for it, product_name in self.order_repo.list_items_with_names(session, order.id):
            line_total = round(it.quantity * it.unit_price, 2)
            subtotal += line_total
            item_dtos.append(
                OrderItemRead(
                    id=it.id,
                    order_id=it.order_id,
                    product_id=it.product_id,
                    product_name=product_name,
                    quantity=it.quantity,
                    unit_price=it.unit_price,
                    line_total=line_total,
                )
            )

        return OrderWithItemsRead(
            id=order.id,
            user_id=order.user_id,
            shipping_address=order.shipping_address,
            payment_method=order.payment_method,
            order_notes=order.order_notes,
            shipping_cost=order.shipping_cost,
            tax_amount=order.tax_amount,
            total_amount=order.total_amount,
            status=order.status,
            created_at=order.created_at,
            reference=order_reference(order.id),
            items=item_dtos,
            subtotal=round(subtotal, 2),
        )

    def _send_confirmation(self, user: Profile, order: OrderWithItemsRead) -> None:
        if not email_client.is_configured():
            logger.debug("SMTP not configured; skipping confirmation for %s", order.reference)
            return

        lines = [
            f"- {it.product_name or it.product_id} x{it.quantity}: ${it.line_total:.2f}"
            for it in order.items
        ]
        text_body = "\n".join(
            [
                f"Hi {user.full_name or user.email},",
                "",
                f"Your order #{order.reference} has been confirmed.",
                "",
                *lines,
                "",
                f"Subtotal: ${order.subtotal:.2f}",
                f"Shipping: ${order.shipping_cost:.2f}",
                f"Tax: ${order.tax_amount:.2f}",
                f"Total: ${order.total_amount:.2f}",
            ]
        )
        try:
            email_client.send_email(
                to_email=user.email,
                subject=f"[Essence] Order #{order.reference} confirmed",
                text_body=text_body,
            )
        except (RuntimeError, smtplib.SMTPException, OSError):
            logger.warning(
                "Could not send confirmation for order %s", order.reference, exc_info=True
            )
