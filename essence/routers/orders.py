# essence/routers/orders.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from essence.core.auth import get_current_user, require_auth, require_admin
from essence.database import get_session
from essence.models.user import Profile
from essence.repositories.address_repo import AddressRepository
from essence.repositories.cart_repo import CartRepository
from essence.repositories.order_repo import OrderRepository
from essence.schemas.order import (
    CheckoutRequest,
    OrderRead,
    OrderStatus,
    OrderStatusUpdate,
    OrderWithItemsRead,
    PriceQuote,
)
from essence.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
cart_repo = CartRepository()
address_repo = AddressRepository()
service = OrderService(order_repo, cart_repo, address_repo)


# -------- User-facing endpoints --------


@router.get("/quote", response_model=PriceQuote)
def quote_cart(
    session: Session = Depends(get_session),
    current_user: Profile = Depends(require_auth),
):
    """
    Subtotal, shipping, tax and total for the current cart.
    """
    return service.quote(session, current_user.id)


@router.post(
    "/checkout",
    response_model=OrderWithItemsRead,
    status_code=status.HTTP_201_CREATED,
)
def checkout(
    payload: CheckoutRequest,
    session: Session = Depends(get_session),
    current_user: Profile | None = Depends(get_current_user),
):
    """
    Place an order from the current user's cart.

    The cart is emptied on success.
    """
    return service.checkout(session, current_user, payload)


@router.get("/me", response_model=list[OrderRead])
def list_my_orders(
    session: Session = Depends(get_session),
    current_user: Profile = Depends(require_auth),
    skip: int = 0,
    limit: int = 50,
    status_filter: OrderStatus | None = Query(default=None, alias="status"),
):
    """
    The authenticated user's orders, newest first (without items).
    """
    return service.list_user_orders(session, current_user.id, skip, limit, status_filter)


@router.get("/me/{order_id}", response_model=OrderWithItemsRead)
def get_my_order(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: Profile = Depends(require_auth),
):
    return service.get_user_order(session, current_user.id, order_id)


# -------- Admin endpoints --------


@router.get(
    "",
    response_model=list[OrderRead],
    dependencies=[Depends(require_admin)],
)
def list_all_orders(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 50,
    status_filter: OrderStatus | None = Query(default=None, alias="status"),
):
    """
    List all orders, optionally only those in one status (admin only).
    """
    return service.list_all_orders(session, skip, limit, status_filter)


@router.get(
    "/{order_id}",
    response_model=OrderWithItemsRead,
    dependencies=[Depends(require_admin)],
)
def get_order_admin(
    order_id: uuid.UUID,
    session: Session = Depends(get_session),
):
    """
    Get any order with items (admin only).
    """
    return service.get_order_admin(session, order_id)


@router.patch(
    "/{order_id}/status",
    response_model=OrderRead,
    dependencies=[Depends(require_admin)],
)
def update_order_status(
    order_id: uuid.UUID,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Update order status (admin only).

      pending    -> processing, cancelled

      processing -> shipped, cancelled

      shipped    -> delivered

    """
    return service.update_status(session, order_id, payload)
