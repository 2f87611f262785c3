# essence/routers/cart.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from essence.core.auth import get_current_user
from essence.database import get_session
from essence.models.user import Profile
from essence.repositories.cart_repo import CartRepository
from essence.repositories.product_repo import ProductRepository
from essence.schemas.cart import (
    CartItemCreate,
    CartItemUpdate,
    CartSummary,
    GuestCartMerge,
)
from essence.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])

cart_repo = CartRepository()
product_repo = ProductRepository()
service = CartService(cart_repo, product_repo)


@router.get("", response_model=CartSummary)
def get_my_cart(
    session: Session = Depends(get_session),
    current_user: Profile | None = Depends(get_current_user),
):
    """
    Get the current user's cart.

    Guests always get an empty cart.
    """
    return service.get_cart_summary(session, current_user)


@router.post("", response_model=CartSummary)
def add_to_cart(
    payload: CartItemCreate,
    session: Session = Depends(get_session),
    current_user: Profile | None = Depends(get_current_user),
):
    """
    Add a product to the cart, or increase its quantity if already there.

    Returns the updated cart summary.
    """
    return service.add_to_cart(session, current_user, payload)


@router.post("/merge", response_model=CartSummary)
def merge_guest_cart(
    payload: GuestCartMerge,
    session: Session = Depends(get_session),
    current_user: Profile | None = Depends(get_current_user),
):
    """
    Merge the cart a visitor built before signing in.

    Quantities are summed; unknown products are listed in
    `skipped_product_ids`.
    """
    return service.merge_guest_cart(session, current_user, payload)


@router.patch("/{product_id}", response_model=CartSummary)
def update_cart_item(
    product_id: uuid.UUID,
    payload: CartItemUpdate,
    session: Session = Depends(get_session),
    current_user: Profile | None = Depends(get_current_user),
):
    """
    Set the quantity of a product in the cart (0 removes it).
    """
    return service.update_quantity(
        session=session,
        user=current_user,
        product_id=product_id,
        payload=payload,
    )


@router.delete("/{product_id}", response_model=CartSummary)
def remove_cart_item(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: Profile | None = Depends(get_current_user),
):
    """
    Remove a product from the cart.
    """
    return service.remove_item(session, current_user, product_id)


@router.delete("", response_model=CartSummary)
def clear_cart(
    session: Session = Depends(get_session),
    current_user: Profile | None = Depends(get_current_user),
):
    """
    Clear the entire cart.
    """
    return service.clear_cart(session, current_user)
