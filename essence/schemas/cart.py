# essence/schemas/cart.py
import uuid

from pydantic import ConfigDict
from sqlmodel import SQLModel, Field

from essence.schemas.product import StoreProduct


class CartItemCreate(SQLModel):
    """
    Payload for adding to cart. Quantity defaults to one unit.
    """

    model_config = ConfigDict(extra="forbid")

    product_id: uuid.UUID
    quantity: int = Field(default=1, gt=0)


class CartItemUpdate(SQLModel):
    """
    Payload for setting the quantity of a cart line.
    0 removes the line.
    """

    model_config = ConfigDict(extra="forbid")

    quantity: int = Field(ge=0)


class GuestCartLine(SQLModel):
    """
    One line of a cart kept client-side while the visitor was anonymous.
    """

    product_id: uuid.UUID
    quantity: int = Field(default=1, gt=0)


class GuestCartMerge(SQLModel):
    """
    Payload sent right after sign-in to fold the guest cart into the
    persistent one.
    """

    model_config = ConfigDict(extra="forbid")

    items: list[GuestCartLine] = Field(default_factory=list)


class CartLine(StoreProduct):
    """
    Storefront product plus its quantity in the cart.
    """

    quantity: int
    line_total: float


class CartSummary(SQLModel):
    """
    Full cart response model with totals.
    """

    items: list[CartLine]
    item_count: int
    subtotal: float
    skipped_product_ids: list[uuid.UUID] = Field(default_factory=list)
