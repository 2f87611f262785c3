# essence/schemas/order.py
import uuid
from datetime import datetime
from typing import Any, Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

PaymentMethod = Literal["cash_on_delivery", "credit_card"]
OrderStatus = Literal["pending", "processing", "shipped", "delivered", "cancelled"]


class CheckoutRequest(SQLModel):
    """
    Payload for placing an order from the current cart.

    User provides:
      - address_id (one of their saved addresses)
      - payment_method
      - order_notes (optional)

    Backend derives:
      - user_id from token
      - items and prices from the persistent cart
      - shipping, tax and total
      - status = 'pending'
    """

    model_config = ConfigDict(extra="forbid")

    address_id: uuid.UUID | None = None
    payment_method: PaymentMethod = "cash_on_delivery"
    order_notes: str | None = Field(default=None, max_length=1000)

    @field_validator("order_notes")
    @classmethod
    def normalize_notes(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class PriceQuote(SQLModel):
    """
    Pricing breakdown for a cart.
    """

    item_count: int
    subtotal: float
    shipping_cost: float
    tax_amount: float
    total_amount: float


class OrderRead(SQLModel):
    """
    Lightweight representation of an order (without items).
    """

    id: uuid.UUID
    user_id: uuid.UUID
    shipping_address: dict[str, Any]
    payment_method: PaymentMethod
    order_notes: str | None
    shipping_cost: float
    tax_amount: float
    total_amount: float
    status: OrderStatus
    created_at: datetime


class OrderItemRead(SQLModel):
    id: uuid.UUID
    order_id: uuid.UUID
    product_id: uuid.UUID
    product_name: str | None = None
    quantity: int
    unit_price: float
    line_total: float


class OrderWithItemsRead(OrderRead):
    """
    Full order view including items.

    `reference` is the short order number shown to customers.
    """

    reference: str
    items: list[OrderItemRead]
    subtotal: float


class OrderStatusUpdate(SQLModel):
    """
    Admin payload to change order status.
    """

    model_config = ConfigDict(extra="forbid")

    status: OrderStatus
