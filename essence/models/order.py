# essence/models/order.py
import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import Column, JSON
from sqlmodel import SQLModel, Field


class Order(SQLModel, table=True):
    """
    Customer order, created once at checkout.

    The shipping address is copied into the row as a JSON snapshot so
    later edits or deletions of the saved address don't change it.
    """

    __tablename__ = "orders"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="profiles.id",
        index=True,
    )

    shipping_address: dict[str, Any] = Field(
        sa_column=Column(JSON, nullable=False),
        description="Snapshot of the selected address",
    )

    # cash_on_delivery | credit_card
    payment_method: str = Field(
        default="cash_on_delivery",
        description="Payment method chosen at checkout",
    )

    order_notes: str | None = Field(
        default=None,
        description="Optional note from the customer",
    )

    shipping_cost: float = Field(default=0.0, ge=0)
    tax_amount: float = Field(default=0.0, ge=0)

    # subtotal + shipping + tax
    total_amount: float = Field(
        description="Final amount charged for this order",
    )

    # pending | processing | shipped | delivered | cancelled
    status: str = Field(
        default="pending",
        index=True,
        description="Order status lifecycle",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )


class OrderItem(SQLModel, table=True):
    """
    Line item inside an order.
    """

    __tablename__ = "order_items"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    order_id: uuid.UUID = Field(
        foreign_key="orders.id",
        index=True,
    )

    product_id: uuid.UUID = Field(
        foreign_key="products.id",
        index=True,
    )

    quantity: int = Field(
        gt=0,
        description="Quantity ordered (>=1)",
    )

    unit_price: float = Field(
        description="Product price at time of order",
    )
