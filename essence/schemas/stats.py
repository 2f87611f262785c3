# essence/schemas/stats.py
import uuid
from datetime import datetime

from pydantic import ConfigDict
from sqlmodel import SQLModel

from essence.schemas.order import OrderStatus


class RecentOrderSummary(SQLModel):
    """
    Lightweight info for the latest orders on the account page.
    """
    model_config = ConfigDict(extra="forbid")

    id: uuid.UUID
    reference: str
    created_at: datetime
    status: OrderStatus
    total_amount: float
    item_count: int


class AccountOverview(SQLModel):
    """
    Payload for the customer's account dashboard.
    """
    model_config = ConfigDict(extra="forbid")

    total_orders: int
    cart_items: int
    favorites: int
    total_spent: float
    recent_orders: list[RecentOrderSummary]
