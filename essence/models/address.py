# essence/models/address.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Address(SQLModel, table=True):
    """
    Saved shipping address, selectable at checkout.
    """

    __tablename__ = "addresses"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    user_id: uuid.UUID = Field(
        foreign_key="profiles.id",
        index=True,
    )

    full_name: str = Field(max_length=100)
    phone: str = Field(max_length=30)
    address_line_1: str
    address_line_2: str | None = None
    city: str
    state: str
    postal_code: str = Field(max_length=20)
    country: str = Field(default="US", max_length=56)

    is_default: bool = Field(default=False, index=True)

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
