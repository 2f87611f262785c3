# essence/schemas/address.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class AddressCreate(SQLModel):
    """
    Payload for saving a shipping address.
    """

    model_config = ConfigDict(extra="forbid")

    full_name: str = Field(max_length=100)
    phone: str = Field(max_length=30)
    address_line_1: str
    address_line_2: str | None = None
    city: str
    state: str
    postal_code: str = Field(max_length=20)
    country: str = Field(default="US", max_length=56)
    is_default: bool = False

    @field_validator(
        "full_name",
        "phone",
        "address_line_1",
        "city",
        "state",
        "postal_code",
        "country",
    )
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("address_line_2")
    @classmethod
    def normalize_line_2(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class AddressRead(SQLModel):
    id: uuid.UUID
    user_id: uuid.UUID
    full_name: str
    phone: str
    address_line_1: str
    address_line_2: str | None
    city: str
    state: str
    postal_code: str
    country: str
    is_default: bool
    created_at: datetime
