# essence/schemas/product.py
import uuid
from datetime import datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from essence.core.display_id import display_id
from essence.models.product import Product


class ProductCreate(SQLModel):
    """
    Payload for creating a product (admin).

    `image_url` may point to an external image; uploading a file through
    the image endpoint replaces it with a Storage URL.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=100)
    price: float = Field(gt=0)
    image_url: str | None = None
    description: str | None = None
    category: str = Field(max_length=50)

    @field_validator("name", "category")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class ProductUpdate(SQLModel):
    """
    Partial update payload for products.
    All fields are optional.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=100)
    price: float | None = Field(default=None, gt=0)
    image_url: str | None = None
    description: str | None = None
    category: str | None = Field(default=None, max_length=50)

    @field_validator("name", "category")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class ProductRead(SQLModel):
    """
    Admin representation of a product (remote UUID as id).
    """

    id: uuid.UUID
    name: str
    price: float
    image_url: str | None
    description: str | None
    category: str
    created_at: datetime


class StoreProduct(SQLModel):
    """
    Storefront representation of a product.

      - id: numeric display id (NOT unique, display only)
      - original_id: remote UUID, used for every cart/favorites call
    """

    id: int
    original_id: uuid.UUID
    name: str
    price: float
    image: str
    description: str
    category: str

    @classmethod
    def from_product(cls, product: Product, index: int = 0) -> "StoreProduct":
        return cls(
            id=display_id(product.id, index),
            original_id=product.id,
            name=product.name,
            price=float(product.price),
            image=product.image_url or "",
            description=product.description or "",
            category=product.category,
        )
