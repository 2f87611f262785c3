# essence/schemas/wishlist.py
import uuid

from pydantic import ConfigDict
from sqlmodel import SQLModel

from essence.schemas.product import StoreProduct


class FavoriteCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    product_id: uuid.UUID


class FavoriteToggleResult(SQLModel):
    """
    Outcome of a toggle: whether the product is now a favorite,
    plus the refreshed list.
    """

    product_id: uuid.UUID
    is_favorite: bool
    favorites: list[StoreProduct]


class FavoriteStatus(SQLModel):
    product_id: uuid.UUID
    is_favorite: bool
