# essence/models/product.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Fragrance catalog entry.

    The remote UUID is the source of truth for identity; the numeric
    id shown in the storefront is derived from it (see core.display_id).
    """

    __tablename__ = "products"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    name: str = Field(
        max_length=100,
        index=True,
        description="Display name of the fragrance",
    )

    price: float = Field(
        gt=0,
        description="Unit price (USD)",
    )

    image_url: str | None = Field(
        default=None,
        description="Public image URL (Supabase Storage or external)",
    )

    description: str | None = Field(
        default=None,
        description="Short scent description",
    )

    # Floral | Woody | Fresh | Oriental | Citrus | ...
    category: str = Field(
        max_length=50,
        index=True,
        description="Scent family",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )
