# essence/seed.py
"""
Seed the starter fragrance catalog.

    python -m essence.seed

Products are matched by name, so running it twice adds nothing.
"""
import logging

from sqlmodel import Session, select

from essence.database import create_db_and_tables, engine
from essence.models.product import Product

# Register every table before create_all()
from essence.models import user, cart, wishlist, address, order  # noqa: F401

logger = logging.getLogger(__name__)

STARTER_CATALOG: list[dict] = [
    {
        "name": "Rose Elegance",
        "price": 89.99,
        "image_url": "https://images.unsplash.com/photo-1721322800607-8c38375eef04?w=400&h=400&fit=crop",
        "description": "A sophisticated blend of Bulgarian roses and white musk",
        "category": "Floral",
    },
    {
        "name": "Midnight Oud",
        "price": 129.99,
        "image_url": "https://images.unsplash.com/photo-1618160702438-9b02ab6515c9?w=400&h=400&fit=crop",
        "description": "Rich and mysterious with notes of oud and amber",
        "category": "Oriental",
    },
    {
        "name": "Citrus Breeze",
        "price": 69.99,
        "image_url": "https://images.unsplash.com/photo-1582562124811-c09040d0a901?w=400&h=400&fit=crop",
        "description": "Fresh and invigorating with bergamot and lemon",
        "category": "Citrus",
    },
    {
        "name": "Vanilla Dreams",
        "price": 94.99,
        "image_url": "https://images.unsplash.com/photo-1721322800607-8c38375eef04?w=400&h=400&fit=crop",
        "description": "Warm and comforting with vanilla and sandalwood",
        "category": "Gourmand",
    },
    {
        "name": "Ocean Mist",
        "price": 79.99,
        "image_url": "https://images.unsplash.com/photo-1618160702438-9b02ab6515c9?w=400&h=400&fit=crop",
        "description": "Fresh aquatic scent with sea salt and driftwood",
        "category": "Aquatic",
    },
    {
        "name": "Golden Amber",
        "price": 119.99,
        "image_url": "https://images.unsplash.com/photo-1582562124811-c09040d0a901?w=400&h=400&fit=crop",
        "description": "Luxurious amber with hints of spice and leather",
        "category": "Oriental",
    },
]


def seed_catalog(session: Session) -> int:
    """Insert missing starter products; returns how many were added."""
    existing = set(session.exec(select(Product.name)).all())
    added = 0
    for data in STARTER_CATALOG:
        if data["name"] in existing:
            continue
        session.add(Product(**data))
        added += 1
    session.commit()
    return added


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    create_db_and_tables()
    with Session(engine) as session:
        added = seed_catalog(session)
    logger.info("Seeded %d product(s)", added)


if __name__ == "__main__":
    main()
