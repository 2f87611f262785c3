# essence/services/product_service.py
import logging
import uuid

from fastapi import HTTPException, status
from sqlmodel import Session

from essence.core.storage_utils import upload_to_storage, delete_public_url
from essence.models.product import Product
from essence.repositories.product_repo import ProductRepository
from essence.schemas.product import ProductCreate, ProductUpdate, StoreProduct

logger = logging.getLogger(__name__)

# --- Image config ---

MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB per image

ALLOWED_IMAGE_CONTENT_TYPES: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}

# Pseudo-category meaning "no category filter"
ALL_CATEGORIES = "All"


class ProductService:
    """
    Business logic for the fragrance catalog.

    Responsibilities:
      - storefront listing with search / category / price filters
      - validation beyond pydantic
      - image upload/delete orchestration with Supabase Storage
      - admin-only operations (enforced at router via require_admin)
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    # ----- Helpers -----

    @staticmethod
    def _validate_and_get_ext(content_type: str, file_bytes: bytes) -> str:
        if content_type not in ALLOWED_IMAGE_CONTENT_TYPES:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Unsupported image type. Allowed: JPEG, PNG, WEBP.",
            )

        if len(file_bytes) > MAX_IMAGE_BYTES:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail="Image too large (max 5MB).",
            )

        return ALLOWED_IMAGE_CONTENT_TYPES[content_type]

    @staticmethod
    def _remove_stored_image(url: str) -> None:
        """Best-effort Storage cleanup; a leftover file is only logged."""
        try:
            delete_public_url(url)
        except Exception:
            logger.warning("Could not delete stored image %s", url, exc_info=True)

    # ----- Storefront -----

    def list_store_products(
        self,
        session: Session,
        search: str | None = None,
        category: str | None = None,
        min_price: float | None = None,
        max_price: float | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[StoreProduct]:
        if min_price is not None and max_price is not None and min_price > max_price:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="min_price cannot be greater than max_price",
            )

        search = (search or "").strip() or None
        if category is not None and category.strip() in ("", ALL_CATEGORIES):
            category = None

        products = self.repo.search(
            session,
            search=search,
            category=category,
            min_price=min_price,
            max_price=max_price,
            skip=skip,
            limit=limit,
        )
        return [StoreProduct.from_product(p, idx) for idx, p in enumerate(products)]

    def list_categories(self, session: Session) -> list[str]:
        return [ALL_CATEGORIES, *self.repo.list_categories(session)]

    def get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    def get_store_product(self, session: Session, product_id: uuid.UUID) -> StoreProduct:
        return StoreProduct.from_product(self.get_product(session, product_id))

    # ----- Admin -----

    def create_product(self, session: Session, payload: ProductCreate) -> Product:
        product = Product(
            name=payload.name,
            price=payload.price,
            image_url=payload.image_url,
            description=payload.description,
            category=payload.category,
        )
        product = self.repo.create(session, product)
        logger.info("Created product %s (%s)", product.id, product.name)
        return product

    def update_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> Product:
        """
        Partial update of a product: only fields sent by the client change.
        """
        product = self.get_product(session, product_id)
        old_image = product.image_url
        for field, value in payload.model_dump(exclude_unset=True).items():
            if field in ("name", "price", "category") and value is None:
                continue
            setattr(product, field, value)
        product = self.repo.update(session, product)

        # Replaced or cleared: drop the previous file (external URLs are ignored)
        if old_image and old_image != product.image_url:
            self._remove_stored_image(old_image)
        return product

    def delete_product(self, session: Session, product_id: uuid.UUID) -> None:
        """
        Delete a product, its cart/wishlist rows and its stored image.

        Products that appear in past orders are kept (409) so order
        history stays intact.
        """
        product = self.get_product(session, product_id)
        if self.repo.has_been_ordered(session, product_id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Product has been ordered and cannot be deleted",
            )

        image_url = product.image_url
        self.repo.delete(session, product)
        if image_url:
            self._remove_stored_image(image_url)
        logger.info("Deleted product %s", product_id)

    def set_product_image(
        self,
        session: Session,
        product_id: uuid.UUID,
        content_type: str,
        file_bytes: bytes,
    ) -> Product:
        """
        Upload or replace the product image.

        Path pattern:
            products/<product_id>/image.<ext>
        """
        product = self.get_product(session, product_id)
        ext = self._validate_and_get_ext(content_type, file_bytes)

        path = f"products/{product.id}/image.{ext}"
        try:
            new_url = upload_to_storage(path, file_bytes, content_type)
        except Exception:
            logger.exception("Image upload failed for product %s", product.id)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Failed to upload image",
            )

        # Same path is overwritten by the upsert; only a different old file goes
        old_url = product.image_url
        if old_url and old_url != new_url:
            self._remove_stored_image(old_url)

        product.image_url = new_url
        return self.repo.update(session, product)
