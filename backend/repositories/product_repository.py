"""
Product repository: CRUD facade over the storage adapter for products.

Each operation commits on its own; atomicity is per product record only.
"""

from typing import Any, Dict, List
import logging

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from exceptions import ConflictError, DatabaseError, NotFoundError
from models import Product as ProductModel
from utils.uuid_helper import is_object_id
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset({
    "product_id", "name", "category", "price", "description", "tags",
    "inventory_count", "brand", "material", "available_sizes", "color",
    "settings", "weight_lb", "image_url", "images",
})


class ProductRepository(BaseRepository[ProductModel]):
    """Repository for Product model operations."""

    def __init__(self, db: Session):
        super().__init__(db, ProductModel)

    def create_product(self, record: Dict[str, Any]) -> ProductModel:
        """
        Store a new product.

        Args:
            record: Column values; must include a unique `product_id`

        Returns:
            Stored product with its generated id

        Raises:
            ConflictError: If the external product_id is already taken
        """
        product_id = record.get("product_id")
        if self.first_by(product_id=product_id) is not None:
            raise ConflictError("Product", "product_id", product_id)

        product = ProductModel(**{k: v for k, v in record.items() if k in UPDATABLE_FIELDS})
        try:
            self.create(product)
            self.db.commit()
        except IntegrityError as e:
            # Lost a race with a concurrent create of the same product_id
            self.db.rollback()
            raise ConflictError("Product", "product_id", product_id) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError("create_product", str(e)) from e

        logger.info(f"Created product {product.id} (product_id={product_id})")
        return product

    def list_products(self) -> List[ProductModel]:
        """Return every product, oldest first."""
        return self.db.query(self.model).order_by(self.model.created_at.asc()).all()

    def get_product(self, id: str) -> ProductModel:
        """
        Fetch one product by storage id.

        Raises:
            NotFoundError: If no product has this id (or the id is malformed)
        """
        product = self.get_by_id(id) if is_object_id(id) else None
        if product is None:
            raise NotFoundError("Product", id)
        return product

    def update_product(self, id: str, changes: Dict[str, Any]) -> ProductModel:
        """
        Apply a partial update: only the supplied fields change.

        Raises:
            NotFoundError: If the product does not exist
            ConflictError: If product_id is changed to one already in use
        """
        product = self.get_product(id)

        new_product_id = changes.get("product_id")
        if new_product_id and new_product_id != product.product_id:
            if self.first_by(product_id=new_product_id) is not None:
                raise ConflictError("Product", "product_id", new_product_id)

        for key, value in changes.items():
            if key in UPDATABLE_FIELDS:
                setattr(product, key, value)

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("Product", "product_id", new_product_id or product.product_id) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError("update_product", str(e)) from e

        self.db.refresh(product)
        logger.info(f"Updated product {id}: {sorted(changes)}")
        return product

    def delete_product(self, id: str) -> Dict[str, str]:
        """
        Delete a product by storage id (no soft delete).

        Raises:
            NotFoundError: If the product does not exist
        """
        product = self.get_product(id)
        try:
            self.delete(product)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            raise DatabaseError("delete_product", str(e)) from e

        logger.info(f"Deleted product {id}")
        return {"message": "Product deleted successfully"}
