"""Catalog repository - Read-only store and product lookups"""

from typing import Optional

from sqlalchemy.orm import Session, selectinload

from ...models import Product, Store


class CatalogRepository:
    """Repository for catalog reads used by the order workflow"""

    @staticmethod
    def find_store_by_slug(db: Session, slug: str) -> Optional[Store]:
        """Get an active store by its public slug"""
        return (
            db.query(Store)
            .filter(Store.slug == slug.strip().lower(), Store.is_active.is_(True))
            .first()
        )

    @staticmethod
    def find_product(db: Session, product_id: str, store_id: str) -> Optional[Product]:
        """Get a product of this store with its variants loaded"""
        return (
            db.query(Product)
            .options(selectinload(Product.variants))
            .filter(Product.id == product_id, Product.store_id == store_id)
            .first()
        )
