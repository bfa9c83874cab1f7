"""
Catalog Repository - read-only lookups into catalog and user tables
"""
from typing import Dict, Iterable, Optional
from sqlalchemy.orm import Session

from fulfillment.models.catalog import Product, User


class CatalogRepository:
    """Read-only access to products and customers for enrichment"""

    def __init__(self, db: Session):
        self.db = db

    def get_product_names(self, product_ids: Iterable[int]) -> Dict[int, str]:
        """Map product id to name; unknown ids are absent"""
        ids = sorted(set(product_ids))
        if not ids:
            return {}
        rows = self.db.query(Product.id, Product.name).filter(Product.id.in_(ids)).all()
        return {product_id: name for product_id, name in rows}

    def get_user(self, user_id: int) -> Optional[User]:
        """Get customer by ID"""
        return self.db.query(User).filter(User.id == user_id).first()
