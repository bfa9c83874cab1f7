"""
Inventory Repository - Data Access Layer
"""
from typing import Dict, Iterable, List, Optional
from sqlalchemy.orm import Session

from fulfillment.models.inventory import InventoryRecord


class InventoryRepository:
    """Repository for inventory rows"""

    def __init__(self, db: Session):
        self.db = db

    def get_all(self) -> List[InventoryRecord]:
        """Get all inventory rows ordered by product"""
        return self.db.query(InventoryRecord).order_by(InventoryRecord.product_id).all()

    def get_by_product_id(self, product_id: int) -> Optional[InventoryRecord]:
        """Get the inventory row for a product without locking it"""
        return self.db.query(InventoryRecord).filter(
            InventoryRecord.product_id == product_id
        ).first()

    def lock_by_product_ids(self, product_ids: Iterable[int]) -> Dict[int, InventoryRecord]:
        """
        Read inventory rows under an exclusive lock held until the transaction ends

        Rows are locked in ascending product_id order so two batches sharing
        products can't deadlock each other.

        Returns:
            Mapping of product_id to row; unknown products are absent
        """
        ids = sorted(set(product_ids))
        if not ids:
            return {}

        rows = self.db.query(InventoryRecord).filter(
            InventoryRecord.product_id.in_(ids)
        ).order_by(InventoryRecord.product_id).with_for_update().all()

        return {row.product_id: row for row in rows}

    def create(self, product_id: int, quantity_available: int = 0, quantity_reserved: int = 0) -> InventoryRecord:
        """Add an inventory row (used by seeding and tests)"""
        record = InventoryRecord(
            product_id=product_id,
            quantity_available=quantity_available,
            quantity_reserved=quantity_reserved,
        )
        self.db.add(record)
        self.db.flush()
        return record
