"""
SQLAlchemy InventoryRecord model
"""
from sqlalchemy import Column, Integer, DateTime, CheckConstraint
from sqlalchemy.sql import func

from fulfillment.database import Base


class InventoryRecord(Base):
    """Per-product stock counters"""

    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    product_id = Column(Integer, nullable=False, unique=True, index=True)
    quantity_available = Column(Integer, nullable=False, default=0)
    quantity_reserved = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    # Constraints
    __table_args__ = (
        CheckConstraint('quantity_available >= 0', name='check_available_non_negative'),
        CheckConstraint('quantity_reserved >= 0', name='check_reserved_non_negative'),
    )

    @property
    def total_quantity(self) -> int:
        return self.quantity_available + self.quantity_reserved

    def __repr__(self):
        return (
            f"<InventoryRecord(product_id={self.product_id}, "
            f"available={self.quantity_available}, reserved={self.quantity_reserved})>"
        )
