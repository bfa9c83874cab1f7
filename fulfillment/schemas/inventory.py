"""
Pydantic schemas for inventory requests and responses
"""
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import Field

from fulfillment.schemas.base import CamelModel


class StockItem(CamelModel):
    """One product/quantity pair in a reserve or release batch"""
    product_id: int = Field(..., gt=0, description="Product ID")
    quantity: int = Field(..., gt=0, description="Quantity to reserve or release")


class StockRequest(CamelModel):
    """Schema for reserve and release requests"""
    order_id: Optional[int] = Field(None, description="Order ID, used for correlation only")
    items: List[StockItem] = Field(..., min_length=1)


class ReservedItem(CamelModel):
    product_id: int
    quantity_reserved: int
    quantity_available: int
    quantity_reserved_total: int


class ReleasedItem(CamelModel):
    product_id: int
    quantity_released: int
    quantity_available: int
    quantity_reserved_total: int


class DebitedItem(CamelModel):
    """Balance after a direct debit"""
    product_id: int
    quantity_debited: int
    quantity_available: int


class MissingItem(CamelModel):
    product_id: int
    reason: Literal["NOT_FOUND"] = "NOT_FOUND"


class ReserveResponse(CamelModel):
    message: str
    order_id: Optional[int] = None
    items: List[ReservedItem]


class ReleaseResponse(CamelModel):
    message: str
    order_id: Optional[int] = None
    items: List[ReleasedItem]
    missing_items: List[MissingItem] = []


class InventoryRow(CamelModel):
    id: int
    product_id: int
    quantity_available: int
    quantity_reserved: int
    updated_at: Optional[datetime] = None


class InventoryCheckResponse(CamelModel):
    inventory: List[InventoryRow]
