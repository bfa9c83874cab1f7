"""
Inventory API endpoints
"""
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fulfillment.database import get_db
from fulfillment.schemas.inventory import (
    InventoryCheckResponse,
    ReleaseResponse,
    ReserveResponse,
    StockRequest
)
from fulfillment.security import CurrentUser, require_admin
from fulfillment.services.inventory_service import InventoryService

router = APIRouter(prefix="/inventory", tags=["inventory"])


def get_inventory_service(db: Session = Depends(get_db)) -> InventoryService:
    """Dependency to get InventoryService instance"""
    return InventoryService(db)


@router.get("/check", response_model=InventoryCheckResponse, summary="Check inventory")
def check_inventory(
    product_id: Optional[int] = Query(None, alias="productId", gt=0, description="Product ID"),
    service: InventoryService = Depends(get_inventory_service)
):
    """
    Return inventory rows

    - **productId**: Only this product's row (optional)
    """
    return service.check(product_id)


@router.post("/reserve", response_model=ReserveResponse, summary="Reserve stock")
def reserve_stock(
    request: StockRequest,
    admin: CurrentUser = Depends(require_admin),
    service: InventoryService = Depends(get_inventory_service)
):
    """
    Move stock from available to reserved

    All-or-nothing: if any item is unknown or short, nothing is reserved and
    the response lists every failed item.
    """
    return service.reserve(
        [(item.product_id, item.quantity) for item in request.items],
        order_id=request.order_id,
    )


@router.post("/release", response_model=ReleaseResponse, summary="Release stock")
def release_stock(
    request: StockRequest,
    admin: CurrentUser = Depends(require_admin),
    service: InventoryService = Depends(get_inventory_service)
):
    """
    Move stock from reserved back to available

    Releases are capped at the reserved quantity; unknown products are
    reported in **missingItems**.
    """
    return service.release(
        [(item.product_id, item.quantity) for item in request.items],
        order_id=request.order_id,
    )
