"""
Order API endpoints
"""
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from fulfillment.database import get_db
from fulfillment.publishers.dispatcher import OutboundDispatcher, get_dispatcher
from fulfillment.schemas.order import OrderCreate, OrderCreatedResponse, OrderResponse
from fulfillment.security import CurrentUser, get_current_user
from fulfillment.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_order_service(
    db: Session = Depends(get_db),
    dispatcher: OutboundDispatcher = Depends(get_dispatcher)
) -> OrderService:
    """Dependency to get OrderService instance"""
    return OrderService(db, dispatcher=dispatcher)


@router.post("", response_model=OrderCreatedResponse, status_code=status.HTTP_201_CREATED, summary="Create order")
def create_order(
    order_data: OrderCreate,
    user: CurrentUser = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    """
    Create a new order

    Process:
    1. Validate items and compute the total
    2. Lock and debit inventory
    3. Save order, items and payment
    4. Confirm the order
    5. Send confirmation email and OrderCreated event in the background

    - **shippingAddressId**: Shipping address (optional)
    - **items**: productId, quantity (> 0), unitPrice (>= 0)
    """
    return service.create_order(user, order_data)


@router.get("/{order_id}", response_model=OrderResponse, summary="Get order by ID")
def get_order(
    order_id: int,
    user: CurrentUser = Depends(get_current_user),
    service: OrderService = Depends(get_order_service)
):
    """
    Retrieve an order with its items and latest payment

    Only the owner or an ADMIN can see it.
    """
    return service.get_order(order_id, user)
