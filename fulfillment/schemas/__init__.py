"""
Schemas package
"""
from fulfillment.schemas.inventory import (
    StockItem,
    StockRequest,
    ReservedItem,
    ReleasedItem,
    DebitedItem,
    MissingItem,
    ReserveResponse,
    ReleaseResponse,
    InventoryRow,
    InventoryCheckResponse
)
from fulfillment.schemas.order import (
    OrderItemCreate,
    OrderCreate,
    OrderItemResponse,
    OrderSummary,
    PaymentSummary,
    OrderResponse,
    OrderCreatedResponse
)
from fulfillment.schemas.payment import (
    PaymentCreate,
    PaymentResponse,
    PaymentInitiatedResponse
)
from fulfillment.schemas.events import EventEnvelope

__all__ = [
    "StockItem",
    "StockRequest",
    "ReservedItem",
    "ReleasedItem",
    "DebitedItem",
    "MissingItem",
    "ReserveResponse",
    "ReleaseResponse",
    "InventoryRow",
    "InventoryCheckResponse",
    "OrderItemCreate",
    "OrderCreate",
    "OrderItemResponse",
    "OrderSummary",
    "PaymentSummary",
    "OrderResponse",
    "OrderCreatedResponse",
    "PaymentCreate",
    "PaymentResponse",
    "PaymentInitiatedResponse",
    "EventEnvelope"
]
