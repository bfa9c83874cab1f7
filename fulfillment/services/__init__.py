"""
Services package
"""
from fulfillment.services.inventory_service import InventoryService
from fulfillment.services.notification_service import NotificationService
from fulfillment.services.order_query import OrderQueryService
from fulfillment.services.order_service import OrderService
from fulfillment.services.payment_service import PaymentService
from fulfillment.services.payment_simulator import PaymentSimulator, PaymentOutcome

__all__ = [
    "InventoryService",
    "NotificationService",
    "OrderQueryService",
    "OrderService",
    "PaymentService",
    "PaymentSimulator",
    "PaymentOutcome"
]
