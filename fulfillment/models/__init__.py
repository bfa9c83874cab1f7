"""
Models package
"""
from fulfillment.models.catalog import Product, User
from fulfillment.models.inventory import InventoryRecord
from fulfillment.models.order import Order, OrderItem, OrderStatus
from fulfillment.models.payment import Payment, PaymentStatus

__all__ = [
    "Product",
    "User",
    "InventoryRecord",
    "Order",
    "OrderItem",
    "OrderStatus",
    "Payment",
    "PaymentStatus"
]
