"""
Repositories package

Repositories never commit; the service that opens a transaction owns it.
"""
from fulfillment.repositories.catalog_repository import CatalogRepository
from fulfillment.repositories.inventory_repository import InventoryRepository
from fulfillment.repositories.order_repository import OrderRepository
from fulfillment.repositories.payment_repository import PaymentRepository

__all__ = ["CatalogRepository", "InventoryRepository", "OrderRepository", "PaymentRepository"]
