"""
Order Repository - Data Access Layer
"""
from decimal import Decimal
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session

from fulfillment.models.catalog import Product
from fulfillment.models.order import Order, OrderItem, OrderStatus


class OrderRepository:
    """Repository for orders and their line items"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, order_id: int) -> Optional[Order]:
        """Get order by ID"""
        return self.db.query(Order).filter(Order.id == order_id).first()

    def lock_by_id(self, order_id: int) -> Optional[Order]:
        """Get order by ID under an exclusive lock held until the transaction ends"""
        return self.db.query(Order).filter(Order.id == order_id).with_for_update().first()

    def create(
        self,
        user_id: int,
        total_amount: Decimal,
        items: List[dict],
        shipping_address_id: Optional[int] = None
    ) -> Order:
        """
        Insert a PENDING order and its line items

        Args:
            user_id: Owner of the order
            total_amount: Server-computed total
            items: Dicts with product_id, quantity, unit_price, line_total
            shipping_address_id: Optional shipping address reference

        Returns:
            Flushed order with its id assigned
        """
        order = Order(
            user_id=user_id,
            status=OrderStatus.PENDING.value,
            total_amount=total_amount,
            shipping_address_id=shipping_address_id,
            items=[OrderItem(**item) for item in items],
        )
        self.db.add(order)
        self.db.flush()
        return order

    def get_items_with_product_names(self, order_id: int) -> List[Tuple[OrderItem, Optional[str]]]:
        """Get line items with the current catalog name of each product"""
        return self.db.query(OrderItem, Product.name).outerjoin(
            Product, Product.id == OrderItem.product_id
        ).filter(
            OrderItem.order_id == order_id
        ).order_by(OrderItem.id).all()
