"""
Order Query - enriched, authorized read of a persisted order
"""
from typing import List, Optional, Tuple
from sqlalchemy.orm import Session

from fulfillment.exceptions import OrderNotFoundError
from fulfillment.models.order import Order, OrderItem
from fulfillment.models.payment import Payment
from fulfillment.repositories.catalog_repository import CatalogRepository
from fulfillment.repositories.order_repository import OrderRepository
from fulfillment.repositories.payment_repository import PaymentRepository
from fulfillment.schemas.order import OrderItemResponse, OrderResponse, OrderSummary, PaymentSummary
from fulfillment.security import CurrentUser, ensure_owner_or_admin


def build_order_response(
    order: Order,
    item_rows: List[Tuple[OrderItem, Optional[str]]],
    payment: Optional[Payment],
    customer_name: Optional[str],
    response_class=OrderResponse,
    **extra
) -> OrderResponse:
    """Shape an order, its items (with product names) and latest payment"""
    summary = OrderSummary(
        id=order.id,
        user_id=order.user_id,
        customer_name=customer_name,
        status=order.status,
        total_amount=order.total_amount,
        shipping_address_id=order.shipping_address_id,
        created_at=order.created_at,
        updated_at=order.updated_at,
        payment_id=payment.id if payment else None,
        payment_status=payment.status if payment else None,
        payment_amount=payment.amount if payment else None,
        payment_method=payment.payment_method if payment else None,
    )
    items = [
        OrderItemResponse(
            id=item.id,
            order_id=item.order_id,
            product_id=item.product_id,
            product_name=product_name,
            quantity=item.quantity,
            unit_price=item.unit_price,
            line_total=item.line_total,
        )
        for item, product_name in item_rows
    ]
    return response_class(
        order=summary,
        items=items,
        payment=PaymentSummary.model_validate(payment) if payment else None,
        **extra
    )


class OrderQueryService:
    """Read-only projection; takes no locks"""

    def __init__(self, db: Session):
        self.db = db
        self.orders = OrderRepository(db)
        self.payments = PaymentRepository(db)
        self.catalog = CatalogRepository(db)

    def get_order(self, order_id: int, user: CurrentUser) -> OrderResponse:
        """
        Get an enriched order

        Raises:
            OrderNotFoundError: No such order
            AuthorizationError: Requester is neither the owner nor an admin
        """
        order = self.orders.get_by_id(order_id)
        if not order:
            raise OrderNotFoundError(order_id)

        ensure_owner_or_admin(user, order.user_id, "Not allowed to view this order")

        item_rows = self.orders.get_items_with_product_names(order.id)
        payment = self.payments.get_latest_for_order(order.id)
        customer = self.catalog.get_user(order.user_id)

        return build_order_response(
            order,
            item_rows,
            payment,
            customer_name=(customer.full_name or customer.email) if customer else None,
        )
