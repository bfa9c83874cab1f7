"""
Order Service - the order-fulfillment workflow
"""
import logging
from typing import List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fulfillment.database import apply_lock_timeout, atomic
from fulfillment.exceptions import (
    InsufficientStockError,
    InternalError,
    PaymentDeclinedError,
    ProductNotFoundError,
    ValidationError
)
from fulfillment.metrics import ORDERS_TOTAL, PAYMENTS_TOTAL
from fulfillment.models.order import OrderStatus
from fulfillment.money import line_total, money_sum
from fulfillment.publishers.dispatcher import OutboundDispatcher
from fulfillment.repositories.catalog_repository import CatalogRepository
from fulfillment.repositories.order_repository import OrderRepository
from fulfillment.repositories.payment_repository import PaymentRepository
from fulfillment.schemas.order import OrderCreate, OrderCreatedResponse, OrderItemCreate, OrderResponse
from fulfillment.security import CurrentUser
from fulfillment.services.inventory_service import InventoryService
from fulfillment.services.order_query import OrderQueryService, build_order_response
from fulfillment.services.payment_simulator import PaymentSimulator

logger = logging.getLogger(__name__)


class OrderService:
    """Service layer for order business logic"""

    def __init__(
        self,
        db: Session,
        dispatcher: Optional[OutboundDispatcher] = None,
        simulator: Optional[PaymentSimulator] = None
    ):
        self.db = db
        self.repository = OrderRepository(db)
        self.payment_repository = PaymentRepository(db)
        self.catalog = CatalogRepository(db)
        self.inventory = InventoryService(db)
        self.dispatcher = dispatcher
        self.simulator = simulator or PaymentSimulator()

    def get_order(self, order_id: int, user: CurrentUser) -> OrderResponse:
        """Get an enriched order visible to its owner or an admin"""
        return OrderQueryService(self.db).get_order(order_id, user)

    def create_order(self, user: CurrentUser, order_data: OrderCreate) -> OrderCreatedResponse:
        """
        Place an order

        Steps:
        1. Validate items, compute the total server-side and draw the
           simulated payment decision
        2. Lock and debit inventory (ascending product_id)
        3. Insert the PENDING order and its items
        4. Record a simulated payment
        5. Confirm the order and commit
        6. Enrich with names and hand notifications to the dispatcher

        Steps 2-5 are one transaction. A failed payment rolls everything
        back: stock is restored and no order or payment row remains.

        Raises:
            ValidationError: Empty or malformed items
            ProductNotFoundError: A product has no inventory row
            InsufficientStockError: A product is short
            PaymentDeclinedError: The simulated payment failed
            InternalError: Unexpected database failure
        """
        lines = self._price_lines(order_data.items)
        total_amount = money_sum(line["line_total"] for line in lines)
        # Decided before any inventory row is locked
        approved = self.simulator.draw(order_data.simulate_status)

        try:
            with atomic(self.db):
                apply_lock_timeout(self.db)
                self.inventory.debit([(line["product_id"], line["quantity"]) for line in lines])

                order = self.repository.create(
                    user_id=user.id,
                    total_amount=total_amount,
                    items=lines,
                    shipping_address_id=order_data.shipping_address_id,
                )

                payment = self.payment_repository.create(order.id, total_amount, order_data.payment_method)
                outcome = self.simulator.settle(approved, order.id, payment_id=payment.id)
                outcome.apply_to(payment)
                PAYMENTS_TOTAL.labels(outcome.status.value).inc()
                if not outcome.succeeded:
                    raise PaymentDeclinedError(total_amount, outcome.error_message)

                order.transition_to(OrderStatus.CONFIRMED)
                self.db.flush()
                self.db.refresh(order)
                self.db.refresh(payment)

                response = build_order_response(
                    order,
                    [(item, None) for item in order.items],
                    payment,
                    customer_name=None,
                    response_class=OrderCreatedResponse,
                )
        except PaymentDeclinedError as e:
            ORDERS_TOTAL.labels("payment_declined").inc()
            logger.warning("Payment declined for user %s (amount %s): %s; order rolled back",
                           user.id, total_amount, e.error_message)
            raise
        except (ProductNotFoundError, InsufficientStockError) as e:
            ORDERS_TOTAL.labels("rejected").inc()
            logger.info("Order rejected for user %s: %s", user.id, e.message)
            raise
        except SQLAlchemyError:
            ORDERS_TOTAL.labels("error").inc()
            logger.exception("Database error while placing order for user %s", user.id)
            raise InternalError()

        ORDERS_TOTAL.labels("confirmed").inc()
        logger.info("Order %s confirmed for user %s, total %s", response.order.id, user.id, total_amount)

        customer_email = self._enrich(response, user)
        self._notify(response, customer_email)
        return response

    @staticmethod
    def _price_lines(items: List[OrderItemCreate]) -> List[dict]:
        """Validate submitted items and compute line totals from the unit prices"""
        if not items:
            raise ValidationError("items array is required and cannot be empty")

        lines = []
        for item in items:
            if item.product_id is None or item.quantity is None or item.unit_price is None:
                raise ValidationError("Each item must have productId, quantity, and unitPrice")
            if item.quantity <= 0 or item.unit_price < 0:
                raise ValidationError(
                    "Item quantity must be > 0 and unitPrice must be >= 0",
                    {"productId": item.product_id}
                )
            lines.append({
                "product_id": item.product_id,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
                "line_total": line_total(item.quantity, item.unit_price),
            })
        return lines

    def _enrich(self, response: OrderCreatedResponse, user: CurrentUser) -> Optional[str]:
        """
        Fill in customer and product names after commit

        Read-only and best effort: a failure leaves the names empty.

        Returns:
            Email address for the confirmation message
        """
        customer_email = user.email
        try:
            customer = self.catalog.get_user(user.id)
            names = self.catalog.get_product_names(item.product_id for item in response.items)
        except SQLAlchemyError:
            logger.exception("Could not enrich order %s", response.order.id)
            response.order.customer_name = user.email
            return customer_email
        finally:
            # End the read transaction
            self.db.rollback()

        if customer is not None:
            response.order.customer_name = customer.full_name or customer.email
            customer_email = customer.email or customer_email
        else:
            response.order.customer_name = user.email

        for item in response.items:
            item.product_name = names.get(item.product_id)
        return customer_email

    def _notify(self, response: OrderCreatedResponse, customer_email: Optional[str]) -> None:
        """Hand the OrderCreated event to the dispatcher; never raises"""
        if self.dispatcher is None:
            return

        try:
            payload = {
                "orderId": response.order.id,
                "userId": response.order.user_id,
                "customerName": response.order.customer_name,
                "customerEmail": customer_email,
                "status": response.order.status,
                "totalAmount": str(response.order.total_amount),
                "shippingAddressId": response.order.shipping_address_id,
                "paymentId": response.order.payment_id,
                "paymentStatus": response.order.payment_status,
                "items": [item.model_dump(mode="json", by_alias=True) for item in response.items],
            }
            self.dispatcher.submit("OrderCreated", payload)
        except Exception:
            logger.exception("Failed to queue notifications for order %s", response.order.id)
