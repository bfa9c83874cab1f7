"""
Payment Service - standalone payment attempts for existing orders
"""
import logging
from typing import Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from fulfillment.database import apply_lock_timeout, atomic
from fulfillment.exceptions import InternalError, OrderNotFoundError, OrderStateError, ValidationError
from fulfillment.metrics import PAYMENTS_TOTAL
from fulfillment.models.order import OrderStatus
from fulfillment.publishers.dispatcher import OutboundDispatcher
from fulfillment.repositories.order_repository import OrderRepository
from fulfillment.repositories.payment_repository import PaymentRepository
from fulfillment.schemas.payment import PaymentCreate, PaymentInitiatedResponse, PaymentResponse
from fulfillment.security import CurrentUser, ensure_owner_or_admin
from fulfillment.services.payment_simulator import PaymentSimulator

logger = logging.getLogger(__name__)


class PaymentService:
    """Service layer for payment attempts"""

    def __init__(
        self,
        db: Session,
        dispatcher: Optional[OutboundDispatcher] = None,
        simulator: Optional[PaymentSimulator] = None
    ):
        self.db = db
        self.orders = OrderRepository(db)
        self.repository = PaymentRepository(db)
        self.dispatcher = dispatcher
        self.simulator = simulator or PaymentSimulator()

    def initiate_payment(self, user: CurrentUser, payment_data: PaymentCreate) -> PaymentInitiatedResponse:
        """
        Record a simulated payment attempt for an order

        Only PENDING orders accept payments. A completed payment confirms the
        order; a declined one is a normal outcome here: the FAILED attempt is
        committed and returned and the order stays PENDING for a retry.

        Raises:
            ValidationError: Amount is not positive
            OrderNotFoundError: No such order
            AuthorizationError: Requester is neither the owner nor an admin
            OrderStateError: The order is no longer PENDING
        """
        if payment_data.amount is None or payment_data.amount <= 0:
            raise ValidationError("amount must be a positive number")
        approved = self.simulator.draw(payment_data.simulate_status)

        try:
            with atomic(self.db):
                apply_lock_timeout(self.db)
                order = self.orders.lock_by_id(payment_data.order_id)
                if not order:
                    raise OrderNotFoundError(payment_data.order_id)

                ensure_owner_or_admin(user, order.user_id, "Not allowed to pay for this order")
                if order.status != OrderStatus.PENDING.value:
                    raise OrderStateError(order.id, order.status)

                payment = self.repository.create(order.id, payment_data.amount, payment_data.payment_method)
                outcome = self.simulator.settle(approved, order.id, payment_id=payment.id)
                outcome.apply_to(payment)
                if outcome.succeeded:
                    order.transition_to(OrderStatus.CONFIRMED)
                self.db.flush()

                result = PaymentResponse(
                    payment_id=payment.id,
                    order_id=order.id,
                    amount=payment_data.amount,
                    payment_method=payment.payment_method,
                    status=payment.status,
                    provider_reference=payment.provider_reference,
                    error_message=payment.error_message,
                )
        except SQLAlchemyError:
            logger.exception("Database error while recording payment for order %s", payment_data.order_id)
            raise InternalError()

        PAYMENTS_TOTAL.labels(result.status).inc()
        logger.info("Payment %s for order %s: %s", result.payment_id, result.order_id, result.status)

        if self.dispatcher is not None:
            event_type = "PaymentCompleted" if outcome.succeeded else "PaymentFailed"
            self.dispatcher.submit(event_type, result.model_dump(mode="json", by_alias=True))

        return PaymentInitiatedResponse(
            message="Payment completed successfully" if outcome.succeeded else "Payment failed",
            payment=result,
        )
