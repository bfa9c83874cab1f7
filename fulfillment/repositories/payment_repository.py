"""
Payment Repository - Data Access Layer
"""
from decimal import Decimal
from typing import Optional
from sqlalchemy import desc
from sqlalchemy.orm import Session

from fulfillment.models.payment import Payment, PaymentStatus


class PaymentRepository:
    """Repository for payment attempts"""

    def __init__(self, db: Session):
        self.db = db

    def create(self, order_id: int, amount: Decimal, payment_method: str) -> Payment:
        """Insert a PENDING payment attempt"""
        payment = Payment(
            order_id=order_id,
            amount=amount,
            status=PaymentStatus.PENDING.value,
            payment_method=payment_method,
        )
        self.db.add(payment)
        self.db.flush()
        return payment

    def get_latest_for_order(self, order_id: int) -> Optional[Payment]:
        """Get the authoritative (most recent) payment for an order"""
        return self.db.query(Payment).filter(
            Payment.order_id == order_id
        ).order_by(desc(Payment.created_at), desc(Payment.id)).first()

    def count_for_order(self, order_id: int) -> int:
        return self.db.query(Payment).filter(Payment.order_id == order_id).count()
