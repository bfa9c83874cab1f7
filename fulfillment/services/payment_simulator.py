"""
Payment Simulator

Stands in for an unreliable external processor. It is purely in-process and
never performs I/O, so it is safe to call while inventory row locks are held.
"""
import random
import time
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from fulfillment.models.payment import Payment, PaymentStatus

SUCCESS_PROBABILITY = 0.8
FAILURE_MESSAGE = "Simulated payment failure"

FORCE_SUCCESS = "SUCCESS"
FORCE_FAILED = "FAILED"


@dataclass(frozen=True)
class PaymentOutcome:
    status: PaymentStatus
    provider_reference: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.status is PaymentStatus.COMPLETED

    def apply_to(self, payment: Payment) -> None:
        """Record the outcome on a payment row"""
        payment.status = self.status.value
        payment.provider_reference = self.provider_reference
        payment.error_message = self.error_message


class PaymentSimulator:
    """Produces COMPLETED/FAILED outcomes; never raises for a well-formed charge"""

    def __init__(self, rng: random.Random = None):
        self._rng = rng or random.Random()

    def charge(
        self,
        order_id: int,
        amount: Decimal,
        method: str,
        forced_outcome: Optional[str] = None,
        payment_id: Optional[int] = None
    ) -> PaymentOutcome:
        """
        Simulate charging an order

        Args:
            order_id: Order being paid
            amount: Amount to charge
            method: Payment method label
            forced_outcome: "SUCCESS" or "FAILED" to bypass the random draw;
                any other value falls back to the draw
            payment_id: Payment row id, used in the provider reference

        Returns:
            COMPLETED outcome with a unique provider reference, or FAILED
            outcome with an error message
        """
        return self.settle(self.draw(forced_outcome), order_id, payment_id)

    def draw(self, forced_outcome: Optional[str] = None) -> bool:
        """Decide whether a charge succeeds, honoring a forced outcome"""
        forced = (forced_outcome or "").upper()
        if forced == FORCE_SUCCESS:
            return True
        if forced == FORCE_FAILED:
            return False
        return self._rng.random() < SUCCESS_PROBABILITY

    def settle(self, succeeded: bool, order_id: int, payment_id: Optional[int] = None) -> PaymentOutcome:
        """Turn a decided charge into an outcome; no randomness in the decision"""
        if not succeeded:
            return PaymentOutcome(status=PaymentStatus.FAILED, error_message=FAILURE_MESSAGE)

        return PaymentOutcome(
            status=PaymentStatus.COMPLETED,
            provider_reference=self._provider_reference(order_id, payment_id),
        )

    @staticmethod
    def _provider_reference(order_id: int, payment_id: Optional[int]) -> str:
        identity = payment_id if payment_id is not None else order_id
        return f"SIM-TXN-{int(time.time() * 1000)}-{identity}-{uuid.uuid4().hex[:8]}"
