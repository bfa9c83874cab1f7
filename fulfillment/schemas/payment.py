"""
Pydantic schemas for payment requests and responses
"""
from decimal import Decimal
from typing import Literal, Optional

from pydantic import Field, field_validator

from fulfillment.money import round_cents
from fulfillment.schemas.base import CamelModel


class PaymentCreate(CamelModel):
    order_id: int = Field(..., gt=0, description="Order ID")
    amount: Decimal = Field(..., gt=0, description="Amount to charge")
    payment_method: str = Field("CARD", min_length=1, max_length=50)
    simulate_status: Optional[Literal["SUCCESS", "FAILED"]] = None

    @field_validator("amount")
    @classmethod
    def round_to_cents(cls, value: Decimal) -> Decimal:
        return round_cents(value)


class PaymentResponse(CamelModel):
    payment_id: int
    order_id: int
    amount: Decimal
    payment_method: str
    status: str
    provider_reference: Optional[str] = None
    error_message: Optional[str] = None


class PaymentInitiatedResponse(CamelModel):
    message: str
    payment: PaymentResponse
