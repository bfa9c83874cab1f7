"""
Pydantic schemas for order requests and responses
"""
from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import Field, field_validator

from fulfillment.money import round_cents
from fulfillment.schemas.base import CamelModel


class OrderItemCreate(CamelModel):
    """Line item as submitted by the client"""
    product_id: int = Field(..., gt=0, description="Product ID")
    quantity: int = Field(..., gt=0, description="Quantity to order")
    unit_price: Decimal = Field(..., ge=0, description="Unit price at checkout")

    @field_validator("unit_price")
    @classmethod
    def round_to_cents(cls, value: Decimal) -> Decimal:
        return round_cents(value)


class OrderCreate(CamelModel):
    """Schema for creating a new order; the total is always computed server-side"""
    shipping_address_id: Optional[int] = Field(None, gt=0)
    items: List[OrderItemCreate] = Field(..., min_length=1)
    payment_method: str = Field("SIMULATED", min_length=1, max_length=50)
    simulate_status: Optional[Literal["SUCCESS", "FAILED"]] = Field(
        None,
        description="Force the simulated payment outcome"
    )


class OrderItemResponse(CamelModel):
    id: Optional[int] = None
    order_id: Optional[int] = None
    product_id: int
    product_name: Optional[str] = None
    quantity: int
    unit_price: Decimal
    line_total: Decimal


class PaymentSummary(CamelModel):
    id: int
    amount: Decimal
    status: str
    payment_method: str
    provider_reference: Optional[str] = None
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None


class OrderSummary(CamelModel):
    id: int
    user_id: int
    customer_name: Optional[str] = None
    status: str
    total_amount: Decimal
    shipping_address_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    payment_id: Optional[int] = None
    payment_status: Optional[str] = None
    payment_amount: Optional[Decimal] = None
    payment_method: Optional[str] = None


class OrderResponse(CamelModel):
    """Enriched order: summary, line items and the latest payment"""
    order: OrderSummary
    items: List[OrderItemResponse]
    payment: Optional[PaymentSummary] = None


class OrderCreatedResponse(OrderResponse):
    message: str = "Order created and paid successfully"
