"""
Payment API endpoints
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fulfillment.database import get_db
from fulfillment.publishers.dispatcher import OutboundDispatcher, get_dispatcher
from fulfillment.schemas.payment import PaymentCreate, PaymentInitiatedResponse
from fulfillment.security import CurrentUser, get_current_user
from fulfillment.services.payment_service import PaymentService

router = APIRouter(prefix="/payments", tags=["payments"])


def get_payment_service(
    db: Session = Depends(get_db),
    dispatcher: OutboundDispatcher = Depends(get_dispatcher)
) -> PaymentService:
    """Dependency to get PaymentService instance"""
    return PaymentService(db, dispatcher=dispatcher)


@router.post("", response_model=PaymentInitiatedResponse, summary="Initiate payment")
def initiate_payment(
    payment_data: PaymentCreate,
    user: CurrentUser = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service)
):
    """
    Simulate a payment for an order

    - **orderId**: Order to pay (owner or ADMIN only)
    - **amount**: Positive amount
    - **paymentMethod**: Defaults to CARD
    - **simulateStatus**: SUCCESS or FAILED to force the outcome
    """
    return service.initiate_payment(user, payment_data)
