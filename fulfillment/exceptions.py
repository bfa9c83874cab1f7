"""
Error taxonomy for the fulfillment workflow

Every expected failure is a FulfillmentError subclass carrying an HTTP status,
a machine-readable code and optional details identifying the offending items
or fields. The API layer renders them uniformly.
"""
from typing import Any, Dict, List, Optional


class FulfillmentError(Exception):
    """Base class for all expected fulfillment errors"""

    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "code": self.code, **self.details}


class ValidationError(FulfillmentError):
    """Malformed, missing or out-of-range input"""

    status_code = 400
    code = "INVALID_REQUEST"


class AuthenticationError(FulfillmentError):
    status_code = 401
    code = "UNAUTHENTICATED"


class AuthorizationError(FulfillmentError):
    """Requester is neither the owner nor an admin"""

    status_code = 403
    code = "FORBIDDEN"


class NotFoundError(FulfillmentError):
    status_code = 404
    code = "NOT_FOUND"


class OrderNotFoundError(NotFoundError):
    def __init__(self, order_id: int):
        super().__init__("Order not found", {"orderId": order_id})


class ProductNotFoundError(NotFoundError):
    """No inventory record exists for the product; a client-fixable order error"""

    status_code = 400
    code = "PRODUCT_NOT_FOUND"

    def __init__(self, product_id: int):
        super().__init__(
            f"Inventory not found for productId {product_id}",
            {"productId": product_id},
        )
        self.product_id = product_id


class OrderStateError(FulfillmentError):
    """The order is not in a state that allows the operation"""

    status_code = 409
    code = "ORDER_NOT_PAYABLE"

    def __init__(self, order_id: int, status: str):
        super().__init__(
            f"Order {order_id} is {status} and does not accept payments",
            {"orderId": order_id, "status": status},
        )


class InsufficientStockError(FulfillmentError):
    status_code = 400
    code = "INSUFFICIENT_STOCK"

    def __init__(self, product_id: int, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for productId {product_id}. "
            f"Requested {requested}, available {available}",
            {
                "productId": product_id,
                "requestedQuantity": requested,
                "availableQuantity": available,
            },
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class StockReservationError(FulfillmentError):
    """A batch reservation was rejected; nothing in the batch was applied"""

    status_code = 400
    code = "RESERVATION_FAILED"

    def __init__(self, failed_items: List[Dict[str, Any]], order_id: Optional[int] = None):
        super().__init__(
            "Failed to reserve stock for one or more items",
            {"orderId": order_id, "failedItems": failed_items},
        )
        self.failed_items = failed_items


class PaymentDeclinedError(FulfillmentError):
    status_code = 402
    code = "PAYMENT_DECLINED"

    def __init__(self, amount, error_message: str):
        super().__init__(
            "Payment failed; the order was not placed",
            {"amount": str(amount), "reason": error_message},
        )
        self.error_message = error_message


class InternalError(FulfillmentError):
    """Unexpected failure; rendered without internal detail"""

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
