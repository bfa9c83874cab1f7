"""
Notification Service - order confirmation emails
"""
import logging
from typing import Dict, List

from fulfillment.config import settings

logger = logging.getLogger(__name__)


class NotificationService:
    """Service for sending customer notifications"""

    def __init__(self, email_service: str = None):
        self.email_service = email_service or settings.EMAIL_SERVICE
        self.sender = settings.EMAIL_FROM

    def send_order_confirmation(self, order_data: Dict) -> bool:
        """
        Send the confirmation email for a placed order

        Args:
            order_data: OrderCreated payload (orderId, customerName,
                customerEmail, items, totalAmount)

        Returns:
            True if the notification was sent or intentionally skipped
        """
        to = order_data.get("customerEmail")
        if not to:
            logger.warning("No recipient email for order %s; skipping confirmation email",
                           order_data.get("orderId"))
            return True

        subject = f"Your CloudRetail Order #{order_data.get('orderId')}"
        body = render_order_confirmation(order_data)

        if self.email_service == "console":
            return self._send_console_notification(to, subject, body)
        elif self.email_service == "disabled":
            return True
        else:
            logger.error("Unknown email service: %s", self.email_service)
            return False

    def _send_console_notification(self, to: str, subject: str, body: str) -> bool:
        """
        Simulate email sending by logging the message

        This is for development/testing purposes
        """
        logger.info("EMAIL NOTIFICATION (Console Mode)\nFrom: %s\nTo: %s\nSubject: %s\n\n%s",
                    self.sender, to, subject, body)
        return True


def render_order_confirmation(order_data: Dict) -> str:
    """Plain-text body of the order confirmation email"""
    items: List[Dict] = order_data.get("items", [])

    lines = [
        f"Hi {order_data.get('customerName') or 'Customer'},",
        "",
        f"Thank you for your order #{order_data.get('orderId')}. Here are your order details:",
        "",
        "Items:",
    ]
    for item in items:
        name = item.get("productName") or f"Product {item.get('productId')}"
        lines.append(f"- {name} x {item.get('quantity')} @ {item.get('unitPrice')} = {item.get('lineTotal')}")
    lines += [
        "",
        f"Total amount: {order_data.get('totalAmount')}",
        "",
        "Thank you for shopping with CloudRetail.",
        "",
        "Best regards,",
        "CloudRetail Team",
    ]
    return "\n".join(lines)
