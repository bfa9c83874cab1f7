"""
Event Publisher

Publishes order and payment events to a RabbitMQ topic exchange, or only logs
them when EVENT_BUS is "log".
"""
import logging
from typing import Dict

import pika
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from fulfillment.config import settings
from fulfillment.schemas.events import EventEnvelope

logger = logging.getLogger(__name__)

ROUTING_KEYS = {
    "OrderCreated": "order.created",
    "PaymentCompleted": "payment.completed",
    "PaymentFailed": "payment.failed",
}


class EventPublisher:
    """Publisher for sending events to the event bus"""

    def __init__(self, bus: str = None):
        self.bus = bus or settings.EVENT_BUS
        self.rabbitmq_url = settings.RABBITMQ_URL
        self.exchange = settings.RABBITMQ_EXCHANGE

    def publish_order_created(self, order_data: Dict) -> bool:
        """Publish OrderCreated event"""
        return self.publish("OrderCreated", order_data)

    def publish_payment_completed(self, payment_data: Dict) -> bool:
        """Publish PaymentCompleted event"""
        return self.publish("PaymentCompleted", payment_data)

    def publish_payment_failed(self, payment_data: Dict) -> bool:
        """Publish PaymentFailed event"""
        return self.publish("PaymentFailed", payment_data)

    def publish(self, event_type: str, data: Dict) -> bool:
        """
        Wrap data in an event envelope and publish it

        Args:
            event_type: Event name, also selects the routing key
            data: JSON-serializable event payload

        Returns:
            True if published, False otherwise
        """
        event = EventEnvelope(event_type=event_type, data=data)
        body = event.model_dump_json()

        if self.bus == "log":
            logger.info("[EVENT] %s: %s", event_type, body)
            return True

        if self.bus != "rabbitmq":
            logger.error("Unknown event bus: %s", self.bus)
            return False

        routing_key = ROUTING_KEYS.get(event_type, event_type.lower())
        try:
            self._publish_to_rabbitmq(routing_key, body, event.event_id)
        except pika.exceptions.UnroutableError:
            logger.warning("Event %s (%s) could not be routed to any queue", event_type, event.event_id)
            return False

        logger.info("Event published: %s (ID: %s)", event_type, event.event_id)
        return True

    @retry(
        stop=stop_after_attempt(settings.MAX_RETRIES),
        wait=wait_exponential(multiplier=settings.RETRY_DELAY, min=1, max=10),
        retry=retry_if_exception_type(pika.exceptions.AMQPConnectionError),
        reraise=True
    )
    def _publish_to_rabbitmq(self, routing_key: str, body: str, event_id: str) -> None:
        connection = pika.BlockingConnection(pika.URLParameters(self.rabbitmq_url))
        try:
            channel = connection.channel()
            channel.exchange_declare(
                exchange=self.exchange,
                exchange_type='topic',
                durable=True
            )

            # Enable publisher confirms
            channel.confirm_delivery()

            channel.basic_publish(
                exchange=self.exchange,
                routing_key=routing_key,
                body=body,
                properties=pika.BasicProperties(
                    delivery_mode=2,  # Persistent message
                    content_type='application/json',
                    correlation_id=event_id
                ),
                mandatory=True
            )
        finally:
            connection.close()
