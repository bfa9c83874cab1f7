"""
Publishers package
"""
from fulfillment.publishers.dispatcher import OutboundDispatcher, get_dispatcher
from fulfillment.publishers.event_publisher import EventPublisher

__all__ = ["OutboundDispatcher", "EventPublisher", "get_dispatcher"]
