"""
Outbound Dispatcher

Side effects (event publishing, confirmation emails) are handed to a bounded
in-process queue and run on a background thread. Callers never wait for them,
and a failing handler is logged and counted without affecting the caller.
"""
import logging
import queue
import threading
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional

from fulfillment.config import settings
from fulfillment.metrics import OUTBOUND_DROPPED_TOTAL, OUTBOUND_FAILURES_TOTAL

logger = logging.getLogger(__name__)

Handler = Callable[[Dict[str, Any]], Any]

_STOP = object()


class OutboundDispatcher:
    """Fire-and-forget queue drained by a daemon worker thread"""

    def __init__(self, maxsize: int = None, name: str = "outbound-dispatcher"):
        self._queue: "queue.Queue" = queue.Queue(maxsize=maxsize or settings.OUTBOUND_QUEUE_SIZE)
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)
        self._name = name
        self._worker: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._stopped = False

    def register(self, event_type: str, handler: Handler) -> None:
        self._handlers[event_type].append(handler)

    def start(self) -> None:
        with self._lock:
            if self._worker is not None and self._worker.is_alive():
                return
            self._stopped = False
            self._worker = threading.Thread(target=self._run, name=self._name, daemon=True)
            self._worker.start()
            logger.info("Outbound dispatcher started")

    def stop(self, timeout: float = 5.0) -> None:
        """Process what is already queued, then stop the worker"""
        with self._lock:
            worker = self._worker
            self._stopped = True
        if worker is None or not worker.is_alive():
            return
        self._queue.put(_STOP)
        worker.join(timeout)
        logger.info("Outbound dispatcher stopped")

    def submit(self, event_type: str, data: Dict[str, Any]) -> bool:
        """
        Queue a message without blocking

        Returns:
            False if the message was dropped (queue full or dispatcher stopped)
        """
        if self._stopped:
            OUTBOUND_DROPPED_TOTAL.labels(event_type).inc()
            logger.warning("Dispatcher stopped; dropping %s", event_type)
            return False

        self.start()
        try:
            self._queue.put_nowait((event_type, data))
        except queue.Full:
            OUTBOUND_DROPPED_TOTAL.labels(event_type).inc()
            logger.warning("Outbound queue full; dropping %s", event_type)
            return False
        return True

    def flush(self) -> None:
        """Block until every queued message has been handled"""
        self._queue.join()

    def _run(self) -> None:
        while True:
            message = self._queue.get()
            try:
                if message is _STOP:
                    return
                self._deliver(*message)
            finally:
                self._queue.task_done()

    def _deliver(self, event_type: str, data: Dict[str, Any]) -> None:
        handlers = self._handlers.get(event_type, [])
        if not handlers:
            logger.debug("No handlers for %s", event_type)

        for handler in handlers:
            handler_name = getattr(handler, "__name__", repr(handler))
            try:
                ok = handler(data)
            except Exception:
                OUTBOUND_FAILURES_TOTAL.labels(event_type, handler_name).inc()
                logger.exception("Outbound handler %s failed for %s", handler_name, event_type)
                continue

            if ok is False:
                OUTBOUND_FAILURES_TOTAL.labels(event_type, handler_name).inc()
                logger.warning("Outbound handler %s reported failure for %s", handler_name, event_type)


def build_default_dispatcher() -> OutboundDispatcher:
    """Wire the event publisher and notification service to their events"""
    from fulfillment.publishers.event_publisher import EventPublisher
    from fulfillment.services.notification_service import NotificationService

    publisher = EventPublisher()
    notifications = NotificationService()

    dispatcher = OutboundDispatcher()
    dispatcher.register("OrderCreated", publisher.publish_order_created)
    dispatcher.register("OrderCreated", notifications.send_order_confirmation)
    dispatcher.register("PaymentCompleted", publisher.publish_payment_completed)
    dispatcher.register("PaymentFailed", publisher.publish_payment_failed)
    return dispatcher


_default_dispatcher: Optional[OutboundDispatcher] = None
_default_lock = threading.Lock()


def get_dispatcher() -> OutboundDispatcher:
    """Dependency: the process-wide dispatcher, created on first use"""
    global _default_dispatcher
    with _default_lock:
        if _default_dispatcher is None:
            _default_dispatcher = build_default_dispatcher()
        return _default_dispatcher


def shutdown_dispatcher() -> None:
    global _default_dispatcher
    with _default_lock:
        dispatcher, _default_dispatcher = _default_dispatcher, None
    if dispatcher is not None:
        dispatcher.stop()
