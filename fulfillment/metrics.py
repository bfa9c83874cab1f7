"""
Prometheus counters for business outcomes and outbound side effects
"""
from prometheus_client import Counter

ORDERS_TOTAL = Counter(
    "fulfillment_orders_total",
    "Order placement attempts by outcome",
    ["outcome"],
)

STOCK_OPERATIONS_TOTAL = Counter(
    "fulfillment_stock_operations_total",
    "Inventory ledger operations by kind and outcome",
    ["operation", "outcome"],
)

PAYMENTS_TOTAL = Counter(
    "fulfillment_payments_total",
    "Simulated payment attempts by status",
    ["status"],
)

OUTBOUND_FAILURES_TOTAL = Counter(
    "fulfillment_outbound_failures_total",
    "Outbound event/notification handler failures",
    ["event_type", "handler"],
)

OUTBOUND_DROPPED_TOTAL = Counter(
    "fulfillment_outbound_dropped_total",
    "Outbound messages dropped because the queue was full or stopped",
    ["event_type"],
)
