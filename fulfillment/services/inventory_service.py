"""
Inventory Service - the stock ledger

Every mutation reads its rows under an exclusive lock (ascending product_id)
and writes them back in the same transaction.
"""
import logging
from typing import Dict, Iterable, List, Optional, Tuple
from sqlalchemy.orm import Session

from fulfillment.database import apply_lock_timeout, atomic
from fulfillment.exceptions import (
    InsufficientStockError,
    ProductNotFoundError,
    StockReservationError,
    ValidationError
)
from fulfillment.metrics import STOCK_OPERATIONS_TOTAL
from fulfillment.repositories.inventory_repository import InventoryRepository
from fulfillment.schemas.inventory import (
    DebitedItem,
    InventoryCheckResponse,
    InventoryRow,
    MissingItem,
    ReleasedItem,
    ReleaseResponse,
    ReservedItem,
    ReserveResponse
)

logger = logging.getLogger(__name__)

StockLine = Tuple[int, int]


def normalize_items(items: Iterable[StockLine]) -> Dict[int, int]:
    """
    Validate (product_id, quantity) pairs and merge duplicates

    Returns:
        Quantities keyed by product_id, in ascending product_id order

    Raises:
        ValidationError: If the batch is empty or any pair is malformed
    """
    if items is None:
        raise ValidationError("items array is required and cannot be empty")

    merged: Dict[int, int] = {}
    for item in items:
        try:
            product_id, quantity = item
        except (TypeError, ValueError):
            raise ValidationError("Each item must have productId and quantity")

        if not _is_int(product_id) or product_id <= 0:
            raise ValidationError(
                "Each item must have a positive integer productId",
                {"productId": product_id}
            )
        if not _is_int(quantity) or quantity <= 0:
            raise ValidationError(
                "Item quantity must be greater than 0",
                {"productId": product_id, "quantity": quantity}
            )
        merged[product_id] = merged.get(product_id, 0) + quantity

    if not merged:
        raise ValidationError("items array is required and cannot be empty")

    return dict(sorted(merged.items()))


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


class InventoryService:
    """Service layer for stock reservation, release and direct debit"""

    def __init__(self, db: Session):
        self.db = db
        self.repository = InventoryRepository(db)

    def check(self, product_id: Optional[int] = None) -> InventoryCheckResponse:
        """Return one product's inventory row, or all rows"""
        if product_id is None:
            rows = self.repository.get_all()
        else:
            row = self.repository.get_by_product_id(product_id)
            rows = [row] if row else []
        return InventoryCheckResponse(
            inventory=[InventoryRow.model_validate(r) for r in rows]
        )

    def reserve(self, items: Iterable[StockLine], order_id: Optional[int] = None) -> ReserveResponse:
        """
        Move stock from available to reserved for a whole batch

        All-or-nothing: if any product is unknown or short, nothing in the
        batch changes.

        Raises:
            ValidationError: Malformed batch
            StockReservationError: One or more items failed; carries per-item reasons
        """
        requested = normalize_items(items)

        try:
            with atomic(self.db):
                apply_lock_timeout(self.db)
                records = self.repository.lock_by_product_ids(requested)

                failed_items = []
                for product_id, quantity in requested.items():
                    record = records.get(product_id)
                    if record is None:
                        failed_items.append({"productId": product_id, "reason": "NOT_FOUND"})
                    elif record.quantity_available < quantity:
                        failed_items.append({
                            "productId": product_id,
                            "reason": "INSUFFICIENT_STOCK",
                            "requestedQuantity": quantity,
                            "availableQuantity": record.quantity_available,
                        })

                if failed_items:
                    raise StockReservationError(failed_items, order_id=order_id)

                reserved = []
                for product_id, quantity in requested.items():
                    record = records[product_id]
                    record.quantity_available -= quantity
                    record.quantity_reserved += quantity
                    reserved.append(ReservedItem(
                        product_id=product_id,
                        quantity_reserved=quantity,
                        quantity_available=record.quantity_available,
                        quantity_reserved_total=record.quantity_reserved,
                    ))
        except StockReservationError as e:
            STOCK_OPERATIONS_TOTAL.labels("reserve", "rejected").inc()
            logger.info("Reservation rejected (order %s): %s", order_id, e.failed_items)
            raise

        STOCK_OPERATIONS_TOTAL.labels("reserve", "ok").inc()
        logger.info("Reserved stock for order %s: %s", order_id, dict(requested))
        return ReserveResponse(
            message="Stock reserved successfully",
            order_id=order_id,
            items=reserved,
        )

    def release(self, items: Iterable[StockLine], order_id: Optional[int] = None) -> ReleaseResponse:
        """
        Move stock from reserved back to available

        Each release is clamped to what is actually reserved, so duplicate or
        partial releases never over-credit. Unknown products are reported and
        skipped; the rest of the batch still applies.
        """
        requested = normalize_items(items)

        with atomic(self.db):
            apply_lock_timeout(self.db)
            records = self.repository.lock_by_product_ids(requested)

            released = []
            missing = []
            for product_id, quantity in requested.items():
                record = records.get(product_id)
                if record is None:
                    missing.append(MissingItem(product_id=product_id))
                    continue

                amount = min(quantity, record.quantity_reserved)
                record.quantity_reserved -= amount
                record.quantity_available += amount
                released.append(ReleasedItem(
                    product_id=product_id,
                    quantity_released=amount,
                    quantity_available=record.quantity_available,
                    quantity_reserved_total=record.quantity_reserved,
                ))

        STOCK_OPERATIONS_TOTAL.labels("release", "ok").inc()
        if missing:
            logger.warning("Release for order %s skipped unknown products %s",
                           order_id, [m.product_id for m in missing])
        logger.info("Released stock for order %s: %s",
                    order_id, {r.product_id: r.quantity_released for r in released})
        return ReleaseResponse(
            message="Stock released successfully",
            order_id=order_id,
            items=released,
            missing_items=missing,
        )

    def decrement_available(self, product_id: int, quantity: int) -> DebitedItem:
        """
        Permanently remove stock from available in its own transaction

        Raises:
            ProductNotFoundError: No inventory row for the product
            InsufficientStockError: available < quantity
        """
        with atomic(self.db):
            apply_lock_timeout(self.db)
            debited = self.debit([(product_id, quantity)])
        return debited[0]

    def debit(self, items: Iterable[StockLine]) -> List[DebitedItem]:
        """
        Direct-debit a batch inside the caller's transaction

        The caller owns the transaction and must roll back if this raises.
        Items are checked in ascending product_id order and the first unknown
        or short product aborts the batch before anything is written.

        Raises:
            ProductNotFoundError: First product without an inventory row
            InsufficientStockError: First product with available < quantity
        """
        requested = normalize_items(items)
        records = self.repository.lock_by_product_ids(requested)

        try:
            for product_id, quantity in requested.items():
                record = records.get(product_id)
                if record is None:
                    raise ProductNotFoundError(product_id)
                if record.quantity_available < quantity:
                    raise InsufficientStockError(product_id, quantity, record.quantity_available)
        except (ProductNotFoundError, InsufficientStockError):
            STOCK_OPERATIONS_TOTAL.labels("debit", "rejected").inc()
            raise

        debited = []
        for product_id, quantity in requested.items():
            record = records[product_id]
            record.quantity_available -= quantity
            debited.append(DebitedItem(
                product_id=product_id,
                quantity_debited=quantity,
                quantity_available=record.quantity_available,
            ))

        STOCK_OPERATIONS_TOTAL.labels("debit", "ok").inc()
        return debited
