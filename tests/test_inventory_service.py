"""
Tests for the stock ledger: reserve, release and direct debit
"""
import threading

import pytest

from fulfillment.exceptions import (
    InsufficientStockError,
    ProductNotFoundError,
    StockReservationError,
    ValidationError
)
from fulfillment.services.inventory_service import InventoryService, normalize_items
from tests.helpers import add_stock, stock_of


class TestNormalizeItems:
    def test_merges_duplicates_and_sorts(self):
        assert normalize_items([(3, 1), (1, 2), (3, 4)]) == {1: 2, 3: 5}
        assert list(normalize_items([(3, 1), (1, 2)])) == [1, 3]

    @pytest.mark.parametrize("items", [None, []])
    def test_empty_batch(self, items):
        with pytest.raises(ValidationError, match="cannot be empty"):
            normalize_items(items)

    def test_malformed_pair(self):
        with pytest.raises(ValidationError, match="productId and quantity"):
            normalize_items([(1,)])

    @pytest.mark.parametrize("product_id", [0, -4, "1", True])
    def test_bad_product_id(self, product_id):
        with pytest.raises(ValidationError, match="positive integer productId"):
            normalize_items([(product_id, 1)])

    @pytest.mark.parametrize("quantity", [0, -1, 1.5])
    def test_bad_quantity(self, quantity):
        with pytest.raises(ValidationError, match="greater than 0"):
            normalize_items([(1, quantity)])


class TestReserve:
    def test_moves_available_to_reserved(self, db):
        add_stock(db, 1, available=10)

        result = InventoryService(db).reserve([(1, 4)], order_id=77)

        assert result.message == "Stock reserved successfully"
        assert result.order_id == 77
        assert result.items[0].quantity_reserved == 4
        assert result.items[0].quantity_available == 6
        assert result.items[0].quantity_reserved_total == 4
        assert stock_of(db, 1) == (6, 4)

    def test_reserve_exact_balance(self, db):
        add_stock(db, 1, available=3)

        InventoryService(db).reserve([(1, 3)])

        assert stock_of(db, 1) == (0, 3)

    def test_batch_is_all_or_nothing(self, db):
        add_stock(db, 1, available=10)
        add_stock(db, 2, available=1)

        with pytest.raises(StockReservationError) as exc_info:
            InventoryService(db).reserve([(1, 5), (2, 2), (3, 1)])

        failed = {item["productId"]: item for item in exc_info.value.failed_items}
        assert failed[2]["reason"] == "INSUFFICIENT_STOCK"
        assert failed[2]["requestedQuantity"] == 2
        assert failed[2]["availableQuantity"] == 1
        assert failed[3]["reason"] == "NOT_FOUND"
        assert 1 not in failed
        assert stock_of(db, 1) == (10, 0)
        assert stock_of(db, 2) == (1, 0)

    def test_duplicate_lines_are_merged_before_checking(self, db):
        add_stock(db, 1, available=5)

        with pytest.raises(StockReservationError):
            InventoryService(db).reserve([(1, 3), (1, 3)])

        assert stock_of(db, 1) == (5, 0)


class TestRelease:
    def test_round_trip_restores_balance(self, db):
        add_stock(db, 1, available=10)
        service = InventoryService(db)

        service.reserve([(1, 4)])
        result = service.release([(1, 4)])

        assert result.message == "Stock released successfully"
        assert result.items[0].quantity_released == 4
        assert stock_of(db, 1) == (10, 0)

    def test_release_is_clamped_to_reserved(self, db):
        add_stock(db, 1, available=5, reserved=2)

        result = InventoryService(db).release([(1, 10)])

        assert result.items[0].quantity_released == 2
        assert stock_of(db, 1) == (7, 0)

    def test_repeated_release_never_over_credits(self, db):
        add_stock(db, 1, available=5, reserved=2)
        service = InventoryService(db)

        service.release([(1, 2)])
        result = service.release([(1, 2)])

        assert result.items[0].quantity_released == 0
        assert stock_of(db, 1) == (7, 0)

    def test_unknown_products_are_reported_and_skipped(self, db):
        add_stock(db, 1, available=0, reserved=3)

        result = InventoryService(db).release([(1, 3), (42, 1)])

        assert [m.product_id for m in result.missing_items] == [42]
        assert result.missing_items[0].reason == "NOT_FOUND"
        assert stock_of(db, 1) == (3, 0)


class TestDebit:
    def test_decrement_available(self, db):
        add_stock(db, 2, available=8, reserved=1)

        result = InventoryService(db).decrement_available(2, 3)

        assert result.quantity_debited == 3
        assert result.quantity_available == 5
        assert stock_of(db, 2) == (5, 1)

    def test_decrement_unknown_product(self, db):
        with pytest.raises(ProductNotFoundError) as exc_info:
            InventoryService(db).decrement_available(42, 1)

        assert exc_info.value.product_id == 42

    def test_decrement_insufficient(self, db):
        add_stock(db, 1, available=2)

        with pytest.raises(InsufficientStockError) as exc_info:
            InventoryService(db).decrement_available(1, 3)

        assert exc_info.value.to_dict()["availableQuantity"] == 2
        assert stock_of(db, 1) == (2, 0)

    def test_debit_checks_everything_before_writing(self, db):
        add_stock(db, 1, available=10)
        add_stock(db, 2, available=1)
        service = InventoryService(db)

        with pytest.raises(InsufficientStockError):
            service.debit([(1, 5), (2, 2)])
        db.rollback()

        assert stock_of(db, 1) == (10, 0)

    def test_check_single_and_all(self, db):
        add_stock(db, 1, available=10)
        add_stock(db, 2, available=4, reserved=1)
        service = InventoryService(db)

        single = service.check(2)
        everything = service.check()
        db.rollback()

        assert [(r.product_id, r.quantity_available, r.quantity_reserved) for r in single.inventory] == [(2, 4, 1)]
        assert {r.product_id for r in everything.inventory} == {1, 2}
        assert service.check(42).inventory == []


def test_concurrent_reservations_never_oversell(db, session_factory):
    add_stock(db, 1, available=5)
    outcomes = []
    outcomes_lock = threading.Lock()

    def reserve_one():
        session = session_factory()
        try:
            InventoryService(session).reserve([(1, 1)])
            outcome = "ok"
        except StockReservationError:
            outcome = "short"
        finally:
            session.close()
        with outcomes_lock:
            outcomes.append(outcome)

    threads = [threading.Thread(target=reserve_one) for _ in range(10)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert outcomes.count("ok") == 5
    assert outcomes.count("short") == 5
    assert stock_of(db, 1) == (0, 5)
