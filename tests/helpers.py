"""Shared helpers for seeding and inspecting the test database."""

from decimal import Decimal
from typing import Tuple

import jwt

from fulfillment.config import settings
from fulfillment.models import InventoryRecord, Order, OrderItem, Payment, Product, User
from fulfillment.repositories.inventory_repository import InventoryRepository
from fulfillment.security import CurrentUser

ALICE = CurrentUser(id=1, role="CUSTOMER", email="alice@example.com")
BOB = CurrentUser(id=2, role="CUSTOMER", email="bob@example.com")
ADMIN = CurrentUser(id=99, role="ADMIN", email="admin@example.com")


class FixedRandom:
    """Stands in for random.Random with a constant draw."""

    def __init__(self, value: float) -> None:
        self.value = value

    def random(self) -> float:
        return self.value


def seed_catalog(db) -> None:
    db.add_all([
        User(id=1, email="alice@example.com", full_name="Alice Smith", role="CUSTOMER"),
        User(id=2, email="bob@example.com", full_name="Bob Jones", role="CUSTOMER"),
        User(id=99, email="admin@example.com", full_name="Admin", role="ADMIN"),
        Product(id=1, name="Widget", price=Decimal("50.00"), category="tools"),
        Product(id=2, name="Gadget", price=Decimal("19.99"), category="tools"),
        Product(id=3, name="Gizmo", price=Decimal("5.00"), category="toys"),
    ])
    db.commit()


def add_stock(db, product_id: int, available: int, reserved: int = 0) -> None:
    InventoryRepository(db).create(product_id, quantity_available=available, quantity_reserved=reserved)
    db.commit()


def stock_of(db, product_id: int) -> Tuple[int, int]:
    """(available, reserved) as committed; leaves no transaction open."""
    db.rollback()
    record = db.query(InventoryRecord).filter_by(product_id=product_id).one()
    balance = (record.quantity_available, record.quantity_reserved)
    db.rollback()
    return balance


def count_rows(db, model) -> int:
    db.rollback()
    count = db.query(model).count()
    db.rollback()
    return count


def row_counts(db) -> Tuple[int, int, int]:
    return count_rows(db, Order), count_rows(db, OrderItem), count_rows(db, Payment)


def make_token(user: CurrentUser, secret: str = None) -> str:
    claims = {"sub": str(user.id), "email": user.email, "role": user.role}
    return jwt.encode(claims, secret or settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def auth_header(user: CurrentUser) -> dict:
    return {"Authorization": f"Bearer {make_token(user)}"}
