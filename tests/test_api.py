"""
HTTP-level tests for the fulfillment endpoints
"""
from decimal import Decimal

import jwt

from fulfillment.config import settings
from fulfillment.models import Order
from tests.helpers import ADMIN, ALICE, BOB, add_stock, auth_header, count_rows, make_token, stock_of

ORDERS_URL = "/api/v1/orders"


def order_body(simulate_status="SUCCESS", **overrides):
    body = {
        "shippingAddressId": 3,
        "items": [{"productId": 1, "quantity": 2, "unitPrice": 50}],
        "simulateStatus": simulate_status,
    }
    body.update(overrides)
    return body


class TestCreateOrderEndpoint:
    def test_created(self, client, db, dispatcher):
        add_stock(db, 1, available=10)

        response = client.post(ORDERS_URL, json=order_body(), headers=auth_header(ALICE))

        assert response.status_code == 201
        data = response.json()
        assert data["message"] == "Order created and paid successfully"
        assert data["order"]["status"] == "CONFIRMED"
        assert data["order"]["customerName"] == "Alice Smith"
        assert Decimal(data["order"]["totalAmount"]) == Decimal("100.00")
        assert data["items"][0]["productName"] == "Widget"
        assert data["payment"]["status"] == "COMPLETED"
        assert stock_of(db, 1) == (8, 0)
        assert dispatcher.submitted[0][0] == "OrderCreated"

    def test_missing_token(self, client, db):
        response = client.post(ORDERS_URL, json=order_body())

        assert response.status_code == 401
        assert response.json()["message"] == "Authorization header missing"

    def test_bad_token(self, client, db):
        token = make_token(ALICE, secret="some-other-secret-with-enough-length-0123")

        response = client.post(ORDERS_URL, json=order_body(), headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401

    def test_empty_items(self, client, db):
        response = client.post(ORDERS_URL, json=order_body(items=[]), headers=auth_header(ALICE))

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_REQUEST"

    def test_non_positive_quantity(self, client, db):
        items = [{"productId": 1, "quantity": 0, "unitPrice": 50}]

        response = client.post(ORDERS_URL, json=order_body(items=items), headers=auth_header(ALICE))

        assert response.status_code == 400
        assert any(error["field"].endswith("quantity") for error in response.json()["errors"])

    def test_insufficient_stock(self, client, db):
        add_stock(db, 1, available=1)

        response = client.post(ORDERS_URL, json=order_body(), headers=auth_header(ALICE))

        assert response.status_code == 400
        data = response.json()
        assert data["code"] == "INSUFFICIENT_STOCK"
        assert data["productId"] == 1
        assert data["requestedQuantity"] == 2
        assert data["availableQuantity"] == 1

    def test_unknown_product(self, client, db):
        items = [{"productId": 42, "quantity": 1, "unitPrice": 1}]

        response = client.post(ORDERS_URL, json=order_body(items=items), headers=auth_header(ALICE))

        assert response.status_code == 400
        assert response.json()["code"] == "PRODUCT_NOT_FOUND"

    def test_payment_declined(self, client, db):
        add_stock(db, 1, available=10)

        response = client.post(ORDERS_URL, json=order_body("FAILED"), headers=auth_header(ALICE))

        assert response.status_code == 402
        assert response.json()["reason"] == "Simulated payment failure"
        assert stock_of(db, 1) == (10, 0)
        assert count_rows(db, Order) == 0


class TestGetOrderEndpoint:
    def place_order(self, client, db):
        add_stock(db, 1, available=10)
        response = client.post(ORDERS_URL, json=order_body(), headers=auth_header(ALICE))
        return response.json()["order"]["id"]

    def test_owner(self, client, db):
        order_id = self.place_order(client, db)

        response = client.get(f"{ORDERS_URL}/{order_id}", headers=auth_header(ALICE))

        assert response.status_code == 200
        data = response.json()
        assert data["order"]["id"] == order_id
        assert data["order"]["paymentStatus"] == "COMPLETED"
        assert Decimal(data["order"]["paymentAmount"]) == Decimal("100.00")

    def test_admin(self, client, db):
        order_id = self.place_order(client, db)

        response = client.get(f"{ORDERS_URL}/{order_id}", headers=auth_header(ADMIN))

        assert response.status_code == 200

    def test_other_customer(self, client, db):
        order_id = self.place_order(client, db)

        response = client.get(f"{ORDERS_URL}/{order_id}", headers=auth_header(BOB))

        assert response.status_code == 403
        assert response.json()["code"] == "FORBIDDEN"

    def test_token_with_numeric_subject(self, client, db):
        order_id = self.place_order(client, db)
        token = jwt.encode(
            {"sub": ALICE.id, "email": ALICE.email, "role": "CUSTOMER"},
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )

        response = client.get(f"{ORDERS_URL}/{order_id}", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200

    def test_not_found(self, client, db):
        response = client.get(f"{ORDERS_URL}/999", headers=auth_header(ALICE))

        assert response.status_code == 404


class TestInventoryEndpoints:
    def test_reserve_and_release(self, client, db):
        add_stock(db, 1, available=10)
        body = {"orderId": 8, "items": [{"productId": 1, "quantity": 3}]}

        reserved = client.post("/api/v1/inventory/reserve", json=body, headers=auth_header(ADMIN))
        assert reserved.status_code == 200
        assert reserved.json()["items"][0]["quantityReserved"] == 3
        assert stock_of(db, 1) == (7, 3)

        released = client.post("/api/v1/inventory/release", json=body, headers=auth_header(ADMIN))
        assert released.status_code == 200
        assert released.json()["missingItems"] == []
        assert stock_of(db, 1) == (10, 0)

    def test_reserve_requires_admin(self, client, db):
        body = {"items": [{"productId": 1, "quantity": 1}]}

        response = client.post("/api/v1/inventory/reserve", json=body, headers=auth_header(ALICE))

        assert response.status_code == 403

    def test_reserve_failure_lists_items(self, client, db):
        add_stock(db, 1, available=1)
        body = {"items": [{"productId": 1, "quantity": 2}, {"productId": 42, "quantity": 1}]}

        response = client.post("/api/v1/inventory/reserve", json=body, headers=auth_header(ADMIN))

        assert response.status_code == 400
        data = response.json()
        assert data["code"] == "RESERVATION_FAILED"
        assert {item["productId"] for item in data["failedItems"]} == {1, 42}
        assert stock_of(db, 1) == (1, 0)

    def test_check(self, client, db):
        add_stock(db, 2, available=4, reserved=1)

        response = client.get("/api/v1/inventory/check", params={"productId": 2})

        assert response.status_code == 200
        row = response.json()["inventory"][0]
        assert row["quantityAvailable"] == 4
        assert row["quantityReserved"] == 1


class TestPaymentEndpoint:
    def test_failed_payment_is_not_an_http_error(self, client, db):
        order = Order(user_id=ALICE.id, status="PENDING", total_amount=Decimal("9.99"))
        db.add(order)
        db.commit()
        order_id = order.id
        db.rollback()

        response = client.post(
            "/api/v1/payments",
            json={"orderId": order_id, "amount": "9.99", "simulateStatus": "FAILED"},
            headers=auth_header(ALICE),
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Payment failed"
        assert response.json()["payment"]["status"] == "FAILED"

    def test_confirmed_order_is_not_payable(self, client, db):
        add_stock(db, 1, available=10)
        created = client.post(ORDERS_URL, json=order_body(), headers=auth_header(ALICE))
        order_id = created.json()["order"]["id"]

        response = client.post(
            "/api/v1/payments",
            json={"orderId": order_id, "amount": "100.00", "simulateStatus": "FAILED"},
            headers=auth_header(ALICE),
        )

        assert response.status_code == 409
        assert response.json()["code"] == "ORDER_NOT_PAYABLE"
        assert response.json()["status"] == "CONFIRMED"

    def test_non_positive_amount(self, client, db):
        response = client.post(
            "/api/v1/payments",
            json={"orderId": 1, "amount": 0},
            headers=auth_header(ALICE),
        )

        assert response.status_code == 400


def test_health(client, db):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["database"] == "healthy"
    assert response.json()["status"] == "healthy"
