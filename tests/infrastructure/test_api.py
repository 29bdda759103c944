"""HTTP API tests using FastAPI's TestClient over in-memory SQLite."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from fulfillment.domain.service.order_numbers import SequentialOrderNumberGenerator
from fulfillment.infrastructure.api.app import create_app
from fulfillment.infrastructure.bootstrap import Container
from fulfillment.infrastructure.config import Settings
from tests.fakes import RecordingNotifier

BUYER = {"X-User-Id": "u-1"}
OTHER_BUYER = {"X-User-Id": "u-2"}
SELLER_A = {"X-User-Id": "u-sa", "X-User-Role": "seller", "X-Seller-Id": "seller-a"}
SELLER_B = {"X-User-Id": "u-sb", "X-User-Role": "seller", "X-Seller-Id": "seller-b"}
ADMIN = {"X-User-Id": "root", "X-User-Role": "admin"}
SYSTEM = {"X-User-Id": "payments", "X-User-Role": "system"}


@pytest.fixture()
def notifier():
    return RecordingNotifier()


def _app(data_dir, notifier, currency="TWD"):
    settings = Settings(
        database_url="sqlite://",
        data_dir=data_dir,
        shipping_fee=Decimal("60"),
        currency=currency,
        environment="test",
        log_level=None,
    )
    container = Container(
        settings, number_generator=SequentialOrderNumberGenerator(), notifier=notifier
    )
    return create_app(container)


@pytest.fixture()
def client(data_dir, notifier):
    with TestClient(_app(data_dir, notifier)) as test_client:
        yield test_client


def _stock(client, **levels):
    for product_id, qty in levels.items():
        response = client.put(f"/inventory/{product_id}", json={"quantity": qty}, headers=ADMIN)
        assert response.status_code == 200


def _checkout(client, **body):
    body.setdefault("shipping_address_id", "addr-1")
    return client.post("/orders", json=body, headers=BUYER)


def _order_for_store(response, store_id):
    [order] = [o for o in response.json()["orders"] if o["store_id"] == store_id]
    return order


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "environment": "test"}


class TestActorHeaders:

    def test_missing_user_is_unauthorized(self, client):
        assert client.get("/orders").status_code == 401

    def test_seller_without_seller_id_is_unauthorized(self, client):
        response = client.get(
            "/orders/seller/orders", headers={"X-User-Id": "u-sa", "X-User-Role": "seller"}
        )
        assert response.status_code == 401

    def test_unknown_role_is_unauthorized(self, client):
        response = client.get("/orders", headers={"X-User-Id": "u-1", "X-User-Role": "owner"})
        assert response.status_code == 401

    def test_buyer_on_admin_route_is_forbidden(self, client):
        response = client.get("/orders/admin", headers=BUYER)
        assert response.status_code == 403
        assert response.json()["error"] == "ForbiddenError"

    def test_inventory_reads_need_an_actor(self, client):
        assert client.get("/inventory").status_code == 401
        assert client.get("/inventory/p-tea").status_code == 401
        assert client.get("/inventory/p-tea", headers=BUYER).status_code == 404


class TestCheckout:

    def test_checkout_splits_by_store(self, client, notifier):
        _stock(client, **{"p-tea": 10, "p-lamp": 5})

        response = _checkout(client, payment_method="credit_card", notes="ring twice")

        assert response.status_code == 201
        tea = _order_for_store(response, "s-a")
        lamp = _order_for_store(response, "s-b")
        assert tea["status"] == "pending_payment"
        assert (tea["subtotal"], tea["shipping_fee"], tea["total_amount"]) == (
            "240.00", "60.00", "300.00"
        )
        assert tea["items"][0]["product_snapshot"]["images"] == ["tea.png"]
        assert tea["shipping_address"]["city"] == "Taipei"
        assert lamp["total_amount"] == "960.00"
        assert len(notifier.sent) == 2

        inventory = client.get("/inventory/p-tea", headers=ADMIN).json()
        assert (inventory["reserved"], inventory["available"]) == (2, 8)

    def test_cart_is_cleared_after_checkout(self, client):
        _stock(client, **{"p-tea": 10, "p-lamp": 5})
        assert _checkout(client).status_code == 201

        response = _checkout(client)

        assert response.status_code == 400
        assert response.json()["error"] == "EmptySelectionError"

    def test_insufficient_stock_conflict(self, client):
        _stock(client, **{"p-tea": 10, "p-lamp": 0})

        response = _checkout(client)

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "InsufficientStockError"
        assert (body["product_id"], body["requested"], body["available"]) == ("p-lamp", 1, 0)
        assert client.get("/inventory/p-tea", headers=ADMIN).json()["reserved"] == 0
        assert client.get("/orders", headers=BUYER).json()["total"] == 0

    def test_unknown_address(self, client):
        _stock(client, **{"p-tea": 10, "p-lamp": 5})
        response = _checkout(client, shipping_address_id="addr-404")
        assert response.status_code == 400
        assert response.json()["error"] == "MissingAddressError"

    def test_shipping_discount(self, client, refill_cart):
        _stock(client, **{"p-tea": 10})
        refill_cart(lines=(("p-tea", 1),))

        response = _checkout(client, discount_codes=["FREESHIP"])

        [order] = response.json()["orders"]
        assert order["total_discount"] == "60.00"
        assert order["total_amount"] == "120.00"
        assert order["discounts"] == [
            {"discount_id": "d-ship", "discount_type": "shipping", "discount_amount": "60.00"}
        ]

    def test_capped_discount_is_shared_across_stores(self, client):
        _stock(client, **{"p-tea": 10, "p-lamp": 5})

        response = _checkout(client, discount_codes=["SPRING10"])

        assert response.status_code == 201
        tea = _order_for_store(response, "s-a")
        lamp = _order_for_store(response, "s-b")
        # 10% of 1140 is capped at 50 for the whole checkout.
        assert (tea["total_discount"], lamp["total_discount"]) == ("10.52", "39.48")
        assert Decimal(tea["total_discount"]) + Decimal(lamp["total_discount"]) == Decimal("50")
        assert tea["total_amount"] == "289.48"

    def test_shipping_discount_split_over_two_stores(self, client):
        _stock(client, **{"p-tea": 10, "p-lamp": 5})

        response = _checkout(client, discount_codes=["FREESHIP"])

        orders = response.json()["orders"]
        assert [o["total_discount"] for o in orders] == ["30.00", "30.00"]

    def test_idempotent_replay(self, client, refill_cart):
        _stock(client, **{"p-tea": 10, "p-lamp": 5})
        first = _checkout(client, idempotency_key="retry-1").json()["orders"]

        refill_cart()
        second = _checkout(client, idempotency_key="retry-1").json()["orders"]

        assert [o["order_id"] for o in second] == [o["order_id"] for o in first]
        assert client.get("/inventory/p-tea", headers=ADMIN).json()["reserved"] == 2

    def test_from_snapshot(self, client):
        _stock(client, **{"p-lamp": 5})
        body = {
            "cart_snapshot": {"items": [{"product_id": "p-lamp", "quantity": 2}]},
            "shipping_address": {
                "recipient_name": "Amy Lin", "phone": "0912345678",
                "city": "Taipei", "address_line1": "No. 1",
            },
            "payment_method": "cash_on_delivery",
        }

        response = client.post("/orders/from-snapshot", json=body, headers=BUYER)

        assert response.status_code == 201
        [order] = response.json()["orders"]
        assert order["status"] == "paid"
        assert order["subtotal"] == "1800.00"


class TestCurrency:

    def test_checkout_in_configured_currency(self, data_dir, notifier):
        with TestClient(_app(data_dir, notifier, currency="USD")) as usd_client:
            _stock(usd_client, **{"p-tea": 10, "p-lamp": 5})

            response = _checkout(usd_client, discount_codes=["SPRING10"])

        assert response.status_code == 201, response.json()
        assert {o["currency"] for o in response.json()["orders"]} == {"USD"}
        assert _order_for_store(response, "s-a")["total_amount"] == "289.48"


class TestOrderLifecycle:

    def test_pay_ship_deliver_complete(self, client):
        _stock(client, **{"p-tea": 10, "p-lamp": 5})
        order_id = _order_for_store(_checkout(client), "s-a")["order_id"]

        paid = client.post(f"/orders/system/{order_id}/payment", json={"succeeded": True}, headers=SYSTEM)
        assert paid.json()["status"] == "paid"

        for status in ("processing", "shipped", "delivered"):
            response = client.patch(
                f"/orders/seller/orders/{order_id}/status", json={"status": status}, headers=SELLER_A
            )
            assert response.status_code == 200
            assert response.json()["status"] == status

        inventory = client.get("/inventory/p-tea", headers=ADMIN).json()
        assert (inventory["quantity"], inventory["reserved"]) == (8, 0)

        done = client.patch(f"/orders/{order_id}/status", json={"status": "completed"}, headers=BUYER)
        assert done.status_code == 200
        assert done.json()["completed_at"] is not None

    def test_seller_cannot_skip_ahead(self, client):
        _stock(client, **{"p-tea": 10, "p-lamp": 5})
        order_id = _order_for_store(_checkout(client, payment_method="cash_on_delivery"), "s-a")["order_id"]

        response = client.patch(
            f"/orders/seller/orders/{order_id}/status", json={"status": "delivered"}, headers=SELLER_A
        )

        assert response.status_code == 409
        body = response.json()
        assert body["error"] == "InvalidTransitionError"
        assert (body["current_status"], body["requested_status"]) == ("paid", "delivered")

    def test_other_store_seller_forbidden(self, client):
        _stock(client, **{"p-tea": 10, "p-lamp": 5})
        order_id = _order_for_store(_checkout(client), "s-a")["order_id"]

        assert client.get(f"/orders/seller/orders/{order_id}", headers=SELLER_B).status_code == 403

    def test_other_buyer_sees_not_found(self, client):
        _stock(client, **{"p-tea": 10, "p-lamp": 5})
        order_id = _order_for_store(_checkout(client), "s-a")["order_id"]

        assert client.get(f"/orders/{order_id}", headers=OTHER_BUYER).status_code == 404
        assert client.get(f"/orders/{order_id}", headers=BUYER).status_code == 200

    def test_buyer_cancel_releases_reservation(self, client):
        _stock(client, **{"p-tea": 10, "p-lamp": 5})
        order_id = _order_for_store(_checkout(client), "s-a")["order_id"]

        response = client.post(f"/orders/{order_id}/cancel", headers=BUYER)

        assert response.json()["status"] == "cancelled"
        assert client.get("/inventory/p-tea", headers=ADMIN).json()["reserved"] == 0

    def test_admin_cancel_with_reason(self, client, notifier):
        _stock(client, **{"p-tea": 10, "p-lamp": 5})
        order_id = _order_for_store(_checkout(client), "s-a")["order_id"]

        assert client.post(
            f"/orders/admin/{order_id}/cancel", json={"reason": ""}, headers=ADMIN
        ).status_code == 422

        response = client.post(
            f"/orders/admin/{order_id}/cancel", json={"reason": "fraud"}, headers=ADMIN
        )

        assert response.status_code == 200
        assert notifier.sent[-1]["reason"] == "fraud"

    def test_missing_order(self, client):
        response = client.get("/orders/admin/999", headers=ADMIN)
        assert response.status_code == 404
        assert response.json()["error"] == "EntityNotFoundError"


class TestListing:

    def test_buyer_and_seller_lists(self, client):
        _stock(client, **{"p-tea": 10, "p-lamp": 5})
        _checkout(client)

        mine = client.get("/orders", headers=BUYER).json()
        assert (mine["total"], mine["page"], mine["limit"]) == (2, 1, 10)

        store = client.get("/orders/seller/orders", headers=SELLER_B).json()
        assert [o["store_id"] for o in store["data"]] == ["s-b"]

        assert client.get("/orders", headers=OTHER_BUYER).json()["total"] == 0

    def test_admin_filters(self, client):
        _stock(client, **{"p-tea": 10, "p-lamp": 5})
        _checkout(client)

        page = client.get(
            "/orders/admin", params={"store_id": "s-a", "status": "pending_payment"}, headers=ADMIN
        ).json()
        assert page["total"] == 1

        page = client.get("/orders/admin", params={"search": "00000002"}, headers=ADMIN).json()
        assert [o["order_number"] for o in page["data"]] == ["ORD00000002"]

    def test_limit_is_bounded(self, client):
        assert client.get("/orders", params={"limit": 101}, headers=BUYER).status_code == 422


class TestInventory:

    def test_seller_sets_own_stock(self, client):
        response = client.put("/inventory/p-tea", json={"quantity": 7}, headers=SELLER_A)
        assert response.status_code == 200
        assert response.json()["available"] == 7

    def test_seller_cannot_set_other_store_stock(self, client):
        response = client.put("/inventory/p-lamp", json={"quantity": 7}, headers=SELLER_A)
        assert response.status_code == 403

    def test_cannot_drop_below_reserved(self, client, refill_cart):
        _stock(client, **{"p-tea": 10})
        refill_cart(lines=(("p-tea", 4),))
        _checkout(client)

        response = client.put("/inventory/p-tea", json={"quantity": 3}, headers=ADMIN)

        assert response.status_code == 409
        assert response.json()["error"] == "InvalidStateError"

    def test_list_and_unknown(self, client):
        _stock(client, **{"p-tea": 10, "p-lamp": 5})
        listing = client.get("/inventory", headers=SELLER_A).json()
        assert [r["product_id"] for r in listing] == ["p-lamp", "p-tea"]
        assert client.get("/inventory/p-404", headers=ADMIN).status_code == 404
