"""Tests for the orders HTTP API."""

import uuid
from decimal import Decimal

import pytest

from app.repos.order_repo import OrderRepo
from factories import item, order_payload, stock_of

CUSTOMER = {"X-User-Id": "7"}
OTHER_CUSTOMER = {"X-User-Id": "8"}
ADMIN = {"X-User-Id": "1", "X-User-Roles": "admin"}
ORDER_MANAGER = {"X-User-Id": "2", "X-User-Roles": "order_manager"}


def place_order(client, headers=CUSTOMER, items=None, **overrides):
    items = items or [item(1, 1, 10.00)]
    return client.post("/orders/", json=order_payload(items, **overrides), headers=headers)


class TestHealthCheck:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_request_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Request-Id": "abc"})
        assert response.headers["X-Request-Id"] == "abc"


class TestCreateOrder:
    def test_created(self, client, products):
        response = place_order(client, items=[item(1, 2, 10.00), item(2, 1, 5.50)])

        assert response.status_code == 201
        data = response.json()
        assert Decimal(data["total"]) == Decimal("25.50")
        assert data["status"] == "PENDING"
        assert data["user_id"] == 7
        assert len(data["items"]) == 2

    def test_idempotent_retry_returns_conflict_with_order(self, client, db, products):
        key = str(uuid.uuid4())

        first = place_order(client, idempotency_key=key)
        second = place_order(client, idempotency_key=key)

        assert first.status_code == 201
        assert second.status_code == 409
        assert second.json()["id"] == first.json()["id"]
        assert stock_of(db, 1) == 4

    def test_idempotency_key_of_another_user(self, client, db, products):
        key = str(uuid.uuid4())

        first = place_order(client, idempotency_key=key)
        replay = place_order(client, headers=OTHER_CUSTOMER, idempotency_key=key)

        assert first.status_code == 201
        assert replay.status_code == 403
        assert replay.json() == {"detail": "Access denied"}
        assert stock_of(db, 1) == 4

    def test_insufficient_stock(self, client, db, products):
        response = place_order(client, items=[item(3, 2, 20.00)])

        assert response.status_code == 409
        assert "product 3" in response.json()["detail"]
        assert stock_of(db, 3) == 1

    def test_two_buyers_one_unit(self, client, db, products):
        first = place_order(client, items=[item(3, 1, 20.00)])
        second = place_order(client, headers=OTHER_CUSTOMER, items=[item(3, 1, 20.00)])

        assert first.status_code == 201
        assert second.status_code == 409
        assert stock_of(db, 3) == 0

    def test_price_mismatch(self, client, products):
        response = place_order(client, items=[item(1, 1, 9.99)])
        assert response.status_code == 409

    def test_unknown_product(self, client, products):
        response = place_order(client, items=[item(77, 1, 9.99)])
        assert response.status_code == 400

    @pytest.mark.parametrize(
        "overrides",
        [
            {"items": []},
            {"payment_method": "BITCOIN"},
            {"shipping_address": {"street": "x", "city": "Muscat", "country": "OM", "postal_code": "100"}},
            {"customer_note": "x" * 501},
            {"idempotency_key": "not-a-uuid"},
            {"items": [item(1, 0, 10.00)]},
            {"items": [item(1, 10_001, 10.00)]},
            {"items": [item(1, 1, -1)]},
            {"items": [item(1, 1, 10.00), item(1, 2, 10.00)]},
        ],
    )
    def test_validation_errors(self, client, db, products, overrides):
        payload = order_payload([item(1, 1, 10.00)])
        payload.update(overrides)

        response = client.post("/orders/", json=payload, headers=CUSTOMER)

        assert response.status_code == 422
        assert stock_of(db, 1) == 5

    def test_requires_user_header(self, client, products):
        response = client.post("/orders/", json=order_payload([item(1, 1, 10.00)]))
        assert response.status_code == 422

    def test_rate_limited(self, client, products, redis_client):
        redis_client.eval.return_value = 11

        response = place_order(client)

        assert response.status_code == 429

    def test_screening_not_requested_outside_production(self, client, products, notifications):
        place_order(client)
        assert notifications.screenings == []


class TestListOrders:
    def test_own_orders_only(self, client, products):
        place_order(client)
        place_order(client, headers=OTHER_CUSTOMER)

        response = client.get("/orders/user", headers=CUSTOMER)

        assert response.status_code == 200
        body = response.json()
        assert [o["user_id"] for o in body["data"]] == [7]
        assert body["meta"] == {"page": 1, "limit": 20, "total": 1, "totalPages": 1}

    def test_pagination_newest_first(self, client, products):
        ids = [place_order(client, items=[item(2, 1, 5.50)]).json()["id"] for _ in range(3)]
        ids += [place_order(client).json()["id"] for _ in range(3)]

        page_1 = client.get("/orders/user?page=1&limit=5", headers=CUSTOMER).json()
        page_2 = client.get("/orders/user?page=2&limit=5", headers=CUSTOMER).json()

        assert [o["id"] for o in page_1["data"]] == list(reversed(ids))[:5]
        assert [o["id"] for o in page_2["data"]] == [ids[0]]
        assert page_1["meta"]["totalPages"] == 2
        assert page_2["meta"]["total"] == 6

    def test_status_filter(self, client, products):
        first = place_order(client).json()["id"]
        place_order(client)
        client.patch(f"/orders/{first}/status", json={"status": "CANCELLED"}, headers=ADMIN)

        body = client.get("/orders/user?status=CANCELLED", headers=CUSTOMER).json()

        assert [o["id"] for o in body["data"]] == [first]

    @pytest.mark.parametrize("query", ["limit=4", "limit=51", "page=0", "status=LOST"])
    def test_invalid_query(self, client, query):
        response = client.get(f"/orders/user?{query}", headers=CUSTOMER)
        assert response.status_code == 422

    def test_admin_sees_everyone(self, client, products):
        place_order(client)
        place_order(client, headers=OTHER_CUSTOMER)

        response = client.get("/orders/admin", headers=ADMIN)

        assert response.status_code == 200
        assert response.json()["meta"]["total"] == 2

    def test_admin_list_requires_role(self, client, products):
        assert client.get("/orders/admin", headers=CUSTOMER).status_code == 403
        assert client.get("/orders/admin", headers=ORDER_MANAGER).status_code == 403


class TestGetOrder:
    def test_owner_sees_details(self, client, products):
        order_id = place_order(client).json()["id"]

        response = client.get(f"/orders/{order_id}", headers=CUSTOMER)

        assert response.status_code == 200
        data = response.json()
        assert data["billing_address"]["city"] == "Muscat"
        assert [e["type"] for e in data["events"]] == ["CREATED"]

    def test_admin_sees_any_order(self, client, products):
        order_id = place_order(client).json()["id"]
        assert client.get(f"/orders/{order_id}", headers=ADMIN).status_code == 200

    def test_other_user_is_denied_not_told_missing(self, client, products):
        order_id = place_order(client).json()["id"]

        denied = client.get(f"/orders/{order_id}", headers=OTHER_CUSTOMER)
        missing = client.get("/orders/999", headers=OTHER_CUSTOMER)

        assert denied.status_code == 403
        assert denied.json() == {"detail": "Access denied"}
        assert missing.status_code == 404

    def test_only_last_ten_events_newest_first(self, client, db, products):
        order_id = place_order(client).json()["id"]
        repo = OrderRepo(db)
        for n in range(12):
            repo.add_event(order_id, "STATUS_CHANGE", "1", {"n": n})
        db.commit()

        events = client.get(f"/orders/{order_id}", headers=CUSTOMER).json()["events"]

        assert len(events) == 10
        assert [e["payload"]["n"] for e in events] == list(range(11, 1, -1))


class TestUpdateStatus:
    def test_manager_moves_order(self, client, products, notifications):
        order_id = place_order(client).json()["id"]

        r1 = client.patch(f"/orders/{order_id}/status", json={"status": "PROCESSING"}, headers=ORDER_MANAGER)
        r2 = client.patch(
            f"/orders/{order_id}/status",
            json={"status": "SHIPPED", "tracking_number": "DHL-1"},
            headers=ORDER_MANAGER,
        )

        assert r1.status_code == 200
        assert r2.status_code == 200
        assert r2.json()["status"] == "SHIPPED"
        assert r2.json()["tracking_number"] == "DHL-1"
        assert notifications.shipments == [(order_id, "DHL-1")]

    def test_invalid_transition(self, client, products):
        order_id = place_order(client).json()["id"]

        response = client.patch(f"/orders/{order_id}/status", json={"status": "DELIVERED"}, headers=ADMIN)

        assert response.status_code == 400
        assert "PENDING -> DELIVERED" in response.json()["detail"]

    def test_unknown_order(self, client):
        response = client.patch("/orders/404/status", json={"status": "PROCESSING"}, headers=ADMIN)
        assert response.status_code == 404

    def test_customer_cannot_change_status(self, client, products):
        order_id = place_order(client).json()["id"]

        response = client.patch(f"/orders/{order_id}/status", json={"status": "CANCELLED"}, headers=CUSTOMER)

        assert response.status_code == 403

    def test_review_state_is_not_public(self, client, products):
        order_id = place_order(client).json()["id"]

        response = client.patch(f"/orders/{order_id}/status", json={"status": "PENDING_REVIEW"}, headers=ADMIN)

        assert response.status_code == 422

    def test_cancel_restocks(self, client, db, products):
        order_id = place_order(client, items=[item(1, 2, 10.00), item(2, 1, 5.50)]).json()["id"]
        assert (stock_of(db, 1), stock_of(db, 2)) == (3, 2)

        client.patch(f"/orders/{order_id}/status", json={"status": "CANCELLED"}, headers=ADMIN)

        assert (stock_of(db, 1), stock_of(db, 2)) == (5, 3)
