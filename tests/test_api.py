"""HTTP surface: session cart, checkout and order endpoints."""
from __future__ import annotations

from decimal import Decimal

from app.models.catalog import AddOn, Product, Promotion
from tests.conftest import PASSWORD, login, make_user, stock_of


def _cart_items(client):
    resp = client.get("/api/v1/cart/")
    assert resp.status_code == 200
    return resp.json()["items"]


def test_root(client) -> None:
    assert client.get("/").status_code == 200


def test_catalog_listing(client, catalog) -> None:
    resp = client.get("/api/v1/catalog/product")
    assert resp.status_code == 200
    assert [item["name"] for item in resp.json()] == ["Cappuccino", "Espresso"]

    resp = client.get("/api/v1/catalog/addon/5")
    assert resp.status_code == 200
    body = resp.json()
    assert body["family"] == "addon"
    assert Decimal(body["price"]) == Decimal("0.75")


def test_catalog_unknown_item_and_family(client, catalog) -> None:
    resp = client.get("/api/v1/catalog/promotion/1")
    assert resp.status_code == 404
    assert resp.json()["error"] == "NotFound"

    resp = client.get("/api/v1/catalog/merch")
    assert resp.status_code == 422
    assert resp.json()["error"] == "ValidationError"


def test_register_and_login(client) -> None:
    resp = client.post("/api/v1/auth/register", json={
        "name": "Lu", "email": "Lu@Example.com", "password": "pw", "birthday": "1990-04-01",
    })
    assert resp.status_code == 201
    assert resp.json()["email"] == "lu@example.com"

    dup = client.post("/api/v1/auth/register", json={"name": "Lu", "email": "lu@example.com", "password": "x"})
    assert dup.status_code == 409
    assert dup.json()["error"] == "Conflict"

    headers = login(client, "lu@example.com", "pw")
    assert client.get("/api/v1/auth/me", headers=headers).json()["name"] == "Lu"


def test_register_missing_fields(client) -> None:
    resp = client.post("/api/v1/auth/register", json={"email": "x@example.com"})
    assert resp.status_code == 422
    body = resp.json()
    assert body["error"] == "ValidationError"
    assert {tuple(err["loc"])[-1] for err in body["errors"]} == {"name", "password"}


def test_bad_login(client, user) -> None:
    resp = client.post("/api/v1/auth/token", data={"username": user.email, "password": "wrong"})
    assert resp.status_code == 401
    assert resp.json()["error"] == "Unauthenticated"


def test_add_accumulates_and_returns_snapshot(client, catalog) -> None:
    client.post("/api/v1/cart/add", json={"family": "product", "id": 1, "quantity": 2})
    resp = client.post("/api/v1/cart/add", json={"family": "product", "id": 1, "quantity": 1})
    assert resp.status_code == 200
    body = resp.json()
    assert len(body["items"]) == 1
    assert body["items"][0]["quantity"] == 3
    assert Decimal(body["subtotal"]) == Decimal("10.50")


def test_cart_view_wraps_lines_with_subtotal(client, catalog) -> None:
    client.post("/api/v1/cart/add", json={"family": "product", "id": 2, "quantity": 2})
    body = client.get("/api/v1/cart/").json()
    assert set(body) == {"items", "subtotal"}
    assert {"id", "family", "name", "unit_price", "quantity"} <= set(body["items"][0])
    assert Decimal(body["subtotal"]) == Decimal("5.00")


def test_add_defaults_invalid_quantity(client, catalog) -> None:
    resp = client.post("/api/v1/cart/add", json={"family": "addon", "id": 5, "quantity": "lots"})
    assert resp.json()["items"][0]["quantity"] == 1
    resp = client.post("/api/v1/cart/add", json={"family": "promotion", "id": 9})
    assert resp.json()["items"][1]["quantity"] == 1

    resp = client.post(
        "/api/v1/cart/add",
        content='{"family": "product", "id": 1, "quantity": 1e400}',
        headers={"Content-Type": "application/json"},
    )
    assert resp.status_code == 200
    assert resp.json()["items"][2]["quantity"] == 1
    resp = client.post("/api/v1/cart/add", json={"family": "product", "id": 2, "quantity": 2.7})
    assert resp.json()["items"][3]["quantity"] == 1


def test_add_requires_family_and_id(client) -> None:
    resp = client.post("/api/v1/cart/add", json={"id": 1})
    assert resp.status_code == 422
    assert resp.json()["error"] == "ValidationError"

    resp = client.post("/api/v1/cart/add", json={"family": "product"})
    assert resp.status_code == 422


def test_add_unknown_item_is_deferred_to_view(client, catalog) -> None:
    resp = client.post("/api/v1/cart/add", json={"family": "product", "id": 77})
    assert resp.status_code == 200
    line = resp.json()["items"][0]
    assert line["available"] is False
    assert Decimal(line["unit_price"]) == 0


def test_update_remove_and_clear(client, catalog) -> None:
    client.post("/api/v1/cart/add", json={"family": "product", "id": 1, "quantity": 3})
    client.post("/api/v1/cart/add", json={"family": "addon", "id": 1})

    resp = client.patch("/api/v1/cart/product/1", json={"delta": 2})
    assert resp.json()["item"]["quantity"] == 5

    resp = client.patch("/api/v1/cart/product/1", json={"delta": -9})
    assert resp.status_code == 200
    assert resp.json()["item"] is None
    assert [(i["family"], i["id"]) for i in _cart_items(client)] == [("addon", 1)]

    resp = client.patch("/api/v1/cart/product/1", json={"delta": 1})
    assert resp.status_code == 404
    assert resp.json()["error"] == "NotFound"

    assert client.delete("/api/v1/cart/product/1").status_code == 404
    assert client.delete("/api/v1/cart/addon/1").status_code == 200
    assert _cart_items(client) == []

    resp = client.patch("/api/v1/cart/addon/1", json={"delta": 1})
    assert resp.status_code == 404
    assert "empty" in resp.json()["detail"]

    client.post("/api/v1/cart/add", json={"family": "product", "id": 2})
    assert client.delete("/api/v1/cart/clear").status_code == 200
    assert _cart_items(client) == []


def test_checkout_flow(client, engine, catalog, user) -> None:
    login(client, user.email)
    client.post("/api/v1/cart/add", json={"family": "product", "id": 1, "quantity": 2})
    client.post("/api/v1/cart/add", json={"family": "addon", "id": 5, "quantity": 1})

    resp = client.post("/api/v1/orders/checkout")
    assert resp.status_code == 201
    order_id = resp.json()["order_id"]
    assert set(resp.json()) == {"order_id"}

    assert _cart_items(client) == []
    assert stock_of(engine, Product, 1) == 8
    assert stock_of(engine, AddOn, 5) == 9

    detail = client.get(f"/api/v1/orders/{order_id}").json()
    assert Decimal(detail["total"]) == Decimal("7.75")
    assert detail["status"] == "pending"
    assert len(detail["items"]) == 2

    orders = client.get("/api/v1/orders/").json()
    assert [o["id"] for o in orders] == [order_id]


def test_checkout_with_bearer_token(client, engine, catalog, user) -> None:
    headers = login(client, user.email)
    client.post("/api/v1/auth/logout")
    client.post("/api/v1/cart/add", json={"family": "promotion", "id": 9, "quantity": 1})

    resp = client.post("/api/v1/orders/checkout", headers=headers)
    assert resp.status_code == 201
    assert stock_of(engine, Promotion, 9) == 1


def test_checkout_insufficient_stock_keeps_cart(client, engine, catalog, user) -> None:
    login(client, user.email)
    client.post("/api/v1/cart/add", json={"family": "promotion", "id": 9, "quantity": 3})

    resp = client.post("/api/v1/orders/checkout")
    assert resp.status_code == 409
    body = resp.json()
    assert body["error"] == "InsufficientStock"
    assert body["available"] == 2
    assert stock_of(engine, Promotion, 9) == 2
    assert [(i["family"], i["id"], i["quantity"]) for i in _cart_items(client)] == [("promotion", 9, 3)]


def test_checkout_unknown_item(client, catalog, user) -> None:
    login(client, user.email)
    client.post("/api/v1/cart/add", json={"family": "addon", "id": 99})
    resp = client.post("/api/v1/orders/checkout")
    assert resp.status_code == 404
    assert resp.json()["error"] == "ItemNotFound"
    assert len(_cart_items(client)) == 1


def test_checkout_requires_login(client, catalog) -> None:
    client.post("/api/v1/cart/add", json={"family": "product", "id": 1})
    resp = client.post("/api/v1/orders/checkout")
    assert resp.status_code == 401
    assert resp.json()["error"] == "Unauthenticated"
    assert len(_cart_items(client)) == 1


def test_checkout_empty_cart(client, user) -> None:
    login(client, user.email)
    resp = client.post("/api/v1/orders/checkout")
    assert resp.status_code == 400
    assert resp.json()["error"] == "EmptyCart"


def test_logout_drops_session(client, catalog, user) -> None:
    login(client, user.email)
    client.post("/api/v1/cart/add", json={"family": "product", "id": 1})
    client.post("/api/v1/auth/logout")
    assert _cart_items(client) == []
    assert client.post("/api/v1/orders/checkout").status_code == 401


def test_order_visible_to_owner_and_admin_only(client, session, catalog, user, admin) -> None:
    login(client, user.email)
    client.post("/api/v1/cart/add", json={"family": "product", "id": 2})
    order_id = client.post("/api/v1/orders/checkout").json()["order_id"]

    make_user(session, "other@example.com")
    login(client, "other@example.com")
    resp = client.get(f"/api/v1/orders/{order_id}")
    assert resp.status_code == 403

    login(client, admin.email)
    assert client.get(f"/api/v1/orders/{order_id}").status_code == 200
    assert client.get("/api/v1/orders/4242").status_code == 404


def test_status_update_rules(client, catalog, user, admin) -> None:
    login(client, user.email)
    client.post("/api/v1/cart/add", json={"family": "product", "id": 2})
    order_id = client.post("/api/v1/orders/checkout").json()["order_id"]

    resp = client.patch(f"/api/v1/orders/{order_id}/status", json={"status": "paid"})
    assert resp.status_code == 403

    login(client, admin.email, PASSWORD)
    resp = client.patch(f"/api/v1/orders/{order_id}/status", json={"status": "refunded"})
    assert resp.status_code == 422
    assert resp.json()["error"] == "InvalidStatus"

    resp = client.patch(f"/api/v1/orders/{order_id}/status", json={"status": "shipped"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "shipped"

    resp = client.patch(f"/api/v1/orders/{order_id}/status", json={"status": "cancelled"})
    assert resp.status_code == 409
    assert resp.json()["error"] == "InvalidTransition"

    resp = client.patch("/api/v1/orders/4242/status", json={"status": "paid"})
    assert resp.status_code == 404
