"""
HTTP API tests.

The cashier fixture registers "@cashierbob" and two products:
P1 Widget $100 x10 and P2 Gadget $100 x5 (own 20% discount).
"""

from backoffice.context import get_service
from backoffice.services.pos_service import PosService


def _add(client, headers, product_id, quantity=1):
    return client.post("/api/cart/lines", json={"product_id": product_id, "quantity": quantity}, headers=headers)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json["status"] == "ok"
    assert response.json["database"]["status"] == "healthy"


def test_product_crud(client):
    response = client.post("/api/products", json={"name": "Milk", "price": "1.20", "stock": 4, "category": "Dairy"})
    assert response.status_code == 201
    product = response.json["product"]
    assert product["status"] == "in-stock"
    product_id = product["id"]

    response = client.patch(f"/api/products/{product_id}", json={"price": "1.35"})
    assert response.json["product"]["price"] == "1.35"

    response = client.put(f"/api/products/{product_id}/stock", json={"stock": 0})
    assert response.json["product"]["status"] == "out-of-stock"

    response = client.get("/api/products", query_string={"status": "out-of-stock"})
    assert [p["id"] for p in response.json["items"]] == [product_id]

    assert client.get("/api/products/categories").json["items"] == ["Dairy"]

    assert client.delete(f"/api/products/{product_id}").status_code == 200
    assert client.get(f"/api/products/{product_id}").status_code == 404


def test_product_validation_errors(client):
    response = client.post("/api/products", json={"name": "Milk", "price": "1", "status": "in-stock"})
    assert response.status_code == 400
    assert response.json["kind"] == "ValidationError"
    assert response.json["details"] == {"fields": ["status"]}

    response = client.post("/api/products", json={"name": "Milk", "price": "1", "discount": 120})
    assert response.status_code == 400
    assert response.json["kind"] == "InvalidDiscountOrTaxRateError"

    client.post("/api/products", json={"id": "DUP", "name": "One", "price": "1"})
    response = client.post("/api/products", json={"id": "DUP", "name": "Two", "price": "1"})
    assert response.status_code == 409


def test_batch_delete(client, cashier):
    response = client.post("/api/products/batch-delete", json={"ids": ["P1", "nope"]})
    assert response.json == {"deleted": ["P1"], "count": 1}

    response = client.post("/api/products/batch-delete", json={"ids": "P2"})
    assert response.status_code == 400


def test_cart_requires_known_operator(client, cashier):
    assert client.get("/api/cart").status_code == 401
    response = client.get("/api/cart", headers={"X-Operator": "@cashiermallory"})
    assert response.status_code == 401
    assert response.json["kind"] == "NoActiveOperatorError"


def test_checkout_flow(client, cashier):
    response = _add(client, cashier, "P1", 2)
    assert response.status_code == 201
    assert response.json["totals"]["total"] == "220.00"

    line_id = response.json["cart"]["lines"][0]["line_id"]
    response = client.patch(f"/api/cart/lines/{line_id}", json={"quantity": 1}, headers=cashier)
    assert response.json["totals"]["total"] == "110.00"

    _add(client, cashier, "P2")
    client.put("/api/cart/customer", json={"customer_name": "Alice"}, headers=cashier)

    response = client.post("/api/cart/checkout", headers=cashier)
    assert response.status_code == 201
    order = response.json["order"]
    assert order["status"] == "completed"
    assert order["subtotal"] == "180.00"
    assert order["total"] == "198.00"
    assert order["cashier_id"] == "@cashierbob"
    assert order["customer_name"] == "Alice"
    assert response.json["cart"]["lines"] == []

    assert client.get(f"/api/orders/{order['id']}").json["order"]["total"] == "198.00"
    assert client.get("/api/products/P1").json["product"]["stock"] == "9"

    [customer] = client.get("/api/customers", query_string={"search": "ali"}).json["items"]
    assert customer["total_purchases"] == "198.00"


def test_insufficient_stock_response(client, cashier):
    response = _add(client, cashier, "P2", 6)
    assert response.status_code == 409
    assert response.json["kind"] == "InsufficientStockError"
    assert response.json["details"]["available"] == "5"

    assert client.get("/api/cart", headers=cashier).json["cart"]["lines"] == []
    assert client.get("/api/products/P2").json["product"]["stock"] == "5"


def test_empty_checkout(client, cashier):
    response = client.post("/api/cart/checkout", headers=cashier)
    assert response.status_code == 400
    assert response.json["kind"] == "EmptyCartError"
    assert client.get("/api/orders").json["count"] == 0


def test_new_cart_refused_while_holding_lines(client, cashier):
    _add(client, cashier, "P1")
    assert client.post("/api/cart/new", headers=cashier).status_code == 409

    client.post("/api/cart/discard", headers=cashier)
    assert client.get("/api/products/P1").json["product"]["stock"] == "10"

    response = client.post("/api/cart/new", json={"customer_name": "Zoe"}, headers=cashier)
    assert response.status_code == 201
    assert response.json["cart"]["customer_name"] == "Zoe"


def test_new_cart_after_emptying_a_loaded_pending_order(client, cashier):
    _add(client, cashier, "P1", 3)
    order_id = client.post("/api/cart/pending", headers=cashier).json["order"]["id"]
    line_id = client.post(f"/api/pending/{order_id}/load", headers=cashier).json["cart"]["lines"][0]["line_id"]

    client.delete(f"/api/cart/lines/{line_id}", headers=cashier)
    assert client.get("/api/products/P1").json["product"]["stock"] == "10"

    response = client.post("/api/cart/new", headers=cashier)
    assert response.status_code == 201
    assert response.json["cart"]["pending_id"] is None

    # the emptied order is gone, so its stock cannot be released twice
    assert client.get("/api/pending").json["count"] == 0
    assert client.delete(f"/api/pending/{order_id}").status_code == 404
    assert client.get("/api/products/P1").json["product"]["stock"] == "10"


def test_pending_flow(client, cashier):
    _add(client, cashier, "P1", 3)
    response = client.post("/api/cart/pending", headers=cashier)
    assert response.status_code == 201
    order_id = response.json["order"]["id"]

    listed = client.get("/api/pending").json
    assert listed["count"] == 1 and listed["items"][0]["status"] == "pending"

    response = client.post(f"/api/pending/{order_id}/load", headers=cashier)
    assert response.json["cart"]["pending_id"] == order_id

    # open in a cart, so it cannot be deleted underneath the cashier
    assert client.delete(f"/api/pending/{order_id}").status_code == 409

    client.post("/api/cart/discard", headers=cashier)
    assert client.get("/api/pending").json["count"] == 0
    assert client.get("/api/products/P1").json["product"]["stock"] == "10"
    assert client.get(f"/api/pending/{order_id}").status_code == 404


def test_delete_pending_releases_stock(client, cashier):
    _add(client, cashier, "P1", 3)
    order_id = client.post("/api/cart/pending", headers=cashier).json["order"]["id"]

    assert client.delete(f"/api/pending/{order_id}").status_code == 200
    assert client.get("/api/products/P1").json["product"]["stock"] == "10"


def test_daily_reset_and_revert(client, cashier):
    _add(client, cashier, "P1")
    client.post("/api/cart/checkout", headers=cashier)

    today = client.get("/api/orders/today").json
    assert today["count"] == 1
    assert today["today_sales"] == "110.00"

    response = client.post("/api/orders/reset-daily")
    assert response.json == {"moved": 1, "has_backup": True}
    assert client.get("/api/orders/stats").json["order_count"] == 0

    response = client.post("/api/orders/revert-daily")
    assert response.json == {"restored": 1, "has_backup": False}
    assert client.get("/api/orders").json["count"] == 1
    assert client.post("/api/orders/revert-daily").json["restored"] == 0


def test_orders_by_date(client, cashier):
    _add(client, cashier, "P1")
    client.post("/api/cart/checkout", headers=cashier)

    assert client.get("/api/orders", query_string={"date": "2026-03-14"}).json["count"] == 1
    assert client.get("/api/orders", query_string={"date": "2026-03-13"}).json["count"] == 0
    assert client.get("/api/orders", query_string={"date": "14/03/2026"}).status_code == 400


def test_settings(client):
    assert client.get("/api/settings").json["settings"] == {"tax_rate": "10", "universal_discount": "0"}

    response = client.patch("/api/settings", json={"tax_rate": "8", "universal_discount": 5})
    assert response.json["settings"] == {"tax_rate": "8", "universal_discount": "5"}

    response = client.patch("/api/settings", json={"tax_rate": 101})
    assert response.status_code == 400
    assert response.json["kind"] == "InvalidDiscountOrTaxRateError"

    assert client.patch("/api/settings", json={"vat": 5}).status_code == 400
    assert client.get("/api/settings").json["settings"]["tax_rate"] == "8"


def test_customers(client):
    response = client.post("/api/customers", json={"name": "Carol", "email": "carol@example.com"})
    assert response.status_code == 201
    customer_id = response.json["customer"]["id"]

    assert client.post("/api/customers", json={"name": "CAROL"}).status_code == 409

    response = client.patch(f"/api/customers/{customer_id}", json={"phone": "555-0100"})
    assert response.json["customer"]["phone"] == "555-0100"

    assert client.delete(f"/api/customers/{customer_id}").status_code == 200
    assert client.get(f"/api/customers/{customer_id}").status_code == 404


def test_operators(client, app):
    response = client.post("/api/operators", json={"username": "amy", "password": "Password123!"})
    assert response.status_code == 201
    assert response.json["operator"] == {"username": "@cashieramy", "role": "cashier"}

    weak = client.post("/api/operators", json={"username": "zed", "password": "weak"})
    assert weak.status_code == 400
    assert weak.json["kind"] == "PasswordValidationError"

    response = client.put("/api/operators/@cashieramy/password", json={"password": "Another123!"})
    assert response.status_code == 200

    assert [o["username"] for o in client.get("/api/operators").json["items"]] == ["@cashieramy"]

    with app.app_context():
        get_service().create_admin("Password123!")

    response = client.delete("/api/operators/@admin")
    assert response.status_code == 403
    assert response.json["kind"] == "ProtectedAccountDeletionError"

    assert client.delete("/api/operators/@cashieramy").status_code == 200
    assert client.delete("/api/operators/@cashieramy").status_code == 404


def test_unexpected_errors_are_logged(client, monkeypatch, caplog):
    def boom(self):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(PosService, "summary", boom)

    response = client.get("/api/orders/stats")

    assert response.status_code == 500
    assert response.json == {"error": "Internal server error"}
    assert "Failed to load sales stats" in caplog.text


def test_cors_headers(client):
    response = client.get("/health", headers={"Origin": "http://localhost:5173"})
    assert response.headers["Access-Control-Allow-Origin"] == "http://localhost:5173"
    assert "X-Operator" in response.headers["Access-Control-Allow-Headers"]

    response = client.get("/health", headers={"Origin": "http://evil.example"})
    assert "Access-Control-Allow-Origin" not in response.headers
