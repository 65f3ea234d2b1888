from decimal import Decimal

import pytest

from backoffice import create_app
from backoffice.context import get_service, reset_service
from backoffice.extensions import db
from backoffice.models import StoreDocument
from backoffice.repository import PRODUCTS, SETTINGS, InMemoryRepository, Repository, SqlRepository


def test_in_memory_round_trip_copies_documents():
    repo = InMemoryRepository({SETTINGS: {"tax_rate": "10", "universal_discount": "0"}})
    assert repo.save_count == 0
    assert repo.load(PRODUCTS) is None

    document = [{"id": "P1", "name": "Widget"}]
    repo.save(PRODUCTS, document)
    document[0]["name"] = "changed after save"

    assert repo.load(PRODUCTS) == [{"id": "P1", "name": "Widget"}]
    assert repo.save_count == 1
    assert repo.names() == [PRODUCTS, SETTINGS]


def test_in_memory_rejects_what_json_cannot_hold():
    repo = InMemoryRepository()
    with pytest.raises(TypeError):
        repo.save(PRODUCTS, [{"price": Decimal("1.50")}])


def test_repository_must_implement_load_and_save():
    class LoadOnly(Repository):
        def load(self, name):
            return None

    with pytest.raises(TypeError):
        LoadOnly()
    with pytest.raises(TypeError):
        Repository()


def test_reload_picks_up_writes_from_another_service(make_service):
    server = make_service()
    tool = make_service()

    tool.update_tax_rate("25")
    tool.add_product({"id": "P9", "name": "Tea", "price": "3", "stock": "4"})
    assert server.settings.tax_rate == Decimal("10")

    server.reload()

    assert server.settings.tax_rate == Decimal("25")
    assert server.get_product("P9").stock == Decimal("4")
    assert server.lifecycle.settings is server.settings


def test_sql_repository_round_trip(app):
    with app.app_context():
        repo = SqlRepository()
        assert repo.load(PRODUCTS) is None

        repo.save(PRODUCTS, [{"id": "P1", "price": "1.50"}])
        repo.save(PRODUCTS, [{"id": "P1", "price": "1.75"}, {"id": "P2", "price": "3"}])

        assert repo.load(PRODUCTS) == [{"id": "P1", "price": "1.75"}, {"id": "P2", "price": "3"}]
        assert db.session.query(StoreDocument).count() == 1
        assert db.session.get(StoreDocument, PRODUCTS).to_dict()["name"] == PRODUCTS


def test_service_reloads_from_database(app, cashier):
    with app.app_context():
        service = get_service()
        cart = service.add_to_cart(service.new_cart("Alice"), "P1", 3)
        order, _ = service.checkout(cart, "@cashierbob")

        reset_service()
        reloaded = get_service()

        assert reloaded is not service
        assert reloaded.get_order(order.id).total == Decimal("330")
        assert reloaded.get_product("P1").stock == Decimal("7")
        assert reloaded.customers.find_by_name("alice").total_purchases == Decimal("330")
        assert reloaded.has_operator("@cashierbob")


@pytest.fixture
def shared_store(tmp_path, clock):
    """Two apps over one SQLite file: an API server and a CLI process."""
    config = {
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'store.db'}",
        'AUTO_CREATE_SCHEMA': True,
        'STORE_TIMEZONE': 'UTC',
        'BCRYPT_ROUNDS': 4,
        'CLOCK': clock,
    }
    server, tool = create_app(config), create_app(config)

    yield server, tool

    for app in (server, tool):
        with app.app_context():
            db.session.remove()
            db.engine.dispose()


def test_server_sees_settings_written_by_cli(shared_store):
    server, tool = shared_store
    with server.app_context():
        assert get_service().settings.tax_rate == Decimal("10")

    result = tool.test_cli_runner().invoke(args=["settings", "set-tax", "25"])
    assert result.exit_code == 0

    with server.app_context():
        assert get_service().settings.tax_rate == Decimal("25")


def test_cli_reset_is_not_undone_by_server_checkout(shared_store):
    server, tool = shared_store
    headers = {"X-Operator": "@cashierbob"}
    with server.app_context():
        service = get_service()
        service.create_cashier("bob", "Password123!")
        service.add_product({"id": "P1", "name": "Widget", "price": "100", "stock": "10"})

    client = server.test_client()
    client.post("/api/cart/lines", json={"product_id": "P1"}, headers=headers)
    client.post("/api/cart/checkout", headers=headers)

    runner = tool.test_cli_runner()
    assert "PASS 1 order(s) moved to backup" in runner.invoke(args=["sales", "reset-daily"]).output

    client.post("/api/cart/lines", json={"product_id": "P1"}, headers=headers)
    client.post("/api/cart/checkout", headers=headers)
    assert client.get("/api/orders").json["count"] == 1

    assert "PASS 1 order(s) restored" in runner.invoke(args=["sales", "revert-daily"]).output
    assert client.get("/api/orders").json["count"] == 2
    assert client.get("/api/products/P1").json["product"]["stock"] == "8"
