"""
Pytest fixtures for the back-office engine tests.

Provides a service over an in-memory repository with a fixed clock and
sequential ids, plus a Flask app on in-memory SQLite and its test client.
"""

from datetime import datetime, timedelta, timezone

import pytest

from backoffice import create_app
from backoffice.context import get_service
from backoffice.extensions import db
from backoffice.ids import SequentialIdGenerator
from backoffice.repository import InMemoryRepository
from backoffice.services.pos_service import PosService

PASSWORD = "Password123!"


class FixedClock:
    """Clock that stays put until a test moves it."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class OperatorHolder:
    """Mutable stand-in for the external identity provider."""

    def __init__(self, username=None):
        self.username = username

    def __call__(self):
        return self.username


@pytest.fixture(scope='function')
def clock():
    return FixedClock(datetime(2026, 3, 14, 15, 30, tzinfo=timezone.utc))


@pytest.fixture(scope='function')
def ids():
    return SequentialIdGenerator()


@pytest.fixture(scope='function')
def operator():
    return OperatorHolder("@cashierbob")


@pytest.fixture(scope='function')
def repo():
    return InMemoryRepository()


@pytest.fixture(scope='function')
def make_service(repo, clock, ids, operator):
    """Build a PosService over the shared repository (call again to "restart")."""
    def _make(**overrides):
        options = {
            "id_generator": ids,
            "clock": clock,
            "tz_name": "UTC",
            "operator_provider": operator,
            "bcrypt_rounds": 4,
        }
        options.update(overrides)
        return PosService(repo, **options)

    return _make


@pytest.fixture(scope='function')
def service(make_service):
    return make_service()


@pytest.fixture(scope='function')
def stocked(service):
    """Service with a small catalog: a $100 item, a discounted item and a sold-out one."""
    service.add_product({"id": "P1", "name": "Widget", "price": "100", "stock": "10", "category": "Tools"})
    service.add_product({"id": "P2", "name": "Gadget", "price": "100", "stock": "5", "category": "Tools", "discount": "20"})
    service.add_product({"id": "P3", "name": "Rice", "price": "2.50", "stock": "0", "category": "Pantry", "unit": "pack"})
    return service


@pytest.fixture(scope='function')
def app(clock):
    """Create application for testing."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'AUTO_CREATE_SCHEMA': True,
        'STORE_TIMEZONE': 'UTC',
        'BCRYPT_ROUNDS': 4,
        'CLOCK': clock,
        'ID_GENERATOR': SequentialIdGenerator(),
    })

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def cashier(app):
    """A registered cashier; returns the X-Operator headers for it."""
    with app.app_context():
        service = get_service()
        service.create_cashier("bob", PASSWORD)
        service.add_product({"id": "P1", "name": "Widget", "price": "100", "stock": "10", "category": "Tools"})
        service.add_product({"id": "P2", "name": "Gadget", "price": "100", "stock": "5", "discount": "20"})
    return {"X-Operator": "@cashierbob"}
