# Overview: Document repositories the engine loads from and writes through to.

"""
Persisted state is a handful of named JSON documents:

- products          list of product records
- orders            list of completed orders
- pendingOrders     list of pending orders
- dailySalesBackup  list of completed orders (one reset generation)
- customers         list of customer records
- settings          single {tax_rate, universal_discount} record
- operators         list of operator accounts

A repository only knows how to load and save a document by name; it holds no
business rules.
"""

from __future__ import annotations

import copy
import json
import time
from abc import ABC, abstractmethod
from typing import Any

from sqlalchemy.exc import OperationalError

from .extensions import db
from .models import StoreDocument

PRODUCTS = "products"
ORDERS = "orders"
PENDING_ORDERS = "pendingOrders"
DAILY_SALES_BACKUP = "dailySalesBackup"
CUSTOMERS = "customers"
SETTINGS = "settings"
OPERATORS = "operators"

STORE_NAMES = (
    PRODUCTS,
    ORDERS,
    PENDING_ORDERS,
    DAILY_SALES_BACKUP,
    CUSTOMERS,
    SETTINGS,
    OPERATORS,
)


class Repository(ABC):
    """Load/save interface for named JSON documents."""

    @abstractmethod
    def load(self, name: str) -> Any | None:
        """The stored document, or None when nothing was saved under name."""

    @abstractmethod
    def save(self, name: str, document: Any) -> None:
        """Replace the document stored under name."""


class InMemoryRepository(Repository):
    """
    Dict-backed repository for tests and embedding.

    Documents go through a JSON round trip on save so that anything that would
    not survive real storage fails here too.
    """

    def __init__(self, initial: dict[str, Any] | None = None):
        self._documents: dict[str, str] = {
            name: json.dumps(document) for name, document in (initial or {}).items()
        }
        self.save_count = 0

    def load(self, name: str) -> Any | None:
        raw = self._documents.get(name)
        if raw is None:
            return None
        return json.loads(raw)

    def save(self, name: str, document: Any) -> None:
        self._documents[name] = json.dumps(document)
        self.save_count += 1

    def names(self) -> list[str]:
        return sorted(self._documents)


def run_with_retry(func, *, attempts: int = 3, backoff_base: float = 0.1):
    """
    Execute a DB operation with retry on lock-related failures.

    Retries on OperationalError (e.g. "database is locked" on SQLite).
    """
    for attempt in range(attempts):
        try:
            return func()
        except OperationalError:
            db.session.rollback()
            if attempt >= attempts - 1:
                raise
            time.sleep(backoff_base * (2 ** attempt))


class SqlRepository(Repository):
    """
    Stores each document as one row of store_documents.

    Must be used inside a Flask app context. Every save commits, which gives the
    engine its synchronous write-through.
    """

    def load(self, name: str) -> Any | None:
        row = db.session.get(StoreDocument, name)
        if row is None:
            return None
        return copy.deepcopy(row.payload)

    def save(self, name: str, document: Any) -> None:
        def _op():
            row = db.session.get(StoreDocument, name)
            if row is None:
                row = StoreDocument(name=name)
                db.session.add(row)
            row.payload = copy.deepcopy(document)
            db.session.commit()

        run_with_retry(_op)
