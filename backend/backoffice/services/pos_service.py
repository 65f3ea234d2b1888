# Overview: Service facade owning catalog, settings, orders, customers and operators.

"""
PosService is the one object the outside world talks to.

It loads every document from the injected repository at construction, runs
each operation against the in-memory components, and writes the touched
documents back before returning (synchronous write-through). `reload`
re-reads storage when another process may have written to it. Components only
change after validation has passed, so an error leaves both memory and
storage as they were.

Other processes may write the same store between operations; callers decide
when to reload (the Flask wiring does it once per app context).
Within a process, mutating operations hold a lock so that concurrent carts
cannot oversell shared stock.
"""

from __future__ import annotations

import threading
from datetime import date
from decimal import Decimal
from functools import wraps
from typing import Callable, Optional

from ..ids import UuidIdGenerator
from ..records import Cart, Customer, Operator, Order, Product
from ..repository import (
    CUSTOMERS,
    DAILY_SALES_BACKUP,
    OPERATORS,
    ORDERS,
    PENDING_ORDERS,
    PRODUCTS,
    SETTINGS,
    Repository,
)
from ..time_utils import Clock, make_clock, store_zone
from . import sales_service
from .catalog_service import Catalog
from .customer_service import CustomerLedger
from .operator_service import OperatorDirectory
from .order_service import OrderBook, OrderLifecycle
from .pricing_service import PricingTotals
from .settings_service import StoreSettings


def serialized(method):
    """Run a mutating operation under the service lock (one writer at a time)."""
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        with self._lock:
            return method(self, *args, **kwargs)

    return wrapper


class PosService:

    def __init__(
        self,
        repository: Repository,
        *,
        id_generator=None,
        clock: Clock | None = None,
        tz_name: str | None = None,
        operator_provider: Callable[[], Optional[str]] | None = None,
        default_tax_rate=None,
        default_universal_discount=None,
        bcrypt_rounds: int = 12,
    ):
        self.repository = repository
        self._lock = threading.RLock()
        self.ids = id_generator or UuidIdGenerator()
        self.zone = store_zone(tz_name)
        self.clock = clock or make_clock(tz_name)
        self.operator_provider = operator_provider or (lambda: None)
        self.default_tax_rate = default_tax_rate
        self.default_universal_discount = default_universal_discount
        self.bcrypt_rounds = bcrypt_rounds
        self.reload()

    def reload(self) -> None:
        """
        Rebuild every component from the documents in the repository.

        Another process (the flask CLI, a second worker) may have written
        since the last load; whatever is in memory is replaced.
        """
        with self._lock:
            repository = self.repository
            self.catalog = Catalog.load(repository.load(PRODUCTS), id_generator=self.ids)
            self.settings = StoreSettings.load(
                repository.load(SETTINGS),
                tax_rate=self.default_tax_rate,
                universal_discount=self.default_universal_discount,
            )
            self.customers = CustomerLedger.load(repository.load(CUSTOMERS), id_generator=self.ids)
            self.book = OrderBook.load(
                completed=repository.load(ORDERS),
                pending=repository.load(PENDING_ORDERS),
                backup=repository.load(DAILY_SALES_BACKUP),
            )
            self.operators = OperatorDirectory.load(repository.load(OPERATORS), bcrypt_rounds=self.bcrypt_rounds)
            self.lifecycle = OrderLifecycle(
                catalog=self.catalog,
                customers=self.customers,
                book=self.book,
                settings=self.settings,
                id_generator=self.ids,
                clock=self.clock,
                zone=self.zone,
            )

    # -- persistence -----------------------------------------------------

    def _persist(self, *names: str) -> None:
        dumpers = {
            PRODUCTS: self.catalog.dump,
            ORDERS: self.book.dump_completed,
            PENDING_ORDERS: self.book.dump_pending,
            DAILY_SALES_BACKUP: self.book.dump_backup,
            CUSTOMERS: self.customers.dump,
            SETTINGS: self.settings.dump,
            OPERATORS: self.operators.dump,
        }
        for name in names:
            self.repository.save(name, dumpers[name]())

    def today(self) -> date:
        return self.clock().astimezone(self.zone).date()

    def current_operator(self) -> Optional[str]:
        return self.operator_provider()

    # -- catalog ---------------------------------------------------------

    def list_products(self, search=None, category=None, status=None) -> list[Product]:
        return self.catalog.list(search=search, category=category, status=status)

    def get_product(self, product_id: str) -> Product:
        return self.catalog.get(product_id)

    def categories(self) -> list[str]:
        return self.catalog.categories()

    @serialized
    def add_product(self, payload: dict) -> Product:
        product = self.catalog.add_product(payload)
        self._persist(PRODUCTS)
        return product

    @serialized
    def update_product(self, product_id: str, patch: dict) -> Product:
        product = self.catalog.update_product(product_id, patch)
        self._persist(PRODUCTS)
        return product

    @serialized
    def set_stock(self, product_id: str, stock) -> Product:
        product = self.catalog.set_stock(product_id, stock)
        self._persist(PRODUCTS)
        return product

    @serialized
    def delete_product(self, product_id: str) -> Product:
        product = self.catalog.delete_product(product_id)
        self._persist(PRODUCTS)
        return product

    @serialized
    def batch_delete_products(self, product_ids) -> list[str]:
        removed = self.catalog.batch_delete(product_ids)
        if removed:
            self._persist(PRODUCTS)
        return removed

    # -- settings --------------------------------------------------------

    @serialized
    def update_settings(self, patch: dict) -> StoreSettings:
        self.settings.update(patch)
        self._persist(SETTINGS)
        return self.settings

    @serialized
    def update_tax_rate(self, rate) -> Decimal:
        value = self.settings.update_tax_rate(rate)
        self._persist(SETTINGS)
        return value

    @serialized
    def update_universal_discount(self, rate) -> Decimal:
        value = self.settings.update_universal_discount(rate)
        self._persist(SETTINGS)
        return value

    # -- cart and lifecycle ----------------------------------------------

    def new_cart(self, customer_name: str | None = None) -> Cart:
        return self.lifecycle.new_cart(customer_name)

    @serialized
    def add_to_cart(self, cart: Cart, product_id: str, quantity=1) -> Cart:
        cart = self.lifecycle.add_line(cart, product_id, quantity)
        self._persist(PRODUCTS)
        return cart

    @serialized
    def remove_from_cart(self, cart: Cart, line_id: str) -> Cart:
        cart = self.lifecycle.remove_line(cart, line_id)
        self._persist(PRODUCTS)
        return cart

    @serialized
    def set_cart_quantity(self, cart: Cart, line_id: str, quantity) -> Cart:
        cart = self.lifecycle.set_line_quantity(cart, line_id, quantity)
        self._persist(PRODUCTS)
        return cart

    def set_customer_name(self, cart: Cart, name: str | None) -> Cart:
        return self.lifecycle.set_customer_name(cart, name)

    def cart_totals(self, cart: Cart) -> PricingTotals:
        return self.lifecycle.preview_totals(cart)

    @serialized
    def discard_cart(self, cart: Cart) -> Cart:
        fresh = self.lifecycle.discard(cart)
        self._persist(PRODUCTS, PENDING_ORDERS)
        return fresh

    @serialized
    def save_pending(self, cart: Cart, operator: str | None = None) -> tuple[Order, Cart]:
        order, fresh = self.lifecycle.save_pending(cart, operator or self.current_operator())
        self._persist(PENDING_ORDERS)
        return order, fresh

    @serialized
    def checkout(self, cart: Cart, operator: str | None = None) -> tuple[Order, Cart]:
        order, fresh = self.lifecycle.checkout(cart, operator or self.current_operator())
        self._persist(ORDERS, PENDING_ORDERS, CUSTOMERS, PRODUCTS)
        return order, fresh

    @serialized
    def load_pending(self, cart: Cart, order_id: str) -> Cart:
        loaded = self.lifecycle.load_pending(cart, order_id)
        self._persist(PRODUCTS, PENDING_ORDERS)
        return loaded

    @serialized
    def delete_pending(self, order_id: str) -> Order:
        order = self.lifecycle.delete_pending(order_id)
        self._persist(PRODUCTS, PENDING_ORDERS)
        return order

    def list_pending(self) -> list[Order]:
        return list(self.book.pending)

    def get_pending(self, order_id: str) -> Order:
        return self.book.get_pending(order_id)

    # -- completed orders and daily sales --------------------------------

    def list_orders(self) -> list[Order]:
        return list(self.book.completed)

    def get_order(self, order_id: str) -> Order:
        return self.book.get_completed(order_id)

    def todays_orders(self) -> list[Order]:
        return sales_service.orders_on(self.book, self.today(), self.zone)

    def orders_on(self, day: date) -> list[Order]:
        return sales_service.orders_on(self.book, day, self.zone)

    def today_sales(self) -> Decimal:
        return sales_service.sales_total(self.todays_orders())

    def total_revenue(self) -> Decimal:
        return sales_service.sales_total(self.book.completed)

    def order_count(self) -> int:
        return len(self.book.completed)

    def summary(self) -> dict:
        return sales_service.summarize(self.book, self.today(), self.zone)

    def has_backup(self) -> bool:
        return bool(self.book.backup)

    @serialized
    def reset_daily_sales(self) -> int:
        moved = sales_service.reset_daily_sales(self.book, self.catalog, self.today(), self.zone)
        self._persist(ORDERS, DAILY_SALES_BACKUP, PRODUCTS)
        return moved

    @serialized
    def revert_daily_sales(self) -> int:
        restored = sales_service.revert_daily_sales(self.book)
        if restored:
            self._persist(ORDERS, DAILY_SALES_BACKUP)
        return restored

    # -- customers -------------------------------------------------------

    def list_customers(self, search: str | None = None) -> list[Customer]:
        return self.customers.list(search)

    def get_customer(self, customer_id: str) -> Customer:
        return self.customers.get(customer_id)

    @serialized
    def add_customer(self, payload: dict) -> Customer:
        customer = self.customers.add_customer(payload)
        self._persist(CUSTOMERS)
        return customer

    @serialized
    def update_customer(self, customer_id: str, patch: dict) -> Customer:
        customer = self.customers.update_customer(customer_id, patch)
        self._persist(CUSTOMERS)
        return customer

    @serialized
    def delete_customer(self, customer_id: str) -> Customer:
        customer = self.customers.delete_customer(customer_id)
        self._persist(CUSTOMERS)
        return customer

    @serialized
    def find_or_create_customer(self, name: str | None, purchase_total) -> Customer:
        customer = self.customers.find_or_create(name, purchase_total, self.today())
        self._persist(CUSTOMERS)
        return customer

    # -- operators -------------------------------------------------------

    def has_operator(self, username: str | None) -> bool:
        return self.operators.has_operator(username)

    def list_cashiers(self) -> list[Operator]:
        return self.operators.list_cashiers()

    @serialized
    def create_admin(self, password: str) -> Operator:
        admin = self.operators.create_admin(password)
        self._persist(OPERATORS)
        return admin

    @serialized
    def create_cashier(self, username: str, password: str) -> Operator:
        cashier = self.operators.create_cashier(username, password)
        self._persist(OPERATORS)
        return cashier

    @serialized
    def update_password(self, username: str, password: str) -> Operator:
        operator = self.operators.update_password(username, password)
        self._persist(OPERATORS)
        return operator

    @serialized
    def delete_operator(self, username: str) -> Operator:
        operator = self.operators.delete_operator(username)
        self._persist(OPERATORS)
        return operator
