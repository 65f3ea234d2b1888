# Overview: Order lifecycle; cart building, pending registry and checkout.

"""
Order Lifecycle (authoritative)

States:
- Building: the live cart (records.Cart). Transient, never persisted.
- Pending: saved, editable, stock still reserved.
- Completed: terminal; stock reserved and the sale recorded.

Transitions:
- add/remove/adjust line (Building): stock moves immediately through the
  Catalog; an InsufficientStockError leaves both stock and cart unchanged.
- save_pending (Building -> Pending): replaces an entry with the same id.
- checkout (Building/Pending -> Completed): removes the pending entry, books
  the purchase on the customer ledger and records the sale per line.
- load_pending (Pending -> Building): no re-reservation; stock is already held.
- discard (Building -> nothing): releases all stock held by the cart. A cart
  loaded from a pending order ends that pending order.

Orders never move between pending and completed except as above; completed
orders only leave the registry through the daily sales reset.
"""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Iterable, Optional

from ..errors import EmptyCartError, NoActiveOperatorError, NotFoundError
from ..ids import LINE, ORDER
from ..records import COMPLETED, GUEST, PENDING, Cart, CartLine, Order
from ..time_utils import Clock, local_date
from ..validation import ValidationError, parse_quantity
from .catalog_service import Catalog
from .customer_service import CustomerLedger
from .pricing_service import PricingTotals, compute_totals, effective_discount
from .settings_service import StoreSettings


class OrderBook:
    """Pending and completed registries plus the daily-sales backup slot."""

    def __init__(
        self,
        completed: Iterable[Order] = (),
        pending: Iterable[Order] = (),
        backup: Iterable[Order] = (),
    ):
        self.completed: list[Order] = list(completed)
        self.pending: list[Order] = list(pending)
        self.backup: list[Order] = list(backup)

    def find_pending(self, order_id: str) -> Optional[Order]:
        return next((o for o in self.pending if o.id == order_id), None)

    def get_pending(self, order_id: str) -> Order:
        order = self.find_pending(order_id)
        if order is None:
            raise NotFoundError("Pending order not found", details={"order_id": order_id})
        return order

    def get_completed(self, order_id: str) -> Order:
        order = next((o for o in self.completed if o.id == order_id), None)
        if order is None:
            raise NotFoundError("Order not found", details={"order_id": order_id})
        return order

    def put_pending(self, order: Order) -> None:
        """Store a pending order, replacing (in place) one with the same id."""
        for index, existing in enumerate(self.pending):
            if existing.id == order.id:
                self.pending[index] = order
                return
        self.pending.append(order)

    def remove_pending(self, order_id: str) -> Optional[Order]:
        order = self.find_pending(order_id)
        if order is not None:
            self.pending = [o for o in self.pending if o.id != order_id]
        return order

    def add_completed(self, order: Order) -> None:
        self.completed.append(order)

    def dump_completed(self) -> list[dict]:
        return [o.to_dict() for o in self.completed]

    def dump_pending(self) -> list[dict]:
        return [o.to_dict() for o in self.pending]

    def dump_backup(self) -> list[dict]:
        return [o.to_dict() for o in self.backup]

    @classmethod
    def load(cls, completed=None, pending=None, backup=None) -> "OrderBook":
        return cls(
            completed=(Order.from_dict(row) for row in completed or []),
            pending=(Order.from_dict(row) for row in pending or []),
            backup=(Order.from_dict(row) for row in backup or []),
        )


def _line_quantity(value) -> Decimal:
    qty = parse_quantity("quantity", value)
    if qty < 1:
        raise ValidationError("quantity must be at least 1")
    return qty


class OrderLifecycle:
    """Cart operations and the transitions into the pending/completed registries."""

    def __init__(
        self,
        *,
        catalog: Catalog,
        customers: CustomerLedger,
        book: OrderBook,
        settings: StoreSettings,
        id_generator,
        clock: Clock,
        zone=None,
    ):
        self.catalog = catalog
        self.customers = customers
        self.book = book
        self.settings = settings
        self.ids = id_generator
        self.clock = clock
        self.zone = zone

    # -- building --------------------------------------------------------

    def new_cart(self, customer_name: str | None = None) -> Cart:
        return Cart(order_id=self.ids.next_id(ORDER), customer_name=_clean_name(customer_name))

    def add_line(self, cart: Cart, product_id: str, quantity=1) -> Cart:
        """
        Reserve stock and add it to the cart.

        Adding a product already in the cart grows that line instead of
        creating a second one.
        """
        qty = _line_quantity(quantity)
        product = self.catalog.get(product_id)
        existing = cart.line_for_product(product_id)

        self.catalog.reserve_stock(product_id, qty)

        if existing is not None:
            return cart.with_line(existing.with_quantity(existing.quantity + qty))

        line = CartLine(
            line_id=self.ids.next_id(LINE),
            product_id=product.id,
            name=product.name,
            unit_price=product.price,
            quantity=qty,
            product_discount=product.discount,
            discount=effective_discount(product.discount, self.settings.universal_discount),
            unit=product.unit,
            unit_rate=product.unit_rate,
        )
        return cart.with_line(line)

    def remove_line(self, cart: Cart, line_id: str) -> Cart:
        line = self._require_line(cart, line_id)
        # A product deleted from the catalog has no stock left to restore
        if self.catalog.has(line.product_id):
            self.catalog.release_stock(line.product_id, line.quantity)
        return cart.without_line(line_id)

    def set_line_quantity(self, cart: Cart, line_id: str, quantity) -> Cart:
        line = self._require_line(cart, line_id)
        qty = _line_quantity(quantity)
        self.catalog.adjust_quantity(line.product_id, qty - line.quantity)
        return cart.with_line(line.with_quantity(qty))

    def set_customer_name(self, cart: Cart, name: str | None) -> Cart:
        return replace(cart, customer_name=_clean_name(name))

    def preview_totals(self, cart: Cart) -> PricingTotals:
        return compute_totals(cart.lines, self.settings.tax_rate, self.settings.universal_discount)

    # -- transitions -----------------------------------------------------

    def save_pending(self, cart: Cart, operator: str | None) -> tuple[Order, Cart]:
        self._require_ready(cart, operator)
        order = self._build_order(cart, PENDING, operator)
        self.book.put_pending(order)
        return order, self.new_cart()

    def checkout(self, cart: Cart, operator: str | None) -> tuple[Order, Cart]:
        self._require_ready(cart, operator)
        order = self._build_order(cart, COMPLETED, operator)

        self.book.add_completed(order)
        self.book.remove_pending(cart.pending_id or cart.order_id)
        purchase_day = local_date(order.created_at, self.zone) if self.zone else order.created_at.date()
        self.customers.find_or_create(order.customer_name, order.total, purchase_day)
        for line in order.lines:
            if self.catalog.has(line.product_id):
                self.catalog.record_sale(line.product_id, line.quantity)

        return order, self.new_cart()

    def load_pending(self, cart: Cart, order_id: str) -> Cart:
        """
        Put the current cart away and continue the given pending order.

        A cart bound to another pending order is saved back under that order
        (keeping its operator); any other cart is discarded.
        """
        if cart.pending_id == order_id:
            return cart

        pending = self.book.get_pending(order_id)
        self._put_away(cart)
        return Cart(
            order_id=pending.id,
            lines=pending.lines,
            customer_name=pending.customer_name,
            pending_id=pending.id,
        )

    def discard(self, cart: Cart) -> Cart:
        self._release_lines(cart.lines)
        if cart.pending_id:
            self.book.remove_pending(cart.pending_id)
        return self.new_cart()

    def delete_pending(self, order_id: str) -> Order:
        """Drop a pending order and give its reserved stock back."""
        order = self.book.get_pending(order_id)
        self._release_lines(order.lines)
        self.book.remove_pending(order_id)
        return order

    # -- helpers ---------------------------------------------------------

    def _put_away(self, cart: Cart) -> None:
        previous = self.book.find_pending(cart.pending_id) if cart.pending_id else None
        if previous is None:
            self._release_lines(cart.lines)
        elif cart.is_empty:
            # Every line was removed (stock already released); nothing left to keep
            self.book.remove_pending(previous.id)
        else:
            self.book.put_pending(self._build_order(cart, PENDING, previous.cashier_id))

    def _release_lines(self, lines: Iterable[CartLine]) -> None:
        for line in lines:
            if self.catalog.has(line.product_id):
                self.catalog.release_stock(line.product_id, line.quantity)

    def _require_line(self, cart: Cart, line_id: str) -> CartLine:
        line = cart.line(line_id)
        if line is None:
            raise NotFoundError("Cart line not found", details={"line_id": line_id})
        return line

    def _require_ready(self, cart: Cart, operator: str | None) -> None:
        if cart.is_empty:
            raise EmptyCartError("Cannot save or checkout an empty cart")
        if not operator:
            raise NoActiveOperatorError("Cashier not logged in")

    def _build_order(self, cart: Cart, status: str, operator: str) -> Order:
        totals = self.preview_totals(cart)
        return Order(
            id=cart.pending_id or cart.order_id,
            lines=cart.lines,
            subtotal=totals.subtotal,
            item_discount=totals.item_discount,
            universal_discount=totals.universal_discount,
            tax=totals.tax,
            total=totals.total,
            created_at=self.clock(),
            status=status,
            cashier_id=operator,
            customer_name=cart.customer_name or GUEST,
            tax_rate=totals.tax_rate,
            universal_rate=totals.universal_rate,
        )


def _clean_name(name: str | None) -> str | None:
    name = (name or "").strip()
    return name or None
