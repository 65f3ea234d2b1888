"""
Daily sales reset/revert and the read-only sales views.

The backup slot holds exactly one reset generation: resetting twice before a
revert drops the earlier backup. Reverting an empty slot is a no-op.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal

from ..money import ZERO, display_money
from ..records import Order
from ..time_utils import local_date
from .catalog_service import Catalog
from .order_service import OrderBook


def reset_daily_sales(book: OrderBook, catalog: Catalog, today: date, zone) -> int:
    """
    Move today's completed orders into the backup slot and zero sold counters.

    Returns the number of orders moved. Orders from other days stay put.
    """
    todays = [o for o in book.completed if local_date(o.created_at, zone) == today]
    others = [o for o in book.completed if local_date(o.created_at, zone) != today]

    book.backup = todays
    book.completed = others
    catalog.reset_sold_counters()
    return len(todays)


def revert_daily_sales(book: OrderBook) -> int:
    """Append the backed-up orders to the completed registry and empty the slot."""
    restored = list(book.backup)
    book.completed.extend(restored)
    book.backup = []
    return len(restored)


def orders_on(book: OrderBook, day: date, zone) -> list[Order]:
    return [o for o in book.completed if local_date(o.created_at, zone) == day]


def sales_total(orders) -> Decimal:
    return sum((o.total for o in orders), ZERO)


def summarize(book: OrderBook, today: date, zone) -> dict:
    """Dashboard figures; amounts are rounded here and nowhere earlier."""
    todays = orders_on(book, today, zone)
    return {
        "date": today.isoformat(),
        "total_revenue": display_money(sales_total(book.completed)),
        "order_count": len(book.completed),
        "today_sales": display_money(sales_total(todays)),
        "today_order_count": len(todays),
        "pending_count": len(book.pending),
        "has_backup": bool(book.backup),
    }
