"""
Pricing: per-item discounts, the universal discount and tax.

Pure functions. Discounts are applied in sequence, never on the same base:

    line_total  = unit_price * (1 - own_discount) * quantity
    subtotal    = sum(line_total)
    universal   = subtotal * universal_rate
    tax         = (subtotal - universal) * tax_rate
    total       = subtotal - universal + tax

The universal discount never stacks on the pre-item-discount price, so a
line with its own discount is not discounted twice. Nothing is rounded here;
rounding happens when amounts are presented.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from ..money import ZERO, display_money, to_rate
from ..records import CartLine


@dataclass(frozen=True)
class PricingTotals:
    gross: Decimal                 # sum(unit_price * quantity)
    subtotal: Decimal              # after per-item discounts
    item_discount: Decimal         # gross - subtotal
    universal_discount: Decimal
    after_discount: Decimal
    tax: Decimal
    total: Decimal
    tax_rate: Decimal              # percentages as applied
    universal_rate: Decimal

    def to_dict(self) -> dict:
        return {
            "gross": display_money(self.gross),
            "subtotal": display_money(self.subtotal),
            "item_discount": display_money(self.item_discount),
            "universal_discount": display_money(self.universal_discount),
            "after_discount": display_money(self.after_discount),
            "tax": display_money(self.tax),
            "total": display_money(self.total),
            "tax_rate": str(self.tax_rate),
            "universal_rate": str(self.universal_rate),
        }


def compute_totals(
    lines: Iterable[CartLine],
    tax_rate: Decimal,
    universal_discount: Decimal,
) -> PricingTotals:
    """tax_rate and universal_discount are percentages (10 means 10%)."""
    lines = list(lines)

    subtotal = sum((line.line_total for line in lines), ZERO)
    gross = sum((line.gross for line in lines), ZERO)

    universal_amount = subtotal * to_rate(universal_discount)
    after_discount = subtotal - universal_amount
    tax = after_discount * to_rate(tax_rate)

    return PricingTotals(
        gross=gross,
        subtotal=subtotal,
        item_discount=gross - subtotal,
        universal_discount=universal_amount,
        after_discount=after_discount,
        tax=tax,
        total=after_discount + tax,
        tax_rate=tax_rate,
        universal_rate=universal_discount,
    )


def effective_discount(product_discount: Decimal | None, universal_discount: Decimal) -> Decimal:
    """Discount shown on a line: the product's own, else the store-wide one."""
    if product_discount:
        return product_discount
    return universal_discount or ZERO
