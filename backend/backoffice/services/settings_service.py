from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ..money import dump_decimal, load_decimal
from ..validation import parse_percentage

DEFAULT_TAX_RATE = Decimal("10")
DEFAULT_UNIVERSAL_DISCOUNT = Decimal("0")


@dataclass
class StoreSettings:
    """Store-wide pricing settings, both as percentages in [0, 100]."""
    tax_rate: Decimal = DEFAULT_TAX_RATE
    universal_discount: Decimal = DEFAULT_UNIVERSAL_DISCOUNT

    def update_tax_rate(self, rate) -> Decimal:
        # Parse before assigning: a rejected value leaves the old one in place
        self.tax_rate = parse_percentage("tax_rate", rate)
        return self.tax_rate

    def update_universal_discount(self, rate) -> Decimal:
        self.universal_discount = parse_percentage("universal_discount", rate)
        return self.universal_discount

    def update(self, patch: dict) -> "StoreSettings":
        """Apply tax_rate and/or universal_discount; all-or-nothing."""
        tax_rate = self.tax_rate
        universal = self.universal_discount
        if "tax_rate" in patch:
            tax_rate = parse_percentage("tax_rate", patch["tax_rate"])
        if "universal_discount" in patch:
            universal = parse_percentage("universal_discount", patch["universal_discount"])
        self.tax_rate = tax_rate
        self.universal_discount = universal
        return self

    def dump(self) -> dict:
        return {
            "tax_rate": dump_decimal(self.tax_rate),
            "universal_discount": dump_decimal(self.universal_discount),
        }

    @classmethod
    def load(cls, document: dict | None, *, tax_rate=None, universal_discount=None) -> "StoreSettings":
        """
        Build from a persisted record; the keyword defaults apply only when no
        record exists yet (first start).
        """
        if document is None:
            return cls(
                tax_rate=parse_percentage("tax_rate", tax_rate if tax_rate is not None else DEFAULT_TAX_RATE),
                universal_discount=parse_percentage(
                    "universal_discount",
                    universal_discount if universal_discount is not None else DEFAULT_UNIVERSAL_DISCOUNT,
                ),
            )
        return cls(
            tax_rate=load_decimal(document.get("tax_rate"), default=DEFAULT_TAX_RATE),
            universal_discount=load_decimal(document.get("universal_discount"), default=DEFAULT_UNIVERSAL_DISCOUNT),
        )
