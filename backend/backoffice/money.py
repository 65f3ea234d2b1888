from __future__ import annotations

from decimal import Decimal, ROUND_HALF_UP

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")


def to_rate(percentage: Decimal | None) -> Decimal:
    """12.5 (%) -> 0.125. None counts as no discount."""
    if not percentage:
        return ZERO
    return percentage / HUNDRED


def round_money(value: Decimal) -> Decimal:
    """Round to cents (half-up). Only used when presenting amounts."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def display_money(value: Decimal) -> str:
    return str(round_money(value))


def dump_decimal(value: Decimal | None) -> str | None:
    """Full-precision string for persisted documents."""
    if value is None:
        return None
    return str(value)


def load_decimal(value, default: Decimal | None = ZERO) -> Decimal | None:
    if value is None or value == "":
        return default
    return Decimal(str(value))
