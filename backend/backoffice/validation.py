from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from .errors import InvalidDiscountOrTaxRateError


# Maximum unit price: 9,999,999.99
# This prevents nonsensical prices from slipping into totals
MAX_PRICE = Decimal("9999999.99")


class ValidationError(ValueError):
    """400-level input problem."""

    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class ConflictError(ValueError):
    """409-level business rule conflict (e.g., duplicate product id)."""

    status_code = 409

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


@dataclass(frozen=True)
class PayloadPolicy:
    """
    Central policy layer:
    - writable_fields: field name -> coercer; what clients are allowed to set
    - required_on_create: fields required for create
    """
    writable_fields: dict[str, Callable[[str, Any], Any]]
    required_on_create: frozenset[str] = frozenset()


def parse_decimal(field: str, value: Any, *, minimum: Decimal | None = None) -> Decimal:
    """
    Strict decimal coercion.

    Accepts Decimal, int and numeric strings. Floats go through str() so that
    0.1 stays 0.1. Booleans, NaN and infinities are rejected.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"{field} must be a number")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float)):
        result = Decimal(str(value))
    elif isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise ValidationError(f"{field} must be a number")
        try:
            result = Decimal(stripped)
        except InvalidOperation:
            raise ValidationError(f"{field} must be a number")
    else:
        raise ValidationError(f"{field} must be a number")

    if not result.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if minimum is not None and result < minimum:
        raise ValidationError(f"{field} must be at least {minimum}")
    return result


def parse_quantity(field: str, value: Any) -> Decimal:
    """Positive quantity; fractional values allowed for weight/volume units."""
    qty = parse_decimal(field, value)
    if qty <= 0:
        raise ValidationError(f"{field} must be greater than zero")
    return qty


def parse_percentage(field: str, value: Any) -> Decimal:
    """Percentage in [0, 100]; anything else is an invalid rate."""
    try:
        pct = parse_decimal(field, value)
    except ValidationError as exc:
        raise InvalidDiscountOrTaxRateError(str(exc), details={"field": field, "value": value})
    if pct < 0 or pct > 100:
        raise InvalidDiscountOrTaxRateError(
            f"{field} must be between 0 and 100",
            details={"field": field, "value": str(pct)},
        )
    return pct


def parse_optional_percentage(field: str, value: Any) -> Decimal | None:
    if value is None or value == "":
        return None
    return parse_percentage(field, value)


def parse_price(field: str, value: Any) -> Decimal:
    price = parse_decimal(field, value, minimum=Decimal("0"))
    if price > MAX_PRICE:
        raise ValidationError(f"{field} must not exceed {MAX_PRICE}")
    return price


def parse_stock(field: str, value: Any) -> Decimal:
    return parse_decimal(field, value, minimum=Decimal("0"))


def parse_text(field: str, value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, (str, int)):
        raise ValidationError(f"{field} must be a string")
    return str(value).strip()


def parse_required_text(field: str, value: Any) -> str:
    text = parse_text(field, value)
    if not text:
        raise ValidationError(f"{field} is required")
    return text


def validate_payload(*, payload: Any, policy: PayloadPolicy, partial: bool) -> dict:
    """
    Validates + normalizes an incoming JSON object against a policy.

    Unknown fields are rejected rather than ignored so that typos surface.
    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics
    Returns a cleaned dict with only writable fields.
    """
    if not isinstance(payload, dict):
        raise ValidationError("JSON object required")

    unknown = sorted(set(payload) - set(policy.writable_fields))
    if unknown:
        raise ValidationError("Unknown fields", details={"fields": unknown})

    if not partial:
        missing = sorted(f for f in policy.required_on_create if payload.get(f) in (None, ""))
        if missing:
            raise ValidationError("Missing required fields", details={"fields": missing})

    cleaned = {}
    for key, value in payload.items():
        cleaned[key] = policy.writable_fields[key](key, value)
    return cleaned
