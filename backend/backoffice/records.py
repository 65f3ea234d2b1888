"""
Plain records for the transaction engine.

These are what the services pass around and what gets written to the
repository as JSON documents. Decimals are persisted as full-precision
strings; to_dict(display=True) rounds money to cents for presentation.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Optional

from .money import ZERO, display_money, dump_decimal, load_decimal, to_rate
from .time_utils import parse_iso_datetime, to_iso

IN_STOCK = "in-stock"
OUT_OF_STOCK = "out-of-stock"

PENDING = "pending"
COMPLETED = "completed"

ROLE_ADMIN = "admin"
ROLE_CASHIER = "cashier"

GUEST = "Guest"


def _money(value: Decimal, display: bool) -> str:
    return display_money(value) if display else dump_decimal(value)


@dataclass
class Product:
    id: str
    name: str
    price: Decimal
    stock: Decimal = ZERO
    category: str = ""
    sold: Decimal = ZERO
    discount: Optional[Decimal] = None  # own percentage, 0-100
    unit: str = "item"
    unit_rate: Decimal = Decimal("1")
    expiry_date: str = ""

    @property
    def status(self) -> str:
        # Derived on read so it can never drift from stock
        return IN_STOCK if self.stock > 0 else OUT_OF_STOCK

    def __repr__(self) -> str:
        return f"<Product id={self.id!r} name={self.name!r} stock={self.stock}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": dump_decimal(self.price),
            "stock": dump_decimal(self.stock),
            "category": self.category,
            "sold": dump_decimal(self.sold),
            "discount": dump_decimal(self.discount),
            "unit": self.unit,
            "unit_rate": dump_decimal(self.unit_rate),
            "expiry_date": self.expiry_date,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Product":
        # "status" is ignored on purpose; it is recomputed from stock
        return cls(
            id=data["id"],
            name=data["name"],
            price=load_decimal(data.get("price")),
            stock=load_decimal(data.get("stock")),
            category=data.get("category") or "",
            sold=load_decimal(data.get("sold")),
            discount=load_decimal(data.get("discount"), default=None),
            unit=data.get("unit") or "item",
            unit_rate=load_decimal(data.get("unit_rate"), default=Decimal("1")),
            expiry_date=data.get("expiry_date") or "",
        )


@dataclass(frozen=True)
class CartLine:
    """Snapshot of a product at add-time plus the quantity held for it."""
    line_id: str
    product_id: str
    name: str
    unit_price: Decimal
    quantity: Decimal
    product_discount: Optional[Decimal] = None
    discount: Decimal = ZERO  # effective: own discount, else universal (display only)
    unit: str = "item"
    unit_rate: Decimal = Decimal("1")

    @property
    def gross(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * (1 - to_rate(self.product_discount)) * self.quantity

    def with_quantity(self, quantity: Decimal) -> "CartLine":
        return replace(self, quantity=quantity)

    def to_dict(self, display: bool = False) -> dict:
        return {
            "line_id": self.line_id,
            "product_id": self.product_id,
            "name": self.name,
            "unit_price": _money(self.unit_price, display),
            "quantity": dump_decimal(self.quantity),
            "product_discount": dump_decimal(self.product_discount),
            "discount": dump_decimal(self.discount),
            "unit": self.unit,
            "unit_rate": dump_decimal(self.unit_rate),
            "line_total": _money(self.line_total, display),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "CartLine":
        return cls(
            line_id=data["line_id"],
            product_id=data["product_id"],
            name=data.get("name") or "",
            unit_price=load_decimal(data.get("unit_price")),
            quantity=load_decimal(data.get("quantity")),
            product_discount=load_decimal(data.get("product_discount"), default=None),
            discount=load_decimal(data.get("discount")),
            unit=data.get("unit") or "item",
            unit_rate=load_decimal(data.get("unit_rate"), default=Decimal("1")),
        )


@dataclass(frozen=True)
class Cart:
    """
    Building state: the order under construction.

    Never persisted. Lifecycle operations take a cart and hand back a new one;
    pending_id remembers which pending order was loaded so that a later save or
    checkout overwrites it instead of duplicating it.
    """
    order_id: str
    lines: tuple[CartLine, ...] = ()
    customer_name: Optional[str] = None
    pending_id: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def line(self, line_id: str) -> Optional[CartLine]:
        return next((ln for ln in self.lines if ln.line_id == line_id), None)

    def line_for_product(self, product_id: str) -> Optional[CartLine]:
        return next((ln for ln in self.lines if ln.product_id == product_id), None)

    def with_line(self, new_line: CartLine) -> "Cart":
        """Replace the line with the same id, or append it."""
        if self.line(new_line.line_id) is None:
            return replace(self, lines=self.lines + (new_line,))
        return replace(
            self,
            lines=tuple(new_line if ln.line_id == new_line.line_id else ln for ln in self.lines),
        )

    def without_line(self, line_id: str) -> "Cart":
        return replace(self, lines=tuple(ln for ln in self.lines if ln.line_id != line_id))

    def to_dict(self, display: bool = False) -> dict:
        return {
            "order_id": self.order_id,
            "customer_name": self.customer_name,
            "pending_id": self.pending_id,
            "lines": [ln.to_dict(display) for ln in self.lines],
        }


@dataclass(frozen=True)
class Order:
    id: str
    lines: tuple[CartLine, ...]
    subtotal: Decimal
    item_discount: Decimal
    universal_discount: Decimal
    tax: Decimal
    total: Decimal
    created_at: datetime
    status: str
    cashier_id: str
    customer_name: Optional[str] = None
    tax_rate: Decimal = ZERO
    universal_rate: Decimal = ZERO

    def to_dict(self, display: bool = False) -> dict:
        return {
            "id": self.id,
            "status": self.status,
            "created_at": to_iso(self.created_at),
            "cashier_id": self.cashier_id,
            "customer_name": self.customer_name,
            "items": [ln.to_dict(display) for ln in self.lines],
            "subtotal": _money(self.subtotal, display),
            "item_discount": _money(self.item_discount, display),
            "universal_discount": _money(self.universal_discount, display),
            "tax": _money(self.tax, display),
            "total": _money(self.total, display),
            "tax_rate": dump_decimal(self.tax_rate),
            "universal_rate": dump_decimal(self.universal_rate),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Order":
        return cls(
            id=data["id"],
            lines=tuple(CartLine.from_dict(item) for item in data.get("items") or []),
            subtotal=load_decimal(data.get("subtotal")),
            item_discount=load_decimal(data.get("item_discount")),
            universal_discount=load_decimal(data.get("universal_discount")),
            tax=load_decimal(data.get("tax")),
            total=load_decimal(data.get("total")),
            created_at=parse_iso_datetime(data.get("created_at")),
            status=data.get("status") or COMPLETED,
            cashier_id=data.get("cashier_id") or "",
            customer_name=data.get("customer_name"),
            tax_rate=load_decimal(data.get("tax_rate")),
            universal_rate=load_decimal(data.get("universal_rate")),
        )


@dataclass
class Customer:
    id: str
    name: str
    email: str = ""
    phone: str = ""
    address: str = ""
    total_purchases: Decimal = ZERO
    last_purchase: Optional[str] = None  # ISO date

    @property
    def name_key(self) -> str:
        return name_key(self.name)

    def to_dict(self, display: bool = False) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
            "total_purchases": _money(self.total_purchases, display),
            "last_purchase": self.last_purchase,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Customer":
        return cls(
            id=data["id"],
            name=data["name"],
            email=data.get("email") or "",
            phone=data.get("phone") or "",
            address=data.get("address") or "",
            total_purchases=load_decimal(data.get("total_purchases")),
            last_purchase=data.get("last_purchase"),
        )


@dataclass
class Operator:
    username: str
    role: str
    password_hash: str = field(repr=False, default="")

    @property
    def is_cashier(self) -> bool:
        return self.role == ROLE_CASHIER

    def to_dict(self, include_hash: bool = False) -> dict:
        data = {"username": self.username, "role": self.role}
        if include_hash:
            data["password_hash"] = self.password_hash
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Operator":
        return cls(
            username=data["username"],
            role=data["role"],
            password_hash=data.get("password_hash") or "",
        )


def name_key(name: str) -> str:
    """Case-insensitive aggregation key for customer names."""
    return (name or "").strip().casefold()
