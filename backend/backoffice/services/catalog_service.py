# Overview: Service-layer operations for the catalog; stock ledger and sold counters.

"""
Catalog Invariants (authoritative)

Stock model:
- Stock is a mutable quantity per product (decimal; may be fractional for
  weight/volume units) and never goes below zero.
- Stock is reserved the moment a unit enters a cart and released the moment it
  leaves one. Pending orders keep their reservation.
- status is derived from stock (in-stock iff stock > 0) and never stored.

Sales counters:
- record_sale() only moves the cumulative sold counter; stock was already
  taken at cart time.
- reset_sold_counters() zeroes every product (daily sales reset).

Atomicity:
- Every operation validates first and mutates last; a raised error means
  nothing changed.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from ..errors import InsufficientStockError, NotFoundError
from ..ids import PRODUCT
from ..money import ZERO
from ..records import IN_STOCK, OUT_OF_STOCK, Product
from ..validation import (
    ConflictError,
    PayloadPolicy,
    ValidationError,
    parse_decimal,
    parse_optional_percentage,
    parse_price,
    parse_quantity,
    parse_required_text,
    parse_stock,
    parse_text,
    validate_payload,
)

PRODUCT_POLICY = PayloadPolicy(
    writable_fields={
        "id": parse_text,
        "name": parse_required_text,
        "price": parse_price,
        "stock": parse_stock,
        "category": parse_text,
        "discount": parse_optional_percentage,
        "unit": parse_text,
        "unit_rate": lambda field, value: parse_decimal(field, value, minimum=Decimal("0")),
        "expiry_date": parse_text,
    },
    required_on_create=frozenset({"name", "price"}),
)

PRODUCT_MUTABLE_FIELDS = set(PRODUCT_POLICY.writable_fields) - {"id"}

STATUS_FILTERS = {"all", IN_STOCK, OUT_OF_STOCK}


class Catalog:
    """Ordered product collection with the stock ledger operations."""

    def __init__(self, products: Iterable[Product] = (), id_generator=None):
        self._products: dict[str, Product] = {p.id: p for p in products}
        self._ids = id_generator

    # -- queries ---------------------------------------------------------

    def get(self, product_id: str) -> Product:
        product = self._products.get(product_id)
        if product is None:
            raise NotFoundError("Product not found", details={"product_id": product_id})
        return product

    def has(self, product_id: str) -> bool:
        return product_id in self._products

    def list(
        self,
        search: str | None = None,
        category: str | None = None,
        status: str | None = None,
    ) -> list[Product]:
        """
        Filtered listing in catalog order.

        search matches name or category (case-insensitive); category is exact;
        status is "in-stock", "out-of-stock" or "all".
        """
        if status and status not in STATUS_FILTERS:
            raise ValidationError("status must be one of: all, in-stock, out-of-stock")

        term = (search or "").strip().casefold()
        result = []
        for product in self._products.values():
            if term and term not in product.name.casefold() and term not in product.category.casefold():
                continue
            if category and product.category != category:
                continue
            if status and status != "all" and product.status != status:
                continue
            result.append(product)
        return result

    def categories(self) -> list[str]:
        seen = []
        for product in self._products.values():
            if product.category and product.category not in seen:
                seen.append(product.category)
        return seen

    def __len__(self) -> int:
        return len(self._products)

    # -- management ------------------------------------------------------

    def add_product(self, payload: dict) -> Product:
        data = validate_payload(payload=payload, policy=PRODUCT_POLICY, partial=False)
        product_id = data.pop("id", "") or self._ids.next_id(PRODUCT)
        if product_id in self._products:
            raise ConflictError("Product id already exists", details={"product_id": product_id})

        product = Product(id=product_id, **_drop_empty_unit(data))
        self._products[product.id] = product
        return product

    def update_product(self, product_id: str, patch: dict) -> Product:
        product = self.get(product_id)
        data = validate_payload(payload=patch, policy=PRODUCT_POLICY, partial=True)
        if "id" in data and data["id"] != product_id:
            raise ValidationError("id cannot be changed")

        for key, value in _drop_empty_unit(data).items():
            if key not in PRODUCT_MUTABLE_FIELDS:
                continue
            setattr(product, key, value)
        return product

    def set_stock(self, product_id: str, stock) -> Product:
        product = self.get(product_id)
        product.stock = parse_stock("stock", stock)
        return product

    def delete_product(self, product_id: str) -> Product:
        product = self.get(product_id)
        del self._products[product_id]
        return product

    def batch_delete(self, product_ids: Iterable[str]) -> list[str]:
        """Delete every listed product that exists; returns the ids removed."""
        removed = [pid for pid in dict.fromkeys(product_ids) if pid in self._products]
        for pid in removed:
            del self._products[pid]
        return removed

    # -- stock ledger ----------------------------------------------------

    def reserve_stock(self, product_id: str, quantity) -> Product:
        product = self.get(product_id)
        qty = parse_quantity("quantity", quantity)
        if qty > product.stock:
            raise InsufficientStockError(
                f"Only {product.stock} of {product.name} in stock",
                details={
                    "product_id": product_id,
                    "requested_quantity": str(qty),
                    "available": str(product.stock),
                },
            )
        product.stock -= qty
        return product

    def release_stock(self, product_id: str, quantity) -> Product:
        product = self.get(product_id)
        qty = parse_quantity("quantity", quantity)
        product.stock += qty
        return product

    def adjust_quantity(self, product_id: str, delta) -> Product:
        """Positive delta takes more units from stock, negative gives them back."""
        change = parse_decimal("delta", delta)
        if change > 0:
            return self.reserve_stock(product_id, change)
        if change < 0:
            return self.release_stock(product_id, -change)
        return self.get(product_id)

    def record_sale(self, product_id: str, quantity) -> Product:
        product = self.get(product_id)
        product.sold += parse_quantity("quantity", quantity)
        return product

    def reset_sold_counters(self) -> None:
        for product in self._products.values():
            product.sold = ZERO

    # -- persistence -----------------------------------------------------

    def dump(self) -> list[dict]:
        return [p.to_dict() for p in self._products.values()]

    @classmethod
    def load(cls, document: list[dict] | None, id_generator=None) -> "Catalog":
        return cls((Product.from_dict(row) for row in document or []), id_generator=id_generator)


def _drop_empty_unit(data: dict) -> dict:
    # Blank unit falls back to the default "item"
    if "unit" in data and not data["unit"]:
        data = dict(data)
        data.pop("unit")
    return data
