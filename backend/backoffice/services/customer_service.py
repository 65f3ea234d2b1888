# Overview: Customer ledger; purchase aggregation keyed by case-insensitive name.

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable

from ..errors import NotFoundError
from ..ids import CUSTOMER
from ..records import GUEST, Customer, name_key
from ..validation import (
    ConflictError,
    PayloadPolicy,
    parse_decimal,
    parse_required_text,
    parse_text,
    validate_payload,
)

CUSTOMER_POLICY = PayloadPolicy(
    writable_fields={
        "name": parse_required_text,
        "email": parse_text,
        "phone": parse_text,
        "address": parse_text,
    },
    required_on_create=frozenset({"name"}),
)


class CustomerLedger:
    """
    Customers aggregated by name.

    Names are the aggregation key and are unique ignoring case. Aggregates
    (total_purchases, last_purchase) only move through find_or_create(), which
    is called for completed orders and never for pending ones.
    """

    def __init__(self, customers: Iterable[Customer] = (), id_generator=None):
        self._customers: dict[str, Customer] = {c.id: c for c in customers}
        self._ids = id_generator

    def get(self, customer_id: str) -> Customer:
        customer = self._customers.get(customer_id)
        if customer is None:
            raise NotFoundError("Customer not found", details={"customer_id": customer_id})
        return customer

    def find_by_name(self, name: str) -> Customer | None:
        key = name_key(name)
        return next((c for c in self._customers.values() if c.name_key == key), None)

    def list(self, search: str | None = None) -> list[Customer]:
        term = (search or "").strip().casefold()
        if not term:
            return list(self._customers.values())
        return [
            c for c in self._customers.values()
            if term in c.name.casefold() or term in c.email.casefold() or term in c.phone
        ]

    def __len__(self) -> int:
        return len(self._customers)

    def find_or_create(self, name: str | None, purchase_total: Decimal, today: date) -> Customer:
        """
        Add a completed purchase to the customer's aggregates.

        Matches an existing customer case-insensitively; otherwise creates one
        with empty contact fields. A blank name books the purchase to "Guest".
        """
        total = parse_decimal("purchase_total", purchase_total)
        display_name = (name or "").strip() or GUEST

        customer = self.find_by_name(display_name)
        if customer is not None:
            customer.total_purchases += total
            customer.last_purchase = today.isoformat()
            return customer

        customer = Customer(
            id=self._ids.next_id(CUSTOMER),
            name=display_name,
            total_purchases=total,
            last_purchase=today.isoformat(),
        )
        self._customers[customer.id] = customer
        return customer

    def add_customer(self, payload: dict) -> Customer:
        data = validate_payload(payload=payload, policy=CUSTOMER_POLICY, partial=False)
        if self.find_by_name(data["name"]) is not None:
            raise ConflictError("Customer name already exists", details={"name": data["name"]})

        customer = Customer(id=self._ids.next_id(CUSTOMER), **data)
        self._customers[customer.id] = customer
        return customer

    def update_customer(self, customer_id: str, patch: dict) -> Customer:
        customer = self.get(customer_id)
        data = validate_payload(payload=patch, policy=CUSTOMER_POLICY, partial=True)
        if "name" in data:
            other = self.find_by_name(data["name"])
            if other is not None and other.id != customer_id:
                raise ConflictError("Customer name already exists", details={"name": data["name"]})

        for key, value in data.items():
            setattr(customer, key, value)
        return customer

    def delete_customer(self, customer_id: str) -> Customer:
        customer = self.get(customer_id)
        del self._customers[customer_id]
        return customer

    def dump(self) -> list[dict]:
        return [c.to_dict() for c in self._customers.values()]

    @classmethod
    def load(cls, document: list[dict] | None, id_generator=None) -> "CustomerLedger":
        return cls((Customer.from_dict(row) for row in document or []), id_generator=id_generator)
