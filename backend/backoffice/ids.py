# Overview: Identifier generation for orders, products, customers and cart lines.

from __future__ import annotations

import itertools
import uuid
from collections import defaultdict

ORDER = "ORD"
PRODUCT = "PRD"
CUSTOMER = "CUS"
LINE = "LN"


class SequentialIdGenerator:
    """
    Monotonic per-prefix counter: ORD-000001, ORD-000002, ...

    Deterministic, so tests can assert exact ids. Counters live in memory and
    start over with the process.
    """

    def __init__(self, start: int = 1):
        self._counters = defaultdict(lambda: itertools.count(start))

    def next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._counters[prefix]):06d}"


class UuidIdGenerator:
    """Collision-free ids for long-lived stores: ORD-3f9c0a1b2d4e."""

    def __init__(self, length: int = 12):
        self.length = length

    def next_id(self, prefix: str) -> str:
        return f"{prefix}-{uuid.uuid4().hex[: self.length]}"
