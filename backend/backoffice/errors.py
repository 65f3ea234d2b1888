# Overview: Domain errors raised by the transaction engine.

"""
Every error here is raised before the operation mutates anything, so callers
can surface the message and carry on with the previous state.
"""


class PosError(Exception):
    """Base error for back-office operations."""
    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class InsufficientStockError(PosError):
    """Requested reservation exceeds the product's available stock."""
    status_code = 409


class EmptyCartError(PosError):
    """Save or checkout attempted on a cart with no lines."""
    status_code = 400


class NoActiveOperatorError(PosError):
    """No cashier identity is bound to the current action."""
    status_code = 401


class InvalidDiscountOrTaxRateError(PosError):
    """Percentage outside 0-100 (or not a number)."""
    status_code = 400


class NotFoundError(PosError):
    """Referenced product, order, customer or operator does not exist."""
    status_code = 404


class ProtectedAccountDeletionError(PosError):
    """Only cashier accounts may be deleted."""
    status_code = 403
