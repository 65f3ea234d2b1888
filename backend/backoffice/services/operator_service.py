# Overview: Operator (cashier/admin) account directory.

"""
Operator accounts, as far as the back office needs them.

Login, sessions and recovery questions live with the external identity
provider; this directory only manages accounts and answers "is this a known
operator?" so that a request can be bound to a cashier.

- The admin account is "@admin" and can never be deleted.
- Cashier usernames always start with "@cashier".
- Passwords are stored as bcrypt hashes.
"""

from __future__ import annotations

import re
from typing import Iterable

import bcrypt

from ..errors import NotFoundError, ProtectedAccountDeletionError
from ..records import ROLE_ADMIN, ROLE_CASHIER, Operator
from ..validation import ConflictError, ValidationError

ADMIN_USERNAME = "@admin"
CASHIER_PREFIX = "@cashier"

PASSWORD_RULES = (
    (r".{8,}", "Password must be at least 8 characters long"),
    (r"[A-Z]", "Password must contain at least one uppercase letter"),
    (r"[a-z]", "Password must contain at least one lowercase letter"),
    (r"\d", "Password must contain at least one digit"),
    (r"[!@#$%^&*(),.'\":{}|<>]", "Password must contain at least one special character"),
)


class PasswordValidationError(ValidationError):
    """Raised when password doesn't meet strength requirements."""


def validate_password_strength(password: str) -> None:
    if not isinstance(password, str):
        raise PasswordValidationError("Password is required")
    for pattern, message in PASSWORD_RULES:
        if not re.search(pattern, password):
            raise PasswordValidationError(message)


def hash_password(password: str, rounds: int = 12) -> str:
    validate_password_strength(password)
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))
    return hashed.decode("utf-8")  # Stored as string in the document


def cashier_username(username: str) -> str:
    name = (username or "").strip()
    if not name or name == CASHIER_PREFIX:
        raise ValidationError("username is required")
    return name if name.startswith(CASHIER_PREFIX) else f"{CASHIER_PREFIX}{name}"


class OperatorDirectory:

    def __init__(self, operators: Iterable[Operator] = (), bcrypt_rounds: int = 12):
        self._operators: dict[str, Operator] = {op.username: op for op in operators}
        self.bcrypt_rounds = bcrypt_rounds

    def get(self, username: str) -> Operator:
        operator = self._operators.get(username)
        if operator is None:
            raise NotFoundError("Operator not found", details={"username": username})
        return operator

    def has_operator(self, username: str | None) -> bool:
        return bool(username) and username in self._operators

    def list_cashiers(self) -> list[Operator]:
        return [op for op in self._operators.values() if op.is_cashier]

    def create_admin(self, password: str) -> Operator:
        if ADMIN_USERNAME in self._operators:
            raise ConflictError("Admin account already exists")
        admin = Operator(
            username=ADMIN_USERNAME,
            role=ROLE_ADMIN,
            password_hash=hash_password(password, self.bcrypt_rounds),
        )
        self._operators[admin.username] = admin
        return admin

    def create_cashier(self, username: str, password: str) -> Operator:
        name = cashier_username(username)
        if name in self._operators:
            raise ConflictError("Username already exists", details={"username": name})
        cashier = Operator(
            username=name,
            role=ROLE_CASHIER,
            password_hash=hash_password(password, self.bcrypt_rounds),
        )
        self._operators[name] = cashier
        return cashier

    def update_password(self, username: str, password: str) -> Operator:
        operator = self.get(username)
        operator.password_hash = hash_password(password, self.bcrypt_rounds)
        return operator

    def delete_operator(self, username: str) -> Operator:
        operator = self.get(username)
        if not operator.is_cashier:
            raise ProtectedAccountDeletionError(
                "Cannot delete non-cashier accounts",
                details={"username": username},
            )
        del self._operators[username]
        return operator

    def dump(self) -> list[dict]:
        return [op.to_dict(include_hash=True) for op in self._operators.values()]

    @classmethod
    def load(cls, document: list[dict] | None, bcrypt_rounds: int = 12) -> "OperatorDirectory":
        return cls((Operator.from_dict(row) for row in document or []), bcrypt_rounds=bcrypt_rounds)
