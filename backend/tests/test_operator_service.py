import bcrypt
import pytest

from backoffice.errors import NotFoundError, ProtectedAccountDeletionError
from backoffice.repository import OPERATORS
from backoffice.services.operator_service import (
    ADMIN_USERNAME,
    OperatorDirectory,
    PasswordValidationError,
    cashier_username,
    validate_password_strength,
)
from backoffice.validation import ConflictError, ValidationError

PASSWORD = "Password123!"


def _matches(operator, password):
    return bcrypt.checkpw(password.encode("utf-8"), operator.password_hash.encode("utf-8"))


@pytest.fixture
def directory():
    return OperatorDirectory(bcrypt_rounds=4)


def test_cashier_usernames_are_prefixed():
    assert cashier_username("bob") == "@cashierbob"
    assert cashier_username(" @cashierbob ") == "@cashierbob"
    with pytest.raises(ValidationError):
        cashier_username("  ")
    with pytest.raises(ValidationError):
        cashier_username("@cashier")


@pytest.mark.parametrize("password", ["Short1!", "password123!", "PASSWORD123!", "Password!!", "Password123"])
def test_weak_passwords_rejected(password):
    with pytest.raises(PasswordValidationError):
        validate_password_strength(password)


def test_create_stores_a_bcrypt_hash(directory):
    cashier = directory.create_cashier("bob", PASSWORD)
    assert cashier.username == "@cashierbob"
    assert cashier.password_hash != PASSWORD
    assert _matches(cashier, PASSWORD)
    assert not _matches(cashier, "Wrong123!")
    assert directory.has_operator("@cashierbob")
    assert not directory.has_operator("bob")
    assert not directory.has_operator(None)

    with pytest.raises(ConflictError):
        directory.create_cashier("@cashierbob", PASSWORD)


def test_admin_is_created_once_and_protected(directory):
    directory.create_admin(PASSWORD)
    with pytest.raises(ConflictError):
        directory.create_admin(PASSWORD)

    with pytest.raises(ProtectedAccountDeletionError):
        directory.delete_operator(ADMIN_USERNAME)
    assert directory.has_operator(ADMIN_USERNAME)
    assert directory.list_cashiers() == []


def test_delete_cashier(directory):
    directory.create_cashier("amy", PASSWORD)
    directory.create_cashier("bob", PASSWORD)

    directory.delete_operator("@cashieramy")

    assert [c.username for c in directory.list_cashiers()] == ["@cashierbob"]
    with pytest.raises(NotFoundError):
        directory.delete_operator("@cashieramy")


def test_update_password(directory):
    directory.create_cashier("bob", PASSWORD)
    directory.update_password("@cashierbob", "NewPassw0rd!")

    operator = directory.get("@cashierbob")
    assert _matches(operator, "NewPassw0rd!")
    assert not _matches(operator, PASSWORD)
    with pytest.raises(PasswordValidationError):
        directory.update_password("@cashierbob", "weak")


def test_service_persists_hashes_only(service, repo, make_service):
    service.create_cashier("bob", PASSWORD)

    [row] = repo.load(OPERATORS)
    assert row["username"] == "@cashierbob"
    assert row["role"] == "cashier"
    assert PASSWORD not in row["password_hash"]

    restarted = make_service()
    assert _matches(restarted.operators.get("@cashierbob"), PASSWORD)
