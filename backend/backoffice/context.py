# Overview: Per-app wiring of the PosService and the open carts.

from __future__ import annotations

from flask import Flask, current_app, g, has_app_context

from .ids import UuidIdGenerator
from .records import Cart
from .repository import SqlRepository
from .services.pos_service import PosService

SERVICE_KEY = "backoffice.pos"
CARTS_KEY = "backoffice.carts"
LOADED_FLAG = "pos_loaded"


def _operator_from_request():
    if not has_app_context():
        return None
    return g.get("operator")


def build_service(app: Flask) -> PosService:
    """
    Construct the service for an app from its config.

    ID_GENERATOR and CLOCK may be placed in app.config (tests do) to make ids
    and timestamps deterministic.
    """
    return PosService(
        SqlRepository(),
        id_generator=app.config.get("ID_GENERATOR") or UuidIdGenerator(),
        clock=app.config.get("CLOCK"),
        tz_name=app.config.get("STORE_TIMEZONE"),
        operator_provider=_operator_from_request,
        default_tax_rate=app.config.get("DEFAULT_TAX_RATE"),
        default_universal_discount=app.config.get("DEFAULT_UNIVERSAL_DISCOUNT"),
        bcrypt_rounds=app.config.get("BCRYPT_ROUNDS", 12),
    )


def get_service() -> PosService:
    """
    The app's PosService.

    Built on first use. Every later app context (each request, each CLI
    command) re-reads storage once before using it, so documents written by
    another process are picked up instead of being overwritten.
    """
    service = current_app.extensions.get(SERVICE_KEY)
    if service is None:
        service = build_service(current_app)
        current_app.extensions[SERVICE_KEY] = service
    elif not g.get(LOADED_FLAG):
        service.reload()
    setattr(g, LOADED_FLAG, True)
    return service


def get_carts() -> dict[str, Cart]:
    """Open carts keyed by operator username (one Building cart per cashier)."""
    return current_app.extensions.setdefault(CARTS_KEY, {})


def reset_service() -> None:
    """Forget the cached service and carts so the next access reloads from storage."""
    current_app.extensions.pop(SERVICE_KEY, None)
    current_app.extensions.pop(CARTS_KEY, None)
