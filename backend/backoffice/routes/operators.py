# Overview: Flask API routes for cashier account management.

# backend/backoffice/routes/operators.py
"""
Cashier account management.

Login and sessions belong to the external identity provider; these routes
only maintain the directory that decides which X-Operator names are bound.
"""
from flask import Blueprint, request, jsonify, current_app

from ..context import get_service
from ..decorators import json_errors
from ..validation import ValidationError

operators_bp = Blueprint("operators", __name__, url_prefix="/api/operators")


def _credentials(data: dict, *fields: str) -> list[str]:
    values = []
    for name in fields:
        value = data.get(name)
        if not isinstance(value, str) or not value:
            raise ValidationError(f"{name} required")
        values.append(value)
    return values


@operators_bp.get("")
@json_errors("Failed to list cashiers")
def list_cashiers():
    cashiers = get_service().list_cashiers()
    return jsonify({"items": [c.to_dict() for c in cashiers], "count": len(cashiers)}), 200


@operators_bp.post("")
@json_errors("Failed to create cashier")
def create_cashier():
    """
    Create a cashier account.

    Body: {"username": str, "password": str}
    The username is stored with the "@cashier" prefix.
    """
    username, password = _credentials(request.get_json(silent=True) or {}, "username", "password")
    cashier = get_service().create_cashier(username, password)
    current_app.logger.info("Cashier %s created", cashier.username)
    return jsonify({"operator": cashier.to_dict()}), 201


@operators_bp.put("/<username>/password")
@json_errors("Failed to change password")
def change_password(username: str):
    (password,) = _credentials(request.get_json(silent=True) or {}, "password")
    operator = get_service().update_password(username, password)
    return jsonify({"operator": operator.to_dict()}), 200


@operators_bp.delete("/<username>")
@json_errors("Failed to delete operator")
def delete_operator(username: str):
    operator = get_service().delete_operator(username)
    current_app.logger.info("Operator %s deleted", operator.username)
    return jsonify({"deleted": operator.username}), 200
