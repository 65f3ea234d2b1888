# backend/backoffice/routes/customers.py
from flask import Blueprint, request, jsonify

from ..context import get_service
from ..decorators import json_errors

customers_bp = Blueprint("customers", __name__, url_prefix="/api/customers")


@customers_bp.get("")
@json_errors("Failed to list customers")
def list_customers():
    customers = get_service().list_customers(request.args.get("search"))
    return jsonify({"items": [c.to_dict(display=True) for c in customers], "count": len(customers)}), 200


@customers_bp.post("")
@json_errors("Failed to create customer")
def create_customer():
    customer = get_service().add_customer(request.get_json(silent=True))
    return jsonify({"customer": customer.to_dict(display=True)}), 201


@customers_bp.get("/<customer_id>")
@json_errors("Failed to load customer")
def get_customer(customer_id: str):
    return jsonify({"customer": get_service().get_customer(customer_id).to_dict(display=True)}), 200


@customers_bp.patch("/<customer_id>")
@json_errors("Failed to update customer")
def update_customer(customer_id: str):
    customer = get_service().update_customer(customer_id, request.get_json(silent=True))
    return jsonify({"customer": customer.to_dict(display=True)}), 200


@customers_bp.delete("/<customer_id>")
@json_errors("Failed to delete customer")
def delete_customer(customer_id: str):
    customer = get_service().delete_customer(customer_id)
    return jsonify({"deleted": customer.id}), 200
