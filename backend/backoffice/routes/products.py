# Overview: Flask API routes for catalog operations; parses input and returns JSON responses.

# backend/backoffice/routes/products.py
"""
Product management routes.

Writes accept the fields of catalog_service.PRODUCT_POLICY; unknown fields are
rejected. "status" is derived from stock and cannot be written.
"""
from flask import Blueprint, request, jsonify

from ..context import get_service
from ..decorators import json_errors
from ..validation import ValidationError

products_bp = Blueprint("products", __name__, url_prefix="/api/products")


@products_bp.get("")
@json_errors("Failed to list products")
def list_products():
    """
    List products in catalog order.

    Query params:
    - search: matches name or category, case-insensitive
    - category: exact category
    - status: all | in-stock | out-of-stock
    """
    products = get_service().list_products(
        search=request.args.get("search"),
        category=request.args.get("category"),
        status=request.args.get("status"),
    )
    return jsonify({"items": [p.to_dict() for p in products], "count": len(products)}), 200


@products_bp.get("/categories")
@json_errors("Failed to list categories")
def list_categories():
    return jsonify({"items": get_service().categories()}), 200


@products_bp.post("")
@json_errors("Failed to create product")
def create_product():
    product = get_service().add_product(request.get_json(silent=True))
    return jsonify({"product": product.to_dict()}), 201


@products_bp.get("/<product_id>")
@json_errors("Failed to load product")
def get_product(product_id: str):
    return jsonify({"product": get_service().get_product(product_id).to_dict()}), 200


@products_bp.patch("/<product_id>")
@json_errors("Failed to update product")
def update_product(product_id: str):
    product = get_service().update_product(product_id, request.get_json(silent=True))
    return jsonify({"product": product.to_dict()}), 200


@products_bp.put("/<product_id>/stock")
@json_errors("Failed to set stock")
def set_stock(product_id: str):
    data = request.get_json(silent=True) or {}
    if "stock" not in data:
        raise ValidationError("stock required")
    product = get_service().set_stock(product_id, data["stock"])
    return jsonify({"product": product.to_dict()}), 200


@products_bp.delete("/<product_id>")
@json_errors("Failed to delete product")
def delete_product(product_id: str):
    product = get_service().delete_product(product_id)
    return jsonify({"deleted": product.id}), 200


@products_bp.post("/batch-delete")
@json_errors("Failed to delete products")
def batch_delete_products():
    data = request.get_json(silent=True) or {}
    ids = data.get("ids")
    if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
        raise ValidationError("ids must be a list of product ids")
    removed = get_service().batch_delete_products(ids)
    return jsonify({"deleted": removed, "count": len(removed)}), 200
