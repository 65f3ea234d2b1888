# Overview: Flask API routes for completed orders, sales views and the daily reset.

# backend/backoffice/routes/orders.py
"""
Completed orders and sales figures.

Amounts in responses are rounded to cents; stored orders keep full precision.
"""
from datetime import date

from flask import Blueprint, request, jsonify, current_app

from ..context import get_service
from ..decorators import json_errors
from ..money import display_money
from ..validation import ValidationError

orders_bp = Blueprint("orders", __name__, url_prefix="/api/orders")


def _orders_payload(orders) -> dict:
    return {"items": [o.to_dict(display=True) for o in orders], "count": len(orders)}


@orders_bp.get("")
@json_errors("Failed to list orders")
def list_orders():
    """
    Completed orders in completion order.

    Query param "date" (YYYY-MM-DD) restricts the list to one local store day.
    """
    day = request.args.get("date")
    if not day:
        return jsonify(_orders_payload(get_service().list_orders())), 200

    try:
        parsed = date.fromisoformat(day)
    except ValueError:
        raise ValidationError("date must be YYYY-MM-DD", details={"date": day})
    return jsonify(_orders_payload(get_service().orders_on(parsed))), 200


@orders_bp.get("/today")
@json_errors("Failed to list today's orders")
def todays_orders():
    service = get_service()
    orders = service.todays_orders()
    return jsonify({
        **_orders_payload(orders),
        "date": service.today().isoformat(),
        "today_sales": display_money(service.today_sales()),
    }), 200


@orders_bp.get("/stats")
@json_errors("Failed to load sales stats")
def sales_stats():
    return jsonify(get_service().summary()), 200


@orders_bp.get("/<order_id>")
@json_errors("Failed to load order")
def get_order(order_id: str):
    return jsonify({"order": get_service().get_order(order_id).to_dict(display=True)}), 200


@orders_bp.post("/reset-daily")
@json_errors("Failed to reset daily sales")
def reset_daily():
    """Move today's orders into the backup slot (replacing any earlier backup)."""
    moved = get_service().reset_daily_sales()
    current_app.logger.info("Daily sales reset: %d order(s) moved to backup", moved)
    return jsonify({"moved": moved, "has_backup": get_service().has_backup()}), 200


@orders_bp.post("/revert-daily")
@json_errors("Failed to revert daily sales")
def revert_daily():
    restored = get_service().revert_daily_sales()
    current_app.logger.info("Daily sales revert: %d order(s) restored", restored)
    return jsonify({"restored": restored, "has_backup": get_service().has_backup()}), 200
