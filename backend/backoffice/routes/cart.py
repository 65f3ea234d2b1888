# Overview: Flask API routes for the cashier's cart and the pending-order registry.

# backend/backoffice/routes/cart.py
"""
Cart and pending-order routes.

Each bound operator has one open cart (Building state) held in application
memory. Stock moves as soon as a line is added, changed or removed; saving as
pending or checking out persists the order and hands back a fresh cart.
"""

from flask import Blueprint, request, jsonify, g, current_app

from ..context import get_carts, get_service
from ..decorators import bind_operator, json_errors
from ..errors import NoActiveOperatorError
from ..validation import ConflictError, ValidationError


cart_bp = Blueprint("cart", __name__, url_prefix="/api/cart")
pending_bp = Blueprint("pending", __name__, url_prefix="/api/pending")


def _require_operator() -> str:
    if not g.get("operator"):
        raise NoActiveOperatorError("Cashier not logged in")
    return g.operator


def _current_cart():
    operator = _require_operator()
    carts = get_carts()
    cart = carts.get(operator)
    if cart is None:
        cart = get_service().new_cart()
        carts[operator] = cart
    return cart


def _store_cart(cart):
    get_carts()[_require_operator()] = cart
    return cart


def _cart_payload(cart) -> dict:
    return {
        "cart": cart.to_dict(display=True),
        "totals": get_service().cart_totals(cart).to_dict(),
    }


@cart_bp.get("")
@json_errors("Failed to load cart")
@bind_operator
def get_cart_route():
    """Current cart with live totals (created on first access)."""
    return jsonify(_cart_payload(_current_cart())), 200


@cart_bp.post("/new")
@json_errors("Failed to start cart")
@bind_operator
def new_cart_route():
    """
    Start a fresh cart for the operator.

    Refused while the open cart still holds lines; discard, save or check it
    out first so that no reserved stock is orphaned. An emptied cart that was
    continuing a pending order ends that order, as a discard would.
    """
    current = _current_cart()
    if not current.is_empty:
        raise ConflictError("Cart still holds lines", details={"order_id": current.order_id})
    if current.pending_id:
        get_service().discard_cart(current)

    data = request.get_json(silent=True) or {}
    cart = _store_cart(get_service().new_cart(data.get("customer_name")))
    return jsonify(_cart_payload(cart)), 201


@cart_bp.post("/lines")
@json_errors("Failed to add cart line")
@bind_operator
def add_line_route():
    """
    Add a product to the cart, reserving stock.

    Body: {"product_id": str, "quantity": number (default 1)}
    409 with InsufficientStockError leaves the cart as it was.
    """
    data = request.get_json(silent=True) or {}
    product_id = data.get("product_id")
    if not product_id:
        raise ValidationError("product_id required")

    cart = get_service().add_to_cart(_current_cart(), product_id, data.get("quantity", 1))
    _store_cart(cart)
    return jsonify(_cart_payload(cart)), 201


@cart_bp.patch("/lines/<line_id>")
@json_errors("Failed to update cart line")
@bind_operator
def update_line_route(line_id: str):
    data = request.get_json(silent=True) or {}
    if "quantity" not in data:
        raise ValidationError("quantity required")

    cart = get_service().set_cart_quantity(_current_cart(), line_id, data["quantity"])
    _store_cart(cart)
    return jsonify(_cart_payload(cart)), 200


@cart_bp.delete("/lines/<line_id>")
@json_errors("Failed to remove cart line")
@bind_operator
def remove_line_route(line_id: str):
    cart = get_service().remove_from_cart(_current_cart(), line_id)
    _store_cart(cart)
    return jsonify(_cart_payload(cart)), 200


@cart_bp.put("/customer")
@json_errors("Failed to set customer")
@bind_operator
def set_customer_route():
    data = request.get_json(silent=True) or {}
    cart = get_service().set_customer_name(_current_cart(), data.get("customer_name"))
    _store_cart(cart)
    return jsonify(_cart_payload(cart)), 200


@cart_bp.post("/discard")
@json_errors("Failed to discard cart")
@bind_operator
def discard_cart_route():
    """Give every reserved unit back and start over."""
    cart = get_service().discard_cart(_current_cart())
    _store_cart(cart)
    return jsonify(_cart_payload(cart)), 200


@cart_bp.post("/pending")
@json_errors("Failed to save pending order")
@bind_operator
def save_pending_route():
    order, cart = get_service().save_pending(_current_cart(), g.operator)
    _store_cart(cart)
    return jsonify({"order": order.to_dict(display=True), **_cart_payload(cart)}), 201


@cart_bp.post("/checkout")
@json_errors("Failed to checkout")
@bind_operator
def checkout_route():
    order, cart = get_service().checkout(_current_cart(), g.operator)
    _store_cart(cart)
    current_app.logger.info("Order %s completed by %s (total %s)", order.id, order.cashier_id, order.total)
    return jsonify({"order": order.to_dict(display=True), **_cart_payload(cart)}), 201


@pending_bp.get("")
@json_errors("Failed to list pending orders")
def list_pending_route():
    orders = get_service().list_pending()
    return jsonify({"items": [o.to_dict(display=True) for o in orders], "count": len(orders)}), 200


@pending_bp.get("/<order_id>")
@json_errors("Failed to load pending order")
def get_pending_route(order_id: str):
    return jsonify({"order": get_service().get_pending(order_id).to_dict(display=True)}), 200


@pending_bp.post("/<order_id>/load")
@json_errors("Failed to load pending order into cart")
@bind_operator
def load_pending_route(order_id: str):
    """
    Continue a pending order in the operator's cart.

    The cart currently open is put away first: saved back if it came from
    another pending order, discarded otherwise.
    """
    operator = _require_operator()
    holders = [op for op, cart in get_carts().items() if cart.pending_id == order_id and op != operator]
    if holders:
        raise ConflictError("Pending order is open in another cart", details={"operators": holders})

    cart = get_service().load_pending(_current_cart(), order_id)
    _store_cart(cart)
    return jsonify(_cart_payload(cart)), 200


@pending_bp.delete("/<order_id>")
@json_errors("Failed to delete pending order")
def delete_pending_route(order_id: str):
    """Remove a pending order and release its stock (refused while it is open in a cart)."""
    holders = [op for op, cart in get_carts().items() if cart.pending_id == order_id]
    if holders:
        raise ConflictError("Pending order is open in a cart", details={"operators": holders})

    order = get_service().delete_pending(order_id)
    return jsonify({"deleted": order.id}), 200
