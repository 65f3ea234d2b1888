# Overview: Request decorators for API routes.

from functools import wraps
from flask import current_app, request, jsonify, g

from .context import get_service
from .errors import PosError
from .validation import ConflictError, ValidationError

OPERATOR_HEADER = "X-Operator"


def bind_operator(f):
    """
    Bind the active operator for this request.

    Identity is owned by an external provider which forwards the cashier's
    username in the X-Operator header. The name is bound to g.operator only
    when the operator directory knows it; otherwise g.operator is None and
    operations that need a cashier fail with NoActiveOperatorError.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        username = (request.headers.get(OPERATOR_HEADER) or "").strip()
        g.operator = username if get_service().has_operator(username) else None
        return f(*args, **kwargs)

    return decorated_function


def error_response(exc):
    """JSON body + status for a domain or validation error."""
    status = getattr(exc, "status_code", 400)
    return jsonify({
        "error": str(exc),
        "kind": type(exc).__name__,
        "details": getattr(exc, "details", {}),
    }), status


def json_errors(failure_message: str):
    """
    Translate domain errors into JSON responses.

    PosError, ValidationError and ConflictError carry their own status code.
    Anything else is logged with the given message and answered with 500.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except (PosError, ValidationError, ConflictError) as e:
                return error_response(e)
            except Exception:
                current_app.logger.exception(failure_message)
                return jsonify({"error": "Internal server error"}), 500

        return decorated_function

    return decorator
