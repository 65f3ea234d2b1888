# backend/backoffice/routes/settings.py
"""
Store-wide pricing settings.

PATCH accepts "tax_rate" and/or "universal_discount" as percentages in
[0, 100]; a rejected value leaves both unchanged.
"""
from flask import Blueprint, request, jsonify, current_app

from ..context import get_service
from ..decorators import json_errors
from ..validation import ValidationError

settings_bp = Blueprint("settings", __name__, url_prefix="/api/settings")

SETTINGS_FIELDS = ("tax_rate", "universal_discount")


@settings_bp.get("")
@json_errors("Failed to load settings")
def get_settings():
    return jsonify({"settings": get_service().settings.dump()}), 200


@settings_bp.patch("")
@json_errors("Failed to update settings")
def update_settings():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict) or not payload:
        raise ValidationError("JSON body with tax_rate or universal_discount required")

    unknown = sorted(set(payload) - set(SETTINGS_FIELDS))
    if unknown:
        raise ValidationError("Unknown settings", details={"fields": unknown})

    settings = get_service().update_settings(payload)
    current_app.logger.info(
        "Settings updated: tax_rate=%s universal_discount=%s",
        settings.tax_rate,
        settings.universal_discount,
    )
    return jsonify({"settings": settings.dump()}), 200
