# backend/backoffice/routes/system.py
"""
System health endpoint.

Reports database connectivity and which store documents exist, for
deployment debugging.
"""

import time
from datetime import datetime, timezone

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from ..models import StoreDocument
from ..time_utils import to_iso

system_bp = Blueprint("system", __name__)


def check_database_health() -> dict:
    start_time = time.time()
    try:
        db.session.execute(text("SELECT 1"))
        documents = [row.name for row in db.session.query(StoreDocument.name).all()]
        elapsed_ms = (time.time() - start_time) * 1000
        return {
            "status": "healthy",
            "response_time_ms": round(elapsed_ms, 2),
            "documents": sorted(documents),
        }
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Database health check failed")
        return {"status": "unhealthy", "error": str(e)}


@system_bp.get("/health")
def health():
    database = check_database_health()
    healthy = database["status"] == "healthy"
    body = {
        "status": "ok" if healthy else "degraded",
        "timestamp": to_iso(datetime.now(timezone.utc)),
        "database": database,
    }
    return jsonify(body), 200 if healthy else 503
