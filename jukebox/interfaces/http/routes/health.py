from __future__ import annotations

import logging

from flask import Blueprint, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from jukebox.database.db_manager import db

logger = logging.getLogger(__name__)

health_bp = Blueprint("health_bp", __name__)

_ADAPTERS = ("directive_adapter", "remote_resolution_adapter")


@health_bp.route("/healthz")
def healthz():
    status = 200
    checks = {}

    try:
        db.session.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except SQLAlchemyError as exc:
        logger.error("Health check database query failed: %s", exc)
        status = 503
        checks["database"] = f"error: {exc}"

    for name in _ADAPTERS:
        checks[name] = "ok" if current_app.extensions.get(name) is not None else "unavailable"

    overall = "ok" if status == 200 else "degraded"
    return jsonify({"status": overall, "checks": checks}), status
