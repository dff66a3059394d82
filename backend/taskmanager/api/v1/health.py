"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from taskmanager.api.deps import json_response, timing
from taskmanager.core.extensions import db

bp = Blueprint("health", __name__)


@bp.get("/health")
@timing
def healthcheck():
    """Return application and database health information."""

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:  # pragma: no cover - depends on DB backend
        current_app.logger.exception("healthcheck.db_error")
        db_status = "fail"
    backend = current_app.config.get("REFRESH_TOKEN_BACKEND", "sql")
    payload = {"status": "ok", "db": db_status, "refresh_backend": backend}
    return json_response(payload)
