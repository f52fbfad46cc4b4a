from flask import Blueprint, current_app
from sqlalchemy import text

from app.ideaboard.db import db_session

bp = Blueprint("routes", __name__)


@bp.get("/health")
def health():
    """Health check endpoint with a DB round trip. Returns JSON."""
    try:
        db_session().execute(text("SELECT 1"))
        db_ok = True
    except Exception as e:
        current_app.logger.error("Health check DB error: %s", e)
        db_ok = False
    return {"ok": db_ok, "db": db_ok}, (200 if db_ok else 503)


@bp.get("/healthz")
def healthz():
    """
    Fast liveness probe. No DB access, minimal overhead.
    """
    return "ok", 200
