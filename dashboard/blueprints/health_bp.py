"""
Health check blueprint.

Endpoints:
    GET /api/v1/health/ready  — simple 200 for load balancers
    GET /api/v1/health/live   — database + dashboard table checks
"""

import logging
import time

from flask import Blueprint, current_app, jsonify

from dashboard.models import db
from dashboard.services import sheet_schema as schema
from dashboard.services.table_store import get_table_store

logger = logging.getLogger(__name__)

health_bp = Blueprint("health", __name__, url_prefix="/api/v1/health")


@health_bp.route("/ready", methods=["GET"])
def ready():
    """Simple readiness probe — always 200 if app is running."""
    return jsonify({"status": "ok"}), 200


@health_bp.route("/live", methods=["GET"])
def live():
    """Detailed liveness check with dependency status."""
    checks = {}
    overall = True
    variant = current_app.config.get("DASHBOARD_VARIANT", schema.FULL)

    # ── Database ─────────────────────────────────────────────────────
    try:
        t0 = time.perf_counter()
        db.session.execute(db.text("SELECT 1"))
        db_ms = (time.perf_counter() - t0) * 1000
        checks["database"] = {"status": "ok", "latency_ms": round(db_ms, 1)}
    except Exception as exc:
        checks["database"] = {"status": "error", "detail": str(exc)}
        overall = False
        logger.error("Health check: database failed: %s", exc)

    # ── Dashboard tables ─────────────────────────────────────────────
    # Missing tables read as empty, so they are reported but not fatal
    try:
        store = get_table_store()
        missing = [name for name in schema.table_names(variant) if not store.has_table(name)]
        checks["tables"] = {
            "status": "ok" if not missing else "incomplete",
            "variant": variant,
            "missing": missing,
        }
    except Exception as exc:
        checks["tables"] = {"status": "error", "detail": str(exc)}
        overall = False
        logger.error("Health check: table store failed: %s", exc)

    checks["app"] = {
        "name": "Pipelines Dashboard",
        "debug": current_app.debug,
        "testing": current_app.testing,
    }

    status_code = 200 if overall else 503
    return jsonify({
        "status": "healthy" if overall else "degraded",
        "checks": checks,
    }), status_code
