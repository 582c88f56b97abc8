"""
Pipelines Dashboard
Flask Application Factory.

Usage:
    from dashboard import create_app
    app = create_app()           # defaults to "development"
    app = create_app("testing")  # explicit config
"""

import logging
import os

from flask import Flask
from flask_cors import CORS
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate

from dashboard.config import config
from dashboard.models import db
from dashboard.middleware.logging_config import configure_logging
from dashboard.middleware.rate_limiter import init_rate_limits
from dashboard.middleware.timing import init_request_timing
from dashboard.services.sheet_schema import validate_variant
from dashboard.services.table_store import init_table_store

logger = logging.getLogger(__name__)

migrate = Migrate()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[],                     # no global limit, applied per blueprint
    storage_uri=os.getenv("REDIS_URL", "memory://"),
)


def create_app(config_name=None):
    """
    Create and configure the Flask application.

    Args:
        config_name: Configuration environment name.
                     One of: "development", "testing", "production".
                     Defaults to APP_ENV env var, or "development" if unset.

    Returns:
        Configured Flask application instance.
    """
    if config_name is None:
        config_name = os.getenv("APP_ENV", "development")

    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config[config_name])
    validate_variant(app.config["DASHBOARD_VARIANT"])

    # ── Structured logging (must be first) ───────────────────────────────
    configure_logging(app)

    # ── Extensions ───────────────────────────────────────────────────────
    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)
    cors_origins = app.config.get("CORS_ORIGINS", "*")
    if cors_origins and cors_origins != "*":
        CORS(app, origins=[o.strip() for o in cors_origins.split(",") if o.strip()])
    else:
        CORS(app)

    init_table_store(app)

    # ── Request timing middleware ────────────────────────────────────────
    init_request_timing(app)

    # ── Import models so Alembic can detect them ─────────────────────────
    from dashboard.models import sheet as _sheet_models  # noqa: F401

    # ── Auto-create tables (CREATE IF NOT EXISTS) ────────────────────────
    if app.config["TABLE_STORE_BACKEND"] == "sql":
        with app.app_context():
            try:
                db.create_all()
                app.logger.info("db.create_all() completed successfully")
            except Exception as e:
                app.logger.warning("db.create_all() failed: %s", e)

    # ── Blueprints ───────────────────────────────────────────────────────
    from dashboard.blueprints.dashboard_bp import dashboard_bp
    from dashboard.blueprints.health_bp import health_bp

    app.register_blueprint(dashboard_bp)
    app.register_blueprint(health_bp)

    # ── CLI commands ─────────────────────────────────────────────────────
    from dashboard.cli import init_cli
    init_cli(app)

    @app.route("/api/v1/health")
    def health():
        return {"status": "ok", "app": "Pipelines Dashboard"}

    # ── Error handlers ───────────────────────────────────────────────────
    @app.errorhandler(404)
    def not_found(e):
        from flask import request
        return {"error": "Not found", "path": request.path}, 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return {"error": "Method not allowed"}, 405

    @app.errorhandler(429)
    def rate_limited(e):
        return {"error": "Too many requests", "retry_after": e.description}, 429

    @app.errorhandler(500)
    def server_error(e):
        logger.error("500 error: %s", e, exc_info=True)
        return {"error": "Internal server error", "detail": str(e)}, 500

    # ── Rate limiting (after blueprints registered) ──────────────────────
    init_rate_limits(app, limiter)

    logger.info(
        "Dashboard ready: variant=%s store=%s",
        app.config["DASHBOARD_VARIANT"], app.config["TABLE_STORE_BACKEND"],
    )
    return app
