"""
Rate limiting configuration.

Applies per-method limits to the dashboard blueprint using Flask-Limiter.
The Limiter instance is created in dashboard/__init__.py with no default
limits; this module attaches the configured ones.

Usage:
    from dashboard.middleware.rate_limiter import init_rate_limits
    init_rate_limits(app, limiter)
"""

import logging

logger = logging.getLogger(__name__)


def init_rate_limits(app, limiter):
    """
    Apply rate limits to API blueprints.

    Limits (per remote IP):
        - Dashboard writes (POST): WRITE_RATE_LIMIT, default 60/minute
        - Dashboard reads (GET):   READ_RATE_LIMIT, default 200/minute
        - Health check:            exempt

    Rate limiting is disabled in testing mode.
    """
    if app.config.get("TESTING"):
        app.logger.info("Rate limiter disabled (TESTING=True)")
        return

    write_limit = app.config.get("WRITE_RATE_LIMIT", "60/minute")
    read_limit = app.config.get("READ_RATE_LIMIT", "200/minute")

    bp = app.blueprints.get("dashboard")
    if bp:
        limiter.limit(write_limit, methods=["POST"])(bp)
        limiter.limit(read_limit, methods=["GET"])(bp)

    bp = app.blueprints.get("health")
    if bp:
        limiter.exempt(bp)

    app.logger.info("Rate limiter configured: write: %s, read: %s", write_limit, read_limit)
