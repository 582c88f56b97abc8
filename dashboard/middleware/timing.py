"""
Request timing middleware.

Every response gets X-Request-ID and X-Request-Duration-Ms headers.

Dashboard calls always answer HTTP 200, with failures reported in the body,
so the status code says nothing about whether an action worked. The
dashboard blueprint therefore records the action it dispatched and its
outcome with ``record_action``, and the request log line is built from
those instead of the status code:

    ok        action handled           DEBUG for reads, INFO for writes
    invalid   unknown / gated action   INFO
    error     handler raised           WARNING

Requests slower than ``SLOW_THRESHOLD_MS`` are logged at WARNING whatever
their outcome.
"""

import logging
import time
import uuid

from flask import Flask, g, request

logger = logging.getLogger(__name__)

# Probe endpoints polled by load balancers; headers only, no log line
_QUIET_PATHS = frozenset({"/api/v1/health", "/api/v1/health/ready", "/api/v1/health/live"})

SLOW_THRESHOLD_MS = 1000

OUTCOME_OK = "ok"
OUTCOME_INVALID = "invalid"
OUTCOME_ERROR = "error"


def record_action(action, outcome: str) -> None:
    """Attach the dashboard action and its outcome to the current request."""
    g.dashboard_action = action
    g.dashboard_outcome = outcome


def _level_for(method: str, outcome, status: int, duration_ms: float) -> int:
    if duration_ms > SLOW_THRESHOLD_MS:
        return logging.WARNING
    if status >= 500:
        return logging.ERROR
    if outcome == OUTCOME_ERROR:
        return logging.WARNING
    if outcome == OUTCOME_INVALID or (outcome == OUTCOME_OK and method == "POST"):
        return logging.INFO
    return logging.DEBUG


def init_request_timing(app: Flask):
    """Register before/after hooks for request ids, timing and the action log."""

    @app.before_request
    def _start_timer():
        g.request_start = time.perf_counter()
        g.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]

    @app.after_request
    def _log_request(response):
        start = getattr(g, "request_start", None)
        if start is None:
            return response

        duration_ms = (time.perf_counter() - start) * 1000
        response.headers["X-Request-Duration-Ms"] = f"{duration_ms:.1f}"
        response.headers["X-Request-ID"] = g.request_id

        if request.path in _QUIET_PATHS:
            return response

        action = getattr(g, "dashboard_action", None)
        outcome = getattr(g, "dashboard_outcome", None)
        level = _level_for(request.method, outcome, response.status_code, duration_ms)
        extra = {
            "method": request.method,
            "path": request.path,
            "status": response.status_code,
            "duration_ms": duration_ms,
            "remote_addr": request.remote_addr,
            "request_id": g.request_id,
            "action": action,
            "outcome": outcome,
        }

        if outcome is None:
            logger.log(level, "%s %s -> %d", request.method, request.path,
                       response.status_code, extra=extra)
        else:
            logger.log(level, "dashboard %s %s: %s", request.method,
                       action or "<none>", outcome, extra=extra)
        return response
