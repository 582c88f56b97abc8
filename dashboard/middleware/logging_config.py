"""
Structured logging configuration.

One stderr handler on the root logger, formatter picked per environment:

    production        JSONFormatter, one object per line for log shipping
    development/test  ReadableFormatter, colored single line

LOG_LEVEL overrides the default level (INFO in production, DEBUG otherwise).

Dashboard code logs its context through ``extra``: the request middleware
adds method/path/status/duration and the action outcome, while services add
the table and entity they touched. Both formatters surface those fields.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone

# Request-level context set by the timing middleware
_REQUEST_FIELDS = ("method", "path", "status", "duration_ms", "remote_addr", "request_id")
# Dashboard context set by the blueprint and the mutation handlers
_DASHBOARD_FIELDS = ("action", "outcome", "table", "entity_id")

_LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
_RESET = "\033[0m"

_NOISY_LOGGERS = ("werkzeug", "sqlalchemy.engine", "alembic.runtime.migration")


def _context(record: logging.LogRecord, fields) -> dict:
    return {
        key: getattr(record, key)
        for key in fields
        if getattr(record, key, None) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per record, request and dashboard context inlined."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "line": record.lineno,
        }
        entry.update(_context(record, _REQUEST_FIELDS))
        entry.update(_context(record, _DASHBOARD_FIELDS))
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class ReadableFormatter(logging.Formatter):
    """Colored one-liner, e.g. ``12:00:01 INFO  dashboard.x: msg [Signoffs#s-1] (3ms)``."""

    def format(self, record: logging.LogRecord) -> str:
        color = _LEVEL_COLORS.get(record.levelname, "")
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = f"{color}{ts} {record.levelname:<8}{_RESET} {record.name}: {record.getMessage()}"

        table = getattr(record, "table", None)
        if table:
            entity_id = getattr(record, "entity_id", None)
            line += f" [{table}#{entity_id}]" if entity_id is not None else f" [{table}]"
        duration = getattr(record, "duration_ms", None)
        if duration is not None:
            line += f" ({duration:.0f}ms)"

        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


def configure_logging(app):
    """Install the root handler for ``app``'s environment."""
    is_testing = app.config.get("TESTING", False)
    is_prod = not app.config.get("DEBUG", False) and not is_testing

    level_name = os.getenv("LOG_LEVEL", "INFO" if is_prod else "DEBUG").upper()
    level = getattr(logging, level_name, logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JSONFormatter() if is_prod else ReadableFormatter())
    handler.setLevel(level)

    # Replace rather than add, so repeated create_app() calls don't stack handlers
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    app.logger.setLevel(level)

    if not is_testing:
        app.logger.info(
            "Logging configured: level=%s format=%s variant=%s",
            level_name, "JSON" if is_prod else "readable",
            app.config.get("DASHBOARD_VARIANT"),
        )
