"""
Dashboard Blueprint — the read and write entry points.

    GET  /api/v1/dashboard?action=getData
         Returns: { "success": true, "data": <tree> }

    POST /api/v1/dashboard
         Body: { "action": "<name>", ...params }
           updateRequirementStatus   { id, status }
           updateTechnologyProgress  { id, progress }
           addSignoff                { requirementId, personName }   (full only)
           removeSignoff             { id }                          (full only)
           saveDiagram               { clientId, diagramData }       (full only)

Response contract:
    - Always HTTP 200 with a JSON body. Failures are reported in the body as
      { "error": "<message>" }, never through the status code.
    - Unknown actions → { "error": "Invalid action" }.
    - Any exception raised while handling is caught here and turned into
      { "error": str(exc) }; nothing propagates to Flask.
    - The POST body is parsed as JSON whatever the Content-Type, because
      browser clients post ``text/plain`` to skip the CORS preflight.

Layer contract:
    - Blueprint: pick the action, pull params, call the service, shape JSON.
    - All table access goes through the injected TableStore.
"""

import logging

from flask import Blueprint, current_app, jsonify, request

from dashboard.middleware.timing import (
    OUTCOME_ERROR,
    OUTCOME_INVALID,
    OUTCOME_OK,
    record_action,
)
from dashboard.services import mutations
from dashboard.services import sheet_schema as schema
from dashboard.services.hierarchy import load_hierarchy
from dashboard.services.row_decoder import parse_json
from dashboard.services.table_store import get_table_store

logger = logging.getLogger(__name__)

dashboard_bp = Blueprint("dashboard", __name__, url_prefix="/api/v1")

INVALID_ACTION = "Invalid action"


# ── Helpers ────────────────────────────────────────────────────────────────────


def _ok(**payload):
    return jsonify({"success": True, **payload}), 200


def _error(message: str):
    return jsonify({"error": message}), 200


def _describe(exc: Exception) -> str:
    return str(exc) or exc.__class__.__name__


def _variant() -> str:
    return current_app.config.get("DASHBOARD_VARIANT", schema.FULL)


# ── Write actions ──────────────────────────────────────────────────────────────


def _update_requirement_status(store, body):
    mutations.update_requirement_status(store, body.get("id"), body.get("status"))
    return _ok()


def _update_technology_progress(store, body):
    mutations.update_technology_progress(store, body.get("id"), body.get("progress"))
    return _ok()


def _add_signoff(store, body):
    signoff = mutations.add_signoff(store, body.get("requirementId"), body.get("personName"))
    return _ok(signoff=signoff)


def _remove_signoff(store, body):
    mutations.remove_signoff(store, body.get("id"))
    return _ok()


def _save_diagram(store, body):
    mutations.save_diagram(store, body.get("clientId"), body.get("diagramData"))
    return _ok()


_WRITE_ACTIONS = {
    "updateRequirementStatus": _update_requirement_status,
    "updateTechnologyProgress": _update_technology_progress,
    "addSignoff": _add_signoff,
    "removeSignoff": _remove_signoff,
    "saveDiagram": _save_diagram,
}

_REDUCED_WRITE_ACTIONS = frozenset({"updateRequirementStatus", "updateTechnologyProgress"})


def write_actions(variant: str) -> list[str]:
    """Names of the POST actions available in ``variant``."""
    if variant == schema.REDUCED:
        return [name for name in _WRITE_ACTIONS if name in _REDUCED_WRITE_ACTIONS]
    return list(_WRITE_ACTIONS)


# ── Routes ─────────────────────────────────────────────────────────────────────


@dashboard_bp.route("/dashboard", methods=["GET"])
def read():
    """Read entry point. Only ``getData`` is recognised."""
    action = request.args.get("action")
    try:
        if action != "getData":
            record_action(action, OUTCOME_INVALID)
            return _error(INVALID_ACTION)
        tree = load_hierarchy(get_table_store(), _variant())
        record_action(action, OUTCOME_OK)
        return _ok(data=tree)
    except Exception as exc:
        logger.exception("Dashboard read failed", extra={"action": action})
        record_action(action, OUTCOME_ERROR)
        return _error(_describe(exc))


@dashboard_bp.route("/dashboard", methods=["POST"])
def write():
    """Write entry point; dispatches on the body's ``action`` field."""
    action = None
    try:
        body = parse_json(request.get_data(as_text=True))
        if isinstance(body, dict):
            action = body.get("action")

        handler = _WRITE_ACTIONS.get(action) if action in write_actions(_variant()) else None
        if handler is None:
            record_action(action, OUTCOME_INVALID)
            return _error(INVALID_ACTION)

        response = handler(get_table_store(), body)
        record_action(action, OUTCOME_OK)
        return response
    except Exception as exc:
        logger.exception("Dashboard write failed", extra={"action": action})
        record_action(action, OUTCOME_ERROR)
        return _error(_describe(exc))
