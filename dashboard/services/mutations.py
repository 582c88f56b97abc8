"""
Mutation Handlers — point updates against a single table.

Every handler takes the TableStore explicitly and touches exactly one table.

Row lookup rule (shared by all handlers):
    Rows are scanned top-to-bottom starting at the first data row and the
    scan stops at the first match, so a duplicated id always resolves to
    the earliest row.

Missing rows are not errors: updating or removing an id that does not exist
is a silent no-op and the caller still reports success. No handler checks
that foreign keys point at existing parents.
"""

from __future__ import annotations

import logging
from typing import Any

from dashboard.core.exceptions import ColumnNotFoundError
from dashboard.services import sheet_schema as schema
from dashboard.services.id_provider import IdProvider, default_ids
from dashboard.services.row_decoder import encode_json_cell
from dashboard.services.table_store import TableStore

logger = logging.getLogger(__name__)


# ── Private helpers ────────────────────────────────────────────────────────────


def _column_index(headers: list, table: str, column: str) -> int:
    try:
        return list(headers).index(column)
    except ValueError:
        raise ColumnNotFoundError(table, column) from None


def _find_row(rows: list[list], col_index: int, value: Any) -> int | None:
    """Index of the first data row whose ``col_index`` cell equals ``value``."""
    for idx in range(1, len(rows)):
        row = rows[idx]
        if col_index < len(row) and row[col_index] == value:
            return idx
    return None


def _row_for(headers: list, table: str, record: dict) -> list:
    """Lay ``record`` out in header order; unknown headers get ""."""
    for key in record:
        if key not in headers:
            raise ColumnNotFoundError(table, key)
    return [record.get(h, "") for h in headers]


def _update_cell_by_id(store: TableStore, table: str, entity_id: Any, column: str, value: Any) -> bool:
    rows = store.fetch_rows(table)
    idx = _find_row(rows, 0, entity_id)
    if idx is None:
        logger.info(
            "No %s row with id %r; nothing updated", table, entity_id,
            extra={"table": table, "entity_id": entity_id},
        )
        return False

    store.update_cell(table, idx, _column_index(rows[0], table, column), value)
    logger.info(
        "Updated %s.%s", table, column,
        extra={"table": table, "entity_id": entity_id},
    )
    return True


# ── Public API ─────────────────────────────────────────────────────────────────


def update_requirement_status(store: TableStore, requirement_id: Any, status: Any) -> bool:
    """Overwrite the ``status`` cell of a Requirement.

    Returns:
        True if a row was updated, False if the id was not found.
    """
    return _update_cell_by_id(store, schema.REQUIREMENTS, requirement_id, "status", status)


def update_technology_progress(store: TableStore, technology_id: Any, progress: Any) -> bool:
    """Overwrite the ``progress`` cell of a Technology.

    The value is stored as given; the decoder coerces it to a number on read.
    """
    return _update_cell_by_id(store, schema.TECHNOLOGIES, technology_id, "progress", progress)


def add_signoff(
    store: TableStore,
    requirement_id: Any,
    person_name: Any,
    ids: IdProvider = default_ids,
) -> dict:
    """Append a Signoff row and return it as written.

    The returned dict is built locally, not re-read from the store.
    """
    signoff = {
        "id": ids.new_id("signoff"),
        "requirementId": requirement_id,
        "personName": person_name,
        "signedAt": ids.now_iso(),
    }
    headers = store.fetch_rows(schema.SIGNOFFS)[0]
    store.append_row(schema.SIGNOFFS, _row_for(headers, schema.SIGNOFFS, signoff))

    logger.info(
        "Sign-off added",
        extra={"table": schema.SIGNOFFS, "entity_id": signoff["id"]},
    )
    return signoff


def remove_signoff(store: TableStore, signoff_id: Any) -> bool:
    """Delete the first Signoff row with ``signoff_id``.

    Returns:
        True if a row was deleted, False if the id was not found.
    """
    rows = store.fetch_rows(schema.SIGNOFFS)
    idx = _find_row(rows, 0, signoff_id)
    if idx is None:
        logger.info(
            "No sign-off with id %r; nothing removed", signoff_id,
            extra={"table": schema.SIGNOFFS, "entity_id": signoff_id},
        )
        return False

    store.delete_row(schema.SIGNOFFS, idx)
    logger.info(
        "Sign-off removed",
        extra={"table": schema.SIGNOFFS, "entity_id": signoff_id},
    )
    return True


def save_diagram(
    store: TableStore,
    client_id: Any,
    diagram_data: Any,
    ids: IdProvider = default_ids,
) -> str:
    """Store a client's diagram, overwriting the existing one if present.

    A client has at most one Diagram row: the first row whose ``clientId``
    matches gets its ``data`` cell replaced; otherwise a new row is appended.
    The payload is serialized as-is, without validation.

    Returns:
        The id of the Diagram row that was written.
    """
    table = schema.DIAGRAMS
    payload = encode_json_cell(diagram_data)
    rows = store.fetch_rows(table)
    headers = rows[0]

    idx = _find_row(rows, _column_index(headers, table, "clientId"), client_id)
    if idx is not None:
        store.update_cell(table, idx, _column_index(headers, table, "data"), payload)
        diagram_id = rows[idx][0]
        logger.info("Diagram updated", extra={"table": table, "entity_id": diagram_id})
        return diagram_id

    diagram_id = ids.new_id("diagram")
    store.append_row(
        table,
        _row_for(headers, table, {"id": diagram_id, "clientId": client_id, "data": payload}),
    )
    logger.info("Diagram created", extra={"table": table, "entity_id": diagram_id})
    return diagram_id
