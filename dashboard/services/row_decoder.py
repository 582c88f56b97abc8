"""
Row Decoder — raw table rows → typed records.

Column coercion is driven by header *name*, never by position:

    JSON columns     links, data        non-empty text is parsed as JSON;
                                         bad JSON → [] for links, None otherwise
    Numeric columns  progress, sortOrder Number(x) || 0 semantics
    everything else                      passed through untouched

Rows are dropped when the first cell is empty, when every decoded value is
the empty string, or when the decoded ``id`` is falsy. The last check is
redundant with the first for well-formed tables, but a table whose ``id``
column is not first (or whose id is a numeric zero) silently loses rows
because of it. Callers rely on that behaviour; keep it.
"""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any

from dashboard.services.table_store import TableStore

logger = logging.getLogger(__name__)

JSON_COLUMNS = frozenset({"links", "data"})
NUMERIC_COLUMNS = frozenset({"progress", "sortOrder"})

_DECIMAL_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_PREFIXED_INT_PREFIXES = ("0x", "0o", "0b")


def is_truthy(value: Any) -> bool:
    """Truthiness of a scalar cell value, treating NaN as false."""
    if isinstance(value, float) and math.isnan(value):
        return False
    if isinstance(value, (list, dict)):
        return True
    return bool(value)


def _parse_numeric_text(text: str) -> int | float:
    text = text.strip()
    if not text:
        return 0
    if text[:2].lower() in _PREFIXED_INT_PREFIXES:
        try:
            return int(text, 0)
        except ValueError:
            return 0
    if not _DECIMAL_RE.fullmatch(text):
        return 0
    return float(text)


def coerce_number(value: Any) -> int | float:
    """Coerce a cell to a number; anything non-numeric becomes 0.

    Integral results come back as ``int`` so they serialize as ``2`` rather
    than ``2.0``. Non-finite values collapse to 0.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        number = value
    elif isinstance(value, str):
        number = _parse_numeric_text(value)
    else:
        return 0

    if isinstance(number, float):
        if not math.isfinite(number):
            return 0
        if number.is_integer():
            return int(number)
    return number or 0


def _reject_constant(name: str):
    raise ValueError(f"Invalid JSON value: {name}")


def parse_json(text: str) -> Any:
    """Strict JSON parse: the NaN / Infinity / -Infinity tokens are rejected."""
    return json.loads(text, parse_constant=_reject_constant)


def coerce_cell(header: str, value: Any) -> Any:
    """Apply the per-column coercion rule for ``header``."""
    if header in JSON_COLUMNS and isinstance(value, str) and value:
        try:
            value = parse_json(value)
        except ValueError:
            value = [] if header == "links" else None
    if header in NUMERIC_COLUMNS:
        value = coerce_number(value)
    return value


def decode_rows(rows: list[list]) -> list[dict]:
    """Decode header + data rows into records, preserving row order."""
    if len(rows) < 2:
        return []

    headers = rows[0]
    records = []
    for row in rows[1:]:
        if not row or not is_truthy(row[0]):
            continue

        record = {}
        has_data = False
        for idx, header in enumerate(headers):
            value = coerce_cell(header, row[idx] if idx < len(row) else "")
            record[header] = value
            if not (isinstance(value, str) and value == ""):
                has_data = True

        if has_data and is_truthy(record.get("id")):
            records.append(record)
    return records


def sheet_to_records(store: TableStore, name: str) -> list[dict]:
    """Decode every row of table ``name``; a missing table yields []."""
    if not store.has_table(name):
        logger.debug("Table %s missing, decoding as empty", name, extra={"table": name})
        return []
    return decode_rows(store.fetch_rows(name))


def encode_json_cell(value: Any) -> str:
    """Serialize a structured value for storage in a JSON column."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
