"""
Table Store — named tables of rows, addressed by name.

The dashboard reads and writes its entities through this small capability
instead of touching the database directly, so the decoder, assembler and
mutation handlers are plain functions over an injected store and can be
tested without a live database.

Capabilities (row 0 is always the header row):
    fetch_rows(name)                          header + data rows
    append_row(name, values)                  add a row at the end
    update_cell(name, row, col, value)        overwrite one cell
    delete_row(name, row)                     remove a row, later rows shift up
    create_table(name, headers)               idempotent table bootstrap

Backends:
    SqlTableStore     SheetTable / SheetRow via Flask-SQLAlchemy (default)
    MemoryTableStore  plain dict of lists (tests, TABLE_STORE_BACKEND=memory)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

from flask import Flask, current_app
from sqlalchemy import func, select, update

from dashboard.core.exceptions import RowIndexError, TableNotFoundError
from dashboard.models import db
from dashboard.models.sheet import SheetRow, SheetTable

logger = logging.getLogger(__name__)

_EXTENSION_KEY = "table_store"


def _set_cell(cells: list, col_index: int, value: Any) -> list:
    """Return a copy of ``cells`` with ``col_index`` set, padding with ""."""
    out = list(cells)
    if len(out) <= col_index:
        out.extend([""] * (col_index + 1 - len(out)))
    out[col_index] = value
    return out


class TableStore(ABC):
    """Abstract row store addressed by table name."""

    @abstractmethod
    def table_names(self) -> list[str]:
        ...

    @abstractmethod
    def fetch_rows(self, name: str) -> list[list]:
        """Return the header row followed by every data row.

        Raises:
            TableNotFoundError: if the table does not exist.
        """

    @abstractmethod
    def append_row(self, name: str, values: list) -> None:
        ...

    @abstractmethod
    def update_cell(self, name: str, row_index: int, col_index: int, value: Any) -> None:
        ...

    @abstractmethod
    def delete_row(self, name: str, row_index: int) -> None:
        ...

    @abstractmethod
    def create_table(self, name: str, headers: list[str]) -> bool:
        """Create ``name`` with ``headers``. Returns False if it already existed."""

    def has_table(self, name: str) -> bool:
        return name in self.table_names()


# ── In-memory backend ────────────────────────────────────────────────────


class MemoryTableStore(TableStore):
    """Dict-of-lists store for tests and throwaway deployments."""

    def __init__(self, tables: dict[str, list[list]] | None = None):
        self._tables: dict[str, list[list]] = {
            name: [list(row) for row in rows] for name, rows in (tables or {}).items()
        }

    def _rows(self, name: str) -> list[list]:
        try:
            return self._tables[name]
        except KeyError:
            raise TableNotFoundError(name) from None

    def table_names(self) -> list[str]:
        return list(self._tables)

    def fetch_rows(self, name: str) -> list[list]:
        return [list(row) for row in self._rows(name)]

    def append_row(self, name: str, values: list) -> None:
        self._rows(name).append(list(values))

    def update_cell(self, name: str, row_index: int, col_index: int, value: Any) -> None:
        rows = self._rows(name)
        if not 0 <= row_index < len(rows) or col_index < 0:
            raise RowIndexError(name, row_index, col_index)
        rows[row_index] = _set_cell(rows[row_index], col_index, value)

    def delete_row(self, name: str, row_index: int) -> None:
        rows = self._rows(name)
        if not 1 <= row_index < len(rows):
            raise RowIndexError(name, row_index)
        del rows[row_index]

    def create_table(self, name: str, headers: list[str]) -> bool:
        if name in self._tables:
            return False
        self._tables[name] = [list(headers)]
        return True


# ── SQLAlchemy backend ───────────────────────────────────────────────────


class SqlTableStore(TableStore):
    """Store backed by the SheetTable / SheetRow models.

    Each mutating call commits its own transaction; there is no isolation
    across two separate calls.
    """

    def __init__(self, session=None):
        self._session = session

    @property
    def session(self):
        return self._session or db.session

    def _get_table(self, name: str) -> SheetTable:
        table = self.session.execute(
            select(SheetTable).where(SheetTable.name == name)
        ).scalar_one_or_none()
        if table is None:
            raise TableNotFoundError(name)
        return table

    def _row_at(self, table: SheetTable, row_index: int) -> SheetRow:
        row = self.session.execute(
            select(SheetRow).where(
                SheetRow.table_id == table.id,
                SheetRow.position == row_index,
            )
        ).scalar_one_or_none()
        if row is None:
            raise RowIndexError(table.name, row_index)
        return row

    def table_names(self) -> list[str]:
        return list(
            self.session.execute(select(SheetTable.name).order_by(SheetTable.id)).scalars()
        )

    def has_table(self, name: str) -> bool:
        return self.session.execute(
            select(SheetTable.id).where(SheetTable.name == name)
        ).first() is not None

    def fetch_rows(self, name: str) -> list[list]:
        table = self._get_table(name)
        cells = self.session.execute(
            select(SheetRow.cells)
            .where(SheetRow.table_id == table.id)
            .order_by(SheetRow.position)
        ).scalars().all()
        return [list(table.headers or [])] + [list(c or []) for c in cells]

    def append_row(self, name: str, values: list) -> None:
        table = self._get_table(name)
        last = self.session.execute(
            select(func.max(SheetRow.position)).where(SheetRow.table_id == table.id)
        ).scalar()
        self.session.add(SheetRow(table_id=table.id, position=(last or 0) + 1, cells=list(values)))
        self.session.commit()

    def update_cell(self, name: str, row_index: int, col_index: int, value: Any) -> None:
        if col_index < 0:
            raise RowIndexError(name, row_index, col_index)
        table = self._get_table(name)
        if row_index == 0:
            table.headers = _set_cell(table.headers or [], col_index, value)
        else:
            row = self._row_at(table, row_index)
            # Reassign so the JSON column is flagged dirty
            row.cells = _set_cell(row.cells or [], col_index, value)
        self.session.commit()

    def delete_row(self, name: str, row_index: int) -> None:
        table = self._get_table(name)
        if row_index < 1:
            raise RowIndexError(name, row_index)
        row = self._row_at(table, row_index)
        self.session.delete(row)
        self.session.flush()
        self.session.execute(
            update(SheetRow)
            .where(SheetRow.table_id == table.id, SheetRow.position > row_index)
            .values(position=SheetRow.position - 1)
        )
        self.session.commit()

    def create_table(self, name: str, headers: list[str]) -> bool:
        if self.has_table(name):
            return False
        self.session.add(SheetTable(name=name, headers=list(headers)))
        self.session.commit()
        logger.info("Created table %s", name, extra={"table": name})
        return True


# ── App wiring ───────────────────────────────────────────────────────────

_BACKENDS = {
    "sql": SqlTableStore,
    "memory": MemoryTableStore,
}


def init_table_store(app: Flask) -> TableStore:
    """Create the configured store and attach it to ``app.extensions``."""
    backend = app.config.get("TABLE_STORE_BACKEND", "sql")
    try:
        store = _BACKENDS[backend]()
    except KeyError:
        raise ValueError(
            f"Unknown TABLE_STORE_BACKEND '{backend}'. "
            f"Must be one of: {', '.join(sorted(_BACKENDS))}"
        ) from None
    app.extensions[_EXTENSION_KEY] = store
    app.logger.debug("Table store backend: %s", backend)
    return store


def get_table_store() -> TableStore:
    """Return the store bound to the current app."""
    return current_app.extensions[_EXTENSION_KEY]
