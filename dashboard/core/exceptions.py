"""
Row-store exception hierarchy.

The request surface reports every failure uniformly as ``{"error": str(exc)}``,
so these types exist for callers inside the package (CLI, tests, health
checks) that need to tell the causes apart.

Usage:
    from dashboard.core.exceptions import TableNotFoundError

    raise TableNotFoundError("Signoffs")
"""


class TableStoreError(Exception):
    """Base class for failures raised by a TableStore."""


class TableNotFoundError(TableStoreError):
    """Raised when a named table does not exist in the store.

    Args:
        table: The table name that was looked up.
    """

    def __init__(self, table: str) -> None:
        self.table = table
        super().__init__(f"Table '{table}' not found")


class ColumnNotFoundError(TableStoreError):
    """Raised when a write targets a column missing from the header row.

    Args:
        table: Table name.
        column: The header name that was expected.
    """

    def __init__(self, table: str, column: str) -> None:
        self.table = table
        self.column = column
        super().__init__(f"Column '{column}' not found in table '{table}'")


class RowIndexError(TableStoreError):
    """Raised when a row or column index is outside the table."""

    def __init__(self, table: str, row_index: int, col_index: int | None = None) -> None:
        self.table = table
        self.row_index = row_index
        self.col_index = col_index
        msg = f"Row {row_index}"
        if col_index is not None:
            msg += f", column {col_index}"
        msg += f" is out of range for table '{table}'"
        super().__init__(msg)
