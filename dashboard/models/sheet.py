"""
Row store models — named tables of positional cells.

Every dashboard entity (Category, Pipeline, Client, ...) lives as a row in a
named table, exactly like a spreadsheet tab:

    SheetTable   one per named table; holds the header row
    SheetRow     one per data row; ``position`` is 1-based (the header is 0)

Cells are stored as a JSON array so the store stays schema-less: the header
row names the columns, and the decoder gives them meaning.
"""

from datetime import datetime, timezone

from dashboard.models import db


class SheetTable(db.Model):
    """A named table and its header row."""

    __tablename__ = "sheet_tables"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(64), nullable=False, unique=True, index=True)
    headers = db.Column(
        db.JSON,
        nullable=False,
        default=list,
        comment='Column names in order, e.g. ["id", "name", "sortOrder"]',
    )
    created_at = db.Column(db.DateTime, default=lambda: datetime.now(timezone.utc))

    rows = db.relationship(
        "SheetRow",
        back_populates="table",
        cascade="all, delete-orphan",
        order_by="SheetRow.position",
        lazy="select",
    )

    def __repr__(self) -> str:
        return f"<SheetTable {self.name} cols={len(self.headers or [])}>"


class SheetRow(db.Model):
    """One data row of a SheetTable."""

    __tablename__ = "sheet_rows"

    id = db.Column(db.Integer, primary_key=True)
    table_id = db.Column(
        db.Integer,
        db.ForeignKey("sheet_tables.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position = db.Column(
        db.Integer,
        nullable=False,
        comment="1-based row index within the table; header row is position 0",
    )
    cells = db.Column(db.JSON, nullable=False, default=list)
    updated_at = db.Column(
        db.DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    table = db.relationship("SheetTable", back_populates="rows")

    __table_args__ = (
        db.Index("ix_sheet_rows_table_position", "table_id", "position"),
    )

    def __repr__(self) -> str:
        return f"<SheetRow {self.table_id}#{self.position}>"
