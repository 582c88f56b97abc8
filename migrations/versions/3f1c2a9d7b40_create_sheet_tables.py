"""create_sheet_tables

Creates the row-store tables backing the dashboard:
  - sheet_tables  — one row per named table, holding its header row
  - sheet_rows    — positional data rows, cells stored as a JSON array

Tables created conditionally (IF NOT EXISTS semantics) to support idempotent
execution against databases that already received these tables via
db.create_all() in a development environment.

Revision ID: 3f1c2a9d7b40
Revises:
Create Date: 2026-10-16 09:12:41.118230
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy import inspect as sa_inspect


# revision identifiers, used by Alembic.
revision = '3f1c2a9d7b40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    bind = op.get_bind()
    inspector = sa_inspect(bind)
    existing = set(inspector.get_table_names())

    # ── Sheet tables ──────────────────────────────────────────────────────
    if "sheet_tables" not in existing:
        op.create_table(
            "sheet_tables",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("name", sa.String(length=64), nullable=False),
            sa.Column("headers", sa.JSON(), nullable=False,
                      comment='Column names in order, e.g. ["id", "name", "sortOrder"]'),
            sa.Column("created_at", sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_sheet_tables_name", "sheet_tables", ["name"], unique=True)

    # ── Sheet rows ────────────────────────────────────────────────────────
    if "sheet_rows" not in existing:
        op.create_table(
            "sheet_rows",
            sa.Column("id", sa.Integer(), nullable=False),
            sa.Column("table_id", sa.Integer(), nullable=False),
            sa.Column("position", sa.Integer(), nullable=False,
                      comment="1-based row index within the table; header row is position 0"),
            sa.Column("cells", sa.JSON(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
            sa.ForeignKeyConstraint(["table_id"], ["sheet_tables.id"], ondelete="CASCADE"),
            sa.PrimaryKeyConstraint("id"),
        )
        op.create_index("ix_sheet_rows_table_id", "sheet_rows", ["table_id"])
        op.create_index("ix_sheet_rows_table_position", "sheet_rows", ["table_id", "position"])


def downgrade():
    op.drop_table("sheet_rows")
    op.drop_table("sheet_tables")
