"""
Shared pytest fixtures for the Pipelines Dashboard test suite.

Provides:
    - app: Flask application (session-scoped, in-memory SQLite)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - store: the app's SqlTableStore
    - memory_store: empty MemoryTableStore
    - fixed_ids: deterministic IdProvider
    - sample_tables / seeded_store: a small full-variant dataset
"""

import pytest

from dashboard import create_app
from dashboard.models import db as _db
from dashboard.services import sheet_schema as schema
from dashboard.services.id_provider import IdProvider
from dashboard.services.table_store import MemoryTableStore, get_table_store


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    application = create_app("testing")
    return application


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def store():
    """The SQL-backed store bound to the test app."""
    return get_table_store()


@pytest.fixture()
def memory_store():
    return MemoryTableStore()


# ── Data fixtures ────────────────────────────────────────────────────────


class FixedIds(IdProvider):
    """Sequential ids and a frozen clock."""

    NOW = "2026-01-02T03:04:05.006Z"

    def __init__(self):
        self.counter = 0

    def new_id(self, prefix: str) -> str:
        self.counter += 1
        return f"{prefix}-{self.counter}"

    def now_iso(self) -> str:
        return self.NOW


@pytest.fixture()
def fixed_ids():
    return FixedIds()


def make_tables(variant=schema.FULL, **rows_by_table):
    """Raw header+rows tables for ``variant``, with data rows from kwargs."""
    return {
        name: [list(headers)] + [list(r) for r in rows_by_table.get(name, [])]
        for name, headers in schema.table_layout(variant).items()
    }


def load_into(store, tables):
    """Create and fill every table of ``tables`` in ``store``."""
    for name, rows in tables.items():
        store.create_table(name, rows[0])
        for row in rows[1:]:
            store.append_row(name, row)
    return store


@pytest.fixture()
def sample_tables():
    """One category → pipeline → client with two sections and requirements."""
    return make_tables(
        Categories=[["cat-1", "Document AI", 1]],
        Pipelines=[["pipe-1", "cat-1", "Invoices", 1]],
        Clients=[["client-1", "pipe-1", "Acme"]],
        ClientData=[["cd-1", "client-1", "12k invoices / month"]],
        Sections=[
            ["s1", "client-1", "Validation", 2],
            ["s2", "client-1", "Ingestion", 1],
        ],
        Requirements=[
            ["req-1", "s1", "Totals check", "", "high", "pending", 1],
            ["req-2", "s2", "PDF intake", "Email", "medium", "done", 1],
        ],
        Bullets=[["b-1", "req-1", "Sum line items", 1]],
        Technologies=[["tech-1", "req-1", "Document AI", "service", "pilot", 40, '["https://a"]']],
        Signoffs=[],
        Diagrams=[],
    )


@pytest.fixture()
def seeded_store(store, sample_tables):
    """SQL store pre-loaded with ``sample_tables``."""
    return load_into(store, sample_tables)
