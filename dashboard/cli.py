"""
``flask tables …`` — bootstrap and move data in and out of the row store.

    flask tables init                  create every table of the configured variant
    flask tables seed                  add a small demo hierarchy
    flask tables import-csv NAME PATH  append CSV rows (header row first) to NAME
    flask tables export-csv NAME PATH  dump NAME, header included, to CSV
"""

import csv
import json
import logging

import click
from flask import current_app
from flask.cli import AppGroup

from dashboard.core.exceptions import TableNotFoundError
from dashboard.services import sheet_schema as schema
from dashboard.services.table_store import TableStore, get_table_store

logger = logging.getLogger(__name__)

tables_cli = AppGroup("tables", help="Manage the dashboard row store.")

# Rows are dicts so the same demo data lays out onto either variant's headers
DEMO_ROWS = {
    schema.CATEGORIES: [
        {"id": "cat-1", "name": "Document AI", "sortOrder": 1},
        {"id": "cat-2", "name": "Conversational AI", "sortOrder": 2},
    ],
    schema.PIPELINES: [
        {"id": "pipe-1", "categoryId": "cat-1", "name": "Invoice Extraction", "sortOrder": 1},
        {"id": "pipe-2", "categoryId": "cat-2", "name": "Support Assistant", "sortOrder": 2},
    ],
    schema.CLIENTS: [
        {"id": "client-1", "pipelineId": "pipe-1", "name": "Acme Corp"},
        {"id": "client-2", "pipelineId": "pipe-2", "name": "Globex"},
    ],
    schema.CLIENT_DATA: [
        {"id": "cd-1", "clientId": "client-1", "item": "12k invoices / month"},
        {"id": "cd-2", "clientId": "client-1", "item": "SAP S/4HANA backend"},
    ],
    schema.SECTIONS: [
        {"id": "sec-1", "clientId": "client-1", "name": "Ingestion", "sortOrder": 1},
        {"id": "sec-2", "clientId": "client-1", "name": "Validation", "sortOrder": 2},
        {"id": "sec-3", "clientId": "client-2", "name": "Knowledge Base", "sortOrder": 1},
    ],
    schema.REQUIREMENTS: [
        {"id": "req-1", "sectionId": "sec-1", "name": "PDF intake", "subname": "Email + SFTP",
         "priority": "high", "status": "done", "sortOrder": 1},
        {"id": "req-2", "sectionId": "sec-2", "name": "Totals check", "subname": "",
         "priority": "medium", "status": "pending", "sortOrder": 1},
        {"id": "req-3", "sectionId": "sec-3", "name": "FAQ ingestion", "subname": "Confluence",
         "priority": "high", "status": "in-progress", "sortOrder": 1},
    ],
    schema.BULLETS: [
        {"id": "b-1", "requirementId": "req-1", "text": "Poll mailbox every 5 minutes", "sortOrder": 1},
        {"id": "b-2", "requirementId": "req-1", "text": "Reject encrypted PDFs", "sortOrder": 2},
    ],
    schema.TECHNOLOGIES: [
        {"id": "tech-1", "requirementId": "req-1", "name": "Document AI", "type": "service",
         "stage": "production", "progress": 100,
         "links": json.dumps([{"label": "Docs", "url": "https://cloud.google.com/document-ai"}])},
        {"id": "tech-2", "requirementId": "req-3", "name": "Vertex AI Search", "type": "service",
         "stage": "pilot", "progress": 40, "links": "[]"},
    ],
    schema.SIGNOFFS: [],
    schema.DIAGRAMS: [],
}


def ensure_tables(store: TableStore, variant: str) -> list[str]:
    """Create any missing table of ``variant``. Returns the names created."""
    created = []
    for name, headers in schema.table_layout(variant).items():
        if store.create_table(name, list(headers)):
            created.append(name)
    return created


def seed_demo_data(store: TableStore, variant: str) -> int:
    """Append the demo rows to every table of ``variant``. Returns rows added."""
    ensure_tables(store, variant)
    count = 0
    for name in schema.table_names(variant):
        headers = store.fetch_rows(name)[0]
        for record in DEMO_ROWS.get(name, []):
            store.append_row(name, [record.get(h, "") for h in headers])
            count += 1
    return count


@tables_cli.command("init")
def init_tables_cmd():
    """Create every table of the configured variant with its header row."""
    variant = current_app.config["DASHBOARD_VARIANT"]
    created = ensure_tables(get_table_store(), variant)
    logger.info("Initialised %s tables: %s", variant, ", ".join(created) or "none missing")
    click.echo(f"Created {len(created)} table(s) for the {variant} variant.")


@tables_cli.command("seed")
def seed_cmd():
    """Insert a small demo hierarchy."""
    variant = current_app.config["DASHBOARD_VARIANT"]
    count = seed_demo_data(get_table_store(), variant)
    click.echo(f"Seeded {count} demo row(s).")


@tables_cli.command("import-csv")
@click.argument("name")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def import_csv_cmd(name, path):
    """Append the rows of a CSV file (header row first) to table NAME.

    The table is created from the CSV header when it does not exist yet.
    """
    store = get_table_store()
    with open(path, newline="", encoding="utf-8") as fh:
        rows = list(csv.reader(fh))
    if not rows:
        raise click.ClickException(f"{path} is empty")

    header, data = rows[0], rows[1:]
    if not store.create_table(name, header):
        existing = store.fetch_rows(name)[0]
        if list(existing) != header:
            raise click.ClickException(
                f"CSV header {header} does not match table '{name}' header {existing}"
            )
    for row in data:
        store.append_row(name, row)
    logger.info("Imported %d rows into %s", len(data), name, extra={"table": name})
    click.echo(f"Imported {len(data)} row(s) into {name}.")


@tables_cli.command("export-csv")
@click.argument("name")
@click.argument("path", type=click.Path(dir_okay=False, writable=True))
def export_csv_cmd(name, path):
    """Write every row of table NAME (header included) to a CSV file."""
    try:
        rows = get_table_store().fetch_rows(name)
    except TableNotFoundError as exc:
        raise click.ClickException(str(exc)) from exc
    with open(path, "w", newline="", encoding="utf-8") as fh:
        csv.writer(fh).writerows(rows)
    click.echo(f"Exported {len(rows) - 1} row(s) from {name}.")


def init_cli(app):
    app.cli.add_command(tables_cli)
