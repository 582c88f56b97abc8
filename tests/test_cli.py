"""Tests for the ``flask tables`` CLI group."""

import csv

import pytest

from dashboard.services import sheet_schema as schema
from dashboard.services.hierarchy import load_hierarchy


@pytest.fixture()
def runner(app):
    return app.test_cli_runner()


def test_init_creates_every_table_once(runner, store):
    result = runner.invoke(args=["tables", "init"])

    assert result.exit_code == 0, result.output
    assert "Created 10 table(s)" in result.output
    for name, headers in schema.table_layout(schema.FULL).items():
        assert store.fetch_rows(name) == [list(headers)]

    again = runner.invoke(args=["tables", "init"])
    assert "Created 0 table(s)" in again.output


def test_seed_builds_a_readable_hierarchy(runner, store):
    result = runner.invoke(args=["tables", "seed"])

    assert result.exit_code == 0, result.output
    tree = load_hierarchy(store)
    assert [c["id"] for c in tree] == ["cat-1", "cat-2"]
    acme = tree[0]["pipelines"][0]["clients"][0]
    assert [s["name"] for s in acme["sections"]] == ["Ingestion", "Validation"]
    tech = acme["sections"][0]["requirements"][0]["technologies"][0]
    assert tech["links"][0]["label"] == "Docs"


def test_import_csv_creates_table_from_header(runner, store, tmp_path):
    path = tmp_path / "bullets.csv"
    with open(path, "w", newline="", encoding="utf-8") as fh:
        csv.writer(fh).writerows([
            ["id", "requirementId", "text", "sortOrder"],
            ["b1", "req-1", "First", "2"],
            ["b2", "req-1", "Second", "1"],
        ])

    result = runner.invoke(args=["tables", "import-csv", "Bullets", str(path)])

    assert result.exit_code == 0, result.output
    assert store.fetch_rows("Bullets")[1:] == [
        ["b1", "req-1", "First", "2"],
        ["b2", "req-1", "Second", "1"],
    ]


def test_import_csv_rejects_mismatched_header(runner, store, tmp_path):
    store.create_table("Bullets", ["id", "requirementId", "text", "sortOrder"])
    path = tmp_path / "bad.csv"
    path.write_text("id,wrong\nb1,x\n", encoding="utf-8")

    result = runner.invoke(args=["tables", "import-csv", "Bullets", str(path)])

    assert result.exit_code != 0
    assert "does not match" in result.output
    assert store.fetch_rows("Bullets") == [["id", "requirementId", "text", "sortOrder"]]


def test_export_csv_writes_header_and_rows(runner, store, tmp_path):
    store.create_table("Clients", ["id", "pipelineId", "name"])
    store.append_row("Clients", ["c1", "p1", "Acme"])
    path = tmp_path / "clients.csv"

    result = runner.invoke(args=["tables", "export-csv", "Clients", str(path)])

    assert result.exit_code == 0, result.output
    with open(path, newline="", encoding="utf-8") as fh:
        assert list(csv.reader(fh)) == [["id", "pipelineId", "name"], ["c1", "p1", "Acme"]]


def test_export_missing_table_fails_cleanly(runner, tmp_path):
    result = runner.invoke(args=["tables", "export-csv", "Nope", str(tmp_path / "x.csv")])

    assert result.exit_code != 0
    assert "Table 'Nope' not found" in result.output
