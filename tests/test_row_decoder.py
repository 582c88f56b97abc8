"""
Tests: Row Decoder — raw rows → typed records.

Covers:
    - numeric coercion of progress / sortOrder
    - JSON columns (links → [] on bad JSON, data → None)
    - blank-row, empty-id and falsy-id filtering
    - order preservation and short-row padding
    - sheet_to_records against missing / header-only tables
"""

import math

import pytest

from dashboard.services.row_decoder import (
    coerce_number,
    decode_rows,
    encode_json_cell,
    parse_json,
    sheet_to_records,
)
from dashboard.services.table_store import MemoryTableStore


TECH_HEADERS = ["id", "requirementId", "name", "type", "stage", "progress", "links"]


# ── coerce_number ────────────────────────────────────────────────────────────


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("", 0),
        ("   ", 0),
        (None, 0),
        ("abc", 0),
        ("12abc", 0),
        ("inf", 0),
        ("nan", 0),
        (float("nan"), 0),
        (float("inf"), 0),
        ("42", 42),
        (" 7 ", 7),
        ("3.5", 3.5),
        ("-2", -2),
        (".5", 0.5),
        ("1e2", 100),
        ("0x10", 16),
        ("0b101", 5),
        (True, 1),
        (False, 0),
        (12, 12),
        (2.0, 2),
    ],
)
def test_coerce_number(raw, expected):
    result = coerce_number(raw)
    assert result == expected
    assert isinstance(result, (int, float)) and not isinstance(result, bool)


def test_coerce_number_integral_values_are_ints():
    assert isinstance(coerce_number("5"), int)
    assert isinstance(coerce_number(5.0), int)
    assert isinstance(coerce_number("5.25"), float)


# ── decode_rows ──────────────────────────────────────────────────────────────


def test_decode_applies_column_rules_by_header_name():
    rows = [
        TECH_HEADERS,
        ["t1", "r1", "Vision", "api", "pilot", "55", '[{"url": "https://x"}]'],
    ]

    [record] = decode_rows(rows)

    assert record == {
        "id": "t1",
        "requirementId": "r1",
        "name": "Vision",
        "type": "api",
        "stage": "pilot",
        "progress": 55,
        "links": [{"url": "https://x"}],
    }


def test_numeric_columns_default_to_zero():
    rows = [TECH_HEADERS, ["t1", "r1", "Vision", "", "", "", ""]]

    [record] = decode_rows(rows)

    assert record["progress"] == 0


def test_malformed_links_decode_to_empty_list():
    rows = [TECH_HEADERS, ["t1", "r1", "Vision", "", "", 10, "[not json"]]

    [record] = decode_rows(rows)

    assert record["links"] == []


def test_malformed_data_decodes_to_none():
    rows = [["id", "clientId", "data"], ["d1", "c1", "{broken"]]

    [record] = decode_rows(rows)

    assert record["data"] is None


@pytest.mark.parametrize("token", ["NaN", "Infinity", "-Infinity"])
def test_non_standard_json_constants_fall_back_to_defaults(token):
    rows = [
        ["id", "clientId", "data", "links"],
        ["d1", "c1", f"{{\"v\": {token}}}", f"[{token}]"],
    ]

    [record] = decode_rows(rows)

    assert record["data"] is None
    assert record["links"] == []


def test_empty_json_cell_stays_empty_string():
    rows = [["id", "clientId", "data"], ["d1", "c1", ""]]

    [record] = decode_rows(rows)

    assert record["data"] == ""


def test_non_string_json_cell_passes_through():
    rows = [["id", "links"], ["t1", ["already", "decoded"]]]

    [record] = decode_rows(rows)

    assert record["links"] == ["already", "decoded"]


def test_other_columns_are_not_parsed():
    rows = [["id", "name"], ["c1", '{"looks": "like json"}']]

    [record] = decode_rows(rows)

    assert record["name"] == '{"looks": "like json"}'


def test_json_column_round_trips_structured_value():
    value = {"nodes": [{"id": "n1", "x": 10}], "edges": [], "label": "Überblick"}
    rows = [["id", "clientId", "data"], ["d1", "c1", encode_json_cell(value)]]

    [record] = decode_rows(rows)

    assert record["data"] == value


def test_fully_blank_row_is_excluded():
    rows = [
        ["id", "name", "sortOrder"],
        ["", "", ""],
        ["c1", "Cat", 1],
    ]

    assert [r["id"] for r in decode_rows(rows)] == ["c1"]


def test_row_with_empty_id_is_excluded_regardless_of_other_fields():
    rows = [
        ["id", "name", "sortOrder"],
        ["", "Orphan", 4],
        [None, "Also orphan", 5],
    ]

    assert decode_rows(rows) == []


def test_row_with_only_id_is_kept():
    rows = [["id", "name", "sortOrder"], ["c1", "", ""]]

    [record] = decode_rows(rows)

    assert record == {"id": "c1", "name": "", "sortOrder": 0}


def test_numeric_zero_id_is_dropped():
    rows = [["id", "name"], [0, "Zero"], [1, "One"]]

    assert [r["name"] for r in decode_rows(rows)] == ["One"]


def test_id_not_first_column_loses_rows_without_id():
    # First cell is present, but the decoded id field is empty → dropped
    rows = [["name", "id"], ["Named", ""], ["Both", "x1"]]

    assert decode_rows(rows) == [{"name": "Both", "id": "x1"}]


def test_short_rows_are_padded_with_empty_strings():
    rows = [["id", "name", "sortOrder"], ["c1"]]

    [record] = decode_rows(rows)

    assert record == {"id": "c1", "name": "", "sortOrder": 0}


def test_output_order_matches_input_order():
    rows = [["id", "sortOrder"], ["c", 3], ["a", 1], ["b", 2]]

    assert [r["id"] for r in decode_rows(rows)] == ["c", "a", "b"]


def test_header_only_and_empty_input_yield_nothing():
    assert decode_rows([]) == []
    assert decode_rows([["id", "name"]]) == []


def test_nan_first_cell_counts_as_empty():
    rows = [["id", "name"], [math.nan, "x"]]

    assert decode_rows(rows) == []


# ── sheet_to_records ─────────────────────────────────────────────────────────


def test_sheet_to_records_missing_table_is_empty():
    assert sheet_to_records(MemoryTableStore(), "Categories") == []


def test_sheet_to_records_reads_through_store():
    store = MemoryTableStore({"Categories": [["id", "name", "sortOrder"], ["c1", "Docs", "2"]]})

    assert sheet_to_records(store, "Categories") == [{"id": "c1", "name": "Docs", "sortOrder": 2}]


def test_encode_json_cell_is_compact():
    assert encode_json_cell({"a": [1, 2]}) == '{"a":[1,2]}'


def test_encode_json_cell_rejects_non_finite_numbers():
    with pytest.raises(ValueError):
        encode_json_cell({"v": math.nan})
    with pytest.raises(ValueError):
        encode_json_cell([math.inf])


def test_parse_json_rejects_constants_but_keeps_regular_values():
    assert parse_json('{"a": [1, 2.5, null, true]}') == {"a": [1, 2.5, None, True]}
    with pytest.raises(ValueError, match="NaN"):
        parse_json("[NaN]")
