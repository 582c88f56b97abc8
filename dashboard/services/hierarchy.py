"""
Hierarchy Assembler — flat decoded tables → nested dashboard tree.

    Category → Pipeline → Client → { data, sections → requirements →
               { bullets, technologies, signoffs }, diagram }

The tree is built strictly bottom-up. Each level is sorted once, globally,
by ``sortOrder`` and then split per parent; Python's sort is stable, so the
per-parent order equals "filter, then sort" with ties kept in row order.

Only the full variant has Categories, Signoffs and Diagrams. The reduced
variant returns the Pipeline forest instead.

Input records are never mutated: every node in the output is a shallow copy
of its record plus the child keys.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Hashable, Iterable, Mapping
from typing import Any

from dashboard.services import sheet_schema as schema
from dashboard.services.row_decoder import sheet_to_records
from dashboard.services.table_store import TableStore

logger = logging.getLogger(__name__)


def _sort_key(record: dict) -> Any:
    # Absent sortOrder coalesces to 0, same as an explicit 0
    return record.get("sortOrder") or 0


def _by_sort(records: Iterable[dict]) -> list[dict]:
    return sorted(records, key=_sort_key)


def _is_key(value: Any) -> bool:
    """True for scalar id values; list/dict cells never match a parent."""
    return isinstance(value, Hashable)


def _group_by(records: Iterable[dict], key: str) -> dict[Any, list[dict]]:
    """Index records by ``record[key]`` keeping their relative order.

    Records whose key cell is not a scalar (a JSON list or object written
    through the API) are left out, so they simply have no parent.
    """
    groups: dict[Any, list[dict]] = defaultdict(list)
    for record in records:
        value = record.get(key)
        if _is_key(value):
            groups[value].append(record)
    return groups


def _children(groups: dict[Any, list[dict]], parent: dict) -> list[dict]:
    parent_id = parent.get("id")
    if not _is_key(parent_id):
        return []
    return list(groups.get(parent_id, ()))


def assemble_hierarchy(
    tables: Mapping[str, list[dict]],
    variant: str = schema.FULL,
) -> list[dict]:
    """Nest decoded records into the dashboard tree.

    Args:
        tables:  ``{table_name: decoded records}``. Missing tables count as empty.
        variant: ``"full"`` (Category roots) or ``"reduced"`` (Pipeline roots).

    Returns:
        The sorted list of root nodes.
    """
    full = schema.validate_variant(variant) == schema.FULL

    def rows(name: str) -> list[dict]:
        return tables.get(name) or []

    # 1-2. Requirements ← bullets / technologies / signoffs
    bullets = _group_by(_by_sort(rows(schema.BULLETS)), "requirementId")
    technologies = _group_by(rows(schema.TECHNOLOGIES), "requirementId")
    signoffs = _group_by(rows(schema.SIGNOFFS), "requirementId") if full else {}

    requirements = []
    for req in rows(schema.REQUIREMENTS):
        node = {
            **req,
            "bullets": _children(bullets, req),
            "technologies": _children(technologies, req),
        }
        if full:
            node["signoffs"] = _children(signoffs, req)
        requirements.append(node)
    requirements_by_section = _group_by(_by_sort(requirements), "sectionId")

    # 3. Sections ← requirements
    sections = _by_sort(
        {**sec, "requirements": _children(requirements_by_section, sec)}
        for sec in rows(schema.SECTIONS)
    )
    sections_by_client = _group_by(sections, "clientId")

    # 4. Clients ← data / sections / diagram
    client_data = _group_by(rows(schema.CLIENT_DATA), "clientId")
    diagrams = _group_by(rows(schema.DIAGRAMS), "clientId") if full else {}

    clients = []
    for client in rows(schema.CLIENTS):
        node = {
            **client,
            "data": _children(client_data, client),
            "sections": _children(sections_by_client, client),
        }
        if full:
            matches = _children(diagrams, client)
            node["diagram"] = matches[0] if matches else None
        clients.append(node)
    clients_by_pipeline = _group_by(clients, "pipelineId")

    # 5. Pipelines ← clients
    pipelines = _by_sort(
        {**pipeline, "clients": _children(clients_by_pipeline, pipeline)}
        for pipeline in rows(schema.PIPELINES)
    )
    if not full:
        return pipelines

    # 6. Categories ← pipelines
    pipelines_by_category = _group_by(pipelines, "categoryId")
    return _by_sort(
        {**category, "pipelines": _children(pipelines_by_category, category)}
        for category in rows(schema.CATEGORIES)
    )


def load_hierarchy(store: TableStore, variant: str = schema.FULL) -> list[dict]:
    """Read every table of ``variant`` from ``store`` and assemble the tree."""
    tables = {name: sheet_to_records(store, name) for name in schema.table_names(variant)}
    logger.debug(
        "Loaded %d tables (%d records) for %s dashboard",
        len(tables), sum(len(v) for v in tables.values()), variant,
    )
    return assemble_hierarchy(tables, variant)
