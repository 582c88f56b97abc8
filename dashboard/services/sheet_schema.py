"""
Sheet layout for the two deployed dashboard variants.

    full     Categories → Pipelines → Clients → … with Signoffs and Diagrams
    reduced  Pipelines are the root; no Categories, Signoffs or Diagrams

Header order matters: the first column is always ``id``, and writers that
append rows map values onto these names.
"""

FULL = "full"
REDUCED = "reduced"
VARIANTS = frozenset({FULL, REDUCED})

CATEGORIES = "Categories"
PIPELINES = "Pipelines"
CLIENTS = "Clients"
CLIENT_DATA = "ClientData"
SECTIONS = "Sections"
REQUIREMENTS = "Requirements"
BULLETS = "Bullets"
TECHNOLOGIES = "Technologies"
SIGNOFFS = "Signoffs"
DIAGRAMS = "Diagrams"

_SHARED_TABLES = {
    CLIENTS: ("id", "pipelineId", "name"),
    CLIENT_DATA: ("id", "clientId", "item"),
    SECTIONS: ("id", "clientId", "name", "sortOrder"),
    REQUIREMENTS: ("id", "sectionId", "name", "subname", "priority", "status", "sortOrder"),
    BULLETS: ("id", "requirementId", "text", "sortOrder"),
    TECHNOLOGIES: ("id", "requirementId", "name", "type", "stage", "progress", "links"),
}

_LAYOUTS = {
    FULL: {
        CATEGORIES: ("id", "name", "sortOrder"),
        PIPELINES: ("id", "categoryId", "name", "sortOrder"),
        **_SHARED_TABLES,
        SIGNOFFS: ("id", "requirementId", "personName", "signedAt"),
        DIAGRAMS: ("id", "clientId", "data"),
    },
    REDUCED: {
        PIPELINES: ("id", "name"),
        **_SHARED_TABLES,
    },
}


def validate_variant(variant: str) -> str:
    if variant not in VARIANTS:
        raise ValueError(
            f"Unknown dashboard variant '{variant}'. "
            f"Must be one of: {', '.join(sorted(VARIANTS))}"
        )
    return variant


def table_layout(variant: str) -> dict[str, tuple[str, ...]]:
    """Return ``{table_name: headers}`` for ``variant`` in bootstrap order."""
    return dict(_LAYOUTS[validate_variant(variant)])


def table_names(variant: str) -> list[str]:
    return list(_LAYOUTS[validate_variant(variant)])
