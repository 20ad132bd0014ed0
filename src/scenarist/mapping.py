"""Mapping loading — validate tabular rows and build the field mapping table."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from scenarist.errors import EmptySourceError, ValidationFailedError
from scenarist.models import MAPPING_COLUMNS, FieldMapping, MappingTable
from scenarist.tabular import read_records

logger = logging.getLogger("scenarist.mapping")


def validate_mapping_records(records: list[dict[str, str]]) -> list[str]:
    """Return a message for every missing ``name``/``selector``/``property``."""
    messages: list[str] = []
    for line, record in enumerate(records, start=1):
        for column in MAPPING_COLUMNS:
            if not record.get(column):
                messages.append(f"Line: {line}, {column} is required.")
    return messages


def duplicate_names(records: list[dict[str, str]]) -> list[str]:
    """Field names that appear on more than one row, in first-seen order."""
    seen: set[str] = set()
    dupes: list[str] = []
    for record in records:
        name = record.get("name", "")
        if name in seen and name not in dupes:
            dupes.append(name)
        seen.add(name)
    return dupes


def build_mapping(records: list[dict[str, str]]) -> MappingTable:
    """Fold records into a table keyed by field name.

    The last row for a repeated name wins.
    """
    table: MappingTable = {}
    for record in records:
        name = record["name"]
        if name in table:
            logger.warning("Mapping field %r defined more than once; last definition wins", name)
        table[name] = FieldMapping(name=name, selector=record["selector"], property=record["property"])
    return table


def load_mapping_records(records: list[dict[str, str]]) -> MappingTable:
    """Validate parsed records and build the mapping table."""
    if not records:
        raise EmptySourceError()

    messages = validate_mapping_records(records)
    if messages:
        raise ValidationFailedError(messages)

    return build_mapping(records)


def load_mapping(path: Path | str) -> MappingTable:
    """Load a mapping file (CSV or YAML) into a mapping table."""
    return load_mapping_records(read_records(path))


def mapping_from_dict(data: Mapping[str, Mapping[str, Any]]) -> MappingTable:
    """Build a table from ``{name: {"selector": ..., "property": ...}}``.

    Unlike file mappings, the selector may be left empty here to read the
    current element itself.
    """
    return {
        name: FieldMapping(
            name=name,
            selector=str(entry.get("selector") or ""),
            property=str(entry.get("property") or ""),
        )
        for name, entry in data.items()
    }
