"""Scenarist Extraction Engine — Mapping-driven data extraction from a page tree.

Given a located element and a mapping table, resolves every mapped field
independently: a field with a selector reads the named property of the first
matching descendant, a field without one reads the element's own snapshot.
A field that cannot be resolved is recorded in ``errors`` and never stops the
other fields (or the other elements of an array extraction) from resolving.

Field queries are read-only, so they run concurrently.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging

from scenarist.engine.protocols import TreeNode
from scenarist.errors import ElementNotFoundError
from scenarist.models import ExtractionResult, FieldMapping, MappingTable, NodeSnapshot, SnapshotFallback

logger = logging.getLogger("scenarist.engine.extraction")


@dataclasses.dataclass
class FieldOutcome:
    """Resolution of a single mapped field: a value or an error, never both."""

    name: str
    value: str | None = None
    error: str | None = None


def fallback_snapshot(node: TreeNode, fallback: SnapshotFallback) -> NodeSnapshot:
    """Snapshot a selector-less field reads from.

    With ``SnapshotFallback.PARENT``, a node that was located without an
    explicit selector defers to its parent's snapshot when it has one.
    """
    if fallback is SnapshotFallback.PARENT and node.implicit and node.parent_snapshot is not None:
        return node.parent_snapshot
    return node.snapshot


async def resolve_field(
    node: TreeNode,
    field: FieldMapping,
    fallback: SnapshotFallback = SnapshotFallback.OWN,
) -> FieldOutcome:
    """Resolve one field. Failures come back as data, not exceptions."""
    if not field.selector:
        return FieldOutcome(field.name, value=fallback_snapshot(node, fallback).get(field.property))

    try:
        child = await node.query_one(field.selector)
    except Exception as exc:
        logger.debug("Field %s: query %r raised %s", field.name, field.selector, exc)
        return FieldOutcome(field.name, error=str(exc) or exc.__class__.__name__)

    if child is None:
        logger.debug("Field %s: nothing matches %r", field.name, field.selector)
        return FieldOutcome(field.name, error=str(ElementNotFoundError(field.selector)))

    return FieldOutcome(field.name, value=child.snapshot.get(field.property))


def fold_outcomes(outcomes: list[FieldOutcome]) -> ExtractionResult:
    result = ExtractionResult()
    for outcome in outcomes:
        if outcome.error is not None:
            result.errors[outcome.name] = outcome.error
        else:
            result.values[outcome.name] = outcome.value
    return result


async def extract(
    node: TreeNode,
    mapping: MappingTable,
    *,
    fallback: SnapshotFallback = SnapshotFallback.OWN,
) -> ExtractionResult:
    """Extract every field of *mapping* from *node*.

    Always returns a result; fields that failed appear only in ``errors``.
    """
    outcomes = await asyncio.gather(*(resolve_field(node, field, fallback) for field in mapping.values()))
    result = fold_outcomes(list(outcomes))
    if result.errors:
        logger.debug("Extracted %d field(s), %d error(s): %s", len(result.values), len(result.errors), sorted(result.errors))
    return result


async def extract_many(
    node: TreeNode,
    selector: str,
    mapping: MappingTable,
    *,
    fallback: SnapshotFallback = SnapshotFallback.OWN,
) -> list[ExtractionResult]:
    """Extract *mapping* from every descendant of *node* matching *selector*.

    Results follow document order. Each element is extracted on its own, so a
    failing field on one element leaves the others untouched.
    """
    children = await node.query_all(selector)
    logger.debug("Array extraction %r matched %d element(s)", selector, len(children))
    results = await asyncio.gather(*(extract(child, mapping, fallback=fallback) for child in children))
    return list(results)
