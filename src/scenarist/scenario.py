"""Scenario loading — validate tabular rows and build the action sequence.

A scenario file has the columns ``action, selector, value, waitTime``. Every
row becomes one :class:`ScenarioStep`. Loading is all-or-nothing: an empty
file or any invalid row fails the whole load, and every row-level violation
is reported together.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from pathlib import Path

from scenarist.errors import EmptySourceError, ValidationFailedError
from scenarist.models import BIND_PREFIX, ActionKind, BindingMode, ScenarioStep
from scenarist.tabular import read_records

logger = logging.getLogger("scenarist.scenario")

BindingTable = Mapping[str | int, str]

_WAIT_TIME_RE = re.compile(r"^[0-9]*$")


# ── Validation ────────────────────────────────────────────────────────────


def validate_scenario_records(records: list[dict[str, str]]) -> list[str]:
    """Check every record and return all violation messages.

    Each violated rule of each row produces its own message, so a row with no
    selector and an unknown action yields two.
    """
    messages: list[str] = []
    allowed = ",".join(ActionKind.values())

    for line, record in enumerate(records, start=1):
        action = record.get("action", "")
        if not action:
            messages.append(f"Line: {line}, action is required.")
        if not record.get("selector"):
            messages.append(f"Line: {line}, selector is required.")
        if action and action not in ActionKind.values():
            messages.append(f"Line: {line}, action must be {allowed}.")
        wait_time = record.get("waitTime")
        if wait_time is not None and _WAIT_TIME_RE.match(wait_time) is None:
            messages.append(f"Line: {line}, waitTime must be number.")

    return messages


# ── Building ──────────────────────────────────────────────────────────────


def _lookup_binding(bindings: BindingTable, key: str | int) -> str | None:
    if key in bindings:
        return bindings[key]
    # Index keys may arrive as ints or as their string form
    alt: str | int = str(key) if isinstance(key, int) else (int(key) if key.isdigit() else key)
    return bindings.get(alt)


def resolve_value(
    raw: str | None,
    bindings: BindingTable,
    *,
    line: int,
    mode: BindingMode = BindingMode.BY_NAME,
) -> str | None:
    """Replace a ``#bind:`` placeholder with its bound value.

    Values without the prefix are returned unchanged.
    """
    if raw is None or not raw.startswith(BIND_PREFIX):
        return raw

    key: str | int = raw.split(":", 1)[1] if mode is BindingMode.BY_NAME else line
    value = _lookup_binding(bindings, key)
    if value is None:
        logger.warning("Line %d: no binding for %r (mode=%s)", line, key, mode.value)
    return value


def build_step(
    record: dict[str, str],
    bindings: BindingTable | None = None,
    *,
    line: int = 1,
    mode: BindingMode = BindingMode.BY_NAME,
) -> ScenarioStep:
    """Convert one validated record into a :class:`ScenarioStep`."""
    wait_time = record.get("waitTime") or ""
    return ScenarioStep(
        kind=ActionKind(record["action"]),
        selector=record["selector"],
        value=resolve_value(record.get("value"), bindings or {}, line=line, mode=mode),
        wait_time=int(wait_time) if wait_time else None,
    )


# ── Loading ───────────────────────────────────────────────────────────────


def load_scenario_records(
    records: list[dict[str, str]],
    bindings: BindingTable | None = None,
    *,
    mode: BindingMode = BindingMode.BY_NAME,
) -> list[ScenarioStep]:
    """Validate parsed records and build the ordered step sequence."""
    if not records:
        raise EmptySourceError()

    messages = validate_scenario_records(records)
    if messages:
        raise ValidationFailedError(messages)

    steps = [
        build_step(record, bindings, line=line, mode=mode)
        for line, record in enumerate(records, start=1)
    ]
    logger.debug("Built %d scenario step(s)", len(steps))
    return steps


def load_scenario(
    path: Path | str,
    bindings: BindingTable | None = None,
    *,
    mode: BindingMode = BindingMode.BY_NAME,
) -> list[ScenarioStep]:
    """Load a scenario file (CSV or YAML) into an ordered step sequence."""
    return load_scenario_records(read_records(path), bindings, mode=mode)
