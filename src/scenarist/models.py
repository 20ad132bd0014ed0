"""Shared data model and defaults."""

from __future__ import annotations

import dataclasses
import enum
from typing import Any

# Scenario value placeholder, e.g. "#bind:username"
BIND_PREFIX = "#bind:"

# Separator for multiple <option> values in a Select step
SELECT_VALUE_SEPARATOR = ";"

# Synthetic snapshot entry holding the node's trimmed text
TEXT_CONTENT = "textContent"

# Element used when no selector is given for page.element()
ROOT_SELECTOR = "html"

SCENARIO_COLUMNS = ("action", "selector", "value", "waitTime")
MAPPING_COLUMNS = ("name", "selector", "property")

# Browser defaults
DEFAULT_BROWSER = "chromium"
SUPPORTED_BROWSERS = ("chromium", "firefox", "webkit")
DEFAULT_TIMEOUT_MS = 30_000

NodeSnapshot = dict[str, str]


class ActionKind(str, enum.Enum):
    """Browser action performed by one scenario step."""

    CLICK = "Click"
    SELECT = "Select"
    INPUT = "Input"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


class BindingMode(str, enum.Enum):
    """How a ``#bind:`` placeholder is looked up in the binding table."""

    BY_NAME = "by_name"  # key is the text after "#bind:"
    BY_INDEX = "by_index"  # key is the 1-based row number


class SnapshotFallback(str, enum.Enum):
    """Which snapshot a selector-less field reads."""

    OWN = "own"
    PARENT = "parent"  # parent's snapshot when the node was located implicitly


@dataclasses.dataclass(frozen=True)
class ScenarioStep:
    """One browser action built from a scenario row."""

    kind: ActionKind
    selector: str
    value: str | None = None
    wait_time: int | None = None  # settle delay in milliseconds

    def select_values(self) -> list[str]:
        """Option values for a Select step."""
        return (self.value or "").split(SELECT_VALUE_SEPARATOR)


@dataclasses.dataclass(frozen=True)
class FieldMapping:
    """Where one output field comes from."""

    name: str
    selector: str
    property: str


MappingTable = dict[str, FieldMapping]


@dataclasses.dataclass
class ExtractionResult:
    """Values that resolved plus an error message for every field that did not."""

    values: dict[str, str | None] = dataclasses.field(default_factory=dict)
    errors: dict[str, str] = dataclasses.field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors

    def __getitem__(self, name: str) -> str | None:
        return self.values[name]

    def to_dict(self) -> dict[str, Any]:
        """Flat form: one key per field plus an ``errors`` mapping."""
        data: dict[str, Any] = dict(self.values)
        data["errors"] = dict(self.errors)
        return data
