"""Scenarist configuration management."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from scenarist.models import (
    DEFAULT_BROWSER,
    DEFAULT_TIMEOUT_MS,
    SUPPORTED_BROWSERS,
    BindingMode,
    SnapshotFallback,
)


class ScenaristConfigError(Exception):
    """Raised when configuration is invalid or missing."""

    pass


@dataclass
class ScenaristConfig:
    """Configuration for a Scenarist run."""

    base_url: str = ""

    # Browser
    browser: str = DEFAULT_BROWSER
    headless: bool = True
    slow_mo_ms: int = 0
    timeout_ms: int = DEFAULT_TIMEOUT_MS

    # Loading / extraction semantics
    binding_mode: BindingMode = BindingMode.BY_NAME
    snapshot_fallback: SnapshotFallback = SnapshotFallback.OWN
    bindings: dict[str, str] = field(default_factory=dict)

    project_dir: Path = field(default_factory=Path.cwd)

    @classmethod
    def from_file(cls, config_path: Path) -> ScenaristConfig:
        """Load config from a YAML file."""
        if not config_path.exists():
            raise ScenaristConfigError(f"Config file not found: {config_path}")
        with open(config_path, encoding="utf-8") as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as exc:
                raise ScenaristConfigError(f"YAML parse error in {config_path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ScenaristConfigError(f"Config file must be a YAML mapping: {config_path}")
        return cls._from_dict(data, config_path.parent)

    @classmethod
    def _from_dict(cls, data: dict[str, Any], project_dir: Path) -> ScenaristConfig:
        """Create config from a dictionary."""
        config = cls()
        config.project_dir = project_dir

        if "base_url" in data:
            config.base_url = str(data["base_url"])
        if "browser" in data:
            browser = str(data["browser"]).lower()
            if browser not in SUPPORTED_BROWSERS:
                raise ScenaristConfigError(
                    f"Unsupported browser: {browser!r}\n\nExpected one of: {', '.join(SUPPORTED_BROWSERS)}"
                )
            config.browser = browser
        if "headless" in data:
            config.headless = bool(data["headless"])
        if "slow_mo_ms" in data:
            config.slow_mo_ms = int(data["slow_mo_ms"])
        if "timeout_ms" in data:
            config.timeout_ms = int(data["timeout_ms"])

        if "binding_mode" in data:
            config.binding_mode = _enum_value(BindingMode, data["binding_mode"], "binding_mode")
        if "snapshot_fallback" in data:
            config.snapshot_fallback = _enum_value(SnapshotFallback, data["snapshot_fallback"], "snapshot_fallback")

        bindings = data.get("bindings") or {}
        if not isinstance(bindings, dict):
            raise ScenaristConfigError("bindings must be a mapping (key: value pairs)")
        config.bindings = {str(k): "" if v is None else str(v) for k, v in bindings.items()}

        return config


def _enum_value(enum_cls: Any, raw: Any, key: str) -> Any:
    try:
        return enum_cls(str(raw))
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ScenaristConfigError(f"Invalid {key}: {raw!r}\n\nExpected one of: {allowed}") from None
