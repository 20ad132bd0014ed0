"""Tabular source reader.

Turns a scenario or mapping file into a list of string-keyed records. CSV
files use their header row as column names; YAML files hold a list of
mappings. Content is not validated here.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Any

import yaml

from scenarist.errors import TabularSourceError

logger = logging.getLogger("scenarist.tabular")

CSV_SUFFIXES = (".csv",)
YAML_SUFFIXES = (".yaml", ".yml")


def _coerce_str(val: Any) -> str:
    if val is None:
        return ""
    return str(val)


def _normalize(record: dict[Any, Any]) -> dict[str, str]:
    return {_coerce_str(k).strip(): _coerce_str(v) for k, v in record.items() if k is not None}


def read_records(path: Path | str) -> list[dict[str, str]]:
    """Read every data row of *path* as a dict of column name to raw string."""
    path = Path(path)
    if not path.is_file():
        raise TabularSourceError(f"File not found: {path}")

    suffix = path.suffix.lower()
    if suffix in CSV_SUFFIXES:
        records = _read_csv(path)
    elif suffix in YAML_SUFFIXES:
        records = _read_yaml(path)
    else:
        raise TabularSourceError(
            f"Unsupported file type: {path.name}\n\n"
            f"Expected one of: {', '.join(CSV_SUFFIXES + YAML_SUFFIXES)}"
        )

    logger.debug("Read %d record(s) from %s", len(records), path)
    return records


def _read_csv(path: Path) -> list[dict[str, str]]:
    # utf-8-sig drops the BOM spreadsheet tools like to write
    try:
        with open(path, encoding="utf-8-sig", newline="") as fh:
            reader = csv.DictReader(fh, skipinitialspace=True)
            return [_normalize(row) for row in reader]
    except (UnicodeDecodeError, csv.Error) as exc:
        raise TabularSourceError(f"Cannot read {path.name}: {exc}") from exc


def _read_yaml(path: Path) -> list[dict[str, str]]:
    try:
        with open(path, encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except UnicodeDecodeError as exc:
        raise TabularSourceError(f"Cannot read {path.name}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise TabularSourceError(f"YAML parse error in {path.name}: {exc}") from exc

    if data is None:
        return []
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise TabularSourceError(f"{path.name} must contain a YAML list of mappings")
    return [_normalize(item) for item in data]
