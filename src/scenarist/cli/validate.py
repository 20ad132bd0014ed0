"""scenarist validate — Check scenario and mapping files without a browser.

Reads each file, runs the same row validation the loaders run, and prints
every issue. Nothing is launched; use this to catch broken rows before a
real run.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from scenarist.errors import TabularSourceError
from scenarist.mapping import duplicate_names, validate_mapping_records
from scenarist.scenario import validate_scenario_records
from scenarist.tabular import read_records

console = Console(stderr=True)

# ── Severity ordering ─────────────────────────────────────────────────────

_SEVERITY_ORDER = {"error": 0, "warning": 1}


# ── Validation helpers ────────────────────────────────────────────────────


def _read(path: Path) -> tuple[list[dict[str, str]], list[dict[str, Any]]]:
    try:
        records = read_records(path)
    except TabularSourceError as exc:
        return [], [{"severity": "error", "message": str(exc)}]
    if not records:
        return [], [{"severity": "error", "message": "File is empty."}]
    return records, []


def _validate_scenario_file(path: Path) -> list[dict[str, Any]]:
    """Validate a scenario file. Returns list of issue dicts."""
    records, issues = _read(path)
    issues += [{"severity": "error", "message": msg} for msg in validate_scenario_records(records)]
    return issues


def _validate_mapping_file(path: Path) -> list[dict[str, Any]]:
    """Validate a mapping file. Returns list of issue dicts."""
    records, issues = _read(path)
    issues += [{"severity": "error", "message": msg} for msg in validate_mapping_records(records)]
    for name in duplicate_names(records):
        issues.append(
            {"severity": "warning", "message": f"Field '{name}' is defined more than once; the last row wins"}
        )
    return issues


def validate(
    scenario: Optional[Path] = typer.Option(
        None,
        "--scenario",
        "-s",
        help="Scenario file (CSV or YAML) with action, selector, value, waitTime columns.",
    ),
    mapping: Optional[Path] = typer.Option(
        None,
        "--mapping",
        "-m",
        help="Mapping file (CSV or YAML) with name, selector, property columns.",
    ),
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Exit 1 on warnings as well as errors.",
    ),
) -> None:
    """Validate scenario and mapping files without opening a browser.

    \b
    Examples:
      scenarist validate -s login.csv
      scenarist validate -s login.csv -m results.csv --strict
    """
    targets: list[tuple[Path, list[dict[str, Any]]]] = []
    if scenario is not None:
        targets.append((scenario, _validate_scenario_file(scenario)))
    if mapping is not None:
        targets.append((mapping, _validate_mapping_file(mapping)))

    if not targets:
        console.print(
            Panel(
                "[yellow]Nothing to validate.[/yellow]\n\n"
                "Pass [bold]--scenario[/bold] and/or [bold]--mapping[/bold].",
                title="No Files",
                border_style="yellow",
            )
        )
        raise typer.Exit(code=2)

    total_errors = 0
    total_warnings = 0
    for path, issues in targets:
        total_errors += sum(1 for i in issues if i["severity"] == "error")
        total_warnings += sum(1 for i in issues if i["severity"] == "warning")
        _print_file_result(path, issues)

    # ── Summary ────────────────────────────────────────────────────────
    console.print()
    if total_errors == 0 and total_warnings == 0:
        console.print(Panel("[bold green]All files valid. No errors or warnings.[/bold green]", border_style="green"))
    elif total_errors > 0:
        console.print(
            Panel(
                f"[bold red]Validation failed.[/bold red]  {total_errors} error(s), {total_warnings} warning(s)",
                border_style="red",
            )
        )
        raise typer.Exit(code=1)
    elif strict:
        console.print(
            Panel(
                f"[bold yellow]Validation warnings found (--strict mode).[/bold yellow]  {total_warnings} warning(s)",
                border_style="yellow",
            )
        )
        raise typer.Exit(code=1)
    else:
        console.print(
            Panel(
                f"[yellow]Validation passed with {total_warnings} warning(s).[/yellow]  "
                "Use [bold]--strict[/bold] to fail on warnings.",
                border_style="yellow",
            )
        )


def _print_file_result(path: Path, issues: list[dict[str, Any]]) -> None:
    """Print validation results for a single file."""
    errors = [i for i in issues if i["severity"] == "error"]
    warnings = [i for i in issues if i["severity"] == "warning"]

    if not issues:
        console.print(f"  [green]✓[/green] [dim]{path}[/dim]  [green]OK[/green]")
        return

    if errors:
        status = f"[bold red]{len(errors)} error(s)[/bold red]"
        if warnings:
            status += f", [yellow]{len(warnings)} warning(s)[/yellow]"
        console.print(f"  [red]✗[/red] [bold]{path}[/bold]  {status}")
    else:
        console.print(f"  [yellow]![/yellow] [dim]{path}[/dim]  [yellow]{len(warnings)} warning(s)[/yellow]")

    for issue in sorted(issues, key=lambda i: _SEVERITY_ORDER.get(i["severity"], 99)):
        label = "[bold red]ERROR[/bold red]" if issue["severity"] == "error" else "[yellow]WARN[/yellow]"
        console.print(f"      {label}  {escape(issue['message'])}")
