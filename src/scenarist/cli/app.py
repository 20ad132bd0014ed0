"""Scenarist CLI — Main Typer entry point.

Registers all subcommands and provides --version / --verbose global options.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console

from scenarist import __version__

TAGLINE = "Replay browser scenarios. Map pages to data."

console = Console()

# ── Version callback ──────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        console.print("scenarist", style="bold cyan")
        console.print(f"  {TAGLINE}", style="dim")
        console.print(f"  v{__version__}\n", style="bold")
        raise typer.Exit()


# ── Main app ──────────────────────────────────────────────────────────────

app = typer.Typer(
    name="scenarist",
    help=TAGLINE,
    rich_markup_mode="rich",
    no_args_is_help=True,
    add_completion=False,
)


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show Scenarist version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose output.",
    ),
) -> None:
    """Scenarist -- CSV-driven browser scenarios and declarative extraction."""
    if verbose:
        import logging

        logging.basicConfig(level=logging.DEBUG, format="%(name)s  %(message)s")


# ── Register subcommands ──────────────────────────────────────────────────

from scenarist.cli.run import run  # noqa: E402
from scenarist.cli.validate import validate  # noqa: E402

app.command(name="run", help="Replay a scenario and print extracted data as JSON.")(run)
app.command(name="validate", help="Validate scenario and mapping files without a browser.")(validate)
