"""scenarist run — Replay a scenario and extract page data.

Opens the URL in a Playwright browser, replays the scenario file step by
step, then extracts the mapping from the page (or from every element matching
``--each``) and prints the results as JSON on stdout.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from scenarist.config import ScenaristConfig, ScenaristConfigError
from scenarist.errors import ActionFailedError, ScenaristError
from scenarist.mapping import load_mapping
from scenarist.models import BindingMode, MappingTable, ScenarioStep
from scenarist.scenario import load_scenario

console = Console(stderr=True)
output_console = Console()  # stdout for machine-readable output

logger = logging.getLogger("scenarist.cli.run")


def _parse_bindings(pairs: list[str]) -> dict[str, str]:
    """Parse repeated KEY=VALUE options into a binding table."""
    bindings: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            console.print(
                Panel(
                    f"[red]Invalid binding:[/red] {pair}\n\nExpected format: KEY=VALUE (e.g., user=alice)",
                    title="[red]Config Error[/red]",
                    border_style="red",
                )
            )
            raise typer.Exit(code=2)
        bindings[key] = value
    return bindings


def _fail(title: str, message: str, code: int) -> NoReturn:
    console.print(Panel(message, title=f"[red]{title}[/red]", border_style="red"))
    raise typer.Exit(code=code)


async def _execute(
    url: str,
    steps: list[ScenarioStep],
    mapping: MappingTable,
    each: str | None,
    config: ScenaristConfig,
) -> Any:
    from scenarist.engine.browser import ScenarioBrowser

    async with await ScenarioBrowser.launch(config) as browser:
        page = await browser.new_page(url)
        try:
            if steps:
                await page.transition(steps)
            if each:
                return [r.to_dict() for r in await page.map_array(each, mapping)]
            return (await page.map(mapping)).to_dict()
        finally:
            await page.close()


def run(
    url: str = typer.Argument(..., help="Page to open (relative paths resolve against base_url)."),
    mapping_file: Path = typer.Option(
        ...,
        "--mapping",
        "-m",
        help="Mapping file (CSV or YAML) with name, selector, property columns.",
    ),
    scenario_file: Optional[Path] = typer.Option(
        None,
        "--scenario",
        "-s",
        help="Scenario file (CSV or YAML) replayed before extraction.",
    ),
    each: Optional[str] = typer.Option(
        None,
        "--each",
        "-e",
        help="Extract the mapping from every element matching this selector.",
    ),
    bind: list[str] = typer.Option(
        [],
        "--bind",
        "-b",
        help="Value for a #bind: placeholder, as KEY=VALUE. Repeatable.",
    ),
    by_index: bool = typer.Option(
        False,
        "--by-index",
        help="Look up #bind: placeholders by row number instead of by name.",
    ),
    config_file: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a scenarist YAML config file.",
    ),
    headless: Optional[bool] = typer.Option(
        None,
        "--headless/--no-headless",
        help="Override the configured headless setting.",
    ),
) -> None:
    """Replay a scenario against a page and print the extracted data as JSON.

    \b
    Examples:
      scenarist run https://example.com -m fields.csv
      scenarist run /search -s search.csv -m cards.csv --each '.card' -b query=python
    """
    try:
        config = ScenaristConfig.from_file(config_file) if config_file else ScenaristConfig()
    except ScenaristConfigError as exc:
        _fail("Config Error", escape(str(exc)), code=2)

    if headless is not None:
        config.headless = headless
    if by_index:
        config.binding_mode = BindingMode.BY_INDEX
    bindings = {**config.bindings, **_parse_bindings(bind)}

    if config.base_url and "://" not in url:
        url = config.base_url.rstrip("/") + "/" + url.lstrip("/")

    try:
        steps = load_scenario(scenario_file, bindings, mode=config.binding_mode) if scenario_file else []
        mapping = load_mapping(mapping_file)
    except ScenaristError as exc:
        _fail("Load Error", f"[red]{escape(str(exc))}[/red]", code=2)

    logger.info("Running %d step(s) against %s", len(steps), url)
    try:
        result = asyncio.run(_execute(url, steps, mapping, each, config))
    except ActionFailedError as exc:
        _fail("Scenario Failed", escape(str(exc)), code=1)
    except ScenaristError as exc:
        _fail("Extraction Failed", escape(str(exc)), code=1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Run interrupted by user.[/yellow]")
        raise typer.Exit(code=1)
    except Exception as exc:
        logger.exception("Unexpected error during run")
        _fail(
            "Infrastructure Error",
            f"[red]Unexpected error:[/red] {escape(str(exc))}\n\n"
            "Run with [bold]--verbose[/bold] for full traceback.",
            code=1,
        )

    output_console.print_json(json.dumps(result, ensure_ascii=False))
