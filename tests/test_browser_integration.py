"""Integration tests for scenarist.engine.browser against a real Playwright browser.

Run with ``pytest -m integration``. Skipped when no Playwright browser is
installed (``playwright install chromium``).
"""

from __future__ import annotations

import asyncio

import pytest

from scenarist.config import ScenaristConfig
from scenarist.engine.browser import ScenarioBrowser, ScenarioPage
from scenarist.errors import ActionFailedError, ElementNotFoundError
from scenarist.models import ActionKind, ScenarioStep, SnapshotFallback

playwright_api = pytest.importorskip("playwright.async_api")

pytestmark = pytest.mark.integration

FIXTURE_HTML = """<!DOCTYPE html>
<html>
<head><title>Fixture</title></head>
<body id="root">
  <h1 id="title">   Scenario Fixture   </h1>
  <nav id="nav"><a id="home" href="/home" data-kind="nav">Home</a></nav>

  <button id="click-button"
          onclick="document.querySelector('#click-result').textContent = 'clicked'">Click me</button>
  <div id="click-result"></div>

  <select id="select-box" multiple
          onchange="document.querySelector('#select-result').textContent =
                    Array.from(this.selectedOptions).map(o => o.value).join(',')">
    <option value="a">A</option>
    <option value="b">B</option>
    <option value="c">C</option>
  </select>
  <div id="select-result"></div>

  <input id="input-box"
         oninput="document.querySelector('#input-result').textContent = this.value">
  <div id="input-result"></div>

  <ul id="items">
    <li class="item" data-id="1"><span class="name"> first </span><a href="/items/1">go</a></li>
    <li class="item" data-id="2"><span class="name"> second </span></li>
    <li class="item" data-id="3"><span class="name"> third </span><a href="/items/3">go</a></li>
  </ul>

  <div class="group" title="g1"><p>x</p><p>y</p></div>
  <div class="group" title="g2"><p>z</p></div>
</body>
</html>
"""

CONFIG = ScenaristConfig(timeout_ms=2000)


def fields(**spec: tuple[str, str]) -> dict[str, dict[str, str]]:
    return {name: {"selector": sel, "property": prop} for name, (sel, prop) in spec.items()}


@pytest.fixture(scope="module", autouse=True)
def browser_installed():
    async def _launch() -> None:
        browser = await ScenarioBrowser.launch(CONFIG)
        await browser.close()

    try:
        asyncio.run(_launch())
    except playwright_api.Error as exc:
        pytest.skip(f"Playwright browser not installed: {exc}")


def on_fixture_page(body, fallback: SnapshotFallback = SnapshotFallback.OWN):
    """Run ``body(page)`` against a fresh page holding FIXTURE_HTML."""

    async def _run():
        async with await ScenarioBrowser.launch(CONFIG) as browser:
            page = await browser.new_page()
            try:
                await page.page.set_content(FIXTURE_HTML)
                return await body(ScenarioPage(page.page, fallback=fallback))
            finally:
                await page.close()

    return asyncio.run(_run())


# ---------------------------------------------------------------------------
# 1. Locating elements
# ---------------------------------------------------------------------------

class TestElement:

    def test_element_without_selector_is_document_root(self):
        async def body(page: ScenarioPage):
            root = await page.element()
            return root.implicit, root.snapshot["textContent"]

        implicit, text = on_fixture_page(body)
        assert implicit is True
        assert text.startswith("Fixture")

    def test_element_snapshot_has_trimmed_text_and_attributes(self):
        async def body(page: ScenarioPage):
            home = await page.element("#home")
            return home.implicit, home.snapshot, home.parent_snapshot

        implicit, snapshot, parent = on_fixture_page(body)
        assert implicit is False
        assert snapshot == {"textContent": "Home", "id": "home", "href": "/home", "data-kind": "nav"}
        assert parent["id"] == "nav"

    def test_element_not_found_raises(self):
        async def body(page: ScenarioPage):
            await page.element("#absent")

        with pytest.raises(ElementNotFoundError, match="#absent"):
            on_fixture_page(body)


# ---------------------------------------------------------------------------
# 2. Mapping extraction
# ---------------------------------------------------------------------------

class TestMap:

    def test_map_reads_text_and_attributes_with_isolated_errors(self):
        mapping = fields(
            title=("#title", "textContent"),
            href=("#home", "href"),
            kind=("#home", "data-kind"),
            missing=("#absent", "textContent"),
        )
        result = on_fixture_page(lambda page: page.map(mapping))
        assert result.values == {"title": "Scenario Fixture", "href": "/home", "kind": "nav"}
        assert result.errors == {"missing": 'failed to find element matching selector "#absent"'}

    def test_invalid_selector_is_isolated(self):
        mapping = fields(title=("#title", "textContent"), broken=("div[", "id"))
        result = on_fixture_page(lambda page: page.map(mapping))
        assert result.values == {"title": "Scenario Fixture"}
        assert list(result.errors) == ["broken"]

    def test_map_array_follows_document_order(self):
        mapping = fields(id=("", "data-id"), name=(".name", "textContent"), href=("a", "href"))
        results = on_fixture_page(lambda page: page.map_array(".item", mapping))
        assert [r.values for r in results] == [
            {"id": "1", "name": "first", "href": "/items/1"},
            {"id": "2", "name": "second"},
            {"id": "3", "name": "third", "href": "/items/3"},
        ]
        assert [list(r.errors) for r in results] == [[], ["href"], []]

    def test_map_array_without_matches_is_empty(self):
        assert on_fixture_page(lambda page: page.map_array(".nothing", fields(a=("", "id")))) == []

    def test_nested_element_array(self):
        async def body(page: ScenarioPage):
            groups = await page.element_array(".group")
            header = [g.snapshot["title"] for g in groups]
            items = [[r.values["t"] for r in await g.map_array("p", fields(t=("", "textContent")))] for g in groups]
            return header, items

        header, items = on_fixture_page(body)
        assert header == ["g1", "g2"]
        assert items == [["x", "y"], ["z"]]

    def test_parent_fallback_reads_parent_of_implicit_element(self):
        async def body(page: ScenarioPage):
            home = await page.element("#home")
            return await (await home.element()).map(fields(container=("", "id")))

        result = on_fixture_page(body, fallback=SnapshotFallback.PARENT)
        assert result.values == {"container": "nav"}


# ---------------------------------------------------------------------------
# 3. Scenario replay
# ---------------------------------------------------------------------------

class TestTransition:

    def test_click_select_and_input_update_the_page(self):
        steps = [
            ScenarioStep(ActionKind.CLICK, "#click-button"),
            ScenarioStep(ActionKind.SELECT, "#select-box", "b;c"),
            ScenarioStep(ActionKind.INPUT, "#input-box", "hello", wait_time=50),
        ]
        mapping = fields(
            clicked=("#click-result", "textContent"),
            selected=("#select-result", "textContent"),
            typed=("#input-result", "textContent"),
        )

        async def body(page: ScenarioPage):
            await page.transition(steps)
            return await page.map(mapping)

        result = on_fixture_page(body)
        assert result.errors == {}
        assert result.values == {"clicked": "clicked", "selected": "b,c", "typed": "hello"}

    def test_failing_step_reports_its_position(self):
        steps = [
            ScenarioStep(ActionKind.CLICK, "#click-button"),
            ScenarioStep(ActionKind.CLICK, "#absent"),
        ]

        async def body(page: ScenarioPage):
            await page.transition(steps)

        with pytest.raises(ActionFailedError) as excinfo:
            on_fixture_page(body)
        assert excinfo.value.index == 2
