"""Scenarist Browser — Playwright-backed pages and elements.

``ScenarioBrowser`` owns a Playwright browser and hands out ``ScenarioPage``
objects. A page replays scenarios and exposes its DOM as ``ScenarioElement``
trees that the extraction engine walks.

Every element lookup runs a single in-page script that returns the matched
element together with its snapshot (attributes plus trimmed text, and the
same for its parent), so the snapshot describes the element exactly as it
was when it was found.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from scenarist.config import ScenaristConfig
from scenarist.engine.action_executor import transition
from scenarist.engine.extraction import extract, extract_many
from scenarist.errors import ElementNotFoundError
from scenarist.mapping import mapping_from_dict
from scenarist.models import (
    ROOT_SELECTOR,
    ExtractionResult,
    FieldMapping,
    MappingTable,
    NodeSnapshot,
    ScenarioStep,
    SnapshotFallback,
)

if TYPE_CHECKING:
    from playwright.async_api import Browser, ElementHandle, JSHandle, Page, Playwright

logger = logging.getLogger("scenarist.engine.browser")

_CAPTURE_JS = """
const capture = (el) => {
    if (!el) return null;
    const snapshot = { textContent: (el.textContent || '').trim() };
    for (const name of el.getAttributeNames()) {
        snapshot[name] = el.getAttribute(name);
    }
    return snapshot;
};
const pack = (el) => ({ element: el, snapshot: capture(el), parent: capture(el.parentElement) });
"""

QUERY_ONE_JS = (
    "(root, selector) => {" + _CAPTURE_JS + "const el = root.querySelector(selector); return el ? pack(el) : null; }"
)
QUERY_ALL_JS = "(root, selector) => {" + _CAPTURE_JS + "return Array.from(root.querySelectorAll(selector)).map(pack); }"

# Page-level variants query from the document
PAGE_QUERY_ONE_JS = f"(selector) => ({QUERY_ONE_JS})(document, selector)"
PAGE_QUERY_ALL_JS = f"(selector) => ({QUERY_ALL_JS})(document, selector)"


def as_mapping_table(mapping: MappingTable | Mapping[str, Mapping[str, Any]]) -> MappingTable:
    """Accept either a built table or a plain ``{name: {selector, property}}`` dict."""
    if all(isinstance(v, FieldMapping) for v in mapping.values()):
        return dict(mapping)  # type: ignore[arg-type]
    return mapping_from_dict(mapping)  # type: ignore[arg-type]


async def _unpack_one(
    packed: JSHandle,
    fallback: SnapshotFallback,
    implicit: bool = False,
) -> ScenarioElement | None:
    props = await packed.get_properties()
    if "element" not in props:
        return None
    # the element handle stays alive inside the returned ScenarioElement
    element = props["element"].as_element()
    try:
        snapshot = await props["snapshot"].json_value()
        parent = await props["parent"].json_value()
    finally:
        await props["snapshot"].dispose()
        await props["parent"].dispose()
    return ScenarioElement(element, snapshot, parent, implicit=implicit, fallback=fallback)


async def _unpack_all(packed: JSHandle, fallback: SnapshotFallback) -> list[ScenarioElement]:
    try:
        props = await packed.get_properties()
        indexed = sorted((int(k), v) for k, v in props.items() if k.isdigit())
        elements: list[ScenarioElement] = []
        for _, item in indexed:
            try:
                element = await _unpack_one(item, fallback)
            finally:
                await item.dispose()
            if element is not None:
                elements.append(element)
        return elements
    finally:
        await packed.dispose()


class ScenarioElement:
    """A located DOM element and the snapshot captured when it was found."""

    def __init__(
        self,
        handle: ElementHandle,
        snapshot: NodeSnapshot,
        parent_snapshot: NodeSnapshot | None = None,
        *,
        implicit: bool = False,
        fallback: SnapshotFallback = SnapshotFallback.OWN,
    ) -> None:
        self._handle = handle
        self._snapshot = snapshot
        self._parent_snapshot = parent_snapshot
        self._implicit = implicit
        self._fallback = fallback

    @property
    def handle(self) -> ElementHandle:
        return self._handle

    @property
    def snapshot(self) -> NodeSnapshot:
        return self._snapshot

    @property
    def parent_snapshot(self) -> NodeSnapshot | None:
        return self._parent_snapshot

    @property
    def implicit(self) -> bool:
        return self._implicit

    # -- TreeNode ------------------------------------------------------------

    async def query_one(self, selector: str) -> ScenarioElement | None:
        packed = await self._handle.evaluate_handle(QUERY_ONE_JS, selector)
        try:
            return await _unpack_one(packed, self._fallback)
        finally:
            await packed.dispose()

    async def query_all(self, selector: str) -> list[ScenarioElement]:
        packed = await self._handle.evaluate_handle(QUERY_ALL_JS, selector)
        return await _unpack_all(packed, self._fallback)

    # -- Navigation ----------------------------------------------------------

    async def element(self, selector: str | None = None) -> ScenarioElement:
        """First descendant matching *selector*; this element itself when omitted."""
        if not selector:
            return ScenarioElement(
                self._handle, self._snapshot, self._parent_snapshot, implicit=True, fallback=self._fallback
            )
        found = await self.query_one(selector)
        if found is None:
            raise ElementNotFoundError(selector)
        return found

    async def element_array(self, selector: str) -> list[ScenarioElement]:
        return await self.query_all(selector)

    # -- Extraction ----------------------------------------------------------

    async def map(self, mapping: MappingTable | Mapping[str, Mapping[str, Any]]) -> ExtractionResult:
        return await extract(self, as_mapping_table(mapping), fallback=self._fallback)

    async def map_array(
        self, selector: str, mapping: MappingTable | Mapping[str, Mapping[str, Any]]
    ) -> list[ExtractionResult]:
        return await extract_many(self, selector, as_mapping_table(mapping), fallback=self._fallback)


class ScenarioPage:
    """A browser page that replays scenarios and exposes its DOM for extraction."""

    def __init__(self, page: Page, fallback: SnapshotFallback = SnapshotFallback.OWN) -> None:
        self._page = page
        self._fallback = fallback

    @property
    def page(self) -> Page:
        """The underlying Playwright page."""
        return self._page

    async def goto(self, url: str) -> None:
        logger.info("Navigating to %s", url)
        await self._page.goto(url)

    # -- PageActions ---------------------------------------------------------

    async def click(self, selector: str) -> None:
        await self._page.click(selector)

    async def select(self, selector: str, *values: str) -> None:
        await self._page.select_option(selector, list(values))

    async def type(self, selector: str, text: str) -> None:
        await self._page.type(selector, text)

    async def wait_for(self, ms: int) -> None:
        await self._page.wait_for_timeout(ms)

    async def transition(self, steps: Sequence[ScenarioStep]) -> None:
        """Replay a scenario on this page."""
        await transition(self, steps)

    # -- Elements ------------------------------------------------------------

    async def element(self, selector: str | None = None) -> ScenarioElement:
        """First element matching *selector*, or the document root when omitted."""
        packed = await self._page.evaluate_handle(PAGE_QUERY_ONE_JS, selector or ROOT_SELECTOR)
        try:
            found = await _unpack_one(packed, self._fallback, implicit=not selector)
        finally:
            await packed.dispose()
        if found is None:
            raise ElementNotFoundError(selector or ROOT_SELECTOR)
        return found

    async def element_array(self, selector: str) -> list[ScenarioElement]:
        packed = await self._page.evaluate_handle(PAGE_QUERY_ALL_JS, selector)
        return await _unpack_all(packed, self._fallback)

    async def map(self, mapping: MappingTable | Mapping[str, Mapping[str, Any]]) -> ExtractionResult:
        """Extract *mapping* from the document root."""
        return await (await self.element()).map(mapping)

    async def map_array(
        self, selector: str, mapping: MappingTable | Mapping[str, Mapping[str, Any]]
    ) -> list[ExtractionResult]:
        return await (await self.element()).map_array(selector, mapping)

    async def close(self) -> None:
        await self._page.close()


class ScenarioBrowser:
    """Owns a Playwright browser and the pages opened from it."""

    def __init__(
        self,
        browser: Browser,
        playwright: Playwright | None = None,
        config: ScenaristConfig | None = None,
    ) -> None:
        self._browser = browser
        self._playwright = playwright
        self._config = config or ScenaristConfig()

    # -- Browser Lifecycle ---------------------------------------------------

    @classmethod
    async def launch(cls, config: ScenaristConfig | None = None) -> ScenarioBrowser:
        """Start Playwright and launch the configured browser."""
        from playwright.async_api import async_playwright

        config = config or ScenaristConfig()
        playwright = await async_playwright().start()
        try:
            browser_type = getattr(playwright, config.browser)
            browser = await browser_type.launch(headless=config.headless, slow_mo=config.slow_mo_ms)
        except Exception:
            await playwright.stop()
            raise
        logger.info("Launched %s (headless=%s)", config.browser, config.headless)
        return cls(browser, playwright, config)

    async def new_page(self, url: str | None = None) -> ScenarioPage:
        """Open a page, navigating to *url* when given."""
        page = await self._browser.new_page()
        page.set_default_timeout(self._config.timeout_ms)
        result = ScenarioPage(page, fallback=self._config.snapshot_fallback)
        if url:
            await result.goto(url)
        return result

    async def close(self) -> None:
        """Close the browser and stop Playwright. Open pages become unusable."""
        try:
            await self._browser.close()
        finally:
            if self._playwright is not None:
                await self._playwright.stop()
                self._playwright = None
        logger.info("Browser closed")

    async def __aenter__(self) -> ScenarioBrowser:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
