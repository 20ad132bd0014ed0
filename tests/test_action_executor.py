"""Unit tests for scenarist.engine.action_executor — scenario replay."""

from __future__ import annotations

import asyncio

import pytest

from fakes import FakePage
from scenarist.engine.action_executor import perform, transition
from scenarist.errors import ActionFailedError
from scenarist.models import ActionKind, ScenarioStep
from scenarist.scenario import load_scenario_records


# ---------------------------------------------------------------------------
# 1. Dispatch per action kind
# ---------------------------------------------------------------------------

class TestPerform:

    def test_click(self, fake_page: FakePage):
        asyncio.run(perform(fake_page, ScenarioStep(ActionKind.CLICK, "#btn")))
        assert fake_page.calls == [("click", "#btn")]

    def test_select_passes_every_value(self, fake_page: FakePage):
        asyncio.run(perform(fake_page, ScenarioStep(ActionKind.SELECT, "#s", "a;b")))
        assert fake_page.calls == [("select", "#s", "a", "b")]

    def test_input_types_value(self, fake_page: FakePage):
        asyncio.run(perform(fake_page, ScenarioStep(ActionKind.INPUT, "#box", "hi")))
        assert fake_page.calls == [("type", "#box", "hi")]

    def test_input_without_value_types_nothing(self, fake_page: FakePage):
        asyncio.run(perform(fake_page, ScenarioStep(ActionKind.INPUT, "#box", None)))
        assert fake_page.calls == [("type", "#box", "")]

    def test_wait_follows_action(self, fake_page: FakePage):
        asyncio.run(perform(fake_page, ScenarioStep(ActionKind.INPUT, "#box", "hi", 100)))
        assert fake_page.calls == [("type", "#box", "hi"), ("wait_for", 100)]

    def test_zero_wait_is_skipped(self, fake_page: FakePage):
        asyncio.run(perform(fake_page, ScenarioStep(ActionKind.CLICK, "#btn", wait_time=0)))
        assert fake_page.calls == [("click", "#btn")]


# ---------------------------------------------------------------------------
# 2. transition()
# ---------------------------------------------------------------------------

class TestTransition:

    def test_single_click_without_wait(self, fake_page: FakePage):
        steps = load_scenario_records([{"action": "Click", "selector": "#btn"}])
        asyncio.run(transition(fake_page, steps))
        assert fake_page.calls == [("click", "#btn")]

    def test_steps_run_in_order_with_waits(self, fake_page: FakePage):
        steps = [
            ScenarioStep(ActionKind.CLICK, "#a", wait_time=10),
            ScenarioStep(ActionKind.SELECT, "#b", "x"),
            ScenarioStep(ActionKind.INPUT, "#c", "text", 20),
        ]
        asyncio.run(transition(fake_page, steps))
        assert fake_page.calls == [
            ("click", "#a"),
            ("wait_for", 10),
            ("select", "#b", "x"),
            ("type", "#c", "text"),
            ("wait_for", 20),
        ]

    def test_empty_sequence_does_nothing(self, fake_page: FakePage):
        asyncio.run(transition(fake_page, []))
        assert fake_page.calls == []

    def test_failure_aborts_remaining_steps(self):
        page = FakePage(fail_on={"#b": RuntimeError("element not found")})
        steps = [
            ScenarioStep(ActionKind.CLICK, "#a"),
            ScenarioStep(ActionKind.CLICK, "#b"),
            ScenarioStep(ActionKind.CLICK, "#c"),
        ]
        with pytest.raises(ActionFailedError) as excinfo:
            asyncio.run(transition(page, steps))
        assert page.calls == [("click", "#a")]
        assert excinfo.value.index == 2
        assert excinfo.value.step == steps[1]
        assert isinstance(excinfo.value.__cause__, RuntimeError)
        assert "element not found" in str(excinfo.value)

    def test_next_step_waits_for_settle_delay(self):
        """A real delay completes before the next action starts."""
        events: list[str] = []

        class SleepingPage(FakePage):
            async def wait_for(self, ms: int) -> None:
                events.append("wait-start")
                await asyncio.sleep(ms / 1000)
                events.append("wait-end")

            async def click(self, selector: str) -> None:
                events.append(f"click {selector}")

        steps = [ScenarioStep(ActionKind.CLICK, "#a", wait_time=20), ScenarioStep(ActionKind.CLICK, "#b")]
        asyncio.run(transition(SleepingPage(), steps))
        assert events == ["click #a", "wait-start", "wait-end", "click #b"]
