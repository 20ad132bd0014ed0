"""Scenarist Action Executor — Replays scenario steps against a live page.

Maps each :class:`ScenarioStep` kind (Click, Select, Input) to the matching
page primitive, then waits for the step's settle delay. Steps run strictly
in order because each one acts on the DOM the previous one left behind. The
first failing step stops the replay.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Sequence

from scenarist.engine.protocols import PageActions
from scenarist.errors import ActionFailedError
from scenarist.models import ActionKind, ScenarioStep

logger = logging.getLogger("scenarist.engine.action_executor")


async def perform(page: PageActions, step: ScenarioStep) -> None:
    """Perform a single step, including its settle delay."""
    match step.kind:
        case ActionKind.CLICK:
            await page.click(step.selector)
        case ActionKind.SELECT:
            await page.select(step.selector, *step.select_values())
        case ActionKind.INPUT:
            await page.type(step.selector, step.value or "")

    if step.wait_time:
        await page.wait_for(step.wait_time)


async def transition(page: PageActions, steps: Sequence[ScenarioStep]) -> None:
    """Replay *steps* in order.

    Raises:
        ActionFailedError: a step failed. Earlier steps have already taken
            effect on the page; later steps are not attempted.
    """
    logger.info("Replaying %d scenario step(s)", len(steps))
    for index, step in enumerate(steps, start=1):
        start = time.monotonic()
        try:
            await perform(page, step)
        except Exception as exc:
            logger.warning("Step %d %s %r failed: %s", index, step.kind.value, step.selector, exc)
            raise ActionFailedError(index, step, exc) from exc
        logger.debug(
            "Step %d %s %r done in %.0fms",
            index, step.kind.value, step.selector, (time.monotonic() - start) * 1000,
        )
