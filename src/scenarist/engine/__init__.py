"""Scenarist engine — scenario replay and mapping-driven extraction.

- ScenarioBrowser / ScenarioPage / ScenarioElement: Playwright-backed pages and elements
- transition: replays a scenario step sequence against a page
- extract / extract_many: resolves a mapping table against an element tree
- TreeNode / PageActions: the browser capability contract the engine relies on
"""

from scenarist.engine.action_executor import perform, transition
from scenarist.engine.browser import ScenarioBrowser, ScenarioElement, ScenarioPage
from scenarist.engine.extraction import FieldOutcome, extract, extract_many
from scenarist.engine.protocols import PageActions, TreeNode

__all__ = [
    "FieldOutcome",
    "PageActions",
    "ScenarioBrowser",
    "ScenarioElement",
    "ScenarioPage",
    "TreeNode",
    "extract",
    "extract_many",
    "perform",
    "transition",
]
