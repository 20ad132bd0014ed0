"""Shared fixtures for Scenarist unit tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from fakes import FakeNode, FakePage


# ---------------------------------------------------------------------------
# Fixture: a small page tree
# ---------------------------------------------------------------------------

@pytest.fixture
def page_tree() -> FakeNode:
    """Document root resembling a listing page with repeated cards."""
    cards = [
        FakeNode(
            "div",
            children=[
                FakeNode("span", "Apple", class_="name"),
                FakeNode("a", "detail", href=f"/items/{i}", class_="link"),
            ],
            class_="card",
            data_id=str(i),
        )
        for i in (1, 2, 3)
    ]
    return FakeNode(
        "html",
        children=[
            FakeNode(
                "body",
                children=[
                    FakeNode("h1", "  Welcome  ", id="title"),
                    FakeNode("p", "Hello world", class_="lead", lang="en"),
                    FakeNode("div", children=cards, id="cards"),
                ],
            )
        ],
    )


@pytest.fixture
def fake_page() -> FakePage:
    return FakePage()


# ---------------------------------------------------------------------------
# Fixture: CSV file writer
# ---------------------------------------------------------------------------

@pytest.fixture
def write_csv(tmp_path: Path):
    """Return a function that writes CSV text to a file and returns its path."""

    def _write(content: str, name: str = "input.csv") -> Path:
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sample_scenario_csv() -> str:
    """A valid scenario with one row of each action kind."""
    return """\
action,selector,value,waitTime
Click,#click-button,,
Select,#select-box,b;c,100
Input,#input-box,#bind:query,
"""


@pytest.fixture
def sample_mapping_csv() -> str:
    return """\
name,selector,property
title,h1,textContent
lead,p.lead,lang
"""
