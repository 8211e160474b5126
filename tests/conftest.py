"""Test setup for sitemark."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from sitemark.parser import parse_page  # noqa: E402
from sitemark.schemas import Page  # noqa: E402

ENCYCLOPEDIA_PAGE = """
{
    title: "Gravity",
    body: p "Gravity is " (b "the") " force between masses." ;
          p "See " l "orbits" /"physics/orbits" " and " l ("the " i "history") #"history",
    children: {
        {
            id: "history",
            title: "History",
            body: p "Studied by " l "Newton" @"https://en.wikipedia.org/wiki/Isaac_Newton",
            children: {
                { id: "einstein", title: "Relativity" b "era", body: p "Spacetime curvature." }
            }
        },
        { id: "formula", title: c "F = G m1 m2 / r^2", body: }
    }
}
"""


@pytest.fixture
def encyclopedia_source() -> str:
    """Markup source of a page with nested sections and every location form."""
    return ENCYCLOPEDIA_PAGE


@pytest.fixture
def encyclopedia_page() -> Page:
    return parse_page(ENCYCLOPEDIA_PAGE)
