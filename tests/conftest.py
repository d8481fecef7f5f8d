"""
Shared puzzle fixtures.

The canonical test puzzle: pool "A".."T", ranked answer A, B, C, D, E,
published at midnight Eastern on its id date.
"""

import pytest

from ranklr.dates import local_midnight

POOL = [chr(c) for c in range(ord("A"), ord("T") + 1)]
ANSWER = ["A", "B", "C", "D", "E"]


def _record(puzzle_id="2025-01-15", **overrides):
    rec = {
        "id": puzzle_id,
        "publishInstant": (overrides.pop("publishInstant") if "publishInstant" in overrides
                           else local_midnight(puzzle_id)),
        "question": "What are the 5 most populous US states?",
        "source": "https://www.census.gov/data/tables.html",
        "sourceDate": "2024-12-19",
        "possibleAnswers": list(POOL),
        "correctAnswers": list(ANSWER),
    }
    rec.update(overrides)
    return rec


@pytest.fixture
def make_record():
    """Factory for a valid raw record; keyword overrides replace fields."""
    return _record


@pytest.fixture
def pool():
    return list(POOL)


@pytest.fixture
def answer():
    return list(ANSWER)
