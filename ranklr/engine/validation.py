"""
Lightweight pick validation.

This module answers the question: "May the player toggle this item right now?"
An item is a valid pick iff:
  - it is a string
  - it is a member of the puzzle's pool (the 20 possible answers)

Whether the game still accepts toggles at all is the state machine's call
(`can_toggle`); this check only covers the item itself.
"""

from typing import Iterable


def validate_pick(item: object, pool: Iterable[str]) -> bool:
    """
    Return True if `item` may be selected from `pool`.

    Unlike word lists, pool items are matched exactly: no case folding or
    whitespace stripping, since items are display strings ("New York City").
    """
    if not isinstance(item, str):
        return False
    return item in set(pool)
