"""
Best-feedback aggregation over a guess history.

Given:
  - an item from the puzzle's pool
  - the guesses submitted so far (each with its per-slot feedback)

Return:
  - the best verdict that item has ever earned, or None if it was never guessed.

Priority: CORRECT > WRONG_POSITION > MISSING > None.

This is a monotone "best ever" reduction, not "most recent": a later, worse
placement never downgrades a badge the item already earned. The answer bank
uses it to color every pool item; it's a bounded scan (<= 5 guesses x 5 slots)
so it is recomputed on demand rather than cached.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Optional

from .scoring import Verdict
from .state import Guess

logger = logging.getLogger(__name__)

# Higher rank wins. None (never guessed) is implicitly rank 0.
_RANK: Dict[Verdict, int] = {
    Verdict.MISSING: 1,
    Verdict.WRONG_POSITION: 2,
    Verdict.CORRECT: 3,
}


def best_feedback(item: str, history: Iterable[Guess]) -> Optional[Verdict]:
    """
    Reduce `history` to the best verdict `item` has received.

    The result is independent of the order of `history`.
    """
    best: Optional[Verdict] = None
    for guess in history:
        for selected, verdict in zip(guess.selected_answers, guess.feedback):
            if selected != item:
                continue
            if best is None or _RANK[verdict] > _RANK[best]:
                best = verdict
            if best is Verdict.CORRECT:
                return best  # can't be superseded
            break  # an item appears at most once per guess
    return best


def annotate_pool(pool: Iterable[str], history: Iterable[Guess]) -> Dict[str, Optional[Verdict]]:
    """
    Map every pool item (in pool order) to its best verdict so far.
    """
    guesses = list(history)
    out = {item: best_feedback(item, guesses) for item in pool}
    logger.debug("annotated %d pool items from %d guesses", len(out), len(guesses))
    return out
