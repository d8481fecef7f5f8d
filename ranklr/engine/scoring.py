"""
Ranklr-style scoring (feedback) for a single (selection, answer) pair.

Conventions:
  - Verdict.CORRECT        : right item in the right rank slot
  - Verdict.WRONG_POSITION : item is in the top 5, but at another rank
  - Verdict.MISSING        : item is not in the top 5 at all

The verdict values are the wire names stored with each guess
("correct", "wrong-position", "missing").

This implementation is:
  - position-wise (slot i of the selection is compared to slot i of the answer)
  - multiplicity-free (both sequences are duplicate-free by construction, so
    no second pass for repeated items is needed)
  - deterministic (same inputs -> same outputs)
"""

from __future__ import annotations

from enum import Enum
from typing import List, Sequence

# Single source of truth for the number of rank slots in a guess/answer.
SLOTS = 5


class Verdict(str, Enum):
    CORRECT = "correct"
    WRONG_POSITION = "wrong-position"
    MISSING = "missing"


def evaluate(selected: Sequence[str], correct: Sequence[str]) -> List[Verdict]:
    """
    Compute per-slot feedback for `selected` against the ranked `correct` list.

    Preconditions:
      - len(selected) == len(correct) == SLOTS
      - `selected` has no duplicates (the state machine guarantees this)

    Returns:
      - list of SLOTS verdicts, aligned with `selected`

    Examples:
      evaluate("EDCBA", "ABCDE") -> [WRONG_POSITION, WRONG_POSITION, CORRECT,
                                     WRONG_POSITION, WRONG_POSITION]
    """
    if len(selected) != SLOTS or len(correct) != SLOTS:
        raise ValueError(
            f"selection and answer must both have {SLOTS} items; "
            f"got {len(selected)} and {len(correct)}"
        )

    answer_set = set(correct)
    out: List[Verdict] = []
    for i, item in enumerate(selected):
        if item == correct[i]:
            out.append(Verdict.CORRECT)
        elif item in answer_set:
            out.append(Verdict.WRONG_POSITION)
        else:
            out.append(Verdict.MISSING)
    return out


def is_all_correct(feedback: Sequence[Verdict]) -> bool:
    """True iff every slot is CORRECT (and there is at least one slot)."""
    return len(feedback) > 0 and all(v is Verdict.CORRECT for v in feedback)


def pattern(feedback: Sequence[Verdict]) -> str:
    """
    Compact one-char-per-slot rendering used by the harness CSV:
    'C' correct, 'W' wrong position, '-' missing.
    """
    chars = {Verdict.CORRECT: "C", Verdict.WRONG_POSITION: "W", Verdict.MISSING: "-"}
    return "".join(chars[v] for v in feedback)
