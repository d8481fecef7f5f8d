"""
Game state machine for one puzzle session.

A session moves through three phases:
  - IN_PROGRESS : attempts remain and no guess has been fully correct
  - WON         : some guess scored CORRECT in every slot
  - LOST        : the attempt budget is used up without a win

WON and LOST are terminal (both set `is_complete`).

GameState and Guess are immutable values. The two transitions,
`toggle_selection` and `submit_guess`, are pure (state, input) -> state
functions. A transition whose guard fails returns the *same* state object,
so callers can poll `can_toggle` / `can_submit` every render, or compare
identities, without ever catching an exception.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Sequence, Tuple

from .scoring import SLOTS, Verdict, evaluate, is_all_correct

# Single source of truth for the per-session attempt budget.
MAX_ATTEMPTS = 5


class Phase(str, Enum):
    IN_PROGRESS = "in-progress"
    WON = "won"
    LOST = "lost"


@dataclass(frozen=True)
class Guess:
    """One submitted guess; feedback is computed once, at creation."""
    sequence_number: int                  # 1-based submission order
    selected_answers: Tuple[str, ...]     # SLOTS distinct pool items, rank order
    feedback: Tuple[Verdict, ...]         # aligned with selected_answers


@dataclass(frozen=True)
class GameState:
    date: str
    current_selection: Tuple[str, ...] = ()
    guess_history: Tuple[Guess, ...] = ()
    attempts_used: int = 0
    max_attempts: int = MAX_ATTEMPTS
    is_complete: bool = False
    is_won: bool = False


def new_game(date: str, max_attempts: int = MAX_ATTEMPTS) -> GameState:
    """Fresh session for `date` with an empty history."""
    if max_attempts < 1:
        raise ValueError(f"max_attempts must be positive; got {max_attempts}")
    return GameState(date=date, max_attempts=max_attempts)


def phase(state: GameState) -> Phase:
    if state.is_won:
        return Phase.WON
    if state.is_complete:
        return Phase.LOST
    return Phase.IN_PROGRESS


def can_toggle(state: GameState) -> bool:
    return not state.is_complete


def can_submit(state: GameState) -> bool:
    return not state.is_complete and len(state.current_selection) == SLOTS


def selected_slot(state: GameState, item: str) -> Optional[int]:
    """1-based rank slot `item` would occupy if submitted now, or None."""
    try:
        return state.current_selection.index(item) + 1
    except ValueError:
        return None


def toggle_selection(state: GameState, item: str) -> GameState:
    """
    Select or deselect `item`.

    - already selected -> removed; later picks shift down one rank slot
    - not selected and fewer than SLOTS picks -> appended at the next slot
    - otherwise (selection full, or game complete) -> unchanged state
    """
    if not can_toggle(state):
        return state

    sel = state.current_selection
    if item in sel:
        return replace(state, current_selection=tuple(s for s in sel if s != item))
    if len(sel) < SLOTS:
        return replace(state, current_selection=sel + (item,))
    return state


def submit_guess(state: GameState, correct_answers: Sequence[str]) -> GameState:
    """
    Score the current selection against `correct_answers` and record it.

    Returns the unchanged state unless exactly SLOTS items are selected and the
    game is still in progress.
    """
    if not can_submit(state):
        return state

    feedback = evaluate(state.current_selection, correct_answers)
    guess = Guess(
        sequence_number=state.attempts_used + 1,
        selected_answers=state.current_selection,
        feedback=tuple(feedback),
    )
    attempts = state.attempts_used + 1

    # Win has priority: a correct final attempt is a win, not a loss.
    won = is_all_correct(guess.feedback)
    return replace(
        state,
        current_selection=(),
        guess_history=state.guess_history + (guess,),
        attempts_used=attempts,
        is_won=won,
        is_complete=won or attempts >= state.max_attempts,
    )
