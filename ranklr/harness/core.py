"""
Session harness core primitives.

- run_case:  play one puzzle to completion with a given player.
- run_batch: play many puzzles in sequence (optionally a sample prefix).

Every pick goes through the same path a UI would use: validate the item
against the pool, `toggle_selection` it, then `submit_guess` once the
selection is full. The attempt budget lives in the game state, not here.

These functions are intentionally UI-agnostic so they can be reused by
a CLI app, a notebook, or tests without changes.
"""

from __future__ import annotations
import logging
import time
from typing import Dict, List, Sequence

from ranklr.datasets.models import Puzzle
from ranklr.engine import (
    MAX_ATTEMPTS, SLOTS, GameState, can_submit, new_game, phase, submit_guess,
    toggle_selection, validate_pick,
)
from ranklr.engine.scoring import pattern

logger = logging.getLogger(__name__)


def _select(state: GameState, picks: Sequence[str], pool: Sequence[str]) -> GameState:
    """Toggle `picks` in rank order onto an empty selection."""
    if len(picks) != SLOTS or len(set(picks)) != SLOTS:
        raise ValueError(f"player must pick {SLOTS} distinct items; got {list(picks)}")
    for item in picks:
        if not validate_pick(item, pool):
            raise ValueError(f"player picked an item outside the pool: {item!r}")
        state = toggle_selection(state, item)
    return state


def run_case(
        player,
        puzzle: Puzzle,
        *,
        max_attempts: int = MAX_ATTEMPTS,
        seed: int | None = None,
) -> Dict:
    """
    Execute one session until the player wins or the attempt budget is used.

    Args:
        player:        an object implementing BasePlayer with next_selection(state)
        puzzle:        a validated Puzzle
        max_attempts:  attempt budget for the session (default 5)
        seed:          RNG seed to make player choices reproducible

    Returns:
        dict with keys:
            puzzle_id (str), success (bool), guesses (int), time_ms (float),
            history (list[(picks, pattern)]), answer (list[str])
    """
    player.reset(pool=list(puzzle.possible_answers), seed=seed)
    state = new_game(puzzle.id, max_attempts=max_attempts)

    t0 = time.time()
    while not state.is_complete:
        picks = player.next_selection({
            "attempt": state.attempts_used + 1,
            "history": state.guess_history,
            "pool": puzzle.possible_answers,
        })
        state = _select(state, picks, puzzle.possible_answers)
        if not can_submit(state):
            raise ValueError(f"selection not submittable: {state.current_selection}")
        state = submit_guess(state, puzzle.correct_answers)

    dt = (time.time() - t0) * 1000.0
    logger.debug("%s: %s in %d attempt(s)", puzzle.id, phase(state).value, state.attempts_used)
    return {
        "puzzle_id": puzzle.id,
        "success": state.is_won,
        "guesses": state.attempts_used,
        "time_ms": dt,
        "history": [(list(g.selected_answers), pattern(g.feedback)) for g in state.guess_history],
        "answer": list(puzzle.correct_answers),
    }


def run_batch(
        player,
        puzzles: List[Puzzle],
        *,
        max_attempts: int = MAX_ATTEMPTS,
        seed: int | None = None,
        sample: int | None = None,
) -> List[Dict]:
    """
    Run many sessions back-to-back. If 'sample' is provided, only the first K
    puzzles are played, to speed up quick experiments.

    Each case's seed is derived from the base seed to make runs reproducible
    but not identical across cases (seed + index).
    """
    pool = list(puzzles)
    if sample is not None:
        pool = pool[:sample]

    out: List[Dict] = []
    for idx, puzzle in enumerate(pool, start=1):
        case_seed = None if seed is None else (seed + idx)
        out.append(run_case(player, puzzle, max_attempts=max_attempts, seed=case_seed))
    return out
