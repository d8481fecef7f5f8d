from .scoring import SLOTS, Verdict, evaluate, is_all_correct
from .state import (
    MAX_ATTEMPTS, GameState, Guess, Phase,
    can_submit, can_toggle, new_game, phase, selected_slot, submit_guess, toggle_selection,
)
from .aggregation import annotate_pool, best_feedback
from .validation import validate_pick

__all__ = [
    "SLOTS", "MAX_ATTEMPTS", "Verdict", "Phase", "Guess", "GameState",
    "evaluate", "is_all_correct", "new_game", "phase", "can_toggle", "can_submit",
    "selected_slot", "toggle_selection", "submit_guess",
    "best_feedback", "annotate_pool", "validate_pick",
]
