"""
Feedback player.

Strategy:
  - Lock every item already seen CORRECT into its slot.
  - Re-place items known to be in the top 5 (WRONG_POSITION) into open slots
    they have not been tried in yet.
  - Never pick an item that came back MISSING.
  - Fill whatever is left with items never guessed, at random.

Notes:
  - Reads the pool the same way the answer bank colors it (best feedback per
    item), plus per-slot history to avoid repeating a known-wrong placement.
  - Deterministic across runs with the same seed (via BasePlayer.rng).
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Optional, Set

from ranklr.engine import SLOTS, Verdict, annotate_pool
from .base import BasePlayer, register


@register
class FeedbackPlayer(BasePlayer):
    id = "feedback"
    name = "Feedback"
    version = "1.0.0"

    def next_selection(self, state: dict) -> List[str]:
        history = state["history"]
        best = annotate_pool(self.pool, history)

        slots: List[Optional[str]] = [None] * SLOTS
        tried: Dict[str, Set[int]] = defaultdict(set)
        for guess in history:
            for i, (item, verdict) in enumerate(zip(guess.selected_answers, guess.feedback)):
                if verdict is Verdict.CORRECT:
                    slots[i] = item
                elif verdict is Verdict.WRONG_POSITION:
                    tried[item].add(i)

        # Known top-5 items go to slots they haven't been wrong in.
        known = [it for it, v in best.items() if v is Verdict.WRONG_POSITION]
        self.rng.shuffle(known)
        leftovers: List[str] = []
        for item in known:
            open_slots = [i for i in range(SLOTS) if slots[i] is None and i not in tried[item]]
            if open_slots:
                slots[self.rng.choice(open_slots)] = item
            else:
                leftovers.append(item)

        # Then anything never guessed, then (if we must) anything not ruled out.
        fresh = [it for it, v in best.items() if v is None]
        self.rng.shuffle(fresh)
        fallback = [it for it, v in best.items() if v is not Verdict.MISSING]
        fill = leftovers + fresh + fallback + list(self.pool)

        chosen = {it for it in slots if it is not None}
        for i in range(SLOTS):
            if slots[i] is not None:
                continue
            for item in fill:
                if item not in chosen:
                    slots[i] = item
                    chosen.add(item)
                    break

        return [it for it in slots if it is not None]
