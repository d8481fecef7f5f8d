"""
Random player.

Strategy:
  - Pick SLOTS distinct pool items uniformly at random, in random order.
  - Ignores all feedback.

Notes:
  - Deterministic across runs with the same seed (via BasePlayer.rng).
  - A baseline to verify the pipeline; with 20 items and 5 ranked slots it
    essentially never wins.
"""

from __future__ import annotations

from typing import List

from .base import BasePlayer, register


@register
class RandomPlayer(BasePlayer):
    id = "random"
    name = "Random"
    version = "1.0.0"

    def next_selection(self, state: dict) -> List[str]:
        return self.draw()
