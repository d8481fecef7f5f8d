"""
Players drive a session the way a person would: each turn they hand the
harness five ranked picks from the puzzle's pool. `@register` makes a player
available to `create_player` and the run CLI under its `id`.
"""

from __future__ import annotations

import random
from typing import Dict, Iterable, List, Sequence, Type

from ranklr.engine import SLOTS

REGISTRY: Dict[str, Type["BasePlayer"]] = {}


def register(cls: Type["BasePlayer"]) -> Type["BasePlayer"]:
    pid = getattr(cls, "id", None)
    if not pid:
        raise ValueError(f"{cls.__name__} needs an `id` to be registered")
    if pid in REGISTRY:
        raise ValueError(f"player id {pid!r} is already taken by {REGISTRY[pid].__name__}")
    REGISTRY[pid] = cls
    return cls


class BasePlayer:
    id = "base"
    name = "Base"
    version = "0.0.0"

    def __init__(self):
        self.pool: List[str] = []
        self.rng = random.Random()

    def reset(self, *, pool: Sequence[str], seed: int | None = None) -> None:
        """Start a new puzzle; the harness calls this before the first turn."""
        self.pool = list(pool)
        if seed is not None:
            self.rng.seed(seed)

    def draw(self, k: int = SLOTS, exclude: Iterable[str] = ()) -> List[str]:
        """`k` distinct pool items outside `exclude`, in random order."""
        skip = set(exclude)
        return self.rng.sample([it for it in self.pool if it not in skip], k)

    def next_selection(self, state: dict) -> List[str]:
        """
        `state` carries "history" (the submitted Guess tuple) and "pool".
        Returns SLOTS distinct pool items, rank 1 first.
        """
        raise NotImplementedError(f"{type(self).__name__} must choose its own picks")
