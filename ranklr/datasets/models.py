from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple

# Candidate pool size shown to the player for one date.
POOL_SIZE = 20

# Raw record fields, as stored (camelCase, matching the document store).
FIELDS = (
    "id", "publishInstant", "question", "source", "sourceDate",
    "possibleAnswers", "correctAnswers",
)


@dataclass(frozen=True)
class Puzzle:
    """One day's puzzle. Only construct from records that passed validation."""
    id: str
    publish_instant: dt.datetime
    question: str
    source: str
    source_date: str
    possible_answers: Tuple[str, ...]   # POOL_SIZE items, display order only
    correct_answers: Tuple[str, ...]    # SLOTS items, rank order (1 = best)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Puzzle":
        """
        Build a Puzzle from a raw record, refusing malformed ones.

        Raises ValueError listing every violation the validator found.
        """
        # Imported here: the validator itself depends on this module's constants.
        from .validator import validate_puzzle

        violations = validate_puzzle(record)
        if violations:
            details = "; ".join(f"{v.field}: {v.issue}" for v in violations)
            raise ValueError(f"puzzle {record.get('id', 'unknown')} is invalid: {details}")
        return cls(
            id=record["id"],
            publish_instant=record["publishInstant"],
            question=record["question"],
            source=record["source"],
            source_date=record["sourceDate"],
            possible_answers=tuple(record["possibleAnswers"]),
            correct_answers=tuple(record["correctAnswers"]),
        )

    def to_record(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "publishInstant": self.publish_instant,
            "question": self.question,
            "source": self.source,
            "sourceDate": self.source_date,
            "possibleAnswers": list(self.possible_answers),
            "correctAnswers": list(self.correct_answers),
        }
