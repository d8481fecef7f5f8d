from .models import POOL_SIZE, Puzzle
from .validator import (
    BatchReport, PuzzleReport, Violation,
    format_report, pretty_summary, record_id, validate_batch, validate_puzzle,
)
from .io import read_records, write_records
from .repository import (
    FirestorePuzzleRepository, JsonPuzzleRepository, PuzzleRepository, RepositoryError,
    load_today_puzzle,
)

__all__ = [
    "POOL_SIZE", "Puzzle", "Violation", "PuzzleReport", "BatchReport",
    "validate_puzzle", "validate_batch", "record_id", "pretty_summary", "format_report",
    "read_records", "write_records",
    "PuzzleRepository", "JsonPuzzleRepository", "FirestorePuzzleRepository",
    "RepositoryError", "load_today_puzzle",
]
