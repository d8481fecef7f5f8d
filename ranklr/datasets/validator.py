"""
Puzzle record validator for ranklr.

What this module does:
- Check each stored puzzle record before it is served: id/date keys, the
  publish instant (midnight Eastern on the id's date), question wording,
  source URL, and the shape of the answer pool and ranked answer.
- Report EVERY violation per record (no short-circuit), each with the field,
  a human-readable issue, and expected vs. actual.
- Keep records independent: one bad record never affects another's report.
- Return structured reports (dataclasses -> plain dicts for JSON) and provide
  a pretty one-line summary plus an itemized plain-text report.

Typical use:
    from ranklr.datasets import validate_batch, pretty_summary
    rep = validate_batch(JsonPuzzleRepository("puzzles.json").fetch_all_puzzles())
    print(pretty_summary(rep))
    sys.exit(rep.exit_code)
"""

from __future__ import annotations

import datetime as dt
import re
from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from urllib3.exceptions import LocationParseError
from urllib3.util import parse_url

from ranklr.dates import PUZZLE_TZ, is_date_key, is_local_midnight, to_local
from ranklr.engine.scoring import SLOTS
from .models import POOL_SIZE

UNKNOWN_ID = "unknown"

_SCHEME_RE = re.compile(r"[A-Za-z][A-Za-z0-9+.-]*")
_HOST_SCHEMES = ("http", "https")


# -----------------------------
# Dataclasses for structured reports
# -----------------------------

@dataclass
class Violation:
    """One failed check on one field of one record."""
    puzzle_id: str
    field: str
    issue: str                       # human-readable description
    expected: Optional[str] = None
    actual: Optional[str] = None


@dataclass
class PuzzleReport:
    """All violations found for a single record."""
    puzzle_id: str
    violations: List[Violation] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return not self.violations


@dataclass
class BatchReport:
    """Per-record reports for a batch, sorted by puzzle id."""
    reports: List[PuzzleReport] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.reports)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.reports if r.passed)

    @property
    def failed(self) -> int:
        return self.total - self.passed

    @property
    def exit_code(self) -> int:
        """Process exit status for the batch tool: 0 iff nothing failed."""
        return 1 if self.failed else 0

    @property
    def violations(self) -> List[Violation]:
        return [v for r in self.reports for v in r.violations]

    def as_dict(self) -> Dict:
        """Dataclass -> plain JSON-serializable dict (stable ordering)."""
        return {
            "total": self.total,
            "passed": self.passed,
            "failed": self.failed,
            "puzzles": [
                {"puzzle_id": r.puzzle_id, "passed": r.passed,
                 "violations": [asdict(v) for v in r.violations]}
                for r in self.reports
            ],
        }


# -----------------------------
# Helpers
# -----------------------------

def _type_name(value: Any) -> str:
    return "missing" if value is None else type(value).__name__


def _unique_count(items: Sequence[Any]) -> int:
    """Distinct items, tolerating unhashable junk in malformed records."""
    seen: List[Any] = []
    for x in items:
        if x not in seen:
            seen.append(x)
    return len(seen)


def is_valid_url(url: str) -> bool:
    """
    Well-formed absolute URL: an RFC 3986 scheme, no whitespace in the scheme
    or authority, and a host for http(s). Other schemes (mailto:, urn:) pass
    on the scheme alone.
    """
    scheme, sep, rest = url.partition(":")
    if not sep or not _SCHEME_RE.fullmatch(scheme):
        return False
    authority = rest[2:] if rest.startswith("//") else ""
    authority = re.split(r"[/?#]", authority, maxsplit=1)[0]
    if any(c.isspace() for c in authority):
        return False
    try:
        parsed = parse_url(url)
    except LocationParseError:
        return False
    if scheme.lower() in _HOST_SCHEMES and not parsed.host:
        return False
    return True


def record_id(record: Any) -> str:
    """The id a record is reported (and ordered) under; UNKNOWN_ID when unusable."""
    if not isinstance(record, Mapping):
        return UNKNOWN_ID
    rid = record.get("id")
    return rid if isinstance(rid, str) and rid else UNKNOWN_ID


class _Collector:
    """Accumulates violations for one record."""

    def __init__(self, puzzle_id: str):
        self.puzzle_id = puzzle_id
        self.violations: List[Violation] = []

    def add(self, field_name: str, issue: str,
            expected: Optional[str] = None, actual: Any = None) -> None:
        self.violations.append(Violation(
            puzzle_id=self.puzzle_id,
            field=field_name,
            issue=issue,
            expected=expected,
            actual=None if actual is None else str(actual),
        ))


# -----------------------------
# Field checks
# -----------------------------

def _check_date_key(out: _Collector, field_name: str, value: Any) -> None:
    if not isinstance(value, str):
        out.add(field_name, "Must be a string", "str", _type_name(value))
    elif not is_date_key(value):
        out.add(field_name, "Must follow YYYY-MM-DD format and be a real date",
                "YYYY-MM-DD", value)


def _check_publish_instant(out: _Collector, value: Any, puzzle_id: Any) -> None:
    if not isinstance(value, dt.datetime):
        out.add("publishInstant", "Must be a timestamp", "datetime", _type_name(value))
        return
    if value.tzinfo is None or value.utcoffset() is None:
        out.add("publishInstant", "Must be timezone-aware", "aware datetime", value.isoformat())
        return
    # Only comparable once the id itself is a usable date key.
    if is_date_key(puzzle_id) and not is_local_midnight(value, puzzle_id):
        local = to_local(value)
        out.add("publishInstant",
                "Must be midnight Eastern Time on the date in id",
                f"{puzzle_id} 00:00:00 ({PUZZLE_TZ})",
                f"{local.date().isoformat()} {local.strftime('%H:%M:%S')} ({PUZZLE_TZ})")


def _check_question(out: _Collector, value: Any) -> None:
    if not isinstance(value, str):
        out.add("question", "Must be a string", "str", _type_name(value))
        return
    if not value.endswith("?"):
        out.add("question", "Must end with a question mark", "ends with '?'",
                f"ends with {value[-1:]!r}")
    if "5" not in value:
        out.add("question", "Must contain the number 5", "contains '5'",
                "does not contain '5'")


def _check_source(out: _Collector, value: Any) -> None:
    if not isinstance(value, str):
        out.add("source", "Must be a string", "str", _type_name(value))
    elif not is_valid_url(value):
        out.add("source", "Must be a valid URL", "valid URL", value)


def _check_string_list(out: _Collector, field_name: str, value: Any, size: int) -> bool:
    """Shape checks shared by both answer lists. Returns False if not a list."""
    if not isinstance(value, (list, tuple)):
        out.add(field_name, "Must be a list", "list", _type_name(value))
        return False

    if len(value) != size:
        out.add(field_name, f"Must have exactly {size} items",
                f"{size} items", f"{len(value)} items")

    non_strings = [x for x in value if not isinstance(x, str)]
    if non_strings:
        out.add(field_name, "All items must be strings", "all strings",
                f"{len(non_strings)} non-string items")

    unique = _unique_count(value)
    if unique != len(value):
        out.add(field_name, "All items must be unique", f"{size} unique items",
                f"{unique} unique items")
    return True


# -----------------------------
# Public API
# -----------------------------

def validate_puzzle(record: Any) -> List[Violation]:
    """
    Validate one raw puzzle record; returns every violation found (empty = valid).

    Expected fields: id, publishInstant, question, source, sourceDate,
    possibleAnswers, correctAnswers.
    """
    out = _Collector(record_id(record))
    if not isinstance(record, Mapping):
        out.add("record", "Must be an object", "mapping", _type_name(record))
        return out.violations

    puzzle_id = record.get("id")

    _check_date_key(out, "id", puzzle_id)
    _check_publish_instant(out, record.get("publishInstant"), puzzle_id)
    _check_question(out, record.get("question"))
    _check_source(out, record.get("source"))
    _check_date_key(out, "sourceDate", record.get("sourceDate"))

    possible = record.get("possibleAnswers")
    correct = record.get("correctAnswers")
    possible_ok = _check_string_list(out, "possibleAnswers", possible, POOL_SIZE)
    correct_ok = _check_string_list(out, "correctAnswers", correct, SLOTS)

    if possible_ok and correct_ok:
        missing = [a for a in correct if a not in possible]
        if missing:
            out.add("correctAnswers", "All items must exist in possibleAnswers",
                    "all in possibleAnswers", f"missing: {missing}")

    return out.violations


def validate_batch(
        records: Union[Iterable[Mapping[str, Any]], Mapping[str, Mapping[str, Any]]],
        *,
        progress: Optional[Callable[[List[Any]], Iterable[Any]]] = None,
        on_report: Optional[Callable[[PuzzleReport], None]] = None,
) -> BatchReport:
    """
    Validate a batch of records, independently, and collect the reports.

    `records` may be a list of records, or a mapping keyed by puzzle id (the
    key stands in for a record with no id). Records are validated in id
    order, so the reports are stable whatever order the store returned.

    `progress` wraps the ordered records (e.g. `tqdm`); `on_report` is called
    with each report as soon as it is made.
    """
    if isinstance(records, Mapping):
        items = [
            {**rec, "id": key} if isinstance(rec, Mapping) and "id" not in rec else rec
            for key, rec in records.items()
        ]
    else:
        items = list(records)
    items.sort(key=record_id)

    reports: List[PuzzleReport] = []
    for rec in (progress(items) if progress else items):
        r = PuzzleReport(puzzle_id=record_id(rec), violations=validate_puzzle(rec))
        reports.append(r)
        if on_report:
            on_report(r)
    return BatchReport(reports=reports)


def pretty_summary(report: BatchReport) -> str:
    """
    Produce a compact, human-friendly one-liner for console/docs.

    Example:
        puzzles=42 | passed=41 | failed=1 | FAIL
    """
    if report.total == 0:
        return "puzzles=0 | no puzzles found"
    status = "OK" if report.failed == 0 else "FAIL"
    return f"puzzles={report.total} | passed={report.passed} | failed={report.failed} | {status}"


def format_report(report: BatchReport) -> str:
    """
    Itemized, per-record diagnostics for every failing record (plain text).
    """
    lines: List[str] = []
    for r in report.reports:
        if r.passed:
            continue
        lines.append(f"Puzzle: {r.puzzle_id}")
        for i, v in enumerate(r.violations, 1):
            lines.append(f"   {i}. {v.field}: {v.issue}")
            if v.expected is not None:
                lines.append(f"      Expected: {v.expected}")
                lines.append(f"      Actual: {v.actual}")
        lines.append("")
    return "\n".join(lines)
