from __future__ import annotations

import datetime as dt
import json
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List

_EXTRA_FRACTION_RE = re.compile(r"(\.[0-9]{6})[0-9]+")


def parse_instant(value: Any) -> Any:
    """
    Turn an ISO-8601 string (including a trailing 'Z') into a datetime.
    Anything unparseable is returned unchanged so the validator can report it.
    """
    if not isinstance(value, str):
        return value
    try:
        # Firestore sends nanoseconds; datetime holds microseconds.
        text = _EXTRA_FRACTION_RE.sub(r"\1", value.replace("Z", "+00:00"))
        return dt.datetime.fromisoformat(text)
    except ValueError:
        return value


def _normalize(record: Any, default_id: str | None = None) -> Any:
    if not isinstance(record, dict):
        return record
    out = dict(record)
    if default_id is not None and "id" not in out:
        out["id"] = default_id
    if "publishInstant" in out:
        out["publishInstant"] = parse_instant(out["publishInstant"])
    return out


def read_records(p: Path | str) -> List[Any]:
    """
    Read raw puzzle records from JSON.

    Accepts:
      - a file holding a list of records
      - a file holding an object keyed by puzzle id
      - a file holding a single record (an object with an "id")
      - a directory of *.json files, one record each (file stem fills a missing id)

    Raises FileNotFoundError if the path doesn't exist.
    """
    p = Path(p)
    if not p.exists():
        raise FileNotFoundError(p)

    if p.is_dir():
        return [
            _normalize(json.loads(f.read_text(encoding="utf-8")), default_id=f.stem)
            for f in sorted(p.glob("*.json"))
        ]

    data = json.loads(p.read_text(encoding="utf-8"))
    if isinstance(data, list):
        return [_normalize(rec) for rec in data]
    if isinstance(data, dict) and "id" in data:
        return [_normalize(data)]
    if isinstance(data, dict):
        return [_normalize(rec, default_id=key) for key, rec in data.items()]
    raise ValueError(f"{p}: expected a JSON list or object of puzzle records")


def _json_default(value: Any) -> Any:
    if isinstance(value, dt.datetime):
        return value.isoformat()
    raise TypeError(f"not JSON serializable: {type(value).__name__}")


def write_records(records: Iterable[Dict[str, Any]], p: Path | str) -> str:
    """
    Write records as a JSON list (datetimes as ISO-8601). Returns the path written.
    """
    p = Path(p)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(list(records), indent=2, default=_json_default) + "\n",
                 encoding="utf-8")
    return str(p)
