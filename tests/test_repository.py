import datetime as dt
import json
from pathlib import Path

import pytest
import requests
from ranklr.datasets import (
    FirestorePuzzleRepository, JsonPuzzleRepository, RepositoryError, load_today_puzzle,
    read_records, validate_batch, write_records,
)
from ranklr.datasets.repository import decode_document

UTC = dt.timezone.utc


# --- JSON backend ---
def test_write_then_read_records(tmp_path: Path, make_record):
    p = write_records([make_record()], tmp_path / "puzzles.json")
    (rec,) = read_records(p)
    assert rec["publishInstant"] == dt.datetime(2025, 1, 15, 5, 0, tzinfo=UTC)
    assert validate_batch([rec]).exit_code == 0


def test_read_records_layouts(tmp_path: Path):
    keyed = tmp_path / "keyed.json"
    keyed.write_text(json.dumps({"2025-01-15": {"question": "Top 5?"}}), encoding="utf-8")
    assert read_records(keyed)[0]["id"] == "2025-01-15"

    d = tmp_path / "dir"
    d.mkdir()
    (d / "2025-01-16.json").write_text(
        json.dumps({"publishInstant": "2025-01-16T05:00:00.000000000Z"}), encoding="utf-8")
    (rec,) = read_records(d)
    assert rec["id"] == "2025-01-16"
    assert rec["publishInstant"] == dt.datetime(2025, 1, 16, 5, 0, tzinfo=UTC)


def test_unparseable_instant_is_left_for_the_validator(tmp_path: Path):
    p = tmp_path / "bad.json"
    p.write_text(json.dumps([{"id": "2025-01-15", "publishInstant": "yesterday"}]),
                 encoding="utf-8")
    (rec,) = read_records(p)
    assert rec["publishInstant"] == "yesterday"


def test_json_repository(tmp_path: Path, make_record):
    p = write_records([make_record("2025-01-15"), make_record("2025-01-16")],
                      tmp_path / "puzzles.json")
    repo = JsonPuzzleRepository(p)
    assert len(repo.fetch_all_puzzles()) == 2
    assert repo.get_puzzle("2025-01-16")["id"] == "2025-01-16"
    assert repo.get_puzzle("2030-01-01") is None

    today = load_today_puzzle(repo, now=dt.datetime(2025, 1, 16, 15, 0, tzinfo=UTC))
    assert today.id == "2025-01-16"
    assert load_today_puzzle(repo, now=dt.datetime(2030, 1, 1, 15, 0, tzinfo=UTC)) is None


def test_json_repository_missing_path(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        JsonPuzzleRepository(tmp_path / "nope.json").fetch_all_puzzles()


# --- Firestore backend (fake HTTP session) ---
class FakeResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._body = body or {}

    def json(self):
        return self._body

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, responses):
        self.headers = {}
        self.responses = list(responses)
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append((url, params, timeout, headers))
        r = self.responses.pop(0)
        if isinstance(r, Exception):
            raise r
        return r


def _doc(puzzle_id, answers=("A", "B", "C", "D", "E")):
    return {
        "name": f"projects/p/databases/(default)/documents/puzzles/{puzzle_id}",
        "fields": {
            "date": {"timestampValue": "2025-01-15T05:00:00Z"},
            "question": {"stringValue": "Top 5?"},
            "correctAnswers": {"arrayValue": {"values": [{"stringValue": a} for a in answers]}},
            "meta": {"mapValue": {"fields": {"rev": {"integerValue": "3"},
                                             "draft": {"booleanValue": False}}}},
            "note": {"nullValue": None},
        },
    }


def test_decode_document():
    rec = decode_document(_doc("2025-01-15"))
    assert rec["id"] == "2025-01-15"
    assert "date" not in rec
    assert rec["publishInstant"] == dt.datetime(2025, 1, 15, 5, 0, tzinfo=UTC)
    assert rec["correctAnswers"] == ["A", "B", "C", "D", "E"]
    assert rec["meta"] == {"rev": 3, "draft": False}
    assert rec["note"] is None


def test_firestore_fetch_all_pages():
    session = FakeSession([
        FakeResponse(body={"documents": [_doc("2025-01-15")], "nextPageToken": "t1"}),
        FakeResponse(body={"documents": [_doc("2025-01-16")]}),
    ])
    repo = FirestorePuzzleRepository("proj", token="tok", session=session)
    recs = repo.fetch_all_puzzles()
    assert [r["id"] for r in recs] == ["2025-01-15", "2025-01-16"]
    assert all(c[3] == {"Authorization": "Bearer tok"} for c in session.calls)
    assert session.calls[1][1]["pageToken"] == "t1"
    assert session.calls[0][0].endswith("/projects/proj/databases/(default)/documents/puzzles")
    assert session.calls[0][2] == 30


def test_firestore_get_puzzle_absent_and_errors():
    session = FakeSession([
        FakeResponse(404),
        FakeResponse(body=_doc("2025-01-15")),
        FakeResponse(500),
        requests.ConnectionError("down"),
    ])
    repo = FirestorePuzzleRepository("proj", session=session)
    assert repo.get_puzzle("2030-01-01") is None
    assert repo.get_puzzle("2025-01-15")["id"] == "2025-01-15"
    with pytest.raises(RepositoryError):
        repo.get_puzzle("2025-01-15")
    with pytest.raises(RepositoryError):
        repo.fetch_all_puzzles()


def test_firestore_requires_project():
    with pytest.raises(ValueError):
        FirestorePuzzleRepository("")


def test_firestore_token_stays_off_a_shared_session():
    session = FakeSession([FakeResponse(body=_doc("2025-01-15")), FakeResponse(404)])
    session.headers["User-Agent"] = "caller"
    FirestorePuzzleRepository("proj", token="tok", session=session).get_puzzle("2025-01-15")
    FirestorePuzzleRepository("proj", session=session).get_puzzle("2025-01-16")
    assert session.headers == {"User-Agent": "caller"}
    assert session.calls[0][3] == {"Authorization": "Bearer tok"}
    assert session.calls[1][3] == {}
