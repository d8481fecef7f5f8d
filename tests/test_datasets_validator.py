import datetime as dt

import pytest
from ranklr.datasets import (
    Puzzle, format_report, pretty_summary, record_id, validate_batch, validate_puzzle,
)


def _fields(violations):
    return [v.field for v in violations]


def test_validate_puzzle_happy_path(make_record):
    assert validate_puzzle(make_record()) == []


def test_validate_batch_all_pass(make_record):
    rep = validate_batch([make_record("2025-01-16"), make_record("2025-01-15")])
    assert rep.passed == 2 and rep.failed == 0
    assert rep.exit_code == 0
    assert [r.puzzle_id for r in rep.reports] == ["2025-01-15", "2025-01-16"]
    assert pretty_summary(rep) == "puzzles=2 | passed=2 | failed=0 | OK"


def test_short_pool_with_duplicate_reports_two_violations(make_record):
    # 19 entries, one of them a repeat: count and uniqueness both flagged
    bad_pool = [chr(c) for c in range(ord("A"), ord("S"))] + ["A"]
    assert len(bad_pool) == 19
    bad = make_record("2025-01-16", possibleAnswers=bad_pool)
    good = make_record("2025-01-15")

    rep = validate_batch([bad, good])
    assert rep.failed == 1 and rep.passed == 1
    assert rep.exit_code == 1

    by_id = {r.puzzle_id: r for r in rep.reports}
    assert by_id["2025-01-15"].passed
    issues = by_id["2025-01-16"].violations
    assert _fields(issues) == ["possibleAnswers", "possibleAnswers"]
    assert issues[0].issue == "Must have exactly 20 items"
    assert issues[0].actual == "19 items"
    assert issues[1].issue == "All items must be unique"
    assert issues[1].actual == "18 unique items"


def test_every_violation_is_reported(make_record):
    rec = make_record(
        "2025-02-30",                          # not a real date
        publishInstant=dt.datetime(2025, 3, 2, 5, 0, tzinfo=dt.timezone.utc),
        question="Name the top five rivers.",  # no '?', no '5'
        source="not a url",
        sourceDate="12/19/2024",
        possibleAnswers=["A", "B", 3] + [chr(c) for c in range(ord("D"), ord("T") + 1)],
        correctAnswers=["A", "B", "Z", "Z"],
    )
    fields = _fields(validate_puzzle(rec))
    assert fields.count("id") == 1
    assert fields.count("question") == 2
    assert fields.count("source") == 1
    assert fields.count("sourceDate") == 1
    assert fields.count("possibleAnswers") == 1      # the non-string item
    assert fields.count("correctAnswers") == 3       # count, uniqueness, membership
    # publishInstant can't be checked against an invalid id
    assert "publishInstant" not in fields


@pytest.mark.parametrize("instant", [
    dt.datetime(2025, 1, 15, 0, 0, tzinfo=dt.timezone.utc),   # midnight UTC, 7pm Eastern the day before
    dt.datetime(2025, 1, 15, 6, 0, tzinfo=dt.timezone.utc),   # 1am Eastern
    dt.datetime(2025, 1, 16, 5, 0, tzinfo=dt.timezone.utc),   # midnight Eastern, wrong day
])
def test_publish_instant_must_be_eastern_midnight(make_record, instant):
    (v,) = validate_puzzle(make_record(publishInstant=instant))
    assert v.field == "publishInstant"
    assert v.expected == "2025-01-15 00:00:00 (America/New_York)"


def test_publish_instant_accepts_any_offset_for_the_same_instant(make_record):
    eastern_midnight = dt.datetime(2025, 1, 15, 5, 0, tzinfo=dt.timezone.utc)
    assert validate_puzzle(make_record(publishInstant=eastern_midnight)) == []
    # daylight time: midnight EDT is 04:00 UTC
    summer = dt.datetime(2025, 7, 4, 4, 0, tzinfo=dt.timezone.utc)
    assert validate_puzzle(make_record("2025-07-04", publishInstant=summer)) == []


@pytest.mark.parametrize("value,issue", [
    ("2025-01-15T05:00:00Z", "Must be a timestamp"),
    (None, "Must be a timestamp"),
    (dt.datetime(2025, 1, 15), "Must be timezone-aware"),
])
def test_publish_instant_type(make_record, value, issue):
    (v,) = validate_puzzle(make_record(publishInstant=value))
    assert v.field == "publishInstant" and v.issue == issue


@pytest.mark.parametrize("url,ok", [
    ("https://www.census.gov/data/tables.html", True),
    ("http://example.com", True),
    ("not a url", False),
    ("example.com/page", False),
    ("http://", False),
    ("", False),
    ("not a url: at all", False),
    ("5:00", False),
    ("ht tp://example.com", False),
    ("://x", False),
    ("http://exa mple.com/", False),
    ("mailto:editors@example.com", True),
])
def test_source_url(make_record, url, ok):
    assert (validate_puzzle(make_record(source=url)) == []) is ok


def test_non_list_answers_and_missing_fields(make_record):
    rec = make_record(possibleAnswers="A,B,C", correctAnswers=None)
    del rec["question"]
    vs = validate_puzzle(rec)
    assert [(v.field, v.issue) for v in vs] == [
        ("question", "Must be a string"),
        ("possibleAnswers", "Must be a list"),
        ("correctAnswers", "Must be a list"),
    ]


def test_unknown_id_and_non_mapping_records(make_record):
    rec = make_record()
    del rec["id"]
    rep = validate_batch([rec, ["not", "a", "record"]])
    assert [r.puzzle_id for r in rep.reports] == ["unknown", "unknown"]
    assert rep.failed == 2


def test_batch_keyed_by_id(make_record):
    rec = make_record()
    del rec["id"]
    rep = validate_batch({"2025-01-15": rec})
    assert rep.reports[0].puzzle_id == "2025-01-15"
    assert rep.reports[0].passed


def test_empty_batch():
    rep = validate_batch([])
    assert rep.total == 0 and rep.exit_code == 0
    assert "no puzzles" in pretty_summary(rep)


def test_format_report_and_as_dict(make_record):
    rep = validate_batch([make_record(question="Top 5 things.")])
    text = format_report(rep)
    assert "Puzzle: 2025-01-15" in text
    assert "1. question: Must end with a question mark" in text
    d = rep.as_dict()
    assert d["failed"] == 1
    assert d["puzzles"][0]["violations"][0]["field"] == "question"


def test_puzzle_from_record(make_record):
    p = Puzzle.from_record(make_record())
    assert p.correct_answers == ("A", "B", "C", "D", "E")
    assert len(p.possible_answers) == 20
    assert p.to_record()["correctAnswers"] == ["A", "B", "C", "D", "E"]
    with pytest.raises(ValueError, match="correctAnswers"):
        Puzzle.from_record(make_record(correctAnswers=["A", "B", "C", "D"]))


def test_batch_progress_hooks_see_id_order(make_record):
    recs = [make_record("2025-01-17"), make_record("2025-01-15", question="Top five?"),
            make_record("2025-01-16")]
    wrapped, seen = [], []

    def progress(items):
        wrapped.extend(record_id(r) for r in items)
        return iter(items)

    rep = validate_batch(recs, progress=progress, on_report=seen.append)
    assert wrapped == ["2025-01-15", "2025-01-16", "2025-01-17"]
    assert seen == rep.reports
    assert [r.passed for r in seen] == [False, True, True]
