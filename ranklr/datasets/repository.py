"""
Read-only puzzle record sources.

The core never fetches anything itself: the validator works on whatever
`fetch_all_puzzles()` returns and a live session starts from
`get_puzzle(today_key())`. "No puzzle for that date" is a normal answer
(None), not an error. Nothing here retries; an unreachable store surfaces as
RepositoryError and the caller decides what to do.

Backends:
  - JsonPuzzleRepository      : local JSON file(s), for fixtures and offline checks
  - FirestorePuzzleRepository : the production document store, via its REST API
"""

from __future__ import annotations

import datetime as dt
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

from ranklr.dates import Clock, today_key, utc_now
from .io import parse_instant, read_records
from .models import Puzzle

logger = logging.getLogger(__name__)

DEFAULT_COLLECTION = "puzzles"
FIRESTORE_URL = "https://firestore.googleapis.com/v1"


class RepositoryError(RuntimeError):
    """The record store could not be read."""


class PuzzleRepository:
    """Interface every backend implements."""

    def fetch_all_puzzles(self) -> List[Dict[str, Any]]:
        raise NotImplementedError("Override in subclass")

    def get_puzzle(self, date_key: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError("Override in subclass")


class JsonPuzzleRepository(PuzzleRepository):
    def __init__(self, path: Path | str):
        self.path = Path(path)

    def fetch_all_puzzles(self) -> List[Dict[str, Any]]:
        records = read_records(self.path)
        logger.info("loaded %d puzzle records from %s", len(records), self.path)
        return records

    def get_puzzle(self, date_key: str) -> Optional[Dict[str, Any]]:
        for rec in self.fetch_all_puzzles():
            if isinstance(rec, dict) and rec.get("id") == date_key:
                return rec
        return None


# -----------------------------
# Firestore REST backend
# -----------------------------

def decode_value(value: Dict[str, Any]) -> Any:
    """
    Decode one Firestore REST typed value ({"stringValue": "..."} etc.).
    """
    if "stringValue" in value:
        return value["stringValue"]
    if "timestampValue" in value:
        return parse_instant(value["timestampValue"])
    if "integerValue" in value:
        # int64 travels as a string
        return int(value["integerValue"])
    if "doubleValue" in value:
        return float(value["doubleValue"])
    if "booleanValue" in value:
        return bool(value["booleanValue"])
    if "nullValue" in value:
        return None
    if "arrayValue" in value:
        return [decode_value(v) for v in value["arrayValue"].get("values", [])]
    if "mapValue" in value:
        return decode_fields(value["mapValue"].get("fields", {}))
    # referenceValue, geoPointValue, bytesValue: passed through raw
    return next(iter(value.values()), None)


def decode_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {k: decode_value(v) for k, v in fields.items()}


def decode_document(doc: Dict[str, Any]) -> Dict[str, Any]:
    """
    Firestore document -> raw puzzle record.

    The document id (last segment of `name`) is the puzzle id, and the stored
    `date` timestamp is the record's publishInstant.
    """
    record = decode_fields(doc.get("fields", {}))
    record["id"] = doc.get("name", "").rsplit("/", 1)[-1] or record.get("id")
    if "publishInstant" not in record and "date" in record:
        record["publishInstant"] = record.pop("date")
    return record


class FirestorePuzzleRepository(PuzzleRepository):
    """
    Reads the puzzle collection through the Firestore REST API.

    `token` is an OAuth2 access token (e.g. from
    `gcloud auth application-default print-access-token`); it is sent as a
    bearer token on each request when given and never stored on the session.
    Pass `session` to reuse a connection pool or to substitute a fake in tests.
    """

    def __init__(
            self,
            project_id: str,
            *,
            collection: str = DEFAULT_COLLECTION,
            token: str | None = None,
            session: requests.Session | None = None,
            timeout: float = 30,
            page_size: int = 300,
    ):
        if not project_id:
            raise ValueError("project_id is required")
        self.project_id = project_id
        self.collection = collection
        self.timeout = timeout
        self.page_size = page_size
        self.session = session or requests.Session()
        self._headers = {"Authorization": f"Bearer {token}"} if token else {}

    @property
    def base_url(self) -> str:
        return (f"{FIRESTORE_URL}/projects/{self.project_id}"
                f"/databases/(default)/documents/{self.collection}")

    def _get(self, url: str, params: Dict[str, Any] | None = None) -> requests.Response:
        try:
            r = self.session.get(url, params=params, headers=self._headers,
                                 timeout=self.timeout)
        except requests.RequestException as e:
            raise RepositoryError(f"could not reach {url}: {e}") from e
        return r

    def fetch_all_puzzles(self) -> List[Dict[str, Any]]:
        records: List[Dict[str, Any]] = []
        params: Dict[str, Any] = {"pageSize": self.page_size}
        pages = 0
        while True:
            r = self._get(self.base_url, params=params)
            try:
                r.raise_for_status()
            except requests.HTTPError as e:
                raise RepositoryError(f"listing {self.collection} failed: {e}") from e
            body = r.json()
            records.extend(decode_document(doc) for doc in body.get("documents", []))
            pages += 1

            token = body.get("nextPageToken")
            if not token:
                break
            params = {"pageSize": self.page_size, "pageToken": token}

        logger.info("fetched %d puzzle records from %s/%s in %d page(s)",
                    len(records), self.project_id, self.collection, pages)
        return records

    def get_puzzle(self, date_key: str) -> Optional[Dict[str, Any]]:
        r = self._get(f"{self.base_url}/{date_key}")
        if r.status_code == 404:
            logger.info("no puzzle stored for %s", date_key)
            return None
        try:
            r.raise_for_status()
        except requests.HTTPError as e:
            raise RepositoryError(f"fetching puzzle {date_key} failed: {e}") from e
        return decode_document(r.json())


def load_today_puzzle(
        repo: PuzzleRepository,
        *,
        now: dt.datetime | None = None,
        clock: Clock = utc_now,
) -> Optional[Puzzle]:
    """
    Today's puzzle (by America/New_York date), or None if none is stored.

    Raises ValueError (via Puzzle.from_record) if the stored record is malformed.
    """
    key = today_key(now, clock=clock)
    record = repo.get_puzzle(key)
    if record is None:
        return None
    return Puzzle.from_record(record)
