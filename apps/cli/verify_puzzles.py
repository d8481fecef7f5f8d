# apps/cli/verify_puzzles.py
"""
CLI entry point for the pre-publication puzzle check.

This script:
  1) Loads every puzzle record from the JSON fixtures or the Firestore store.
  2) Validates each record independently, showing progress as it goes.
  3) Prints a one-line summary and, if anything failed, an itemized report.
  4) Optionally writes the full report as JSON.

Exit status is 0 iff every record passed (1 on any failure, or if the
store could not be read).

Usage:
    python -m apps.cli.verify_puzzles --json data/puzzles.json
    RANKLR_ACCESS_TOKEN=$(gcloud auth application-default print-access-token) \
        python -m apps.cli.verify_puzzles --project my-project
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import List

from tqdm import tqdm

from ranklr.datasets import (
    BatchReport, FirestorePuzzleRepository, JsonPuzzleRepository, PuzzleReport,
    PuzzleRepository, RepositoryError, format_report, pretty_summary, validate_batch,
)
from ranklr.datasets.repository import DEFAULT_COLLECTION


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="ranklr — validate stored puzzles before publishing")
    src = ap.add_mutually_exclusive_group()
    src.add_argument("--json", help="JSON file or directory of puzzle records")
    src.add_argument("--project", default=os.environ.get("RANKLR_PROJECT_ID"),
                     help="Firestore project id (default: $RANKLR_PROJECT_ID)")
    ap.add_argument("--collection", default=DEFAULT_COLLECTION,
                    help="Firestore collection holding the puzzles")
    ap.add_argument("--token", default=os.environ.get("RANKLR_ACCESS_TOKEN"),
                    help="OAuth2 access token (default: $RANKLR_ACCESS_TOKEN)")
    ap.add_argument("--report", help="also write the full report as JSON to this path")
    ap.add_argument(
        "--progress",
        choices=["auto", "bar", "plain", "off"],
        default="auto",
        help="Show validation progress (auto=bar on a terminal, else plain dots)."
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="log repository activity")
    return ap


def make_repository(args: argparse.Namespace) -> PuzzleRepository:
    if args.json:
        return JsonPuzzleRepository(args.json)
    if args.project:
        return FirestorePuzzleRepository(args.project, collection=args.collection,
                                         token=args.token)
    raise ValueError("no puzzle source: pass --json PATH or --project ID")


def validate_with_progress(records: List, mode: str) -> BatchReport:
    """One progress tick per record ('.' passed, 'F' failed in plain mode)."""
    if mode == "bar":
        return validate_batch(
            records,
            progress=lambda items: tqdm(items, ncols=80, desc="Validating", unit="puzzle"),
        )
    if mode != "plain":
        return validate_batch(records)

    def tick(r: PuzzleReport) -> None:
        sys.stderr.write("." if r.passed else "F")
        sys.stderr.flush()

    report = validate_batch(records, on_report=tick)
    if report.total:
        sys.stderr.write("\n"); sys.stderr.flush()
    return report


def main(argv: List[str] | None = None) -> int:
    """
    Parse CLI args, load records, validate, print the report. Returns the exit code.
    """
    args = build_parser().parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    # 1) Load records from the chosen store
    try:
        repo = make_repository(args)
        records = repo.fetch_all_puzzles()
    except (RepositoryError, ValueError, FileNotFoundError) as e:
        print(f"Error during verification: {e}", file=sys.stderr)
        return 1

    if not records:
        print("No puzzles found.")
        return 0

    # 2) Validate with progress
    mode = args.progress
    if mode == "auto":
        mode = "bar" if sys.stderr.isatty() else "plain"
    print(f"Validating {len(records)} puzzles...")
    report = validate_with_progress(records, mode)

    # 3) Summary + itemized failures
    print(pretty_summary(report))
    if report.failed:
        print(f"{report.failed} of {report.total} puzzles failed validation.")
        print(f"{report.passed} puzzles passed.\n")
        print("DETAILED ERROR REPORT:\n")
        print(format_report(report))
    else:
        print(f"All {report.total} puzzles passed validation!")

    # 4) Optional machine-readable report
    if args.report:
        p = Path(args.report)
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(json.dumps(report.as_dict(), indent=2) + "\n", encoding="utf-8")
        print(f"Wrote: {p}")

    return report.exit_code


if __name__ == "__main__":
    sys.exit(main())
