"""
Run outputs for the session harness: one CSV row per game plus a JSON
manifest, both named by `run_id()`.

Patterns in the CSV get a leading apostrophe so spreadsheets keep "-CWW-" as
text, and picks are joined with " | " because pool items may hold commas.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List
import csv
import json
import subprocess
import datetime as dt

from ranklr.dates import Clock, utc_now

PICK_SEP = " | "


def _excel_safe_pattern(patt: str) -> str:
    """
    Prefix with an apostrophe so spreadsheet apps treat it as text.
    Example: "-CWW-" -> "'-CWW-"
    """
    return "'" + patt if patt else patt


def write_csv(results: List[Dict], path: str, max_attempts: int) -> str:
    """
    Serialize a batch of session results to CSV.

    Schema (columns):
      player, puzzle_id, success, guesses, time_ms, answer,
      picks_1, patt_1, ..., picks_max_attempts, patt_max_attempts

    Returns:
      The path written (string).
    """
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    fields = ["player", "puzzle_id", "success", "guesses", "time_ms", "answer"]
    for i in range(1, max_attempts + 1):
        fields += [f"picks_{i}", f"patt_{i}"]

    with p.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=fields)
        w.writeheader()

        for r in results:
            row = {
                "player": r.get("player_id", "?"),
                "puzzle_id": r["puzzle_id"],
                "success": r["success"],
                "guesses": r["guesses"],
                "time_ms": round(float(r["time_ms"]), 3),
                "answer": PICK_SEP.join(r["answer"]),
            }

            # Expand history into fixed columns (Excel-safe patterns)
            hist = r.get("history", [])
            for i in range(1, max_attempts + 1):
                if i <= len(hist):
                    picks, patt = hist[i - 1]
                    row[f"picks_{i}"] = PICK_SEP.join(picks)
                    row[f"patt_{i}"] = _excel_safe_pattern(patt)
                else:
                    row[f"picks_{i}"] = ""
                    row[f"patt_{i}"] = ""

            w.writerow(row)

    return str(p)


def write_manifest(manifest: Dict, path: str) -> str:
    """JSON sidecar of a run CSV; datetimes and paths are written via str()."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    with p.open("w", encoding="utf-8") as f:
        json.dump(manifest, f, indent=2, default=str)
    return str(p)


def run_id(now: dt.datetime | None = None, *, clock: Clock = utc_now) -> str:
    """File-name stamp for a run, e.g. run_id() -> '20250115T050000Z'."""
    now = now or clock()
    return now.astimezone(dt.timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def git_commit(cwd: str | None = None) -> str:
    """Short HEAD hash for the manifest, or 'unknown' outside a git checkout."""
    try:
        out = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            cwd=cwd, capture_output=True, text=True, check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return "unknown"
    return out.stdout.strip() or "unknown"
