# apps/cli/run.py
"""
CLI entry point for simulated ranklr sessions.

This script:
  1) Loads puzzle records and validates them (prints a one-line summary);
     invalid puzzles are skipped, never played.
  2) Instantiates the requested player.
  3) Plays every puzzle (or a sample) through the game state machine with a
     live progress indicator and writes:
       - CSV:  per-session results + picks/pattern history columns
       - JSON: manifest with config, validation report, git commit, etc.
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
import time
from pathlib import Path
from typing import List

from tqdm import tqdm

from ranklr.datasets import (
    JsonPuzzleRepository, Puzzle, pretty_summary, validate_batch, validate_puzzle,
)
from ranklr.engine import MAX_ATTEMPTS
from ranklr.harness import run_case
from ranklr.harness.io import git_commit, run_id, write_csv, write_manifest
from ranklr.players import create_player, get_player_ids


def main(argv: List[str] | None = None) -> int:
    """
    Parse CLI args, validate puzzles, run the batch with progress, and write outputs.
    """
    # Build help text showing currently registered player IDs
    player_choices = ", ".join(get_player_ids())

    ap = argparse.ArgumentParser(description="ranklr — simulate sessions with a player strategy")
    ap.add_argument("--json", required=True, help="JSON file or directory of puzzle records")
    ap.add_argument("--player", default="feedback",
                    help=f"player id (one of: {player_choices})")
    ap.add_argument("--sample", type=int,
                    help="play only a subset of puzzles (deterministic by seed)")
    ap.add_argument("--seed", type=int, default=123, help="base RNG seed (for reproducibility)")
    ap.add_argument("--outdir", default="reports", help="directory for output files")
    ap.add_argument(
        "--progress",
        choices=["auto", "bar", "plain", "off"],
        default="auto",
        help="Show run progress (auto=bar on a terminal, else plain text)."
    )
    ap.add_argument("-v", "--verbose", action="store_true", help="log each finished session")
    args = ap.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s %(message)s")

    # 1) Load + validate; only valid puzzles are playable
    records = JsonPuzzleRepository(args.json).fetch_all_puzzles()
    rep = validate_batch(records)
    print(pretty_summary(rep))
    puzzles = sorted(
        (Puzzle.from_record(rec) for rec in records if not validate_puzzle(rec)),
        key=lambda p: p.id,
    )
    if not puzzles:
        print("No valid puzzles to play.")
        return 1

    # 2) Instantiate player by id
    player = create_player(args.player)

    # 3) Choose cases (deterministic sample by seed)
    rng = random.Random(args.seed)
    if args.sample and args.sample < len(puzzles):
        pool = list(puzzles)
        rng.shuffle(pool)
        cases = pool[: args.sample]
    else:
        cases = list(puzzles)

    total = len(cases)

    # 4) Progress mode
    mode = args.progress
    if mode == "auto":
        mode = "bar" if sys.stderr.isatty() else "plain"

    results = []
    start = time.time()
    last_print = 0.0

    iterator = tqdm(cases, ncols=80, desc="Playing", unit="game") if mode == "bar" else cases

    # 5) Run batch with live progress
    for idx, puzzle in enumerate(iterator, 1):
        # Derive a per-game seed so runs are reproducible and independent
        per_seed = args.seed + idx * 1013904223  # LCG-ish stride to avoid collisions
        r = run_case(player, puzzle, seed=per_seed)
        r["player_id"] = player.id  # stamp id for downstream tools
        results.append(r)

        if mode == "plain":
            now = time.time()
            if (now - last_print >= 1.0) or (idx == total):
                elapsed = now - start
                pct = 100.0 * idx / max(1, total)
                sys.stderr.write(f"\r[{idx}/{total}] {pct:5.1f}% | elapsed {elapsed:6.1f}s")
                sys.stderr.flush()
                last_print = now

    if mode == "plain":
        sys.stderr.write("\n"); sys.stderr.flush()

    wins = sum(1 for r in results if r["success"])
    print(f"Won {wins}/{total} with player '{player.id}'")

    # 6) Write outputs (CSV + manifest)
    stamp = run_id()
    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)

    csv_path = outdir / f"run_{stamp}.csv"
    manifest_path = outdir / f"run_{stamp}_manifest.json"

    write_csv(results, str(csv_path), max_attempts=MAX_ATTEMPTS)
    manifest = {
        "run_id": stamp,
        "git_commit": git_commit(),
        "config": vars(args),
        "validation": rep.as_dict(),
        "num_cases": len(results),
        "wins": wins,
        "player_id": player.id,
    }
    write_manifest(manifest, str(manifest_path))

    print(f"Wrote: {csv_path}")
    print(f"Wrote: {manifest_path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
