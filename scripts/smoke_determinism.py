#!/usr/bin/env python3
"""Smoke-test deterministic behaviour of the puzzle pipeline."""

from __future__ import annotations

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from orchestrator import orchestrator

EXAMPLE = SRC / "puzzles" / "day07" / "examples" / "part1_1.txt"
_WORKER_GRID = ((1, 0), (2, 0), (5, 60))


def _run(workers: int, base_offset: int) -> dict:
    return orchestrator.run_pipeline(
        input_path=EXAMPLE,
        puzzle_kind="day07",
        env_overrides={
            "CLI_SCHEDULER_WORKERS": str(workers),
            "CLI_SCHEDULER_BASE_OFFSET": str(base_offset),
            "CLI_TRACE_ENABLED": "0",
        },
    )


def main() -> int:
    for workers, base_offset in _WORKER_GRID:
        first = _run(workers, base_offset)
        second = _run(workers, base_offset)
        if first["digest"] != second["digest"]:
            print(
                f"determinism failed for workers={workers} offset={base_offset}: "
                f"{first['digest']} vs {second['digest']}"
            )
            return 1
        print(
            f"workers={workers} offset={base_offset}: "
            f"{first['part2']['order']} in {first['part2']['elapsed']}s ({first['digest'][:19]})"
        )

    print("Determinism smoke-test passed.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
