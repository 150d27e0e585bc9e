"""Command line helpers for running and benchmarking puzzle solvers."""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Sequence

from contracts.errors import MalformedInputError
from orchestrator.orchestrator import cli_overrides, run_pipeline, select_puzzle_kind
from orchestrator.router import RouterError
from ports._loader import load_module
from ports._utils import build_env, select_profile
from ports.solver_port import resolve_scheduler
from project_config import get_section
from tools.reports import trace_report


def _quantiles(values: Sequence[float], percentiles: Iterable[float]) -> Dict[float, float]:
    if not values:
        return {p: 0.0 for p in percentiles}
    sorted_vals = sorted(values)
    results: Dict[float, float] = {}
    for p in percentiles:
        if not 0 <= p <= 100:
            raise ValueError("Percentiles must be between 0 and 100")
        rank = (p / 100.0) * (len(sorted_vals) - 1)
        lower = int(rank)
        upper = min(lower + 1, len(sorted_vals) - 1)
        weight = rank - lower
        results[p] = sorted_vals[lower] * (1 - weight) + sorted_vals[upper] * weight
    return results


def _time_ms(fn: Callable[[], object], repeats: int) -> List[float]:
    samples: List[float] = []
    for _ in range(repeats):
        started = time.perf_counter()
        fn()
        samples.append((time.perf_counter() - started) * 1000.0)
    return samples


def _summary(samples: Sequence[float]) -> Dict[str, float]:
    marks = _quantiles(samples, (50, 95))
    return {
        "p50_ms": round(marks[50], 4),
        "p95_ms": round(marks[95], 4),
        "max_ms": round(max(samples, default=0.0), 4),
    }


def cmd_run(args: argparse.Namespace) -> int:
    summaries: List[dict] = []
    for path in args.inputs:
        summaries.append(
            run_pipeline(
                input_path=path,
                puzzle_kind=args.puzzle,
                output_dir=args.output_dir,
                env_overrides=cli_overrides(args),
            )
        )
    payload = summaries[0] if len(summaries) == 1 else summaries
    print(json.dumps(payload, indent=2, sort_keys=True))
    return 0


def cmd_bench(args: argparse.Namespace) -> int:
    env_map = build_env(cli_overrides(args))
    profile = select_profile(env_map)
    puzzle = select_puzzle_kind(args.puzzle, env_map, profile)
    resolved, settings = resolve_scheduler(puzzle, profile=profile, env=env_map)
    module = load_module(resolved)

    repeats = args.repeats or int(get_section("bench.repeats", default=20))
    text = Path(args.input).read_text(encoding="utf-8")
    registry = module.parse(text)

    report = {
        "puzzle": puzzle,
        "impl": resolved.impl_id,
        "repeats": repeats,
        "workers": settings.workers,
        "base_offset": settings.base_offset,
        "parse": _summary(_time_ms(lambda: module.parse(text), repeats)),
        "part1": _summary(_time_ms(lambda: module.part1(registry), repeats)),
        "part2": _summary(
            _time_ms(lambda: module.part2(registry, settings.workers, settings.base_offset), repeats)
        ),
    }
    print(json.dumps(report, indent=2, sort_keys=True))
    return 0


def cmd_report_trace(args: argparse.Namespace) -> int:
    base_dir = Path(args.path)
    files = sorted(base_dir.glob("**/*.jsonl"))
    if not files:
        raise SystemExit(f"No JSONL logs found under {base_dir}")
    summary = trace_report.aggregate(files, top=args.top)
    print(json.dumps(summary, indent=2, sort_keys=True))
    return 0


def _add_scheduler_flags(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--puzzle", default=None)
    parser.add_argument("--profile", default=None, help="Configuration profile (dev, test, example)")
    parser.add_argument("--workers", type=int, default=None, help="Override the worker count")
    parser.add_argument(
        "--base-offset",
        type=int,
        default=None,
        help="Override the base duration added to every step",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Puzzle harness helpers")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Solve one or more puzzle inputs")
    run.add_argument("inputs", nargs="+")
    _add_scheduler_flags(run)
    run.add_argument("--output-dir", default=None, help="Export schedule charts into this directory")
    run.add_argument(
        "--trace",
        action="store_true",
        default=None,
        help="Write scheduler events to the JSONL trace log",
    )
    run.set_defaults(func=cmd_run)

    bench = sub.add_parser("bench", help="Time parse, part 1 and part 2 for an input")
    bench.add_argument("input")
    _add_scheduler_flags(bench)
    bench.add_argument("--repeats", type=int, default=None)
    bench.set_defaults(func=cmd_bench)

    report = sub.add_parser("report-trace", help="Aggregate scheduler trace logs")
    report.add_argument("path", help="Directory containing JSONL logs")
    report.add_argument("--top", type=int, default=5)
    report.set_defaults(func=cmd_report_trace)

    return parser


def main(argv: List[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except MalformedInputError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except RouterError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
