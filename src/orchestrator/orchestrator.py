"""Puzzle pipeline orchestrator (Input → Solve → Export)."""

from __future__ import annotations

import argparse
import hashlib
import logging
import sys
import uuid
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from contracts.errors import MalformedInputError
from contracts.jsoncanon import jcs_sha256
from feature_flags import trace_log_dir
from ports import printer_port, solver_port
from ports._utils import build_env, select_profile
from project_config import get_section

from . import log as trace_log
from .router import RouterError

_LOGGER = logging.getLogger(__name__)


def derive_run_id(puzzle_kind: str, text: str, *, workers: int, base_offset: int) -> str:
    """Derive a deterministic run identifier.

    The same input scheduled with a different pool size or offset is a
    different run, so both settings are part of the name.
    """

    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
    name = f"{puzzle_kind}|w{workers}|o{base_offset}|{digest}"
    return f"run-{uuid.uuid5(uuid.NAMESPACE_URL, name).hex[:12]}"


def select_puzzle_kind(
    cli_override: Optional[str], env: Mapping[str, str], profile: str
) -> str:
    if cli_override:
        return cli_override

    env_override = env.get("PUZZLE_KIND")
    if env_override:
        return env_override

    run_cfg = get_section("run", default={})
    if isinstance(run_cfg, dict):
        by_profile = run_cfg.get("by_profile")
        if isinstance(by_profile, dict):
            profile_cfg = by_profile.get(profile)
            if isinstance(profile_cfg, dict):
                value = profile_cfg.get("puzzle_kind")
                if isinstance(value, str) and value:
                    return value
        value = run_cfg.get("puzzle_kind")
        if isinstance(value, str) and value:
            return value

    raise RouterError(
        "Puzzle kind must be selected explicitly via --puzzle, PUZZLE_KIND or run.puzzle_kind"
    )


def _configure_trace(profile: str) -> None:
    log_dir = trace_log_dir(profile)
    if log_dir is not None:
        trace_log.configure(log_dir)


def _journal(resolved: Any) -> Dict[str, Any]:
    return {
        "module_id": resolved.module_id,
        "impl": resolved.impl_id,
        "decision_source": resolved.decision_source,
        "fallback_used": resolved.fallback_used,
    }


def run_pipeline(
    *,
    input_path: str | Path,
    puzzle_kind: Optional[str] = None,
    output_dir: str | Path | None = None,
    env_overrides: Mapping[str, str] | None = None,
) -> Dict[str, Any]:
    """Solve one puzzle input and optionally export the schedule chart."""

    env_map = build_env(env_overrides)
    profile = select_profile(env_map)
    selected_puzzle = select_puzzle_kind(puzzle_kind, env_map, profile)

    text = Path(input_path).read_text(encoding="utf-8")
    _, settings = solver_port.resolve_scheduler(selected_puzzle, profile=profile, env=env_map)
    run_id = derive_run_id(
        selected_puzzle, text, workers=settings.workers, base_offset=settings.base_offset
    )
    _configure_trace(profile)

    payload, solver_module = solver_port.solve(
        selected_puzzle,
        text,
        profile=profile,
        env=env_map,
        run_id=run_id,
    )
    modules: Dict[str, Dict[str, Any]] = {"solver": _journal(solver_module)}
    modules["solver"]["scheduler"] = solver_module.config.get("scheduler", {})

    results: Dict[str, Any] = {
        "run_id": run_id,
        "puzzle_kind": selected_puzzle,
        "profile": profile,
        "part1": payload["part1"],
        "part2": {
            "order": payload["part2"]["order"],
            "elapsed": payload["part2"]["elapsed"],
        },
        "digest": jcs_sha256(payload),
    }

    if output_dir is not None:
        export_result, printer_module = printer_port.export_schedule(
            selected_puzzle,
            payload,
            output_dir=output_dir,
            profile=profile,
            env=env_map,
        )
        modules["printer"] = _journal(printer_module)
        results["pdf_path"] = export_result["pdf_path"]
        results["export_time_ms"] = export_result["time_ms"]

    results["modules"] = modules
    _LOGGER.info(
        "Run %s solved %s: part1=%s part2=%s/%d",
        run_id,
        selected_puzzle,
        results["part1"],
        results["part2"]["order"],
        results["part2"]["elapsed"],
    )
    return results


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Solve a puzzle input through the configured implementations.",
    )
    parser.add_argument("input", help="Path to the puzzle input file.")
    parser.add_argument(
        "--puzzle",
        dest="puzzle_kind",
        help="Puzzle kind identifier (e.g. 'day07'). Overrides config and environment.",
    )
    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory for the exported schedule chart. No export when omitted.",
    )
    parser.add_argument("--workers", type=int, help="Override the worker count.")
    parser.add_argument("--base-offset", type=int, help="Override the per-step base duration.")
    parser.add_argument("--profile", help="Configuration profile (dev, test, example).")
    parser.add_argument(
        "--trace",
        dest="trace",
        action="store_true",
        help="Write scheduler events to the JSONL trace log.",
    )
    parser.set_defaults(trace=None)
    return parser


def cli_overrides(args: argparse.Namespace) -> Dict[str, str]:
    payload: Dict[str, str] = {}
    if getattr(args, "workers", None) is not None:
        payload["CLI_SCHEDULER_WORKERS"] = str(args.workers)
    if getattr(args, "base_offset", None) is not None:
        payload["CLI_SCHEDULER_BASE_OFFSET"] = str(args.base_offset)
    if getattr(args, "profile", None):
        payload["PUZZLE_PROFILE"] = str(args.profile)
    if getattr(args, "trace", None) is True:
        payload["CLI_TRACE_ENABLED"] = "1"
    return payload


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        result = run_pipeline(
            input_path=args.input,
            puzzle_kind=args.puzzle_kind,
            output_dir=args.output_dir,
            env_overrides=cli_overrides(args),
        )
    except MalformedInputError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except RouterError as exc:
        parser.error(str(exc))
    print(result["part1"])
    print(f"{result['part2']['order']} {result['part2']['elapsed']}")
    return 0


__all__ = [
    "build_parser",
    "cli_overrides",
    "derive_run_id",
    "main",
    "run_pipeline",
    "select_puzzle_kind",
]


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    raise SystemExit(main())
