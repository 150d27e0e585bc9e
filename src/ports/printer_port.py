"""Facade for printer implementations across puzzles."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Mapping

from contracts import validator
from orchestrator.router import ResolvedModule, resolve

from ._loader import load_module
from ._utils import build_env, select_profile


def export_schedule(
    puzzle_kind: str,
    payload: Dict[str, Any],
    *,
    output_dir: str | Path,
    profile: str | None = None,
    env: Mapping[str, str] | None = None,
) -> tuple[Dict[str, Any], ResolvedModule]:
    """Invoke the configured printer implementation for a solved payload."""

    env_map = build_env(env)
    resolved = resolve(puzzle_kind, "printer", select_profile(env_map, profile), env_map)
    module = load_module(resolved)

    try:
        handler = getattr(module, "port_export")
    except AttributeError as exc:
        raise AttributeError(
            f"Printer implementation '{resolved.module_id}' does not expose 'port_export'"
        ) from exc

    result = handler(payload, output_dir=output_dir)
    validator.assert_valid(result, "ExportResult")
    return result, resolved


__all__ = ["export_schedule"]
