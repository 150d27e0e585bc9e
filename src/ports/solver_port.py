"""Facade for solver implementations across puzzles."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Dict, Mapping, Optional

from contracts import validator
from feature_flags import is_trace_enabled
from orchestrator import log as trace_log
from orchestrator.router import ResolvedModule, resolve

from ._loader import load_module
from ._utils import build_env, select_profile

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchedulerSettings:
    """Finalised worker-pool parameters after precedence resolution."""

    workers: int
    base_offset: int
    trace: bool
    source: str


_DEFAULT_WORKERS = 5
_DEFAULT_BASE_OFFSET = 60

_ENV_KEYS = {
    "workers": ("PUZZLE_SCHEDULER_WORKERS", "SCHEDULER_WORKERS"),
    "base_offset": ("PUZZLE_SCHEDULER_BASE_OFFSET", "SCHEDULER_BASE_OFFSET"),
}
_CLI_KEYS = {
    "workers": "CLI_SCHEDULER_WORKERS",
    "base_offset": "CLI_SCHEDULER_BASE_OFFSET",
}
_MINIMUMS = {"workers": 1, "base_offset": 0}


def _parse_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        if isinstance(value, int):
            return value
        if isinstance(value, str) and value.strip():
            return int(value.strip())
    except (TypeError, ValueError):
        return None
    return None


def _apply_overrides(
    settings: SchedulerSettings, overrides: Mapping[str, Any], source: str
) -> SchedulerSettings:
    changes: Dict[str, Any] = {}
    for field, minimum in _MINIMUMS.items():
        if field not in overrides:
            continue
        raw = overrides[field]
        value = _parse_int(raw)
        if value is None or value < minimum:
            _LOGGER.warning(
                "Ignoring %s override %s=%r; expected an integer >= %d",
                source,
                field,
                raw,
                minimum,
            )
            continue
        changes[field] = value
    if not changes:
        return settings
    return replace(settings, source=source, **changes)


def _env_overrides(env: Mapping[str, str]) -> Dict[str, Any]:
    payload: Dict[str, Any] = {}
    for field, aliases in _ENV_KEYS.items():
        for alias in aliases:
            if alias in env:
                payload[field] = env[alias]
                break
    return payload


def _cli_overrides(env: Mapping[str, str]) -> Dict[str, Any]:
    return {field: env[alias] for field, alias in _CLI_KEYS.items() if alias in env}


def compute_scheduler_settings(
    profile: str,
    env: Mapping[str, str],
    resolved: ResolvedModule,
) -> SchedulerSettings:
    """Resolve workers and base offset: config, then env, then CLI."""

    settings = SchedulerSettings(
        workers=_DEFAULT_WORKERS,
        base_offset=_DEFAULT_BASE_OFFSET,
        trace=False,
        source="default",
    )
    module_config = {key: resolved.config[key] for key in _MINIMUMS if key in resolved.config}
    settings = _apply_overrides(settings, module_config, "config")
    settings = _apply_overrides(settings, _env_overrides(env), "env")
    settings = _apply_overrides(settings, _cli_overrides(env), "cli")

    trace = is_trace_enabled(env, profile=profile)
    return replace(settings, trace=trace)


def _trace_sink(puzzle_kind: str, impl_id: str, run_id: str | None):
    def _sink(event: Mapping[str, Any]) -> None:
        trace_log.append_event(
            {**event, "puzzle": puzzle_kind, "impl": impl_id, "run_id": run_id or ""}
        )

    return _sink


def resolve_scheduler(
    puzzle_kind: str,
    *,
    profile: str | None = None,
    env: Mapping[str, str] | None = None,
) -> tuple[ResolvedModule, SchedulerSettings]:
    """Pick the solver implementation and the settings it will run with."""

    env_map = build_env(env)
    current_profile = select_profile(env_map, profile)
    resolved = resolve(puzzle_kind, "solver", current_profile, env_map)
    return resolved, compute_scheduler_settings(current_profile, env_map, resolved)


def solve(
    puzzle_kind: str,
    text: str,
    *,
    profile: str | None = None,
    env: Mapping[str, str] | None = None,
    run_id: str | None = None,
) -> tuple[Dict[str, Any], ResolvedModule]:
    """Dispatch ``text`` to the configured solver implementation."""

    resolved, settings = resolve_scheduler(puzzle_kind, profile=profile, env=env)

    module = load_module(resolved)

    try:
        handler = getattr(module, "port_solve")
    except AttributeError as exc:
        raise AttributeError(
            f"Solver implementation '{resolved.module_id}' does not expose 'port_solve'"
        ) from exc

    options: Dict[str, Any] = {
        "workers": settings.workers,
        "base_offset": settings.base_offset,
    }
    if settings.trace:
        options["event_sink"] = _trace_sink(puzzle_kind, resolved.impl_id, run_id)

    payload = handler(text, options=options)
    validator.assert_valid(payload, resolved.contracts or "SolveResult")

    enriched = replace(
        resolved,
        config={
            **resolved.config,
            "scheduler": {
                "workers": settings.workers,
                "base_offset": settings.base_offset,
                "trace": settings.trace,
                "source": settings.source,
            },
        },
    )
    return payload, enriched


__all__ = ["SchedulerSettings", "compute_scheduler_settings", "resolve_scheduler", "solve"]
