"""Feature flags read from ``config/features.toml``.

Each top-level table is one feature. A feature may carry ``by_profile``
sub-tables whose keys override the base table for that profile.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import-untyped]

__all__ = [
    "TRACE_OVERRIDE_KEYS",
    "coerce_bool",
    "feature_block",
    "is_trace_enabled",
    "reload",
    "trace_log_dir",
]

FEATURES_PATH = Path(__file__).resolve().parents[1] / "config" / "features.toml"

# First key present with a recognised boolean wins.
TRACE_OVERRIDE_KEYS = ("CLI_TRACE_ENABLED", "PUZZLE_TRACE_ENABLED", "TRACE_ENABLED")

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


@lru_cache(maxsize=1)
def _features() -> dict[str, Any]:
    if not FEATURES_PATH.exists():
        return {}
    with FEATURES_PATH.open("rb") as handle:
        return tomllib.load(handle)


def reload() -> None:
    _features.cache_clear()


def coerce_bool(value: Any) -> bool | None:
    """Interpret flag-like strings; ``None`` means "not a boolean"."""

    if isinstance(value, bool):
        return value
    if not isinstance(value, str):
        return None
    word = value.strip().lower()
    if word in _TRUE:
        return True
    if word in _FALSE:
        return False
    return None


def feature_block(name: str, profile: str | None = None) -> dict[str, Any]:
    """Return feature ``name`` with its ``by_profile`` overrides applied."""

    entry = _features().get(name)
    if not isinstance(entry, dict):
        return {}
    block = {key: value for key, value in entry.items() if key != "by_profile"}
    overrides = entry.get("by_profile", {}).get((profile or "").lower())
    if isinstance(overrides, dict):
        block.update(overrides)
    return block


def trace_log_dir(profile: str | None = None) -> str | None:
    log_dir = feature_block("trace", profile).get("log_dir")
    return log_dir if isinstance(log_dir, str) and log_dir else None


def is_trace_enabled(env: Mapping[str, str] | None = None, *, profile: str | None = None) -> bool:
    """Return ``True`` when scheduler events should go to the trace log."""

    env = env or {}
    for key in TRACE_OVERRIDE_KEYS:
        override = coerce_bool(env.get(key))
        if override is not None:
            return override
    return bool(feature_block("trace", profile).get("enabled", False))
