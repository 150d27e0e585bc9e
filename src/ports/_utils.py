"""Utility helpers for port facades."""

from __future__ import annotations

import os
from typing import Dict, Mapping

DEFAULT_PROFILE = "dev"


def build_env(overrides: Mapping[str, str] | None = None) -> Dict[str, str]:
    """Merge process environment with optional overrides."""

    env: Dict[str, str] = {str(k): str(v) for k, v in os.environ.items()}
    if overrides:
        env.update({str(k): str(v) for k, v in overrides.items()})
    return env


def select_profile(env: Mapping[str, str], profile: str | None = None) -> str:
    """Return the explicit profile, then ``PUZZLE_PROFILE``, then the default."""

    if profile:
        return profile.lower()
    return env.get("PUZZLE_PROFILE", DEFAULT_PROFILE).lower() or DEFAULT_PROFILE


__all__ = ["DEFAULT_PROFILE", "build_env", "select_profile"]
