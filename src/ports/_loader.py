"""Helpers for loading puzzle implementation packages dynamically."""

from __future__ import annotations

import importlib.util
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Dict

from orchestrator.router import ResolvedModule

_LOGGER = logging.getLogger(__name__)
_MODULE_CACHE: Dict[Path, ModuleType] = {}


def _module_name(resolved: ResolvedModule) -> str:
    kind = resolved.puzzle_kind.replace("-", "_")
    return f"puzzle_{kind}_{resolved.role}_{resolved.impl_id}"


def load_module(resolved: ResolvedModule) -> ModuleType:
    """Import the package described by ``resolved`` and cache the instance."""

    module_path = resolved.module_path.resolve()
    cached = _MODULE_CACHE.get(module_path)
    if cached is not None:
        return cached

    module_name = _module_name(resolved)
    spec = importlib.util.spec_from_file_location(module_name, module_path)
    if spec is None or spec.loader is None:
        raise ImportError(f"Could not load module from {module_path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception:
        sys.modules.pop(module_name, None)
        raise
    _MODULE_CACHE[module_path] = module
    _LOGGER.debug("Loaded %s from %s", resolved.module_id, module_path)
    return module


def clear_cache() -> None:
    """Forget previously loaded implementations."""

    for module in _MODULE_CACHE.values():
        sys.modules.pop(module.__name__, None)
    _MODULE_CACHE.clear()


__all__ = ["clear_cache", "load_module"]
