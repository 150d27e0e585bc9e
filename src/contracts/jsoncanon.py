"""Canonical JSON helpers used for result digests.

Keys are sorted recursively, tuples become arrays, dataclasses are expanded to
objects and the output is UTF-8 without insignificant whitespace.  Two runs of
the scheduler on the same input must produce byte-identical canonical output,
so the digest doubles as a determinism check.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
import math
from enum import Enum
from typing import Any, Mapping

__all__ = ["jcs_dump", "jcs_sha256"]


def _canonicalize(obj: Any) -> Any:
    if obj is None or isinstance(obj, (bool, int, str)):
        return obj
    if isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            raise ValueError("NaN and Infinity are not permitted in canonical payloads")
        if obj.is_integer():
            return int(obj)
        return obj
    if isinstance(obj, Enum):
        return _canonicalize(obj.value)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return _canonicalize(dataclasses.asdict(obj))
    if isinstance(obj, (list, tuple)):
        return [_canonicalize(item) for item in obj]
    if isinstance(obj, Mapping):
        return {str(key): _canonicalize(obj[key]) for key in sorted(obj.keys(), key=str)}
    raise TypeError(f"Unsupported type for canonicalisation: {type(obj)!r}")


def jcs_dump(obj: Any) -> bytes:
    """Return canonical JSON bytes for ``obj``."""

    canonical = _canonicalize(obj)
    dumped = json.dumps(
        canonical,
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
        allow_nan=False,
    )
    return dumped.encode("utf-8")


def jcs_sha256(obj: Any) -> str:
    """Return the ``sha256`` digest of the canonical representation of ``obj``."""

    digest = hashlib.sha256(jcs_dump(obj)).hexdigest()
    return f"sha256-{digest}"
