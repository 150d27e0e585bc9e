"""JSONL sink for scheduler trace events.

Events land in ``<base_dir>/<YYYYMMDD>/trace_NN.jsonl``; a file is closed for
writing once it reaches ``max_bytes`` and the next counter is used.
"""

from __future__ import annotations

import json
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterator, Mapping

__all__ = ["TraceLog", "append_event", "configure", "current_log_path", "read_events"]

_DEFAULT_MAX_BYTES = 10 * 1024 * 1024


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TraceLog:
    """Append-only, size-rotated event log rooted at ``base_dir``."""

    def __init__(self, base_dir: str | Path = "logs/trace", *, max_bytes: int | None = None) -> None:
        self.base_dir = Path(base_dir)
        self.max_bytes = max_bytes or _DEFAULT_MAX_BYTES
        self.current: Path | None = None
        self._lock = threading.Lock()

    def _has_room(self, path: Path) -> bool:
        return not path.exists() or path.stat().st_size < self.max_bytes

    def _active_path(self, day: str) -> Path:
        day_dir = self.base_dir / day
        if self.current is not None and self.current.parent == day_dir and self._has_room(self.current):
            return self.current

        day_dir.mkdir(parents=True, exist_ok=True)
        counter = 0
        while not self._has_room(day_dir / f"trace_{counter:02d}.jsonl"):
            counter += 1
        self.current = day_dir / f"trace_{counter:02d}.jsonl"
        return self.current

    def append(self, event: Mapping[str, Any]) -> Path:
        now = _utc_now()
        record = {"ts": now.isoformat(timespec="milliseconds"), **event}
        line = json.dumps(record, sort_keys=True, ensure_ascii=False)
        with self._lock:
            path = self._active_path(now.strftime("%Y%m%d"))
            with path.open("a", encoding="utf-8") as handle:
                handle.write(line + "\n")
        return path


_ACTIVE = TraceLog()


def configure(base_dir: str | Path, *, max_bytes: int | None = None) -> None:
    """Point subsequent :func:`append_event` calls at ``base_dir``."""

    global _ACTIVE
    _ACTIVE = TraceLog(base_dir, max_bytes=max_bytes)


def append_event(event: Mapping[str, Any]) -> Path:
    return _ACTIVE.append(event)


def current_log_path() -> Path | None:
    return _ACTIVE.current


def read_events(path: Path) -> Iterator[Mapping[str, Any]]:
    """Yield the events stored in one JSONL file, skipping blank lines."""

    for line in path.read_text(encoding="utf-8").splitlines():
        if line.strip():
            yield json.loads(line)
