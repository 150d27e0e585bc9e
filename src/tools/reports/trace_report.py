"""Aggregation helpers for scheduler trace logs."""

from __future__ import annotations

from collections import Counter
from pathlib import Path
from typing import Dict, Iterable, Mapping, Tuple

from contracts.jsoncanon import jcs_dump
from orchestrator.log import read_events

__all__ = ["aggregate"]


def aggregate(paths: Iterable[Path], *, top: int = 5) -> Mapping[str, object]:
    """Summarise assign/retire events per run.

    ``makespan`` maps each run id to the latest retirement time seen for it;
    ``busiest_tasks`` lists the longest assignments across all runs.
    """

    events = Counter()
    makespan: Dict[str, int] = {}
    durations: Dict[Tuple[str, str], int] = {}
    for path in paths:
        for event in read_events(path):
            name = str(event.get("event", "unknown"))
            if not name.startswith("scheduler."):
                continue
            events[name] += 1
            run_id = str(event.get("run_id") or "unknown")
            if name == "scheduler.retire":
                at = int(event.get("at", 0))
                makespan[run_id] = max(makespan.get(run_id, 0), at)
            elif name == "scheduler.assign":
                durations[(run_id, str(event.get("task")))] = int(event.get("duration", 0))

    busiest = sorted(durations.items(), key=lambda item: (-item[1], item[0]))[:top]
    summary = {
        "total_events": sum(events.values()),
        "events": dict(events),
        "runs": len(makespan),
        "makespan": dict(sorted(makespan.items())),
        "busiest_tasks": [(task, duration) for (_, task), duration in busiest],
    }
    summary["canonical"] = jcs_dump(summary).decode("utf-8")
    return summary
