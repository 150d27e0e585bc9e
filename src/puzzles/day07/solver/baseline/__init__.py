"""Baseline solver for "The Sum of Its Parts" step-ordering puzzle.

Input lines have the fixed shape::

    Step C must be finished before step A can begin.

Part 1 is the serial completion order; part 2 simulates a pool of workers
where step ``X`` takes ``base_offset + position(X) + 1`` seconds.
"""

from __future__ import annotations

import re
from typing import Any, Dict, Iterator, List, Mapping, Optional

from contracts.errors import MalformedInputError, make_error
from orchestrator.scheduler import Schedule, Scheduler, topological_order
from orchestrator.task import Edge, TaskRegistry

DESCRIPTOR = {
    "puzzle": "day07",
    "title": "The Sum of Its Parts",
    "role": "solver",
    "impl_id": "baseline",
}

DEFAULT_WORKERS = 5
DEFAULT_BASE_OFFSET = 60

_LINE_PATTERN = re.compile(r"^Step ([A-Z]) must be finished before step ([A-Z]) can begin\.$")


def iter_edges(text: str) -> Iterator[Edge]:
    """Yield ``(prerequisite, dependent)`` pairs; blank lines are skipped."""

    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.strip()
        if not line:
            continue
        match = _LINE_PATTERN.match(line)
        if match is None:
            raise MalformedInputError(
                f"Malformed dependency line {lineno}: {line!r}",
                make_error("input.malformed_line", f"malformed dependency line: {line!r}", f"line[{lineno}]"),
            )
        yield match.group(1), match.group(2)


def parse(text: str) -> TaskRegistry:
    return TaskRegistry.from_edges(iter_edges(text))


def part1(registry: TaskRegistry) -> str:
    return topological_order(registry)


def part2(
    registry: TaskRegistry,
    workers: int = DEFAULT_WORKERS,
    base_offset: int = DEFAULT_BASE_OFFSET,
    *,
    event_sink=None,
) -> Schedule:
    scheduler = Scheduler(workers, base_offset, event_sink=event_sink)
    return scheduler.run(registry)


def port_solve(text: str, *, options: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Solve both parts and return the ``SolveResult`` payload."""

    options = options or {}
    workers = int(options.get("workers", DEFAULT_WORKERS))
    base_offset = int(options.get("base_offset", DEFAULT_BASE_OFFSET))

    registry = parse(text)
    schedule = part2(registry, workers, base_offset, event_sink=options.get("event_sink"))
    timeline: List[Dict[str, Any]] = [entry.to_payload() for entry in schedule.timeline]

    return {
        "puzzle": DESCRIPTOR["puzzle"],
        "impl": DESCRIPTOR["impl_id"],
        "part1": part1(registry),
        "part2": {
            "order": schedule.order,
            "elapsed": schedule.elapsed,
            "workers": workers,
            "base_offset": base_offset,
            "timeline": timeline,
        },
    }


__all__ = [
    "DEFAULT_BASE_OFFSET",
    "DEFAULT_WORKERS",
    "DESCRIPTOR",
    "iter_edges",
    "parse",
    "part1",
    "part2",
    "port_solve",
]
