"""Deterministic step scheduler: serial order and worker-pool simulation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .executor import SlotWorkerPool, WorkerPool
from .task import ALPHABET, CompletionState, StepState, TaskId, TaskRegistry, is_ready

_LOGGER = logging.getLogger(__name__)

EventSink = Callable[[Mapping[str, Any]], Any]


@dataclass(frozen=True)
class Assignment:
    """Interval during which a single worker held ``task``."""

    task: str
    start: int
    end: int

    def to_payload(self) -> Dict[str, Any]:
        return {"task": self.task, "start": self.start, "end": self.end}


@dataclass(frozen=True)
class Schedule:
    """Outcome of one worker-pool simulation."""

    order: str
    elapsed: int
    timeline: Tuple[Assignment, ...] = field(default_factory=tuple)


def topological_order(registry: TaskRegistry) -> str:
    """Return the lexicographically smallest valid completion order.

    After every completion the scan restarts from the lowest identifier, so the
    earliest eligible symbol always wins.
    """

    states = CompletionState(len(registry))
    output: List[str] = []

    while True:
        for task in registry:
            if not task.used:
                continue
            if states[task.id] is StepState.WAITING and is_ready(task, states):
                states.mark_done(task.id)
                output.append(task.label)
                break
        else:
            break

    _warn_unfinished(registry, states)
    return "".join(output)


class Scheduler:
    """Simulate ``workers`` concurrent workers over a task registry.

    A task takes ``base_offset + position + 1`` time units, where ``position``
    is the index of its label in :data:`ALPHABET`.
    """

    def __init__(
        self,
        workers: int = 1,
        base_offset: int = 0,
        *,
        pool_factory: Callable[[int], WorkerPool] = SlotWorkerPool,
        event_sink: Optional[EventSink] = None,
    ) -> None:
        if workers < 1:
            raise ValueError("Scheduler needs at least one worker")
        if base_offset < 0:
            raise ValueError("Scheduler base offset must be non-negative")
        self.workers = workers
        self.base_offset = base_offset
        self.pool_factory = pool_factory
        self.event_sink = event_sink

    def duration(self, task: TaskId) -> int:
        return self.base_offset + task + 1

    def serial_order(self, registry: TaskRegistry) -> str:
        return topological_order(registry)

    def run(self, registry: TaskRegistry) -> Schedule:
        """Run the simulation to completion and return order and makespan."""

        states = CompletionState(len(registry))
        pool = self.pool_factory(self.workers)
        started: Dict[TaskId, int] = {}
        timeline: List[Assignment] = []
        output: List[str] = []
        elapsed = 0

        while True:
            for task in registry:
                if not task.used:
                    continue
                if pool.is_full():
                    break
                if states[task.id] is StepState.WAITING and is_ready(task, states):
                    states.mark_in_progress(task.id)
                    duration = self.duration(task.id)
                    pool.insert(task.id, duration)
                    started[task.id] = elapsed
                    self._emit("scheduler.assign", task=task.label, at=elapsed, duration=duration)

            if pool.is_empty():
                break

            task_id, step = pool.pop()
            elapsed += step
            states.mark_done(task_id)
            label = ALPHABET[task_id]
            output.append(label)
            timeline.append(Assignment(task=label, start=started[task_id], end=elapsed))
            self._emit("scheduler.retire", task=label, at=elapsed)

        _warn_unfinished(registry, states)
        schedule = Schedule(order="".join(output), elapsed=elapsed, timeline=tuple(timeline))
        _LOGGER.debug(
            "Simulated %d tasks on %d workers: order=%s elapsed=%d",
            len(output),
            self.workers,
            schedule.order,
            schedule.elapsed,
        )
        return schedule

    def _emit(self, event: str, **payload: Any) -> None:
        if self.event_sink is None:
            return
        self.event_sink(
            {
                "event": event,
                "workers": self.workers,
                "base_offset": self.base_offset,
                **payload,
            }
        )


def _warn_unfinished(registry: TaskRegistry, states: CompletionState) -> None:
    pending = [task.label for task in registry if task.used and not states.is_done(task.id)]
    if pending:
        _LOGGER.warning(
            "Scheduling stopped with unfinished tasks %s; the dependency graph has a cycle",
            "".join(pending),
        )


__all__ = ["Assignment", "EventSink", "Schedule", "Scheduler", "topological_order"]
