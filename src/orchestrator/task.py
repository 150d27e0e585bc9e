"""Task registry, completion state and the readiness predicate."""

from __future__ import annotations

import string
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Sequence, Tuple

from contracts.errors import MalformedInputError, SchedulerInvariantError, make_error

ALPHABET = string.ascii_uppercase

TaskId = int
Edge = Tuple[str, str]


def task_id(label: str) -> TaskId:
    """Return the alphabet position of ``label``."""

    if len(label) != 1 or label not in ALPHABET:
        raise MalformedInputError(
            f"Task label {label!r} is outside the alphabet {ALPHABET[0]}..{ALPHABET[-1]}",
            make_error("input.bad_label", f"unknown task label {label!r}", "$.label"),
        )
    return ALPHABET.index(label)


@dataclass(frozen=True)
class Task:
    """Single step of the puzzle.

    ``used`` is ``False`` for alphabet slots that never appear in an edge.
    """

    id: TaskId
    used: bool
    prerequisites: frozenset[TaskId]

    @property
    def label(self) -> str:
        return ALPHABET[self.id]


@dataclass(frozen=True)
class TaskRegistry:
    """Fixed-size table of every possible task, indexed by :data:`TaskId`."""

    tasks: Tuple[Task, ...]

    @classmethod
    def from_edges(cls, edges: Iterable[Edge]) -> "TaskRegistry":
        """Fold decoded ``(prerequisite, dependent)`` label pairs into a registry."""

        used = [False] * len(ALPHABET)
        needs: List[set[TaskId]] = [set() for _ in ALPHABET]
        for prerequisite, dependent in edges:
            before = task_id(prerequisite)
            after = task_id(dependent)
            needs[after].add(before)
            used[after] = True
            used[before] = True

        tasks = tuple(
            Task(id=idx, used=used[idx], prerequisites=frozenset(needs[idx]))
            for idx in range(len(ALPHABET))
        )
        return cls(tasks=tasks)

    def __iter__(self):
        return iter(self.tasks)

    def __len__(self) -> int:
        return len(self.tasks)

    def __getitem__(self, idx: TaskId) -> Task:
        return self.tasks[idx]

    def used(self) -> List[Task]:
        return [task for task in self.tasks if task.used]

    def edges(self) -> List[Edge]:
        """Return the ``(prerequisite, dependent)`` pairs in id order."""

        pairs: List[Edge] = []
        for task in self.tasks:
            for prerequisite in sorted(task.prerequisites):
                pairs.append((ALPHABET[prerequisite], task.label))
        return pairs


class StepState(Enum):
    WAITING = "waiting"
    IN_PROGRESS = "in_progress"
    DONE = "done"


_FORWARD = {
    StepState.WAITING: StepState.IN_PROGRESS,
    StepState.IN_PROGRESS: StepState.DONE,
}


class CompletionState:
    """Per-run state of every task; transitions only move forward."""

    def __init__(self, size: int = len(ALPHABET)) -> None:
        self._states: List[StepState] = [StepState.WAITING] * size

    def __getitem__(self, idx: TaskId) -> StepState:
        return self._states[idx]

    def __len__(self) -> int:
        return len(self._states)

    def is_done(self, idx: TaskId) -> bool:
        return self._states[idx] is StepState.DONE

    def mark_in_progress(self, idx: TaskId) -> None:
        self._advance(idx, StepState.IN_PROGRESS)

    def mark_done(self, idx: TaskId) -> None:
        """Mark ``idx`` done.

        The serial variant finishes a task in zero time, so ``WAITING`` may
        jump straight to ``DONE``.
        """

        if self._states[idx] is StepState.WAITING:
            self._states[idx] = StepState.DONE
            return
        self._advance(idx, StepState.DONE)

    def _advance(self, idx: TaskId, target: StepState) -> None:
        current = self._states[idx]
        if _FORWARD.get(current) is not target:
            raise SchedulerInvariantError(
                f"Task {ALPHABET[idx]} cannot move from {current.value} to {target.value}"
            )
        self._states[idx] = target

    def snapshot(self) -> Tuple[StepState, ...]:
        return tuple(self._states)


def is_ready(task: Task, states: CompletionState | Sequence[StepState]) -> bool:
    """Return ``True`` when every prerequisite of ``task`` is done."""

    return all(states[idx] is StepState.DONE for idx in task.prerequisites)


__all__ = [
    "ALPHABET",
    "CompletionState",
    "Edge",
    "StepState",
    "Task",
    "TaskId",
    "TaskRegistry",
    "is_ready",
    "task_id",
]
