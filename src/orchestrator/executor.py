"""Worker pool interfaces for the step scheduler."""

from __future__ import annotations

from typing import List, Optional, Protocol, Tuple

from contracts.errors import SchedulerInvariantError

from .task import TaskId

Slot = Tuple[TaskId, int]


class WorkerPool(Protocol):
    """Bounded collection of in-progress assignments, soonest finish first."""

    def insert(self, task: TaskId, duration: int) -> None:
        """Hand ``task`` to a free worker for ``duration`` time units."""

    def pop(self) -> Slot:
        """Retire the soonest-finishing assignment and advance time to it."""

    def is_empty(self) -> bool:
        """Return ``True`` when no worker holds a task."""

    def is_full(self) -> bool:
        """Return ``True`` when every worker holds a task."""

    def free_slots(self) -> int:
        """Return how many workers are idle."""

    def occupied(self) -> List[Slot]:
        """Return the running assignments, soonest finish first."""


class SlotWorkerPool:
    """Fixed array of worker slots kept sorted by ``(remaining, task)``.

    Occupied slots always precede empty ones.  ``remaining`` is measured from
    the last retirement event: :meth:`pop` subtracts the retired duration from
    every slot still running.
    """

    def __init__(self, capacity: int) -> None:
        if capacity < 1:
            raise ValueError("Worker pool capacity must be at least 1")
        self.capacity = capacity
        self.slots: List[Optional[Slot]] = [None] * capacity

    def insert(self, task: TaskId, duration: int) -> None:
        if self.slots[0] is None:
            self.slots[0] = (task, duration)
            return
        if self.is_full():
            raise SchedulerInvariantError("Cannot assign a task to a full worker pool")

        position = next(
            idx
            for idx, slot in enumerate(self.slots)
            if slot is None or (duration, task) < (slot[1], slot[0])
        )
        # The trailing slot is empty because the pool is not full.
        self.slots.pop()
        self.slots.insert(position, (task, duration))

    def pop(self) -> Slot:
        head = self.slots[0]
        if head is None:
            raise SchedulerInvariantError("Cannot retire a task from an empty worker pool")

        task, elapsed = head
        self.slots = self.slots[1:] + [None]
        for idx, slot in enumerate(self.slots):
            if slot is None:
                break
            self.slots[idx] = (slot[0], slot[1] - elapsed)
        return task, elapsed

    def is_empty(self) -> bool:
        return self.slots[0] is None

    def is_full(self) -> bool:
        return self.slots[-1] is not None

    def free_slots(self) -> int:
        return sum(1 for slot in self.slots if slot is None)

    def occupied(self) -> List[Slot]:
        return [slot for slot in self.slots if slot is not None]

    def __len__(self) -> int:
        return self.capacity - self.free_slots()


__all__ = ["Slot", "SlotWorkerPool", "WorkerPool"]
