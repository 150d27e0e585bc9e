from __future__ import annotations

import random

import pytest

from contracts.errors import SchedulerInvariantError
from orchestrator.executor import SlotWorkerPool, WorkerPool


def _assert_invariant(pool: SlotWorkerPool) -> None:
    occupied = pool.occupied()
    keys = [(remaining, task) for task, remaining in occupied]
    assert keys == sorted(keys)
    assert all(remaining >= 0 for _, remaining in occupied)
    assert len(occupied) <= pool.capacity
    # empty slots trail the occupied ones
    assert pool.slots[: len(occupied)] == occupied
    assert all(slot is None for slot in pool.slots[len(occupied):])


def test_insert_into_empty_pool_uses_first_slot():
    pool = SlotWorkerPool(3)
    pool.insert(4, 10)
    assert pool.slots == [(4, 10), None, None]


def test_insert_keeps_slots_sorted_by_remaining_time():
    pool = SlotWorkerPool(4)
    pool.insert(5, 6)
    pool.insert(0, 1)
    pool.insert(3, 4)
    assert pool.slots == [(0, 1), (3, 4), (5, 6), None]


def test_insert_breaks_ties_by_task_id():
    pool = SlotWorkerPool(3)
    pool.insert(7, 5)
    pool.insert(2, 5)
    pool.insert(9, 5)
    assert pool.occupied() == [(2, 5), (7, 5), (9, 5)]


def test_pop_subtracts_elapsed_time_from_running_slots():
    pool = SlotWorkerPool(3)
    pool.insert(0, 1)
    pool.insert(5, 6)

    assert pool.pop() == (0, 1)
    assert pool.slots == [(5, 5), None, None]

    pool.insert(1, 2)
    assert pool.pop() == (1, 2)
    assert pool.slots == [(5, 3), None, None]


def test_pop_empty_pool_is_an_invariant_failure():
    pool = SlotWorkerPool(2)
    with pytest.raises(SchedulerInvariantError):
        pool.pop()


def test_insert_into_full_pool_is_an_invariant_failure():
    pool = SlotWorkerPool(1)
    pool.insert(0, 1)
    assert pool.is_full()
    with pytest.raises(SchedulerInvariantError):
        pool.insert(1, 2)


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        SlotWorkerPool(0)


def test_free_slot_bookkeeping():
    pool = SlotWorkerPool(3)
    assert pool.is_empty() and pool.free_slots() == 3 and len(pool) == 0
    pool.insert(2, 3)
    pool.insert(1, 2)
    assert not pool.is_empty() and not pool.is_full()
    assert pool.free_slots() == 1 and len(pool) == 2


def test_invariant_holds_under_mixed_operations():
    rng = random.Random(7)
    for capacity in (1, 2, 3, 5):
        pool = SlotWorkerPool(capacity)
        next_task = 0
        for _ in range(200):
            if not pool.is_full() and (pool.is_empty() or rng.random() < 0.6):
                pool.insert(next_task % 26, rng.randint(1, 90))
                next_task += 1
            else:
                before = pool.occupied()
                task, elapsed = pool.pop()
                assert (task, elapsed) == before[0]
                assert elapsed == min(remaining for _, remaining in before)
            _assert_invariant(pool)


def test_slot_pool_provides_every_protocol_operation():
    operations = ("insert", "pop", "is_empty", "is_full", "free_slots", "occupied")
    for name in operations:
        assert name in WorkerPool.__dict__
        assert callable(getattr(SlotWorkerPool, name))
