import asyncio

import pytest

from app.services.errors import AllocationError
from app.services.record_store.base import APPROVED, BatchOperation
from app.services.record_store.memory_backend import MemoryRecordStore
from app.services.serial_allocator import current_max_serial, next_serial, next_serial_block


def test_empty_store_starts_at_one(store):
    assert asyncio.run(next_serial(store)) == 1


def test_next_serial_ignores_missing_and_non_numeric(store):
    store.seed(
        APPROVED,
        {
            "a": {"serial": 3},
            "b": {"serial": "12"},
            "c": {"serial": "abc"},
            "d": {"full_name": "No serial"},
            "e": {"serial": 7},
        },
    )
    assert asyncio.run(current_max_serial(store)) == 12
    assert asyncio.run(next_serial(store)) == 13


def test_gaps_are_not_filled(store):
    store.seed(APPROVED, {"a": {"serial": 1}, "b": {"serial": 5}})
    assert asyncio.run(next_serial(store)) == 6


def test_block_is_contiguous(store):
    store.seed(APPROVED, {"a": {"serial": 5}})
    assert asyncio.run(next_serial_block(store, 3)) == [6, 7, 8]
    assert asyncio.run(next_serial_block(store, 0)) == []


def test_negative_block_rejected(store):
    with pytest.raises(ValueError):
        asyncio.run(next_serial_block(store, -1))


def test_unreadable_store_raises_allocation_error():
    store = MemoryRecordStore(fail_reads=True)
    with pytest.raises(AllocationError):
        asyncio.run(next_serial(store))


def test_deleted_serial_is_not_reused(store):
    store.seed(APPROVED, {"a": {"serial": 1}, "b": {"serial": 2}, "c": {"serial": 3}})
    asyncio.run(store.commit_batch([BatchOperation.delete(APPROVED, "b")]))
    assert asyncio.run(next_serial(store)) == 4
