import asyncio
from datetime import datetime

import pytest

from app.services.bulk_promotion import chunk_size_for_store, chunked, promote_all
from app.services.errors import ValidationError
from app.services.record_store.base import APPROVED, PENDING
from app.services.record_store.memory_backend import MemoryRecordStore

NOW = datetime(2025, 3, 14, 9, 30, 0)


def seed_pending(store, pending_record, ids, **fields):
    store.seed(PENDING, {pid: pending_record(**fields) for pid in ids})


def test_serials_follow_input_order(store, pending_record):
    store.seed(APPROVED, {"x": {"serial": 5}})
    seed_pending(store, pending_record, ["a", "b", "c"])

    result = asyncio.run(promote_all(store, ["c", "a", "b"], "admin@example.com", now=NOW))

    assert result.promoted_count == 3
    assert result.assigned_serials == {"c": 6, "a": 7, "b": 8}
    assert result.errors == []
    assert not result.is_partial
    assert asyncio.run(store.query(PENDING)) == []


def test_validation_failure_writes_nothing(store, pending_record):
    seed_pending(store, pending_record, ["a", "b"])
    store.seed(PENDING, {"c": pending_record(note="")})

    with pytest.raises(ValidationError) as exc_info:
        asyncio.run(promote_all(store, ["a", "b", "c"], "admin@example.com"))

    assert exc_info.value.invalid_ids == ["c"]
    assert store.commit_calls == 0
    assert len(asyncio.run(store.query(PENDING))) == 3


def test_missing_and_duplicate_ids_rejected(store, pending_record):
    seed_pending(store, pending_record, ["a"])
    with pytest.raises(ValidationError) as exc_info:
        asyncio.run(promote_all(store, ["a", "zz"], "admin"))
    assert exc_info.value.invalid_ids == ["zz"]
    with pytest.raises(ValidationError):
        asyncio.run(promote_all(store, ["a", "a"], "admin"))
    with pytest.raises(ValidationError):
        asyncio.run(promote_all(store, [], "admin"))


def test_failed_chunk_stops_run_and_keeps_earlier_chunks(pending_record):
    store = MemoryRecordStore(fail_on_commits={2})
    ids = [f"p{i}" for i in range(6)]
    seed_pending(store, pending_record, ids)

    result = asyncio.run(promote_all(store, ids, "admin@example.com", chunk_size=2, now=NOW))

    assert result.promoted_count == 2
    assert result.promoted_ids == ["p0", "p1"]
    assert result.assigned_serials == {"p0": 1, "p1": 2}
    assert result.remaining_ids == ["p2", "p3", "p4", "p5"]
    assert result.is_partial
    assert result.errors[0].startswith("Batch 2 of 3 failed after 2 promoted")
    assert store.commit_calls == 2
    remaining = sorted(r["id"] for r in asyncio.run(store.query(PENDING)))
    assert remaining == ["p2", "p3", "p4", "p5"]
    assert sorted(r["serial"] for r in asyncio.run(store.query(APPROVED))) == [1, 2]


def test_retry_after_partial_failure_continues_serials(pending_record):
    store = MemoryRecordStore(fail_on_commits={2})
    ids = ["a", "b", "c", "d"]
    seed_pending(store, pending_record, ids)
    first = asyncio.run(promote_all(store, ids, "admin", chunk_size=2))

    second = asyncio.run(promote_all(store, first.remaining_ids, "admin", chunk_size=2))

    assert second.assigned_serials == {"c": 3, "d": 4}
    assert second.errors == []


def test_record_reviewer_takes_precedence_over_fallback(store, pending_record):
    store.seed(PENDING, {"a": pending_record(reviewed_by="reviewer@example.com"), "b": pending_record()})
    asyncio.run(promote_all(store, ["a", "b"], "admin@example.com"))
    assert asyncio.run(store.get(APPROVED, "a"))["reviewed_by"] == "reviewer@example.com"
    assert asyncio.run(store.get(APPROVED, "b"))["reviewed_by"] == "admin@example.com"


def test_batches_respect_store_ceiling(pending_record):
    store = MemoryRecordStore(max_batch_operations=10)
    ids = [f"p{i:02d}" for i in range(12)]
    seed_pending(store, pending_record, ids)

    result = asyncio.run(promote_all(store, ids, "admin"))

    assert result.promoted_count == 12
    assert all(len(batch) <= 10 for batch in store.committed_batches)
    assert store.commit_calls == 3


def test_default_chunk_size_keeps_safety_margin(store):
    assert chunk_size_for_store(store) == 200
    assert chunk_size_for_store(store, requested=1000) == 250


def test_chunked():
    assert chunked([1, 2, 3, 4, 5], 2) == [[1, 2], [3, 4], [5]]
