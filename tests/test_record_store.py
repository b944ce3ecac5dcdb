import asyncio

import pytest
from sqlalchemy.dialects import postgresql

from app.models import ApprovedExaminer
from app.services.errors import StoreCommitError
from app.services.record_store.base import APPROVED, PENDING, BatchOperation, FieldFilter, matches_filters
from app.services.record_store.factory import get_record_store
from app.services.record_store.memory_backend import MemoryRecordStore
from app.services.record_store.sql_backend import build_select


def test_batch_is_all_or_nothing(store):
    store.seed(APPROVED, {"a": {"serial": 1}})
    with pytest.raises(StoreCommitError) as exc_info:
        asyncio.run(
            store.commit_batch(
                [
                    BatchOperation.create(PENDING, {"full_name": "X"}),
                    BatchOperation.create(APPROVED, {"serial": 1}, record_id="b"),
                ]
            )
        )
    assert exc_info.value.duplicate_serial
    assert asyncio.run(store.query(PENDING)) == []
    assert asyncio.run(store.get(APPROVED, "b")) is None


def test_zero_serials_may_repeat(store):
    ids = asyncio.run(
        store.commit_batch([BatchOperation.create(APPROVED, {"serial": 0}) for _ in range(2)])
    )
    assert len(set(ids)) == 2


def test_ceiling_is_enforced():
    store = MemoryRecordStore(max_batch_operations=2)
    operations = [BatchOperation.create(PENDING, {"n": i}) for i in range(3)]
    with pytest.raises(StoreCommitError):
        asyncio.run(store.commit_batch(operations))
    assert store.committed_batches == []


def test_unknown_collection_rejected(store):
    with pytest.raises(StoreCommitError):
        asyncio.run(store.commit_batch([BatchOperation.create("elsewhere", {})]))


def test_reads_are_copies(store):
    store.seed(PENDING, {"p": {"tags": ["a"]}})
    record = asyncio.run(store.get(PENDING, "p"))
    record["tags"].append("b")
    assert asyncio.run(store.get(PENDING, "p"))["tags"] == ["a"]


def test_field_filters():
    record = {"serial": "12", "inst": " BUET "}
    assert matches_filters(record, [FieldFilter("serial", ">=", 12), FieldFilter("inst", "==", "BUET")])
    assert not matches_filters(record, [FieldFilter("serial", "<", 12)])
    assert not matches_filters(record, [FieldFilter("missing", "==", "x")])
    with pytest.raises(ValueError):
        FieldFilter("serial", "!=", 1)


def test_factory():
    assert isinstance(get_record_store("memory", max_batch_operations=10), MemoryRecordStore)
    with pytest.raises(ValueError):
        get_record_store("firestore")


def test_sql_string_filters_compare_trimmed_text():
    stmt = build_select(ApprovedExaminer, [FieldFilter("hsc_roll", "==", " 123 ")])
    compiled = stmt.compile(dialect=postgresql.dialect())
    assert "trim(" in str(compiled).lower()
    assert "123" in compiled.params.values()


def test_sql_serial_filter_uses_serial_column():
    stmt = build_select(ApprovedExaminer, [FieldFilter("serial", "==", 4), FieldFilter("serial", ">", 1)])
    compiled = stmt.compile(dialect=postgresql.dialect())
    assert "approved_examiners.serial =" in str(compiled)
    assert 4 in compiled.params.values()
