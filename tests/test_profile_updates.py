import asyncio
from datetime import datetime

import pytest

from app.services import examiner_service
from app.services.errors import RecordNotFoundError, StoreCommitError, ValidationError
from app.services.profile_update_service import (
    approve_update_request,
    changed_fields,
    list_update_requests,
    reject_update_request,
    submit_update_request,
)
from app.services.record_store.base import APPROVED, UPDATE_REQUESTS
from app.services.record_store.memory_backend import MemoryRecordStore

NOW = datetime(2025, 3, 14, 9, 30, 0)

EXAMINER = {
    "serial": 4,
    "nick_name": "Rafi",
    "mobile_number": "01711111111",
    "email": "old@example.com",
    "hsc_roll": "123456",
    "hsc_reg": "987654",
    "t_pin": "T-100",
}


def test_submit_and_approve(store):
    store.seed(APPROVED, {"e1": EXAMINER})
    request = asyncio.run(
        submit_update_request(store, "e1", {"email": "new@example.com", "serial": 99, "t_pin": "X"}, now=NOW)
    )
    assert request["updated_data"] == {"email": "new@example.com"}
    assert request["status"] == "pending"
    assert changed_fields(request) == {"email": {"old": "old@example.com", "new": "new@example.com"}}

    record = asyncio.run(approve_update_request(store, request["id"], now=NOW))

    assert record["email"] == "new@example.com"
    assert record["serial"] == 4
    assert record["t_pin"] == "T-100"
    assert record["last_updated"] == "2025-03-14"
    assert asyncio.run(store.query(UPDATE_REQUESTS)) == []
    assert len(store.committed_batches[-1]) == 2


def test_submit_requires_editable_fields(store):
    store.seed(APPROVED, {"e1": EXAMINER})
    with pytest.raises(ValidationError):
        asyncio.run(submit_update_request(store, "e1", {"serial": 1}))


def test_submit_for_missing_examiner(store):
    with pytest.raises(RecordNotFoundError):
        asyncio.run(submit_update_request(store, "ghost", {"email": "x@example.com"}))


def test_failed_approval_keeps_request_and_record():
    store = MemoryRecordStore(fail_on_commits={2})
    store.seed(APPROVED, {"e1": EXAMINER})
    request = asyncio.run(submit_update_request(store, "e1", {"email": "new@example.com"}))
    with pytest.raises(StoreCommitError):
        asyncio.run(approve_update_request(store, request["id"]))
    assert asyncio.run(store.get(APPROVED, "e1"))["email"] == "old@example.com"
    assert len(asyncio.run(store.query(UPDATE_REQUESTS))) == 1


def test_reject_and_ordering(store):
    store.seed(APPROVED, {"e1": EXAMINER})
    older = asyncio.run(submit_update_request(store, "e1", {"email": "a@example.com"}, now=datetime(2025, 1, 1)))
    newer = asyncio.run(submit_update_request(store, "e1", {"email": "b@example.com"}, now=datetime(2025, 2, 1)))
    assert [r["id"] for r in asyncio.run(list_update_requests(store))] == [newer["id"], older["id"]]

    asyncio.run(reject_update_request(store, older["id"]))
    assert [r["id"] for r in asyncio.run(list_update_requests(store))] == [newer["id"]]
    with pytest.raises(RecordNotFoundError):
        asyncio.run(reject_update_request(store, older["id"]))


def test_search_order_of_fields(store):
    store.seed(
        APPROVED,
        {
            "e1": {**EXAMINER, "serial": 17},
            "e2": {"serial": 2, "mobile_number": "17", "t_pin": "T-200"},
        },
    )
    field, records = asyncio.run(examiner_service.search_approved(store, "T-100"))
    assert field == "t_pin"
    assert [r["id"] for r in records] == ["e1"]

    field, records = asyncio.run(examiner_service.search_approved(store, "17"))
    assert field == "mobile_number"
    assert [r["id"] for r in records] == ["e2"]

    field, records = asyncio.run(examiner_service.search_approved(store, " 4 "))
    assert field is None and records == []


def test_find_by_hsc(store):
    store.seed(APPROVED, {"e1": EXAMINER})
    assert asyncio.run(examiner_service.find_by_hsc(store, " 123456 ", "987654"))["id"] == "e1"
    assert asyncio.run(examiner_service.find_by_hsc(store, "123456", "000")) is None


def test_admin_edit_refreshes_last_updated(store):
    store.seed(APPROVED, {"e1": EXAMINER})
    record = asyncio.run(examiner_service.update_approved(store, "e1", {"serial": "8", "inst": "DU"}, now=NOW))
    assert record["serial"] == 8
    assert record["inst"] == "DU"
    assert record["last_updated"] == "2025-03-14"
