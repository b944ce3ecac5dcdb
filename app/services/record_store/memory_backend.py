"""In-memory record store backend implementation."""

import copy
import uuid
from typing import Any

from app.services.errors import RecordStoreReadError, StoreCommitError
from app.services.record_store.base import (
    APPROVED,
    COLLECTIONS,
    BatchOperation,
    FieldFilter,
    OperationType,
    RecordStore,
    coerce_number,
    matches_filters,
)


class MemoryRecordStore(RecordStore):
    """Dict-backed record store. Batches are applied to a copy and swapped in on success."""

    def __init__(
        self,
        max_batch_operations: int | None = None,
        fail_on_commits: set[int] | None = None,
        fail_reads: bool = False,
    ):
        """
        Initialize in-memory store.

        Args:
            max_batch_operations: Per-batch operation ceiling
            fail_on_commits: 1-based commit call numbers that must fail
            fail_reads: If True, every read raises RecordStoreReadError
        """
        super().__init__(max_batch_operations)
        self._collections: dict[str, dict[str, dict[str, Any]]] = {name: {} for name in COLLECTIONS}
        self.fail_on_commits = set(fail_on_commits or ())
        self.fail_reads = fail_reads
        self.commit_calls = 0
        self.committed_batches: list[list[BatchOperation]] = []

    def seed(self, collection: str, records: dict[str, dict[str, Any]]) -> None:
        """Insert records directly, bypassing batch checks."""
        for record_id, payload in records.items():
            self._collections[collection][record_id] = copy.deepcopy(payload)

    def _read_guard(self, collection: str) -> dict[str, dict[str, Any]]:
        if self.fail_reads:
            raise RecordStoreReadError(f"Read from {collection} failed")
        if collection not in self._collections:
            raise RecordStoreReadError(f"Unknown collection: {collection}")
        return self._collections[collection]

    async def get(self, collection: str, record_id: str) -> dict[str, Any] | None:
        rows = self._read_guard(collection)
        payload = rows.get(record_id)
        if payload is None:
            return None
        return {**copy.deepcopy(payload), "id": record_id}

    async def query(self, collection: str, filters: list[FieldFilter] | None = None) -> list[dict[str, Any]]:
        rows = self._read_guard(collection)
        return [
            {**copy.deepcopy(payload), "id": record_id}
            for record_id, payload in rows.items()
            if matches_filters(payload, filters)
        ]

    async def commit_batch(self, operations: list[BatchOperation]) -> list[str]:
        self.commit_calls += 1
        if self.commit_calls in self.fail_on_commits:
            raise StoreCommitError(f"Simulated failure of commit #{self.commit_calls}")
        self._check_batch(operations)

        staged = copy.deepcopy(self._collections)
        created_ids = []
        created_approved = []
        for op in operations:
            if op.type == OperationType.CREATE:
                record_id = op.record_id or uuid.uuid4().hex
                staged[op.collection][record_id] = copy.deepcopy(op.payload)
                created_ids.append(record_id)
                if op.collection == APPROVED:
                    created_approved.append(record_id)
            else:
                staged[op.collection].pop(op.record_id, None)

        # Positive serials written by this batch must be unique across the approved collection
        for record_id in created_approved:
            serial = coerce_number(staged[APPROVED].get(record_id, {}).get("serial"))
            if serial is None or serial <= 0:
                continue
            for other_id, other in staged[APPROVED].items():
                if other_id != record_id and coerce_number(other.get("serial")) == serial:
                    raise StoreCommitError(
                        f"Duplicate serial {int(serial)} in approved records", duplicate_serial=True
                    )

        self._collections = staged
        self.committed_batches.append(list(operations))
        return created_ids
