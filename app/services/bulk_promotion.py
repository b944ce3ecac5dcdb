"""Service for promoting many pending applications in store-sized batches."""
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.config import settings
from app.services.errors import StoreCommitError, ValidationError
from app.services.promotion_service import build_approved_record, has_reviewer_note, promotion_operations
from app.services.record_store.base import PENDING, RecordStore
from app.services.serial_allocator import next_serial_block

logger = logging.getLogger(__name__)

# One create in approved plus one delete in pending
OPERATIONS_PER_PROMOTION = 2


@dataclass
class BulkPromotionResult:
    """Progress of a bulk promotion. errors is empty only when every record was promoted."""
    promoted_count: int = 0
    promoted_ids: list[str] = field(default_factory=list)
    assigned_serials: dict[str, int] = field(default_factory=dict)
    remaining_ids: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.errors)


def chunk_size_for_store(store: RecordStore, requested: int | None = None) -> int:
    """Largest record count per batch that keeps 2 operations per record under the store ceiling."""
    size = requested or settings.chunk_size_for(OPERATIONS_PER_PROMOTION)
    return max(1, min(size, store.max_batch_operations // OPERATIONS_PER_PROMOTION))


def chunked(items: list[Any], size: int) -> list[list[Any]]:
    return [items[i : i + size] for i in range(0, len(items), size)]


async def _load_pending(store: RecordStore, pending_ids: list[str]) -> list[dict[str, Any]]:
    """Fetch every targeted record and reject the whole run if any is missing or lacks a reviewer note."""
    if not pending_ids:
        raise ValidationError("no pending applications selected")

    duplicates = sorted({pid for pid in pending_ids if pending_ids.count(pid) > 1})
    if duplicates:
        raise ValidationError("pending ids must be unique", invalid_ids=duplicates)

    records = []
    missing = []
    for pending_id in pending_ids:
        record = await store.get(PENDING, pending_id)
        if record is None:
            missing.append(pending_id)
        else:
            records.append(record)
    if missing:
        raise ValidationError("pending applications not found", invalid_ids=missing)

    invalid = [record["id"] for record in records if not has_reviewer_note(record)]
    if invalid:
        raise ValidationError("reviewer note required", invalid_ids=invalid)
    return records


async def promote_all(
    store: RecordStore,
    pending_ids: list[str],
    reviewer_identity_fallback: str | None,
    chunk_size: int | None = None,
    now: datetime | None = None,
) -> BulkPromotionResult:
    """
    Promote pending applications in input order.

    All records are validated before any write. One contiguous serial block is
    allocated for the whole run and chunks are committed sequentially, each as
    its own atomic batch. When a chunk fails the run stops: earlier chunks stay
    committed, the failed chunk and everything after it stay pending, and the
    serials reserved for them are not reused in this run.

    Args:
        store: Record store
        pending_ids: Pending record ids; serials follow this order
        reviewer_identity_fallback: Reviewer stamped on records that do not name one
        chunk_size: Records per batch (defaults to the configured safe size)
        now: Approval time (defaults to current UTC time)

    Returns:
        BulkPromotionResult with progress and any commit error

    Raises:
        ValidationError: If any record is missing or lacks a reviewer note (nothing written)
        AllocationError: If the serial block cannot be computed (nothing written)
    """
    records = await _load_pending(store, pending_ids)
    serials = await next_serial_block(store, len(records))
    fallback = (reviewer_identity_fallback or "").strip() or settings.fallback_reviewer_identity
    now = now or datetime.utcnow()
    size = chunk_size_for_store(store, chunk_size)

    result = BulkPromotionResult()
    pairs = list(zip(records, serials))
    chunks = chunked(pairs, size)
    for index, chunk in enumerate(chunks, start=1):
        operations = []
        for record, serial in chunk:
            reviewer = str(record.get("reviewed_by") or "").strip() or fallback
            payload = build_approved_record(record, serial, reviewer, now)
            operations.extend(promotion_operations(record["id"], payload))

        try:
            await store.commit_batch(operations)
        except StoreCommitError as e:
            result.remaining_ids = [record["id"] for part in chunks[index - 1 :] for record, _ in part]
            result.errors.append(
                f"Batch {index} of {len(chunks)} failed after {result.promoted_count} promoted: {e.message}"
            )
            logger.error(
                "Bulk promotion stopped",
                extra={
                    "chunk": index,
                    "chunks": len(chunks),
                    "promoted_count": result.promoted_count,
                    "remaining": len(result.remaining_ids),
                    "error": e.message,
                },
            )
            return result

        for record, serial in chunk:
            result.promoted_ids.append(record["id"])
            result.assigned_serials[record["id"]] = serial
        result.promoted_count += len(chunk)
        logger.info("Bulk promotion batch committed", extra={"chunk": index, "chunks": len(chunks), "size": len(chunk)})

    return result
