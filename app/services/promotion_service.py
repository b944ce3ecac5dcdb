"""Service for promoting pending applications into the approved examiner store."""
import json
import logging
from datetime import datetime
from typing import Any

from app.config import settings
from app.models import ReviewStatus
from app.services.errors import RecordNotFoundError, StoreCommitError, ValidationError
from app.services.record_store.base import APPROVED, PENDING, BatchOperation, RecordStore
from app.services.serial_allocator import next_serial

logger = logging.getLogger(__name__)

# Fields a pending record may not carry into the approved store
_STRIPPED_FIELDS = ("id",)


def has_reviewer_note(record: dict[str, Any]) -> bool:
    """Check that the reviewer note (Rm) is present and not blank."""
    note = record.get("reviewer_note")
    return note is not None and str(note).strip() != ""


def normalize_review_status(value: Any) -> str:
    """Unset or Pending becomes Approved; an explicit choice such as Rejected is preserved."""
    if isinstance(value, ReviewStatus):
        value = value.value
    if not value or str(value).strip() == ReviewStatus.PENDING.value:
        return ReviewStatus.APPROVED.value
    return str(value).strip()


def sanitize_payload(payload: dict[str, Any]) -> dict[str, Any]:
    """
    Return a JSON-safe copy of payload with unset (None) values removed.

    The round-trip through JSON turns dates and enums into plain values; the
    store rejects writes that contain unset fields.
    """

    def _drop_unset(value: Any) -> Any:
        if isinstance(value, dict):
            return {k: _drop_unset(v) for k, v in value.items() if v is not None}
        if isinstance(value, list):
            return [_drop_unset(v) for v in value if v is not None]
        return value

    def _default(value: Any) -> Any:
        if isinstance(value, ReviewStatus):
            return value.value
        return str(value)

    return _drop_unset(json.loads(json.dumps(payload, default=_default)))


def build_approved_record(
    pending: dict[str, Any],
    serial: int,
    reviewer_identity: str,
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Build the approved payload for a pending record.

    Args:
        pending: Pending record including its "id"
        serial: Serial assigned to the record
        reviewer_identity: Identity of the approving admin
        now: Approval time (defaults to current UTC time)

    Returns:
        Sanitized payload without "id"
    """
    now = now or datetime.utcnow()
    payload = {k: v for k, v in pending.items() if k not in _STRIPPED_FIELDS}
    payload.update(
        {
            "review_status": normalize_review_status(pending.get("review_status")),
            "reviewer_note": str(pending.get("reviewer_note")).strip(),
            "serial": serial,
            "reviewed_by": reviewer_identity,
            "approved_at": now.isoformat(),
            "last_updated": now.date().isoformat(),
        }
    )
    return sanitize_payload(payload)


def promotion_operations(pending_id: str, approved_payload: dict[str, Any]) -> list[BatchOperation]:
    """The create/delete pair that moves one record; the approved record keeps the pending id."""
    return [
        BatchOperation.create(APPROVED, approved_payload, record_id=pending_id),
        BatchOperation.delete(PENDING, pending_id),
    ]


async def promote(
    store: RecordStore,
    pending_id: str,
    reviewer_identity: str | None,
    now: datetime | None = None,
) -> dict[str, Any]:
    """
    Move one pending application into the approved store.

    Preconditions are checked before any write. The serial is allocated from
    the approved store, then the create and the delete are committed in one
    atomic batch, so a failure leaves the pending record untouched.

    Args:
        store: Record store
        pending_id: Pending record id
        reviewer_identity: Identity of the acting admin
        now: Approval time (defaults to current UTC time)

    Returns:
        The approved record including its "id"

    Raises:
        RecordNotFoundError: If the pending record does not exist
        RecordStoreReadError: If the pending record cannot be read
        ValidationError: If the reviewer note is empty
        AllocationError: If the serial cannot be computed
        StoreCommitError: If the batch did not commit
    """
    pending = await store.get(PENDING, pending_id)
    if pending is None:
        raise RecordNotFoundError(f"Pending application {pending_id} not found")
    if not has_reviewer_note(pending):
        raise ValidationError("reviewer note required", invalid_ids=[pending_id])

    reviewer = (reviewer_identity or "").strip() or settings.fallback_reviewer_identity
    serial = await next_serial(store)
    payload = build_approved_record(pending, serial, reviewer, now)

    try:
        await store.commit_batch(promotion_operations(pending_id, payload))
    except StoreCommitError as e:
        logger.warning("Promotion not committed", extra={"record_id": pending_id, "serial": serial, "error": e.message})
        raise
    logger.info(
        "Application promoted",
        extra={"record_id": pending_id, "serial": serial, "reviewed_by": reviewer},
    )
    return {**payload, "id": pending_id}
