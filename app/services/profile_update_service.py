"""Service for self-service profile update requests."""
import logging
from datetime import datetime
from typing import Any

from app.models import UpdateRequestStatus
from app.services.errors import RecordNotFoundError, ValidationError
from app.services.examiner_service import apply_profile_changes, get_record
from app.services.promotion_service import sanitize_payload
from app.services.record_store.base import APPROVED, UPDATE_REQUESTS, BatchOperation, RecordStore

logger = logging.getLogger(__name__)

# Requesters cannot change identity or review fields of their record
_NON_EDITABLE_FIELDS = (
    "id",
    "serial",
    "review_status",
    "reviewer_note",
    "reviewed_by",
    "approved_at",
    "last_updated",
    "t_pin",
)


async def submit_update_request(
    store: RecordStore, examiner_id: str, updated_data: dict[str, Any], now: datetime | None = None
) -> dict[str, Any]:
    """
    Queue a profile change for admin review.

    Args:
        store: Record store
        examiner_id: Approved record id
        updated_data: Fields the examiner wants to change

    Raises:
        RecordNotFoundError: If the examiner does not exist
        ValidationError: If no editable field is supplied
    """
    original = await get_record(store, APPROVED, examiner_id)
    changes = {k: v for k, v in updated_data.items() if k not in _NON_EDITABLE_FIELDS}
    if not changes:
        raise ValidationError("no editable fields supplied", invalid_ids=[examiner_id])

    original_data = {k: v for k, v in original.items() if k != "id"}
    payload = sanitize_payload(
        {
            "examiner_id": examiner_id,
            "original_data": original_data,
            "updated_data": changes,
            "status": UpdateRequestStatus.PENDING.value,
            "timestamp": (now or datetime.utcnow()).isoformat(),
            "hsc_roll": original.get("hsc_roll"),
            "hsc_reg": original.get("hsc_reg"),
            "nick_name": original.get("nick_name"),
            "mobile_number": original.get("mobile_number"),
        }
    )
    [request_id] = await store.commit_batch([BatchOperation.create(UPDATE_REQUESTS, payload)])
    logger.info("Profile update requested", extra={"request_id": request_id, "examiner_id": examiner_id})
    return {**payload, "id": request_id}


async def list_update_requests(store: RecordStore) -> list[dict[str, Any]]:
    """Requests, newest first."""
    requests = await store.query(UPDATE_REQUESTS)
    return sorted(requests, key=lambda r: str(r.get("timestamp") or ""), reverse=True)


def changed_fields(request: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Fields whose requested value differs from the snapshot taken at request time."""
    original = request.get("original_data") or {}
    updated = request.get("updated_data") or {}
    return {
        key: {"old": original.get(key), "new": value}
        for key, value in updated.items()
        if key != "id" and original.get(key) != value
    }


async def approve_update_request(
    store: RecordStore, request_id: str, now: datetime | None = None
) -> dict[str, Any]:
    """
    Apply a request to its examiner and remove the request in one atomic batch.

    Returns:
        The updated approved record

    Raises:
        RecordNotFoundError: If the request or its examiner no longer exists
    """
    request = await get_record(store, UPDATE_REQUESTS, request_id)
    examiner_id = request.get("examiner_id")
    if not examiner_id:
        raise RecordNotFoundError(f"Update request {request_id} has no examiner")
    examiner = await get_record(store, APPROVED, examiner_id)

    changes = {k: v for k, v in (request.get("updated_data") or {}).items() if k not in _NON_EDITABLE_FIELDS}
    payload = apply_profile_changes(examiner, changes, now)
    await store.commit_batch(
        [
            BatchOperation.create(APPROVED, payload, record_id=examiner_id),
            BatchOperation.delete(UPDATE_REQUESTS, request_id),
        ]
    )
    logger.info("Profile update approved", extra={"request_id": request_id, "examiner_id": examiner_id})
    return {**payload, "id": examiner_id}


async def reject_update_request(store: RecordStore, request_id: str) -> None:
    await get_record(store, UPDATE_REQUESTS, request_id)
    await store.commit_batch([BatchOperation.delete(UPDATE_REQUESTS, request_id)])
    logger.info("Profile update rejected", extra={"request_id": request_id})
