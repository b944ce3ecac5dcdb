"""Service for pending queue and approved record management."""
import logging
from datetime import datetime
from typing import Any

from app.models import ReviewStatus
from app.services.errors import RecordNotFoundError
from app.services.promotion_service import sanitize_payload
from app.services.record_store.base import APPROVED, PENDING, BatchOperation, FieldFilter, RecordStore, coerce_number

logger = logging.getLogger(__name__)

# Searched in this order; the first field with a match wins
SEARCH_FIELDS = ("t_pin", "mobile_number", "alternate_mobile", "mobile_banking_number", "serial", "email")

# Set only by reviewers, never by a public registration
_REVIEWER_FIELDS = (
    "id",
    "serial",
    "review_status",
    "reviewer_note",
    "reviewed_by",
    "approved_at",
    "t_pin",
    "id_checked",
    "rm4_comment",
    "entry_by",
)

# Never written through a profile edit
_PROTECTED_FIELDS = ("id", "approved_at")


def serial_sort_key(record: dict[str, Any]) -> tuple[int, float]:
    """Numeric serial order; records without a usable serial go last."""
    number = coerce_number(record.get("serial"))
    if number is None or number <= 0:
        return (1, 0.0)
    return (0, number)


async def list_approved(store: RecordStore) -> list[dict[str, Any]]:
    """Approved records ordered by serial."""
    records = await store.query(APPROVED)
    return sorted(records, key=serial_sort_key)


async def list_pending(store: RecordStore) -> list[dict[str, Any]]:
    """Pending records ordered by form fill-up date, then id."""
    records = await store.query(PENDING)
    return sorted(records, key=lambda r: (str(r.get("form_fill_up_date") or ""), r["id"]))


async def get_record(store: RecordStore, collection: str, record_id: str) -> dict[str, Any]:
    record = await store.get(collection, record_id)
    if record is None:
        raise RecordNotFoundError(f"Record {record_id} not found in {collection}")
    return record


async def submit_application(store: RecordStore, data: dict[str, Any], now: datetime | None = None) -> dict[str, Any]:
    """Add a public registration to the intake queue."""
    payload = {k: v for k, v in data.items() if k not in _REVIEWER_FIELDS}
    payload["review_status"] = ReviewStatus.PENDING.value
    payload["submitted_at"] = (now or datetime.utcnow()).isoformat()
    payload = sanitize_payload(payload)
    [record_id] = await store.commit_batch([BatchOperation.create(PENDING, payload)])
    logger.info("Application submitted", extra={"record_id": record_id})
    return {**payload, "id": record_id}


async def update_pending(store: RecordStore, record_id: str, changes: dict[str, Any]) -> dict[str, Any]:
    """Inline edit of a pending record. Pending records never carry a serial."""
    record = await get_record(store, PENDING, record_id)
    merged = {**record, **{k: v for k, v in changes.items() if k not in ("id", "serial")}}
    merged.pop("id", None)
    payload = sanitize_payload(merged)
    await store.commit_batch([BatchOperation.create(PENDING, payload, record_id=record_id)])
    return {**payload, "id": record_id}


async def discard_pending(store: RecordStore, record_id: str) -> None:
    await get_record(store, PENDING, record_id)
    await store.commit_batch([BatchOperation.delete(PENDING, record_id)])
    logger.info("Pending application discarded", extra={"record_id": record_id})


def apply_profile_changes(record: dict[str, Any], changes: dict[str, Any], now: datetime | None = None) -> dict[str, Any]:
    """
    Merge changes into an approved record payload.

    Numeric serials are stored as integers and last_updated is refreshed.
    """
    merged = {**record, **{k: v for k, v in changes.items() if k not in _PROTECTED_FIELDS}}
    merged.pop("id", None)
    if "serial" in changes:
        number = coerce_number(changes["serial"])
        if number is not None and number == int(number):
            merged["serial"] = int(number)
    merged["last_updated"] = (now or datetime.utcnow()).date().isoformat()
    return sanitize_payload(merged)


async def update_approved(
    store: RecordStore, record_id: str, changes: dict[str, Any], now: datetime | None = None
) -> dict[str, Any]:
    """Admin profile edit of an approved record."""
    record = await get_record(store, APPROVED, record_id)
    payload = apply_profile_changes(record, changes, now)
    await store.commit_batch([BatchOperation.create(APPROVED, payload, record_id=record_id)])
    logger.info("Examiner updated", extra={"record_id": record_id, "fields": sorted(changes)})
    return {**payload, "id": record_id}


async def delete_approved(store: RecordStore, record_id: str) -> None:
    """Delete an approved record. Its serial is never handed out again while a higher one exists."""
    record = await get_record(store, APPROVED, record_id)
    await store.commit_batch([BatchOperation.delete(APPROVED, record_id)])
    logger.info("Examiner deleted", extra={"record_id": record_id, "serial": record.get("serial")})


async def search_approved(store: RecordStore, term: str) -> tuple[str | None, list[dict[str, Any]]]:
    """
    Find approved records by T-PIN, mobile, alternate mobile, banking number, serial or email.

    Returns:
        Tuple of (matched_field, records); (None, []) when nothing matches
    """
    term = term.strip()
    if not term:
        return None, []
    number = coerce_number(term)
    for field in SEARCH_FIELDS:
        if field == "serial":
            if number is None or number != int(number):
                continue
            flt = FieldFilter("serial", "==", int(number))
        else:
            flt = FieldFilter(field, "==", term)
        records = await store.query(APPROVED, [flt])
        if records:
            return field, sorted(records, key=serial_sort_key)
    return None, []


async def find_by_hsc(store: RecordStore, hsc_roll: str, hsc_reg: str) -> dict[str, Any] | None:
    """Approved record matching both HSC roll and registration, if any."""
    records = await store.query(
        APPROVED,
        [FieldFilter("hsc_roll", "==", hsc_roll.strip()), FieldFilter("hsc_reg", "==", hsc_reg.strip())],
    )
    if not records:
        return None
    return sorted(records, key=serial_sort_key)[0]
