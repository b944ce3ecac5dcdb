"""Service for allocating examiner serial numbers (SL)."""
import logging

from app.services.errors import AllocationError, RecordStoreReadError
from app.services.record_store.base import APPROVED, RecordStore, coerce_number

logger = logging.getLogger(__name__)


async def current_max_serial(store: RecordStore) -> int:
    """
    Return the highest serial present in the approved collection.

    Every approved record is scanned and its serial parsed as a number; records
    with a missing or non-numeric serial are ignored. An empty store yields 0.

    Raises:
        AllocationError: If the approved collection cannot be read
    """
    try:
        records = await store.query(APPROVED)
    except RecordStoreReadError as e:
        logger.error("Serial scan failed", extra={"error": str(e)})
        raise AllocationError(f"Cannot compute next serial: {e.message}") from e

    max_serial = 0
    for record in records:
        number = coerce_number(record.get("serial"))
        if number is not None and number > max_serial:
            max_serial = int(number)
    return max_serial


async def next_serial(store: RecordStore) -> int:
    """Return the next unused serial number."""
    return await current_max_serial(store) + 1


async def next_serial_block(store: RecordStore, count: int) -> list[int]:
    """
    Return count contiguous ascending serials above the current maximum.

    Args:
        store: Record store
        count: Number of serials needed

    Returns:
        [max + 1, ..., max + count]
    """
    if count < 0:
        raise ValueError(f"Serial block size cannot be negative: {count}")
    max_serial = await current_max_serial(store)
    block = list(range(max_serial + 1, max_serial + count + 1))
    logger.info("Serial block allocated", extra={"start": max_serial + 1, "count": count})
    return block
