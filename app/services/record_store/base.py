"""Base interface for record store backends."""

import enum
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from app.config import settings
from app.services.errors import StoreCommitError

PENDING = "pending"
APPROVED = "approved"
UPDATE_REQUESTS = "update_requests"
COLLECTIONS = (PENDING, APPROVED, UPDATE_REQUESTS)

_COMPARATORS = {
    "==": lambda a, b: a == b,
    "<": lambda a, b: a < b,
    "<=": lambda a, b: a <= b,
    ">": lambda a, b: a > b,
    ">=": lambda a, b: a >= b,
}


class OperationType(enum.Enum):
    """Batch operation types."""

    CREATE = "create"
    DELETE = "delete"


@dataclass
class FieldFilter:
    """Equality or range predicate on a single record field."""
    field: str
    op: str
    value: Any

    def __post_init__(self) -> None:
        if self.op not in _COMPARATORS:
            raise ValueError(f"Unsupported filter operator: {self.op}")


@dataclass
class BatchOperation:
    """One write inside an atomic batch.

    A CREATE with record_id=None lets the store choose the identifier. A CREATE
    on an existing identifier overwrites that record.
    """
    type: OperationType
    collection: str
    record_id: str | None = None
    payload: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(cls, collection: str, payload: dict[str, Any], record_id: str | None = None) -> "BatchOperation":
        return cls(OperationType.CREATE, collection, record_id, payload)

    @classmethod
    def delete(cls, collection: str, record_id: str) -> "BatchOperation":
        return cls(OperationType.DELETE, collection, record_id)


def coerce_number(value: Any) -> float | None:
    """Return value as a float, or None when it is absent or not numeric."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    return number if math.isfinite(number) else None


def matches_filters(record: dict[str, Any], filters: list[FieldFilter] | None) -> bool:
    """Check a record against ANDed field filters.

    Numeric filter values compare numerically (string fields are parsed);
    anything else compares as trimmed strings.
    """
    for flt in filters or []:
        raw = record.get(flt.field)
        compare = _COMPARATORS[flt.op]
        if isinstance(flt.value, (int, float)) and not isinstance(flt.value, bool):
            number = coerce_number(raw)
            if number is None or not compare(number, float(flt.value)):
                return False
        else:
            if raw is None or not compare(str(raw).strip(), str(flt.value).strip()):
                return False
    return True


class RecordStore(ABC):
    """Abstract base class for record stores (SQL, in-memory)."""

    def __init__(self, max_batch_operations: int | None = None):
        self.max_batch_operations = max_batch_operations or settings.batch_operation_ceiling

    def _check_batch(self, operations: list[BatchOperation]) -> None:
        """Reject batches that the store cannot apply."""
        if len(operations) > self.max_batch_operations:
            raise StoreCommitError(
                f"Batch of {len(operations)} operations exceeds the limit of {self.max_batch_operations}"
            )
        for op in operations:
            if op.collection not in COLLECTIONS:
                raise StoreCommitError(f"Unknown collection: {op.collection}")
            if op.type == OperationType.DELETE and not op.record_id:
                raise StoreCommitError("Delete operation requires a record id")

    @abstractmethod
    async def get(self, collection: str, record_id: str) -> dict[str, Any] | None:
        """
        Get one record.

        Args:
            collection: Collection name
            record_id: Record identifier

        Returns:
            Record dict including its "id", or None if absent

        Raises:
            RecordStoreReadError: If the read fails
        """
        pass

    @abstractmethod
    async def query(self, collection: str, filters: list[FieldFilter] | None = None) -> list[dict[str, Any]]:
        """
        Return every record of a collection matching all filters.

        Args:
            collection: Collection name
            filters: ANDed field filters; None returns the whole collection

        Raises:
            RecordStoreReadError: If the read fails
        """
        pass

    @abstractmethod
    async def commit_batch(self, operations: list[BatchOperation]) -> list[str]:
        """
        Apply all operations atomically.

        Args:
            operations: Creates and deletes to apply together

        Returns:
            Record ids of the CREATE operations, in order

        Raises:
            StoreCommitError: If the batch did not commit. Nothing was applied.
        """
        pass
