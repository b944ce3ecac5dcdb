"""PostgreSQL record store backend implementation."""

import logging
import uuid
from typing import Any

from sqlalchemy import Select, delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.dependencies.database import DatabaseSessionManager
from app.models import ApprovedExaminer, PendingApplication, ProfileUpdateRequest
from app.services.errors import RecordStoreReadError, StoreCommitError
from app.services.record_store.base import (
    APPROVED,
    PENDING,
    UPDATE_REQUESTS,
    BatchOperation,
    FieldFilter,
    OperationType,
    RecordStore,
    coerce_number,
    matches_filters,
)

logger = logging.getLogger(__name__)

_MODELS = {
    PENDING: PendingApplication,
    APPROVED: ApprovedExaminer,
    UPDATE_REQUESTS: ProfileUpdateRequest,
}


def _serial_column_value(payload: dict[str, Any]) -> int | None:
    """Positive integer serials are mirrored into the indexed column; anything else is stored as NULL."""
    number = coerce_number(payload.get("serial"))
    if number is None or number <= 0 or number != int(number):
        return None
    return int(number)


def _to_record(row: Any) -> dict[str, Any]:
    return {**(row.data or {}), "id": row.id}


def build_select(model: Any, filters: list[FieldFilter] | None) -> Select:
    """
    Narrow a collection select with the filters the database can evaluate.

    Serial equality uses its own column and string equality compares trimmed
    JSON text. Every filter is still re-checked in Python after the read.
    """
    stmt = select(model)
    for flt in filters or []:
        if model is ApprovedExaminer and flt.field == "serial" and isinstance(flt.value, int) and flt.op == "==":
            stmt = stmt.where(ApprovedExaminer.serial == flt.value)
        elif flt.op == "==" and isinstance(flt.value, str):
            stmt = stmt.where(func.trim(model.data[flt.field].as_string()) == flt.value.strip())
    return stmt


class SqlRecordStore(RecordStore):
    """Record store backed by one table per collection. Each batch is one transaction."""

    def __init__(self, sessionmanager: DatabaseSessionManager, max_batch_operations: int | None = None):
        """
        Initialize SQL record store.

        Args:
            sessionmanager: Configured database session manager
            max_batch_operations: Per-batch operation ceiling
        """
        super().__init__(max_batch_operations)
        self._sessionmanager = sessionmanager

    def _model(self, collection: str) -> Any:
        model = _MODELS.get(collection)
        if model is None:
            raise RecordStoreReadError(f"Unknown collection: {collection}")
        return model

    async def get(self, collection: str, record_id: str) -> dict[str, Any] | None:
        model = self._model(collection)
        try:
            async with self._sessionmanager.session() as session:
                row = await session.get(model, record_id)
        except SQLAlchemyError as e:
            raise RecordStoreReadError(f"Failed to read {collection}/{record_id}: {e}") from e
        return _to_record(row) if row is not None else None

    async def query(self, collection: str, filters: list[FieldFilter] | None = None) -> list[dict[str, Any]]:
        model = self._model(collection)
        stmt = build_select(model, filters)

        try:
            async with self._sessionmanager.session() as session:
                result = await session.execute(stmt)
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise RecordStoreReadError(f"Failed to query {collection}: {e}") from e

        records = [_to_record(row) for row in rows]
        return [record for record in records if matches_filters(record, filters)]

    async def commit_batch(self, operations: list[BatchOperation]) -> list[str]:
        self._check_batch(operations)
        created_ids = []
        try:
            async with self._sessionmanager.session() as session:
                async with session.begin():
                    for op in operations:
                        model = _MODELS[op.collection]
                        if op.type == OperationType.CREATE:
                            record_id = op.record_id or uuid.uuid4().hex
                            row = await session.get(model, record_id)
                            if row is None:
                                row = model(id=record_id)
                                session.add(row)
                            row.data = dict(op.payload)
                            if model is ApprovedExaminer:
                                row.serial = _serial_column_value(op.payload)
                            created_ids.append(record_id)
                        else:
                            await session.execute(delete(model).where(model.id == op.record_id))
        except IntegrityError as e:
            logger.warning("Batch rejected by constraint", extra={"operations": len(operations)})
            raise StoreCommitError(f"Batch violates a uniqueness constraint: {e.orig}", duplicate_serial=True) from e
        except SQLAlchemyError as e:
            logger.error("Batch commit failed", exc_info=e, extra={"operations": len(operations)})
            raise StoreCommitError(f"Batch commit failed: {e}") from e
        return created_ids
