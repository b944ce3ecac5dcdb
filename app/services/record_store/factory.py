"""Factory for creating record store backends."""

import logging

from app.config import settings
from app.services.record_store.base import RecordStore
from app.services.record_store.memory_backend import MemoryRecordStore

logger = logging.getLogger(__name__)

_default_store: RecordStore | None = None


def get_record_store(backend_type: str | None = None, **kwargs) -> RecordStore:
    """
    Factory function to create a record store instance.

    Args:
        backend_type: Record store type ("sql", "memory"). Defaults to settings.record_store_backend
        **kwargs: Additional backend-specific arguments
            - For "sql": sessionmanager (defaults to the configured one)
            - For all: max_batch_operations

    Returns:
        RecordStore instance

    Raises:
        ValueError: If backend_type is unsupported
    """
    backend_type = backend_type or settings.record_store_backend
    max_batch_operations = kwargs.get("max_batch_operations")

    if backend_type.lower() == "memory":
        return MemoryRecordStore(max_batch_operations=max_batch_operations)

    elif backend_type.lower() == "sql":
        from app.dependencies.database import get_sessionmanager
        from app.services.record_store.sql_backend import SqlRecordStore

        sessionmanager = kwargs.get("sessionmanager") or get_sessionmanager()
        return SqlRecordStore(sessionmanager, max_batch_operations=max_batch_operations)

    else:
        raise ValueError(f"Unsupported record store backend: {backend_type}. Supported backends: sql, memory")


def get_default_record_store() -> RecordStore:
    """
    Get the process-wide record store configured from settings.

    Returns:
        RecordStore instance
    """
    global _default_store
    if _default_store is None:
        _default_store = get_record_store()
        logger.info("Record store initialized", extra={"backend": settings.record_store_backend})
    return _default_store
