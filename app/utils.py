from fastapi import HTTPException, status

from app.services.errors import (
    AllocationError,
    ExaminerRecordsError,
    RecordNotFoundError,
    RecordStoreReadError,
    StoreCommitError,
    ValidationError,
)


def to_http_exception(error: ExaminerRecordsError) -> HTTPException:
    """Translate a service error into the HTTP error returned to the caller."""
    if isinstance(error, ValidationError):
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": error.message, "invalid_ids": error.invalid_ids},
        )
    if isinstance(error, RecordNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error.message)
    if isinstance(error, (AllocationError, RecordStoreReadError)):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=error.message)
    if isinstance(error, StoreCommitError):
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT if error.duplicate_serial else status.HTTP_502_BAD_GATEWAY,
            detail={"message": error.message, "promoted_count": error.promoted_count},
        )
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=error.message)
