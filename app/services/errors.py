"""Exceptions raised by the examiner record services."""


class ExaminerRecordsError(Exception):
    """Base class for examiner record service errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ExaminerRecordsError):
    """Raised when a precondition is not met. No store write has been attempted."""

    def __init__(self, message: str, invalid_ids: list[str] | None = None):
        super().__init__(message)
        self.invalid_ids = list(invalid_ids or [])


class RecordNotFoundError(ExaminerRecordsError):
    """Raised when a record does not exist in the expected collection."""

    pass


class AllocationError(ExaminerRecordsError):
    """Raised when the next serial number cannot be computed."""

    pass


class RecordStoreReadError(ExaminerRecordsError):
    """Raised when the record store fails to read."""

    pass


class StoreCommitError(ExaminerRecordsError):
    """Raised when an atomic batch fails to commit.

    promoted_count carries how many records were committed by earlier batches
    of the same operation (always 0 for single-batch operations).
    """

    def __init__(self, message: str, promoted_count: int = 0, duplicate_serial: bool = False):
        super().__init__(message)
        self.promoted_count = promoted_count
        self.duplicate_serial = duplicate_serial
