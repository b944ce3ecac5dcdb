"""Service for importing examiner spreadsheets into the pending or approved collection."""

import io
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

import pandas as pd

from app.config import settings
from app.models import ReviewStatus
from app.services.errors import StoreCommitError
from app.services.examiner_columns import field_for_header
from app.services.promotion_service import sanitize_payload
from app.services.record_store.base import APPROVED, PENDING, BatchOperation, RecordStore, coerce_number

logger = logging.getLogger(__name__)

IMPORT_TARGETS = (APPROVED, PENDING)


class ExaminerUploadParseError(Exception):
    """Raised when file parsing fails."""

    pass


class ExaminerUploadValidationError(Exception):
    """Raised when file validation fails."""

    pass


@dataclass
class ImportResult:
    target: str
    total_rows: int
    imported_count: int = 0
    errors: list[str] = field(default_factory=list)


def parse_upload_file(file_content: bytes, filename: str) -> pd.DataFrame:
    """
    Parse Excel or CSV file and return DataFrame with every cell as text.

    Args:
        file_content: Raw file content as bytes
        filename: Original filename for type detection

    Returns:
        DataFrame with parsed data

    Raises:
        ExaminerUploadParseError: If file cannot be parsed
    """
    file_lower = filename.lower()
    try:
        if file_lower.endswith((".xlsx", ".xls")):
            df = pd.read_excel(io.BytesIO(file_content), engine="openpyxl", dtype=str)
        elif file_lower.endswith(".csv"):
            df = pd.read_csv(io.BytesIO(file_content), dtype=str)
        else:
            raise ExaminerUploadParseError(f"Unsupported file type. Expected .xlsx, .xls, or .csv, got {filename}")
    except pd.errors.EmptyDataError:
        raise ExaminerUploadParseError("File is empty or contains no data")
    except ExaminerUploadParseError:
        raise
    except Exception as e:
        raise ExaminerUploadParseError(f"Failed to parse file: {str(e)}")

    df = df.dropna(how="all")
    if df.empty:
        raise ExaminerUploadParseError("File is empty or contains no data")
    return df


def dataframe_rows(df: pd.DataFrame) -> list[dict[str, Any]]:
    """Convert a parsed sheet into row dicts, dropping empty cells."""
    rows = []
    for _, row in df.iterrows():
        rows.append({str(header): value for header, value in row.items() if not pd.isna(value)})
    return rows


def validate_columns(rows: list[dict[str, Any]]) -> None:
    """Reject sheets where no header maps to a known examiner column."""
    headers = {header for row in rows for header in row}
    if not any(field_for_header(header) for header in headers):
        raise ExaminerUploadValidationError("No recognised examiner columns found in the header row")


def map_row(row: dict[str, Any], target: str, now: datetime | None = None) -> dict[str, Any]:
    """
    Map one sheet row to a record payload.

    Unknown columns are ignored. "ID Checked?" is true for yes/true, "SL" is
    parsed as a number (0 when not numeric). A missing status defaults to
    Approved for the approved collection and Pending for the intake queue.
    """
    record: dict[str, Any] = {}
    for header, value in row.items():
        field_name = field_for_header(header)
        if field_name is None or value is None:
            continue
        if field_name == "id_checked":
            record[field_name] = str(value).strip().lower() in ("yes", "true")
        elif field_name == "serial":
            number = coerce_number(value)
            if number is None:
                record[field_name] = 0
            else:
                record[field_name] = int(number) if number == int(number) else number
        else:
            record[field_name] = str(value).strip()

    if not record.get("review_status"):
        record["review_status"] = (
            ReviewStatus.APPROVED.value if target == APPROVED else ReviewStatus.PENDING.value
        )
    record.setdefault("mobile_number", "")
    record["imported_at"] = (now or datetime.utcnow()).isoformat()
    return sanitize_payload(record)


async def import_records(
    store: RecordStore,
    rows: list[dict[str, Any]],
    target: str,
    chunk_size: int | None = None,
    now: datetime | None = None,
) -> ImportResult:
    """
    Write mapped rows into the target collection in ceiling-safe batches.

    Batches commit sequentially; on a failed batch the import stops and the
    result reports how many rows were written before it.

    Raises:
        ExaminerUploadValidationError: If target is unknown or no column is recognised
    """
    if target not in IMPORT_TARGETS:
        raise ExaminerUploadValidationError(f"Unknown import target: {target}. Expected one of {IMPORT_TARGETS}")
    validate_columns(rows)

    now = now or datetime.utcnow()
    records = [map_row(row, target, now) for row in rows]
    size = max(1, min(chunk_size or settings.chunk_size_for(1), store.max_batch_operations))
    batches = [records[i : i + size] for i in range(0, len(records), size)]

    result = ImportResult(target=target, total_rows=len(records))
    for index, batch in enumerate(batches, start=1):
        try:
            await store.commit_batch([BatchOperation.create(target, record) for record in batch])
        except StoreCommitError as e:
            result.errors.append(
                f"Batch {index} of {len(batches)} failed after {result.imported_count} imported: {e.message}"
            )
            logger.error(
                "Import stopped",
                extra={"target": target, "batch": index, "imported_count": result.imported_count, "error": e.message},
            )
            return result
        result.imported_count += len(batch)

    logger.info("Import completed", extra={"target": target, "imported_count": result.imported_count})
    return result
