"""Admin endpoints for approved examiner records and reports."""
import io
import logging

from fastapi import APIRouter, File, HTTPException, Query, UploadFile, status
from fastapi.responses import StreamingResponse

from app.dependencies.auth import AdminIdentityDep
from app.dependencies.store import RecordStoreDep
from app.schemas.examiner import (
    ExaminerImportResponse,
    ExaminerRecordResponse,
    ExaminerSearchResponse,
    ExaminerUpdate,
)
from app.schemas.filter import (
    ExaminerExportRequest,
    ExaminerFilterRequest,
    ExaminerFilterResponse,
    ThresholdConfig,
)
from app.services import examiner_service
from app.services.errors import ExaminerRecordsError
from app.services.examiner_export import export_csv
from app.services.examiner_import import (
    ExaminerUploadParseError,
    ExaminerUploadValidationError,
    dataframe_rows,
    import_records,
    parse_upload_file,
)
from app.services.record_store.base import APPROVED, PENDING
from app.services.serial_allocator import next_serial
from app.services.threshold_filter import evaluate, filter_options
from app.utils import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/examiners", tags=["examiners"])


async def _run_filter(store, request: ExaminerFilterRequest) -> tuple[ThresholdConfig, list[dict]]:
    thresholds = ThresholdConfig.default().with_overrides(request.thresholds)
    try:
        records = await examiner_service.list_approved(store)
    except ExaminerRecordsError as e:
        raise to_http_exception(e)
    return thresholds, evaluate(records, request.categorical, request.subjects, thresholds)


@router.get("", response_model=list[ExaminerRecordResponse])
async def list_examiners(store: RecordStoreDep, admin: AdminIdentityDep) -> list[ExaminerRecordResponse]:
    """List approved examiners ordered by serial."""
    try:
        records = await examiner_service.list_approved(store)
    except ExaminerRecordsError as e:
        raise to_http_exception(e)
    return [ExaminerRecordResponse.model_validate(r) for r in records]


@router.get("/next-serial", response_model=dict)
async def get_next_serial(store: RecordStoreDep, admin: AdminIdentityDep) -> dict:
    """Serial the next promotion would receive."""
    try:
        return {"next_serial": await next_serial(store)}
    except ExaminerRecordsError as e:
        raise to_http_exception(e)


@router.get("/search", response_model=ExaminerSearchResponse)
async def search_examiners(
    store: RecordStoreDep,
    admin: AdminIdentityDep,
    term: str = Query(..., min_length=1, description="T-PIN, mobile, SL, email or banking number"),
) -> ExaminerSearchResponse:
    try:
        matched_field, records = await examiner_service.search_approved(store, term)
    except ExaminerRecordsError as e:
        raise to_http_exception(e)
    if not records:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No examiner found. Try T-PIN, Mobile, SL, Email or Banking Number.",
        )
    return ExaminerSearchResponse(
        term=term,
        matched_field=matched_field,
        records=[ExaminerRecordResponse.model_validate(r) for r in records],
    )


@router.get("/filter-options", response_model=dict[str, list[str]])
async def get_filter_options(store: RecordStoreDep, admin: AdminIdentityDep) -> dict[str, list[str]]:
    """Distinct values of each categorical filter field."""
    try:
        records = await examiner_service.list_approved(store)
    except ExaminerRecordsError as e:
        raise to_http_exception(e)
    return filter_options(records)


@router.post("/filter", response_model=ExaminerFilterResponse)
async def filter_examiners(
    request: ExaminerFilterRequest, store: RecordStoreDep, admin: AdminIdentityDep
) -> ExaminerFilterResponse:
    """Approved examiners matching categorical filters and subject thresholds."""
    thresholds, matches = await _run_filter(store, request)
    return ExaminerFilterResponse(
        total=len(matches),
        thresholds=thresholds.thresholds,
        records=[ExaminerRecordResponse.model_validate(r) for r in matches],
    )


@router.post("/export")
async def export_examiners(
    request: ExaminerExportRequest, store: RecordStoreDep, admin: AdminIdentityDep
) -> StreamingResponse:
    """Download the filter result as CSV."""
    _, matches = await _run_filter(store, request)
    try:
        content = export_csv(matches, request.columns)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return StreamingResponse(
        io.BytesIO(content.encode("utf-8")),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="filtered_examiners.csv"'},
    )


@router.post("/import", response_model=ExaminerImportResponse)
async def import_examiners(
    store: RecordStoreDep,
    admin: AdminIdentityDep,
    file: UploadFile = File(...),
    target: str = Query(APPROVED, description=f"'{APPROVED}' or '{PENDING}'"),
) -> ExaminerImportResponse:
    """Import an Excel/CSV sheet into the examiner records or the intake queue."""
    file_content = await file.read()
    try:
        df = parse_upload_file(file_content, file.filename or "unknown")
        result = await import_records(store, dataframe_rows(df), target)
    except (ExaminerUploadParseError, ExaminerUploadValidationError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ExaminerRecordsError as e:
        raise to_http_exception(e)

    return ExaminerImportResponse(
        target=result.target,
        total_rows=result.total_rows,
        imported_count=result.imported_count,
        errors=result.errors,
    )


@router.get("/{examiner_id}", response_model=ExaminerRecordResponse)
async def get_examiner(examiner_id: str, store: RecordStoreDep, admin: AdminIdentityDep) -> ExaminerRecordResponse:
    try:
        record = await examiner_service.get_record(store, APPROVED, examiner_id)
    except ExaminerRecordsError as e:
        raise to_http_exception(e)
    return ExaminerRecordResponse.model_validate(record)


@router.patch("/{examiner_id}", response_model=ExaminerRecordResponse)
async def update_examiner(
    examiner_id: str,
    changes: ExaminerUpdate,
    store: RecordStoreDep,
    admin: AdminIdentityDep,
) -> ExaminerRecordResponse:
    """Edit an examiner profile; last_updated is refreshed."""
    try:
        record = await examiner_service.update_approved(
            store, examiner_id, changes.model_dump(mode="json", exclude_unset=True)
        )
    except ExaminerRecordsError as e:
        raise to_http_exception(e)
    return ExaminerRecordResponse.model_validate(record)


@router.delete("/{examiner_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_examiner(examiner_id: str, store: RecordStoreDep, admin: AdminIdentityDep) -> None:
    try:
        await examiner_service.delete_approved(store, examiner_id)
    except ExaminerRecordsError as e:
        raise to_http_exception(e)
    logger.info("Examiner deleted by admin", extra={"record_id": examiner_id, "admin": admin})
