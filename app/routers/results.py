from fastapi import APIRouter, HTTPException, Query, status

from app.dependencies.store import RecordStoreDep
from app.schemas.filter import ResultLookupResponse, ThresholdConfig
from app.services.errors import ExaminerRecordsError
from app.services.examiner_service import find_by_hsc
from app.services.threshold_filter import classify_record
from app.utils import to_http_exception

router = APIRouter(prefix="/api/v1/results", tags=["results"])


@router.get("", response_model=ResultLookupResponse)
async def lookup_result(
    store: RecordStoreDep,
    hsc_roll: str = Query(..., min_length=1),
    hsc_reg: str = Query(..., min_length=1),
) -> ResultLookupResponse:
    """Per-subject classification for the examiner with this HSC roll and registration."""
    try:
        record = await find_by_hsc(store, hsc_roll, hsc_reg)
    except ExaminerRecordsError as e:
        raise to_http_exception(e)
    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No result found")

    subjects, has_allow = classify_record(record, ThresholdConfig.default())
    serial = record.get("serial")
    return ResultLookupResponse(
        serial=str(serial) if isinstance(serial, float) else serial,
        nick_name=record.get("nick_name"),
        full_name=record.get("full_name"),
        hsc_roll=record.get("hsc_roll"),
        subjects=subjects,
        has_allow=has_allow,
    )
