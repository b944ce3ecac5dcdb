"""Endpoints for the intake queue: public registration and admin review."""
import logging

from fastapi import APIRouter, Response, status

from app.dependencies.auth import AdminIdentityDep
from app.dependencies.store import RecordStoreDep
from app.schemas.examiner import (
    BulkPromotionRequest,
    BulkPromotionResponse,
    ExaminerRecordResponse,
    ExaminerUpdate,
    PendingApplicationCreate,
    PromotionResponse,
)
from app.services import examiner_service
from app.services.bulk_promotion import promote_all
from app.services.errors import ExaminerRecordsError
from app.services.promotion_service import promote
from app.services.record_store.base import PENDING
from app.utils import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/applications", tags=["applications"])


@router.post("", response_model=ExaminerRecordResponse, status_code=status.HTTP_201_CREATED)
async def submit_application(application: PendingApplicationCreate, store: RecordStoreDep) -> ExaminerRecordResponse:
    """Submit a registration to the intake queue."""
    try:
        record = await examiner_service.submit_application(store, application.model_dump(mode="json"))
    except ExaminerRecordsError as e:
        raise to_http_exception(e)
    return ExaminerRecordResponse.model_validate(record)


@router.get("", response_model=list[ExaminerRecordResponse])
async def list_pending_applications(store: RecordStoreDep, admin: AdminIdentityDep) -> list[ExaminerRecordResponse]:
    """List the intake queue."""
    try:
        records = await examiner_service.list_pending(store)
    except ExaminerRecordsError as e:
        raise to_http_exception(e)
    return [ExaminerRecordResponse.model_validate(r) for r in records]


@router.post("/promote", response_model=BulkPromotionResponse)
async def promote_applications(
    request: BulkPromotionRequest,
    response: Response,
    store: RecordStoreDep,
    admin: AdminIdentityDep,
) -> BulkPromotionResponse:
    """Promote several applications. Responds 207 when a batch failed part-way."""
    try:
        result = await promote_all(store, request.pending_ids, admin)
    except ExaminerRecordsError as e:
        raise to_http_exception(e)

    if result.is_partial:
        response.status_code = status.HTTP_207_MULTI_STATUS
    return BulkPromotionResponse(
        promoted_count=result.promoted_count,
        promoted_ids=result.promoted_ids,
        assigned_serials=result.assigned_serials,
        remaining_ids=result.remaining_ids,
        errors=result.errors,
    )


@router.get("/{application_id}", response_model=ExaminerRecordResponse)
async def get_pending_application(
    application_id: str, store: RecordStoreDep, admin: AdminIdentityDep
) -> ExaminerRecordResponse:
    try:
        record = await examiner_service.get_record(store, PENDING, application_id)
    except ExaminerRecordsError as e:
        raise to_http_exception(e)
    return ExaminerRecordResponse.model_validate(record)


@router.patch("/{application_id}", response_model=ExaminerRecordResponse)
async def update_pending_application(
    application_id: str,
    changes: ExaminerUpdate,
    store: RecordStoreDep,
    admin: AdminIdentityDep,
) -> ExaminerRecordResponse:
    """Inline edit of a pending application (reviewer note, status, any attribute)."""
    try:
        record = await examiner_service.update_pending(
            store, application_id, changes.model_dump(mode="json", exclude_unset=True)
        )
    except ExaminerRecordsError as e:
        raise to_http_exception(e)
    return ExaminerRecordResponse.model_validate(record)


@router.delete("/{application_id}", status_code=status.HTTP_204_NO_CONTENT)
async def discard_pending_application(application_id: str, store: RecordStoreDep, admin: AdminIdentityDep) -> None:
    try:
        await examiner_service.discard_pending(store, application_id)
    except ExaminerRecordsError as e:
        raise to_http_exception(e)


@router.post("/{application_id}/promote", response_model=PromotionResponse)
async def promote_application(
    application_id: str, store: RecordStoreDep, admin: AdminIdentityDep
) -> PromotionResponse:
    """Move an application to the examiner records with the next serial."""
    try:
        record = await promote(store, application_id, admin)
    except ExaminerRecordsError as e:
        logger.warning("Promotion refused", extra={"record_id": application_id, "error": e.message})
        raise to_http_exception(e)
    return PromotionResponse(
        message=f"Examiner transferred to records. Assigned SL: {record['serial']}",
        record=ExaminerRecordResponse.model_validate(record),
    )
