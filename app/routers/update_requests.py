"""Self-service profile update requests and their admin review."""
from fastapi import APIRouter, HTTPException, status

from app.dependencies.auth import AdminIdentityDep
from app.dependencies.store import RecordStoreDep
from app.schemas.examiner import ExaminerRecordResponse
from app.schemas.update_request import UpdateRequestCreate, UpdateRequestResponse
from app.services import profile_update_service
from app.services.errors import ExaminerRecordsError
from app.services.examiner_service import find_by_hsc
from app.utils import to_http_exception

router = APIRouter(prefix="/api/v1/update-requests", tags=["update-requests"])


@router.post("", response_model=UpdateRequestResponse, status_code=status.HTTP_201_CREATED)
async def create_update_request(request: UpdateRequestCreate, store: RecordStoreDep) -> UpdateRequestResponse:
    """Queue a profile change for the examiner identified by HSC roll and registration."""
    try:
        examiner = await find_by_hsc(store, request.hsc_roll, request.hsc_reg)
        if examiner is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Examiner not found")
        created = await profile_update_service.submit_update_request(
            store, examiner["id"], request.updated_data.model_dump(mode="json", exclude_unset=True)
        )
    except ExaminerRecordsError as e:
        raise to_http_exception(e)
    return UpdateRequestResponse.model_validate(
        {**created, "changes": profile_update_service.changed_fields(created)}
    )


@router.get("", response_model=list[UpdateRequestResponse])
async def list_update_requests(store: RecordStoreDep, admin: AdminIdentityDep) -> list[UpdateRequestResponse]:
    """Pending requests, newest first, with the fields each would change."""
    try:
        requests = await profile_update_service.list_update_requests(store)
    except ExaminerRecordsError as e:
        raise to_http_exception(e)
    return [
        UpdateRequestResponse.model_validate({**r, "changes": profile_update_service.changed_fields(r)})
        for r in requests
    ]


@router.post("/{request_id}/approve", response_model=ExaminerRecordResponse)
async def approve_update_request(
    request_id: str, store: RecordStoreDep, admin: AdminIdentityDep
) -> ExaminerRecordResponse:
    try:
        record = await profile_update_service.approve_update_request(store, request_id)
    except ExaminerRecordsError as e:
        raise to_http_exception(e)
    return ExaminerRecordResponse.model_validate(record)


@router.post("/{request_id}/reject", status_code=status.HTTP_204_NO_CONTENT)
async def reject_update_request(request_id: str, store: RecordStoreDep, admin: AdminIdentityDep) -> None:
    try:
        await profile_update_service.reject_update_request(store, request_id)
    except ExaminerRecordsError as e:
        raise to_http_exception(e)
