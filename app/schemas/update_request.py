"""Profile update request schemas."""
from typing import Any

from pydantic import BaseModel, ConfigDict

from app.schemas.examiner import ExaminerFields


class UpdateRequestCreate(BaseModel):
    """Self-service change request, identified by HSC roll and registration."""

    hsc_roll: str
    hsc_reg: str
    updated_data: ExaminerFields


class FieldChange(BaseModel):
    old: Any = None
    new: Any = None


class UpdateRequestResponse(BaseModel):
    """Queued request with its effective changes."""

    model_config = ConfigDict(extra="allow")

    id: str
    examiner_id: str
    status: str
    timestamp: str
    nick_name: str | None = None
    mobile_number: str | None = None
    hsc_roll: str | None = None
    hsc_reg: str | None = None
    updated_data: dict[str, Any]
    changes: dict[str, FieldChange] = {}
