"""Examiner record schemas."""
from pydantic import BaseModel, ConfigDict, Field

from app.models import ReviewStatus


class ExaminerFields(BaseModel):
    """Attribute set shared by pending applications and approved examiners."""

    # Personal Info
    nick_name: str | None = None
    full_name: str | None = None
    full_name_bn: str | None = None
    father_name: str | None = None
    father_occupation: str | None = None
    father_designation: str | None = None
    father_mobile: str | None = None
    mother_name: str | None = None
    mother_occupation: str | None = None
    mother_mobile: str | None = None
    gender: str | None = None
    religion: str | None = None
    dob: str | None = None
    blood_group: str | None = None
    blood_donate: str | None = None
    nid_no: str | None = None
    present_area: str | None = None
    home_district: str | None = None
    mobile_number: str | None = None
    alternate_mobile: str | None = None
    email: str | None = None
    facebook_id: str | None = None
    teams_skype_id: str | None = None
    photo_url: str | None = None

    # Institution/Academic
    inst: str | None = None
    dept: str | None = None
    hsc_batch: str | None = None
    hsc_roll: str | None = None
    hsc_reg: str | None = None
    hsc_board: str | None = None
    hsc_gpa: str | None = None
    college_name: str | None = None
    medium_hsc: str | None = None
    admission_position: str | None = None
    admission_unit: str | None = None
    udvash_roll: str | None = None
    participated_programs: str | None = None

    # Marks & Sets
    english_marks: str | None = None
    english_set: str | None = None
    english_date: str | None = None
    bangla_marks: str | None = None
    bangla_set: str | None = None
    bangla_date: str | None = None
    physics_marks: str | None = None
    physics_set: str | None = None
    physics_date: str | None = None
    chemistry_marks: str | None = None
    chemistry_set: str | None = None
    chemistry_date: str | None = None
    math_marks: str | None = None
    math_set: str | None = None
    math_date: str | None = None
    biology_marks: str | None = None
    biology_set: str | None = None
    biology_date: str | None = None
    ict_marks: str | None = None
    ict_set: str | None = None
    ict_date: str | None = None

    # Payment/Banking
    payment_method: str | None = None
    mobile_banking_number: str | None = None
    mobile_banking_owner: str | None = None
    mobile_banking_confirmed_by: str | None = None
    tin_number: str | None = None
    tin_date_link: str | None = None

    # Examiner Specifics
    t_pin: str | None = None
    review_status: ReviewStatus | None = None
    reviewer_note: str | None = None
    rm4_comment: str | None = None
    running_program: str | None = None
    previous_program: str | None = None
    physically_check_subjects: str | None = None
    online_subject_permission: str | None = None
    script_check_method: str | None = None

    # Subjects
    subject1: str | None = None
    subject2: str | None = None
    subject3: str | None = None
    subject4: str | None = None
    subject5: str | None = None
    version_interested: str | None = None
    selected_subject: str | None = None

    # Logistics
    branch: str | None = None
    form_fill_up_campus: str | None = None
    check_scripts_campus: str | None = None
    check_scripts_shift: str | None = None
    reference: str | None = None
    entry_by: str | None = None
    form_fill_up_date: str | None = None
    training_report: str | None = None
    training_date: str | None = None
    id_checked: bool | None = None
    document_link: str | None = None
    old_id: str | None = None


class PendingApplicationCreate(ExaminerFields):
    """Public registration submission. Reviewer fields are dropped by the service."""

    full_name: str
    mobile_number: str


class ExaminerUpdate(ExaminerFields):
    """Partial edit of a pending or approved record. Only fields that are sent are applied."""

    serial: int | str | None = None


class ExaminerRecordResponse(ExaminerFields):
    """Pending or approved record as stored."""

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: str
    serial: int | float | str | None = None
    # Imported sheets may carry free-text statuses
    review_status: str | None = None
    reviewed_by: str | None = None
    approved_at: str | None = None
    last_updated: str | None = None


class BulkPromotionRequest(BaseModel):
    """Pending record ids to promote, in serial order."""

    pending_ids: list[str] = Field(min_length=1)


class PromotionResponse(BaseModel):
    """Single promotion result."""

    message: str
    record: ExaminerRecordResponse


class BulkPromotionResponse(BaseModel):
    """Bulk promotion result. remaining_ids are still pending and can be promoted again."""

    promoted_count: int
    promoted_ids: list[str]
    assigned_serials: dict[str, int]
    remaining_ids: list[str]
    errors: list[str]


class ExaminerImportResponse(BaseModel):
    """Bulk import result."""

    target: str
    total_rows: int
    imported_count: int
    errors: list[str]


class ExaminerSearchResponse(BaseModel):
    """Approved records matching a search term."""

    term: str
    matched_field: str | None = None
    records: list[ExaminerRecordResponse]
