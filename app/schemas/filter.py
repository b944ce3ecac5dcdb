"""Threshold filter and result lookup schemas."""
from pydantic import BaseModel, Field

from app.config import settings
from app.models import ScoreClassification, Subject
from app.schemas.examiner import ExaminerRecordResponse


class ThresholdConfig(BaseModel):
    """Per-subject pass thresholds. A score passes only when strictly greater."""

    thresholds: dict[Subject, int] = Field(default_factory=dict)

    @classmethod
    def default(cls) -> "ThresholdConfig":
        """Thresholds used when a caller does not override them."""
        thresholds = {subject: settings.default_subject_threshold for subject in Subject}
        thresholds[Subject.ENGLISH] = settings.english_threshold
        return cls(thresholds=thresholds)

    def with_overrides(self, overrides: dict[Subject, int] | None) -> "ThresholdConfig":
        return ThresholdConfig(thresholds={**self.thresholds, **(overrides or {})})

    def threshold_for(self, subject: Subject) -> int:
        if subject in self.thresholds:
            return self.thresholds[subject]
        return ThresholdConfig.default().thresholds[subject]


class SubjectScore(BaseModel):
    """Score details of one subject embedded in an examiner record."""

    subject: Subject
    percentage: float | str | None = None
    set_label: str = ""
    exam_date: str = ""


class ExaminerFilterRequest(BaseModel):
    """Admin report filter."""

    categorical: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Field name to accepted values; an empty list places no constraint on the field",
    )
    subjects: list[Subject] = Field(default_factory=list)
    thresholds: dict[Subject, int] | None = Field(
        None, description="Overrides of the default per-subject thresholds"
    )


class ExaminerFilterResponse(BaseModel):
    """Matching approved records, ordered by serial."""

    total: int
    thresholds: dict[Subject, int]
    records: list[ExaminerRecordResponse]


class ExaminerExportRequest(ExaminerFilterRequest):
    """Filter plus the columns to export."""

    columns: list[str] | None = Field(None, description="Column labels to include; all columns when omitted")


class SubjectResult(BaseModel):
    """Classified subject score."""

    score: SubjectScore
    threshold: int
    classification: ScoreClassification


class ResultLookupResponse(BaseModel):
    """Self-service result for one examiner."""

    serial: int | str | None = None
    nick_name: str | None = None
    full_name: str | None = None
    hsc_roll: str | None = None
    subjects: list[SubjectResult]
    has_allow: bool
