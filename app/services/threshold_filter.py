"""Threshold filter engine for approved examiner reports and result lookups.

Everything here is a pure function of its arguments so the admin report and
the self-service result page classify scores identically.
"""
from collections.abc import Iterable
from typing import Any

from app.models import ScoreClassification, Subject
from app.schemas.filter import SubjectResult, SubjectScore, ThresholdConfig
from app.services.record_store.base import coerce_number

# Categorical fields offered by the admin report
FILTER_FIELDS = (
    "t_pin",
    "inst",
    "dept",
    "hsc_batch",
    "reviewer_note",
    "check_scripts_campus",
    "selected_subject",
    "training_report",
)


def _field_text(record: dict[str, Any], field: str) -> str:
    value = record.get(field)
    return "" if value is None else str(value).strip()


def classify_score(value: Any, threshold: int | float) -> ScoreClassification:
    """
    Classify one subject score against its threshold.

    Empty is NoExam, non-numeric is Invalid, strictly greater than the
    threshold is Allow, anything else (including equal) is NotAllow.
    """
    if value is None or str(value).strip() == "":
        return ScoreClassification.NO_EXAM
    number = coerce_number(value)
    if number is None:
        return ScoreClassification.INVALID
    if number > threshold:
        return ScoreClassification.ALLOW
    return ScoreClassification.NOT_ALLOW


def subject_score(record: dict[str, Any], subject: Subject) -> SubjectScore:
    """Extract the embedded score of a subject from a flat record."""
    raw = record.get(subject.marks_field)
    number = coerce_number(raw)
    if number is not None:
        percentage: float | str | None = number
    elif raw is None or str(raw).strip() == "":
        percentage = None
    else:
        percentage = str(raw).strip()
    return SubjectScore(
        subject=subject,
        percentage=percentage,
        set_label=_field_text(record, subject.set_field),
        exam_date=_field_text(record, subject.date_field),
    )


def passes_categorical(record: dict[str, Any], categorical: dict[str, Iterable[str]]) -> bool:
    """Every non-empty accepted set must contain the record's trimmed field value."""
    for field, accepted in categorical.items():
        accepted_values = {str(value).strip() for value in accepted}
        if accepted_values and _field_text(record, field) not in accepted_values:
            return False
    return True


def passes_subjects(record: dict[str, Any], subjects: Iterable[Subject], thresholds: ThresholdConfig) -> bool:
    """True when no subject is selected or any selected subject's score passes its threshold."""
    selected = list(subjects)
    if not selected:
        return True
    return any(
        classify_score(record.get(subject.marks_field), thresholds.threshold_for(subject)) == ScoreClassification.ALLOW
        for subject in selected
    )


def evaluate(
    records: Iterable[dict[str, Any]],
    categorical: dict[str, Iterable[str]],
    subjects: Iterable[Subject],
    thresholds: ThresholdConfig,
) -> list[dict[str, Any]]:
    """
    Return the records matching all categorical filters and the subject predicate.

    Args:
        records: Approved records; input order is preserved
        categorical: Field name to accepted values (empty set means no constraint)
        subjects: Selected subjects, combined with OR
        thresholds: Per-subject thresholds

    Returns:
        Matching records
    """
    selected = list(subjects)
    return [
        record
        for record in records
        if passes_categorical(record, categorical) and passes_subjects(record, selected, thresholds)
    ]


def classify_record(record: dict[str, Any], thresholds: ThresholdConfig) -> tuple[list[SubjectResult], bool]:
    """Classify every subject of a record. The flag is True when at least one subject is Allow."""
    results = []
    for subject in Subject:
        threshold = thresholds.threshold_for(subject)
        results.append(
            SubjectResult(
                score=subject_score(record, subject),
                threshold=threshold,
                classification=classify_score(record.get(subject.marks_field), threshold),
            )
        )
    has_allow = any(result.classification == ScoreClassification.ALLOW for result in results)
    return results, has_allow


def filter_options(records: Iterable[dict[str, Any]], fields: Iterable[str] = FILTER_FIELDS) -> dict[str, list[str]]:
    """Distinct trimmed values per field, sorted; blank values appear as ""."""
    rows = list(records)
    return {field: sorted({_field_text(record, field) for record in rows}) for field in fields}
