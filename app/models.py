"""Database models and enums."""
import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, String
from sqlalchemy.dialects.postgresql import JSON

from app.dependencies.database import Base


# -----------------------------------------------------------------------------
# Enums
# -----------------------------------------------------------------------------


class ReviewStatus(enum.Enum):
    """Review status of an examiner application."""

    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"


class Subject(enum.Enum):
    """Subjects with a recorded qualifying exam score."""

    ENGLISH = "English"
    BANGLA = "Bangla"
    PHYSICS = "Physics"
    CHEMISTRY = "Chemistry"
    MATH = "Math"
    BIOLOGY = "Biology"
    ICT = "ICT"

    @property
    def field_prefix(self) -> str:
        return self.name.lower()

    @property
    def marks_field(self) -> str:
        return f"{self.field_prefix}_marks"

    @property
    def set_field(self) -> str:
        return f"{self.field_prefix}_set"

    @property
    def date_field(self) -> str:
        return f"{self.field_prefix}_date"


class ScoreClassification(enum.Enum):
    """Outcome of comparing a subject score with its threshold."""

    NO_EXAM = "NoExam"
    INVALID = "Invalid"
    ALLOW = "Allow"
    NOT_ALLOW = "NotAllow"


class UpdateRequestStatus(enum.Enum):
    """Profile update request status."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# -----------------------------------------------------------------------------
# Tables
# -----------------------------------------------------------------------------


class PendingApplication(Base):
    """Intake queue entry awaiting review."""

    __tablename__ = "pending_applications"

    id = Column(String(64), primary_key=True)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class ApprovedExaminer(Base):
    """Canonical examiner record."""

    __tablename__ = "approved_examiners"

    id = Column(String(64), primary_key=True)
    # Mirrors data["serial"] when it is a positive integer; UNIQUE rejects racing allocations
    serial = Column(Integer, unique=True, nullable=True, index=True)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)


class ProfileUpdateRequest(Base):
    """Self-service profile change awaiting admin decision."""

    __tablename__ = "profile_update_requests"

    id = Column(String(64), primary_key=True)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
