"""
Admissions Models

Course applications and their lifecycle. The two partial unique indexes are
the storage-level backstop for the workflow rules: one live application per
student and course, and at most one accepted application per student.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, Text, func, text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from career_platform.modules.catalog.models import Course, Institution
from career_platform.modules.shared import BaseModel, enum_values


class ApplicationStatus(str, enum.Enum):
    """Status of a course application."""

    PENDING = "pending"
    ADMITTED = "admitted"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    REJECTED = "rejected"
    WAITLISTED = "waitlisted"


# Statuses that no longer count towards caps or uniqueness
CLOSED_STATUSES = frozenset({ApplicationStatus.DECLINED, ApplicationStatus.REJECTED})

# Statuses whose decline frees a seat on the course
SEAT_HOLDING_STATUSES = frozenset({ApplicationStatus.ADMITTED, ApplicationStatus.ACCEPTED})


class DeclineReason(str, enum.Enum):
    """Why an application ended up declined."""

    SUPERSEDED_BY_ACCEPTANCE = "SuperSededByAcceptance"
    STUDENT_DECLINED = "StudentDeclined"


class AdmissionSource(str, enum.Enum):
    """How an admitted offer was produced."""

    DIRECT = "direct"
    WAITLIST_PROMOTION = "waitlist_promotion"


class Application(BaseModel):
    """
    A student's application to one course.

    `institution_id` is denormalized from the course so per-institution caps
    can be counted without a join. Every status change stamps the matching
    `<status>_at` column.
    """

    __tablename__ = "applications"

    student_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
    )
    course_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("courses.id", ondelete="CASCADE"),
        nullable=False,
    )
    institution_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("institutions.id", ondelete="CASCADE"),
        nullable=False,
    )

    status: Mapped[ApplicationStatus] = mapped_column(
        Enum(ApplicationStatus, name="application_status", values_callable=enum_values),
        nullable=False,
        default=ApplicationStatus.PENDING,
    )

    # Applicant snapshot at submission time
    qualifications: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    previous_school: Mapped[str | None] = mapped_column(String(200), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    applied_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    admitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    accepted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    declined_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    rejected_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    waitlisted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    decline_reason: Mapped[DeclineReason | None] = mapped_column(
        Enum(DeclineReason, name="decline_reason", values_callable=enum_values),
        nullable=True,
    )
    admission_source: Mapped[AdmissionSource | None] = mapped_column(
        Enum(AdmissionSource, name="admission_source", values_callable=enum_values),
        nullable=True,
    )

    course: Mapped[Course] = relationship("Course", lazy="raise")
    institution: Mapped[Institution] = relationship("Institution", lazy="raise")

    __table_args__ = (
        Index("ix_applications_student_id", "student_id"),
        Index("ix_applications_course_status_applied", "course_id", "status", "applied_at"),
        Index("ix_applications_institution_status", "institution_id", "status"),
        Index(
            "uq_applications_live_student_course",
            "student_id",
            "course_id",
            unique=True,
            postgresql_where=text("status NOT IN ('declined', 'rejected')"),
        ),
        Index(
            "uq_applications_one_accepted_per_student",
            "student_id",
            unique=True,
            postgresql_where=text("status = 'accepted'"),
        ),
    )


# Timestamp column stamped when an application enters each status
STATUS_TIMESTAMP_FIELDS: dict[ApplicationStatus, str] = {
    ApplicationStatus.ADMITTED: "admitted_at",
    ApplicationStatus.ACCEPTED: "accepted_at",
    ApplicationStatus.DECLINED: "declined_at",
    ApplicationStatus.REJECTED: "rejected_at",
    ApplicationStatus.WAITLISTED: "waitlisted_at",
}
