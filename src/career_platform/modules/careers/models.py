"""
Careers Models

Student applications to job postings.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, String, Text, func
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from career_platform.modules.catalog.models import Job
from career_platform.modules.shared import BaseModel, enum_values


class JobApplicationStatus(str, enum.Enum):
    """Status of a job application."""

    PENDING = "pending"
    SHORTLISTED = "shortlisted"
    HIRED = "hired"
    REJECTED = "rejected"


class JobApplication(BaseModel):
    """A student's application to one job. At most one per (student, job)."""

    __tablename__ = "job_applications"

    student_id: Mapped[str] = mapped_column(
        String(128),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
    )
    job_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("jobs.id", ondelete="CASCADE"),
        nullable=False,
    )
    company_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
    )
    status: Mapped[JobApplicationStatus] = mapped_column(
        Enum(JobApplicationStatus, name="job_application_status", values_callable=enum_values),
        nullable=False,
        default=JobApplicationStatus.PENDING,
    )
    cover_letter: Mapped[str | None] = mapped_column(Text, nullable=True)
    applied_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    job: Mapped[Job] = relationship("Job", lazy="raise")

    __table_args__ = (
        Index("uq_job_applications_student_job", "student_id", "job_id", unique=True),
        Index("ix_job_applications_company_status", "company_id", "status"),
    )
