"""
Catalog Models

Institutions offer courses; companies post jobs. Courses and jobs carry the
requirement data consumed by the eligibility evaluator.
"""

import enum
import uuid

from sqlalchemy import Enum, Float, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from career_platform.modules.shared import BaseModel, enum_values


class OrganisationStatus(str, enum.Enum):
    """Approval status of an institution or company account."""

    PENDING = "pending"
    ACTIVE = "active"
    SUSPENDED = "suspended"


class ListingStatus(str, enum.Enum):
    """Whether a course or job is open for applications."""

    ACTIVE = "active"
    CLOSED = "closed"


class Institution(BaseModel):
    """A higher-education institution offering courses."""

    __tablename__ = "institutions"

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[OrganisationStatus] = mapped_column(
        Enum(OrganisationStatus, name="organisation_status", values_callable=enum_values),
        nullable=False,
        default=OrganisationStatus.PENDING,
    )

    courses: Mapped[list["Course"]] = relationship(
        "Course", back_populates="institution", cascade="all, delete-orphan"
    )


class Course(BaseModel):
    """
    A course offered by an institution.

    `capacity` is the number of seats; NULL means the course is not
    capacity-bound and waitlist promotion never applies to it.
    `required_subjects` maps subject name -> minimum letter grade.
    """

    __tablename__ = "courses"

    institution_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("institutions.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    faculty: Mapped[str | None] = mapped_column(String(200), nullable=True)
    duration: Mapped[str | None] = mapped_column(String(50), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    capacity: Mapped[int | None] = mapped_column(Integer, nullable=True)
    required_subjects: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    min_gpa: Mapped[float | None] = mapped_column(Float, nullable=True)

    status: Mapped[ListingStatus] = mapped_column(
        Enum(ListingStatus, name="listing_status", values_callable=enum_values),
        nullable=False,
        default=ListingStatus.ACTIVE,
    )

    institution: Mapped["Institution"] = relationship("Institution", back_populates="courses")

    __table_args__ = (Index("ix_courses_institution_id", "institution_id"),)


class Company(BaseModel):
    """An employer posting jobs."""

    __tablename__ = "companies"

    name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)
    industry: Mapped[str | None] = mapped_column(String(100), nullable=True)
    status: Mapped[OrganisationStatus] = mapped_column(
        Enum(OrganisationStatus, name="organisation_status", values_callable=enum_values),
        nullable=False,
        default=OrganisationStatus.PENDING,
    )

    jobs: Mapped[list["Job"]] = relationship(
        "Job", back_populates="company", cascade="all, delete-orphan"
    )


class Job(BaseModel):
    """A job posting; requirement columns mirror Course."""

    __tablename__ = "jobs"

    company_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("companies.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    department: Mapped[str | None] = mapped_column(String(200), nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    required_subjects: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    min_gpa: Mapped[float | None] = mapped_column(Float, nullable=True)

    status: Mapped[ListingStatus] = mapped_column(
        Enum(ListingStatus, name="listing_status", values_callable=enum_values),
        nullable=False,
        default=ListingStatus.ACTIVE,
    )

    company: Mapped["Company"] = relationship("Company", back_populates="jobs")

    __table_args__ = (Index("ix_jobs_company_id", "company_id"),)
