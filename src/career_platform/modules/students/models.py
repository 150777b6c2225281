"""
Student Models

Student academic profile. The primary key is the principal id issued by the
identity provider, so no separate user table is needed here.
"""

import enum
from datetime import date, datetime

from sqlalchemy import Date, DateTime, Enum, Integer, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from career_platform.core.database import Base
from career_platform.modules.shared import enum_values


class EligibilityStatus(str, enum.Enum):
    """Derived profile completeness status shown on the dashboard."""

    ELIGIBLE = "eligible"
    INCOMPLETE = "incomplete"


class Student(Base):
    """
    Student profile.

    `grades` maps subject -> letter grade. `eligibility_status` is derived from
    the profile on every update and never written directly.
    """

    __tablename__ = "students"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    address: Mapped[str | None] = mapped_column(String(500), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)
    high_school: Mapped[str | None] = mapped_column(String(200), nullable=True)
    graduation_year: Mapped[int | None] = mapped_column(Integer, nullable=True)

    subjects: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    grades: Mapped[dict] = mapped_column(JSONB, nullable=False, default=dict)
    work_experience: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)
    extracurriculars: Mapped[list] = mapped_column(JSONB, nullable=False, default=list)

    eligibility_status: Mapped[EligibilityStatus] = mapped_column(
        Enum(EligibilityStatus, name="eligibility_status", values_callable=enum_values),
        nullable=False,
        default=EligibilityStatus.INCOMPLETE,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
