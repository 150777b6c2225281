"""
Student Schemas

Pydantic schemas for the student profile. Grades are validated against the
letter scale on the way in.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from career_platform.modules.eligibility.evaluator import LetterGrade, normalize_subject
from career_platform.modules.students.models import EligibilityStatus


class WorkExperience(BaseModel):
    company: str = Field(..., max_length=200)
    position: str = Field(..., max_length=200)
    duration: str | None = Field(None, max_length=100)


class StudentProfileUpdate(BaseModel):
    """Request body for PUT /students/me. Omitted fields are left unchanged."""

    name: str | None = Field(None, min_length=1, max_length=200)
    phone: str | None = Field(None, max_length=20)
    address: str | None = Field(None, max_length=500)
    date_of_birth: date | None = Field(None, alias="dateOfBirth")
    high_school: str | None = Field(None, max_length=200, alias="highSchool")
    graduation_year: int | None = Field(None, ge=1950, le=2100, alias="graduationYear")
    grades: dict[str, LetterGrade] | None = None
    work_experience: list[WorkExperience] | None = Field(None, alias="workExperience")
    extracurriculars: list[str] | None = None

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("grades")
    @classmethod
    def validate_grades(
        cls, value: dict[str, LetterGrade] | None
    ) -> dict[str, LetterGrade] | None:
        """Trim subject names and reject blanks or duplicates."""
        if value is None:
            return None
        cleaned: dict[str, LetterGrade] = {}
        seen: set[str] = set()
        for subject, grade in value.items():
            name = " ".join(subject.split())
            if not name:
                raise ValueError("Subject names cannot be blank")
            key = normalize_subject(name)
            if key in seen:
                raise ValueError(f"Duplicate subject: {name}")
            seen.add(key)
            cleaned[name] = grade
        return cleaned


class StudentProfileResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: str
    email: str
    name: str | None = None
    phone: str | None = None
    address: str | None = None
    date_of_birth: date | None = Field(None, serialization_alias="dateOfBirth")
    high_school: str | None = Field(None, serialization_alias="highSchool")
    graduation_year: int | None = Field(None, serialization_alias="graduationYear")
    subjects: list[str] = Field(default_factory=list)
    grades: dict[str, str] = Field(default_factory=dict)
    work_experience: list[dict] = Field(default_factory=list, serialization_alias="workExperience")
    extracurriculars: list[str] = Field(default_factory=list)
    eligibility_status: EligibilityStatus = Field(..., serialization_alias="eligibilityStatus")
    missing_requirements: list[str] = Field(
        default_factory=list, serialization_alias="missingRequirements"
    )
    updated_at: datetime | None = Field(None, serialization_alias="updatedAt")


class DashboardResponse(BaseModel):
    """Summary counts for the student dashboard."""

    profile: StudentProfileResponse
    profile_completion: int = Field(..., serialization_alias="profileCompletion")
    applications_by_status: dict[str, int] = Field(..., serialization_alias="applicationsByStatus")
    pending_selection: int = Field(..., serialization_alias="pendingSelection")
    job_applications: int = Field(..., serialization_alias="jobApplications")
    unread_notifications: int = Field(..., serialization_alias="unreadNotifications")
