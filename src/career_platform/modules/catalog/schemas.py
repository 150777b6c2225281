"""
Catalog Schemas

Course and job payloads. Requirements arrive as the validated
`RequirementsIn` shape, so stored requirement data is always a clean
subject -> letter grade map.
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from career_platform.modules.catalog.models import ListingStatus
from career_platform.modules.eligibility.schemas import RequirementsIn


class CourseCreate(BaseModel):
    """Request body for POST /institutions/me/courses."""

    name: str = Field(..., min_length=1, max_length=200)
    faculty: str | None = Field(None, max_length=200)
    duration: str | None = Field(None, max_length=50)
    description: str | None = Field(None, max_length=5000)
    capacity: int | None = Field(None, ge=0)
    requirements: RequirementsIn = Field(default_factory=RequirementsIn)


class CourseUpdate(BaseModel):
    """Request body for PUT /institutions/me/courses/{id}. Omitted fields are unchanged."""

    name: str | None = Field(None, min_length=1, max_length=200)
    faculty: str | None = Field(None, max_length=200)
    duration: str | None = Field(None, max_length=50)
    description: str | None = Field(None, max_length=5000)
    capacity: int | None = Field(None, ge=0)
    requirements: RequirementsIn | None = None
    status: ListingStatus | None = None


class CourseResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    institution_id: UUID = Field(..., serialization_alias="institutionId")
    institution_name: str | None = Field(None, serialization_alias="institutionName")
    name: str
    faculty: str | None = None
    duration: str | None = None
    description: str | None = None
    capacity: int | None = None
    required_subjects: dict[str, str] = Field(
        default_factory=dict, serialization_alias="requiredSubjects"
    )
    min_gpa: float | None = Field(None, serialization_alias="minGPA")
    status: ListingStatus
    eligible: bool | None = None
    ineligible_reasons: list[str] = Field(
        default_factory=list, serialization_alias="ineligibleReasons"
    )


class CourseListResponse(BaseModel):
    items: list[CourseResponse]
    total: int


class JobCreate(BaseModel):
    """Request body for POST /companies/me/jobs."""

    title: str = Field(..., min_length=1, max_length=200)
    department: str | None = Field(None, max_length=200)
    description: str | None = Field(None, max_length=5000)
    requirements: RequirementsIn = Field(default_factory=RequirementsIn)


class JobResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    company_id: UUID = Field(..., serialization_alias="companyId")
    company_name: str | None = Field(None, serialization_alias="companyName")
    title: str
    department: str | None = None
    description: str | None = None
    required_subjects: dict[str, str] = Field(
        default_factory=dict, serialization_alias="requiredSubjects"
    )
    min_gpa: float | None = Field(None, serialization_alias="minGPA")
    status: ListingStatus
    eligible: bool | None = None


class JobListResponse(BaseModel):
    items: list[JobResponse]
    total: int
