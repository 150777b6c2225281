"""
Careers Schemas
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from career_platform.modules.careers.models import JobApplicationStatus


class JobApplicationCreate(BaseModel):
    """Request body for POST /job-applications."""

    model_config = ConfigDict(populate_by_name=True)

    job_id: UUID = Field(..., alias="jobId")
    cover_letter: str | None = Field(None, max_length=5000, alias="coverLetter")


class JobApplicationStatusUpdate(BaseModel):
    status: JobApplicationStatus


class JobApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    student_id: str = Field(..., serialization_alias="studentId")
    job_id: UUID = Field(..., serialization_alias="jobId")
    company_id: UUID = Field(..., serialization_alias="companyId")
    job_title: str | None = Field(None, serialization_alias="jobTitle")
    status: JobApplicationStatus
    cover_letter: str | None = Field(None, serialization_alias="coverLetter")
    applied_at: datetime = Field(..., serialization_alias="appliedAt")
    updated_at: datetime = Field(..., serialization_alias="updatedAt")


class JobApplicationListResponse(BaseModel):
    items: list[JobApplicationResponse]
    total: int
