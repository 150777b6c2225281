"""
Admissions Schemas

Request and response payloads for course applications. Status strings and
the `appliedAt`/`admittedAt`/`acceptedAt`/`declinedAt` field names are part
of the wire format.
"""

from datetime import datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from career_platform.modules.admissions.models import (
    AdmissionSource,
    ApplicationStatus,
    DeclineReason,
)


class ApplicationCreate(BaseModel):
    """Request body for POST /applications."""

    model_config = ConfigDict(populate_by_name=True)

    course_id: UUID = Field(..., alias="courseId")
    qualifications: dict | None = None
    previous_school: str | None = Field(None, max_length=200, alias="previousSchool")
    notes: str | None = Field(None, max_length=2000)


class ApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    student_id: str = Field(..., serialization_alias="studentId")
    course_id: UUID = Field(..., serialization_alias="courseId")
    institution_id: UUID = Field(..., serialization_alias="institutionId")
    course_name: str | None = Field(None, serialization_alias="courseName")
    institution_name: str | None = Field(None, serialization_alias="institutionName")
    status: ApplicationStatus
    applied_at: datetime = Field(..., serialization_alias="appliedAt")
    admitted_at: datetime | None = Field(None, serialization_alias="admittedAt")
    accepted_at: datetime | None = Field(None, serialization_alias="acceptedAt")
    declined_at: datetime | None = Field(None, serialization_alias="declinedAt")
    rejected_at: datetime | None = Field(None, serialization_alias="rejectedAt")
    waitlisted_at: datetime | None = Field(None, serialization_alias="waitlistedAt")
    decline_reason: DeclineReason | None = Field(None, serialization_alias="declineReason")
    admission_source: AdmissionSource | None = Field(
        None, serialization_alias="admissionSource"
    )


class ApplicationListResponse(BaseModel):
    items: list[ApplicationResponse]
    total: int


class PendingSelectionResponse(BaseModel):
    """Admitted offers waiting for the student to choose one."""

    requires_selection: bool = Field(..., serialization_alias="requiresSelection")
    offers: list[ApplicationResponse]


class SelectionResponse(BaseModel):
    accepted: ApplicationResponse
    declined: list[ApplicationResponse]
    promoted: int = 0
    already_accepted: bool = Field(False, serialization_alias="alreadyAccepted")
    message: str


class DeclineResponse(BaseModel):
    application: ApplicationResponse
    already_declined: bool = Field(False, serialization_alias="alreadyDeclined")
    message: str


class DecisionRequest(BaseModel):
    """Institution decision on a pending or waitlisted application."""

    decision: Literal["admitted", "rejected", "waitlisted"]

    @property
    def status(self) -> ApplicationStatus:
        return ApplicationStatus(self.decision)


class PromotionResponse(BaseModel):
    course_id: UUID = Field(..., serialization_alias="courseId")
    capacity: int | None
    occupied: int
    promoted: list[UUID]
