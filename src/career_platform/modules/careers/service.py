"""
Careers Service Layer

Job applications. Students only apply to active jobs whose requirements
their grades meet; companies move applications through
pending -> shortlisted -> hired/rejected.
"""

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from career_platform.modules.careers import repository
from career_platform.modules.careers.models import JobApplication, JobApplicationStatus
from career_platform.modules.careers.schemas import JobApplicationCreate, JobApplicationResponse
from career_platform.modules.catalog import repository as catalog_repository
from career_platform.modules.catalog.models import ListingStatus
from career_platform.modules.eligibility import evaluate
from career_platform.modules.eligibility.schemas import requirement_set_from_columns
from career_platform.modules.notifications import service as notifications
from career_platform.modules.notifications.models import NotificationType
from career_platform.modules.students import repository as students_repository

logger = logging.getLogger(__name__)


class CareersError(Exception):
    """Base exception for careers service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class JobNotFoundError(CareersError):
    def __init__(self, job_id: UUID):
        super().__init__(
            message=f"Job {job_id} not found or no longer open",
            error_code="JOB_NOT_FOUND",
            status_code=404,
        )


class JobApplicationNotFoundError(CareersError):
    def __init__(self, application_id: UUID):
        super().__init__(
            message=f"Job application {application_id} not found",
            error_code="JOB_APPLICATION_NOT_FOUND",
            status_code=404,
        )


class AlreadyAppliedError(CareersError):
    def __init__(self, job_id: UUID):
        super().__init__(
            message=f"You have already applied for job {job_id}",
            error_code="DUPLICATE_APPLICATION",
            status_code=409,
        )


class NotQualifiedError(CareersError):
    def __init__(self, reasons: list[str]):
        self.reasons = reasons
        detail = "; ".join(reasons) if reasons else "Requirements not met"
        super().__init__(
            message=f"You do not meet the requirements for this job: {detail}",
            error_code="NOT_ELIGIBLE",
            status_code=422,
        )


class InvalidJobStatusError(CareersError):
    def __init__(self, current: JobApplicationStatus, new: JobApplicationStatus):
        super().__init__(
            message=f"Cannot move a {current.value} application to {new.value}",
            error_code="INVALID_STATUS_TRANSITION",
            status_code=409,
        )


def to_response(application: JobApplication) -> JobApplicationResponse:
    response = JobApplicationResponse.model_validate(application)
    response.job_title = application.job.title
    return response


async def apply_to_job(
    db: AsyncSession, student_id: str, data: JobApplicationCreate
) -> JobApplicationResponse:
    """
    Apply to a job.

    Raises:
        JobNotFoundError: Unknown or closed job
        NotQualifiedError: The student's grades do not meet the job requirements
        AlreadyAppliedError: The student already applied to this job
    """
    job = await catalog_repository.get_job(db, data.job_id)
    if job is None or job.status != ListingStatus.ACTIVE:
        raise JobNotFoundError(data.job_id)

    student = await students_repository.get_by_id(db, student_id)
    report = evaluate(
        requirement_set_from_columns(job.required_subjects, job.min_gpa),
        student.grades if student else None,
    )
    if not report.eligible:
        logger.warning(f"Student {student_id} not eligible for job {job.id}")
        raise NotQualifiedError(report.reasons())

    job_title = job.title
    company_id = job.company_id
    if await repository.get_for_student_and_job(db, student_id, job.id):
        raise AlreadyAppliedError(job.id)

    try:
        application = await repository.create(db, student_id, job, data.cover_letter)
    except IntegrityError as e:
        # Lost a race with a concurrent submission
        await db.rollback()
        raise AlreadyAppliedError(data.job_id) from e

    application_id = application.id
    logger.info(f"Student {student_id} applied to job {job.id}: application {application_id}")

    notice = await notifications.for_company(
        db,
        company_id,
        f"New application received for {job_title}.",
        NotificationType.JOB,
    )
    await notifications.deliver(db, [notice])

    application = await repository.get_with_job(db, application_id)
    return to_response(application)


async def list_my_applications(db: AsyncSession, student_id: str) -> list[JobApplicationResponse]:
    return [to_response(a) for a in await repository.list_by_student(db, student_id)]


async def list_company_applications(
    db: AsyncSession, company_id: UUID, status: JobApplicationStatus | None = None
) -> list[JobApplicationResponse]:
    applications = await repository.list_by_company(db, company_id, status)
    return [to_response(a) for a in applications]


async def update_status(
    db: AsyncSession,
    company_id: UUID,
    application_id: UUID,
    new_status: JobApplicationStatus,
) -> JobApplicationResponse:
    """Move a job application forward. Setting the current status again is a no-op."""
    application = await repository.get_with_job(db, application_id)
    if application is None or application.company_id != company_id:
        raise JobApplicationNotFoundError(application_id)

    current = application.status
    if new_status == current:
        return to_response(application)
    if new_status not in repository.VALID_STATUS_TRANSITIONS.get(current, set()):
        raise InvalidJobStatusError(current, new_status)

    job_title = application.job.title
    application.status = new_status
    application = await repository.save(db, application)
    logger.info(f"Job application {application_id}: {current.value} -> {new_status.value}")

    await notifications.notify_student(
        db,
        application.student_id,
        f"Your application for {job_title} is now {new_status.value}.",
        NotificationType.JOB,
    )

    application = await repository.get_with_job(db, application_id)
    return to_response(application)
