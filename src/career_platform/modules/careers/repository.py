"""
Careers Repository

Database operations for job applications.
"""

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from career_platform.modules.catalog.models import Job

from .models import JobApplication, JobApplicationStatus

# Companies move applications forward; hired and rejected are final
VALID_STATUS_TRANSITIONS: dict[JobApplicationStatus, set[JobApplicationStatus]] = {
    JobApplicationStatus.PENDING: {
        JobApplicationStatus.SHORTLISTED,
        JobApplicationStatus.HIRED,
        JobApplicationStatus.REJECTED,
    },
    JobApplicationStatus.SHORTLISTED: {
        JobApplicationStatus.HIRED,
        JobApplicationStatus.REJECTED,
    },
    JobApplicationStatus.HIRED: set(),
    JobApplicationStatus.REJECTED: set(),
}


async def create(
    db: AsyncSession, student_id: str, job: Job, cover_letter: str | None
) -> JobApplication:
    application = JobApplication(
        student_id=student_id,
        job_id=job.id,
        company_id=job.company_id,
        status=JobApplicationStatus.PENDING,
        cover_letter=cover_letter,
        applied_at=datetime.now(UTC),
    )
    db.add(application)
    await db.commit()
    await db.refresh(application)
    return application


async def get_for_student_and_job(
    db: AsyncSession, student_id: str, job_id: UUID
) -> JobApplication | None:
    result = await db.execute(
        select(JobApplication).where(
            JobApplication.student_id == student_id,
            JobApplication.job_id == job_id,
        )
    )
    return result.scalar_one_or_none()


async def get_with_job(db: AsyncSession, id: UUID) -> JobApplication | None:
    result = await db.execute(
        select(JobApplication)
        .options(selectinload(JobApplication.job))
        .where(JobApplication.id == id)
    )
    return result.scalar_one_or_none()


async def list_by_student(db: AsyncSession, student_id: str) -> list[JobApplication]:
    result = await db.execute(
        select(JobApplication)
        .options(selectinload(JobApplication.job))
        .where(JobApplication.student_id == student_id)
        .order_by(JobApplication.applied_at.desc())
    )
    return list(result.scalars().all())


async def list_by_company(
    db: AsyncSession,
    company_id: UUID,
    status: JobApplicationStatus | None = None,
) -> list[JobApplication]:
    query = (
        select(JobApplication)
        .options(selectinload(JobApplication.job))
        .where(JobApplication.company_id == company_id)
    )
    if status is not None:
        query = query.where(JobApplication.status == status)

    result = await db.execute(query.order_by(JobApplication.applied_at.asc()))
    return list(result.scalars().all())


async def count_by_student(db: AsyncSession, student_id: str) -> int:
    result = await db.execute(
        select(func.count(JobApplication.id)).where(JobApplication.student_id == student_id)
    )
    return result.scalar_one()


async def save(db: AsyncSession, application: JobApplication) -> JobApplication:
    await db.commit()
    await db.refresh(application)
    return application
