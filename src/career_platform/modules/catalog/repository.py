"""
Catalog Repository

Database operations for institutions, courses, companies and jobs.
"""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from .models import Company, Course, Institution, Job, ListingStatus


async def get_institution(db: AsyncSession, id: UUID) -> Institution | None:
    return await db.get(Institution, id)


async def get_company(db: AsyncSession, id: UUID) -> Company | None:
    return await db.get(Company, id)


async def get_course(db: AsyncSession, id: UUID) -> Course | None:
    """Get a course with its institution loaded."""
    result = await db.execute(
        select(Course).options(selectinload(Course.institution)).where(Course.id == id)
    )
    return result.scalar_one_or_none()


async def list_courses(
    db: AsyncSession,
    institution_id: UUID | None = None,
    include_closed: bool = False,
) -> list[Course]:
    """Courses ordered by institution then name, with institutions loaded."""
    query = select(Course).options(selectinload(Course.institution))
    if institution_id is not None:
        query = query.where(Course.institution_id == institution_id)
    if not include_closed:
        query = query.where(Course.status == ListingStatus.ACTIVE)

    result = await db.execute(query.order_by(Course.institution_id, Course.name))
    return list(result.scalars().all())


async def create_course(db: AsyncSession, course: Course) -> Course:
    db.add(course)
    await db.commit()
    await db.refresh(course)
    return course


async def save_course(db: AsyncSession, course: Course) -> Course:
    await db.commit()
    await db.refresh(course)
    return course


async def get_job(db: AsyncSession, id: UUID) -> Job | None:
    result = await db.execute(select(Job).options(selectinload(Job.company)).where(Job.id == id))
    return result.scalar_one_or_none()


async def list_jobs(
    db: AsyncSession,
    company_id: UUID | None = None,
    include_closed: bool = False,
) -> list[Job]:
    query = select(Job).options(selectinload(Job.company))
    if company_id is not None:
        query = query.where(Job.company_id == company_id)
    if not include_closed:
        query = query.where(Job.status == ListingStatus.ACTIVE)

    result = await db.execute(query.order_by(Job.created_at.desc()))
    return list(result.scalars().all())


async def create_job(db: AsyncSession, job: Job) -> Job:
    db.add(job)
    await db.commit()
    await db.refresh(job)
    return job
