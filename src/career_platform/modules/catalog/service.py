"""
Catalog Service Layer

Course and job listings with per-student eligibility, plus institution and
company side editing. Raising a course's capacity immediately offers the new
seats to the waitlist.
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from career_platform.modules.admissions import waitlist
from career_platform.modules.admissions.errors import PromotionIncompleteError
from career_platform.modules.catalog import repository
from career_platform.modules.catalog.models import Course, Job, ListingStatus
from career_platform.modules.catalog.schemas import (
    CourseCreate,
    CourseResponse,
    CourseUpdate,
    JobCreate,
    JobResponse,
)
from career_platform.modules.eligibility import evaluate
from career_platform.modules.eligibility.evaluator import EligibilityReport
from career_platform.modules.eligibility.schemas import requirement_set_from_columns
from career_platform.modules.students.models import Student

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """Base exception for catalog service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class ListingNotFoundError(CatalogError):
    def __init__(self, kind: str, listing_id: UUID):
        super().__init__(
            message=f"{kind.capitalize()} {listing_id} not found",
            error_code=f"{kind.upper()}_NOT_FOUND",
            status_code=404,
        )


class OrganisationNotFoundError(CatalogError):
    def __init__(self, org_id: UUID):
        super().__init__(
            message=f"Organisation {org_id} is not registered",
            error_code="ORGANISATION_NOT_FOUND",
            status_code=404,
        )


def course_report(course: Course, student: Student | None) -> EligibilityReport | None:
    if student is None:
        return None
    requirements = requirement_set_from_columns(course.required_subjects, course.min_gpa)
    return evaluate(requirements, student.grades)


def job_report(job: Job, student: Student | None) -> EligibilityReport | None:
    if student is None:
        return None
    requirements = requirement_set_from_columns(job.required_subjects, job.min_gpa)
    return evaluate(requirements, student.grades)


def to_course_response(
    course: Course, report: EligibilityReport | None = None, institution_name: str | None = None
) -> CourseResponse:
    response = CourseResponse.model_validate(course)
    response.institution_name = institution_name
    if report is not None:
        response.eligible = report.eligible
        response.ineligible_reasons = report.reasons()
    return response


def to_job_response(
    job: Job, report: EligibilityReport | None = None, company_name: str | None = None
) -> JobResponse:
    response = JobResponse.model_validate(job)
    response.company_name = company_name
    if report is not None:
        response.eligible = report.eligible
    return response


async def list_courses(
    db: AsyncSession,
    student: Student | None = None,
    eligible_only: bool = False,
    institution_id: UUID | None = None,
) -> list[CourseResponse]:
    """
    Active courses, each flagged with the student's eligibility when a student
    is given. With `eligible_only`, courses the student cannot apply to are
    left out.
    """
    courses = await repository.list_courses(db, institution_id=institution_id)

    items = []
    for course in courses:
        report = course_report(course, student)
        if eligible_only and report is not None and not report.eligible:
            continue
        items.append(to_course_response(course, report, course.institution.name))
    return items


async def get_course(
    db: AsyncSession, course_id: UUID, student: Student | None = None
) -> CourseResponse:
    course = await repository.get_course(db, course_id)
    if course is None:
        raise ListingNotFoundError("course", course_id)
    return to_course_response(course, course_report(course, student), course.institution.name)


async def list_institution_courses(db: AsyncSession, institution_id: UUID) -> list[CourseResponse]:
    courses = await repository.list_courses(db, institution_id=institution_id, include_closed=True)
    return [to_course_response(c, institution_name=c.institution.name) for c in courses]


async def create_course(
    db: AsyncSession, institution_id: UUID, data: CourseCreate
) -> CourseResponse:
    if await repository.get_institution(db, institution_id) is None:
        raise OrganisationNotFoundError(institution_id)

    requirements = data.requirements.to_requirement_set()
    course = await repository.create_course(
        db,
        Course(
            institution_id=institution_id,
            name=data.name,
            faculty=data.faculty,
            duration=data.duration,
            description=data.description,
            capacity=data.capacity,
            required_subjects=dict(requirements.subjects),
            min_gpa=requirements.min_gpa,
            status=ListingStatus.ACTIVE,
        ),
    )
    logger.info(f"Institution {institution_id} created course {course.id}")
    return await get_course(db, course.id)


async def update_course(
    db: AsyncSession, institution_id: UUID, course_id: UUID, data: CourseUpdate
) -> CourseResponse:
    """
    Edit a course owned by the institution.

    When the capacity grows the waitlist is promoted into the new seats
    straight away.
    """
    course = await repository.get_course(db, course_id)
    if course is None or course.institution_id != institution_id:
        raise ListingNotFoundError("course", course_id)

    old_capacity = course.capacity
    changes = data.model_dump(exclude_unset=True, exclude={"requirements"})
    for field_name, value in changes.items():
        setattr(course, field_name, value)

    if data.requirements is not None:
        requirements = data.requirements.to_requirement_set()
        course.required_subjects = dict(requirements.subjects)
        course.min_gpa = requirements.min_gpa

    course = await repository.save_course(db, course)
    logger.info(f"Institution {institution_id} updated course {course_id}: {sorted(changes)}")

    new_capacity = course.capacity
    gained_seats = new_capacity is not None and (
        old_capacity is None or new_capacity > old_capacity
    )
    if gained_seats:
        try:
            await waitlist.promote(db, course_id)
        except PromotionIncompleteError as e:
            logger.error(f"Promotion after capacity change deferred: {e.message}")

    return await get_course(db, course_id)


async def list_jobs(
    db: AsyncSession,
    student: Student | None = None,
    eligible_only: bool = False,
    company_id: UUID | None = None,
) -> list[JobResponse]:
    """Active jobs with the student's eligibility flag, optionally only eligible ones."""
    jobs = await repository.list_jobs(
        db, company_id=company_id, include_closed=company_id is not None
    )

    items = []
    for job in jobs:
        report = job_report(job, student)
        if eligible_only and report is not None and not report.eligible:
            continue
        items.append(to_job_response(job, report, job.company.name))
    return items


async def create_job(db: AsyncSession, company_id: UUID, data: JobCreate) -> JobResponse:
    if await repository.get_company(db, company_id) is None:
        raise OrganisationNotFoundError(company_id)

    requirements = data.requirements.to_requirement_set()
    job = await repository.create_job(
        db,
        Job(
            company_id=company_id,
            title=data.title,
            department=data.department,
            description=data.description,
            required_subjects=dict(requirements.subjects),
            min_gpa=requirements.min_gpa,
            status=ListingStatus.ACTIVE,
        ),
    )
    logger.info(f"Company {company_id} posted job {job.id}")
    job = await repository.get_job(db, job.id)
    return to_job_response(job, company_name=job.company.name)
