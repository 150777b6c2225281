"""
Catalog Router

Course and job listings plus institution/company side editing.

Endpoints:
- GET /courses - Active courses with the caller's eligibility flag
- GET /courses/{id} - Course detail
- GET /jobs - Active jobs with the caller's eligibility flag
- GET /institutions/me/courses - The institution's own courses
- POST /institutions/me/courses - Create a course
- PUT /institutions/me/courses/{id} - Edit a course
- GET /companies/me/jobs - The company's own jobs
- POST /companies/me/jobs - Post a job
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from career_platform.core.auth import (
    CurrentUser,
    UserRole,
    get_current_user,
    require_company,
    require_institution,
)
from career_platform.core.database import get_db
from career_platform.modules.catalog import service
from career_platform.modules.catalog.schemas import (
    CourseCreate,
    CourseListResponse,
    CourseResponse,
    CourseUpdate,
    JobCreate,
    JobListResponse,
    JobResponse,
)
from career_platform.modules.catalog.service import CatalogError
from career_platform.modules.students import repository as students_repository
from career_platform.modules.students.models import Student

logger = logging.getLogger(__name__)

router = APIRouter()
institution_router = APIRouter()
company_router = APIRouter()


def _http_error(e: CatalogError) -> HTTPException:
    return HTTPException(
        status_code=e.status_code,
        detail={"error": e.error_code, "message": e.message},
    )


async def _student_for(db: AsyncSession, user: CurrentUser) -> Student | None:
    if user.role != UserRole.STUDENT:
        return None
    student = await students_repository.get_by_id(db, user.id)
    # No profile yet means no grades
    return student or Student(id=user.id, email=user.email, grades={})


@router.get(
    "/courses",
    response_model=CourseListResponse,
    summary="List Courses",
    description="""
List active courses.

For student callers every course carries `eligible` and, when not eligible,
the reasons. `eligibleOnly=true` hides courses the student cannot apply to.
""",
)
async def list_courses(
    eligible_only: bool = Query(False, alias="eligibleOnly"),
    institution_id: UUID | None = Query(None, alias="institutionId"),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CourseListResponse:
    student = await _student_for(db, current_user)
    items = await service.list_courses(db, student, eligible_only, institution_id)
    return CourseListResponse(items=items, total=len(items))


@router.get("/courses/{course_id}", response_model=CourseResponse, summary="Get Course")
async def get_course(
    course_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> CourseResponse:
    try:
        return await service.get_course(db, course_id, await _student_for(db, current_user))
    except CatalogError as e:
        raise _http_error(e) from e


@router.get("/jobs", response_model=JobListResponse, summary="List Jobs")
async def list_jobs(
    eligible_only: bool = Query(False, alias="eligibleOnly"),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> JobListResponse:
    student = await _student_for(db, current_user)
    items = await service.list_jobs(db, student, eligible_only)
    return JobListResponse(items=items, total=len(items))


@institution_router.get(
    "/courses", response_model=CourseListResponse, summary="List My Institution's Courses"
)
async def list_my_courses(
    current_user: CurrentUser = Depends(require_institution),
    db: AsyncSession = Depends(get_db),
) -> CourseListResponse:
    items = await service.list_institution_courses(db, current_user.org_id)
    return CourseListResponse(items=items, total=len(items))


@institution_router.post(
    "/courses",
    response_model=CourseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Course",
)
async def create_course(
    data: CourseCreate,
    current_user: CurrentUser = Depends(require_institution),
    db: AsyncSession = Depends(get_db),
) -> CourseResponse:
    try:
        return await service.create_course(db, current_user.org_id, data)
    except CatalogError as e:
        logger.warning(f"Course creation rejected for {current_user.org_id}: {e.message}")
        raise _http_error(e) from e


@institution_router.put(
    "/courses/{course_id}",
    response_model=CourseResponse,
    summary="Update Course",
    description="""
Edit a course. Omitted fields are unchanged; `requirements` replaces the
whole requirement set. Raising `capacity` promotes waitlisted applicants
into the new seats.
""",
)
async def update_course(
    course_id: UUID,
    data: CourseUpdate,
    current_user: CurrentUser = Depends(require_institution),
    db: AsyncSession = Depends(get_db),
) -> CourseResponse:
    try:
        return await service.update_course(db, current_user.org_id, course_id, data)
    except CatalogError as e:
        raise _http_error(e) from e


@company_router.get("/jobs", response_model=JobListResponse, summary="List My Company's Jobs")
async def list_my_jobs(
    current_user: CurrentUser = Depends(require_company),
    db: AsyncSession = Depends(get_db),
) -> JobListResponse:
    items = await service.list_jobs(db, company_id=current_user.org_id)
    return JobListResponse(items=items, total=len(items))


@company_router.post(
    "/jobs",
    response_model=JobResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post Job",
)
async def create_job(
    data: JobCreate,
    current_user: CurrentUser = Depends(require_company),
    db: AsyncSession = Depends(get_db),
) -> JobResponse:
    try:
        return await service.create_job(db, current_user.org_id, data)
    except CatalogError as e:
        logger.warning(f"Job creation rejected for {current_user.org_id}: {e.message}")
        raise _http_error(e) from e
