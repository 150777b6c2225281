"""
Careers Router

Endpoints:
- POST /job-applications - Student applies to a job
- GET /job-applications/me - Student's job applications
- GET /companies/me/job-applications - Applications received by the company
- POST /companies/me/job-applications/{id}/status - Shortlist, hire or reject
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from career_platform.core.auth import CurrentUser, require_company, require_student
from career_platform.core.database import get_db
from career_platform.modules.careers import service
from career_platform.modules.careers.models import JobApplicationStatus
from career_platform.modules.careers.schemas import (
    JobApplicationCreate,
    JobApplicationListResponse,
    JobApplicationResponse,
    JobApplicationStatusUpdate,
)
from career_platform.modules.careers.service import CareersError

logger = logging.getLogger(__name__)

router = APIRouter()
company_router = APIRouter()


@router.post(
    "",
    response_model=JobApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Apply To Job",
    responses={
        404: {"description": "Job not found or closed"},
        409: {"description": "Already applied"},
        422: {"description": "Grades do not meet the job requirements"},
    },
)
async def apply_to_job(
    data: JobApplicationCreate,
    current_user: CurrentUser = Depends(require_student),
    db: AsyncSession = Depends(get_db),
) -> JobApplicationResponse:
    try:
        return await service.apply_to_job(db, current_user.id, data)
    except CareersError as e:
        logger.warning(f"Job application rejected for {current_user.id}: {e.error_code}")
        raise HTTPException(
            status_code=e.status_code,
            detail={"error": e.error_code, "message": e.message},
        ) from e


@router.get("/me", response_model=JobApplicationListResponse, summary="My Job Applications")
async def list_my_job_applications(
    current_user: CurrentUser = Depends(require_student),
    db: AsyncSession = Depends(get_db),
) -> JobApplicationListResponse:
    items = await service.list_my_applications(db, current_user.id)
    return JobApplicationListResponse(items=items, total=len(items))


@company_router.get(
    "/job-applications",
    response_model=JobApplicationListResponse,
    summary="Received Job Applications",
)
async def list_company_job_applications(
    status_filter: JobApplicationStatus | None = Query(None, alias="status"),
    current_user: CurrentUser = Depends(require_company),
    db: AsyncSession = Depends(get_db),
) -> JobApplicationListResponse:
    items = await service.list_company_applications(db, current_user.org_id, status_filter)
    return JobApplicationListResponse(items=items, total=len(items))


@company_router.post(
    "/job-applications/{application_id}/status",
    response_model=JobApplicationResponse,
    summary="Update Job Application Status",
)
async def update_job_application_status(
    application_id: UUID,
    data: JobApplicationStatusUpdate,
    current_user: CurrentUser = Depends(require_company),
    db: AsyncSession = Depends(get_db),
) -> JobApplicationResponse:
    try:
        return await service.update_status(db, current_user.org_id, application_id, data.status)
    except CareersError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail={"error": e.error_code, "message": e.message},
        ) from e
