"""
Admissions Router (institution side)

Endpoints:
- GET /institutions/me/applications - Applications received
- POST /institutions/me/applications/{id}/decision - Admit, reject or waitlist
- POST /institutions/me/courses/{id}/promote-waitlist - Fill free seats now
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from career_platform.core.auth import CurrentUser, require_institution
from career_platform.core.database import get_db
from career_platform.modules.admissions import service
from career_platform.modules.admissions.errors import AdmissionsError
from career_platform.modules.admissions.models import ApplicationStatus
from career_platform.modules.admissions.schemas import (
    ApplicationListResponse,
    ApplicationResponse,
    DecisionRequest,
    PromotionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/applications",
    response_model=ApplicationListResponse,
    summary="Received Applications",
)
async def list_applications(
    status_filter: ApplicationStatus | None = Query(None, alias="status"),
    course_id: UUID | None = Query(None, alias="courseId"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    current_user: CurrentUser = Depends(require_institution),
    db: AsyncSession = Depends(get_db),
) -> ApplicationListResponse:
    items, total = await service.list_institution_applications(
        db, current_user.org_id, status_filter, course_id, skip, limit
    )
    return ApplicationListResponse(items=items, total=total)


@router.post(
    "/applications/{application_id}/decision",
    response_model=ApplicationResponse,
    summary="Decide Application",
    description="""
Admit, reject or waitlist an application.

Allowed from `pending`; a waitlisted application can still be admitted or
rejected. Admitted students see the offer in their pending selection.
""",
)
async def decide_application(
    application_id: UUID,
    data: DecisionRequest,
    current_user: CurrentUser = Depends(require_institution),
    db: AsyncSession = Depends(get_db),
) -> ApplicationResponse:
    try:
        return await service.decide(db, current_user.org_id, application_id, data.status)
    except AdmissionsError as e:
        logger.warning(f"Decision on {application_id} rejected: {e.error_code}")
        raise HTTPException(
            status_code=e.status_code,
            detail={"error": e.error_code, "message": e.message},
        ) from e


@router.post(
    "/courses/{course_id}/promote-waitlist",
    response_model=PromotionResponse,
    summary="Promote Waitlist",
)
async def promote_waitlist(
    course_id: UUID,
    current_user: CurrentUser = Depends(require_institution),
    db: AsyncSession = Depends(get_db),
) -> PromotionResponse:
    try:
        result = await service.promote_course_waitlist(db, current_user.org_id, course_id)
    except AdmissionsError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail={"error": e.error_code, "message": e.message},
        ) from e

    return PromotionResponse(
        course_id=result.course_id,
        capacity=result.capacity,
        occupied=result.occupied,
        promoted=[a.id for a in result.promoted],
    )
