"""
Students Router

Endpoints:
- GET /students/me - Current student's profile
- PUT /students/me - Update profile (grades, personal details)
- GET /students/me/dashboard - Dashboard summary
"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from career_platform.core.auth import CurrentUser, require_student_account
from career_platform.core.database import get_db
from career_platform.modules.students import service
from career_platform.modules.students.schemas import (
    DashboardResponse,
    StudentProfileResponse,
    StudentProfileUpdate,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/me", response_model=StudentProfileResponse, summary="Get My Profile")
async def get_my_profile(
    current_user: CurrentUser = Depends(require_student_account),
    db: AsyncSession = Depends(get_db),
) -> StudentProfileResponse:
    student = await service.get_or_create_profile(db, current_user)
    return service.to_response(student)


@router.put(
    "/me",
    response_model=StudentProfileResponse,
    summary="Update My Profile",
    description="""
Update the student profile. Only supplied fields change.

`grades` replaces the full subject -> letter grade map (A-F). The profile's
`eligibilityStatus` is recomputed from the saved data.
""",
)
async def update_my_profile(
    data: StudentProfileUpdate,
    current_user: CurrentUser = Depends(require_student_account),
    db: AsyncSession = Depends(get_db),
) -> StudentProfileResponse:
    student = await service.update_profile(db, current_user, data)
    return service.to_response(student)


@router.get("/me/dashboard", response_model=DashboardResponse, summary="Student Dashboard")
async def get_my_dashboard(
    current_user: CurrentUser = Depends(require_student_account),
    db: AsyncSession = Depends(get_db),
) -> DashboardResponse:
    return await service.get_dashboard(db, current_user)
