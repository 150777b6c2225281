"""
Admissions Router (student side)

Endpoints:
- POST /applications - Apply to a course
- GET /applications/me - My applications, newest first
- GET /applications/me/pending-selection - Admitted offers awaiting a choice
- POST /applications/{id}/select - Accept one admitted offer
- POST /applications/{id}/decline - Withdraw one application

Selection and submission are rate limited per student and serialized per
student with a short-lived lock.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from career_platform.core.auth import CurrentUser, require_student
from career_platform.core.database import get_db
from career_platform.core.rate_limit import enforce_user_rate_limit
from career_platform.core.redis import get_redis
from career_platform.modules.admissions import selection, service
from career_platform.modules.admissions.errors import (
    AdmissionsError,
    DataIntegrityViolationError,
)
from career_platform.modules.admissions.schemas import (
    ApplicationCreate,
    ApplicationListResponse,
    ApplicationResponse,
    DeclineResponse,
    PendingSelectionResponse,
    SelectionResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# Per-student request budgets
APPLY_LIMIT = 10
APPLY_WINDOW_SECONDS = 3600
SELECT_LIMIT = 10
SELECT_WINDOW_SECONDS = 60


def _http_error(e: AdmissionsError) -> HTTPException:
    return HTTPException(
        status_code=e.status_code,
        detail={"error": e.error_code, "message": e.message},
    )


@router.post(
    "",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Apply To Course",
    description="""
Submit an application to a course.

**Rules:**
- The student's grades must meet the course's subject minimums and GPA floor
- One live application per course
- At most 2 live (not declined/rejected) applications per institution
""",
    responses={
        404: {"description": "Course not found or closed"},
        409: {
            "description": "Duplicate application or per-institution cap reached",
            "content": {
                "application/json": {
                    "example": {
                        "detail": {
                            "error": "CAP_EXCEEDED",
                            "message": "You can have at most 2 active applications "
                            "per institution.",
                        }
                    }
                }
            },
        },
        422: {"description": "Grades do not meet the course requirements"},
        429: {"description": "Too many submissions"},
    },
)
async def apply_to_course(
    data: ApplicationCreate,
    current_user: CurrentUser = Depends(require_student),
    db: AsyncSession = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
) -> ApplicationResponse:
    await enforce_user_rate_limit(current_user.id, "apply", APPLY_LIMIT, APPLY_WINDOW_SECONDS)

    try:
        return await service.create_application(
            db, redis, current_user.id, data, email=current_user.email
        )
    except AdmissionsError as e:
        logger.warning(f"Application rejected for {current_user.id}: {e.error_code}")
        raise _http_error(e) from e


@router.get("/me", response_model=ApplicationListResponse, summary="My Applications")
async def list_my_applications(
    current_user: CurrentUser = Depends(require_student),
    db: AsyncSession = Depends(get_db),
) -> ApplicationListResponse:
    try:
        items = await service.list_my_applications(db, current_user.id)
    except DataIntegrityViolationError as e:
        raise _http_error(e) from e
    return ApplicationListResponse(items=items, total=len(items))


@router.get(
    "/me/pending-selection",
    response_model=PendingSelectionResponse,
    summary="Offers Awaiting Selection",
    description="""
Admitted offers the student has not answered yet.

`requiresSelection` is true as soon as there is at least one admitted offer.
Waitlist promotions show up here too.
""",
)
async def get_pending_selection(
    current_user: CurrentUser = Depends(require_student),
    db: AsyncSession = Depends(get_db),
) -> PendingSelectionResponse:
    offers = await service.get_pending_selection(db, current_user.id)
    return PendingSelectionResponse(requires_selection=len(offers) >= 1, offers=offers)


@router.post(
    "/{application_id}/select",
    response_model=SelectionResponse,
    summary="Accept Offer",
    description="""
Accept one admitted offer.

Every other live application of the student, at any institution, is declined
in the same transaction. Seats freed by those declines are offered to the
waitlist. Repeating the call for an already accepted offer returns the same
result without changes.
""",
    responses={
        403: {"description": "The application belongs to another student"},
        404: {"description": "Application not found"},
        409: {"description": "Not an admitted offer, or a selection is already in progress"},
        503: {"description": "Selection could not be completed; nothing was saved"},
    },
)
async def select_offer(
    application_id: UUID,
    current_user: CurrentUser = Depends(require_student),
    db: AsyncSession = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
) -> SelectionResponse:
    await enforce_user_rate_limit(current_user.id, "select", SELECT_LIMIT, SELECT_WINDOW_SECONDS)

    try:
        outcome = await selection.select_offer(db, redis, current_user.id, application_id)
    except AdmissionsError as e:
        logger.warning(f"Selection failed for {current_user.id}: {e.error_code}")
        raise _http_error(e) from e

    promoted = sum(len(p.promoted) for p in outcome.promotions)
    return SelectionResponse(
        accepted=service.to_response(outcome.application),
        declined=[service.to_response(a) for a in outcome.declined],
        promoted=promoted,
        already_accepted=outcome.already_applied,
        message=(
            "You have already accepted this offer."
            if outcome.already_applied
            else "Offer accepted. Your other applications have been withdrawn."
        ),
    )


@router.post(
    "/{application_id}/decline",
    response_model=DeclineResponse,
    summary="Decline Application",
)
async def decline_offer(
    application_id: UUID,
    current_user: CurrentUser = Depends(require_student),
    db: AsyncSession = Depends(get_db),
    redis: Redis | None = Depends(get_redis),
) -> DeclineResponse:
    await enforce_user_rate_limit(current_user.id, "select", SELECT_LIMIT, SELECT_WINDOW_SECONDS)

    try:
        outcome = await selection.decline_offer(db, redis, current_user.id, application_id)
    except AdmissionsError as e:
        logger.warning(f"Decline failed for {current_user.id}: {e.error_code}")
        raise _http_error(e) from e

    return DeclineResponse(
        application=service.to_response(outcome.application),
        already_declined=outcome.already_applied,
        message="Application declined.",
    )
