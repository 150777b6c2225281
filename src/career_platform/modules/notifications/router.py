"""
Notifications Router

In-app notification inbox for every role. Organisation accounts also see
notifications addressed to their institution or company.

Endpoints:
- GET /notifications - List notifications (newest first)
- POST /notifications/read-all - Mark every notification read
- POST /notifications/{id}/read - Mark one notification read
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from career_platform.core.auth import CurrentUser, get_current_user
from career_platform.core.database import get_db
from career_platform.modules.notifications import service
from career_platform.modules.notifications.schemas import (
    MarkAllReadResponse,
    NotificationListResponse,
    NotificationResponse,
)
from career_platform.modules.notifications.service import NotificationNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter()


def _recipient_ids(user: CurrentUser) -> list[str]:
    ids = [user.id]
    if user.org_id is not None:
        ids.append(str(user.org_id))
    return ids


@router.get("", response_model=NotificationListResponse, summary="List Notifications")
async def list_notifications(
    unread_only: bool = Query(False, alias="unreadOnly"),
    skip: int = Query(0, ge=0),
    limit: int = Query(50, ge=1, le=100),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> NotificationListResponse:
    items, unread = await service.list_notifications(
        db, _recipient_ids(current_user), unread_only, skip, limit
    )
    return NotificationListResponse(
        items=[NotificationResponse.model_validate(n) for n in items],
        unread=unread,
    )


@router.post("/read-all", response_model=MarkAllReadResponse, summary="Mark All Read")
async def mark_all_read(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> MarkAllReadResponse:
    updated = await service.mark_all_read(db, _recipient_ids(current_user))
    return MarkAllReadResponse(updated=updated)


@router.post(
    "/{notification_id}/read",
    response_model=NotificationResponse,
    summary="Mark Notification Read",
)
async def mark_read(
    notification_id: UUID,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> NotificationResponse:
    try:
        notification = await service.mark_read(db, _recipient_ids(current_user), notification_id)
    except NotificationNotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": e.error_code, "message": e.message},
        ) from e
    return NotificationResponse.model_validate(notification)
