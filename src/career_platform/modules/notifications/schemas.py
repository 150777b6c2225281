"""
Notification Schemas
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from career_platform.modules.notifications.models import NotificationType


class NotificationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    id: UUID
    message: str
    type: NotificationType
    read: bool
    created_at: datetime = Field(..., serialization_alias="createdAt")
    read_at: datetime | None = Field(None, serialization_alias="readAt")


class NotificationListResponse(BaseModel):
    items: list[NotificationResponse]
    unread: int


class MarkAllReadResponse(BaseModel):
    updated: int
