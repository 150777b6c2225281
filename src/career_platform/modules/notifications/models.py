"""
Notification Models

Persisted in-app notifications. `recipient_id` is either a student principal
id or an institution/company id, so organisation accounts share one inbox.
"""

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from career_platform.modules.shared import BaseModel, enum_values


class NotificationType(str, enum.Enum):
    """Category shown next to a notification."""

    APPLICATION = "application"
    ADMISSION = "admission"
    WAITLIST = "waitlist"
    JOB = "job"
    SYSTEM = "system"


class Notification(BaseModel):
    """A message for one recipient."""

    __tablename__ = "notifications"

    recipient_id: Mapped[str] = mapped_column(String(128), nullable=False)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[NotificationType] = mapped_column(
        Enum(NotificationType, name="notification_type", values_callable=enum_values),
        nullable=False,
        default=NotificationType.SYSTEM,
    )
    read: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    read_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    __table_args__ = (
        Index("ix_notifications_recipient_created", "recipient_id", "created_at"),
    )
