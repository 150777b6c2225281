"""
Notifications Service

Delivery of workflow notifications: a persisted in-app notification plus a
best-effort email. Delivery runs after the workflow transaction has
committed and never raises, so a failed notification cannot undo an
admission decision.
"""

import logging
from dataclasses import dataclass
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from career_platform.core.email import send_notification_email
from career_platform.modules.catalog.models import Company, Institution
from career_platform.modules.notifications import repository
from career_platform.modules.notifications.models import Notification, NotificationType
from career_platform.modules.students.models import Student

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutgoingNotification:
    """A notification waiting to be delivered."""

    recipient_id: str
    message: str
    type: NotificationType
    email: str | None = None
    subject: str = "Update on your Career Platform account"


class NotificationNotFoundError(Exception):
    def __init__(self, notification_id: UUID):
        self.message = f"Notification {notification_id} not found"
        self.error_code = "NOTIFICATION_NOT_FOUND"
        self.status_code = 404
        super().__init__(self.message)


async def _lookup_email(db: AsyncSession, model: type, id: str | UUID) -> str | None:
    """Email of the recipient row, None when missing or the lookup fails."""
    try:
        recipient = await db.get(model, id)
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Could not look up {model.__name__} {id} for notification: {e}")
        return None
    return recipient.email if recipient else None


async def for_student(
    db: AsyncSession,
    student_id: str,
    message: str,
    type: NotificationType,
    subject: str | None = None,
) -> OutgoingNotification:
    return OutgoingNotification(
        recipient_id=student_id,
        message=message,
        type=type,
        email=await _lookup_email(db, Student, student_id),
        subject=subject or OutgoingNotification.subject,
    )


async def for_institution(
    db: AsyncSession,
    institution_id: UUID,
    message: str,
    type: NotificationType,
    subject: str | None = None,
) -> OutgoingNotification:
    return OutgoingNotification(
        recipient_id=str(institution_id),
        message=message,
        type=type,
        email=await _lookup_email(db, Institution, institution_id),
        subject=subject or OutgoingNotification.subject,
    )


async def for_company(
    db: AsyncSession,
    company_id: UUID,
    message: str,
    type: NotificationType,
    subject: str | None = None,
) -> OutgoingNotification:
    return OutgoingNotification(
        recipient_id=str(company_id),
        message=message,
        type=type,
        email=await _lookup_email(db, Company, company_id),
        subject=subject or OutgoingNotification.subject,
    )


async def deliver(
    db: AsyncSession, outgoing: list[OutgoingNotification]
) -> list[Notification]:
    """
    Persist and email a batch of notifications.

    Storage failures are rolled back and logged; emails are attempted
    regardless. Never raises.
    """
    if not outgoing:
        return []

    saved: list[Notification] = []
    try:
        saved = await repository.add_all(
            db,
            [repository.build(item.recipient_id, item.message, item.type) for item in outgoing],
        )
        logger.info(f"Stored {len(saved)} notification(s)")
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Failed to store {len(outgoing)} notification(s): {e}", exc_info=True)

    for item in outgoing:
        if not item.email:
            continue
        sent = await send_notification_email(item.email, item.subject, item.message)
        if not sent:
            logger.error(f"Failed to email notification to recipient {item.recipient_id}")

    return saved


async def notify_student(
    db: AsyncSession,
    student_id: str,
    message: str,
    type: NotificationType,
    subject: str | None = None,
) -> list[Notification]:
    """Build and deliver one notification to a student. Never raises."""
    item = await for_student(db, student_id, message, type, subject)
    return await deliver(db, [item])


async def list_notifications(
    db: AsyncSession,
    recipient_ids: list[str],
    unread_only: bool = False,
    skip: int = 0,
    limit: int = 50,
) -> tuple[list[Notification], int]:
    return await repository.list_for_recipients(db, recipient_ids, unread_only, skip, limit)


async def mark_read(
    db: AsyncSession, recipient_ids: list[str], notification_id: UUID
) -> Notification:
    """Mark a notification read. Someone else's notification looks like a missing one."""
    notification = await repository.get_by_id(db, notification_id)
    if notification is None or notification.recipient_id not in recipient_ids:
        raise NotificationNotFoundError(notification_id)
    return await repository.mark_read(db, notification)


async def mark_all_read(db: AsyncSession, recipient_ids: list[str]) -> int:
    updated = await repository.mark_all_read(db, recipient_ids)
    logger.info(f"Marked {updated} notification(s) read")
    return updated
