"""
Notifications Repository

Database operations for in-app notifications.
"""

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Notification, NotificationType


def build(recipient_id: str, message: str, type: NotificationType) -> Notification:
    return Notification(recipient_id=recipient_id, message=message, type=type, read=False)


async def add_all(db: AsyncSession, notifications: list[Notification]) -> list[Notification]:
    """Persist several notifications in one commit."""
    db.add_all(notifications)
    await db.commit()
    return notifications


async def list_for_recipients(
    db: AsyncSession,
    recipient_ids: list[str],
    unread_only: bool = False,
    skip: int = 0,
    limit: int = 50,
) -> tuple[list[Notification], int]:
    """Newest-first notifications for any of the recipient ids, plus unread count."""
    conditions = [Notification.recipient_id.in_(recipient_ids)]
    if unread_only:
        conditions.append(Notification.read.is_(False))

    result = await db.execute(
        select(Notification)
        .where(*conditions)
        .order_by(Notification.created_at.desc())
        .offset(skip)
        .limit(limit)
    )

    unread_result = await db.execute(
        select(func.count(Notification.id)).where(
            Notification.recipient_id.in_(recipient_ids),
            Notification.read.is_(False),
        )
    )
    return list(result.scalars().all()), unread_result.scalar_one()


async def get_by_id(db: AsyncSession, id: UUID) -> Notification | None:
    return await db.get(Notification, id)


async def mark_read(db: AsyncSession, notification: Notification) -> Notification:
    """Mark one notification read. Already-read notifications keep their read_at."""
    if not notification.read:
        notification.read = True
        notification.read_at = datetime.now(UTC)
        await db.commit()
        await db.refresh(notification)
    return notification


async def mark_all_read(db: AsyncSession, recipient_ids: list[str]) -> int:
    """Mark every unread notification of the recipients read. Returns the number updated."""
    result = await db.execute(
        update(Notification)
        .where(
            Notification.recipient_id.in_(recipient_ids),
            Notification.read.is_(False),
        )
        .values(read=True, read_at=datetime.now(UTC))
    )
    await db.commit()
    return result.rowcount or 0
