"""
Unit tests for the notifications service layer.
"""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from sqlalchemy.exc import OperationalError

from career_platform.modules.notifications.models import Notification, NotificationType
from career_platform.modules.notifications.service import (
    NotificationNotFoundError,
    OutgoingNotification,
    deliver,
    for_institution,
    for_student,
    mark_read,
)
from career_platform.modules.students.models import Student

SERVICE = "career_platform.modules.notifications.service"


@pytest.fixture
def outgoing():
    return [
        OutgoingNotification(
            recipient_id="student-1",
            message="You have been admitted",
            type=NotificationType.ADMISSION,
            email="student@example.com",
        ),
        OutgoingNotification(
            recipient_id=str(uuid4()),
            message="New application received",
            type=NotificationType.APPLICATION,
        ),
    ]


class TestDeliver:
    @pytest.mark.asyncio
    async def test_stores_all_and_emails_recipients_with_address(self, mock_db, outgoing):
        with patch(
            f"{SERVICE}.send_notification_email", AsyncMock(return_value=True)
        ) as mock_email:
            saved = await deliver(mock_db, outgoing)

        assert len(saved) == 2
        assert all(n.read is False for n in saved)
        mock_db.add_all.assert_called_once()
        mock_db.commit.assert_called_once()
        mock_email.assert_called_once_with(
            "student@example.com", outgoing[0].subject, "You have been admitted"
        )

    @pytest.mark.asyncio
    async def test_storage_failure_does_not_raise(self, mock_db, outgoing):
        mock_db.commit = AsyncMock(
            side_effect=OperationalError("INSERT", {}, Exception("connection lost"))
        )
        with patch(
            f"{SERVICE}.send_notification_email", AsyncMock(return_value=True)
        ) as mock_email:
            saved = await deliver(mock_db, outgoing)

        assert saved == []
        mock_db.rollback.assert_called_once()
        # Email is still attempted
        mock_email.assert_called_once()

    @pytest.mark.asyncio
    async def test_email_failure_does_not_raise(self, mock_db, outgoing):
        with patch(f"{SERVICE}.send_notification_email", AsyncMock(return_value=False)):
            saved = await deliver(mock_db, outgoing)

        assert len(saved) == 2

    @pytest.mark.asyncio
    async def test_nothing_to_deliver(self, mock_db):
        assert await deliver(mock_db, []) == []
        mock_db.commit.assert_not_called()


class TestBuilders:
    @pytest.mark.asyncio
    async def test_for_student_uses_profile_email(self, mock_db):
        student = MagicMock(spec=Student)
        student.email = "student@example.com"
        mock_db.get = AsyncMock(return_value=student)

        item = await for_student(mock_db, "student-1", "hello", NotificationType.SYSTEM)

        assert item.email == "student@example.com"
        assert item.recipient_id == "student-1"

    @pytest.mark.asyncio
    async def test_lookup_failure_still_builds_notification(self, mock_db):
        institution_id = uuid4()
        mock_db.get = AsyncMock(side_effect=OperationalError("SELECT", {}, Exception("down")))

        item = await for_institution(
            mock_db, institution_id, "hello", NotificationType.APPLICATION, subject="Hi"
        )

        assert item.recipient_id == str(institution_id)
        assert item.email is None
        assert item.subject == "Hi"
        mock_db.rollback.assert_called_once()


class TestMarkRead:
    @pytest.mark.asyncio
    async def test_marks_own_notification(self, mock_db):
        notification = MagicMock(spec=Notification)
        notification.recipient_id = "student-1"
        notification.read = False
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=notification)
            mock_repo.mark_read = AsyncMock(return_value=notification)

            result = await mark_read(mock_db, ["student-1"], uuid4())

        assert result is notification
        mock_repo.mark_read.assert_called_once_with(mock_db, notification)

    @pytest.mark.asyncio
    async def test_someone_elses_notification_is_not_found(self, mock_db):
        notification = MagicMock(spec=Notification)
        notification.recipient_id = "student-2"
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=notification)
            mock_repo.mark_read = AsyncMock()

            with pytest.raises(NotificationNotFoundError) as exc_info:
                await mark_read(mock_db, ["student-1"], uuid4())

        assert exc_info.value.status_code == 404
        mock_repo.mark_read.assert_not_called()
