"""
Unit tests for the students service layer.
"""

from datetime import UTC, date, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from career_platform.core.auth import CurrentUser, UserRole
from career_platform.modules.admissions.models import ApplicationStatus
from career_platform.modules.students.models import EligibilityStatus, Student
from career_platform.modules.students.schemas import StudentProfileUpdate
from career_platform.modules.students.service import (
    get_dashboard,
    get_or_create_profile,
    update_profile,
)

SERVICE = "career_platform.modules.students.service"


@pytest.fixture
def user():
    return CurrentUser(
        id="student-1", email="lerato@example.com", role=UserRole.STUDENT, email_verified=True
    )


@pytest.fixture
def student(user):
    s = MagicMock(spec=Student)
    s.id = user.id
    s.email = user.email
    s.name = None
    s.phone = None
    s.address = None
    s.date_of_birth = None
    s.high_school = None
    s.graduation_year = None
    s.subjects = []
    s.grades = {}
    s.work_experience = []
    s.extracurriculars = []
    s.eligibility_status = EligibilityStatus.INCOMPLETE
    s.updated_at = datetime.now(UTC)
    return s


class TestGetOrCreateProfile:
    @pytest.mark.asyncio
    async def test_creates_profile_on_first_access(self, mock_db, user, student):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=None)
            mock_repo.create = AsyncMock(return_value=student)

            result = await get_or_create_profile(mock_db, user)

        assert result is student
        mock_repo.create.assert_called_once_with(mock_db, user.id, user.email)

    @pytest.mark.asyncio
    async def test_returns_existing_profile(self, mock_db, user, student):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=student)
            mock_repo.create = AsyncMock()

            assert await get_or_create_profile(mock_db, user) is student

        mock_repo.create.assert_not_called()


class TestUpdateProfile:
    @pytest.mark.asyncio
    async def test_grades_update_subjects_and_eligibility(self, mock_db, user, student):
        data = StudentProfileUpdate.model_validate(
            {
                "name": "Lerato Mokoena",
                "dateOfBirth": "2007-03-14",
                "highSchool": "Maseru High School",
                "graduationYear": 2025,
                "grades": {
                    "Mathematics": "B",
                    "English": "C",
                    "Physics": "B",
                    "Chemistry": "A",
                    "Sesotho": "D",
                },
            }
        )
        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.derive_eligibility_status") as mock_derive,
        ):
            mock_repo.get_by_id = AsyncMock(return_value=student)
            mock_repo.save = AsyncMock(side_effect=lambda db, s: s)
            mock_derive.return_value = EligibilityStatus.ELIGIBLE

            result = await update_profile(mock_db, user, data)

        assert result.grades["Mathematics"] == "B"
        assert result.subjects == ["Mathematics", "English", "Physics", "Chemistry", "Sesotho"]
        assert result.date_of_birth == date(2007, 3, 14)
        assert result.eligibility_status == EligibilityStatus.ELIGIBLE
        mock_derive.assert_called_once_with(student)

    @pytest.mark.asyncio
    async def test_omitted_fields_are_unchanged(self, mock_db, user, student):
        student.grades = {"Mathematics": "A"}
        student.subjects = ["Mathematics"]
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_by_id = AsyncMock(return_value=student)
            mock_repo.save = AsyncMock(side_effect=lambda db, s: s)

            result = await update_profile(mock_db, user, StudentProfileUpdate(phone="+26650000"))

        assert result.phone == "+26650000"
        assert result.grades == {"Mathematics": "A"}
        assert result.eligibility_status == EligibilityStatus.INCOMPLETE

    def test_duplicate_grade_subjects_are_rejected(self):
        with pytest.raises(ValueError):
            StudentProfileUpdate(grades={"English": "A", " english": "B"})


class TestDashboard:
    @pytest.mark.asyncio
    async def test_counts(self, mock_db, user, student):
        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.admissions_repository") as mock_admissions,
            patch(f"{SERVICE}.careers_repository") as mock_careers,
            patch(f"{SERVICE}.notifications_repository") as mock_notifications,
        ):
            mock_repo.get_by_id = AsyncMock(return_value=student)
            mock_admissions.count_by_status_for_student = AsyncMock(
                return_value={ApplicationStatus.ADMITTED: 2, ApplicationStatus.PENDING: 1}
            )
            mock_careers.count_by_student = AsyncMock(return_value=3)
            mock_notifications.list_for_recipients = AsyncMock(return_value=([], 4))

            dashboard = await get_dashboard(mock_db, user)

        assert dashboard.pending_selection == 2
        assert dashboard.applications_by_status == {"admitted": 2, "pending": 1}
        assert dashboard.job_applications == 3
        assert dashboard.unread_notifications == 4
        assert dashboard.profile.id == user.id
