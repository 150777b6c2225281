"""
Unit tests for the catalog service layer.
"""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest

from career_platform.modules.admissions.errors import PromotionIncompleteError
from career_platform.modules.catalog.models import Course, Institution, ListingStatus
from career_platform.modules.catalog.schemas import CourseUpdate
from career_platform.modules.catalog.service import (
    ListingNotFoundError,
    list_courses,
    update_course,
)
from career_platform.modules.students.models import Student

SERVICE = "career_platform.modules.catalog.service"


def _course(institution, name, required_subjects, capacity=None):
    course = MagicMock(spec=Course)
    course.id = uuid4()
    course.institution_id = institution.id
    course.institution = institution
    course.name = name
    course.faculty = None
    course.duration = None
    course.description = None
    course.capacity = capacity
    course.required_subjects = required_subjects
    course.min_gpa = None
    course.status = ListingStatus.ACTIVE
    return course


@pytest.fixture
def institution():
    inst = MagicMock(spec=Institution)
    inst.id = uuid4()
    inst.name = "Botho University"
    return inst


@pytest.fixture
def courses(institution):
    return [
        _course(institution, "BSc Engineering", {"Mathematics": "B", "English": "C"}),
        _course(institution, "Certificate in Office Administration", {}),
    ]


@pytest.fixture
def student():
    s = MagicMock(spec=Student)
    s.grades = {"Mathematics": "A", "English": "D"}
    return s


class TestListCourses:
    @pytest.mark.asyncio
    async def test_flags_eligibility_per_course(self, mock_db, courses, student):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.list_courses = AsyncMock(return_value=courses)

            items = await list_courses(mock_db, student)

        engineering, office = items
        assert engineering.eligible is False
        assert any("English" in reason for reason in engineering.ineligible_reasons)
        assert office.eligible is True
        assert office.institution_name == "Botho University"

    @pytest.mark.asyncio
    async def test_eligible_only_hides_courses(self, mock_db, courses, student):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.list_courses = AsyncMock(return_value=courses)

            items = await list_courses(mock_db, student, eligible_only=True)

        assert [c.name for c in items] == ["Certificate in Office Administration"]

    @pytest.mark.asyncio
    async def test_anonymous_listing_has_no_flags(self, mock_db, courses):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.list_courses = AsyncMock(return_value=courses)

            items = await list_courses(mock_db, None, eligible_only=True)

        assert len(items) == 2
        assert all(c.eligible is None for c in items)


class TestUpdateCourse:
    @pytest.mark.asyncio
    async def test_capacity_increase_promotes_waitlist(self, mock_db, institution):
        course = _course(institution, "BSc Nursing", {}, capacity=10)
        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.waitlist.promote", new_callable=AsyncMock) as mock_promote,
        ):
            mock_repo.get_course = AsyncMock(return_value=course)
            mock_repo.save_course = AsyncMock(side_effect=lambda db, c: c)

            result = await update_course(
                mock_db, institution.id, course.id, CourseUpdate(capacity=12)
            )

        assert result.capacity == 12
        mock_promote.assert_called_once_with(mock_db, course.id)

    @pytest.mark.asyncio
    async def test_first_capacity_on_unbounded_course_promotes_waitlist(
        self, mock_db, institution
    ):
        course = _course(institution, "BSc Nursing", {}, capacity=None)
        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.waitlist.promote", new_callable=AsyncMock) as mock_promote,
        ):
            mock_repo.get_course = AsyncMock(return_value=course)
            mock_repo.save_course = AsyncMock(side_effect=lambda db, c: c)

            await update_course(mock_db, institution.id, course.id, CourseUpdate(capacity=5))

        mock_promote.assert_called_once_with(mock_db, course.id)

    @pytest.mark.asyncio
    async def test_unbounded_course_edit_does_not_promote(self, mock_db, institution):
        course = _course(institution, "BSc Nursing", {}, capacity=None)
        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.waitlist.promote", new_callable=AsyncMock) as mock_promote,
        ):
            mock_repo.get_course = AsyncMock(return_value=course)
            mock_repo.save_course = AsyncMock(side_effect=lambda db, c: c)

            await update_course(
                mock_db, institution.id, course.id, CourseUpdate(name="BSc Midwifery")
            )

        mock_promote.assert_not_called()

        mock_promote.assert_called_once_with(mock_db, course.id)

    @pytest.mark.asyncio
    async def test_capacity_decrease_does_not_promote(self, mock_db, institution):
        course = _course(institution, "BSc Nursing", {}, capacity=10)
        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.waitlist.promote", new_callable=AsyncMock) as mock_promote,
        ):
            mock_repo.get_course = AsyncMock(return_value=course)
            mock_repo.save_course = AsyncMock(side_effect=lambda db, c: c)

            await update_course(mock_db, institution.id, course.id, CourseUpdate(capacity=8))

        mock_promote.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_promotion_does_not_fail_the_update(self, mock_db, institution):
        course = _course(institution, "BSc Nursing", {}, capacity=10)
        with (
            patch(f"{SERVICE}.repository") as mock_repo,
            patch(f"{SERVICE}.waitlist.promote", new_callable=AsyncMock) as mock_promote,
        ):
            mock_repo.get_course = AsyncMock(return_value=course)
            mock_repo.save_course = AsyncMock(side_effect=lambda db, c: c)
            mock_promote.side_effect = PromotionIncompleteError(course.id)

            result = await update_course(
                mock_db, institution.id, course.id, CourseUpdate(capacity=20)
            )

        assert result.capacity == 20

    @pytest.mark.asyncio
    async def test_requirements_are_replaced(self, mock_db, institution):
        course = _course(institution, "BSc Nursing", {"Biology": "C"})
        update = CourseUpdate.model_validate(
            {"requirements": {"required_subjects": {" Chemistry ": "B"}, "min_gpa": 2.0}}
        )
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_course = AsyncMock(return_value=course)
            mock_repo.save_course = AsyncMock(side_effect=lambda db, c: c)

            result = await update_course(mock_db, institution.id, course.id, update)

        assert result.required_subjects == {"Chemistry": "B"}
        assert result.min_gpa == 2.0

    @pytest.mark.asyncio
    async def test_other_institutions_course_is_not_found(self, mock_db, institution):
        course = _course(institution, "BSc Nursing", {})
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.get_course = AsyncMock(return_value=course)

            with pytest.raises(ListingNotFoundError):
                await update_course(mock_db, uuid4(), course.id, CourseUpdate(name="Other"))
