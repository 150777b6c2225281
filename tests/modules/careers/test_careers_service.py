"""
Unit tests for the careers service layer.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from career_platform.modules.careers.models import JobApplication, JobApplicationStatus
from career_platform.modules.careers.schemas import JobApplicationCreate
from career_platform.modules.careers.service import (
    AlreadyAppliedError,
    InvalidJobStatusError,
    JobApplicationNotFoundError,
    JobNotFoundError,
    NotQualifiedError,
    apply_to_job,
    update_status,
)
from career_platform.modules.catalog.models import Job, ListingStatus
from career_platform.modules.students.models import Student

SERVICE = "career_platform.modules.careers.service"
STUDENT_ID = "student-1"


@pytest.fixture
def job():
    j = MagicMock(spec=Job)
    j.id = uuid4()
    j.company_id = uuid4()
    j.title = "Graduate Network Engineer"
    j.required_subjects = {"Mathematics": "B"}
    j.min_gpa = None
    j.status = ListingStatus.ACTIVE
    return j


@pytest.fixture
def student():
    s = MagicMock(spec=Student)
    s.id = STUDENT_ID
    s.grades = {"Mathematics": "A", "English": "C"}
    return s


@pytest.fixture
def job_application(job):
    app = MagicMock(spec=JobApplication)
    app.id = uuid4()
    app.student_id = STUDENT_ID
    app.job_id = job.id
    app.company_id = job.company_id
    app.job = job
    app.status = JobApplicationStatus.PENDING
    app.cover_letter = None
    app.applied_at = datetime.now(UTC)
    app.updated_at = app.applied_at
    return app


@pytest.fixture
def mock_notifications():
    with patch(f"{SERVICE}.notifications") as mock_notif:
        mock_notif.for_company = AsyncMock(return_value=MagicMock())
        mock_notif.deliver = AsyncMock(return_value=[])
        mock_notif.notify_student = AsyncMock(return_value=[])
        yield mock_notif


class TestApplyToJob:
    @pytest.mark.asyncio
    async def test_qualified_student_applies(
        self, mock_db, job, student, job_application, mock_notifications
    ):
        with (
            patch(f"{SERVICE}.catalog_repository") as mock_catalog,
            patch(f"{SERVICE}.students_repository") as mock_students,
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_catalog.get_job = AsyncMock(return_value=job)
            mock_students.get_by_id = AsyncMock(return_value=student)
            mock_repo.get_for_student_and_job = AsyncMock(return_value=None)
            mock_repo.create = AsyncMock(return_value=job_application)
            mock_repo.get_with_job = AsyncMock(return_value=job_application)

            result = await apply_to_job(mock_db, STUDENT_ID, JobApplicationCreate(jobId=job.id))

        assert result.id == job_application.id
        assert result.job_title == job.title
        mock_notifications.for_company.assert_called_once()
        assert mock_notifications.for_company.call_args.args[1] == job.company_id

    @pytest.mark.asyncio
    async def test_unqualified_student_is_refused(self, mock_db, job, student):
        student.grades = {"Mathematics": "C"}
        with (
            patch(f"{SERVICE}.catalog_repository") as mock_catalog,
            patch(f"{SERVICE}.students_repository") as mock_students,
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_catalog.get_job = AsyncMock(return_value=job)
            mock_students.get_by_id = AsyncMock(return_value=student)
            mock_repo.create = AsyncMock()

            with pytest.raises(NotQualifiedError):
                await apply_to_job(mock_db, STUDENT_ID, JobApplicationCreate(jobId=job.id))

        mock_repo.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_second_application_is_refused(
        self, mock_db, job, student, job_application
    ):
        with (
            patch(f"{SERVICE}.catalog_repository") as mock_catalog,
            patch(f"{SERVICE}.students_repository") as mock_students,
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_catalog.get_job = AsyncMock(return_value=job)
            mock_students.get_by_id = AsyncMock(return_value=student)
            mock_repo.get_for_student_and_job = AsyncMock(return_value=job_application)

            with pytest.raises(AlreadyAppliedError):
                await apply_to_job(mock_db, STUDENT_ID, JobApplicationCreate(jobId=job.id))

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_is_refused(self, mock_db, job, student):
        with (
            patch(f"{SERVICE}.catalog_repository") as mock_catalog,
            patch(f"{SERVICE}.students_repository") as mock_students,
            patch(f"{SERVICE}.repository") as mock_repo,
        ):
            mock_catalog.get_job = AsyncMock(return_value=job)
            mock_students.get_by_id = AsyncMock(return_value=student)
            mock_repo.get_for_student_and_job = AsyncMock(return_value=None)
            mock_repo.create = AsyncMock(
                side_effect=IntegrityError("INSERT", {}, Exception("unique violation"))
            )

            with pytest.raises(AlreadyAppliedError):
                await apply_to_job(mock_db, STUDENT_ID, JobApplicationCreate(jobId=job.id))

        mock_db.rollback.assert_called_once()

    @pytest.mark.asyncio
    async def test_closed_job_is_not_found(self, mock_db, job):
        job.status = ListingStatus.CLOSED
        with patch(f"{SERVICE}.catalog_repository") as mock_catalog:
            mock_catalog.get_job = AsyncMock(return_value=job)

            with pytest.raises(JobNotFoundError):
                await apply_to_job(mock_db, STUDENT_ID, JobApplicationCreate(jobId=job.id))


class TestUpdateStatus:
    @pytest.mark.asyncio
    async def test_shortlist_notifies_student(
        self, mock_db, job, job_application, mock_notifications
    ):
        with patch(f"{SERVICE}.repository") as mock_repo:
            mock_repo.VALID_STATUS_TRANSITIONS = {
                JobApplicationStatus.PENDING: {JobApplicationStatus.SHORTLISTED}
            }
            mock_repo.get_with_job = AsyncMock(return_value=job_application)
            mock_repo.save = AsyncMock(return_value=job_application)

            result = await update_status(
                mock_db, job.company_id, job_application.id, JobApplicationStatus.SHORTLISTED
            )

        assert result.status == JobApplicationStatus.SHORTLISTED
        mock_notifications.notify_student.assert_called_once()

    @pytest.mark.asyncio
    async def test_final_status_cannot_change(self, mock_db, job, job_application):
        job_application.status = JobApplicationStatus.HIRED
        with patch(
            f"{SERVICE}.repository.get_with_job", AsyncMock(return_value=job_application)
        ):
            with pytest.raises(InvalidJobStatusError):
                await update_status(
                    mock_db, job.company_id, job_application.id, JobApplicationStatus.REJECTED
                )

    @pytest.mark.asyncio
    async def test_other_companys_application_is_not_found(self, mock_db, job_application):
        with patch(
            f"{SERVICE}.repository.get_with_job", AsyncMock(return_value=job_application)
        ):
            with pytest.raises(JobApplicationNotFoundError):
                await update_status(
                    mock_db, uuid4(), job_application.id, JobApplicationStatus.HIRED
                )
