"""
Fixtures for admissions tests.
"""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from career_platform.modules.admissions.models import Application, ApplicationStatus
from career_platform.modules.catalog.models import Course, Institution, ListingStatus

STUDENT_ID = "student-1"


def build_application(
    status: ApplicationStatus = ApplicationStatus.PENDING,
    *,
    student_id: str = STUDENT_ID,
    course_id=None,
    institution_id=None,
    applied_at: datetime | None = None,
):
    """Mock application with every response field populated."""
    app = MagicMock(spec=Application)
    app.id = uuid4()
    app.student_id = student_id
    app.course_id = course_id or uuid4()
    app.institution_id = institution_id or uuid4()
    app.status = status
    app.qualifications = None
    app.previous_school = None
    app.notes = None
    app.applied_at = applied_at or datetime.now(UTC)
    app.admitted_at = None
    app.accepted_at = None
    app.declined_at = None
    app.rejected_at = None
    app.waitlisted_at = None
    app.decline_reason = None
    app.admission_source = None
    app.created_at = app.applied_at
    app.updated_at = app.applied_at
    return app


@pytest.fixture
def make_application():
    return build_application


@pytest.fixture
def institution():
    inst = MagicMock(spec=Institution)
    inst.id = uuid4()
    inst.name = "National University of Lesotho"
    inst.email = "admissions@nul.example"
    return inst


@pytest.fixture
def course(institution):
    """Open course with Mathematics B / English C requirements and 10 seats."""
    c = MagicMock(spec=Course)
    c.id = uuid4()
    c.institution_id = institution.id
    c.institution = institution
    c.name = "BSc Computer Science"
    c.capacity = 10
    c.required_subjects = {"Mathematics": "B", "English": "C"}
    c.min_gpa = None
    c.status = ListingStatus.ACTIVE
    return c


@pytest.fixture
def waitlist_queue(course):
    """Three waitlisted applications for the course, earliest first."""
    start = datetime.now(UTC) - timedelta(days=3)
    return [
        build_application(
            ApplicationStatus.WAITLISTED,
            student_id=f"waitlisted-{i}",
            course_id=course.id,
            institution_id=course.institution_id,
            applied_at=start + timedelta(hours=i),
        )
        for i in range(3)
    ]
