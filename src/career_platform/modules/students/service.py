"""
Students Service Layer

Profile reads and updates. `eligibility_status` and the flat `subjects`
list are always recomputed from the profile on save, never accepted from
the client.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from career_platform.core.auth import CurrentUser
from career_platform.modules.admissions import repository as admissions_repository
from career_platform.modules.admissions.models import ApplicationStatus
from career_platform.modules.careers import repository as careers_repository
from career_platform.modules.notifications import repository as notifications_repository
from career_platform.modules.students import repository
from career_platform.modules.students.helpers import (
    derive_eligibility_status,
    missing_profile_requirements,
    profile_completion,
)
from career_platform.modules.students.models import Student
from career_platform.modules.students.schemas import (
    DashboardResponse,
    StudentProfileResponse,
    StudentProfileUpdate,
)

logger = logging.getLogger(__name__)


def to_response(student: Student) -> StudentProfileResponse:
    response = StudentProfileResponse.model_validate(student)
    response.missing_requirements = missing_profile_requirements(student)
    return response


async def get_or_create_profile(db: AsyncSession, user: CurrentUser) -> Student:
    """Load the caller's profile, creating an empty one on first access."""
    student = await repository.get_by_id(db, user.id)
    if student is None:
        student = await repository.create(db, user.id, user.email)
        logger.info(f"Created student profile {user.id}")
    return student


async def update_profile(
    db: AsyncSession, user: CurrentUser, data: StudentProfileUpdate
) -> Student:
    """Apply a partial profile update and re-derive eligibility."""
    student = await get_or_create_profile(db, user)

    changes = data.model_dump(exclude_unset=True)
    for field_name, value in changes.items():
        if field_name == "grades":
            grades = data.grades or {}
            student.grades = {subject: grade.value for subject, grade in grades.items()}
            student.subjects = list(student.grades)
        elif field_name == "work_experience":
            student.work_experience = [item.model_dump() for item in data.work_experience or []]
        elif field_name == "extracurriculars":
            student.extracurriculars = value or []
        else:
            setattr(student, field_name, value)

    previous = student.eligibility_status
    student.eligibility_status = derive_eligibility_status(student)
    student = await repository.save(db, student)

    logger.info(
        f"Updated profile {student.id}: fields={sorted(changes)}, "
        f"eligibility {previous.value if previous else None} -> {student.eligibility_status.value}"
    )
    return student


async def get_dashboard(db: AsyncSession, user: CurrentUser) -> DashboardResponse:
    student = await get_or_create_profile(db, user)

    by_status = await admissions_repository.count_by_status_for_student(db, student.id)
    job_applications = await careers_repository.count_by_student(db, student.id)
    _, unread = await notifications_repository.list_for_recipients(db, [student.id], limit=1)

    return DashboardResponse(
        profile=to_response(student),
        profile_completion=profile_completion(student),
        applications_by_status={status.value: count for status, count in by_status.items()},
        pending_selection=by_status.get(ApplicationStatus.ADMITTED, 0),
        job_applications=job_applications,
        unread_notifications=unread,
    )
