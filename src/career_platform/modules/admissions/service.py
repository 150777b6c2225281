"""
Admissions Service Layer

Business logic for course applications outside offer selection:

1. Submission:
   - Course must exist and be open
   - Student grades must satisfy the course requirements
   - One live application per course, at most
     MAX_APPLICATIONS_PER_INSTITUTION live applications per institution
   - Duplicate and cap checks run under the per-student lock, so parallel
     submissions from one student cannot both pass

2. Student views:
   - Full application list (newest first) with course/institution names
   - Pending selection: admitted offers waiting for a choice

3. Institution side:
   - List received applications
   - Admit, reject or waitlist an application
   - Manually run waitlist promotion for a course
"""

import logging
from uuid import UUID

from redis.asyncio import Redis
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from career_platform.core.config import settings
from career_platform.core.locks import LockNotAcquiredError, hold_lock, student_lock_key
from career_platform.modules.admissions import repository, waitlist
from career_platform.modules.admissions.errors import (
    ApplicationNotFoundError,
    CapExceededError,
    ConcurrentModificationError,
    CourseNotFoundError,
    DuplicateApplicationError,
    InvalidDecisionError,
    NotEligibleError,
)
from career_platform.modules.admissions.models import (
    CLOSED_STATUSES,
    AdmissionSource,
    Application,
    ApplicationStatus,
)
from career_platform.modules.admissions.schemas import (
    ApplicationCreate,
    ApplicationResponse,
)
from career_platform.modules.admissions.selection import check_single_acceptance
from career_platform.modules.catalog import repository as catalog_repository
from career_platform.modules.catalog.models import ListingStatus
from career_platform.modules.eligibility import evaluate
from career_platform.modules.eligibility.schemas import requirement_set_from_columns
from career_platform.modules.notifications import service as notifications
from career_platform.modules.notifications.models import NotificationType
from career_platform.modules.students import repository as students_repository

logger = logging.getLogger(__name__)

# Statuses an institution may set
DECISIONS = frozenset(
    {ApplicationStatus.ADMITTED, ApplicationStatus.REJECTED, ApplicationStatus.WAITLISTED}
)

DECISION_MESSAGES = {
    ApplicationStatus.ADMITTED: (
        "Congratulations! You have been admitted to {course}. "
        "Choose your offer from your dashboard."
    ),
    ApplicationStatus.REJECTED: "Your application to {course} was not successful.",
    ApplicationStatus.WAITLISTED: (
        "You have been placed on the waitlist for {course}. "
        "We will let you know if a seat opens up."
    ),
}


def to_response(
    application: Application,
    course_name: str | None = None,
    institution_name: str | None = None,
) -> ApplicationResponse:
    response = ApplicationResponse.model_validate(application)
    response.course_name = course_name
    response.institution_name = institution_name
    return response


def to_listing_response(application: Application) -> ApplicationResponse:
    """Response for an application loaded with its course and institution."""
    return to_response(application, application.course.name, application.institution.name)


async def create_application(
    db: AsyncSession,
    redis: Redis | None,
    student_id: str,
    data: ApplicationCreate,
    email: str = "",
) -> ApplicationResponse:
    """
    Submit an application to a course.

    A student applying before ever opening their profile gets an empty one
    created first, using `email` from the identity token.

    Raises:
        CourseNotFoundError: Unknown or closed course
        NotEligibleError: Grades do not satisfy the course requirements
        DuplicateApplicationError: A live application for the course exists
        CapExceededError: Too many live applications at the institution
        ConcurrentModificationError: Another write for the student is in progress
    """
    course = await catalog_repository.get_course(db, data.course_id)
    if course is None or course.status != ListingStatus.ACTIVE:
        raise CourseNotFoundError(data.course_id)

    course_name = course.name
    institution_id = course.institution_id
    institution_name = course.institution.name

    student = await students_repository.get_by_id(db, student_id)
    if student is None:
        # Applications reference the profile row
        student = await students_repository.create(db, student_id, email)
        logger.info(f"Created student profile {student_id} on first application")

    report = evaluate(
        requirement_set_from_columns(course.required_subjects, course.min_gpa),
        student.grades,
    )
    if not report.eligible:
        logger.warning(f"Student {student_id} not eligible for course {course.id}")
        raise NotEligibleError(report.reasons())

    limit = settings.max_applications_per_institution

    try:
        async with hold_lock(
            redis,
            student_lock_key(student_id),
            ttl_seconds=settings.selection_lock_ttl_seconds,
            max_attempts=settings.selection_lock_max_attempts,
            retry_delay_seconds=settings.selection_lock_retry_delay_seconds,
        ):
            if await repository.get_live_for_course(db, student_id, course.id):
                logger.warning(
                    f"Duplicate application: student={student_id}, course={course.id}"
                )
                raise DuplicateApplicationError(course.id)

            live_count = await repository.count_applications(
                db, student_id, institution_id, exclude_statuses=CLOSED_STATUSES
            )
            if live_count >= limit:
                logger.warning(
                    f"Application cap reached: student={student_id}, "
                    f"institution={institution_id}, live={live_count}"
                )
                raise CapExceededError(limit)

            try:
                application = await repository.create(
                    db,
                    student_id=student_id,
                    course=course,
                    qualifications=data.qualifications,
                    previous_school=data.previous_school,
                    notes=data.notes,
                )
            except IntegrityError as e:
                # The live-application unique index caught a concurrent insert
                await db.rollback()
                raise DuplicateApplicationError(data.course_id) from e
    except LockNotAcquiredError as e:
        logger.warning(f"Student lock busy while applying: {student_id}")
        raise ConcurrentModificationError() from e

    logger.info(f"Created application {application.id} for student {student_id}")
    response = to_response(application, course_name, institution_name)

    notice = await notifications.for_institution(
        db,
        institution_id,
        f"New application received for {course_name}.",
        NotificationType.APPLICATION,
    )
    await notifications.deliver(db, [notice])

    return response


async def list_my_applications(db: AsyncSession, student_id: str) -> list[ApplicationResponse]:
    """
    All of the student's applications, newest first.

    Raises:
        DataIntegrityViolationError: More than one accepted application found
    """
    applications = await repository.list_by_student(db, student_id)
    check_single_acceptance(student_id, applications)
    return [to_listing_response(a) for a in applications]


async def get_pending_selection(db: AsyncSession, student_id: str) -> list[ApplicationResponse]:
    """Admitted offers the student has not answered yet, oldest first."""
    offers = await repository.list_by_student_and_status(
        db, student_id, ApplicationStatus.ADMITTED
    )
    return [to_listing_response(a) for a in offers]


async def list_institution_applications(
    db: AsyncSession,
    institution_id: UUID,
    status: ApplicationStatus | None = None,
    course_id: UUID | None = None,
    skip: int = 0,
    limit: int = 50,
) -> tuple[list[ApplicationResponse], int]:
    applications, total = await repository.list_for_institution(
        db, institution_id, status=status, course_id=course_id, skip=skip, limit=limit
    )
    return [to_listing_response(a) for a in applications], total


async def decide(
    db: AsyncSession,
    institution_id: UUID,
    application_id: UUID,
    decision: ApplicationStatus,
) -> ApplicationResponse:
    """
    Admit, reject or waitlist an application received by the institution.

    Raises:
        ApplicationNotFoundError: Unknown application or owned by another institution
        InvalidDecisionError: Not a decision, or not allowed from the current status
    """
    application = await repository.get_with_listing(db, application_id)
    if application is None or application.institution_id != institution_id:
        raise ApplicationNotFoundError(application_id)

    current = application.status
    if decision not in DECISIONS:
        raise InvalidDecisionError(current.value, decision.value)

    course_name = application.course.name
    institution_name = application.institution.name
    student_id = application.student_id

    extra = {}
    if decision == ApplicationStatus.ADMITTED:
        extra["admission_source"] = AdmissionSource.DIRECT

    try:
        application = await repository.transition_status(db, application_id, decision, **extra)
    except repository.InvalidStatusTransitionError as e:
        await db.rollback()
        logger.warning(f"Rejected decision on application {application_id}: {e}")
        raise InvalidDecisionError(current.value, decision.value) from e

    logger.info(
        f"Institution {institution_id} set application {application_id}: "
        f"{current.value} -> {decision.value}"
    )
    response = to_response(application, course_name, institution_name)

    await notifications.notify_student(
        db,
        student_id,
        DECISION_MESSAGES[decision].format(course=course_name),
        NotificationType.ADMISSION,
        subject=f"Update on your application to {course_name}",
    )
    return response


async def promote_course_waitlist(
    db: AsyncSession, institution_id: UUID, course_id: UUID
) -> waitlist.PromotionResult:
    """Run waitlist promotion for one of the institution's courses."""
    course = await catalog_repository.get_course(db, course_id)
    if course is None or course.institution_id != institution_id:
        raise CourseNotFoundError(course_id)

    return await waitlist.promote(db, course_id)
