"""
Admissions Repository

Database operations for the application ledger. Functions here validate
single-record status changes only; cross-record rules (caps, one accepted
offer per student) live in the service layer.

Functions that take `commit=False` only flush, so callers can group several
writes in one transaction.
"""

from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from career_platform.modules.catalog.models import Course

from .models import (
    CLOSED_STATUSES,
    STATUS_TIMESTAMP_FIELDS,
    AdmissionSource,
    Application,
    ApplicationStatus,
)

# Valid status transitions for a single application
VALID_STATUS_TRANSITIONS: dict[ApplicationStatus, set[ApplicationStatus]] = {
    ApplicationStatus.PENDING: {
        ApplicationStatus.ADMITTED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.WAITLISTED,
        ApplicationStatus.DECLINED,  # Superseded or withdrawn by the student
    },
    ApplicationStatus.WAITLISTED: {
        ApplicationStatus.ADMITTED,  # Institution decision or waitlist promotion
        ApplicationStatus.REJECTED,
        ApplicationStatus.DECLINED,
    },
    ApplicationStatus.ADMITTED: {
        ApplicationStatus.ACCEPTED,
        ApplicationStatus.DECLINED,
    },
    ApplicationStatus.ACCEPTED: {
        ApplicationStatus.DECLINED,
    },
    # Terminal states
    ApplicationStatus.DECLINED: set(),
    ApplicationStatus.REJECTED: set(),
}


class InvalidStatusTransitionError(ValueError):
    """Raised when an invalid status transition is attempted."""

    def __init__(
        self,
        current_status: ApplicationStatus,
        new_status: ApplicationStatus,
    ):
        self.current_status = current_status
        self.new_status = new_status
        valid_transitions = VALID_STATUS_TRANSITIONS.get(current_status, set())
        super().__init__(
            f"Invalid status transition: {current_status.value} -> {new_status.value}. "
            f"Valid transitions: {sorted(s.value for s in valid_transitions)}"
        )


def can_transition(current: ApplicationStatus, new: ApplicationStatus) -> bool:
    return new in VALID_STATUS_TRANSITIONS.get(current, set())


def apply_transition(
    application: Application,
    new_status: ApplicationStatus,
    at: datetime | None = None,
    **fields,
) -> Application:
    """
    Move an in-session application to a new status and stamp its timestamp.

    Raises InvalidStatusTransitionError for transitions outside the state
    machine. Does not flush or commit.
    """
    current = application.status
    if not can_transition(current, new_status):
        raise InvalidStatusTransitionError(current, new_status)

    application.status = new_status
    timestamp_field = STATUS_TIMESTAMP_FIELDS.get(new_status)
    if timestamp_field:
        setattr(application, timestamp_field, at or datetime.now(UTC))

    for key, value in fields.items():
        if hasattr(application, key):
            setattr(application, key, value)

    return application


async def create(
    db: AsyncSession,
    *,
    student_id: str,
    course: Course,
    qualifications: dict | None = None,
    previous_school: str | None = None,
    notes: str | None = None,
    commit: bool = True,
) -> Application:
    """Create a new pending application for a course."""

    new_application = Application(
        student_id=student_id,
        course_id=course.id,
        institution_id=course.institution_id,
        status=ApplicationStatus.PENDING,
        qualifications=qualifications,
        previous_school=previous_school,
        notes=notes,
        applied_at=datetime.now(UTC),
    )

    db.add(new_application)
    if commit:
        await db.commit()
        await db.refresh(new_application)
    else:
        await db.flush()

    return new_application


async def get_by_id(db: AsyncSession, id: UUID) -> Application | None:
    """Get application by ID."""
    return await db.get(Application, id)


async def get_with_listing(db: AsyncSession, id: UUID) -> Application | None:
    """Get application by ID with its course and institution loaded."""
    result = await db.execute(
        select(Application)
        .options(selectinload(Application.course), selectinload(Application.institution))
        .where(Application.id == id)
    )
    return result.scalar_one_or_none()


async def count_applications(
    db: AsyncSession,
    student_id: str,
    institution_id: UUID,
    exclude_statuses: frozenset[ApplicationStatus] | set[ApplicationStatus] = frozenset(),
) -> int:
    """Count a student's applications at one institution, ignoring `exclude_statuses`."""
    query = select(func.count(Application.id)).where(
        Application.student_id == student_id,
        Application.institution_id == institution_id,
    )
    if exclude_statuses:
        query = query.where(Application.status.not_in(list(exclude_statuses)))

    result = await db.execute(query)
    return result.scalar_one()


async def get_live_for_course(
    db: AsyncSession, student_id: str, course_id: UUID
) -> Application | None:
    """Get the student's live (not declined/rejected) application for a course."""
    result = await db.execute(
        select(Application).where(
            Application.student_id == student_id,
            Application.course_id == course_id,
            Application.status.not_in(list(CLOSED_STATUSES)),
        )
    )
    return result.scalars().first()


async def list_by_student(db: AsyncSession, student_id: str) -> list[Application]:
    """All of a student's applications, newest first, with course and institution loaded."""
    result = await db.execute(
        select(Application)
        .options(selectinload(Application.course), selectinload(Application.institution))
        .where(Application.student_id == student_id)
        .order_by(Application.applied_at.desc(), Application.id)
    )
    return list(result.scalars().all())


async def list_by_student_and_status(
    db: AsyncSession, student_id: str, status: ApplicationStatus
) -> list[Application]:
    """A student's applications in one status, oldest first, with listings loaded."""
    result = await db.execute(
        select(Application)
        .options(selectinload(Application.course), selectinload(Application.institution))
        .where(Application.student_id == student_id, Application.status == status)
        .order_by(Application.applied_at.asc(), Application.id)
    )
    return list(result.scalars().all())


async def lock_student_applications(db: AsyncSession, student_id: str) -> list[Application]:
    """
    Lock and reload every application of a student (SELECT ... FOR UPDATE).

    Rows already in the session are refreshed so callers see committed state.
    """
    result = await db.execute(
        select(Application)
        .where(Application.student_id == student_id)
        .order_by(Application.applied_at.asc(), Application.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def count_by_status_for_student(
    db: AsyncSession, student_id: str
) -> dict[ApplicationStatus, int]:
    """Count a student's applications grouped by status."""
    result = await db.execute(
        select(Application.status, func.count(Application.id))
        .where(Application.student_id == student_id)
        .group_by(Application.status)
    )
    return {status: count for status, count in result.all()}


async def list_for_institution(
    db: AsyncSession,
    institution_id: UUID,
    status: ApplicationStatus | None = None,
    course_id: UUID | None = None,
    skip: int = 0,
    limit: int = 50,
) -> tuple[list[Application], int]:
    """Applications received by an institution, oldest first, with total count."""
    conditions = [Application.institution_id == institution_id]
    if status is not None:
        conditions.append(Application.status == status)
    if course_id is not None:
        conditions.append(Application.course_id == course_id)

    count_result = await db.execute(select(func.count(Application.id)).where(*conditions))
    total = count_result.scalar_one()

    result = await db.execute(
        select(Application)
        .options(selectinload(Application.course), selectinload(Application.institution))
        .where(*conditions)
        .order_by(Application.applied_at.asc(), Application.id)
        .offset(skip)
        .limit(limit)
    )
    return list(result.scalars().all()), total


async def transition_status(
    db: AsyncSession,
    id: UUID,
    status: ApplicationStatus,
    *,
    at: datetime | None = None,
    commit: bool = True,
    **kwargs,
) -> Application:
    """
    Update one application's status, stamping the matching timestamp column.

    Validates the transition against VALID_STATUS_TRANSITIONS. With
    commit=False the change is only flushed so it joins the caller's
    transaction.

    Raises:
        ValueError: If application not found
        InvalidStatusTransitionError: If status transition is not allowed
    """
    application = await get_by_id(db, id)
    if not application:
        raise ValueError(f"Application {id} not found")

    apply_transition(application, status, at, **kwargs)

    if commit:
        await db.commit()
        await db.refresh(application)
    else:
        await db.flush()

    return application


# ============================================
# Waitlist queries
# ============================================


async def lock_course(db: AsyncSession, course_id: UUID) -> Course | None:
    """Lock a course row for the rest of the transaction."""
    result = await db.execute(
        select(Course)
        .where(Course.id == course_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def count_occupied_seats(
    db: AsyncSession, course_id: UUID, include_outstanding_offers: bool = False
) -> int:
    """Accepted applications, plus admitted offers awaiting an answer when requested."""
    statuses = [ApplicationStatus.ACCEPTED]
    if include_outstanding_offers:
        statuses.append(ApplicationStatus.ADMITTED)

    result = await db.execute(
        select(func.count(Application.id)).where(
            Application.course_id == course_id,
            Application.status.in_(statuses),
        )
    )
    return result.scalar_one()


async def list_waitlisted(db: AsyncSession, course_id: UUID, limit: int) -> list[Application]:
    """The first `limit` waitlisted applications of a course, earliest applied first."""
    result = await db.execute(
        select(Application)
        .where(
            Application.course_id == course_id,
            Application.status == ApplicationStatus.WAITLISTED,
        )
        .order_by(Application.applied_at.asc(), Application.id)
        .limit(limit)
        .with_for_update()
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def get_courses_with_waitlist(db: AsyncSession) -> list[UUID]:
    """Ids of capacity-bound courses that have at least one waitlisted application."""
    result = await db.execute(
        select(Application.course_id)
        .join(Course, Course.id == Application.course_id)
        .where(
            Application.status == ApplicationStatus.WAITLISTED,
            Course.capacity.is_not(None),
        )
        .distinct()
    )
    return list(result.scalars().all())


def mark_promoted(application: Application, at: datetime) -> Application:
    """Admit a waitlisted application as a waitlist promotion."""
    return apply_transition(
        application,
        ApplicationStatus.ADMITTED,
        at,
        admission_source=AdmissionSource.WAITLIST_PROMOTION,
    )
