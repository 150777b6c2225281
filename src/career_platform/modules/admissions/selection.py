"""
Offer Selection

A student holding admitted offers accepts exactly one of them. Accepting
declines every other live application of the student (any institution),
then frees seats for waitlist promotion.

Consistency:
- A per-student Redis lock serializes selections from several sessions.
- Inside the lock, every application of the student is re-read with
  SELECT ... FOR UPDATE and all transitions commit in one transaction.
- Declines are flushed before the acceptance so the one-accepted-per-student
  unique index never sees two accepted rows, even when switching offers.
- Transaction failures are retried from a fresh read a bounded number of
  times, then surface as SelectionIncompleteError with nothing persisted.

Promotion and notifications run after the commit in a separate session.
Their failures are logged and never undo the selection.
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID

from redis.asyncio import Redis
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from career_platform.core.config import settings
from career_platform.core.database import async_session_maker
from career_platform.core.locks import LockNotAcquiredError, hold_lock, student_lock_key
from career_platform.modules.admissions import repository, waitlist
from career_platform.modules.admissions.errors import (
    AdmissionsError,
    ApplicationNotFoundError,
    ConcurrentModificationError,
    DataIntegrityViolationError,
    ForbiddenError,
    InvalidSelectionError,
    SelectionIncompleteError,
)
from career_platform.modules.admissions.models import (
    CLOSED_STATUSES,
    SEAT_HOLDING_STATUSES,
    Application,
    ApplicationStatus,
    DeclineReason,
)
from career_platform.modules.notifications import service as notifications
from career_platform.modules.notifications.models import NotificationType

logger = logging.getLogger(__name__)


@dataclass
class SelectionOutcome:
    """Result of accepting or declining an offer."""

    application: Application
    declined: list[Application] = field(default_factory=list)
    freed_course_ids: list[UUID] = field(default_factory=list)
    promotions: list[waitlist.PromotionResult] = field(default_factory=list)
    already_applied: bool = False


def check_single_acceptance(student_id: str, applications: list[Application]) -> None:
    """
    Raise if a student has more than one accepted application.

    Two accepted rows can only come from a bug or manual data edits. The state
    is reported, never repaired automatically.
    """
    accepted = [a for a in applications if a.status == ApplicationStatus.ACCEPTED]
    if len(accepted) > 1:
        logger.critical(
            f"DATA INTEGRITY: student {student_id} has {len(accepted)} accepted applications: "
            f"{[str(a.id) for a in accepted]}"
        )
        raise DataIntegrityViolationError(student_id, len(accepted))


async def _run_locked(db: AsyncSession, redis: Redis | None, student_id: str, operation, *args):
    """Run `operation` under the student lock, retrying transient transaction failures."""
    max_attempts = settings.selection_max_attempts

    try:
        async with hold_lock(
            redis,
            student_lock_key(student_id),
            ttl_seconds=settings.selection_lock_ttl_seconds,
            max_attempts=settings.selection_lock_max_attempts,
            retry_delay_seconds=settings.selection_lock_retry_delay_seconds,
        ):
            for attempt in range(1, max_attempts + 1):
                try:
                    return await operation(db, student_id, *args)
                except (OperationalError, IntegrityError) as e:
                    await db.rollback()
                    logger.warning(
                        f"{operation.__name__} for student {student_id} failed "
                        f"(attempt {attempt}/{max_attempts}): {e}"
                    )
                except AdmissionsError:
                    await db.rollback()
                    raise
                except repository.InvalidStatusTransitionError as e:
                    await db.rollback()
                    raise InvalidSelectionError(str(e)) from e
    except LockNotAcquiredError as e:
        logger.warning(f"Selection lock busy for student {student_id}: {e}")
        raise ConcurrentModificationError() from e

    logger.error(
        f"{operation.__name__} for student {student_id} gave up after {max_attempts} attempts"
    )
    raise SelectionIncompleteError(args[0])


async def _raise_not_owned(db: AsyncSession, student_id: str, application_id: UUID) -> None:
    """Raise for an application missing from the student's locked set."""
    if await repository.get_by_id(db, application_id) is None:
        raise ApplicationNotFoundError(application_id)
    logger.warning(f"Student {student_id} tried to act on application {application_id}")
    raise ForbiddenError()


async def _accept_once(
    db: AsyncSession, student_id: str, application_id: UUID
) -> SelectionOutcome:
    applications = await repository.lock_student_applications(db, student_id)
    check_single_acceptance(student_id, applications)

    chosen = next((a for a in applications if a.id == application_id), None)
    if chosen is None:
        await _raise_not_owned(db, student_id, application_id)

    if chosen.status == ApplicationStatus.ACCEPTED:
        superseded = [
            a
            for a in applications
            if a.decline_reason == DeclineReason.SUPERSEDED_BY_ACCEPTANCE
        ]
        # Read-only: commit releases the row locks and keeps the rows loaded
        await db.commit()
        return SelectionOutcome(application=chosen, declined=superseded, already_applied=True)

    if chosen.status != ApplicationStatus.ADMITTED:
        raise InvalidSelectionError(
            f"Only admitted offers can be accepted; this application is {chosen.status.value}."
        )

    now = datetime.now(UTC)
    declined: list[Application] = []
    freed: list[UUID] = []

    for application in applications:
        if application.id == chosen.id or application.status in CLOSED_STATUSES:
            continue
        if application.status in SEAT_HOLDING_STATUSES:
            freed.append(application.course_id)
        repository.apply_transition(
            application,
            ApplicationStatus.DECLINED,
            now,
            decline_reason=DeclineReason.SUPERSEDED_BY_ACCEPTANCE,
        )
        declined.append(application)

    await db.flush()
    repository.apply_transition(chosen, ApplicationStatus.ACCEPTED, now)
    await db.commit()

    return SelectionOutcome(application=chosen, declined=declined, freed_course_ids=freed)


async def _decline_once(
    db: AsyncSession, student_id: str, application_id: UUID
) -> SelectionOutcome:
    applications = await repository.lock_student_applications(db, student_id)

    chosen = next((a for a in applications if a.id == application_id), None)
    if chosen is None:
        await _raise_not_owned(db, student_id, application_id)

    if (
        chosen.status == ApplicationStatus.DECLINED
        and chosen.decline_reason == DeclineReason.STUDENT_DECLINED
    ):
        await db.commit()
        return SelectionOutcome(application=chosen, already_applied=True)

    declinable = {
        ApplicationStatus.PENDING,
        ApplicationStatus.WAITLISTED,
        ApplicationStatus.ADMITTED,
    }
    if chosen.status not in declinable:
        raise InvalidSelectionError(
            f"This application is {chosen.status.value} and can no longer be declined."
        )

    freed = [chosen.course_id] if chosen.status in SEAT_HOLDING_STATUSES else []
    repository.apply_transition(
        chosen,
        ApplicationStatus.DECLINED,
        datetime.now(UTC),
        decline_reason=DeclineReason.STUDENT_DECLINED,
    )
    await db.commit()

    return SelectionOutcome(application=chosen, declined=[chosen], freed_course_ids=freed)


async def _notify_acceptance(db: AsyncSession, outcome: SelectionOutcome) -> None:
    chosen = outcome.application
    outgoing = [
        await notifications.for_student(
            db,
            chosen.student_id,
            "You have accepted your admission offer. "
            f"{len(outcome.declined)} other application(s) were withdrawn.",
            NotificationType.ADMISSION,
            subject="Admission offer accepted",
        ),
        await notifications.for_institution(
            db,
            chosen.institution_id,
            f"Student {chosen.student_id} accepted your admission offer "
            f"(application {chosen.id}).",
            NotificationType.ADMISSION,
        ),
    ]

    # One notice per other institution affected by the withdrawals
    withdrawn_by_institution: dict[UUID, int] = {}
    for application in outcome.declined:
        if application.institution_id == chosen.institution_id:
            continue
        withdrawn_by_institution[application.institution_id] = (
            withdrawn_by_institution.get(application.institution_id, 0) + 1
        )
    for institution_id, count in withdrawn_by_institution.items():
        outgoing.append(
            await notifications.for_institution(
                db,
                institution_id,
                f"Student {chosen.student_id} accepted an offer elsewhere; "
                f"{count} application(s) to your institution were withdrawn.",
                NotificationType.ADMISSION,
            )
        )

    await notifications.deliver(db, outgoing)


async def select_offer(
    db: AsyncSession,
    redis: Redis | None,
    student_id: str,
    application_id: UUID,
) -> SelectionOutcome:
    """
    Accept one admitted offer and decline every other live application.

    Re-selecting an already accepted application returns the earlier outcome
    without writing anything.

    Raises:
        ApplicationNotFoundError: Unknown application
        ForbiddenError: The application belongs to another student
        InvalidSelectionError: The application is not an admitted offer
        ConcurrentModificationError: Another selection holds the student lock
        SelectionIncompleteError: The transaction kept failing
        DataIntegrityViolationError: The student already has two accepted rows
    """
    logger.info(f"Student {student_id} selecting application {application_id}")

    outcome = await _run_locked(db, redis, student_id, _accept_once, application_id)

    if outcome.already_applied:
        logger.info(f"Application {application_id} already accepted; nothing to do")
        return outcome

    logger.info(
        f"Application {application_id} accepted for student {student_id}; "
        f"declined {len(outcome.declined)} other application(s)"
    )

    async with async_session_maker() as side_db:
        outcome.promotions = await waitlist.promote_freed_courses(
            side_db, outcome.freed_course_ids
        )
        await _notify_acceptance(side_db, outcome)
    return outcome


async def decline_offer(
    db: AsyncSession,
    redis: Redis | None,
    student_id: str,
    application_id: UUID,
) -> SelectionOutcome:
    """
    Withdraw one pending, waitlisted or admitted application.

    Declining an admitted offer frees its seat for waitlist promotion.
    Declining twice is a no-op.
    """
    logger.info(f"Student {student_id} declining application {application_id}")

    outcome = await _run_locked(db, redis, student_id, _decline_once, application_id)

    if outcome.already_applied:
        return outcome

    chosen = outcome.application
    logger.info(f"Application {application_id} declined by student {student_id}")

    async with async_session_maker() as side_db:
        outcome.promotions = await waitlist.promote_freed_courses(
            side_db, outcome.freed_course_ids
        )
        notice = await notifications.for_institution(
            side_db,
            chosen.institution_id,
            f"Student {chosen.student_id} withdrew application {chosen.id}.",
            NotificationType.APPLICATION,
        )
        await notifications.deliver(side_db, [notice])
    return outcome
