"""
Waitlist Promotion

Fills freed seats on capacity-bound courses from the waitlist, earliest
application first.

A promotion run is one transaction: the course row is locked
(SELECT ... FOR UPDATE) so concurrent runs for the same course queue up, the
seat count is recomputed from current rows, and the selected waitlisted
applications are admitted together. A failed run leaves nothing behind and is
safe to retry.

Occupied seats are the accepted applications. Outstanding admitted offers
count too when WAITLIST_COUNT_OUTSTANDING_OFFERS is on, and always for the
scheduled sweep, so repeated sweeps never admit past capacity while earlier
offers are still unanswered.
"""

import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from career_platform.core.config import settings
from career_platform.modules.admissions import repository
from career_platform.modules.admissions.errors import (
    CourseNotFoundError,
    PromotionIncompleteError,
)
from career_platform.modules.admissions.models import Application
from career_platform.modules.notifications import service as notifications
from career_platform.modules.notifications.models import NotificationType

logger = logging.getLogger(__name__)


@dataclass
class PromotionResult:
    """Outcome of one promotion run for a course."""

    course_id: UUID
    capacity: int | None = None
    occupied: int = 0
    promoted: list[Application] = field(default_factory=list)

    @property
    def available(self) -> int:
        if self.capacity is None:
            return 0
        return max(self.capacity - self.occupied, 0)


async def _promote_once(
    db: AsyncSession, course_id: UUID, include_outstanding_offers: bool
) -> tuple[PromotionResult, str]:
    course = await repository.lock_course(db, course_id)
    if course is None:
        await db.rollback()
        raise CourseNotFoundError(course_id)

    course_name = course.name
    result = PromotionResult(course_id=course_id, capacity=course.capacity)
    if result.capacity is None:
        await db.commit()
        return result, course_name

    result.occupied = await repository.count_occupied_seats(
        db, course_id, include_outstanding_offers=include_outstanding_offers
    )
    available = result.capacity - result.occupied
    if available <= 0:
        await db.commit()
        return result, course_name

    now = datetime.now(UTC)
    waitlisted = await repository.list_waitlisted(db, course_id, limit=available)
    for application in waitlisted:
        repository.mark_promoted(application, now)

    await db.commit()
    result.promoted = waitlisted
    return result, course_name


async def promote(
    db: AsyncSession,
    course_id: UUID,
    *,
    notify: bool = True,
    include_outstanding_offers: bool | None = None,
) -> PromotionResult:
    """
    Admit waitlisted applicants into any free seats on a course.

    Admits min(capacity - accepted, waitlisted count) applications in
    applied_at order. A course without a capacity is never promoted.
    `include_outstanding_offers` defaults to the
    WAITLIST_COUNT_OUTSTANDING_OFFERS setting.

    Raises:
        CourseNotFoundError: If the course does not exist
        PromotionIncompleteError: If the transaction kept failing
    """
    max_attempts = settings.promotion_max_attempts
    if include_outstanding_offers is None:
        include_outstanding_offers = settings.waitlist_count_outstanding_offers

    for attempt in range(1, max_attempts + 1):
        try:
            result, course_name = await _promote_once(
                db, course_id, include_outstanding_offers
            )
            break
        except (OperationalError, IntegrityError) as e:
            await db.rollback()
            logger.warning(
                f"Promotion for course {course_id} failed (attempt {attempt}/{max_attempts}): {e}"
            )
    else:
        logger.error(f"Promotion for course {course_id} gave up after {max_attempts} attempts")
        raise PromotionIncompleteError(course_id)

    if not result.promoted:
        logger.info(
            f"No promotion for course {course_id}: capacity={result.capacity}, "
            f"occupied={result.occupied}"
        )
        return result

    logger.info(
        f"Promoted {len(result.promoted)} waitlisted application(s) on course {course_id}: "
        f"{[str(a.id) for a in result.promoted]}"
    )

    if notify:
        outgoing = [
            await notifications.for_student(
                db,
                application.student_id,
                f"Good news! A seat opened up on {course_name} and you have been admitted "
                "from the waitlist. Choose your offer from your dashboard.",
                NotificationType.WAITLIST,
                subject="You have been admitted from the waitlist",
            )
            for application in result.promoted
        ]
        await notifications.deliver(db, outgoing)

    return result


async def promote_freed_courses(db: AsyncSession, course_ids: list[UUID]) -> list[PromotionResult]:
    """
    Run promotion for each course that just lost a seat holder.

    Failures are logged and skipped; the scheduled sweep retries them.
    """
    results: list[PromotionResult] = []
    for course_id in dict.fromkeys(course_ids):
        try:
            results.append(await promote(db, course_id))
        except (PromotionIncompleteError, CourseNotFoundError) as e:
            logger.error(f"Deferred promotion for course {course_id} to the sweep: {e.message}")
    return results


async def sweep(db: AsyncSession) -> dict[str, int]:
    """
    Run promotion for every capacity-bound course with a waitlist.

    Outstanding admitted offers count as occupied here, since the sweep runs
    on a schedule and would otherwise re-admit into seats already offered.
    """
    course_ids = await repository.get_courses_with_waitlist(db)
    promoted = 0
    failed = 0

    for course_id in course_ids:
        try:
            result = await promote(db, course_id, include_outstanding_offers=True)
            promoted += len(result.promoted)
        except (PromotionIncompleteError, CourseNotFoundError) as e:
            failed += 1
            logger.error(f"Waitlist sweep could not promote course {course_id}: {e.message}")

    return {"courses": len(course_ids), "promoted": promoted, "failed": failed}
