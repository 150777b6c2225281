"""
Admissions Background Jobs

Scheduled waitlist sweep: runs promotion for every capacity-bound course
that still has waitlisted applicants. This catches seats whose inline
promotion failed after a selection or decline, and seats freed by edits made
outside the API.

The job is idempotent; each promotion recomputes seats from current rows.
"""

import logging
from typing import Any

from apscheduler.triggers.interval import IntervalTrigger

from career_platform.core.config import settings
from career_platform.core.database import async_session_maker
from career_platform.core.scheduler import register_job
from career_platform.modules.admissions import waitlist

logger = logging.getLogger(__name__)

JOB_ID_WAITLIST_SWEEP = "admissions_waitlist_sweep"


async def sweep_waitlists() -> dict[str, Any]:
    """Promote waitlisted applicants wherever seats are free."""
    logger.info("Starting waitlist sweep")

    async with async_session_maker() as db:
        summary = await waitlist.sweep(db)

    logger.info(
        f"Waitlist sweep finished: {summary['courses']} course(s), "
        f"{summary['promoted']} promoted, {summary['failed']} failed"
    )
    return summary


def register_admissions_jobs() -> None:
    """Register admissions jobs with the scheduler."""
    register_job(
        JOB_ID_WAITLIST_SWEEP,
        sweep_waitlists,
        IntervalTrigger(minutes=settings.waitlist_sweep_interval_minutes),
    )
    logger.info("Registered admissions background jobs")
