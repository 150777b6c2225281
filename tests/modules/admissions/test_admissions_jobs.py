"""
Unit tests for admissions background jobs.
"""

from unittest.mock import AsyncMock, patch

import pytest

from career_platform.core import scheduler
from career_platform.modules.admissions.jobs import (
    JOB_ID_WAITLIST_SWEEP,
    register_admissions_jobs,
    sweep_waitlists,
)

JOBS = "career_platform.modules.admissions.jobs"


@pytest.fixture
def clean_registry():
    saved = dict(scheduler._job_registry)
    scheduler._job_registry.clear()
    yield scheduler._job_registry
    scheduler._job_registry.clear()
    scheduler._job_registry.update(saved)


@pytest.mark.asyncio
async def test_sweep_runs_in_its_own_session():
    summary = {"courses": 2, "promoted": 1, "failed": 0}
    with (
        patch(f"{JOBS}.async_session_maker") as mock_session_maker,
        patch(f"{JOBS}.waitlist.sweep", AsyncMock(return_value=summary)) as mock_sweep,
    ):
        result = await sweep_waitlists()

    assert result == summary
    mock_session_maker.assert_called_once()
    mock_sweep.assert_called_once()


def test_register_adds_sweep_to_registry(clean_registry):
    register_admissions_jobs()
    assert JOB_ID_WAITLIST_SWEEP in clean_registry


@pytest.mark.asyncio
async def test_manual_trigger_reports_result(clean_registry):
    summary = {"courses": 0, "promoted": 0, "failed": 0}
    with patch(f"{JOBS}.waitlist.sweep", AsyncMock(return_value=summary)):
        with patch(f"{JOBS}.async_session_maker"):
            register_admissions_jobs()
            outcome = await scheduler.trigger_job_manually(JOB_ID_WAITLIST_SWEEP)

    assert outcome["status"] == "success"
    assert outcome["result"] == summary


@pytest.mark.asyncio
async def test_manual_trigger_of_unknown_job_raises(clean_registry):
    with pytest.raises(ValueError):
        await scheduler.trigger_job_manually("missing")
