"""
Unit tests for the admissions repository layer.

These tests focus on the application state machine, in-session transitions and
the filters and ordering of the counting and queue queries.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.dialects import postgresql

from career_platform.modules.admissions.models import (
    AdmissionSource,
    ApplicationStatus,
    DeclineReason,
)
from career_platform.modules.admissions.repository import (
    VALID_STATUS_TRANSITIONS,
    InvalidStatusTransitionError,
    apply_transition,
    can_transition,
    count_applications,
    count_occupied_seats,
    get_live_for_course,
    list_waitlisted,
    mark_promoted,
    transition_status,
)


class TestStatusTransitions:
    """Tests for the application state machine."""

    def test_valid_transitions_from_pending(self):
        valid = VALID_STATUS_TRANSITIONS[ApplicationStatus.PENDING]
        assert ApplicationStatus.ADMITTED in valid
        assert ApplicationStatus.REJECTED in valid
        assert ApplicationStatus.WAITLISTED in valid
        assert ApplicationStatus.DECLINED in valid
        # Students can only accept admitted offers
        assert ApplicationStatus.ACCEPTED not in valid

    def test_valid_transitions_from_waitlisted(self):
        valid = VALID_STATUS_TRANSITIONS[ApplicationStatus.WAITLISTED]
        assert ApplicationStatus.ADMITTED in valid
        assert ApplicationStatus.REJECTED in valid
        assert ApplicationStatus.DECLINED in valid
        assert ApplicationStatus.ACCEPTED not in valid

    def test_valid_transitions_from_admitted(self):
        valid = VALID_STATUS_TRANSITIONS[ApplicationStatus.ADMITTED]
        assert valid == {ApplicationStatus.ACCEPTED, ApplicationStatus.DECLINED}

    def test_accepted_can_only_be_superseded(self):
        assert VALID_STATUS_TRANSITIONS[ApplicationStatus.ACCEPTED] == {
            ApplicationStatus.DECLINED
        }

    def test_terminal_states_have_no_transitions(self):
        assert VALID_STATUS_TRANSITIONS[ApplicationStatus.DECLINED] == set()
        assert VALID_STATUS_TRANSITIONS[ApplicationStatus.REJECTED] == set()

    def test_all_statuses_are_in_transition_map(self):
        for status in ApplicationStatus:
            assert status in VALID_STATUS_TRANSITIONS

    def test_can_transition(self):
        assert can_transition(ApplicationStatus.ADMITTED, ApplicationStatus.ACCEPTED)
        assert not can_transition(ApplicationStatus.REJECTED, ApplicationStatus.ADMITTED)


class TestInvalidStatusTransitionError:
    def test_error_message_contains_both_statuses_and_valid_ones(self):
        error = InvalidStatusTransitionError(
            ApplicationStatus.PENDING, ApplicationStatus.ACCEPTED
        )
        message = str(error)
        assert "pending -> accepted" in message
        assert "Valid transitions" in message
        assert error.current_status == ApplicationStatus.PENDING
        assert error.new_status == ApplicationStatus.ACCEPTED


class TestApplyTransition:
    """In-session status changes."""

    def test_stamps_status_timestamp(self, make_application):
        application = make_application(ApplicationStatus.ADMITTED)
        at = datetime(2026, 1, 1, tzinfo=UTC)

        apply_transition(application, ApplicationStatus.ACCEPTED, at)

        assert application.status == ApplicationStatus.ACCEPTED
        assert application.accepted_at == at

    def test_sets_extra_fields(self, make_application):
        application = make_application(ApplicationStatus.PENDING)

        apply_transition(
            application,
            ApplicationStatus.DECLINED,
            decline_reason=DeclineReason.SUPERSEDED_BY_ACCEPTANCE,
        )

        assert application.decline_reason == DeclineReason.SUPERSEDED_BY_ACCEPTANCE
        assert application.declined_at is not None

    def test_invalid_transition_leaves_application_untouched(self, make_application):
        application = make_application(ApplicationStatus.REJECTED)

        with pytest.raises(InvalidStatusTransitionError):
            apply_transition(application, ApplicationStatus.ADMITTED)

        assert application.status == ApplicationStatus.REJECTED
        assert application.admitted_at is None

    def test_mark_promoted_records_source(self, make_application):
        application = make_application(ApplicationStatus.WAITLISTED)

        mark_promoted(application, datetime.now(UTC))

        assert application.status == ApplicationStatus.ADMITTED
        assert application.admission_source == AdmissionSource.WAITLIST_PROMOTION


class TestTransitionStatus:
    @pytest.mark.asyncio
    async def test_commits_by_default(self, mock_db, make_application):
        application = make_application(ApplicationStatus.PENDING)
        mock_db.get = AsyncMock(return_value=application)

        await transition_status(mock_db, application.id, ApplicationStatus.WAITLISTED)

        assert application.waitlisted_at is not None
        mock_db.commit.assert_called_once()
        mock_db.flush.assert_not_called()

    @pytest.mark.asyncio
    async def test_flushes_without_commit(self, mock_db, make_application):
        application = make_application(ApplicationStatus.PENDING)
        mock_db.get = AsyncMock(return_value=application)

        await transition_status(
            mock_db, application.id, ApplicationStatus.REJECTED, commit=False
        )

        mock_db.flush.assert_called_once()
        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_missing_application_raises(self, mock_db):
        mock_db.get = AsyncMock(return_value=None)

        with pytest.raises(ValueError):
            await transition_status(mock_db, "missing", ApplicationStatus.ADMITTED)


def _executed_sql(mock_db) -> str:
    """Render the last executed statement as PostgreSQL with inlined values."""
    statement = mock_db.execute.call_args.args[0]
    return str(
        statement.compile(dialect=postgresql.dialect(), compile_kwargs={"literal_binds": True})
    )


@pytest.fixture
def counting_db(mock_db):
    result = MagicMock()
    result.scalar_one.return_value = 3
    result.scalars.return_value.all.return_value = []
    result.scalars.return_value.first.return_value = None
    mock_db.execute = AsyncMock(return_value=result)
    return mock_db


class TestQueries:
    """Filters and ordering of the cap, seat and waitlist queries."""

    @pytest.mark.asyncio
    async def test_cap_count_excludes_closed_statuses(self, counting_db):
        count = await count_applications(
            counting_db,
            "student-1",
            uuid4(),
            exclude_statuses=frozenset(
                {ApplicationStatus.DECLINED, ApplicationStatus.REJECTED}
            ),
        )

        sql = _executed_sql(counting_db)
        assert count == 3
        assert "count(applications.id)" in sql
        assert "applications.student_id = 'student-1'" in sql
        assert "applications.institution_id" in sql
        assert "NOT IN" in sql
        assert "'declined'" in sql
        assert "'rejected'" in sql
        for live in ("pending", "admitted", "waitlisted", "accepted"):
            assert f"'{live}'" not in sql

    @pytest.mark.asyncio
    async def test_count_without_exclusions_has_no_status_filter(self, counting_db):
        await count_applications(counting_db, "student-1", uuid4())

        assert "applications.status" not in _executed_sql(counting_db)

    @pytest.mark.asyncio
    async def test_live_application_lookup_ignores_closed_rows(self, counting_db):
        await get_live_for_course(counting_db, "student-1", uuid4())

        sql = _executed_sql(counting_db)
        assert "applications.status NOT IN" in sql
        assert "'declined'" in sql
        assert "'rejected'" in sql

    @pytest.mark.asyncio
    async def test_occupied_seats_count_accepted_only_by_default(self, counting_db):
        occupied = await count_occupied_seats(counting_db, uuid4())

        sql = _executed_sql(counting_db)
        assert occupied == 3
        assert "applications.course_id" in sql
        assert "'accepted'" in sql
        assert "'admitted'" not in sql
        assert "'waitlisted'" not in sql

    @pytest.mark.asyncio
    async def test_occupied_seats_can_include_outstanding_offers(self, counting_db):
        await count_occupied_seats(counting_db, uuid4(), include_outstanding_offers=True)

        sql = _executed_sql(counting_db)
        assert "'accepted'" in sql
        assert "'admitted'" in sql

    @pytest.mark.asyncio
    async def test_waitlist_queue_is_earliest_first_and_locked(self, counting_db):
        queue = await list_waitlisted(counting_db, uuid4(), limit=2)

        sql = _executed_sql(counting_db)
        assert queue == []
        assert "applications.status = 'waitlisted'" in sql
        assert "ORDER BY applications.applied_at ASC, applications.id" in sql
        assert "LIMIT 2" in sql
        assert "FOR UPDATE" in sql
