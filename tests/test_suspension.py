"""Tests for suspension processing."""

from datetime import date, time
from unittest import mock

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from class_calendar.crud.class_session import get_class_sessions
from class_calendar.errors import (
    RecordNotFoundError,
    ScheduleValidationError,
    TransactionFailure,
)
from class_calendar.models.class_session import ClassSession, SessionStatus
from class_calendar.models.suspension import SuspensionPeriod, SuspensionStatus
from class_calendar.schemas.suspension import MakeupSchedule, SuspensionCreate
from class_calendar.services.suspension_service import (
    get_suspension_detail,
    list_suspensions,
    suspend_sessions,
    update_suspension_status,
)


def _session(db, class_id, phase, number):
    return db.exec(
        select(ClassSession).where(
            ClassSession.class_id == class_id,
            ClassSession.phase_number == phase,
            ClassSession.phase_session_number == number,
        )
    ).one()


def _request(sessions, makeup_date=date(2025, 9, 6), **kwargs):
    return SuspensionCreate(
        suspension_name=kwargs.pop("suspension_name", "Typhoon Signal No. 3"),
        reason=kwargs.pop("reason", "Typhoon"),
        session_ids=[s.classsession_id for s in sessions],
        makeup_schedules=[
            MakeupSchedule(
                session_id=s.classsession_id,
                scheduled_date=makeup_date,
                start_time=time(13),
            )
            for s in sessions
        ],
        **kwargs,
    )


@pytest.fixture
def six_per_phase_class(make_class, make_program):
    """A Monday/Wednesday class whose curriculum has 3 phases of 6 sessions."""
    return make_class(program=make_program(number_of_phase=3, sessions_per_phase=6))


class TestSuspendSessions:
    def test_makeup_continues_the_phase(self, db, six_per_phase_class):
        class_id = six_per_phase_class.class_id
        original = _session(db, class_id, 2, 4)

        result = suspend_sessions(db, _request([original]), operator_id=7)

        db.refresh(original)
        makeup = db.get(ClassSession, result.makeup_session_ids[0])
        assert (result.cancelled_count, result.makeup_count) == (1, 1)
        assert original.status == SessionStatus.CANCELLED
        assert makeup.status == SessionStatus.RESCHEDULED
        assert (makeup.phase_number, makeup.phase_session_number) == (2, 7)
        assert makeup.suspension_id == original.suspension_id == result.suspension_id
        assert makeup.scheduled_date == date(2025, 9, 6)
        assert makeup.created_by == 7

    def test_makeup_keeps_original_length_and_teachers(self, db, six_per_phase_class):
        original = _session(db, six_per_phase_class.class_id, 1, 2)

        result = suspend_sessions(db, _request([original]))

        makeup = db.get(ClassSession, result.makeup_session_ids[0])
        assert (makeup.scheduled_start_time, makeup.scheduled_end_time) == (time(13), time(14))
        assert makeup.original_teacher_id == original.original_teacher_id
        assert makeup.phasesession_id is None

    def test_several_makeups_are_numbered_in_turn(self, db, six_per_phase_class):
        class_id = six_per_phase_class.class_id
        originals = [_session(db, class_id, 1, 3), _session(db, class_id, 1, 4)]

        result = suspend_sessions(db, _request(originals))

        numbers = [
            db.get(ClassSession, session_id).phase_session_number
            for session_id in result.makeup_session_ids
        ]
        assert numbers == [7, 8]

    def test_audit_notes_and_period(self, db, six_per_phase_class):
        original = _session(db, six_per_phase_class.class_id, 1, 1)

        result = suspend_sessions(db, _request([original], reason="Flood"))

        db.refresh(original)
        suspension = db.get(SuspensionPeriod, result.suspension_id)
        assert original.notes == "Cancelled due to: Typhoon Signal No. 3 (Flood)"
        assert suspension.start_date == suspension.end_date == original.scheduled_date
        assert suspension.status == SuspensionStatus.ACTIVE

    def test_class_end_date_is_not_extended(self, db, six_per_phase_class):
        original = _session(db, six_per_phase_class.class_id, 3, 6)
        end_date = six_per_phase_class.end_date

        suspend_sessions(db, _request([original], makeup_date=date(2026, 1, 10)))

        db.refresh(six_per_phase_class)
        assert six_per_phase_class.end_date == end_date


class TestSuspensionPreconditions:
    def _assert_untouched(self, db, class_id):
        statuses = {s.status for s in get_class_sessions(db, class_id)}
        assert statuses == {SessionStatus.SCHEDULED}
        assert db.exec(select(SuspensionPeriod)).all() == []

    def test_cross_phase_batch_is_rejected(self, db, six_per_phase_class):
        class_id = six_per_phase_class.class_id
        batch = [_session(db, class_id, 1, 6), _session(db, class_id, 2, 1)]

        with pytest.raises(ScheduleValidationError) as excinfo:
            suspend_sessions(db, _request(batch))

        assert excinfo.value.details == {"phases": [1, 2]}
        self._assert_untouched(db, class_id)

    def test_missing_makeup_is_rejected(self, db, six_per_phase_class):
        class_id = six_per_phase_class.class_id
        batch = [_session(db, class_id, 1, 1), _session(db, class_id, 1, 2)]
        request = _request(batch)
        request.makeup_schedules = request.makeup_schedules[:1]

        with pytest.raises(ScheduleValidationError):
            suspend_sessions(db, request)

        self._assert_untouched(db, class_id)

    def test_makeup_for_another_session_is_rejected(self, db, six_per_phase_class):
        class_id = six_per_phase_class.class_id
        listed, unlisted = _session(db, class_id, 1, 1), _session(db, class_id, 1, 2)
        request = _request([listed])
        request.makeup_schedules[0].session_id = unlisted.classsession_id

        with pytest.raises(ScheduleValidationError):
            suspend_sessions(db, request)

        self._assert_untouched(db, class_id)

    def test_duplicate_session_ids_are_rejected(self, db, six_per_phase_class):
        session = _session(db, six_per_phase_class.class_id, 1, 1)
        request = _request([session])
        request.session_ids = [session.classsession_id, session.classsession_id]

        with pytest.raises(ScheduleValidationError):
            suspend_sessions(db, request)

    def test_only_scheduled_sessions_can_be_suspended(self, db, six_per_phase_class):
        class_id = six_per_phase_class.class_id
        done = _session(db, class_id, 1, 1)
        done.status = SessionStatus.COMPLETED
        db.add(done)
        db.commit()

        with pytest.raises(ScheduleValidationError) as excinfo:
            suspend_sessions(db, _request([done, _session(db, class_id, 1, 2)]))

        assert excinfo.value.details == {"session_ids": [done.classsession_id]}
        assert _session(db, class_id, 1, 2).status == SessionStatus.SCHEDULED

    def test_makeup_running_past_midnight_is_rejected(self, db, six_per_phase_class):
        class_id = six_per_phase_class.class_id
        request = _request([_session(db, class_id, 1, 1)])
        request.makeup_schedules[0].start_time = time(23, 30)

        with pytest.raises(ScheduleValidationError):
            suspend_sessions(db, request)

        self._assert_untouched(db, class_id)

    def test_storage_failure_rolls_everything_back(self, db, six_per_phase_class):
        class_id = six_per_phase_class.class_id
        batch = [_session(db, class_id, 1, 1), _session(db, class_id, 1, 2)]

        with mock.patch(
            "class_calendar.services.suspension_service.get_max_session_number",
            side_effect=OperationalError("SELECT", {}, Exception("database is locked")),
        ):
            with pytest.raises(TransactionFailure):
                suspend_sessions(db, _request(batch))

        self._assert_untouched(db, class_id)
        assert len(get_class_sessions(db, class_id)) == 18

    def test_unknown_session_is_not_found(self, db, six_per_phase_class):
        request = SuspensionCreate(
            suspension_name="Power outage",
            reason="Other",
            session_ids=[9999],
            makeup_schedules=[
                MakeupSchedule(session_id=9999, scheduled_date=date(2025, 9, 6), start_time=time(9))
            ],
        )
        with pytest.raises(RecordNotFoundError):
            suspend_sessions(db, request)


class TestPostCommitHook:
    def test_hook_receives_result(self, db, six_per_phase_class):
        seen = []
        original = _session(db, six_per_phase_class.class_id, 1, 1)

        result = suspend_sessions(db, _request([original]), on_committed=seen.append)

        assert seen == [result]

    def test_failing_hook_keeps_the_suspension(self, db, six_per_phase_class, caplog):
        def broken_notifier(result):
            raise RuntimeError("mail server down")

        original = _session(db, six_per_phase_class.class_id, 1, 1)

        result = suspend_sessions(db, _request([original]), on_committed=broken_notifier)

        db.refresh(original)
        assert original.status == SessionStatus.CANCELLED
        assert db.get(SuspensionPeriod, result.suspension_id) is not None
        assert "Post-commit step failed" in caplog.text


class TestSuspensionRecords:
    def test_detail_splits_cancelled_and_makeups(self, db, six_per_phase_class):
        original = _session(db, six_per_phase_class.class_id, 1, 1)
        result = suspend_sessions(db, _request([original]))

        detail = get_suspension_detail(db, result.suspension_id)

        assert [s.classsession_id for s in detail.cancelled_sessions] == [original.classsession_id]
        assert [s.classsession_id for s in detail.makeup_sessions] == result.makeup_session_ids

    def test_makeup_points_at_the_session_it_replaces(self, db, six_per_phase_class):
        original = _session(db, six_per_phase_class.class_id, 1, 1)
        result = suspend_sessions(db, _request([original]))
        makeup = db.get(ClassSession, result.makeup_session_ids[0])

        # Finishing the makeup does not move it out of the makeup list
        makeup.status = SessionStatus.COMPLETED
        db.add(makeup)
        db.commit()
        detail = get_suspension_detail(db, result.suspension_id)

        assert makeup.makeup_for_session_id == original.classsession_id
        assert original.makeup_for_session_id is None
        assert [s.classsession_id for s in detail.makeup_sessions] == [makeup.classsession_id]
        assert [s.classsession_id for s in detail.cancelled_sessions] == [original.classsession_id]

    def test_list_filters_by_class_and_status(self, db, six_per_phase_class):
        original = _session(db, six_per_phase_class.class_id, 1, 1)
        result = suspend_sessions(db, _request([original], branch_id=1))

        assert [s.suspension_id for s in list_suspensions(db, class_id=six_per_phase_class.class_id)] == [
            result.suspension_id
        ]
        assert list_suspensions(db, class_id=six_per_phase_class.class_id + 1) == []
        assert list_suspensions(db, status=SuspensionStatus.CANCELLED) == []
        assert len(list_suspensions(db, branch_id=1)) == 1

    def test_status_update_leaves_sessions(self, db, six_per_phase_class):
        original = _session(db, six_per_phase_class.class_id, 1, 1)
        result = suspend_sessions(db, _request([original]))

        suspension = update_suspension_status(db, result.suspension_id, SuspensionStatus.CANCELLED)

        db.refresh(original)
        assert suspension.status == SuspensionStatus.CANCELLED
        assert suspension.updated_at is not None
        assert original.status == SessionStatus.CANCELLED
