"""Tests for calendar expansion: walking, phase numbering and templates.

These functions are pure, so no database fixtures are involved.
"""

from datetime import date, time, timedelta

import pytest

from class_calendar.errors import ScheduleValidationError
from class_calendar.services.session_calculation import (
    DaySlot,
    check_pattern_duration,
    expand,
    next_occurrence_date,
    phase_position,
    walk_calendar,
)
from class_calendar.utils.time_utils import Weekday

MONDAY = date(2025, 6, 2)
MON_WED = [
    DaySlot(Weekday.MONDAY, time(9), time(10)),
    DaySlot(Weekday.WEDNESDAY, time(9), time(10)),
]


class TestWalkCalendar:
    def test_returns_requested_count_in_date_order(self):
        occurrences = walk_calendar(MONDAY, MON_WED, 20)

        dates = [occurrence.scheduled_date for occurrence in occurrences]
        assert len(dates) == 20
        assert dates == sorted(dates)
        assert len(set(dates)) == 20

    def test_start_date_is_eligible(self):
        occurrences = walk_calendar(MONDAY, MON_WED, 1)
        assert occurrences[0].scheduled_date == MONDAY

    def test_start_on_non_matching_day_moves_to_next_enabled_day(self):
        occurrences = walk_calendar(date(2025, 6, 3), MON_WED, 2)
        assert [o.scheduled_date for o in occurrences] == [date(2025, 6, 4), date(2025, 6, 9)]

    def test_holiday_shifts_schedule_by_one_step(self):
        plain = walk_calendar(MONDAY, MON_WED, 20)
        with_holiday = walk_calendar(MONDAY, MON_WED, 20, holidays={date(2025, 6, 4)})

        plain_dates = [o.scheduled_date for o in plain]
        shifted_dates = [o.scheduled_date for o in with_holiday]
        assert len(shifted_dates) == 20
        assert date(2025, 6, 4) not in shifted_dates
        # Every occurrence from the holiday on moves one matching weekday later
        assert shifted_dates[0] == plain_dates[0]
        assert shifted_dates[1:19] == plain_dates[2:20]
        assert shifted_dates[19] == plain_dates[19] + timedelta(days=5)

    def test_disabled_days_are_ignored(self):
        pattern = MON_WED + [DaySlot(Weekday.FRIDAY, time(9), time(10), enabled=False)]
        occurrences = walk_calendar(MONDAY, pattern, 6)
        assert all(
            Weekday.from_date(o.scheduled_date) in (Weekday.MONDAY, Weekday.WEDNESDAY)
            for o in occurrences
        )

    def test_each_weekday_keeps_its_own_times(self):
        pattern = [
            DaySlot(Weekday.MONDAY, time(9), time(10)),
            DaySlot(Weekday.THURSDAY, time(14), time(15, 30)),
        ]
        first, second = walk_calendar(MONDAY, pattern, 2)

        assert (first.start_time, first.end_time) == (time(9), time(10))
        assert second.scheduled_date == date(2025, 6, 5)
        assert (second.start_time, second.end_time) == (time(14), time(15, 30))

    @pytest.mark.parametrize("count", [0, -3])
    def test_non_positive_count_is_empty(self, count):
        assert walk_calendar(MONDAY, MON_WED, count) == []

    def test_pattern_without_enabled_days_is_empty(self):
        pattern = [DaySlot(Weekday.MONDAY, time(9), time(10), enabled=False)]
        assert walk_calendar(MONDAY, pattern, 10) == []
        assert walk_calendar(MONDAY, [], 10) == []


class TestNextOccurrenceDate:
    def test_none_without_slots(self):
        assert next_occurrence_date(MONDAY, {}) is None

    def test_restartable_from_day_after(self):
        slots = {slot.day_of_week: slot for slot in MON_WED}
        first = next_occurrence_date(MONDAY, slots)
        second = next_occurrence_date(first + timedelta(days=1), slots)
        assert (first, second) == (date(2025, 6, 2), date(2025, 6, 4))

    def test_skips_run_of_holidays(self):
        slots = {slot.day_of_week: slot for slot in MON_WED}
        holidays = {date(2025, 6, 2), date(2025, 6, 4), date(2025, 6, 9)}
        assert next_occurrence_date(MONDAY, slots, holidays) == date(2025, 6, 11)


class TestPhasePosition:
    def test_index_23_of_ten_per_phase(self):
        assert phase_position(23, 10) == (3, 3)

    @pytest.mark.parametrize(
        "index,expected",
        [(1, (1, 1)), (5, (1, 5)), (6, (2, 1)), (20, (4, 5))],
    )
    def test_five_per_phase(self, index, expected):
        assert phase_position(index, 5) == expected

    def test_not_capped_past_curriculum(self):
        assert phase_position(21, 5) == (5, 1)

    def test_rejects_zero_index(self):
        with pytest.raises(ValueError):
            phase_position(0, 5)

    def test_rejects_zero_sessions_per_phase(self):
        with pytest.raises(ValueError):
            phase_position(1, 0)


class TestExpand:
    def test_four_phases_of_five_from_monday(self):
        drafts = expand(
            class_id=1,
            start_date=MONDAY,
            weekly_pattern=MON_WED,
            total_sessions=20,
            sessions_per_phase=5,
        )

        assert len(drafts) == 20
        assert [d.scheduled_date for d in drafts[:4]] == [
            date(2025, 6, 2),
            date(2025, 6, 4),
            date(2025, 6, 9),
            date(2025, 6, 11),
        ]
        assert (drafts[5].phase_number, drafts[5].phase_session_number) == (2, 1)
        assert (drafts[-1].phase_number, drafts[-1].phase_session_number) == (4, 5)

    def test_template_lookup_null_on_miss(self):
        drafts = expand(
            class_id=1,
            start_date=MONDAY,
            weekly_pattern=MON_WED,
            total_sessions=3,
            sessions_per_phase=5,
            template_lookup={(1, 1): 101, (1, 3): 103},
        )
        assert [d.phasesession_id for d in drafts] == [101, None, 103]

    def test_teacher_and_operator_are_stamped(self):
        drafts = expand(1, MONDAY, MON_WED, 2, 5, teacher_id=4, created_by=9)
        assert all(d.original_teacher_id == 4 and d.assigned_teacher_id == 4 for d in drafts)
        assert all(d.created_by == 9 for d in drafts)

    def test_session_duration_overrides_pattern_end(self):
        drafts = expand(1, MONDAY, MON_WED, 2, 5, session_duration_hours=1.5)
        assert all(d.scheduled_end_time == time(10, 30) for d in drafts)

    @pytest.mark.parametrize("start", [time(22), time(21)])
    def test_session_running_past_midnight_is_rejected(self, start):
        late = [DaySlot(Weekday.FRIDAY, start, time(23))]

        with pytest.raises(ScheduleValidationError):
            expand(1, MONDAY, late, 2, 5, session_duration_hours=3)

    def test_session_ending_before_midnight_is_kept(self):
        late = [DaySlot(Weekday.FRIDAY, time(20), time(21))]
        drafts = expand(1, MONDAY, late, 1, 5, session_duration_hours=3.5)
        assert drafts[0].scheduled_end_time == time(23, 30)

    def test_pattern_check_ignores_disabled_days(self):
        pattern = [
            DaySlot(Weekday.MONDAY, time(9), time(10)),
            DaySlot(Weekday.FRIDAY, time(23), time(23, 30), enabled=False),
        ]
        check_pattern_duration(pattern, 2)
        with pytest.raises(ScheduleValidationError):
            check_pattern_duration([DaySlot(Weekday.FRIDAY, time(23), time(23, 30))], 2)

    def test_empty_pattern_expands_to_nothing(self):
        assert expand(1, MONDAY, [], 20, 5) == []

    def test_natural_keys_are_unique(self):
        drafts = expand(1, MONDAY, MON_WED, 40, 10)
        assert len({d.natural_key for d in drafts}) == 40
