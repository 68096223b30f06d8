"""
Calendar expansion for class sessions.

Turns a weekly meeting pattern plus a curriculum shape into the ordered,
date-stamped list of sessions a class is expected to hold. Everything in
this module is pure: no database access, no clock.

The walk is a linear day-by-day scan rather than a closed-form date
calculation, so a holiday simply pushes every later occurrence forward by
one matching weekday.
"""

from dataclasses import dataclass
from datetime import date, time, timedelta
from typing import AbstractSet, Dict, Iterable, List, Mapping, Optional, Tuple

from class_calendar.errors import ScheduleValidationError
from class_calendar.utils.time_utils import Weekday, add_hours, crosses_midnight


@dataclass(frozen=True)
class DaySlot:
    """One weekday entry of a weekly pattern."""

    day_of_week: Weekday
    start_time: time
    end_time: time
    enabled: bool = True


@dataclass(frozen=True)
class Occurrence:
    """One concrete calendar instance of a weekly slot."""

    scheduled_date: date
    start_time: time
    end_time: time


@dataclass(frozen=True)
class SessionDraft:
    """A fully materialized session, ready to be upserted."""

    class_id: int
    phase_number: int
    phase_session_number: int
    scheduled_date: date
    scheduled_start_time: time
    scheduled_end_time: time
    phasesession_id: Optional[int] = None
    original_teacher_id: Optional[int] = None
    assigned_teacher_id: Optional[int] = None
    created_by: Optional[int] = None

    @property
    def natural_key(self) -> Tuple[int, int, int, date]:
        return (
            self.class_id,
            self.phase_number,
            self.phase_session_number,
            self.scheduled_date,
        )


TemplateLookup = Mapping[Tuple[int, int], int]


def enabled_slots(pattern: Iterable[DaySlot]) -> Dict[Weekday, DaySlot]:
    """Map each enabled weekday to its slot. A later duplicate day wins."""
    return {slot.day_of_week: slot for slot in pattern if slot.enabled}


def next_occurrence_date(
    on_or_after: date,
    slots: Mapping[Weekday, DaySlot],
    holidays: AbstractSet[date] = frozenset(),
) -> Optional[date]:
    """
    Return the first date on or after `on_or_after` that falls on an enabled
    weekday and is not a holiday, or None when no weekday is enabled.

    Restartable: feeding back the returned date plus one day continues the
    walk, so callers never share a cursor.
    """
    if not slots:
        return None

    candidate = on_or_after
    # Each holiday can swallow at most one candidate, so the scan is bounded.
    for _ in range(7 * (len(holidays) + 1)):
        if Weekday.from_date(candidate) in slots and candidate not in holidays:
            return candidate
        candidate += timedelta(days=1)
    return None


def walk_calendar(
    start_date: date,
    pattern: Iterable[DaySlot],
    total_occurrences: int,
    holidays: AbstractSet[date] = frozenset(),
) -> List[Occurrence]:
    """
    Produce `total_occurrences` occurrences of the pattern starting at
    `start_date` (inclusive), skipping holidays.

    Each occurrence uses the start/end time of its own weekday. An empty
    pattern or a non-positive count gives an empty list.
    """
    slots = enabled_slots(pattern)
    occurrences: List[Occurrence] = []
    if not slots or total_occurrences <= 0:
        return occurrences

    cursor = start_date
    while len(occurrences) < total_occurrences:
        found = next_occurrence_date(cursor, slots, holidays)
        if found is None:
            break
        slot = slots[Weekday.from_date(found)]
        occurrences.append(Occurrence(found, slot.start_time, slot.end_time))
        cursor = found + timedelta(days=1)

    return occurrences


def phase_position(occurrence_index: int, sessions_per_phase: int) -> Tuple[int, int]:
    """
    Map a 1-based overall occurrence index to (phase_number, session_in_phase).

    Not capped at the curriculum's phase count: indexes past the end map to
    phases beyond it.
    """
    if occurrence_index < 1:
        raise ValueError("occurrence_index must be 1 or greater")
    if sessions_per_phase < 1:
        raise ValueError("sessions_per_phase must be 1 or greater")

    offset = occurrence_index - 1
    return offset // sessions_per_phase + 1, offset % sessions_per_phase + 1


def resolve_template(
    template_lookup: Optional[TemplateLookup], phase_number: int, session_number: int
) -> Optional[int]:
    if not template_lookup:
        return None
    return template_lookup.get((phase_number, session_number))


def fixed_length_end(start_time: time, hours: float) -> time:
    """End time of a session lasting `hours`; sessions never run past midnight."""
    if crosses_midnight(start_time, hours):
        raise ScheduleValidationError(
            f"A {hours:g}-hour session starting at {start_time:%H:%M} would run past midnight",
            details={"start_time": start_time.isoformat(), "duration_hours": hours},
        )
    return add_hours(start_time, hours)


def check_pattern_duration(
    pattern: Iterable[DaySlot], session_duration_hours: Optional[float]
) -> None:
    """Raise if a fixed session length would push any enabled slot past midnight."""
    if session_duration_hours is None:
        return
    for slot in enabled_slots(pattern).values():
        fixed_length_end(slot.start_time, session_duration_hours)


def expand(
    class_id: int,
    start_date: date,
    weekly_pattern: Iterable[DaySlot],
    total_sessions: int,
    sessions_per_phase: int,
    template_lookup: Optional[TemplateLookup] = None,
    holiday_set: AbstractSet[date] = frozenset(),
    teacher_id: Optional[int] = None,
    created_by: Optional[int] = None,
    session_duration_hours: Optional[float] = None,
) -> List[SessionDraft]:
    """
    Expand a class's weekly pattern into its ordered session drafts.

    Args:
        class_id: Class the sessions belong to
        start_date: First eligible calendar date
        weekly_pattern: Day slots; only enabled ones produce sessions
        total_sessions: Number of sessions to produce, normally
            phase_count * sessions_per_phase
        sessions_per_phase: Divisor used to number phases
        template_lookup: (phase, session_in_phase) -> template id
        holiday_set: Dates that never hold a session
        teacher_id: Stamped as both original and assigned teacher
        created_by: Operator id for audit stamping
        session_duration_hours: When set, every session ends this long after
            it starts instead of at the pattern's end time

    Returns:
        List[SessionDraft]: In date order, numbered from phase 1 session 1

    Raises:
        ScheduleValidationError: If the fixed length would run a session
            past midnight
    """
    occurrences = walk_calendar(start_date, weekly_pattern, total_sessions, holiday_set)

    drafts = []
    for index, occurrence in enumerate(occurrences, start=1):
        phase_number, session_number = phase_position(index, sessions_per_phase)
        end_time = occurrence.end_time
        if session_duration_hours is not None:
            end_time = fixed_length_end(occurrence.start_time, session_duration_hours)

        drafts.append(
            SessionDraft(
                class_id=class_id,
                phase_number=phase_number,
                phase_session_number=session_number,
                scheduled_date=occurrence.scheduled_date,
                scheduled_start_time=occurrence.start_time,
                scheduled_end_time=end_time,
                phasesession_id=resolve_template(
                    template_lookup, phase_number, session_number
                ),
                original_teacher_id=teacher_id,
                assigned_teacher_id=teacher_id,
                created_by=created_by,
            )
        )

    return drafts
