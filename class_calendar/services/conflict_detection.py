"""
Room and teacher conflict detection.

Both checks compare time-of-day intervals on a weekday, not concrete dates:
a room is busy if an active class's weekly pattern uses it at an
overlapping time, a teacher is busy if any of their Scheduled or Completed
sessions falls on that weekday at an overlapping time.

Lookups fail open: when the database read itself fails the error is logged
and the check reports no conflict. Checks run outside the transaction that
later commits the schedule, so two concurrent writers can both pass.
"""

import logging
from datetime import time
from typing import Iterable, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from class_calendar.models.class_session import ClassSession, SessionStatus
from class_calendar.models.curriculum import Program
from class_calendar.models.school_class import ClassStatus, RoomSchedule, SchoolClass
from class_calendar.schemas.conflict import (
    ConflictingClass,
    ConflictingSession,
    RoomConflict,
    TeacherConflict,
)
from class_calendar.services.session_calculation import DaySlot
from class_calendar.utils.time_utils import Weekday, intervals_overlap

logger = logging.getLogger(__name__)

BUSY_SESSION_STATUSES = (SessionStatus.SCHEDULED, SessionStatus.COMPLETED)


def _display_name(school_class: SchoolClass, program_name: Optional[str]) -> str:
    if school_class.class_name:
        return f"{program_name or ''} - {school_class.class_name}".strip(" -")
    return program_name or f"Class {school_class.class_id}"


def check_room_conflict(
    db: Session,
    room_id: int,
    day_of_week: Weekday,
    start_time: time,
    end_time: time,
    exclude_class_id: Optional[int] = None,
) -> Optional[RoomConflict]:
    """
    Return the first active class occupying `room_id` on `day_of_week`
    during [start_time, end_time), or None.

    Args:
        db: Database session for query execution
        room_id: Room to check
        day_of_week: Weekday of the candidate slot
        start_time: Candidate start
        end_time: Candidate end
        exclude_class_id: Class being edited, never reported against itself

    Returns:
        Optional[RoomConflict]: Collision details for operator display
    """
    query = (
        select(RoomSchedule, SchoolClass, Program)
        .join(SchoolClass, RoomSchedule.class_id == SchoolClass.class_id)
        .join(Program, SchoolClass.program_id == Program.program_id, isouter=True)
        .where(
            RoomSchedule.room_id == room_id,
            RoomSchedule.day_of_week == day_of_week,
            SchoolClass.status == ClassStatus.ACTIVE,
        )
        .order_by(RoomSchedule.start_time)
    )
    if exclude_class_id is not None:
        query = query.where(RoomSchedule.class_id != exclude_class_id)

    try:
        rows = db.exec(query).all()
    except SQLAlchemyError as exc:
        logger.error(f"Error checking room conflict for room {room_id}: {exc}")
        return None

    for schedule, school_class, program in rows:
        if not intervals_overlap(start_time, end_time, schedule.start_time, schedule.end_time):
            continue

        program_name = program.program_name if program else None
        return RoomConflict(
            room_id=room_id,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
            conflicting_class=ConflictingClass(
                class_id=school_class.class_id,
                class_name=school_class.class_name,
                program_name=program_name,
            ),
            existing_start_time=schedule.start_time,
            existing_end_time=schedule.end_time,
            message=(
                f'Schedule conflicts with active class "{_display_name(school_class, program_name)}" '
                f"({schedule.start_time:%H:%M} - {schedule.end_time:%H:%M})"
            ),
        )

    return None


def check_room_conflicts(
    db: Session,
    room_id: int,
    pattern: Iterable[DaySlot],
    exclude_class_id: Optional[int] = None,
) -> List[RoomConflict]:
    """First room conflict, if any, for every enabled day of a weekly pattern."""
    conflicts = []
    for slot in pattern:
        if not slot.enabled:
            continue
        conflict = check_room_conflict(
            db, room_id, slot.day_of_week, slot.start_time, slot.end_time, exclude_class_id
        )
        if conflict is not None:
            conflicts.append(conflict)
    return conflicts


def check_teacher_conflict(
    db: Session,
    teacher_id: int,
    slots: Iterable[DaySlot],
    exclude_class_id: Optional[int] = None,
) -> List[TeacherConflict]:
    """
    Report every Scheduled or Completed session of `teacher_id` that falls on
    the weekday of a candidate slot and overlaps its time range.

    Sessions are matched by weekday of their scheduled date, so the answer is
    "this teacher already teaches Tuesdays 9-10 somewhere", not date specific.
    """
    enabled = [slot for slot in slots if slot.enabled]
    if not enabled:
        return []

    query = (
        select(ClassSession, SchoolClass, Program)
        .join(SchoolClass, ClassSession.class_id == SchoolClass.class_id)
        .join(Program, SchoolClass.program_id == Program.program_id, isouter=True)
        .where(
            ClassSession.original_teacher_id == teacher_id,
            ClassSession.status.in_(BUSY_SESSION_STATUSES),
        )
        .order_by(ClassSession.scheduled_date, ClassSession.scheduled_start_time)
    )
    if exclude_class_id is not None:
        query = query.where(ClassSession.class_id != exclude_class_id)

    try:
        rows = db.exec(query).all()
    except SQLAlchemyError as exc:
        logger.error(f"Error checking teacher conflict for teacher {teacher_id}: {exc}")
        return []

    conflicts = []
    for slot in enabled:
        day_number = slot.day_of_week.day_number
        for session, school_class, program in rows:
            if Weekday.from_date(session.scheduled_date).day_number != day_number:
                continue
            if not intervals_overlap(
                slot.start_time,
                slot.end_time,
                session.scheduled_start_time,
                session.scheduled_end_time,
            ):
                continue

            program_name = program.program_name if program else None
            conflicts.append(
                TeacherConflict(
                    teacher_id=teacher_id,
                    day_of_week=slot.day_of_week,
                    start_time=slot.start_time,
                    end_time=slot.end_time,
                    conflicting_session=ConflictingSession(
                        classsession_id=session.classsession_id,
                        class_id=session.class_id,
                        class_name=school_class.class_name,
                        program_name=program_name,
                        scheduled_date=session.scheduled_date,
                        scheduled_start_time=session.scheduled_start_time,
                        scheduled_end_time=session.scheduled_end_time,
                    ),
                    message=(
                        f"Teacher has a conflicting session on {slot.day_of_week.value} "
                        f"({session.scheduled_start_time:%H:%M} - {session.scheduled_end_time:%H:%M}) "
                        f'for class "{_display_name(school_class, program_name)}"'
                    ),
                )
            )

    return conflicts
