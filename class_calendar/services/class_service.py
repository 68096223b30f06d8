import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from class_calendar.crud.curriculum import get_program
from class_calendar.crud.school_class import (
    apply_class_update,
    create_class_record,
    get_class,
    get_weekly_pattern,
)
from class_calendar.errors import (
    ScheduleConflictError,
    ScheduleValidationError,
    TransactionFailure,
)
from class_calendar.models.school_class import ClassStatus, SchoolClass
from class_calendar.schemas.class_session import ReconcileSummary
from class_calendar.schemas.conflict import ConflictReport
from class_calendar.schemas.school_class import ClassCreate, ClassUpdate, DaySchedule
from class_calendar.services.conflict_detection import (
    check_room_conflicts,
    check_teacher_conflict,
)
from class_calendar.services.reconciliation import reconcile_class_sessions
from class_calendar.services.session_calculation import DaySlot, check_pattern_duration

logger = logging.getLogger(__name__)

# Class fields whose change invalidates the generated sessions
RECONCILE_TRIGGERS = ("days_of_week", "start_date", "teacher_id", "program_id")

# Class columns a partial update may leave out but never clear
NON_NULLABLE_FIELDS = ("class_name", "program_id", "start_date", "status", "days_of_week")


def to_day_slots(days: List[DaySchedule]) -> List[DaySlot]:
    return [
        DaySlot(
            day_of_week=day.day_of_week,
            start_time=day.start_time,
            end_time=day.end_time,
            enabled=day.enabled,
        )
        for day in days
    ]


def find_conflicts(
    db: Session,
    pattern: List[DaySlot],
    room_id: Optional[int] = None,
    teacher_ids: Optional[List[int]] = None,
    exclude_class_id: Optional[int] = None,
) -> ConflictReport:
    """Collect room and teacher conflicts for every enabled day of `pattern`."""
    room_conflicts = []
    if room_id is not None:
        room_conflicts = check_room_conflicts(db, room_id, pattern, exclude_class_id)

    teacher_conflicts = []
    for teacher_id in teacher_ids or []:
        teacher_conflicts.extend(
            check_teacher_conflict(db, teacher_id, pattern, exclude_class_id)
        )

    return ConflictReport(
        room_conflicts=room_conflicts, teacher_conflicts=teacher_conflicts
    )


def _raise_on_conflict(report: ConflictReport) -> None:
    if not report.has_conflict:
        return

    first = (report.room_conflicts or report.teacher_conflicts)[0]
    raise ScheduleConflictError(
        first.message,
        details=report.model_dump(mode="json", exclude={"has_conflict"}),
    )


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Failed to {action}: {exc}")
        raise TransactionFailure(f"Failed to {action}")


def create_class(
    db: Session, school_class: ClassCreate, operator_id: Optional[int] = None
) -> Tuple[SchoolClass, ReconcileSummary]:
    """
    Create a class and generate its sessions in one unit of work.

    Args:
        db: Database session
        school_class: Class fields and weekly pattern
        operator_id: Stamped on the generated sessions

    Returns:
        Tuple[SchoolClass, ReconcileSummary]: The stored class and the
        generation summary

    Raises:
        ScheduleConflictError: If the room or teacher is already busy at one
            of the pattern's slots
        ScheduleValidationError: If the program's session length would run
            a slot past midnight
        RecordNotFoundError: If a referenced program, room or teacher is missing
        TransactionFailure: If the database rejects the unit of work
    """
    pattern = to_day_slots(school_class.days_of_week)
    program = get_program(db, school_class.program_id)
    check_pattern_duration(pattern, program.session_duration_hours)

    teacher_ids = [school_class.teacher_id] if school_class.teacher_id is not None else []
    _raise_on_conflict(find_conflicts(db, pattern, school_class.room_id, teacher_ids))

    try:
        db_class = create_class_record(db, school_class)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Failed to create class: {exc}")
        raise TransactionFailure("Failed to create class")

    summary = reconcile_class_sessions(db, db_class.class_id, operator_id, commit=False)
    _commit(db, "create class")
    db.refresh(db_class)

    logger.info(
        f"Created class {db_class.class_id} with {summary.created} sessions "
        f"({len(summary.skipped)} skipped)"
    )
    return db_class, summary


def update_class(
    db: Session,
    class_id: int,
    update: ClassUpdate,
    operator_id: Optional[int] = None,
) -> Tuple[SchoolClass, Optional[ReconcileSummary]]:
    """
    Update a class, re-checking conflicts against every other class and
    reconciling its sessions when the schedule-shaping fields change.

    Returns the class and the reconcile summary, or None when no
    reconciliation was needed.

    Explicit nulls for required columns are rejected before anything is
    written.
    """
    db_class = get_class(db, class_id)
    changed = update.model_dump(exclude_unset=True)

    cleared = [
        field for field in NON_NULLABLE_FIELDS if field in changed and changed[field] is None
    ]
    if cleared:
        raise ScheduleValidationError(
            f"Fields cannot be set to null: {', '.join(cleared)}",
            details={"fields": cleared},
        )

    if {"days_of_week", "program_id"} & changed.keys():
        program = get_program(db, changed.get("program_id", db_class.program_id))
        if "days_of_week" in changed:
            new_pattern = to_day_slots(update.days_of_week)
        else:
            new_pattern = get_weekly_pattern(db, class_id)
        check_pattern_duration(new_pattern, program.session_duration_hours)

    target_status = changed.get("status") or db_class.status
    room_id = changed["room_id"] if "room_id" in changed else db_class.room_id
    teacher_id = changed["teacher_id"] if "teacher_id" in changed else db_class.teacher_id

    if target_status == ClassStatus.ACTIVE and (
        {"days_of_week", "room_id", "teacher_id", "status"} & changed.keys()
    ):
        if update.days_of_week is not None:
            pattern = to_day_slots(update.days_of_week)
        else:
            pattern = get_weekly_pattern(db, class_id)
        teacher_ids = [teacher_id] if teacher_id is not None else []
        _raise_on_conflict(
            find_conflicts(db, pattern, room_id, teacher_ids, exclude_class_id=class_id)
        )

    try:
        apply_class_update(db, db_class, update)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Failed to update class {class_id}: {exc}")
        raise TransactionFailure(f"Failed to update class {class_id}")

    summary = None
    if any(field in changed for field in RECONCILE_TRIGGERS):
        summary = reconcile_class_sessions(db, class_id, operator_id, commit=False)

    _commit(db, f"update class {class_id}")
    db.refresh(db_class)
    return db_class, summary
