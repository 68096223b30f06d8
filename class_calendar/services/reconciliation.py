"""
Session generation and reconciliation for one class.

The expected session set is always recomputed from the class's current
configuration (weekly pattern, start date, teacher, program curriculum,
national and branch holidays) and then merged into storage: every expected
session is upserted, and stored sessions that are still Scheduled but no
longer expected are deleted. Sessions in any other status are never deleted.
"""

import logging
from datetime import date
from typing import List, Optional, Set, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from class_calendar.crud.class_session import upsert_sessions
from class_calendar.crud.curriculum import get_curriculum, get_program, get_template_lookup
from class_calendar.crud.holiday import get_holiday_set
from class_calendar.crud.school_class import get_class, get_weekly_pattern
from class_calendar.dependencies import HOLIDAY_COUNTRY, HOLIDAY_HORIZON_YEARS
from class_calendar.errors import TransactionFailure
from class_calendar.models.class_session import ClassSession, SessionStatus
from class_calendar.models.school_class import SchoolClass
from class_calendar.schemas.class_session import ReconcileSummary
from class_calendar.services.session_calculation import SessionDraft, expand

logger = logging.getLogger(__name__)


def holiday_horizon(start_date: date, years: int = HOLIDAY_HORIZON_YEARS) -> Tuple[date, date]:
    """Date range whose holidays are loaded for a class starting on `start_date`."""
    return start_date, date(start_date.year + max(years, 1) - 1, 12, 31)


def build_expected_sessions(
    db: Session, school_class: SchoolClass, operator_id: Optional[int] = None
) -> List[SessionDraft]:
    """Recompute every session `school_class` should hold under its current setup."""
    program = get_program(db, school_class.program_id)
    curriculum = get_curriculum(db, program.curriculum_id)

    horizon_start, horizon_end = holiday_horizon(school_class.start_date)
    holidays = get_holiday_set(
        db, horizon_start, horizon_end, school_class.branch_id, country=HOLIDAY_COUNTRY
    )

    return expand(
        class_id=school_class.class_id,
        start_date=school_class.start_date,
        weekly_pattern=get_weekly_pattern(db, school_class.class_id),
        total_sessions=curriculum.number_of_phase * curriculum.number_of_session_per_phase,
        sessions_per_phase=curriculum.number_of_session_per_phase,
        template_lookup=get_template_lookup(db, curriculum.curriculum_id),
        holiday_set=holidays,
        teacher_id=school_class.teacher_id,
        created_by=operator_id,
        session_duration_hours=program.session_duration_hours,
    )


def _delete_unexpected(
    db: Session, class_id: int, expected_keys: Set[Tuple[int, int, date]]
) -> int:
    stored = db.exec(
        select(ClassSession).where(
            ClassSession.class_id == class_id,
            ClassSession.status == SessionStatus.SCHEDULED,
        )
    ).all()

    deleted = 0
    for session in stored:
        key = (session.phase_number, session.phase_session_number, session.scheduled_date)
        if key not in expected_keys:
            db.delete(session)
            deleted += 1
    db.flush()
    return deleted


def reconcile_class_sessions(
    db: Session,
    class_id: int,
    operator_id: Optional[int] = None,
    commit: bool = True,
) -> ReconcileSummary:
    """
    Bring the stored sessions of a class in line with its configuration.

    Args:
        db: Database session; the whole reconcile is one unit of work on it
        class_id: Class to reconcile
        operator_id: Stamped as created_by on newly inserted sessions
        commit: Commit when done. Callers that already own a unit of work
            (class create/update) pass False and commit themselves.

    Returns:
        ReconcileSummary: upsert counts, skipped rows, deleted count and the
        size of the expected set

    Raises:
        RecordNotFoundError: If the class, its program or curriculum is missing
        TransactionFailure: If the database rejects the unit of work
    """
    school_class = get_class(db, class_id)

    try:
        drafts = build_expected_sessions(db, school_class, operator_id)
        upserted = upsert_sessions(db, drafts)
        expected_keys = {
            (draft.phase_number, draft.phase_session_number, draft.scheduled_date)
            for draft in drafts
        }
        deleted = _delete_unexpected(db, class_id, expected_keys)
        if commit:
            db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Reconciliation of class {class_id} failed: {exc}")
        raise TransactionFailure(f"Could not reconcile sessions of class {class_id}")

    summary = ReconcileSummary(
        **upserted.model_dump(), deleted=deleted, expected=len(drafts)
    )
    logger.info(
        f"Reconciled class {class_id}: expected={summary.expected} created={summary.created} "
        f"updated={summary.updated} unchanged={summary.unchanged} deleted={summary.deleted} "
        f"skipped={len(summary.skipped)}"
    )
    return summary
