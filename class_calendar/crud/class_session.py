import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Sequence, Set

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from class_calendar.errors import RecordNotFoundError, ScheduleValidationError
from class_calendar.models.class_session import ClassSession, SessionStatus
from class_calendar.models.teacher import Teacher
from class_calendar.schemas.class_session import (
    ClassSessionUpdate,
    SkippedSession,
    UpsertSummary,
)
from class_calendar.services.session_calculation import SessionDraft
from class_calendar.utils.time_utils import get_school_time

logger = logging.getLogger(__name__)

# Sessions in these states hold real-world data and are never regenerated
PROTECTED_STATUSES = frozenset(
    {SessionStatus.IN_PROGRESS, SessionStatus.COMPLETED, SessionStatus.CANCELLED}
)

# Operator-driven transitions; Rescheduled is only ever set by a suspension
ALLOWED_TRANSITIONS = {
    SessionStatus.SCHEDULED: {
        SessionStatus.IN_PROGRESS,
        SessionStatus.COMPLETED,
        SessionStatus.CANCELLED,
    },
    SessionStatus.RESCHEDULED: {
        SessionStatus.IN_PROGRESS,
        SessionStatus.COMPLETED,
        SessionStatus.CANCELLED,
    },
    SessionStatus.IN_PROGRESS: {SessionStatus.COMPLETED},
    SessionStatus.COMPLETED: set(),
    SessionStatus.CANCELLED: set(),
}


def get_session_by_natural_key(
    db: Session,
    class_id: int,
    phase_number: int,
    phase_session_number: int,
    scheduled_date: date,
) -> Optional[ClassSession]:
    return db.exec(
        select(ClassSession).where(
            ClassSession.class_id == class_id,
            ClassSession.phase_number == phase_number,
            ClassSession.phase_session_number == phase_session_number,
            ClassSession.scheduled_date == scheduled_date,
        )
    ).first()


def _cancelled_dates_by_class(db: Session, class_ids: Iterable[int]) -> Dict[int, Set[date]]:
    rows = db.exec(
        select(ClassSession.class_id, ClassSession.scheduled_date).where(
            ClassSession.class_id.in_(list(class_ids)),
            ClassSession.status == SessionStatus.CANCELLED,
        )
    ).all()
    dates: Dict[int, Set[date]] = {}
    for class_id, scheduled_date in rows:
        dates.setdefault(class_id, set()).add(scheduled_date)
    return dates


def _skipped(draft: SessionDraft, reason: str) -> SkippedSession:
    return SkippedSession(
        phase_number=draft.phase_number,
        phase_session_number=draft.phase_session_number,
        scheduled_date=draft.scheduled_date,
        reason=reason,
    )


def _apply_draft(db: Session, draft: SessionDraft, cancelled_dates: Set[date]) -> str:
    """Insert or update one draft; returns the outcome name."""
    existing = get_session_by_natural_key(db, *draft.natural_key)
    now = get_school_time()

    if existing is None:
        if draft.scheduled_date in cancelled_dates:
            return "blocked"
        db.add(
            ClassSession(
                class_id=draft.class_id,
                phasesession_id=draft.phasesession_id,
                phase_number=draft.phase_number,
                phase_session_number=draft.phase_session_number,
                scheduled_date=draft.scheduled_date,
                scheduled_start_time=draft.scheduled_start_time,
                scheduled_end_time=draft.scheduled_end_time,
                original_teacher_id=draft.original_teacher_id,
                assigned_teacher_id=draft.assigned_teacher_id,
                status=SessionStatus.SCHEDULED,
                created_by=draft.created_by,
                created_at=now,
            )
        )
        db.flush()
        return "created"

    if existing.status in PROTECTED_STATUSES:
        return "unchanged"

    existing.phasesession_id = draft.phasesession_id
    existing.scheduled_start_time = draft.scheduled_start_time
    existing.scheduled_end_time = draft.scheduled_end_time
    existing.original_teacher_id = draft.original_teacher_id
    # A substitute picked by an operator outlives regeneration
    if existing.substitute_teacher_id is None:
        existing.assigned_teacher_id = draft.assigned_teacher_id
    existing.updated_at = now
    db.add(existing)
    db.flush()
    return "updated"


def upsert_sessions(db: Session, drafts: Sequence[SessionDraft]) -> UpsertSummary:
    """
    Idempotently store materialized sessions.

    Each draft is matched on its natural key (class, phase, session-in-phase,
    date): a match has its scheduling fields refreshed while status, actual
    times and notes are left alone; a miss is inserted as Scheduled. Sessions
    that are In Progress, Completed or Cancelled are left untouched, and no
    new session is placed on a date a cancelled session of the same class
    still holds.

    Every draft runs in its own SAVEPOINT so a failing row is logged and
    skipped without aborting the batch. Nothing is committed here.

    Args:
        db: Session whose transaction the batch joins
        drafts: Sessions as produced by the calendar expansion

    Returns:
        UpsertSummary: created/updated/unchanged counts and skipped rows
    """
    summary = UpsertSummary()
    if not drafts:
        return summary

    cancelled_dates = _cancelled_dates_by_class(db, {draft.class_id for draft in drafts})

    for draft in drafts:
        try:
            with db.begin_nested():
                outcome = _apply_draft(
                    db, draft, cancelled_dates.get(draft.class_id, set())
                )
        except SQLAlchemyError as exc:
            logger.warning(
                f"Skipping session {draft.natural_key}: {exc.__class__.__name__}: {exc}"
            )
            summary.skipped.append(_skipped(draft, f"storage error: {exc.__class__.__name__}"))
            continue

        if outcome == "created":
            summary.created += 1
        elif outcome == "updated":
            summary.updated += 1
        elif outcome == "unchanged":
            summary.unchanged += 1
        else:
            logger.info(f"Skipping session {draft.natural_key}: date held by a cancelled session")
            summary.skipped.append(_skipped(draft, "date is held by a cancelled session"))

    return summary


def get_class_sessions(
    db: Session, class_id: int, status: Optional[SessionStatus] = None
) -> List[ClassSession]:
    query = select(ClassSession).where(ClassSession.class_id == class_id)
    if status is not None:
        query = query.where(ClassSession.status == status)
    query = query.order_by(ClassSession.scheduled_date, ClassSession.scheduled_start_time)
    return db.exec(query).all()


def get_max_session_number(db: Session, class_id: int, phase_number: int) -> int:
    """Highest session-in-phase stored for (class, phase), 0 when there is none."""
    highest = db.exec(
        select(func.max(ClassSession.phase_session_number)).where(
            ClassSession.class_id == class_id,
            ClassSession.phase_number == phase_number,
        )
    ).one()
    return highest or 0


def get_class_session(db: Session, class_id: int, session_id: int) -> ClassSession:
    session = db.get(ClassSession, session_id)
    if session is None or session.class_id != class_id:
        raise RecordNotFoundError("Session", session_id)
    return session


def check_status_transition(current: SessionStatus, target: SessionStatus) -> None:
    if current == target:
        return
    if target not in ALLOWED_TRANSITIONS[current]:
        raise ScheduleValidationError(
            f"Cannot change session status from {current.value} to {target.value}",
            details={"from": current.value, "to": target.value},
        )


def update_class_session(
    db: Session, class_id: int, session_id: int, update: ClassSessionUpdate
) -> ClassSession:
    """
    Apply an operator edit to one session.

    Assigning a substitute teacher also makes them the assigned teacher
    unless the same edit names an assigned teacher explicitly.

    Raises:
        RecordNotFoundError: If the session or a referenced teacher is missing
        ScheduleValidationError: If the edit is empty or the status change
            is not allowed
    """
    db_session = get_class_session(db, class_id, session_id)
    session_data = update.model_dump(exclude_unset=True)
    if "status" in session_data and session_data["status"] is None:
        del session_data["status"]
    if not session_data:
        raise ScheduleValidationError("No fields to update")

    for field_name in ("assigned_teacher_id", "substitute_teacher_id"):
        teacher_id = session_data.get(field_name)
        if teacher_id is not None and db.get(Teacher, teacher_id) is None:
            raise RecordNotFoundError("Teacher", teacher_id)

    if session_data.get("status") is not None:
        check_status_transition(db_session.status, session_data["status"])

    if (
        session_data.get("substitute_teacher_id") is not None
        and "assigned_teacher_id" not in session_data
    ):
        session_data["assigned_teacher_id"] = session_data["substitute_teacher_id"]

    for key, value in session_data.items():
        setattr(db_session, key, value)
    db_session.updated_at = get_school_time()

    db.add(db_session)
    db.commit()
    db.refresh(db_session)
    return db_session
