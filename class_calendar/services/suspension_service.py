"""
Suspension processing: cancel a batch of scheduled sessions and place the
operator's makeup sessions after the end of their phase.

All preconditions are checked before anything is written, and the writes
(suspension record, cancellations, makeups) commit together or not at all.
Makeup slots are taken as given; they are not run through conflict
detection.
"""

import logging
from datetime import time
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from class_calendar.crud.class_session import get_max_session_number
from class_calendar.errors import (
    RecordNotFoundError,
    ScheduleValidationError,
    TransactionFailure,
)
from class_calendar.models.class_session import ClassSession, SessionStatus
from class_calendar.models.suspension import SuspensionPeriod, SuspensionStatus
from class_calendar.schemas.class_session import ClassSessionRead
from class_calendar.schemas.suspension import (
    MakeupSchedule,
    SuspensionCreate,
    SuspensionDetail,
    SuspensionRead,
    SuspensionResult,
)
from class_calendar.services.session_calculation import fixed_length_end
from class_calendar.utils.time_utils import duration_between, get_school_time

logger = logging.getLogger(__name__)

SuspensionHook = Callable[[SuspensionResult], None]


def _append_note(existing: Optional[str], note: str) -> str:
    if existing:
        return f"{existing}\n{note}"
    return note


def _makeup_end_time(original: ClassSession, makeup: MakeupSchedule) -> time:
    if makeup.end_time is not None:
        return makeup.end_time
    length = duration_between(original.scheduled_start_time, original.scheduled_end_time)
    return fixed_length_end(makeup.start_time, length.total_seconds() / 3600)


def _validate_batch(
    db: Session, session_ids: Sequence[int], makeups: Sequence[MakeupSchedule]
) -> Tuple[List[ClassSession], Dict[int, MakeupSchedule], Dict[int, time]]:
    """
    Load the sessions to cancel, pair them with their makeups and work out
    each makeup's end time, or raise.
    """
    if not session_ids:
        raise ScheduleValidationError("At least one session is required")
    if len(set(session_ids)) != len(session_ids):
        raise ScheduleValidationError("Session ids must not repeat")

    if len(makeups) != len(session_ids):
        raise ScheduleValidationError(
            "Each cancelled session needs exactly one makeup schedule",
            details={"sessions": len(session_ids), "makeup_schedules": len(makeups)},
        )

    makeup_by_session = {makeup.session_id: makeup for makeup in makeups}
    if set(makeup_by_session) != set(session_ids):
        raise ScheduleValidationError(
            "Makeup schedules must be paired with the cancelled sessions by session id",
            details={
                "unpaired_sessions": sorted(set(session_ids) - set(makeup_by_session)),
                "unknown_makeups": sorted(set(makeup_by_session) - set(session_ids)),
            },
        )

    sessions = []
    for session_id in session_ids:
        session = db.get(ClassSession, session_id)
        if session is None:
            raise RecordNotFoundError("Session", session_id)
        sessions.append(session)

    not_scheduled = [s.classsession_id for s in sessions if s.status != SessionStatus.SCHEDULED]
    if not_scheduled:
        raise ScheduleValidationError(
            "Only scheduled sessions can be suspended",
            details={"session_ids": not_scheduled},
        )

    phases = sorted({session.phase_number for session in sessions})
    if len(phases) > 1:
        raise ScheduleValidationError(
            "All suspended sessions must belong to the same phase",
            details={"phases": phases},
        )

    end_times = {
        session.classsession_id: _makeup_end_time(
            session, makeup_by_session[session.classsession_id]
        )
        for session in sessions
    }
    return sessions, makeup_by_session, end_times


def suspend_sessions(
    db: Session,
    suspension: SuspensionCreate,
    operator_id: Optional[int] = None,
    on_committed: Optional[SuspensionHook] = None,
) -> SuspensionResult:
    """
    Cancel the listed sessions and create their makeups under one suspension.

    Each makeup continues its phase: it is numbered one past the highest
    session-in-phase stored for its (class, phase), gets status Rescheduled,
    and shares the suspension id with the session it replaces. It also
    points back at that session through makeup_for_session_id. The class's
    end date is not touched.

    Args:
        db: Database session
        suspension: Suspension metadata, session ids and paired makeup slots
        operator_id: Stamped as created_by on the suspension and the makeups
        on_committed: Side effect run after the commit (e.g. notifications).
            Its failure is logged and does not undo the suspension.

    Returns:
        SuspensionResult: suspension id, counts and the new makeup session ids

    Raises:
        ScheduleValidationError: If any precondition fails; nothing is written
        RecordNotFoundError: If a session id does not exist
        TransactionFailure: If the database rejects the unit of work
    """
    sessions, makeup_by_session, end_times = _validate_batch(
        db, suspension.session_ids, suspension.makeup_schedules
    )
    now = get_school_time()

    try:
        db_suspension = SuspensionPeriod(
            suspension_name=suspension.suspension_name,
            branch_id=suspension.branch_id,
            reason=suspension.reason,
            description=suspension.description,
            start_date=min(session.scheduled_date for session in sessions),
            end_date=max(session.scheduled_date for session in sessions),
            status=SuspensionStatus.ACTIVE,
            created_by=operator_id,
            created_at=now,
        )
        db.add(db_suspension)
        db.flush()

        cancel_note = (
            f"Cancelled due to: {suspension.suspension_name} ({suspension.reason.value})"
        )
        makeup_note = (
            f"Make-up session due to suspension: {suspension.suspension_name} "
            f"({suspension.reason.value})"
        )

        next_number: Dict[Tuple[int, int], int] = {}
        makeup_sessions = []
        for session in sessions:
            session.status = SessionStatus.CANCELLED
            session.suspension_id = db_suspension.suspension_id
            session.notes = _append_note(session.notes, cancel_note)
            session.updated_at = now
            db.add(session)

            key = (session.class_id, session.phase_number)
            if key not in next_number:
                next_number[key] = get_max_session_number(db, *key) + 1
            makeup = makeup_by_session[session.classsession_id]

            makeup_session = ClassSession(
                class_id=session.class_id,
                phasesession_id=None,
                phase_number=session.phase_number,
                phase_session_number=next_number[key],
                scheduled_date=makeup.scheduled_date,
                scheduled_start_time=makeup.start_time,
                scheduled_end_time=end_times[session.classsession_id],
                original_teacher_id=session.original_teacher_id,
                assigned_teacher_id=session.assigned_teacher_id,
                status=SessionStatus.RESCHEDULED,
                notes=makeup_note,
                suspension_id=db_suspension.suspension_id,
                makeup_for_session_id=session.classsession_id,
                created_by=operator_id,
                created_at=now,
            )
            next_number[key] += 1
            db.add(makeup_session)
            makeup_sessions.append(makeup_session)

        db.flush()
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Suspension '{suspension.suspension_name}' failed: {exc}")
        raise TransactionFailure("Failed to process suspension; no sessions were changed")

    result = SuspensionResult(
        suspension_id=db_suspension.suspension_id,
        cancelled_count=len(sessions),
        makeup_count=len(makeup_sessions),
        makeup_session_ids=[makeup.classsession_id for makeup in makeup_sessions],
    )
    logger.info(
        f"Suspension {result.suspension_id} cancelled {result.cancelled_count} sessions "
        f"and created {result.makeup_count} makeups"
    )

    if on_committed is not None:
        try:
            on_committed(result)
        except Exception:
            logger.exception(
                f"Post-commit step failed for suspension {result.suspension_id}"
            )

    return result


def get_suspension(db: Session, suspension_id: int) -> SuspensionPeriod:
    suspension = db.get(SuspensionPeriod, suspension_id)
    if suspension is None:
        raise RecordNotFoundError("Suspension", suspension_id)
    return suspension


def get_suspension_detail(db: Session, suspension_id: int) -> SuspensionDetail:
    """A suspension with its cancelled originals and its makeup sessions."""
    suspension = get_suspension(db, suspension_id)
    sessions = db.exec(
        select(ClassSession)
        .where(ClassSession.suspension_id == suspension_id)
        .order_by(ClassSession.scheduled_date, ClassSession.scheduled_start_time)
    ).all()

    cancelled, makeups = [], []
    for session in sessions:
        if session.makeup_for_session_id is not None:
            makeups.append(ClassSessionRead.model_validate(session))
        else:
            cancelled.append(ClassSessionRead.model_validate(session))

    return SuspensionDetail(
        **SuspensionRead.model_validate(suspension).model_dump(),
        cancelled_sessions=cancelled,
        makeup_sessions=makeups,
    )


def list_suspensions(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    branch_id: Optional[int] = None,
    status: Optional[SuspensionStatus] = None,
    class_id: Optional[int] = None,
) -> List[SuspensionPeriod]:
    query = select(SuspensionPeriod)

    if branch_id is not None:
        query = query.where(SuspensionPeriod.branch_id == branch_id)
    if status is not None:
        query = query.where(SuspensionPeriod.status == status)
    if class_id is not None:
        affected = select(ClassSession.suspension_id).where(
            ClassSession.class_id == class_id,
            ClassSession.suspension_id.is_not(None),
        )
        query = query.where(SuspensionPeriod.suspension_id.in_(affected))

    query = query.order_by(SuspensionPeriod.created_at.desc(), SuspensionPeriod.suspension_id.desc())
    return db.exec(query.offset(skip).limit(limit)).all()


def update_suspension_status(
    db: Session, suspension_id: int, status: SuspensionStatus
) -> SuspensionPeriod:
    """Record-keeping only: sessions cancelled by the suspension stay cancelled."""
    suspension = get_suspension(db, suspension_id)
    suspension.status = status
    suspension.updated_at = get_school_time()
    db.add(suspension)
    db.commit()
    db.refresh(suspension)
    return suspension
