from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from typing import List, Optional

from class_calendar.dependencies import (
    Operator,
    get_current_admin,
    get_current_operator,
    get_db,
)
from class_calendar.models.class_session import SessionStatus
from class_calendar.models.school_class import ClassStatus
from class_calendar.schemas.class_session import (
    ClassSessionRead,
    ClassSessionUpdate,
    ReconcileSummary,
)
from class_calendar.schemas.conflict import (
    ConflictReport,
    RoomConflictCheck,
    TeacherConflictCheck,
)
from class_calendar.schemas.school_class import (
    ClassCreate,
    ClassRead,
    ClassScheduleResult,
    ClassUpdate,
)
from class_calendar.crud.class_session import get_class_sessions, update_class_session
from class_calendar.crud.school_class import delete_class, get_class, get_classes
from class_calendar.services.class_service import (
    create_class,
    find_conflicts,
    to_day_slots,
    update_class,
)
from class_calendar.services.reconciliation import reconcile_class_sessions


router = APIRouter(
    prefix="/classes",
    tags=["classes"],
    responses={404: {"description": "Not found"}},
)


@router.post(
    "/", response_model=ClassScheduleResult, status_code=status.HTTP_201_CREATED
)
def create_class_endpoint(
    school_class: ClassCreate,
    db: Session = Depends(get_db),
    current_admin: Operator = Depends(get_current_admin),
):
    """
    Create a class and generate all of its sessions.

    Every enabled weekday of the weekly pattern is checked against the rooms
    and teachers already in use. When nothing collides, the class, its
    weekly pattern and its sessions (phase count times sessions per phase of
    the program's curriculum, skipping holidays) are stored together.

    Args:
        school_class: Class fields and weekly pattern
        db: Database session dependency
        current_admin: Current authenticated admin operator

    Returns:
        ClassScheduleResult: The class and the generation summary. Sessions
        that could not be stored are listed under `sessions.skipped`.

    Raises:
        ScheduleConflictError: 409 with the colliding class/session
        RecordNotFoundError: 404 if program, room or teacher is missing

    Access Level: ADMIN only
    """
    db_class, summary = create_class(db, school_class, current_admin.operator_id)
    return ClassScheduleResult(
        school_class=ClassRead.model_validate(db_class), sessions=summary
    )


@router.post("/check-room-conflicts", response_model=ConflictReport)
def check_room_conflicts_endpoint(
    check: RoomConflictCheck,
    db: Session = Depends(get_db),
    current_operator: Operator = Depends(get_current_operator),
):
    """
    Report, without writing anything, which enabled weekdays of a pattern
    collide with active classes in the room.

    Access Level: any authenticated operator
    """
    return find_conflicts(
        db,
        to_day_slots(check.days_of_week),
        room_id=check.room_id,
        exclude_class_id=check.exclude_class_id,
    )


@router.post("/check-teacher-conflicts", response_model=ConflictReport)
def check_teacher_conflicts_endpoint(
    check: TeacherConflictCheck,
    db: Session = Depends(get_db),
    current_operator: Operator = Depends(get_current_operator),
):
    """
    Report, for each teacher, scheduled or completed sessions that fall on
    the same weekday and overlap a slot of the pattern.

    Access Level: any authenticated operator
    """
    return find_conflicts(
        db,
        to_day_slots(check.days_of_week),
        teacher_ids=check.teacher_ids,
        exclude_class_id=check.exclude_class_id,
    )


@router.get("/", response_model=List[ClassRead])
def read_classes_endpoint(
    skip: int = 0,
    limit: int = 100,
    branch_id: Optional[int] = None,
    room_id: Optional[int] = None,
    teacher_id: Optional[int] = None,
    class_status: Optional[ClassStatus] = None,
    db: Session = Depends(get_db),
):
    return get_classes(
        db,
        skip=skip,
        limit=limit,
        branch_id=branch_id,
        room_id=room_id,
        teacher_id=teacher_id,
        status=class_status,
    )


@router.get("/{class_id}", response_model=ClassRead)
def read_class_endpoint(class_id: int, db: Session = Depends(get_db)):
    return get_class(db, class_id)


@router.patch("/{class_id}", response_model=ClassScheduleResult)
def update_class_endpoint(
    class_id: int,
    class_update: ClassUpdate,
    db: Session = Depends(get_db),
    current_admin: Operator = Depends(get_current_admin),
):
    """
    Update a class.

    A new `days_of_week` replaces the weekly pattern wholesale. Changing the
    pattern, start date, teacher or program regenerates the sessions:
    scheduled sessions move to the new dates, sessions that already
    happened or were cancelled are kept as they are.

    Args:
        class_id: Class to update
        class_update: Fields to change
        db: Database session dependency
        current_admin: Current authenticated admin operator

    Returns:
        ClassScheduleResult: The updated class, and the reconcile summary
        when sessions were regenerated

    Raises:
        ScheduleConflictError: 409 if the new room/teacher/pattern collides
            with another class

    Access Level: ADMIN only
    """
    db_class, summary = update_class(db, class_id, class_update, current_admin.operator_id)
    return ClassScheduleResult(
        school_class=ClassRead.model_validate(db_class), sessions=summary
    )


@router.delete("/{class_id}")
def delete_class_endpoint(
    class_id: int,
    db: Session = Depends(get_db),
    current_admin: Operator = Depends(get_current_admin),
):
    """
    Delete a class together with its weekly pattern and all of its sessions.

    Access Level: ADMIN only
    """
    delete_class(db, class_id)
    return {"message": "Class successfully deleted"}


@router.post("/{class_id}/reconcile", response_model=ReconcileSummary)
def reconcile_class_endpoint(
    class_id: int,
    db: Session = Depends(get_db),
    current_admin: Operator = Depends(get_current_admin),
):
    """
    Regenerate a class's sessions from its current configuration.

    Useful after holidays or curriculum templates change. Only sessions
    still in Scheduled status are moved or removed.

    Access Level: ADMIN only
    """
    return reconcile_class_sessions(db, class_id, current_admin.operator_id)


@router.get("/{class_id}/sessions", response_model=List[ClassSessionRead])
def read_class_sessions_endpoint(
    class_id: int,
    session_status: Optional[SessionStatus] = None,
    db: Session = Depends(get_db),
):
    get_class(db, class_id)
    return get_class_sessions(db, class_id, status=session_status)


@router.patch("/{class_id}/sessions/{session_id}", response_model=ClassSessionRead)
def update_class_session_endpoint(
    class_id: int,
    session_id: int,
    session_update: ClassSessionUpdate,
    db: Session = Depends(get_db),
    current_admin: Operator = Depends(get_current_admin),
):
    """
    Edit one session: teacher assignment, substitute, status, actual
    date/times or notes.

    Status changes follow the session lifecycle: Scheduled or Rescheduled
    sessions may start, complete or be cancelled; In Progress sessions may
    complete; Completed and Cancelled are final. Rescheduled is only set by
    suspensions.

    Raises:
        ScheduleValidationError: 400 on an empty edit or a disallowed
            status change

    Access Level: ADMIN only
    """
    return update_class_session(db, class_id, session_id, session_update)
