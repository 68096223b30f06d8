import logging
from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from typing import List, Optional

from class_calendar.dependencies import Operator, get_current_admin, get_db
from class_calendar.models.suspension import SuspensionStatus
from class_calendar.schemas.suspension import (
    SuspensionCreate,
    SuspensionDetail,
    SuspensionRead,
    SuspensionResult,
    SuspensionStatusUpdate,
)
from class_calendar.services.suspension_service import (
    get_suspension_detail,
    list_suspensions,
    suspend_sessions,
    update_suspension_status,
)

logger = logging.getLogger(__name__)


router = APIRouter(
    prefix="/suspensions",
    tags=["suspensions"],
    responses={404: {"description": "Not found"}},
)


def log_suspension(result: SuspensionResult) -> None:
    """Post-commit hook; the place to notify students and teachers."""
    logger.info(
        f"Suspension {result.suspension_id} ready for notification "
        f"({result.makeup_count} makeup sessions)"
    )


@router.post("/", response_model=SuspensionResult, status_code=status.HTTP_201_CREATED)
def create_suspension_endpoint(
    suspension: SuspensionCreate,
    db: Session = Depends(get_db),
    current_admin: Operator = Depends(get_current_admin),
):
    """
    Suspend a batch of sessions and schedule their makeups.

    Every listed session must be Scheduled and all must belong to the same
    phase. `makeup_schedules` must name each listed session exactly once;
    the makeups are placed as given and are not conflict-checked. Each makeup
    is numbered after the last session of its phase and marked Rescheduled.

    Args:
        suspension: Name, reason, session ids and makeup slots
        db: Database session dependency
        current_admin: Current authenticated admin operator

    Returns:
        SuspensionResult: Suspension id and what was cancelled and created

    Raises:
        ScheduleValidationError: 400 if any precondition fails; no session
            is changed in that case
        RecordNotFoundError: 404 if a session id does not exist

    Access Level: ADMIN only
    """
    return suspend_sessions(
        db,
        suspension,
        operator_id=current_admin.operator_id,
        on_committed=log_suspension,
    )


@router.get("/", response_model=List[SuspensionRead])
def read_suspensions_endpoint(
    skip: int = 0,
    limit: int = 100,
    branch_id: Optional[int] = None,
    suspension_status: Optional[SuspensionStatus] = None,
    class_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    return list_suspensions(
        db,
        skip=skip,
        limit=limit,
        branch_id=branch_id,
        status=suspension_status,
        class_id=class_id,
    )


@router.get("/{suspension_id}", response_model=SuspensionDetail)
def read_suspension_endpoint(suspension_id: int, db: Session = Depends(get_db)):
    """Retrieve a suspension with the sessions it cancelled and its makeups."""
    return get_suspension_detail(db, suspension_id)


@router.patch("/{suspension_id}/status", response_model=SuspensionRead)
def update_suspension_status_endpoint(
    suspension_id: int,
    status_update: SuspensionStatusUpdate,
    db: Session = Depends(get_db),
    current_admin: Operator = Depends(get_current_admin),
):
    """
    Mark a suspension Active or Cancelled.

    This only changes the suspension record. Cancelled sessions stay
    cancelled and makeups stay scheduled.

    Access Level: ADMIN only
    """
    return update_suspension_status(db, suspension_id, status_update.status)
