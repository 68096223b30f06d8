from datetime import date
from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from typing import List, Optional

from class_calendar.dependencies import get_db, get_current_admin
from class_calendar.schemas.holiday import HolidayCreate, HolidayRead
from class_calendar.crud.holiday import create_holiday, delete_holiday, get_holidays


router = APIRouter(
    prefix="/holidays",
    tags=["holidays"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=HolidayRead, status_code=status.HTTP_201_CREATED)
def create_holiday_endpoint(
    holiday: HolidayCreate,
    db: Session = Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    """
    Add a holiday, school-wide or for one branch.

    Holidays only affect sessions generated afterwards: reconcile the
    affected classes to move their sessions off the new date.

    Args:
        holiday: Date, name and optional branch scope
        db: Database session dependency
        current_admin: Current authenticated admin operator

    Returns:
        HolidayRead: The stored holiday

    Access Level: ADMIN only
    """
    return create_holiday(db=db, holiday=holiday)


@router.get("/", response_model=List[HolidayRead])
def read_holidays_endpoint(
    start_date: date,
    end_date: date,
    branch_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    """
    List holidays between two dates, inclusive.

    Without `branch_id` only school-wide holidays are returned; with it,
    school-wide holidays plus those of that branch.

    Access Level: PUBLIC
    """
    return get_holidays(db, start_date=start_date, end_date=end_date, branch_id=branch_id)


@router.delete("/{holiday_id}")
def delete_holiday_endpoint(
    holiday_id: int,
    db: Session = Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    delete_holiday(db, holiday_id=holiday_id)
    return {"message": "Holiday successfully deleted"}
