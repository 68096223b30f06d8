from datetime import date
from typing import FrozenSet, Optional

import holidays
from sqlalchemy import or_
from sqlmodel import Session, select

from class_calendar.errors import RecordNotFoundError, ScheduleValidationError
from class_calendar.models.holiday import Holiday
from class_calendar.schemas.holiday import HolidayCreate
from class_calendar.utils.time_utils import get_school_time


def create_holiday(db: Session, holiday: HolidayCreate) -> Holiday:
    db_holiday = Holiday(**holiday.model_dump(), created_at=get_school_time())
    db.add(db_holiday)
    db.commit()
    db.refresh(db_holiday)
    return db_holiday


def _holidays_in_range(
    start_date: date, end_date: date, branch_id: Optional[int]
):
    if start_date > end_date:
        raise ScheduleValidationError("start_date cannot be after end_date")

    query = select(Holiday).where(
        Holiday.holiday_date >= start_date, Holiday.holiday_date <= end_date
    )
    # Global holidays always apply; branch holidays only to their branch
    if branch_id is None:
        query = query.where(Holiday.branch_id.is_(None))
    else:
        query = query.where(
            or_(Holiday.branch_id.is_(None), Holiday.branch_id == branch_id)
        )
    return query


def get_holidays(
    db: Session, start_date: date, end_date: date, branch_id: Optional[int] = None
) -> list[Holiday]:
    query = _holidays_in_range(start_date, end_date, branch_id)
    return db.exec(query.order_by(Holiday.holiday_date, Holiday.name)).all()




def get_national_holidays(
    start_date: date, end_date: date, country: Optional[str]
) -> FrozenSet[date]:
    """Public holidays of `country` between the two dates, inclusive."""
    if not country:
        return frozenset()
    calendar = holidays.country_holidays(
        country, years=range(start_date.year, end_date.year + 1)
    )
    return frozenset(day for day in calendar if start_date <= day <= end_date)


def get_holiday_set(
    db: Session,
    start_date: date,
    end_date: date,
    branch_id: Optional[int] = None,
    country: Optional[str] = None,
) -> FrozenSet[date]:
    """
    Dates in [start_date, end_date] on which a class of `branch_id` never meets.

    Stored global and branch holidays are merged with the public holidays of
    `country` when one is given.
    """
    stored = frozenset(
        holiday.holiday_date for holiday in get_holidays(db, start_date, end_date, branch_id)
    )
    return stored | get_national_holidays(start_date, end_date, country)


def delete_holiday(db: Session, holiday_id: int) -> Holiday:
    db_holiday = db.get(Holiday, holiday_id)
    if db_holiday is None:
        raise RecordNotFoundError("Holiday", holiday_id)
    db.delete(db_holiday)
    db.commit()
    return db_holiday
