from datetime import date, datetime, time
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from class_calendar.models.school_class import ClassStatus
from class_calendar.schemas.class_session import ReconcileSummary
from class_calendar.utils.time_utils import Weekday


class DaySchedule(BaseModel):
    day_of_week: Weekday
    start_time: time
    end_time: time
    enabled: bool = True

    @model_validator(mode="after")
    def check_time_order(self):
        if self.end_time <= self.start_time:
            raise ValueError(
                f"{self.day_of_week.value}: end_time must be after start_time"
            )
        return self


def _reject_duplicate_days(days: List[DaySchedule]) -> List[DaySchedule]:
    seen = set()
    for day in days:
        if day.day_of_week in seen:
            raise ValueError(f"{day.day_of_week.value} appears more than once")
        seen.add(day.day_of_week)
    return days


class ClassBase(BaseModel):
    class_name: str = Field(max_length=100)
    branch_id: Optional[int] = None
    room_id: Optional[int] = None
    program_id: int
    teacher_id: Optional[int] = None
    start_date: date
    end_date: Optional[date] = None


class ClassCreate(ClassBase):
    days_of_week: List[DaySchedule] = Field(default_factory=list)

    @field_validator("days_of_week")
    @classmethod
    def unique_days(cls, days):
        return _reject_duplicate_days(days)


class ClassUpdate(BaseModel):
    class_name: Optional[str] = None
    branch_id: Optional[int] = None
    room_id: Optional[int] = None
    program_id: Optional[int] = None
    teacher_id: Optional[int] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[ClassStatus] = None
    # Replaces the weekly pattern wholesale when given
    days_of_week: Optional[List[DaySchedule]] = None

    @field_validator("days_of_week")
    @classmethod
    def unique_days(cls, days):
        if days is None:
            return days
        return _reject_duplicate_days(days)


class RoomScheduleRead(BaseModel):
    day_of_week: Weekday
    start_time: time
    end_time: time
    room_id: Optional[int] = None

    model_config = ConfigDict(from_attributes=True)


class ClassRead(ClassBase):
    class_id: int
    status: ClassStatus
    created_at: datetime
    schedules: List[RoomScheduleRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class ClassScheduleResult(BaseModel):
    """A class after a write, with the outcome of its session generation."""

    school_class: ClassRead
    sessions: Optional[ReconcileSummary] = None
