from datetime import date, time
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from class_calendar.schemas.school_class import DaySchedule
from class_calendar.utils.time_utils import Weekday


class ConflictingClass(BaseModel):
    class_id: int
    class_name: Optional[str] = None
    program_name: Optional[str] = None


class RoomConflict(BaseModel):
    room_id: int
    day_of_week: Weekday
    start_time: time
    end_time: time
    conflicting_class: ConflictingClass
    existing_start_time: time
    existing_end_time: time
    message: str


class ConflictingSession(BaseModel):
    classsession_id: int
    class_id: int
    class_name: Optional[str] = None
    program_name: Optional[str] = None
    scheduled_date: date
    scheduled_start_time: time
    scheduled_end_time: time


class TeacherConflict(BaseModel):
    teacher_id: int
    day_of_week: Weekday
    start_time: time
    end_time: time
    conflicting_session: ConflictingSession
    message: str


class RoomConflictCheck(BaseModel):
    room_id: int
    days_of_week: List[DaySchedule]
    exclude_class_id: Optional[int] = None


class TeacherConflictCheck(BaseModel):
    teacher_ids: List[int] = Field(min_length=1)
    days_of_week: List[DaySchedule]
    exclude_class_id: Optional[int] = None


class ConflictReport(BaseModel):
    has_conflict: bool = False
    room_conflicts: List[RoomConflict] = Field(default_factory=list)
    teacher_conflicts: List[TeacherConflict] = Field(default_factory=list)

    @model_validator(mode="after")
    def derive_flag(self):
        self.has_conflict = bool(self.room_conflicts or self.teacher_conflicts)
        return self
