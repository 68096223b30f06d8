from enum import Enum
from sqlmodel import SQLModel, Field, Relationship
from typing import TYPE_CHECKING, Optional, List
from datetime import datetime, date, time

from class_calendar.utils.time_utils import Weekday

if TYPE_CHECKING:
    from class_calendar.models.curriculum import Program
    from class_calendar.models.room import Room
    from class_calendar.models.class_session import ClassSession


class ClassStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class SchoolClass(SQLModel, table=True):
    class_id: Optional[int] = Field(default=None, primary_key=True)
    class_name: str = Field(max_length=100)
    branch_id: Optional[int] = Field(default=None, index=True)
    room_id: Optional[int] = Field(default=None, foreign_key="room.room_id")
    program_id: int = Field(foreign_key="program.program_id")
    teacher_id: Optional[int] = Field(default=None, foreign_key="teacher.teacher_id")
    start_date: date = Field()
    end_date: Optional[date] = Field(default=None)
    status: ClassStatus = Field(default=ClassStatus.ACTIVE)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    program: Optional["Program"] = Relationship(back_populates="classes")
    schedules: List["RoomSchedule"] = Relationship(
        back_populates="school_class",
        sa_relationship_kwargs={
            "cascade": "all, delete-orphan",
            "order_by": "RoomSchedule.roomsched_id",
        },
    )
    sessions: List["ClassSession"] = Relationship(
        back_populates="school_class",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class RoomSchedule(SQLModel, table=True):
    """One enabled weekday of a class's weekly pattern."""

    roomsched_id: Optional[int] = Field(default=None, primary_key=True)
    class_id: int = Field(foreign_key="schoolclass.class_id", index=True)
    room_id: Optional[int] = Field(default=None, foreign_key="room.room_id", index=True)
    day_of_week: Weekday = Field()
    start_time: time = Field()
    end_time: time = Field()

    school_class: Optional[SchoolClass] = Relationship(back_populates="schedules")
    room: Optional["Room"] = Relationship(back_populates="schedules")
