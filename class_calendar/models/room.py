from sqlmodel import SQLModel, Field, Relationship
from typing import Optional, List, TYPE_CHECKING

if TYPE_CHECKING:
    from class_calendar.models.school_class import RoomSchedule


class Room(SQLModel, table=True):
    room_id: Optional[int] = Field(default=None, primary_key=True)
    room_name: str = Field(max_length=100)
    branch_id: Optional[int] = Field(default=None, index=True)
    capacity: Optional[int] = Field(default=None, gt=0)

    schedules: List["RoomSchedule"] = Relationship(back_populates="room")
