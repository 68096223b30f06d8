from enum import Enum
from sqlmodel import SQLModel, Field, Relationship
from typing import TYPE_CHECKING, Optional, List
from datetime import datetime, date

if TYPE_CHECKING:
    from class_calendar.models.class_session import ClassSession


class SuspensionReason(str, Enum):
    TYPHOON = "Typhoon"
    EARTHQUAKE = "Earthquake"
    FLOOD = "Flood"
    HOLIDAY = "Holiday"
    GOVERNMENT_MANDATE = "Government Mandate"
    OTHER = "Other"


class SuspensionStatus(str, Enum):
    ACTIVE = "Active"
    CANCELLED = "Cancelled"


class SuspensionPeriod(SQLModel, table=True):
    suspension_id: Optional[int] = Field(default=None, primary_key=True)
    suspension_name: str = Field(max_length=255)
    branch_id: Optional[int] = Field(default=None, index=True)
    reason: SuspensionReason = Field()
    description: Optional[str] = Field(default=None)
    # Range covered by the cancelled sessions
    start_date: date = Field()
    end_date: date = Field()
    status: SuspensionStatus = Field(default=SuspensionStatus.ACTIVE)
    created_by: Optional[int] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = Field(default=None)

    # Both the cancelled originals and their makeups carry this suspension_id
    sessions: List["ClassSession"] = Relationship(back_populates="suspension")
