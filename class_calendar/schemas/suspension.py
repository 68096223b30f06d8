from datetime import date, datetime, time
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from class_calendar.models.suspension import SuspensionReason, SuspensionStatus
from class_calendar.schemas.class_session import ClassSessionRead


class MakeupSchedule(BaseModel):
    """Makeup slot for one cancelled session, chosen by the operator."""

    session_id: int
    scheduled_date: date
    start_time: time
    # Omitted: keep the cancelled session's length
    end_time: Optional[time] = None

    @model_validator(mode="after")
    def check_time_order(self):
        if self.end_time is not None and self.end_time <= self.start_time:
            raise ValueError("end_time must be after start_time")
        return self


class SuspensionCreate(BaseModel):
    suspension_name: str = Field(min_length=1, max_length=255)
    reason: SuspensionReason
    description: Optional[str] = None
    branch_id: Optional[int] = None
    session_ids: List[int] = Field(min_length=1)
    makeup_schedules: List[MakeupSchedule] = Field(default_factory=list)


class SuspensionStatusUpdate(BaseModel):
    status: SuspensionStatus


class SuspensionRead(BaseModel):
    suspension_id: int
    suspension_name: str
    branch_id: Optional[int] = None
    reason: SuspensionReason
    description: Optional[str] = None
    start_date: date
    end_date: date
    status: SuspensionStatus
    created_by: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SuspensionDetail(SuspensionRead):
    cancelled_sessions: List[ClassSessionRead] = Field(default_factory=list)
    makeup_sessions: List[ClassSessionRead] = Field(default_factory=list)


class SuspensionResult(BaseModel):
    suspension_id: int
    cancelled_count: int
    makeup_count: int
    makeup_session_ids: List[int] = Field(default_factory=list)
