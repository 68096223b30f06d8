from datetime import date, datetime, time
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from class_calendar.models.class_session import SessionStatus


class ClassSessionRead(BaseModel):
    classsession_id: int
    class_id: int
    phasesession_id: Optional[int] = None
    phase_number: int
    phase_session_number: int
    scheduled_date: date
    scheduled_start_time: time
    scheduled_end_time: time
    original_teacher_id: Optional[int] = None
    assigned_teacher_id: Optional[int] = None
    substitute_teacher_id: Optional[int] = None
    substitute_reason: Optional[str] = None
    status: SessionStatus
    actual_date: Optional[date] = None
    actual_start_time: Optional[time] = None
    actual_end_time: Optional[time] = None
    notes: Optional[str] = None
    suspension_id: Optional[int] = None
    makeup_for_session_id: Optional[int] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ClassSessionUpdate(BaseModel):
    """Operator edits of a single session."""

    assigned_teacher_id: Optional[int] = None
    substitute_teacher_id: Optional[int] = None
    substitute_reason: Optional[str] = None
    status: Optional[SessionStatus] = None
    actual_date: Optional[date] = None
    actual_start_time: Optional[time] = None
    actual_end_time: Optional[time] = None
    notes: Optional[str] = None


class SkippedSession(BaseModel):
    phase_number: int
    phase_session_number: int
    scheduled_date: date
    reason: str


class UpsertSummary(BaseModel):
    created: int = 0
    updated: int = 0
    # Existing sessions whose status protects them from regeneration
    unchanged: int = 0
    skipped: List[SkippedSession] = Field(default_factory=list)


class ReconcileSummary(UpsertSummary):
    deleted: int = 0
    expected: int = 0
