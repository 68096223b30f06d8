from enum import Enum
from sqlmodel import SQLModel, Field, Relationship, UniqueConstraint
from typing import TYPE_CHECKING, Optional
from datetime import datetime, date, time

if TYPE_CHECKING:
    from class_calendar.models.school_class import SchoolClass
    from class_calendar.models.suspension import SuspensionPeriod


class SessionStatus(str, Enum):
    SCHEDULED = "Scheduled"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    CANCELLED = "Cancelled"
    RESCHEDULED = "Rescheduled"


class ClassSession(SQLModel, table=True):
    # (class, phase, session-in-phase, date) is the natural key of a session
    __table_args__ = (
        UniqueConstraint(
            "class_id", "phase_number", "phase_session_number", "scheduled_date",
            name="uq_classsession_natural_key",
        ),
    )

    classsession_id: Optional[int] = Field(default=None, primary_key=True)
    class_id: int = Field(foreign_key="schoolclass.class_id", index=True)
    phasesession_id: Optional[int] = Field(
        default=None, foreign_key="phasesession.phasesession_id"
    )
    phase_number: int = Field()
    phase_session_number: int = Field()
    scheduled_date: date = Field(index=True)
    scheduled_start_time: time = Field()
    scheduled_end_time: time = Field()
    original_teacher_id: Optional[int] = Field(
        default=None, foreign_key="teacher.teacher_id", index=True
    )
    assigned_teacher_id: Optional[int] = Field(default=None, foreign_key="teacher.teacher_id")
    substitute_teacher_id: Optional[int] = Field(
        default=None, foreign_key="teacher.teacher_id"
    )
    substitute_reason: Optional[str] = Field(default=None)
    status: SessionStatus = Field(default=SessionStatus.SCHEDULED)
    actual_date: Optional[date] = Field(default=None)
    actual_start_time: Optional[time] = Field(default=None)
    actual_end_time: Optional[time] = Field(default=None)
    notes: Optional[str] = Field(default=None)
    suspension_id: Optional[int] = Field(
        default=None, foreign_key="suspensionperiod.suspension_id", index=True
    )
    # Set on makeups: the cancelled session this one replaces
    makeup_for_session_id: Optional[int] = Field(
        default=None, foreign_key="classsession.classsession_id", ondelete="SET NULL"
    )
    created_by: Optional[int] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = Field(default=None)

    school_class: Optional["SchoolClass"] = Relationship(back_populates="sessions")
    suspension: Optional["SuspensionPeriod"] = Relationship(back_populates="sessions")

    @property
    def natural_key(self) -> tuple:
        return (
            self.class_id,
            self.phase_number,
            self.phase_session_number,
            self.scheduled_date,
        )
