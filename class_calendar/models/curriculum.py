from sqlmodel import SQLModel, Field, Relationship, UniqueConstraint
from typing import TYPE_CHECKING, Optional, List
from datetime import datetime

if TYPE_CHECKING:
    from class_calendar.models.school_class import SchoolClass


class Curriculum(SQLModel, table=True):
    curriculum_id: Optional[int] = Field(default=None, primary_key=True)
    curriculum_name: str = Field(max_length=100)
    number_of_phase: int = Field(ge=1)
    number_of_session_per_phase: int = Field(ge=1)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    phase_sessions: List["PhaseSession"] = Relationship(back_populates="curriculum")
    programs: List["Program"] = Relationship(back_populates="curriculum")


class PhaseSession(SQLModel, table=True):
    """Curriculum template for one (phase, session-in-phase) slot."""

    __table_args__ = (
        UniqueConstraint(
            "curriculum_id", "phase_number", "phase_session_number",
            name="uq_phasesession_slot",
        ),
    )

    phasesession_id: Optional[int] = Field(default=None, primary_key=True)
    curriculum_id: int = Field(foreign_key="curriculum.curriculum_id", ondelete="CASCADE")
    phase_number: int = Field(ge=1)
    phase_session_number: int = Field(ge=1)
    topic: Optional[str] = Field(default=None, max_length=255)
    goal: Optional[str] = Field(default=None)

    curriculum: Optional[Curriculum] = Relationship(back_populates="phase_sessions")


class Program(SQLModel, table=True):
    program_id: Optional[int] = Field(default=None, primary_key=True)
    program_name: str = Field(max_length=100)
    curriculum_id: int = Field(foreign_key="curriculum.curriculum_id")
    # Fixed length applied to every generated session, in hours
    session_duration_hours: Optional[float] = Field(default=None, gt=0)

    curriculum: Optional[Curriculum] = Relationship(back_populates="programs")
    classes: List["SchoolClass"] = Relationship(back_populates="program")
