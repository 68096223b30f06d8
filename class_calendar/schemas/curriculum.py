from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime


class PhaseSessionCreate(BaseModel):
    phase_number: int = Field(ge=1)
    phase_session_number: int = Field(ge=1)
    topic: Optional[str] = Field(default=None, max_length=255)
    goal: Optional[str] = None


class PhaseSessionRead(PhaseSessionCreate):
    phasesession_id: int
    curriculum_id: int

    model_config = ConfigDict(from_attributes=True)


class CurriculumCreate(BaseModel):
    curriculum_name: str = Field(max_length=100)
    number_of_phase: int = Field(ge=1)
    number_of_session_per_phase: int = Field(ge=1)
    phase_sessions: List[PhaseSessionCreate] = Field(default_factory=list)


class CurriculumRead(BaseModel):
    curriculum_id: int
    curriculum_name: str
    number_of_phase: int
    number_of_session_per_phase: int
    created_at: datetime
    phase_sessions: List[PhaseSessionRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class ProgramCreate(BaseModel):
    program_name: str = Field(max_length=100)
    curriculum_id: int
    # Strict: a number of hours or nothing; strings and legacy objects are rejected
    session_duration_hours: Optional[float] = Field(default=None, gt=0, le=24, strict=True)


class ProgramRead(BaseModel):
    program_id: int
    program_name: str
    curriculum_id: int
    session_duration_hours: Optional[float] = None

    model_config = ConfigDict(from_attributes=True)
