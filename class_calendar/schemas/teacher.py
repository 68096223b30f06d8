from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime


class TeacherCreate(BaseModel):
    full_name: str = Field(max_length=100)
    email: Optional[str] = None
    branch_id: Optional[int] = None


class TeacherRead(TeacherCreate):
    teacher_id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
