from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime


class Teacher(SQLModel, table=True):
    teacher_id: Optional[int] = Field(default=None, primary_key=True)
    full_name: str = Field(max_length=100)
    email: Optional[str] = Field(default=None, max_length=255)
    branch_id: Optional[int] = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)
