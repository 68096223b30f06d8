from sqlmodel import SQLModel, Field
from typing import Optional
from datetime import datetime, date


class Holiday(SQLModel, table=True):
    holiday_id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=255)
    holiday_date: date = Field(index=True)
    # None means the holiday applies to every branch
    branch_id: Optional[int] = Field(default=None, index=True)
    description: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
