from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import date, datetime


class HolidayCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    holiday_date: date
    branch_id: Optional[int] = None
    description: Optional[str] = None


class HolidayRead(HolidayCreate):
    holiday_id: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
