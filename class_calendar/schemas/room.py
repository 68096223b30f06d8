from pydantic import BaseModel, Field, ConfigDict
from typing import Optional


class RoomBase(BaseModel):
    room_name: str = Field(max_length=100)
    branch_id: Optional[int] = None
    capacity: Optional[int] = Field(default=None, gt=0)


class RoomCreate(RoomBase):
    pass


class RoomUpdate(BaseModel):
    room_name: Optional[str] = None
    branch_id: Optional[int] = None
    capacity: Optional[int] = Field(default=None, gt=0)


class RoomResponse(RoomBase):
    room_id: int

    model_config = ConfigDict(from_attributes=True)
