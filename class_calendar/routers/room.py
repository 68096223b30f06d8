from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from typing import List, Optional

from class_calendar.dependencies import get_db, get_current_admin
from class_calendar.schemas.room import RoomCreate, RoomResponse, RoomUpdate
from class_calendar.crud.room import create_room, get_rooms, get_room, update_room, delete_room


router = APIRouter(
    prefix="/rooms",
    tags=["rooms"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
def create_room_endpoint(
    room: RoomCreate,
    db: Session = Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    """
    Create a new room that class weekly patterns can be placed in.

    Args:
        room: Room name, branch and capacity
        db: Database session dependency
        current_admin: Current authenticated admin operator

    Returns:
        RoomResponse: The newly created room

    Access Level: ADMIN only
    """
    return create_room(db=db, room=room)


@router.get("/", response_model=List[RoomResponse])
def read_rooms_endpoint(
    skip: int = 0,
    limit: int = 100,
    name: Optional[str] = None,
    branch_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    """
    Retrieve rooms with optional name/branch filtering and pagination.

    Access Level: PUBLIC
    """
    return get_rooms(db, skip=skip, limit=limit, name=name, branch_id=branch_id)


@router.get("/{room_id}", response_model=RoomResponse)
def read_room_endpoint(room_id: int, db: Session = Depends(get_db)):
    return get_room(db, room_id=room_id)


@router.patch("/{room_id}", response_model=RoomResponse)
def update_room_endpoint(
    room_id: int,
    room_update: RoomUpdate,
    db: Session = Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    """
    Update an existing room's information.

    Renaming or resizing a room does not touch any class schedule; moving a
    class to another room goes through the class update endpoint so that
    room conflicts are checked.

    Access Level: ADMIN only
    """
    return update_room(db, room_id=room_id, room=room_update)


@router.delete("/{room_id}")
def delete_room_endpoint(
    room_id: int,
    db: Session = Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    """
    Delete a room from the system.

    Rooms still used by a class weekly pattern are refused with a
    validation error.

    Access Level: ADMIN only
    """
    delete_room(db, room_id=room_id)
    return {"message": "Room successfully deleted"}
