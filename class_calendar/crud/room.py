from sqlmodel import Session, select

from class_calendar.errors import RecordNotFoundError, ScheduleValidationError
from class_calendar.models.room import Room
from class_calendar.schemas.room import RoomCreate, RoomUpdate


def create_room(db: Session, room: RoomCreate) -> Room:
    """
    Create a new room that classes can be scheduled into.

    Args:
        db: Database session for transaction management
        room: Validated room creation data

    Returns:
        Room: Newly created room with generated ID
    """
    db_room = Room(
        room_name=room.room_name,
        branch_id=room.branch_id,
        capacity=room.capacity,
    )

    db.add(db_room)
    db.commit()
    db.refresh(db_room)

    return db_room


def get_rooms(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    name: str | None = None,
    branch_id: int | None = None,
) -> list[Room]:
    """
    Retrieve rooms with pagination and optional name/branch filtering.

    Name filter uses ILIKE for partial, case-insensitive matching.

    Args:
        db: Database session for query execution
        skip: Number of records to skip for pagination (default: 0)
        limit: Maximum number of records to return (default: 100)
        name: Optional partial name filter for room search
        branch_id: Optional branch filter

    Returns:
        list[Room]: List of rooms matching criteria
    """
    query = select(Room)

    if name:
        query = query.where(Room.room_name.ilike(f"%{name}%"))
    if branch_id is not None:
        query = query.where(Room.branch_id == branch_id)

    return db.exec(query.offset(skip).limit(limit)).all()


def get_room(db: Session, room_id: int) -> Room:
    """
    Retrieve a specific room by ID.

    Raises:
        RecordNotFoundError: If room not found
    """
    room = db.get(Room, room_id)
    if room is None:
        raise RecordNotFoundError("Room", room_id)
    return room


def update_room(db: Session, room_id: int, room: RoomUpdate) -> Room:
    """
    Partially update a room, keeping existing values for unset fields.

    Raises:
        RecordNotFoundError: If room not found
    """
    db_room = get_room(db, room_id)

    room_data = room.model_dump(exclude_unset=True)
    for key, value in room_data.items():
        setattr(db_room, key, value)

    db.add(db_room)
    db.commit()
    db.refresh(db_room)

    return db_room


def delete_room(db: Session, room_id: int) -> Room:
    """
    Delete a room that no weekly pattern uses anymore.

    Raises:
        RecordNotFoundError: If room not found
        ScheduleValidationError: If classes are still scheduled in the room
    """
    db_room = get_room(db, room_id)
    if db_room.schedules:
        raise ScheduleValidationError(
            f"Room with ID {room_id} cannot be deleted because it is currently in use",
            details={"room_id": room_id, "schedule_count": len(db_room.schedules)},
        )
    db.delete(db_room)
    db.commit()
    return db_room
