from typing import List, Optional

from sqlmodel import Session, select

from class_calendar.errors import RecordNotFoundError
from class_calendar.models.curriculum import Program
from class_calendar.models.room import Room
from class_calendar.models.school_class import ClassStatus, RoomSchedule, SchoolClass
from class_calendar.models.teacher import Teacher
from class_calendar.schemas.school_class import ClassCreate, ClassUpdate, DaySchedule
from class_calendar.services.session_calculation import DaySlot
from class_calendar.utils.time_utils import get_school_time


def _check_references(
    db: Session,
    program_id: Optional[int] = None,
    room_id: Optional[int] = None,
    teacher_id: Optional[int] = None,
) -> None:
    if program_id is not None and db.get(Program, program_id) is None:
        raise RecordNotFoundError("Program", program_id)
    if room_id is not None and db.get(Room, room_id) is None:
        raise RecordNotFoundError("Room", room_id)
    if teacher_id is not None and db.get(Teacher, teacher_id) is None:
        raise RecordNotFoundError("Teacher", teacher_id)


def create_class_record(db: Session, school_class: ClassCreate) -> SchoolClass:
    """
    Stage a new class and its weekly pattern in the current transaction.

    Only enabled days are stored as RoomSchedule rows. Nothing is committed;
    the caller owns the unit of work so that session generation lands in
    the same transaction.

    Raises:
        RecordNotFoundError: If the program, room or teacher does not exist
    """
    _check_references(
        db,
        program_id=school_class.program_id,
        room_id=school_class.room_id,
        teacher_id=school_class.teacher_id,
    )

    db_class = SchoolClass(
        **school_class.model_dump(exclude={"days_of_week"}),
        created_at=get_school_time(),
    )
    db.add(db_class)
    db.flush()

    replace_weekly_pattern(db, db_class, school_class.days_of_week)
    return db_class


def apply_class_update(db: Session, db_class: SchoolClass, update: ClassUpdate) -> SchoolClass:
    """Stage field changes and, when given, the replacement weekly pattern."""
    _check_references(
        db,
        program_id=update.program_id,
        room_id=update.room_id,
        teacher_id=update.teacher_id,
    )

    class_data = update.model_dump(exclude_unset=True, exclude={"days_of_week"})
    for key, value in class_data.items():
        setattr(db_class, key, value)
    db.add(db_class)

    if update.days_of_week is not None:
        replace_weekly_pattern(db, db_class, update.days_of_week)
    elif "room_id" in class_data:
        for schedule in db_class.schedules:
            schedule.room_id = db_class.room_id
            db.add(schedule)

    db.flush()
    return db_class


def replace_weekly_pattern(
    db: Session, db_class: SchoolClass, days: List[DaySchedule]
) -> List[RoomSchedule]:
    """Swap the class's pattern for `days`; no history of the old one is kept."""
    for schedule in list(db_class.schedules):
        db.delete(schedule)
    db.flush()

    schedules = [
        RoomSchedule(
            class_id=db_class.class_id,
            room_id=db_class.room_id,
            day_of_week=day.day_of_week,
            start_time=day.start_time,
            end_time=day.end_time,
        )
        for day in days
        if day.enabled
    ]
    db.add_all(schedules)
    db.flush()
    db.refresh(db_class)
    return schedules


def get_weekly_pattern(db: Session, class_id: int) -> List[DaySlot]:
    schedules = db.exec(
        select(RoomSchedule).where(RoomSchedule.class_id == class_id)
    ).all()
    return [
        DaySlot(
            day_of_week=schedule.day_of_week,
            start_time=schedule.start_time,
            end_time=schedule.end_time,
        )
        for schedule in schedules
    ]


def get_class(db: Session, class_id: int) -> SchoolClass:
    """
    Retrieve a class by ID.

    Raises:
        RecordNotFoundError: If no class has the given ID
    """
    db_class = db.get(SchoolClass, class_id)
    if db_class is None:
        raise RecordNotFoundError("Class", class_id)
    return db_class


def get_classes(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    branch_id: Optional[int] = None,
    room_id: Optional[int] = None,
    teacher_id: Optional[int] = None,
    status: Optional[ClassStatus] = None,
) -> list[SchoolClass]:
    query = select(SchoolClass).order_by(SchoolClass.class_id)

    if branch_id is not None:
        query = query.where(SchoolClass.branch_id == branch_id)
    if room_id is not None:
        query = query.where(SchoolClass.room_id == room_id)
    if teacher_id is not None:
        query = query.where(SchoolClass.teacher_id == teacher_id)
    if status is not None:
        query = query.where(SchoolClass.status == status)

    return db.exec(query.offset(skip).limit(limit)).all()


def delete_class(db: Session, class_id: int) -> SchoolClass:
    """Delete a class; its weekly pattern and every session go with it."""
    db_class = get_class(db, class_id)
    db.delete(db_class)
    db.commit()
    return db_class
