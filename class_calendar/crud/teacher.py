from sqlmodel import Session, select

from class_calendar.errors import RecordNotFoundError
from class_calendar.models.teacher import Teacher
from class_calendar.schemas.teacher import TeacherCreate
from class_calendar.utils.time_utils import get_school_time


def create_teacher(db: Session, teacher: TeacherCreate) -> Teacher:
    db_teacher = Teacher(
        full_name=teacher.full_name,
        email=teacher.email,
        branch_id=teacher.branch_id,
        created_at=get_school_time(),
    )
    db.add(db_teacher)
    db.commit()
    db.refresh(db_teacher)
    return db_teacher


def get_teachers(
    db: Session, skip: int = 0, limit: int = 100, branch_id: int | None = None
) -> list[Teacher]:
    query = select(Teacher).order_by(Teacher.teacher_id)
    if branch_id is not None:
        query = query.where(Teacher.branch_id == branch_id)
    return db.exec(query.offset(skip).limit(limit)).all()


def get_teacher(db: Session, teacher_id: int) -> Teacher:
    """
    Retrieve a teacher by ID.

    Raises:
        RecordNotFoundError: If no teacher has the given ID
    """
    teacher = db.get(Teacher, teacher_id)
    if teacher is None:
        raise RecordNotFoundError("Teacher", teacher_id)
    return teacher
