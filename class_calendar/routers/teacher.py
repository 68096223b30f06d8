from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from typing import List, Optional

from class_calendar.dependencies import get_db, get_current_admin
from class_calendar.schemas.teacher import TeacherCreate, TeacherRead
from class_calendar.crud.teacher import create_teacher, get_teachers, get_teacher


router = APIRouter(
    prefix="/teachers",
    tags=["teachers"],
    responses={404: {"description": "Not found"}},
)


@router.post("/", response_model=TeacherRead, status_code=status.HTTP_201_CREATED)
def create_teacher_endpoint(
    teacher: TeacherCreate,
    db: Session = Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    """Register a teacher so classes and sessions can be assigned to them."""
    return create_teacher(db=db, teacher=teacher)


@router.get("/", response_model=List[TeacherRead])
def read_teachers_endpoint(
    skip: int = 0,
    limit: int = 100,
    branch_id: Optional[int] = None,
    db: Session = Depends(get_db),
):
    return get_teachers(db, skip=skip, limit=limit, branch_id=branch_id)


@router.get("/{teacher_id}", response_model=TeacherRead)
def read_teacher_endpoint(teacher_id: int, db: Session = Depends(get_db)):
    return get_teacher(db, teacher_id=teacher_id)
