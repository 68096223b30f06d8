from fastapi import APIRouter, Depends, status
from sqlmodel import Session
from typing import List

from class_calendar.dependencies import get_db, get_current_admin
from class_calendar.schemas.curriculum import (
    CurriculumCreate,
    CurriculumRead,
    PhaseSessionCreate,
    PhaseSessionRead,
    ProgramCreate,
    ProgramRead,
)
from class_calendar.crud.curriculum import (
    add_phase_session,
    create_curriculum,
    create_program,
    get_curricula,
    get_curriculum,
    get_program,
    get_programs,
)


router = APIRouter(
    tags=["curricula"],
    responses={404: {"description": "Not found"}},
)


@router.post(
    "/curricula/", response_model=CurriculumRead, status_code=status.HTTP_201_CREATED
)
def create_curriculum_endpoint(
    curriculum: CurriculumCreate,
    db: Session = Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    """
    Create a curriculum and, optionally, its phase session templates.

    The curriculum's shape (number of phases times sessions per phase) sets
    how many sessions every class of a linked program is generated with.
    Templates attach a topic and goal to one (phase, session-in-phase) slot;
    slots without a template produce sessions with no template link.

    Args:
        curriculum: Curriculum shape and template list
        db: Database session dependency
        current_admin: Current authenticated admin operator

    Returns:
        CurriculumRead: The stored curriculum with its templates

    Raises:
        ScheduleValidationError: 400 if a template falls outside the shape
            or repeats a slot

    Access Level: ADMIN only
    """
    return create_curriculum(db=db, curriculum=curriculum)


@router.get("/curricula/", response_model=List[CurriculumRead])
def read_curricula_endpoint(
    skip: int = 0, limit: int = 100, db: Session = Depends(get_db)
):
    return get_curricula(db, skip=skip, limit=limit)


@router.get("/curricula/{curriculum_id}", response_model=CurriculumRead)
def read_curriculum_endpoint(curriculum_id: int, db: Session = Depends(get_db)):
    return get_curriculum(db, curriculum_id=curriculum_id)


@router.post(
    "/curricula/{curriculum_id}/phase-sessions",
    response_model=PhaseSessionRead,
    status_code=status.HTTP_201_CREATED,
)
def add_phase_session_endpoint(
    curriculum_id: int,
    template: PhaseSessionCreate,
    db: Session = Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    """
    Add one template to an existing curriculum.

    Existing classes pick the template up on their next reconciliation.

    Access Level: ADMIN only
    """
    return add_phase_session(db, curriculum_id=curriculum_id, template=template)


@router.post("/programs/", response_model=ProgramRead, status_code=status.HTTP_201_CREATED)
def create_program_endpoint(
    program: ProgramCreate,
    db: Session = Depends(get_db),
    current_admin=Depends(get_current_admin),
):
    """
    Create a program on top of a curriculum.

    `session_duration_hours` must be a plain number when given; every
    session of the program's classes then ends that many hours after it
    starts.

    Access Level: ADMIN only
    """
    return create_program(db=db, program=program)


@router.get("/programs/", response_model=List[ProgramRead])
def read_programs_endpoint(skip: int = 0, limit: int = 100, db: Session = Depends(get_db)):
    return get_programs(db, skip=skip, limit=limit)


@router.get("/programs/{program_id}", response_model=ProgramRead)
def read_program_endpoint(program_id: int, db: Session = Depends(get_db)):
    return get_program(db, program_id=program_id)
