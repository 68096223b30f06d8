from typing import Dict, Tuple

from sqlmodel import Session, select

from class_calendar.errors import RecordNotFoundError, ScheduleValidationError
from class_calendar.models.curriculum import Curriculum, PhaseSession, Program
from class_calendar.schemas.curriculum import (
    CurriculumCreate,
    PhaseSessionCreate,
    ProgramCreate,
)
from class_calendar.utils.time_utils import get_school_time


def create_curriculum(db: Session, curriculum: CurriculumCreate) -> Curriculum:
    """
    Create a curriculum together with its phase session templates.

    Templates must fit inside the curriculum's shape and name each
    (phase, session-in-phase) slot at most once.

    Raises:
        ScheduleValidationError: If a template is out of range or duplicated
    """
    seen = set()
    for template in curriculum.phase_sessions:
        slot = (template.phase_number, template.phase_session_number)
        if slot in seen:
            raise ScheduleValidationError(
                f"Phase {slot[0]} session {slot[1]} is defined more than once"
            )
        _check_slot_in_shape(
            template,
            curriculum.number_of_phase,
            curriculum.number_of_session_per_phase,
        )
        seen.add(slot)

    db_curriculum = Curriculum(
        curriculum_name=curriculum.curriculum_name,
        number_of_phase=curriculum.number_of_phase,
        number_of_session_per_phase=curriculum.number_of_session_per_phase,
        created_at=get_school_time(),
    )
    db_curriculum.phase_sessions = [
        PhaseSession(**template.model_dump()) for template in curriculum.phase_sessions
    ]

    db.add(db_curriculum)
    db.commit()
    db.refresh(db_curriculum)
    return db_curriculum


def _check_slot_in_shape(
    template: PhaseSessionCreate, number_of_phase: int, sessions_per_phase: int
) -> None:
    if (
        template.phase_number > number_of_phase
        or template.phase_session_number > sessions_per_phase
    ):
        raise ScheduleValidationError(
            f"Phase {template.phase_number} session {template.phase_session_number} "
            f"is outside a {number_of_phase} x {sessions_per_phase} curriculum"
        )


def get_curriculum(db: Session, curriculum_id: int) -> Curriculum:
    curriculum = db.get(Curriculum, curriculum_id)
    if curriculum is None:
        raise RecordNotFoundError("Curriculum", curriculum_id)
    return curriculum


def get_curricula(db: Session, skip: int = 0, limit: int = 100) -> list[Curriculum]:
    return db.exec(
        select(Curriculum).order_by(Curriculum.curriculum_id).offset(skip).limit(limit)
    ).all()


def add_phase_session(
    db: Session, curriculum_id: int, template: PhaseSessionCreate
) -> PhaseSession:
    curriculum = get_curriculum(db, curriculum_id)
    _check_slot_in_shape(
        template, curriculum.number_of_phase, curriculum.number_of_session_per_phase
    )

    db_template = PhaseSession(curriculum_id=curriculum_id, **template.model_dump())
    db.add(db_template)
    db.commit()
    db.refresh(db_template)
    return db_template


def get_template_lookup(db: Session, curriculum_id: int) -> Dict[Tuple[int, int], int]:
    """Map (phase_number, phase_session_number) to the template id of a curriculum."""
    templates = db.exec(
        select(PhaseSession).where(PhaseSession.curriculum_id == curriculum_id)
    ).all()
    return {
        (template.phase_number, template.phase_session_number): template.phasesession_id
        for template in templates
    }


def create_program(db: Session, program: ProgramCreate) -> Program:
    get_curriculum(db, program.curriculum_id)

    db_program = Program(**program.model_dump())
    db.add(db_program)
    db.commit()
    db.refresh(db_program)
    return db_program


def get_program(db: Session, program_id: int) -> Program:
    program = db.get(Program, program_id)
    if program is None:
        raise RecordNotFoundError("Program", program_id)
    return program


def get_programs(db: Session, skip: int = 0, limit: int = 100) -> list[Program]:
    return db.exec(
        select(Program).order_by(Program.program_id).offset(skip).limit(limit)
    ).all()
