"""Pytest configuration and shared fixtures."""

from datetime import date, time

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel

import class_calendar.models  # noqa: F401
from class_calendar.crud.curriculum import create_curriculum, create_program
from class_calendar.crud.room import create_room
from class_calendar.crud.teacher import create_teacher
from class_calendar.dependencies import build_engine, get_db
from class_calendar.schemas.curriculum import (
    CurriculumCreate,
    PhaseSessionCreate,
    ProgramCreate,
)
from class_calendar.schemas.room import RoomCreate
from class_calendar.schemas.school_class import ClassCreate, DaySchedule
from class_calendar.schemas.teacher import TeacherCreate
from class_calendar.services.class_service import create_class
from class_calendar.utils.authentication import create_access_token
from class_calendar.utils.time_utils import Weekday

# 2025-06-02 is a Monday
MONDAY = date(2025, 6, 2)


def day(weekday: Weekday, start: str = "09:00", end: str = "10:00", enabled: bool = True):
    return DaySchedule(
        day_of_week=weekday,
        start_time=time.fromisoformat(start),
        end_time=time.fromisoformat(end),
        enabled=enabled,
    )


@pytest.fixture(autouse=True)
def no_national_holidays(monkeypatch):
    """Generate against stored holidays only unless a test opts in."""
    monkeypatch.setattr("class_calendar.services.reconciliation.HOLIDAY_COUNTRY", "")


@pytest.fixture
def engine():
    test_engine = build_engine("sqlite://", poolclass=StaticPool)
    SQLModel.metadata.create_all(test_engine)
    yield test_engine
    SQLModel.metadata.drop_all(test_engine)
    test_engine.dispose()


@pytest.fixture
def db(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(db):
    from main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_token() -> str:
    return create_access_token(
        data={"sub": "registrar"}, user_type="Admin", user_id=7
    )


@pytest.fixture
def admin_headers(admin_token) -> dict:
    return {"Authorization": f"Bearer {admin_token}"}


@pytest.fixture
def teacher_headers() -> dict:
    token = create_access_token(data={"sub": "teacher"}, user_type="Teacher", user_id=3)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_program(db):
    """Build a curriculum of the given shape and a program on top of it."""

    def _make(number_of_phase=4, sessions_per_phase=5, duration=None, with_templates=False):
        templates = []
        if with_templates:
            templates = [
                PhaseSessionCreate(
                    phase_number=phase,
                    phase_session_number=session,
                    topic=f"Phase {phase} lesson {session}",
                )
                for phase in range(1, number_of_phase + 1)
                for session in range(1, sessions_per_phase + 1)
            ]
        curriculum = create_curriculum(
            db,
            CurriculumCreate(
                curriculum_name="Conversational English",
                number_of_phase=number_of_phase,
                number_of_session_per_phase=sessions_per_phase,
                phase_sessions=templates,
            ),
        )
        return create_program(
            db,
            ProgramCreate(
                program_name="English",
                curriculum_id=curriculum.curriculum_id,
                session_duration_hours=duration,
            ),
        )

    return _make


@pytest.fixture
def room(db):
    return create_room(db, RoomCreate(room_name="Room A", branch_id=1, capacity=12))


@pytest.fixture
def teacher(db):
    return create_teacher(db, TeacherCreate(full_name="Maria Santos", branch_id=1))


@pytest.fixture
def make_class(db, make_program, room, teacher):
    """Create a class through the service, sessions included."""

    def _make(days=None, start_date=MONDAY, program=None, room_id=None, teacher_id=None, **kwargs):
        if program is None:
            program = make_program()
        if days is None:
            days = [day(Weekday.MONDAY), day(Weekday.WEDNESDAY)]
        school_class, _ = create_class(
            db,
            ClassCreate(
                class_name=kwargs.pop("class_name", "Batch 1"),
                branch_id=kwargs.pop("branch_id", 1),
                room_id=room_id if room_id is not None else room.room_id,
                program_id=program.program_id,
                teacher_id=teacher_id if teacher_id is not None else teacher.teacher_id,
                start_date=start_date,
                days_of_week=days,
                **kwargs,
            ),
            operator_id=7,
        )
        return school_class

    return _make
