# Import all models to make them available from class_calendar.models
from class_calendar.models.class_session import ClassSession, SessionStatus
from class_calendar.models.curriculum import Curriculum, PhaseSession, Program
from class_calendar.models.holiday import Holiday
from class_calendar.models.room import Room
from class_calendar.models.school_class import ClassStatus, RoomSchedule, SchoolClass
from class_calendar.models.suspension import (
    SuspensionPeriod,
    SuspensionReason,
    SuspensionStatus,
)
from class_calendar.models.teacher import Teacher


# Export all models
__all__ = [
    "ClassSession",
    "SessionStatus",
    "Curriculum",
    "PhaseSession",
    "Program",
    "Holiday",
    "Room",
    "ClassStatus",
    "RoomSchedule",
    "SchoolClass",
    "SuspensionPeriod",
    "SuspensionReason",
    "SuspensionStatus",
    "Teacher",
]
