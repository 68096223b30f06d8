from .class_session import (
    ClassSessionRead,
    ClassSessionUpdate,
    ReconcileSummary,
    SkippedSession,
    UpsertSummary,
)
from .conflict import (
    ConflictReport,
    RoomConflict,
    RoomConflictCheck,
    TeacherConflict,
    TeacherConflictCheck,
)
from .curriculum import (
    CurriculumCreate,
    CurriculumRead,
    PhaseSessionCreate,
    PhaseSessionRead,
    ProgramCreate,
    ProgramRead,
)
from .holiday import HolidayCreate, HolidayRead
from .room import RoomBase, RoomCreate, RoomResponse, RoomUpdate
from .school_class import (
    ClassCreate,
    ClassRead,
    ClassScheduleResult,
    ClassUpdate,
    DaySchedule,
)
from .suspension import (
    MakeupSchedule,
    SuspensionCreate,
    SuspensionDetail,
    SuspensionRead,
    SuspensionResult,
    SuspensionStatusUpdate,
)
from .teacher import TeacherCreate, TeacherRead

__all__ = [
    "ClassSessionRead",
    "ClassSessionUpdate",
    "ReconcileSummary",
    "SkippedSession",
    "UpsertSummary",
    "ConflictReport",
    "RoomConflict",
    "RoomConflictCheck",
    "TeacherConflict",
    "TeacherConflictCheck",
    "CurriculumCreate",
    "CurriculumRead",
    "PhaseSessionCreate",
    "PhaseSessionRead",
    "ProgramCreate",
    "ProgramRead",
    "HolidayCreate",
    "HolidayRead",
    "RoomBase",
    "RoomCreate",
    "RoomResponse",
    "RoomUpdate",
    "ClassCreate",
    "ClassRead",
    "ClassScheduleResult",
    "ClassUpdate",
    "DaySchedule",
    "MakeupSchedule",
    "SuspensionCreate",
    "SuspensionDetail",
    "SuspensionRead",
    "SuspensionResult",
    "SuspensionStatusUpdate",
    "TeacherCreate",
    "TeacherRead",
]
