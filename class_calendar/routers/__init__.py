from fastapi import APIRouter
from .curriculum import router as curriculum_router
from .holiday import router as holiday_router
from .room import router as room_router
from .school_class import router as school_class_router
from .suspension import router as suspension_router
from .teacher import router as teacher_router

router = APIRouter()

router.include_router(curriculum_router)
router.include_router(holiday_router)
router.include_router(room_router)
router.include_router(school_class_router)
router.include_router(suspension_router)
router.include_router(teacher_router)
