from fastapi import APIRouter

from .features.reminder_schedule.router import router as reminder_schedule_router

router = APIRouter()

router.include_router(reminder_schedule_router)
