from fastapi import APIRouter

from .features.add_guest.router import router as add_guest_router
from .features.bulk_action.router import router as bulk_action_router
from .features.send_reminders.router import router as send_reminders_router
from .features.submit_rsvp.router import router as submit_rsvp_router
from .features.token_rsvp.router import router as token_rsvp_router
from .features.update_guest.router import router as update_guest_router

router = APIRouter()

router.include_router(submit_rsvp_router)
router.include_router(token_rsvp_router)
router.include_router(add_guest_router)
router.include_router(bulk_action_router)
router.include_router(send_reminders_router)
router.include_router(update_guest_router)
