from fastapi import APIRouter, Depends, Header, HTTPException, status
from pydantic import BaseModel

from event_rsvp.config.settings import settings
from event_rsvp.errors import RsvpError
from event_rsvp.guests.features.send_reminders.write_model import (
    ReminderScheduler,
    SendRemindersWriteModel,
)
from event_rsvp.guests.http_errors import to_http_exception
from event_rsvp.guests.repository.store import SqlGuestStore
from event_rsvp.notifications import get_notification_sender

router = APIRouter()

SEND_REMINDERS_URL = "/api/v1/cron/reminders"


class ReminderRunResponse(BaseModel):
    events_checked: int
    reminders_sent: int
    failed_count: int
    errors: list[str] = []


def get_send_reminders_write_model() -> SendRemindersWriteModel:
    """Dependency to get the reminder scheduler instance."""
    return ReminderScheduler(
        store=SqlGuestStore(),
        notification_sender=get_notification_sender(),
    )


def verify_cron_secret(authorization: str | None = Header(default=None)) -> None:
    if not settings.cron_secret:
        return
    if authorization != f"Bearer {settings.cron_secret}":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")


@router.post(
    SEND_REMINDERS_URL,
    response_model=ReminderRunResponse,
    dependencies=[Depends(verify_cron_secret)],
)
async def send_reminders(
    write_model: SendRemindersWriteModel = Depends(get_send_reminders_write_model),
) -> ReminderRunResponse:
    """Send every reminder that has come due. Meant to be called by a scheduler."""
    try:
        result = await write_model.run()
    except RsvpError as e:
        raise to_http_exception(e)

    return ReminderRunResponse(
        events_checked=result.events_checked,
        reminders_sent=result.reminders_sent,
        failed_count=result.failed_count,
        errors=result.errors,
    )
