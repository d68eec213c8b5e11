from uuid import UUID

from fastapi import APIRouter, Depends

from event_rsvp.errors import RsvpError
from event_rsvp.events.features.reminder_schedule.dtos import (
    ReminderEntryResponse,
    ReminderScheduleDTO,
    ReminderScheduleResponse,
    UpdateReminderScheduleRequest,
)
from event_rsvp.events.features.reminder_schedule.write_model import (
    ReminderScheduleWriteModel,
    StoreReminderScheduleWriteModel,
)
from event_rsvp.guests.http_errors import to_http_exception
from event_rsvp.guests.repository.store import SqlGuestStore
from event_rsvp.rsvp.reminders import Reminder, ReminderType, format_reminder

router = APIRouter()

REMINDER_SCHEDULE_URL = "/api/v1/events/{event_id}/reminders"


def get_reminder_schedule_write_model() -> ReminderScheduleWriteModel:
    """Dependency to get the reminder schedule write model instance."""
    return StoreReminderScheduleWriteModel(store=SqlGuestStore())


def _to_response(schedule: ReminderScheduleDTO) -> ReminderScheduleResponse:
    return ReminderScheduleResponse(
        event_id=schedule.event_id,
        title=schedule.title,
        date=schedule.date,
        reminders=[
            ReminderEntryResponse(
                type=ReminderType(reminder.type).value,
                value=reminder.value,
                label=format_reminder(reminder),
            )
            for reminder in schedule.reminders
        ],
        uses_default=schedule.uses_default,
    )


@router.get(REMINDER_SCHEDULE_URL, response_model=ReminderScheduleResponse)
async def get_reminder_schedule(
    event_id: UUID,
    write_model: ReminderScheduleWriteModel = Depends(get_reminder_schedule_write_model),
) -> ReminderScheduleResponse:
    try:
        schedule = await write_model.get_reminder_schedule(event_id)
    except RsvpError as e:
        raise to_http_exception(e)
    return _to_response(schedule)


@router.put(REMINDER_SCHEDULE_URL, response_model=ReminderScheduleResponse)
async def update_reminder_schedule(
    event_id: UUID,
    request: UpdateReminderScheduleRequest,
    write_model: ReminderScheduleWriteModel = Depends(get_reminder_schedule_write_model),
) -> ReminderScheduleResponse:
    """
    Replace the event's reminder schedule.

    Entries are "N days/hours before the event". Sending an empty list goes
    back to the default of one reminder two days before.
    """
    reminders = [Reminder(type=entry.type, value=entry.value) for entry in request.reminders]
    try:
        schedule = await write_model.update_reminder_schedule(event_id, reminders)
    except RsvpError as e:
        raise to_http_exception(e)
    return _to_response(schedule)
