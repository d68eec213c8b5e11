import logging
from abc import ABC, abstractmethod
from uuid import UUID

from event_rsvp.errors import EventNotFoundError, InvalidRequestError
from event_rsvp.events.features.reminder_schedule.dtos import ReminderScheduleDTO
from event_rsvp.events.repository.orm_models import Event
from event_rsvp.guests.repository.store import GuestStore
from event_rsvp.rsvp.reminders import (
    DEFAULT_REMINDER_SCHEDULE,
    Reminder,
    parse_reminder_schedule,
    serialize_reminder_schedule,
    sort_reminders_for_display,
    validate_reminders,
)

logger = logging.getLogger(__name__)


def schedule_from_event(event: Event) -> ReminderScheduleDTO:
    reminders = parse_reminder_schedule(event.reminder_schedule)
    uses_default = not reminders
    if uses_default:
        reminders = list(DEFAULT_REMINDER_SCHEDULE)
    return ReminderScheduleDTO(
        event_id=event.uuid,
        title=event.title,
        date=event.date,
        reminders=sort_reminders_for_display(reminders),
        uses_default=uses_default,
    )


class ReminderScheduleWriteModel(ABC):
    @abstractmethod
    async def get_reminder_schedule(self, event_id: UUID) -> ReminderScheduleDTO:
        raise NotImplementedError

    @abstractmethod
    async def update_reminder_schedule(
        self, event_id: UUID, reminders: list[Reminder]
    ) -> ReminderScheduleDTO:
        """Validate and store a new schedule. An empty list restores the default.

        Raises:
            InvalidRequestError: The schedule failed validation.
            EventNotFoundError: The event does not exist.
        """
        raise NotImplementedError


class StoreReminderScheduleWriteModel(ReminderScheduleWriteModel):
    def __init__(self, store: GuestStore) -> None:
        self.store = store

    async def get_reminder_schedule(self, event_id: UUID) -> ReminderScheduleDTO:
        event = await self.store.get_event(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return schedule_from_event(event)

    async def update_reminder_schedule(
        self, event_id: UUID, reminders: list[Reminder]
    ) -> ReminderScheduleDTO:
        validation = validate_reminders(reminders)
        if not validation.valid:
            raise InvalidRequestError(validation.error)

        serialized = serialize_reminder_schedule(reminders)

        def store_schedule(event: Event) -> None:
            event.reminder_schedule = serialized

        event = await self.store.update_event(event_id, store_schedule)
        logger.info("Reminder schedule for event %s set to %s", event_id, serialized)
        return schedule_from_event(event)
