"""DTOs for the event reminder schedule feature."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from event_rsvp.rsvp.reminders import Reminder


@dataclass(frozen=True)
class ReminderScheduleDTO:
    """An event's schedule, parsed and in display order."""

    event_id: UUID
    title: str
    date: datetime
    reminders: list[Reminder]
    uses_default: bool


class ReminderEntry(BaseModel):
    # plain str so unknown types get the codec's error message instead of a 422
    type: str
    value: int


class UpdateReminderScheduleRequest(BaseModel):
    reminders: list[ReminderEntry]


class ReminderEntryResponse(BaseModel):
    type: str
    value: int
    label: str


class ReminderScheduleResponse(BaseModel):
    event_id: UUID
    title: str
    date: datetime
    reminders: list[ReminderEntryResponse]
    uses_default: bool
