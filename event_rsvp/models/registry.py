"""Imports every ORM module so the shared metadata knows all tables."""

from event_rsvp.events.repository.orm_models import Event
from event_rsvp.guests.repository.orm_models import AdditionalGuest, Guest, ReminderDelivery
from event_rsvp.models.base import BaseModel
from event_rsvp.notifications.orm_models import NotificationLog

metadata = BaseModel.metadata

__all__ = [
    "Event",
    "Guest",
    "AdditionalGuest",
    "ReminderDelivery",
    "NotificationLog",
    "metadata",
]
