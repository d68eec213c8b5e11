"""Response models shared by the guest routers."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from event_rsvp.guests.dtos import EventSummaryDTO, GuestDTO, GuestStatus


class GuestResponse(BaseModel):
    id: UUID
    event_id: UUID
    email: str
    name: str | None = None
    phone: str | None = None
    status: GuestStatus
    notify_by_email: bool
    notify_by_sms: bool
    max_guests: int | None = None
    dietary_notes: str | None = None
    additional_guests: list[str] = []
    invited_at: datetime | None = None
    responded_at: datetime | None = None
    reminder_sent_at: datetime | None = None

    @classmethod
    def from_dto(cls, guest: GuestDTO) -> "GuestResponse":
        return cls(
            id=guest.id,
            event_id=guest.event_id,
            email=guest.email,
            name=guest.name,
            phone=guest.phone,
            status=guest.status,
            notify_by_email=guest.notify_by_email,
            notify_by_sms=guest.notify_by_sms,
            max_guests=guest.max_guests,
            dietary_notes=guest.dietary_notes,
            additional_guests=list(guest.additional_guests),
            invited_at=guest.invited_at,
            responded_at=guest.responded_at,
            reminder_sent_at=guest.reminder_sent_at,
        )


class EventSummaryResponse(BaseModel):
    id: UUID
    title: str
    date: datetime
    location: str | None = None
    rsvp_deadline: datetime | None = None
    max_guests_per_invitee: int | None = None

    @classmethod
    def from_dto(cls, event: EventSummaryDTO) -> "EventSummaryResponse":
        return cls(
            id=event.uuid,
            title=event.title,
            date=event.date,
            location=event.location,
            rsvp_deadline=event.rsvp_deadline,
            max_guests_per_invitee=event.max_guests_per_invitee,
        )
