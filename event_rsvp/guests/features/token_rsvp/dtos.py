"""DTOs for the token-keyed RSVP endpoints."""

from pydantic import BaseModel, Field

from event_rsvp.guests.dtos import RsvpResponseStatus
from event_rsvp.guests.schemas import EventSummaryResponse, GuestResponse


class RsvpInfoResponse(BaseModel):
    guest: GuestResponse
    event: EventSummaryResponse
    deadline_passed: bool


class UpdateRsvpRequest(BaseModel):
    """Partial update; fields left out of the body keep their stored value."""

    name: str | None = Field(default=None, min_length=1)
    phone: str | None = None
    status: RsvpResponseStatus | None = None
    additional_guests: list[str] | None = None
    dietary_notes: str | None = None
