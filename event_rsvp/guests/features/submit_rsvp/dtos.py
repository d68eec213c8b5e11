"""DTOs for the public RSVP form."""

from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from event_rsvp.guests.dtos import RsvpResponseStatus


class SubmitRsvpRequest(BaseModel):
    """Request body for a public, email-keyed RSVP."""

    event_id: UUID
    email: EmailStr
    name: str = Field(min_length=1)
    phone: str | None = None
    status: RsvpResponseStatus
    additional_guests: list[str] = []
    dietary_notes: str | None = None
