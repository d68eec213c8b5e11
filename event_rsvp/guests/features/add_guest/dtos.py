"""DTOs for adding a guest to an event."""

from pydantic import BaseModel, EmailStr, Field

from event_rsvp.guests.schemas import GuestResponse


class AddGuestRequest(BaseModel):
    email: EmailStr
    name: str | None = None
    phone: str | None = None
    notify_by_email: bool = True
    notify_by_sms: bool = False
    max_guests: int | None = Field(default=None, ge=1)
    send_invitation: bool = False


class AddGuestResponse(BaseModel):
    guest: GuestResponse
    rsvp_url: str
    invited: bool
