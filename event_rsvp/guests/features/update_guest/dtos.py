"""DTOs for the host's edit of a single guest."""

from pydantic import BaseModel, EmailStr, Field

from event_rsvp.guests.dtos import GuestStatus


class UpdateGuestRequest(BaseModel):
    """Partial update; fields left out of the body keep their stored value.

    Unlike the guest's own form, the host may set any status, PENDING
    included, and may change the per-guest limit.
    """

    name: str | None = None
    email: EmailStr | None = None
    phone: str | None = None
    status: GuestStatus | None = None
    additional_guests: list[str] | None = None
    dietary_notes: str | None = None
    notify_by_email: bool | None = None
    notify_by_sms: bool | None = None
    max_guests: int | None = Field(default=None, ge=1)
