"""DTOs for the bulk guest action feature."""

from pydantic import BaseModel, Field

from event_rsvp.guests.dtos import BulkAction, GuestStatus


class BulkActionRequest(BaseModel):
    """Request body for a bulk action.

    Guest ids are kept as plain strings: malformed ids are skipped like ids of
    other events instead of failing the whole request.
    """

    action: BulkAction
    guest_ids: list[str] = Field(min_length=1)
    status: GuestStatus | None = None


class BulkActionResponse(BaseModel):
    success_count: int
    failed_count: int
    errors: list[str] = []


class GuestNotificationResponse(BaseModel):
    success: bool = True
