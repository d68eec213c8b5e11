from uuid import UUID

from fastapi import APIRouter, Depends, status

from event_rsvp.errors import RsvpError
from event_rsvp.guests.features.update_guest.dtos import UpdateGuestRequest
from event_rsvp.guests.features.update_guest.write_model import (
    StoreUpdateGuestWriteModel,
    UpdateGuestWriteModel,
)
from event_rsvp.guests.http_errors import to_http_exception
from event_rsvp.guests.repository.store import SqlGuestStore
from event_rsvp.guests.schemas import GuestResponse
from event_rsvp.rsvp.transitions import UNCHANGED

router = APIRouter()

GUEST_URL = "/api/v1/events/{event_id}/guests/{guest_id}"


def get_update_guest_write_model() -> UpdateGuestWriteModel:
    """Dependency to get the update guest write model instance."""
    return StoreUpdateGuestWriteModel(store=SqlGuestStore())


@router.patch(GUEST_URL, response_model=GuestResponse)
async def update_guest(
    event_id: UUID,
    guest_id: UUID,
    request: UpdateGuestRequest,
    write_model: UpdateGuestWriteModel = Depends(get_update_guest_write_model),
) -> GuestResponse:
    """
    Host edit of one guest: contact details, channels, status, party and limit.

    The RSVP deadline does not apply; the guest limit does.
    """
    provided = request.model_fields_set

    def field(name: str):
        return getattr(request, name) if name in provided else UNCHANGED

    try:
        guest = await write_model.update_guest(
            event_id=event_id,
            guest_id=guest_id,
            name=field("name"),
            email=field("email"),
            phone=field("phone"),
            status=request.status,
            additional_guest_names=field("additional_guests"),
            dietary_notes=field("dietary_notes"),
            notify_by_email=field("notify_by_email"),
            notify_by_sms=field("notify_by_sms"),
            max_guests=field("max_guests"),
        )
    except RsvpError as e:
        raise to_http_exception(e)

    return GuestResponse.from_dto(guest)


@router.delete(GUEST_URL, status_code=status.HTTP_204_NO_CONTENT)
async def delete_guest(
    event_id: UUID,
    guest_id: UUID,
    write_model: UpdateGuestWriteModel = Depends(get_update_guest_write_model),
) -> None:
    try:
        await write_model.delete_guest(event_id=event_id, guest_id=guest_id)
    except RsvpError as e:
        raise to_http_exception(e)
