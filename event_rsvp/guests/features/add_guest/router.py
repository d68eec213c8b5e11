from uuid import UUID

from fastapi import APIRouter, Depends, status

from event_rsvp.errors import RsvpError
from event_rsvp.guests.features.add_guest.dtos import AddGuestRequest, AddGuestResponse
from event_rsvp.guests.features.add_guest.write_model import (
    AddGuestWriteModel,
    StoreAddGuestWriteModel,
)
from event_rsvp.guests.http_errors import to_http_exception
from event_rsvp.guests.repository.store import SqlGuestStore
from event_rsvp.guests.schemas import GuestResponse
from event_rsvp.notifications import get_notification_sender
from event_rsvp.notifications.sender import rsvp_url_for

router = APIRouter()

ADD_GUEST_URL = "/api/v1/events/{event_id}/guests"


def get_add_guest_write_model() -> AddGuestWriteModel:
    """Dependency to get the add guest write model instance."""
    return StoreAddGuestWriteModel(
        store=SqlGuestStore(),
        notification_sender=get_notification_sender(),
    )


@router.post(ADD_GUEST_URL, response_model=AddGuestResponse, status_code=status.HTTP_201_CREATED)
async def add_guest(
    event_id: UUID,
    request: AddGuestRequest,
    write_model: AddGuestWriteModel = Depends(get_add_guest_write_model),
) -> AddGuestResponse:
    try:
        guest, invited = await write_model.add_guest(
            event_id=event_id,
            email=request.email,
            name=request.name,
            phone=request.phone,
            notify_by_email=request.notify_by_email,
            notify_by_sms=request.notify_by_sms,
            max_guests=request.max_guests,
            send_invitation=request.send_invitation,
        )
    except RsvpError as e:
        raise to_http_exception(e)

    return AddGuestResponse(
        guest=GuestResponse.from_dto(guest),
        rsvp_url=rsvp_url_for(guest.token),
        invited=invited,
    )
