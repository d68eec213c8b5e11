from fastapi import APIRouter, Depends

from event_rsvp.errors import RsvpError
from event_rsvp.guests.features.submit_rsvp.dtos import SubmitRsvpRequest
from event_rsvp.guests.features.submit_rsvp.write_model import (
    StoreSubmitRsvpWriteModel,
    SubmitRsvpWriteModel,
)
from event_rsvp.guests.http_errors import to_http_exception
from event_rsvp.guests.repository.store import SqlGuestStore
from event_rsvp.guests.schemas import GuestResponse
from event_rsvp.notifications import get_notification_sender

router = APIRouter()

SUBMIT_RSVP_URL = "/api/v1/rsvp"


def get_submit_rsvp_write_model() -> SubmitRsvpWriteModel:
    """Dependency to get the submit RSVP write model instance."""
    return StoreSubmitRsvpWriteModel(
        store=SqlGuestStore(),
        notification_sender=get_notification_sender(),
    )


@router.post(SUBMIT_RSVP_URL, response_model=GuestResponse)
async def submit_rsvp(
    request: SubmitRsvpRequest,
    write_model: SubmitRsvpWriteModel = Depends(get_submit_rsvp_write_model),
) -> GuestResponse:
    """
    Public RSVP form, keyed by email.

    Resubmitting with the same email updates the earlier answer.
    """
    try:
        guest = await write_model.submit_rsvp(
            event_id=request.event_id,
            email=request.email,
            name=request.name,
            status=request.status,
            phone=request.phone,
            additional_guest_names=request.additional_guests,
            dietary_notes=request.dietary_notes,
        )
    except RsvpError as e:
        raise to_http_exception(e)

    return GuestResponse.from_dto(guest)
