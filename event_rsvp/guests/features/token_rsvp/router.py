from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from event_rsvp.errors import RsvpError
from event_rsvp.guests.features.token_rsvp.dtos import RsvpInfoResponse, UpdateRsvpRequest
from event_rsvp.guests.features.token_rsvp.write_model import (
    RsvpTokenWriteModel,
    StoreRsvpTokenWriteModel,
)
from event_rsvp.guests.http_errors import to_http_exception
from event_rsvp.guests.repository.store import SqlGuestStore
from event_rsvp.guests.schemas import EventSummaryResponse, GuestResponse
from event_rsvp.notifications import get_notification_sender
from event_rsvp.rsvp.transitions import UNCHANGED

router = APIRouter()

RSVP_BY_TOKEN_URL = "/api/v1/rsvp/{token}"
QUICK_RSVP_URL = "/api/v1/rsvp/{token}/quick"


def get_rsvp_token_write_model() -> RsvpTokenWriteModel:
    """Dependency to get the token RSVP write model instance."""
    return StoreRsvpTokenWriteModel(
        store=SqlGuestStore(),
        notification_sender=get_notification_sender(),
    )


@router.get(RSVP_BY_TOKEN_URL, response_model=RsvpInfoResponse)
async def get_rsvp(
    token: str,
    write_model: RsvpTokenWriteModel = Depends(get_rsvp_token_write_model),
) -> RsvpInfoResponse:
    """Current answer for the guest behind the token, with the event it is for."""
    try:
        info = await write_model.get_rsvp_info(token)
    except RsvpError as e:
        raise to_http_exception(e)

    return RsvpInfoResponse(
        guest=GuestResponse.from_dto(info.guest),
        event=EventSummaryResponse.from_dto(info.event),
        deadline_passed=info.deadline_passed,
    )


@router.patch(RSVP_BY_TOKEN_URL, response_model=GuestResponse)
async def update_rsvp(
    token: str,
    request: UpdateRsvpRequest,
    write_model: RsvpTokenWriteModel = Depends(get_rsvp_token_write_model),
) -> GuestResponse:
    provided = request.model_fields_set

    def field(name: str):
        return getattr(request, name) if name in provided else UNCHANGED

    try:
        guest = await write_model.update_rsvp(
            token=token,
            name=field("name"),
            phone=field("phone"),
            status=request.status,
            additional_guest_names=field("additional_guests"),
            dietary_notes=field("dietary_notes"),
        )
    except RsvpError as e:
        raise to_http_exception(e)

    return GuestResponse.from_dto(guest)


@router.get(QUICK_RSVP_URL)
async def quick_rsvp(
    token: str,
    status: str | None = None,
    write_model: RsvpTokenWriteModel = Depends(get_rsvp_token_write_model),
) -> RedirectResponse:
    """
    One-click answer from the links in invitation and reminder messages.

    Always redirects to the frontend, with ``success`` or ``error`` in the query.
    """
    outcome = await write_model.quick_rsvp(token, status)
    return RedirectResponse(url=outcome.redirect_url)
