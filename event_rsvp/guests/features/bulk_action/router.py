from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from event_rsvp.errors import RsvpError
from event_rsvp.guests.dtos import BulkAction
from event_rsvp.guests.features.bulk_action.dtos import (
    BulkActionRequest,
    BulkActionResponse,
    GuestNotificationResponse,
)
from event_rsvp.guests.features.bulk_action.write_model import (
    BulkActionWriteModel,
    BulkGuestActionProcessor,
)
from event_rsvp.guests.http_errors import to_http_exception
from event_rsvp.guests.repository.store import SqlGuestStore
from event_rsvp.notifications import get_notification_sender

router = APIRouter()

BULK_ACTION_URL = "/api/v1/events/{event_id}/guests/bulk"


def get_bulk_action_write_model() -> BulkActionWriteModel:
    """Dependency to get the bulk action write model instance."""
    return BulkGuestActionProcessor(
        store=SqlGuestStore(),
        notification_sender=get_notification_sender(),
    )


@router.post(
    BULK_ACTION_URL,
    response_model=BulkActionResponse,
    responses={status.HTTP_207_MULTI_STATUS: {"model": BulkActionResponse}},
)
async def bulk_guest_action(
    event_id: UUID,
    request: BulkActionRequest,
    response: Response,
    write_model: BulkActionWriteModel = Depends(get_bulk_action_write_model),
) -> BulkActionResponse:
    """
    Apply invite, remind, delete or changeStatus to many guests at once.

    Answers 207 when some guests failed; the errors list says which and why.
    """
    try:
        result = await write_model.run(
            event_id=event_id,
            action=request.action,
            guest_ids=request.guest_ids,
            status=request.status,
        )
    except RsvpError as e:
        raise to_http_exception(e)

    if result.is_partial:
        response.status_code = status.HTTP_207_MULTI_STATUS

    return BulkActionResponse(
        success_count=result.success_count,
        failed_count=result.failed_count,
        errors=result.errors,
    )


INVITE_GUEST_URL = "/api/v1/events/{event_id}/guests/{guest_id}/invite"
REMIND_GUEST_URL = "/api/v1/events/{event_id}/guests/{guest_id}/remind"


async def _send_to_guest(
    write_model: BulkActionWriteModel, event_id: UUID, guest_id: UUID, action: BulkAction
) -> GuestNotificationResponse:
    try:
        await write_model.send_to_guest(event_id=event_id, guest_id=guest_id, action=action)
    except RsvpError as e:
        raise to_http_exception(e)
    return GuestNotificationResponse()


@router.post(INVITE_GUEST_URL, response_model=GuestNotificationResponse)
async def invite_guest(
    event_id: UUID,
    guest_id: UUID,
    write_model: BulkActionWriteModel = Depends(get_bulk_action_write_model),
) -> GuestNotificationResponse:
    """Send (or resend) one guest's invitation."""
    return await _send_to_guest(write_model, event_id, guest_id, BulkAction.INVITE)


@router.post(REMIND_GUEST_URL, response_model=GuestNotificationResponse)
async def remind_guest(
    event_id: UUID,
    guest_id: UUID,
    write_model: BulkActionWriteModel = Depends(get_bulk_action_write_model),
) -> GuestNotificationResponse:
    """Remind one guest who has not responded yet."""
    return await _send_to_guest(write_model, event_id, guest_id, BulkAction.REMIND)
