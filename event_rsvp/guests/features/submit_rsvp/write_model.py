"""Write model for the public RSVP form.

The form is keyed by email rather than token: submitting for an address that
is already on the event updates that guest, otherwise a new guest is created.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from uuid import UUID

from event_rsvp.config.settings import settings
from event_rsvp.events.repository.orm_models import Event
from event_rsvp.guests.dtos import GuestDTO, GuestStatus, RsvpResponseStatus
from event_rsvp.guests.repository.orm_models import Guest
from event_rsvp.guests.repository.store import GuestStore
from event_rsvp.notifications.sender import NotificationSender
from event_rsvp.rsvp.clock import utcnow
from event_rsvp.rsvp.transitions import apply_rsvp_transition

logger = logging.getLogger(__name__)


async def send_confirmation_quietly(
    notification_sender: NotificationSender, guest: Guest, event: Event
) -> None:
    """Send an RSVP confirmation; failures are logged and never reach the caller."""
    try:
        await asyncio.wait_for(
            notification_sender.send_confirmation(guest, event),
            timeout=settings.notification_timeout_seconds,
        )
    except Exception:
        logger.exception("Failed to send RSVP confirmation to guest %s", guest.uuid)


class SubmitRsvpWriteModel(ABC):
    @abstractmethod
    async def submit_rsvp(
        self,
        event_id: UUID,
        email: str,
        name: str,
        status: RsvpResponseStatus,
        phone: str | None = None,
        additional_guest_names: list[str] | None = None,
        dietary_notes: str | None = None,
    ) -> GuestDTO:
        """Record an RSVP for ``email`` on the event.

        Raises:
            EventNotFoundError: The event does not exist.
            DeadlinePassedError: The event's RSVP deadline has passed.
            CapacityExceededError: Too many additional guests for the limit.
        """
        raise NotImplementedError


class StoreSubmitRsvpWriteModel(SubmitRsvpWriteModel):
    def __init__(
        self,
        store: GuestStore,
        notification_sender: NotificationSender | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.notification_sender = notification_sender
        self.clock = clock

    async def submit_rsvp(
        self,
        event_id: UUID,
        email: str,
        name: str,
        status: RsvpResponseStatus,
        phone: str | None = None,
        additional_guest_names: list[str] | None = None,
        dietary_notes: str | None = None,
    ) -> GuestDTO:
        now = self.clock()
        email = email.strip().lower()
        target = GuestStatus(RsvpResponseStatus(status).value)

        def respond(guest: Guest, event: Event, created: bool) -> None:
            apply_rsvp_transition(
                guest,
                event,
                target,
                now,
                additional_guest_names=additional_guest_names or [],
                dietary_notes=dietary_notes,
            )
            guest.name = name.strip()
            if phone is not None:
                guest.phone = phone.strip() or None

        guest, created = await self.store.upsert_guest(event_id, email, respond)
        logger.info(
            "%s RSVP %s for %s on event %s",
            "New" if created else "Updated",
            target.value,
            email,
            event_id,
        )

        if self.notification_sender is not None:
            event = await self.store.get_event(event_id)
            if event is not None:
                await send_confirmation_quietly(self.notification_sender, guest, event)

        return GuestDTO.from_guest(guest)
