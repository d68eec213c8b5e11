import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from uuid import UUID

from event_rsvp.errors import EventNotFoundError, NotificationError
from event_rsvp.events.repository.orm_models import Event
from event_rsvp.guests.dtos import GuestDTO
from event_rsvp.guests.repository.orm_models import Guest
from event_rsvp.guests.repository.store import GuestStore
from event_rsvp.notifications.sender import NotificationSender
from event_rsvp.rsvp.clock import utcnow

logger = logging.getLogger(__name__)


class AddGuestWriteModel(ABC):
    @abstractmethod
    async def add_guest(
        self,
        event_id: UUID,
        email: str,
        name: str | None = None,
        phone: str | None = None,
        notify_by_email: bool = True,
        notify_by_sms: bool = False,
        max_guests: int | None = None,
        send_invitation: bool = False,
    ) -> tuple[GuestDTO, bool]:
        """Add a PENDING guest, optionally inviting them right away.

        Returns the guest and whether an invitation went out.
        """
        raise NotImplementedError


class StoreAddGuestWriteModel(AddGuestWriteModel):
    def __init__(
        self,
        store: GuestStore,
        notification_sender: NotificationSender | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.notification_sender = notification_sender
        self.clock = clock

    async def add_guest(
        self,
        event_id: UUID,
        email: str,
        name: str | None = None,
        phone: str | None = None,
        notify_by_email: bool = True,
        notify_by_sms: bool = False,
        max_guests: int | None = None,
        send_invitation: bool = False,
    ) -> tuple[GuestDTO, bool]:
        guest = await self.store.create_guest(
            event_id=event_id,
            email=email.strip().lower(),
            name=(name or "").strip() or None,
            phone=(phone or "").strip() or None,
            notify_by_email=notify_by_email,
            notify_by_sms=notify_by_sms,
            max_guests=max_guests,
        )
        logger.info("Added guest %s to event %s", guest.email, event_id)

        if not send_invitation or self.notification_sender is None:
            return GuestDTO.from_guest(guest), False

        event = await self.store.get_event(event_id)
        if event is None:
            raise EventNotFoundError(event_id)

        try:
            delivered = await self.notification_sender.send_invitation(guest, event)
        except NotificationError as e:
            # the guest stays on the list; the host can re-invite in bulk
            logger.warning("Invitation to new guest %s failed: %s", guest.uuid, e)
            if e.delivered:
                guest = await self.store.modify_guest(guest.uuid, _mark_invited(self.clock()))
            return GuestDTO.from_guest(guest), False

        if delivered:
            guest = await self.store.modify_guest(guest.uuid, _mark_invited(self.clock()))
        return GuestDTO.from_guest(guest), bool(delivered)


def _mark_invited(now: datetime) -> Callable[[Guest, Event], None]:
    def mutate(guest: Guest, event: Event) -> None:
        guest.invited_at = now

    return mutate
