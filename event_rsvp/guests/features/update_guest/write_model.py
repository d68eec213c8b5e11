"""Write model for a host editing or removing one guest of their event.

Host edits skip the RSVP deadline but never the guest limit: whenever the
guest ends up ATTENDING after a change to the status, the companions or the
per-guest limit, the party is checked again.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from uuid import UUID

from event_rsvp.errors import EventNotFoundError, GuestAlreadyExistsError, GuestNotFoundError
from event_rsvp.events.repository.orm_models import Event
from event_rsvp.guests.dtos import GuestDTO, GuestStatus
from event_rsvp.guests.repository.orm_models import Guest
from event_rsvp.guests.repository.store import GuestStore
from event_rsvp.rsvp.clock import utcnow
from event_rsvp.rsvp.transitions import UNCHANGED, apply_rsvp_transition, ensure_capacity

logger = logging.getLogger(__name__)


class UpdateGuestWriteModel(ABC):
    @abstractmethod
    async def update_guest(
        self,
        event_id: UUID,
        guest_id: UUID,
        name=UNCHANGED,
        email=UNCHANGED,
        phone=UNCHANGED,
        status: GuestStatus | None = None,
        additional_guest_names=UNCHANGED,
        dietary_notes=UNCHANGED,
        notify_by_email=UNCHANGED,
        notify_by_sms=UNCHANGED,
        max_guests=UNCHANGED,
    ) -> GuestDTO:
        """Edit a guest of the event. Fields left UNCHANGED keep their value.

        Raises:
            EventNotFoundError: The event does not exist.
            GuestNotFoundError: The guest is not on the event's list.
            GuestAlreadyExistsError: The new email belongs to another guest.
            CapacityExceededError: The party does not fit the guest limit.
        """
        raise NotImplementedError

    @abstractmethod
    async def delete_guest(self, event_id: UUID, guest_id: UUID) -> None:
        """Remove a guest from the event's list."""
        raise NotImplementedError


class StoreUpdateGuestWriteModel(UpdateGuestWriteModel):
    def __init__(
        self,
        store: GuestStore,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.clock = clock

    async def _find(self, event_id: UUID, guest_id: UUID) -> Guest:
        event = await self.store.get_event(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        found = await self.store.find_guests(event_id, [guest_id])
        if not found:
            raise GuestNotFoundError(guest_id)
        return found[0]

    async def _ensure_email_free(self, event_id: UUID, guest: Guest, email: str) -> None:
        if email == guest.email:
            return
        for other in await self.store.list_guests(event_id):
            if other.email == email and other.uuid != guest.uuid:
                raise GuestAlreadyExistsError(email)

    async def update_guest(
        self,
        event_id: UUID,
        guest_id: UUID,
        name=UNCHANGED,
        email=UNCHANGED,
        phone=UNCHANGED,
        status: GuestStatus | None = None,
        additional_guest_names=UNCHANGED,
        dietary_notes=UNCHANGED,
        notify_by_email=UNCHANGED,
        notify_by_sms=UNCHANGED,
        max_guests=UNCHANGED,
    ) -> GuestDTO:
        now = self.clock()
        guest = await self._find(event_id, guest_id)

        if email is not UNCHANGED and email is not None:
            email = email.strip().lower()
            await self._ensure_email_free(event_id, guest, email)
        if additional_guest_names is None:
            additional_guest_names = []

        answer_changed = (
            status is not None
            or additional_guest_names is not UNCHANGED
            or dietary_notes is not UNCHANGED
        )

        def update(stored: Guest, stored_event: Event) -> None:
            if max_guests is not UNCHANGED:
                stored.max_guests = max_guests

            if answer_changed:
                target = GuestStatus(status) if status is not None else GuestStatus(stored.status)
                apply_rsvp_transition(
                    stored,
                    stored_event,
                    target,
                    now,
                    additional_guest_names=additional_guest_names,
                    dietary_notes=dietary_notes,
                    enforce_deadline=False,
                )
            elif max_guests is not UNCHANGED and stored.status == GuestStatus.ATTENDING:
                ensure_capacity(stored_event, stored, len(stored.additional_guests))

            if name is not UNCHANGED:
                stored.name = (name or "").strip() or None
            if email is not UNCHANGED and email:
                stored.email = email
            if phone is not UNCHANGED:
                stored.phone = (phone or "").strip() or None
            if notify_by_email is not UNCHANGED and notify_by_email is not None:
                stored.notify_by_email = notify_by_email
            wants_sms = stored.notify_by_sms
            if notify_by_sms is not UNCHANGED and notify_by_sms is not None:
                wants_sms = notify_by_sms
            # no SMS without a number to send it to
            stored.notify_by_sms = bool(wants_sms) and stored.phone is not None

        updated = await self.store.modify_guest(guest.uuid, update)
        logger.info("Host updated guest %s of event %s", updated.uuid, event_id)
        return GuestDTO.from_guest(updated)

    async def delete_guest(self, event_id: UUID, guest_id: UUID) -> None:
        guest = await self._find(event_id, guest_id)
        await self.store.delete_guest(guest.uuid)
        logger.info("Host removed guest %s from event %s", guest.uuid, event_id)
