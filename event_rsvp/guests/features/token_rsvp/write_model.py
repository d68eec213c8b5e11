"""Write model for the RSVP link a guest receives by email or SMS.

The token in the link is the guest's only credential. Every change made
through it goes through the deadline guard.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime
from urllib.parse import urlencode

from event_rsvp.config.settings import settings
from event_rsvp.errors import CapacityExceededError, DeadlinePassedError, GuestNotFoundError, RsvpError
from event_rsvp.events.repository.orm_models import Event
from event_rsvp.guests.dtos import (
    EventSummaryDTO,
    GuestDTO,
    GuestStatus,
    QuickRsvpOutcomeDTO,
    RSVPInfoDTO,
    RsvpResponseStatus,
)
from event_rsvp.guests.features.submit_rsvp.write_model import send_confirmation_quietly
from event_rsvp.guests.repository.orm_models import Guest
from event_rsvp.guests.repository.store import GuestStore
from event_rsvp.notifications.sender import NotificationSender
from event_rsvp.rsvp.clock import utcnow
from event_rsvp.rsvp.transitions import (
    UNCHANGED,
    apply_rsvp_transition,
    ensure_deadline_open,
    is_deadline_passed,
)

logger = logging.getLogger(__name__)

QUICK_RSVP_SUCCESS = {
    GuestStatus.ATTENDING: "rsvp_attending",
    GuestStatus.NOT_ATTENDING: "rsvp_not_attending",
    GuestStatus.MAYBE: "rsvp_maybe",
}


def _frontend_url(path: str = "", **query: str) -> str:
    url = f"{settings.frontend_url}{path}"
    if query:
        url = f"{url}?{urlencode(query)}"
    return url


class RsvpTokenWriteModel(ABC):
    @abstractmethod
    async def get_rsvp_info(self, token: str) -> RSVPInfoDTO:
        """Raises GuestNotFoundError for an unknown token."""
        raise NotImplementedError

    @abstractmethod
    async def update_rsvp(
        self,
        token: str,
        name=UNCHANGED,
        phone=UNCHANGED,
        status: RsvpResponseStatus | None = None,
        additional_guest_names=UNCHANGED,
        dietary_notes=UNCHANGED,
    ) -> GuestDTO:
        """Edit the answer behind ``token``. Fields left UNCHANGED keep their value.

        Raises:
            GuestNotFoundError: Unknown token.
            DeadlinePassedError: The event's RSVP deadline has passed.
            CapacityExceededError: Too many additional guests for the limit.
        """
        raise NotImplementedError

    @abstractmethod
    async def quick_rsvp(self, token: str, status: str | None) -> QuickRsvpOutcomeDTO:
        """One-click answer from a notification link.

        Never raises; every outcome, including failures, is a redirect.
        """
        raise NotImplementedError


class StoreRsvpTokenWriteModel(RsvpTokenWriteModel):
    def __init__(
        self,
        store: GuestStore,
        notification_sender: NotificationSender | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.notification_sender = notification_sender
        self.clock = clock

    async def _find(self, token: str) -> tuple[Guest, Event]:
        found = await self.store.get_guest_by_token(token)
        if found is None:
            raise GuestNotFoundError(token)
        return found

    async def _confirm(self, guest: Guest, event: Event) -> None:
        if self.notification_sender is not None:
            await send_confirmation_quietly(self.notification_sender, guest, event)

    async def get_rsvp_info(self, token: str) -> RSVPInfoDTO:
        guest, event = await self._find(token)
        return RSVPInfoDTO(
            guest=GuestDTO.from_guest(guest),
            event=EventSummaryDTO.from_event(event),
            deadline_passed=is_deadline_passed(event, self.clock()),
        )

    async def update_rsvp(
        self,
        token: str,
        name=UNCHANGED,
        phone=UNCHANGED,
        status: RsvpResponseStatus | None = None,
        additional_guest_names=UNCHANGED,
        dietary_notes=UNCHANGED,
    ) -> GuestDTO:
        now = self.clock()
        guest, event = await self._find(token)
        if additional_guest_names is None:
            additional_guest_names = []

        answer_changed = (
            status is not None
            or additional_guest_names is not UNCHANGED
            or dietary_notes is not UNCHANGED
        )

        def update(stored: Guest, stored_event: Event) -> None:
            if answer_changed:
                target = GuestStatus(status.value) if status is not None else GuestStatus(stored.status)
                apply_rsvp_transition(
                    stored,
                    stored_event,
                    target,
                    now,
                    additional_guest_names=additional_guest_names,
                    dietary_notes=dietary_notes,
                )
            else:
                # contact details only: the answer, its timestamp and party stay as they are
                ensure_deadline_open(stored_event, now)

            if name is not UNCHANGED and name:
                stored.name = name.strip()
            if phone is not UNCHANGED:
                stored.phone = (phone or "").strip() or None
                stored.notify_by_sms = stored.phone is not None

        updated = await self.store.modify_guest(guest.uuid, update)
        logger.info("Guest %s updated their RSVP to %s", updated.uuid, updated.status)
        await self._confirm(updated, event)
        return GuestDTO.from_guest(updated)

    async def quick_rsvp(self, token: str, status: str | None) -> QuickRsvpOutcomeDTO:
        try:
            target = GuestStatus(RsvpResponseStatus(status).value)
        except ValueError:
            return QuickRsvpOutcomeDTO(
                redirect_url=_frontend_url(f"/rsvp/{token}", error="invalid_status"),
                error="invalid_status",
            )

        try:
            found = await self.store.get_guest_by_token(token)
        except RsvpError:
            logger.exception("Quick RSVP lookup failed")
            return QuickRsvpOutcomeDTO(
                redirect_url=_frontend_url(error="rsvp_failed"), error="rsvp_failed"
            )
        if found is None:
            return QuickRsvpOutcomeDTO(
                redirect_url=_frontend_url(error="invalid_token"), error="invalid_token"
            )
        guest, event = found
        event_path = f"/events/{event.uuid}"

        now = self.clock()

        def respond(stored: Guest, stored_event: Event) -> None:
            apply_rsvp_transition(stored, stored_event, target, now)

        try:
            updated = await self.store.modify_guest(guest.uuid, respond)
        except DeadlinePassedError:
            return QuickRsvpOutcomeDTO(
                redirect_url=_frontend_url(event_path, error="deadline_passed"),
                error="deadline_passed",
            )
        except CapacityExceededError:
            # stored companions no longer fit; the full form lets the guest fix them
            return QuickRsvpOutcomeDTO(
                redirect_url=_frontend_url(f"/rsvp/{token}", error="capacity_exceeded"),
                error="capacity_exceeded",
            )
        except RsvpError:
            logger.exception("Quick RSVP failed for guest %s", guest.uuid)
            return QuickRsvpOutcomeDTO(
                redirect_url=_frontend_url(error="rsvp_failed"), error="rsvp_failed"
            )

        await self._confirm(updated, event)
        return QuickRsvpOutcomeDTO(
            redirect_url=_frontend_url(event_path, token=token, success=QUICK_RSVP_SUCCESS[target]),
            status=target,
        )
