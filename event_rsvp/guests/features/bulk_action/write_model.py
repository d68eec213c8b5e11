"""Write model for host bulk actions on an event's guest list.

One action is applied to every selected guest. Guests are processed
concurrently up to ``bulk_max_concurrency``; each guest is its own unit of
work and reports exactly one outcome, so a failing guest never stops the rest.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable, Iterable
from datetime import datetime
from uuid import UUID

from event_rsvp.config.settings import settings
from event_rsvp.errors import (
    EventNotFoundError,
    GuestNotFoundError,
    InvalidRequestError,
    NotificationError,
    RsvpError,
)
from event_rsvp.events.repository.orm_models import Event
from event_rsvp.guests.dtos import (
    BulkAction,
    BulkActionResultDTO,
    GuestStatus,
    NotificationChannel,
)
from event_rsvp.guests.repository.orm_models import Guest
from event_rsvp.guests.repository.store import GuestStore
from event_rsvp.notifications.sender import NotificationSender
from event_rsvp.rsvp.clock import utcnow
from event_rsvp.rsvp.transitions import apply_rsvp_transition

logger = logging.getLogger(__name__)

GuestHandler = Callable[[Guest, Event, GuestStatus | None, datetime], Awaitable[None]]


def parse_guest_ids(raw_ids: Iterable[str | UUID]) -> list[UUID]:
    """Keep the ids that are valid UUIDs, in request order, without duplicates."""
    parsed: list[UUID] = []
    seen: set[UUID] = set()
    for raw in raw_ids:
        if isinstance(raw, UUID):
            guest_id = raw
        else:
            try:
                guest_id = UUID(str(raw))
            except ValueError:
                logger.debug("Ignoring malformed guest id %r", raw)
                continue
        if guest_id not in seen:
            seen.add(guest_id)
            parsed.append(guest_id)
    return parsed


def guest_label(guest: Guest) -> str:
    return guest.email or str(guest.uuid)


class BulkActionWriteModel(ABC):
    @abstractmethod
    async def run(
        self,
        event_id: UUID,
        action: BulkAction,
        guest_ids: Iterable[str | UUID],
        status: GuestStatus | None = None,
    ) -> BulkActionResultDTO:
        """Apply ``action`` to the event's guests among ``guest_ids``.

        Raises:
            InvalidRequestError: changeStatus without a status, or none of the
                ids resolve to a guest of the event.
            EventNotFoundError: The event does not exist.
        """
        raise NotImplementedError

    @abstractmethod
    async def send_to_guest(self, event_id: UUID, guest_id: UUID, action: BulkAction) -> None:
        """Invite or remind one guest of the event."""
        raise NotImplementedError


class BulkGuestActionProcessor(BulkActionWriteModel):
    def __init__(
        self,
        store: GuestStore,
        notification_sender: NotificationSender,
        max_concurrency: int | None = None,
        item_timeout: float | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.notification_sender = notification_sender
        self.max_concurrency = max(1, max_concurrency or settings.bulk_max_concurrency)
        self.item_timeout = (
            item_timeout if item_timeout is not None else settings.notification_timeout_seconds
        )
        self.clock = clock
        self._handlers: dict[BulkAction, GuestHandler] = {
            BulkAction.INVITE: self._invite,
            BulkAction.REMIND: self._remind,
            BulkAction.DELETE: self._delete,
            BulkAction.CHANGE_STATUS: self._change_status,
        }

    async def run(
        self,
        event_id: UUID,
        action: BulkAction,
        guest_ids: Iterable[str | UUID],
        status: GuestStatus | None = None,
    ) -> BulkActionResultDTO:
        try:
            action = BulkAction(action)
        except ValueError as e:
            raise InvalidRequestError(f"Invalid action: {action}") from e

        if action is BulkAction.CHANGE_STATUS:
            if status is None:
                raise InvalidRequestError("Status is required for changeStatus action")
            try:
                status = GuestStatus(status)
            except ValueError as e:
                raise InvalidRequestError(f"Invalid status: {status}") from e

        event = await self.store.get_event(event_id)
        if event is None:
            raise EventNotFoundError(event_id)

        requested = parse_guest_ids(guest_ids)
        guests = await self.store.find_guests(event_id, requested)
        if not guests:
            raise InvalidRequestError("No valid guests found")

        position = {guest_id: index for index, guest_id in enumerate(requested)}
        guests.sort(key=lambda guest: position[guest.uuid])

        now = self.clock()
        handler = self._handlers[action]
        semaphore = asyncio.Semaphore(self.max_concurrency)

        async def process(guest: Guest) -> str | None:
            async with semaphore:
                return await self._process_guest(handler, guest, event, status, now)

        outcomes = await asyncio.gather(*(process(guest) for guest in guests))

        result = BulkActionResultDTO()
        for error in outcomes:
            if error is None:
                result.record_success()
            else:
                result.record_failure(error)

        logger.info(
            "Bulk %s on event %s: %d succeeded, %d failed",
            action.value,
            event_id,
            result.success_count,
            result.failed_count,
        )
        return result

    async def send_to_guest(self, event_id: UUID, guest_id: UUID, action: BulkAction) -> None:
        """Invite or remind a single guest, raising instead of collecting the error.

        A reminder goes out even when one was sent before, but only to a guest
        who has not responded yet.

        Raises:
            InvalidRequestError: The action is not invite or remind, or the
                guest already responded to a reminder request.
            EventNotFoundError: The event does not exist.
            GuestNotFoundError: The guest is not on the event's list.
            NotificationError: A channel failed or timed out.
        """
        action = BulkAction(action)
        if action not in (BulkAction.INVITE, BulkAction.REMIND):
            raise InvalidRequestError(f"Invalid action: {action.value}")

        event = await self.store.get_event(event_id)
        if event is None:
            raise EventNotFoundError(event_id)

        guests = await self.store.find_guests(event_id, [guest_id])
        if not guests:
            raise GuestNotFoundError(guest_id)
        guest = guests[0]

        if action is BulkAction.INVITE:
            send, field = self.notification_sender.send_invitation, "invited_at"
        else:
            if GuestStatus(guest.status) is not GuestStatus.PENDING:
                raise InvalidRequestError("Guest has already responded")
            send, field = self.notification_sender.send_reminder, "reminder_sent_at"

        try:
            await asyncio.wait_for(
                self._send_and_stamp(send, guest, event, field, self.clock()),
                timeout=self.item_timeout,
            )
        except asyncio.TimeoutError as e:
            logger.warning("Sending %s timed out for guest %s", action.value, guest.uuid)
            raise NotificationError(
                f"Timed out after {self.item_timeout:g} seconds"
            ) from e

    async def _process_guest(
        self,
        handler: GuestHandler,
        guest: Guest,
        event: Event,
        status: GuestStatus | None,
        now: datetime,
    ) -> str | None:
        """Run one guest's action. Returns the error entry, or None on success."""
        try:
            await asyncio.wait_for(handler(guest, event, status, now), timeout=self.item_timeout)
        except asyncio.TimeoutError:
            logger.warning("Bulk action timed out for guest %s", guest.uuid)
            return f"{guest_label(guest)}: Timed out after {self.item_timeout:g} seconds"
        except RsvpError as e:
            logger.warning("Bulk action failed for guest %s: %s", guest.uuid, e)
            return f"{guest_label(guest)}: {e}"
        except Exception as e:
            logger.exception("Bulk action failed for guest %s", guest.uuid)
            return f"{guest_label(guest)}: {str(e) or type(e).__name__}"
        return None

    async def _invite(
        self, guest: Guest, event: Event, status: GuestStatus | None, now: datetime
    ) -> None:
        await self._send_and_stamp(
            self.notification_sender.send_invitation, guest, event, "invited_at", now
        )

    async def _remind(
        self, guest: Guest, event: Event, status: GuestStatus | None, now: datetime
    ) -> None:
        if GuestStatus(guest.status) is not GuestStatus.PENDING or guest.reminder_sent_at:
            logger.debug("Skipping reminder for guest %s", guest.uuid)
            return

        await self._send_and_stamp(
            self.notification_sender.send_reminder, guest, event, "reminder_sent_at", now
        )

    async def _send_and_stamp(
        self,
        send: Callable[[Guest, Event], Awaitable[list[NotificationChannel]]],
        guest: Guest,
        event: Event,
        field: str,
        now: datetime,
    ) -> None:
        """Send, then stamp ``field`` if any channel delivered.

        A partial failure still stamps before the error propagates, so the
        channel that went out is not sent again on the next run.
        """
        try:
            delivered = await send(guest, event)
        except NotificationError as e:
            if e.delivered:
                await self.store.modify_guest(guest.uuid, _stamp(field, now))
            raise
        if delivered:
            await self.store.modify_guest(guest.uuid, _stamp(field, now))

    async def _delete(
        self, guest: Guest, event: Event, status: GuestStatus | None, now: datetime
    ) -> None:
        await self.store.delete_guest(guest.uuid)

    async def _change_status(
        self, guest: Guest, event: Event, status: GuestStatus | None, now: datetime
    ) -> None:
        def transition(stored: Guest, stored_event: Event) -> None:
            # host override: no deadline guard, capacity still applies
            apply_rsvp_transition(
                stored,
                stored_event,
                status,
                now,
                enforce_deadline=False,
                enforce_capacity=True,
            )

        await self.store.modify_guest(guest.uuid, transition)


def _stamp(field: str, value: datetime) -> Callable[[Guest, Event], None]:
    def mutate(guest: Guest, event: Event) -> None:
        setattr(guest, field, value)

    return mutate
