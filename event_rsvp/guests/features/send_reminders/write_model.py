"""Write model behind the periodic reminder run.

A cron job calls the run every so often. Each call looks at events starting
within the next two weeks and reminds PENDING guests whose schedule entries
have come due. Each entry fires at most once per guest, and a guest gets at
most one reminder per run even when several entries are due together.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime, timedelta

from event_rsvp.config.settings import settings
from event_rsvp.errors import NotificationError
from event_rsvp.events.repository.orm_models import Event
from event_rsvp.guests.dtos import GuestStatus, NotificationChannel, ReminderRunResultDTO
from event_rsvp.guests.features.bulk_action.write_model import guest_label
from event_rsvp.guests.repository.orm_models import Guest
from event_rsvp.guests.repository.store import GuestStore
from event_rsvp.notifications.sender import NotificationSender
from event_rsvp.rsvp.clock import utcnow
from event_rsvp.rsvp.reminders import Reminder, due_reminders, effective_schedule

logger = logging.getLogger(__name__)

LOOKAHEAD = timedelta(days=14)


class SendRemindersWriteModel(ABC):
    @abstractmethod
    async def run(self, now: datetime | None = None) -> ReminderRunResultDTO:
        raise NotImplementedError


class ReminderScheduler(SendRemindersWriteModel):
    def __init__(
        self,
        store: GuestStore,
        notification_sender: NotificationSender,
        item_timeout: float | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.store = store
        self.notification_sender = notification_sender
        self.item_timeout = (
            item_timeout if item_timeout is not None else settings.notification_timeout_seconds
        )
        self.clock = clock

    async def run(self, now: datetime | None = None) -> ReminderRunResultDTO:
        now = now or self.clock()
        events = await self.store.list_events_starting_between(now, now + LOOKAHEAD)
        result = ReminderRunResultDTO(events_checked=len(events))

        for event in events:
            due = due_reminders(effective_schedule(event.reminder_schedule), event.date, now)
            if not due:
                continue

            guests = await self.store.list_guests(event.uuid, status=GuestStatus.PENDING)
            for guest in guests:
                await self._remind_guest(guest, event, due, now, result)

        logger.info(
            "Reminder run checked %d events: %d sent, %d failed",
            result.events_checked,
            result.reminders_sent,
            result.failed_count,
        )
        return result

    async def _remind_guest(
        self,
        guest: Guest,
        event: Event,
        due: list[Reminder],
        now: datetime,
        result: ReminderRunResultDTO,
    ) -> None:
        fired = {delivery.reminder_key for delivery in guest.reminder_deliveries}
        unfired = [reminder.key for reminder in due if reminder.key not in fired]
        if not unfired:
            return

        try:
            delivered = await asyncio.wait_for(
                self._send_and_record(guest, event, unfired, now), timeout=self.item_timeout
            )
        except asyncio.TimeoutError:
            logger.warning("Reminder to guest %s timed out", guest.uuid)
            result.failed_count += 1
            result.errors.append(f"{guest_label(guest)}: Timed out")
            return
        except Exception as e:
            logger.error("Reminder to guest %s failed: %s", guest.uuid, e)
            result.failed_count += 1
            result.errors.append(f"{guest_label(guest)}: {e}")
            return

        if delivered:
            result.reminders_sent += 1

    async def _send_and_record(
        self, guest: Guest, event: Event, keys: list[str], now: datetime
    ) -> list[NotificationChannel]:
        """Send the reminder and record ``keys`` as fired if any channel delivered."""
        try:
            delivered = await self.notification_sender.send_reminder(guest, event)
        except NotificationError as e:
            if e.delivered:
                await self.store.record_reminder_delivery(guest.uuid, keys, now)
            raise
        if delivered:
            await self.store.record_reminder_delivery(guest.uuid, keys, now)
        return delivered
