from datetime import UTC, datetime, timedelta

import pytest

from event_rsvp.guests.dtos import GuestStatus, NotificationKind
from event_rsvp.guests.features.send_reminders.write_model import ReminderScheduler
from event_rsvp.guests.repository.store import SqlGuestStore
from event_rsvp.guests.repository.tests.inmemory_store import InMemoryGuestStore
from event_rsvp.notifications.sender import ChannelNotificationSender
from event_rsvp.notifications.tests.fakes import (
    MockEmailService,
    MockSmsService,
    RecordingNotificationSender,
)

NOW = datetime(2026, 6, 1, 9, 0, tzinfo=UTC)


def reminders_sent(sender):
    return [email for kind, email in sender.sent if kind == NotificationKind.REMINDER]


@pytest.mark.asyncio
async def test_default_schedule_reminds_pending_guests_once():
    store = InMemoryGuestStore()
    event = await store.create_event(title="Brunch", date=NOW + timedelta(days=1))
    pending = await store.create_guest(event.uuid, "pending@example.com")
    answered = await store.create_guest(event.uuid, "answered@example.com")
    answered.status = GuestStatus.ATTENDING
    sender = RecordingNotificationSender()
    scheduler = ReminderScheduler(store, sender)

    first = await scheduler.run(NOW)
    second = await scheduler.run(NOW + timedelta(hours=1))

    assert first.events_checked == 1
    assert first.reminders_sent == 1
    assert second.reminders_sent == 0
    assert reminders_sent(sender) == ["pending@example.com"]
    assert [d.reminder_key for d in pending.reminder_deliveries] == ["day:2"]
    assert pending.reminder_sent_at == NOW


@pytest.mark.asyncio
async def test_entries_due_together_send_one_reminder():
    store = InMemoryGuestStore()
    event = await store.create_event(
        title="Brunch", date=NOW + timedelta(hours=20), reminder_schedule="[7, 3, 1]"
    )
    guest = await store.create_guest(event.uuid, "ada@example.com")
    sender = RecordingNotificationSender()

    result = await ReminderScheduler(store, sender).run(NOW)

    assert result.reminders_sent == 1
    assert sorted(d.reminder_key for d in guest.reminder_deliveries) == ["day:1", "day:3", "day:7"]


@pytest.mark.asyncio
async def test_each_entry_fires_as_it_comes_due():
    store = InMemoryGuestStore()
    event = await store.create_event(
        title="Brunch",
        date=NOW + timedelta(days=5),
        reminder_schedule='[{"type":"day","value":7},{"type":"hour","value":2}]',
    )
    await store.create_guest(event.uuid, "ada@example.com")
    sender = RecordingNotificationSender()
    scheduler = ReminderScheduler(store, sender)

    await scheduler.run(NOW)
    await scheduler.run(NOW + timedelta(days=2))
    await scheduler.run(NOW + timedelta(days=5) - timedelta(hours=1))

    assert reminders_sent(sender) == ["ada@example.com", "ada@example.com"]


@pytest.mark.asyncio
async def test_events_outside_the_window_are_ignored():
    store = InMemoryGuestStore()
    far = await store.create_event(title="Far", date=NOW + timedelta(days=20), reminder_schedule="[30]")
    past = await store.create_event(title="Past", date=NOW - timedelta(hours=1))
    await store.create_guest(far.uuid, "far@example.com")
    await store.create_guest(past.uuid, "past@example.com")
    sender = RecordingNotificationSender()

    result = await ReminderScheduler(store, sender).run(NOW)

    assert result.events_checked == 0
    assert sender.sent == []


@pytest.mark.asyncio
async def test_guest_without_channels_is_not_marked():
    store = InMemoryGuestStore()
    event = await store.create_event(title="Brunch", date=NOW + timedelta(days=1))
    guest = await store.create_guest(event.uuid, "quiet@example.com", notify_by_email=False)

    result = await ReminderScheduler(store, RecordingNotificationSender()).run(NOW)

    assert result.reminders_sent == 0
    assert guest.reminder_deliveries == []


@pytest.mark.asyncio
async def test_one_failure_does_not_stop_the_run():
    store = InMemoryGuestStore()
    event = await store.create_event(title="Brunch", date=NOW + timedelta(days=1))
    broken = await store.create_guest(event.uuid, "broken@example.com")
    await store.create_guest(event.uuid, "fine@example.com")
    await store.create_guest(event.uuid, "slow@example.com")
    sender = RecordingNotificationSender(
        failing_emails={"broken@example.com"}, stalling_emails={"slow@example.com"}
    )

    result = await ReminderScheduler(store, sender, item_timeout=0.05).run(NOW)

    assert result.reminders_sent == 1
    assert result.failed_count == 2
    assert result.errors == [
        "broken@example.com: Failed to send reminder by email",
        "slow@example.com: Timed out",
    ]
    # nothing recorded, so the next run tries again
    assert broken.reminder_deliveries == []


@pytest.mark.asyncio
async def test_partial_delivery_is_recorded_and_not_resent():
    store = InMemoryGuestStore()
    event = await store.create_event(title="Brunch", date=NOW + timedelta(days=1))
    guest = await store.create_guest(
        event.uuid, "ada@example.com", phone="+15550100", notify_by_sms=True
    )
    email_service = MockEmailService()
    sender = ChannelNotificationSender(
        email_service=email_service, sms_service=MockSmsService(fail=True)
    )
    scheduler = ReminderScheduler(store, sender)

    first = await scheduler.run(NOW)
    later = [await scheduler.run(NOW + timedelta(hours=hours)) for hours in (1, 2)]

    assert first.failed_count == 1
    assert first.errors == ["ada@example.com: Failed to send reminder by sms"]
    assert [method for method, _ in email_service.calls] == ["send_reminder"]
    assert all(run.failed_count == 0 for run in later)
    assert [d.reminder_key for d in guest.reminder_deliveries] == ["day:2"]
    assert guest.reminder_sent_at == NOW


@pytest.mark.asyncio
async def test_reminder_run_in_database(db_schema):
    store = SqlGuestStore()
    event = await store.create_event(title="Brunch", date=NOW + timedelta(days=1))
    await store.create_guest(event.uuid, "ada@example.com")
    sender = RecordingNotificationSender()
    scheduler = ReminderScheduler(store, sender)

    first = await scheduler.run(NOW)
    second = await scheduler.run(NOW + timedelta(minutes=30))

    assert (first.reminders_sent, second.reminders_sent) == (1, 0)
    guests = await store.list_guests(event.uuid)
    assert [d.reminder_key for d in guests[0].reminder_deliveries] == ["day:2"]
