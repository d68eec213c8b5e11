"""Tests for the public RSVP write model."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest
from sqlalchemy import func, select

from event_rsvp.config.database import async_session_manager
from event_rsvp.errors import CapacityExceededError, DeadlinePassedError, EventNotFoundError
from event_rsvp.guests.dtos import GuestStatus, NotificationKind, RsvpResponseStatus
from event_rsvp.guests.features.submit_rsvp.write_model import StoreSubmitRsvpWriteModel
from event_rsvp.guests.repository.orm_models import AdditionalGuest, Guest
from event_rsvp.guests.repository.store import SqlGuestStore
from event_rsvp.guests.repository.tests.inmemory_store import InMemoryGuestStore
from event_rsvp.notifications.tests.fakes import RecordingNotificationSender

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=UTC)


async def create_event(store, **fields):
    fields.setdefault("title", "Reunion")
    fields.setdefault("date", NOW + timedelta(days=10))
    return await store.create_event(**fields)


def make_write_model(store, sender=None):
    return StoreSubmitRsvpWriteModel(store=store, notification_sender=sender, clock=lambda: NOW)


@pytest.mark.asyncio
async def test_new_email_creates_guest():
    store = InMemoryGuestStore()
    event = await create_event(store)
    sender = RecordingNotificationSender()

    guest = await make_write_model(store, sender).submit_rsvp(
        event_id=event.uuid,
        email="Ada@Example.com",
        name="Ada",
        status=RsvpResponseStatus.ATTENDING,
        additional_guest_names=["Grace"],
        dietary_notes="vegetarian",
    )

    assert guest.email == "ada@example.com"
    assert guest.status == GuestStatus.ATTENDING
    assert guest.additional_guests == ["Grace"]
    assert guest.dietary_notes == "vegetarian"
    assert guest.responded_at == NOW
    assert guest.token
    assert sender.sent == [(NotificationKind.CONFIRMATION, "ada@example.com")]


@pytest.mark.asyncio
async def test_unknown_event():
    with pytest.raises(EventNotFoundError):
        await make_write_model(InMemoryGuestStore()).submit_rsvp(
            event_id=uuid4(), email="a@example.com", name="A", status=RsvpResponseStatus.MAYBE
        )


@pytest.mark.asyncio
async def test_capacity_scenario_keeps_last_accepted_answer():
    store = InMemoryGuestStore()
    event = await create_event(store, max_guests_per_invitee=2)
    write_model = make_write_model(store)

    accepted = await write_model.submit_rsvp(
        event_id=event.uuid,
        email="ada@example.com",
        name="Ada",
        status=RsvpResponseStatus.ATTENDING,
        additional_guest_names=["Jane"],
    )

    with pytest.raises(CapacityExceededError) as exc_info:
        await write_model.submit_rsvp(
            event_id=event.uuid,
            email="ada@example.com",
            name="Ada",
            status=RsvpResponseStatus.ATTENDING,
            additional_guest_names=["Jane", "Bob"],
        )

    assert "1 additional guest" in str(exc_info.value)
    stored = store.guests[accepted.id]
    assert [a.name for a in stored.additional_guests] == ["Jane"]
    assert len(store.guests) == 1


@pytest.mark.asyncio
async def test_deadline_passed_creates_nothing():
    store = InMemoryGuestStore()
    event = await create_event(store, rsvp_deadline=NOW - timedelta(hours=1))

    with pytest.raises(DeadlinePassedError):
        await make_write_model(store).submit_rsvp(
            event_id=event.uuid,
            email="late@example.com",
            name="Late",
            status=RsvpResponseStatus.ATTENDING,
        )

    assert store.guests == {}


@pytest.mark.asyncio
async def test_confirmation_failure_does_not_undo_the_rsvp():
    store = InMemoryGuestStore()
    event = await create_event(store)
    sender = RecordingNotificationSender(failing_emails={"ada@example.com"})

    guest = await make_write_model(store, sender).submit_rsvp(
        event_id=event.uuid,
        email="ada@example.com",
        name="Ada",
        status=RsvpResponseStatus.NOT_ATTENDING,
    )

    assert guest.status == GuestStatus.NOT_ATTENDING
    assert store.guests[guest.id].status == GuestStatus.NOT_ATTENDING


@pytest.mark.asyncio
async def test_resubmission_keeps_one_row_with_latest_companions(db_schema):
    store = SqlGuestStore()
    event = await create_event(store)
    write_model = make_write_model(store)

    for companions in (["Jane", "Bob"], ["Jane", "Bob"], ["Carol"]):
        guest = await write_model.submit_rsvp(
            event_id=event.uuid,
            email="ada@example.com",
            name="Ada",
            status=RsvpResponseStatus.ATTENDING,
            additional_guest_names=companions,
        )

    async with async_session_manager() as session:
        guest_rows = await session.scalar(
            select(func.count()).select_from(Guest).where(Guest.event_id == event.uuid)
        )
        companion_names = (
            await session.execute(
                select(AdditionalGuest.name).where(AdditionalGuest.guest_id == guest.id)
            )
        ).scalars().all()

    assert guest_rows == 1
    assert companion_names == ["Carol"]
    assert guest.additional_guests == ["Carol"]


@pytest.mark.asyncio
async def test_declining_clears_companions_in_the_database(db_schema):
    store = SqlGuestStore()
    event = await create_event(store)
    write_model = make_write_model(store)
    await write_model.submit_rsvp(
        event_id=event.uuid,
        email="ada@example.com",
        name="Ada",
        status=RsvpResponseStatus.ATTENDING,
        additional_guest_names=["Jane"],
        dietary_notes="no shellfish",
    )

    guest = await write_model.submit_rsvp(
        event_id=event.uuid,
        email="ada@example.com",
        name="Ada",
        status=RsvpResponseStatus.NOT_ATTENDING,
    )

    async with async_session_manager() as session:
        companions = await session.scalar(
            select(func.count()).select_from(AdditionalGuest).where(AdditionalGuest.guest_id == guest.id)
        )

    assert companions == 0
    assert guest.additional_guests == []
    assert guest.dietary_notes is None
