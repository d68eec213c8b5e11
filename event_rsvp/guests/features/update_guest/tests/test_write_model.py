"""Tests for the host's single-guest edit."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import pytest

from event_rsvp.errors import (
    CapacityExceededError,
    EventNotFoundError,
    GuestAlreadyExistsError,
    GuestNotFoundError,
)
from event_rsvp.guests.dtos import GuestStatus
from event_rsvp.guests.features.update_guest.write_model import StoreUpdateGuestWriteModel
from event_rsvp.guests.repository.store import SqlGuestStore
from event_rsvp.guests.repository.tests.inmemory_store import InMemoryGuestStore
from event_rsvp.rsvp.transitions import apply_rsvp_transition

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=UTC)


async def setup_guest(store, **event_fields):
    event_fields.setdefault("title", "Reunion")
    event_fields.setdefault("date", NOW + timedelta(days=10))
    event = await store.create_event(**event_fields)
    guest = await store.create_guest(event.uuid, "ada@example.com", name="Ada")
    return event, guest


def make_write_model(store, now=NOW):
    return StoreUpdateGuestWriteModel(store=store, clock=lambda: now)


@pytest.mark.asyncio
async def test_host_sets_status_after_the_deadline():
    store = InMemoryGuestStore()
    event, guest = await setup_guest(store, rsvp_deadline=NOW - timedelta(days=1))

    updated = await make_write_model(store).update_guest(
        event.uuid,
        guest.uuid,
        status=GuestStatus.ATTENDING,
        additional_guest_names=["Grace", " "],
        dietary_notes="no nuts",
    )

    assert updated.status == GuestStatus.ATTENDING
    assert updated.additional_guests == ["Grace"]
    assert updated.dietary_notes == "no nuts"
    assert updated.responded_at == NOW


@pytest.mark.asyncio
async def test_host_can_reset_a_guest_to_pending():
    store = InMemoryGuestStore()
    event, guest = await setup_guest(store)
    apply_rsvp_transition(
        guest, event, GuestStatus.ATTENDING, NOW, additional_guest_names=["Grace"]
    )

    updated = await make_write_model(store).update_guest(
        event.uuid, guest.uuid, status=GuestStatus.PENDING
    )

    assert updated.status == GuestStatus.PENDING
    assert updated.responded_at is None
    assert updated.additional_guests == []


@pytest.mark.asyncio
async def test_lowering_the_limit_below_the_party_is_rejected():
    store = InMemoryGuestStore()
    event, guest = await setup_guest(store)
    apply_rsvp_transition(
        guest, event, GuestStatus.ATTENDING, NOW, additional_guest_names=["Grace", "Alan"]
    )

    with pytest.raises(CapacityExceededError) as exc_info:
        await make_write_model(store).update_guest(event.uuid, guest.uuid, max_guests=2)

    assert exc_info.value.allowed_additional == 1
    assert guest.max_guests is None


@pytest.mark.asyncio
async def test_raising_the_limit_lets_a_bigger_party_in():
    store = InMemoryGuestStore()
    event, guest = await setup_guest(store, max_guests_per_invitee=1)

    updated = await make_write_model(store).update_guest(
        event.uuid,
        guest.uuid,
        max_guests=3,
        status=GuestStatus.ATTENDING,
        additional_guest_names=["Grace", "Alan"],
    )

    assert updated.max_guests == 3
    assert updated.additional_guests == ["Grace", "Alan"]


@pytest.mark.asyncio
async def test_limit_change_for_pending_guest_keeps_the_answer():
    store = InMemoryGuestStore()
    event, guest = await setup_guest(store)

    updated = await make_write_model(store).update_guest(event.uuid, guest.uuid, max_guests=1)

    assert updated.max_guests == 1
    assert updated.status == GuestStatus.PENDING
    assert updated.responded_at is None


@pytest.mark.asyncio
async def test_contact_details_and_channels():
    store = InMemoryGuestStore()
    event, guest = await setup_guest(store)
    write_model = make_write_model(store)

    without_phone = await write_model.update_guest(event.uuid, guest.uuid, notify_by_sms=True)
    with_phone = await write_model.update_guest(
        event.uuid,
        guest.uuid,
        name=" Ada Lovelace ",
        email="ADA.L@example.com",
        phone="+15550100",
        notify_by_sms=True,
        notify_by_email=False,
    )
    phone_removed = await write_model.update_guest(event.uuid, guest.uuid, phone=None)

    assert not without_phone.notify_by_sms
    assert with_phone.name == "Ada Lovelace"
    assert with_phone.email == "ada.l@example.com"
    assert with_phone.notify_by_sms
    assert not with_phone.notify_by_email
    assert phone_removed.phone is None
    assert not phone_removed.notify_by_sms


@pytest.mark.asyncio
async def test_email_of_another_guest_is_rejected():
    store = InMemoryGuestStore()
    event, guest = await setup_guest(store)
    await store.create_guest(event.uuid, "grace@example.com")

    with pytest.raises(GuestAlreadyExistsError):
        await make_write_model(store).update_guest(
            event.uuid, guest.uuid, email="grace@example.com"
        )

    assert guest.email == "ada@example.com"


@pytest.mark.asyncio
async def test_guest_must_belong_to_the_event():
    store = InMemoryGuestStore()
    event, _ = await setup_guest(store)
    _, other_guest = await setup_guest(store)
    write_model = make_write_model(store)

    with pytest.raises(GuestNotFoundError):
        await write_model.update_guest(event.uuid, other_guest.uuid, name="Nope")
    with pytest.raises(GuestNotFoundError):
        await write_model.delete_guest(event.uuid, other_guest.uuid)
    with pytest.raises(EventNotFoundError):
        await write_model.update_guest(uuid4(), other_guest.uuid, name="Nope")

    assert other_guest.name == "Ada"
    assert store.deleted == []


@pytest.mark.asyncio
async def test_delete_guest():
    store = InMemoryGuestStore()
    event, guest = await setup_guest(store)

    await make_write_model(store).delete_guest(event.uuid, guest.uuid)

    assert guest.uuid not in store.guests


@pytest.mark.asyncio
async def test_update_guest_in_database(db_schema):
    store = SqlGuestStore()
    event, guest = await setup_guest(store, max_guests_per_invitee=2)

    updated = await make_write_model(store).update_guest(
        event.uuid,
        guest.uuid,
        status=GuestStatus.ATTENDING,
        additional_guest_names=["Grace"],
        phone="+15550100",
        notify_by_sms=True,
    )

    (reloaded,) = await store.list_guests(event.uuid)
    assert updated.status == GuestStatus.ATTENDING
    assert [a.name for a in reloaded.additional_guests] == ["Grace"]
    assert reloaded.notify_by_sms
