"""Tests for the token-keyed RSVP write model."""

from datetime import UTC, datetime, timedelta
from urllib.parse import parse_qs, urlparse

import pytest

from event_rsvp.config.settings import settings
from event_rsvp.errors import (
    CapacityExceededError,
    DeadlinePassedError,
    GuestNotFoundError,
    StorageError,
)
from event_rsvp.guests.dtos import GuestStatus, NotificationKind, RsvpResponseStatus
from event_rsvp.guests.features.token_rsvp.write_model import StoreRsvpTokenWriteModel
from event_rsvp.guests.repository.store import SqlGuestStore
from event_rsvp.guests.repository.tests.inmemory_store import InMemoryGuestStore
from event_rsvp.notifications.tests.fakes import RecordingNotificationSender
from event_rsvp.rsvp.transitions import apply_rsvp_transition

NOW = datetime(2026, 5, 1, 12, 0, tzinfo=UTC)


async def setup_guest(store, **event_fields):
    event_fields.setdefault("title", "Book club")
    event_fields.setdefault("date", NOW + timedelta(days=7))
    event = await store.create_event(**event_fields)
    guest = await store.create_guest(event.uuid, "ada@example.com", name="Ada")
    return event, guest


def make_write_model(store, sender=None, now=NOW):
    return StoreRsvpTokenWriteModel(store=store, notification_sender=sender, clock=lambda: now)


def query_of(url: str) -> dict[str, str]:
    return {key: values[0] for key, values in parse_qs(urlparse(url).query).items()}


@pytest.mark.asyncio
async def test_get_rsvp_info():
    store = InMemoryGuestStore()
    event, guest = await setup_guest(store, rsvp_deadline=NOW - timedelta(minutes=1))

    info = await make_write_model(store).get_rsvp_info(guest.token)

    assert info.guest.id == guest.uuid
    assert info.event.title == "Book club"
    assert info.deadline_passed


@pytest.mark.asyncio
async def test_unknown_token():
    with pytest.raises(GuestNotFoundError):
        await make_write_model(InMemoryGuestStore()).get_rsvp_info("missing")


@pytest.mark.asyncio
async def test_update_only_touches_provided_fields():
    store = InMemoryGuestStore()
    event, guest = await setup_guest(store)
    write_model = make_write_model(store)
    await write_model.update_rsvp(
        guest.token,
        status=RsvpResponseStatus.ATTENDING,
        additional_guest_names=["Grace"],
        dietary_notes="vegan",
    )

    updated = await write_model.update_rsvp(guest.token, name="Ada L.", phone="+15550100")

    assert updated.name == "Ada L."
    assert updated.phone == "+15550100"
    assert updated.notify_by_sms
    assert updated.status == GuestStatus.ATTENDING
    assert updated.additional_guests == ["Grace"]
    assert updated.dietary_notes == "vegan"


@pytest.mark.asyncio
async def test_update_to_maybe_clears_companions():
    store = InMemoryGuestStore()
    event, guest = await setup_guest(store)
    write_model = make_write_model(store)
    await write_model.update_rsvp(
        guest.token, status=RsvpResponseStatus.ATTENDING, additional_guest_names=["Grace"]
    )

    updated = await write_model.update_rsvp(guest.token, status=RsvpResponseStatus.MAYBE)

    assert updated.additional_guests == []
    assert updated.dietary_notes is None


@pytest.mark.asyncio
async def test_update_respects_capacity_and_deadline():
    store = InMemoryGuestStore()
    event, guest = await setup_guest(store, max_guests_per_invitee=1)

    with pytest.raises(CapacityExceededError):
        await make_write_model(store).update_rsvp(
            guest.token, status=RsvpResponseStatus.ATTENDING, additional_guest_names=["Grace"]
        )

    event.rsvp_deadline = NOW - timedelta(days=1)
    with pytest.raises(DeadlinePassedError):
        await make_write_model(store).update_rsvp(guest.token, status=RsvpResponseStatus.MAYBE)

    assert guest.status == GuestStatus.PENDING


@pytest.mark.asyncio
async def test_contact_details_edit_keeps_the_answer():
    store = InMemoryGuestStore()
    event, guest = await setup_guest(store)
    await make_write_model(store).update_rsvp(
        guest.token,
        status=RsvpResponseStatus.ATTENDING,
        additional_guest_names=["Grace", "Alan"],
    )
    # host lowered the limit after the guest answered
    event.max_guests_per_invitee = 2

    later = make_write_model(store, now=NOW + timedelta(days=1))
    updated = await later.update_rsvp(guest.token, name="Ada L.")
    await later.update_rsvp(guest.token, phone="+15550100")

    assert updated.name == "Ada L."
    assert guest.phone == "+15550100"
    assert guest.status == GuestStatus.ATTENDING
    assert guest.responded_at == NOW
    assert [a.name for a in guest.additional_guests] == ["Grace", "Alan"]


@pytest.mark.asyncio
async def test_contact_details_edit_after_deadline():
    store = InMemoryGuestStore()
    event, guest = await setup_guest(store, rsvp_deadline=NOW - timedelta(hours=1))

    with pytest.raises(DeadlinePassedError):
        await make_write_model(store).update_rsvp(guest.token, name="Ada L.")

    assert guest.name == "Ada"


@pytest.mark.asyncio
async def test_quick_rsvp_success_redirects_to_event():
    store = InMemoryGuestStore()
    event, guest = await setup_guest(store)
    sender = RecordingNotificationSender()

    outcome = await make_write_model(store, sender).quick_rsvp(guest.token, "ATTENDING")

    assert outcome.status == GuestStatus.ATTENDING
    assert outcome.error is None
    assert outcome.redirect_url.startswith(f"{settings.frontend_url}/events/{event.uuid}?")
    assert query_of(outcome.redirect_url) == {"token": guest.token, "success": "rsvp_attending"}
    assert guest.status == GuestStatus.ATTENDING
    assert guest.responded_at == NOW
    assert sender.sent == [(NotificationKind.CONFIRMATION, "ada@example.com")]


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [None, "", "PENDING", "attending", "YES"])
async def test_quick_rsvp_invalid_status(status):
    store = InMemoryGuestStore()
    event, guest = await setup_guest(store)

    outcome = await make_write_model(store).quick_rsvp(guest.token, status)

    assert outcome.error == "invalid_status"
    assert outcome.redirect_url == f"{settings.frontend_url}/rsvp/{guest.token}?error=invalid_status"
    assert guest.status == GuestStatus.PENDING


@pytest.mark.asyncio
async def test_quick_rsvp_invalid_token():
    outcome = await make_write_model(InMemoryGuestStore()).quick_rsvp("nope", "MAYBE")

    assert outcome.error == "invalid_token"
    assert outcome.redirect_url == f"{settings.frontend_url}?error=invalid_token"


class UnreachableGuestStore(InMemoryGuestStore):
    async def get_guest_by_token(self, token):
        raise StorageError("database is unavailable")


@pytest.mark.asyncio
async def test_quick_rsvp_lookup_failure_redirects():
    outcome = await make_write_model(UnreachableGuestStore()).quick_rsvp("tok", "ATTENDING")

    assert outcome.error == "rsvp_failed"
    assert outcome.redirect_url == f"{settings.frontend_url}?error=rsvp_failed"


@pytest.mark.asyncio
async def test_quick_rsvp_after_deadline_leaves_guest_unchanged():
    store = InMemoryGuestStore()
    event, guest = await setup_guest(store, rsvp_deadline=NOW - timedelta(hours=1))
    sender = RecordingNotificationSender()

    outcome = await make_write_model(store, sender).quick_rsvp(guest.token, "ATTENDING")

    assert outcome.error == "deadline_passed"
    assert query_of(outcome.redirect_url) == {"error": "deadline_passed"}
    assert guest.status == GuestStatus.PENDING
    assert guest.responded_at is None
    assert sender.sent == []


@pytest.mark.asyncio
async def test_quick_rsvp_over_capacity_sends_guest_to_the_form():
    store = InMemoryGuestStore()
    event, guest = await setup_guest(store)
    # stored party no longer fits the per-guest limit
    guest.max_guests = 1
    apply_rsvp_transition(
        guest,
        event,
        GuestStatus.ATTENDING,
        NOW,
        additional_guest_names=["Grace"],
        enforce_capacity=False,
    )

    outcome = await make_write_model(store).quick_rsvp(guest.token, "ATTENDING")

    assert outcome.error == "capacity_exceeded"
    assert [a.name for a in guest.additional_guests] == ["Grace"]


@pytest.mark.asyncio
async def test_quick_rsvp_against_the_database(db_schema):
    store = SqlGuestStore()
    event, guest = await setup_guest(store)

    outcome = await make_write_model(store).quick_rsvp(guest.token, "NOT_ATTENDING")
    info = await make_write_model(store).get_rsvp_info(guest.token)

    assert outcome.status == GuestStatus.NOT_ATTENDING
    assert info.guest.status == GuestStatus.NOT_ATTENDING
    assert info.guest.responded_at is not None
    assert not info.deadline_passed
