"""Tests for the public RSVP endpoint."""

from uuid import uuid4

import pytest

from event_rsvp.errors import CapacityExceededError, DeadlinePassedError, EventNotFoundError
from event_rsvp.guests.dtos import GuestDTO, GuestStatus
from event_rsvp.guests.features.submit_rsvp.router import (
    SUBMIT_RSVP_URL,
    get_submit_rsvp_write_model,
)
from event_rsvp.guests.features.submit_rsvp.write_model import SubmitRsvpWriteModel


class InMemorySubmitRsvpWriteModel(SubmitRsvpWriteModel):
    """In-memory write model for testing."""

    def __init__(self, memory: dict, error: Exception | None = None):
        self._memory = memory
        self._error = error

    async def submit_rsvp(
        self,
        event_id,
        email,
        name,
        status,
        phone=None,
        additional_guest_names=None,
        dietary_notes=None,
    ) -> GuestDTO:
        self._memory["last_request"] = {
            "event_id": event_id,
            "email": email,
            "status": status,
            "additional_guest_names": additional_guest_names,
        }
        if self._error is not None:
            raise self._error
        return GuestDTO(
            id=uuid4(),
            event_id=event_id,
            email=email,
            status=GuestStatus(status.value),
            token="secret-token",
            name=name,
            phone=phone,
            additional_guests=list(additional_guest_names or []),
            dietary_notes=dietary_notes,
        )


def rsvp_body(**overrides):
    body = {
        "event_id": str(uuid4()),
        "email": "ada@example.com",
        "name": "Ada",
        "status": "ATTENDING",
        "additional_guests": ["Jane"],
        "dietary_notes": "vegan",
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_submit_rsvp(client_factory):
    memory = {}
    write_model = InMemorySubmitRsvpWriteModel(memory)

    overrides = {get_submit_rsvp_write_model: lambda: write_model}

    async with client_factory(overrides) as client:
        response = await client.post(url=SUBMIT_RSVP_URL, json=rsvp_body())

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ATTENDING"
    assert data["additional_guests"] == ["Jane"]
    assert "token" not in data
    assert memory["last_request"]["email"] == "ada@example.com"


@pytest.mark.asyncio
async def test_submit_rsvp_rejects_pending(client_factory):
    write_model = InMemorySubmitRsvpWriteModel({})

    overrides = {get_submit_rsvp_write_model: lambda: write_model}

    async with client_factory(overrides) as client:
        response = await client.post(url=SUBMIT_RSVP_URL, json=rsvp_body(status="PENDING"))

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_submit_rsvp_invalid_email(client_factory):
    write_model = InMemorySubmitRsvpWriteModel({})

    overrides = {get_submit_rsvp_write_model: lambda: write_model}

    async with client_factory(overrides) as client:
        response = await client.post(url=SUBMIT_RSVP_URL, json=rsvp_body(email="not-an-email"))

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_submit_rsvp_over_capacity(client_factory):
    error = CapacityExceededError(
        "You can only bring 1 additional guest (total of 2 including yourself)",
        allowed_additional=1,
    )
    write_model = InMemorySubmitRsvpWriteModel({}, error=error)

    overrides = {get_submit_rsvp_write_model: lambda: write_model}

    async with client_factory(overrides) as client:
        response = await client.post(
            url=SUBMIT_RSVP_URL, json=rsvp_body(additional_guests=["Jane", "Bob"])
        )

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["allowed_additional"] == 1
    assert "1 additional guest" in detail["message"]


@pytest.mark.asyncio
async def test_submit_rsvp_after_deadline(client_factory):
    write_model = InMemorySubmitRsvpWriteModel({}, error=DeadlinePassedError())

    overrides = {get_submit_rsvp_write_model: lambda: write_model}

    async with client_factory(overrides) as client:
        response = await client.post(url=SUBMIT_RSVP_URL, json=rsvp_body())

    assert response.status_code == 400
    assert response.json()["detail"] == "The RSVP deadline for this event has passed"


@pytest.mark.asyncio
async def test_submit_rsvp_unknown_event(client_factory):
    write_model = InMemorySubmitRsvpWriteModel({}, error=EventNotFoundError(uuid4()))

    overrides = {get_submit_rsvp_write_model: lambda: write_model}

    async with client_factory(overrides) as client:
        response = await client.post(url=SUBMIT_RSVP_URL, json=rsvp_body())

    assert response.status_code == 404
    assert response.json()["detail"] == "Event not found"
