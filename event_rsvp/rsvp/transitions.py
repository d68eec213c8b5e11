"""Status transitions for a single guest.

Every RSVP write, public or administrative, goes through
``apply_rsvp_transition`` so the derived fields (``responded_at``, additional
guests, dietary notes) are always recomputed the same way. Guards run before
anything is mutated; a rejected transition leaves the guest untouched.
"""

import logging
from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING

from event_rsvp.errors import CapacityExceededError, DeadlinePassedError
from event_rsvp.guests.dtos import GuestStatus
from event_rsvp.guests.repository.orm_models import AdditionalGuest, Guest
from event_rsvp.rsvp.clock import as_utc
from event_rsvp.rsvp.limits import resolve_guest_limit, validate_guest_limit

if TYPE_CHECKING:
    from event_rsvp.events.repository.orm_models import Event

logger = logging.getLogger(__name__)


class _Unchanged:
    def __repr__(self) -> str:
        return "UNCHANGED"


# Passed for fields the caller does not want to overwrite
UNCHANGED = _Unchanged()


def is_deadline_passed(event: "Event", now: datetime) -> bool:
    deadline = as_utc(event.rsvp_deadline)
    return deadline is not None and as_utc(now) > deadline


def ensure_deadline_open(event: "Event", now: datetime) -> None:
    if is_deadline_passed(event, now):
        raise DeadlinePassedError()


def clean_additional_guest_names(names: Iterable[str]) -> list[str]:
    return [name.strip() for name in names if name and name.strip()]


def ensure_capacity(event: "Event", guest: Guest, additional_count: int) -> None:
    result = validate_guest_limit(event.max_guests_per_invitee, additional_count, guest.max_guests)
    if not result.valid:
        limit = resolve_guest_limit(event.max_guests_per_invitee, guest.max_guests)
        raise CapacityExceededError(result.error, allowed_additional=max(limit - 1, 0))


def apply_rsvp_transition(
    guest: Guest,
    event: "Event",
    status: GuestStatus,
    now: datetime,
    additional_guest_names: Iterable[str] | _Unchanged = UNCHANGED,
    dietary_notes: str | None | _Unchanged = UNCHANGED,
    enforce_deadline: bool = True,
    enforce_capacity: bool = True,
) -> Guest:
    """Move ``guest`` to ``status`` and recompute the fields that depend on it.

    Args:
        guest: Guest ORM instance, mutated in place.
        event: The event the guest belongs to.
        status: Target status.
        now: Current time, used for the deadline guard and ``responded_at``.
        additional_guest_names: Replaces the companion list when attending.
            ``UNCHANGED`` keeps the stored list.
        dietary_notes: Replaces the notes when attending. ``UNCHANGED`` keeps
            the stored notes.
        enforce_deadline: Reject when the event's RSVP deadline has passed.
            Host actions skip this guard.
        enforce_capacity: Re-check the guest limit when the target is ATTENDING.

    Raises:
        DeadlinePassedError: The deadline guard rejected the change.
        CapacityExceededError: The party does not fit the guest limit.
    """
    status = GuestStatus(status)

    if enforce_deadline:
        ensure_deadline_open(event, now)

    if isinstance(additional_guest_names, _Unchanged):
        names = [additional.name for additional in guest.additional_guests]
    else:
        names = clean_additional_guest_names(additional_guest_names)

    if status is GuestStatus.ATTENDING and enforce_capacity:
        ensure_capacity(event, guest, len(names))

    guest.status = status
    guest.responded_at = None if status is GuestStatus.PENDING else now

    if status is GuestStatus.ATTENDING:
        if not isinstance(dietary_notes, _Unchanged):
            guest.dietary_notes = dietary_notes or None
        if not isinstance(additional_guest_names, _Unchanged):
            guest.additional_guests = [
                AdditionalGuest(name=name, position=position)
                for position, name in enumerate(names)
            ]
    else:
        guest.dietary_notes = None
        guest.additional_guests = []

    logger.debug("Guest %s moved to %s", guest.email, status.value)
    return guest
