import math
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from event_rsvp.events.repository.orm_models import Event
    from event_rsvp.guests.repository.orm_models import Guest

# remaining capacity when no limit applies
UNLIMITED = math.inf


class GuestStatus(str, Enum):
    PENDING = "PENDING"
    ATTENDING = "ATTENDING"
    NOT_ATTENDING = "NOT_ATTENDING"
    MAYBE = "MAYBE"


class RsvpResponseStatus(str, Enum):
    """Statuses a guest may pick themselves; PENDING is only set at creation."""

    ATTENDING = "ATTENDING"
    NOT_ATTENDING = "NOT_ATTENDING"
    MAYBE = "MAYBE"


class BulkAction(str, Enum):
    INVITE = "invite"
    REMIND = "remind"
    DELETE = "delete"
    CHANGE_STATUS = "changeStatus"


class NotificationChannel(str, Enum):
    EMAIL = "email"
    SMS = "sms"


class NotificationKind(str, Enum):
    INVITATION = "invitation"
    REMINDER = "reminder"
    CONFIRMATION = "confirmation"


@dataclass(frozen=True)
class GuestLimitResult:
    """Outcome of a capacity check. remaining is math.inf when unlimited."""

    valid: bool
    remaining: float
    error: str | None = None


@dataclass(frozen=True)
class EventSummaryDTO:
    uuid: UUID
    title: str
    date: datetime
    location: str | None = None
    rsvp_deadline: datetime | None = None
    max_guests_per_invitee: int | None = None

    @classmethod
    def from_event(cls, event: "Event") -> "EventSummaryDTO":
        return cls(
            uuid=event.uuid,
            title=event.title,
            date=event.date,
            location=event.location,
            rsvp_deadline=event.rsvp_deadline,
            max_guests_per_invitee=event.max_guests_per_invitee,
        )


@dataclass(frozen=True)
class GuestDTO:
    """DTO for guest data."""

    id: UUID
    event_id: UUID
    email: str
    status: GuestStatus
    token: str
    name: str | None = None
    phone: str | None = None
    notify_by_email: bool = True
    notify_by_sms: bool = False
    max_guests: int | None = None
    dietary_notes: str | None = None
    additional_guests: list[str] = field(default_factory=list)
    invited_at: datetime | None = None
    responded_at: datetime | None = None
    reminder_sent_at: datetime | None = None

    @classmethod
    def from_guest(cls, guest: "Guest") -> "GuestDTO":
        """Create GuestDTO from Guest ORM model."""
        return cls(
            id=guest.uuid,
            event_id=guest.event_id,
            email=guest.email,
            status=GuestStatus(guest.status),
            token=guest.token,
            name=guest.name,
            phone=guest.phone,
            notify_by_email=bool(guest.notify_by_email),
            notify_by_sms=bool(guest.notify_by_sms),
            max_guests=guest.max_guests,
            dietary_notes=guest.dietary_notes,
            additional_guests=[additional.name for additional in guest.additional_guests],
            invited_at=guest.invited_at,
            responded_at=guest.responded_at,
            reminder_sent_at=guest.reminder_sent_at,
        )


@dataclass(frozen=True)
class RSVPInfoDTO:
    """Guest view returned for a token, with the event it belongs to."""

    guest: GuestDTO
    event: EventSummaryDTO
    deadline_passed: bool


@dataclass(frozen=True)
class QuickRsvpOutcomeDTO:
    """Where a one-click RSVP should send the browser next."""

    redirect_url: str
    status: GuestStatus | None = None
    error: str | None = None


@dataclass
class BulkActionResultDTO:
    success_count: int = 0
    failed_count: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return self.failed_count > 0

    def record_success(self) -> None:
        self.success_count += 1

    def record_failure(self, error: str) -> None:
        self.failed_count += 1
        self.errors.append(error)


@dataclass
class ReminderRunResultDTO:
    events_checked: int = 0
    reminders_sent: int = 0
    failed_count: int = 0
    errors: list[str] = field(default_factory=list)

