import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import asdict, dataclass
from functools import partial
from uuid import UUID

from event_rsvp.config.settings import settings
from event_rsvp.email_service.base import EmailServiceBase
from event_rsvp.errors import NotificationError
from event_rsvp.events.repository.orm_models import Event
from event_rsvp.guests.dtos import GuestStatus, NotificationChannel, NotificationKind
from event_rsvp.guests.repository.orm_models import Guest
from event_rsvp.notifications.notification_logger import NoOpNotificationLogger, NotificationLogger
from event_rsvp.rsvp.clock import as_utc
from event_rsvp.sms_service.base import SmsServiceBase
from event_rsvp.sms_service.templates import SmsTemplates

logger = logging.getLogger(__name__)

STATUS_LABELS = {
    GuestStatus.PENDING: "No response yet",
    GuestStatus.ATTENDING: "Attending",
    GuestStatus.NOT_ATTENDING: "Not attending",
    GuestStatus.MAYBE: "Maybe",
}

DATE_FORMAT = "%A, %B %d, %Y at %H:%M UTC"


@dataclass(frozen=True)
class NotificationContext:
    """Display fields shared by every notification about one guest and event."""

    guest_id: UUID | None
    guest_name: str
    event_title: str
    event_date: str
    event_location: str
    rsvp_url: str
    attending_url: str
    not_attending_url: str
    response_deadline: str
    status_label: str
    party_summary: str


def rsvp_url_for(token: str) -> str:
    return f"{settings.frontend_url}/rsvp/{token}"


def quick_rsvp_url_for(token: str, status: GuestStatus) -> str:
    return f"{settings.api_url}/api/v1/rsvp/{token}/quick?status={status.value}"


def _party_summary(guest: Guest) -> str:
    names = [additional.name for additional in guest.additional_guests]
    if not names:
        return "Just you"
    return "You + " + ", ".join(names)


def build_notification_context(guest: Guest, event: Event) -> NotificationContext:
    deadline = as_utc(event.rsvp_deadline)
    response_deadline = (
        f"Please respond by {deadline.strftime(DATE_FORMAT)}." if deadline else ""
    )
    return NotificationContext(
        guest_id=guest.uuid,
        guest_name=guest.name or "Guest",
        event_title=event.title,
        event_date=as_utc(event.date).strftime(DATE_FORMAT),
        event_location=event.location or "To be announced",
        rsvp_url=rsvp_url_for(guest.token),
        attending_url=quick_rsvp_url_for(guest.token, GuestStatus.ATTENDING),
        not_attending_url=quick_rsvp_url_for(guest.token, GuestStatus.NOT_ATTENDING),
        response_deadline=response_deadline,
        status_label=STATUS_LABELS[GuestStatus(guest.status)],
        party_summary=_party_summary(guest),
    )


class NotificationSender(ABC):
    """Sends guest notifications over every channel the guest opted into.

    Each method returns the channels that delivered; an empty list means the
    guest had nothing to receive. Raises NotificationError when an attempted
    channel fails; the error carries the channels that still delivered.
    """

    @abstractmethod
    async def send_invitation(self, guest: Guest, event: Event) -> list[NotificationChannel]:
        raise NotImplementedError

    @abstractmethod
    async def send_reminder(self, guest: Guest, event: Event) -> list[NotificationChannel]:
        raise NotImplementedError

    @abstractmethod
    async def send_confirmation(self, guest: Guest, event: Event) -> list[NotificationChannel]:
        raise NotImplementedError


class ChannelNotificationSender(NotificationSender):
    def __init__(
        self,
        email_service: EmailServiceBase | None = None,
        sms_service: SmsServiceBase | None = None,
        notification_logger: NotificationLogger | None = None,
    ) -> None:
        self._email_service = email_service
        self._sms_service = sms_service
        self._notification_logger = notification_logger or NoOpNotificationLogger()

    async def send_invitation(self, guest: Guest, event: Event) -> list[NotificationChannel]:
        context = build_notification_context(guest, event)
        return await self._dispatch(
            NotificationKind.INVITATION,
            guest,
            context,
            send_email=self._email_sender("send_invitation", context, with_status=False),
            sms_body=SmsTemplates.INVITATION.format(**asdict(context)),
        )

    async def send_reminder(self, guest: Guest, event: Event) -> list[NotificationChannel]:
        context = build_notification_context(guest, event)
        return await self._dispatch(
            NotificationKind.REMINDER,
            guest,
            context,
            send_email=self._email_sender("send_reminder", context, with_status=False),
            sms_body=SmsTemplates.REMINDER.format(**asdict(context)),
        )

    async def send_confirmation(self, guest: Guest, event: Event) -> list[NotificationChannel]:
        context = build_notification_context(guest, event)
        return await self._dispatch(
            NotificationKind.CONFIRMATION,
            guest,
            context,
            send_email=self._email_sender("send_confirmation", context, with_status=True),
            sms_body=SmsTemplates.CONFIRMATION.format(**asdict(context)),
        )

    def _email_sender(
        self, method: str, context: NotificationContext, with_status: bool
    ) -> Callable[[str], Awaitable[None]] | None:
        if self._email_service is None:
            return None

        fields = {
            "guest_name": context.guest_name,
            "event_title": context.event_title,
            "event_date": context.event_date,
            "event_location": context.event_location,
            "rsvp_url": context.rsvp_url,
            "guest_id": context.guest_id,
        }
        if with_status:
            fields["status_label"] = context.status_label
            fields["party_summary"] = context.party_summary
        else:
            fields["attending_url"] = context.attending_url
            fields["not_attending_url"] = context.not_attending_url
            fields["response_deadline"] = context.response_deadline

        send = getattr(self._email_service, method)
        return lambda to_address: send(to_address=to_address, **fields)

    async def _dispatch(
        self,
        kind: NotificationKind,
        guest: Guest,
        context: NotificationContext,
        send_email: Callable[[str], Awaitable[None]] | None,
        sms_body: str,
    ) -> list[NotificationChannel]:
        attempts: list[tuple[NotificationChannel, str, Callable[[], Awaitable[None]]]] = []

        if guest.notify_by_email and guest.email:
            if send_email is None:
                logger.warning("No email service configured, skipping %s email", kind.value)
            else:
                attempts.append(
                    (NotificationChannel.EMAIL, guest.email, partial(send_email, guest.email))
                )

        if guest.notify_by_sms and guest.phone:
            if self._sms_service is None:
                logger.warning("SMS is not configured, skipping %s SMS", kind.value)
            else:
                attempts.append(
                    (
                        NotificationChannel.SMS,
                        guest.phone,
                        partial(self._sms_service.send_message, guest.phone, sms_body),
                    )
                )

        delivered: list[NotificationChannel] = []
        failed: list[NotificationChannel] = []
        last_error: Exception | None = None
        for channel, to_address, send in attempts:
            log_uuid = await self._notification_logger.log_attempt(
                channel=channel, kind=kind, to_address=to_address, guest_id=context.guest_id
            )
            try:
                await send()
            except Exception as e:
                logger.error("Failed to send %s %s to %s: %s", kind.value, channel.value, to_address, e)
                await self._notification_logger.log_failure(log_uuid, str(e))
                failed.append(channel)
                last_error = e
            else:
                await self._notification_logger.log_success(log_uuid)
                delivered.append(channel)

        if failed:
            channels = " and ".join(channel.value for channel in failed)
            raise NotificationError(
                f"Failed to send {kind.value} by {channels}",
                channel=failed[0].value,
                delivered=delivered,
            ) from last_error

        return delivered
