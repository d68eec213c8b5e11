from abc import ABC, abstractmethod
from uuid import UUID, uuid4

from event_rsvp.config.database import async_session_manager
from event_rsvp.guests.dtos import NotificationChannel, NotificationKind
from event_rsvp.notifications.orm_models import NotificationLog


class NotificationLogger(ABC):
    """Records outbound notification attempts and their outcome."""

    @abstractmethod
    async def log_attempt(
        self,
        channel: NotificationChannel,
        kind: NotificationKind,
        to_address: str,
        guest_id: UUID | None = None,
    ) -> UUID:
        """Log an attempt before sending. Returns the log entry id."""
        pass

    @abstractmethod
    async def log_success(self, log_uuid: UUID) -> None:
        pass

    @abstractmethod
    async def log_failure(self, log_uuid: UUID, error_message: str) -> None:
        pass


class SQLNotificationLogger(NotificationLogger):
    """SQL database implementation of NotificationLogger."""

    async def log_attempt(
        self,
        channel: NotificationChannel,
        kind: NotificationKind,
        to_address: str,
        guest_id: UUID | None = None,
    ) -> UUID:
        notification_log = NotificationLog(
            channel=channel,
            kind=kind,
            to_address=to_address,
            guest_id=guest_id,
            status="pending",
        )

        async with async_session_manager() as session:
            session.add(notification_log)
            await session.flush()
            return notification_log.uuid

    async def log_success(self, log_uuid: UUID) -> None:
        async with async_session_manager() as session:
            notification_log = await session.get(NotificationLog, log_uuid)
            if notification_log:
                notification_log.status = "sent"

    async def log_failure(self, log_uuid: UUID, error_message: str) -> None:
        async with async_session_manager() as session:
            notification_log = await session.get(NotificationLog, log_uuid)
            if notification_log:
                notification_log.status = "failed"
                notification_log.error_message = error_message


class NoOpNotificationLogger(NotificationLogger):
    """No-op implementation for testing or when logging is disabled."""

    async def log_attempt(
        self,
        channel: NotificationChannel,
        kind: NotificationKind,
        to_address: str,
        guest_id: UUID | None = None,
    ) -> UUID:
        return uuid4()

    async def log_success(self, log_uuid: UUID) -> None:
        pass

    async def log_failure(self, log_uuid: UUID, error_message: str) -> None:
        pass
