"""Persistence for events and guests.

Every method is one unit of work: it opens a session, applies the change and
commits, so a bulk operation touching many guests never shares a transaction
between them. Mutations are passed in as callbacks and run inside that unit of
work; if a callback raises, nothing is written.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from datetime import datetime
from functools import partial
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from event_rsvp.config.database import async_session_manager
from event_rsvp.errors import (
    EventNotFoundError,
    GuestAlreadyExistsError,
    GuestNotFoundError,
    StorageError,
)
from event_rsvp.events.repository.orm_models import Event
from event_rsvp.guests.dtos import GuestStatus
from event_rsvp.guests.repository.orm_models import Guest, ReminderDelivery, generate_token

logger = logging.getLogger(__name__)

GuestMutation = Callable[[Guest, Event], None]
EventMutation = Callable[[Event], None]


class GuestStore(ABC):
    @abstractmethod
    async def create_event(
        self,
        title: str,
        date: datetime,
        location: str | None = None,
        description: str | None = None,
        rsvp_deadline: datetime | None = None,
        max_guests_per_invitee: int | None = None,
        reminder_schedule: str | None = None,
    ) -> Event:
        raise NotImplementedError

    @abstractmethod
    async def get_event(self, event_id: UUID) -> Event | None:
        raise NotImplementedError

    @abstractmethod
    async def update_event(self, event_id: UUID, mutate: EventMutation) -> Event:
        """Apply ``mutate`` to the event and save it. Raises EventNotFoundError."""
        raise NotImplementedError

    @abstractmethod
    async def get_guest_by_token(self, token: str) -> tuple[Guest, Event] | None:
        raise NotImplementedError

    @abstractmethod
    async def find_guests(self, event_id: UUID, guest_ids: Iterable[UUID]) -> list[Guest]:
        """Guests among ``guest_ids`` that belong to the event; others are ignored."""
        raise NotImplementedError

    @abstractmethod
    async def create_guest(
        self,
        event_id: UUID,
        email: str,
        name: str | None = None,
        phone: str | None = None,
        notify_by_email: bool = True,
        notify_by_sms: bool = False,
        max_guests: int | None = None,
    ) -> Guest:
        """Add a PENDING guest with a fresh token. Raises GuestAlreadyExistsError."""
        raise NotImplementedError

    @abstractmethod
    async def upsert_guest(
        self,
        event_id: UUID,
        email: str,
        mutate: Callable[[Guest, Event, bool], None],
    ) -> tuple[Guest, bool]:
        """Find the guest by (event, email) or start a new one, then apply ``mutate``.

        ``mutate`` receives the guest, its event and whether the guest is new.
        Returns the saved guest and the created flag.
        """
        raise NotImplementedError

    @abstractmethod
    async def modify_guest(self, guest_id: UUID, mutate: GuestMutation) -> Guest:
        """Apply ``mutate`` to the guest and save it. Raises GuestNotFoundError."""
        raise NotImplementedError

    @abstractmethod
    async def delete_guest(self, guest_id: UUID) -> None:
        """Delete the guest and everything it owns. Raises GuestNotFoundError."""
        raise NotImplementedError

    @abstractmethod
    async def list_events_starting_between(self, start: datetime, end: datetime) -> list[Event]:
        raise NotImplementedError

    @abstractmethod
    async def list_guests(self, event_id: UUID, status: GuestStatus | None = None) -> list[Guest]:
        raise NotImplementedError

    @abstractmethod
    async def record_reminder_delivery(
        self, guest_id: UUID, reminder_keys: Iterable[str], sent_at: datetime
    ) -> None:
        """Mark schedule entries as fired for a guest and stamp reminder_sent_at."""
        raise NotImplementedError


class SqlGuestStore(GuestStore):
    """SQL implementation of the guest store."""

    async_session_manager = staticmethod(partial(async_session_manager))

    def __init__(self, session_overwrite: AsyncSession | None = None) -> None:
        self.session_overwrite = session_overwrite

    def _unit_of_work(self):
        return self.async_session_manager(session_overwrite=self.session_overwrite)

    async def _load_event(self, session: AsyncSession, event_id: UUID) -> Event:
        event = await session.get(Event, event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    async def _load_guest(self, session: AsyncSession, guest_id: UUID) -> Guest:
        result = await session.execute(select(Guest).where(Guest.uuid == guest_id))
        guest = result.scalar_one_or_none()
        if guest is None:
            raise GuestNotFoundError(guest_id)
        return guest

    async def create_event(
        self,
        title: str,
        date: datetime,
        location: str | None = None,
        description: str | None = None,
        rsvp_deadline: datetime | None = None,
        max_guests_per_invitee: int | None = None,
        reminder_schedule: str | None = None,
    ) -> Event:
        try:
            async with self._unit_of_work() as session:
                event = Event(
                    title=title,
                    date=date,
                    location=location,
                    description=description,
                    rsvp_deadline=rsvp_deadline,
                    max_guests_per_invitee=max_guests_per_invitee,
                    reminder_schedule=reminder_schedule,
                )
                session.add(event)
                await session.flush()
                return event
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e

    async def get_event(self, event_id: UUID) -> Event | None:
        try:
            async with self._unit_of_work() as session:
                return await session.get(Event, event_id)
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e

    async def update_event(self, event_id: UUID, mutate: EventMutation) -> Event:
        try:
            async with self._unit_of_work() as session:
                event = await self._load_event(session, event_id)
                mutate(event)
                await session.flush()
                return event
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e

    async def get_guest_by_token(self, token: str) -> tuple[Guest, Event] | None:
        try:
            async with self._unit_of_work() as session:
                result = await session.execute(select(Guest).where(Guest.token == token))
                guest = result.scalar_one_or_none()
                if guest is None:
                    return None
                event = await self._load_event(session, guest.event_id)
                return guest, event
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e

    async def find_guests(self, event_id: UUID, guest_ids: Iterable[UUID]) -> list[Guest]:
        guest_ids = list(guest_ids)
        if not guest_ids:
            return []
        try:
            async with self._unit_of_work() as session:
                stmt = (
                    select(Guest)
                    .where(Guest.event_id == event_id)
                    .where(Guest.uuid.in_(guest_ids))
                    .order_by(Guest.created_at, Guest.email)
                )
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e

    async def create_guest(
        self,
        event_id: UUID,
        email: str,
        name: str | None = None,
        phone: str | None = None,
        notify_by_email: bool = True,
        notify_by_sms: bool = False,
        max_guests: int | None = None,
    ) -> Guest:
        try:
            async with self._unit_of_work() as session:
                await self._load_event(session, event_id)
                existing = await session.execute(
                    select(Guest.uuid).where(Guest.event_id == event_id, Guest.email == email)
                )
                if existing.scalar_one_or_none() is not None:
                    raise GuestAlreadyExistsError(email)

                guest = Guest(
                    event_id=event_id,
                    email=email,
                    name=name,
                    phone=phone,
                    status=GuestStatus.PENDING,
                    token=generate_token(),
                    notify_by_email=notify_by_email,
                    notify_by_sms=notify_by_sms,
                    max_guests=max_guests,
                    additional_guests=[],
                    reminder_deliveries=[],
                )
                session.add(guest)
                await session.flush()
                return guest
        except IntegrityError as e:
            # lost a race against a concurrent insert of the same email
            raise GuestAlreadyExistsError(email) from e
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e

    async def _find_guest_by_email(
        self, session: AsyncSession, event_id: UUID, email: str
    ) -> Guest | None:
        result = await session.execute(
            select(Guest).where(Guest.event_id == event_id, Guest.email == email)
        )
        return result.scalar_one_or_none()

    async def upsert_guest(
        self,
        event_id: UUID,
        email: str,
        mutate: Callable[[Guest, Event, bool], None],
    ) -> tuple[Guest, bool]:
        # a shared session cannot be rolled back and retried on our own
        attempts = 2 if self.session_overwrite is None else 1
        for attempt in range(1, attempts + 1):
            try:
                return await self._upsert_guest_once(event_id, email, mutate)
            except IntegrityError as e:
                if attempt < attempts:
                    # lost the insert race; the concurrent row is now there to update
                    logger.info("Guest %s was created concurrently, retrying as update", email)
                    continue
                raise StorageError(str(e)) from e
            except SQLAlchemyError as e:
                raise StorageError(str(e)) from e

    async def _upsert_guest_once(
        self,
        event_id: UUID,
        email: str,
        mutate: Callable[[Guest, Event, bool], None],
    ) -> tuple[Guest, bool]:
        async with self._unit_of_work() as session:
            event = await self._load_event(session, event_id)
            guest = await self._find_guest_by_email(session, event_id, email)
            created = guest is None
            if created:
                guest = Guest(
                    event_id=event_id,
                    email=email,
                    status=GuestStatus.PENDING,
                    token=generate_token(),
                    notify_by_email=True,
                    notify_by_sms=False,
                    additional_guests=[],
                    reminder_deliveries=[],
                )

            mutate(guest, event, created)
            if created:
                session.add(guest)
            await session.flush()
            return guest, created

    async def modify_guest(self, guest_id: UUID, mutate: GuestMutation) -> Guest:
        try:
            async with self._unit_of_work() as session:
                guest = await self._load_guest(session, guest_id)
                event = await self._load_event(session, guest.event_id)
                mutate(guest, event)
                await session.flush()
                return guest
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e

    async def delete_guest(self, guest_id: UUID) -> None:
        try:
            async with self._unit_of_work() as session:
                guest = await self._load_guest(session, guest_id)
                # the selectin-loaded children are removed by the ORM cascade
                await session.delete(guest)
                await session.flush()
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e

    async def list_events_starting_between(self, start: datetime, end: datetime) -> list[Event]:
        try:
            async with self._unit_of_work() as session:
                stmt = (
                    select(Event)
                    .where(Event.date > start)
                    .where(Event.date <= end)
                    .order_by(Event.date)
                )
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e

    async def list_guests(self, event_id: UUID, status: GuestStatus | None = None) -> list[Guest]:
        try:
            async with self._unit_of_work() as session:
                stmt = select(Guest).where(Guest.event_id == event_id)
                if status is not None:
                    stmt = stmt.where(Guest.status == status)
                result = await session.execute(stmt.order_by(Guest.created_at, Guest.email))
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e

    async def record_reminder_delivery(
        self, guest_id: UUID, reminder_keys: Iterable[str], sent_at: datetime
    ) -> None:
        try:
            async with self._unit_of_work() as session:
                guest = await self._load_guest(session, guest_id)
                already_sent = {delivery.reminder_key for delivery in guest.reminder_deliveries}
                for key in reminder_keys:
                    if key not in already_sent:
                        guest.reminder_deliveries.append(
                            ReminderDelivery(reminder_key=key, sent_at=sent_at)
                        )
                guest.reminder_sent_at = sent_at
                await session.flush()
        except SQLAlchemyError as e:
            raise StorageError(str(e)) from e
