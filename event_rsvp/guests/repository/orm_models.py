from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from event_rsvp.config.table_names import TableNames
from event_rsvp.guests.dtos import GuestStatus
from event_rsvp.models.base import Base, TimeStamp


def generate_token() -> str:
    return str(uuid4())


class Guest(Base, TimeStamp):
    __tablename__ = TableNames.GUESTS.value
    __table_args__ = (UniqueConstraint("event_id", "email", name="uq_guests_event_id_email"),)

    event_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.EVENTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # RSVP status
    status: Mapped[GuestStatus] = mapped_column(
        Enum(GuestStatus, name="guest_status_enum"),
        default=GuestStatus.PENDING,
        nullable=False,
    )

    # Credential for the public RSVP links, never changes after creation
    token: Mapped[str] = mapped_column(
        String(36), nullable=False, unique=True, index=True, default=generate_token
    )

    notify_by_email: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    notify_by_sms: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Overrides Event.max_guests_per_invitee when set
    max_guests: Mapped[int | None] = mapped_column(Integer, nullable=True)

    invited_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    responded_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    reminder_sent_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Only kept while ATTENDING
    dietary_notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    event: Mapped["Event"] = relationship("Event", back_populates="guests")  # noqa: F821
    additional_guests: Mapped[list["AdditionalGuest"]] = relationship(
        "AdditionalGuest",
        back_populates="guest",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="AdditionalGuest.position",
    )
    reminder_deliveries: Mapped[list["ReminderDelivery"]] = relationship(
        "ReminderDelivery",
        back_populates="guest",
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    def __repr__(self) -> str:
        return f"<Guest {self.email} - {self.status}>"


class AdditionalGuest(Base, TimeStamp):
    __tablename__ = TableNames.ADDITIONAL_GUESTS.value

    guest_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.GUESTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    # Submission order, kept for display
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    guest: Mapped[Guest] = relationship("Guest", back_populates="additional_guests")

    def __repr__(self) -> str:
        return f"<AdditionalGuest {self.name} for guest {self.guest_id}>"


class ReminderDelivery(Base, TimeStamp):
    """Marks a reminder schedule entry as already fired for one guest."""

    __tablename__ = TableNames.REMINDER_DELIVERIES.value
    __table_args__ = (
        UniqueConstraint("guest_id", "reminder_key", name="uq_reminder_deliveries_guest_key"),
    )

    guest_id: Mapped[UUID] = mapped_column(
        ForeignKey(f"{TableNames.GUESTS.value}.uuid", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # "day:7", "hour:2", see Reminder.key
    reminder_key: Mapped[str] = mapped_column(String(32), nullable=False)
    sent_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    guest: Mapped[Guest] = relationship("Guest", back_populates="reminder_deliveries")

    def __repr__(self) -> str:
        return f"<ReminderDelivery {self.reminder_key} for guest {self.guest_id}>"
