from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from event_rsvp.config.table_names import TableNames
from event_rsvp.models.base import Base, TimeStamp


class Event(Base, TimeStamp):
    __tablename__ = TableNames.EVENTS.value

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
    location: Mapped[str | None] = mapped_column(String(500), nullable=True)

    rsvp_deadline: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # None means unlimited; counts the invitee themself
    max_guests_per_invitee: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # Serialized reminder list, see event_rsvp.rsvp.reminders
    reminder_schedule: Mapped[str | None] = mapped_column(Text, nullable=True)

    guests: Mapped[list["Guest"]] = relationship(  # noqa: F821
        "Guest",
        back_populates="event",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Event {self.title} on {self.date}>"
