from uuid import UUID

from sqlalchemy import Enum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from event_rsvp.config.table_names import TableNames
from event_rsvp.guests.dtos import NotificationChannel, NotificationKind
from event_rsvp.models.base import Base, TimeStamp


class NotificationLog(Base, TimeStamp):
    __tablename__ = TableNames.NOTIFICATION_LOGS.value

    channel: Mapped[NotificationChannel] = mapped_column(
        Enum(NotificationChannel, name="notification_channel_enum"),
        nullable=False,
    )
    kind: Mapped[NotificationKind] = mapped_column(
        Enum(NotificationKind, name="notification_kind_enum"),
        nullable=False,
        index=True,
    )
    to_address: Mapped[str] = mapped_column(String(255), nullable=False, index=True)

    guest_id: Mapped[UUID | None] = mapped_column(
        ForeignKey(f"{TableNames.GUESTS.value}.uuid", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    status: Mapped[str] = mapped_column(
        Enum("pending", "sent", "failed", name="notification_status_enum"),
        default="pending",
        nullable=False,
        index=True,
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return f"<NotificationLog {self.kind} via {self.channel} to={self.to_address} status={self.status}>"
