"""Error types shared by the RSVP write models, routers and CLI."""


class RsvpError(Exception):
    """Base class for every error raised by the RSVP engine."""


class InvalidRequestError(RsvpError):
    """Malformed request; rejected before any state is touched."""


class GuestAlreadyExistsError(InvalidRequestError):
    """A guest with the same email is already on the event."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__(f"A guest with email '{email}' is already on this event")


class CapacityExceededError(RsvpError):
    """The party size is over the guest limit that applies to this invitee."""

    def __init__(self, message: str, allowed_additional: int) -> None:
        self.allowed_additional = allowed_additional
        super().__init__(message)


class DeadlinePassedError(RsvpError):
    def __init__(self, message: str = "The RSVP deadline for this event has passed") -> None:
        super().__init__(message)


class NotFoundError(RsvpError):
    pass


class EventNotFoundError(NotFoundError):
    def __init__(self, event_id) -> None:
        self.event_id = event_id
        super().__init__("Event not found")


class GuestNotFoundError(NotFoundError):
    def __init__(self, identifier) -> None:
        self.identifier = identifier
        super().__init__("Guest not found")


class NotificationError(RsvpError):
    """A notification channel failed to deliver. Never reverses a stored write.

    ``delivered`` lists the channels that did go out before or alongside the
    failure, so callers can still record the delivery.
    """

    def __init__(
        self, message: str, channel: str | None = None, delivered: list | None = None
    ) -> None:
        self.channel = channel
        self.delivered = list(delivered or [])
        super().__init__(message)


class StorageError(RsvpError):
    """The persistence layer failed while applying a change."""
