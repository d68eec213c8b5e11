from event_rsvp.email_service import get_email_service
from event_rsvp.notifications.notification_logger import SQLNotificationLogger
from event_rsvp.notifications.sender import (
    ChannelNotificationSender,
    NotificationSender,
    build_notification_context,
)
from event_rsvp.sms_service import get_sms_service


def get_notification_sender() -> NotificationSender:
    return ChannelNotificationSender(
        email_service=get_email_service(),
        sms_service=get_sms_service(),
        notification_logger=SQLNotificationLogger(),
    )


__all__ = [
    "NotificationSender",
    "build_notification_context",
    "get_notification_sender",
]
