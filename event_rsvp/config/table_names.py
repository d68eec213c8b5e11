from enum import Enum


class TableNames(str, Enum):
    EVENTS = "events"
    GUESTS = "guests"
    ADDITIONAL_GUESTS = "additional_guests"
    REMINDER_DELIVERIES = "reminder_deliveries"
    NOTIFICATION_LOGS = "notification_logs"
