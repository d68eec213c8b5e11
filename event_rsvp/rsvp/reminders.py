"""Reminder schedules attached to an event.

A schedule is stored on ``Event.reminder_schedule`` as a JSON array of
``{"type": "day" | "hour", "value": <positive int>}`` objects, each meaning
"send a reminder ``value`` days/hours before the event starts".

Older events store a flat list of integers, each one a number of days
(``[7, 3, 1]``). Parsing accepts both; serializing always writes the object
form.
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum

from event_rsvp.rsvp.clock import as_utc

logger = logging.getLogger(__name__)

MAX_REMINDERS = 10


class ReminderType(str, Enum):
    DAY = "day"
    HOUR = "hour"


@dataclass(frozen=True)
class Reminder:
    type: ReminderType
    value: int

    @property
    def key(self) -> str:
        return f"{ReminderType(self.type).value}:{self.value}"

    @property
    def lead_time(self) -> timedelta:
        if ReminderType(self.type) is ReminderType.DAY:
            return timedelta(days=self.value)
        return timedelta(hours=self.value)


# Used when an event has no schedule of its own
DEFAULT_REMINDER_SCHEDULE: tuple[Reminder, ...] = (Reminder(ReminderType.DAY, 2),)


@dataclass(frozen=True)
class ReminderValidationResult:
    valid: bool
    error: str | None = None


def _coerce_type(raw) -> ReminderType | None:
    try:
        return ReminderType(raw)
    except ValueError:
        return None


def _coerce_value(raw) -> int | None:
    # bool is an int subclass, but true/false are not reminder values
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        return None
    if isinstance(raw, float) and not raw.is_integer():
        return None
    value = int(raw)
    if value <= 0:
        return None
    return value


def _parse_entry(entry) -> Reminder | None:
    if isinstance(entry, (int, float)) and not isinstance(entry, bool):
        # legacy format: a bare number of days
        value = _coerce_value(entry)
        return Reminder(ReminderType.DAY, value) if value is not None else None

    if isinstance(entry, dict):
        reminder_type = _coerce_type(entry.get("type"))
        value = _coerce_value(entry.get("value"))
        if reminder_type is None or value is None:
            return None
        return Reminder(reminder_type, value)

    return None


def parse_reminder_schedule(raw: str | None) -> list[Reminder]:
    """Decode a stored schedule. Never raises; bad input yields an empty list."""
    if not raw:
        return []

    try:
        decoded = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Discarding undecodable reminder schedule: %r", raw)
        return []

    if not isinstance(decoded, list):
        return []

    reminders = []
    for entry in decoded:
        reminder = _parse_entry(entry)
        if reminder is None:
            logger.debug("Dropping invalid reminder entry %r", entry)
            continue
        reminders.append(reminder)
    return reminders


def serialize_reminder_schedule(reminders: list[Reminder]) -> str:
    return json.dumps(
        [{"type": ReminderType(r.type).value, "value": r.value} for r in reminders],
        separators=(",", ":"),
    )


def validate_reminders(reminders: list[Reminder]) -> ReminderValidationResult:
    """Check a schedule before it is stored, reporting the first problem found."""
    for reminder in reminders:
        if _coerce_type(reminder.type) is None:
            return ReminderValidationResult(
                valid=False, error=f"Invalid reminder type: {reminder.type}"
            )
        if _coerce_value(reminder.value) is None:
            return ReminderValidationResult(
                valid=False,
                error=f"Reminder value must be a positive whole number: {reminder.value}",
            )

    if len(reminders) > MAX_REMINDERS:
        return ReminderValidationResult(
            valid=False, error=f"At most {MAX_REMINDERS} reminders can be scheduled"
        )

    return ReminderValidationResult(valid=True)


def format_reminder(reminder: Reminder) -> str:
    unit = ReminderType(reminder.type).value
    plural = "" if reminder.value == 1 else "s"
    return f"{reminder.value} {unit}{plural} before"


def sort_reminders_for_display(reminders: list[Reminder]) -> list[Reminder]:
    """Days before hours, then furthest from the event first."""
    order = {ReminderType.DAY: 0, ReminderType.HOUR: 1}
    return sorted(reminders, key=lambda r: (order[ReminderType(r.type)], -r.value))


def effective_schedule(raw: str | None) -> list[Reminder]:
    return parse_reminder_schedule(raw) or list(DEFAULT_REMINDER_SCHEDULE)


def is_reminder_due(reminder: Reminder, event_start: datetime, now: datetime) -> bool:
    """Due once the time left before the event drops to the reminder's lead time."""
    remaining = as_utc(event_start) - as_utc(now)
    return timedelta(0) < remaining <= reminder.lead_time


def due_reminders(
    reminders: list[Reminder], event_start: datetime, now: datetime
) -> list[Reminder]:
    """Entries that are due at ``now``, duplicates collapsed."""
    due: dict[str, Reminder] = {}
    for reminder in reminders:
        if reminder.key not in due and is_reminder_due(reminder, event_start, now):
            due[reminder.key] = reminder
    return list(due.values())
