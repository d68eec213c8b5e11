"""CLI commands for event RSVP management."""

import asyncio
from datetime import datetime
from uuid import UUID

import typer

from event_rsvp.config.database import create_tables
from event_rsvp.errors import RsvpError
from event_rsvp.events.features.reminder_schedule.write_model import (
    StoreReminderScheduleWriteModel,
)
from event_rsvp.guests.dtos import BulkAction, GuestStatus
from event_rsvp.guests.features.add_guest.write_model import StoreAddGuestWriteModel
from event_rsvp.guests.features.bulk_action.write_model import BulkGuestActionProcessor
from event_rsvp.guests.features.send_reminders.write_model import ReminderScheduler
from event_rsvp.guests.repository.store import SqlGuestStore
from event_rsvp.notifications import get_notification_sender
from event_rsvp.notifications.sender import rsvp_url_for
from event_rsvp.rsvp.clock import as_utc
from event_rsvp.rsvp.reminders import (
    Reminder,
    format_reminder,
    serialize_reminder_schedule,
    validate_reminders,
)

app = typer.Typer(help="CLI commands for event RSVP management")


def _parse_datetime(value: str) -> datetime:
    """ISO 8601 date and time; a value without an offset is taken as UTC."""
    try:
        return as_utc(datetime.fromisoformat(value))
    except ValueError:
        raise typer.BadParameter(f"Not an ISO 8601 date and time: {value}")


def _parse_reminders(value: str) -> list[Reminder]:
    """Parse "day:7,hour:2" into reminder entries."""
    reminders = []
    for part in filter(None, (p.strip() for p in value.split(","))):
        reminder_type, _, amount = part.partition(":")
        try:
            reminders.append(Reminder(type=reminder_type.strip(), value=int(amount)))
        except ValueError:
            raise typer.BadParameter(f"Expected TYPE:VALUE, got {part!r}")

    validation = validate_reminders(reminders)
    if not validation.valid:
        raise typer.BadParameter(validation.error)
    return reminders


def _fail(error: Exception):
    typer.secho(str(error), fg=typer.colors.RED)
    raise typer.Exit(1)


@app.command()
def create_event(
    title: str = typer.Argument(..., help="Event title"),
    date: str = typer.Argument(..., help="Start, e.g. 2026-09-12T16:30"),
    location: str = typer.Option(None, "--location", "-l", help="Where the event takes place"),
    deadline: str = typer.Option(None, "--deadline", "-d", help="RSVP deadline, ISO 8601"),
    max_guests: int = typer.Option(
        None, "--max-guests", "-m", min=1, help="Party size limit per invitee"
    ),
    reminders: str = typer.Option(
        None, "--reminders", "-r", help='Reminder schedule, e.g. "day:7,hour:2"'
    ),
):
    """Create an event."""
    start = _parse_datetime(date)
    rsvp_deadline = _parse_datetime(deadline) if deadline else None
    schedule = serialize_reminder_schedule(_parse_reminders(reminders)) if reminders else None

    async def _create_event():
        await create_tables()
        return await SqlGuestStore().create_event(
            title=title,
            date=start,
            location=location,
            rsvp_deadline=rsvp_deadline,
            max_guests_per_invitee=max_guests,
            reminder_schedule=schedule,
        )

    try:
        event = asyncio.run(_create_event())
    except RsvpError as e:
        _fail(e)

    typer.secho("Event created!", fg=typer.colors.GREEN)
    typer.secho(f"  Event ID: {event.uuid}", fg=typer.colors.CYAN)
    typer.secho(f"  Title: {event.title}", fg=typer.colors.BLUE)
    typer.secho(f"  Date: {start.isoformat()}", fg=typer.colors.BLUE)
    if rsvp_deadline:
        typer.secho(f"  RSVP deadline: {rsvp_deadline.isoformat()}", fg=typer.colors.BLUE)


@app.command()
def add_guest(
    event_id: str = typer.Argument(..., help="Event UUID"),
    email: str = typer.Argument(..., help="Guest email"),
    name: str = typer.Option(None, "--name", "-n", help="Guest name"),
    phone: str = typer.Option(None, "--phone", "-p", help="Phone number for SMS"),
    max_guests: int = typer.Option(
        None, "--max-guests", "-m", min=1, help="Party size limit for this guest"
    ),
    invite: bool = typer.Option(False, "--invite", help="Send the invitation right away"),
):
    """Add a guest to an event."""
    write_model = StoreAddGuestWriteModel(
        store=SqlGuestStore(),
        notification_sender=get_notification_sender() if invite else None,
    )

    try:
        guest, invited = asyncio.run(
            write_model.add_guest(
                event_id=UUID(event_id),
                email=email,
                name=name,
                phone=phone,
                notify_by_sms=phone is not None,
                max_guests=max_guests,
                send_invitation=invite,
            )
        )
    except (RsvpError, ValueError) as e:
        _fail(e)

    typer.secho("Guest added!", fg=typer.colors.GREEN)
    typer.secho(f"  Guest ID: {guest.id}", fg=typer.colors.CYAN)
    typer.secho(f"  RSVP URL: {rsvp_url_for(guest.token)}", fg=typer.colors.CYAN)
    if invite and not invited:
        typer.secho("  Invitation was not sent, see the logs.", fg=typer.colors.YELLOW)


@app.command()
def bulk(
    event_id: str = typer.Argument(..., help="Event UUID"),
    action: BulkAction = typer.Argument(..., help="Action to apply"),
    guests: list[str] = typer.Option([], "--guest", "-g", help="Guest UUIDs"),
    status: GuestStatus = typer.Option(None, "--status", "-s", help="Status for changeStatus"),
):
    """Apply one action to many guests of an event."""
    processor = BulkGuestActionProcessor(
        store=SqlGuestStore(),
        notification_sender=get_notification_sender(),
    )

    try:
        result = asyncio.run(processor.run(UUID(event_id), action, guests, status=status))
    except (RsvpError, ValueError) as e:
        _fail(e)

    typer.secho(f"Succeeded: {result.success_count}", fg=typer.colors.GREEN)
    if result.failed_count:
        typer.secho(f"Failed: {result.failed_count}", fg=typer.colors.RED)
        for error in result.errors:
            typer.secho(f"  - {error}", fg=typer.colors.RED)


@app.command()
def set_reminders(
    event_id: str = typer.Argument(..., help="Event UUID"),
    reminders: str = typer.Argument("", help='Schedule, e.g. "day:7,hour:2"; empty for default'),
):
    """Replace an event's reminder schedule."""
    write_model = StoreReminderScheduleWriteModel(store=SqlGuestStore())

    try:
        asyncio.run(write_model.update_reminder_schedule(UUID(event_id), _parse_reminders(reminders)))
    except (RsvpError, ValueError) as e:
        _fail(e)

    show_reminders(event_id)


@app.command()
def show_reminders(
    event_id: str = typer.Argument(..., help="Event UUID"),
):
    """Show when reminders go out for an event."""
    write_model = StoreReminderScheduleWriteModel(store=SqlGuestStore())

    try:
        schedule = asyncio.run(write_model.get_reminder_schedule(UUID(event_id)))
    except (RsvpError, ValueError) as e:
        _fail(e)

    typer.secho(f"Reminders for {schedule.title}", fg=typer.colors.GREEN)
    for reminder in schedule.reminders:
        typer.secho(f"  - {format_reminder(reminder)}", fg=typer.colors.BLUE)
    if schedule.uses_default:
        typer.secho("  (default schedule)", fg=typer.colors.YELLOW)


@app.command()
def send_reminders():
    """Send every reminder that has come due."""
    scheduler = ReminderScheduler(
        store=SqlGuestStore(),
        notification_sender=get_notification_sender(),
    )
    result = asyncio.run(scheduler.run())

    typer.secho(f"Events checked: {result.events_checked}", fg=typer.colors.BLUE)
    typer.secho(f"Reminders sent: {result.reminders_sent}", fg=typer.colors.GREEN)
    if result.failed_count:
        typer.secho(f"Failed: {result.failed_count}", fg=typer.colors.RED)
        for error in result.errors:
            typer.secho(f"  - {error}", fg=typer.colors.RED)


if __name__ == "__main__":
    app()
