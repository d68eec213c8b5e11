from event_rsvp.guests.dtos import UNLIMITED, GuestLimitResult


def resolve_guest_limit(global_max: int | None, per_guest_max: int | None) -> int | None:
    """The per-guest override always wins over the event-wide limit."""
    if per_guest_max is not None:
        return per_guest_max
    return global_max


def _additional_guests_label(count: int) -> str:
    return f"{count} additional guest{'' if count == 1 else 's'}"


def validate_guest_limit(
    global_max: int | None,
    additional_count: int,
    per_guest_max: int | None = None,
) -> GuestLimitResult:
    """Check that the invitee plus ``additional_count`` companions fit the limit.

    Limits count the invitee, so a limit of 2 allows one additional guest.
    """
    limit = resolve_guest_limit(global_max, per_guest_max)
    if limit is None:
        return GuestLimitResult(valid=True, remaining=UNLIMITED)

    total = 1 + additional_count
    if total > limit:
        allowed = max(limit - 1, 0)
        return GuestLimitResult(
            valid=False,
            remaining=0,
            error=(
                f"You can only bring {_additional_guests_label(allowed)} "
                f"(total of {limit} including yourself)"
            ),
        )

    return GuestLimitResult(valid=True, remaining=limit - total)
