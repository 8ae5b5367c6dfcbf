"""Role names for scheduled events.

A one-off event gets its start time as suffix, a recurring event gets its
frequency:

    Board Game Night [Mar-03 18:00]
    Standup [Weekly]
"""

from __future__ import annotations

from datetime import datetime

from event_roles.sync.logger import describe_event, logger
from event_roles.sync.models import Frequency, ScheduledEvent
from event_roles.utils.time import as_utc


# Discord rejects role names longer than this
ROLE_NAME_LIMIT = 100

# English month abbreviations, independent of LC_TIME
MONTH_ABBREVIATIONS = (
    "Jan", "Feb", "Mar", "Apr", "May", "Jun",
    "Jul", "Aug", "Sep", "Oct", "Nov", "Dec",
)

ELLIPSIS = "…"

FREQUENCY_LABELS: dict[Frequency, str] = {
    Frequency.YEARLY: "Yearly",
    Frequency.MONTHLY: "Monthly",
    Frequency.WEEKLY: "Weekly",
    Frequency.DAILY: "Daily",
}


def frequency_label(frequency: int) -> str:
    """Label for a recurrence frequency; unknown values give ""."""
    try:
        return FREQUENCY_LABELS[Frequency(frequency)]
    except ValueError:
        return ""


def format_start_time(start: datetime | None) -> str:
    """Render a start time in UTC, e.g. ``Mar-03 18:00``."""
    start = as_utc(start)
    month = MONTH_ABBREVIATIONS[start.month - 1]
    return f"{month}-{start.day:02d} {start.hour:02d}:{start.minute:02d}"


def reasonable_truncate(text: str, limit: int) -> str:
    """Cap ``text`` at ``limit`` characters.

    Cuts at the last space when that keeps at least half of the text,
    and marks the cut with an ellipsis.
    """
    if len(text) <= limit:
        return text
    if limit <= len(ELLIPSIS):
        return text[:limit]

    cut = text[: limit - len(ELLIPSIS)]
    space = cut.rfind(" ")
    if space >= len(cut) // 2:
        cut = cut[:space]
    return cut.rstrip() + ELLIPSIS


def role_suffix(event: ScheduledEvent) -> str:
    rule = event.recurrence_rule
    if not event.is_recurring or rule is None:
        return f" [{format_start_time(event.scheduled_start_time)}]"

    label = frequency_label(rule.frequency)
    if not label:
        logger.warning(
            f"Unknown recurrence frequency {rule.frequency} "
            f"on scheduled event {describe_event(event.name, event.id)}."
        )
    return f" [{label}]"


def build_role_name(event: ScheduledEvent) -> str:
    """Role name for ``event``, never longer than ROLE_NAME_LIMIT."""
    suffix = role_suffix(event)
    return reasonable_truncate(event.name, ROLE_NAME_LIMIT - len(suffix)) + suffix
