"""Human-readable durations and timestamps for notification text."""

from __future__ import annotations

from datetime import datetime, tzinfo

SECOND_MS = 1000
MINUTE_MS = 60 * SECOND_MS
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS


def format_duration(milliseconds: int) -> str:
    """Format a millisecond duration as at most two units, largest first.

    Lower units are truncated, never rounded.

    Args:
        milliseconds: A non-negative duration.

    Returns:
        A string of the form "XdYYh", "XhYYm", "XmYYs" or "Xs".

    Raises:
        ValueError: If the duration is negative.

    Example:
        >>> format_duration(3_661_000)
        '1h01m'
    """
    if milliseconds < 0:
        raise ValueError(f"Duration must not be negative, got {milliseconds}ms")

    days, remainder = divmod(milliseconds, DAY_MS)
    if days > 0:
        return f"{days}d{remainder // HOUR_MS:02d}h"

    hours, remainder = divmod(remainder, HOUR_MS)
    if hours > 0:
        return f"{hours}h{remainder // MINUTE_MS:02d}m"

    minutes, remainder = divmod(remainder, MINUTE_MS)
    if minutes > 0:
        return f"{minutes}m{remainder // SECOND_MS:02d}s"

    return f"{remainder // SECOND_MS}s"


def format_timestamp(milliseconds: int, tz: tzinfo | None = None) -> str:
    """Format an epoch-millisecond timestamp as short date and time.

    Produces "M/D/YY H:MM AM", e.g. "1/15/24 3:04 PM". When tz is None the
    host's local zone is used.
    """
    moment = datetime.fromtimestamp(milliseconds / 1000, tz=tz)
    if tz is None:
        moment = moment.astimezone()

    hour = moment.hour % 12 or 12
    meridiem = "AM" if moment.hour < 12 else "PM"
    return f"{moment.month}/{moment.day}/{moment:%y} {hour}:{moment:%M} {meridiem}"
