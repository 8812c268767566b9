"""Home time zone helpers.

Every client-supplied date or timestamp is read as wall-clock time in the
service's fixed home offset. An offset or ``Z`` marker on the input is
discarded, not converted: "10:00Z" and "10:00+02:00" both mean 10:00 at home.
Instants that come back from the calendar API are real instants and are
converted with :func:`to_home` instead.
"""

from datetime import date, datetime, timedelta, timezone

from voice_agent.core.config import settings
from voice_agent.core.errors import MalformedInput


def home_tz() -> timezone:
    return settings.home_tz


def interpret_in_home(naive: datetime, tz: timezone | None = None) -> datetime:
    """Attach the home offset to a wall-clock datetime, dropping any existing offset."""
    return naive.replace(tzinfo=tz or home_tz())


def normalize(value: str, tz: timezone | None = None) -> datetime:
    """Parse a bare date or a timestamp into an aware datetime in the home offset.

    A bare ``YYYY-MM-DD`` maps to 00:00:00 home time. Raises MalformedInput
    when the string is neither a date nor a date-time.
    """
    text = (value or "").strip()
    if not text:
        raise MalformedInput("No date or time was given.")
    try:
        # Also accepts a bare date, which parses to midnight
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise MalformedInput(f"Could not understand the date/time {value!r}.") from None
    return interpret_in_home(parsed, tz)


def to_home(instant: datetime, tz: timezone | None = None) -> datetime:
    """Convert an aware instant to the home offset (naive values are taken as UTC)."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return instant.astimezone(tz or home_tz())


def start_of_day(instant: datetime, tz: timezone | None = None) -> datetime:
    local = to_home(instant, tz)
    return local.replace(hour=0, minute=0, second=0, microsecond=0)


def home_dates_between(start: datetime, end: datetime, tz: timezone | None = None) -> list[date]:
    """Home-time calendar dates touched by the half-open interval [start, end)."""
    first = to_home(start, tz).date()
    last_instant = end - timedelta(microseconds=1) if end > start else start
    last = to_home(last_instant, tz).date()
    days = []
    d = first
    while d <= last:
        days.append(d)
        d += timedelta(days=1)
    return days


def format_clock(instant: datetime, tz: timezone | None = None) -> str:
    """12-hour label such as "09:30 AM" in home time."""
    return to_home(instant, tz).strftime("%I:%M %p")
