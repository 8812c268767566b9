from datetime import date, datetime, timedelta, timezone

from voice_agent.core.config import settings
from voice_agent.core.timezone import home_tz, start_of_day, to_home
from voice_agent.models.calendar import BusyInterval, Slot


def _slot_times_for_date(d: date, tz: timezone) -> list[datetime]:
    """Slot start times in home time for the given date (business hours, fixed step)."""
    slots: list[datetime] = []
    start = datetime(d.year, d.month, d.day, settings.business_start_hour, 0, 0, tzinfo=tz)
    end = datetime(d.year, d.month, d.day, settings.business_end_hour, 0, 0, tzinfo=tz)
    delta = timedelta(minutes=settings.slot_duration_minutes)
    current = start
    while current < end:
        slots.append(current)
        current += delta
    return slots


def is_busy_at(instant: datetime, busy: list[BusyInterval]) -> bool:
    return any(b.contains(instant) for b in busy)


def free_slots(day: datetime, busy: list[BusyInterval], tz: timezone | None = None) -> list[Slot]:
    """Free business-hour slots on the home-time date of ``day``, earliest first.

    A candidate is taken when its start instant falls in no busy interval
    (half-open), and all-day events block every candidate on their dates.
    """
    tz = tz or home_tz()
    d = to_home(day, tz).date()
    return [
        Slot(start=s, duration_minutes=settings.slot_duration_minutes)
        for s in _slot_times_for_date(d, tz)
        if not is_busy_at(s, busy)
    ]


def day_window(day: datetime, tz: timezone | None = None) -> tuple[datetime, datetime]:
    """[00:00, +24h) home time around the date of ``day``."""
    start = start_of_day(day, tz)
    return start, start + timedelta(days=1)
