import logging
from datetime import datetime, time, timedelta

from pydantic import ValidationError

from voice_agent.core.config import settings
from voice_agent.core.errors import Conflict, MalformedInput
from voice_agent.core.timezone import format_clock, home_dates_between, home_tz, normalize
from voice_agent.models.calendar import Appointment, BusyInterval, Contact, EventRef
from voice_agent.services.calendar_service import CalendarClient

logger = logging.getLogger(__name__)


def find_conflict(start: datetime, end: datetime, busy: list[BusyInterval]) -> BusyInterval | None:
    """First busy interval overlapping [start, end), or None.

    Timed events overlap when ``start < b.end and end > b.start``; all-day
    events clash with any interval touching one of their dates.
    """
    days = home_dates_between(start, end)
    for b in busy:
        if b.all_day:
            if any(b.covers_date(d) for d in days):
                return b
        elif start < b.end and end > b.start:
            return b
    return None


def would_conflict(start: datetime, end: datetime, busy: list[BusyInterval]) -> bool:
    return find_conflict(start, end, busy) is not None


def build_appointment(
    title: str, date_time: str, attendee_email: str, duration_minutes: int | None = None
) -> Appointment:
    start = normalize(date_time)
    minutes = settings.appointment_duration_minutes if duration_minutes is None else duration_minutes
    if minutes <= 0:
        raise MalformedInput("Appointment length must be a positive number of minutes.")
    try:
        return Appointment(
            title=title.strip() or "Appointment",
            start=start,
            end=start + timedelta(minutes=minutes),
            attendee=Contact(email=attendee_email.strip()),
        )
    except ValidationError as e:
        raise MalformedInput(f"Invalid attendee email {attendee_email!r}.") from e


def conflict_window(appointment: Appointment) -> tuple[datetime, datetime]:
    """Whole home-time days the appointment touches, so all-day events are listed too."""
    days = home_dates_between(appointment.start, appointment.end)
    tz = home_tz()
    first = datetime.combine(days[0], time(), tzinfo=tz)
    return first, first + timedelta(days=len(days))


async def create_appointment(
    calendar: CalendarClient,
    title: str,
    date_time: str,
    attendee_email: str,
    duration_minutes: int | None = None,
) -> tuple[Appointment, EventRef]:
    """Check the calendar for clashes, then insert. Raises Conflict on overlap.

    The read and the write are not atomic; two concurrent bookings for the
    same slot can both succeed.
    """
    appointment = build_appointment(title, date_time, attendee_email, duration_minutes)
    time_min, time_max = conflict_window(appointment)
    busy = await calendar.list_events(settings.calendar_id, time_min, time_max)
    clash = find_conflict(appointment.start, appointment.end, busy)
    if clash is not None:
        when = "all day" if clash.all_day else f"at {format_clock(clash.start)}"
        label = clash.label or "another event"
        logger.info("Booking refused, overlaps %r (%s)", label, when)
        raise Conflict(f"That time overlaps {label} ({when}). Please pick another slot.")
    ref = await calendar.insert_event(settings.calendar_id, appointment)
    logger.info(
        "Booked %r for %s at %s (event %s)",
        appointment.title,
        appointment.attendee.email,
        appointment.start.isoformat(),
        ref.id,
    )
    return appointment, ref
