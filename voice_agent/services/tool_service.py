"""The four agent tools, independent of how they are transported.

Every function returns a single text reply and never raises: parse errors,
booking conflicts and upstream outages all come back as readable text.
"""

import logging

from pydantic import ValidationError

from voice_agent.core.config import settings
from voice_agent.core.container import Container
from voice_agent.core.errors import Conflict, MalformedInput, UpstreamUnavailable
from voice_agent.core.timezone import format_clock, normalize
from voice_agent.models.calendar import BusyInterval, Contact, Slot
from voice_agent.models.delivery import DeliveryRequest
from voice_agent.services.appointment_service import create_appointment
from voice_agent.services.content_service import generate_collateral_text
from voice_agent.services.email_service import send_appointment_confirmation_email
from voice_agent.services.knowledge_service import search
from voice_agent.services.slot_service import day_window, free_slots

logger = logging.getLogger(__name__)


def format_busy(busy: list[BusyInterval]) -> str:
    lines = []
    for b in busy:
        when = "All Day" if b.all_day else format_clock(b.start)
        lines.append(f"BUSY: {when} - {b.label}")
    return "\n".join(lines)


def format_availability(date: str, busy: list[BusyInterval], slots: list[Slot]) -> str:
    available = ", ".join(format_clock(s.start) for s in slots)
    return (
        f"STATUS FOR {date} ({settings.time_zone_name}):\n"
        f"BUSY:\n{format_busy(busy) or 'None'}\n"
        f"AVAILABLE:\n{available or 'None'}"
    )


async def check_calendar_availability(container: Container, date: str) -> str:
    logger.info("[Check] Checking %s in %s", date, settings.time_zone_name)
    try:
        day = normalize(date)
        time_min, time_max = day_window(day)
        busy = await container.calendar.list_events(settings.calendar_id, time_min, time_max)
    except MalformedInput as e:
        return f"{e.message} Please give the date as YYYY-MM-DD."
    except UpstreamUnavailable:
        return "Error checking calendar."
    except Exception:
        logger.exception("Availability check failed for %s", date)
        return "Error checking calendar."
    return format_availability(day.date().isoformat(), busy, free_slots(day, busy))


async def book_appointment(
    container: Container,
    title: str,
    date_time: str,
    attendee_email: str,
    duration_minutes: int | None = None,
) -> str:
    logger.info("[Book] %s for %s at %s", title, attendee_email, date_time)
    try:
        appointment, _ref = await create_appointment(
            container.calendar, title, date_time, attendee_email, duration_minutes
        )
    except (MalformedInput, Conflict) as e:
        return e.message
    except UpstreamUnavailable:
        return "Error booking slot."
    except Exception:
        logger.exception("BOOKING ERROR")
        return "Error booking slot."
    if settings.send_booking_confirmation and settings.email_enabled:
        await send_appointment_confirmation_email(appointment)
    return f"Success. Booked on calendar for {appointment.attendee.email}."


def search_knowledge_base(container: Container, query: str) -> str:
    logger.info("[Search] %r", query)
    try:
        hits = search(query, container.corpus.current, limit=settings.search_limit)
    except Exception:
        logger.exception("Search failed for %r", query)
        return "Error searching documents."
    if not hits:
        return "No info found."
    snippets = "\n\n".join(
        f"[Source: {h.document.filename}]\n{h.document.normalized_text[: settings.snippet_chars]}..."
        for h in hits
    )
    return f"Found details:\n{snippets}"


async def generate_collateral(
    container: Container, topic: str, format: str, recipient_email: str | None = None
) -> str:
    logger.info("[AI-Write] Creating %s about %s", format, topic)
    recipient = None
    if recipient_email and recipient_email.strip():
        try:
            recipient = Contact(email=recipient_email.strip()).email
        except ValidationError:
            return f"Invalid recipient email {recipient_email!r}."
    try:
        content = await generate_collateral_text(
            container.content, topic, format, container.corpus.current
        )
    except UpstreamUnavailable:
        return "AI Generation failed."
    except Exception:
        logger.exception("AI generation crashed for %r", topic)
        return "AI Generation failed."
    request = DeliveryRequest(content=content, topic=topic, format=format, recipient=recipient)
    outcome = await container.delivery.deliver(request)
    return outcome.message
