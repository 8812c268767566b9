import logging
from datetime import date, datetime, timezone
from typing import Any, Protocol
from urllib.parse import quote

import httpx

from voice_agent.core.config import settings
from voice_agent.core.errors import UpstreamUnavailable
from voice_agent.core.timezone import home_tz, to_home
from voice_agent.models.calendar import Appointment, BusyInterval, EventRef
from voice_agent.services.google_api import GoogleApiClient
from voice_agent.services.google_auth_service import TokenProvider

logger = logging.getLogger(__name__)

GOOGLE_CALENDAR_API_BASE_URL = "https://www.googleapis.com/calendar/v3"


class CalendarClient(Protocol):
    async def list_events(
        self, calendar_id: str, time_min: datetime, time_max: datetime
    ) -> list[BusyInterval]: ...

    async def insert_event(self, calendar_id: str, appointment: Appointment) -> EventRef: ...


def busy_interval_from_event(event: dict[str, Any], tz: timezone | None = None) -> BusyInterval | None:
    """Map a Calendar API event to a BusyInterval; None for events that block nothing."""
    if event.get("status") == "cancelled" or event.get("transparency") == "transparent":
        return None
    tz = tz or home_tz()
    start = event.get("start") or {}
    end = event.get("end") or {}
    label = event.get("summary") or "(no title)"
    try:
        if start.get("dateTime"):
            return BusyInterval(
                start=to_home(datetime.fromisoformat(start["dateTime"]), tz),
                end=to_home(datetime.fromisoformat(end.get("dateTime") or start["dateTime"]), tz),
                label=label,
            )
        if start.get("date"):
            end_date = date.fromisoformat(end["date"]) if end.get("date") else None
            return BusyInterval.all_day_event(date.fromisoformat(start["date"]), tz, label, end_date)
    except (ValueError, KeyError):
        logger.warning("Skipping event with unparseable times: %r", event.get("id"))
    return None


def build_event_body(appointment: Appointment, time_zone_name: str) -> dict[str, Any]:
    guest = appointment.attendee.email
    return {
        "summary": f"{appointment.title} (Guest: {guest})",
        "description": f"GUEST: {guest}\nBooked via Voice Agent.",
        "start": {"dateTime": appointment.start.isoformat(), "timeZone": time_zone_name},
        "end": {"dateTime": appointment.end.isoformat(), "timeZone": time_zone_name},
    }


class GoogleCalendarClient(GoogleApiClient):
    service_name = "Google Calendar"

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        tokens: TokenProvider,
        time_zone_name: str | None = None,
    ) -> None:
        super().__init__(http_client, tokens)
        self._time_zone_name = time_zone_name or settings.time_zone_name

    def _events_url(self, calendar_id: str) -> str:
        if not calendar_id:
            raise UpstreamUnavailable("No calendar is configured.")
        return f"{GOOGLE_CALENDAR_API_BASE_URL}/calendars/{quote(calendar_id, safe='')}/events"

    async def list_events(
        self, calendar_id: str, time_min: datetime, time_max: datetime
    ) -> list[BusyInterval]:
        url = self._events_url(calendar_id)
        params: dict[str, Any] = {
            "timeMin": time_min.isoformat(),
            "timeMax": time_max.isoformat(),
            "timeZone": self._time_zone_name,
            "singleEvents": "true",
            "orderBy": "startTime",
            "maxResults": 250,
        }
        busy: list[BusyInterval] = []
        while True:
            payload = await self._request_json("GET", url, params=params)
            for item in payload.get("items") or []:
                if isinstance(item, dict):
                    interval = busy_interval_from_event(item)
                    if interval is not None:
                        busy.append(interval)
            page_token = payload.get("nextPageToken")
            if not page_token:
                return busy
            params = {**params, "pageToken": page_token}

    async def insert_event(self, calendar_id: str, appointment: Appointment) -> EventRef:
        payload = await self._request_json(
            "POST",
            self._events_url(calendar_id),
            json_body=build_event_body(appointment, self._time_zone_name),
        )
        event_id = payload.get("id")
        if not event_id:
            raise UpstreamUnavailable("Google Calendar did not return the new event.")
        return EventRef(id=str(event_id), html_link=payload.get("htmlLink"))
