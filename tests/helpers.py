"""Fakes and builders shared across the voice agent tests."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

from voice_agent.core.errors import UpstreamUnavailable
from voice_agent.models.calendar import Appointment, BusyInterval, EventRef
from voice_agent.models.delivery import DeliveryChannel, DeliveryRequest
from voice_agent.models.document import Corpus, DocumentRecord

HOME = timezone(timedelta(hours=5, minutes=30))
DAY = date(2024, 3, 1)


def at(hhmm: str, d: date = DAY) -> datetime:
    """Home-time instant on ``d`` from "HH:MM"."""
    hours, minutes = (int(p) for p in hhmm.split(":"))
    return datetime(d.year, d.month, d.day, hours, minutes, tzinfo=HOME)


def busy(start: str, end: str, label: str = "Meeting", d: date = DAY) -> BusyInterval:
    return BusyInterval(start=at(start, d), end=at(end, d), label=label)


class FakeCalendar:
    def __init__(self, events: list[BusyInterval] | None = None, fail: bool = False) -> None:
        self.events = list(events or [])
        self.fail = fail
        self.list_calls: list[tuple[str, datetime, datetime]] = []
        self.inserted: list[Appointment] = []

    async def list_events(self, calendar_id: str, time_min: datetime, time_max: datetime) -> list[BusyInterval]:
        self.list_calls.append((calendar_id, time_min, time_max))
        if self.fail:
            raise UpstreamUnavailable("calendar down")
        return [e for e in self.events if e.start < time_max and e.end > time_min]

    async def insert_event(self, calendar_id: str, appointment: Appointment) -> EventRef:
        if self.fail:
            raise UpstreamUnavailable("calendar down")
        self.inserted.append(appointment)
        return EventRef(id=f"evt-{len(self.inserted)}", html_link="https://calendar.example/evt")


class FakeContent:
    def __init__(self, text: str = "# Draft\n\nGenerated body.", fail: bool = False) -> None:
        self.text = text
        self.fail = fail
        self.prompts: list[tuple[str, str]] = []

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        self.prompts.append((system_prompt, user_prompt))
        if self.fail:
            raise UpstreamUnavailable("AI down")
        return self.text


class FakeChannel:
    def __init__(self, channel: DeliveryChannel, reference: str | None = None, error: Exception | None = None) -> None:
        self.channel = channel
        self.reference = reference
        self.error = error
        self.calls: list[DeliveryRequest] = []

    async def publish(self, request: DeliveryRequest) -> str:
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        assert self.reference is not None
        return self.reference

    def describe(self, request: DeliveryRequest, reference: str, failed: list[DeliveryChannel]) -> str:
        return f"{self.channel.value}:{reference}"


CORPUS = Corpus(
    documents=(
        DocumentRecord(filename="refunds.txt", normalized_text="Our refund policy allows returns within 30 days."),
        DocumentRecord(filename="shipping.txt", normalized_text="Shipping takes five business days."),
        DocumentRecord(filename="pricing.txt", normalized_text="Pricing details and refund exceptions for enterprise plans."),
    )
)


class FakeTokens:
    def __init__(self) -> None:
        self.calls: list[bool] = []

    async def get_access_token(self, *, force_refresh: bool = False) -> str:
        self.calls.append(force_refresh)
        return f"token-{len(self.calls)}"
