"""Shared fixtures for the voice agent tests."""

from __future__ import annotations

import pytest

from tests.helpers import CORPUS, FakeCalendar, FakeChannel, FakeContent
from voice_agent.core.config import settings
from voice_agent.core.container import Container
from voice_agent.models.delivery import DeliveryChannel
from voice_agent.services.delivery_service import DeliveryOrchestrator
from voice_agent.services.knowledge_service import CorpusStore


@pytest.fixture(autouse=True)
def _home_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "home_utc_offset", "+05:30")
    monkeypatch.setattr(settings, "time_zone_name", "Asia/Kolkata")
    monkeypatch.setattr(settings, "calendar_id", "primary-cal")
    monkeypatch.setattr(settings, "business_start_hour", 9)
    monkeypatch.setattr(settings, "business_end_hour", 17)
    monkeypatch.setattr(settings, "slot_duration_minutes", 30)
    monkeypatch.setattr(settings, "appointment_duration_minutes", 30)
    monkeypatch.setattr(settings, "send_booking_confirmation", False)
    monkeypatch.setattr(settings, "smtp_host", "")


@pytest.fixture
def calendar() -> FakeCalendar:
    return FakeCalendar()


@pytest.fixture
def content() -> FakeContent:
    return FakeContent()


@pytest.fixture
def container(calendar: FakeCalendar, content: FakeContent, tmp_path) -> Container:
    return Container(
        calendar=calendar,
        content=content,
        delivery=DeliveryOrchestrator(
            [FakeChannel(DeliveryChannel.CLOUD_DOC, reference="https://docs.example/d/1")],
            inline_preview_chars=50,
        ),
        corpus=CorpusStore(tmp_path / "documents", CORPUS),
    )
