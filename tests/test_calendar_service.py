import json
from datetime import date, datetime, timedelta

import httpx
import pytest

from tests.helpers import DAY, FakeTokens, at
from voice_agent.core.errors import UpstreamUnavailable
from voice_agent.services.appointment_service import build_appointment
from voice_agent.services.calendar_service import (
    GoogleCalendarClient,
    build_event_body,
    busy_interval_from_event,
)


def make_client(handler) -> tuple[GoogleCalendarClient, FakeTokens]:
    tokens = FakeTokens()
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GoogleCalendarClient(http_client, tokens, "Asia/Kolkata"), tokens


class TestBusyIntervalFromEvent:
    def test_timed_event_is_converted_to_home_time(self):
        interval = busy_interval_from_event(
            {
                "summary": "Standup",
                "start": {"dateTime": "2024-03-01T04:30:00Z"},
                "end": {"dateTime": "2024-03-01T05:00:00Z"},
            }
        )
        assert interval is not None
        assert interval.start == at("10:00")
        assert interval.end == at("10:30")
        assert interval.start.utcoffset() == timedelta(hours=5, minutes=30)
        assert interval.label == "Standup"
        assert not interval.all_day

    def test_all_day_event_uses_exclusive_end_date(self):
        interval = busy_interval_from_event(
            {"summary": "Conference", "start": {"date": "2024-03-01"}, "end": {"date": "2024-03-03"}}
        )
        assert interval is not None
        assert interval.all_day
        assert interval.covers_date(DAY)
        assert interval.covers_date(date(2024, 3, 2))
        assert not interval.covers_date(date(2024, 3, 3))

    @pytest.mark.parametrize(
        "event",
        [
            {"status": "cancelled", "start": {"dateTime": "2024-03-01T10:00:00+05:30"}},
            {"transparency": "transparent", "start": {"dateTime": "2024-03-01T10:00:00+05:30"}},
            {"start": {}},
            {"start": {"dateTime": "not a time"}},
        ],
    )
    def test_events_that_block_nothing_are_skipped(self, event):
        assert busy_interval_from_event(event) is None

    def test_missing_summary_gets_a_placeholder(self):
        interval = busy_interval_from_event({"start": {"date": "2024-03-01"}, "end": {"date": "2024-03-02"}})
        assert interval is not None
        assert interval.label == "(no title)"


def test_event_body_names_the_guest():
    appt = build_appointment("Consultation", "2024-03-01T10:30:00", "guest@example.com")
    body = build_event_body(appt, "Asia/Kolkata")
    assert body["summary"] == "Consultation (Guest: guest@example.com)"
    assert body["description"].startswith("GUEST: guest@example.com")
    assert body["start"] == {"dateTime": "2024-03-01T10:30:00+05:30", "timeZone": "Asia/Kolkata"}
    assert body["end"]["dateTime"] == "2024-03-01T11:00:00+05:30"


async def test_list_events_sends_window_and_follows_pages():
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if "pageToken" not in request.url.params:
            return httpx.Response(
                200,
                json={
                    "items": [
                        {
                            "summary": "Standup",
                            "start": {"dateTime": "2024-03-01T10:00:00+05:30"},
                            "end": {"dateTime": "2024-03-01T10:30:00+05:30"},
                        }
                    ],
                    "nextPageToken": "page-2",
                },
            )
        return httpx.Response(
            200,
            json={"items": [{"summary": "Holiday", "start": {"date": "2024-03-01"}, "end": {"date": "2024-03-02"}}]},
        )

    client, _ = make_client(handler)
    busy = await client.list_events("team@example.com", at("00:00"), at("00:00", DAY + timedelta(days=1)))

    assert [b.label for b in busy] == ["Standup", "Holiday"]
    first = requests[0]
    assert first.url.raw_path.startswith(b"/calendar/v3/calendars/team%40example.com/events?")
    assert first.url.params["timeMin"] == "2024-03-01T00:00:00+05:30"
    assert first.url.params["timeMax"] == "2024-03-02T00:00:00+05:30"
    assert first.url.params["timeZone"] == "Asia/Kolkata"
    assert first.url.params["singleEvents"] == "true"
    assert first.url.params["orderBy"] == "startTime"
    assert first.headers["Authorization"] == "Bearer token-1"
    assert requests[1].url.params["pageToken"] == "page-2"


async def test_insert_event_posts_body_and_returns_reference():
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "abc123", "htmlLink": "https://calendar.google.com/e/abc123"})

    client, _ = make_client(handler)
    appt = build_appointment("Consultation", "2024-03-01T10:30:00", "guest@example.com")
    ref = await client.insert_event("primary-cal", appt)

    assert seen["method"] == "POST"
    assert seen["body"]["summary"] == "Consultation (Guest: guest@example.com)"
    assert ref.id == "abc123"
    assert ref.html_link == "https://calendar.google.com/e/abc123"


async def test_unauthorized_response_retries_with_fresh_token():
    auth_headers: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        auth_headers.append(request.headers["Authorization"])
        if len(auth_headers) == 1:
            return httpx.Response(401, json={"error": {"message": "Invalid Credentials"}})
        return httpx.Response(200, json={"items": []})

    client, tokens = make_client(handler)
    assert await client.list_events("primary-cal", at("00:00"), at("23:59")) == []
    assert tokens.calls == [False, True]
    assert auth_headers == ["Bearer token-1", "Bearer token-2"]


async def test_server_error_is_reported_as_upstream_unavailable():
    client, _ = make_client(lambda request: httpx.Response(500, json={"error": {"message": "Backend Error"}}))
    with pytest.raises(UpstreamUnavailable, match="Google Calendar request failed"):
        await client.list_events("primary-cal", at("00:00"), at("23:59"))


async def test_network_failure_is_reported_as_upstream_unavailable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client, _ = make_client(handler)
    with pytest.raises(UpstreamUnavailable, match="unreachable"):
        await client.list_events("primary-cal", at("00:00"), at("23:59"))


async def test_missing_calendar_id_fails_without_a_request():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    client, _ = make_client(handler)
    with pytest.raises(UpstreamUnavailable):
        await client.list_events("", datetime(2024, 3, 1), datetime(2024, 3, 2))
