import pytest
from fastapi.testclient import TestClient

from tests.helpers import FakeCalendar, FakeContent, busy
from voice_agent.api.deps import container_dep
from voice_agent.api.routes import appointments
from voice_agent.core.config import settings
from voice_agent.core.container import Container
from voice_agent.main import app


@pytest.fixture
def client(container: Container):
    app.dependency_overrides[container_dep] = lambda: container
    # No context manager: the lifespan would build the real container
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health_reports_loaded_documents(client: TestClient):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "documents": 3}


class TestSlots:
    def test_available_slots(self, client: TestClient, calendar: FakeCalendar):
        calendar.events = [busy("09:00", "10:00", "Standup")]
        response = client.get("/api/v1/slots/available", params={"date": "2024-03-01"})
        assert response.status_code == 200
        data = response.json()
        assert data["date"] == "2024-03-01"
        assert data["time_zone"] == "Asia/Kolkata"
        assert data["busy"][0]["label"] == "Standup"
        assert len(data["slots"]) == 14
        assert data["slots"][0]["label"] == "10:00 AM"

    def test_bad_date_is_a_client_error(self, client: TestClient):
        response = client.get("/api/v1/slots/available", params={"date": "soon"})
        assert response.status_code == 400

    def test_calendar_outage_is_a_bad_gateway(self, client: TestClient, calendar: FakeCalendar):
        calendar.fail = True
        response = client.get("/api/v1/slots/available", params={"date": "2024-03-01"})
        assert response.status_code == 502


class TestAppointments:
    def test_book(self, client: TestClient, calendar: FakeCalendar):
        response = client.post(
            "/api/v1/appointments",
            json={"title": "Consultation", "date_time": "2024-03-01T10:30:00", "attendee_email": "guest@example.com"},
        )
        assert response.status_code == 201
        data = response.json()
        assert data["event_id"] == "evt-1"
        assert data["start"] == "2024-03-01T10:30:00+05:30"
        assert data["end"] == "2024-03-01T11:00:00+05:30"
        assert len(calendar.inserted) == 1

    def test_confirmation_is_sent_in_the_background(
        self, client: TestClient, calendar: FakeCalendar, monkeypatch: pytest.MonkeyPatch
    ):
        sent = []

        async def fake_confirmation(appointment):
            sent.append(appointment.attendee.email)
            return False

        monkeypatch.setattr(appointments, "send_appointment_confirmation_email", fake_confirmation)
        monkeypatch.setattr(settings, "send_booking_confirmation", True)
        monkeypatch.setattr(settings, "smtp_host", "smtp.example.com")
        monkeypatch.setattr(settings, "smtp_user", "mailer")
        monkeypatch.setattr(settings, "smtp_password", "secret")
        monkeypatch.setattr(settings, "from_email", "agent@example.com")

        response = client.post(
            "/api/v1/appointments",
            json={"title": "Consultation", "date_time": "2024-03-01T10:30:00", "attendee_email": "guest@example.com"},
        )
        assert response.status_code == 201
        assert sent == ["guest@example.com"]
        assert len(calendar.inserted) == 1

    def test_conflict(self, client: TestClient, calendar: FakeCalendar):
        calendar.events = [busy("10:15", "10:45")]
        response = client.post(
            "/api/v1/appointments",
            json={"title": "Consultation", "date_time": "2024-03-01T10:00:00", "attendee_email": "guest@example.com"},
        )
        assert response.status_code == 409
        assert calendar.inserted == []

    def test_invalid_email(self, client: TestClient):
        response = client.post(
            "/api/v1/appointments",
            json={"title": "Consultation", "date_time": "2024-03-01T10:00:00", "attendee_email": "nobody"},
        )
        assert response.status_code == 400


class TestKnowledge:
    def test_search(self, client: TestClient):
        response = client.get("/api/v1/knowledge/search", params={"q": "refund policy details"})
        assert response.status_code == 200
        results = response.json()["results"]
        assert [r["filename"] for r in results] == ["refunds.txt", "pricing.txt"]
        assert results[0]["score"] == 2

    def test_reload(self, client: TestClient, container: Container, tmp_path):
        docs = tmp_path / "documents"
        docs.mkdir()
        (docs / "faq.txt").write_text("Frequently asked questions", encoding="utf-8")
        response = client.post("/api/v1/knowledge/reload")
        assert response.status_code == 200
        assert response.json()["documents"] == 1
        assert len(container.corpus.current) == 1


class TestCollateral:
    def test_generate(self, client: TestClient):
        response = client.post("/api/v1/collateral", json={"topic": "refund policy", "format": "Memo"})
        assert response.status_code == 200
        data = response.json()
        assert data["channel"] == "cloud_doc"
        assert data["reference"] == "https://docs.example/d/1"
        assert data["attempts"][0]["result"]["kind"] == "success"

    def test_ai_failure_is_a_bad_gateway(self, client: TestClient, content: FakeContent):
        content.fail = True
        response = client.post("/api/v1/collateral", json={"topic": "refund policy"})
        assert response.status_code == 502
