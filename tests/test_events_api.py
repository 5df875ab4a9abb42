from backend.errors import PersistenceError
from backend.main import app
from backend.routers.deps import get_orchestrator
from backend.schemas.timeline import EventAnalysis
from backend.services.resolver import AnalysisResolver
from backend.services.timeline import TimelineOrchestrator


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_add_event_from_details(client):
    response = client.post(
        "/api/events",
        data={"date": "2025-08-14", "event": "Blood count", "details": "Leucócitos: 12000"},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["data"]["event"]["analysis"]["leukocytes"] == 12000
    assert payload["data"]["warnings"] == []

    events = client.get("/api/events").json()
    assert [item["event"] for item in events] == ["Blood count"]

    exams = client.get("/api/exams").json()["data"]
    assert exams["points"][-1] == {"date": "2025-08-14", "urea": 60, "creatinine": 1.6, "leukocytes": 12000}
    assert "fell" in exams["explanation"]


def test_add_event_with_file_uses_analysis_service(client, analysis_service):
    analysis_service.result = EventAnalysis(creatinine=1.2)

    response = client.post(
        "/api/events",
        data={"date": "2025-08-15", "event": "Exam upload", "details": ""},
        files={"file": ("hemograma.pdf", b"%PDF-1.4 exam", "application/pdf")},
    )
    assert response.status_code == 200
    event = response.json()["data"]["event"]
    assert event["fileUrl"] == analysis_service.calls[0]
    assert event["analysis"]["creatinine"] == 1.2

    download = client.get(event["fileUrl"].removeprefix("http://testserver"))
    assert download.status_code == 200
    assert download.content == b"%PDF-1.4 exam"
    assert download.headers["content-type"] == "application/pdf"


def test_missing_event_name_is_a_validation_error(client):
    response = client.post("/api/events", data={"date": "2025-08-14", "event": ""})
    assert response.status_code == 400
    payload = response.json()
    assert payload["error"] == "ValidationError"
    assert payload["message"] == "Provide both date and event."
    assert client.get("/api/events").json() == []


def test_upload_endpoint_requires_file(client):
    response = client.post("/api/upload", data={})
    assert response.status_code == 400
    assert response.json()["message"] == "File is required"


def test_upload_endpoint_returns_url(client):
    response = client.post("/api/upload", files={"file": ("laudo.pdf", b"pdf", "application/pdf")})
    assert response.status_code == 200
    assert response.json()["url"].endswith("-laudo.pdf")


def test_unknown_file_is_not_found(client):
    response = client.get("/api/files/exams/missing.pdf")
    assert response.status_code == 404
    assert response.json()["error"] == "NotFound"


def test_parse_without_configured_analyzer_is_bad_gateway(client, monkeypatch):
    monkeypatch.setattr("backend.routers.deps.settings.openai_api_key", None)
    response = client.post("/api/parse", json={"fileUrl": "http://testserver/api/files/exams/a.pdf"})
    assert response.status_code == 502
    assert response.json()["error"] == "BadGateway"


class BrokenTimelineStore:
    def load(self):
        return ()

    def save(self, events):
        raise PersistenceError("database unavailable")


def test_failed_save_returns_generic_persistence_envelope(client, blob_store):
    orchestrator = TimelineOrchestrator(BrokenTimelineStore(), blob_store, AnalysisResolver(None), seed_on_empty=False)
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator

    response = client.post("/api/events", data={"date": "2025-08-14", "event": "Labs", "details": "ureia 70"})

    assert response.status_code == 500
    assert response.json() == {
        "statusCode": 500,
        "message": "Could not save the timeline. Please try again.",
        "error": "PersistenceError",
    }
    assert client.get("/api/events").json() == []
