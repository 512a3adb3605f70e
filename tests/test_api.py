import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from talentpool.api.dependencies import get_lifecycle, get_session_manager
from talentpool.api.endpoints import interview as interview_endpoints
from talentpool.api.router import api_router
from talentpool.config.settings import Settings
from talentpool.core.errors import ExternalServiceError


TALENT = {"X-User-Id": "talent-1", "X-User-Role": "talent"}
OTHER_TALENT = {"X-User-Id": "talent-2", "X-User-Role": "talent"}
RECRUITER = {"X-User-Id": "recruiter-1", "X-User-Role": "recruiter"}

PROFILE = {
    "full_name": "Ada Lovelace",
    "headline": "Senior Data Engineer",
    "professional_summary": "I build batch and streaming pipelines.",
    "country": "United Kingdom",
    "years_of_experience": 6,
    "tech_stack": "Spark, Airflow",
    "expected_monthly_rate_gbp": 5000,
    "availability": "Full-time",
    "cv_text": "Ada Lovelace. Data Engineer at Acme 2020-2024.",
}


@pytest.fixture
def client(lifecycle, manager):
    app = FastAPI()
    app.include_router(api_router, prefix="/api")
    app.dependency_overrides[get_lifecycle] = lambda: lifecycle
    app.dependency_overrides[get_session_manager] = lambda: manager
    with TestClient(app) as test_client:
        yield test_client


def invite(client, headers=TALENT) -> None:
    assert client.post("/api/talent", json={"email": "ada@example.com"}, headers=headers).status_code == 201
    assert client.post("/api/talent/profile", json=PROFILE, headers=headers).status_code == 200
    response = client.post("/api/talent/interview/prepare", headers=headers)
    assert response.status_code == 200
    assert response.json()["talent_status"] == "interview_invited"


def vendor_event(call_id: str, **message) -> dict:
    return {"message": {**message, "call": {"id": call_id}}}


def test_requires_identity(client):
    assert client.get("/api/talent/me").status_code == 401
    assert client.get("/api/talent/me", headers={"X-User-Id": "x", "X-User-Role": "admin"}).status_code == 401


def test_create_and_read_profile(client):
    response = client.post("/api/talent", json={"email": "ada@example.com", "full_name": "Ada"}, headers=TALENT)
    assert response.status_code == 201
    assert response.json()["talent_status"] == "new"
    assert "pending_scoring" not in response.json()

    assert client.post("/api/talent", json={}, headers=TALENT).status_code == 409
    assert client.get("/api/talent/me", headers=TALENT).json()["uid"] == "talent-1"
    assert client.get("/api/talent/me", headers=OTHER_TALENT).status_code == 404


def test_prepare_from_wrong_status(client):
    client.post("/api/talent", json={}, headers=TALENT)
    response = client.post("/api/talent/interview/prepare", headers=TALENT)
    assert response.status_code == 409


def test_question_generation_failure_is_bad_gateway(client, fake_ai):
    client.post("/api/talent", json={}, headers=TALENT)
    client.post("/api/talent/profile", json=PROFILE, headers=TALENT)
    fake_ai.question_error = ExternalServiceError("AI question generator returned invalid data.")

    response = client.post("/api/talent/interview/prepare", headers=TALENT)
    assert response.status_code == 502
    assert client.get("/api/talent/me", headers=TALENT).json()["talent_status"] == "profile_submitted"


def test_recruiters_cannot_run_talent_commands(client):
    client.post("/api/talent", json={}, headers=RECRUITER)
    assert client.post("/api/talent/interview/prepare", headers=RECRUITER).status_code == 403


def test_summary_suggestions(client):
    response = client.post("/api/talent/summary-suggestions", json={"headline": "Data Engineer"}, headers=TALENT)
    assert response.status_code == 200
    assert len(response.json()["suggestions"]) == 2


def test_interview_flow_with_empty_transcript(client):
    invite(client)

    begin = client.post("/api/interview/begin", headers=TALENT)
    assert begin.status_code == 200
    assert begin.json()["call_id"] == "call-1"
    assert client.post("/api/interview/begin", headers=TALENT).status_code == 409

    end = client.post("/api/interview/end", headers=TALENT)
    assert end.json() == {"finalized": True}
    assert client.post("/api/interview/end", headers=TALENT).status_code == 404

    report = client.get("/api/report/talent-1", headers=TALENT).json()
    assert report["is_error"] is True
    assert report["error"] == "Interview ended prematurely with no interaction recorded."
    assert report["category_scores"] == []
    assert report["weighted_total_score"] is None
    assert report["talent_tier"] == "re_interview_eligible"


def test_vendor_webhook_drives_session(client, lifecycle):
    invite(client)
    call_id = client.post("/api/interview/begin", headers=TALENT).json()["call_id"]

    events = [
        vendor_event(call_id, type="status-update", status="in-progress"),
        vendor_event(call_id, type="transcript", role="assistant", transcriptType="final",
                     transcript="Tell me about a conflict you resolved."),
        vendor_event(call_id, type="transcript", role="user", transcriptType="partial",
                     transcript="We disag"),
    ]
    for event in events:
        assert client.post("/api/interview/events", json=event).json() == {"handled": True}

    live = client.get("/api/interview/live", headers=TALENT).json()
    assert live["state"] == "active"
    assert live["utterances"] == [{"speaker": "AI", "text": "Tell me about a conflict you resolved."}]
    assert live["live_preview"] == "We disag"

    client.post("/api/interview/events", json=vendor_event(
        call_id, type="transcript", role="user", transcriptType="final", transcript="We disagreed on a schema."
    ))
    ended = client.post("/api/interview/events", json=vendor_event(call_id, type="status-update", status="ended"))
    assert ended.json() == {"handled": True}

    # Late duplicate from the vendor is acknowledged and dropped
    late = client.post("/api/interview/events", json={"type": "error", "callId": call_id,
                                                       "error": {"errorMsg": "Meeting has ended"}})
    assert late.json() == {"handled": False}

    me = client.get("/api/talent/me", headers=TALENT).json()
    assert me["talent_status"] == "interview_completed_processing_summary"
    assert client.get("/api/report/talent-1", headers=TALENT).status_code == 404


def test_webhook_secret(client, monkeypatch):
    secured = Settings(_env_file=None, vapi_webhook_secret="s3cret")
    monkeypatch.setattr(interview_endpoints, "get_settings", lambda: secured)
    event = {"type": "call-end", "callId": "nope"}

    assert client.post("/api/interview/events", json=event).status_code == 401
    response = client.post("/api/interview/events", json=event, headers={"X-Vendor-Secret": "s3cret"})
    assert response.json() == {"handled": False}


def test_report_access(client):
    invite(client)
    client.post("/api/interview/begin", headers=TALENT)
    client.post("/api/interview/end", headers=TALENT)

    assert client.get("/api/report/talent-1", headers=OTHER_TALENT).status_code == 403
    assert client.get("/api/report/talent-1", headers=RECRUITER).status_code == 200


def test_marketplace_listing(client):
    invite(client)
    client.post("/api/talent", json={}, headers=OTHER_TALENT)

    assert client.get("/api/marketplace/talents", headers=TALENT).status_code == 403

    everyone = client.get("/api/marketplace/talents", headers=RECRUITER).json()
    assert sorted(card["uid"] for card in everyone) == ["talent-1", "talent-2"]

    filtered = client.get(
        "/api/marketplace/talents",
        params={"keyword": "spark", "location": "kingdom", "max_rate": 6000},
        headers=RECRUITER,
    ).json()
    assert [card["uid"] for card in filtered] == ["talent-1"]
    assert filtered[0]["skills"] == ["Python", "SQL", "Spark", "Airflow"]
