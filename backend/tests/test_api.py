import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_aggregator, get_orchestrator, get_store
from config import settings
from main import app
from services.errors import LLMServiceError
from services.review_orchestrator import ReviewOrchestrator
from services.session_aggregator import SessionAggregator

EMAIL = "a@x.com"
POLICY_TEXT = b"Our Company Name: Acme Corp\nWe have a written OHS policy approved by the board."
REGISTER_TEXT = b"ACME CORP\nIncident Reporting Procedure\nAll near misses are logged."


@pytest.fixture
def client(store, registry, fake_llm):
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_orchestrator] = lambda: ReviewOrchestrator(store, registry, fake_llm)
    app.dependency_overrides[get_aggregator] = lambda: SessionAggregator(store, registry, fake_llm)
    yield TestClient(app)
    app.dependency_overrides.clear()


def _check_file(client, question_number, content, filename="doc.txt", email=EMAIL, **data):
    return client.post(
        "/check-file",
        files={"file": (filename, content, "text/plain")},
        data={"email": email, "question_number": str(question_number), **data},
    )


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["llm_configured"] is False


def test_onboarding_flow(client, fake_llm):
    response = _check_file(client, 1, POLICY_TEXT)
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["require_company_name_confirmation"] is True
    assert data["detected_company_name"] == "Acme Corp"
    assert data["score"] is None
    assert fake_llm.calls == []

    response = client.post("/set-supplier-name", json={"email": EMAIL, "supplier_name": "Acme Corp"})
    assert response.json() == {"success": True, "supplier_name": "Acme Corp"}
    assert client.get("/supplier-name", params={"email": EMAIL}).json()["supplier_name"] == "Acme Corp"

    response = _check_file(client, 3, REGISTER_TEXT, user_explanation="Register attached")
    data = response.json()
    assert data["success"] is True
    assert data["state"] == "persisted"
    assert data["score"] == 3
    assert data["band"] == "robust"
    assert "Score: Robust (3/5)" in data["feedback"]


def test_identity_mismatch(client, fake_llm):
    client.post("/set-supplier-name", json={"email": EMAIL, "supplier_name": "Acme Corp"})
    data = _check_file(client, 2, b"Beta Industries legal register").json()
    assert data["success"] is False
    assert data["state"] == "rejected_no_identity"
    assert data["detected_company_name"] == "Acme Corp"
    assert fake_llm.calls == []


def test_unreadable_document(client):
    data = _check_file(client, 2, b"   \n ").json()
    assert data["success"] is False
    assert data["state"] == "rejected_unreadable"
    assert "could not be read" in data["feedback"]


def test_rejects_unsupported_file(client):
    response = _check_file(client, 2, b"data", filename="sheet.xlsx")
    assert response.status_code == 400


def test_rejects_oversized_file(client, monkeypatch):
    monkeypatch.setattr(settings, "max_upload_size_mb", 0)
    response = _check_file(client, 2, b"some text")
    assert response.status_code == 400
    assert "too large" in response.json()["detail"]


def test_invalid_question_number(client):
    assert _check_file(client, "abc", POLICY_TEXT).status_code == 422
    assert _check_file(client, 0, POLICY_TEXT).status_code == 400


def test_blank_email(client, fake_llm):
    response = _check_file(client, 2, REGISTER_TEXT, email="  ")
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_llm_failure_is_server_error(client, store, fake_llm):
    client.post("/set-supplier-name", json={"email": EMAIL, "supplier_name": "Acme Corp"})
    fake_llm.reply = LLMServiceError("LLM call failed: quota exceeded")
    response = _check_file(client, 2, REGISTER_TEXT)
    assert response.status_code == 502
    assert "quota exceeded" in response.json()["detail"]
    assert client.get("/answers", params={"email": EMAIL}).json() == []


def test_temp_upload_removed(client, tmp_path, monkeypatch):
    monkeypatch.setattr(settings, "upload_tmp_dir", str(tmp_path))
    _check_file(client, 1, POLICY_TEXT)
    _check_file(client, 2, b"  ")
    assert list(tmp_path.iterdir()) == []


def test_session_summary_and_manual_override(client, fake_llm):
    client.post("/set-supplier-name", json={"email": EMAIL, "supplier_name": "Acme Corp"})
    _check_file(client, 2, REGISTER_TEXT)
    fake_llm.reply = "Score: Warning (2/5)\nSummary: informal."
    _check_file(client, 3, REGISTER_TEXT)

    summary = client.post("/session-summary", json={"email": EMAIL}).json()
    assert summary["total_weight"] == 5
    assert summary["max_possible"] == 10
    assert summary["overall_percent"] == 50
    assert [b["question_number"] for b in summary["breakdown"]] == [2, 3]
    assert summary["narrative"] is None

    response = client.post("/manual-score", json={
        "email": EMAIL, "question_number": 3, "new_score": "Stretch",
        "comment": "Digital system seen on site", "auditor": "auditor@x.com",
    })
    assert response.json() == {"success": True}

    summary = client.post("/session-summary", json={"email": EMAIL}).json()
    assert summary["overall_percent"] == 80

    answers = client.get("/answers", params={"email": EMAIL}).json()
    assert answers[1]["band"] == "stretch"
    assert answers[1]["status"] == "auditor-final"


def test_session_summary_empty(client):
    summary = client.post("/session-summary", json={"email": "nobody@x.com"}).json()
    assert summary["overall_percent"] == 0
    assert summary["breakdown"] == []


def test_manual_score_unknown_band(client):
    response = client.post("/manual-score", json={
        "email": EMAIL, "question_number": 1, "new_score": "Excellent", "auditor": "aud",
    })
    assert response.status_code == 400


def test_disagree_feedback(client, fake_llm):
    fake_llm.reply = "Score: Offtrack (1/5)\nSummary: opinion only."
    response = client.post(
        "/disagree-feedback",
        data={"email": EMAIL, "question_number": "2", "requirement": "Legal register", "disagree_reason": "Unfair"},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["score"] == 1
    assert data["band"] == "offtrack"


def test_disagree_feedback_with_file(client, fake_llm):
    response = client.post(
        "/disagree-feedback",
        data={"email": EMAIL, "question_number": "3", "disagree_reason": "See register"},
        files={"file": ("register.txt", b"Near miss log, 14 entries", "text/plain")},
    )
    assert response.status_code == 200
    assert "Near miss log, 14 entries" in fake_llm.calls[0][0]


def test_missing_feedback(client, fake_llm):
    fake_llm.reply = "Score: Warning (2/5)\nJustification: plausible."
    response = client.post("/missing-feedback", json={
        "email": EMAIL, "question_number": 1,
        "requirement_text": "Written OHS Policy", "missing_reason": "Awaiting board sign-off",
    })
    assert response.status_code == 200
    assert response.json()["score"] == 2


def test_missing_feedback_missing_fields(client):
    response = client.post("/missing-feedback", json={"email": EMAIL, "question_number": 1})
    assert response.status_code == 422


def test_save_answer_and_listing(client):
    assert client.post("/save-answer", json={"email": EMAIL, "question_number": 1, "answer": "Yes"}).json() == {"success": True}
    client.post("/save-answer", json={"email": "b@x.com", "question_number": 2, "answer": "No"})

    mine = client.get("/answers", params={"email": EMAIL}).json()
    assert [(a["question_number"], a["answer"]) for a in mine] == [(1, "Yes")]

    everything = client.get("/all-answers").json()
    assert [a["subject_id"] for a in everything] == ["b@x.com", EMAIL]
