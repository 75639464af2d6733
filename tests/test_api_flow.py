"""
End-to-end tests for the survey and admin HTTP routes
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import settings
from app.core.db import Base, get_db
from app.models import LoginAttempt
from app.services.repositories import TokenRepo
from app.utils.security import hash_password
from main import app

# Test database setup
engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

SUBMISSION = {"participant_name": "Maria", "people_count": 2, "food_text": "cake"}

def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture
def client(monkeypatch):
    """Client bound to a fresh in-memory database"""
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(settings, "ADMIN_PASSWORD_HASH", hash_password("secret"))
    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        Base.metadata.drop_all(bind=engine)

@pytest.fixture
def gated_client(client):
    """Client that has loaded the survey and passed the gate"""
    assert client.get("/survey").status_code == 200
    assert client.post("/survey/gate", json={"answers": [settings.DEFAULT_GATE_ANSWER.upper()]}).status_code == 200
    return client

@pytest.fixture
def admin_client(client):
    response = client.post("/admin/login", json={"username": settings.ADMIN_USERNAME, "password": "secret"})
    assert response.status_code == 200
    return client

# -------- public --------

def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}

def test_survey_seeds_defaults_and_hides_answers(client):
    response = client.get("/survey")
    assert response.status_code == 200

    data = response.json()["data"]
    assert data["survey_title"] == settings.DEFAULT_SURVEY_TITLE
    assert data["gate_questions"] == [settings.DEFAULT_GATE_QUESTION]
    assert settings.DEFAULT_GATE_ANSWER not in str(data["gate_questions"])
    assert data["gate_passed"] is False
    assert data["guests"] == sorted(settings.DEFAULT_GUEST_NAMES)
    assert data["food_entries"] == []
    assert data["own_response"] is None

def test_qr_code_is_png(client):
    response = client.get("/qr.png")
    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content.startswith(b"\x89PNG")

# -------- gate --------

def test_wrong_gate_answer_clears_unlock(gated_client):
    response = gated_client.post("/survey/gate", json={"answers": ["wrong"]})
    assert response.status_code == 403
    assert response.json()["error_code"] == "gate_failed"

    assert gated_client.get("/survey").json()["data"]["gate_passed"] is False
    assert gated_client.post("/survey/responses", json=SUBMISSION).status_code == 403

def test_submit_requires_gate(client):
    client.get("/survey")
    assert client.post("/survey/responses", json=SUBMISSION).status_code == 403

# -------- self-service lifecycle --------

def test_submit_update_delete_own_response(gated_client):
    created = gated_client.post("/survey/responses", json=SUBMISSION)
    assert created.status_code == 201
    record = created.json()["data"]
    assert record["participant_name"] == "Maria"
    assert record["food_text"] == "Cake"
    assert settings.RESPONSE_COOKIE_NAME in created.cookies

    mine = gated_client.get("/survey/responses/me")
    assert mine.status_code == 200
    assert mine.json()["data"]["id"] == record["id"]

    survey = gated_client.get("/survey").json()["data"]
    assert survey["own_response"]["id"] == record["id"]
    assert survey["food_entries"] == ["Cake"]

    updated = gated_client.put(
        "/survey/responses/me",
        json={"participant_name": "Lena", "people_count": 4, "food_text": "soup"}
    )
    assert updated.status_code == 200
    assert updated.json()["data"]["food_text"] == "Soup"
    assert gated_client.get("/survey").json()["data"]["food_entries"] == ["Soup"]

    deleted = gated_client.delete("/survey/responses/me")
    assert deleted.status_code == 200
    assert gated_client.get("/survey/responses/me").status_code == 404
    assert gated_client.get("/survey").json()["data"]["food_entries"] == []

def test_submit_rejects_unknown_guest(gated_client):
    response = gated_client.post(
        "/survey/responses",
        json={"participant_name": "Stranger", "people_count": 1, "food_text": "Cake"}
    )
    assert response.status_code == 422
    assert response.json()["error_code"] == "validation_error"

def test_tampered_credential_is_ignored(gated_client):
    gated_client.post("/survey/responses", json=SUBMISSION)
    gated_client.cookies.delete(settings.RESPONSE_COOKIE_NAME)
    gated_client.cookies.set(settings.RESPONSE_COOKIE_NAME, "forged.value")

    assert gated_client.get("/survey/responses/me").status_code == 404
    assert gated_client.delete("/survey/responses/me").status_code == 404
    assert gated_client.get("/survey").json()["data"]["own_response"] is None

# -------- admin --------

def test_admin_routes_require_login(client):
    assert client.get("/admin/responses").status_code == 401
    assert client.put("/admin/guests", json={"names": ["A"]}).status_code == 401

def test_login_blocked_after_three_failures(client):
    bad = {"username": settings.ADMIN_USERNAME, "password": "nope"}

    for attempts_left in (2, 1, 0):
        response = client.post("/admin/login", json=bad)
        assert response.status_code == 401
        assert response.json()["details"]["attempts_left"] == attempts_left

    good = {"username": settings.ADMIN_USERNAME, "password": "secret"}
    assert client.post("/admin/login", json=good).status_code == 429

def test_forwarded_headers_ignored_without_trusted_proxy(client):
    bad = {"username": settings.ADMIN_USERNAME, "password": "nope"}
    for n in range(3):
        client.post("/admin/login", json=bad, headers={"X-Forwarded-For": f"203.0.113.{n}"})

    good = {"username": settings.ADMIN_USERNAME, "password": "secret"}
    rotated = client.post("/admin/login", json=good, headers={"X-Forwarded-For": "198.51.100.1"})
    assert rotated.status_code == 429
    spoofed = client.post("/admin/login", json=good, headers={"X-Real-IP": "198.51.100.2"})
    assert spoofed.status_code == 429

def test_trusted_proxy_forwards_client_ip(client, monkeypatch):
    monkeypatch.setattr(settings, "TRUSTED_PROXIES", ["testclient"])
    headers = {"X-Forwarded-For": "203.0.113.7, 10.0.0.1"}
    bad = {"username": settings.ADMIN_USERNAME, "password": "nope"}
    for _ in range(3):
        client.post("/admin/login", json=bad, headers=headers)

    good = {"username": settings.ADMIN_USERNAME, "password": "secret"}
    assert client.post("/admin/login", json=good, headers=headers).status_code == 429

    # another client behind the same proxy is unaffected
    other = client.post("/admin/login", json=good, headers={"X-Forwarded-For": "198.51.100.1"})
    assert other.status_code == 200

def test_non_ascii_username_counts_as_failed_login(client):
    response = client.post("/admin/login", json={"username": "Jürgen", "password": "x"})

    assert response.status_code == 401
    assert response.json()["error_code"] == "login_failed"

    db = TestingSessionLocal()
    try:
        attempt = db.get(LoginAttempt, "testclient")
        assert attempt is not None
        assert attempt.attempt_count == 1
    finally:
        db.close()

def test_long_admin_password(client, monkeypatch):
    password = "ä" * 60  # 120 bytes in utf-8
    monkeypatch.setattr(settings, "ADMIN_PASSWORD_HASH", hash_password(password))

    good = {"username": settings.ADMIN_USERNAME, "password": password}
    assert client.post("/admin/login", json=good).status_code == 200

def test_successful_login_resets_attempts(client):
    headers = {"X-Forwarded-For": "203.0.113.8"}
    client.post("/admin/login", json={"username": "admin", "password": "x"}, headers=headers)
    client.post("/admin/login", json={"username": "admin", "password": "x"}, headers=headers)
    assert client.post("/admin/login", json={"username": settings.ADMIN_USERNAME, "password": "secret"}, headers=headers).status_code == 200

    response = client.post("/admin/login", json={"username": "admin", "password": "x"}, headers=headers)
    assert response.json()["details"]["attempts_left"] == 2

def test_logout_ends_admin_session(admin_client):
    assert admin_client.get("/admin/responses").status_code == 200
    admin_client.post("/admin/logout")
    assert admin_client.get("/admin/responses").status_code == 401

def test_admin_manages_guests_settings_and_responses(admin_client):
    saved = admin_client.put("/admin/guests", json={"names": [" Zoe ", "", "Adam"]})
    assert saved.status_code == 200
    assert saved.json()["data"]["names"] == ["Adam", "Zoe"]
    assert admin_client.put("/admin/guests", json={"names": ["  "]}).status_code == 422

    settings_body = {
        "survey_title": "Summer Party",
        "gate_question_count": 5,
        "gate_questions": [
            {"question": "Host's name?", "answer": "ilse"},
            {"question": "Which city?", "answer": "Köln"},
            {"question": "Which month?", "answer": "July"},
        ],
        "hints_content": "**Bring plates**",
        "footer_content": "<p onclick='x()'>Bye</p>",
    }
    stored = admin_client.put("/admin/settings", json=settings_body)
    assert stored.status_code == 200
    assert stored.json()["data"]["gate_question_count"] == 3

    survey = admin_client.get("/survey").json()["data"]
    assert survey["survey_title"] == "Summer Party"
    assert len(survey["gate_questions"]) == 3
    assert survey["hints_html"] == "<p><strong>Bring plates</strong></p>"
    assert survey["footer_html"] == "<p>Bye</p>"

    assert admin_client.post("/survey/gate", json={"answers": ["ILSE", "köln", "july"]}).status_code == 200
    created = admin_client.post(
        "/survey/responses",
        json={"participant_name": "Adam", "people_count": 1, "food_text": "bread"}
    ).json()["data"]

    listed = admin_client.get("/admin/responses").json()["data"]
    assert [r["id"] for r in listed["responses"]] == [created["id"]]
    assert listed["food_entries"] == ["Bread"]

    edited = admin_client.put(
        f"/admin/responses/{created['id']}",
        json={"participant_name": "Adam + 1", "people_count": 2, "food_text": "wine"}
    )
    assert edited.status_code == 200
    assert edited.json()["data"]["participant_name"] == "Adam + 1"

    assert admin_client.delete(f"/admin/responses/{created['id']}").status_code == 200
    assert admin_client.delete(f"/admin/responses/{created['id']}").status_code == 404
    assert admin_client.get("/admin/responses").json()["data"] == {"responses": [], "food_entries": []}

def test_admin_settings_reject_incomplete_questions(admin_client):
    body = {
        "survey_title": "Party",
        "gate_question_count": 2,
        "gate_questions": [{"question": "Q1", "answer": "A1"}],
    }
    assert admin_client.put("/admin/settings", json=body).status_code == 422

def test_admin_activity_lists_visits_and_attempts(admin_client, monkeypatch):
    monkeypatch.setattr(settings, "TRUSTED_PROXIES", ["testclient"])
    admin_client.get("/survey", headers={"X-Forwarded-For": "192.0.2.10"})
    admin_client.post("/admin/login", json={"username": "admin", "password": "bad"}, headers={"X-Forwarded-For": "192.0.2.11"})

    ips = {entry["ip_address"]: entry for entry in admin_client.get("/admin/activity").json()["data"]["ips"]}
    assert ips["192.0.2.10"]["visit_count"] == 1
    assert ips["192.0.2.11"]["attempt_count"] == 1
    assert ips["192.0.2.11"]["blocked"] is False

def test_admin_excel_round_trip(admin_client):
    template = admin_client.get("/admin/guests/template.xlsx")
    assert template.status_code == 200

    uploaded = admin_client.post(
        "/admin/guests/upload",
        files={"file": ("guests.xlsx", template.content, "application/octet-stream")}
    )
    assert uploaded.status_code == 200
    assert uploaded.json()["data"]["processed_count"] == 3

    rejected = admin_client.post(
        "/admin/guests/upload",
        files={"file": ("guests.csv", b"Name\nMaria\n", "text/csv")}
    )
    assert rejected.status_code == 400

    export = admin_client.get("/admin/responses/export.xlsx")
    assert export.status_code == 200
    assert export.content[:2] == b"PK"

def test_submit_rejects_oversized_party(gated_client):
    response = gated_client.post(
        "/survey/responses",
        json={"participant_name": "Maria", "people_count": 10**20, "food_text": "Cake"}
    )
    assert response.status_code == 422
    assert gated_client.get("/survey").json()["data"]["food_entries"] == []

def test_store_failure_returns_error_envelope(gated_client, monkeypatch):
    def failing_store(*args, **kwargs):
        raise SQLAlchemyError("database is locked")

    monkeypatch.setattr(TokenRepo, "store", failing_store)

    response = gated_client.post("/survey/responses", json=SUBMISSION)
    assert response.status_code == 500
    body = response.json()
    assert body["success"] is False
    assert body["error_code"] == "store_error"
    assert settings.RESPONSE_COOKIE_NAME not in response.cookies

    survey = gated_client.get("/survey").json()["data"]
    assert survey["food_entries"] == []
    assert survey["own_response"] is None

def test_edit_link_moves_access_to_new_browser(gated_client, monkeypatch):
    monkeypatch.setattr(settings, "BASE_URL", "http://testserver")
    created = gated_client.post("/survey/responses", json=SUBMISSION).json()["data"]

    assert gated_client.post(f"/admin/responses/{created['id']}/link").status_code == 401
    gated_client.post("/admin/login", json={"username": settings.ADMIN_USERNAME, "password": "secret"})
    issued = gated_client.post(f"/admin/responses/{created['id']}/link")
    assert issued.status_code == 200
    edit_link = issued.json()["data"]["edit_link"]
    assert edit_link.startswith("http://testserver/survey/claim?credential=")

    # the old browser credential no longer works
    assert gated_client.get("/survey/responses/me").status_code == 404

    guest = TestClient(app)
    claimed = guest.get(edit_link)
    assert claimed.status_code == 200
    assert claimed.json()["data"]["id"] == created["id"]

    mine = guest.get("/survey/responses/me")
    assert mine.status_code == 200
    assert mine.json()["data"]["participant_name"] == "Maria"

    assert gated_client.post("/admin/responses/999/link").status_code == 404

def test_claim_rejects_invalid_link(client):
    response = client.get("/survey/claim", params={"credential": "forged.value"})
    assert response.status_code == 404
    assert settings.RESPONSE_COOKIE_NAME not in response.cookies
