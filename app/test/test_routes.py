"""
Test HTTP Routes Module

Exercises the FastAPI application end to end with TestClient. Firebase token
verification and the AI services are replaced through dependency overrides; the
document store is an in-memory SQLite database.

Author: @kcaparas1630
"""

import asyncio
import pytest
from fastapi.testclient import TestClient
from app.core.dependencies import (
    get_controller_registry,
    get_feedback_generator,
    get_question_generator,
)
from app.core.route_limiters import limiter
from app.database import get_document_store
from app.main import app
from app.services.auth.firebase_auth import get_current_user_token
from app.services.interview_session.controller_registry import ControllerRegistry
from app.services.repositories.user_repository import user_path
from app.test.support import TEST_UID, FakeFeedbackGenerator, FakeQuestionGenerator

BROWSER_UA = "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_0) AppleWebKit/605.1.15 Safari/605.1.15"


@pytest.fixture
def token():
    return {"uid": TEST_UID, "email": "candidate@example.com", "name": "Candidate", "email_verified": True}


@pytest.fixture
def fakes():
    return {"feedback": FakeFeedbackGenerator(), "questions": FakeQuestionGenerator()}


@pytest.fixture
def make_client(store, token, fakes):
    limiter.enabled = False
    registry = ControllerRegistry(store, feedback_generator_factory=lambda: fakes["feedback"])
    app.dependency_overrides[get_document_store] = lambda: store
    app.dependency_overrides[get_current_user_token] = lambda: token
    app.dependency_overrides[get_feedback_generator] = lambda: fakes["feedback"]
    app.dependency_overrides[get_question_generator] = lambda: fakes["questions"]
    app.dependency_overrides[get_controller_registry] = lambda: registry

    def factory(signed_in: bool = True) -> TestClient:
        client = TestClient(app, headers={"User-Agent": BROWSER_UA})
        if signed_in:
            response = client.post("/auth/session")
            assert response.status_code == 200
        return client

    yield factory
    registry.close_all()
    app.dependency_overrides.clear()


def start(client: TestClient, duration: int = 15) -> dict:
    response = client.post("/api/interviews", json={"duration": duration})
    assert response.status_code == 201, response.text
    return response.json()


class TestHealth:

    def test_health(self, make_client):
        response = make_client(signed_in=False).get("/api/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "database": "ok"}


class TestSessionRoutes:

    def test_create_session_sets_cookie(self, make_client, store):
        client = make_client(signed_in=False)
        response = client.post("/auth/session")

        assert response.status_code == 200
        session_id = response.json()["sessionId"]
        assert client.cookies.get("sessionId") == session_id
        assert client.post("/auth/session/validate").json() == {"valid": True}

    def test_sign_in_elsewhere_invalidates_first_device(self, make_client):
        laptop = make_client()
        assert laptop.get("/api/profile").status_code == 200

        make_client()

        response = laptop.get("/api/profile")
        assert response.status_code == 401
        assert laptop.post("/auth/session/validate").json() == {"valid": False}

    def test_requests_without_session_are_rejected(self, make_client):
        client = make_client(signed_in=False)
        assert client.get("/api/profile").status_code == 401
        assert client.post("/auth/session/validate").json() == {"valid": False}

    def test_session_header_is_accepted(self, make_client):
        client = make_client(signed_in=False)
        session_id = client.post("/auth/session").json()["sessionId"]
        client.cookies.clear()

        response = client.get("/api/profile", headers={"X-Session-Id": session_id})
        assert response.status_code == 200

    def test_sign_out(self, make_client):
        client = make_client()
        assert client.delete("/auth/session").status_code == 200
        assert client.get("/api/profile").status_code == 401

    def test_unverified_email_is_signed_out(self, make_client, token):
        token["email_verified"] = False
        response = make_client(signed_in=False).post("/auth/session")
        assert response.status_code == 403

    def test_unverified_email_clears_session_cookie(self, make_client, token, store):
        client = make_client()
        assert client.cookies.get("sessionId")

        token["email_verified"] = False
        response = client.post("/auth/session")

        assert response.status_code == 403
        assert response.json()["detail"] == "Please verify your email address before signing in."
        set_cookie = response.headers["set-cookie"]
        assert set_cookie.startswith("sessionId=")
        assert "Max-Age=0" in set_cookie
        assert asyncio.run(store.get(user_path(TEST_UID)))["activeSessionId"] is None


class TestProfileRoutes:

    def test_first_request_creates_profile(self, make_client):
        profile = make_client().get("/api/profile").json()
        assert profile["uid"] == TEST_UID
        assert profile["email"] == "candidate@example.com"
        assert profile["interviewsTaken"] == 0
        assert profile["activeSessionId"]

    def test_update_profile(self, make_client):
        client = make_client()
        response = client.put("/api/profile", json={"role": "Backend Developer", "resumeProcessedText": "Built payment APIs."})

        assert response.status_code == 200
        assert response.json()["role"] == "Backend Developer"
        assert client.get("/api/profile").json()["resumeProcessedText"] == "Built payment APIs."


class TestInterviewRoutes:

    def test_start_interview(self, make_client, fakes):
        client = make_client()
        client.put("/api/profile", json={"role": "Backend Developer", "profileField": "Software"})

        session = start(client, duration=30)

        assert session["status"] == "questions_generated"
        assert session["duration"] == 30
        assert sorted(question["id"] for question in session["questions"]) == ["q1", "q2", "q3"]
        assert fakes["questions"].calls == [("Software", "Backend Developer", 30)]

    def test_invalid_duration(self, make_client):
        response = make_client().post("/api/interviews", json={"duration": 20})
        assert response.status_code == 422

    def test_free_limit(self, make_client, store):
        client = make_client()
        asyncio.run(store.update(user_path(TEST_UID), {"interviewsTaken": 3}))

        assert client.post("/api/interviews", json={"duration": 15}).status_code == 403

        asyncio.run(store.update(user_path(TEST_UID), {"isPlusSubscriber": True}))
        assert client.post("/api/interviews", json={"duration": 15}).status_code == 201

    def test_complete_interview_flow(self, make_client):
        client = make_client()
        interview_id = start(client)["id"]

        view = client.get(f"/api/interviews/{interview_id}").json()
        assert view["state"] == "active"
        assert view["currentQuestion"]["id"] == "q1"
        assert view["totalQuestions"] == 3

        client.post(f"/api/interviews/{interview_id}/answers", json={"answer": "I build APIs."})
        view = client.post(f"/api/interviews/{interview_id}/answers", json={"answer": ""}).json()
        assert view["currentQuestion"]["id"] == "q3"

        response = client.post(f"/api/interviews/{interview_id}/answers", json={"answer": "   "})
        assert response.status_code == 400

        view = client.post(f"/api/interviews/{interview_id}/answers", json={"answer": "return s[::-1]"}).json()
        assert view["state"] == "ended_success"
        assert view["redirectTo"] == f"/feedback/{interview_id}"

        feedback = client.get(f"/api/interviews/{interview_id}/feedback").json()
        assert feedback["state"] == "ready"
        assert feedback["feedback"]["overallScore"] == 78

        assert client.post(f"/api/interviews/{interview_id}/answers", json={"answer": "extra"}).status_code == 409
        assert client.get("/api/profile").json()["interviewsTaken"] == 1

    def test_end_early_with_proctoring(self, make_client):
        client = make_client()
        interview_id = start(client)["id"]

        counters = client.post(f"/api/interviews/{interview_id}/proctoring", json={"kind": "tabSwitch"}).json()
        assert counters["tabSwitch"] == 1

        view = client.post(f"/api/interviews/{interview_id}/end", json={"reason": "tab_switch_limit"}).json()
        assert view["state"] == "ended_success"

        history = client.get("/api/interviews").json()
        assert history[0]["id"] == interview_id
        assert history[0]["endedReason"] == "tab_switch_limit"
        assert history[0]["feedbackState"] == "ready"

    def test_cancel_interview(self, make_client):
        client = make_client()
        interview_id = start(client)["id"]
        client.get(f"/api/interviews/{interview_id}")

        response = client.post(f"/api/interviews/{interview_id}/cancel")
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"

        view = client.get(f"/api/interviews/{interview_id}").json()
        assert view["state"] == "ended_error"
        assert view["redirectTo"] == "/dashboard"

        assert client.post(f"/api/interviews/{interview_id}/cancel").status_code == 409

    def test_unknown_interview(self, make_client):
        assert make_client().get("/api/interviews/does-not-exist").status_code == 404

    def test_other_users_interviews_are_invisible(self, make_client, token):
        client = make_client()
        interview_id = start(client)["id"]

        token["uid"] = "another-user"
        other = make_client()
        assert other.get(f"/api/interviews/{interview_id}/feedback").status_code == 404


class TestSimpleAnalyzer:

    def test_interview_feedback(self, make_client):
        response = make_client(signed_in=False).post("/api/interview-feedback", json={
            "interviewTranscript": "AI (oral - behavioral): Describe a conflict.\nYou: I listened first.",
            "jobDescription": "Team Lead",
            "candidateProfile": "Field: Management",
        })

        assert response.status_code == 200
        assert response.json()["overallFeedback"] == "Good."

    def test_missing_fields(self, make_client):
        response = make_client(signed_in=False).post("/api/interview-feedback", json={"jobDescription": "Team Lead"})
        assert response.status_code == 422
