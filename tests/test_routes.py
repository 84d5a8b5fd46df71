"""
HTTP surface: cookie session, error envelope and the quiz flow end to end
over in-memory storages.
"""

import pytest
from fastapi.testclient import TestClient

import main
from routes import auth_routes, goal_routes, quiz_routes, recommendation_routes, session_routes, upload_routes
from services.auth_service import AuthService
from services.goal_service import GoalService
from services.quiz_service import QuizService
from services.recommendation_service import RecommendationService
from services.session_service import SessionService
from services.upload_service import UploadService


@pytest.fixture
def client(stores, generator, tmp_path, monkeypatch):
    monkeypatch.setattr(auth_routes, "auth_service", AuthService(storage=stores["users"]))
    monkeypatch.setattr(upload_routes, "upload_service", UploadService(
        storage=stores["uploads"], upload_dir=str(tmp_path / "uploads"),
    ))
    monkeypatch.setattr(quiz_routes, "quiz_service", QuizService(
        quiz_storage=stores["quizzes"],
        result_storage=stores["results"],
        upload_storage=stores["uploads"],
        generator=generator,
    ))
    monkeypatch.setattr(session_routes, "session_service", SessionService(storage=stores["sessions"]))
    monkeypatch.setattr(goal_routes, "goal_service", GoalService(
        goal_storage=stores["goals"], session_storage=stores["sessions"],
    ))
    monkeypatch.setattr(recommendation_routes, "recommendation_service", RecommendationService(
        session_storage=stores["sessions"],
        result_storage=stores["results"],
        goal_storage=stores["goals"],
        generator=generator,
    ))
    return TestClient(main.app)


@pytest.fixture
def logged_in(client):
    response = client.post("/api/auth/signup", json={
        "username": "ada", "email": "ada@example.com", "password": "secret123",
    })
    assert response.status_code == 201
    return client


def test_root(client):
    assert client.get("/").json()["status"] == "ok"


def test_protected_routes_need_a_session(client):
    response = client.get("/api/quiz")
    assert response.status_code == 401
    assert response.json()["error"] == "NOT_AUTHENTICATED"


def test_signup_validation(client):
    response = client.post("/api/auth/signup", json={"username": "bob", "email": "b@x.io", "password": "123"})
    assert response.status_code == 400
    assert response.json()["message"] == "Password must be at least 6 characters"


def test_login_logout_cycle(logged_in):
    assert logged_in.get("/api/auth/me").json()["user"]["username"] == "ada"

    logged_in.post("/api/auth/logout")
    assert logged_in.get("/api/auth/check-session").json() == {"loggedIn": False}

    response = logged_in.post("/api/auth/login", json={"email": "ada@example.com", "password": "wrong-one"})
    assert response.status_code == 400

    response = logged_in.post("/api/auth/login", json={"email": "ada@example.com", "password": "secret123"})
    assert response.status_code == 200
    assert logged_in.get("/api/auth/check-session").json()["loggedIn"] is True


def test_upload_generate_submit_flow(logged_in, generator):
    upload = logged_in.post(
        "/api/uploads",
        files=[("files", ("notes.txt", b"Mitosis has four phases.", "text/plain"))],
    )
    assert upload.status_code == 201
    upload_id = upload.json()["files"][0]["id"]

    generated = logged_in.post("/api/quiz/generate", json={"uploadId": upload_id, "subject": "Biology"})
    assert generated.status_code == 201
    quiz_id = generated.json()["quiz"]["id"]

    again = logged_in.post("/api/quiz/generate", json={"uploadId": upload_id, "subject": "Biology"})
    assert again.status_code == 409
    assert again.json()["quizId"] == quiz_id
    assert len(generator.calls) == 1

    answers = [{"selectedAnswer": i % 4, "timeTaken": 3} for i in range(10)]
    submitted = logged_in.post(f"/api/quiz/{quiz_id}/submit", json={"answers": answers, "totalTimeTaken": 30})
    assert submitted.status_code == 201
    assert submitted.json()["result"]["percentage"] == 100

    listed = logged_in.get("/api/quiz").json()
    assert listed[0]["lastResult"]["score"] == 10

    assert logged_in.delete(f"/api/quiz/{quiz_id}").status_code == 200
    assert logged_in.get(f"/api/quiz/{quiz_id}").status_code == 404


def test_upload_rejects_unknown_type(logged_in):
    response = logged_in.post(
        "/api/uploads",
        files=[("files", ("tool.exe", b"MZ", "application/x-msdownload"))],
    )
    assert response.status_code == 400
    assert response.json()["error"] == "FILE_TYPE_NOT_ALLOWED"


def test_session_and_goal_endpoints(logged_in):
    created = logged_in.post("/api/sessions", json={
        "subject": "Math", "startTime": "2024-03-04T10:00:00Z", "endTime": "2024-03-04T10:45:00Z",
    })
    assert created.status_code == 201
    assert created.json()["duration"] == 45

    bad = logged_in.post("/api/sessions", json={
        "subject": "Math", "startTime": "2024-03-04T10:00:00Z", "endTime": "2024-03-04T10:00:00Z",
    })
    assert bad.status_code == 400

    goal = logged_in.post("/api/goals", json={"subject": "Math", "target_hours": 5, "period": "weekly"})
    assert goal.status_code == 201
    assert set(goal.json()["progress"]) == {"currentHours", "progress", "remaining"}


def test_recommendations_for_new_user(logged_in, generator):
    response = logged_in.get("/api/recommendations/generate")

    assert response.status_code == 200
    assert response.json()["dataAvailable"] is False
    assert generator.calls == []


def test_models_endpoint(client):
    body = client.get("/api/models").json()
    assert body["default"] in {m["key"] for m in body["models"]}
