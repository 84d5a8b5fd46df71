import asyncio
import json

import pytest

from services.recommendation_service import RecommendationService, summarize_sessions
from prompts.study_prompts import build_recommendations_prompt

from conftest import StubGenerator


@pytest.fixture
def make_service(stores):
    def _make(generator):
        return RecommendationService(
            session_storage=stores["sessions"],
            result_storage=stores["results"],
            goal_storage=stores["goals"],
            generator=generator,
        )
    return _make


def _log(stores, subject, start, end, user_id="user-1"):
    stores["sessions"].save_session({"user_id": user_id, "subject": subject, "start_time": start, "end_time": end})


def test_no_history_returns_getting_started_without_model_call(make_service):
    generator = StubGenerator()
    service = make_service(generator)

    response = asyncio.run(service.generate_recommendations("user-1"))

    assert response["dataAvailable"] is False
    assert [r["category"] for r in response["recommendations"]] == ["getting_started", "goal_setting"]
    assert all(r["priority"] == "high" for r in response["recommendations"])
    assert generator.calls == []


def test_goals_alone_do_not_count_as_history(make_service, stores):
    stores["goals"].save_goal({"user_id": "user-1", "subject": "Math", "target_hours": 3, "period": "weekly"})
    generator = StubGenerator()

    response = asyncio.run(make_service(generator).generate_recommendations("user-1"))

    assert response["dataAvailable"] is False
    assert generator.calls == []


def test_history_is_summarized_and_sent_to_model(make_service, stores):
    _log(stores, "Math", "2024-03-04T10:00:00Z", "2024-03-04T11:00:00Z")
    _log(stores, "Math", "2024-03-05T10:00:00Z", "2024-03-05T10:30:00Z")
    _log(stores, "Art", "2024-03-06T10:00:00Z", "2024-03-06T10:45:00Z")
    _log(stores, "Art", "2024-03-06T10:00:00Z", "2024-03-06T12:00:00Z", user_id="user-2")

    quiz = stores["quizzes"].save_quiz({"user_id": "user-1", "upload_id": "u1", "subject": "Math", "title": "Math Quiz"})
    for percentage in (70, 85):
        stores["results"].save_result({
            "user_id": "user-1", "quiz_id": quiz["id"], "score": 7, "total_questions": 10,
            "percentage": percentage, "completed_at": "2024-03-06T12:00:00Z",
        })

    recs = [{"category": "weak_subjects", "title": "Review Math", "description": "...", "priority": "high"}]
    generator = StubGenerator(json.dumps(recs))

    response = asyncio.run(make_service(generator).generate_recommendations("user-1"))

    assert response["dataAvailable"] is True
    assert response["recommendations"] == recs
    assert response["studySummary"] == {
        "totalSessions": 3,
        "totalHours": "2.3",
        "totalQuizzes": 2,
        "subjects": 2,
    }
    assert len(generator.calls) == 1

    study_data = make_service(generator).build_study_data("user-1")
    math = next(s for s in study_data["sessions"]["subjects"] if s["subject"] == "Math")
    assert math == {"subject": "Math", "totalMinutes": 90, "sessionCount": 2, "totalHours": "1.5"}
    assert study_data["quizResults"]["bySubject"] == [{"subject": "Math", "totalQuizzes": 2, "averageScore": 78}]
    assert study_data["sessions"]["recentActivity"][0]["subject"] == "Art"


def test_prompt_is_deterministic_and_lists_categories():
    data = {"sessions": {"total": 1}, "quizResults": {"total": 0}, "goals": []}

    prompt = build_recommendations_prompt(data)

    assert prompt == build_recommendations_prompt(dict(data))
    for category in ("weak_subjects", "time_management", "consistency", "goal_setting",
                     "learning_technique", "motivation"):
        assert category in prompt
    assert "5-7" in prompt


def test_subjects_are_distinct_and_sorted(make_service, stores):
    _log(stores, "Physics", "2024-03-04T10:00:00Z", "2024-03-04T11:00:00Z")
    _log(stores, "Art", "2024-03-05T10:00:00Z", "2024-03-05T11:00:00Z")
    _log(stores, "Physics", "2024-03-06T10:00:00Z", "2024-03-06T11:00:00Z")

    assert make_service(StubGenerator()).list_subjects("user-1") == ["Art", "Physics"]


def test_sessions_with_unreadable_timestamps_are_skipped():
    summary = summarize_sessions([
        {"id": "s1", "subject": "Math", "start_time": "2024-03-04T10:00:00Z", "end_time": "2024-03-04T11:00:00Z"},
        {"id": "s2", "subject": "Math", "start_time": "yesterday", "end_time": "2024-03-04T11:00:00Z"},
    ])

    assert summary["total"] == 1
    assert summary["totalMinutes"] == 60
    assert summary["subjects"] == [{"subject": "Math", "totalMinutes": 60, "sessionCount": 1, "totalHours": "1.0"}]
