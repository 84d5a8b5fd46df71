"""
Shared fixtures: in-memory stand-ins for the Supabase storages and a stub
generative client, so no test touches the network or a database.
"""

import itertools
import json
import os
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from utils.exceptions import DuplicateError
from utils.time_utils import parse_timestamp

_ids = itertools.count(1)


def _new_id() -> str:
    return f"id-{next(_ids)}"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class FakeTable:
    """Rows kept in insertion order; newest-first reads reverse it"""

    def __init__(self):
        self.rows: List[Dict[str, Any]] = []

    def insert(self, data: Dict[str, Any]) -> Dict[str, Any]:
        row = {"id": _new_id(), "created_at": _now(), **data}
        self.rows.append(row)
        return dict(row)

    def get(self, row_id: str) -> Optional[Dict[str, Any]]:
        for row in self.rows:
            if row["id"] == row_id:
                return dict(row)
        return None

    def update(self, row_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        for row in self.rows:
            if row["id"] == row_id:
                row.update(data)
                return dict(row)
        raise KeyError(row_id)

    def delete(self, row_id: str) -> None:
        self.rows = [r for r in self.rows if r["id"] != row_id]


class FakeUserStorage:
    def __init__(self):
        self.table = FakeTable()

    def create_user(self, username, email, password_hash):
        return self.table.insert({"username": username, "email": email, "password_hash": password_hash})

    def get_user(self, user_id):
        return self.table.get(user_id)

    def get_by_email(self, email):
        return next((dict(r) for r in self.table.rows if r["email"] == email), None)

    def get_by_username(self, username):
        return next((dict(r) for r in self.table.rows if r["username"] == username), None)


class FakeUploadStorage:
    def __init__(self):
        self.table = FakeTable()

    def save_upload(self, upload_data):
        return self.table.insert(upload_data)

    def get_upload(self, upload_id):
        return self.table.get(upload_id)

    def list_uploads(self, user_id):
        return [dict(r) for r in reversed(self.table.rows) if r["user_id"] == user_id]

    def delete_upload(self, upload_id):
        self.table.delete(upload_id)


class FakeQuizStorage:
    """Enforces the (user_id, upload_id) unique index like the real table"""

    def __init__(self):
        self.table = FakeTable()

    def save_quiz(self, quiz_data):
        existing = next(
            (r for r in self.table.rows
             if r["user_id"] == quiz_data["user_id"] and r["upload_id"] == quiz_data["upload_id"]),
            None,
        )
        if existing:
            raise DuplicateError(
                "Quiz already exists for this upload",
                context={"quiz_id": existing["id"], "upload_id": quiz_data["upload_id"]},
            )
        return self.table.insert(quiz_data)

    def get_quiz(self, quiz_id):
        return self.table.get(quiz_id)

    def get_quiz_for_upload(self, user_id, upload_id):
        return next(
            (dict(r) for r in self.table.rows if r["user_id"] == user_id and r["upload_id"] == upload_id),
            None,
        )

    def list_quizzes(self, user_id, subject=None):
        rows = [r for r in reversed(self.table.rows) if r["user_id"] == user_id]
        if subject:
            rows = [r for r in rows if r["subject"] == subject]
        return [{k: v for k, v in r.items() if k != "questions"} for r in rows]

    def delete_quiz(self, quiz_id):
        self.table.delete(quiz_id)


class FakeQuizResultStorage:
    def __init__(self, quiz_storage: FakeQuizStorage):
        self.table = FakeTable()
        self.quiz_storage = quiz_storage

    def save_result(self, result_data):
        return self.table.insert(result_data)

    def get_results(self, quiz_id, user_id):
        return [
            dict(r) for r in reversed(self.table.rows)
            if r["quiz_id"] == quiz_id and r["user_id"] == user_id
        ]

    def get_latest_result(self, quiz_id, user_id):
        results = self.get_results(quiz_id, user_id)
        return results[0] if results else None

    def get_recent_results(self, user_id, limit):
        output = []
        for r in reversed(self.table.rows):
            if r["user_id"] != user_id:
                continue
            quiz = self.quiz_storage.get_quiz(r["quiz_id"]) or {}
            output.append({**r, "subject": quiz.get("subject"), "quiz_title": quiz.get("title")})
        return output[:limit]

    def delete_results_for_quiz(self, quiz_id):
        self.table.rows = [r for r in self.table.rows if r["quiz_id"] != quiz_id]


class FakeStudySessionStorage:
    def __init__(self):
        self.table = FakeTable()

    def save_session(self, session_data):
        return self.table.insert(session_data)

    def get_session(self, session_id):
        return self.table.get(session_id)

    def list_sessions(self, user_id, subject=None, since=None, limit=None):
        rows = [dict(r) for r in self.table.rows if r["user_id"] == user_id]
        if subject:
            rows = [r for r in rows if r["subject"] == subject]
        if since:
            since_dt = parse_timestamp(since)
            rows = [r for r in rows if parse_timestamp(r["start_time"]) >= since_dt]
        rows.sort(key=lambda r: parse_timestamp(r["start_time"]), reverse=True)
        return rows[:limit] if limit else rows

    def update_session(self, session_id, data):
        return self.table.update(session_id, data)

    def delete_session(self, session_id):
        self.table.delete(session_id)


class FakeGoalStorage:
    def __init__(self):
        self.table = FakeTable()

    def save_goal(self, goal_data):
        return self.table.insert({"updated_at": _now(), **goal_data})

    def get_goal(self, goal_id):
        return self.table.get(goal_id)

    def list_goals(self, user_id):
        return [dict(r) for r in reversed(self.table.rows) if r["user_id"] == user_id]

    def update_goal(self, goal_id, data):
        return self.table.update(goal_id, {**data, "updated_at": _now()})

    def delete_goal(self, goal_id):
        self.table.delete(goal_id)


class StubGenerator:
    """Returns canned text and records every call"""

    def __init__(self, response: str = "[]"):
        self.response = response
        self.calls: List[Dict[str, Any]] = []

    async def generate(self, prompt, attachment=None, model=None):
        self.calls.append({"prompt": prompt, "attachment": attachment, "model": model})
        return self.response


def make_questions(count: int = 10) -> List[Dict[str, Any]]:
    return [
        {
            "question": f"Question {i + 1} about photosynthesis?",
            "options": ["Chlorophyll", "Mitochondria", "Ribosome", "Nucleus"],
            "correctAnswer": i % 4,
            "explanation": "Because that is how plants work.",
        }
        for i in range(count)
    ]


def fenced(payload: Any) -> str:
    return "```json\n" + json.dumps(payload) + "\n```"


@pytest.fixture
def stores():
    quizzes = FakeQuizStorage()
    return {
        "users": FakeUserStorage(),
        "uploads": FakeUploadStorage(),
        "quizzes": quizzes,
        "results": FakeQuizResultStorage(quizzes),
        "sessions": FakeStudySessionStorage(),
        "goals": FakeGoalStorage(),
    }


@pytest.fixture
def generator():
    return StubGenerator(fenced(make_questions()))


@pytest.fixture
def notes_upload(tmp_path, stores):
    """A plain-text upload owned by user-1"""
    path = tmp_path / "notes.txt"
    path.write_text("Photosynthesis converts light energy into chemical energy.", encoding="utf-8")
    return stores["uploads"].save_upload({
        "user_id": "user-1",
        "original_name": "notes.txt",
        "filename": "notes-1.txt",
        "path": str(path),
        "mimetype": "text/plain",
        "size": path.stat().st_size,
        "file_type": "document",
    })
