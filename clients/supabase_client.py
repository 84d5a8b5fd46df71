import os
from typing import Dict, Any, List, Optional
from dotenv import load_dotenv
from supabase import create_client, Client
from datetime import datetime
from enum import Enum

load_dotenv()

_supabase_client: Optional[Client] = None

# PostgreSQL unique_violation, surfaced by PostgREST as APIError.code
UNIQUE_VIOLATION = "23505"


def get_supabase() -> Client:
    global _supabase_client
    if _supabase_client is None:
        url = os.getenv("SUPABASE_URL")
        key = os.getenv("SUPABASE_KEY")
        if not url or not key:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY must be set")
        _supabase_client = create_client(url, key)
    return _supabase_client


def _serialize_for_supabase(data: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively convert enums → .value, datetimes → .isoformat() for Supabase writes."""
    result = {}
    for key, value in data.items():
        if isinstance(value, Enum):
            result[key] = value.value
        elif isinstance(value, datetime):
            result[key] = value.isoformat()
        elif isinstance(value, dict):
            result[key] = _serialize_for_supabase(value)
        elif isinstance(value, list):
            result[key] = [
                _serialize_for_supabase(item) if isinstance(item, dict)
                else item.value if isinstance(item, Enum)
                else item.isoformat() if isinstance(item, datetime)
                else item
                for item in value
            ]
        else:
            result[key] = value
    return result


def _first(response) -> Optional[Dict[str, Any]]:
    if response.data and len(response.data) > 0:
        return response.data[0]
    return None


def _insert(table: str, data: Dict[str, Any]) -> Dict[str, Any]:
    response = get_supabase().table(table).insert(_serialize_for_supabase(data)).execute()
    row = _first(response)
    if not row or "id" not in row:
        raise Exception(f"Supabase insert into {table} failed or id not returned: {response}")
    return row


def _get_by_id(table: str, record_id: str) -> Optional[Dict[str, Any]]:
    response = get_supabase().table(table).select("*").eq("id", record_id).limit(1).execute()
    return _first(response)


def _update(table: str, record_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    response = get_supabase().table(table) \
        .update(_serialize_for_supabase(data)).eq("id", record_id).execute()
    row = _first(response)
    if not row:
        raise Exception(f"Supabase update of {table}/{record_id} failed: {response}")
    return row


def _delete(table: str, record_id: str) -> None:
    get_supabase().table(table).delete().eq("id", record_id).execute()


# --- Users ---

def insert_user(user_data: Dict[str, Any]) -> Dict[str, Any]:
    return _insert("users", user_data)


def get_user_by_id(user_id: str) -> Optional[Dict[str, Any]]:
    return _get_by_id("users", user_id)


def get_user_by_email(email: str) -> Optional[Dict[str, Any]]:
    response = get_supabase().table("users").select("*").eq("email", email).limit(1).execute()
    return _first(response)


def get_user_by_username(username: str) -> Optional[Dict[str, Any]]:
    response = get_supabase().table("users").select("*").eq("username", username).limit(1).execute()
    return _first(response)


# --- Uploads ---

def insert_upload(upload_data: Dict[str, Any]) -> Dict[str, Any]:
    return _insert("uploads", upload_data)


def get_upload_by_id(upload_id: str) -> Optional[Dict[str, Any]]:
    return _get_by_id("uploads", upload_id)


def list_uploads_by_user(user_id: str) -> List[Dict[str, Any]]:
    """List uploads for a user, newest first."""
    response = get_supabase().table("uploads") \
        .select("*") \
        .eq("user_id", user_id) \
        .order("created_at", desc=True) \
        .execute()
    return response.data or []


def delete_upload(upload_id: str) -> None:
    _delete("uploads", upload_id)


# --- Quizzes ---

def insert_quiz(quiz_data: Dict[str, Any]) -> Dict[str, Any]:
    """Insert a quiz. The (user_id, upload_id) unique index rejects a second quiz per upload."""
    return _insert("quizzes", quiz_data)


def get_quiz_by_id(quiz_id: str) -> Optional[Dict[str, Any]]:
    return _get_by_id("quizzes", quiz_id)


def get_quiz_for_upload(user_id: str, upload_id: str) -> Optional[Dict[str, Any]]:
    response = get_supabase().table("quizzes") \
        .select("id, user_id, upload_id, subject, title, total_questions, difficulty, created_at") \
        .eq("user_id", user_id) \
        .eq("upload_id", upload_id) \
        .limit(1) \
        .execute()
    return _first(response)


def list_quizzes_by_user(user_id: str, subject: Optional[str] = None) -> List[Dict[str, Any]]:
    """List quizzes without their questions, newest first."""
    query = get_supabase().table("quizzes") \
        .select("id, user_id, upload_id, subject, title, total_questions, difficulty, created_at") \
        .eq("user_id", user_id)
    if subject:
        query = query.eq("subject", subject)
    response = query.order("created_at", desc=True).execute()
    return response.data or []


def delete_quiz(quiz_id: str) -> None:
    _delete("quizzes", quiz_id)


# --- Quiz Results ---

def insert_quiz_result(result_data: Dict[str, Any]) -> Dict[str, Any]:
    return _insert("quiz_results", result_data)


def list_quiz_results(quiz_id: str, user_id: str, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """Results for one quiz, newest first."""
    query = get_supabase().table("quiz_results") \
        .select("*") \
        .eq("quiz_id", quiz_id) \
        .eq("user_id", user_id) \
        .order("completed_at", desc=True)
    if limit:
        query = query.limit(limit)
    return query.execute().data or []


def list_recent_quiz_results_for_user(user_id: str, limit: int) -> List[Dict[str, Any]]:
    """Most recent results across all quizzes, joined with the quiz subject/title."""
    response = get_supabase().table("quiz_results") \
        .select("*, quizzes(subject, title)") \
        .eq("user_id", user_id) \
        .order("completed_at", desc=True) \
        .limit(limit) \
        .execute()
    rows = response.data or []
    for row in rows:
        quiz = row.pop("quizzes", None) or {}
        row["subject"] = quiz.get("subject")
        row["quiz_title"] = quiz.get("title")
    return rows


def delete_quiz_results_for_quiz(quiz_id: str) -> None:
    get_supabase().table("quiz_results").delete().eq("quiz_id", quiz_id).execute()


# --- Study Sessions ---

def insert_study_session(session_data: Dict[str, Any]) -> Dict[str, Any]:
    return _insert("study_sessions", session_data)


def get_study_session_by_id(session_id: str) -> Optional[Dict[str, Any]]:
    return _get_by_id("study_sessions", session_id)


def list_study_sessions(
    user_id: str,
    subject: Optional[str] = None,
    since: Optional[str] = None,
    limit: Optional[int] = None
) -> List[Dict[str, Any]]:
    """Sessions for a user ordered by start_time desc, optionally filtered."""
    query = get_supabase().table("study_sessions").select("*").eq("user_id", user_id)
    if subject is not None:
        query = query.eq("subject", subject)
    if since is not None:
        query = query.gte("start_time", since)
    query = query.order("start_time", desc=True)
    if limit:
        query = query.limit(limit)
    return query.execute().data or []


def update_study_session(session_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    return _update("study_sessions", session_id, data)


def delete_study_session(session_id: str) -> None:
    _delete("study_sessions", session_id)


# --- Goals ---

def insert_goal(goal_data: Dict[str, Any]) -> Dict[str, Any]:
    return _insert("goals", goal_data)


def get_goal_by_id(goal_id: str) -> Optional[Dict[str, Any]]:
    return _get_by_id("goals", goal_id)


def list_goals_by_user(user_id: str) -> List[Dict[str, Any]]:
    response = get_supabase().table("goals") \
        .select("*") \
        .eq("user_id", user_id) \
        .order("created_at", desc=True) \
        .execute()
    return response.data or []


def update_goal(goal_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
    return _update("goals", goal_id, data)


def delete_goal(goal_id: str) -> None:
    _delete("goals", goal_id)
