"""
Storage utilities for the study tracker.
Supabase-backed storage for users, uploads, quizzes, results, sessions and goals.
Every storage failure is logged and re-raised as StorageError.
"""

from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
import logging

from postgrest.exceptions import APIError

from clients import supabase_client as db
from clients.supabase_client import UNIQUE_VIOLATION
from utils.exceptions import DuplicateError, StorageError

logger = logging.getLogger(__name__)


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _storage_error(action: str, e: Exception, **context) -> StorageError:
    logger.error(f"Error {action}: {e}")
    return StorageError(f"Failed {action}", context=context)


class UserStorage:
    """Handle user accounts via Supabase"""

    @staticmethod
    def create_user(username: str, email: str, password_hash: str) -> Dict[str, Any]:
        try:
            return db.insert_user({
                "username": username,
                "email": email,
                "password_hash": password_hash,
                "created_at": utc_now(),
            })
        except Exception as e:
            raise _storage_error("creating user", e) from e

    @staticmethod
    def get_user(user_id: str) -> Optional[Dict[str, Any]]:
        try:
            return db.get_user_by_id(user_id)
        except Exception as e:
            raise _storage_error(f"getting user {user_id}", e) from e

    @staticmethod
    def get_by_email(email: str) -> Optional[Dict[str, Any]]:
        try:
            return db.get_user_by_email(email)
        except Exception as e:
            raise _storage_error("looking up user by email", e) from e

    @staticmethod
    def get_by_username(username: str) -> Optional[Dict[str, Any]]:
        try:
            return db.get_user_by_username(username)
        except Exception as e:
            raise _storage_error("looking up user by username", e) from e


class UploadStorage:
    """Upload metadata records. Immutable after creation."""

    @staticmethod
    def save_upload(upload_data: Dict[str, Any]) -> Dict[str, Any]:
        try:
            data = dict(upload_data)
            data.setdefault("created_at", utc_now())
            return db.insert_upload(data)
        except Exception as e:
            raise _storage_error("saving upload", e, filename=upload_data.get("filename")) from e

    @staticmethod
    def get_upload(upload_id: str) -> Optional[Dict[str, Any]]:
        try:
            return db.get_upload_by_id(upload_id)
        except Exception as e:
            raise _storage_error(f"getting upload {upload_id}", e, upload_id=upload_id) from e

    @staticmethod
    def list_uploads(user_id: str) -> List[Dict[str, Any]]:
        try:
            return db.list_uploads_by_user(user_id)
        except Exception as e:
            raise _storage_error("listing uploads", e) from e

    @staticmethod
    def delete_upload(upload_id: str) -> None:
        try:
            db.delete_upload(upload_id)
        except Exception as e:
            raise _storage_error(f"deleting upload {upload_id}", e, upload_id=upload_id) from e


class QuizStorage:
    """Save/get quizzes from the quizzes table"""

    @staticmethod
    def save_quiz(quiz_data: Dict[str, Any]) -> Dict[str, Any]:
        user_id = quiz_data["user_id"]
        upload_id = quiz_data["upload_id"]
        try:
            data = dict(quiz_data)
            data.setdefault("created_at", utc_now())
            return db.insert_quiz(data)
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                try:
                    existing = db.get_quiz_for_upload(user_id, upload_id)
                except Exception as lookup_err:
                    logger.error(f"Error looking up existing quiz for upload {upload_id}: {lookup_err}")
                    existing = None
                raise DuplicateError(
                    "Quiz already exists for this upload",
                    context={"quiz_id": existing["id"] if existing else None, "upload_id": upload_id},
                ) from e
            raise _storage_error("saving quiz", e, upload_id=upload_id) from e
        except Exception as e:
            raise _storage_error("saving quiz", e, upload_id=upload_id) from e

    @staticmethod
    def get_quiz(quiz_id: str) -> Optional[Dict[str, Any]]:
        try:
            return db.get_quiz_by_id(quiz_id)
        except Exception as e:
            raise _storage_error(f"getting quiz {quiz_id}", e, quiz_id=quiz_id) from e

    @staticmethod
    def get_quiz_for_upload(user_id: str, upload_id: str) -> Optional[Dict[str, Any]]:
        try:
            return db.get_quiz_for_upload(user_id, upload_id)
        except Exception as e:
            raise _storage_error("looking up quiz for upload", e, upload_id=upload_id) from e

    @staticmethod
    def list_quizzes(user_id: str, subject: Optional[str] = None) -> List[Dict[str, Any]]:
        try:
            return db.list_quizzes_by_user(user_id, subject)
        except Exception as e:
            raise _storage_error("listing quizzes", e) from e

    @staticmethod
    def delete_quiz(quiz_id: str) -> None:
        try:
            db.delete_quiz(quiz_id)
        except Exception as e:
            raise _storage_error(f"deleting quiz {quiz_id}", e, quiz_id=quiz_id) from e


class QuizResultStorage:
    """Graded submissions. Never mutated once written."""

    @staticmethod
    def save_result(result_data: Dict[str, Any]) -> Dict[str, Any]:
        try:
            data = dict(result_data)
            data.setdefault("completed_at", utc_now())
            return db.insert_quiz_result(data)
        except Exception as e:
            raise _storage_error("saving quiz result", e, quiz_id=result_data.get("quiz_id")) from e

    @staticmethod
    def get_results(quiz_id: str, user_id: str) -> List[Dict[str, Any]]:
        try:
            return db.list_quiz_results(quiz_id, user_id)
        except Exception as e:
            raise _storage_error(f"getting results for quiz {quiz_id}", e, quiz_id=quiz_id) from e

    @staticmethod
    def get_latest_result(quiz_id: str, user_id: str) -> Optional[Dict[str, Any]]:
        try:
            rows = db.list_quiz_results(quiz_id, user_id, limit=1)
            return rows[0] if rows else None
        except Exception as e:
            raise _storage_error(f"getting latest result for quiz {quiz_id}", e, quiz_id=quiz_id) from e

    @staticmethod
    def get_recent_results(user_id: str, limit: int) -> List[Dict[str, Any]]:
        try:
            return db.list_recent_quiz_results_for_user(user_id, limit)
        except Exception as e:
            raise _storage_error("getting recent quiz results", e) from e

    @staticmethod
    def delete_results_for_quiz(quiz_id: str) -> None:
        try:
            db.delete_quiz_results_for_quiz(quiz_id)
        except Exception as e:
            raise _storage_error(f"deleting results for quiz {quiz_id}", e, quiz_id=quiz_id) from e


class StudySessionStorage:
    """Logged study intervals"""

    @staticmethod
    def save_session(session_data: Dict[str, Any]) -> Dict[str, Any]:
        try:
            data = dict(session_data)
            data.setdefault("created_at", utc_now())
            return db.insert_study_session(data)
        except Exception as e:
            raise _storage_error("saving study session", e) from e

    @staticmethod
    def get_session(session_id: str) -> Optional[Dict[str, Any]]:
        try:
            return db.get_study_session_by_id(session_id)
        except Exception as e:
            raise _storage_error(f"getting study session {session_id}", e, session_id=session_id) from e

    @staticmethod
    def list_sessions(
        user_id: str,
        subject: Optional[str] = None,
        since: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        try:
            return db.list_study_sessions(user_id, subject=subject, since=since, limit=limit)
        except Exception as e:
            raise _storage_error("listing study sessions", e) from e

    @staticmethod
    def update_session(session_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return db.update_study_session(session_id, data)
        except Exception as e:
            raise _storage_error(f"updating study session {session_id}", e, session_id=session_id) from e

    @staticmethod
    def delete_session(session_id: str) -> None:
        try:
            db.delete_study_session(session_id)
        except Exception as e:
            raise _storage_error(f"deleting study session {session_id}", e, session_id=session_id) from e


class GoalStorage:
    """Study-hour goals. Progress is never stored."""

    @staticmethod
    def save_goal(goal_data: Dict[str, Any]) -> Dict[str, Any]:
        try:
            data = dict(goal_data)
            now = utc_now()
            data.setdefault("created_at", now)
            data.setdefault("updated_at", now)
            return db.insert_goal(data)
        except Exception as e:
            raise _storage_error("saving goal", e) from e

    @staticmethod
    def get_goal(goal_id: str) -> Optional[Dict[str, Any]]:
        try:
            return db.get_goal_by_id(goal_id)
        except Exception as e:
            raise _storage_error(f"getting goal {goal_id}", e, goal_id=goal_id) from e

    @staticmethod
    def list_goals(user_id: str) -> List[Dict[str, Any]]:
        try:
            return db.list_goals_by_user(user_id)
        except Exception as e:
            raise _storage_error("listing goals", e) from e

    @staticmethod
    def update_goal(goal_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return db.update_goal(goal_id, {**data, "updated_at": utc_now()})
        except Exception as e:
            raise _storage_error(f"updating goal {goal_id}", e, goal_id=goal_id) from e

    @staticmethod
    def delete_goal(goal_id: str) -> None:
        try:
            db.delete_goal(goal_id)
        except Exception as e:
            raise _storage_error(f"deleting goal {goal_id}", e, goal_id=goal_id) from e
