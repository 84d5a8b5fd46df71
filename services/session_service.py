import logging
from typing import Any, Dict, List, Optional, Tuple

from utils.exceptions import ValidationError
from utils.file_storage import StudySessionStorage
from utils.ownership import require_owned
from utils.time_utils import duration_minutes, parse_timestamp

logger = logging.getLogger(__name__)


def session_summary(session: Dict[str, Any]) -> Dict[str, Any]:
    """Stored session plus its derived duration (minutes) and date (YYYY-MM-DD of start)"""
    start = parse_timestamp(session["start_time"])
    return {
        "id": str(session["id"]),
        "subject": session.get("subject"),
        "startTime": session["start_time"],
        "endTime": session["end_time"],
        "duration": duration_minutes(session["start_time"], session["end_time"]),
        "date": start.date().isoformat() if start else None,
        "userId": str(session.get("user_id")),
    }


def validate_interval(
    subject: Optional[str],
    start_time: Optional[str],
    end_time: Optional[str],
) -> Tuple[str, str, str]:
    """Return (subject, start, end) normalised to trimmed text and UTC ISO timestamps."""
    if not subject or not subject.strip() or not start_time or not end_time:
        raise ValidationError("Please fill in all fields", error_code="MISSING_REQUIRED_FIELD")

    start = parse_timestamp(start_time)
    end = parse_timestamp(end_time)
    if start is None or end is None:
        raise ValidationError("Invalid date format", error_code="INVALID_DATE")
    if end <= start:
        raise ValidationError("End time must be after start time", error_code="INVALID_TIME_RANGE")

    return subject.strip(), start.isoformat(), end.isoformat()


class SessionService:
    def __init__(self, storage: Optional[StudySessionStorage] = None):
        self.storage = storage or StudySessionStorage()

    def list_sessions(self, user_id: str) -> List[Dict[str, Any]]:
        return [session_summary(s) for s in self.storage.list_sessions(user_id)]

    def create_session(
        self,
        user_id: str,
        subject: Optional[str],
        start_time: Optional[str],
        end_time: Optional[str],
    ) -> Dict[str, Any]:
        subject, start, end = validate_interval(subject, start_time, end_time)
        session = self.storage.save_session({
            "user_id": user_id,
            "subject": subject,
            "start_time": start,
            "end_time": end,
        })
        logger.info(f"Session {session['id']} logged for user {user_id} ({subject})")
        return session_summary(session)

    def update_session(
        self,
        user_id: str,
        session_id: str,
        subject: Optional[str],
        start_time: Optional[str],
        end_time: Optional[str],
    ) -> Dict[str, Any]:
        require_owned(self.storage.get_session(session_id), user_id, "Session", session_id)
        subject, start, end = validate_interval(subject, start_time, end_time)
        session = self.storage.update_session(session_id, {
            "subject": subject,
            "start_time": start,
            "end_time": end,
        })
        return session_summary(session)

    def delete_session(self, user_id: str, session_id: str) -> Dict[str, Any]:
        require_owned(self.storage.get_session(session_id), user_id, "Session", session_id)
        self.storage.delete_session(session_id)
        return {"message": "Session deleted successfully", "id": session_id}
