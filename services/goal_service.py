"""
Study goals. Progress is computed on every read from the session history
inside the goal's trailing window, so it always matches the latest sessions.
"""

import logging
import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from models.study_models import GoalPeriod
from utils.exceptions import ValidationError
from utils.file_storage import GoalStorage, StudySessionStorage
from utils.ownership import require_owned
from utils.time_utils import duration_minutes, window_start

logger = logging.getLogger(__name__)

PERIODS = {p.value for p in GoalPeriod}


def calculate_progress(
    goal: Dict[str, Any],
    sessions: List[Dict[str, Any]],
) -> Dict[str, float]:
    """
    currentHours = sum(session minutes) / 60
    progress     = min(currentHours / target * 100, 100)
    remaining    = max(target - currentHours, 0)

    `sessions` must already be restricted to the goal's subject and window.
    """
    target = float(goal["target_hours"])
    total_minutes = sum(duration_minutes(s["start_time"], s["end_time"]) for s in sessions)
    current_hours = total_minutes / 60
    progress = min(current_hours / target * 100, 100) if target > 0 else 0
    remaining = max(target - current_hours, 0)
    return {
        "currentHours": round(current_hours, 2),
        "progress": round(progress, 1),
        "remaining": round(remaining, 2),
    }


def _validate_target(target_hours: Any) -> float:
    try:
        target = float(target_hours)
    except (TypeError, ValueError):
        raise ValidationError("Target hours must be a number", error_code="INVALID_TARGET")
    if not math.isfinite(target) or target <= 0:
        raise ValidationError("Target hours must be greater than 0", error_code="INVALID_TARGET")
    return target


def _validate_period(period: str) -> str:
    if period not in PERIODS:
        raise ValidationError("Period must be 'weekly' or 'monthly'", error_code="INVALID_PERIOD")
    return period


class GoalService:
    def __init__(
        self,
        goal_storage: Optional[GoalStorage] = None,
        session_storage: Optional[StudySessionStorage] = None,
    ):
        self.goal_storage = goal_storage or GoalStorage()
        self.session_storage = session_storage or StudySessionStorage()

    def progress_for(self, goal: Dict[str, Any], now: Optional[datetime] = None) -> Dict[str, float]:
        since = window_start(goal["period"], now)
        sessions = self.session_storage.list_sessions(
            str(goal["user_id"]),
            subject=goal["subject"],
            since=since.isoformat(),
        )
        return calculate_progress(goal, sessions)

    def goal_summary(self, goal: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "id": str(goal["id"]),
            "subject": goal.get("subject"),
            "target_hours": goal.get("target_hours"),
            "period": goal.get("period"),
            "createdAt": goal.get("created_at"),
            "updatedAt": goal.get("updated_at"),
            "progress": self.progress_for(goal),
        }

    def list_goals(self, user_id: str) -> List[Dict[str, Any]]:
        return [self.goal_summary(g) for g in self.goal_storage.list_goals(user_id)]

    def create_goal(
        self,
        user_id: str,
        subject: Optional[str],
        target_hours: Any,
        period: Optional[str],
    ) -> Dict[str, Any]:
        if not subject or not subject.strip() or target_hours is None or not period:
            raise ValidationError("Please fill in all fields", error_code="MISSING_REQUIRED_FIELD")

        goal = self.goal_storage.save_goal({
            "user_id": user_id,
            "subject": subject.strip(),
            "target_hours": _validate_target(target_hours),
            "period": _validate_period(period),
        })
        logger.info(f"Goal {goal['id']} created for user {user_id}")
        return self.goal_summary(goal)

    def update_goal(
        self,
        user_id: str,
        goal_id: str,
        subject: Optional[str] = None,
        target_hours: Any = None,
        period: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Partial update: only the fields given are changed."""
        require_owned(self.goal_storage.get_goal(goal_id), user_id, "Goal", goal_id)

        changes: Dict[str, Any] = {}
        if subject and subject.strip():
            changes["subject"] = subject.strip()
        if target_hours is not None:
            changes["target_hours"] = _validate_target(target_hours)
        if period:
            changes["period"] = _validate_period(period)

        goal = self.goal_storage.update_goal(goal_id, changes)
        return self.goal_summary(goal)

    def delete_goal(self, user_id: str, goal_id: str) -> Dict[str, Any]:
        require_owned(self.goal_storage.get_goal(goal_id), user_id, "Goal", goal_id)
        self.goal_storage.delete_goal(goal_id)
        return {"message": "Goal deleted successfully", "id": goal_id}
