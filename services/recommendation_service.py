"""
Study recommendations built from a user's recent history.

The aggregated statistics are prompt input only; recommendations are
returned to the caller and never persisted.
"""

import logging
from typing import Any, Dict, List, Optional

from clients.generative_client import GenerativeClient
from prompts.study_prompts import build_recommendations_prompt
from services.response_parser import parse_recommendations
from utils.file_storage import GoalStorage, QuizResultStorage, StudySessionStorage
from utils.time_utils import duration_minutes, round_half_up

logger = logging.getLogger(__name__)

SESSION_WINDOW = 50
RESULT_WINDOW = 20
RECENT_ACTIVITY = 10
RECENT_SCORES = 5

GETTING_STARTED = [
    {
        "category": "getting_started",
        "title": "Start Your Learning Journey",
        "description": "Begin by logging your first study session or taking a quiz to get personalized recommendations.",
        "priority": "high",
    },
    {
        "category": "goal_setting",
        "title": "Set Your First Goal",
        "description": "Define clear study goals to help track your progress and stay motivated.",
        "priority": "high",
    },
]


def _hours(minutes: int) -> str:
    """Hours to one decimal place as text, halves rounded up"""
    return f"{round_half_up(minutes / 6) / 10:.1f}"


def summarize_sessions(sessions: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Per-subject minutes and counts plus the most recent activity."""
    by_subject: Dict[str, Dict[str, Any]] = {}
    total_minutes = 0
    counted = 0
    recent = []

    for session in sessions:
        try:
            minutes = duration_minutes(session["start_time"], session["end_time"])
        except ValueError:
            logger.warning(f"Skipping session {session.get('id')} with unreadable timestamps")
            continue
        total_minutes += minutes

        stats = by_subject.setdefault(session["subject"], {
            "subject": session["subject"],
            "totalMinutes": 0,
            "sessionCount": 0,
        })
        stats["totalMinutes"] += minutes
        stats["sessionCount"] += 1

        if counted < RECENT_ACTIVITY:
            recent.append({
                "subject": session["subject"],
                "date": session["start_time"],
                "duration": minutes,
            })
        counted += 1

    subjects = [{**s, "totalHours": _hours(s["totalMinutes"])} for s in by_subject.values()]
    return {
        "total": counted,
        "totalMinutes": total_minutes,
        "totalHours": _hours(total_minutes),
        "subjects": subjects,
        "recentActivity": recent,
    }


def summarize_results(results: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Per-subject quiz counts and average percentage plus the latest scores."""
    scores: Dict[str, List[float]] = {}
    for result in results:
        subject = result.get("subject") or "Unknown"
        scores.setdefault(subject, []).append(result.get("percentage") or 0)

    by_subject = [
        {
            "subject": subject,
            "totalQuizzes": len(values),
            "averageScore": round_half_up(sum(values) / len(values)),
        }
        for subject, values in scores.items()
    ]

    recent_scores = [
        {
            "subject": r.get("subject") or "Unknown",
            "score": r.get("score"),
            "total": r.get("total_questions"),
            "percentage": r.get("percentage"),
            "date": r.get("completed_at"),
        }
        for r in results[:RECENT_SCORES]
    ]

    return {"total": len(results), "bySubject": by_subject, "recentScores": recent_scores}


class RecommendationService:
    def __init__(
        self,
        session_storage: Optional[StudySessionStorage] = None,
        result_storage: Optional[QuizResultStorage] = None,
        goal_storage: Optional[GoalStorage] = None,
        generator: Optional[GenerativeClient] = None,
    ):
        self.session_storage = session_storage or StudySessionStorage()
        self.result_storage = result_storage or QuizResultStorage()
        self.goal_storage = goal_storage or GoalStorage()
        self._generator = generator

    @property
    def generator(self) -> GenerativeClient:
        if self._generator is None:
            self._generator = GenerativeClient()
        return self._generator

    def build_study_data(self, user_id: str) -> Dict[str, Any]:
        sessions = self.session_storage.list_sessions(user_id, limit=SESSION_WINDOW)
        results = self.result_storage.get_recent_results(user_id, RESULT_WINDOW)
        goals = self.goal_storage.list_goals(user_id)

        return {
            "sessions": summarize_sessions(sessions),
            "quizResults": summarize_results(results),
            "goals": [
                {"subject": g.get("subject"), "targetHours": g.get("target_hours"), "period": g.get("period")}
                for g in goals
            ],
        }

    async def generate_recommendations(self, user_id: str, model: Optional[str] = None) -> Dict[str, Any]:
        """
        Return 5-7 model-written recommendations, or the fixed getting-started
        pair when the user has neither sessions nor quiz results.
        """
        study_data = self.build_study_data(user_id)
        sessions = study_data["sessions"]
        quiz_results = study_data["quizResults"]

        if sessions["total"] == 0 and quiz_results["total"] == 0:
            logger.info(f"No study history for user {user_id}, returning getting-started recommendations")
            return {"recommendations": [dict(r) for r in GETTING_STARTED], "dataAvailable": False}

        prompt = build_recommendations_prompt(study_data)
        raw = await self.generator.generate(prompt, model=model)
        recommendations = parse_recommendations(raw)
        logger.info(f"Generated {len(recommendations)} recommendations for user {user_id}")

        return {
            "recommendations": recommendations,
            "dataAvailable": True,
            "studySummary": {
                "totalSessions": sessions["total"],
                "totalHours": sessions["totalHours"],
                "totalQuizzes": quiz_results["total"],
                "subjects": len(sessions["subjects"]),
            },
        }

    def list_subjects(self, user_id: str) -> List[str]:
        """Distinct session subjects, sorted"""
        return sorted({s["subject"] for s in self.session_storage.list_sessions(user_id) if s.get("subject")})
