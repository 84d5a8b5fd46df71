"""
FastAPI routes for quiz generation, taking and history.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends

from models.study_models import QuizGenerateRequest, QuizSubmitRequest
from routes.dependencies import require_user
from services.quiz_service import QuizService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/quiz", tags=["quiz"])

quiz_service = QuizService()


@router.post("/generate", status_code=201)
async def generate_quiz(body: QuizGenerateRequest, user_id: str = Depends(require_user)):
    """
    Generate a multiple-choice quiz from one of the user's uploads.

    At most one quiz exists per upload: a second request answers 409 with
    the existing quizId.
    """
    quiz = await quiz_service.generate_quiz(
        user_id,
        body.upload_id,
        body.subject,
        difficulty=body.difficulty,
        model=body.model,
    )
    return {"message": "Quiz generated successfully", "quiz": quiz}


@router.get("")
async def list_quizzes(subject: Optional[str] = None, user_id: str = Depends(require_user)):
    return quiz_service.list_quizzes(user_id, subject)


@router.get("/{quiz_id}")
async def get_quiz(quiz_id: str, user_id: str = Depends(require_user)):
    return quiz_service.get_quiz(user_id, quiz_id)


@router.post("/{quiz_id}/submit", status_code=201)
async def submit_quiz(quiz_id: str, body: QuizSubmitRequest, user_id: str = Depends(require_user)):
    result = quiz_service.submit_quiz(user_id, quiz_id, body.answers, body.total_time_taken)
    return {"message": "Quiz submitted successfully", "result": result}


@router.get("/{quiz_id}/results")
async def get_results(quiz_id: str, user_id: str = Depends(require_user)):
    return quiz_service.get_results(user_id, quiz_id)


@router.delete("/{quiz_id}")
async def delete_quiz(quiz_id: str, user_id: str = Depends(require_user)):
    return quiz_service.delete_quiz(user_id, quiz_id)
