"""
Quiz generation, grading and history.

Generation runs Extractor -> Prompt Builder -> Generative Client -> Parser
and persists the quiz only after the whole batch validates.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from clients.generative_client import GenerativeClient
from models.study_models import (
    Difficulty, ExtractedContent, Question, SubmittedAnswer, dump_questions,
)
from prompts.study_prompts import build_quiz_from_attachment_prompt, build_quiz_from_text_prompt
from services.content_extractor import extract_content
from services.response_parser import parse_quiz_questions
from utils.exceptions import DuplicateError, ValidationError
from utils.file_storage import QuizResultStorage, QuizStorage, UploadStorage
from utils.ownership import require_owned
from utils.settings import get_settings
from utils.time_utils import round_half_up, short_date

logger = logging.getLogger(__name__)

UNANSWERED = -1


def grade_answers(
    questions: List[Question],
    answers: List[SubmittedAnswer],
) -> Tuple[int, List[Dict[str, Any]]]:
    """
    Grade answers positionally against the quiz questions.

    Missing entries and unanswered ones are recorded with selectedAnswer -1 and
    count as incorrect. Answers past the last question are ignored.
    """
    score = 0
    processed = []
    for index, question in enumerate(questions):
        answer = answers[index] if index < len(answers) else None
        selected = UNANSWERED
        time_taken = 0
        if answer is not None:
            if answer.selected_answer is not None:
                selected = answer.selected_answer
            time_taken = answer.time_taken or 0

        is_correct = selected == question.correct_answer
        if is_correct:
            score += 1
        processed.append({
            "questionIndex": index,
            "selectedAnswer": selected,
            "isCorrect": is_correct,
            "timeTaken": time_taken,
        })
    return score, processed


def percentage_of(score: int, total: int) -> int:
    if total <= 0:
        return 0
    return round_half_up(score / total * 100)


def quiz_summary(quiz: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": str(quiz["id"]),
        "subject": quiz.get("subject"),
        "title": quiz.get("title"),
        "totalQuestions": quiz.get("total_questions"),
        "difficulty": quiz.get("difficulty"),
        "createdAt": quiz.get("created_at"),
    }


def result_summary(result: Dict[str, Any], include_answers: bool = False) -> Dict[str, Any]:
    summary = {
        "id": str(result["id"]),
        "score": result.get("score"),
        "totalQuestions": result.get("total_questions"),
        "percentage": result.get("percentage"),
        "totalTimeTaken": result.get("total_time_taken", 0),
        "completedAt": result.get("completed_at"),
    }
    if include_answers:
        summary["answers"] = result.get("answers", [])
    return summary


class QuizService:
    """Main service for quiz generation and grading"""

    def __init__(
        self,
        quiz_storage: Optional[QuizStorage] = None,
        result_storage: Optional[QuizResultStorage] = None,
        upload_storage: Optional[UploadStorage] = None,
        generator: Optional[GenerativeClient] = None,
    ):
        self.quiz_storage = quiz_storage or QuizStorage()
        self.result_storage = result_storage or QuizResultStorage()
        self.upload_storage = upload_storage or UploadStorage()
        self._generator = generator

    @property
    def generator(self) -> GenerativeClient:
        if self._generator is None:
            self._generator = GenerativeClient()
        return self._generator

    async def generate_quiz(
        self,
        user_id: str,
        upload_id: Optional[str],
        subject: Optional[str],
        difficulty: Difficulty = Difficulty.MEDIUM,
        model: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Generate and persist a quiz for an upload; at most one per (owner, upload)."""
        if not upload_id or not subject or not subject.strip():
            raise ValidationError("Upload ID and subject are required", error_code="MISSING_REQUIRED_FIELD")

        upload = require_owned(self.upload_storage.get_upload(upload_id), user_id, "Upload", upload_id)

        existing = self.quiz_storage.get_quiz_for_upload(user_id, upload_id)
        if existing:
            raise DuplicateError(
                "Quiz already exists for this upload",
                context={"quiz_id": str(existing["id"]), "upload_id": upload_id},
            )

        subject = subject.strip()
        content = extract_content(upload, pdf_mode=get_settings().pdf_quiz_mode)
        questions = await self._generate_questions(content, subject, difficulty.value, model)

        quiz = self.quiz_storage.save_quiz({
            "user_id": user_id,
            "upload_id": upload_id,
            "subject": subject,
            "title": f"{subject} Quiz - {short_date(datetime.now())}",
            "questions": dump_questions(questions),
            "difficulty": difficulty.value,
            "total_questions": len(questions),
        })

        logger.info(f"Quiz {quiz['id']} generated for upload {upload_id}: {len(questions)} questions")
        return quiz_summary(quiz)

    async def _generate_questions(
        self,
        content: ExtractedContent,
        subject: str,
        difficulty: str,
        model: Optional[str],
    ) -> List[Question]:
        if content.attachment is not None:
            prompt = build_quiz_from_attachment_prompt(subject, difficulty, content.attachment.is_pdf)
        else:
            prompt = build_quiz_from_text_prompt(content.text or "", subject, difficulty)

        raw = await self.generator.generate(prompt, attachment=content.attachment, model=model)
        return parse_quiz_questions(raw)

    def list_quizzes(self, user_id: str, subject: Optional[str] = None) -> List[Dict[str, Any]]:
        """Quizzes without questions, newest first, each with its most recent result."""
        quizzes = self.quiz_storage.list_quizzes(user_id, subject)
        output = []
        for quiz in quizzes:
            summary = quiz_summary(quiz)
            latest = self.result_storage.get_latest_result(str(quiz["id"]), user_id)
            summary["lastResult"] = {
                "score": latest.get("score"),
                "percentage": latest.get("percentage"),
                "completedAt": latest.get("completed_at"),
            } if latest else None
            output.append(summary)
        return output

    def get_quiz(self, user_id: str, quiz_id: str) -> Dict[str, Any]:
        quiz = require_owned(self.quiz_storage.get_quiz(quiz_id), user_id, "Quiz", quiz_id)
        detail = quiz_summary(quiz)
        detail["questions"] = quiz.get("questions", [])
        return detail

    def submit_quiz(
        self,
        user_id: str,
        quiz_id: str,
        answers: List[SubmittedAnswer],
        total_time_taken: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Grade and store a submission. Always succeeds, even with nothing answered."""
        quiz = require_owned(self.quiz_storage.get_quiz(quiz_id), user_id, "Quiz", quiz_id)
        questions = [Question.model_validate(q) for q in quiz.get("questions", [])]

        score, processed = grade_answers(questions, answers)
        total = quiz.get("total_questions") or len(questions)
        percentage = percentage_of(score, total)

        result = self.result_storage.save_result({
            "user_id": user_id,
            "quiz_id": quiz_id,
            "score": score,
            "total_questions": total,
            "percentage": percentage,
            "answers": processed,
            "total_time_taken": total_time_taken or 0,
            "completed_at": datetime.now(timezone.utc).isoformat(),
        })

        logger.info(f"Quiz {quiz_id} submitted by {user_id}: {score}/{total} ({percentage}%)")
        return result_summary(result, include_answers=True)

    def get_results(self, user_id: str, quiz_id: str) -> List[Dict[str, Any]]:
        """Prior submissions, newest first."""
        require_owned(self.quiz_storage.get_quiz(quiz_id), user_id, "Quiz", quiz_id)
        return [result_summary(r) for r in self.result_storage.get_results(quiz_id, user_id)]

    def delete_quiz(self, user_id: str, quiz_id: str) -> Dict[str, Any]:
        """Delete results, then the quiz. Not atomic: a crash in between leaves orphaned results."""
        require_owned(self.quiz_storage.get_quiz(quiz_id), user_id, "Quiz", quiz_id)
        self.result_storage.delete_results_for_quiz(quiz_id)
        self.quiz_storage.delete_quiz(quiz_id)
        logger.info(f"Quiz {quiz_id} deleted with its results")
        return {"message": "Quiz deleted successfully", "id": quiz_id}
